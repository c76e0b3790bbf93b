"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the exception handlers registered in
`loanflow.api.errors` turn them into the JSON error envelope.
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BadRequestError(ServiceError):
    status_code = 400


class UnauthorizedError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class DirectoryUnavailableError(Exception):
    """An external directory (user/product/tag service) could not answer."""
