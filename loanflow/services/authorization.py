from __future__ import annotations

import enum
from typing import cast
from uuid import UUID

from loanflow.directories.base import UserDirectory
from loanflow.exceptions import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from loanflow.models.application import Application
from loanflow.models.enums import Role


class Operation(str, enum.Enum):
    VIEW = "view"
    TAG = "tag"
    CHANGE_STATUS = "change_status"
    DELETE = "delete"


_STAFF = frozenset({Role.MANAGER, Role.ADMIN})


class AuthorizationGate:
    """Role/ownership checks for application operations.

    Roles are looked up in the user directory on every call; nothing is cached.
    """

    def __init__(self, users: UserDirectory) -> None:
        self._users = users

    async def resolve_role(self, actor_id: UUID | None) -> Role:
        if actor_id is None:
            raise UnauthorizedError("You must specify the actor_id to authorize in this request")

        if not await self._users.exists(actor_id):
            raise NotFoundError("Actor not found")

        return await self._users.role(actor_id)

    def permits(
        self,
        operation: Operation,
        *,
        role: Role,
        actor_id: UUID,
        application: Application | None = None,
    ) -> bool:
        if operation in (Operation.VIEW, Operation.TAG):
            if application is None:
                raise ValueError(f"{operation.value} requires an application")
            return role in _STAFF or application.applicant_id == actor_id
        if operation is Operation.CHANGE_STATUS:
            return role in _STAFF
        if operation is Operation.DELETE:
            return role is Role.ADMIN
        raise ValueError(f"Unhandled operation: {operation!r}")

    def check(
        self,
        operation: Operation,
        *,
        role: Role,
        actor_id: UUID,
        application: Application | None = None,
    ) -> None:
        """Raise the matching domain error if `operation` is not allowed."""

        if not self.permits(operation, role=role, actor_id=actor_id, application=application):
            raise ForbiddenError(_FORBIDDEN_DETAIL[operation])

        if operation is Operation.CHANGE_STATUS and role is Role.MANAGER:
            if application is not None and application.applicant_id == actor_id:
                raise ConflictError("Managers cannot change status of their own applications")

    async def authorize(
        self,
        operation: Operation,
        *,
        actor_id: UUID | None,
        application: Application | None = None,
    ) -> Role:
        """Resolve the actor and check `operation`; return the actor's role."""

        role = await self.resolve_role(actor_id)
        # resolve_role rejects a missing actor_id.
        self.check(operation, role=role, actor_id=cast(UUID, actor_id), application=application)
        return role


_FORBIDDEN_DETAIL = {
    Operation.VIEW: "Only applicant, manager or admin can see this application",
    Operation.TAG: "You must have the rights of an applicant, manager, or administrator for this request",
    Operation.CHANGE_STATUS: "Only admin or manager can change application status",
    Operation.DELETE: "Only admin can delete applications",
}
