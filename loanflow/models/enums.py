from __future__ import annotations

import enum
import logging


logger = logging.getLogger(__name__)


class ApplicationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: str) -> "ApplicationStatus":
        """Case-insensitive lookup by name. Raises ValueError for unknown names."""

        return cls(value.strip().upper())


class Role(str, enum.Enum):
    CLIENT = "CLIENT"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        """Parse a role as reported by the user directory.

        Accepts both `MANAGER` and `ROLE_MANAGER` (any case). Anything unrecognized
        degrades to CLIENT.
        """

        if value is None:
            return cls.CLIENT

        name = value.strip().upper()
        if name.startswith("ROLE_"):
            name = name[len("ROLE_"):]

        try:
            return cls(name)
        except ValueError:
            logger.warning("Unknown role received: %s, defaulting to CLIENT", value)
            return cls.CLIENT
