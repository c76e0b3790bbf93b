from .application import (
    ApplicationCreate,
    ApplicationCursorPage,
    ApplicationHistoryRead,
    ApplicationListResponse,
    ApplicationRead,
    DocumentCreate,
    DocumentRead,
    StatusChange,
)
from .tag import TagRead

__all__ = [
    "ApplicationCreate",
    "ApplicationCursorPage",
    "ApplicationHistoryRead",
    "ApplicationListResponse",
    "ApplicationRead",
    "DocumentCreate",
    "DocumentRead",
    "StatusChange",
    "TagRead",
]
