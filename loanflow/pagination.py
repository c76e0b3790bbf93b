"""Opaque keyset cursors over (created_at, id).

A cursor is the URL-safe base64 form of ``"<ISO-8601 UTC timestamp>|<uuid>"`` for the
last item of a page. Pages are ordered by created_at DESC, id DESC.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from typing import NamedTuple
from uuid import UUID

from loanflow.exceptions import BadRequestError


MAX_PAGE_SIZE = 50


class CursorPosition(NamedTuple):
    created_at: datetime
    id: UUID


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def encode_cursor(created_at: datetime, id: UUID) -> str:
    raw = f"{_as_utc(created_at).isoformat().replace('+00:00', 'Z')}|{id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str | None) -> CursorPosition | None:
    """Return the position encoded in `cursor`, or None for the first page."""

    if cursor is None or not cursor.strip():
        return None

    try:
        decoded = base64.urlsafe_b64decode(cursor.strip().encode("ascii")).decode("utf-8")
        raw_ts, raw_id = decoded.split("|", 1)
        # Allow Z suffix.
        ts = datetime.fromisoformat(raw_ts.replace("Z", "+00:00"))
        cur_id = UUID(raw_id)
    except (ValueError, binascii.Error) as e:
        raise BadRequestError("Invalid cursor") from e

    return CursorPosition(_as_utc(ts), cur_id)


def clamp_limit(limit: int) -> int:
    if limit <= 0:
        raise BadRequestError("limit must be greater than 0")
    return min(limit, MAX_PAGE_SIZE)
