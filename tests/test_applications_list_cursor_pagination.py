import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from loanflow.database import SessionLocal
from loanflow.models.application import Application
from loanflow.models.enums import ApplicationStatus
from tests._client import create_application


def _seed_applications(created_at: list[datetime]) -> list[uuid.UUID]:
    """Insert applications directly so timestamps can be controlled."""

    async def _run():
        async with SessionLocal() as session:
            apps = [
                Application(
                    applicant_id=uuid.uuid4(),
                    product_id=uuid.uuid4(),
                    status=ApplicationStatus.SUBMITTED,
                    created_at=ts,
                )
                for ts in created_at
            ]
            session.add_all(apps)
            await session.commit()
            return [a.id for a in apps]

    return asyncio.run(_run())


def _stream(client, *, cursor: str | None = None, limit: int = 20):
    params = {"limit": limit}
    if cursor is not None:
        params["cursor"] = cursor
    return client.get("/api/v1/applications/stream", params=params)


def _walk(client, *, limit: int) -> list[list[dict]]:
    pages, cursor = [], None
    while True:
        r = _stream(client, cursor=cursor, limit=limit)
        assert r.status_code == 200, r.text
        data = r.json()
        if not data["items"]:
            assert data["next_cursor"] is None
            assert "x-next-cursor" not in r.headers
            return pages
        pages.append(data["items"])
        assert r.headers["x-next-cursor"] == data["next_cursor"]
        cursor = data["next_cursor"]


def test_cursor_pagination_returns_newest_first_two_at_a_time(client, actors, product_id):
    created = [
        create_application(client, applicant_id=actors.client, product_id=product_id)["id"]
        for _ in range(5)
    ]
    newest_first = list(reversed(created))

    r1 = _stream(client, limit=2)
    assert r1.status_code == 200, r1.text
    d1 = r1.json()
    assert [i["id"] for i in d1["items"]] == newest_first[:2]
    assert d1["next_cursor"]

    r2 = _stream(client, cursor=d1["next_cursor"], limit=2)
    assert r2.status_code == 200, r2.text
    d2 = r2.json()
    assert [i["id"] for i in d2["items"]] == newest_first[2:4]

    r3 = _stream(client, cursor=d2["next_cursor"], limit=2)
    d3 = r3.json()
    assert [i["id"] for i in d3["items"]] == newest_first[4:]
    assert d3["next_cursor"]

    r4 = _stream(client, cursor=d3["next_cursor"], limit=2)
    assert r4.json() == {"items": [], "next_cursor": None}


def test_cursor_pages_are_strictly_decreasing_with_duplicate_timestamps(client):
    base = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    # Three rows share each timestamp; ids break the tie.
    ids = _seed_applications([base + timedelta(seconds=i // 3) for i in range(9)])

    pages = _walk(client, limit=2)
    seen = [item["id"] for page in pages for item in page]

    assert len(seen) == len(set(seen)) == len(ids)
    assert set(seen) == {str(i) for i in ids}

    keys = [
        (datetime.fromisoformat(item["created_at"]).replace(tzinfo=None), uuid.UUID(item["id"]))
        for page in pages
        for item in page
    ]
    assert all(a > b for a, b in zip(keys, keys[1:]))


def test_cursor_limit_is_capped_at_fifty(client):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    _seed_applications([base + timedelta(minutes=i) for i in range(55)])

    r = _stream(client, limit=500)
    assert r.status_code == 200, r.text
    assert len(r.json()["items"]) == 50


def test_cursor_limit_must_be_positive(client):
    for limit in (0, -5):
        r = _stream(client, limit=limit)
        assert r.status_code == 400, r.text


def test_invalid_cursor_is_bad_request(client):
    r = _stream(client, cursor="definitely-not-a-cursor")
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Invalid cursor"


def test_empty_store_has_no_next_cursor(client):
    r = _stream(client)
    assert r.status_code == 200, r.text
    assert r.json() == {"items": [], "next_cursor": None}
