import asyncio
import uuid

import pytest
from sqlalchemy import func, select

from loanflow.database import SessionLocal
from loanflow.models.application import Application, ApplicationTag, Document
from loanflow.models.application_history import ApplicationHistory
from tests._client import create_application


_DOCS = [{"file_name": "passport.pdf", "content_type": "application/pdf", "storage_path": "s3://docs/p.pdf"}]


def _count_rows(application_id: str) -> dict[str, int]:
    app_id = uuid.UUID(application_id)

    async def _run():
        async with SessionLocal() as session:
            counts = {}
            for name, model, column in (
                ("applications", Application, Application.id),
                ("documents", Document, Document.application_id),
                ("history", ApplicationHistory, ApplicationHistory.application_id),
                ("tags", ApplicationTag, ApplicationTag.application_id),
            ):
                stmt = select(func.count()).select_from(model).where(column == app_id)
                counts[name] = int((await session.execute(stmt)).scalar_one())
            return counts

    return asyncio.run(_run())


def _delete(client, app_id: str, actor_id):
    params = {"actor_id": str(actor_id)} if actor_id is not None else {}
    return client.delete(f"/api/v1/applications/{app_id}", params=params)


def test_admin_deletes_application_with_documents_history_and_tags(client, actors, product_id):
    created = create_application(
        client,
        applicant_id=actors.client,
        product_id=product_id,
        tags=["urgent"],
        documents=_DOCS,
    )
    assert _count_rows(created["id"]) == {"applications": 1, "documents": 1, "history": 1, "tags": 1}

    r = _delete(client, created["id"], actors.admin)
    assert r.status_code == 204, r.text

    assert _count_rows(created["id"]) == {"applications": 0, "documents": 0, "history": 0, "tags": 0}

    r = client.get(f"/api/v1/applications/{created['id']}")
    assert r.status_code == 404, r.text


@pytest.mark.parametrize("actor", ["client", "other_client", "manager"])
def test_non_admin_delete_is_forbidden_and_leaves_everything(client, actors, product_id, actor):
    created = create_application(client, applicant_id=actors.client, product_id=product_id, documents=_DOCS)

    r = _delete(client, created["id"], getattr(actors, actor))
    assert r.status_code == 403, r.text

    assert _count_rows(created["id"]) == {"applications": 1, "documents": 1, "history": 1, "tags": 0}


def test_delete_unknown_application_404(client, actors):
    r = _delete(client, str(uuid.uuid4()), actors.admin)
    assert r.status_code == 404, r.text


def test_delete_requires_actor(client, actors, product_id):
    created = create_application(client, applicant_id=actors.client, product_id=product_id)

    r = _delete(client, created["id"], None)
    assert r.status_code == 401, r.text
    assert _count_rows(created["id"])["applications"] == 1


def test_delete_leaves_other_applications(client, actors, product_id):
    keep = create_application(client, applicant_id=actors.client, product_id=product_id)
    drop = create_application(client, applicant_id=actors.client, product_id=product_id)

    r = _delete(client, drop["id"], actors.admin)
    assert r.status_code == 204, r.text

    assert _count_rows(keep["id"])["applications"] == 1
