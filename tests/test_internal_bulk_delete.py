import uuid

from tests._client import create_application


def _exists(client, app_id: str) -> bool:
    r = client.get(f"/api/v1/applications/{app_id}")
    assert r.status_code in (200, 404), r.text
    return r.status_code == 200


def test_delete_by_user_removes_only_that_applicants_applications(client, actors, product_id):
    mine = [create_application(client, applicant_id=actors.client, product_id=product_id, tags=["x"])["id"] for _ in range(2)]
    theirs = create_application(client, applicant_id=actors.other_client, product_id=product_id)["id"]

    r = client.delete("/api/v1/applications/internal/by-user", params={"user_id": str(actors.client)})
    assert r.status_code == 204, r.text

    assert not any(_exists(client, app_id) for app_id in mine)
    assert _exists(client, theirs)


def test_delete_by_product_removes_only_that_products_applications(client, actors, products):
    product_a = products.add()
    product_b = products.add()

    on_a = create_application(client, applicant_id=actors.client, product_id=product_a)["id"]
    on_b = create_application(client, applicant_id=actors.client, product_id=product_b)["id"]

    r = client.delete("/api/v1/applications/internal/by-product", params={"product_id": str(product_a)})
    assert r.status_code == 204, r.text

    assert not _exists(client, on_a)
    assert _exists(client, on_b)


def test_bulk_delete_with_nothing_to_delete_is_ok(client):
    r = client.delete("/api/v1/applications/internal/by-user", params={"user_id": str(uuid.uuid4())})
    assert r.status_code == 204, r.text


def test_bulk_delete_requires_identifier(client):
    r = client.delete("/api/v1/applications/internal/by-product")
    assert r.status_code == 400, r.text
