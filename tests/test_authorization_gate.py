import uuid

import pytest

from loanflow.exceptions import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from loanflow.models.application import Application
from loanflow.models.enums import Role
from loanflow.services.authorization import AuthorizationGate, Operation
from tests._fakes import FakeUserDirectory


def _application(applicant_id: uuid.UUID) -> Application:
    return Application(id=uuid.uuid4(), applicant_id=applicant_id, product_id=uuid.uuid4())


@pytest.mark.anyio
async def test_missing_actor_is_unauthorized_before_lookup():
    gate = AuthorizationGate(FakeUserDirectory())

    with pytest.raises(UnauthorizedError):
        await gate.resolve_role(None)


@pytest.mark.anyio
async def test_unknown_actor_is_not_found():
    gate = AuthorizationGate(FakeUserDirectory())

    with pytest.raises(NotFoundError):
        await gate.resolve_role(uuid.uuid4())


@pytest.mark.anyio
async def test_resolve_role_returns_directory_role():
    users = FakeUserDirectory()
    manager = users.add(Role.MANAGER)

    assert await AuthorizationGate(users).resolve_role(manager) is Role.MANAGER


@pytest.mark.parametrize("operation", [Operation.VIEW, Operation.TAG])
def test_view_and_tag_allow_owner_and_staff(operation):
    gate = AuthorizationGate(FakeUserDirectory())
    owner = uuid.uuid4()
    app = _application(owner)

    assert gate.permits(operation, role=Role.CLIENT, actor_id=owner, application=app)
    assert gate.permits(operation, role=Role.MANAGER, actor_id=uuid.uuid4(), application=app)
    assert gate.permits(operation, role=Role.ADMIN, actor_id=uuid.uuid4(), application=app)
    assert not gate.permits(operation, role=Role.CLIENT, actor_id=uuid.uuid4(), application=app)


def test_view_by_stranger_is_forbidden():
    gate = AuthorizationGate(FakeUserDirectory())

    with pytest.raises(ForbiddenError):
        gate.check(Operation.VIEW, role=Role.CLIENT, actor_id=uuid.uuid4(), application=_application(uuid.uuid4()))


def test_client_cannot_change_status_even_of_own_application():
    gate = AuthorizationGate(FakeUserDirectory())
    owner = uuid.uuid4()

    with pytest.raises(ForbiddenError):
        gate.check(Operation.CHANGE_STATUS, role=Role.CLIENT, actor_id=owner, application=_application(owner))


def test_manager_changing_own_application_is_conflict():
    gate = AuthorizationGate(FakeUserDirectory())
    manager = uuid.uuid4()

    with pytest.raises(ConflictError) as exc:
        gate.check(Operation.CHANGE_STATUS, role=Role.MANAGER, actor_id=manager, application=_application(manager))
    assert "own applications" in exc.value.detail


def test_manager_and_admin_can_change_other_applications():
    gate = AuthorizationGate(FakeUserDirectory())
    app = _application(uuid.uuid4())

    gate.check(Operation.CHANGE_STATUS, role=Role.MANAGER, actor_id=uuid.uuid4(), application=app)
    gate.check(Operation.CHANGE_STATUS, role=Role.ADMIN, actor_id=uuid.uuid4(), application=app)


def test_admin_can_change_own_application():
    gate = AuthorizationGate(FakeUserDirectory())
    admin = uuid.uuid4()

    gate.check(Operation.CHANGE_STATUS, role=Role.ADMIN, actor_id=admin, application=_application(admin))


@pytest.mark.parametrize("role,allowed", [(Role.CLIENT, False), (Role.MANAGER, False), (Role.ADMIN, True)])
def test_only_admin_can_delete(role, allowed):
    gate = AuthorizationGate(FakeUserDirectory())

    assert gate.permits(Operation.DELETE, role=role, actor_id=uuid.uuid4()) is allowed


@pytest.mark.anyio
async def test_authorize_returns_role_after_checks():
    users = FakeUserDirectory()
    admin = users.add(Role.ADMIN)
    client = users.add(Role.CLIENT)
    gate = AuthorizationGate(users)

    assert await gate.authorize(Operation.DELETE, actor_id=admin) is Role.ADMIN
    with pytest.raises(ForbiddenError):
        await gate.authorize(Operation.DELETE, actor_id=client)
    with pytest.raises(UnauthorizedError):
        await gate.authorize(Operation.DELETE, actor_id=None)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("ROLE_ADMIN", Role.ADMIN),
        ("role_manager", Role.MANAGER),
        ("CLIENT", Role.CLIENT),
        (" Manager ", Role.MANAGER),
        ("ROLE_SUPERUSER", Role.CLIENT),
        (None, Role.CLIENT),
    ],
)
def test_role_parsing_degrades_to_client(raw, expected):
    assert Role.parse(raw) is expected
