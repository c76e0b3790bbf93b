from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from loanflow.crud import application as crud
from loanflow.directories.base import Directories, TagRef
from loanflow.exceptions import BadRequestError, ConflictError, DirectoryUnavailableError, NotFoundError
from loanflow.models.application import Application, ApplicationTag, Document
from loanflow.models.application_history import ApplicationHistory
from loanflow.models.enums import ApplicationStatus
from loanflow.pagination import MAX_PAGE_SIZE, clamp_limit, decode_cursor, encode_cursor
from loanflow.schemas.application import ApplicationCreate
from loanflow.services.authorization import AuthorizationGate, Operation
from loanflow.services.tag_service import normalize_tag_names


logger = logging.getLogger(__name__)

_STATUS_NAMES = ", ".join(s.value for s in ApplicationStatus)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class ApplicationService:
    """Application lifecycle rules: creation, status changes, tags, deletion, history.

    Every mutating method is one transaction: it commits on success and rolls back
    before raising. Directory lookups happen before the transaction writes anything.
    """

    def __init__(self, *, directories: Directories, gate: AuthorizationGate | None = None) -> None:
        self._directories = directories
        self._gate = gate or AuthorizationGate(directories.users)

    async def create(self, session: AsyncSession, *, obj_in: ApplicationCreate) -> Application:
        if obj_in.applicant_id is None or obj_in.product_id is None:
            raise BadRequestError("applicant_id and product_id must be in request body")

        if not await self._directories.users.exists(obj_in.applicant_id):
            raise NotFoundError("Applicant not found")
        applicant_role = await self._directories.users.role(obj_in.applicant_id)

        if not await self._directories.products.exists(obj_in.product_id):
            raise NotFoundError("Product not found")

        now = _utcnow()
        app = Application(
            applicant_id=obj_in.applicant_id,
            product_id=obj_in.product_id,
            status=ApplicationStatus.SUBMITTED,
            created_at=now,
            updated_at=None,
            documents=[
                Document(
                    position=position,
                    file_name=d.file_name,
                    content_type=d.content_type,
                    storage_path=d.storage_path,
                )
                for position, d in enumerate(obj_in.documents)
            ],
            tags=[],
        )
        session.add(app)
        await session.flush()  # ensure app.id is available

        crud.add_history(
            session,
            application=app,
            old_status=None,
            new_status=ApplicationStatus.SUBMITTED,
            changed_by_role=applicant_role,
            changed_at=now,
        )
        await self._commit(session, "Failed to create application")
        logger.info("application created id=%s applicant_id=%s", app.id, app.applicant_id)

        tag_names = normalize_tag_names(obj_in.tags)
        if tag_names:
            app = await self._attach_tags_best_effort(session, app, tag_names)

        return app

    async def get(self, session: AsyncSession, *, application_id: UUID) -> Application:
        app = await crud.get_application(session, application_id=application_id)
        if app is None:
            raise NotFoundError(f"Application not found: {application_id}")
        return app

    async def list_page(
        self,
        session: AsyncSession,
        *,
        page: int,
        size: int,
    ) -> tuple[list[Application], int]:
        if page < 0:
            raise BadRequestError("page must be >= 0")
        if size <= 0:
            raise BadRequestError("size must be greater than 0")
        if size > MAX_PAGE_SIZE:
            raise BadRequestError(f"Page size cannot be greater than {MAX_PAGE_SIZE}")

        return await crud.list_applications(session, page=page, page_size=size)

    async def list_by_cursor(
        self,
        session: AsyncSession,
        *,
        cursor: str | None,
        limit: int,
    ) -> tuple[list[Application], str | None]:
        """Return (items, next_cursor); next_cursor is None once a page comes back empty."""

        capped = clamp_limit(limit)
        position = decode_cursor(cursor)

        items = await crud.list_applications_after(session, position=position, limit=capped)

        next_cursor = None
        if items:
            last = items[-1]
            next_cursor = encode_cursor(last.created_at, last.id)
        return items, next_cursor

    async def attach_tags(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        tag_names: Iterable[str],
        actor_id: UUID | None,
    ) -> Application:
        role = await self._gate.resolve_role(actor_id)
        app = await self.get(session, application_id=application_id)
        self._gate.check(Operation.TAG, role=role, actor_id=actor_id, application=app)

        names = normalize_tag_names(tag_names)
        if not names:
            return app

        try:
            resolved = await self._directories.tags.create_or_get_batch(names)
        except DirectoryUnavailableError as e:
            logger.warning("tag directory unavailable while attaching tags to %s: %s", application_id, e)
            raise ConflictError("Failed to attach tags") from e

        self._link_tags(app, resolved)
        await self._commit(session, "Failed to attach tags")
        return app

    async def remove_tags(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        tag_names: Iterable[str],
        actor_id: UUID | None,
    ) -> Application:
        role = await self._gate.resolve_role(actor_id)
        app = await self.get(session, application_id=application_id)
        self._gate.check(Operation.TAG, role=role, actor_id=actor_id, application=app)

        names = set(normalize_tag_names(tag_names))
        if not names:
            return app

        kept = [t for t in app.tags if t.name not in names]
        if len(kept) != len(app.tags):
            app.tags = kept
            await self._commit(session, "Failed to remove tags")
        return app

    async def change_status(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        status: str | None,
        actor_id: UUID | None,
    ) -> Application:
        if status is None or not status.strip():
            raise BadRequestError("Status must be not empty")

        role = await self._gate.resolve_role(actor_id)
        app = await self.get(session, application_id=application_id)
        # Manager self-change is rejected before the status value is even looked at.
        self._gate.check(Operation.CHANGE_STATUS, role=role, actor_id=actor_id, application=app)

        try:
            new_status = ApplicationStatus.parse(status)
        except ValueError:
            raise ConflictError(f"This status is incorrect. List of statuses: {_STATUS_NAMES}")

        old_status = app.status
        if old_status == new_status:
            return app

        now = _utcnow()
        app.status = new_status
        app.updated_at = now
        crud.add_history(
            session,
            application=app,
            old_status=old_status,
            new_status=new_status,
            changed_by_role=role,
            changed_at=now,
        )
        await self._commit(session, "Failed to change application status")
        logger.info(
            "application status changed id=%s %s->%s by role=%s",
            app.id,
            old_status.value,
            new_status.value,
            role.value,
        )
        return app

    async def delete(self, session: AsyncSession, *, application_id: UUID, actor_id: UUID | None) -> None:
        await self._gate.authorize(Operation.DELETE, actor_id=actor_id)

        await self.get(session, application_id=application_id)
        await crud.delete_applications(session, application_ids=[application_id])
        await self._commit(session, "Failed to delete application")
        logger.info("application deleted id=%s by actor_id=%s", application_id, actor_id)

    async def list_history(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        actor_id: UUID | None,
    ) -> list[ApplicationHistory]:
        role = await self._gate.resolve_role(actor_id)
        app = await self.get(session, application_id=application_id)
        self._gate.check(Operation.VIEW, role=role, actor_id=actor_id, application=app)

        return await crud.list_history(session, application_id=application_id)

    async def delete_by_applicant(self, session: AsyncSession, *, applicant_id: UUID) -> int:
        """Internal: cascade-delete every application owned by `applicant_id`."""

        ids = await crud.find_application_ids(session, applicant_id=applicant_id)
        await crud.delete_applications(session, application_ids=ids)
        await self._commit(session, "Failed to delete applications")
        logger.info("deleted %s applications for applicant_id=%s", len(ids), applicant_id)
        return len(ids)

    async def delete_by_product(self, session: AsyncSession, *, product_id: UUID) -> int:
        """Internal: cascade-delete every application referencing `product_id`."""

        ids = await crud.find_application_ids(session, product_id=product_id)
        await crud.delete_applications(session, application_ids=ids)
        await self._commit(session, "Failed to delete applications")
        logger.info("deleted %s applications for product_id=%s", len(ids), product_id)
        return len(ids)

    async def _attach_tags_best_effort(
        self,
        session: AsyncSession,
        app: Application,
        tag_names: list[str],
    ) -> Application:
        try:
            resolved = await self._directories.tags.create_or_get_batch(tag_names)
        except DirectoryUnavailableError:
            logger.warning("tag directory unavailable; application %s created without tags", app.id, exc_info=True)
            return app

        app_id = app.id
        self._link_tags(app, resolved)
        try:
            await session.commit()
        except IntegrityError:
            # Rollback expires `app`; only the captured id is safe to read.
            await session.rollback()
            logger.warning("failed to link tags to application %s; continuing without tags", app_id, exc_info=True)
            return await self.get(session, application_id=app_id)
        return app

    @staticmethod
    def _link_tags(app: Application, resolved: Iterable[TagRef]) -> None:
        have_ids = {t.tag_id for t in app.tags}
        have_names = {t.name for t in app.tags}
        for tag in resolved:
            if tag.id in have_ids or tag.name in have_names:
                continue
            app.tags.append(ApplicationTag(tag_id=tag.id, name=tag.name))
            have_ids.add(tag.id)
            have_names.add(tag.name)

    @staticmethod
    async def _commit(session: AsyncSession, detail: str) -> None:
        try:
            await session.commit()
        except (IntegrityError, StaleDataError) as e:
            await session.rollback()
            logger.warning("%s: %s", detail, e)
            raise ConflictError(f"{detail}: database constraint violated") from e
