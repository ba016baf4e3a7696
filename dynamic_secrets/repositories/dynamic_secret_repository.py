from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from dynamic_secrets.core.exceptions import ConflictError, NotFoundError
from dynamic_secrets.core.logging import logger
from dynamic_secrets.models.dynamic_secret import DynamicSecret
from dynamic_secrets.repositories.base import BaseRepository

SLUG_CONFLICT_MESSAGE = "Provided dynamic secret already exist under the folder"


class DynamicSecretRepository(BaseRepository[DynamicSecret]):
    """Config store backed by the ``dynamic_secret`` table.

    Slug uniqueness per folder is enforced by the unique constraint, so a
    lost race on ``create`` or a rename surfaces as ``ConflictError``.
    """

    model = DynamicSecret

    async def find_one(self, folder_id: str, slug: str | None = None) -> DynamicSecret | None:
        stmt = select(DynamicSecret).where(DynamicSecret.folder_id == folder_id)
        if slug is not None:
            stmt = stmt.where(DynamicSecret.slug == slug)
        result = await self.session.execute(stmt.limit(1))
        return result.scalars().first()

    async def find(self, folder_id: str) -> list[DynamicSecret]:
        result = await self.session.execute(
            select(DynamicSecret)
            .where(DynamicSecret.folder_id == folder_id)
            .order_by(DynamicSecret.created_at, DynamicSecret.slug)
        )
        return list(result.scalars().all())

    async def find_deleting(self) -> list[DynamicSecret]:
        result = await self.session.execute(
            select(DynamicSecret).where(DynamicSecret.is_deleting.is_(True))
        )
        return list(result.scalars().all())

    async def create(self, obj_in: dict[str, Any]) -> DynamicSecret:
        try:
            return await super().create(obj_in)
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info(
                "dynamic_secret_create_conflict folder={} slug={}",
                obj_in.get("folder_id"),
                obj_in.get("slug"),
            )
            raise ConflictError(SLUG_CONFLICT_MESSAGE) from exc

    async def update_by_id(self, id: UUID, obj_in: dict[str, Any]) -> DynamicSecret:
        db_obj = await self.get(id)
        if db_obj is None:
            raise NotFoundError("Dynamic secret not found")
        try:
            return await self.update(db_obj, obj_in)
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(SLUG_CONFLICT_MESSAGE) from exc

    async def delete_by_id(self, id: UUID) -> DynamicSecret:
        db_obj = await self.delete(id)
        if db_obj is None:
            raise NotFoundError("Dynamic secret not found")
        return db_obj
