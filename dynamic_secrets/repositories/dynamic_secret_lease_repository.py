from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from dynamic_secrets.models.dynamic_secret_lease import DynamicSecretLease
from dynamic_secrets.repositories.base import BaseRepository


class DynamicSecretLeaseRepository(BaseRepository[DynamicSecretLease]):
    model = DynamicSecretLease

    async def find(self, dynamic_secret_id: UUID) -> list[DynamicSecretLease]:
        result = await self.session.execute(
            select(DynamicSecretLease)
            .where(DynamicSecretLease.dynamic_secret_id == dynamic_secret_id)
            .order_by(DynamicSecretLease.expire_at)
        )
        return list(result.scalars().all())

    async def count(self, dynamic_secret_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(DynamicSecretLease)
            .where(DynamicSecretLease.dynamic_secret_id == dynamic_secret_id)
        )
        return result.scalar() or 0

    async def delete_by_id(self, id: UUID) -> DynamicSecretLease | None:
        return await self.delete(id)
