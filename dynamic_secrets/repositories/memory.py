"""
In-memory config store and lease index.

Reference implementations of the store contracts for tests and local
tooling. Rows are kept as plain dicts and a fresh model instance is built on
every read, so callers never share mutable state with the store.
"""
from __future__ import annotations

import asyncio
import uuid
from typing import Any
from uuid import UUID

from dynamic_secrets.core.exceptions import ConflictError, NotFoundError
from dynamic_secrets.models.dynamic_secret import DynamicSecret
from dynamic_secrets.models.dynamic_secret_lease import DynamicSecretLease
from dynamic_secrets.repositories.dynamic_secret_repository import SLUG_CONFLICT_MESSAGE
from dynamic_secrets.utils.time_utils import Datetime


class InMemoryDynamicSecretStore:
    def __init__(self) -> None:
        self._rows: dict[UUID, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _materialize(row: dict[str, Any]) -> DynamicSecret:
        return DynamicSecret(**row)

    def _slug_taken(self, folder_id: str, slug: str, exclude: UUID | None = None) -> bool:
        return any(
            row["folder_id"] == folder_id and row["slug"] == slug and row_id != exclude
            for row_id, row in self._rows.items()
        )

    async def get(self, id: UUID) -> DynamicSecret | None:
        row = self._rows.get(id)
        return self._materialize(row) if row else None

    async def find_one(self, folder_id: str, slug: str | None = None) -> DynamicSecret | None:
        for row in self._rows.values():
            if row["folder_id"] == folder_id and (slug is None or row["slug"] == slug):
                return self._materialize(row)
        return None

    async def find(self, folder_id: str) -> list[DynamicSecret]:
        rows = [row for row in self._rows.values() if row["folder_id"] == folder_id]
        rows.sort(key=lambda row: (row["created_at"], row["slug"]))
        return [self._materialize(row) for row in rows]

    async def find_deleting(self) -> list[DynamicSecret]:
        return [self._materialize(row) for row in self._rows.values() if row["is_deleting"]]

    async def create(self, obj_in: dict[str, Any]) -> DynamicSecret:
        async with self._lock:
            if self._slug_taken(obj_in["folder_id"], obj_in["slug"]):
                raise ConflictError(SLUG_CONFLICT_MESSAGE)
            now = Datetime.now()
            row = {
                "id": uuid.uuid4(),
                "version": 1,
                "is_deleting": False,
                "default_ttl": None,
                "max_ttl": None,
                "created_at": now,
                "updated_at": now,
                **obj_in,
            }
            self._rows[row["id"]] = row
            return self._materialize(row)

    async def update_by_id(self, id: UUID, obj_in: dict[str, Any]) -> DynamicSecret:
        async with self._lock:
            row = self._rows.get(id)
            if row is None:
                raise NotFoundError("Dynamic secret not found")
            new_slug = obj_in.get("slug")
            if new_slug is not None and self._slug_taken(row["folder_id"], new_slug, exclude=id):
                raise ConflictError(SLUG_CONFLICT_MESSAGE)
            row.update(obj_in)
            row["updated_at"] = Datetime.now()
            return self._materialize(row)

    async def delete_by_id(self, id: UUID) -> DynamicSecret:
        async with self._lock:
            row = self._rows.pop(id, None)
            if row is None:
                raise NotFoundError("Dynamic secret not found")
            return self._materialize(row)

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryLeaseIndex:
    def __init__(self) -> None:
        self._rows: dict[UUID, dict[str, Any]] = {}

    async def create(self, obj_in: dict[str, Any]) -> DynamicSecretLease:
        now = Datetime.now()
        row = {"id": uuid.uuid4(), "version": 1, "created_at": now, "updated_at": now, **obj_in}
        self._rows[row["id"]] = row
        return DynamicSecretLease(**row)

    async def find(self, dynamic_secret_id: UUID) -> list[DynamicSecretLease]:
        rows = [row for row in self._rows.values() if row["dynamic_secret_id"] == dynamic_secret_id]
        rows.sort(key=lambda row: row["expire_at"])
        return [DynamicSecretLease(**row) for row in rows]

    async def delete_by_id(self, id: UUID) -> DynamicSecretLease | None:
        row = self._rows.pop(id, None)
        return DynamicSecretLease(**row) if row else None
