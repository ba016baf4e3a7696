"""
Collaborator contracts consumed by the dynamic secret service.

Anything satisfying these protocols can be injected: the SQL repositories,
the in-memory reference stores, Celery-backed scheduling, or test fakes.
"""
from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from dynamic_secrets.constants.permissions import ProjectPermissionActions
from dynamic_secrets.models.dynamic_secret import DynamicSecret
from dynamic_secrets.models.dynamic_secret_lease import DynamicSecretLease
from dynamic_secrets.services.permissions.permission import SubjectRef


class Permission(Protocol):
    def throw_unless_can(self, action: ProjectPermissionActions, ref: SubjectRef) -> None: ...


class PermissionService(Protocol):
    async def get_project_permission(
        self,
        actor: str,
        actor_id: str,
        project_id: str,
        actor_auth_method: str | None,
        actor_org_id: str | None,
    ) -> Permission: ...


class FolderLike(Protocol):
    id: str


class FolderResolver(Protocol):
    async def find_by_secret_path(self, project_id: str, environment: str, path: str) -> FolderLike | None: ...


class ConfigStore(Protocol):
    async def find_one(self, folder_id: str, slug: str | None = None) -> DynamicSecret | None: ...

    async def find(self, folder_id: str) -> list[DynamicSecret]: ...

    async def create(self, obj_in: dict[str, Any]) -> DynamicSecret: ...

    async def update_by_id(self, id: UUID, obj_in: dict[str, Any]) -> DynamicSecret: ...

    async def delete_by_id(self, id: UUID) -> DynamicSecret: ...


class ReconcilableStore(ConfigStore, Protocol):
    async def find_deleting(self) -> list[DynamicSecret]: ...

    async def get(self, id: UUID) -> DynamicSecret | None: ...


class LeaseIndex(Protocol):
    async def find(self, dynamic_secret_id: UUID) -> list[DynamicSecretLease]: ...


class PrunableLeaseIndex(LeaseIndex, Protocol):
    async def delete_by_id(self, id: UUID) -> DynamicSecretLease | None: ...


class PruningScheduler(Protocol):
    async def prune_dynamic_secret(self, config_id: UUID) -> None: ...


class LeaseRevoker(Protocol):
    """Tears down the credential behind one lease on the target system."""

    async def revoke(self, provider_type: str, inputs: dict[str, Any], lease: DynamicSecretLease) -> None: ...
