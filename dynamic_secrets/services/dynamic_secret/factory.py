from __future__ import annotations

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from dynamic_secrets.core.crypto import get_codec
from dynamic_secrets.repositories.dynamic_secret_lease_repository import DynamicSecretLeaseRepository
from dynamic_secrets.repositories.dynamic_secret_repository import DynamicSecretRepository
from dynamic_secrets.services.dynamic_secret.ports import FolderResolver, PermissionService
from dynamic_secrets.services.dynamic_secret.providers import ProviderRegistry, build_default_registry
from dynamic_secrets.services.dynamic_secret.scheduler import CeleryPruningScheduler
from dynamic_secrets.services.dynamic_secret.service import DynamicSecretService


@lru_cache(maxsize=1)
def get_provider_registry() -> ProviderRegistry:
    return build_default_registry()


def get_dynamic_secret_service(
    session: AsyncSession,
    *,
    folder_resolver: FolderResolver,
    permission_service: PermissionService,
) -> DynamicSecretService:
    """Wire the service against the SQL stores and the Celery prune queue."""
    return DynamicSecretService(
        store=DynamicSecretRepository(session),
        lease_index=DynamicSecretLeaseRepository(session),
        provider_registry=get_provider_registry(),
        pruning_scheduler=CeleryPruningScheduler(),
        folder_resolver=folder_resolver,
        permission_service=permission_service,
        codec=get_codec(),
    )
