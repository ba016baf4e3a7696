from __future__ import annotations

import asyncio
import uuid

from dynamic_secrets.core.celery_app import celery_app
from dynamic_secrets.core.config import settings
from dynamic_secrets.core.crypto import get_codec
from dynamic_secrets.core.database import AsyncSessionLocal
from dynamic_secrets.core.logging import logger
from dynamic_secrets.repositories.dynamic_secret_lease_repository import DynamicSecretLeaseRepository
from dynamic_secrets.repositories.dynamic_secret_repository import DynamicSecretRepository
from dynamic_secrets.services.dynamic_secret.pruner import (
    DynamicSecretPruner,
    PruneResult,
    get_lease_revoker,
)


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        logger.warning("dynamic_secret_invalid_id value={}", value)
        return None


def _build_pruner(session) -> DynamicSecretPruner:
    return DynamicSecretPruner(
        store=DynamicSecretRepository(session),
        lease_index=DynamicSecretLeaseRepository(session),
        codec=get_codec(),
        revoker=get_lease_revoker(),
    )


async def _run_prune(config_id: uuid.UUID) -> PruneResult:
    async with AsyncSessionLocal() as session:
        return await _build_pruner(session).reconcile(config_id)


async def _run_reconcile_all() -> list[PruneResult]:
    async with AsyncSessionLocal() as session:
        return await _build_pruner(session).reconcile_all()


@celery_app.task(
    name="dynamic_secret.prune",
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=settings.DYNAMIC_SECRET_PRUNE_MAX_RETRIES,
)
def prune_dynamic_secret_task(self, config_id: str) -> str:
    """
    Revoke/remove the leases of a DELETING dynamic secret, then delete it.

    Leases still live after this run are left to the periodic sweep.
    """
    parsed = _parse_uuid(config_id)
    if not parsed:
        return "Skipped: invalid config_id"

    result = asyncio.run(_run_prune(parsed))
    if result.skipped:
        return f"Skipped: {config_id} not deleting"
    return (
        f"Pruned {config_id}: removed_leases={result.removed_leases} "
        f"remaining_leases={result.remaining_leases} deleted={result.config_deleted}"
    )


@celery_app.task(name="dynamic_secret.reconcile_deleting")
def reconcile_deleting_dynamic_secrets_task() -> str:
    """
    Periodic sweep over every DELETING config; recovers lost prune signals.
    """
    logger.info("Running dynamic secret reconcile sweep...")
    results = asyncio.run(_run_reconcile_all())
    deleted = sum(1 for r in results if r.config_deleted)
    return f"Reconciled {len(results)} dynamic secrets, deleted {deleted}"
