"""
Converges dynamic secrets flagged DELETING to physical removal.

``reconcile`` is idempotent and safe to run any number of times for the same
id: a config that is gone or not DELETING is left alone, leases that cannot be
revoked yet stay for the next pass, and the config row is removed only once
no lease references it.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from dynamic_secrets.core.crypto import SymmetricCodec
from dynamic_secrets.core.exceptions import NotFoundError
from dynamic_secrets.core.logging import logger
from dynamic_secrets.models.dynamic_secret import DynamicSecret, DynamicSecretState
from dynamic_secrets.services.dynamic_secret.ports import (
    LeaseRevoker,
    PrunableLeaseIndex,
    ReconcilableStore,
)
from dynamic_secrets.services.dynamic_secret.service import decrypt_inputs
from dynamic_secrets.utils.time_utils import Datetime


@dataclass(slots=True)
class PruneResult:
    config_id: UUID
    removed_leases: int = 0
    remaining_leases: int = 0
    config_deleted: bool = False
    skipped: bool = False


class DynamicSecretPruner:
    def __init__(
        self,
        *,
        store: ReconcilableStore,
        lease_index: PrunableLeaseIndex,
        codec: SymmetricCodec,
        revoker: LeaseRevoker | None = None,
    ) -> None:
        self.store = store
        self.lease_index = lease_index
        self.codec = codec
        self.revoker = revoker

    async def reconcile(self, config_id: UUID, now: datetime | None = None) -> PruneResult:
        result = PruneResult(config_id=config_id)
        config = await self.store.get(config_id)
        if config is None or config.state != DynamicSecretState.DELETING:
            result.skipped = True
            return result

        now = now or Datetime.now()
        leases = await self.lease_index.find(config.id)
        inputs = decrypt_inputs(self.codec, config) if leases and self.revoker else None

        for lease in leases:
            if await self._release(config, lease, inputs, now):
                await self.lease_index.delete_by_id(lease.id)
                result.removed_leases += 1
            else:
                result.remaining_leases += 1

        if result.remaining_leases == 0:
            try:
                await self.store.delete_by_id(config.id)
                result.config_deleted = True
            except NotFoundError:
                # removed by a concurrent run
                pass

        logger.info(
            "dynamic_secret_prune id={} removed_leases={} remaining_leases={} deleted={}",
            config.id,
            result.removed_leases,
            result.remaining_leases,
            result.config_deleted,
        )
        return result

    async def _release(self, config: DynamicSecret, lease, inputs, now: datetime) -> bool:
        if self.revoker is None:
            # nothing can revoke a live credential; wait for it to expire
            return lease.is_expired(now)
        try:
            await self.revoker.revoke(config.type, inputs, lease)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "dynamic_secret_lease_revoke_failed config={} lease={} err={}",
                config.id,
                lease.id,
                exc,
            )
            return False
        return True

    async def reconcile_all(self, now: datetime | None = None) -> list[PruneResult]:
        results = []
        for config in await self.store.find_deleting():
            try:
                results.append(await self.reconcile(config.id, now=now))
            except Exception:  # noqa: BLE001
                logger.exception("dynamic_secret_prune_failed id={}", config.id)
        return results


_lease_revoker: LeaseRevoker | None = None


def set_lease_revoker(revoker: LeaseRevoker | None) -> None:
    """Install the process-wide revoker used by the prune tasks."""
    global _lease_revoker
    _lease_revoker = revoker


def get_lease_revoker() -> LeaseRevoker | None:
    return _lease_revoker
