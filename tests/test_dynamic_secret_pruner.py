from datetime import timedelta

import pytest

from dynamic_secrets.schemas.dynamic_secret import CreateDynamicSecretDTO, DeleteDynamicSecretDTO
from dynamic_secrets.services.dynamic_secret.pruner import (
    DynamicSecretPruner,
    get_lease_revoker,
    set_lease_revoker,
)
from dynamic_secrets.utils.time_utils import Datetime
from tests.conftest import actor_scope


class RecordingRevoker:
    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.fail_for = fail_for or set()
        self.revoked: list[tuple[str, dict, str]] = []

    async def revoke(self, provider_type, inputs, lease):
        if lease.external_entity_id in self.fail_for:
            raise RuntimeError("target unreachable")
        self.revoked.append((provider_type, inputs, lease.external_entity_id))


@pytest.fixture
def pruner(store, lease_index, codec):
    return DynamicSecretPruner(store=store, lease_index=lease_index, codec=codec)


async def _deleting_config(service, lease_index, *expires_in):
    config = await service.create(
        CreateDynamicSecretDTO(
            **actor_scope(
                slug="db1",
                provider={"type": "postgres", "inputs": {"host": "x", "port": 5432}},
                default_ttl=60,
            )
        )
    )
    for i, delta in enumerate(expires_in):
        await lease_index.create(
            {
                "dynamic_secret_id": config.id,
                "external_entity_id": f"user-{i}",
                "expire_at": Datetime.now() + delta,
            }
        )
    return await service.delete_by_slug(DeleteDynamicSecretDTO(**actor_scope(slug="db1")))


@pytest.mark.asyncio
async def test_missing_or_active_config_is_a_noop(service, pruner, store):
    config = await service.create(
        CreateDynamicSecretDTO(
            **actor_scope(slug="db1", provider={"type": "postgres", "inputs": {"host": "x", "port": 5432}}, default_ttl=60)
        )
    )
    result = await pruner.reconcile(config.id)
    assert result.skipped is True
    assert len(store) == 1

    await store.delete_by_id(config.id)
    assert (await pruner.reconcile(config.id)).skipped is True


@pytest.mark.asyncio
async def test_without_revoker_only_expired_leases_are_removed(service, pruner, store, lease_index):
    config = await _deleting_config(service, lease_index, timedelta(seconds=-5), timedelta(hours=1))

    first = await pruner.reconcile(config.id)
    assert (first.removed_leases, first.remaining_leases, first.config_deleted) == (1, 1, False)
    assert len(store) == 1

    later = Datetime.now() + timedelta(hours=2)
    second = await pruner.reconcile(config.id, now=later)
    assert (second.removed_leases, second.remaining_leases, second.config_deleted) == (1, 0, True)
    assert len(store) == 0

    # idempotent once gone
    assert (await pruner.reconcile(config.id)).skipped is True


@pytest.mark.asyncio
async def test_revoker_receives_decrypted_inputs(service, store, lease_index, codec):
    config = await _deleting_config(service, lease_index, timedelta(hours=1), timedelta(hours=2))
    revoker = RecordingRevoker()
    pruner = DynamicSecretPruner(store=store, lease_index=lease_index, codec=codec, revoker=revoker)

    result = await pruner.reconcile(config.id)

    assert result.config_deleted is True
    assert [entity for _, _, entity in revoker.revoked] == ["user-0", "user-1"]
    provider_type, inputs, _ = revoker.revoked[0]
    assert provider_type == "postgres"
    assert inputs["host"] == "x"
    assert await lease_index.find(config.id) == []


@pytest.mark.asyncio
async def test_failed_revocation_keeps_config(service, store, lease_index, codec):
    config = await _deleting_config(service, lease_index, timedelta(hours=1), timedelta(hours=1))
    revoker = RecordingRevoker(fail_for={"user-1"})
    pruner = DynamicSecretPruner(store=store, lease_index=lease_index, codec=codec, revoker=revoker)

    result = await pruner.reconcile(config.id)
    assert (result.removed_leases, result.remaining_leases, result.config_deleted) == (1, 1, False)
    assert (await store.get(config.id)).is_deleting is True

    revoker.fail_for.clear()
    assert (await pruner.reconcile(config.id)).config_deleted is True


@pytest.mark.asyncio
async def test_reconcile_all_sweeps_deleting_configs(service, pruner, store, lease_index):
    await _deleting_config(service, lease_index, timedelta(seconds=-1))

    results = await pruner.reconcile_all()

    assert [r.config_deleted for r in results] == [True]
    assert len(store) == 0


def test_lease_revoker_registration():
    revoker = RecordingRevoker()
    set_lease_revoker(revoker)
    try:
        assert get_lease_revoker() is revoker
    finally:
        set_lease_revoker(None)
    assert get_lease_revoker() is None
