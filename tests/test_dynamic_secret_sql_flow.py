"""End-to-end lifecycle against the SQL repositories."""
from datetime import timedelta

import pytest

from dynamic_secrets.core.exceptions import ConflictError
from dynamic_secrets.repositories import DynamicSecretLeaseRepository, DynamicSecretRepository
from dynamic_secrets.schemas.dynamic_secret import (
    CreateDynamicSecretDTO,
    DeleteDynamicSecretDTO,
    ListDynamicSecretsDTO,
    UpdateDynamicSecretDTO,
)
from dynamic_secrets.services.dynamic_secret.pruner import DynamicSecretPruner
from dynamic_secrets.services.dynamic_secret.service import DynamicSecretService
from dynamic_secrets.utils.time_utils import Datetime
from tests.conftest import actor_scope


@pytest.fixture
def sql_service(async_session, registry, scheduler, folders, permissions, codec):
    return DynamicSecretService(
        store=DynamicSecretRepository(async_session),
        lease_index=DynamicSecretLeaseRepository(async_session),
        provider_registry=registry,
        pruning_scheduler=scheduler,
        folder_resolver=folders,
        permission_service=permissions,
        codec=codec,
    )


@pytest.mark.asyncio
async def test_lifecycle(sql_service, async_session, scheduler, codec):
    created = await sql_service.create(
        CreateDynamicSecretDTO(
            **actor_scope(
                slug="db1",
                provider={"type": "postgres", "inputs": {"host": "x", "port": 5432}},
                default_ttl=3600,
                max_ttl=7200,
            )
        )
    )
    config_id = created.id
    assert created.is_deleting is False

    with pytest.raises(ConflictError):
        await sql_service.create(
            CreateDynamicSecretDTO(
                **actor_scope(
                    slug="db1",
                    provider={"type": "postgres", "inputs": {"host": "x", "port": 5432}},
                    default_ttl=60,
                )
            )
        )

    updated = await sql_service.update_by_slug(
        UpdateDynamicSecretDTO(**actor_scope(slug="db1", new_slug="db-main", inputs={"username": "admin"}))
    )
    assert updated.slug == "db-main"
    stored = codec.decrypt_json(updated.encrypted_input)
    assert (stored["host"], stored["port"], stored["username"]) == ("x", 5432, "admin")

    leases = DynamicSecretLeaseRepository(async_session)
    await leases.create(
        {
            "dynamic_secret_id": config_id,
            "external_entity_id": "pg-user-1",
            "expire_at": Datetime.now() - timedelta(seconds=1),
        }
    )

    flagged = await sql_service.delete_by_slug(DeleteDynamicSecretDTO(**actor_scope(slug="db-main")))
    assert flagged.is_deleting is True
    assert scheduler.calls == [config_id]

    listed = await sql_service.list(ListDynamicSecretsDTO(**actor_scope()))
    assert [(c.slug, c.is_deleting) for c in listed] == [("db-main", True)]

    pruner = DynamicSecretPruner(
        store=DynamicSecretRepository(async_session),
        lease_index=leases,
        codec=codec,
    )
    result = await pruner.reconcile(config_id)
    assert result.config_deleted is True
    assert await sql_service.list(ListDynamicSecretsDTO(**actor_scope())) == []
