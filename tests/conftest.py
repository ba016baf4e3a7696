"""
Shared test fixtures.

Settings are read at import time, so the environment is pinned here before
anything from ``dynamic_secrets`` is imported: in-memory SQLite, an in-memory
Celery broker, synchronous logging and a fixed encryption key.
"""
from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("LOG_ASYNC", "false")
os.environ.setdefault("LOG_FILE_PATH", "")

from typing import Any  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from pydantic import ConfigDict  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from dynamic_secrets.constants.permissions import ProjectPermissionActions, ProjectPermissionSub  # noqa: E402
from dynamic_secrets.core.crypto import SymmetricCodec  # noqa: E402
from dynamic_secrets.models import Base  # noqa: E402
from dynamic_secrets.repositories.memory import InMemoryDynamicSecretStore, InMemoryLeaseIndex  # noqa: E402
from dynamic_secrets.services.dynamic_secret.providers import (  # noqa: E402
    DynamicSecretProvider,
    ProviderInput,
    ProviderRegistry,
    build_default_registry,
)
from dynamic_secrets.services.dynamic_secret.service import DynamicSecretService  # noqa: E402
from dynamic_secrets.services.folders import InMemoryFolderResolver  # noqa: E402
from dynamic_secrets.services.permissions import PermissionRule, StaticPermissionService  # noqa: E402

PROJECT_ID = "proj-1"
ENVIRONMENT = "dev"
ACTOR_ID = "user-1"


class EchoInput(ProviderInput):
    model_config = ConfigDict(extra="allow")


class EchoProvider(DynamicSecretProvider):
    """Accepts any object and returns it unchanged."""

    type = "echo"
    input_model = EchoInput


class RecordingScheduler:
    def __init__(self) -> None:
        self.calls: list[UUID] = []

    async def prune_dynamic_secret(self, config_id: UUID) -> None:
        self.calls.append(config_id)


def actor_scope(path: str = "/f1", **extra: Any) -> dict[str, Any]:
    return {
        "actor": "user",
        "actor_id": ACTOR_ID,
        "actor_auth_method": "email",
        "actor_org_id": "org-1",
        "project_id": PROJECT_ID,
        "environment": ENVIRONMENT,
        "path": path,
        **extra,
    }


@pytest.fixture
def codec() -> SymmetricCodec:
    return SymmetricCodec("test-encryption-key")


@pytest.fixture
def registry() -> ProviderRegistry:
    registry = build_default_registry()
    registry.register(EchoProvider())
    return registry


@pytest.fixture
def folders() -> InMemoryFolderResolver:
    resolver = InMemoryFolderResolver()
    resolver.add(PROJECT_ID, ENVIRONMENT, "/f1")
    resolver.add(PROJECT_ID, ENVIRONMENT, "/f2")
    return resolver


@pytest.fixture
def permissions() -> StaticPermissionService:
    service = StaticPermissionService()
    service.grant(
        ACTOR_ID,
        PROJECT_ID,
        [PermissionRule(action, ProjectPermissionSub.SECRETS) for action in ProjectPermissionActions],
    )
    return service


@pytest.fixture
def store() -> InMemoryDynamicSecretStore:
    return InMemoryDynamicSecretStore()


@pytest.fixture
def lease_index() -> InMemoryLeaseIndex:
    return InMemoryLeaseIndex()


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def service(store, lease_index, registry, scheduler, folders, permissions, codec) -> DynamicSecretService:
    return DynamicSecretService(
        store=store,
        lease_index=lease_index,
        provider_registry=registry,
        pruning_scheduler=scheduler,
        folder_resolver=folders,
        permission_service=permissions,
        codec=codec,
    )


@pytest_asyncio.fixture
async def async_session() -> AsyncSession:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    async with SessionLocal() as sess:
        yield sess
    await engine.dispose()
