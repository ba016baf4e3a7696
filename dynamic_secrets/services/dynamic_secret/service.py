"""
Dynamic secret configuration service.

Every operation follows the same order: authorize, resolve the folder, then
act. A caller without permission therefore learns nothing about whether a
folder or config exists, and no decrypt/encrypt work is done for them.

Provider input is encrypted before it is persisted and only decrypted inside
``update_by_slug`` to merge a partial patch; no operation returns plaintext.
"""
from __future__ import annotations

from typing import Any

from dynamic_secrets.constants.permissions import (
    ProjectPermissionActions,
    ProjectPermissionSub,
)
from dynamic_secrets.core.crypto import SymmetricCodec
from dynamic_secrets.core.exceptions import (
    ConflictError,
    DecryptionError,
    NotFoundError,
    ValidationError,
)
from dynamic_secrets.core.logging import logger
from dynamic_secrets.models.dynamic_secret import (
    DynamicSecret,
    DynamicSecretState,
    encrypted_columns,
)
from dynamic_secrets.repositories.dynamic_secret_repository import SLUG_CONFLICT_MESSAGE
from dynamic_secrets.schemas.dynamic_secret import (
    ActorScope,
    CreateDynamicSecretDTO,
    DeleteDynamicSecretDTO,
    DynamicSecretRead,
    ListDynamicSecretsDTO,
    UpdateDynamicSecretDTO,
)
from dynamic_secrets.services.dynamic_secret.ports import (
    ConfigStore,
    FolderLike,
    FolderResolver,
    LeaseIndex,
    PermissionService,
    PruningScheduler,
)
from dynamic_secrets.services.dynamic_secret.providers import ProviderRegistry
from dynamic_secrets.services.dynamic_secret.state import DynamicSecretStateMachine
from dynamic_secrets.services.permissions.permission import subject

INPUT_SCHEMA_VERSION = 1


def decrypt_inputs(codec: SymmetricCodec, config: DynamicSecret) -> dict[str, Any]:
    """Decrypt a config's stored provider input, logging integrity faults."""
    try:
        data = codec.decrypt_json(config.encrypted_input)
    except DecryptionError:
        logger.exception(
            "dynamic_secret_decrypt_failed id={} slug={} algorithm={}",
            config.id,
            config.slug,
            config.algorithm,
        )
        raise
    if not isinstance(data, dict):
        logger.error("dynamic_secret_input_not_object id={}", config.id)
        raise DecryptionError("Stored provider input is not an object")
    return data


def to_read(config: DynamicSecret) -> DynamicSecretRead:
    return DynamicSecretRead.model_validate(config)


class DynamicSecretService:
    """Create, update, delete and list dynamic secret configs."""

    def __init__(
        self,
        *,
        store: ConfigStore,
        lease_index: LeaseIndex,
        provider_registry: ProviderRegistry,
        pruning_scheduler: PruningScheduler,
        folder_resolver: FolderResolver,
        permission_service: PermissionService,
        codec: SymmetricCodec,
    ) -> None:
        self.store = store
        self.lease_index = lease_index
        self.providers = provider_registry
        self.pruning_scheduler = pruning_scheduler
        self.folder_resolver = folder_resolver
        self.permission_service = permission_service
        self.codec = codec

    async def _authorize(self, dto: ActorScope, action: ProjectPermissionActions) -> None:
        permission = await self.permission_service.get_project_permission(
            dto.actor,
            dto.actor_id,
            dto.project_id,
            dto.actor_auth_method,
            dto.actor_org_id,
        )
        permission.throw_unless_can(
            action,
            subject(ProjectPermissionSub.SECRETS, environment=dto.environment, secret_path=dto.path),
        )

    async def _resolve_folder(self, dto: ActorScope) -> FolderLike:
        folder = await self.folder_resolver.find_by_secret_path(dto.project_id, dto.environment, dto.path)
        if not folder:
            raise NotFoundError("Folder not found")
        return folder

    async def _get_config(self, folder: FolderLike, slug: str) -> DynamicSecret:
        config = await self.store.find_one(folder.id, slug=slug)
        if not config:
            raise NotFoundError("Dynamic secret not found")
        return config

    async def create(self, dto: CreateDynamicSecretDTO) -> DynamicSecret:
        await self._authorize(dto, ProjectPermissionActions.CREATE)
        folder = await self._resolve_folder(dto)

        if await self.store.find_one(folder.id, slug=dto.slug):
            raise ConflictError(SLUG_CONFLICT_MESSAGE)

        provider = self.providers.get(dto.provider.type)
        inputs = await provider.validate_provider_inputs(dto.provider.inputs)
        encrypted = self.codec.encrypt_json(inputs)

        config = await self.store.create(
            {
                "folder_id": folder.id,
                "slug": dto.slug,
                "type": provider.type,
                "version": INPUT_SCHEMA_VERSION,
                "default_ttl": dto.default_ttl,
                "max_ttl": dto.max_ttl,
                "is_deleting": False,
                **encrypted_columns(encrypted),
            }
        )
        logger.info(
            "dynamic_secret_created id={} folder={} slug={} type={}",
            config.id,
            folder.id,
            config.slug,
            config.type,
        )
        return config

    async def update_by_slug(self, dto: UpdateDynamicSecretDTO) -> DynamicSecret:
        await self._authorize(dto, ProjectPermissionActions.EDIT)
        folder = await self._resolve_folder(dto)
        config = await self._get_config(folder, dto.slug)

        slug = dto.new_slug or dto.slug
        if slug != config.slug and await self.store.find_one(folder.id, slug=slug):
            raise ConflictError(SLUG_CONFLICT_MESSAGE)

        changes: dict[str, Any] = {"slug": slug}
        for field in ("default_ttl", "max_ttl"):
            if field in dto.model_fields_set:
                changes[field] = getattr(dto, field)
        default_ttl = changes.get("default_ttl", config.default_ttl)
        max_ttl = changes.get("max_ttl", config.max_ttl)
        if default_ttl is not None and max_ttl is not None and default_ttl > max_ttl:
            raise ValidationError("default_ttl must not exceed max_ttl")

        provider = self.providers.get(config.type)
        stored = decrypt_inputs(self.codec, config)
        merged = {**stored, **(dto.inputs or {})}
        validated = await provider.validate_provider_inputs(merged)
        changes.update(encrypted_columns(self.codec.encrypt_json(validated)))

        updated = await self.store.update_by_id(config.id, changes)
        logger.info(
            "dynamic_secret_updated id={} slug={} renamed={} patched_fields={}",
            updated.id,
            updated.slug,
            slug != dto.slug,
            sorted(dto.inputs or {}),
        )
        return updated

    async def delete_by_slug(self, dto: DeleteDynamicSecretDTO) -> DynamicSecret:
        await self._authorize(dto, ProjectPermissionActions.EDIT)
        folder = await self._resolve_folder(dto)
        config = await self._get_config(folder, dto.slug)

        leases = await self.lease_index.find(config.id)
        if leases:
            # flag first: a lost prune signal is picked up by the periodic sweep
            changes = DynamicSecretStateMachine.changes_for(config, DynamicSecretState.DELETING)
            if changes:
                config = await self.store.update_by_id(config.id, changes)
            await self.pruning_scheduler.prune_dynamic_secret(config.id)
            logger.info(
                "dynamic_secret_marked_deleting id={} slug={} leases={}",
                config.id,
                config.slug,
                len(leases),
            )
            return config

        deleted = await self.store.delete_by_id(config.id)
        logger.info("dynamic_secret_deleted id={} slug={}", deleted.id, deleted.slug)
        return deleted

    async def list(self, dto: ListDynamicSecretsDTO) -> list[DynamicSecret]:
        await self._authorize(dto, ProjectPermissionActions.EDIT)
        folder = await self._resolve_folder(dto)
        return await self.store.find(folder.id)
