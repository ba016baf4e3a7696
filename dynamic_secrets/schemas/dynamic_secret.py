from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, StringConstraints, field_validator, model_validator

from dynamic_secrets.models.dynamic_secret import SLUG_MAX_LENGTH, DynamicSecretState
from dynamic_secrets.utils.path_utils import normalize_secret_path

from .base import BaseSchema, IDSchema, TimestampSchema

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

Slug = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=SLUG_MAX_LENGTH, pattern=SLUG_PATTERN)]
TTLSeconds = Annotated[int, Field(gt=0, description="seconds")]


def _check_ttl_bounds(default_ttl: int | None, max_ttl: int | None) -> None:
    if default_ttl is not None and max_ttl is not None and default_ttl > max_ttl:
        raise ValueError("default_ttl must not exceed max_ttl")


class ActorScope(BaseSchema):
    """Who is calling and which project/environment/path they target."""

    actor: str = Field(..., description="actor type, e.g. user / identity / service")
    actor_id: str
    actor_auth_method: str | None = None
    actor_org_id: str | None = None
    project_id: str
    environment: str
    path: str = Field("/", description="secret path of the folder")

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        # permission checks and folder lookup must see the same path
        return normalize_secret_path(value)


class ProviderSpec(BaseSchema):
    type: str = Field(..., min_length=1, description="provider type")
    inputs: dict[str, Any] = Field(default_factory=dict, description="provider configuration (plaintext, never stored)")


class CreateDynamicSecretDTO(ActorScope):
    slug: Slug
    provider: ProviderSpec
    default_ttl: TTLSeconds
    max_ttl: TTLSeconds | None = None

    @model_validator(mode="after")
    def _ttl_bounds(self) -> "CreateDynamicSecretDTO":
        _check_ttl_bounds(self.default_ttl, self.max_ttl)
        return self


class UpdateDynamicSecretDTO(ActorScope):
    """Partial update; TTL fields are written only when explicitly set."""

    slug: str
    new_slug: Slug | None = None
    inputs: dict[str, Any] | None = None
    default_ttl: TTLSeconds | None = None
    max_ttl: TTLSeconds | None = None

    @model_validator(mode="after")
    def _ttl_bounds(self) -> "UpdateDynamicSecretDTO":
        _check_ttl_bounds(self.default_ttl, self.max_ttl)
        return self


class DeleteDynamicSecretDTO(ActorScope):
    slug: str


class ListDynamicSecretsDTO(ActorScope):
    pass


class DynamicSecretRead(IDSchema, TimestampSchema):
    """Outbound view of a config; carries neither ciphertext nor plaintext."""

    folder_id: str
    slug: str
    type: str
    version: int
    default_ttl: int | None = None
    max_ttl: int | None = None
    is_deleting: bool
    state: DynamicSecretState
