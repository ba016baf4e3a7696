from __future__ import annotations

from typing import Iterable

from dynamic_secrets.core.exceptions import UnknownProviderError
from dynamic_secrets.core.logging import logger

from .aws_iam import AwsIamProvider
from .base import DynamicSecretProvider
from .sql_database import SqlClient, SqlDatabaseProvider


class ProviderRegistry:
    """Provider type tag -> provider implementation."""

    def __init__(self, providers: Iterable[DynamicSecretProvider] = ()) -> None:
        self._providers: dict[str, DynamicSecretProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: DynamicSecretProvider) -> None:
        if provider.type in self._providers:
            raise ValueError(f"Provider type already registered: {provider.type}")
        self._providers[provider.type] = provider
        logger.debug("dynamic_secret_provider_registered type={}", provider.type)

    def get(self, provider_type: str) -> DynamicSecretProvider:
        try:
            return self._providers[provider_type]
        except KeyError:
            raise UnknownProviderError(provider_type) from None

    def types(self) -> list[str]:
        return sorted(self._providers)

    def __contains__(self, provider_type: object) -> bool:
        return provider_type in self._providers


def build_default_registry() -> ProviderRegistry:
    return ProviderRegistry(
        [
            *(SqlDatabaseProvider(client) for client in SqlClient),
            AwsIamProvider(),
        ]
    )
