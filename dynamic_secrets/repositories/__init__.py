from .base import BaseRepository
from .dynamic_secret_lease_repository import DynamicSecretLeaseRepository
from .dynamic_secret_repository import DynamicSecretRepository
from .memory import InMemoryDynamicSecretStore, InMemoryLeaseIndex

__all__ = [
    "BaseRepository",
    "DynamicSecretLeaseRepository",
    "DynamicSecretRepository",
    "InMemoryDynamicSecretStore",
    "InMemoryLeaseIndex",
]
