from .base import Base
from .dynamic_secret import DynamicSecret, DynamicSecretState
from .dynamic_secret_lease import DynamicSecretLease

__all__ = [
    "Base",
    "DynamicSecret",
    "DynamicSecretLease",
    "DynamicSecretState",
]
