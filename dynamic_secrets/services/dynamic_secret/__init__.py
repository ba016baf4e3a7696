from .pruner import DynamicSecretPruner, PruneResult, get_lease_revoker, set_lease_revoker
from .service import DynamicSecretService, decrypt_inputs, to_read
from .state import DynamicSecretStateMachine, InvalidStateTransition

__all__ = [
    "DynamicSecretPruner",
    "DynamicSecretService",
    "DynamicSecretStateMachine",
    "InvalidStateTransition",
    "PruneResult",
    "decrypt_inputs",
    "get_lease_revoker",
    "set_lease_revoker",
    "to_read",
]
