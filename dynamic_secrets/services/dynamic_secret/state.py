"""
Dynamic secret lifecycle.

ACTIVE -> DELETING when a delete is requested while leases are outstanding;
physical removal (hard delete) is not a state, the row simply stops existing.
"""
from __future__ import annotations

from dynamic_secrets.models.dynamic_secret import DynamicSecret, DynamicSecretState

ALLOWED_TRANSITIONS: dict[DynamicSecretState, set[DynamicSecretState]] = {
    DynamicSecretState.ACTIVE: {DynamicSecretState.DELETING},
    DynamicSecretState.DELETING: set(),
}


class InvalidStateTransition(ValueError):
    pass


def _normalize(state: DynamicSecretState | str) -> DynamicSecretState:
    return state if isinstance(state, DynamicSecretState) else DynamicSecretState(state)


class DynamicSecretStateMachine:
    @staticmethod
    def validate_transition(current: DynamicSecretState | str, target: DynamicSecretState | str) -> None:
        current_enum = _normalize(current)
        target_enum = _normalize(target)
        if current_enum == target_enum:
            return
        if target_enum not in ALLOWED_TRANSITIONS.get(current_enum, set()):
            raise InvalidStateTransition(f"dynamic secret cannot move from {current_enum.value} to {target_enum.value}")

    @staticmethod
    def changes_for(config: DynamicSecret, target: DynamicSecretState | str) -> dict[str, bool]:
        """Column updates that move ``config`` into ``target`` (empty when already there)."""
        target_enum = _normalize(target)
        DynamicSecretStateMachine.validate_transition(config.state, target_enum)
        if config.state == target_enum:
            return {}
        return {"is_deleting": target_enum == DynamicSecretState.DELETING}
