import pytest

from dynamic_secrets.models import DynamicSecret, DynamicSecretState
from dynamic_secrets.services.dynamic_secret.state import (
    DynamicSecretStateMachine,
    InvalidStateTransition,
)


def test_active_to_deleting_allowed():
    DynamicSecretStateMachine.validate_transition(DynamicSecretState.ACTIVE, DynamicSecretState.DELETING)
    DynamicSecretStateMachine.validate_transition("deleting", "deleting")


def test_deleting_cannot_go_back():
    with pytest.raises(InvalidStateTransition):
        DynamicSecretStateMachine.validate_transition(DynamicSecretState.DELETING, DynamicSecretState.ACTIVE)


def test_changes_for():
    active = DynamicSecret(slug="a", is_deleting=False)
    deleting = DynamicSecret(slug="b", is_deleting=True)

    assert active.state is DynamicSecretState.ACTIVE
    assert DynamicSecretStateMachine.changes_for(active, DynamicSecretState.DELETING) == {"is_deleting": True}
    assert DynamicSecretStateMachine.changes_for(deleting, DynamicSecretState.DELETING) == {}
