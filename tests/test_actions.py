"""Tests for the action registry."""
import pytest

from chaoschain_actions.actions import ALL_ACTIONS, ActionDefinition, build_registry
from chaoschain_actions.errors import UnknownActionError
from chaoschain_actions.models import CommandKind
from chaoschain_actions.schemas import RegisterAgentCommand


def test_one_action_per_kind():
    registry = build_registry()
    assert len(registry) == 6
    assert {definition.kind for definition in registry} == set(CommandKind)


@pytest.mark.parametrize("key", ["registerChaosAgent", "REGISTER_AGENT", "register_agent"])
def test_lookup_aliases(key):
    registry = build_registry()
    assert registry.get(key).kind == CommandKind.REGISTER_AGENT
    assert key in registry


def test_for_kind():
    registry = build_registry()
    assert registry.for_kind(CommandKind.PROPOSE_ALLIANCE).name == "proposeAlliance"


def test_unknown_action():
    registry = build_registry()
    assert "mintTokens" not in registry
    with pytest.raises(UnknownActionError):
        registry.get("mintTokens")


def test_status_actions_have_no_schema():
    registry = build_registry()
    assert registry.get("getNetworkStatus").schema is None
    assert registry.get("getAgentStatus").schema is None
    assert registry.get("registerChaosAgent").schema is RegisterAgentCommand


def test_registry_is_read_only():
    registry = build_registry()
    with pytest.raises(TypeError):
        registry._by_name["proposeBlock"] = None
    with pytest.raises(Exception):
        registry.get("proposeBlock").name = "other"


def test_duplicate_names_rejected():
    first = ALL_ACTIONS[0]
    with pytest.raises(ValueError, match="Duplicate action name"):
        build_registry((first, first))


def test_duplicate_kinds_rejected():
    first = ALL_ACTIONS[0]
    clone = ActionDefinition(
        name="registerAgentAgain",
        kind=first.kind,
        description=first.description,
        template=first.template,
        operation=first.operation,
        success_label=first.success_label,
        failure_label=first.failure_label,
    )
    with pytest.raises(ValueError, match="Duplicate action for kind"):
        build_registry((first, clone))


def test_info_carries_metadata():
    info = build_registry().get("proposeAlliance").to_info()
    assert "Form an alliance" in info.similes
    assert info.examples
