from __future__ import annotations

import pytest

from chatbot.messages import make_message
from chatbot.states import (
    STATE_LABELS,
    ConversationState,
    is_interactive,
    is_valid_transition,
)


@pytest.mark.parametrize(
    "current, following",
    [
        ("initial", "awaiting_location_method"),
        ("initial", "showing_results"),
        ("awaiting_location_method", "showing_results"),
    ],
)
def test_decision_tree_transitions_are_allowed(current, following):
    assert is_valid_transition(current, following) is True


@pytest.mark.parametrize(
    "current, following",
    [
        ("showing_results", "initial"),
        ("showing_results", "awaiting_location_method"),
        ("awaiting_location_method", "initial"),
        ("unknown", "showing_results"),
    ],
)
def test_other_transitions_are_rejected(current, following):
    assert is_valid_transition(current, following) is False


def test_affordance_requires_matching_kind_and_state():
    initial_choice = make_message("What would you like to do?", "bot", "initial_choice")
    location_choice = make_message("Share or type a location", "bot", "location_choice")

    assert is_interactive(initial_choice, ConversationState.INITIAL) is True
    assert is_interactive(initial_choice, ConversationState.AWAITING_LOCATION_METHOD) is False
    assert is_interactive(location_choice, ConversationState.AWAITING_LOCATION_METHOD) is True
    assert is_interactive(location_choice, ConversationState.INITIAL) is False
    assert is_interactive(location_choice, ConversationState.SHOWING_RESULTS) is False


@pytest.mark.parametrize("kind", [None, "plain", "typing", "maps_link"])
def test_messages_without_affordances_are_never_interactive(kind):
    message = make_message("text", "bot", kind, link="https://example.org" if kind == "maps_link" else None)

    for state in ConversationState:
        assert is_interactive(message, state) is False


def test_every_state_has_a_label():
    assert set(STATE_LABELS) == {state.value for state in ConversationState}
