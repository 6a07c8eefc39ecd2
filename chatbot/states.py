"""
Conversation State Machine.

Defines the dialogue phases and valid transitions. The flow is a fixed
decision tree driven by buttons, not by free-form text:

  INITIAL ──(find_doctor)──▶ AWAITING_LOCATION_METHOD ──(auto | manual)──┐
     │                                                                   ▼
     └──────────────(next_steps)──────────────────────────────▶ SHOWING_RESULTS

SHOWING_RESULTS is terminal for the session.
"""

from enum import Enum


class ConversationState(Enum):
    """All possible phases of the follow-up conversation."""

    INITIAL = "initial"
    AWAITING_LOCATION_METHOD = "awaiting_location_method"
    SHOWING_RESULTS = "showing_results"


# ── Valid State Transitions ────────────────────────────────────────────────

VALID_TRANSITIONS: dict[str, set[str]] = {
    "initial": {
        "awaiting_location_method",   # find_doctor
        "showing_results",            # next_steps
    },
    "awaiting_location_method": {
        "showing_results",            # auto or manual search
    },
    "showing_results": set(),
}


def is_valid_transition(current_state: str, next_state: str) -> bool:
    """Check if a state transition is allowed by the decision tree."""
    allowed = VALID_TRANSITIONS.get(current_state, set())
    return next_state in allowed


# ── Affordance Gating ──────────────────────────────────────────────────────
# Message kind -> the state that produced its buttons/form.

AFFORDANCE_STATES: dict[str, ConversationState] = {
    "initial_choice": ConversationState.INITIAL,
    "location_choice": ConversationState.AWAITING_LOCATION_METHOD,
}


def is_interactive(message: dict, state: ConversationState) -> bool:
    """
    Whether the affordance attached to a message can be used right now.

    Both the message kind and the live state must match. Messages restored
    after a reload keep their kind but the state starts over at INITIAL, so
    an old location form stays inert.
    """
    producing_state = AFFORDANCE_STATES.get(message.get("kind"))
    return producing_state is not None and producing_state == state


# ── State Display Labels ──────────────────────────────────────────────────

STATE_LABELS: dict[str, str] = {
    "initial": "👋 Getting Started",
    "awaiting_location_method": "📍 Choosing a Location",
    "showing_results": "✅ Results",
}
