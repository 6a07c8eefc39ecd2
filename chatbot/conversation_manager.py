"""
Conversation Manager — session controller.

Owns everything one browser tab needs for the follow-up dialogue:
  1. The fracture context supplied when the chat is mounted
  2. The live ConversationState (never persisted; a reload starts INITIAL)
  3. The MessageStore (persisted; a reload resumes the log)
  4. Transitions triggered by button clicks and the location form

Architecture:
  Button / Form
      │
      ▼
  ┌──────────────┐
  │  State       │──── stale click? ──▶ ignored
  │  Machine     │
  └──────┬───────┘
         │
         ▼
  ┌──────────────┐
  │  Advice /    │──── reply text, maps link
  │  Locator     │
  └──────┬───────┘
         │
         ▼
  ┌──────────────┐
  │  Message     │──── queued bot replies, persisted log
  │  Store       │
  └──────────────┘
"""

from chatbot.doctor_locator import LOCATION_PROMPT, BrowserGeolocation, DoctorLocator
from chatbot.medical_knowledge import build_next_steps_message
from chatbot.message_store import MessageStore
from chatbot.prediction import FractureContext
from chatbot.states import ConversationState, is_interactive, is_valid_transition
import config

CHOICE_PROMPT = "What would you like to do?"


class ConversationManager:
    """Drives the fixed decision tree for one session."""

    def __init__(
        self,
        fracture: FractureContext,
        store: MessageStore,
        locator: DoctorLocator | None = None,
    ):
        self.fracture = fracture
        self.store = store
        self.locator = locator or DoctorLocator()
        self.state = ConversationState.INITIAL

    def _transition(self, next_state: ConversationState) -> bool:
        if not is_valid_transition(self.state.value, next_state.value):
            print(f"[Session] ⚠️ Ignoring transition {self.state.value} -> {next_state.value}")
            return False
        self.state = next_state
        return True

    def get_greeting(self) -> str:
        """Greeting worded by how confident the detection was."""
        if self.fracture.confidence > config.LIKELY_FRACTURE_THRESHOLD:
            confidence_text = "I've detected a likely fracture"
        else:
            confidence_text = "I've detected a potential fracture"
        return (
            f"{confidence_text} in the {self.fracture.body_part} area. "
            "I can help with the next steps."
        )

    def start(self) -> bool:
        """Seed an empty conversation. Returns False when resuming one."""
        if self.store.messages or self.store.has_pending:
            return False
        self.store.append_bot_message(self.get_greeting())
        self.store.append_bot_message(CHOICE_PROMPT, "initial_choice")
        return True

    def handle_choice(self, choice: str) -> bool:
        """Handle a click on one of the initial choice buttons."""
        if choice not in ("find_doctor", "next_steps"):
            raise ValueError(f"Unknown choice: {choice!r}")
        if self.state != ConversationState.INITIAL:
            return False

        if choice == "find_doctor":
            self.store.append_user_message("Find a nearby doctor.")
            self._transition(ConversationState.AWAITING_LOCATION_METHOD)
            self.store.append_bot_message(LOCATION_PROMPT, "location_choice")
        else:
            self.store.append_user_message("What are the next steps?")
            self._transition(ConversationState.SHOWING_RESULTS)
            self.store.append_bot_message(
                build_next_steps_message(self.fracture.body_part), is_markup=True
            )
        return True

    async def handle_location_method(
        self,
        method: str,
        location_text: str = "",
        geolocator: BrowserGeolocation | None = None,
    ) -> bool:
        """
        Handle "Share My Location" (auto) or the manual search form.

        The state moves to SHOWING_RESULTS before the locator is awaited, so
        a second click while geolocation is in flight is ignored.
        """
        if method not in ("auto", "manual"):
            raise ValueError(f"Unknown location method: {method!r}")
        if self.state != ConversationState.AWAITING_LOCATION_METHOD:
            return False
        if method == "manual" and not location_text.strip():
            return False

        self._transition(ConversationState.SHOWING_RESULTS)

        if method == "manual":
            user_text = f"Find a doctor near: {location_text}"
        else:
            user_text = "Share my current location."
            if geolocator is not None:
                # Position arrives later; the request itself shows first.
                self.store.append_user_message(user_text)
                user_text = None

        result = await self.locator.resolve(method, location_text, geolocator)
        self.store.append_bot_message(result.text, result.kind, link=result.link)
        if user_text is not None:
            self.store.append_user_message(user_text)
        return True

    def active_affordances(self) -> set[str]:
        """Kinds of messages whose buttons/forms are usable right now."""
        return {
            m["kind"] for m in self.store.messages if is_interactive(m, self.state)
        }

    def close(self):
        print(f"[Session] Closing session {self.store.session_id[-8:]}")
        self.store.close()
