"""
Chatbot package — Fracture Follow-up Conversation Engine.
"""

from chatbot.states import ConversationState
from chatbot.conversation_manager import ConversationManager
from chatbot.message_store import MessageStore
from chatbot.prediction import FractureContext

__all__ = ["ConversationState", "ConversationManager", "MessageStore", "FractureContext"]
