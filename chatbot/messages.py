"""
Chat message entries.

Messages are plain dicts so they serialise straight to JSON for the
session store:

    {"text": str, "sender": "user" | "bot", "kind": str | None,
     "is_markup": bool, "link": str | None}
"""

import json

SENDERS = ("user", "bot")
MESSAGE_KINDS = (
    None,
    "plain",  # accepted from stored logs; replies built here use None
    "typing",
    "initial_choice",
    "location_choice",
    "maps_link",
)

TYPING_TEXT = "Typing..."


def make_message(
    text: str,
    sender: str,
    kind: str | None = None,
    is_markup: bool = False,
    link: str | None = None,
) -> dict:
    """Build a message entry, rejecting unknown senders and kinds."""
    if sender not in SENDERS:
        raise ValueError(f"Unknown sender: {sender!r}")
    if kind not in MESSAGE_KINDS:
        raise ValueError(f"Unknown message kind: {kind!r}")
    return {
        "text": text,
        "sender": sender,
        "kind": kind,
        "is_markup": bool(is_markup),
        "link": link,
    }


def typing_placeholder() -> dict:
    """The transient entry shown while a bot message is pending."""
    return make_message(TYPING_TEXT, "bot", "typing")


def is_typing(message: dict) -> bool:
    return message.get("kind") == "typing"


def message_from_dict(data) -> dict | None:
    """Normalise a restored entry. Returns None when it cannot be used."""
    if not isinstance(data, dict):
        return None
    text = data.get("text")
    link = data.get("link")
    if not isinstance(text, str) or not (link is None or isinstance(link, str)):
        return None
    try:
        return make_message(
            text,
            data.get("sender"),
            data.get("kind"),
            data.get("is_markup", False),
            link,
        )
    except ValueError:
        return None


def dumps_messages(messages: list[dict]) -> str:
    """Serialise resolved entries; typing placeholders are never written."""
    return json.dumps([m for m in messages if not is_typing(m)])


def loads_messages(raw: str | None) -> list[dict]:
    """Parse a stored message array. Missing or corrupt data gives []."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        print("[Session] ⚠️ Stored messages are not valid JSON — starting fresh")
        return []
    if not isinstance(data, list):
        return []

    messages = []
    for item in data:
        message = message_from_dict(item)
        if message is not None and not is_typing(message):
            messages.append(message)
    return messages
