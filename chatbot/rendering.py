"""
Message rendering for the Gradio chat panel.

Bot advice carries a tiny markup (**bold** and newlines) that is turned
into HTML. Everything else is shown verbatim.
"""

import html
import re

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!|>~])")

TYPING_HTML = (
    '<span class="typing-indicator"><span></span><span></span><span></span></span>'
)


def markup_to_html(text: str) -> str:
    """**bold** -> <strong>, then newlines -> <br/>."""
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return text.replace("\n", "<br/>")


def escape_plain(text: str) -> str:
    """Escape HTML and Markdown so the text displays exactly as typed."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", html.escape(text, quote=False))


def render_message(message: dict) -> dict:
    """Convert a stored entry into a Gradio "messages" chat item."""
    role = "user" if message.get("sender") == "user" else "assistant"

    if message.get("kind") == "typing":
        return {"role": role, "content": TYPING_HTML}

    text = message.get("text", "")
    content = markup_to_html(text) if message.get("is_markup") else escape_plain(text)

    if message.get("kind") == "maps_link" and message.get("link"):
        href = html.escape(message["link"], quote=True)
        content += (
            f'<br/><a class="maps-link" href="{href}" target="_blank" '
            f'rel="noopener noreferrer">Open Google Maps</a>'
        )

    return {"role": role, "content": content}


def render_history(messages: list[dict]) -> list[dict]:
    return [render_message(m) for m in messages]
