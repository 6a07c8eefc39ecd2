from __future__ import annotations

import asyncio

import app
from chatbot.rendering import TYPING_HTML
from chatbot.states import STATE_LABELS


def test_no_session_hides_affordances():
    history, phase, choices, location = app.chat_outputs(None)

    assert history == []
    assert phase == STATE_LABELS["initial"]
    assert choices["visible"] is False
    assert location["visible"] is False


def test_choice_buttons_visible_after_greeting(make_manager, settle):
    manager = make_manager()
    manager.start()
    settle(manager.store)

    history, phase, choices, location = app.chat_outputs(manager)

    assert len(history) == 2
    assert choices["visible"] is True
    assert location["visible"] is False


def test_location_form_visible_only_while_awaiting(make_manager, settle):
    manager = make_manager()
    manager.start()
    settle(manager.store)
    manager.handle_choice("find_doctor")
    settle(manager.store)

    _, phase, choices, location = app.chat_outputs(manager)
    assert phase == STATE_LABELS["awaiting_location_method"]
    assert (choices["visible"], location["visible"]) == (False, True)

    asyncio.run(manager.handle_location_method("manual", "Denver"))
    settle(manager.store)

    _, phase, choices, location = app.chat_outputs(manager)
    assert phase == STATE_LABELS["showing_results"]
    assert (choices["visible"], location["visible"]) == (False, False)


def test_stream_chat_shows_typing_then_reply(make_manager):
    manager = make_manager()
    manager.start()

    async def collect():
        return [outputs async for outputs in app.stream_chat(manager)]

    frames = asyncio.run(collect())

    assert frames[0][0][-1]["content"] == TYPING_HTML
    assert len(frames[-1][0]) == 2


def test_close_session_tolerates_none(make_manager):
    app.close_session(None)
    manager = make_manager()
    manager.store.append_bot_message("pending")

    app.close_session(manager)

    assert manager.store.has_pending is False
