from __future__ import annotations

import pytest

from chatbot.medical_knowledge import (
    DISCLAIMER,
    NEXT_STEPS_ADVICE,
    build_next_steps_message,
    get_next_steps_advice,
)


@pytest.mark.parametrize("body_part", ["WRIST", "FINGER", "SHOULDER", "ELBOW"])
def test_known_body_parts_get_their_own_advice(body_part):
    advice = get_next_steps_advice(body_part)

    assert advice == NEXT_STEPS_ADVICE[body_part]
    assert advice != NEXT_STEPS_ADVICE["DEFAULT"]


@pytest.mark.parametrize("body_part", ["N/A", "wrist", "KNEE", "", None])
def test_unknown_body_parts_fall_back_to_default(body_part):
    assert get_next_steps_advice(body_part) == NEXT_STEPS_ADVICE["DEFAULT"]


def test_advice_uses_numbered_bold_steps():
    advice = NEXT_STEPS_ADVICE["FINGER"]

    assert "1. **Consult a Professional:**" in advice
    assert "2. **Buddy Taping:**" in advice
    assert "3. **Ice:**" in advice


def test_next_steps_message_wraps_advice_with_disclaimer():
    message = build_next_steps_message("SHOULDER")

    assert message.startswith("**General Advice for a SHOULDER Injury:**<br>")
    assert NEXT_STEPS_ADVICE["SHOULDER"] in message
    assert message.endswith("<br><br>" + DISCLAIMER)
