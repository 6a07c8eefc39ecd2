"""
Medical Knowledge Base.

Static next-step guidance for each body part the detection model can
label. Lookups are exact and case-sensitive; anything the catalog does not
know (including the "N/A" label) gets the DEFAULT guidance.
"""

# ── Next-Step Advice ───────────────────────────────────────────────────────
# Values use **bold** markup and real newlines; see chatbot.rendering.

NEXT_STEPS_ADVICE: dict[str, str] = {
    "DEFAULT": """
    1. **Consult a Professional:** See a qualified doctor for an accurate diagnosis.
    2. **Immobilize:** Try to keep the injured area still.
    3. **Manage Swelling:** Applying a cold pack can help.""",
    "WRIST": """
    1. **Consult a Professional:** It's crucial to see an orthopedic specialist.
    2. **Immobilize:** A temporary splint can help stabilize the wrist. Avoid moving your wrist or gripping objects.
    3. **Elevate:** Keep your hand elevated above your heart to reduce swelling.""",
    "FINGER": """
    1. **Consult a Professional:** See a doctor to ensure proper healing.
    2. **Buddy Taping:** You can gently tape the injured finger to an adjacent healthy finger to provide support.
    3. **Ice:** Apply a cold pack for 15-20 minutes at a time.""",
    "SHOULDER": """
    1. **Consult a Professional:** Shoulder injuries can be complex; see a specialist.
    2. **Immobilize:** Use a sling to keep your arm and shoulder from moving.
    3. **Do Not Lift:** Avoid lifting any heavy objects or reaching overhead.""",
    "ELBOW": """
    1. **Consult a Professional:** Elbow injuries require careful evaluation.
    2. **Immobilize:** Keep the arm stable in a comfortable position, possibly with a sling.
    3. **Ice:** Apply a cold pack to the area to help with swelling and pain.""",
}

DISCLAIMER = (
    "<strong>Disclaimer:</strong> I am an AI assistant and not a medical "
    "professional. This is not a substitute for professional medical advice."
)


def get_next_steps_advice(body_part: str) -> str:
    """Return the guidance for a body part, or the DEFAULT guidance."""
    return NEXT_STEPS_ADVICE.get(body_part) or NEXT_STEPS_ADVICE["DEFAULT"]


def build_next_steps_message(body_part: str) -> str:
    """Full markup text sent when the user asks for next steps."""
    advice = get_next_steps_advice(body_part)
    return (
        f"**General Advice for a {body_part} Injury:**<br>{advice}"
        f"<br><br>{DISCLAIMER}"
    )
