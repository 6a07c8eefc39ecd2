"""
Configuration module for the Fracture Follow-up Assistant.
Loads environment variables and provides application-wide settings.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ── MongoDB (session store) ────────────────────────────────────────────────
MONGODB_URI = os.getenv("MONGODB_URI", "")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "fracture_assistant")
MONGODB_COLLECTION = os.getenv("MONGODB_COLLECTION", "chat_sessions")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "86400"))

# Keys inside a browser session
CHAT_MESSAGES_KEY = "chat_messages"
CHAT_PENDING_KEY = "chat_pending"

# ── Prediction Endpoint ───────────────────────────────────────────────────
PREDICT_API_URL = os.getenv("PREDICT_API_URL", "http://localhost:5000/predict")
PREDICT_TIMEOUT_SECONDS = float(os.getenv("PREDICT_TIMEOUT_SECONDS", "30"))

# ── Conversation Settings ─────────────────────────────────────────────────
TYPING_DELAY_SECONDS = float(os.getenv("TYPING_DELAY_SECONDS", "0.75"))
LIKELY_FRACTURE_THRESHOLD = 0.85  # above this the greeting says "likely"

# ── Doctor Search ─────────────────────────────────────────────────────────
MAPS_SEARCH_URL = "https://www.google.com/maps/search/"
MAPS_QUERY_TERM = "orthopedic doctor"
MAPS_ZOOM = 14

# ── Application Settings ──────────────────────────────────────────────────
APP_TITLE = "🩻 X-Ray Fracture Detection System"
APP_DESCRIPTION = (
    "Upload an X-ray image to detect fractures and classify the body part "
    "using an AI model."
)
SERVER_NAME = os.getenv("SERVER_NAME", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
