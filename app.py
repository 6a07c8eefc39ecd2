"""
X-Ray Fracture Detection — Gradio Application.

Upload an X-ray, get a fracture/body-part prediction, and when a fracture
is found, talk to the follow-up assistant:
  - Confidence-aware greeting
  - Body-part specific next steps
  - Doctor search by browser location or typed location
  - Conversation log that survives page reloads
"""

import asyncio
import uuid

import gradio as gr
import requests

from chatbot.conversation_manager import ConversationManager
from chatbot.doctor_locator import BrowserGeolocation
from chatbot.message_store import MessageStore
from chatbot.prediction import (
    PredictionClient,
    format_prediction_summary,
    fracture_context_from_prediction,
)
from chatbot.rendering import render_history
from chatbot.states import STATE_LABELS
from database.mongo_client import MongoDBClient
import config

# ── Custom CSS ─────────────────────────────────────────────────────────────

CUSTOM_CSS = """
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');

/* Global */
.gradio-container {
    font-family: 'Inter', sans-serif !important;
    max-width: 1200px !important;
}

/* Header */
.header-banner {
    background: linear-gradient(135deg, #1e3a8a 0%, #2563eb 60%, #60a5fa 100%);
    padding: 28px 36px;
    border-radius: 16px;
    margin-bottom: 20px;
    color: white;
    box-shadow: 0 8px 32px rgba(30, 58, 138, 0.3);
}

.header-banner h1 {
    margin: 0 0 6px 0;
    font-size: 28px;
    font-weight: 700;
}

.header-banner p {
    margin: 0;
    font-size: 14px;
    opacity: 0.9;
    font-weight: 300;
}

/* Chat window */
.chatbot-window {
    border: 1px solid #bfdbfe;
    border-radius: 14px;
    padding: 16px;
    background: #f8fafc;
}

.choice-btn, .location-btn, .search-btn {
    border-radius: 12px !important;
    font-weight: 600 !important;
}

.maps-link {
    font-weight: 600;
    color: #2563eb;
}

/* Typing indicator */
.typing-indicator span {
    display: inline-block;
    width: 7px;
    height: 7px;
    margin-right: 3px;
    border-radius: 50%;
    background: #94a3b8;
    animation: typing-bounce 1.2s infinite ease-in-out;
}

.typing-indicator span:nth-child(2) { animation-delay: 0.15s; }
.typing-indicator span:nth-child(3) { animation-delay: 0.3s; }

@keyframes typing-bounce {
    0%, 80%, 100% { transform: translateY(0); opacity: 0.4; }
    40% { transform: translateY(-4px); opacity: 1; }
}

/* Footer */
.footer-note {
    text-align: center;
    font-size: 12px;
    color: #9ca3af;
    margin-top: 12px;
    padding: 8px;
}
"""

# Runs in the browser before the "Share My Location" handler; its return
# values replace the handler inputs.
GEOLOCATION_JS = """
async (latitude, longitude, error, ...rest) => {
    if (!navigator.geolocation) {
        return [null, null, "unsupported", ...rest];
    }
    try {
        const position = await new Promise((resolve, reject) =>
            navigator.geolocation.getCurrentPosition(resolve, reject)
        );
        return [position.coords.latitude, position.coords.longitude, "", ...rest];
    } catch (err) {
        console.error("Geolocation error:", err);
        return [null, null, err.message || "Geolocation failed", ...rest];
    }
}
"""

PREDICTION_ERROR = (
    "⚠️ Failed to get prediction. Ensure the backend server is running and "
    "the image is valid."
)
INVALID_IMAGE = "⚠️ Please select a valid image file (jpeg, png)."


# ── Initialize Core Components ─────────────────────────────────────────────

def initialize_components():
    """Initialize the session store and the prediction client."""
    db = MongoDBClient()
    prediction = PredictionClient()
    return db, prediction


def close_session(session):
    """Teardown when Gradio discards a page session."""
    if session is not None:
        session.close()


def chat_outputs(session):
    """Chat history, phase label and which affordances are visible."""
    if session is None:
        return (
            [],
            STATE_LABELS["initial"],
            gr.update(visible=False),
            gr.update(visible=False),
        )

    affordances = session.active_affordances()
    return (
        render_history(session.store.messages),
        STATE_LABELS[session.state.value],
        gr.update(visible="initial_choice" in affordances),
        gr.update(visible="location_choice" in affordances),
    )


async def stream_chat(session):
    """Yield chat outputs for every step of the pending bot replies."""
    if session is None:
        yield chat_outputs(None)
        return
    async for _ in session.store.drain():
        yield chat_outputs(session)


# ── Build Gradio App ───────────────────────────────────────────────────────

def create_app():
    """Build and return the Gradio application."""

    db_client, prediction_client = initialize_components()

    # ── Event Handlers ─────────────────────────────────────────────────

    async def detect(image_path, session_id, session):
        """Run the prediction and mount the assistant on a fracture."""
        if not image_path:
            yield (
                gr.update(),
                gr.update(value=INVALID_IMAGE, visible=True),
                gr.update(),
                session,
                session_id,
                *chat_outputs(session),
            )
            return

        try:
            payload = await asyncio.to_thread(prediction_client.predict, image_path)
        except (requests.RequestException, OSError) as e:
            print(f"[Prediction] ❌ Error making prediction: {e}")
            yield (
                "Results will be shown here after analysis.",
                gr.update(value=PREDICTION_ERROR, visible=True),
                gr.update(),
                session,
                session_id,
                *chat_outputs(session),
            )
            return

        fracture, is_fractured = fracture_context_from_prediction(payload)
        summary = format_prediction_summary(fracture, is_fractured)

        if not is_fractured:
            # Unmount the assistant; the stored log stays for the next fracture.
            close_session(session)
            yield (
                summary,
                gr.update(visible=False),
                gr.update(visible=False),
                None,
                session_id,
                *chat_outputs(None),
            )
            return

        session_id = session_id or uuid.uuid4().hex
        if session is None:
            store = MessageStore(db_client, session_id)
            session = ConversationManager(fracture, store)
            session.start()

        async for outputs in stream_chat(session):
            yield (
                summary,
                gr.update(visible=False),
                gr.update(visible=True),
                session,
                session_id,
                *outputs,
            )

    def choice_handler(choice):
        async def handle(session):
            if session is not None:
                session.handle_choice(choice)
            async for outputs in stream_chat(session):
                yield outputs
        return handle

    async def share_location(latitude, longitude, error, session):
        """Auto search with the position reported by the browser."""
        if session is not None:
            geolocator = None
            if error != "unsupported":
                geolocator = BrowserGeolocation(latitude, longitude, error)
            await session.handle_location_method("auto", geolocator=geolocator)
        async for outputs in stream_chat(session):
            yield outputs

    async def search_location(location_text, session):
        """Manual search with the typed location."""
        if session is not None:
            await session.handle_location_method("manual", location_text or "")
        async for outputs in stream_chat(session):
            yield outputs

    # ── Build UI ───────────────────────────────────────────────────────

    with gr.Blocks(
        css=CUSTOM_CSS,
        title="X-Ray Fracture Detection System",
        theme=gr.themes.Soft(
            primary_hue=gr.themes.colors.blue,
            secondary_hue=gr.themes.colors.sky,
            neutral_hue=gr.themes.colors.gray,
            font=gr.themes.GoogleFont("Inter"),
        ),
    ) as app:

        # State
        browser_session = gr.BrowserState(None, storage_key="fracture_assistant_session")
        conversation = gr.State(None, delete_callback=close_session)

        # ── Header ─────────────────────────────────────────────────────
        gr.HTML(f"""
        <div class="header-banner">
            <h1>{config.APP_TITLE}</h1>
            <p>{config.APP_DESCRIPTION}</p>
        </div>
        """)

        with gr.Row():

            # ── Upload Column ──────────────────────────────────────────
            with gr.Column(scale=2):
                image = gr.Image(
                    type="filepath",
                    sources=["upload"],
                    label="Image Preview",
                    height=360,
                )
                detect_btn = gr.Button("Detect Fracture", variant="primary")

            # ── Results Column ─────────────────────────────────────────
            with gr.Column(scale=1, min_width=280):
                gr.HTML("<h3>Analysis Results</h3>")
                error_display = gr.Markdown(visible=False)
                results_display = gr.Markdown("Results will be shown here after analysis.")

        # ── Assistant ──────────────────────────────────────────────────
        with gr.Column(visible=False, elem_classes=["chatbot-window"]) as chat_panel:
            gr.HTML("<h3>AI Medical Assistant</h3>")
            phase_display = gr.Markdown(STATE_LABELS["initial"])
            chatbot = gr.Chatbot(type="messages", height=420, show_label=False)

            with gr.Row(visible=False) as choice_row:
                find_doctor_btn = gr.Button("Find a Doctor", elem_classes=["choice-btn"])
                next_steps_btn = gr.Button("What should I do next?", elem_classes=["choice-btn"])

            with gr.Group(visible=False) as location_group:
                share_btn = gr.Button("Share My Location", elem_classes=["location-btn"])
                with gr.Row():
                    location_input = gr.Textbox(
                        placeholder="e.g., Chicago, IL",
                        show_label=False,
                        scale=5,
                        container=False,
                    )
                    search_btn = gr.Button(
                        "Search", variant="primary", scale=1, elem_classes=["search-btn"]
                    )

            # Filled in by GEOLOCATION_JS
            geo_latitude = gr.Number(visible=False)
            geo_longitude = gr.Number(visible=False)
            geo_error = gr.Textbox(visible=False)

        # ── Footer ─────────────────────────────────────────────────────
        gr.HTML("""
        <div class="footer-note">
            ⚠️ <strong>Disclaimer:</strong> This assistant is not a medical professional.
            Always consult a qualified healthcare provider about an injury.
        </div>
        """)

        # ── Event Bindings ─────────────────────────────────────────────
        chat_targets = [chatbot, phase_display, choice_row, location_group]

        detect_btn.click(
            detect,
            inputs=[image, browser_session, conversation],
            outputs=[
                results_display, error_display, chat_panel,
                conversation, browser_session, *chat_targets,
            ],
        )

        find_doctor_btn.click(
            choice_handler("find_doctor"),
            inputs=[conversation],
            outputs=chat_targets,
        )

        next_steps_btn.click(
            choice_handler("next_steps"),
            inputs=[conversation],
            outputs=chat_targets,
        )

        share_btn.click(
            share_location,
            inputs=[geo_latitude, geo_longitude, geo_error, conversation],
            outputs=chat_targets,
            js=GEOLOCATION_JS,
        )

        location_input.submit(
            search_location,
            inputs=[location_input, conversation],
            outputs=chat_targets,
        )

        search_btn.click(
            search_location,
            inputs=[location_input, conversation],
            outputs=chat_targets,
        )

    return app


# ── Entry Point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app = create_app()
    app.launch(
        server_name=config.SERVER_NAME,
        server_port=config.SERVER_PORT,
        share=False,
        show_error=True,
    )
