"""
Prediction endpoint contract.

The detection model runs behind an HTTP endpoint that accepts a multipart
image upload and answers with:

    {
      "fracture_prediction": {"probability": float, "is_fractured": bool},
      "body_part_prediction": {"label": str}
    }

This module posts the image and turns the answer into a FractureContext,
the only input the conversation needs.
"""

from typing import NamedTuple

import requests

import config


class FractureContext(NamedTuple):
    body_part: str
    confidence: float


def fracture_context_from_prediction(payload: dict) -> tuple[FractureContext, bool]:
    """Return (context, is_fractured), defaulting any missing field."""
    fracture = payload.get("fracture_prediction") or {}
    body_part = payload.get("body_part_prediction") or {}

    try:
        confidence = float(fracture.get("probability") or 0)
    except (TypeError, ValueError):
        confidence = 0.0
    confidence = min(max(confidence, 0.0), 1.0)

    label = body_part.get("label") or "N/A"
    return FractureContext(str(label), confidence), bool(fracture.get("is_fractured", False))


def format_prediction_summary(fracture: FractureContext, is_fractured: bool) -> str:
    """Markdown for the analysis results panel."""
    status = "🔴 **Fracture Detected**" if is_fractured else "🟢 **Normal**"
    return (
        f"**Body Part:** {fracture.body_part}\n\n"
        f"**Fracture Status:** {status}\n\n"
        f"**Fracture Confidence:** {fracture.confidence * 100:.2f}%"
    )


class PredictionClient:
    """Posts X-ray images to the prediction endpoint."""

    def __init__(self, url: str | None = None, timeout: float = config.PREDICT_TIMEOUT_SECONDS):
        self.url = url or config.PREDICT_API_URL
        self.timeout = timeout
        self.session = requests.Session()

    def predict(self, image_path: str) -> dict:
        with open(image_path, "rb") as f:
            r = self.session.post(self.url, files={"file": f}, timeout=self.timeout)
        if r.status_code >= 400:
            print(f"[Prediction] ❌ POST {self.url} -> {r.status_code} {r.text[:300]}")
            r.raise_for_status()
        return r.json()
