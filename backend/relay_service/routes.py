"""
Relay service routes: forwards an image and a vibe keyword to Gemini.

Provides routes for:
- POST /relay : image + keyword in, Markdown report out.

The Gemini client is created once at import time from GEMINI_API_KEY.
"""

import base64
import logging
import os
from typing import Tuple, Dict, Any

from dotenv import load_dotenv
from flask import Blueprint, request, jsonify, Response

# --- GEMINI IMPORTS ---
from google import genai
from google.genai import types

load_dotenv()

relay_bp = Blueprint("relay", __name__)

# --- API KEY RETRIEVAL ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = "gemini-2.5-flash"
IMAGE_MIME_TYPE = "image/jpeg"

# --- CLIENT INITIALIZATION ---
client = None

if GEMINI_API_KEY:
    try:
        client = genai.Client(api_key=GEMINI_API_KEY)
        logging.info("Successfully initialized Gemini client.")
    except Exception as e:
        client = None
        logging.warning(f"Gemini client initialization failed: {e}")
else:
    logging.warning("GEMINI_API_KEY is missing. Relay service will not function.")


# --- GOLDEN PROMPT ---
GOLDEN_PROMPT = """
You are the "Lens Poet," an advanced AI specialized in multimodal aesthetic analysis and profound creative writing. Your task is to analyze the user's uploaded image and their guiding 'Vibe Keyword' to generate a structured, four-part narrative report.

RULES FOR SUCCESS:
1.  **Strict Markdown Output:** Your entire response MUST be formatted strictly using Markdown headings (#, ##), bolding (**), italicizing (*), and blockquotes (>) exactly as specified in the structure below.
2.  **Length & Detail:** Ensure the 'Visual Analysis' section contains at least *three distinct sentences* for descriptive depth.
3.  **Vibe Integration:** The 'Vibe Keyword' must be woven into the analysis, influencing the choice of vocabulary, color description, and overall tone.
4.  **NO PREAMBLE/POST-AMBLE:** Do not include any text, greetings, or explanations outside of the requested four-part Markdown structure.

---
STRUCTURED MARKDOWN OUTPUT REQUESTED (Analyze Image and Vibe Keyword):
---

# Reflection Subject: The [Descriptive, Poetic Title that encapsulates the Vibe]

## Visual Analysis
**[Image's Core Subject]** The light, composition, and texture of this scene suggest [a vivid, analytical description of the image's aesthetic qualities]. *The subtle influence of the [Vibe Keyword] is felt most strongly in [specific visual element, e.g., the muted colors or the blurred motion].*

> **Metaphorical Insight:** [A single, original, profound metaphor that captures the image's deeper meaning through the lens of the Vibe Keyword].

## Cultural Compass [Vibe Keyword]
**Vibe Abstract:** [A rich paragraph explaining how the Vibe Keyword (e.g., 'Nostalgia') interacts with the historical or modern elements visible in the image. Use vocabulary appropriate to the Vibe.]

* **Emotional Cadence:** [Identify the primary emotion: 'Melancholy,' 'Urgency,' 'Quiet Joy'].
* **Style Archetype:** [Identify the aesthetic style: 'Baroque Simplicity,' 'Industrial Decay,' 'Vaporwave').
* **Modern Relevance:** [Explain what this image/vibe means in today's digital age].
* **Key Themes:** [List 2-3 powerful, abstract themes: 'Time's Passage,' 'Uncertainty,' 'Simple Beauty'].

---
"""


def build_prompt(vibe_keyword: str) -> str:
    """
    Append the user's vibe keyword to the golden prompt.
    """
    return GOLDEN_PROMPT + f"\n\nUser's Vibe Keyword: {vibe_keyword}"


def build_contents(image_base64: str, vibe_keyword: str) -> list:
    """
    Structure the prompt parts for multimodal input.

    Args:
        image_base64 (str): Base64 image data without the data-URL prefix.
        vibe_keyword (str): The user's guiding keyword.

    Returns:
        list: A text part followed by the inlined image part.

    Raises:
        binascii.Error: If the image data is not valid base64.
    """
    # Line-wrapped base64 is accepted; any other non-alphabet character is rejected.
    image_bytes = base64.b64decode("".join(image_base64.split()), validate=True)
    return [
        types.Part.from_text(text=build_prompt(vibe_keyword)),
        types.Part.from_bytes(data=image_bytes, mime_type=IMAGE_MIME_TYPE),
    ]


# --- REQUEST LOGGING ---
@relay_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request. Bodies carry image data and are not logged.
    """
    logging.info(f"[Relay] Incoming {request.method} {request.path}")


@relay_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Relay] Response {response.status}")
    return response


# --- ROUTES ---

# Every method is routed here so the 405 carries the JSON envelope.
@relay_bp.route("/relay", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
def relay() -> Tuple[Response, int]:
    """
    Forward an image and vibe keyword to Gemini and return its Markdown report.

    Expects a JSON body with:
    - imageBase64 (str): Base64 image data, JPEG-compatible.
    - vibeKeyword (str): Free-text guiding keyword.

    Returns:
        200: JSON with 'output', the model text with surrounding whitespace trimmed.
        400: Missing image or vibe keyword.
        405: Method other than POST.
        500: Upstream or internal failure, message includes the underlying error.
    """
    if request.method != "POST":
        return jsonify({"message": "Method Not Allowed"}), 405

    data: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    image_base64 = data.get("imageBase64")
    vibe_keyword = data.get("vibeKeyword")

    if not image_base64 or not vibe_keyword:
        return jsonify({"message": "Missing image or vibe keyword."}), 400

    if client is None:
        return jsonify({"message": "AI service is not configured (check GEMINI_API_KEY)."}), 500

    try:
        contents = build_contents(image_base64, vibe_keyword)

        response = client.models.generate_content(
            model=GEMINI_MODEL,
            contents=contents,
        )

        # The model returns Markdown; it is passed through without validation.
        markdown_output = (response.text or "").strip()

        return jsonify({"output": markdown_output}), 200

    except Exception as e:
        logging.error(f"Gemini API Error: {e}")
        return jsonify({
            "message": f"AI Generation Failed: {e}. Check your API Key and image size."
        }), 500
