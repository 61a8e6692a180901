"""
Gateway: serves the client form page and the relay blueprint.
This is the local entrypoint for development.
"""

from flask import Flask, jsonify, render_template, Response
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import os
import logging
from typing import Tuple
from dotenv import load_dotenv

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

DEFAULT_ORIGINS = [
    "http://localhost:5050",  # Local development gateway (same host)
    "http://localhost:5500",  # Local development (some editors)
    "http://localhost:8080",  # Local static server
]


def cors_origins() -> list:
    """
    Read allowed origins from CORS_ORIGINS (comma separated), falling back to local dev origins.
    """
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or DEFAULT_ORIGINS


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    CORS(app, resources={
        r"/api/*": {
            "origins": cors_origins(),
            "methods": ["POST", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }
    })

    # --- REGISTER BLUEPRINTS ---
    from backend.relay_service.routes import relay_bp

    app.register_blueprint(relay_bp, url_prefix="/api")
    logging.info("Relay blueprint registered successfully.")

    # --- CLIENT FORM ---
    @app.route("/")
    def index() -> str:
        """
        Serve the single-page Visual Storyteller form.
        """
        return render_template("index.html")

    @app.route("/health")
    def health() -> Tuple[Response, int]:
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    # --- JSON ERROR ENVELOPE ---
    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"message": error.name}), error.code

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("GATEWAY_PORT", 5050))
    app.run(host="0.0.0.0", port=port, debug=True)
