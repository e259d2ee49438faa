"""
Relay service routes: forward a prompt + base64 image to Gemini.
"""

import json
import logging
import platform
from typing import Tuple

from flask import Blueprint, current_app, request, jsonify, Response

from gemini_relay.config import RelayConfig
from gemini_relay.relay_service.errors import RelayError, InvalidRequest
from gemini_relay.relay_service.gemini_client import AnalysisRequest, analyze

logger = logging.getLogger(__name__)

# --- BLUEPRINT SETUP ---
relay_bp = Blueprint("relay", __name__)

SERVICE_NAME = "gemini-proxy"
USAGE_MESSAGE = "Gemini proxy is running. POST /analyze { prompt, image (base64), mimeType? }"


# --- CONFIG ACCESS ---
def get_config() -> RelayConfig:
    return current_app.config["RELAY_CONFIG"]


# --- ROUTES ---

@relay_bp.route("/analyze", methods=["POST"])
def handle_analyze() -> Tuple[Response, int]:
    """
    Validate the request body and relay it to Gemini.

    Expects JSON:
    - prompt (str)
    - image (str, base64)
    - mimeType (str, optional, defaults to image/jpeg)

    Returns:
        200: {"ok": true, "text": str|null, "raw": object}
        400: Empty body, invalid JSON, or missing field.
        413: Image too large.
        500: Upstream failure, timeout, or missing credential.
    """
    try:
        body = request.get_data(as_text=True)
        if not body:
            raise InvalidRequest("Empty body")

        try:
            data = json.loads(body)
        except ValueError:
            raise InvalidRequest("Invalid JSON")

        analysis_request = AnalysisRequest.from_json(data)
        result = analyze(get_config(), analysis_request)
        return jsonify(result.to_dict()), 200

    except RelayError:
        raise
    except Exception as e:
        logger.exception("Error in /analyze")
        return jsonify({"error": str(e)}), 500


@relay_bp.route("/", methods=["GET"])
def usage() -> Tuple[Response, int]:
    """
    Root URL with a short usage hint.
    """
    return jsonify({"message": USAGE_MESSAGE}), 200


@relay_bp.route("/ping", methods=["GET"])
def ping() -> Tuple[Response, int]:
    """
    Liveness probe. Never calls Gemini.
    """
    return jsonify({
        "ok": True,
        "service": SERVICE_NAME,
        "node": f"Python {platform.python_version()}",
    }), 200


# --- ERROR HANDLERS ---

@relay_bp.app_errorhandler(RelayError)
def handle_relay_error(error: RelayError) -> Tuple[Response, int]:
    if error.status_code >= 500:
        logger.error("Error in /analyze: %s", error.message)
    return jsonify({"error": error.message}), error.status_code
