"""
API gateway: builds the relay app and runs it.
This is the local entrypoint for development.
"""

import logging
from typing import Optional, Tuple

from flask import Flask, jsonify, request, Response
from flask_cors import CORS

from gemini_relay.config import RelayConfig, load_config
from gemini_relay.relay_service.routes import relay_bp

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def configure_logging(level: str) -> None:
    # getLevelName returns a string for unknown names
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO

    # Basic console logging during API requests
    logging.basicConfig(
        level=level_value,
        format="[%(levelname)s] %(asctime)s - %(message)s",
    )


def create_app(config: Optional[RelayConfig] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        config (RelayConfig, optional): Configuration to serve with.
            Loaded from the environment when omitted.

    Returns:
        Flask: The configured Flask application.
    """
    if config is None:
        config = load_config()

    app = Flask(__name__)
    app.config["RELAY_CONFIG"] = config

    # Any origin may call the relay; only POST and preflight are advertised
    CORS(app, resources={
        r"/*": {
            "origins": "*",
            "send_wildcard": True,
            "methods": ["POST", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }
    })

    @app.before_request
    def handle_preflight() -> Optional[Response]:
        """
        Answer OPTIONS on any path, known or not, with an empty 204.
        """
        if request.method == "OPTIONS":
            return Response(status=204, headers=CORS_HEADERS)
        return None

    app.register_blueprint(relay_bp)

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(error) -> Tuple[Response, int]:
        return jsonify({"error": "Not found"}), 404

    if not config.has_credential:
        logger.warning(
            "GEMINI_API_KEY is not set. The server will start, but calls to Gemini will fail."
        )

    return app


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)
    app = create_app(config)
    logger.info("Relay started on http://%s:%s", config.host, config.port)
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == "__main__":
    main()
