"""
Flask App Factory for the MiDNI QR REST API

Builds a Flask application around a single DniQrParser shared by all
requests (the parser keeps no per-payload state).

Author: MiDNI QR Project
Date: October 2026
"""

import logging
from typing import Any, Dict, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from midni_qr import __version__
from midni_qr.config import QR_CONSTANTS, QRParserConfig
from midni_qr.protocols.parser import DniQrParser
from midni_qr.utils.metrics import get_metrics_collector


def create_app(
    config: Optional[Dict[str, Any]] = None,
    certificate_store: Optional[Mapping] = None,
) -> Flask:
    """
    Factory function to create the decoder Flask app.

    Args:
        config: Configuration dictionary (see default_config below)
        certificate_store: Issuer certificates (default: from parser config)

    Returns:
        Flask: Configured Flask application
    """
    app = Flask(__name__)

    default_config = {
        "cors_origins": "*",  # "*" for dev, list of domains for production
        "log_level": "INFO",
        "max_content_length": QR_CONSTANTS.MAX_PAYLOAD_BYTES,
        "environment": "development",  # "development" or "production"
        "parser_config": None,  # QRParserConfig, None = from MIDNI_* env vars
    }

    if config:
        default_config.update(config)

    cors_origins = default_config["cors_origins"]
    if default_config["environment"] == "production" and cors_origins == "*":
        app.logger.warning("SECURITY: CORS set to '*' in production! Specify allowed domains.")

    app.config.update(
        {
            "MAX_CONTENT_LENGTH": default_config["max_content_length"],
            "JSON_SORT_KEYS": False,
            "ENVIRONMENT": default_config["environment"],
        }
    )

    CORS(
        app,
        resources={r"/*": {"origins": cors_origins}},
        allow_headers=["Content-Type"],
        methods=["GET", "POST", "OPTIONS"],
        supports_credentials=False,
    )

    level = getattr(logging, default_config["log_level"].upper(), logging.INFO)
    app.logger.setLevel(level)

    parser_config = default_config["parser_config"] or QRParserConfig.from_env()
    parser = DniQrParser(config=parser_config, certificate_store=certificate_store)
    app.config["QR_PARSER"] = parser

    app.logger.info(f"Starting MiDNI QR decoder API {__version__}")

    from .middleware.monitoring import setup_monitoring
    setup_monitoring(app)

    @app.route("/")
    def index():
        return jsonify(
            {
                "name": "MiDNI QR decoder API",
                "version": __version__,
                "endpoints": [
                    "GET /health",
                    "GET /metrics",
                    "POST /api/v1/decode",
                    "GET /api/v1/trust-anchors",
                ],
            }
        )

    @app.route("/health")
    def health_check():
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/metrics")
    def metrics():
        prometheus_text = get_metrics_collector().export_prometheus_format()
        return prometheus_text, 200, {"Content-Type": "text/plain; charset=utf-8"}

    from .blueprints.decode_bp import create_decode_blueprint

    app.register_blueprint(create_decode_blueprint(parser), url_prefix="/api/v1")
    app.logger.info("Registered endpoints:")
    app.logger.info("  POST /api/v1/decode")
    app.logger.info("  GET  /api/v1/trust-anchors")

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "Bad Request", "message": str(e)}), 400

    @app.errorhandler(404)
    def not_found(e):
        return (
            jsonify({"error": "Not Found", "message": "The requested endpoint does not exist"}),
            404,
        )

    @app.errorhandler(413)
    def payload_too_large(e):
        return (
            jsonify(
                {
                    "error": "Payload Too Large",
                    "message": f"Payloads are limited to {app.config['MAX_CONTENT_LENGTH']} bytes",
                }
            ),
            413,
        )

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f"Internal server error: {e}")
        return (
            jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}),
            500,
        )

    return app
