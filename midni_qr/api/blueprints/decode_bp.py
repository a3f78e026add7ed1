"""
Decode Blueprint

POST /api/v1/decode       decode and verify one QR payload
GET  /api/v1/trust-anchors list the issuer certificates used for verification

The payload is accepted either as raw bytes (application/octet-stream) or as
JSON {"payload": "<base64>"}. Malformed payloads answer 422 with the error
class name; unusable request bodies answer 400.
"""

import base64
import binascii

from flask import Blueprint, current_app, jsonify, request

from midni_qr.protocols.core.errors import QRPayloadError


def _bad_request(message: str):
    return jsonify({"error": "Bad Request", "message": message}), 400


def _read_payload():
    """Raw payload bytes from the request body, or None if unusable."""
    if request.mimetype == "application/octet-stream":
        return request.get_data()

    if request.is_json:
        body = request.get_json(silent=True)
        if not isinstance(body, dict) or not isinstance(body.get("payload"), str):
            return None
        try:
            return base64.b64decode(body["payload"], validate=True)
        except (binascii.Error, ValueError):
            return None

    return None


def create_decode_blueprint(parser):
    """Create Flask blueprint bound to a DniQrParser."""
    bp = Blueprint("decode", __name__)

    bp.parser = parser

    @bp.route("/decode", methods=["POST"])
    def decode_payload():
        """
        POST /api/v1/decode
        Returns the decoded document as JSON (photo inlined as base64 PNG)
        """
        if request.mimetype != "application/octet-stream" and not request.is_json:
            return (
                jsonify(
                    {
                        "error": "Unsupported Media Type",
                        "message": "Use application/octet-stream or application/json",
                    }
                ),
                415,
            )

        payload = _read_payload()
        if not payload:
            return _bad_request("Request body carries no payload")

        current_app.logger.info(f"Decode request: {len(payload)} bytes")

        try:
            # Il file temporaneo della foto viene rilasciato prima della risposta
            with bp.parser.parse(payload) as document:
                body = document.to_dict()
        except QRPayloadError as e:
            current_app.logger.warning(f"Rejected payload: {type(e).__name__}: {e}")
            return jsonify({"error": type(e).__name__, "message": str(e)}), 422

        return jsonify(body), 200

    @bp.route("/trust-anchors", methods=["GET"])
    def list_trust_anchors():
        """
        GET /api/v1/trust-anchors
        Returns the issuer certificates known to the parser
        """
        store = bp.parser.certificate_store
        if hasattr(store, "describe"):
            anchors = store.describe()
        else:
            anchors = [{"reference": reference} for reference in sorted(store)]
        return jsonify({"count": len(anchors), "trust_anchors": anchors}), 200

    return bp
