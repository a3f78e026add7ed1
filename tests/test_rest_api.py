"""
Test Suite: REST API Endpoints

Tests Flask REST API implementation:
- Health check and metrics
- Decode endpoint (raw bytes and base64 JSON)
- Error handling and Content-Type validation
"""

import base64

import pytest

from conftest import CERT_REFERENCE, build_payload
from midni_qr.api import create_app
from midni_qr.config import QRParserConfig


@pytest.fixture
def app(certificate_store, tmp_path):
    """Create decoder Flask app"""
    config = {
        "log_level": "DEBUG",
        "parser_config": QRParserConfig(photo_temp_dir=tmp_path),
    }
    app = create_app(config, certificate_store=certificate_store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


class TestServiceEndpoints:
    """Test endpoint di servizio"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_index(self, client):
        response = client.get("/")
        assert "POST /api/v1/decode" in response.get_json()["endpoints"]

    def test_not_found(self, client):
        response = client.get("/api/v1/missing")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Not Found"

    def test_metrics_prometheus(self, client, signed_payload):
        client.post("/api/v1/decode", data=signed_payload, content_type="application/octet-stream")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.content_type.startswith("text/plain")
        text = response.get_data(as_text=True)
        assert 'midni_parses_total{outcome="verified"} 1' in text
        assert "midni_requests_total" in text

    def test_response_time_header(self, client):
        assert client.get("/health").headers["X-Response-Time"].endswith("ms")

    def test_trust_anchors(self, client):
        response = client.get("/api/v1/trust-anchors")
        body = response.get_json()
        assert body["count"] == 1
        assert body["trust_anchors"][0]["reference"] == CERT_REFERENCE


class TestDecodeEndpoint:
    """Test POST /api/v1/decode"""

    def test_raw_bytes(self, client, signed_payload, tmp_path):
        response = client.post("/api/v1/decode", data=signed_payload, content_type="application/octet-stream")
        assert response.status_code == 200
        body = response.get_json()
        assert body["signatureVerified"] is True
        assert body["givenName"] == "MARÍA JOSÉ"
        assert body["ageStatus"] == "MAYOR_EDAD"
        assert body["header"]["issuingCountry"] == "ES"
        assert base64.b64decode(body["photo"]).startswith(b"\x89PNG")
        # Handle rilasciato prima della risposta
        assert list(tmp_path.glob("midni_photo_*")) == []

    def test_base64_json(self, client, signed_payload):
        response = client.post(
            "/api/v1/decode",
            json={"payload": base64.b64encode(signed_payload).decode("ascii")},
        )
        assert response.status_code == 200
        assert response.get_json()["signatureVerified"] is True

    def test_unverifiable_is_not_an_error(self, client, full_fields, other_key):
        payload = build_payload(full_fields, private_key=other_key)
        response = client.post("/api/v1/decode", data=payload, content_type="application/octet-stream")
        assert response.status_code == 200
        assert response.get_json()["signatureVerified"] is False

    def test_malformed_payload(self, client):
        response = client.post("/api/v1/decode", data=b"\x00\x03", content_type="application/octet-stream")
        assert response.status_code == 422
        assert response.get_json()["error"] == "UnsupportedFormatError"

    def test_truncated_payload(self, client, signed_payload):
        response = client.post(
            "/api/v1/decode", data=signed_payload[:20], content_type="application/octet-stream"
        )
        assert response.status_code == 422
        assert response.get_json()["error"] == "TruncatedPayloadError"

    def test_empty_body(self, client):
        response = client.post("/api/v1/decode", data=b"", content_type="application/octet-stream")
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [{"payload": "***"}, {"other": "x"}, {"payload": 12}, ["x"]])
    def test_bad_json(self, client, body):
        response = client.post("/api/v1/decode", json=body)
        assert response.status_code == 400

    def test_unsupported_media_type(self, client, signed_payload):
        response = client.post("/api/v1/decode", data=signed_payload, content_type="text/plain")
        assert response.status_code == 415

    def test_payload_too_large(self, certificate_store):
        app = create_app(
            {"max_content_length": 16, "parser_config": QRParserConfig()},
            certificate_store=certificate_store,
        )
        response = app.test_client().post(
            "/api/v1/decode", data=b"\xDC" * 64, content_type="application/octet-stream"
        )
        assert response.status_code == 413
