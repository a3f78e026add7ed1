"""
Pytest Configuration and Shared Fixtures

Fornisce fixture condivise per tutti i test:
- Chiave P-256 e certificato autofirmato dell'emittente (serial = reference)
- Certificate store sintetico
- Foto JPEG2000 generata con Pillow
- Builder di payload: header C40, campi TLV (anche 0x81/0x82), firma ECDSA

Author: MiDNI QR Project
Date: October 2026
"""

import io
from datetime import date, datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.x509.oid import NameOID
from PIL import Image

from midni_qr.managers.trust_store_manager import CertificateStore
from midni_qr.protocols.core.primitives import c40_encode, encode_packed_date
from midni_qr.protocols.core.types import FieldTag
from midni_qr.utils.logger import QRLogger
from midni_qr.utils.metrics import reset_metrics_collector


CERT_REFERENCE = "1a2b3c4d5e6f708192a3b4c5d6e7f809"
ISSUANCE_DATE = date(2024, 3, 4)


# ============================================================================
# PAYLOAD BUILDING HELPERS
# ============================================================================


def encode_length(length: int) -> bytes:
    """TLV length: literal below 0x80, otherwise 0x81 LL or 0x82 HH LL"""
    if length < 0x80:
        return bytes([length])
    if length <= 0xFF:
        return bytes([0x81, length])
    return bytes([0x82]) + length.to_bytes(2, "big")


def tlv(tag: int, value: bytes) -> bytes:
    return bytes([tag]) + encode_length(len(value)) + value


def build_header(
    reference: str = CERT_REFERENCE,
    kind: int = 0x08,
    country: str = "ES",
    signer: str = "ESPN",
    issuance_date: date = ISSUANCE_DATE,
    signature_date: date = ISSUANCE_DATE,
    category: int = 0x01,
    magic: int = 0xDC,
    version: int = 0x03,
) -> bytes:
    ref_text = reference.upper()
    return (
        bytes([magic, version])
        + c40_encode(country)
        + c40_encode(f"{signer}{len(ref_text):02X}")
        + c40_encode(ref_text)
        + encode_packed_date(issuance_date)
        + encode_packed_date(signature_date)
        + bytes([kind, category])
    )


def sign_raw(private_key, data: bytes) -> bytes:
    """ECDSA P-256 / SHA-256 signature in raw r || s form"""
    der = private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    return r.to_bytes(32, "big") + s.to_bytes(32, "big")


def build_payload(fields, private_key=None, signature: bytes = None, **header_kwargs) -> bytes:
    """
    Assemble a payload.

    Args:
        fields: Iterable of (tag, value) pairs, emitted in order
        private_key: Signs header + fields when given
        signature: Explicit signature bytes (overrides private_key)
    """
    body = build_header(**header_kwargs) + b"".join(tlv(tag, value) for tag, value in fields)
    if signature is None and private_key is not None:
        signature = sign_raw(private_key, body)
    if signature is not None:
        body += tlv(0xFF, signature)
    return body


def make_jpeg2000(size=(48, 64), mode="RGB", color=(200, 120, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="JPEG2000")
    return buffer.getvalue()


def make_certificate(private_key, reference: str = CERT_REFERENCE) -> bytes:
    """Self-signed issuer certificate whose serial is the reference"""
    name = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "ES"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "MiDNI Test Issuer"),
        x509.NameAttribute(NameOID.COMMON_NAME, "MiDNI QR Test Signer"),
    ])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(int(reference, 16))
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .sign(private_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def issuer_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def other_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def issuer_certificate_pem(issuer_key):
    return make_certificate(issuer_key)


@pytest.fixture
def certificate_store(issuer_certificate_pem):
    return CertificateStore({CERT_REFERENCE: issuer_certificate_pem})


@pytest.fixture(scope="session")
def jp2_photo():
    return make_jpeg2000()


@pytest.fixture
def full_fields(jp2_photo):
    """Campi di una credenziale COMPLETO con foto"""
    return [
        (FieldTag.DOCUMENT_NUMBER, b"12345678Z"),
        (FieldTag.BIRTH_DATE, b"15-06-1985"),
        (FieldTag.GIVEN_NAME, "MARÍA JOSÉ".encode("utf-8")),
        (FieldTag.SURNAMES, "ESPAÑOLA ESPAÑOLA".encode("utf-8")),
        (FieldTag.SEX, b"F"),
        (FieldTag.EXPIRY_DATE, b"01-01-2030"),
        (FieldTag.PHOTO, jp2_photo),
        (FieldTag.ADDRESS, b"CALLE MAYOR 1"),
        (FieldTag.BIRTHPLACE_1, b"MADRID"),
        (FieldTag.NATIONALITY, b"ESP"),
        (FieldTag.PARENTAGE, b"JUAN / ANA"),
        (FieldTag.SUPPORT_NUMBER, b"ABC123456"),
        (FieldTag.LEGAL_AGE, b"\x01"),
        (FieldTag.RESIDENCE_PLACE_1, b"MADRID"),
        (FieldTag.BIRTHPLACE_2, b"MADRID"),
        (FieldTag.BIRTHPLACE_3, b"ESPANA"),
        (FieldTag.QR_EXPIRY, b"04-03-2024 13:09:35"),
    ]


@pytest.fixture
def signed_payload(full_fields, issuer_key):
    return build_payload(full_fields, private_key=issuer_key)


@pytest.fixture(scope="session", autouse=True)
def component_loggers():
    """Crea i logger prima di capsys, che chiude il proprio stdout a fine test"""
    for component in ("parser", "signature", "trust_store"):
        QRLogger.for_component(component)


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics_collector()
    yield
    reset_metrics_collector()
