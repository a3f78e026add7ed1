"""
MiDNI QR Cryptographic Operations

Provides the PKI primitives used by the signature verifier:
- X.509 certificate loading (PEM or DER)
- Public key extraction from the subject public key info
- Raw (r || s) to DER signature conversion
- ECDSA P-256 / SHA-256 verification

Author: MiDNI QR Project
Date: October 2026
"""

from typing import Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from .errors import InvalidSignatureEncodingError
from .types import ECDSA_P256_COORDINATE_SIZE, SIGNATURE_LENGTH


PEM_MARKER = b"-----BEGIN CERTIFICATE-----"


# ============================================================================
# CERTIFICATES AND KEYS
# ============================================================================


def load_certificate(cert_data: Union[bytes, str]) -> x509.Certificate:
    """
    Load an X.509 certificate from PEM or DER bytes.

    Args:
        cert_data: PEM text/bytes or DER bytes

    Returns:
        x509.Certificate: Parsed certificate

    Raises:
        ValueError: If the certificate cannot be parsed
    """
    if isinstance(cert_data, str):
        cert_data = cert_data.encode("ascii")

    if PEM_MARKER in cert_data:
        return x509.load_pem_x509_certificate(cert_data)
    return x509.load_der_x509_certificate(cert_data)


def public_key_from_certificate(cert_data: Union[bytes, str]) -> EllipticCurvePublicKey:
    """
    Extract the NIST P-256 public key from a certificate.

    Raises:
        ValueError: If the certificate is malformed or its key is not P-256
    """
    certificate = load_certificate(cert_data)
    public_key = certificate.public_key()

    if not isinstance(public_key, EllipticCurvePublicKey):
        raise ValueError(f"Certificate key is not an EC key: {type(public_key).__name__}")
    if not isinstance(public_key.curve, ec.SECP256R1):
        raise ValueError(
            f"Only NIST P-256 (SECP256R1) is supported, got {public_key.curve.name}"
        )
    return public_key


# ============================================================================
# ECDSA SIGNATURE VERIFICATION
# ============================================================================


def raw_signature_to_der(signature: bytes) -> bytes:
    """
    Convert a raw r || s signature into the DER form expected by cryptography.

    Raises:
        InvalidSignatureEncodingError: If the signature is not exactly 64 bytes
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureEncodingError(
            f"Invalid signature length: {len(signature)} (expected {SIGNATURE_LENGTH})"
        )

    r = int.from_bytes(signature[:ECDSA_P256_COORDINATE_SIZE], byteorder="big")
    s = int.from_bytes(signature[ECDSA_P256_COORDINATE_SIZE:], byteorder="big")
    return encode_dss_signature(r, s)


def verify_signature_ecdsa_sha256(
    data: bytes,
    signature: bytes,
    public_key: EllipticCurvePublicKey,
) -> bool:
    """
    Verify an ECDSA-SHA256 signature in raw r || s format.

    Args:
        data: Signed message, hashed with SHA-256 by the verifier
        signature: Raw ECDSA signature (64 bytes: r || s)
        public_key: ECDSA public key (NIST P-256)

    Returns:
        bool: True if the signature is valid, False on mismatch

    Raises:
        InvalidSignatureEncodingError: If the signature is not 64 bytes
    """
    der_signature = raw_signature_to_der(signature)

    try:
        public_key.verify(der_signature, bytes(data), ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False
