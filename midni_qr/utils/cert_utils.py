"""
Certificate utility functions for trust store handling.

Provides helpers for certificate reference computation and a compact,
serializable description of issuer certificates.

Note on datetimes: only the *_utc accessors of cryptography are used, so
every returned datetime is UTC-aware.
"""

from datetime import datetime, timezone
from typing import Optional

from cryptography import x509


def get_certificate_reference(certificate: x509.Certificate) -> str:
    """
    Certificate reference as printed in the QR header.

    The reference is the issuer certificate serial number in lowercase
    hexadecimal, two digits per byte.

    Args:
        certificate: X.509 certificate

    Returns:
        Lowercase hex string
    """
    serial = certificate.serial_number
    return serial.to_bytes((serial.bit_length() + 7) // 8 or 1, "big").hex()


def is_certificate_valid_at(
    certificate: x509.Certificate, timestamp: Optional[datetime] = None
) -> bool:
    """
    Checks if certificate is valid at a given time.

    Args:
        certificate: X.509 certificate
        timestamp: Time to check (default: current UTC time)

    Returns:
        True if valid, False otherwise
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return certificate.not_valid_before_utc <= timestamp <= certificate.not_valid_after_utc


def describe_certificate(certificate: x509.Certificate) -> dict:
    """Serializable summary used by the API and the inspector tool."""
    return {
        "reference": get_certificate_reference(certificate),
        "subject": certificate.subject.rfc4514_string(),
        "issuer": certificate.issuer.rfc4514_string(),
        "notBefore": certificate.not_valid_before_utc.isoformat(),
        "notAfter": certificate.not_valid_after_utc.isoformat(),
        "currentlyValid": is_certificate_valid_at(certificate),
    }
