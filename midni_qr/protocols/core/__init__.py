"""
MiDNI QR Core Types and Utilities

This module provides the foundational types, constants, and codec helpers
for the credential payload decoder.

Submodules:
- types: Wire constants and enumerations
- errors: Fatal decoding error taxonomy
- primitives: C40, packed dates, UTC text dates, integers
- crypto: Certificate loading and ECDSA P-256 verification

Author: MiDNI QR Project
Date: October 2026
"""

# Re-export all core functionality for convenience
from .types import (
    # Constants
    MAGIC_BYTE,
    SUPPORTED_VERSION,
    C40_CHARSET,
    SIGNATURE_TAG,
    SIGNATURE_LENGTH,

    # Enums
    VerificationKind,
    AgeStatus,
    FieldTag,
    ExtractionState,
)

from .errors import (
    QRPayloadError,
    UnsupportedFormatError,
    UnsupportedVersionError,
    TruncatedPayloadError,
    InvalidDateError,
    ImageDecodeError,
    InvalidSignatureEncodingError,
)

from .primitives import (
    c40_decode,
    c40_encode,
    hex_to_byte,
    cert_reference_byte_count,
    decode_packed_date,
    decode_packed_date_components,
    encode_packed_date,
    parse_utc_datetime,
    decode_unsigned_be,
)

from .crypto import (
    load_certificate,
    public_key_from_certificate,
    raw_signature_to_der,
    verify_signature_ecdsa_sha256,
)

__all__ = [
    # Constants
    "MAGIC_BYTE",
    "SUPPORTED_VERSION",
    "C40_CHARSET",
    "SIGNATURE_TAG",
    "SIGNATURE_LENGTH",

    # Enums
    "VerificationKind",
    "AgeStatus",
    "FieldTag",
    "ExtractionState",

    # Errors
    "QRPayloadError",
    "UnsupportedFormatError",
    "UnsupportedVersionError",
    "TruncatedPayloadError",
    "InvalidDateError",
    "ImageDecodeError",
    "InvalidSignatureEncodingError",

    # Encoding
    "c40_decode",
    "c40_encode",
    "hex_to_byte",
    "cert_reference_byte_count",
    "decode_packed_date",
    "decode_packed_date_components",
    "encode_packed_date",
    "parse_utc_datetime",
    "decode_unsigned_be",

    # Crypto
    "load_certificate",
    "public_key_from_certificate",
    "raw_signature_to_der",
    "verify_signature_ecdsa_sha256",
]
