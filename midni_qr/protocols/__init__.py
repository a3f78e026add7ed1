"""
MiDNI QR Protocol Implementation

Decodes the QR payload shown by the Spanish mobile identity credential
(MiDNI) and verifies its ECDSA P-256 signature.

Module Structure:
- core/: Wire constants, error taxonomy, codec primitives, crypto
- header: Fixed-grammar header decoder
- field_table: TLV field table extractor (state machine)
- photo: JPEG2000 photo decoding and display handle
- mapper: Field table -> ParsedDocument
- signature: Issuer certificate lookup and signature check
- parser: Pipeline orchestration

Author: MiDNI QR Project
Date: October 2026
"""

from .core import (
    VerificationKind,
    AgeStatus,
    FieldTag,
    ExtractionState,
    QRPayloadError,
    UnsupportedFormatError,
    UnsupportedVersionError,
    TruncatedPayloadError,
    InvalidDateError,
    ImageDecodeError,
    InvalidSignatureEncodingError,
)

from .header import DocumentHeader, decode_header
from .field_table import ExtractionResult, FieldTable, extract_field_table
from .photo import DecodedPhoto, Jpeg2000Codec, RenderableImage, decode_photo
from .mapper import ParsedDocument, map_document
from .signature import SignatureVerifier, verify_signature
from .parser import DniQrParser, parse_qr_payload

__all__ = [
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

    # Pipeline stages
    "DocumentHeader",
    "decode_header",
    "ExtractionResult",
    "FieldTable",
    "extract_field_table",
    "DecodedPhoto",
    "Jpeg2000Codec",
    "RenderableImage",
    "decode_photo",
    "ParsedDocument",
    "map_document",
    "SignatureVerifier",
    "verify_signature",

    # Entry points
    "DniQrParser",
    "parse_qr_payload",
]
