"""
MiDNI QR

Decoder and signature verifier for the QR code shown by the Spanish mobile
identity credential (MiDNI).

Usage:
    from midni_qr import DniQrParser

    with DniQrParser().parse(payload) as document:
        print(document.given_name, document.signature_verified)

Author: MiDNI QR Project
Date: October 2026
"""

__version__ = "1.0.0"

from .config import QRParserConfig
from .managers import CertificateStore, TrustStoreManager
from .protocols import (
    AgeStatus,
    DniQrParser,
    ParsedDocument,
    QRPayloadError,
    VerificationKind,
    parse_qr_payload,
)

__all__ = [
    "__version__",
    "QRParserConfig",
    "CertificateStore",
    "TrustStoreManager",
    "AgeStatus",
    "DniQrParser",
    "ParsedDocument",
    "QRPayloadError",
    "VerificationKind",
    "parse_qr_payload",
]
