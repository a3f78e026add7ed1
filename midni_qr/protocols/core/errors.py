"""
MiDNI QR Error Taxonomy

Structural malformation of the fixed grammar is fatal and raised to the
caller. Everything about signature trust is reported as a boolean outcome:
InvalidSignatureEncodingError never escapes the signature verifier.

Author: MiDNI QR Project
Date: October 2026
"""


class QRPayloadError(ValueError):
    """Base class for fatal payload decoding errors."""


class UnsupportedFormatError(QRPayloadError):
    """First byte is not the 0xDC magic."""


class UnsupportedVersionError(QRPayloadError):
    """Second byte is not a supported format version."""


class TruncatedPayloadError(QRPayloadError):
    """A fixed or TLV read would run past the end of the buffer."""

    def __init__(self, message: str, offset: int = None, needed: int = None, available: int = None):
        super().__init__(message)
        self.offset = offset
        self.needed = needed
        self.available = available


class InvalidDateError(QRPayloadError):
    """A packed or textual date cannot be represented as a calendar date."""


class ImageDecodeError(QRPayloadError):
    """The embedded JPEG2000 photo is missing or cannot be decoded."""


class InvalidSignatureEncodingError(QRPayloadError):
    """Signature bytes are not a 64-byte raw r || s pair."""
