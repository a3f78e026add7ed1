"""
MiDNI QR Core Types and Constants

Defines the wire constants, enumerations and tag identifiers used throughout
the decoder for the QR code printed by the Spanish DNI mobile credential.

Payload layout (all offsets from byte 0):
- 0x00: magic byte (0xDC)
- 0x01: format version (0x03)
- 0x02: issuing country (C40, 2 bytes)
- 0x04: signer identity + certificate reference length (C40, 4 bytes)
- 0x08: certificate reference (C40, variable)
- then: issuance date, signature date, verification kind, document category
- then: TLV field table terminated by the 0xFF signature field

Author: MiDNI QR Project
Date: October 2026
"""

from enum import Enum, IntEnum


# ============================================================================
# WIRE CONSTANTS
# ============================================================================

MAGIC_BYTE = 0xDC
SUPPORTED_VERSION = 0x03

# Indici 0-2 sono segnaposto (shift), mai emessi da dati reali
C40_CHARSET = "*** 0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# C40 special branch threshold (applied to group value - 1)
C40_SPECIAL_THRESHOLD = 0xFE00

# Header field sizes
COUNTRY_OFFSET = 2
COUNTRY_LENGTH = 2
SIGNER_OFFSET = 4
SIGNER_LENGTH = 4
CERT_REFERENCE_OFFSET = 8
PACKED_DATE_LENGTH = 3

# TLV length markers
LENGTH_ONE_BYTE = 0x81
LENGTH_TWO_BYTES = 0x82

SIGNATURE_TAG = 0xFF

# ECDSA P-256 raw signature: r (32 bytes) || s (32 bytes)
ECDSA_P256_COORDINATE_SIZE = 32
SIGNATURE_LENGTH = 2 * ECDSA_P256_COORDINATE_SIZE


# ============================================================================
# ENUMERATIONS
# ============================================================================


class VerificationKind(Enum):
    """
    Verification type declared in the header.

    The byte after the two packed dates selects how much of the holder's data
    the credential discloses.
    """

    SIMPLE = 0x07
    FULL = 0x08
    AGE_ONLY = 0x09

    @classmethod
    def from_byte(cls, value: int):
        """Return the matching kind, or None for any undeclared byte."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return _VERIFICATION_LABELS[self]


_VERIFICATION_LABELS = {
    VerificationKind.SIMPLE: "SIMPLE",
    VerificationKind.FULL: "COMPLETO",
    VerificationKind.AGE_ONLY: "EDAD",
}


class AgeStatus(Enum):
    """Legal age flag carried by field 0x70."""

    ADULT = "MAYOR_EDAD"
    MINOR = "MENOR_18"
    UNSPECIFIED = ""


class FieldTag(IntEnum):
    """
    Known field table tags.

    Tags outside this enumeration are kept in the field table but never
    mapped to a holder attribute.
    """

    DOCUMENT_NUMBER = 0x40
    BIRTH_DATE = 0x42
    GIVEN_NAME = 0x44
    SURNAMES = 0x46
    SEX = 0x48
    EXPIRY_DATE = 0x4C
    PHOTO = 0x50
    ADDRESS = 0x60
    BIRTHPLACE_1 = 0x62
    NATIONALITY = 0x64
    PARENTAGE = 0x66
    SUPPORT_NUMBER = 0x68
    LEGAL_AGE = 0x70
    RESIDENCE_PLACE_1 = 0x72
    RESIDENCE_PLACE_2 = 0x74
    RESIDENCE_PLACE_3 = 0x76
    BIRTHPLACE_2 = 0x78
    BIRTHPLACE_3 = 0x7A
    QR_EXPIRY = 0x80
    SIGNATURE = SIGNATURE_TAG

    @classmethod
    def is_known(cls, tag: int) -> bool:
        return tag in cls._value2member_map_


class ExtractionState(Enum):
    """
    States of the field table walker.

    SCANNING is the only non-terminal state. TRUNCATED is terminal and is
    surfaced to the caller as TruncatedPayloadError.
    """

    SCANNING = "scanning"
    DONE_WITH_SIGNATURE = "done_with_signature"
    DONE_WITHOUT_SIGNATURE = "done_without_signature"
    TRUNCATED = "truncated"

    @property
    def is_terminal(self) -> bool:
        return self is not ExtractionState.SCANNING
