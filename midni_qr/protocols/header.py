"""
MiDNI QR Header Decoder

Decodes the fixed-grammar header that precedes the TLV field table:

    0      magic (0xDC)
    1      version (0x03)
    2-3    issuing country           C40, 2 bytes
    4-7    signer id + ref length    C40, 4 bytes -> "ESPN" + "20"
    8..    certificate reference     C40, ceil(len / 3) * 2 bytes
    base   issuance date             packed, 3 bytes
    base+3 signature date            packed, 3 bytes
    base+6 verification kind         0x07 / 0x08 / 0x09
    base+7 document category
    base+8 field table start

Author: MiDNI QR Project
Date: October 2026
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .core.errors import TruncatedPayloadError, UnsupportedFormatError, UnsupportedVersionError
from .core.primitives import (
    c40_decode,
    cert_reference_byte_count,
    decode_packed_date,
    hex_to_byte,
    require_bytes,
)
from .core.types import (
    CERT_REFERENCE_OFFSET,
    COUNTRY_LENGTH,
    COUNTRY_OFFSET,
    MAGIC_BYTE,
    PACKED_DATE_LENGTH,
    SIGNER_LENGTH,
    SIGNER_OFFSET,
    SUPPORTED_VERSION,
    VerificationKind,
)


@dataclass(frozen=True)
class DocumentHeader:
    """Decoded payload header, created once per parse."""

    version: int
    issuing_country: str
    signer_id: str
    certificate_reference: str
    issuance_date: date
    signature_date: date
    verification_kind: Optional[VerificationKind]
    verification_kind_byte: int
    document_category: int
    field_table_offset: int

    @property
    def certificate_key(self) -> str:
        """Trust store lookup key (lowercase reference)."""
        return self.certificate_reference.lower()

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "issuingCountry": self.issuing_country,
            "signerId": self.signer_id,
            "certificateReference": self.certificate_reference,
            "issuanceDate": self.issuance_date.isoformat(),
            "signatureDate": self.signature_date.isoformat(),
            "verificationKind": self.verification_kind.label if self.verification_kind else "",
            "documentCategory": self.document_category,
        }


def decode_header(data: bytes) -> DocumentHeader:
    """
    Decode the payload header.

    Args:
        data: Raw QR payload bytes

    Returns:
        DocumentHeader: Decoded header, including the field table offset

    Raises:
        UnsupportedFormatError: If byte 0 is not 0xDC
        UnsupportedVersionError: If byte 1 is not 0x03
        TruncatedPayloadError: If the header runs past the buffer
        InvalidDateError: If a packed date is not a calendar date
    """
    if not data:
        raise TruncatedPayloadError("Empty payload", offset=0, needed=1, available=0)

    if data[0] != MAGIC_BYTE:
        raise UnsupportedFormatError(
            f"Unrecognized document: magic byte 0x{data[0]:02X} (expected 0x{MAGIC_BYTE:02X})"
        )

    require_bytes(data, 1, 1, "version")
    version = data[1]
    if version != SUPPORTED_VERSION:
        raise UnsupportedVersionError(
            f"Unsupported document version 0x{version:02X} (expected 0x{SUPPORTED_VERSION:02X})"
        )

    issuing_country = c40_decode(data, COUNTRY_OFFSET, COUNTRY_LENGTH)
    signer_block = c40_decode(data, SIGNER_OFFSET, SIGNER_LENGTH)

    # Ultimi 2 caratteri: lunghezza del riferimento del certificato in hex
    ref_char_count = hex_to_byte(signer_block[-2:])
    ref_byte_count = cert_reference_byte_count(ref_char_count)
    signer_id = signer_block[:-2]

    certificate_reference = c40_decode(data, CERT_REFERENCE_OFFSET, ref_byte_count)

    base = CERT_REFERENCE_OFFSET + ref_byte_count
    require_bytes(data, base, 2 * PACKED_DATE_LENGTH + 2, "header dates and flags")

    issuance_date = decode_packed_date(data, base)
    signature_date = decode_packed_date(data, base + PACKED_DATE_LENGTH)

    kind_byte = data[base + 6]
    document_category = data[base + 7]

    return DocumentHeader(
        version=version,
        issuing_country=issuing_country,
        signer_id=signer_id,
        certificate_reference=certificate_reference,
        issuance_date=issuance_date,
        signature_date=signature_date,
        verification_kind=VerificationKind.from_byte(kind_byte),
        verification_kind_byte=kind_byte,
        document_category=document_category,
        field_table_offset=base + 8,
    )
