"""
MiDNI QR Result Mapper

Translates the field table plus header into the public ParsedDocument.

Text fields are UTF-8; date fields are "dd-mm-yyyy[ hh:mm:ss]" read as UTC;
field 0x70 is the legal age flag; field 0x50 is the JPEG2000 photo. Absent or
unknown tags map to empty values, never to an error. A holder date that does
not parse maps to None with a warning.

Author: MiDNI QR Project
Date: October 2026
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .core.errors import ImageDecodeError, InvalidDateError
from .core.primitives import parse_utc_datetime
from .core.types import AgeStatus, FieldTag, VerificationKind
from .field_table import FieldTable
from .header import DocumentHeader
from .photo import DecodedPhoto, Jpeg2000Codec, decode_photo


@dataclass
class ParsedDocument:
    """
    Decoded credential.

    signature_verified is filled in last by the signature verifier. The
    photo display handle must be released by the caller (release() or
    "with parsed:"), also when replacing this result with a new parse.
    """

    header: DocumentHeader
    document_number: str = ""
    given_name: str = ""
    surnames: str = ""
    sex: str = ""
    birth_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    address: str = ""
    residence_place: List[str] = field(default_factory=lambda: ["", "", ""])
    birthplace: List[str] = field(default_factory=lambda: ["", "", ""])
    nationality: str = ""
    parentage: str = ""
    support_number: str = ""
    age_status: AgeStatus = AgeStatus.UNSPECIFIED
    qr_expiry: Optional[datetime] = None
    photo: Optional[DecodedPhoto] = None
    unknown_tags: List[int] = field(default_factory=list)
    signature_verified: bool = False

    @property
    def verification_kind(self) -> Optional[VerificationKind]:
        return self.header.verification_kind

    @property
    def certificate_reference(self) -> str:
        return self.header.certificate_reference

    def release(self) -> None:
        """Release the photo display handle."""
        if self.photo is not None:
            self.photo.release()

    def __enter__(self) -> "ParsedDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def to_dict(self) -> dict:
        """JSON-friendly view; dates as ISO-8601, photo as base64 PNG."""

        def iso(value: Optional[datetime]) -> str:
            return value.isoformat() if value else ""

        return {
            "verificationKind": self.verification_kind.label if self.verification_kind else "",
            "documentNumber": self.document_number,
            "givenName": self.given_name,
            "surnames": self.surnames,
            "sex": self.sex,
            "birthDate": iso(self.birth_date),
            "expiryDate": iso(self.expiry_date),
            "address": self.address,
            "residencePlace": list(self.residence_place),
            "birthplace": list(self.birthplace),
            "nationality": self.nationality,
            "parentage": self.parentage,
            "supportNumber": self.support_number,
            "ageStatus": self.age_status.value,
            "qrExpiry": iso(self.qr_expiry),
            "photo": self.photo.base64 if self.photo else "",
            "photoMimeType": self.photo.mime_type if self.photo else "",
            "certificateReference": self.certificate_reference,
            "signatureVerified": self.signature_verified,
            "unknownTags": [f"0x{t:02X}" for t in self.unknown_tags],
            "header": self.header.to_dict(),
        }


def age_status_from_fields(fields: FieldTable) -> AgeStatus:
    """Field 0x70: 1 -> ADULT, any other value -> MINOR, absent -> UNSPECIFIED."""
    value = fields.unsigned(FieldTag.LEGAL_AGE)
    if value is None:
        return AgeStatus.UNSPECIFIED
    return AgeStatus.ADULT if value == 1 else AgeStatus.MINOR


def text_date(
    fields: FieldTable,
    tag: FieldTag,
    logger: Optional[logging.Logger] = None,
) -> Optional[datetime]:
    """UTC date of a holder text field; None when absent or unparseable."""
    try:
        return parse_utc_datetime(fields.text(tag))
    except InvalidDateError:
        if logger is not None:
            logger.warning(f"Field 0x{int(tag):02X} is not a valid date, left empty")
        return None


def map_text_fields(
    header: DocumentHeader,
    fields: FieldTable,
    logger: Optional[logging.Logger] = None,
) -> ParsedDocument:
    """Map every non-photo attribute."""
    return ParsedDocument(
        header=header,
        document_number=fields.text(FieldTag.DOCUMENT_NUMBER),
        given_name=fields.text(FieldTag.GIVEN_NAME),
        surnames=fields.text(FieldTag.SURNAMES),
        sex=fields.text(FieldTag.SEX),
        birth_date=text_date(fields, FieldTag.BIRTH_DATE, logger),
        expiry_date=text_date(fields, FieldTag.EXPIRY_DATE, logger),
        address=fields.text(FieldTag.ADDRESS),
        residence_place=[
            fields.text(FieldTag.RESIDENCE_PLACE_1),
            fields.text(FieldTag.RESIDENCE_PLACE_2),
            fields.text(FieldTag.RESIDENCE_PLACE_3),
        ],
        birthplace=[
            fields.text(FieldTag.BIRTHPLACE_1),
            fields.text(FieldTag.BIRTHPLACE_2),
            fields.text(FieldTag.BIRTHPLACE_3),
        ],
        nationality=fields.text(FieldTag.NATIONALITY),
        parentage=fields.text(FieldTag.PARENTAGE),
        support_number=fields.text(FieldTag.SUPPORT_NUMBER),
        age_status=age_status_from_fields(fields),
        qr_expiry=text_date(fields, FieldTag.QR_EXPIRY, logger),
        unknown_tags=fields.unknown_tags(),
    )


def map_photo(
    fields: FieldTable,
    require_photo: bool = True,
    codec: Optional[Jpeg2000Codec] = None,
    temp_dir: Optional[Path] = None,
) -> Optional[DecodedPhoto]:
    """
    Decode field 0x50.

    Raises:
        ImageDecodeError: If the photo is required and absent, or undecodable
    """
    jp2 = fields.raw(FieldTag.PHOTO)
    if not jp2:
        if require_photo:
            raise ImageDecodeError("Photo field 0x50 is missing")
        return None
    return decode_photo(jp2, codec=codec, temp_dir=temp_dir)


def map_document(
    header: DocumentHeader,
    fields: FieldTable,
    require_photo: bool = True,
    codec: Optional[Jpeg2000Codec] = None,
    temp_dir: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> ParsedDocument:
    """Build the full ParsedDocument, photo included."""
    document = map_text_fields(header, fields, logger)
    document.photo = map_photo(fields, require_photo=require_photo, codec=codec, temp_dir=temp_dir)
    return document
