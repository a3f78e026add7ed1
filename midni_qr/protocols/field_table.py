"""
MiDNI QR Field Table Extractor

Walks the TLV sequence that follows the header:

    tag (1 byte) | length | value

Length encoding:
    0x81 LL      -> length LL (one byte)
    0x82 HH LL   -> length HHLL (two bytes, big-endian)
    any other    -> the byte itself is the length

Tag 0xFF carries the signature and ends the table. Everything before the
0xFF tag byte is the signed region.

Author: MiDNI QR Project
Date: October 2026
"""

from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional

from .core.errors import TruncatedPayloadError
from .core.primitives import decode_unsigned_be
from .core.types import (
    LENGTH_ONE_BYTE,
    LENGTH_TWO_BYTES,
    SIGNATURE_TAG,
    ExtractionState,
    FieldTag,
)


class FieldTable(Mapping):
    """
    Read-only mapping from one-byte tag to raw value.

    Typed accessors take a FieldTag and fall back to an empty value for
    absent tags. Tags outside FieldTag are retained and reported by
    unknown_tags().
    """

    def __init__(self, fields: Optional[Dict[int, bytes]] = None):
        self._fields: Dict[int, bytes] = dict(fields or {})
        if SIGNATURE_TAG in self._fields:
            raise ValueError("Tag 0xFF marks the signature and cannot be stored as a field")

    def __getitem__(self, tag: int) -> bytes:
        return self._fields[tag]

    def __iter__(self) -> Iterator[int]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        tags = ", ".join(f"0x{t:02X}" for t in self._fields)
        return f"FieldTable([{tags}])"

    def raw(self, tag: FieldTag) -> bytes:
        return self._fields.get(int(tag), b"")

    def text(self, tag: FieldTag) -> str:
        """UTF-8 text value, empty string if absent."""
        return self.raw(tag).decode("utf-8", errors="replace")

    def unsigned(self, tag: FieldTag) -> Optional[int]:
        """Big-endian unsigned value, None if absent or empty."""
        value = self.raw(tag)
        if not value:
            return None
        return decode_unsigned_be(value)

    def unknown_tags(self) -> List[int]:
        return [tag for tag in self._fields if not FieldTag.is_known(tag)]


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of a field table walk.

    signed_region and signature are set only when state is
    DONE_WITH_SIGNATURE.
    """

    state: ExtractionState
    fields: FieldTable
    signed_region: Optional[bytes] = None
    signature: Optional[bytes] = None
    signature_offset: Optional[int] = None

    @property
    def has_signature(self) -> bool:
        return self.state is ExtractionState.DONE_WITH_SIGNATURE


@dataclass
class _FieldTableWalker:
    data: bytes
    pos: int
    state: ExtractionState = ExtractionState.SCANNING
    fields: Dict[int, bytes] = field(default_factory=dict)
    signature_offset: Optional[int] = None
    signature: Optional[bytes] = None
    error: Optional[TruncatedPayloadError] = None

    def _take(self, count: int, what: str) -> Optional[bytes]:
        if self.pos + count > len(self.data):
            self.state = ExtractionState.TRUNCATED
            self.error = TruncatedPayloadError(
                f"Truncated payload reading {what}: need {count} bytes at offset {self.pos}, "
                f"buffer has {len(self.data)}",
                offset=self.pos,
                needed=count,
                available=len(self.data),
            )
            return None
        chunk = self.data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def _read_length(self) -> Optional[int]:
        marker = self._take(1, "field length")
        if marker is None:
            return None

        if marker[0] == LENGTH_ONE_BYTE:
            extended = self._take(1, "one-byte extended length")
        elif marker[0] == LENGTH_TWO_BYTES:
            extended = self._take(2, "two-byte extended length")
        else:
            return marker[0]

        if extended is None:
            return None
        return decode_unsigned_be(extended)

    def step(self) -> None:
        """Consume one TLV entry or move to a terminal state."""
        if self.pos >= len(self.data):
            self.state = ExtractionState.DONE_WITHOUT_SIGNATURE
            return

        tag_offset = self.pos
        tag = self.data[tag_offset]
        self.pos += 1

        length = self._read_length()
        if length is None:
            return

        value = self._take(length, f"value of tag 0x{tag:02X}")
        if value is None:
            return

        if tag == SIGNATURE_TAG:
            self.signature_offset = tag_offset
            self.signature = value
            self.state = ExtractionState.DONE_WITH_SIGNATURE
        else:
            self.fields[tag] = value


def extract_field_table(data: bytes, offset: int) -> ExtractionResult:
    """
    Extract the TLV field table starting at offset.

    Args:
        data: Full payload buffer
        offset: Field table start (DocumentHeader.field_table_offset)

    Returns:
        ExtractionResult: Fields plus, when tag 0xFF was found, the signed
        region data[0:tag_offset] and the signature bytes

    Raises:
        TruncatedPayloadError: If any read exceeds the buffer
    """
    walker = _FieldTableWalker(data=data, pos=offset)

    while not walker.state.is_terminal:
        walker.step()

    if walker.state is ExtractionState.TRUNCATED:
        raise walker.error

    if walker.state is ExtractionState.DONE_WITH_SIGNATURE:
        return ExtractionResult(
            state=walker.state,
            fields=FieldTable(walker.fields),
            signed_region=data[:walker.signature_offset],
            signature=walker.signature,
            signature_offset=walker.signature_offset,
        )

    if walker.state is ExtractionState.DONE_WITHOUT_SIGNATURE:
        return ExtractionResult(state=walker.state, fields=FieldTable(walker.fields))

    raise AssertionError(f"Unhandled extraction state: {walker.state}")
