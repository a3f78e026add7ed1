"""
MiDNI QR Encoding Utilities

Provides encoding/decoding functions for the compact data formats found in
the credential payload:
- C40 text compaction (3 characters packed into 2 bytes)
- 3-byte packed dates (MMDDYYYY as a 24-bit integer)
- Textual dates "dd-mm-yyyy[ hh:mm:ss]" interpreted as UTC
- Big-endian unsigned integers and hex length bytes

Author: MiDNI QR Project
Date: October 2026
"""

from datetime import date, datetime, timezone
from typing import Optional, Tuple

from .errors import InvalidDateError, QRPayloadError, TruncatedPayloadError
from .types import C40_CHARSET, C40_SPECIAL_THRESHOLD, PACKED_DATE_LENGTH


def require_bytes(data: bytes, offset: int, length: int, what: str = "field") -> None:
    """
    Ensure that data[offset:offset + length] lies inside the buffer.

    Raises:
        TruncatedPayloadError: If the read would exceed the buffer
    """
    if offset < 0 or length < 0 or offset + length > len(data):
        raise TruncatedPayloadError(
            f"Truncated payload reading {what}: need {length} bytes at offset {offset}, "
            f"buffer has {len(data)}",
            offset=offset,
            needed=length,
            available=len(data),
        )


# ============================================================================
# C40 TEXT COMPACTION
# ============================================================================


def _charset_at(index: int) -> str:
    # Fuori dal set -> stringa vuota
    if 0 <= index < len(C40_CHARSET):
        return C40_CHARSET[index]
    return ""


def c40_decode(data: bytes, offset: int = 0, length: Optional[int] = None) -> str:
    """
    Decode a C40-compacted byte range into text.

    Bytes are consumed in 2-byte big-endian groups; a trailing odd byte is
    ignored. Each group value minus one is split into three base-40 digits.
    A zero third digit means "no third character" and is suppressed.

    Groups whose decremented value reaches 0xFE00 use the raw group value as
    a charset index, which in practice falls outside the charset and emits
    nothing. Groups equal to zero emit nothing.

    Args:
        data: Source buffer
        offset: Start of the C40 range
        length: Number of bytes to decode (default: up to end of buffer)

    Returns:
        str: Decoded text

    Raises:
        TruncatedPayloadError: If the range exceeds the buffer
    """
    if length is None:
        length = len(data) - offset
    require_bytes(data, offset, length, "C40 text")

    chunk = data[offset:offset + length]
    result = []

    for pos in range(0, len(chunk) - 1, 2):
        short_value = (chunk[pos] << 8) | chunk[pos + 1]
        value = short_value - 1

        if value < 0:
            continue

        if value >= C40_SPECIAL_THRESHOLD:
            result.append(_charset_at(short_value))
            continue

        result.append(_charset_at(value // 1600))
        result.append(_charset_at((value % 1600) // 40))
        third = value % 40
        if third > 0:
            result.append(_charset_at(third))

    return "".join(result)


def c40_encode(text: str) -> bytes:
    """
    Encode text with the standard C40 scheme.

    Two trailing characters are padded with a zero third digit; a single
    trailing character uses the 0xFE escape (value = ASCII + 1).

    Raises:
        ValueError: If text contains characters outside " 0-9A-Z"
    """
    indices = []
    for ch in text:
        index = C40_CHARSET.find(ch, 3)
        if index < 0:
            raise ValueError(f"Character {ch!r} cannot be C40-encoded")
        indices.append(index)

    out = bytearray()
    full = len(indices) - len(indices) % 3

    for i in range(0, full, 3):
        value = indices[i] * 1600 + indices[i + 1] * 40 + indices[i + 2] + 1
        out += value.to_bytes(2, "big")

    rest = indices[full:]
    if len(rest) == 2:
        value = rest[0] * 1600 + rest[1] * 40 + 1
        out += value.to_bytes(2, "big")
    elif len(rest) == 1:
        out += bytes([0xFE, ord(text[-1]) + 1])

    return bytes(out)


def hex_to_byte(text: str) -> int:
    """Parse a two-character hexadecimal string into a byte value."""
    try:
        value = int(text, 16)
    except ValueError as e:
        raise QRPayloadError(f"Invalid hex byte {text!r}") from e
    if not 0 <= value <= 0xFF:
        raise QRPayloadError(f"Hex value {text!r} does not fit in one byte")
    return value


def cert_reference_byte_count(char_count: int) -> int:
    """
    Number of C40 bytes needed to carry char_count characters.

    C40 packs 3 characters into 2 bytes, so a partial trailing group still
    takes a full 2-byte group.
    """
    return (char_count + 2) // 3 * 2


# ============================================================================
# PACKED DATES
# ============================================================================


def decode_packed_date_components(data: bytes, offset: int) -> Tuple[int, int, int]:
    """
    Split a 3-byte packed date into (year, zero-based month, day).

    The 24-bit big-endian integer holds MMDDYYYY in decimal. No range check
    is applied to month or day.
    """
    require_bytes(data, offset, PACKED_DATE_LENGTH, "packed date")

    value = (data[offset] << 16) | (data[offset + 1] << 8) | data[offset + 2]
    year = value % 10000
    month_index = value // 1000000 - 1
    day = (value // 10000) % 100
    return year, month_index, day


def decode_packed_date(data: bytes, offset: int) -> date:
    """
    Decode a 3-byte packed date.

    Raises:
        InvalidDateError: If the components are rejected by the calendar
            (Python's date does not roll invalid days over)
    """
    year, month_index, day = decode_packed_date_components(data, offset)
    try:
        return date(year, month_index + 1, day)
    except ValueError as e:
        raise InvalidDateError(
            f"Packed date at offset {offset} is not a calendar date "
            f"(year={year}, month={month_index + 1}, day={day})"
        ) from e


def encode_packed_date(value: date) -> bytes:
    """Encode a date as the 3-byte MMDDYYYY integer."""
    packed = value.month * 1000000 + value.day * 10000 + value.year
    return packed.to_bytes(PACKED_DATE_LENGTH, "big")


# ============================================================================
# TEXT DATES AND INTEGERS
# ============================================================================


def parse_utc_datetime(text: str) -> Optional[datetime]:
    """
    Parse "dd-mm-yyyy" or "dd-mm-yyyy hh:mm:ss" as a UTC instant.

    The value is always interpreted as UTC regardless of the host timezone.
    Missing time components default to zero.

    Returns:
        datetime: UTC-aware datetime, or None for an empty value

    Raises:
        InvalidDateError: If the text is not a valid date
    """
    if not text or not text.strip():
        return None

    date_part, _, time_part = text.strip().partition(" ")

    try:
        day, month, year = (int(p) for p in date_part.split("-"))

        time_values = [0, 0, 0]
        if time_part.strip():
            for i, p in enumerate(time_part.strip().split(":")[:3]):
                time_values[i] = int(p)
        hour, minute, second = time_values

        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date value {text!r}") from e


def decode_unsigned_be(data: bytes) -> int:
    """Variable-length big-endian unsigned integer (empty -> 0)."""
    value = 0
    for b in data:
        value = (value << 8) | b
    return value
