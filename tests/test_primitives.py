"""
Test Suite: Core encoding primitives

- C40 decompaction (zero third digit, odd trailing byte, special branch)
- 3-byte packed dates
- UTC text dates
- Hex length byte and certificate reference byte count
"""

from datetime import date, datetime, timezone

import pytest

from midni_qr.protocols.core import (
    C40_CHARSET,
    InvalidDateError,
    QRPayloadError,
    TruncatedPayloadError,
    c40_decode,
    c40_encode,
    cert_reference_byte_count,
    decode_packed_date,
    decode_packed_date_components,
    decode_unsigned_be,
    encode_packed_date,
    hex_to_byte,
    parse_utc_datetime,
)


class TestC40:
    """Test decompattazione C40"""

    def test_three_characters_per_group(self):
        value = C40_CHARSET.index("E") * 1600 + C40_CHARSET.index("S") * 40 + C40_CHARSET.index("P") + 1
        assert c40_decode(value.to_bytes(2, "big")) == "ESP"

    def test_zero_third_digit_is_suppressed(self):
        # "ES" padded with a zero third digit, not "*"
        value = C40_CHARSET.index("E") * 1600 + C40_CHARSET.index("S") * 40 + 0 + 1
        assert c40_decode(value.to_bytes(2, "big")) == "ES"

    def test_trailing_odd_byte_ignored(self):
        data = c40_encode("ESP") + b"\x41"
        assert c40_decode(data) == "ESP"

    def test_zero_group_emits_nothing(self):
        assert c40_decode(b"\x00\x00" + c40_encode("ABC")) == "ABC"

    def test_special_branch_index_outside_charset(self):
        # value >= 0xFE00 uses the raw group as index: never inside the charset
        assert c40_decode(b"\xFE\x42") == ""
        assert c40_decode(c40_encode("AB") + b"\xFF\xFF") == "AB"

    def test_offset_and_length(self):
        data = b"\x00" + c40_encode("ESPN20") + b"\x99"
        assert c40_decode(data, 1, 4) == "ESPN20"
        assert c40_decode(data, 1, 2) == "ESP"

    def test_range_past_buffer(self):
        with pytest.raises(TruncatedPayloadError):
            c40_decode(c40_encode("ESP"), 0, 4)

    @pytest.mark.parametrize("text", ["ESPN20", "ES", "012345678", "HELLO WORLD1", "4D393EEC9AD3289964D22FB9F744A884"])
    def test_encode_decode(self, text):
        assert c40_decode(c40_encode(text)) == text

    def test_encode_rejects_lowercase(self):
        with pytest.raises(ValueError):
            c40_encode("esp")


class TestPackedDate:
    """Test date compatte su 3 byte (MMDDYYYY)"""

    def test_components_zero_based_month(self):
        data = (3042024).to_bytes(3, "big")
        assert decode_packed_date_components(data, 0) == (2024, 2, 4)

    def test_decode(self):
        data = b"\xAA" + encode_packed_date(date(2024, 3, 4))
        assert decode_packed_date(data, 1) == date(2024, 3, 4)

    def test_encode(self):
        assert encode_packed_date(date(2099, 12, 31)) == (12312099).to_bytes(3, "big")

    def test_invalid_calendar_date(self):
        # 02-30-2024
        data = (2302024).to_bytes(3, "big")
        with pytest.raises(InvalidDateError):
            decode_packed_date(data, 0)

    def test_truncated(self):
        with pytest.raises(TruncatedPayloadError):
            decode_packed_date(b"\x2E\x6B", 0)


class TestTextDates:
    """Test date testuali interpretate come UTC"""

    def test_date_time(self):
        assert parse_utc_datetime("04-03-2024 13:09:35") == datetime(
            2024, 3, 4, 13, 9, 35, tzinfo=timezone.utc
        )

    def test_date_only_defaults_midnight(self):
        parsed = parse_utc_datetime("15-06-1985")
        assert parsed == datetime(1985, 6, 15, tzinfo=timezone.utc)
        assert parsed.utcoffset().total_seconds() == 0

    def test_partial_time(self):
        assert parse_utc_datetime("04-03-2024 13:09") == datetime(
            2024, 3, 4, 13, 9, tzinfo=timezone.utc
        )

    def test_independent_of_host_timezone(self, monkeypatch):
        import time

        if not hasattr(time, "tzset"):
            pytest.skip("tzset not available on this platform")
        monkeypatch.setenv("TZ", "America/New_York")
        time.tzset()
        try:
            assert parse_utc_datetime("04-03-2024 13:09:35").isoformat() == "2024-03-04T13:09:35+00:00"
        finally:
            monkeypatch.undo()
            time.tzset()

    def test_empty(self):
        assert parse_utc_datetime("") is None
        assert parse_utc_datetime("   ") is None

    def test_invalid(self):
        with pytest.raises(InvalidDateError):
            parse_utc_datetime("2024/03/04")


class TestNumbers:
    """Test interi e byte esadecimali"""

    def test_hex_to_byte(self):
        assert hex_to_byte("20") == 0x20
        assert hex_to_byte("ff") == 0xFF

    def test_hex_to_byte_invalid(self):
        with pytest.raises(QRPayloadError):
            hex_to_byte("ZZ")

    @pytest.mark.parametrize("count, expected", [(0x20, 22), (0, 0), (1, 2), (3, 2), (4, 4)])
    def test_cert_reference_byte_count(self, count, expected):
        assert cert_reference_byte_count(count) == expected

    def test_unsigned_be(self):
        assert decode_unsigned_be(b"") == 0
        assert decode_unsigned_be(b"\x01") == 1
        assert decode_unsigned_be(b"\x01\x00") == 256
