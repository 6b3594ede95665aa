"""
BitBuffer tests: single bits, unsigned integers, timestamps and six-bit strings.
"""

from datetime import datetime, timedelta, timezone

import pytest

from consent_string.bitio import EPOCH, BitBuffer
from consent_string.errors import InvalidArgumentError, OutOfRangeError


# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    def test_from_size_is_zeroed(self):
        bits = BitBuffer(3)
        assert bits.to_bytes() == b"\x00\x00\x00"
        assert bits.bit_length == 24
        assert len(bits) == 3

    def test_from_bytes_copies(self):
        data = bytearray(b"\xab")
        bits = BitBuffer(data)
        data[0] = 0
        assert bits.to_bytes() == b"\xab"

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            BitBuffer("abc")

    def test_binary_string_is_zero_padded(self):
        bits = BitBuffer.from_binary_string("1010000011")
        assert bits.to_bytes() == bytes([0b10100000, 0b11000000])
        assert bits.to_binary_string() == "1010000011000000"

    def test_binary_string_rejects_other_characters(self):
        with pytest.raises(InvalidArgumentError):
            BitBuffer.from_binary_string("0120")


# =============================================================================
# Single bits
# =============================================================================


class TestBits:
    def test_bit_zero_is_msb(self):
        bits = BitBuffer(2)
        bits.set_bit(0)
        bits.set_bit(15)
        assert bits.to_bytes() == b"\x80\x01"
        assert bits.get_bit(0) is True
        assert bits.get_bit(1) is False
        assert bits.get_bit(15) is True

    def test_set_does_not_touch_neighbours(self):
        bits = BitBuffer(4)
        for pos in range(bits.bit_length):
            bits.set_bit(pos)
            assert bits.get_uint(0, 32) == 1 << (31 - pos)
            bits.clear_bit(pos)

    def test_clear_does_not_touch_neighbours(self):
        bits = BitBuffer(b"\xff\xff")
        bits.clear_bit(9)
        assert bits.to_bytes() == b"\xff\xbf"

    @pytest.mark.parametrize("pos", [-1, 16, 100])
    def test_out_of_range(self, pos):
        bits = BitBuffer(2)
        with pytest.raises(OutOfRangeError):
            bits.get_bit(pos)
        with pytest.raises(OutOfRangeError):
            bits.set_bit(pos)
        with pytest.raises(OutOfRangeError):
            bits.clear_bit(pos)

    def test_out_of_range_is_an_index_error(self):
        with pytest.raises(IndexError):
            BitBuffer(1).get_bit(8)


# =============================================================================
# Unsigned integers
# =============================================================================


class TestUint:
    def test_read_across_byte_boundary(self):
        bits = BitBuffer(b"\x0f\xf0")
        assert bits.get_uint(4, 8) == 0xFF
        assert bits.get_uint(0, 16) == 0x0FF0
        assert bits.get_uint(3, 2) == 0b01

    def test_write_across_byte_boundary(self):
        bits = BitBuffer(3)
        bits.set_uint(6, 12, 0xABC)
        assert bits.get_uint(6, 12) == 0xABC
        assert bits.get_uint(0, 6) == 0
        assert bits.get_uint(18, 6) == 0

    def test_write_overwrites_previous_value(self):
        bits = BitBuffer(b"\xff\xff")
        bits.set_uint(4, 8, 0)
        assert bits.to_bytes() == b"\xf0\x0f"

    def test_overflow_truncates_to_width(self):
        bits = BitBuffer(b"\xff\xff\xff")
        bits.set_uint(4, 8, 0x100)
        assert bits.to_bytes() == b"\xf0\x0f\xff"
        bits.set_uint(4, 8, 0x1AB)
        assert bits.get_uint(4, 8) == 0xAB
        assert bits.get_uint(0, 4) == 0xF
        assert bits.get_uint(12, 12) == 0xFFF

    def test_zero_width(self):
        bits = BitBuffer(1)
        assert bits.get_uint(8, 0) == 0
        bits.set_uint(3, 0, 1)
        assert bits.to_bytes() == b"\x00"

    def test_negative_width(self):
        with pytest.raises(ValueError):
            BitBuffer(1).get_uint(0, -1)

    def test_past_end(self):
        bits = BitBuffer(2)
        with pytest.raises(OutOfRangeError):
            bits.get_uint(10, 7)
        with pytest.raises(OutOfRangeError):
            bits.set_uint(10, 7, 1)


# =============================================================================
# Timestamps
# =============================================================================


class TestTimestamp:
    def test_decisecond_aligned_round_trip(self):
        ts = EPOCH + timedelta(milliseconds=1562488450700)
        bits = BitBuffer(5)
        bits.set_timestamp_deciseconds(0, 36, ts)
        assert bits.get_uint(0, 36) == 15624884507
        assert bits.get_timestamp_deciseconds(0, 36) == ts

    def test_sub_decisecond_precision_is_truncated(self):
        bits = BitBuffer(5)
        bits.set_timestamp_deciseconds(0, 36, EPOCH + timedelta(milliseconds=1562488450789))
        assert bits.get_timestamp_deciseconds(0, 36) == EPOCH + timedelta(milliseconds=1562488450700)

    def test_known_bit_pattern(self):
        bits = BitBuffer.from_binary_string("001110001110110011010000101000000000")
        assert bits.get_timestamp_deciseconds(0, 36) == datetime(2018, 6, 4, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        bits = BitBuffer(5)
        bits.set_timestamp_deciseconds(0, 36, datetime(2018, 6, 4))
        assert bits.get_timestamp_deciseconds(0, 36) == datetime(2018, 6, 4, tzinfo=timezone.utc)

    def test_result_is_timezone_aware(self):
        assert BitBuffer(5).get_timestamp_deciseconds(0, 36).tzinfo is not None


# =============================================================================
# Six-bit strings
# =============================================================================


class TestSixBitString:
    def test_read(self):
        bits = BitBuffer.from_binary_string("000100001101")
        assert bits.get_six_bit_string(0, 2) == "EN"

    def test_write_at_odd_offset(self):
        bits = BitBuffer(3)
        bits.set_six_bit_string(5, 2, "FR")
        assert bits.get_uint(5, 6) == 5
        assert bits.get_uint(11, 6) == 17
        assert bits.get_six_bit_string(5, 2) == "FR"

    def test_alphabet_bounds(self):
        bits = BitBuffer(2)
        bits.set_six_bit_string(0, 2, "AZ")
        assert bits.get_uint(0, 6) == 0
        assert bits.get_uint(6, 6) == 25

    @pytest.mark.parametrize("value", ["en", "E1", "E", "ENG"])
    def test_rejects_invalid_strings(self, value):
        with pytest.raises(InvalidArgumentError):
            BitBuffer(3).set_six_bit_string(0, 2, value)
