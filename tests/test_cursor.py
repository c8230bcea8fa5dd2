"""Tests for the byte/bit cursor."""

import struct

import pytest

from w3g.cursor import Cursor
from w3g.errors import MalformedUtf8, UnexpectedEof


class TestIntegers:
    """Fixed-width little-endian reads."""

    def test_unsigned(self):
        """Test u8/u16/u32/u64 in sequence."""
        data = b"\x01" + struct.pack("<HIQ", 0x1234, 0xDEADBEEF, 2**40 + 5)
        cur = Cursor(data)
        assert cur.u8() == 1
        assert cur.u16() == 0x1234
        assert cur.u32() == 0xDEADBEEF
        assert cur.u64() == 2**40 + 5
        assert cur.remaining == 0

    def test_signed(self):
        """Test negative values for every signed width."""
        data = struct.pack("<bhiq", -1, -2, -3, -4)
        cur = Cursor(data)
        assert cur.i8() == -1
        assert cur.i16() == -2
        assert cur.i32() == -3
        assert cur.i64() == -4


class TestPosition:
    """Absolute and relative position control."""

    def test_seek_and_rewind(self):
        """Test setting pos backwards re-reads the same byte."""
        cur = Cursor(b"\x16\x19")
        assert cur.u8() == 0x16
        cur.pos -= 1
        assert cur.u8() == 0x16
        assert cur.pos == 1
        assert len(cur) == 2

    def test_start_offset(self):
        """Test constructing a cursor part way into a buffer."""
        cur = Cursor(b"\x00\x00\x07", 2)
        assert cur.u8() == 7

    def test_seek_past_end(self):
        """Test seeking outside the buffer is an EOF condition."""
        cur = Cursor(b"\x00")
        with pytest.raises(UnexpectedEof):
            cur.pos = 5

    def test_peek_does_not_consume(self):
        """Test the lookahead leaves the cursor in place."""
        cur = Cursor(b"\x19\x00")
        assert cur.peek_u8() == 0x19
        assert cur.pos == 0


class TestEof:
    """Reads beyond the buffer end."""

    def test_short_integer(self):
        """Test a u16 split across the end fails without moving."""
        cur = Cursor(b"\x01")
        with pytest.raises(UnexpectedEof) as exc:
            cur.u16()
        assert exc.value.offset == 0
        assert exc.value.wanted == 2
        assert cur.pos == 0

    def test_skip_past_end(self):
        """Test skipping more than remains."""
        with pytest.raises(UnexpectedEof):
            Cursor(b"abc").skip(4)

    def test_unterminated_string(self):
        """Test a zero-terminated read with no terminator."""
        with pytest.raises(UnexpectedEof):
            Cursor(b"abc").cstring()

    def test_eof_is_value_error(self):
        """Test callers can treat decode errors as ValueError."""
        with pytest.raises(ValueError):
            Cursor(b"").u8()


class TestStrings:
    """Zero-terminated and fixed-length text."""

    def test_cstring(self):
        """Test terminator is consumed but not returned."""
        cur = Cursor(b"Maps\\a.w3x\x00Bob\x00")
        assert cur.cstring() == "Maps\\a.w3x"
        assert cur.cstring() == "Bob"
        assert cur.remaining == 0

    def test_empty_cstring(self):
        cur = Cursor(b"\x00x")
        assert cur.cstring() == ""
        assert cur.pos == 1

    def test_lossy_utf8(self):
        """Test invalid UTF-8 is replaced, not fatal."""
        cur = Cursor(b"ab\xffc\x00rest")
        with pytest.warns(MalformedUtf8):
            assert cur.cstring() == "ab\ufffdc"
        assert cur.pos == 5

    def test_fixed_length(self):
        cur = Cursor("Ñame".encode() + b"x")
        assert cur.string(5) == "Ñame"
        assert cur.u8() == ord("x")

    def test_cbytes(self):
        """Test raw zero-terminated bytes are returned undecoded."""
        cur = Cursor(b"\x01\xff\x80\x00\x02")
        assert cur.cbytes() == b"\x01\xff\x80"
        assert cur.u8() == 2


class TestBits:
    """MSB-first bit reads."""

    def test_msb_first(self):
        """Test bits come from the high end of the byte."""
        cur = Cursor(b"\xa0\xff")
        assert cur.bit() is True
        assert cur.bit() is False
        assert cur.bits(2) == 0b10
        assert cur.pos == 0

    def test_byte_read_flushes_partial_byte(self):
        """Test a byte read after a partial bit read starts at the next byte."""
        cur = Cursor(b"\xa0\xff")
        cur.bits(3)
        assert cur.u8() == 0xFF

    def test_bits_across_boundary(self):
        """Test a bit group spanning two bytes."""
        cur = Cursor(b"\x01\x80")
        cur.bits(7)
        assert cur.bits(2) == 0b11
        assert cur.pos == 1

    def test_full_byte_of_bits(self):
        """Test eight single bits land exactly on the next byte."""
        cur = Cursor(b"\xff\x42")
        assert cur.bits(8) == 0xFF
        assert cur.pos == 1
        assert cur.u8() == 0x42
