"""
Seekable little-endian reader over an in-memory buffer.

Byte reads and bit reads share one position.  Bits are taken MSB-first from
the current byte; any byte-level read first drops the rest of a partially
consumed byte, so a bit field always ends on a byte boundary before the next
integer or string is read.
"""
import struct
import warnings

from .errors import MalformedUtf8, UnexpectedEof

_U16 = struct.Struct('<H')
_I16 = struct.Struct('<h')
_U32 = struct.Struct('<I')
_I32 = struct.Struct('<i')
_U64 = struct.Struct('<Q')
_I64 = struct.Struct('<q')


def decode_text(raw: bytes) -> str:
    """UTF-8 decode that never fails; bad sequences become U+FFFD."""
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        warnings.warn(f'Invalid UTF-8 in {raw!r}', MalformedUtf8, stacklevel=3)
        return raw.decode('utf-8', errors='replace')


class Cursor:
    """Forward reader with absolute/relative position control."""

    __slots__ = ('_d', '_p', '_bit')

    def __init__(self, data: bytes, pos: int = 0):
        self._d = bytes(data)
        self._p = 0
        self._bit = 0
        self.pos = pos

    def __len__(self) -> int:
        return len(self._d)

    @property
    def pos(self) -> int:
        return self._p

    @pos.setter
    def pos(self, value: int):
        if value < 0 or value > len(self._d):
            raise UnexpectedEof(value, 0, len(self._d) - self._p)
        self._p = value
        self._bit = 0

    @property
    def remaining(self) -> int:
        return len(self._d) - self._p

    def _flush_bits(self):
        if self._bit:
            self._p += 1
            self._bit = 0

    def _take(self, n: int) -> bytes:
        self._flush_bits()
        if n < 0 or self._p + n > len(self._d):
            raise UnexpectedEof(self._p, n, len(self._d) - self._p)
        b = self._d[self._p:self._p + n]
        self._p += n
        return b

    def _unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self._take(fmt.size))[0]

    # ── Integers ──────────────────────────────────────────────────────────────

    def u8(self) -> int:
        return self._take(1)[0]

    def i8(self) -> int:
        v = self._take(1)[0]
        return v - 0x100 if v & 0x80 else v

    def u16(self) -> int: return self._unpack(_U16)
    def i16(self) -> int: return self._unpack(_I16)
    def u32(self) -> int: return self._unpack(_U32)
    def i32(self) -> int: return self._unpack(_I32)
    def u64(self) -> int: return self._unpack(_U64)
    def i64(self) -> int: return self._unpack(_I64)

    def peek_u8(self) -> int:
        """Return the next byte without consuming it."""
        p = self._p + (1 if self._bit else 0)
        if p >= len(self._d):
            raise UnexpectedEof(p, 1, 0)
        return self._d[p]

    # ── Spans ─────────────────────────────────────────────────────────────────

    def read(self, n: int) -> bytes:
        return self._take(n)

    def skip(self, n: int):
        self._take(n)

    def cbytes(self) -> bytes:
        """Raw bytes up to (not including) the next 0x00; terminator consumed."""
        self._flush_bits()
        end = self._d.find(b'\x00', self._p)
        if end < 0:
            raise UnexpectedEof(len(self._d), 1, 0)
        b = self._d[self._p:end]
        self._p = end + 1
        return b

    def cstring(self) -> str:
        return decode_text(self.cbytes())

    def string(self, n: int) -> str:
        """Fixed-length text field."""
        return decode_text(self._take(n))

    # ── Bits ──────────────────────────────────────────────────────────────────

    def bit(self) -> bool:
        if self._p >= len(self._d):
            raise UnexpectedEof(self._p, 1, 0)
        v = self._d[self._p] & (0x80 >> self._bit)
        self._bit += 1
        if self._bit > 7:
            self._bit = 0
            self._p += 1
        return v != 0

    def bits(self, n: int) -> int:
        v = 0
        for _ in range(n):
            v = (v << 1) | self.bit()
        return v
