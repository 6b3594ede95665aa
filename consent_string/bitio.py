# =========================================================
# Fixed-size bit buffer (MSB-first, random access)
# =========================================================

from datetime import datetime, timedelta, timezone
from typing import Union, overload

from consent_string.errors import InvalidArgumentError, OutOfRangeError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_UINT_WIDTH = 64
SIX_BIT_BASE = ord("A")

class BitBuffer:
    """Byte storage addressed as one big-endian bit string (bit 0 = MSB of byte 0)."""
    __slots__ = ("_buf",)
    @overload
    def __init__(self, data: bytes) -> None: ...
    @overload
    def __init__(self, data: bytearray) -> None: ...
    @overload
    def __init__(self, data: int) -> None: ...
    def __init__(self, data: Union[bytes, bytearray, int]) -> None:
        if isinstance(data, (bytes, bytearray)):
            self._buf = bytearray(data)
        elif isinstance(data, int) and not isinstance(data, bool):
            if data < 0:
                raise ValueError("size must be >= 0")
            self._buf = bytearray(data)
        else:
            raise TypeError("Invalid arguments for BitBuffer constructor")

    @staticmethod
    def from_binary_string(bit_str: str) -> "BitBuffer":
        """Build a buffer from '0'/'1' characters; the last byte is zero padded."""
        if any(c not in "01" for c in bit_str):
            raise InvalidArgumentError("binary string may only contain '0' and '1'")
        bits = BitBuffer((len(bit_str) + 7) // 8)
        for pos, c in enumerate(bit_str):
            if c == "1":
                bits.set_bit(pos)
        return bits

    def to_binary_string(self) -> str:
        return "".join(f"{b:08b}" for b in self._buf)

    @property
    def bit_length(self) -> int:
        return len(self._buf) * 8

    def __len__(self) -> int:
        return len(self._buf)

    def _check_range(self, offset: int, width: int) -> None:
        if offset < 0 or offset + width > self.bit_length:
            raise OutOfRangeError(
                f"bits [{offset}, {offset + width}) outside buffer of {self.bit_length} bits")

    # ---- single bits ----

    def get_bit(self, pos: int) -> bool:
        self._check_range(pos, 1)
        return (self._buf[pos >> 3] >> (7 - (pos & 7))) & 1 == 1

    def set_bit(self, pos: int) -> None:
        self._check_range(pos, 1)
        self._buf[pos >> 3] |= 0x80 >> (pos & 7)

    def clear_bit(self, pos: int) -> None:
        self._check_range(pos, 1)
        self._buf[pos >> 3] &= ~(0x80 >> (pos & 7)) & 0xFF

    # ---- unsigned integers ----

    def get_uint(self, offset: int, width: int) -> int:
        """Read `width` bits starting at `offset` as an unsigned int (MSB first)."""
        if width < 0 or width > MAX_UINT_WIDTH:
            raise ValueError(f"width must be in 0..{MAX_UINT_WIDTH}")
        self._check_range(offset, width)
        v = 0
        for pos in range(offset, offset + width):
            v = (v << 1) | ((self._buf[pos >> 3] >> (7 - (pos & 7))) & 1)
        return v

    def set_uint(self, offset: int, width: int, value: int) -> None:
        """Write the low `width` bits of `value`; higher bits are dropped."""
        if width < 0 or width > MAX_UINT_WIDTH:
            raise ValueError(f"width must be in 0..{MAX_UINT_WIDTH}")
        self._check_range(offset, width)
        v = value & ((1 << width) - 1) if width else 0
        for i in range(width):
            pos = offset + i
            mask = 0x80 >> (pos & 7)
            if (v >> (width - 1 - i)) & 1:
                self._buf[pos >> 3] |= mask
            else:
                self._buf[pos >> 3] &= ~mask & 0xFF

    # ---- domain helpers ----

    def get_timestamp_deciseconds(self, offset: int, width: int) -> datetime:
        deciseconds = self.get_uint(offset, width)
        return EPOCH + timedelta(milliseconds=deciseconds * 100)

    def set_timestamp_deciseconds(self, offset: int, width: int, ts: datetime) -> None:
        # sub-decisecond precision is truncated
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        millis = (ts - EPOCH) // timedelta(milliseconds=1)
        self.set_uint(offset, width, millis // 100)

    def get_six_bit_string(self, offset: int, char_count: int) -> str:
        return "".join(
            chr(SIX_BIT_BASE + self.get_uint(offset + 6 * i, 6)) for i in range(char_count))

    def set_six_bit_string(self, offset: int, char_count: int, s: str) -> None:
        if len(s) != char_count:
            raise InvalidArgumentError(f"expected {char_count} characters, got {s!r}")
        for i, c in enumerate(s):
            if not "A" <= c <= "Z":
                raise InvalidArgumentError(f"character {c!r} is outside A-Z")
            self.set_uint(offset + 6 * i, 6, ord(c) - SIX_BIT_BASE)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def __repr__(self) -> str:
        return f"BitBuffer({self.to_bytes()!r})"
