"""Data segments for QR Codes: modes, bit buffers and segment factories."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

VERSION_MIN = 1
VERSION_MAX = 40

INT16_MAX = 32767

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
_ALPHANUMERIC_INDEX = {ch: i for i, ch in enumerate(ALPHANUMERIC_CHARSET)}


class Mode(enum.IntEnum):
    """How a segment's data bits are interpreted; the value is the mode indicator."""

    NUMERIC = 0x1
    ALPHANUMERIC = 0x2
    BYTE = 0x4
    KANJI = 0x8
    ECI = 0x7


_CHAR_COUNT_BITS = {
    Mode.NUMERIC: (10, 12, 14),
    Mode.ALPHANUMERIC: (9, 11, 13),
    Mode.BYTE: (8, 16, 16),
    Mode.KANJI: (8, 10, 12),
}


class BitBuffer(list):
    """A growable sequence of bits (0 or 1), most significant bit first."""

    def append_bits(self, value: int, count: int) -> None:
        """Append the low ``count`` bits of ``value``, most significant first."""
        if not 0 <= count <= 16 or value < 0 or value >> count != 0:
            raise ValueError(f"value {value} does not fit in {count} bits")
        self.extend((value >> i) & 1 for i in reversed(range(count)))

    def to_bytes(self) -> bytes:
        """Pack the bits big-endian into bytes, padding the last byte with zeros."""
        out = bytearray((len(self) + 7) // 8)
        for i, bit in enumerate(self):
            out[i >> 3] |= bit << (7 - (i & 7))
        return bytes(out)


@dataclass(frozen=True)
class Segment:
    """A segment of character, binary or control data in a QR Code symbol."""

    mode: Mode
    num_chars: int
    data: tuple = field(default=())

    def __post_init__(self) -> None:
        bits = tuple(self.data)
        if any(b not in (0, 1) for b in bits):
            raise ValueError("segment data must consist of bits")
        if not 0 <= self.num_chars <= INT16_MAX:
            raise ValueError("character count out of range")
        if len(bits) > INT16_MAX:
            raise ValueError("segment data too long")
        object.__setattr__(self, "mode", Mode(self.mode))
        object.__setattr__(self, "data", bits)

    @property
    def bit_length(self) -> int:
        """Number of data bits in this segment."""
        return len(self.data)


def is_numeric(text: str) -> bool:
    """Whether every character of ``text`` is an ASCII digit."""
    return all("0" <= ch <= "9" for ch in text)


def is_alphanumeric(text: str) -> bool:
    """Whether ``text`` can be encoded in alphanumeric mode."""
    return all(ch in _ALPHANUMERIC_INDEX for ch in text)


def calc_segment_bit_length(mode: Mode, num_chars: int) -> int:
    """Number of data bits a segment of ``num_chars`` characters needs in ``mode``.

    Raises ValueError if the count is negative, the result would exceed
    32767 bits, or the mode/count combination is invalid.
    """
    if num_chars < 0:
        raise ValueError("character count must not be negative")
    if num_chars > INT16_MAX:
        raise ValueError("too many characters for a segment")
    mode = Mode(mode)
    if mode is Mode.NUMERIC:
        result = (num_chars * 10 + 2) // 3
    elif mode is Mode.ALPHANUMERIC:
        result = (num_chars * 11 + 1) // 2
    elif mode is Mode.BYTE:
        result = num_chars * 8
    elif mode is Mode.KANJI:
        result = num_chars * 13
    elif num_chars == 0:
        result = 3 * 8
    else:
        raise ValueError("an ECI segment has no characters")
    if result > INT16_MAX:
        raise ValueError("segment would need too many bits")
    return result


def calc_segment_buffer_size(mode: Mode, num_chars: int) -> int:
    """Number of bytes needed to hold the data bits of such a segment."""
    return (calc_segment_bit_length(mode, num_chars) + 7) // 8


def make_bytes(data: bytes) -> Segment:
    """Segment holding ``data`` in byte mode."""
    data = bytes(data)
    calc_segment_bit_length(Mode.BYTE, len(data))
    buf = BitBuffer()
    for byte in data:
        buf.append_bits(byte, 8)
    return Segment(Mode.BYTE, len(data), buf)


def _chunks(text: str, size: int) -> Iterator[str]:
    return (text[i:i + size] for i in range(0, len(text), size))


def make_numeric(digits: str) -> Segment:
    """Segment holding a string of decimal digits in numeric mode."""
    if not is_numeric(digits):
        raise ValueError("string contains non-numeric characters")
    calc_segment_bit_length(Mode.NUMERIC, len(digits))
    buf = BitBuffer()
    for chunk in _chunks(digits, 3):
        buf.append_bits(int(chunk), len(chunk) * 3 + 1)
    return Segment(Mode.NUMERIC, len(digits), buf)


def make_alphanumeric(text: str) -> Segment:
    """Segment holding ``text`` in alphanumeric mode."""
    if not is_alphanumeric(text):
        raise ValueError("string contains characters not encodable in alphanumeric mode")
    calc_segment_bit_length(Mode.ALPHANUMERIC, len(text))
    buf = BitBuffer()
    for chunk in _chunks(text, 2):
        if len(chunk) == 2:
            value = _ALPHANUMERIC_INDEX[chunk[0]] * 45 + _ALPHANUMERIC_INDEX[chunk[1]]
            buf.append_bits(value, 11)
        else:
            buf.append_bits(_ALPHANUMERIC_INDEX[chunk], 6)
    return Segment(Mode.ALPHANUMERIC, len(text), buf)


def make_eci(assign_val: int) -> Segment:
    """Segment holding an Extended Channel Interpretation designator."""
    buf = BitBuffer()
    if assign_val < 0:
        raise ValueError("ECI assignment value must not be negative")
    if assign_val < (1 << 7):
        buf.append_bits(assign_val, 8)
    elif assign_val < (1 << 14):
        buf.append_bits(2, 2)
        buf.append_bits(assign_val, 14)
    elif assign_val < 1_000_000:
        buf.append_bits(6, 3)
        buf.append_bits(assign_val >> 10, 11)
        buf.append_bits(assign_val & 0x3FF, 10)
    else:
        raise ValueError("ECI assignment value out of range")
    return Segment(Mode.ECI, 0, buf)


def char_count_bits(mode: Mode, version: int) -> int:
    """Width of the character count field for ``mode`` at ``version``."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version {version} out of range")
    mode = Mode(mode)
    if mode is Mode.ECI:
        return 0
    return _CHAR_COUNT_BITS[mode][(version + 7) // 17]


def total_bits(segments: Iterable[Segment], version: int) -> Optional[int]:
    """Bits needed to encode ``segments`` at ``version``.

    Returns None if a segment's character count does not fit its count
    field, or if the total exceeds 32767 bits.
    """
    result = 0
    for seg in segments:
        ccbits = char_count_bits(seg.mode, version)
        if seg.num_chars >= (1 << ccbits):
            return None
        result += 4 + ccbits + seg.bit_length
        if result > INT16_MAX:
            return None
    return result


def bits_to_int(bits: Sequence[int]) -> int:
    """Interpret a bit sequence, most significant first, as an integer."""
    value = 0
    for bit in bits:
        value = (value << 1) | bit
    return value