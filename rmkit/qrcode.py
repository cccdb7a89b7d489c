"""QR Code symbol construction: version selection, module drawing and masking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from rmkit.ecc import Ecc, add_ecc_and_interleave, num_data_codewords, num_raw_data_modules
from rmkit.segments import (
    VERSION_MAX,
    VERSION_MIN,
    BitBuffer,
    Mode,
    Segment,
    calc_segment_buffer_size,
    char_count_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_bytes,
    make_numeric,
    total_bits,
)

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

_MASK_PATTERNS = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (x // 3 + y // 2) % 2 == 0,
    lambda x, y: x * y % 2 + x * y % 3 == 0,
    lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
)


class DataTooLongError(ValueError):
    """The data does not fit in any version of the allowed range."""


@dataclass(frozen=True)
class QrCode:
    """An immutable square grid of dark (True) and light (False) modules."""

    version: int
    ecl: Ecc
    mask: int
    modules: Tuple[Tuple[bool, ...], ...]

    @property
    def size(self) -> int:
        """Side length in modules, from 21 to 177."""
        return len(self.modules)

    def get_module(self, x: int, y: int) -> bool:
        """Colour at (x, y); coordinates out of bounds are light."""
        size = self.size
        return 0 <= x < size and 0 <= y < size and self.modules[y][x]


def buffer_len_for_version(version: int) -> int:
    """Bytes needed to store any packed symbol up to and including ``version``."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version {version} out of range")
    side = version * 4 + 17
    return (side * side + 7) // 8 + 1


def alignment_pattern_positions(version: int) -> Tuple[int, ...]:
    """Ascending centre coordinates of the alignment patterns for ``version``."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version {version} out of range")
    if version == 1:
        return ()
    num_align = version // 7 + 2
    if version == 32:
        step = 26
    else:
        step = (version * 4 + num_align * 2 + 1) // (num_align * 2 - 2) * 2
    last = version * 4 + 10
    rest = [last - step * i for i in range(num_align - 1)]
    return (6,) + tuple(reversed(rest))


def _get_bit(value: int, index: int) -> bool:
    return (value >> index) & 1 != 0


class _Canvas:
    """Mutable module grid with a record of which modules are function patterns."""

    def __init__(self, version: int) -> None:
        self.version = version
        self.size = version * 4 + 17
        self.modules: List[List[bool]] = [[False] * self.size for _ in range(self.size)]
        self.function: List[List[bool]] = [[False] * self.size for _ in range(self.size)]

    def set_function(self, x: int, y: int, dark: bool) -> None:
        self.modules[y][x] = dark
        self.function[y][x] = True

    def draw_function_patterns(self) -> None:
        size = self.size
        for i in range(size):
            self.set_function(6, i, i % 2 == 0)
            self.set_function(i, 6, i % 2 == 0)

        for cx, cy in ((3, 3), (size - 4, 3), (3, size - 4)):
            for dy in range(-4, 5):
                for dx in range(-4, 5):
                    x, y = cx + dx, cy + dy
                    if 0 <= x < size and 0 <= y < size:
                        self.set_function(x, y, max(abs(dx), abs(dy)) not in (2, 4))

        positions = alignment_pattern_positions(self.version)
        last = len(positions) - 1
        for i, px in enumerate(positions):
            for j, py in enumerate(positions):
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                for dy in range(-2, 3):
                    for dx in range(-2, 3):
                        self.set_function(px + dx, py + dy, max(abs(dx), abs(dy)) != 1)

        self.draw_format_bits(Ecc.LOW, 0)
        self.draw_version()

    def draw_format_bits(self, ecl: Ecc, mask: int) -> None:
        data = Ecc(ecl).format_bits << 3 | mask
        rem = data
        for _ in range(10):
            rem = (rem << 1) ^ ((rem >> 9) * 0x537)
        bits = (data << 10 | rem) ^ 0x5412

        for i in range(6):
            self.set_function(8, i, _get_bit(bits, i))
        self.set_function(8, 7, _get_bit(bits, 6))
        self.set_function(8, 8, _get_bit(bits, 7))
        self.set_function(7, 8, _get_bit(bits, 8))
        for i in range(9, 15):
            self.set_function(14 - i, 8, _get_bit(bits, i))

        size = self.size
        for i in range(8):
            self.set_function(size - 1 - i, 8, _get_bit(bits, i))
        for i in range(8, 15):
            self.set_function(8, size - 15 + i, _get_bit(bits, i))
        self.set_function(8, size - 8, True)

    def draw_version(self) -> None:
        if self.version < 7:
            return
        rem = self.version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = self.version << 12 | rem
        for i in range(6):
            for j in range(3):
                k = self.size - 11 + j
                dark = bits & 1 != 0
                self.set_function(k, i, dark)
                self.set_function(i, k, dark)
                bits >>= 1

    def draw_codewords(self, data: bytes) -> None:
        size = self.size
        total = len(data) * 8
        i = 0
        right = size - 1
        while right >= 1:
            if right == 6:
                right = 5
            upward = ((right + 1) & 2) == 0
            for vert in range(size):
                y = size - 1 - vert if upward else vert
                for x in (right, right - 1):
                    if not self.function[y][x] and i < total:
                        self.modules[y][x] = _get_bit(data[i >> 3], 7 - (i & 7))
                        i += 1
            right -= 2

    def apply_mask(self, mask: int) -> None:
        pattern = _MASK_PATTERNS[mask]
        for y, (row, frow) in enumerate(zip(self.modules, self.function)):
            for x, is_function in enumerate(frow):
                if not is_function and pattern(x, y):
                    row[x] = not row[x]

    def penalty_score(self) -> int:
        size = self.size
        result = sum(_line_penalty(row, size) for row in self.modules)
        result += sum(_line_penalty(col, size) for col in zip(*self.modules))

        for upper, lower in zip(self.modules, self.modules[1:]):
            for x in range(size - 1):
                color = upper[x]
                if color == upper[x + 1] == lower[x] == lower[x + 1]:
                    result += PENALTY_N2

        dark = sum(sum(row) for row in self.modules)
        total = size * size
        k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
        result += k * PENALTY_N4
        return result

    def freeze(self) -> Tuple[Tuple[bool, ...], ...]:
        return tuple(tuple(row) for row in self.modules)


def _add_history(run_length: int, history: List[int]) -> None:
    history.insert(0, run_length)
    history.pop()


def _count_finder_patterns(history: Sequence[int]) -> int:
    n = history[1]
    core = (n > 0 and history[2] == n and history[3] == n * 3
            and history[4] == n and history[5] == n)
    return (int(core and history[0] >= n * 4 and history[6] >= n)
            + int(core and history[6] >= n * 4 and history[0] >= n))


def _line_penalty(line: Iterable[bool], size: int) -> int:
    result = 0
    run_color = False
    run = 0
    history = [0] * 7
    pad = size
    for color in line:
        if color == run_color:
            run += 1
            if run == 5:
                result += PENALTY_N1
            elif run > 5:
                result += 1
        else:
            _add_history(run + pad, history)
            pad = 0
            if not run_color:
                result += _count_finder_patterns(history) * PENALTY_N3
            run_color = color
            run = 1
    length = run + pad
    if run_color:
        _add_history(length, history)
        length = 0
    _add_history(length + size, history)
    result += _count_finder_patterns(history) * PENALTY_N3
    return result


def encode_segments(
    segments: Iterable[Segment],
    ecl: Ecc,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Optional[int] = None,
    boost_ecl: bool = True,
) -> QrCode:
    """Build a QR Code from ``segments`` in the smallest version that fits.

    ``mask`` is 0 to 7 to force a mask pattern, or None to choose the one with
    the lowest penalty. Raises DataTooLongError if nothing in the range fits.
    """
    segments = list(segments)
    ecl = Ecc(ecl)
    if not VERSION_MIN <= min_version <= max_version <= VERSION_MAX:
        raise ValueError("invalid version range")
    if mask is not None and not 0 <= mask <= 7:
        raise ValueError(f"mask {mask} out of range")

    version = min_version
    while True:
        capacity = num_data_codewords(version, ecl) * 8
        used = total_bits(segments, version)
        if used is not None and used <= capacity:
            break
        if version >= max_version:
            raise DataTooLongError("data does not fit in any allowed version")
        version += 1

    if boost_ecl:
        for level in (Ecc.MEDIUM, Ecc.QUARTILE, Ecc.HIGH):
            if used <= num_data_codewords(version, level) * 8:
                ecl = level

    buf = BitBuffer()
    for seg in segments:
        buf.append_bits(int(seg.mode), 4)
        buf.append_bits(seg.num_chars, char_count_bits(seg.mode, version))
        buf.extend(seg.data)

    capacity = num_data_codewords(version, ecl) * 8
    buf.append_bits(0, min(4, capacity - len(buf)))
    buf.append_bits(0, (8 - len(buf) % 8) % 8)
    pad_byte = 0xEC
    while len(buf) < capacity:
        buf.append_bits(pad_byte, 8)
        pad_byte ^= 0xEC ^ 0x11

    codewords = add_ecc_and_interleave(buf.to_bytes(), version, ecl)
    assert len(codewords) == num_raw_data_modules(version) // 8

    canvas = _Canvas(version)
    canvas.draw_function_patterns()
    canvas.draw_codewords(codewords)

    if mask is None:
        min_penalty = None
        for candidate in range(8):
            canvas.apply_mask(candidate)
            canvas.draw_format_bits(ecl, candidate)
            penalty = canvas.penalty_score()
            if min_penalty is None or penalty < min_penalty:
                mask = candidate
                min_penalty = penalty
            canvas.apply_mask(candidate)

    canvas.apply_mask(mask)
    canvas.draw_format_bits(ecl, mask)
    return QrCode(version=version, ecl=ecl, mask=mask, modules=canvas.freeze())


def encode_text(
    text: str,
    ecl: Ecc,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Optional[int] = None,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode ``text`` in numeric, alphanumeric or byte (UTF-8) mode."""
    if not text:
        return encode_segments([], ecl, min_version, max_version, mask, boost_ecl)
    buf_len = buffer_len_for_version(max_version)
    try:
        if is_numeric(text):
            if calc_segment_buffer_size(Mode.NUMERIC, len(text)) > buf_len:
                raise DataTooLongError("text too long")
            seg = make_numeric(text)
        elif is_alphanumeric(text):
            if calc_segment_buffer_size(Mode.ALPHANUMERIC, len(text)) > buf_len:
                raise DataTooLongError("text too long")
            seg = make_alphanumeric(text)
        else:
            data = text.encode("utf-8")
            if len(data) > buf_len:
                raise DataTooLongError("text too long")
            seg = make_bytes(data)
    except DataTooLongError:
        raise
    except ValueError as exc:
        raise DataTooLongError(str(exc)) from exc
    return encode_segments([seg], ecl, min_version, max_version, mask, boost_ecl)


def encode_binary(
    data: bytes,
    ecl: Ecc,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Optional[int] = None,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode arbitrary bytes in byte mode."""
    try:
        seg = make_bytes(data)
    except ValueError as exc:
        raise DataTooLongError(str(exc)) from exc
    return encode_segments([seg], ecl, min_version, max_version, mask, boost_ecl)