"""Encode text as a QR Code and show it on a text console."""

from __future__ import annotations

import argparse
import enum
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from rmkit.ecc import Ecc
from rmkit.qrcode import DataTooLongError, QrCode, encode_text
from rmkit.segments import VERSION_MIN

BORDER = 2
DEFAULT_MAX_VERSION = 10
DISPLAY_MAX_VERSION = 5

# Each glyph pair draws a 2x2 block of modules. The index holds one bit per
# module: bit 0 top left, bit 1 top right, bit 2 bottom left, bit 3 bottom right.
_GLYPHS = (
    "  ",
    "\u2580 ",
    " \u2580",
    "\u2580\u2580",
    "\u2584 ",
    "\u2588 ",
    "\u2584\u2580",
    "\u2588\u2580",
    " \u2584",
    "\u2580\u2584",
    " \u2588",
    "\u2580\u2588",
    "\u2584\u2584",
    "\u2588\u2584",
    "\u2584\u2588",
    "\u2588\u2588",
)


class EccLevel(enum.IntEnum):
    """Error correction level requested for a console QR Code."""

    LOW = 0
    MED = 1
    QUART = 2
    HIGH = 3


def render_console(qrcode: QrCode) -> str:
    """Draw ``qrcode`` with block characters, two modules per character cell.

    A light border of two modules surrounds the symbol; every line ends with a
    newline and an empty line follows the drawing.
    """
    size = qrcode.size
    lines = []
    for y in range(-BORDER, size + BORDER, 2):
        cells = []
        for x in range(-BORDER, size + BORDER, 2):
            num = (
                int(qrcode.get_module(x, y))
                | int(qrcode.get_module(x + 1, y)) << 1
                | int(qrcode.get_module(x, y + 1)) << 2
                | int(qrcode.get_module(x + 1, y + 1)) << 3
            )
            cells.append(_GLYPHS[num])
        lines.append("".join(cells) + "\n")
    return "".join(lines) + "\n"


def print_console(qrcode: QrCode) -> None:
    """Write ``qrcode`` to standard output."""
    sys.stdout.write(render_console(qrcode))


@dataclass
class QrConfig:
    """Options for generating a QR Code."""

    display_func: Optional[Callable[[QrCode], None]] = print_console
    max_qrcode_version: int = DEFAULT_MAX_VERSION
    qrcode_ecc_level: int = EccLevel.LOW


def _to_ecc(level: int) -> Ecc:
    try:
        return Ecc(int(EccLevel(level)))
    except ValueError:
        return Ecc.LOW


def generate(text: str, config: Optional[QrConfig] = None) -> QrCode:
    """Encode ``text`` and hand the result to the configured display function.

    Raises DataTooLongError if the text does not fit the allowed versions and
    ValueError if no display function is configured.
    """
    if config is None:
        config = QrConfig()
    qrcode = encode_text(
        text,
        _to_ecc(config.qrcode_ecc_level),
        VERSION_MIN,
        config.max_qrcode_version,
        None,
        True,
    )
    if config.display_func is None:
        raise ValueError("no display function configured")
    config.display_func(qrcode)
    return qrcode


def display(text: str) -> QrCode:
    """Encode ``text`` in at most version 5 and print it on the console."""
    return generate(text, QrConfig(max_qrcode_version=DISPLAY_MAX_VERSION))


_ECC_CHOICES = {
    "low": EccLevel.LOW,
    "medium": EccLevel.MED,
    "quartile": EccLevel.QUART,
    "high": EccLevel.HIGH,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the text given on the command line as a QR Code."""
    parser = argparse.ArgumentParser(description="Show text as a QR Code on the console.")
    parser.add_argument("text", help="text to encode")
    parser.add_argument("--ecc", choices=sorted(_ECC_CHOICES), default="low",
                        help="error correction level")
    parser.add_argument("--max-version", type=int, default=DEFAULT_MAX_VERSION,
                        help="largest QR Code version to use (1-40)")
    args = parser.parse_args(argv)
    config = QrConfig(max_qrcode_version=args.max_version,
                      qrcode_ecc_level=_ECC_CHOICES[args.ecc])
    try:
        generate(args.text, config)
    except DataTooLongError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0