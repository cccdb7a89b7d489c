# rmkit

rmkit is a small toolkit with no dependencies. It contains:

- `rmkit.segments`, `rmkit.ecc` and `rmkit.qrcode`: a QR Code (Model 2)
  encoder. It covers versions 1–40, all four error correction levels,
  numeric, alphanumeric, byte, kanji-sized and ECI segments, and automatic
  mask selection.
- `rmkit.console`: draws a QR Code on a text console with Unicode block
  characters, and provides the `rmkit-qr` command.
- `rmkit.ws2812`: helpers for WS2812 RGB LEDs. It turns colour bytes into
  high/low pulse timings, keeps a strip buffer in memory in green-red-blue
  order, and converts HSV to RGB for a single status LED.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Printing a QR Code in the terminal

```
rmkit-qr "HELLO WORLD"
rmkit-qr --ecc high --max-version 5 "HELLO WORLD"
```

`--ecc` takes one of `low`, `medium`, `quartile` or `high`. The default is
`low`. `--max-version` is the largest version allowed and defaults to 10.

The code is printed with a light border two modules wide. Each character cell
holds a 2×2 block of modules.

The command exits with status 1 if the text does not fit, and with status 2 on
any other invalid input, such as a version out of range.

## Encoding from Python

```python
from rmkit.qrcode import encode_text, encode_binary
from rmkit.ecc import Ecc

qr = encode_text("https://example.com", Ecc.LOW, 1, 10, None, True)
print(qr.version, qr.ecl, qr.mask)
print(qr.size)              # side length in modules, 21 to 177
print(qr.get_module(0, 0))  # True for a dark module; out of bounds is False
```

`encode_text` chooses the mode for the text:

- numeric mode if the text is all digits;
- alphanumeric mode if it uses only `0-9`, `A-Z`, space and `$%*+-./:`;
- byte mode otherwise, with the text encoded as UTF-8.

`encode_binary` always uses byte mode.

The arguments after the data are, in order:

- the error correction level;
- the smallest and the largest version allowed;
- the mask, either 0–7 or `None` to pick the mask with the lowest penalty;
- whether the error correction level may be raised when the data still fits
  in the same version.

If the data does not fit in any allowed version, `DataTooLongError` is raised.
It is a subclass of `ValueError`.

To build a code from your own segments, use `encode_segments`:

```python
from rmkit.segments import make_numeric, make_alphanumeric, make_bytes, make_eci
from rmkit.qrcode import encode_segments
from rmkit.ecc import Ecc

segs = [make_alphanumeric("ORDER "), make_numeric("314159")]
qr = encode_segments(segs, Ecc.MEDIUM, 1, 40, None, True)
```

`rmkit.ecc` also exposes the lower-level pieces:

- `reed_solomon_multiply`, `reed_solomon_divisor` and `reed_solomon_remainder`;
- `num_raw_data_modules` and `num_data_codewords`;
- `add_ecc_and_interleave`.

## Console helpers

```python
from rmkit.console import QrConfig, EccLevel, generate, display, render_console

display("HELLO")   # at most version 5, printed to stdout
generate("HELLO", QrConfig(max_qrcode_version=10, qrcode_ecc_level=EccLevel.HIGH))
text = render_console(qr)   # the drawing as a string
```

`generate` encodes the text, passes the `QrCode` to `config.display_func`,
which is `print_console` by default, and returns the code.

## WS2812 LEDs

```python
from rmkit.ws2812 import PulseTiming, Ws2812Strip, StatusLed, hsv_to_rgb

timing = PulseTiming.from_clock(40_000_000)   # 40 MHz counter clock
strip = Ws2812Strip(8, timing)
strip.set_pixel(0, 255, 0, 0)
pulses = strip.encode()                       # one Pulse per bit, MSB first

print(hsv_to_rgb(120, 100, 100))              # (0, 255, 0)
```

`Ws2812Strip.refresh` and `Ws2812Strip.clear` return the pulses. If a
`transmit` callable was given, they also call it with the pulses and the
timeout in milliseconds. `set_pixel` raises `IndexError` for an index outside
the strip.

`StatusLed` drives a strip with a single LED through `set_rgb`, `set_hsv` and
`clear`. If it is created with `enabled=False`, every operation does nothing.

## What rmkit does not do

- It does not talk to LED hardware. Getting the pulses to a real strip is up
  to the `transmit` callable you supply.
- It renders QR Codes only as console text. It does not write image files.