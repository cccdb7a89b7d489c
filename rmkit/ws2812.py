"""WS2812 RGB LED strips: pulse encoding, colour conversion and a status LED."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

T0H_NS = 350
T0L_NS = 1000
T1H_NS = 1000
T1L_NS = 350
RESET_US = 280

COUNTER_CLOCK_HZ = 40_000_000
REFRESH_TIMEOUT_MS = 100
BYTES_PER_LED = 3

_F32_2_55 = struct.unpack("f", struct.pack("f", 2.55))[0]


def _f32(value: float) -> float:
    """Round ``value`` to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


@dataclass(frozen=True)
class Pulse:
    """One transmitted bit: a high phase followed by a low phase, in clock ticks."""

    duration0: int
    level0: int
    duration1: int
    level1: int


@dataclass(frozen=True)
class PulseTiming:
    """Tick counts for the high and low phases of logical 0 and 1 bits."""

    t0h: int
    t0l: int
    t1h: int
    t1l: int

    @classmethod
    def from_clock(cls, counter_clk_hz: int) -> "PulseTiming":
        """Convert the nanosecond timings of the protocol to ticks of the given clock."""
        if counter_clk_hz <= 0:
            raise ValueError("counter clock must be positive")
        ratio = counter_clk_hz / 1e9
        return cls(
            t0h=int(ratio * T0H_NS),
            t0l=int(ratio * T0L_NS),
            t1h=int(ratio * T1H_NS),
            t1l=int(ratio * T1L_NS),
        )

    @property
    def bit0(self) -> Pulse:
        """Pulse for a logical 0."""
        return Pulse(self.t0h, 1, self.t0l, 0)

    @property
    def bit1(self) -> Pulse:
        """Pulse for a logical 1."""
        return Pulse(self.t1h, 1, self.t1l, 0)


def encode_bytes(data: bytes, timing: PulseTiming) -> List[Pulse]:
    """Turn ``data`` into one pulse per bit, most significant bit first."""
    bit0, bit1 = timing.bit0, timing.bit1
    return [
        bit1 if byte & (1 << (7 - i)) else bit0
        for byte in bytes(data)
        for i in range(8)
    ]


def hsv_to_rgb(hue: int, saturation: int, value: int) -> Tuple[int, int, int]:
    """Convert hue (degrees), saturation and value (percent) to red, green, blue."""
    if hue < 0 or saturation < 0 or value < 0:
        raise ValueError("hue, saturation and value must not be negative")
    if saturation > 100:
        raise ValueError("saturation must be at most 100")
    hue %= 360
    rgb_max = int(_f32(_f32(value) * _F32_2_55))
    rgb_min = int(_f32(_f32(rgb_max * (100 - saturation)) / 100.0))

    sector, diff = divmod(hue, 60)
    adj = (rgb_max - rgb_min) * diff // 60

    if sector == 0:
        return rgb_max, rgb_min + adj, rgb_min
    if sector == 1:
        return rgb_max - adj, rgb_max, rgb_min
    if sector == 2:
        return rgb_min, rgb_max, rgb_min + adj
    if sector == 3:
        return rgb_min, rgb_max - adj, rgb_max
    if sector == 4:
        return rgb_min + adj, rgb_min, rgb_max
    return rgb_max, rgb_min, rgb_max - adj


Transmitter = Callable[[Sequence[Pulse], int], None]


class Ws2812Strip:
    """A chain of WS2812 LEDs whose colours are held in memory until refreshed.

    ``transmit`` is called with the encoded pulses and the timeout in
    milliseconds; it may raise (for example TimeoutError) to report failure.
    """

    def __init__(
        self,
        length: int,
        timing: Optional[PulseTiming] = None,
        transmit: Optional[Transmitter] = None,
    ) -> None:
        if length < 0:
            raise ValueError("strip length must not be negative")
        self.length = length
        self.timing = timing if timing is not None else PulseTiming.from_clock(COUNTER_CLOCK_HZ)
        self.transmit = transmit
        self._buffer = bytearray(length * BYTES_PER_LED)

    @property
    def buffer(self) -> bytes:
        """Colour bytes in wire order: green, red, blue for each LED."""
        return bytes(self._buffer)

    def set_pixel(self, index: int, red: int, green: int, blue: int) -> None:
        """Store the colour of one LED; only the low eight bits of each part are kept."""
        if not 0 <= index < self.length:
            raise IndexError("index out of the maximum number of leds")
        start = index * BYTES_PER_LED
        self._buffer[start:start + BYTES_PER_LED] = bytes(
            (green & 0xFF, red & 0xFF, blue & 0xFF)
        )

    def encode(self) -> List[Pulse]:
        """Pulses that carry the stored colours to the strip."""
        return encode_bytes(self._buffer, self.timing)

    def refresh(self, timeout_ms: int = REFRESH_TIMEOUT_MS) -> List[Pulse]:
        """Send the stored colours to the LEDs and return the pulses sent."""
        pulses = self.encode()
        if self.transmit is not None:
            self.transmit(pulses, timeout_ms)
        return pulses

    def clear(self, timeout_ms: int = REFRESH_TIMEOUT_MS) -> List[Pulse]:
        """Turn every LED off."""
        self._buffer[:] = bytes(len(self._buffer))
        return self.refresh(timeout_ms)


class StatusLed:
    """A single WS2812 LED used as a status indicator.

    When ``enabled`` is false every operation does nothing.
    """

    def __init__(
        self,
        strip: Optional[Ws2812Strip] = None,
        enabled: bool = True,
        transmit: Optional[Transmitter] = None,
    ) -> None:
        if not enabled:
            self.strip: Optional[Ws2812Strip] = None
        elif strip is not None:
            self.strip = strip
        else:
            self.strip = Ws2812Strip(1, transmit=transmit)

    @property
    def enabled(self) -> bool:
        """Whether the LED is driven at all."""
        return self.strip is not None

    def set_rgb(self, red: int, green: int, blue: int) -> None:
        """Show the given colour."""
        if self.strip is None:
            return
        self.strip.set_pixel(0, red, green, blue)
        self.strip.refresh(REFRESH_TIMEOUT_MS)

    def set_hsv(self, hue: int, saturation: int, value: int) -> None:
        """Show the colour given as hue, saturation and value."""
        if self.strip is None:
            return
        self.set_rgb(*hsv_to_rgb(hue, saturation, value))

    def clear(self) -> None:
        """Turn the LED off."""
        if self.strip is None:
            return
        self.strip.clear(REFRESH_TIMEOUT_MS)