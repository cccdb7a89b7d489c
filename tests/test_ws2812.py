import pytest

from rmkit.ws2812 import (
    Pulse,
    PulseTiming,
    StatusLed,
    Ws2812Strip,
    encode_bytes,
    hsv_to_rgb,
)


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, pulses, timeout_ms):
        self.calls.append((list(pulses), timeout_ms))


def decode(pulses, timing):
    bits = []
    for pulse in pulses:
        if pulse == timing.bit1:
            bits.append(1)
        elif pulse == timing.bit0:
            bits.append(0)
        else:
            raise AssertionError(f"unexpected pulse {pulse}")
    out = bytearray()
    for i in range(0, len(bits), 8):
        value = 0
        for bit in bits[i:i + 8]:
            value = (value << 1) | bit
        out.append(value)
    return bytes(out)


def test_timing_at_one_gigahertz_equals_nanoseconds():
    timing = PulseTiming.from_clock(1_000_000_000)
    assert (timing.t0h, timing.t0l, timing.t1h, timing.t1l) == (350, 1000, 1000, 350)


def test_timing_is_symmetric():
    timing = PulseTiming.from_clock(40_000_000)
    assert timing.t0h == timing.t1l
    assert timing.t0l == timing.t1h
    assert timing.t0h < timing.t0l


def test_timing_rejects_bad_clock():
    with pytest.raises(ValueError):
        PulseTiming.from_clock(0)


def test_bit_pulses():
    timing = PulseTiming.from_clock(1_000_000_000)
    assert timing.bit0 == Pulse(350, 1, 1000, 0)
    assert timing.bit1 == Pulse(1000, 1, 350, 0)


def test_encode_bytes_msb_first():
    timing = PulseTiming.from_clock(40_000_000)
    pulses = encode_bytes(b"\x80", timing)
    assert len(pulses) == 8
    assert pulses[0] == timing.bit1
    assert all(p == timing.bit0 for p in pulses[1:])


def test_encode_bytes_empty():
    assert encode_bytes(b"", PulseTiming.from_clock(40_000_000)) == []


def test_encode_bytes_round_trip():
    timing = PulseTiming.from_clock(40_000_000)
    data = bytes(range(0, 256, 7))
    pulses = encode_bytes(data, timing)
    assert len(pulses) == len(data) * 8
    assert decode(pulses, timing) == data


def test_set_pixel_grb_order():
    strip = Ws2812Strip(2)
    strip.set_pixel(1, 1, 2, 3)
    assert strip.buffer == bytes([0, 0, 0, 2, 1, 3])


def test_set_pixel_masks_to_byte():
    strip = Ws2812Strip(1)
    strip.set_pixel(0, 0x1FF, 0x100, 0x0AB)
    assert strip.buffer == bytes([0x00, 0xFF, 0xAB])


def test_set_pixel_out_of_range():
    strip = Ws2812Strip(3)
    with pytest.raises(IndexError):
        strip.set_pixel(3, 1, 1, 1)


def test_refresh_transmits_encoded_buffer():
    recorder = Recorder()
    strip = Ws2812Strip(2, transmit=recorder)
    strip.set_pixel(0, 10, 20, 30)
    returned = strip.refresh(50)
    assert len(recorder.calls) == 1
    pulses, timeout = recorder.calls[0]
    assert timeout == 50
    assert pulses == returned == strip.encode()
    assert decode(pulses, strip.timing) == strip.buffer


def test_clear_turns_everything_off():
    recorder = Recorder()
    strip = Ws2812Strip(2, transmit=recorder)
    strip.set_pixel(0, 10, 20, 30)
    strip.clear(100)
    assert strip.buffer == bytes(6)
    pulses, timeout = recorder.calls[-1]
    assert timeout == 100
    assert all(p == strip.timing.bit0 for p in pulses)


def test_transmit_failure_propagates():
    def failing(pulses, timeout_ms):
        raise TimeoutError("refresh timed out")

    strip = Ws2812Strip(1, transmit=failing)
    with pytest.raises(TimeoutError):
        strip.refresh(10)


def test_hsv_full_red():
    assert hsv_to_rgb(0, 100, 100) == (255, 0, 0)


def test_hsv_zero_saturation_is_grey():
    r, g, b = hsv_to_rgb(200, 0, 50)
    assert r == g == b


@pytest.mark.parametrize("hue", [0, 45, 130, 250, 359])
def test_hsv_hue_wraps(hue):
    assert hsv_to_rgb(hue + 360, 80, 60) == hsv_to_rgb(hue, 80, 60)


def test_hsv_green_sector():
    r, g, b = hsv_to_rgb(120, 100, 100)
    assert g == hsv_to_rgb(0, 100, 100)[0]
    assert r == b


def test_hsv_zero_value_is_black():
    assert hsv_to_rgb(77, 100, 0) == (0, 0, 0)


def test_hsv_rejects_bad_saturation():
    with pytest.raises(ValueError):
        hsv_to_rgb(0, 101, 50)


def test_status_led_set_rgb():
    recorder = Recorder()
    led = StatusLed(transmit=recorder)
    led.set_rgb(4, 5, 6)
    pulses, timeout = recorder.calls[-1]
    assert timeout == 100
    assert decode(pulses, led.strip.timing) == bytes([5, 4, 6])


def test_status_led_set_hsv_matches_rgb():
    recorder = Recorder()
    led = StatusLed(transmit=recorder)
    led.set_hsv(30, 70, 40)
    expected = hsv_to_rgb(30, 70, 40)
    r, g, b = expected
    assert led.strip.buffer == bytes([g, r, b])


def test_status_led_clear():
    recorder = Recorder()
    led = StatusLed(transmit=recorder)
    led.set_rgb(9, 9, 9)
    led.clear()
    assert led.strip.buffer == bytes(3)
    assert len(recorder.calls) == 2


def test_status_led_disabled_does_nothing():
    recorder = Recorder()
    led = StatusLed(enabled=False, transmit=recorder)
    led.set_rgb(1, 2, 3)
    led.set_hsv(10, 10, 10)
    led.clear()
    assert led.enabled is False
    assert recorder.calls == []