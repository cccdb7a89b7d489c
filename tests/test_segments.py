import pytest

from rmkit.segments import (
    ALPHANUMERIC_CHARSET,
    BitBuffer,
    Mode,
    Segment,
    bits_to_int,
    calc_segment_bit_length,
    calc_segment_buffer_size,
    char_count_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_bytes,
    make_eci,
    make_numeric,
    total_bits,
)


def test_is_numeric():
    assert is_numeric("0123456789")
    assert is_numeric("")
    assert not is_numeric("12a")
    assert not is_numeric("\u0663")


def test_is_alphanumeric():
    assert is_alphanumeric(ALPHANUMERIC_CHARSET)
    assert is_alphanumeric("")
    assert not is_alphanumeric("hello")
    assert not is_alphanumeric("A_B")


@pytest.mark.parametrize("value,count", [(0, 0), (1, 1), (5, 3), (0xEC, 8), (0xFFFF, 16), (0x11, 10)])
def test_append_bits_round_trip(value, count):
    buf = BitBuffer()
    buf.append_bits(value, count)
    assert len(buf) == count
    assert bits_to_int(buf) == value


@pytest.mark.parametrize("value,count", [(0, 17), (4, 2), (-1, 4), (1, -1)])
def test_append_bits_rejects_bad_input(value, count):
    with pytest.raises(ValueError):
        BitBuffer().append_bits(value, count)


def test_bitbuffer_to_bytes_pads():
    buf = BitBuffer()
    buf.append_bits(0xEC, 8)
    buf.append_bits(1, 1)
    assert buf.to_bytes() == b"\xec\x80"


def test_make_bytes_round_trip():
    data = b"\x00\x11\xecHello"
    seg = make_bytes(data)
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == len(data)
    assert seg.bit_length == len(data) * 8
    assert BitBuffer(seg.data).to_bytes() == data


def test_make_bytes_empty():
    seg = make_bytes(b"")
    assert seg.bit_length == 0 and seg.num_chars == 0


def test_make_numeric_worked_example():
    seg = make_numeric("01234567")
    assert seg.mode is Mode.NUMERIC
    assert seg.num_chars == 8
    assert "".join(map(str, seg.data)) == "000000110001010110011000011"


@pytest.mark.parametrize("digits", ["", "7", "42", "123", "9876543210", "0" * 31])
def test_make_numeric_length_matches_calc(digits):
    seg = make_numeric(digits)
    assert seg.bit_length == calc_segment_bit_length(Mode.NUMERIC, len(digits))


def test_make_numeric_rejects_non_digits():
    with pytest.raises(ValueError):
        make_numeric("12A")


@pytest.mark.parametrize("text", ["", "A", "AC-42", "HELLO WORLD", "$%*+-./:"])
def test_make_alphanumeric_decodes_back(text):
    seg = make_alphanumeric(text)
    assert seg.bit_length == calc_segment_bit_length(Mode.ALPHANUMERIC, len(text))
    bits = list(seg.data)
    decoded = []
    while len(bits) >= 11:
        value = bits_to_int(bits[:11])
        bits = bits[11:]
        decoded += [ALPHANUMERIC_CHARSET[value // 45], ALPHANUMERIC_CHARSET[value % 45]]
    if bits:
        assert len(bits) == 6
        decoded.append(ALPHANUMERIC_CHARSET[bits_to_int(bits)])
    assert "".join(decoded) == text


def test_make_alphanumeric_rejects_lowercase():
    with pytest.raises(ValueError):
        make_alphanumeric("abc")


def test_make_eci_one_byte():
    seg = make_eci(127)
    assert seg.mode is Mode.ECI and seg.num_chars == 0
    assert seg.bit_length == 8
    assert bits_to_int(seg.data) == 127


def test_make_eci_two_bytes():
    seg = make_eci(128)
    assert seg.bit_length == 16
    assert seg.data[:2] == (1, 0)
    assert bits_to_int(seg.data[2:]) == 128


def test_make_eci_three_bytes():
    seg = make_eci(999999)
    assert seg.bit_length == 24
    assert seg.data[:3] == (1, 1, 0)
    assert bits_to_int(seg.data[3:]) == 999999


@pytest.mark.parametrize("value", [-1, 1000000])
def test_make_eci_out_of_range(value):
    with pytest.raises(ValueError):
        make_eci(value)


def test_calc_bit_length_eci():
    assert calc_segment_bit_length(Mode.ECI, 0) == 3 * 8
    with pytest.raises(ValueError):
        calc_segment_bit_length(Mode.ECI, 1)


def test_calc_bit_length_limits():
    with pytest.raises(ValueError):
        calc_segment_bit_length(Mode.NUMERIC, 32768)
    with pytest.raises(ValueError):
        calc_segment_bit_length(Mode.BYTE, 32767)
    with pytest.raises(ValueError):
        calc_segment_bit_length(Mode.BYTE, -1)
    assert calc_segment_bit_length(Mode.BYTE, 4095) == 4095 * 8


@pytest.mark.parametrize("mode,text", [
    (Mode.NUMERIC, "12345"),
    (Mode.ALPHANUMERIC, "ABC12"),
    (Mode.BYTE, "abcde"),
])
def test_buffer_size_matches_packed_data(mode, text):
    makers = {Mode.NUMERIC: make_numeric, Mode.ALPHANUMERIC: make_alphanumeric,
              Mode.BYTE: lambda t: make_bytes(t.encode())}
    seg = makers[mode](text)
    assert len(BitBuffer(seg.data).to_bytes()) == calc_segment_buffer_size(mode, len(text))


def test_char_count_bits_ranges():
    for mode in (Mode.NUMERIC, Mode.ALPHANUMERIC, Mode.BYTE, Mode.KANJI):
        small = {char_count_bits(mode, v) for v in range(1, 10)}
        medium = {char_count_bits(mode, v) for v in range(10, 27)}
        large = {char_count_bits(mode, v) for v in range(27, 41)}
        assert len(small) == len(medium) == len(large) == 1
        assert small.pop() <= medium.pop() <= large.pop()
    assert char_count_bits(Mode.ECI, 20) == 0


@pytest.mark.parametrize("version", [0, 41])
def test_char_count_bits_bad_version(version):
    with pytest.raises(ValueError):
        char_count_bits(Mode.BYTE, version)


def test_total_bits_additive():
    seg = make_alphanumeric("HELLO")
    assert total_bits([], 1) == 0
    single = total_bits([seg], 1)
    assert single > seg.bit_length
    assert total_bits([seg, seg], 1) == 2 * single


def test_total_bits_count_field_overflow():
    seg = make_numeric("1" * 1024)
    assert total_bits([seg], 1) is None
    assert total_bits([seg], 10) is not None
    assert total_bits([seg], 10) > total_bits([make_numeric("1" * 1023)], 1)


def test_total_bits_total_overflow():
    seg = make_bytes(bytes(2000))
    assert total_bits([seg, seg, seg], 40) is None


def test_segment_validates_bits():
    with pytest.raises(ValueError):
        Segment(Mode.BYTE, 1, (0, 2))
    with pytest.raises(ValueError):
        Segment(Mode.BYTE, -1, ())