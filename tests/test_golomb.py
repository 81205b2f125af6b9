import io

import pytest

from mediawire.golomb import GolombBitReader


def _reader(bitstring: str) -> GolombBitReader:
    padded = bitstring + "0" * (-len(bitstring) % 8)
    data = int(padded, 2).to_bytes(len(padded) // 8, "big") if padded else b""
    return GolombBitReader(io.BytesIO(data))


def _ue(k: int) -> str:
    body = bin(k + 1)[2:]
    return "0" * (len(body) - 1) + body


def _se_code(v: int) -> int:
    return 2 * v - 1 if v > 0 else -2 * v


def test_read_bit_sequence():
    r = _reader("10110010")
    assert [r.read_bit() for _ in range(8)] == [1, 0, 1, 1, 0, 0, 1, 0]


def test_read_bits_round_trip():
    values = [0, 1, 4095, 1234, 2048]
    r = _reader("".join(format(v, "012b") for v in values))
    assert [r.read_bits(12) for _ in values] == values


def test_read_bits_zero_width_consumes_nothing():
    r = _reader("1")
    assert r.read_bits(0) == 0
    assert r.read_bit() == 1


def test_ue_single_one_bit_is_zero():
    assert _reader("1").read_exponential_golomb_code() == 0


def test_ue_pinned_values():
    r = _reader("010" + "00100")
    assert r.read_exponential_golomb_code() == 1
    assert r.read_exponential_golomb_code() == 3


def test_ue_round_trip_sequence():
    values = list(range(300)) + [65535, 1 << 20]
    r = _reader("".join(_ue(v) for v in values))
    assert [r.read_exponential_golomb_code() for _ in values] == values


def test_se_pinned_negative():
    assert _reader("011").read_se() == -1


def test_se_round_trip_sequence():
    values = list(range(-100, 101))
    r = _reader("".join(_ue(_se_code(v)) for v in values))
    assert [r.read_se() for _ in values] == values


def test_empty_stream_raises_eof():
    with pytest.raises(EOFError):
        GolombBitReader(io.BytesIO(b"")).read_bit()


def test_truncated_code_raises_eof():
    r = _reader("00000000")
    with pytest.raises(EOFError):
        r.read_exponential_golomb_code()