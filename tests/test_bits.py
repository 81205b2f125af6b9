import io

import pytest

from mediawire.bits import BitReader, BitWriter


def test_reader_source_case():
    r = BitReader(io.BytesIO(bytes([0xF3, 0xB3, 0x45, 0x60])))
    assert r.read_bits(4) == 0xF
    assert r.read_bits(4) == 0x3
    assert r.read_bits(2) == 0x2
    assert r.read_bits(2) == 0x3
    assert r.read(2) == bytes([0x34, 0x56])


def test_writer_source_case():
    buf = io.BytesIO()
    w = BitWriter(buf)
    w.write_bits(0xF, 4)
    w.write_bits(0x3, 4)
    w.write_bits(0x2, 2)
    w.write_bits(0x3, 2)
    assert w.write(bytes([0x34, 0x56])) == 2
    w.flush_bits()
    assert buf.getvalue()[:4] == bytes([0xF3, 0xB3, 0x45, 0x60])


def test_reader_raises_eof():
    r = BitReader(io.BytesIO(b"\x01"))
    assert r.read_bits(8) == 1
    with pytest.raises(EOFError):
        r.read_bits(1)


def test_writer_flush_pads_with_zero_bits():
    buf = io.BytesIO()
    w = BitWriter(buf)
    w.write_bits(1, 1)
    w.flush_bits()
    assert buf.getvalue() == b"\x80"


def test_writer_masks_extra_high_bits():
    buf = io.BytesIO()
    w = BitWriter(buf)
    w.write_bits(0xFF, 4)
    w.write_bits(0x0, 4)
    w.flush_bits()
    assert buf.getvalue() == b"\xf0"


def test_width_out_of_range():
    with pytest.raises(ValueError):
        BitReader(io.BytesIO(b"\x00" * 16)).read_bits(65)
    with pytest.raises(ValueError):
        BitWriter(io.BytesIO()).write_bits(0, 65)


def test_round_trip_many_fields_crossing_64_bits():
    fields = [(i * 2654435761 & ((1 << w) - 1), w) for i, w in enumerate([3, 17, 64, 1, 33, 64, 7, 12, 40, 5])]
    buf = io.BytesIO()
    w = BitWriter(buf)
    for value, width in fields:
        w.write_bits(value, width)
    w.flush_bits()
    total = sum(width for _, width in fields)
    assert len(buf.getvalue()) == (total + 7) // 8

    r = BitReader(io.BytesIO(buf.getvalue()))
    assert [r.read_bits(width) for _, width in fields] == [value for value, _ in fields]


def test_write_bytes_then_read_bytes():
    payload = bytes(range(50))
    buf = io.BytesIO()
    w = BitWriter(buf)
    w.write(payload)
    w.flush_bits()
    assert BitReader(io.BytesIO(buf.getvalue())).read(len(payload)) == payload