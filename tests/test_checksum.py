import pytest

from mediawire.checksum import calc_crc32


def test_empty_data_keeps_register():
    assert calc_crc32(0xFFFFFFFF, b"") == 0xFFFFFFFF
    assert calc_crc32(0, b"") == 0


@pytest.mark.parametrize(
    "byte,expected",
    [
        (0x01, 0xB71DC104),
        (0x02, 0x6E3B8209),
        (0x06, 0xB24D861A),
        (0x80, 0xEEE00C69),
        (0xFF, 0xB440F7B1),
    ],
)
def test_single_byte_matches_table(byte, expected):
    assert calc_crc32(0, bytes([byte])) == expected


def test_mpeg2_check_value():
    assert calc_crc32(0xFFFFFFFF, b"123456789") == 0xE7E67603


def test_incremental_equals_whole():
    a, b = b"program association", b" table section"
    assert calc_crc32(calc_crc32(0xFFFFFFFF, a), b) == calc_crc32(0xFFFFFFFF, a + b)


@pytest.mark.parametrize("data", [b"\x00", b"\x00\xb0\x0d\x00\x01\xc1\x00\x00", bytes(range(200))])
def test_appended_crc_leaves_zero_residue(data):
    crc = calc_crc32(0xFFFFFFFF, data)
    assert calc_crc32(0xFFFFFFFF, data + crc.to_bytes(4, "little")) == 0


def test_result_fits_32_bits():
    assert 0 <= calc_crc32(0xFFFFFFFF, bytes(range(256)) * 3) <= 0xFFFFFFFF