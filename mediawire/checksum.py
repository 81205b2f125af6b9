"""CRC-32 of MPEG-2 program-specific information sections."""

from __future__ import annotations

_POLY = 0x04C11DB7


def _build_table() -> tuple[int, ...]:
    # The MSB-first MPEG-2 table, stored byte-swapped so the register can be
    # shifted right and the result written little-endian.
    table = []
    for i in range(256):
        c = i << 24
        for _ in range(8):
            c = ((c << 1) ^ _POLY) if c & 0x80000000 else (c << 1)
            c &= 0xFFFFFFFF
        table.append(int.from_bytes(c.to_bytes(4, "big"), "little"))
    return tuple(table)


_TABLE = _build_table()


def calc_crc32(crc: int, data: bytes) -> int:
    """Continue the CRC ``crc`` over ``data``; write the result little-endian."""
    for byte in data:
        crc = _TABLE[(byte ^ crc) & 0xFF] ^ (crc >> 8)
    return crc