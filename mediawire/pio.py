"""Big- and little-endian integer packing, and helpers for byte-vector slicing."""

from __future__ import annotations

from collections.abc import Sequence

RECOMMEND_BUFIO_SIZE = 1024 * 64


def _field(b: bytes, offset: int, size: int) -> bytes:
    if offset < 0:
        raise ValueError(f"negative offset {offset}")
    chunk = bytes(b[offset : offset + size])
    if len(chunk) < size:
        raise ValueError(f"need {size} bytes at offset {offset}, have {len(chunk)}")
    return chunk


def _read(b: bytes, offset: int, size: int, order: str = "big", signed: bool = False) -> int:
    return int.from_bytes(_field(b, offset, size), order, signed=signed)


def u8(b: bytes, offset: int = 0) -> int:
    """Read an unsigned byte."""
    return _read(b, offset, 1)


def u16be(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 16-bit big-endian integer."""
    return _read(b, offset, 2)


def i16be(b: bytes, offset: int = 0) -> int:
    """Read a signed 16-bit big-endian integer."""
    return _read(b, offset, 2, signed=True)


def u24be(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 24-bit big-endian integer."""
    return _read(b, offset, 3)


def i24be(b: bytes, offset: int = 0) -> int:
    """Read a signed 24-bit big-endian integer."""
    return _read(b, offset, 3, signed=True)


def u32be(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 32-bit big-endian integer."""
    return _read(b, offset, 4)


def i32be(b: bytes, offset: int = 0) -> int:
    """Read a signed 32-bit big-endian integer."""
    return _read(b, offset, 4, signed=True)


def u32le(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 32-bit little-endian integer."""
    return _read(b, offset, 4, order="little")


def u40be(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 40-bit big-endian integer."""
    return _read(b, offset, 5)


def u64be(b: bytes, offset: int = 0) -> int:
    """Read an unsigned 64-bit big-endian integer."""
    return _read(b, offset, 8)


def i64be(b: bytes, offset: int = 0) -> int:
    """Read a signed 64-bit big-endian integer."""
    return _read(b, offset, 8, signed=True)


def _pack(v: int, size: int, order: str = "big") -> bytes:
    return (v & ((1 << (8 * size)) - 1)).to_bytes(size, order)


def pack_u8(v: int) -> bytes:
    """Pack the low 8 bits of ``v``."""
    return _pack(v, 1)


def pack_u16be(v: int) -> bytes:
    """Pack the low 16 bits of ``v`` big-endian."""
    return _pack(v, 2)


def pack_i16be(v: int) -> bytes:
    """Pack a signed value into 16 bits, big-endian, two's complement."""
    return _pack(v, 2)


def pack_u24be(v: int) -> bytes:
    """Pack the low 24 bits of ``v`` big-endian."""
    return _pack(v, 3)


def pack_i24be(v: int) -> bytes:
    """Pack a signed value into 24 bits, big-endian, two's complement."""
    return _pack(v, 3)


def pack_u32be(v: int) -> bytes:
    """Pack the low 32 bits of ``v`` big-endian."""
    return _pack(v, 4)


def pack_i32be(v: int) -> bytes:
    """Pack a signed value into 32 bits, big-endian, two's complement."""
    return _pack(v, 4)


def pack_u32le(v: int) -> bytes:
    """Pack the low 32 bits of ``v`` little-endian."""
    return _pack(v, 4, order="little")


def pack_u40be(v: int) -> bytes:
    """Pack the low 40 bits of ``v`` big-endian."""
    return _pack(v, 5)


def pack_u48be(v: int) -> bytes:
    """Pack the low 48 bits of ``v`` big-endian."""
    return _pack(v, 6)


def pack_u64be(v: int) -> bytes:
    """Pack the low 64 bits of ``v`` big-endian."""
    return _pack(v, 8)


def pack_i64be(v: int) -> bytes:
    """Pack a signed value into 64 bits, big-endian, two's complement."""
    return _pack(v, 8)


def vec_len(vec: Sequence[bytes]) -> int:
    """Total number of bytes in a vector of byte strings."""
    return sum(len(piece) for piece in vec)


def vec_slice(vec: Sequence[bytes], start: int, end: int = -1) -> list[bytes]:
    """Return the pieces of ``vec`` covering bytes ``start`` to ``end``.

    A negative ``end`` means the end of the vector. Raises ValueError when
    the range is reversed or falls outside the vector.
    """
    total = vec_len(vec)
    start = max(start, 0)
    if 0 <= end < start:
        raise ValueError("vec slice start > end")
    if start > total:
        raise ValueError("vec slice start out of range")
    if end < 0:
        end = total
    elif end > total:
        raise ValueError("vec slice end out of range")

    out: list[bytes] = []
    pos = 0
    for piece in vec:
        lo = max(start, pos)
        hi = min(end, pos + len(piece))
        if lo < hi:
            out.append(bytes(piece[lo - pos : hi - pos]))
        pos += len(piece)
    return out