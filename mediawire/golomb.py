"""Bit reader with Exp-Golomb decoding as used in H.264 parameter sets."""

from __future__ import annotations

from typing import BinaryIO

_MAX_LEADING_ZEROS = 32


class GolombBitReader:
    """Reads single bits, fixed-width fields and Exp-Golomb codes."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self._byte = 0
        self._left = 0

    def read_bit(self) -> int:
        """Read one bit; raise EOFError at the end of the stream."""
        if self._left == 0:
            data = self._reader.read(1)
            if not data:
                raise EOFError("golomb reader: unexpected end of stream")
            self._byte = data[0]
            self._left = 8
        self._left -= 1
        return (self._byte >> self._left) & 1

    def read_bits(self, n: int) -> int:
        """Read an ``n``-bit big-endian unsigned field."""
        value = 0
        for _ in range(n):
            value = (value << 1) | self.read_bit()
        return value

    def read_exponential_golomb_code(self) -> int:
        """Read an unsigned Exp-Golomb code, ue(v)."""
        zeros = 0
        while self.read_bit() == 0 and zeros < _MAX_LEADING_ZEROS:
            zeros += 1
        return self.read_bits(zeros) + (1 << zeros) - 1

    def read_se(self) -> int:
        """Read a signed Exp-Golomb code, se(v)."""
        code = self.read_exponential_golomb_code()
        if code & 1:
            return (code + 1) // 2
        return -(code // 2)