"""Reading and writing integers of arbitrary bit width on byte streams."""

from __future__ import annotations

from typing import BinaryIO

_MAX_BITS = 64


def _check_width(n: int) -> None:
    if not 0 <= n <= _MAX_BITS:
        raise ValueError(f"bit width {n} out of range 0..{_MAX_BITS}")


class BitReader:
    """Reads big-endian bit fields from a binary stream."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self._n = 0
        self._bits = 0

    def read_bits(self, n: int) -> int:
        """Read ``n`` bits (at most 64); raise EOFError if the stream runs short."""
        _check_width(n)
        if self._n < n:
            want = (n - self._n + 7) // 8
            data = self._reader.read(want)
            if len(data) < want:
                raise EOFError("bit reader: unexpected end of stream")
            self._bits = (self._bits << (8 * want)) | int.from_bytes(data, "big")
            self._n += 8 * want
        shift = self._n - n
        value = self._bits >> shift
        self._bits &= (1 << shift) - 1
        self._n = shift
        return value

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes at the current bit position."""
        out = bytearray()
        while len(out) < size:
            want = min(8, size - len(out))
            try:
                value = self.read_bits(want * 8)
            except EOFError:
                break
            out += value.to_bytes(want, "big")
        return bytes(out)


class BitWriter:
    """Writes big-endian bit fields to a binary stream."""

    def __init__(self, writer: BinaryIO) -> None:
        self._writer = writer
        self._n = 0
        self._bits = 0

    def write_bits(self, bits: int, n: int) -> None:
        """Append the low ``n`` bits (at most 64) of ``bits``."""
        _check_width(n)
        self._bits = (self._bits << n) | (bits & ((1 << n) - 1))
        self._n += n
        if self._n > _MAX_BITS:
            shift = self._n - _MAX_BITS
            self._writer.write((self._bits >> shift).to_bytes(8, "big"))
            self._bits &= (1 << shift) - 1
            self._n = shift

    def write(self, data: bytes) -> int:
        """Append whole bytes; return how many were written."""
        for byte in data:
            self.write_bits(byte, 8)
        return len(data)

    def flush_bits(self) -> None:
        """Write pending bits, padding the last byte with zero bits."""
        if self._n > 0:
            pad = -self._n % 8
            nbytes = (self._n + 7) // 8
            self._writer.write((self._bits << pad).to_bytes(nbytes, "big"))
            self._n = 0
            self._bits = 0