"""MPEG transport stream packets, PSI tables (PAT/PMT) and PES headers.

Times are integer nanoseconds throughout.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO

from .checksum import calc_crc32
from .pio import (
    pack_u16be,
    pack_u32le,
    pack_u40be,
    pack_u48be,
    u16be,
    u40be,
    vec_len,
    vec_slice,
)

SECOND = 1_000_000_000

STREAM_ID_H264 = 0xE0
STREAM_ID_AAC = 0xC0

PAT_PID = 0
PMT_PID = 0x1000

TABLE_ID_PMT = 2
TABLE_EXT_PMT = 1
TABLE_ID_PAT = 0
TABLE_EXT_PAT = 1

MAX_PES_HEADER_LENGTH = 19
MAX_TS_HEADER_LENGTH = 12
PSI_HEADER_LENGTH = 9

ELEMENTARY_STREAM_TYPE_H264 = 0x1B
ELEMENTARY_STREAM_TYPE_ADTS_AAC = 0x0F

PTS_HZ = 90000
PCR_HZ = 27000000

TS_PACKET_SIZE = 188
SYNC_BYTE = 0x47

_PTS_FLAG = 1 << 7
_DTS_FLAG = 1 << 6


class TSError(ValueError):
    """Malformed transport stream data."""


@dataclass
class PATEntry:
    """One program of a program association table."""

    program_number: int
    network_pid: int = 0
    program_map_pid: int = 0


@dataclass
class PAT:
    """Program association table."""

    entries: list[PATEntry] = field(default_factory=list)

    def length(self) -> int:
        """Size in bytes of the marshalled table."""
        return len(self.entries) * 4

    def marshal(self) -> bytes:
        """Encode the table body."""
        out = bytearray()
        for entry in self.entries:
            out += pack_u16be(entry.program_number)
            pid = entry.network_pid if entry.program_number == 0 else entry.program_map_pid
            out += pack_u16be((pid & 0x1FFF) | 7 << 13)
        return bytes(out)

    @classmethod
    def unmarshal(cls, b: bytes) -> PAT:
        """Decode a table body; raise TSError on trailing bytes."""
        entries: list[PATEntry] = []
        n = 0
        while n + 4 <= len(b):
            program = u16be(b, n)
            pid = u16be(b, n + 2) & 0x1FFF
            if program == 0:
                entries.append(PATEntry(program, network_pid=pid))
            else:
                entries.append(PATEntry(program, program_map_pid=pid))
            n += 4
        if n < len(b):
            raise TSError("invalid PAT")
        return cls(entries)


@dataclass
class Descriptor:
    """A tagged descriptor of a PMT."""

    tag: int
    data: bytes = b""


@dataclass
class ElementaryStreamInfo:
    """One elementary stream listed in a PMT."""

    stream_type: int
    elementary_pid: int
    descriptors: list[Descriptor] = field(default_factory=list)


def _descs_length(descs: Sequence[Descriptor]) -> int:
    return sum(2 + len(desc.data) for desc in descs)


def _marshal_descs(descs: Sequence[Descriptor]) -> bytes:
    out = bytearray()
    for desc in descs:
        if len(desc.data) > 0xFF:
            raise ValueError(f"descriptor data too long: {len(desc.data)} bytes")
        out.append(desc.tag & 0xFF)
        out.append(len(desc.data))
        out += desc.data
    return bytes(out)


def _desc_block(descs: Sequence[Descriptor], reserved: int) -> bytes:
    body = _marshal_descs(descs)
    if len(body) > 0x3FF:
        raise ValueError(f"descriptor loop too long: {len(body)} bytes")
    return pack_u16be(len(body) | reserved) + body


def _parse_descs(b: bytes) -> list[Descriptor]:
    descs: list[Descriptor] = []
    n = 0
    while n + 2 <= len(b):
        tag, size = b[n], b[n + 1]
        n += 2
        if n + size > len(b):
            raise TSError("invalid PMT")
        descs.append(Descriptor(tag, bytes(b[n : n + size])))
        n += size
    if n < len(b):
        raise TSError("invalid PMT")
    return descs


@dataclass
class PMT:
    """Program map table."""

    pcr_pid: int = 0
    program_descriptors: list[Descriptor] = field(default_factory=list)
    elementary_stream_infos: list[ElementaryStreamInfo] = field(default_factory=list)

    def length(self) -> int:
        """Size in bytes of the marshalled table."""
        n = 4 + _descs_length(self.program_descriptors)
        for info in self.elementary_stream_infos:
            n += 5 + _descs_length(info.descriptors)
        return n

    def marshal(self) -> bytes:
        """Encode the table body."""
        out = bytearray(pack_u16be((self.pcr_pid & 0x1FFF) | 7 << 13))
        out += _desc_block(self.program_descriptors, 0xF000)
        for info in self.elementary_stream_infos:
            out.append(info.stream_type & 0xFF)
            out += pack_u16be((info.elementary_pid & 0x1FFF) | 7 << 13)
            out += _desc_block(info.descriptors, 0x3C << 10)
        return bytes(out)

    @classmethod
    def unmarshal(cls, b: bytes) -> PMT:
        """Decode a table body; raise TSError when it is malformed."""
        if len(b) < 4:
            raise TSError("invalid PMT")
        pmt = cls(pcr_pid=u16be(b, 0) & 0x1FFF)
        desclen = u16be(b, 2) & 0x3FF
        n = 4
        if desclen > 0:
            if len(b) < n + desclen:
                raise TSError("invalid PMT")
            pmt.program_descriptors = _parse_descs(b[n : n + desclen])
            n += desclen

        while n < len(b):
            if len(b) < n + 5:
                raise TSError("invalid PMT")
            info = ElementaryStreamInfo(
                stream_type=b[n], elementary_pid=u16be(b, n + 1) & 0x1FFF
            )
            desclen = u16be(b, n + 3) & 0x3FF
            n += 5
            if desclen > 0:
                if len(b) < n + desclen:
                    raise TSError("invalid PMT")
                info.descriptors = _parse_descs(b[n : n + desclen])
                n += desclen
            pmt.elementary_stream_infos.append(info)
        return pmt


@dataclass(frozen=True)
class PSIHeader:
    """Fields of a PSI section header."""

    tableid: int
    tableext: int
    hdrlen: int
    datalen: int


def parse_psi(h: bytes) -> PSIHeader:
    """Parse the pointer field and section header at the start of a PSI payload."""
    if len(h) < 8:
        raise TSError("invalid PSI header")
    hdrlen = 1 + h[0]
    if len(h) < hdrlen + 12:
        raise TSError("invalid PSI header")
    tableid = h[hdrlen]
    hdrlen += 1
    datalen = (u16be(h, hdrlen) & 0x3FF) - 9
    hdrlen += 2
    if datalen < 0:
        raise TSError("invalid PSI header")
    tableext = u16be(h, hdrlen)
    hdrlen += 2
    # version/current_next, section_number, last_section_number
    hdrlen += 3
    return PSIHeader(tableid, tableext, hdrlen, datalen)


def fill_psi(tableid: int, tableext: int, data: bytes) -> bytes:
    """Build a complete PSI section: pointer, header, ``data`` and CRC."""
    section = bytearray((0, tableid & 0xFF))
    section += pack_u16be((0xA << 12) + 2 + 3 + 4 + len(data))
    section += pack_u16be(tableext)
    section += bytes((0x3 << 6 | 1, 0, 0))
    section += data
    section += pack_u32le(calc_crc32(0xFFFFFFFF, bytes(section[1:])))
    return bytes(section)


def time_to_pcr(tm: int) -> int:
    """Encode a non-negative time as a 48-bit program clock reference."""
    ts = tm * PCR_HZ // SECOND
    base, ext = divmod(ts, 300)
    return base << 15 | 0x3F << 9 | ext


def pcr_to_time(pcr: int) -> int:
    """Decode a program clock reference to nanoseconds."""
    ts = (pcr >> 15) * 300 + (pcr & 0x1FF)
    return ts * SECOND // PCR_HZ


def time_to_ts(tm: int) -> int:
    """Encode a time as a 33-bit PTS/DTS field with marker bits."""
    ts = tm * PTS_HZ // SECOND
    return (
        ((ts >> 30) & 0x7) << 33
        | ((ts >> 15) & 0x7FFF) << 17
        | (ts & 0x7FFF) << 1
        | 0x100010001
    )


def ts_to_time(v: int) -> int:
    """Decode a PTS/DTS field to nanoseconds."""
    ts = ((v >> 33) & 0x7) << 30 | ((v >> 17) & 0x7FFF) << 15 | ((v >> 1) & 0x7FFF)
    return ts * SECOND // PTS_HZ


@dataclass(frozen=True)
class PESHeader:
    """Fields of a PES packet header."""

    hdrlen: int
    streamid: int
    datalen: int
    pts: int
    dts: int


def parse_pes_header(h: bytes) -> PESHeader:
    """Parse a PES header; ``datalen`` is 0 when the packet length is unbounded."""
    if len(h) < 9 or h[0] != 0 or h[1] != 0 or h[2] != 1:
        raise TSError("invalid PES header")
    streamid = h[3]
    flags = h[7]
    hdrlen = h[8] + 9
    datalen = u16be(h, 4)
    if datalen > 0:
        datalen -= h[8] + 3

    pts = dts = 0
    if flags & _PTS_FLAG:
        if len(h) < 14:
            raise TSError("invalid PES header")
        pts = ts_to_time(u40be(h, 9))
        if flags & _DTS_FLAG:
            if len(h) < 19:
                raise TSError("invalid PES header")
            dts = ts_to_time(u40be(h, 14))
    return PESHeader(hdrlen, streamid, datalen, pts, dts)


def fill_pes_header(streamid: int, datalen: int, pts: int, dts: int) -> bytes:
    """Build a PES header; a negative ``datalen`` leaves the length unbounded."""
    flags = 0
    if pts:
        flags |= _PTS_FLAG
        if dts:
            flags |= _DTS_FLAG
    n = (5 if flags & _PTS_FLAG else 0) + (5 if flags & _DTS_FLAG else 0)
    pktlen = (datalen + n + 3) & 0xFFFF if datalen >= 0 else 0

    out = bytearray((0, 0, 1, streamid & 0xFF))
    out += pack_u16be(pktlen)
    out += bytes((2 << 6 | 1, flags, n))
    if flags & _PTS_FLAG:
        if flags & _DTS_FLAG:
            out += pack_u40be(time_to_ts(pts) | 3 << 36)
            out += pack_u40be(time_to_ts(dts) | 1 << 36)
        else:
            out += pack_u40be(time_to_ts(pts) | 2 << 36)
    return bytes(out)


class TSWriter:
    """Splits payloads into 188-byte transport stream packets for one PID."""

    def __init__(self, pid: int) -> None:
        self.pid = pid & 0x1FFF
        self.continuity_counter = 0

    def write_packets(
        self,
        w: BinaryIO,
        datav: Sequence[bytes],
        pcr: int = 0,
        sync: bool = False,
        paddata: bool = False,
    ) -> None:
        """Write ``datav`` as consecutive TS packets to ``w``.

        The first packet carries the payload-start flag, the PCR when ``pcr``
        is non-zero and the random-access flag when ``sync`` is set. The last
        packet is filled with trailing 0xff bytes when ``paddata`` is set and
        with adaptation-field stuffing otherwise.
        """
        total = vec_len(datav)
        pos = 0
        while pos < total:
            first = pos == 0
            flags = 0
            hdrlen = 6
            pcr_field = b""
            if first:
                if pcr:
                    hdrlen += 6
                    flags |= 0x10
                    pcr_field = pack_u48be(time_to_pcr(pcr))
                if sync:
                    flags |= 0x40

            padtail = 0
            end = pos + TS_PACKET_SIZE - hdrlen
            if end > total:
                if paddata:
                    padtail = end - total
                else:
                    hdrlen += end - total
                end = total

            header = bytearray(
                (
                    SYNC_BYTE,
                    (0x40 if first else 0) | (self.pid >> 8),
                    self.pid & 0xFF,
                    (self.continuity_counter & 0xF) | 0x30,
                    hdrlen - 5,
                    flags,
                )
            )
            header += pcr_field
            header += b"\xff" * (hdrlen - len(header))
            self.continuity_counter += 1

            payload = b"".join(vec_slice(datav, pos, end))
            w.write(bytes(header) + payload + b"\xff" * padtail)
            pos = end


@dataclass(frozen=True)
class TSHeader:
    """Fields of a TS packet header."""

    pid: int
    start: bool
    iskeyframe: bool
    hdrlen: int


def parse_ts_header(tshdr: bytes) -> TSHeader:
    """Parse a TS packet header and its adaptation field length."""
    if len(tshdr) < 4:
        raise TSError("tshdr too short")
    if tshdr[0] != SYNC_BYTE:
        raise TSError("tshdr sync invalid")
    pid = (tshdr[1] & 0x1F) << 8 | tshdr[2]
    start = bool(tshdr[1] & 0x40)
    hdrlen = 4
    iskeyframe = False
    if tshdr[3] & 0x20:
        if len(tshdr) < 6:
            raise TSError("tshdr too short")
        hdrlen += tshdr[4] + 1
        iskeyframe = bool(tshdr[5] & 0x40)
    return TSHeader(pid, start, iskeyframe, hdrlen)