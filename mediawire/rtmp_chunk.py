"""RTMP chunk stream: building protocol control messages and reassembling
incoming chunks into messages."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO

from .pio import pack_u16be, pack_u24be, pack_u32be, pack_u32le, u16be, u24be, u32be, u32le

CHUNK_HEADER_LENGTH = 12
FLV_TIMESTAMP_MAX = 0xFFFFFF
DEFAULT_CHUNK_SIZE = 128

EVENT_STREAM_BEGIN = 0
EVENT_SET_BUFFER_LENGTH = 3
EVENT_STREAM_IS_RECORDED = 4

_PROTOCOL_CSID = 2


class ChunkError(ValueError):
    """Malformed RTMP chunk data."""


class MessageType(enum.IntEnum):
    """RTMP message type ids."""

    SET_CHUNK_SIZE = 1
    ACK = 3
    USER_CONTROL = 4
    WINDOW_ACK_SIZE = 5
    SET_PEER_BANDWIDTH = 6
    AUDIO = 8
    VIDEO = 9
    DATA_AMF3 = 15
    COMMAND_AMF3 = 17
    DATA_AMF0 = 18
    COMMAND_AMF0 = 20


@dataclass(frozen=True)
class Message:
    """A complete message reassembled from one chunk stream."""

    csid: int
    timestamp: int
    msgsid: int
    msgtypeid: int
    data: bytes

    @property
    def event_type(self) -> int | None:
        """The event type of a user control message, otherwise None."""
        if self.msgtypeid != MessageType.USER_CONTROL:
            return None
        return u16be(self.data)


def fill_chunk_header(
    csid: int, timestamp: int, msgtypeid: int, msgsid: int, msgdatalen: int
) -> bytes:
    """Build a type 0 chunk header, with an extended timestamp when needed."""
    ts = timestamp & 0xFFFFFFFF
    extended = ts > FLV_TIMESTAMP_MAX
    header = bytearray((csid & 0x3F,))
    header += pack_u24be(FLV_TIMESTAMP_MAX if extended else ts)
    header += pack_u24be(msgdatalen)
    header.append(msgtypeid & 0xFF)
    header += pack_u32le(msgsid)
    if extended:
        header += pack_u32be(ts)
    return bytes(header)


def _control(msgtypeid: int, body: bytes) -> bytes:
    return fill_chunk_header(_PROTOCOL_CSID, 0, msgtypeid, 0, len(body)) + body


def set_chunk_size_message(size: int) -> bytes:
    """A SetChunkSize protocol control message."""
    return _control(MessageType.SET_CHUNK_SIZE, pack_u32be(size))


def ack_message(seqnum: int) -> bytes:
    """An Acknowledgement protocol control message."""
    return _control(MessageType.ACK, pack_u32be(seqnum))


def window_ack_size_message(size: int) -> bytes:
    """A WindowAcknowledgementSize protocol control message."""
    return _control(MessageType.WINDOW_ACK_SIZE, pack_u32be(size))


def set_peer_bandwidth_message(acksize: int, limittype: int) -> bytes:
    """A SetPeerBandwidth protocol control message."""
    return _control(MessageType.SET_PEER_BANDWIDTH, pack_u32be(acksize) + bytes((limittype & 0xFF,)))


def stream_begin_message(msgsid: int) -> bytes:
    """A StreamBegin user control event for stream ``msgsid``."""
    return _control(MessageType.USER_CONTROL, pack_u16be(EVENT_STREAM_BEGIN) + pack_u32be(msgsid))


def set_buffer_length_message(msgsid: int, timestamp: int) -> bytes:
    """A SetBufferLength user control event; ``timestamp`` is in milliseconds."""
    body = pack_u16be(EVENT_SET_BUFFER_LENGTH) + pack_u32be(msgsid) + pack_u32be(timestamp)
    return _control(MessageType.USER_CONTROL, body)


@dataclass
class _ChunkStream:
    timenow: int = 0
    timedelta: int = 0
    hastimeext: bool = False
    msgsid: int = 0
    msgtypeid: int = 0
    msgdatalen: int = 0
    msgdataleft: int = 0
    msghdrtype: int = 0
    msgdata: bytearray = field(default_factory=bytearray)

    def start(self) -> None:
        self.msgdataleft = self.msgdatalen
        self.msgdata = bytearray()


class ChunkReader:
    """Reassembles RTMP messages from the chunks read off a stream.

    SetChunkSize messages are applied to the reader and not returned, and
    empty audio and video messages are skipped. When ``ack_size`` is set and
    more bytes than that have been read, an acknowledgement is written to
    ``wfile``.
    """

    def __init__(self, rfile: BinaryIO, wfile: BinaryIO | None = None, ack_size: int = 0) -> None:
        self._rfile = rfile
        self._wfile = wfile
        self.ack_size = ack_size
        self.max_chunk_size = DEFAULT_CHUNK_SIZE
        self._streams: dict[int, _ChunkStream] = {}
        self._ackn = 0

    def _read(self, size: int) -> bytes:
        data = bytearray()
        while len(data) < size:
            piece = self._rfile.read(size - len(data))
            if not piece:
                raise EOFError(f"rtmp: expected {size} bytes, got {len(data)}")
            data += piece
        return bytes(data)

    def _read_ext_time(self) -> int:
        return u32be(self._read(4))

    def _read_chunk(self) -> Message | None:
        consumed = 0

        def read(size: int) -> bytes:
            nonlocal consumed
            data = self._read(size)
            consumed += size
            return data

        header = read(1)[0]
        msghdrtype = header >> 6
        csid = header & 0x3F
        if csid == 0:
            csid = read(1)[0] + 64
        elif csid == 1:
            csid = u16be(read(2)) + 64

        cs = self._streams.setdefault(csid, _ChunkStream())

        if msghdrtype in (0, 1, 2) and cs.msgdataleft != 0:
            raise ChunkError(f"rtmp: chunk msgdataleft={cs.msgdataleft} invalid")

        if msghdrtype == 0:
            h = read(11)
            timestamp = u24be(h, 0)
            cs.msghdrtype = msghdrtype
            cs.msgdatalen = u24be(h, 3)
            cs.msgtypeid = h[6]
            cs.msgsid = u32le(h, 7)
            cs.hastimeext = timestamp == FLV_TIMESTAMP_MAX
            if cs.hastimeext:
                timestamp = u32be(read(4))
            cs.timenow = timestamp
            cs.start()
        elif msghdrtype in (1, 2):
            h = read(7 if msghdrtype == 1 else 3)
            timestamp = u24be(h, 0)
            cs.msghdrtype = msghdrtype
            if msghdrtype == 1:
                cs.msgdatalen = u24be(h, 3)
                cs.msgtypeid = h[6]
            cs.hastimeext = timestamp == FLV_TIMESTAMP_MAX
            if cs.hastimeext:
                timestamp = u32be(read(4))
            cs.timedelta = timestamp
            cs.timenow = (cs.timenow + timestamp) & 0xFFFFFFFF
            cs.start()
        elif cs.msgdataleft == 0:
            if cs.msghdrtype == 0:
                if cs.hastimeext:
                    cs.timenow = u32be(read(4))
            else:
                delta = u32be(read(4)) if cs.hastimeext else cs.timedelta
                cs.timenow = (cs.timenow + delta) & 0xFFFFFFFF
            cs.start()

        size = min(cs.msgdataleft, self.max_chunk_size)
        cs.msgdata += read(size)
        cs.msgdataleft -= size

        message = None
        if cs.msgdataleft == 0:
            message = self._handle(
                Message(csid, cs.timenow, cs.msgsid, cs.msgtypeid, bytes(cs.msgdata))
            )

        self._ackn += consumed
        if self.ack_size and self._ackn > self.ack_size:
            if self._wfile is not None:
                self._wfile.write(ack_message(self._ackn))
            self._ackn = 0
        return message

    def _handle(self, message: Message) -> Message | None:
        kind = message.msgtypeid
        data = message.data
        if kind == MessageType.COMMAND_AMF3 and len(data) < 1:
            raise ChunkError("rtmp: short packet of CommandMsgAMF3")
        if kind == MessageType.USER_CONTROL and len(data) < 2:
            raise ChunkError("rtmp: short packet of UserControl")
        if kind in (MessageType.VIDEO, MessageType.AUDIO) and not data:
            return None
        if kind == MessageType.SET_CHUNK_SIZE:
            if len(data) < 4:
                raise ChunkError("rtmp: short packet of SetChunkSize")
            size = u32be(data)
            if size == 0:
                raise ChunkError("rtmp: chunk size 0 invalid")
            self.max_chunk_size = size
            return None
        return message

    def read_message(self) -> Message:
        """Read chunks until a message is complete; raise EOFError at the end."""
        while True:
            message = self._read_chunk()
            if message is not None:
                return message

    def messages(self) -> Iterator[Message]:
        """Yield messages until the stream ends."""
        while True:
            try:
                message = self.read_message()
            except EOFError:
                return
            yield message