"""The RTMP handshake: C0/C1/C2 and S0/S1/S2 exchange, plain and digest-signed."""

from __future__ import annotations

import hashlib
import hmac
import os
from typing import BinaryIO

from .pio import pack_u32be, u32be

RTMP_VERSION = 3
HANDSHAKE_SIZE = 1536
DIGEST_SIZE = 32
SERVER_VERSION = 0x0D0E0A0D

_KEY_TAIL = bytes(
    (
        0xF0, 0xEE, 0xC2, 0x4A, 0x80, 0x68, 0xBE, 0xE8, 0x2E, 0x00, 0xD0, 0xD1,
        0x02, 0x9E, 0x7E, 0x57, 0x6E, 0xEC, 0x5D, 0x2D, 0x29, 0x80, 0x6F, 0xAB,
        0x93, 0xB8, 0xE6, 0x36, 0xCF, 0xEB, 0x31, 0xAE,
    )
)

CLIENT_FULL_KEY = b"Genuine Adobe Flash Player 001" + _KEY_TAIL
SERVER_FULL_KEY = b"Genuine Adobe Flash Media Server 001" + _KEY_TAIL
CLIENT_PARTIAL_KEY = CLIENT_FULL_KEY[:30]
SERVER_PARTIAL_KEY = SERVER_FULL_KEY[:36]


class HandshakeError(Exception):
    """The peer sent an invalid handshake."""


def make_digest(key: bytes, src: bytes, gap: int) -> bytes:
    """HMAC-SHA256 of ``src`` under ``key``, skipping the 32 bytes at ``gap``.

    A ``gap`` of zero or less digests the whole of ``src``.
    """
    mac = hmac.new(key, digestmod=hashlib.sha256)
    if gap <= 0:
        mac.update(src)
    else:
        mac.update(src[:gap])
        mac.update(src[gap + DIGEST_SIZE :])
    return mac.digest()


def calc_digest_pos(p: bytes, base: int) -> int:
    """Offset of the digest in a C1/S1 block whose offset bytes start at ``base``."""
    return sum(p[base : base + 4]) % 728 + base + 4


def find_digest(p: bytes, key: bytes, base: int) -> int | None:
    """Offset of a valid digest in ``p``, or None when the digest does not match."""
    gap = calc_digest_pos(p, base)
    digest = make_digest(key, p, gap)
    if not hmac.compare_digest(bytes(p[gap : gap + DIGEST_SIZE]), digest):
        return None
    return gap


def parse_c1(p: bytes, peerkey: bytes, key: bytes) -> bytes | None:
    """Verify a digest-signed C1 and return the key for signing S2.

    Both digest layouts (offset bytes at 772 and at 8) are tried. Returns
    None when neither holds a valid digest.
    """
    pos = find_digest(p, peerkey, 772)
    if pos is None:
        pos = find_digest(p, peerkey, 8)
        if pos is None:
            return None
    return make_digest(key, p[pos : pos + DIGEST_SIZE], -1)


def create_s0s1(time: int, ver: int, key: bytes) -> bytes:
    """Build S0 and a digest-signed S1 carrying ``time`` and ``ver``."""
    body = bytearray(pack_u32be(time) + pack_u32be(ver) + os.urandom(HANDSHAKE_SIZE - 8))
    gap = calc_digest_pos(body, 8)
    body[gap : gap + DIGEST_SIZE] = make_digest(key, bytes(body), gap)
    return bytes((RTMP_VERSION,)) + bytes(body)


def create_s2(key: bytes) -> bytes:
    """Build a random S2 whose last 32 bytes sign the rest with ``key``."""
    body = bytearray(os.urandom(HANDSHAKE_SIZE))
    gap = HANDSHAKE_SIZE - DIGEST_SIZE
    body[gap:] = make_digest(key, bytes(body), gap)
    return bytes(body)


def _read_exact(rfile: BinaryIO, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        chunk = rfile.read(size - len(data))
        if not chunk:
            raise EOFError(f"handshake: expected {size} bytes, got {len(data)}")
        data += chunk
    return bytes(data)


def _flush(wfile: BinaryIO) -> None:
    flush = getattr(wfile, "flush", None)
    if flush is not None:
        flush()


def handshake_client(rfile: BinaryIO, wfile: BinaryIO) -> int:
    """Run the client side of a plain handshake; return the server's version field.

    C1 is all zeros and C2 echoes S1. Raises EOFError if the server's reply
    is cut short.
    """
    wfile.write(bytes((RTMP_VERSION,)) + bytes(HANDSHAKE_SIZE))
    _flush(wfile)

    s0s1s2 = _read_exact(rfile, 1 + 2 * HANDSHAKE_SIZE)
    s1 = s0s1s2[1 : 1 + HANDSHAKE_SIZE]

    wfile.write(s1)
    _flush(wfile)
    return u32be(s1, 4)


def handshake_server(rfile: BinaryIO, wfile: BinaryIO) -> None:
    """Run the server side of the handshake.

    A C1 with a zero version field is echoed back as S1. Otherwise C1 must
    carry a valid digest, and S1 and S2 are signed in reply. Raises
    HandshakeError on a wrong protocol version or an invalid C1, and
    EOFError if the client's data is cut short.
    """
    c0c1 = _read_exact(rfile, 1 + HANDSHAKE_SIZE)
    if c0c1[0] != RTMP_VERSION:
        raise HandshakeError(f"rtmp: handshake version={c0c1[0]} invalid")
    c1 = c0c1[1:]

    clitime = u32be(c1, 0)
    cliver = u32be(c1, 4)

    if cliver != 0:
        digest = parse_c1(c1, CLIENT_PARTIAL_KEY, SERVER_FULL_KEY)
        if digest is None:
            raise HandshakeError("rtmp: handshake server: C1 invalid")
        s0s1 = create_s0s1(clitime, SERVER_VERSION, SERVER_PARTIAL_KEY)
        s2 = create_s2(digest)
    else:
        s0s1 = bytes((RTMP_VERSION,)) + c1
        s2 = bytes(HANDSHAKE_SIZE)

    wfile.write(s0s1 + s2)
    _flush(wfile)

    _read_exact(rfile, HANDSHAKE_SIZE)