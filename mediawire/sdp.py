"""Parsing of SDP session descriptions as served by RTSP servers."""

from __future__ import annotations

import base64
import binascii
import enum
import re
from dataclasses import dataclass, field

_INT_RE = re.compile(r"[+-]?[0-9]+")
_HEX_PAIRS_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


class CodecType(enum.Enum):
    """Codecs recognised in ``rtpmap`` attributes."""

    H264 = "H264"
    AAC = "AAC"


@dataclass
class Session:
    """Session-level fields."""

    uri: str = ""


@dataclass
class Media:
    """One ``m=`` section with the attributes that follow it."""

    av_type: str
    type: CodecType | None = None
    time_scale: int = 0
    control: str = ""
    rtpmap: int = 0
    config: bytes = b""
    sprop_parameter_sets: list[bytes] = field(default_factory=list)
    payload_type: int = 0
    size_length: int = 0
    index_length: int = 0


def _atoi(text: str) -> int | None:
    if _INT_RE.fullmatch(text) is None:
        return None
    return int(text)


def _hex_prefix(text: str) -> bytes:
    match = _HEX_PAIRS_RE.match(text)
    return bytes.fromhex(match.group(0)) if match else b""


def _b64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error:
        return b""


def _apply_fmtp(media: Media, field_text: str) -> None:
    for part in field_text.split(";"):
        key, sep, val = part.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key == "config":
            media.config = _hex_prefix(val)
        elif key == "sizelength":
            media.size_length = _atoi(val) or 0
        elif key == "indexlength":
            media.index_length = _atoi(val) or 0
        elif key == "sprop-parameter-sets":
            media.sprop_parameter_sets.extend(_b64(item) for item in val.split(","))


def _apply_attribute(media: Media, field_text: str) -> None:
    key, sep, val = field_text.partition(":")
    if sep:
        if key == "control":
            media.control = val
        elif key == "rtpmap":
            media.rtpmap = _atoi(val) or 0

    parts = field_text.split("/")
    if len(parts) >= 2:
        name = parts[0].upper()
        if name == "MPEG4-GENERIC":
            media.type = CodecType.AAC
        elif name == "H264":
            media.type = CodecType.H264
        scale = _atoi(parts[1])
        if scale is not None:
            media.time_scale = scale

    if len(field_text.split(";")) > 1:
        _apply_fmtp(media, field_text)


def parse(content: str) -> tuple[Session, list[Media]]:
    """Parse an SDP document into its session and media sections."""
    session = Session()
    medias: list[Media] = []
    media: Media | None = None

    for raw in content.split("\n"):
        kind, sep, value = raw.strip().partition("=")
        if not sep:
            continue
        fields = value.split(" ", 1)

        if kind == "m":
            if fields[0] in ("audio", "video"):
                media = Media(av_type=fields[0])
                medias.append(media)
                if len(fields) > 1:
                    mfields = fields[1].split(" ")
                    if len(mfields) >= 3:
                        media.payload_type = _atoi(mfields[2]) or 0
        elif kind == "u":
            session.uri = value
        elif kind == "a" and media is not None:
            for field_text in fields:
                _apply_attribute(media, field_text)

    return session, medias