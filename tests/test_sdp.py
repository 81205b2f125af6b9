import pytest

from mediawire.sdp import CodecType, Media, Session, parse

SAMPLE = """
v=0
o=- 1459325504777324 1 IN IP4 192.168.0.123
s=RTSP/RTP stream from Network Video Server
i=mpeg4cif
t=0 0
a=tool:LIVE555 Streaming Media v2009.09.28
a=type:broadcast
a=control:*
a=range:npt=0-
a=x-qt-text-nam:RTSP/RTP stream from Network Video Server
a=x-qt-text-inf:mpeg4cif
m=video 0 RTP/AVP 96
c=IN IP4 0.0.0.0
b=AS:300
a=rtpmap:96 H264/90000
a=fmtp:96 profile-level-id=420029; packetization-mode=1; sprop-parameter-sets=Z00AHpWoKA9k,aO48gA==
a=x-dimensions: 720, 480
a=x-framerate: 15
a=control:track1
m=audio 0 RTP/AVP 96
c=IN IP4 0.0.0.0
b=AS:256
a=rtpmap:96 MPEG4-GENERIC/16000/2
a=fmtp:96 streamtype=5;profile-level-id=1;mode=AAC-hbr;sizelength=13;indexlength=3;indexdeltalength=3;config=1408
a=control:track2
m=audio 0 RTP/AVP 0
c=IN IP4 0.0.0.0
b=AS:50
a=recvonly
a=control:rtsp://192.0.2.10:554/mpeg4cif/trackID=2
a=rtpmap:0 PCMU/8000
a=Media_header:MEDIAINFO=494D4B48010100000400010010710110401F000000FA000000000000000000000000000000000000;
a=appversion:1.0
"""


@pytest.fixture
def parsed():
    return parse(SAMPLE)


def test_sample_has_three_medias(parsed):
    session, medias = parsed
    assert session == Session(uri="")
    assert [m.av_type for m in medias] == ["video", "audio", "audio"]


def test_sample_video_media(parsed):
    video = parsed[1][0]
    assert video.type is CodecType.H264
    assert video.time_scale == 90000
    assert video.rtpmap == 96
    assert video.payload_type == 96
    assert video.control == "track1"
    assert video.sprop_parameter_sets == [
        bytes.fromhex("674d001e95a8280f64"),
        bytes.fromhex("68ee3c80"),
    ]


def test_sample_aac_media(parsed):
    audio = parsed[1][1]
    assert audio.type is CodecType.AAC
    assert audio.time_scale == 16000
    assert audio.size_length == 13
    assert audio.index_length == 3
    assert audio.config == b"\x14\x08"
    assert audio.control == "track2"
    assert audio.payload_type == 96


def test_sample_pcmu_media(parsed):
    audio = parsed[1][2]
    assert audio.type is None
    assert audio.time_scale == 8000
    assert audio.payload_type == 0
    assert audio.rtpmap == 0
    assert audio.control == "rtsp://192.0.2.10:554/mpeg4cif/trackID=2"


def test_session_uri():
    session, medias = parse("v=0\nu=http://www.example.com/info.html\n")
    assert session.uri == "http://www.example.com/info.html"
    assert medias == []


def test_attributes_before_media_are_ignored():
    _, medias = parse("a=control:*\na=rtpmap:96 H264/90000\n")
    assert medias == []


def test_unknown_media_kind_does_not_take_attributes():
    _, medias = parse("m=application 0 RTP/AVP 107\na=control:track9\n")
    assert medias == []


def test_media_line_without_ports():
    _, medias = parse("m=audio\n")
    assert medias == [Media(av_type="audio")]


def test_non_numeric_values_default_to_zero():
    _, medias = parse("m=video 0 RTP/AVP xx\na=rtpmap:abc H264/fast\n")
    media = medias[0]
    assert media.payload_type == 0
    assert media.rtpmap == 0
    assert media.type is CodecType.H264
    assert media.time_scale == 0


def test_invalid_hex_config_keeps_decoded_prefix():
    _, medias = parse("m=audio 0 RTP/AVP 97\na=fmtp:97 mode=AAC-hbr;config=14zz\n")
    assert medias[0].config == b"\x14"


def test_crlf_line_endings():
    _, medias = parse("m=video 0 RTP/AVP 96\r\na=control:track1\r\n")
    assert medias[0].control == "track1"
    assert medias[0].payload_type == 96


def test_codec_name_is_case_insensitive():
    _, medias = parse("m=audio 0 RTP/AVP 97\na=rtpmap:97 mpeg4-generic/44100/2\n")
    assert medias[0].type is CodecType.AAC
    assert medias[0].time_scale == 44100