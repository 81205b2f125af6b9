import pytest

from mediawire.rtmp_url import create_url, get_tc_url, parse_url, split_path


def test_parse_url_adds_default_port():
    url = parse_url("rtmp://example.com/live/stream")
    assert url.netloc == "example.com:1935"
    assert url.scheme == "rtmp"
    assert url.path == "/live/stream"


def test_parse_url_keeps_explicit_port():
    url = parse_url("rtmp://example.com:8080/live")
    assert url.netloc == "example.com:8080"


def test_parse_url_ipv6_without_port():
    url = parse_url("rtmp://[::1]/live")
    assert url.netloc == "[::1]:1935"


def test_parse_url_invalid_raises():
    with pytest.raises(ValueError):
        parse_url("rtmp://[::1/live")


def test_split_path_app_and_stream():
    assert split_path(parse_url("rtmp://example.com/live/stream")) == ("live", "stream")


def test_split_path_stream_keeps_rest():
    assert split_path("rtmp://example.com/live/a/b") == ("live", "a/b")


def test_split_path_empty():
    assert split_path("rtmp://example.com") == ("", "")


def test_split_path_query_in_stream():
    assert split_path("rtmp://example.com/live/stream?k=v") == ("live", "stream?k=v")


def test_get_tc_url_cuts_to_app():
    url = parse_url("rtmp://example.com/live/stream")
    assert get_tc_url(url) == "rtmp://example.com:1935/live"


def test_get_tc_url_without_stream():
    assert get_tc_url("rtmp://example.com:1935/live") == "rtmp://example.com:1935/live"


def test_create_url_with_tcurl():
    url = create_url("rtmp://example.com:1935/live", "live", "stream")
    assert url.geturl() == "rtmp://example.com:1935/live/stream"


def test_create_url_drops_empty_segments():
    url = create_url("", "/live//", "/stream/")
    assert url.path == "/live/stream"
    assert url.netloc == ""
    assert url.scheme == ""


def test_create_url_empty_gives_root():
    assert create_url("", "", "").path == "/"


def test_create_url_query_from_play():
    url = create_url("", "live", "stream?k=v")
    assert url.path == "/live/stream"
    assert url.query == "k=v"


def test_create_url_invalid_tcurl_ignored():
    url = create_url("rtmp://[::1", "live", "stream")
    assert url.netloc == ""
    assert url.path == "/live/stream"


def test_create_url_round_trip_with_split_path():
    url = create_url("rtmp://example.com:1935/app", "app", "name")
    assert split_path(url) == ("app", "name")
    assert get_tc_url(url) == "rtmp://example.com:1935/app"