"""RTMP URL handling: default port, app/stream split and tcUrl building."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

DEFAULT_PORT = 1935


def _as_split(url: SplitResult | str) -> SplitResult:
    return urlsplit(url) if isinstance(url, str) else url


def _host_of(netloc: str) -> str:
    """The host[:port] part of a netloc, without user information."""
    return netloc.rpartition("@")[2]


def _has_port(host: str) -> bool:
    if host.startswith("["):
        end = host.find("]")
        return end != -1 and host[end + 1 : end + 2] == ":"
    return host.count(":") == 1


def parse_url(uri: str) -> SplitResult:
    """Parse an RTMP URL, adding the default port 1935 when none is given.

    Raises ValueError when the URL cannot be parsed.
    """
    url = urlsplit(uri)
    userinfo, at, host = url.netloc.rpartition("@")
    if not _has_port(host):
        return url._replace(netloc=f"{userinfo}{at}{host}:{DEFAULT_PORT}")
    return url


def _request_uri(url: SplitResult) -> str:
    path = url.path or "/"
    if url.query:
        path += "?" + url.query
    return path


def split_path(url: SplitResult | str) -> tuple[str, str]:
    """Split the request URI of ``url`` into the application and stream names."""
    segments = _request_uri(_as_split(url)).split("/", 2)
    app = segments[1] if len(segments) > 1 else ""
    stream = segments[2] if len(segments) > 2 else ""
    return app, stream


def get_tc_url(url: SplitResult | str) -> str:
    """The tcUrl sent in ``connect``: ``url`` with its path cut to the application."""
    split = _as_split(url)
    app, _ = split_path(split)
    return split._replace(path="/" + app.replace("?", "%3F")).geturl()


def create_url(tcurl: str, app: str, play: str) -> SplitResult:
    """Build the stream URL from a tcUrl and the application and play names.

    Empty path segments are dropped. The scheme and host are taken from
    ``tcurl`` when it is given and can be parsed.
    """
    segments = [seg for seg in f"{app}/{play}".split("/") if seg]
    path = "/" + "/".join(segments)
    url = urlsplit(path)

    if tcurl:
        try:
            tcsplit = urlsplit(tcurl)
        except ValueError:
            return url
        url = url._replace(scheme=tcsplit.scheme, netloc=_host_of(tcsplit.netloc))
    return url