"""Wire-level tools for streaming media: MPEG-TS tables and packets, SDP parsing,
RTMP URLs, handshake and chunking, and bit-level I/O."""

__version__ = "0.1.0"