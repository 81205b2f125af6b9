# mediawire

Pure-Python building blocks for working with streaming media at the wire
level. It has no runtime dependencies.

## What is inside

- `mediawire.pio`: integer readers for big- and little-endian data
  (`u8`, `u16be`, `i24be`, `u32le`, `u40be`, `i64be`, ...). Each takes a
  buffer and an optional offset and raises `ValueError` if the buffer is
  too short. Matching packers (`pack_u24be`, `pack_u48be`, ...) return
  `bytes`. There are also helpers for lists of byte strings: `vec_len`
  and `vec_slice`.
- `mediawire.bits`: `BitReader` and `BitWriter`. They read and write
  big-endian fields of up to 64 bits on a binary stream. Call
  `BitWriter.flush_bits` to write out the last partial byte.
- `mediawire.golomb`: `GolombBitReader` reads single bits, fixed-width
  fields, and unsigned (`read_exponential_golomb_code`) and signed
  (`read_se`) Exp-Golomb codes.
- `mediawire.checksum`: `calc_crc32`, the CRC of MPEG-TS PSI sections.
  Write the result little-endian.
- `mediawire.tsio`: MPEG transport stream structures. Times are integer
  nanoseconds. Malformed data raises `TSError`.
  - Tables: `PAT`/`PATEntry` and `PMT`/`ElementaryStreamInfo`/`Descriptor`.
    Each has `marshal`, `unmarshal` and `length`.
  - Sections: `parse_psi` returns a `PSIHeader`. `fill_psi` builds a
    complete section, CRC included.
  - PES: `parse_pes_header` returns a `PESHeader`. `fill_pes_header`
    builds one.
  - TS packets: `parse_ts_header` returns a `TSHeader`. `TSWriter` splits
    payloads into 188-byte packets and keeps the continuity counter.
  - Timestamp conversions: `time_to_ts`, `ts_to_time`, `time_to_pcr`,
    `pcr_to_time`.
- `mediawire.sdp`: `parse` reads an SDP description and returns a
  `Session` and a list of `Media` entries. Each entry carries:
  - the codec, as a `CodecType` or `None`;
  - the clock rate;
  - the control URL;
  - the payload type;
  - AAC `config`, `size_length` and `index_length`;
  - H.264 `sprop_parameter_sets`.
- `mediawire.rtmp_url`: RTMP URL helpers.
  - `parse_url` adds the default port 1935.
  - `split_path` returns the application and stream names.
  - `get_tc_url` builds a tcUrl.
  - `create_url` builds the stream URL.
- `mediawire.rtmp_handshake`: the RTMP handshake.
  - `handshake_client` performs a plain handshake.
  - `handshake_server` accepts both plain and digest-signed C1 blocks.
    It raises `HandshakeError` on a bad version or an invalid digest.
  - Helpers: `make_digest`, `calc_digest_pos`, `find_digest`, `parse_c1`,
    `create_s0s1`, `create_s2`.
- `mediawire.rtmp_chunk`: RTMP chunk handling.
  - `fill_chunk_header` builds type 0 chunk headers.
  - Control messages are built by `set_chunk_size_message`,
    `ack_message`, `window_ack_size_message`,
    `set_peer_bandwidth_message`, `stream_begin_message` and
    `set_buffer_length_message`.
  - `ChunkReader` puts chunks back together into whole `Message` objects.
    It applies SetChunkSize messages itself and skips empty audio and
    video messages. When an `ack_size` is given, it writes
    acknowledgements.

## Installing

```
pip install .
```

## Examples

Read bit fields:

```python
import io
from mediawire.bits import BitReader

reader = BitReader(io.BytesIO(bytes([0xF3, 0xB3, 0x45, 0x60])))
reader.read_bits(4)   # 0xF
reader.read_bits(4)   # 0x3
```

Parse an SDP description:

```python
from mediawire import sdp

session, medias = sdp.parse(text)
for media in medias:
    print(media.av_type, media.type, media.time_scale, media.control)
```

Write a PAT into transport stream packets:

```python
import io
from mediawire import tsio

pat = tsio.PAT([tsio.PATEntry(program_number=1, program_map_pid=0x1000)])
section = tsio.fill_psi(0, 1, pat.marshal())
out = io.BytesIO()
tsio.TSWriter(0).write_packets(out, [section], 0, False, True)
```

Read RTMP messages from a socket file:

```python
from mediawire.rtmp_chunk import ChunkReader

for message in ChunkReader(sock.makefile("rb")).messages():
    print(message.msgtypeid, message.timestamp, len(message.data))
```

## What it does not do

This is a library of parts. It has no command-line tool.

- It does not open network connections or run an RTMP server. You supply
  the streams that the handshake functions and `ChunkReader` read from
  and write to.
- It does not encode or decode AMF. RTMP command and data messages come
  back as raw `Message.data` bytes.
- It has no transport stream demuxer or muxer that turns TS packets into
  audio and video frames. It provides only the tables, headers and packet
  writer those would be built from.

## Running the tests

```
pip install .[test]
pytest
```