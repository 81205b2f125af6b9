[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mediawire"
version = "0.1.0"
description = "Building blocks for streaming media: MPEG-TS tables and packets, SDP parsing, RTMP chunking and handshake, bit-level I/O."
requires-python = ">=3.10"
dependencies = []
keywords = ["mpeg-ts", "rtmp", "sdp", "streaming", "video", "bitstream", "golomb"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mediawire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
