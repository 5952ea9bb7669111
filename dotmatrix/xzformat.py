"""Constants, modes, check types and errors of the .xz container format."""

from __future__ import annotations

import enum

STREAM_HEADER_SIZE = 12
HEADER_MAGIC = b"\xfd7zXZ\x00"
HEADER_MAGIC_SIZE = len(HEADER_MAGIC)
FOOTER_MAGIC = b"YZ"
FOOTER_MAGIC_SIZE = len(FOOTER_MAGIC)

VLI_UNKNOWN = (1 << 64) - 1
VLI_MAX = VLI_UNKNOWN // 2
VLI_BYTES_MAX = 64 // 7

CHECK_MAX = 15


class XzMode(enum.Enum):
    """How a decoder manages its dictionary."""

    SINGLE = 0
    PREALLOC = 1
    DYNALLOC = 2

    @property
    def multi_call(self) -> bool:
        """True when input may arrive over several calls."""
        return self is not XzMode.SINGLE


class XzCheck(enum.IntEnum):
    """Integrity check stored in the stream flags."""

    NONE = 0
    CRC32 = 1
    CRC64 = 4
    SHA256 = 10


class XzError(Exception):
    """Base class of .xz decoding errors."""


class XzMemLimitError(XzError):
    """The dictionary would exceed the allowed size."""


class XzFormatError(XzError):
    """The magic bytes were not recognised."""


class XzOptionsError(XzError):
    """The stream requests options that are not supported."""


class XzDataError(XzError):
    """The compressed data is corrupt."""


class XzBufferError(XzError):
    """No progress is possible with the given buffers."""


def has_stream_magic(data: bytes) -> bool:
    """True when ``data`` starts with the stream header magic."""
    return bytes(data[:HEADER_MAGIC_SIZE]) == HEADER_MAGIC


def has_footer_magic(data: bytes) -> bool:
    """True when ``data`` ends with the stream footer magic."""
    return len(data) >= FOOTER_MAGIC_SIZE and bytes(data[-FOOTER_MAGIC_SIZE:]) == FOOTER_MAGIC


def check_type(value: int) -> XzCheck:
    """Return the check for a stream-flags check ID.

    Raises XzOptionsError for IDs out of range or not supported.
    """
    if not 0 <= value <= CHECK_MAX:
        raise XzOptionsError(f"check ID {value} out of range")
    try:
        return XzCheck(value)
    except ValueError:
        raise XzOptionsError(f"unsupported integrity check {value}") from None