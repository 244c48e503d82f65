"""Utility helpers for otpad.

Stream sizing follows the classic seek-to-end-and-back approach so any
seekable binary file object works, including ``io.BytesIO``.
"""

from __future__ import annotations

import io
from typing import BinaryIO

from .errors import InvalidSize

__all__ = ["Buffer", "MAX_STREAM_SIZE", "stream_size", "checked_size", "xor_bytes"]

Buffer = bytes | bytearray | memoryview

# Largest offset representable by a signed 64-bit file offset
MAX_STREAM_SIZE = 2**63 - 1


def stream_size(stream: BinaryIO) -> int:
    """Return the number of bytes between the current position and the end.

    The position is restored afterwards.

    Raises:
        OSError: If the stream cannot seek or tell.
    """
    prev = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(prev, io.SEEK_SET)
    return end - prev


def checked_size(stream: BinaryIO, name: str, max_size: int = MAX_STREAM_SIZE) -> int:
    """Measure ``stream`` and reject empty, unreadable, unmeasurable or oversized input."""
    try:
        readable = stream.readable()
        size = stream_size(stream)
    except (OSError, ValueError) as e:
        # io.UnsupportedOperation is an OSError; closed files raise ValueError
        raise InvalidSize(name) from e
    if not readable:
        raise InvalidSize(name)
    if size <= 0 or size > max_size:
        raise InvalidSize(name, size)
    return size


def xor_bytes(a: Buffer, b: Buffer) -> bytes:
    """XOR two equal-length buffers byte for byte."""
    n = len(a)
    if len(b) != n:
        raise ValueError(f"xor operands differ in length: {n} != {len(b)}")
    x = int.from_bytes(a, "little") ^ int.from_bytes(b, "little")
    return x.to_bytes(n, "little")
