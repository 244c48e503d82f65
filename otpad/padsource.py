"""Pad sources: cryptographically secure 64-bit words for one-time pads.

A pad source has a single method, ``next_word()``, returning one freshly
drawn 64-bit integer. Every call draws new entropy; nothing is buffered
between calls. A failed draw raises :class:`EntropyUnavailable` and is
never retried here.
"""

from __future__ import annotations

import errno
import logging
import secrets
from typing import Protocol, runtime_checkable

from ._loader import (
    BCRYPT_USE_SYSTEM_PREFERRED_RNG,
    entropy_call_name,
    ffi,
    load_entropy_lib,
)
from .errors import EntropyUnavailable

__all__ = [
    "PAD_WORD_BYTES",
    "PAD_SOURCES",
    "PadSource",
    "OsPadSource",
    "SecretsPadSource",
    "open_pad_source",
    "word_bytes",
]

log = logging.getLogger(__name__)

PAD_WORD_BYTES = 8
PAD_SOURCES = ("auto", "os", "secrets")


@runtime_checkable
class PadSource(Protocol):
    def next_word(self) -> int: ...


def word_bytes(word: int) -> bytes:
    """Byte image of a pad word as it appears in a pad stream."""
    return word.to_bytes(PAD_WORD_BYTES, "little")


class OsPadSource:
    """Draw each word straight from the operating system CSPRNG call.

    Uses ``getrandom()`` on Linux, ``getentropy()`` on macOS and the BSDs
    and ``BCryptGenRandom()`` on Windows, one call per word.
    """

    __slots__ = ("_lib", "_call", "_buf")

    def __init__(self) -> None:
        """Load the platform entropy call.

        Raises:
            OSError: If the call is not available on this platform.
        """
        self._lib = load_entropy_lib()
        self._call = entropy_call_name()
        self._buf = bytearray(PAD_WORD_BYTES)

    @property
    def call_name(self) -> str:
        return self._call

    def next_word(self) -> int:
        buf = self._buf
        ptr = ffi.from_buffer(buf)
        if self._call == "BCryptGenRandom":
            status = self._lib.BCryptGenRandom(
                ffi.NULL, ptr, PAD_WORD_BYTES, BCRYPT_USE_SYSTEM_PREFERRED_RNG
            )
            if status != 0:
                raise EntropyUnavailable(
                    f"{self._call} failed: status 0x{status & 0xFFFFFFFF:08x}"
                )
        else:
            if self._call == "getrandom":
                rc = self._lib.getrandom(ptr, PAD_WORD_BYTES, 0)
            else:
                # getentropy() returns 0 on success
                rc = self._lib.getentropy(ptr, PAD_WORD_BYTES) or PAD_WORD_BYTES
            if rc < 0:
                err_num = ffi.errno
                err_name = errno.errorcode.get(err_num, f"errno_{err_num}")
                raise EntropyUnavailable(f"{self._call} failed: {err_name}")
            if rc != PAD_WORD_BYTES:
                raise EntropyUnavailable(
                    f"{self._call} failed: short fill of {rc} bytes"
                )
        word = int.from_bytes(buf, "little")
        buf[:] = bytes(PAD_WORD_BYTES)
        return word


class SecretsPadSource:
    """Draw each word from :func:`secrets.token_bytes`."""

    __slots__ = ()

    def next_word(self) -> int:
        try:
            return int.from_bytes(secrets.token_bytes(PAD_WORD_BYTES), "little")
        except OSError as e:
            raise EntropyUnavailable(f"secrets.token_bytes failed: {e}") from e


def open_pad_source(name: str = "auto") -> PadSource:
    """Return the pad source selected by ``name``.

    Args:
        name: ``"os"``, ``"secrets"`` or ``"auto"``. ``"auto"`` picks the OS
            call when it loads on this platform and ``secrets`` otherwise.

    Raises:
        ValueError: If ``name`` is not a known source.
        OSError: If ``"os"`` is requested but unavailable.
    """
    if name not in PAD_SOURCES:
        raise ValueError(f"unknown pad source {name!r}, expected one of {PAD_SOURCES}")
    if name == "secrets":
        return SecretsPadSource()
    if name == "os":
        return OsPadSource()
    try:
        source = OsPadSource()
    except OSError as e:
        log.warning("OS entropy call unavailable (%s), using secrets module", e)
        return SecretsPadSource()
    log.info("Using %s() as pad source", source.call_name)
    return source
