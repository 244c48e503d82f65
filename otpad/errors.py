"""Exceptions raised by the pad source and the transform engine.

Every failure stops the operation where it is detected. Output already
written is left in place; removing it is up to the caller.
"""

__all__ = [
    "OtpError",
    "InvalidSize",
    "SizeMismatch",
    "ShortRead",
    "EntropyUnavailable",
    "PadSourceError",
]


class OtpError(Exception):
    """Base class for all otpad failures."""


class InvalidSize(OtpError, ValueError):
    """A stream is empty, unreadable or larger than the supported range."""

    def __init__(self, stream: str, size: int | None = None):
        self.stream = stream
        self.size = size
        if size is None:
            msg = f'invalid file size "{stream}" (size could not be determined)'
        else:
            msg = f'invalid file size "{stream}" ({size} bytes)'
        super().__init__(msg)


class SizeMismatch(OtpError, ValueError):
    """Ciphertext and one-time-pad lengths differ."""

    def __init__(self, cipher_len: int, pad_len: int):
        self.cipher_len = cipher_len
        self.pad_len = pad_len
        super().__init__(
            "size mismatch during decryption: ciphertext length "
            f"{cipher_len} does not equal one-time-pad length {pad_len}"
        )


class ShortRead(OtpError, OSError):
    """A stream ended before its measured size was consumed."""

    def __init__(self, stream: str, offset: int, wanted: int, got: int):
        self.stream = stream
        self.offset = offset
        self.wanted = wanted
        self.got = got
        super().__init__(
            f'short read from "{stream}" at offset {offset}: '
            f"wanted {wanted} bytes, got {got}"
        )


class EntropyUnavailable(OtpError, RuntimeError):
    """The pad source's generator reported failure for a draw."""


PadSourceError = EntropyUnavailable
