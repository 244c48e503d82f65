"""One-time-pad transform engine.

Plaintext is XORed against pad words in 8-byte blocks. A trailing block
of 1-7 bytes uses the leading bytes of one more word; the rest of that
word is discarded. The pad stream written during encryption holds the
pad bytes in block order, so it is exactly as long as the plaintext.

Streams are binary file objects opened and closed by the caller.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from .errors import InvalidSize, ShortRead, SizeMismatch
from .padsource import PAD_WORD_BYTES, PadSource, open_pad_source, word_bytes
from .util import MAX_STREAM_SIZE, Buffer, checked_size, xor_bytes

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MAX_STREAM_SIZE",
    "encrypt",
    "decrypt",
    "encrypt_bytes",
    "decrypt_bytes",
    "Encryptor",
    "Decryptor",
]

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0 or chunk_size % PAD_WORD_BYTES:
        raise ValueError(
            f"chunk_size must be a positive multiple of {PAD_WORD_BYTES}, got {chunk_size}"
        )


def _read_exact(stream: BinaryIO, n: int, name: str, offset: int) -> bytes:
    """Read exactly ``n`` bytes, accepting short returns until end of stream."""
    buf = bytearray()
    while len(buf) < n:
        data = stream.read(n - len(buf))
        if not data:
            # b"" is end of stream; None means a non-blocking stream has nothing
            raise ShortRead(name, offset, n, len(buf))
        buf += data
    return bytes(buf)


class Encryptor:
    """Incremental encryptor.

    - update(message) -> (ciphertext, pad) for this chunk
    - final() -> discards the unused tail of the last pad word

    Chunks may have any length. Pad bytes are taken from each word in
    order and every pad byte is used for exactly one plaintext byte, so
    the concatenated output equals a single block-by-block pass.
    """

    __slots__ = ("_source", "_spare", "_bytes_in", "_bytes_out", "_words", "_done")

    def __init__(self, source: PadSource | None = None):
        """Create an incremental encryptor.

        Args:
            source: Pad source to draw words from (default: ``open_pad_source()``).
        """
        self._source = source if source is not None else open_pad_source()
        self._spare = b""
        self._bytes_in = 0
        self._bytes_out = 0
        self._words = 0
        self._done = False

    @property
    def bytes_in(self) -> int:
        """Total plaintext bytes fed to update() so far."""
        return self._bytes_in

    @property
    def bytes_out(self) -> int:
        """Total ciphertext bytes produced so far (equal to pad bytes produced)."""
        return self._bytes_out

    @property
    def words_drawn(self) -> int:
        """Number of pad words drawn from the source."""
        return self._words

    def _pad_for(self, n: int) -> bytes:
        pad = bytearray(self._spare[:n])
        self._spare = self._spare[n:]
        while len(pad) < n:
            word = word_bytes(self._source.next_word())
            self._words += 1
            take = min(PAD_WORD_BYTES, n - len(pad))
            pad += word[:take]
            self._spare = word[take:]
        return bytes(pad)

    def update(self, message: Buffer) -> tuple[bytes, bytes]:
        """Encrypt a chunk of the message.

        Args:
            message: Plaintext bytes to encrypt.

        Returns:
            Tuple of (ciphertext, pad) for this chunk, both ``len(message)`` long.

        Raises:
            RuntimeError: If called after final().
            EntropyUnavailable: If the pad source fails.
        """
        if self._done:
            raise RuntimeError("Cannot call update() after final()")
        pad = self._pad_for(len(message))
        ct = xor_bytes(message, pad)
        self._bytes_in += len(message)
        self._bytes_out += len(ct)
        return ct, pad

    def final(self) -> None:
        """Finish encryption, discarding any unused pad bytes."""
        if self._done:
            raise RuntimeError("Cannot call final() after final()")
        if self._spare:
            log.debug("Discarding %d unused pad bytes", len(self._spare))
        self._spare = b""
        self._done = True


class Decryptor:
    """Incremental decryptor.

    - update(ciphertext, pad) -> plaintext for this chunk
    - final() -> marks the decryptor finished
    """

    __slots__ = ("_bytes_in", "_done")

    def __init__(self) -> None:
        self._bytes_in = 0
        self._done = False

    @property
    def bytes_in(self) -> int:
        """Total ciphertext bytes fed to update() so far."""
        return self._bytes_in

    @property
    def bytes_out(self) -> int:
        """Total plaintext bytes produced so far."""
        return self._bytes_in

    def update(self, ct: Buffer, pad: Buffer) -> bytes:
        """Decrypt a chunk of ciphertext with the matching pad bytes.

        Raises:
            RuntimeError: If called after final().
            SizeMismatch: If the chunks differ in length.
        """
        if self._done:
            raise RuntimeError("Cannot call update() after final()")
        if len(ct) != len(pad):
            raise SizeMismatch(len(ct), len(pad))
        out = xor_bytes(ct, pad)
        self._bytes_in += len(ct)
        return out

    def final(self) -> None:
        if self._done:
            raise RuntimeError("Cannot call final() after final()")
        self._done = True


def encrypt_bytes(
    message: Buffer, source: PadSource | None = None
) -> tuple[bytes, bytes]:
    """Encrypt a message held in memory.

    Returns:
        Tuple of (ciphertext, pad).

    Raises:
        InvalidSize: If the message is empty.
    """
    if len(message) == 0:
        raise InvalidSize("plaintext", 0)
    enc = Encryptor(source)
    ct, pad = enc.update(message)
    enc.final()
    return ct, pad


def decrypt_bytes(ct: Buffer, pad: Buffer) -> bytes:
    """Decrypt a ciphertext held in memory with its pad.

    Raises:
        InvalidSize: If either input is empty.
        SizeMismatch: If the lengths differ.
    """
    if len(ct) == 0:
        raise InvalidSize("ciphertext", 0)
    if len(pad) == 0:
        raise InvalidSize("one-time-pad", 0)
    if len(ct) != len(pad):
        raise SizeMismatch(len(ct), len(pad))
    dec = Decryptor()
    out = dec.update(ct, pad)
    dec.final()
    return out


def encrypt(
    plaintext: BinaryIO,
    ciphertext_out: BinaryIO,
    pad_out: BinaryIO,
    *,
    source: PadSource | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_size: int = MAX_STREAM_SIZE,
) -> int:
    """Encrypt ``plaintext`` into ``ciphertext_out``, writing the pad to ``pad_out``.

    Args:
        plaintext: Seekable binary stream, read from its current position.
        ciphertext_out: Binary stream receiving the ciphertext.
        pad_out: Binary stream receiving the pad bytes.
        source: Pad source (default: ``open_pad_source()``).
        chunk_size: I/O chunk size, a positive multiple of 8.
        max_size: Largest accepted input length.

    Returns:
        Number of bytes encrypted.

    Raises:
        InvalidSize: If the input is empty, unmeasurable or too large.
        ShortRead: If the input ends before its measured length.
        EntropyUnavailable: If the pad source fails.
    """
    _check_chunk_size(chunk_size)
    length = checked_size(plaintext, "plaintext", max_size)
    full_blocks, remainder = divmod(length, PAD_WORD_BYTES)
    log.debug(
        "Encrypting %d bytes: %d full blocks, %d remaining bytes",
        length,
        full_blocks,
        remainder,
    )
    enc = Encryptor(source)
    offset = 0
    while offset < length:
        n = min(chunk_size, length - offset)
        if n % PAD_WORD_BYTES:
            log.debug("Handling a remaining %d bytes", n % PAD_WORD_BYTES)
        data = _read_exact(plaintext, n, "plaintext", offset)
        ct, key = enc.update(data)
        pad_out.write(key)
        ciphertext_out.write(ct)
        offset += n
    enc.final()
    log.debug("Encrypted %d bytes using %d pad words", length, enc.words_drawn)
    return length


def decrypt(
    ciphertext: BinaryIO,
    plaintext_out: BinaryIO,
    pad: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_size: int = MAX_STREAM_SIZE,
) -> int:
    """Decrypt ``ciphertext`` with ``pad`` into ``plaintext_out``.

    Both inputs are measured before anything is read or written.

    Returns:
        Number of bytes decrypted.

    Raises:
        InvalidSize: If either input is empty, unmeasurable or too large.
        SizeMismatch: If the ciphertext and pad lengths differ.
        ShortRead: If an input ends before its measured length.
    """
    _check_chunk_size(chunk_size)
    cipher_len = checked_size(ciphertext, "ciphertext", max_size)
    pad_len = checked_size(pad, "one-time-pad", max_size)
    if cipher_len != pad_len:
        raise SizeMismatch(cipher_len, pad_len)
    log.debug(
        "Decrypting %d bytes: %d full blocks, %d remaining bytes",
        cipher_len,
        *divmod(cipher_len, PAD_WORD_BYTES),
    )
    dec = Decryptor()
    offset = 0
    while offset < cipher_len:
        n = min(chunk_size, cipher_len - offset)
        key = _read_exact(pad, n, "one-time-pad", offset)
        data = _read_exact(ciphertext, n, "ciphertext", offset)
        plaintext_out.write(dec.update(data, key))
        offset += n
    dec.final()
    return cipher_len
