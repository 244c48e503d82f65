"""One-time-pad file encryption with OS-backed pad generation."""

from .engine import (
    DEFAULT_CHUNK_SIZE,
    Decryptor,
    Encryptor,
    decrypt,
    decrypt_bytes,
    encrypt,
    encrypt_bytes,
)
from .errors import (
    EntropyUnavailable,
    InvalidSize,
    OtpError,
    PadSourceError,
    ShortRead,
    SizeMismatch,
)
from .padsource import (
    PAD_WORD_BYTES,
    OsPadSource,
    PadSource,
    SecretsPadSource,
    open_pad_source,
)
from .util import MAX_STREAM_SIZE, xor_bytes

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MAX_STREAM_SIZE",
    "PAD_WORD_BYTES",
    # transform engine
    "encrypt",
    "decrypt",
    "encrypt_bytes",
    "decrypt_bytes",
    "Encryptor",
    "Decryptor",
    "xor_bytes",
    # pad sources
    "PadSource",
    "OsPadSource",
    "SecretsPadSource",
    "open_pad_source",
    # errors
    "OtpError",
    "InvalidSize",
    "SizeMismatch",
    "ShortRead",
    "EntropyUnavailable",
    "PadSourceError",
]
