"""Dynamic loader for the OS entropy call using CFFI (ABI mode)."""

import os
import sys
from typing import Any

from cffi import FFI

__all__ = ["ffi", "load_entropy_lib", "entropy_call_name"]

BCRYPT_USE_SYSTEM_PREFERRED_RNG = 0x00000002

_CDEFS = {
    "getrandom": "ssize_t getrandom(void *buf, size_t buflen, unsigned int flags);",
    "getentropy": "int getentropy(void *buf, size_t buflen);",
    "BCryptGenRandom": (
        "long BCryptGenRandom(void *hAlgorithm, void *pbBuffer,"
        " unsigned long cbBuffer, unsigned long dwFlags);"
    ),
}


def entropy_call_name() -> str:
    """Name of the CSPRNG function used on this platform."""
    if os.name == "nt":
        return "BCryptGenRandom"
    if sys.platform.startswith("linux"):
        return "getrandom"
    return "getentropy"


def _open_library(name: str):
    if name == "BCryptGenRandom":
        return ffi.dlopen("bcrypt.dll")
    # libc symbols are already loaded into the interpreter
    return ffi.dlopen(None)


def load_entropy_lib() -> Any:
    """Load the library exposing the entropy call, caching the result.

    Raises:
        OSError: If the library or the symbol is not available here.
    """
    global _lib
    if _lib is not None:
        return _lib
    name = entropy_call_name()
    try:
        lib = _open_library(name)
        getattr(lib, name)
    except (OSError, AttributeError) as e:
        raise OSError(f"Failed to load {name}() for entropy: {e}")
    _lib = lib
    return lib


ffi = FFI()
ffi.cdef(_CDEFS[entropy_call_name()])
_lib: Any = None
