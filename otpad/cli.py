"""Command line front end: ``otpad -e FILE`` / ``otpad -d FILE -p PAD``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import ExitStack
from pathlib import Path

from . import __version__
from .engine import DEFAULT_CHUNK_SIZE, decrypt, encrypt
from .errors import EntropyUnavailable, InvalidSize, OtpError, SizeMismatch
from .padsource import PAD_SOURCES, PadSource, open_pad_source

log = logging.getLogger(__name__)

DEFAULT_PAD_NAME = "one-time-pad.otp"
DEFAULT_ENCRYPT_OUTPUT = "output.txt"
DEFAULT_DECRYPT_OUTPUT = "decrypt_output.txt"
PAD_SOURCE_ENV = "OTPAD_PAD_SOURCE"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SIZE = 2
EXIT_ENTROPY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otpad",
        description="Encrypt or decrypt a file with a one-time pad.",
        epilog=(
            "Exit codes: 0 success, 1 file or I/O failure, "
            "2 invalid size or size mismatch, 3 entropy source failure."
        ),
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "-e", "--encrypt", metavar="INPUT", help="encrypt INPUT and write a new pad"
    )
    mode.add_argument(
        "-d", "--decrypt", metavar="INPUT", help="decrypt INPUT using the pad given by -p"
    )
    parser.add_argument(
        "-p",
        "--one-time-pad",
        dest="pad",
        metavar="PAD",
        help=f"pad file (encrypt default: {DEFAULT_PAD_NAME}; required to decrypt)",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="OUTPUT",
        help=(
            f"output file (default: {DEFAULT_ENCRYPT_OUTPUT} when encrypting, "
            f"{DEFAULT_DECRYPT_OUTPUT} when decrypting)"
        ),
    )
    parser.add_argument(
        "--source",
        choices=PAD_SOURCES,
        default=os.environ.get(PAD_SOURCE_ENV, "auto"),
        help=f"pad source for encryption (default: ${PAD_SOURCE_ENV} or auto)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        metavar="N",
        help="I/O chunk size in bytes, a multiple of 8 (default: %(default)s)",
    )
    parser.add_argument(
        "--keep-partial",
        action="store_true",
        help="keep output and pad files written by a failed run",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="report progress")
    parser.add_argument("--debug", action="store_true", help="print debug messages")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level, format="%(name)s: %(levelname)s: %(message)s", stream=sys.stderr
    )


def _same_file(a: str, b: str) -> bool:
    return Path(a).resolve() == Path(b).resolve()


def _error(msg: str, code: int) -> int:
    print(f"otpad: error: {msg}", file=sys.stderr)
    return code


def _exit_code(e: OtpError) -> int:
    if isinstance(e, (InvalidSize, SizeMismatch)):
        return EXIT_SIZE
    if isinstance(e, EntropyUnavailable):
        return EXIT_ENTROPY
    return EXIT_FAILURE


def _run(
    args: argparse.Namespace, source: PadSource | None, written: list[str]
) -> None:
    """Open the streams for the selected mode and run the engine."""
    with ExitStack() as stack:

        def open_write(path: str):
            f = stack.enter_context(open(path, "wb"))
            written.append(path)
            log.debug('Opened file "%s" in write-binary', path)
            return f

        if args.encrypt:
            src = stack.enter_context(open(args.encrypt, "rb"))
            log.debug('Opened plain-text file "%s" in read-binary', args.encrypt)
            pad = open_write(args.pad)
            out = open_write(args.output)
            n = encrypt(src, out, pad, source=source, chunk_size=args.chunk_size)
            log.info("Encrypted %d bytes to %s, pad written to %s", n, args.output, args.pad)
        else:
            src = stack.enter_context(open(args.decrypt, "rb"))
            log.debug('Opened cipher-text file "%s" in read-binary', args.decrypt)
            pad = stack.enter_context(open(args.pad, "rb"))
            log.debug('Opened one-time-pad "%s" in read-binary', args.pad)
            out = open_write(args.output)
            n = decrypt(src, out, pad, chunk_size=args.chunk_size)
            log.info("Decrypted %d bytes to %s", n, args.output)


def _remove_partial(paths: list[str]) -> None:
    for path in paths:
        try:
            os.remove(path)
            log.info("Removed partial output %s", path)
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning("Could not remove partial output %s: %s", path, e)


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if args.chunk_size <= 0 or args.chunk_size % 8:
        parser.error("--chunk-size must be a positive multiple of 8")
    if args.source not in PAD_SOURCES:
        parser.error(f"${PAD_SOURCE_ENV} must be one of {', '.join(PAD_SOURCES)}")
    if args.encrypt:
        input_name = args.encrypt
        if args.pad is None:
            log.debug("-p not used, selecting default pad name %s", DEFAULT_PAD_NAME)
            args.pad = DEFAULT_PAD_NAME
        args.output = args.output or DEFAULT_ENCRYPT_OUTPUT
        outputs = [args.pad, args.output]
        inputs = [input_name]
    else:
        input_name = args.decrypt
        if args.pad is None:
            parser.error("decryption requires a one-time pad (-p PAD)")
        args.output = args.output or DEFAULT_DECRYPT_OUTPUT
        outputs = [args.output]
        inputs = [input_name, args.pad]

    for out_path in outputs:
        for in_path in inputs:
            if _same_file(out_path, in_path):
                return _error(f'"{out_path}" would overwrite input "{in_path}"', EXIT_FAILURE)
    if args.encrypt and _same_file(args.pad, args.output):
        return _error("pad and output must be different files", EXIT_FAILURE)
    if not os.path.isfile(input_name):
        return _error(f"{input_name} is an invalid file name", EXIT_FAILURE)

    source = None
    if args.encrypt:
        try:
            source = open_pad_source(args.source)
        except OSError as e:
            return _error(f"pad source unavailable: {e}", EXIT_ENTROPY)

    written: list[str] = []
    try:
        _run(args, source, written)
    except OtpError as e:
        code = _exit_code(e)
        _error(f"fatal: {e}", code)
    except OSError as e:
        code = _error(str(e), EXIT_FAILURE)
    else:
        return EXIT_OK
    if not args.keep_partial:
        _remove_partial(written)
    return code
