"""
Hash-based signature CLI entry point.

Generate keys, sign files and verify signatures with the one-time (Lamport)
or multi-use (Merkle) scheme. Keys and signatures are stored in the
versioned binary encoding of `hashsig.subspecs.codec`.

Usage::

    python -m hashsig keygen alice.sk alice.pk --leaves 16
    python -m hashsig sign message.txt alice.sk message.sig
    python -m hashsig verify message.txt message.sig alice.pk

Signing rewrites the private key file with the updated leaf counter (or
consumed flag) BEFORE the signature file is written. A crash between the two
steps wastes a leaf but never reuses one.

Exit codes:
    0  success (or valid signature)
    1  invalid signature
    2  usage error
    3  malformed key or signature, or index out of range
    4  key exhausted
    5  one-time key already used
    6  secure randomness unavailable
    7  file I/O error
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from hashsig.subspecs import codec, lamport, merkle
from hashsig.subspecs.hashing import TARGET_CONFIG
from hashsig.subspecs.lamport import TARGET_LAMPORT_SCHEME
from hashsig.subspecs.merkle import TARGET_MERKLE_SCHEME
from hashsig.types import (
    AlreadyUsedKey,
    IndexOutOfRange,
    KeyExhausted,
    MalformedInput,
    RandomnessFailure,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_MALFORMED = 3
EXIT_EXHAUSTED = 4
EXIT_ALREADY_USED = 5
EXIT_RANDOMNESS = 6
EXIT_IO = 7

_HANDLER_NAME = "hashsig-cli"


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the CLI with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter("%(levelname)-8s %(name)s: %(message)s")
    else:
        formatter = ColoredFormatter()
    handler.setFormatter(formatter)

    # Replace the handler of a previous invocation in the same process.
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(handler)


def write_atomic(path: Path, data: bytes) -> None:
    """
    Replace the content of `path` with `data` in one step.

    The bytes go to a temporary file in the same directory first, which is
    flushed to disk and then renamed over the target. Readers observe either
    the old or the new content, never a partial write.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate a key pair and write both halves."""
    if args.one_time:
        pk, sk = TARGET_LAMPORT_SCHEME.key_gen()
        logger.info("Generated one-time key pair")
    else:
        pk, sk = TARGET_MERKLE_SCHEME.key_gen(args.leaves)
        logger.info("Generated multi-use key pair with %d leaves", args.leaves)

    write_atomic(args.private, codec.encode(sk))
    write_atomic(args.public, codec.encode(pk))
    logger.info("Wrote private key to %s and public key to %s", args.private, args.public)
    return EXIT_OK


def cmd_sign(args: argparse.Namespace) -> int:
    """Sign a message file, persisting the consumed key before the signature."""
    message = args.message.read_bytes()
    sk = codec.decode(args.private.read_bytes())

    if isinstance(sk, lamport.SecretKey):
        sig: codec.Encodable = TARGET_LAMPORT_SCHEME.sign(sk, message)
    elif isinstance(sk, merkle.SecretKey):
        sig = TARGET_MERKLE_SCHEME.sign(sk, message)
        logger.info("Signed with leaf %d, %d remaining", sig.index, sk.remaining)
    else:
        raise MalformedInput(f"{args.private} does not hold a private key")

    write_atomic(args.private, codec.encode(sk))
    write_atomic(args.signature, codec.encode(sig))
    logger.info("Wrote signature to %s", args.signature)
    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify a signature file over a message file."""
    message = args.message.read_bytes()
    sig = codec.decode(args.signature.read_bytes())
    pk = codec.decode(args.public.read_bytes())

    if isinstance(pk, lamport.PublicKey) and isinstance(sig, lamport.Signature):
        valid = TARGET_LAMPORT_SCHEME.verify(pk, message, sig)
    elif isinstance(pk, merkle.PublicKey) and isinstance(sig, merkle.Signature):
        valid = TARGET_MERKLE_SCHEME.verify(pk, message, sig)
    else:
        raise MalformedInput(
            f"Cannot verify a {type(sig).__name__} against a {type(pk).__name__}"
        )

    print("valid" if valid else "invalid")
    return EXIT_OK if valid else EXIT_INVALID


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its three subcommands."""
    parser = argparse.ArgumentParser(
        prog="hashsig",
        description="Hash-based one-time and multi-use signatures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate a key pair")
    keygen.add_argument("private", type=Path, help="Output path of the private key")
    keygen.add_argument("public", type=Path, help="Output path of the public key")
    size = keygen.add_mutually_exclusive_group()
    size.add_argument(
        "--leaves",
        type=int,
        default=16,
        help="Number of signatures the multi-use key can produce (default: 16)",
    )
    size.add_argument(
        "--one-time",
        action="store_true",
        help="Generate a single one-time key instead of a multi-use key",
    )
    keygen.set_defaults(handler=cmd_keygen)

    sign = subparsers.add_parser("sign", help="Sign a message file")
    sign.add_argument("message", type=Path, help="File holding the message")
    sign.add_argument("private", type=Path, help="Private key file (updated in place)")
    sign.add_argument("signature", type=Path, help="Output path of the signature")
    sign.set_defaults(handler=cmd_sign)

    verify = subparsers.add_parser("verify", help="Verify a signature")
    verify.add_argument("message", type=Path, help="File holding the message")
    verify.add_argument("signature", type=Path, help="Signature file")
    verify.add_argument("public", type=Path, help="Public key file")
    verify.set_defaults(handler=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "keygen" and not 1 <= args.leaves <= TARGET_CONFIG.MAX_LEAVES:
        parser.error(f"--leaves must be in [1, {TARGET_CONFIG.MAX_LEAVES}]")

    setup_logging(args.verbose, args.no_color)

    try:
        return args.handler(args)
    except (MalformedInput, IndexOutOfRange) as exc:
        logger.error("%s", exc)
        return EXIT_MALFORMED
    except KeyExhausted as exc:
        logger.error("%s", exc)
        return EXIT_EXHAUSTED
    except AlreadyUsedKey as exc:
        logger.error("%s", exc)
        return EXIT_ALREADY_USED
    except RandomnessFailure as exc:
        logger.error("%s", exc)
        return EXIT_RANDOMNESS
    except OSError as exc:
        logger.error("%s", exc)
        return EXIT_IO


if __name__ == "__main__":
    sys.exit(main())
