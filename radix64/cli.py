import argparse
import logging
import sys
from typing import List, Optional

from .codec import ALPHABET, BACKENDS, CodecConfig
from .log import get_logger
from .tensor import decode_batch, encode_batch

logger = get_logger()


def _read_bytes(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _write_bytes(path: str, data: bytes) -> None:
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        with open(path, "wb") as f:
            f.write(data)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Radix-64 encoder and decoder")
    parser.add_argument("--verbose", action="store_true", help="Log at debug level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--input", default="-", help="Input path, '-' for stdin")
    common.add_argument("--output", default="-", help="Output path, '-' for stdout")
    common.add_argument("--backend", choices=BACKENDS, default="python")
    common.add_argument("--device", default="cpu")

    enc = subparsers.add_parser("encode", parents=[common])
    enc.add_argument(
        "--no-newline",
        action="store_true",
        help="Do not append a trailing newline to the encoded output",
    )

    subparsers.add_parser("decode", parents=[common])

    char_at = subparsers.add_parser("char-at", help="Print the symbol at an index")
    char_at.add_argument("index", type=int)

    return parser


def _config_from_args(args) -> CodecConfig:
    cfg = CodecConfig(
        backend=args.backend,
        device=args.device,
        newline=not getattr(args, "no_newline", False),
    )
    cfg.validate()
    return cfg


def run_encode(args) -> None:
    cfg = _config_from_args(args)
    payload = _read_bytes(args.input)
    logger.info(f"Encoding {len(payload)} bytes with the {cfg.backend} backend")
    (encoded,) = encode_batch([payload], backend=cfg.backend, device=cfg.device)
    if cfg.newline:
        encoded += b"\n"
    _write_bytes(args.output, encoded)


def run_decode(args) -> None:
    cfg = _config_from_args(args)
    # Surrounding whitespace comes from files and terminals, not the codec
    encoded = _read_bytes(args.input).strip()
    logger.info(f"Decoding {len(encoded)} symbols with the {cfg.backend} backend")
    (data,) = decode_batch([encoded], backend=cfg.backend, device=cfg.device)
    _write_bytes(args.output, data)


def run_char_at(args) -> None:
    if not 0 <= args.index < len(ALPHABET):
        raise ValueError(f"index must be in 0..{len(ALPHABET) - 1}")
    symbol = chr(ALPHABET[args.index])
    sys.stdout.write(f"Character at index {args.index}: {symbol}\n")
    sys.stdout.flush()


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    previous_level = logger.level
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    try:
        if args.command == "encode":
            run_encode(args)
        elif args.command == "decode":
            run_decode(args)
        elif args.command == "char-at":
            run_char_at(args)
        else:
            parser.error("Unknown command")
    except ValueError as exc:
        parser.error(str(exc))
    finally:
        logger.setLevel(previous_level)


__all__ = ["build_arg_parser", "run_encode", "run_decode", "run_char_at", "main"]
