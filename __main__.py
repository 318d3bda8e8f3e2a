"""CLI shim for running the codec directly from the repository checkout."""

from radix64.cli import main
from radix64.codec import (
    ALPHABET,
    Codec,
    CodecConfig,
    MalformedInputError,
    decode,
    encode,
)

__all__ = [
    "ALPHABET",
    "Codec",
    "CodecConfig",
    "MalformedInputError",
    "decode",
    "encode",
    "main",
]


if __name__ == "__main__":
    main()
