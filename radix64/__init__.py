"""Radix-64 (RFC 4648 base64) binary-to-text codec."""

from .codec import (
    ALPHABET,
    PAD,
    SENTINEL,
    AllocationError,
    Codec,
    CodecConfig,
    LengthOverflowError,
    MalformedInputError,
    Radix64Error,
    decode,
    encode,
)
from .tensor import decode_batch, decode_tensor, encode_batch, encode_tensor

__all__ = [
    "ALPHABET",
    "PAD",
    "SENTINEL",
    "AllocationError",
    "Codec",
    "CodecConfig",
    "LengthOverflowError",
    "MalformedInputError",
    "Radix64Error",
    "decode",
    "decode_batch",
    "decode_tensor",
    "encode",
    "encode_batch",
    "encode_tensor",
]

__version__ = "0.1.0"
