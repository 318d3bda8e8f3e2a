"""Vectorized radix-64 transform on torch tensors.

Every window is processed at once with bitwise tensor ops and a table
gather. Output is byte-identical to :class:`radix64.codec.Codec`, and
decode input goes through the same validation.
"""

from typing import List, Union

import torch

from .codec import (
    ALPHABET,
    BACKENDS,
    DECODE_TABLE,
    PAD,
    SENTINEL,
    BytesLike,
    _as_bytes,
    _as_encoded_bytes,
    _calc_decode_length,
    _calc_encode_length,
    decode,
    encode,
)
from .log import get_logger

logger = get_logger()


def _to_tensor(data: bytes, device: str) -> torch.Tensor:
    # frombuffer needs a writable buffer to avoid a warning
    return torch.frombuffer(bytearray(data), dtype=torch.uint8).to(
        device=device, dtype=torch.int64
    )


def encode_tensor(data: BytesLike, device: str = "cpu") -> bytes:
    data = _as_bytes(data)
    if len(data) == 0:
        return b""
    n_out = _calc_encode_length(len(data))
    remaining = len(data) % 3

    padded = torch.zeros(n_out // 4 * 3, dtype=torch.int64, device=device)
    padded[: len(data)] = _to_tensor(data, device)
    groups = padded.view(-1, 3)
    b0, b1, b2 = groups[:, 0], groups[:, 1], groups[:, 2]

    # Zero filler bytes yield the correct symbols before the padding slots
    indices = torch.stack(
        [
            b0 >> 2,
            ((b0 & 0x03) << 4) | (b1 >> 4),
            ((b1 & 0x0F) << 2) | (b2 >> 6),
            b2 & 0x3F,
        ],
        dim=1,
    ).reshape(-1)
    table = torch.tensor(list(ALPHABET), dtype=torch.int64, device=device)
    output = bytearray(table[indices].cpu().tolist())
    logger.debug(f"encode_tensor: {len(data)} bytes -> {n_out} symbols on {device}")

    if remaining == 1:
        output[-2:] = bytes([PAD, PAD])
    elif remaining == 2:
        output[-1] = PAD
    return bytes(output)


def decode_tensor(data: Union[BytesLike, str], device: str = "cpu") -> bytes:
    data = _as_encoded_bytes(data)
    if len(data) == 0:
        return b""
    n_out = _calc_decode_length(data)

    table = torch.tensor(list(DECODE_TABLE), dtype=torch.int64, device=device)
    indices = table[_to_tensor(data, device)]
    indices = indices.masked_fill(indices == SENTINEL, 0).view(-1, 4)
    i0, i1, i2, i3 = indices[:, 0], indices[:, 1], indices[:, 2], indices[:, 3]

    decoded = torch.stack(
        [
            ((i0 << 2) | (i1 >> 4)) & 0xFF,
            ((i1 << 4) | (i2 >> 2)) & 0xFF,
            ((i2 << 6) | i3) & 0xFF,
        ],
        dim=1,
    ).reshape(-1)
    logger.debug(f"decode_tensor: {len(data)} symbols -> {n_out} bytes on {device}")
    return bytes(decoded[:n_out].cpu().tolist())


def _check_backend(backend: str) -> None:
    if backend not in BACKENDS:
        raise ValueError(f"backend must be one of: {', '.join(BACKENDS)}")


def encode_batch(
    items: List[BytesLike], backend: str = "python", device: str = "cpu"
) -> List[bytes]:
    _check_backend(backend)
    if backend == "torch":
        return [encode_tensor(item, device=device) for item in items]
    return [encode(item) for item in items]


def decode_batch(
    items: List[Union[BytesLike, str]], backend: str = "python", device: str = "cpu"
) -> List[bytes]:
    _check_backend(backend)
    if backend == "torch":
        return [decode_tensor(item, device=device) for item in items]
    return [decode(item) for item in items]


__all__ = [
    "encode_tensor",
    "decode_tensor",
    "encode_batch",
    "decode_batch",
]
