import dataclasses
import sys
from typing import Callable, ClassVar, Optional, Union

from .log import get_logger

ALPHABET = (
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"abcdefghijklmnopqrstuvwxyz"
    b"0123456789"
    b"+/"
)
PAD = ord("=")
SENTINEL = 64

_INVALID = 0xFF


def _build_decode_table() -> bytes:
    table = bytearray([_INVALID] * 256)
    for index, symbol in enumerate(ALPHABET):
        table[symbol] = index
    table[PAD] = SENTINEL
    return bytes(table)


DECODE_TABLE = _build_decode_table()

BytesLike = Union[bytes, bytearray, memoryview]
Allocator = Callable[[int], bytearray]

BACKENDS = ("python", "torch")

logger = get_logger()


@dataclasses.dataclass
class CodecConfig:
    backend: str = "python"
    device: str = "cpu"
    newline: bool = True

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of: {', '.join(BACKENDS)}")


class Radix64Error(Exception):
    pass


class MalformedInputError(Radix64Error, ValueError):
    pass


class LengthOverflowError(Radix64Error, ValueError):
    pass


class AllocationError(Radix64Error, MemoryError):
    pass


def _as_bytes(data: BytesLike) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"encode expects a bytes-like object, not {type(data).__name__}"
        )
    return bytes(data)


def _as_encoded_bytes(data: Union[BytesLike, str]) -> bytes:
    if isinstance(data, str):
        try:
            return data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise MalformedInputError(
                f"non-ASCII character at offset {exc.start}"
            ) from exc
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"decode expects a bytes-like object or str, not {type(data).__name__}"
        )
    return bytes(data)


def _calc_encode_length(n: int) -> int:
    if n == 0:
        return 0
    n_out = -(-n // 3) * 4
    if n_out > sys.maxsize:
        raise LengthOverflowError(
            f"encoded length for {n} input bytes exceeds {sys.maxsize}"
        )
    return n_out


def _count_padding(data: bytes) -> int:
    """Validate ``data`` as encoded input and return its trailing '=' count.

    '=' may only appear as the last one or two symbols of the final group.
    """
    if len(data) % 4 != 0:
        raise MalformedInputError(
            f"encoded length {len(data)} is not a multiple of 4"
        )
    last_group = len(data) - 4
    padding = 0
    for offset, symbol in enumerate(data):
        value = DECODE_TABLE[symbol]
        if value == _INVALID:
            raise MalformedInputError(
                f"invalid symbol {bytes([symbol])!r} at offset {offset}"
            )
        if value == SENTINEL:
            if offset < last_group + 2:
                raise MalformedInputError(f"unexpected padding at offset {offset}")
            padding += 1
        elif padding:
            raise MalformedInputError(
                f"data symbol after padding at offset {offset}"
            )
    return padding


def _calc_decode_length(data: bytes) -> int:
    if len(data) == 0:
        return 0
    # Always shorter than the input, so only encode can overflow
    return (len(data) // 4) * 3 - _count_padding(data)


def _allocate(allocator: Optional[Allocator], size: int) -> bytearray:
    alloc = bytearray if allocator is None else allocator
    try:
        buf = alloc(size)
    except MemoryError as exc:
        raise AllocationError(f"could not allocate {size} bytes") from exc
    if len(buf) != size:
        raise AllocationError(
            f"allocator returned {len(buf)} bytes, expected {size}"
        )
    return buf


@dataclasses.dataclass(frozen=True)
class Codec:
    """Radix-64 codec over the standard RFC 4648 alphabet."""

    _table: ClassVar[bytes] = ALPHABET

    @classmethod
    def init(cls) -> "Codec":
        return cls()

    def _char_at(self, index: int) -> int:
        return self._table[index]

    def _char_index(self, symbol: int) -> int:
        if symbol == PAD:
            return SENTINEL
        value = DECODE_TABLE[symbol]
        if value == _INVALID:
            raise MalformedInputError(f"invalid symbol {bytes([symbol])!r}")
        return value

    def encode(self, data: BytesLike, allocator: Optional[Allocator] = None) -> bytes:
        data = _as_bytes(data)
        if len(data) == 0:
            return b""
        n_out = _calc_encode_length(len(data))
        output = _allocate(allocator, n_out)
        logger.debug(f"encode: {len(data)} bytes -> {n_out} symbols")

        out_position = 0
        full = len(data) - len(data) % 3
        for i in range(0, full, 3):
            b0, b1, b2 = data[i], data[i + 1], data[i + 2]
            output[out_position] = self._char_at(b0 >> 2)
            output[out_position + 1] = self._char_at(((b0 & 0x03) << 4) | (b1 >> 4))
            output[out_position + 2] = self._char_at(((b1 & 0x0F) << 2) | (b2 >> 6))
            output[out_position + 3] = self._char_at(b2 & 0x3F)
            out_position += 4

        remaining = len(data) - full
        if remaining == 2:
            b0, b1 = data[full], data[full + 1]
            output[out_position] = self._char_at(b0 >> 2)
            output[out_position + 1] = self._char_at(((b0 & 0x03) << 4) | (b1 >> 4))
            output[out_position + 2] = self._char_at((b1 & 0x0F) << 2)
            output[out_position + 3] = PAD
        elif remaining == 1:
            b0 = data[full]
            output[out_position] = self._char_at(b0 >> 2)
            output[out_position + 1] = self._char_at((b0 & 0x03) << 4)
            output[out_position + 2] = PAD
            output[out_position + 3] = PAD

        return bytes(output)

    def decode(
        self, data: Union[BytesLike, str], allocator: Optional[Allocator] = None
    ) -> bytes:
        data = _as_encoded_bytes(data)
        if len(data) == 0:
            return b""
        # Validates before anything is allocated
        n_out = _calc_decode_length(data)
        output = _allocate(allocator, n_out)
        logger.debug(f"decode: {len(data)} symbols -> {n_out} bytes")

        out_position = 0
        for i in range(0, len(data), 4):
            i0 = self._char_index(data[i])
            i1 = self._char_index(data[i + 1])
            i2 = self._char_index(data[i + 2])
            i3 = self._char_index(data[i + 3])
            output[out_position] = ((i0 << 2) | (i1 >> 4)) & 0xFF
            if i2 != SENTINEL:
                output[out_position + 1] = ((i1 << 4) | (i2 >> 2)) & 0xFF
            if i3 != SENTINEL:
                output[out_position + 2] = ((i2 << 6) | i3) & 0xFF
            out_position += 3

        return bytes(output)


_default_codec = Codec.init()


def encode(data: BytesLike, allocator: Optional[Allocator] = None) -> bytes:
    return _default_codec.encode(data, allocator=allocator)


def decode(data: Union[BytesLike, str], allocator: Optional[Allocator] = None) -> bytes:
    return _default_codec.decode(data, allocator=allocator)


__all__ = [
    "ALPHABET",
    "BACKENDS",
    "CodecConfig",
    "PAD",
    "SENTINEL",
    "DECODE_TABLE",
    "Codec",
    "Radix64Error",
    "MalformedInputError",
    "LengthOverflowError",
    "AllocationError",
    "encode",
    "decode",
]
