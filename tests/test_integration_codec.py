import os

import pytest
import torch

import radix64
from radix64 import cli
from radix64.log import get_logger


@pytest.mark.parametrize("length", [0, 1, 2, 3, 16, 128, 1001])
def test_tensor_backend_matches_python(length: int) -> None:
    payload = os.urandom(length)
    encoded = radix64.encode(payload)
    assert radix64.encode_tensor(payload) == encoded
    assert radix64.decode_tensor(encoded) == payload


def test_tensor_backend_rfc_vectors() -> None:
    assert radix64.encode_tensor(b"foobarfoobarfoob") == b"Zm9vYmFyZm9vYmFyZm9vYg=="
    assert radix64.decode_tensor("Zm9vYmE=") == b"fooba"
    assert radix64.encode_tensor(bytes(range(256))) == radix64.encode(bytes(range(256)))


@pytest.mark.skipif(not torch.cuda.is_available(), reason="CUDA not available")
def test_tensor_backend_on_cuda() -> None:
    payload = os.urandom(300)
    encoded = radix64.encode_tensor(payload, device="cuda")
    assert encoded == radix64.encode(payload)
    assert radix64.decode_tensor(encoded, device="cuda") == payload


def test_tensor_backend_shares_validation() -> None:
    with pytest.raises(radix64.MalformedInputError, match="unexpected padding"):
        radix64.decode_tensor(b"Zg==Zm9v")
    with pytest.raises(radix64.MalformedInputError, match="not a multiple of 4"):
        radix64.decode_tensor(b"Zg=")


@pytest.mark.parametrize("backend", ["python", "torch"])
def test_batch_round_trip(backend: str) -> None:
    payloads = [b"", b"f", b"fo", b"foo", os.urandom(64)]
    encoded = radix64.encode_batch(payloads, backend=backend)
    assert encoded[:4] == [b"", b"Zg==", b"Zm8=", b"Zm9v"]
    assert radix64.decode_batch(encoded, backend=backend) == payloads


def test_batch_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="backend must be one of"):
        radix64.encode_batch([b"foo"], backend="numpy")


@pytest.mark.parametrize("backend", ["python", "torch"])
def test_cli_round_trip(tmp_path, backend: str) -> None:
    payload = b"cli integration payload \x00\xff"
    input_bytes = tmp_path / "input.bin"
    input_bytes.write_bytes(payload)
    encoded_path = tmp_path / "encoded.txt"
    decoded_path = tmp_path / "decoded.bin"

    cli.main(
        [
            "encode",
            "--input",
            str(input_bytes),
            "--output",
            str(encoded_path),
            "--backend",
            backend,
        ]
    )
    assert encoded_path.read_bytes() == radix64.encode(payload) + b"\n"

    cli.main(
        [
            "decode",
            "--input",
            str(encoded_path),
            "--output",
            str(decoded_path),
            "--backend",
            backend,
        ]
    )
    assert decoded_path.read_bytes() == payload


def test_cli_encode_without_newline(tmp_path) -> None:
    input_bytes = tmp_path / "input.bin"
    input_bytes.write_bytes(b"foobar")
    output = tmp_path / "out.txt"
    cli.main(
        ["encode", "--input", str(input_bytes), "--output", str(output), "--no-newline"]
    )
    assert output.read_bytes() == b"Zm9vYmFy"


def test_cli_reports_malformed_input(tmp_path, capsys) -> None:
    encoded = tmp_path / "bad.txt"
    encoded.write_bytes(b"Zm9")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["decode", "--input", str(encoded), "--output", str(tmp_path / "x")])
    assert excinfo.value.code == 2
    assert "not a multiple of 4" in capsys.readouterr().err


def test_cli_char_at(capsys) -> None:
    cli.main(["char-at", "27"])
    assert capsys.readouterr().out == "Character at index 27: b\n"


def test_cli_char_at_out_of_range(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["char-at", "64"])
    assert "index must be in 0..63" in capsys.readouterr().err


def test_package_logger_is_shared() -> None:
    logger = get_logger()
    assert logger is get_logger()
    assert logger.name == "radix64"
    assert len(logger.handlers) <= 1


def test_cli_verbose_does_not_leak_log_level(tmp_path) -> None:
    logger = get_logger()
    before = logger.level
    input_bytes = tmp_path / "input.bin"
    input_bytes.write_bytes(b"foo")
    cli.main(
        ["--verbose", "encode", "--input", str(input_bytes), "--output", str(tmp_path / "o")]
    )
    assert logger.level == before
