"""Tests for the command line front end and its exit codes."""

import os

import pytest

from otpad import cli

from .util import FailingPadSource


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_round_trip(workdir):
    message = os.urandom(1234)
    (workdir / "plain.bin").write_bytes(message)
    rc = cli.main(
        ["-e", "plain.bin", "-p", "msg.otp", "-o", "msg.enc", "--source", "secrets"]
    )
    assert rc == cli.EXIT_OK
    assert (workdir / "msg.enc").stat().st_size == len(message)
    assert (workdir / "msg.otp").stat().st_size == len(message)

    rc = cli.main(["-d", "msg.enc", "-p", "msg.otp", "-o", "plain.out"])
    assert rc == cli.EXIT_OK
    assert (workdir / "plain.out").read_bytes() == message


def test_default_file_names(workdir):
    (workdir / "plain.bin").write_bytes(b"hello world")
    assert cli.main(["-e", "plain.bin", "--source", "secrets"]) == cli.EXIT_OK
    assert (workdir / cli.DEFAULT_PAD_NAME).exists()
    assert (workdir / cli.DEFAULT_ENCRYPT_OUTPUT).exists()

    rc = cli.main(["--decrypt", cli.DEFAULT_ENCRYPT_OUTPUT, "--one-time-pad", cli.DEFAULT_PAD_NAME])
    assert rc == cli.EXIT_OK
    assert (workdir / cli.DEFAULT_DECRYPT_OUTPUT).read_bytes() == b"hello world"


def test_empty_input(workdir, capsys):
    (workdir / "empty.bin").write_bytes(b"")
    rc = cli.main(["-e", "empty.bin", "-p", "e.otp", "-o", "e.enc", "--source", "secrets"])
    assert rc == cli.EXIT_SIZE
    assert not (workdir / "e.otp").exists()
    assert not (workdir / "e.enc").exists()
    assert "invalid file size" in capsys.readouterr().err


def test_size_mismatch(workdir, capsys):
    (workdir / "ct").write_bytes(bytes(10))
    (workdir / "pad").write_bytes(bytes(9))
    rc = cli.main(["-d", "ct", "-p", "pad", "-o", "out"])
    assert rc == cli.EXIT_SIZE
    assert not (workdir / "out").exists()
    assert "size mismatch" in capsys.readouterr().err


def test_keep_partial(workdir):
    (workdir / "ct").write_bytes(bytes(10))
    (workdir / "pad").write_bytes(bytes(9))
    rc = cli.main(["-d", "ct", "-p", "pad", "-o", "out", "--keep-partial"])
    assert rc == cli.EXIT_SIZE
    assert (workdir / "out").read_bytes() == b""


def test_entropy_failure(workdir, monkeypatch):
    (workdir / "plain.bin").write_bytes(bytes(64))
    monkeypatch.setattr(cli, "open_pad_source", lambda name: FailingPadSource(fail_at=3))
    rc = cli.main(["-e", "plain.bin", "-p", "p.otp", "-o", "c.enc", "--chunk-size", "8"])
    assert rc == cli.EXIT_ENTROPY
    assert not (workdir / "p.otp").exists()
    assert not (workdir / "c.enc").exists()


def test_pad_source_unavailable(workdir, monkeypatch):
    (workdir / "plain.bin").write_bytes(b"data")

    def unavailable(name):
        raise OSError("no getrandom")

    monkeypatch.setattr(cli, "open_pad_source", unavailable)
    assert cli.main(["-e", "plain.bin", "--source", "os"]) == cli.EXIT_ENTROPY
    assert not (workdir / cli.DEFAULT_PAD_NAME).exists()


def test_missing_input(workdir, capsys):
    rc = cli.main(["-e", "nope.bin", "--source", "secrets"])
    assert rc == cli.EXIT_FAILURE
    assert "nope.bin is an invalid file name" in capsys.readouterr().err
    assert not (workdir / cli.DEFAULT_PAD_NAME).exists()


def test_missing_pad(workdir):
    (workdir / "ct").write_bytes(b"data")
    rc = cli.main(["-d", "ct", "-p", "missing.otp", "-o", "out"])
    assert rc == cli.EXIT_FAILURE
    assert not (workdir / "out").exists()


@pytest.mark.parametrize(
    "argv",
    [
        ["-e", "plain.bin", "-o", "plain.bin"],
        ["-e", "plain.bin", "-p", "plain.bin"],
        ["-e", "plain.bin", "-p", "same", "-o", "same"],
    ],
)
def test_refuses_to_overwrite(workdir, argv):
    (workdir / "plain.bin").write_bytes(b"keep me")
    assert cli.main(argv + ["--source", "secrets"]) == cli.EXIT_FAILURE
    assert (workdir / "plain.bin").read_bytes() == b"keep me"


def test_decrypt_output_over_pad_refused(workdir):
    (workdir / "ct").write_bytes(b"data")
    (workdir / "pad").write_bytes(b"pads")
    assert cli.main(["-d", "ct", "-p", "pad", "-o", "pad"]) == cli.EXIT_FAILURE
    assert (workdir / "pad").read_bytes() == b"pads"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-e", "a", "-d", "b"],
        ["-d", "ct"],
        ["-e", "a", "--chunk-size", "12"],
        ["-e", "a", "--source", "random"],
    ],
)
def test_usage_errors(workdir, argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 2


def test_bad_source_in_environment(workdir, monkeypatch):
    monkeypatch.setenv(cli.PAD_SOURCE_ENV, "random")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-e", "a"])
    assert excinfo.value.code == 2


def test_source_from_environment(monkeypatch):
    monkeypatch.setenv(cli.PAD_SOURCE_ENV, "secrets")
    args = cli.build_parser().parse_args(["-e", "x"])
    assert args.source == "secrets"
