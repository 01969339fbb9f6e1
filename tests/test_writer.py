"""Create-or-update behaviour of the writer."""

from __future__ import annotations

import builtins
import errno
import os
import stat
from pathlib import Path

import pytest

from kvfile.core import writer
from kvfile.core.errors import ArgumentError, Status
from kvfile.core.reader import get_value
from kvfile.core.writer import set_value, write_value

REAL_OPEN = builtins.open


def _config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "kv.conf"
    path.write_bytes(text.encode("utf-8"))
    return path


def test_update_then_append(tmp_path: Path) -> None:
    path = _config(tmp_path, "alpha=1\nbeta=2\n")
    assert set_value(path, "beta", "9") == Status.OK
    assert path.read_text(encoding="utf-8") == "alpha=1\nbeta=9\n"

    assert set_value(path, "gamma", "3") == Status.OK
    assert path.read_text(encoding="utf-8") == "alpha=1\nbeta=9\ngamma=3\n"


def test_creates_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "new.conf"
    assert set_value(path, "key", "value") == Status.OK
    assert path.read_text(encoding="utf-8") == "key=value\n"


@pytest.mark.parametrize("initial", [None, "", "alpha=1\nbeta=2\n", "key=old\n"])
def test_round_trip(tmp_path: Path, initial: str | None) -> None:
    path = tmp_path / "kv.conf"
    if initial is not None:
        path.write_text(initial, encoding="utf-8")
    assert set_value(path, "key", "value") == Status.OK
    assert get_value(path, "key") == (Status.OK, "value")


def test_idempotent(tmp_path: Path) -> None:
    path = _config(tmp_path, "alpha=1\n")
    set_value(path, "key", "value")
    once = path.read_bytes()
    set_value(path, "key", "value")
    assert path.read_bytes() == once
    assert once.count(b"key=value") == 1


def test_whitespace_tolerance(tmp_path: Path) -> None:
    path = _config(tmp_path, " beta = 2 \r\nalpha=1\n")
    assert set_value(path, "beta", "9") == Status.OK
    assert path.read_text(encoding="utf-8") == "beta=9\nalpha=1\n"


def test_pass_through_lines_are_trimmed_and_blank_lines_dropped(tmp_path: Path) -> None:
    path = _config(tmp_path, "  just some text  \n\n\r\nalpha=1\nno_value\n")
    assert set_value(path, "key", "v") == Status.OK
    assert path.read_text(encoding="utf-8") == "just some text\nalpha=1\nno_value\nkey=v\n"


def test_every_occurrence_is_replaced(tmp_path: Path) -> None:
    path = _config(tmp_path, "key=1\nother=2\nkey=3\n")
    assert set_value(path, "key", "9") == Status.OK
    assert path.read_text(encoding="utf-8") == "key=9\nother=2\nkey=9\n"


def test_prefix_key_is_not_replaced(tmp_path: Path) -> None:
    path = _config(tmp_path, "foobar=1\n")
    assert set_value(path, "foo", "2") == Status.OK
    assert path.read_text(encoding="utf-8") == "foobar=1\nfoo=2\n"


def test_undecodable_bytes_pass_through(tmp_path: Path) -> None:
    path = tmp_path / "kv.conf"
    path.write_bytes(b"\xffjunk=1\nkey=old\n")
    assert set_value(path, "key", "new") == Status.OK
    assert path.read_bytes() == b"\xffjunk=1\nkey=new\n"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("", "value"),
        ("key", ""),
        ("a=b", "value"),
        ("a b", "value"),
        ("key", "two\nlines"),
        ("key", "carriage\rreturn"),
        ("\vkey", "value"),
        ("key\f", "value"),
        ("key", "value\v"),
        ("key", "\fvalue"),
        ("key", " value"),
        ("key", "=value"),
        ("key", ",value"),
    ],
)
def test_invalid_arguments(tmp_path: Path, key: str, value: str) -> None:
    path = _config(tmp_path, "alpha=1\n")
    assert set_value(path, key, value) == Status.ARGUMENT_ERROR
    assert path.read_text(encoding="utf-8") == "alpha=1\n"


def test_empty_path_is_argument_error() -> None:
    assert set_value("", "key", "value") == Status.ARGUMENT_ERROR
    with pytest.raises(ArgumentError):
        write_value("", "key", "value")


def test_unwritable_target_is_argument_error(tmp_path: Path) -> None:
    path = tmp_path / "missing-dir" / "kv.conf"
    assert set_value(path, "key", "value") == Status.ARGUMENT_ERROR
    assert not path.exists()


def test_unreadable_source_is_file_error(tmp_path: Path) -> None:
    # a directory cannot be read as a configuration file
    assert set_value(tmp_path, "key", "value") == Status.FILE_ERROR
    assert tmp_path.is_dir()


def test_atomic_rewrite(tmp_path: Path) -> None:
    path = _config(tmp_path, "alpha=1\nbeta=2\n")
    os.chmod(path, 0o640)
    assert set_value(path, "beta", "9", atomic=True) == Status.OK
    assert path.read_text(encoding="utf-8") == "alpha=1\nbeta=9\n"
    assert stat.S_IMODE(path.stat().st_mode) == 0o640
    assert sorted(p.name for p in tmp_path.iterdir()) == ["kv.conf"]


def test_atomic_creates_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "new.conf"
    assert set_value(path, "key", "value", atomic=True) == Status.OK
    assert path.read_text(encoding="utf-8") == "key=value\n"


def test_atomic_failure_keeps_original(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _config(tmp_path, "alpha=1\n")

    def _fail(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("kvfile.core.writer.os.replace", _fail)
    assert set_value(path, "alpha", "2", atomic=True) == Status.ARGUMENT_ERROR
    assert path.read_text(encoding="utf-8") == "alpha=1\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["kv.conf"]


def test_long_lines_are_truncated(tmp_path: Path) -> None:
    path = _config(tmp_path, "note=0123456789abcdef\nkey=1\n")
    assert set_value(path, "key", "2", line_size=12) == Status.OK
    assert path.read_text(encoding="utf-8") == "note=012345\nkey=2\n"


def test_whitespace_key_does_not_duplicate(tmp_path: Path) -> None:
    path = _config(tmp_path, "k=v\n")
    for _ in range(2):
        assert set_value(path, "\x0bk", "v") == Status.ARGUMENT_ERROR
    assert path.read_text(encoding="utf-8") == "k=v\n"


def test_inner_spaces_in_value_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "kv.conf"
    assert set_value(path, "greeting", "hello world") == Status.OK
    assert get_value(path, "greeting") == (Status.OK, "hello world")


def test_entry_at_line_bound(tmp_path: Path) -> None:
    path = tmp_path / "kv.conf"
    value = "v" * 509  # "k=" plus value fills the 511 usable characters
    assert set_value(path, "k", value) == Status.OK
    assert get_value(path, "k", 1000) == (Status.OK, value)
    assert set_value(path, "k", value) == Status.OK
    assert path.read_text(encoding="utf-8") == f"k={value}\n"


def test_entry_past_line_bound(tmp_path: Path) -> None:
    path = _config(tmp_path, "alpha=1\n")
    assert set_value(path, "k", "v" * 510) == Status.ARGUMENT_ERROR
    assert set_value(path, "k" * 600, "v") == Status.ARGUMENT_ERROR
    assert set_value(path, "key", "v" * 600) == Status.ARGUMENT_ERROR
    assert path.read_text(encoding="utf-8") == "alpha=1\n"


def test_line_bound_follows_line_size(tmp_path: Path) -> None:
    path = tmp_path / "kv.conf"
    assert set_value(path, "key", "1234567", line_size=12) == Status.OK
    assert set_value(path, "key", "12345678", line_size=12) == Status.ARGUMENT_ERROR
    assert get_value(path, "key", line_size=12) == (Status.OK, "1234567")


def _fail_writes(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_open(file, mode="r", *args, **kwargs):
        handle = REAL_OPEN(file, mode, *args, **kwargs)
        if "w" in mode:
            def write(text):
                raise OSError(errno.ENOSPC, "No space left on device")

            handle.write = write
        return handle

    monkeypatch.setattr(writer, "open", fake_open, raising=False)


class _BrokenReader:
    """File stand-in that fails after returning the first line."""

    def __init__(self, handle):
        self._handle = handle

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._handle.close()

    def __iter__(self):
        yield self._handle.readline()
        raise OSError(errno.EIO, "Input/output error")


def test_write_failure_in_place(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _config(tmp_path, "alpha=1\n")
    _fail_writes(monkeypatch)
    assert set_value(path, "alpha", "2") == Status.OUT_OF_MEMORY
    # the in-place protocol has already truncated the target
    assert path.read_text(encoding="utf-8") == ""


def test_write_failure_atomic_keeps_original(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _config(tmp_path, "alpha=1\n")
    _fail_writes(monkeypatch)
    assert set_value(path, "alpha", "2", atomic=True) == Status.OUT_OF_MEMORY
    assert path.read_text(encoding="utf-8") == "alpha=1\n"
    assert list(tmp_path.glob(".kvfile-*.tmp")) == []


def test_read_failure_is_file_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _config(tmp_path, "alpha=1\nbeta=2\n")

    def fake_open(file, mode="r", *args, **kwargs):
        handle = REAL_OPEN(file, mode, *args, **kwargs)
        return _BrokenReader(handle) if mode == "r" else handle

    monkeypatch.setattr(writer, "open", fake_open, raising=False)
    assert set_value(path, "beta", "9") == Status.FILE_ERROR
    assert path.read_text(encoding="utf-8") == "alpha=1\nbeta=2\n"


def test_new_file_mode_matches_between_protocols(tmp_path: Path) -> None:
    in_place = tmp_path / "in-place.conf"
    atomic = tmp_path / "atomic.conf"
    assert set_value(in_place, "key", "value") == Status.OK
    assert set_value(atomic, "key", "value", atomic=True) == Status.OK
    assert stat.S_IMODE(atomic.stat().st_mode) == stat.S_IMODE(in_place.stat().st_mode)
