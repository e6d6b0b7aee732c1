from __future__ import annotations

import functools
import hashlib

import pytest

from casd.cli import casd_main, store_main
from casd.discovery import MARKER_DIR, locate_store


def test_casd_init_creates_marker(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert casd_main(["init"]) == 0
    assert casd_main(["init"]) == 0

    assert (tmp_path / MARKER_DIR).is_dir()
    assert capsys.readouterr().out.splitlines() == [str(tmp_path / MARKER_DIR)] * 2


def test_casd_add_from_nested_directory(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    casd_main(["init"])
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (nested / "file.txt").write_bytes(b"content")
    monkeypatch.chdir(nested)
    capsys.readouterr()

    exit_code = casd_main(["add", "file.txt"])

    stored = tmp_path / MARKER_DIR / hashlib.sha512(b"content").hexdigest()
    assert exit_code == 0
    assert stored.read_bytes() == b"content"
    assert capsys.readouterr().out.strip() == str(stored)


def test_casd_add_with_blake3_and_tee_copy(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    casd_main(["init"])
    (tmp_path / "f").write_bytes(b"x")
    capsys.readouterr()

    exit_code = casd_main(["add", "--algorithm", "blake3", "--strategy", "TEE_COPY", "f"])

    stored = capsys.readouterr().out.strip()
    assert exit_code == 0
    assert len(stored.rsplit("/", 1)[1]) == 128
    assert stored != str(tmp_path / MARKER_DIR / hashlib.sha512(b"x").hexdigest())


def test_casd_add_outside_store_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "casd.cli.locate_store",
        functools.partial(locate_store, marker=".casd-cli-test-marker"),
    )
    (tmp_path / "f").write_bytes(b"x")

    assert casd_main(["add", "f"]) == 1
    assert "casd init" in capsys.readouterr().err


def test_casd_add_missing_file_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    casd_main(["init"])

    assert casd_main(["add", "missing.txt"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_casd_requires_a_command():
    with pytest.raises(SystemExit) as excinfo:
        casd_main([])

    assert excinfo.value.code == 2


@pytest.fixture
def store_config(tmp_path):
    shots = tmp_path / "shots"
    shots.mkdir()
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        f'clippings = "{tmp_path / "notes" / "clips"}"\n'
        f'strip_dir = "{tmp_path / "notes"}"\n'
        f'screenshot_dir = "{shots}"\n'
    )
    return config_file


def test_store_explicit_path(tmp_path, store_config, capsys):
    source = tmp_path / "photo.png"
    source.write_bytes(b"img")

    exit_code = store_main(
        ["--config", str(store_config), "--clipboard-command", "true", str(source)]
    )

    name = hashlib.sha512(b"img").hexdigest() + ".png"
    stored = tmp_path / "notes" / "clips" / name
    assert exit_code == 0
    assert stored.read_bytes() == b"img"
    assert capsys.readouterr().out.strip() == f"clips/{name}"


def test_store_last_screenshot_takes_precedence(tmp_path, store_config, write_file, capsys):
    write_file("shots/old.png", b"old", mtime=1_000)
    write_file("shots/new.png", b"new", mtime=2_000)
    ignored = write_file("ignored.txt", b"ignored")

    exit_code = store_main(
        [
            "--config",
            str(store_config),
            "--clipboard-command",
            "true",
            "--last-screenshot",
            str(ignored),
        ]
    )

    name = hashlib.sha512(b"new").hexdigest() + ".png"
    assert exit_code == 0
    assert (tmp_path / "notes" / "clips" / name).is_file()
    assert capsys.readouterr().out.strip() == f"clips/{name}"


def test_store_clipboard_failure_exits_non_zero(tmp_path, store_config, capsys):
    source = tmp_path / "a.txt"
    source.write_bytes(b"a")

    exit_code = store_main(
        ["--config", str(store_config), "--clipboard-command", "false", str(source)]
    )

    assert exit_code == 1
    assert "clipboard" in capsys.readouterr().err


def test_store_missing_config_exits_non_zero(tmp_path, capsys):
    source = tmp_path / "a.txt"
    source.write_bytes(b"a")

    assert store_main(["--config", str(tmp_path / "none.toml"), str(source)]) == 1
    assert "No config file" in capsys.readouterr().err


def test_store_requires_path_or_flag(store_config):
    with pytest.raises(SystemExit) as excinfo:
        store_main(["--config", str(store_config)])

    assert excinfo.value.code == 2


def test_casd_add_overlong_name_reports_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    casd_main(["init"])

    assert casd_main(["add", "a" * 300]) == 1
    assert "stat failed" in capsys.readouterr().err


def test_store_prints_absolute_path_without_strip_dir(tmp_path, capsys):
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        f'clippings = "{tmp_path / "clips"}"\nscreenshot_dir = "{tmp_path}"\n'
    )
    source = tmp_path / "a.txt"
    source.write_bytes(b"a")

    exit_code = store_main(
        ["--config", str(config_file), "--clipboard-command", "true", str(source)]
    )

    expected = tmp_path / "clips" / (hashlib.sha512(b"a").hexdigest() + ".txt")
    assert exit_code == 0
    assert capsys.readouterr().out.strip() == str(expected)
