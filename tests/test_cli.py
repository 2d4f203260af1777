from __future__ import annotations

import importlib
import io
import json
import os
import zipfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from cannon_cli import __main__ as cli_entry
from cannon_core.updates import GetResponse, HeadResponse

MANIFEST_URL = "https://updates.example/manifest.json"
T0 = datetime(2023, 1, 1, tzinfo=timezone.utc).timestamp()


def _zip_bytes(members: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def _install_dir(tmp_path: Path) -> Path:
    root = tmp_path / "install"
    mods = root / "mods"
    mods.mkdir(parents=True)
    (root / "Game.exe").write_bytes(b"")
    for name in ("Frobnicate", "Widget"):
        path = mods / f"{name}.smod"
        path.write_bytes(_zip_bytes({"manifest.json": json.dumps({"steve_cannon": MANIFEST_URL})}))
        os.utime(path, (T0, T0))
    (mods / "Plain.smod").write_bytes(_zip_bytes({"readme.txt": "no metadata"}))
    return root


def _fake_transport_class(gets: dict[str, GetResponse]):
    created: list[object] = []

    class _FakeTransport:
        def __init__(self, config=None) -> None:
            self.config = config
            self.calls: list[tuple[str, str]] = []
            self.closed = False
            created.append(self)

        def head(self, location, if_modified_since=None):
            self.calls.append(("HEAD", location))
            return HeadResponse(status=200)

        def get(self, location):
            self.calls.append(("GET", location))
            return gets[location]

        def close(self) -> None:
            self.closed = True

    return _FakeTransport, created


@pytest.fixture
def cli_main(monkeypatch: pytest.MonkeyPatch):
    module = importlib.import_module("cannon_cli.main")
    monkeypatch.setattr(module, "configure_logging", lambda level: None)
    launched: list[Path] = []
    monkeypatch.setattr(module, "launch", lambda executable: launched.append(executable))
    monkeypatch.setattr(module, "launched", launched, raising=False)
    return module


def test_console_entrypoint_forwards_command_line(monkeypatch: pytest.MonkeyPatch) -> None:
    cli_main = importlib.import_module("cannon_cli.main")
    seen: list[list[str]] = []
    monkeypatch.setattr(cli_main, "main", lambda argv: seen.append(list(argv)) or 7)
    monkeypatch.setattr("sys.argv", ["cannon", "--nolaunch"])

    assert cli_entry.main() == 7
    assert seen == [["--nolaunch"]]


def test_updates_archives_and_launches(
    cli_main, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _install_dir(tmp_path)
    payload = _zip_bytes({"payload.txt": "fresh"})
    manifest = {
        "Frobnicate": {"uri": "https://example/f.smod", "last_modified": 1700000000},
        "Widget": {"uri": "https://example/w.smod", "last_modified": 1600000000},
    }
    transport_cls, created = _fake_transport_class(
        {
            MANIFEST_URL: GetResponse(status=200, body=json.dumps(manifest).encode("utf-8"), content_type="application/json"),
            "https://example/f.smod": GetResponse(status=200, body=payload),
        }
    )
    monkeypatch.setattr(cli_main, "HttpTransport", transport_cls)

    code = cli_main.main(["--dir", str(root), "--launch-target", "Game.exe"])

    out = capsys.readouterr().out
    assert code == 0
    assert "[cannon:update] Frobnicate.smod: update" in out
    assert "[cannon:update] Widget.smod: none" in out
    assert "[cannon:update] Plain.smod: skipped" in out
    assert (root / "mods" / "Frobnicate.smod").read_bytes() == payload
    assert cli_main.launched == [root.resolve() / "Game.exe"]
    transport = created[0]
    assert transport.closed
    assert transport.calls.count(("GET", MANIFEST_URL)) == 1


def test_failure_suppresses_launch(
    cli_main, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _install_dir(tmp_path)
    transport_cls, _ = _fake_transport_class(
        {MANIFEST_URL: GetResponse(status=200, body=json.dumps({"Other": "https://example/next.json"}).encode("utf-8"))}
    )
    monkeypatch.setattr(cli_main, "HttpTransport", transport_cls)

    code = cli_main.main(["--dir", str(root), "--launch-target", "Game.exe"])

    out = capsys.readouterr().out
    assert code == 1
    assert "Frobnicate.smod: fail" in out
    assert "not present in manifest" in out
    assert "not launching" in out
    assert cli_main.launched == []


def test_nolaunch_skips_launch(cli_main, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    root = _install_dir(tmp_path)
    manifest = {
        "Frobnicate": {"uri": "https://example/f.smod", "last_modified": 1600000000},
        "Widget": {"uri": "https://example/w.smod", "last_modified": 1600000000},
    }
    transport_cls, _ = _fake_transport_class(
        {MANIFEST_URL: GetResponse(status=200, body=json.dumps(manifest).encode("utf-8"), content_type="text/plain")}
    )
    monkeypatch.setattr(cli_main, "HttpTransport", transport_cls)

    code = cli_main.main(["--dir", str(root), "--launch-target", "Game.exe", "--nolaunch"])

    assert code == 0
    assert cli_main.launched == []


def test_missing_directory(cli_main, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli_main.main(["--dir", str(tmp_path / "nope")])

    assert code == 1
    assert "directory not found" in capsys.readouterr().out
