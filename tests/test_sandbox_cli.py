from __future__ import annotations

from pathlib import Path

import pytest

from roguelike_sim.runtime.sandbox_cli import main
from roguelike_sim.runtime.snapshot import load_snapshot, restore_game


REPO_ROOT = Path(__file__).resolve().parents[1]


def test_cli_runs_turns_and_prints_resources(capsys) -> None:
    code = main(
        [
            "--content-root",
            str(REPO_ROOT),
            "--turns",
            "3",
            "--city",
            "Alpha:10",
            "--build",
            "0:farm",
            "--assign",
            "0:farmer:8",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "  food: 30" in out
    assert "Turn: 3  EraTurn: 3" in out


def test_cli_export_and_resume(tmp_path: Path, capsys) -> None:
    export = tmp_path / "state.json"
    main(
        [
            "--content-root",
            str(REPO_ROOT),
            "--turns",
            "1",
            "--city",
            "Alpha:4",
            "--build",
            "0:mine",
            "--assign",
            "0:miner:4",
            "--export",
            str(export),
        ]
    )
    assert restore_game(load_snapshot(export)).resources["materials"] == 6

    main(["--content-root", str(REPO_ROOT), "--state", str(export), "--turns", "2"])

    out = capsys.readouterr().out
    assert "  materials: 18" in out
    assert "Turn: 3  EraTurn: 3" in out


def test_cli_reports_missing_content(tmp_path: Path, capsys) -> None:
    main(["--content-root", str(tmp_path), "--turns", "1"])

    out = capsys.readouterr().out
    assert out.count("Not found:") == 2
    assert "Turn: 1  EraTurn: 1" in out


@pytest.mark.parametrize(
    "argv",
    [
        ["--city", "Alpha"],
        ["--city", "Alpha:many"],
        ["--assign", "0:farmer:2"],
        ["--turns", "-1"],
    ],
)
def test_cli_rejects_malformed_arguments(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--content-root", str(REPO_ROOT), *argv])

    assert excinfo.value.code == 2


def test_cli_rejects_malformed_content(tmp_path: Path) -> None:
    roles = tmp_path / "content" / "roles" / "core.json"
    roles.parent.mkdir(parents=True)
    roles.write_text('[{"id": "x", "tags": 3}]', encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--content-root", str(tmp_path), "--turns", "1"])

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "name,payload",
    [
        ("state.json", b"[]"),
        ("state.json", b'{"schema_version": "game_snapshot_v1"}'),
        ("state.json", b'{"seed": "s", "turn": 0, "game": {"__type__": "CityState", "data": {}}}'),
        ("state.json", b"\xff\xfe"),
        ("state.json.gz", b"not gzip at all"),
    ],
)
def test_cli_rejects_malformed_state(tmp_path: Path, capsys, name: str, payload: bytes) -> None:
    state = tmp_path / name
    state.write_bytes(payload)

    with pytest.raises(SystemExit) as excinfo:
        main(["--content-root", str(REPO_ROOT), "--state", str(state)])

    assert excinfo.value.code == 2
    assert "cannot resume from" in capsys.readouterr().err
