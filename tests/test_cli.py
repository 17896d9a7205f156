from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest

from autominer import cli
from autominer.blockmap import BlockMap


@pytest.fixture()
def small_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AUTOMINER_START_MARGIN", "8")
    monkeypatch.setenv("AUTOMINER_BOUNDS_MARGIN", "0")


def _args(tmp_path: Path, world: Path):
    return [
        str(world),
        "--cache",
        str(tmp_path / "cache.dat"),
        "--output",
        str(tmp_path / "out.txt"),
        "--seed",
        "1",
        "--iterations",
        "2",
        "--mine-length",
        "10",
        "--branches",
        "2",
    ]


def test_main_builds_cache_and_writes_report(tmp_path: Path, stone_world: Path, small_env):
    assert cli.main(_args(tmp_path, stone_world)) == 0

    bm = BlockMap.load(tmp_path / "cache.dat")
    assert (bm.cx, bm.cz, bm.min_y, bm.max_y) == (48, 48, 0, 25)
    assert bm.get(10, 10, 10) == 1
    assert bm.get(10, 20, 10) == 0

    lines = (tmp_path / "out.txt").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Stone"
    assert "Single branch" in lines[1] and "Strategy x+7" in lines[1]
    rows = lines[2:7]
    assert [row.split()[0] for row in rows] == ["9", "10", "11", "12", "13"]
    assert all(cell == "10.00" for row in rows for cell in row.split()[1:])


def test_main_reuses_existing_cache(tmp_path: Path, stone_world: Path, small_env):
    assert cli.main(_args(tmp_path, stone_world)) == 0
    shutil.rmtree(stone_world)
    (tmp_path / "out.txt").unlink()
    assert cli.main(_args(tmp_path, stone_world)) == 0
    assert (tmp_path / "out.txt").exists()


def test_main_missing_world(tmp_path: Path, capsys: pytest.CaptureFixture):
    assert cli.main(_args(tmp_path, tmp_path / "nope")) == 2
    assert "ERROR: missing region directory" in capsys.readouterr().err
    assert not (tmp_path / "cache.dat").exists()


def test_main_invalid_settings(tmp_path: Path, stone_world: Path, capsys: pytest.CaptureFixture):
    args = _args(tmp_path, stone_world)
    args[args.index("--iterations") + 1] = "0"
    assert cli.main(args) == 2
    assert "invalid settings" in capsys.readouterr().err


def test_main_logs_under_package_logger(tmp_path: Path, stone_world: Path, small_env, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.INFO, logger="autominer"):
        assert cli.main(_args(tmp_path, stone_world)) == 0
    names = {r.name for r in caplog.records}
    assert "autominer.cli" in names
    assert "autominer.chunks" in names
