import os
import time
from pathlib import Path

import pytest
from click.testing import CliRunner
from loguru import logger

import agesweep.cli as cli_module


def _put(path: Path, size: int, minutes_ago: float) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    ts = time.time() - minutes_ago * 60
    os.utime(path, (ts, ts))
    return path


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    """No config file, no env overrides, and no loguru sink left on a closed stream."""
    monkeypatch.delenv("AGESWEEP_CONFIG", raising=False)
    monkeypatch.delenv("AGESWEEP_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logger.remove()


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "t"
    _put(root / "a.txt", 500, 10)
    _put(root / "sub" / "b.txt", 300, 1)
    return root


def _sweep(args, input_text):
    return CliRunner().invoke(cli_module.cli, ["sweep", *args], input=input_text)


def test_sweep_reports_before_freed_after(tree):
    result = _sweep([str(tree)], "5\nyes\n")
    assert result.exit_code == 0
    assert "Initial size: 800 bytes" in result.output
    assert "Freed: 500 bytes" in result.output
    assert "Current size: 300 bytes" in result.output
    assert result.output.rstrip().endswith("Done.")
    assert not (tree / "a.txt").exists()
    assert (tree / "sub" / "b.txt").exists()


def test_sweep_removes_emptied_subdirectory(tree):
    _put(tree / "sub" / "b.txt", 300, 10)
    result = _sweep([str(tree)], "5\nyes\n")
    assert "Freed: 800 bytes" in result.output
    assert "Current size: 0 bytes" in result.output
    assert not (tree / "sub").exists()
    assert tree.is_dir()


def test_sweep_prompts_for_path_when_not_given(tree):
    result = _sweep([], f"{tree}\n5\nyes\n")
    assert result.exit_code == 0
    assert "Enter the path of the directory to clean" in result.output
    assert "Freed: 500 bytes" in result.output


def test_sweep_unknown_path_then_cancel(tmp_path):
    missing = tmp_path / "missing"
    result = _sweep([str(missing)], "\n")
    assert result.exit_code == 0
    assert f'Directory "{missing}" not found' in result.output
    assert "Cancelled." in result.output
    assert "Initial size" not in result.output
    assert "Done." in result.output


def test_sweep_reprompts_threshold_until_positive_integer(tree):
    result = _sweep([str(tree)], "abc\n0\n5\nyes\n")
    assert "a numeric value is required" in result.output
    assert "the value must be greater than 0" in result.output
    assert "Freed: 500 bytes" in result.output


def test_sweep_reprompts_threshold_beyond_representable_range(tree):
    result = _sweep([str(tree)], "10000000000\n5\nyes\n")
    assert result.exit_code == 0
    assert "the value must not exceed" in result.output
    assert "Freed: 500 bytes" in result.output
    assert "Done." in result.output


def test_sweep_confirmation_retries_then_cancels(tree):
    result = _sweep([str(tree)], "5\nmaybe\n\n")
    assert result.exit_code == 0
    assert "the answer must be yes or empty." in result.output
    assert "Cancelled." in result.output
    assert "Initial size" not in result.output
    assert (tree / "a.txt").exists()


def test_sweep_end_of_input_cancels_cleanly(tree):
    result = _sweep([str(tree)], "")
    assert result.exit_code == 0
    assert "Cancelled." in result.output
    assert (tree / "a.txt").exists()


def test_sweep_reports_file_failure_and_continues(tree, monkeypatch):
    _put(tree / "sub" / "b.txt", 300, 10)
    real_unlink = Path.unlink

    def fake_unlink(self, *args, **kwargs):
        if self.name == "a.txt":
            raise PermissionError(13, "Permission denied", str(self))
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", fake_unlink)
    result = _sweep([str(tree)], "5\nyes\n")
    assert result.exit_code == 0
    assert f'Error: could not delete file "{tree / "a.txt"}": Permission denied' in result.output
    assert "Freed: 300 bytes" in result.output
    assert "Current size: 500 bytes" in result.output
    assert not (tree / "sub").exists()


def test_sweep_fatal_size_error_aborts_remaining_steps(tree, monkeypatch):
    def boom(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(cli_module, "calculate_size", boom)
    result = _sweep([str(tree)], "5\nyes\n")
    assert result.exit_code == 0
    assert "Error: [Errno 13] Permission denied" in result.output
    assert "Freed" not in result.output
    assert (tree / "a.txt").exists()
    assert "Done." in result.output


def test_sweep_fatal_prune_error_skips_final_size(tree, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("walk failed")

    monkeypatch.setattr(cli_module, "prune_tree", boom)
    result = _sweep([str(tree)], "5\nyes\n")
    assert result.exit_code == 0
    assert "Initial size: 800 bytes" in result.output
    assert "Error: walk failed" in result.output
    assert "Current size" not in result.output


def test_sweep_uses_configured_confirm_word(tree, tmp_path):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("sweep:\n  confirm_word: purge\n")
    result = _sweep([str(tree), "--config", str(cfg)], "5\nyes\npurge\n")
    assert "the answer must be purge or empty." in result.output
    assert "Freed: 500 bytes" in result.output


def test_sweep_invalid_config_exits_normally(tree, tmp_path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("sweep:\n  timestamp: ctime\n")
    result = _sweep([str(tree), "--config", str(cfg)], "5\nyes\n")
    assert result.exit_code == 0
    assert "Error: invalid configuration" in result.output
    assert (tree / "a.txt").exists()
    assert "Done." in result.output


def test_size_command(tree):
    result = CliRunner().invoke(cli_module.cli, ["size", str(tree)])
    assert result.exit_code == 0
    assert "Size: 800 bytes" in result.output
    assert (tree / "a.txt").exists()


def test_size_command_missing_directory(tmp_path):
    result = CliRunner().invoke(cli_module.cli, ["size", str(tmp_path / "nope")])
    assert result.exit_code == 0
    assert "Error: Directory" in result.output
