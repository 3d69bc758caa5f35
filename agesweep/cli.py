# agesweep/cli.py: interactive age-based tree sweep
from __future__ import annotations
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import click
from loguru import logger

from agesweep.core.config import ConfigError, RootConfig, load_config
from agesweep.core.inputs import parse_confirmation, parse_directory, parse_threshold
from agesweep.fs.pruner import compute_deadline, prune_tree
from agesweep.fs.size import calculate_size

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

# --------------------------------------------------------------------------------------
# Console helpers
# --------------------------------------------------------------------------------------

def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

def _error(message: str) -> None:
    click.echo(f"\nError: {message}", err=True)

def _ask(message: str) -> Optional[str]:
    """Read one line; None means the input stream ended (or Ctrl-C)."""
    try:
        return click.prompt(message, default="", show_default=False)
    except click.Abort:
        click.echo()
        return None

def _setup(config_file: Optional[str]) -> Optional[RootConfig]:
    # Configure logger early to catch config errors
    _configure_logging("WARNING")
    try:
        cfg = load_config(config_file)
    except ConfigError as e:
        logger.debug(f"Configuration load failed: {e}")
        _error(f"invalid configuration: {e}")
        return None
    _configure_logging(cfg.system.log_level)
    logger.info("Configuration validated successfully.")
    return cfg

# --------------------------------------------------------------------------------------
# Prompt loops
# --------------------------------------------------------------------------------------

def _resolve_directory(initial: str) -> Optional[Path]:
    if initial:
        result = parse_directory(initial)
        if result.ok:
            return result.value
        click.echo(result.message)
    while True:
        answer = _ask("Enter the path of the directory to clean (empty input cancels)")
        if answer is None:
            return None
        result = parse_directory(answer)
        if result.ok:
            return result.value
        if result.cancelled:
            return None
        click.echo(result.message)

def _resolve_threshold() -> Optional[int]:
    while True:
        answer = _ask("Enter the age after which files are deleted (minutes)")
        if answer is None:
            return None
        result = parse_threshold(answer)
        if result.ok:
            return result.value
        click.echo(f"   {result.message}")

def _confirm(root: Path, deadline: datetime, cfg: RootConfig) -> bool:
    word = cfg.sweep.confirm_word
    verb = "accessed" if cfg.sweep.timestamp == "atime" else "modified"
    when = deadline.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    message = (
        f'\nFiles last {verb} before "{when}" in "{root}" and the directories they leave empty will be deleted.\n'
        "Continue?\n"
        "    empty - cancel\n"
        f"    {word} - continue\n"
        "Your decision"
    )
    while True:
        answer = _ask(message)
        if answer is None:
            return False
        result = parse_confirmation(answer, word)
        if result.ok:
            return True
        if result.cancelled:
            return False
        click.echo(f"    {result.message}.")

# --------------------------------------------------------------------------------------
# Sweep
# --------------------------------------------------------------------------------------

def perform_sweep(path: str, cfg: RootConfig) -> None:
    """Gather inputs, then measure, prune and measure ``path`` again.

    Any exception raised while measuring or pruning aborts the remaining steps
    and is reported once. Per-item deletion failures are reported as they
    happen and do not stop the walk.
    """
    root = _resolve_directory(path)
    if root is None:
        click.echo("Cancelled.")
        return

    minutes = _resolve_threshold()
    if minutes is None:
        click.echo("Cancelled.")
        return
    # fixed for the whole prune pass
    try:
        deadline = compute_deadline(minutes)
    except (OverflowError, ValueError) as e:
        _error(f"cannot compute a deadline {minutes} minutes back: {e}")
        return

    if not _confirm(root, deadline, cfg):
        click.echo("Cancelled.")
        return

    failures: List[Tuple[Path, OSError]] = []

    def on_error(item: Path, exc: OSError) -> None:
        failures.append((item, exc))
        kind = "directory" if item.is_dir() else "file"
        _error(f'could not delete {kind} "{item}": {exc.strerror or exc}')

    click.echo(f'\nCleaning directory "{root}"...')
    try:
        size = calculate_size(root)
        click.echo(f"Initial size: {size} bytes")
        logger.info(f"Pruning {root} with deadline {deadline.isoformat()}")
        freed = prune_tree(root, deadline, on_error, cfg.sweep.timestamp)
        click.echo(f"Freed: {freed} bytes")
        size = calculate_size(root)
        click.echo(f"Current size: {size} bytes")
    except Exception as e:
        logger.opt(exception=e).debug("Sweep aborted")
        _error(str(e))
        return

    if failures:
        logger.info(f"Sweep finished with {len(failures)} item(s) left in place after errors.")

# --------------------------------------------------------------------------------------
# CLI Root
# --------------------------------------------------------------------------------------

@click.group()
def cli() -> None:
    """Delete files older than a given age and the directories they leave empty."""
    pass

@cli.command()
@click.argument("path", required=False, default="")
@click.option("--config", "config_file", default=None, help="YAML config file (default: $AGESWEEP_CONFIG or configs/config.yaml).")
def sweep(path: str, config_file: Optional[str]) -> None:
    """Interactively prune PATH of files older than N minutes.

    Prompts for PATH when it is missing or not a directory, then for the age
    threshold, then for confirmation. Always exits with status 0.
    """
    cfg = _setup(config_file)
    if cfg is not None:
        perform_sweep(path, cfg)
    click.echo("\nDone.")

@cli.command(name="size")
@click.argument("path")
@click.option("--config", "config_file", default=None, help="YAML config file (default: $AGESWEEP_CONFIG or configs/config.yaml).")
def size_cmd(path: str, config_file: Optional[str]) -> None:
    """Print the total size of all files under PATH."""
    if _setup(config_file) is None:
        return
    result = parse_directory(path)
    if not result.ok:
        _error(result.message or "a directory path is required")
        return
    try:
        total = calculate_size(result.value)
    except Exception as e:
        logger.opt(exception=e).debug("Size calculation aborted")
        _error(str(e))
        return
    click.echo(f"Size: {total} bytes")

if __name__ == "__main__":
    cli()
