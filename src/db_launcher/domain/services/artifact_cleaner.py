"""Database artifact cleanup.

Two independent operations:

- delete_matching() removes, right away, every entry of a directory whose
  name starts with a prefix. Directories are removed depth-first. It is
  used before startup to clear leftovers of a previous run.
- schedule_deletion() registers one exact file for deletion at process
  exit, provided it exists when registered. schedule_artifact_deletion()
  applies it to the fixed set of artifact files of a file-backed database.

Neither operation raises on filesystem errors; failures are counted in the
returned report instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from db_launcher.infrastructure.logging import get_logger
from db_launcher.ports.outbound import ExitRegistrar

logger = get_logger(__name__)

# Files written by a file-backed database, appended to the db_name
ARTIFACT_SUFFIXES: tuple[str, ...] = (".log", ".properties", ".script", ".data", ".backup")


@dataclass
class CleanupReport:
    """Outcome of a best-effort cleanup.

    Attributes:
        deleted: Entries removed (nested entries included).
        failed: Entries that could not be removed.
    """

    deleted: int = 0
    failed: int = 0

    @property
    def clean(self) -> bool:
        return self.failed == 0


def delete_matching(base_dir: str | Path, prefix: str) -> CleanupReport:
    """Delete the entries of base_dir whose names start with prefix.

    Only direct entries of base_dir are matched. A matching directory is
    removed with all its contents. A missing or unreadable base_dir means
    there is nothing to delete.

    Args:
        base_dir: Directory to scan.
        prefix: Name prefix of the entries to delete.

    Returns:
        Counts of removed and failed entries.
    """
    report = CleanupReport()
    try:
        with os.scandir(base_dir) as entries:
            matches = [Path(entry.path) for entry in entries if entry.name.startswith(prefix)]
    except OSError:
        logger.debug("cleanup_dir_unreadable", base_dir=str(base_dir))
        return report

    for path in matches:
        _delete_entry(path, report)
    return report


def _delete_entry(path: Path, report: CleanupReport) -> None:
    """Remove a file, or a directory after its children."""
    # Symlinks are removed, never followed
    is_dir = path.is_dir() and not path.is_symlink()
    if is_dir:
        try:
            children = list(path.iterdir())
        except OSError:
            children = []
        for child in children:
            _delete_entry(child, report)

    try:
        if is_dir:
            path.rmdir()
        else:
            path.unlink()
    except FileNotFoundError:
        # Removed concurrently
        return
    except OSError as e:
        logger.debug("cleanup_delete_failed", path=str(path), error=str(e))
        report.failed += 1
        return
    report.deleted += 1


def schedule_deletion(path: str | Path, registrar: ExitRegistrar) -> bool:
    """Register a file for deletion at exit if it exists now.

    Args:
        path: File to delete at exit.
        registrar: Where exit-time deletions are collected.

    Returns:
        True if the path was registered.
    """
    path = Path(path)
    try:
        if not path.exists():
            return False
        registrar.register(path.absolute())
    except OSError as e:
        logger.debug("cleanup_schedule_failed", path=str(path), error=str(e))
        return False
    return True


def schedule_artifact_deletion(db_name: str, registrar: ExitRegistrar) -> list[Path]:
    """Register the existing artifact files of a database for exit deletion.

    Returns:
        The paths that were registered.
    """
    scheduled = []
    for suffix in ARTIFACT_SUFFIXES:
        path = Path(db_name + suffix)
        if schedule_deletion(path, registrar):
            scheduled.append(path)
    return scheduled
