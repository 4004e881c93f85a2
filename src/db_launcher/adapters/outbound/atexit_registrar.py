"""Exit registrar backed by the interpreter's atexit hooks.

The registrar installs a single atexit hook the first time a path is
registered. At normal interpreter exit the hook deletes every registered
path once; missing files and removal errors are ignored. Crashes and
os._exit() skip the hook.
"""

from __future__ import annotations

import atexit
import threading
from pathlib import Path

from db_launcher.infrastructure.logging import get_logger

logger = get_logger(__name__)


class AtexitRegistrar:
    """Append-only set of files deleted at interpreter exit."""

    def __init__(self) -> None:
        self._paths: list[Path] = []
        self._lock = threading.Lock()
        self._hooked = False
        self._done = False

    def register(self, path: Path) -> None:
        """Schedule an absolute path for deletion at process exit."""
        path = Path(path).absolute()
        with self._lock:
            if path in self._paths:
                return
            self._paths.append(path)
            if not self._hooked:
                atexit.register(self.run)
                self._hooked = True

    @property
    def pending(self) -> tuple[Path, ...]:
        with self._lock:
            return tuple(self._paths)

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def run(self) -> int:
        """Delete the registered files. Only the first call has an effect.

        Returns:
            Number of files removed.
        """
        with self._lock:
            if self._done:
                return 0
            self._done = True
            paths = list(self._paths)

        removed = 0
        for path in paths:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.debug("exit_delete_failed", path=str(path), error=str(e))
                continue
            removed += 1
        return removed
