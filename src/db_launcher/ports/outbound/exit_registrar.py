"""Exit registrar port.

An exit registrar collects files that must be removed when the process
terminates normally. Registration is append-only.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class ExitRegistrar(Protocol):
    """Protocol for deferred, exit-time file deletion."""

    @abstractmethod
    def register(self, path: Path) -> None:
        """Schedule an absolute path for deletion at process exit."""
        ...

    @property
    @abstractmethod
    def pending(self) -> tuple[Path, ...]:
        """Return the registered paths in registration order."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Return the number of registered paths."""
        ...
