"""
Per-run scratch directory.

Every intermediate file of a production run lives under ``TEMP_DIR/<run_id>/``.
Files are deleted as soon as their last consumer is done (``discard``) and the
whole directory is removed when the run exits, whether it succeeded or not.
"""

import shutil
import uuid
from pathlib import Path
from typing import Optional, Set, Union

from news_shorts import config
from news_shorts.logging_utils import get_logger

log = get_logger(__name__)

PathLike = Union[str, Path]


def new_id(length: int = 10) -> str:
    return uuid.uuid4().hex[:length]


class Workspace:
    """Owns the temporary files of exactly one run."""

    def __init__(self, root: Optional[PathLike] = None, run_id: Optional[str] = None):
        self.run_id = run_id or new_id()
        self.root = Path(root if root is not None else config.TEMP_DIR)
        self.path = self.root / self.run_id
        self._sequence = 0
        self._tracked: Set[Path] = set()

    def open(self) -> "Workspace":
        self.path.mkdir(parents=True, exist_ok=True)
        log.debug("workspace opened", run_id=self.run_id, path=str(self.path))
        return self

    def new_file(self, ext: str) -> Path:
        """Reserve a unique file path named ``{run_id}{sequence:03d}.{ext}``."""
        self._sequence += 1
        path = self.path / f"{self.run_id}{self._sequence:03d}.{ext.lstrip('.')}"
        self._tracked.add(path)
        return path

    def track(self, path: PathLike) -> Path:
        path = Path(path)
        self._tracked.add(path)
        return path

    def discard(self, *paths: Optional[PathLike]) -> None:
        """Delete files that are no longer needed. Missing files are fine."""
        for p in paths:
            if p is None:
                continue
            path = Path(p)
            path.unlink(missing_ok=True)
            self._tracked.discard(path)

    def release(self, path: PathLike, destination: PathLike) -> Path:
        """Move a finished file out of the workspace; the caller owns it afterwards."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(path), str(destination))
        self._tracked.discard(Path(path))
        return destination

    @property
    def pending(self) -> Set[Path]:
        """Tracked files that still exist."""
        return {p for p in self._tracked if p.exists()}

    def close(self) -> None:
        for path in list(self._tracked):
            path.unlink(missing_ok=True)
        self._tracked.clear()
        shutil.rmtree(self.path, ignore_errors=True)
        if self.path.exists():
            log.warning("workspace not fully removed", run_id=self.run_id, path=str(self.path))
        else:
            log.debug("workspace removed", run_id=self.run_id)

    def __enter__(self) -> "Workspace":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "Workspace":
        return self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
