"""
Scratch Space

Per-peer staging directory for quote files handed to the verification tool.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class ScratchSpace:
    """
    A private temporary directory owned by one peer verification.

    Each verification gets its own directory, so concurrent verifications
    never see each other's files. `release()` is idempotent and never raises;
    a failed cleanup is logged and the cycle goes on.
    """

    def __init__(self, label: str, root: Optional[str] = None):
        self.label = label
        self._root = root
        self._path: Optional[Path] = None
        self.released = False

    @property
    def path(self) -> Path:
        if self.released:
            raise RuntimeError(f"Scratch space for '{self.label}' already released")
        if self._path is None:
            safe_label = "".join(c if c.isalnum() else "_" for c in self.label)[:32]
            self._path = Path(tempfile.mkdtemp(prefix=f"quote_{safe_label}_", dir=self._root))
        return self._path

    def file(self, name: str) -> Path:
        return self.path / name

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        if self._path is None:
            return
        try:
            shutil.rmtree(self._path)
            logger.debug(f"Released scratch space {self._path}")
        except OSError as e:
            logger.error(f"Error cleaning up scratch space {self._path}: {e}")

    def __enter__(self) -> "ScratchSpace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
