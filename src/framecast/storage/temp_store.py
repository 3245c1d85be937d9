"""Scratch file lifecycle management."""

import logging
import random
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class ScratchStore:
    """Flat directory of uploads and rendered outputs.

    Every file gets a ``<prefix>-<epoch ms>-<random>.<ext>`` name so concurrent
    requests never collide.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def allocate(self, prefix: str, ext: str) -> Path:
        """Return a fresh, unused path in the scratch directory."""
        ext = ext.lstrip(".").lower() or "bin"
        while True:
            suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999):09d}"
            path = self.base_dir / f"{prefix}-{suffix}.{ext}"
            if not path.exists():
                return path

    def delete(self, path: Path | None) -> bool:
        """Remove a scratch file. Failures are logged, never raised."""
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete scratch file {path}: {e}")
            return False
        logger.info(f"Deleted scratch file {path.name}")
        return True

    def sweep_expired(self, ttl_seconds: int) -> int:
        """Delete scratch files older than ``ttl_seconds`` (left over by a crash)."""
        cutoff = time.time() - ttl_seconds
        cleaned = 0
        for path in self.base_dir.iterdir():
            try:
                if path.is_file() and path.stat().st_mtime < cutoff and self.delete(path):
                    cleaned += 1
            except OSError as e:
                logger.warning(f"Could not inspect scratch file {path}: {e}")
        if cleaned:
            logger.info(f"Swept {cleaned} expired scratch files from {self.base_dir}")
        return cleaned
