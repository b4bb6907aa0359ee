"""Bounded most-recent-first list of picked directories.

``RecencyStore.record_visit`` re-reads the config file, moves the visited
path to the front, trims the list and writes the file back. The read and the
write are not atomic across processes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from kai.core.config import KaiConfig, RecentDirectory, load_config, save_recent_dirs
from kai.core.result import ConfigurationError, Err, Ok, RecencyError, Result

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def add_recent(
    recents: Sequence[RecentDirectory],
    path: str,
    name: str,
    accessed_at: int,
    limit: int,
) -> list[RecentDirectory]:
    """Return ``recents`` with ``path`` moved to the front and at most ``limit`` entries."""
    remaining = [entry for entry in recents if entry.path != path]
    # Keep timestamps non-decreasing even if the clock steps backwards.
    newest = max((entry.accessed_at for entry in remaining), default=accessed_at)
    stamp = max(accessed_at, newest)
    updated = [RecentDirectory(path=path, name=name, accessed_at=stamp), *remaining]
    return updated[: max(0, limit)]


class RecencyStore:
    """Recency list backed by the config file at ``config_path``."""

    def __init__(
        self,
        config: KaiConfig,
        config_path: Path,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._config = config
        self._config_path = config_path
        self._clock = clock

    @property
    def config(self) -> KaiConfig:
        return self._config

    @property
    def entries(self) -> list[RecentDirectory]:
        return list(self._config.recent_dirs)

    def lookup(self, path: str) -> RecentDirectory | None:
        for entry in self._config.recent_dirs:
            if entry.path == path:
                return entry
        return None

    def record_visit(self, path: str, name: str) -> Result[RecentDirectory, RecencyError]:
        """Move ``path`` to the front of the persisted recency list.

        Only ``recentDirs`` is rewritten. A config file that failed to load is
        left alone and the visit is not recorded.
        """
        # Reload so changes made by other sessions since startup are kept.
        fresh, meta = load_config(self._config_path)
        if meta.error:
            return Err(
                RecencyError(
                    "Config file is invalid, recent directories not saved",
                    context={"path": str(self._config_path)},
                )
            )

        recent_dirs = add_recent(
            fresh.recent_dirs,
            path=path,
            name=name,
            accessed_at=self._clock(),
            limit=fresh.max_recents,
        )

        try:
            save_recent_dirs(recent_dirs, self._config_path)
        except (OSError, ConfigurationError) as exc:
            return Err(
                RecencyError(
                    "Failed to save recent directories",
                    context={"path": str(self._config_path), "error": str(exc)},
                )
            )

        self._config = self._config.model_copy(update={"recent_dirs": recent_dirs})
        logger.debug("Recorded visit to %s in %s", path, self._config_path)
        return Ok(recent_dirs[0])
