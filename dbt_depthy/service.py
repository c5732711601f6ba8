"""Depth service: owns the published depth table and refreshes it from disk."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from dbt_depthy.analysis.depth import EMPTY_TABLE, DepthTable, build_depth_table
from dbt_depthy.config import DepthyConfig
from dbt_depthy.manifest import ManifestError, find_manifest, load_manifest

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[DepthTable], None]


class DepthService:
    """Holds the current :class:`DepthTable` for one workspace.

    ``refresh()`` builds a complete replacement table and swaps the
    reference in one assignment, so readers holding the old table keep a
    consistent view. A failed refresh leaves the published table untouched.
    """

    def __init__(self, project_root: Path, config: DepthyConfig | None = None):
        self.project_root = project_root
        self.config = config or DepthyConfig()
        self._table: DepthTable = EMPTY_TABLE
        self._subscribers: list[UpdateCallback] = []
        self.manifest_path: Path | None = None
        self.last_error: str | None = None

    @property
    def table(self) -> DepthTable:
        return self._table

    def get_depth(self, name: str) -> int | None:
        return self._table.get_depth(name)

    # ── Subscriptions ───────────────────────────────────────

    def subscribe(self, callback: UpdateCallback) -> Callable[[], None]:
        """Register ``callback`` for table updates; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, table: DepthTable) -> None:
        for callback in list(self._subscribers):
            try:
                callback(table)
            except Exception:
                logger.exception("Depth update subscriber %r failed", callback)

    # ── Refresh ─────────────────────────────────────────────

    def refresh(self) -> bool:
        """Reload the manifest and publish a new table. Returns True on success."""
        manifest_path = find_manifest(self.project_root, self.config)
        if manifest_path is None:
            self.last_error = f"No manifest found under {self.project_root}"
            logger.info("Manifest file not found under %s", self.project_root)
            return False

        logger.info("Loading manifest from: %s", manifest_path)
        try:
            manifest = load_manifest(manifest_path)
        except ManifestError as e:
            self.last_error = str(e)
            logger.error("Error refreshing manifest: %s", e)
            return False
        except Exception as e:
            self.last_error = f"Unexpected error loading {manifest_path}: {e}"
            logger.exception("Unexpected error refreshing manifest %s", manifest_path)
            return False

        try:
            table = build_depth_table(
                manifest.nodes.values(),
                manifest.parent_map,
                self.config.participating_kind,
            )
        except Exception as e:
            self.last_error = f"Unexpected error computing depths: {e}"
            logger.exception("Unexpected error computing depths for %s", manifest_path)
            return False

        self._table = table
        self.manifest_path = manifest_path
        self.last_error = None
        logger.info(
            "Model depths calculated: %d models, max depth %d",
            table.model_count, table.max_depth,
        )

        self._notify(table)
        return True

    async def arefresh(self) -> bool:
        """Run :meth:`refresh` in a worker thread."""
        return await asyncio.to_thread(self.refresh)
