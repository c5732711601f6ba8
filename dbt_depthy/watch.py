"""Watch mode: recompute depths when the manifest or project file changes."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from watchfiles import Change, awatch

from dbt_depthy.manifest import MANIFEST_FILE_NAME, PROJECT_FILE_NAME
from dbt_depthy.service import DepthService

logger = logging.getLogger(__name__)

_WATCHED_NAMES = {MANIFEST_FILE_NAME, PROJECT_FILE_NAME}


def is_relevant_change(change: Change, path: str) -> bool:
    """watchfiles filter: only manifest and project files, never deletions."""
    if change == Change.deleted:
        return False
    return Path(path).name in _WATCHED_NAMES


async def watch_project(
    service: DepthService,
    stop_event: asyncio.Event | None = None,
    on_refresh: Callable[[bool], None] | None = None,
) -> None:
    """Refresh once, then again on every relevant change until ``stop_event`` is set."""
    ok = await service.arefresh()
    if on_refresh:
        on_refresh(ok)

    async for changes in awatch(
        service.project_root,
        watch_filter=is_relevant_change,
        stop_event=stop_event,
    ):
        logger.info("Detected %d change(s), refreshing depths", len(changes))
        ok = await service.arefresh()
        if on_refresh:
            on_refresh(ok)
