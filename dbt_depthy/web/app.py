"""FastAPI application factory."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI

from dbt_depthy import __version__
from dbt_depthy.config import load_config
from dbt_depthy.service import DepthService
from dbt_depthy.web.api import router


def create_app(service: DepthService | None = None, project_root: Path | None = None) -> FastAPI:
    if service is None:
        root = project_root or Path(".")
        service = DepthService(root, load_config(root))
        service.refresh()

    app = FastAPI(title="dbt-depthy", version=__version__)
    app.state.depth_service = service
    app.include_router(router)
    return app
