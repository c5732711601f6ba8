"""Project configuration: manifest location, depth thresholds and colors."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".dbt-depthy.yml"
MANIFEST_PATH_ENV = "DBT_DEPTHY_MANIFEST_PATH"


@dataclass
class DepthyConfig:
    """Settings for locating the manifest and rendering depth annotations."""

    manifest_path: str = "target/manifest.json"
    participating_kind: str = "model"

    # Annotation tiers
    medium_depth_threshold: int = 3
    high_depth_threshold: int = 8
    color_low_depth: str = "rgba(0, 200, 0, 0.7)"
    color_medium_depth: str = "rgba(200, 200, 0, 0.7)"
    color_high_depth: str = "rgba(200, 0, 0, 0.7)"

    skip_dirs: list[str] = field(default_factory=lambda: [
        "node_modules", ".git", "__pycache__", ".venv", "venv", "env",
        "dbt_packages", "logs",
    ])

    def __post_init__(self):
        override = os.getenv(MANIFEST_PATH_ENV)
        if override:
            self.manifest_path = override

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DepthyConfig:
        """Create config from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


def load_config(project_root: Path, config_file: Path | None = None) -> DepthyConfig:
    """Load ``.dbt-depthy.yml`` from the project root, or defaults when absent."""
    path = config_file or project_root / CONFIG_FILE_NAME
    if not path.is_file():
        return DepthyConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Ignoring %s: invalid YAML (%s)", path, e)
        return DepthyConfig()

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", path, type(data).__name__)
        return DepthyConfig()

    logger.debug("Loaded config from %s", path)
    return DepthyConfig.from_dict(data)
