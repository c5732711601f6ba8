"""Data models for dbt manifests and depth annotations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class DepthTier(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ManifestNode:
    """A single entry of the manifest's ``nodes`` object."""
    unique_id: str
    name: str
    resource_type: str
    package_name: str = ""
    depends_on: list[str] = field(default_factory=list)


@dataclass
class Manifest:
    """The parts of ``manifest.json`` the depth engine reads."""
    nodes: dict[str, ManifestNode] = field(default_factory=dict)
    parent_map: dict[str, list[str]] = field(default_factory=dict)
    path: Path | None = None


@dataclass
class DepthAnnotation:
    """What an editor overlay needs to render one ``ref()``."""
    name: str
    depth: int
    tier: DepthTier
    color: str
    hover: str

    @property
    def label(self) -> str:
        return f"({self.depth})"
