"""Locate and parse dbt ``manifest.json`` files."""

from __future__ import annotations

import fnmatch
import json
import logging
from pathlib import Path
from typing import Any, Iterator

from dbt_depthy.config import DepthyConfig
from dbt_depthy.models import Manifest, ManifestNode

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "manifest.json"
PROJECT_FILE_NAME = "dbt_project.yml"


class ManifestError(ValueError):
    """The manifest file could not be read or is not a manifest."""


def load_manifest(path: Path) -> Manifest:
    """Read and parse a manifest file."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Manifest {path} is not valid UTF-8: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest {path} is not valid JSON: {e}") from e

    manifest = parse_manifest(data)
    manifest.path = path
    return manifest


def parse_manifest(data: Any) -> Manifest:
    """Turn a decoded manifest document into a :class:`Manifest`.

    Only the container shape is strict. Individual node entries that are
    missing fields are skipped, and parent-map entries that are not lists of
    ids are dropped so the affected model simply has no known parents.
    When ``parent_map`` is absent altogether, each node's
    ``depends_on.nodes`` is used instead.
    """
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a JSON object, got {type(data).__name__}")

    raw_nodes = data.get("nodes", {})
    if not isinstance(raw_nodes, dict):
        raise ManifestError("Manifest 'nodes' must be an object")

    manifest = Manifest()
    for key, entry in raw_nodes.items():
        node = _parse_node(key, entry)
        if node is None:
            logger.debug("Skipping malformed manifest node %r", key)
            continue
        manifest.nodes[node.unique_id] = node

    raw_parent_map = data.get("parent_map")
    if raw_parent_map is None:
        manifest.parent_map = {
            uid: list(node.depends_on) for uid, node in manifest.nodes.items()
        }
    elif isinstance(raw_parent_map, dict):
        for uid, parents in raw_parent_map.items():
            if isinstance(parents, list):
                manifest.parent_map[uid] = [p for p in parents if isinstance(p, str)]
            else:
                logger.debug("Dropping malformed parent_map entry for %r", uid)
    else:
        logger.warning("Manifest 'parent_map' is not an object; treating every node as a root")

    return manifest


def _parse_node(key: str, entry: Any) -> ManifestNode | None:
    if not isinstance(entry, dict):
        return None

    name = entry.get("name")
    resource_type = entry.get("resource_type")
    if not isinstance(name, str) or not isinstance(resource_type, str):
        return None

    unique_id = entry.get("unique_id")
    if not isinstance(unique_id, str) or not unique_id:
        unique_id = key

    depends_on: list[str] = []
    raw_depends = entry.get("depends_on")
    if isinstance(raw_depends, dict) and isinstance(raw_depends.get("nodes"), list):
        depends_on = [d for d in raw_depends["nodes"] if isinstance(d, str)]

    package_name = entry.get("package_name")
    return ManifestNode(
        unique_id=unique_id,
        name=name,
        resource_type=resource_type,
        package_name=package_name if isinstance(package_name, str) else "",
        depends_on=depends_on,
    )


def find_manifest(project_root: Path, config: DepthyConfig | None = None) -> Path | None:
    """Find the manifest to load for a workspace.

    Lookup order:
      1. a ``manifest.json`` inside a ``target`` directory
      2. any other ``manifest.json``
      3. ``<manifest_path>`` or ``manifest.json`` next to a ``dbt_project.yml``
    """
    config = config or DepthyConfig()
    manifests = list(_find_files(project_root, MANIFEST_FILE_NAME, config.skip_dirs))

    for path in manifests:
        if "target" in path.relative_to(project_root).parts[:-1]:
            return path

    if manifests:
        return manifests[0]

    for project_file in _find_files(project_root, PROJECT_FILE_NAME, config.skip_dirs):
        project_dir = project_file.parent
        for candidate in (project_dir / config.manifest_path, project_dir / MANIFEST_FILE_NAME):
            if candidate.is_file():
                return candidate

    return None


def _find_files(root: Path, file_name: str, skip_dirs: list[str]) -> Iterator[Path]:
    if not root.is_dir():
        return
    for path in sorted(root.rglob(file_name)):
        if not path.is_file():
            continue
        if _should_skip(path.relative_to(root), skip_dirs):
            continue
        yield path


def _should_skip(relative: Path, skip_dirs: list[str]) -> bool:
    for part in relative.parts[:-1]:
        for pattern in skip_dirs:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False
