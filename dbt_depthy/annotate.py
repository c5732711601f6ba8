"""Depth annotations: tier, color and hover text for a referenced model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, Union

from dbt_depthy.analysis.depth import get_depth
from dbt_depthy.config import DepthyConfig
from dbt_depthy.models import DepthAnnotation, DepthTier


class SupportsDepthLookup(Protocol):
    def get_depth(self, name: str) -> int | None: ...


DepthSource = Union[SupportsDepthLookup, Mapping[str, int]]


def classify_depth(depth: int, config: DepthyConfig | None = None) -> DepthTier:
    config = config or DepthyConfig()
    if depth >= config.high_depth_threshold:
        return DepthTier.HIGH
    if depth >= config.medium_depth_threshold:
        return DepthTier.MEDIUM
    return DepthTier.LOW


def tier_color(tier: DepthTier, config: DepthyConfig | None = None) -> str:
    config = config or DepthyConfig()
    return {
        DepthTier.LOW: config.color_low_depth,
        DepthTier.MEDIUM: config.color_medium_depth,
        DepthTier.HIGH: config.color_high_depth,
    }[tier]


def describe_depth(name: str, depth: int) -> str:
    """Hover text shown next to a ``ref()`` annotation."""
    return (
        f"The referenced model `{name}` has a DAG depth of {depth}.\n\n"
        f"The longest path of models between a source and `{name}` is {depth} nodes long."
    )


def annotate(
    name: str,
    source: DepthSource,
    config: DepthyConfig | None = None,
) -> DepthAnnotation | None:
    """Build the annotation for ``name``, or None when the model is unknown.

    ``source`` is anything with a ``get_depth(name)`` method (a
    ``DepthService`` or ``DepthTable``) or a plain name/id keyed mapping.
    """
    if hasattr(source, "get_depth"):
        depth = source.get_depth(name)
    else:
        depth = get_depth(source, name)
    if depth is None:
        return None

    config = config or DepthyConfig()
    tier = classify_depth(depth, config)
    return DepthAnnotation(
        name=name,
        depth=depth,
        tier=tier,
        color=tier_color(tier, config),
        hover=describe_depth(name, depth),
    )
