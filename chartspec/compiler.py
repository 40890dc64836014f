"""Compile a chart specification tree into a standalone document.

Compilation walks the node tree depth-first and builds a fresh document. The
source tree is never mutated: every node's properties are copied before they
are touched. Along the way the compiler

- strips properties that only make sense on the document root,
- names inline datasets by first encounter (`ds_0`, `ds_1`, ...) and emits
  them once in a root-level `datasets` table,
- hoists data shared by the children of a facet up to the facet itself,
- injects `{"repeat": axis}` field bindings into repeated channels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .data import DatasetRegistry, references_equal
from .errors import InvalidFacetChannelError, InvalidRepeatChildError, UnsupportedNestingError
from .schema import CONCAT_KINDS, DEFAULT_REPEAT_TYPE, FACET_CHANNELS, REPEAT_CHILD_KINDS, TOP_LEVEL_ONLY

if TYPE_CHECKING:
    from .nodes import ChartSpec

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _FacetTracking:
    """Facet state threaded through one compile call.

    Args:
        in_facet: Whether the walk is inside the (single) enclosing facet.
        facet_data: Data object hoisted to the enclosing facet, if any.
    """

    in_facet: bool = False
    facet_data: dict[str, Any] | None = None


def compile_spec(root: ChartSpec) -> dict[str, Any]:
    """Compile a node tree into a renderer-ready document.

    Args:
        root: Root node of the chart.

    Returns:
        A new JSON-compatible dict. When inline datasets were found, the dict
        carries a `datasets` table mapping dataset names to the original blobs.

    Raises:
        UnsupportedNestingError: A facet is nested inside another facet.
        InvalidRepeatChildError: A repeat's child is neither a unit nor a facet.
        InvalidFacetChannelError: A repeat over a facet binds a non row/column channel.
    """

    datasets = DatasetRegistry()
    document = _finalize(root, track=_FacetTracking(), datasets=datasets, is_root=True)
    if len(datasets):
        document["datasets"] = datasets.as_table()
    return document


def _finalize(
    node: ChartSpec,
    *,
    track: _FacetTracking,
    datasets: DatasetRegistry,
    is_root: bool = False,
) -> dict[str, Any]:
    """Finalize a single node and, recursively, its descendants."""

    final = node.copy(recursive=False).properties
    if not is_root:
        for key in TOP_LEVEL_ONLY:
            final.pop(key, None)

    if node.kind == "unit":
        _resolve_data(node, final, track=track, datasets=datasets)
    elif node.kind == "facet":
        if track.in_facet:
            raise UnsupportedNestingError("Facets cannot be nested inside other facets.")
        track.in_facet = True
        _resolve_data(node, final, track=track, datasets=datasets)
        if node.child is not None:
            final["spec"] = _finalize(node.child, track=track, datasets=datasets)
        if track.facet_data is not None:
            final["data"] = track.facet_data
        track.in_facet = False
        track.facet_data = None
    elif node.kind == "repeat":
        if node.child is not None:
            _finalize_repeat(node, final, track=track, datasets=datasets)
    elif node.kind in CONCAT_KINDS:
        final[node.kind] = [_finalize(child, track=track, datasets=datasets) for child in node.children]
    return final


def _finalize_repeat(
    node: ChartSpec,
    final: dict[str, Any],
    *,
    track: _FacetTracking,
    datasets: DatasetRegistry,
) -> None:
    """Finalize a repeat's child and bind each repeated axis to its channel."""

    child = node.child
    assert child is not None
    if child.kind not in REPEAT_CHILD_KINDS:
        raise InvalidRepeatChildError(f"Only a unit or facet can be repeated, not {child.kind}.")
    spec = _finalize(child, track=track, datasets=datasets)
    final["spec"] = spec
    channels_key = "facet" if child.kind == "facet" else "encoding"
    for axis in final.get("repeat", {}):
        channel = node.repeat_channels.get(axis)
        if child.kind == "facet" and channel not in FACET_CHANNELS:
            raise InvalidFacetChannelError(
                f"Only row and column channels can be repeated over a facet spec, got {channel!r}."
            )
        if channel is None:
            logger.debug("Repeat axis %s has no bound channel; skipping field injection", axis)
            continue
        channels = spec.setdefault(channels_key, {})
        existing = channels.get(channel)
        if existing is not None:
            # The existing definition keeps its own type.
            existing["field"] = {"repeat": axis}
        else:
            channels[channel] = {"field": {"repeat": axis}, "type": DEFAULT_REPEAT_TYPE}


def _resolve_data(
    node: ChartSpec,
    final: dict[str, Any],
    *,
    track: _FacetTracking,
    datasets: DatasetRegistry,
) -> None:
    """Resolve a node's data reference and decide where it is emitted.

    Inside a facet, the first data object seen becomes the facet's hoisted data
    and is not emitted on the node itself. Later data objects equal to the
    hoisted one are dropped; different ones stay on their node.
    """

    ref = node.data_ref
    if ref is None:
        return
    if ref.is_inline:
        resolved = ref.to_dict(dataset_name=datasets.name_for(ref.values))
    else:
        resolved = ref.to_dict()

    if track.in_facet and track.facet_data is None:
        logger.debug("Hoisting %s data to the enclosing facet", node.kind)
        track.facet_data = resolved
    elif not track.in_facet or not references_equal(track.facet_data or {}, resolved):
        final["data"] = resolved
    else:
        logger.debug("Dropping %s data already hoisted to the enclosing facet", node.kind)
