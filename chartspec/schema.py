"""Constant tables describing the chart specification grammar.

Every lookup the builder and compiler perform (node kinds, marks, channels,
data types, settable properties) is a fixed, read-only table defined here.
Nothing in this module is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

NodeKind = Literal["unit", "layer", "hconcat", "vconcat", "facet", "repeat"]
RepeatAxis = Literal["row", "column"]
ValueType = Literal["string", "number", "boolean", "object"]

NODE_KINDS: Final[frozenset[str]] = frozenset({"unit", "layer", "hconcat", "vconcat", "facet", "repeat"})
CONCAT_KINDS: Final[frozenset[str]] = frozenset({"layer", "hconcat", "vconcat"})
SINGLE_CHILD_KINDS: Final[frozenset[str]] = frozenset({"facet", "repeat"})
DATA_KINDS: Final[frozenset[str]] = frozenset({"unit", "facet"})
ENCODING_KINDS: Final[frozenset[str]] = frozenset({"unit", "layer", "facet"})

LAYER_CHILD_KINDS: Final[frozenset[str]] = frozenset({"unit", "layer"})
REPEAT_CHILD_KINDS: Final[frozenset[str]] = frozenset({"unit", "facet"})

MARKS: Final[tuple[str, ...]] = (
    "area",
    "bar",
    "boxplot",
    "circle",
    "errorband",
    "errorbar",
    "geoshape",
    "line",
    "point",
    "rect",
    "rule",
    "square",
    "text",
    "tick",
    "trail",
)

CHANNELS: Final[tuple[str, ...]] = (
    "x",
    "y",
    "x2",
    "y2",
    "longitude",
    "latitude",
    "longitude2",
    "latitude2",
    "color",
    "opacity",
    "fillOpacity",
    "strokeOpacity",
    "strokeWidth",
    "size",
    "shape",
    "label",
    "tooltip",
    "href",
    "key",
    "order",
    "detail",
    "row",
    "column",
)

# Channels whose stored name differs from the builder-facing name.
CHANNEL_ALIASES: Final[dict[str, str]] = {"label": "text"}

FACET_CHANNELS: Final[frozenset[str]] = frozenset({"row", "column"})

DATA_TYPES: Final[tuple[str, ...]] = ("nominal", "ordinal", "quantitative", "temporal", "geojson")
DATA_TYPE_SHORTHANDS: Final[dict[str, str]] = {name[0]: name for name in DATA_TYPES}

DEFAULT_REPEAT_TYPE: Final = "quantitative"
DEFAULT_PROJECTION: Final = "mercator"

# Keys that only have meaning on the document root and are stripped elsewhere.
TOP_LEVEL_ONLY: Final[tuple[str, ...]] = ("name", "$schema", "background", "padding", "autosize", "config")

DATASET_NAME_PREFIX: Final = "ds_"


@dataclass(frozen=True, slots=True)
class PropertySpec:
    """Describe a simple settable property on a chart node.

    Args:
        key: Key written into the node's property document.
        value_types: Allowed value types for the property.
        kinds: Node kinds allowed to carry the property (None means all kinds).
    """

    key: str
    value_types: frozenset[ValueType]
    kinds: frozenset[str] | None = None


def _prop(key: str, value_types: tuple[ValueType, ...], kinds: tuple[str, ...] | None = None) -> PropertySpec:
    """Build a PropertySpec from tuples."""

    return PropertySpec(
        key=key,
        value_types=frozenset(value_types),
        kinds=frozenset(kinds) if kinds is not None else None,
    )


_COMPOSED: Final = ("hconcat", "vconcat", "facet", "repeat")

SIMPLE_PROPERTIES: Final[dict[str, PropertySpec]] = {
    "name": _prop("name", ("string",)),
    "description": _prop("description", ("string",)),
    "title": _prop("title", ("string",)),
    "schema": _prop("$schema", ("string",)),
    "background": _prop("background", ("string",)),
    "padding": _prop("padding", ("number", "object")),
    "autosize": _prop("autosize", ("string", "object")),
    "config": _prop("config", ("object",)),
    "resolve": _prop("resolve", ("object",), ("layer", *_COMPOSED)),
    "center": _prop("center", ("boolean", "object"), _COMPOSED),
    "spacing": _prop("spacing", ("number", "object"), _COMPOSED),
    "bounds": _prop("bounds", ("string",), _COMPOSED),
    "align": _prop("align", ("string", "object"), ("facet", "repeat")),
    "width": _prop("width", ("number",), ("unit", "layer")),
    "height": _prop("height", ("number",), ("unit", "layer")),
    "selection": _prop("selection", ("object",), ("unit",)),
}


def value_type_of(value: object) -> ValueType | None:
    """Classify a Python value into the grammar's value types.

    Args:
        value: Candidate property value.

    Returns:
        The matching ValueType, or None when the value has no grammar type.
        Booleans are never classified as numbers.
    """

    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    return None


def expand_data_type(data_type: object) -> str | None:
    """Expand a data type shorthand into its full name.

    Args:
        data_type: Single-character shorthand (`q`, `n`, `o`, `t`, `g`) or full name.

    Returns:
        Full data type name, or None when the value is not recognized.
    """

    text = str(data_type)
    if len(text) == 1:
        return DATA_TYPE_SHORTHANDS.get(text)
    return text if text in DATA_TYPES else None
