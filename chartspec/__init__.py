"""Fluent builder and compiler for declarative chart specifications.

Charts are assembled as a tree of `ChartSpec` nodes (unit, layer, hconcat,
vconcat, facet, repeat) and compiled into a single self-contained Vega-Lite
document with `compile_spec` (or `ChartSpec.compile`).
"""

from .compiler import compile_spec
from .data import DataReference, references_equal
from .errors import (
    ChartSpecError,
    InvalidChildError,
    InvalidContextError,
    InvalidFacetChannelError,
    InvalidKindError,
    InvalidRepeatChildError,
    InvalidValueError,
    UnsupportedNestingError,
)
from .nodes import ChartSpec, facet, hconcat, layer, repeat, unit, vconcat
from .serialize import to_json

__all__ = [
    "ChartSpec",
    "ChartSpecError",
    "DataReference",
    "InvalidChildError",
    "InvalidContextError",
    "InvalidFacetChannelError",
    "InvalidKindError",
    "InvalidRepeatChildError",
    "InvalidValueError",
    "UnsupportedNestingError",
    "compile_spec",
    "facet",
    "hconcat",
    "layer",
    "references_equal",
    "repeat",
    "to_json",
    "unit",
    "vconcat",
]
