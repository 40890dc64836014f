"""Chart specification node model and fluent builder API.

A chart is a tree of `ChartSpec` nodes. Each node has a fixed kind (unit,
layer, hconcat, vconcat, facet, repeat), a property document in the target
grammar's shape, and depending on its kind a data reference, child nodes, and
a repeat-channel map. Setters validate their input against the constant tables
in `chartspec.schema` and return the node so calls can be chained:

    chart = unit(rows).bar().x("category", "n").y("amount", "q")

Passing `None` to a setter clears the property instead of setting it.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

from .compiler import compile_spec
from .conf import get_schema_url
from .data import DataReference
from .errors import InvalidChildError, InvalidContextError, InvalidKindError, InvalidValueError
from .schema import (
    CHANNEL_ALIASES,
    CHANNELS,
    DATA_KINDS,
    DEFAULT_PROJECTION,
    ENCODING_KINDS,
    FACET_CHANNELS,
    LAYER_CHILD_KINDS,
    MARKS,
    NODE_KINDS,
    REPEAT_CHILD_KINDS,
    SIMPLE_PROPERTIES,
    SINGLE_CHILD_KINDS,
    NodeKind,
    RepeatAxis,
    expand_data_type,
    value_type_of,
)
from .serialize import to_json


def _mark_shortcut(mark_type: str) -> Callable[..., ChartSpec]:
    """Build a convenience method that sets a specific mark type."""

    def method(self: ChartSpec, **options: Any) -> ChartSpec:
        return self.mark(mark_type, **options)

    method.__name__ = mark_type
    method.__doc__ = f"Set the mark to `{mark_type}`."
    return method


def _channel_shortcut(channel: str) -> Callable[..., ChartSpec]:
    """Build a convenience method that encodes a specific channel."""

    def method(self: ChartSpec, field: Any, data_type: str = "q", **options: Any) -> ChartSpec:
        return self.encode(channel, field, data_type, **options)

    method.__name__ = channel
    method.__doc__ = f"Encode the `{channel}` channel."
    return method


def _property_setter(name: str) -> Callable[[ChartSpec, Any], ChartSpec]:
    """Build a setter for one of the simple typed properties."""

    def method(self: ChartSpec, value: Any) -> ChartSpec:
        return self._set_property(name, value)

    method.__name__ = name
    method.__doc__ = f"Set the `{SIMPLE_PROPERTIES[name].key}` property."
    return method


class ChartSpec:
    """A node in a chart specification tree.

    Attributes:
        kind: Node kind; never changes after construction.
        properties: Property document in the grammar's shape (marks, encodings, sizing, ...).
        data_ref: Data reference (unit and facet nodes only).
        children: Ordered child nodes (layer, hconcat and vconcat nodes).
        child: Single nested node (facet and repeat nodes).
        repeat_channels: Axis to channel bindings (repeat nodes only).
    """

    def __init__(self, kind: NodeKind = "unit") -> None:
        """Create a node with the default properties for its kind.

        Args:
            kind: One of unit, layer, hconcat, vconcat, facet, repeat.

        Raises:
            InvalidKindError: When `kind` is not a known node kind.
        """

        if kind not in NODE_KINDS:
            raise InvalidKindError(kind)
        self.kind: str = kind
        self.properties: dict[str, Any] = {"$schema": get_schema_url()}
        self.data_ref: DataReference | None = None
        self.children: list[ChartSpec] = []
        self.child: ChartSpec | None = None
        self.repeat_channels: dict[str, str] = {}
        if kind == "unit":
            self.properties["encoding"] = {}
            self.properties["mark"] = {"type": "point"}
        elif kind == "layer":
            self.properties["encoding"] = {}
        elif kind == "facet":
            self.properties["facet"] = {}
        elif kind == "repeat":
            self.properties["repeat"] = {}

    def __repr__(self) -> str:
        return f"ChartSpec(kind={self.kind!r})"

    # -- data and composition ------------------------------------------------

    def data(self, source: Any, **options: Any) -> ChartSpec:
        """Attach a data reference.

        Args:
            source: URL string, inline values (list, tuple or dict), or None to clear.
            **options: Extra data properties such as `format`.

        Returns:
            This node.
        """

        if self.kind not in DATA_KINDS:
            raise InvalidContextError(f"data() requires a unit or facet spec, not {self.kind}.")
        if source is None:
            self.data_ref = None
        else:
            self.data_ref = DataReference.from_source(source, options)
        return self

    def inner(self, *children: ChartSpec | None) -> ChartSpec:
        """Set the nested node(s) of a composite node.

        Layer, hconcat and vconcat nodes take any number of children. Facet and
        repeat nodes keep the first argument only. `inner(None)` clears.

        Returns:
            This node.

        Raises:
            InvalidContextError: When called on a unit node.
            InvalidChildError: When a child is not a ChartSpec or its kind is
                not allowed under this node.
        """

        if self.kind == "unit":
            raise InvalidContextError("inner() requires a composition spec.")
        if children and children[0] is None:
            self.children = []
            self.child = None
            return self
        for candidate in children:
            if not isinstance(candidate, ChartSpec):
                raise InvalidChildError(f"Expected a ChartSpec child, got {type(candidate).__name__}.")
        nodes: list[ChartSpec] = list(children)  # type: ignore[arg-type]
        if self.kind in SINGLE_CHILD_KINDS:
            if not nodes:
                self.child = None
                return self
            first = nodes[0]
            if self.kind == "repeat" and first.kind not in REPEAT_CHILD_KINDS:
                raise InvalidChildError(f"A repeat spec can only repeat a unit or facet, not {first.kind}.")
            self.child = first
            return self
        if self.kind == "layer":
            for node in nodes:
                if node.kind not in LAYER_CHILD_KINDS:
                    raise InvalidChildError(f"Inner specs of a layer must be units or layers, not {node.kind}.")
        self.children = nodes
        return self

    # -- marks and channels --------------------------------------------------

    def mark(self, mark_type: str | None, **options: Any) -> ChartSpec:
        """Set the mark of a unit node.

        Args:
            mark_type: One of the supported marks, or None to clear.
            **options: Extra mark properties.

        Returns:
            This node.
        """

        if self.kind != "unit":
            raise InvalidContextError(f"mark() requires a unit spec, not {self.kind}.")
        if mark_type is None:
            self.properties.pop("mark", None)
            return self
        if mark_type not in MARKS:
            raise InvalidValueError(f"Invalid mark type: {mark_type!r}.")
        self.properties["mark"] = {"type": mark_type, **options}
        return self

    area = _mark_shortcut("area")
    bar = _mark_shortcut("bar")
    boxplot = _mark_shortcut("boxplot")
    circle = _mark_shortcut("circle")
    errorband = _mark_shortcut("errorband")
    errorbar = _mark_shortcut("errorbar")
    geoshape = _mark_shortcut("geoshape")
    line = _mark_shortcut("line")
    point = _mark_shortcut("point")
    rect = _mark_shortcut("rect")
    rule = _mark_shortcut("rule")
    square = _mark_shortcut("square")
    text = _mark_shortcut("text")
    tick = _mark_shortcut("tick")
    trail = _mark_shortcut("trail")

    def encode(self, channel: str, field: Any, data_type: str = "q", **options: Any) -> ChartSpec:
        """Encode a visual channel.

        Args:
            channel: Channel name (`label` is stored as `text`).
            field: Field name; True for a count aggregate; a falsy value for no
                field; None to remove the channel.
            data_type: Full data type name or its single-character shorthand.
            **options: Extra channel definition properties.

        Returns:
            This node.
        """

        if self.kind not in ENCODING_KINDS:
            raise InvalidContextError(f"A {self.kind} spec cannot have channels.")
        if channel not in CHANNELS:
            raise InvalidValueError(f"Invalid channel: {channel!r}.")
        if self.kind == "facet" and channel not in FACET_CHANNELS:
            raise InvalidContextError("Only row and column channels can be used in a facet spec.")
        target = self.properties["facet" if self.kind == "facet" else "encoding"]
        key = CHANNEL_ALIASES.get(channel, channel)
        if field is None:
            target.pop(key, None)
            return self
        definition: dict[str, Any] = {}
        if field is True:
            definition["aggregate"] = "count"
        elif field:
            if not isinstance(field, str):
                raise InvalidValueError(f"Channel field must be a string, got {type(field).__name__}.")
            definition["field"] = field
        expanded = expand_data_type(data_type)
        if expanded is None:
            raise InvalidValueError(f"Invalid data type: {data_type!r}.")
        definition["type"] = expanded
        definition.update(options)
        target[key] = definition
        return self

    x = _channel_shortcut("x")
    y = _channel_shortcut("y")
    x2 = _channel_shortcut("x2")
    y2 = _channel_shortcut("y2")
    longitude = _channel_shortcut("longitude")
    latitude = _channel_shortcut("latitude")
    longitude2 = _channel_shortcut("longitude2")
    latitude2 = _channel_shortcut("latitude2")
    color = _channel_shortcut("color")
    opacity = _channel_shortcut("opacity")
    fillOpacity = _channel_shortcut("fillOpacity")
    strokeOpacity = _channel_shortcut("strokeOpacity")
    strokeWidth = _channel_shortcut("strokeWidth")
    size = _channel_shortcut("size")
    shape = _channel_shortcut("shape")
    label = _channel_shortcut("label")
    tooltip = _channel_shortcut("tooltip")
    href = _channel_shortcut("href")
    key = _channel_shortcut("key")
    order = _channel_shortcut("order")
    detail = _channel_shortcut("detail")
    row = _channel_shortcut("row")
    column = _channel_shortcut("column")

    def across(self, channel: str | None, fields: list[str] | tuple[str, ...] = ()) -> ChartSpec:
        """Repeat `fields` across columns, bound to `channel` of the child."""

        return self._bind_repeat("column", channel, fields)

    def down(self, channel: str | None, fields: list[str] | tuple[str, ...] = ()) -> ChartSpec:
        """Repeat `fields` down rows, bound to `channel` of the child."""

        return self._bind_repeat("row", channel, fields)

    def _bind_repeat(self, axis: RepeatAxis, channel: str | None, fields: object) -> ChartSpec:
        if self.kind != "repeat":
            raise InvalidContextError(f"across()/down() require a repeat spec, not {self.kind}.")
        if channel is None:
            self.properties["repeat"].pop(axis, None)
            self.repeat_channels.pop(axis, None)
            return self
        if channel not in CHANNELS:
            raise InvalidValueError(f"Invalid channel: {channel!r}.")
        if not isinstance(fields, (list, tuple)):
            raise InvalidValueError("Repeat fields must be a list of strings.")
        for name in fields:
            if not isinstance(name, str):
                raise InvalidValueError(f"Repeat fields must be strings, got {type(name).__name__}.")
        self.properties["repeat"][axis] = list(fields)
        self.repeat_channels[axis] = CHANNEL_ALIASES.get(channel, channel)
        return self

    # -- other properties ----------------------------------------------------

    def transform(self, *transforms: dict[str, Any] | None) -> ChartSpec:
        """Set the transform list; `transform(None)` clears it."""

        if transforms and transforms[0] is None:
            self.properties.pop("transform", None)
            return self
        for item in transforms:
            if not isinstance(item, dict):
                raise InvalidValueError(f"Transforms must be dicts, got {type(item).__name__}.")
        self.properties["transform"] = list(transforms)
        return self

    def projection(self, projection_type: str | None = DEFAULT_PROJECTION, **options: Any) -> ChartSpec:
        """Set the cartographic projection of a unit or layer node."""

        if self.kind not in ("unit", "layer"):
            raise InvalidContextError(f"projection() requires a unit or layer spec, not {self.kind}.")
        if projection_type is None:
            self.properties.pop("projection", None)
            return self
        if not isinstance(projection_type, str):
            raise InvalidValueError("Projection type must be a string.")
        self.properties["projection"] = {"type": projection_type, **options}
        return self

    def _set_property(self, name: str, value: Any) -> ChartSpec:
        spec = SIMPLE_PROPERTIES[name]
        if spec.kinds is not None and self.kind not in spec.kinds:
            raise InvalidContextError(f"{name} cannot be used with a {self.kind} spec.")
        if value is None:
            self.properties.pop(spec.key, None)
            return self
        if value_type_of(value) not in spec.value_types:
            raise InvalidValueError(
                f"Invalid value for {name}: expected {sorted(spec.value_types)}, got {type(value).__name__}."
            )
        self.properties[spec.key] = value
        return self

    name = _property_setter("name")
    description = _property_setter("description")
    title = _property_setter("title")
    schema = _property_setter("schema")
    background = _property_setter("background")
    padding = _property_setter("padding")
    autosize = _property_setter("autosize")
    config = _property_setter("config")
    resolve = _property_setter("resolve")
    center = _property_setter("center")
    spacing = _property_setter("spacing")
    bounds = _property_setter("bounds")
    align = _property_setter("align")
    width = _property_setter("width")
    height = _property_setter("height")
    selection = _property_setter("selection")

    # -- copy and output -----------------------------------------------------

    def copy(self, recursive: bool = True) -> ChartSpec:
        """Return an independent copy of this node.

        Args:
            recursive: When True, every descendant is copied as well. When False,
                the copy refers to the original child nodes.

        Returns:
            A new ChartSpec. Inline values blobs are shared, never cloned.
        """

        clone = ChartSpec(self.kind)  # type: ignore[arg-type]
        clone.properties = copy.deepcopy(self.properties)
        clone.repeat_channels = dict(self.repeat_channels)
        if self.data_ref is not None:
            clone.data_ref = self.data_ref.copy()
        if recursive:
            clone.children = [node.copy() for node in self.children]
            clone.child = self.child.copy() if self.child is not None else None
        else:
            clone.children = list(self.children)
            clone.child = self.child
        return clone

    def compile(self) -> dict[str, Any]:
        """Compile this node as the root of a standalone document."""

        return compile_spec(self)

    def to_json(self, *, indent: int | None = None) -> str:
        """Compile this node and serialize the document as JSON."""

        return to_json(self.compile(), indent=indent)


def unit(data: Any = None, **options: Any) -> ChartSpec:
    """Create a unit node, optionally attaching data.

    Args:
        data: URL string or inline values.
        **options: Extra data properties.

    Returns:
        A new unit ChartSpec.
    """

    node = ChartSpec("unit")
    if data is not None:
        node.data(data, **options)
    return node


def _composite(kind: NodeKind, children: tuple[ChartSpec, ...]) -> ChartSpec:
    node = ChartSpec(kind)
    if children:
        node.inner(*children)
    return node


def layer(*children: ChartSpec) -> ChartSpec:
    """Create a layer node over unit or layer children."""

    return _composite("layer", children)


def hconcat(*children: ChartSpec) -> ChartSpec:
    """Create a horizontal concatenation node."""

    return _composite("hconcat", children)


def vconcat(*children: ChartSpec) -> ChartSpec:
    """Create a vertical concatenation node."""

    return _composite("vconcat", children)


def facet(*children: ChartSpec) -> ChartSpec:
    """Create a facet node; only the first child is kept."""

    return _composite("facet", children)


def repeat(*children: ChartSpec) -> ChartSpec:
    """Create a repeat node over a unit or facet child."""

    return _composite("repeat", children)
