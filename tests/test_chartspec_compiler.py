"""Unit tests for compiling chart trees into standalone documents."""

from __future__ import annotations

import copy

import pytest

from chartspec import (
    ChartSpec,
    InvalidFacetChannelError,
    InvalidRepeatChildError,
    UnsupportedNestingError,
    compile_spec,
    facet,
    hconcat,
    layer,
    repeat,
    unit,
    vconcat,
)
from chartspec.conf import DEFAULT_SCHEMA_URL

pytestmark = pytest.mark.unit


def _snapshot(node: ChartSpec) -> dict[str, object]:
    """Capture a node subtree's state for mutation checks."""

    return {
        "kind": node.kind,
        "properties": copy.deepcopy(node.properties),
        "data": None
        if node.data_ref is None
        else (node.data_ref.url, id(node.data_ref.values), copy.deepcopy(node.data_ref.options)),
        "repeat_channels": dict(node.repeat_channels),
        "children": [_snapshot(child) for child in node.children],
        "child": _snapshot(node.child) if node.child is not None else None,
    }


def _dashboard(first: list[dict[str, object]], second: list[dict[str, object]]) -> ChartSpec:
    """Build a tree mixing every node kind."""

    faceted = facet(
        layer(
            unit(first).line().x("month", "o").y("sales"),
            unit(first).point().x("month", "o").y("sales"),
        )
    ).row("region", "n")
    repeated = repeat(unit(second).bar()).down("y", ["cost"]).across("x", ["month"])
    return vconcat(hconcat(faceted, repeated), unit("data/extra.csv").tick().x("v")).name("dashboard")


def test_unit_compiles_with_schema_and_named_dataset(sales_rows: list[dict[str, object]]) -> None:
    """A single unit keeps root properties and references its data by name."""

    document = unit(sales_rows).bar().x("region", "n").y("sales").compile()
    assert document == {
        "$schema": DEFAULT_SCHEMA_URL,
        "encoding": {
            "x": {"field": "region", "type": "nominal"},
            "y": {"field": "sales", "type": "quantitative"},
        },
        "mark": {"type": "bar"},
        "data": {"name": "ds_0"},
        "datasets": {"ds_0": sales_rows},
    }
    assert document["datasets"]["ds_0"] is sales_rows


def test_url_data_is_passed_through_without_datasets() -> None:
    """URL references are copied as-is and produce no dataset table."""

    document = hconcat(unit("a.csv"), unit("a.csv", format={"type": "csv"})).compile()
    assert document["hconcat"][0]["data"] == {"url": "a.csv"}
    assert document["hconcat"][1]["data"] == {"url": "a.csv", "format": {"type": "csv"}}
    assert "datasets" not in document


def test_compile_is_deterministic(sales_rows: list[dict[str, object]], cost_rows: list[dict[str, object]]) -> None:
    """Compiling the same tree twice yields identical documents."""

    chart = _dashboard(sales_rows, cost_rows)
    assert compile_spec(chart) == compile_spec(chart)


def test_compile_does_not_mutate_source(sales_rows: list[dict[str, object]], cost_rows: list[dict[str, object]]) -> None:
    """The source tree is unchanged by compilation and shares nothing with the output."""

    chart = _dashboard(sales_rows, cost_rows)
    before = _snapshot(chart)
    document = compile_spec(chart)
    assert _snapshot(chart) == before

    document["vconcat"][0]["hconcat"][1]["spec"]["encoding"]["x"]["type"] = "nominal"
    repeated = chart.children[0].children[1]
    assert repeated.child is not None
    assert "x" not in repeated.child.properties["encoding"]


def test_dataset_names_follow_first_encounter(
    sales_rows: list[dict[str, object]],
    cost_rows: list[dict[str, object]],
) -> None:
    """The first inline blob met in the walk is ds_0, the next ds_1."""

    deep_first = vconcat(hconcat(vconcat(unit(sales_rows))), unit(cost_rows), unit(sales_rows))
    document = deep_first.compile()
    assert list(document["datasets"]) == ["ds_0", "ds_1"]
    assert document["datasets"]["ds_0"] is sales_rows
    assert document["datasets"]["ds_1"] is cost_rows
    assert document["vconcat"][2]["data"] == {"name": "ds_0"}


def test_equal_content_different_blobs_are_distinct_datasets() -> None:
    """Deduplication keys on blob identity, not deep equality."""

    first = [{"a": 1}]
    twin = [{"a": 1}]
    document = hconcat(unit(first), unit(twin)).compile()
    assert document["datasets"]["ds_0"] is first
    assert document["datasets"]["ds_1"] is twin


def test_facet_hoists_shared_child_data(
    sales_rows: list[dict[str, object]],
    cost_rows: list[dict[str, object]],
) -> None:
    """Siblings sharing a blob hoist it once; a different blob stays on its child."""

    chart = facet(
        layer(
            unit(sales_rows).line(),
            unit(sales_rows).point(),
            unit(cost_rows).rule(),
        )
    ).row("region", "n")
    document = chart.compile()

    assert document["data"] == {"name": "ds_0"}
    children = document["spec"]["layer"]
    assert "data" not in children[0]
    assert "data" not in children[1]
    assert children[2]["data"] == {"name": "ds_1"}
    assert document["datasets"] == {"ds_0": sales_rows, "ds_1": cost_rows}


def test_facet_own_data_suppresses_equal_child_data(sales_rows: list[dict[str, object]]) -> None:
    """A facet's own data absorbs identical child data."""

    chart = facet(unit(sales_rows)).data(sales_rows).column("region", "n")
    document = chart.compile()
    assert document["data"] == {"name": "ds_0"}
    assert "data" not in document["spec"]
    assert document["facet"] == {"column": {"field": "region", "type": "nominal"}}


def test_facet_hoisting_compares_urls() -> None:
    """URL references equal to the hoisted one are dropped from children."""

    chart = facet(layer(unit("a.csv"), unit("a.csv"), unit("b.csv"))).row("g", "n")
    document = chart.compile()
    assert document["data"] == {"url": "a.csv"}
    layers = document["spec"]["layer"]
    assert [child.get("data") for child in layers] == [None, None, {"url": "b.csv"}]


def test_sibling_facets_track_data_independently(
    sales_rows: list[dict[str, object]],
    cost_rows: list[dict[str, object]],
) -> None:
    """Hoisting state does not leak between sibling facets."""

    chart = hconcat(
        facet(unit(sales_rows)).row("region", "n"),
        facet(unit(cost_rows)).row("region", "n"),
        unit(sales_rows),
    )
    document = chart.compile()
    left, right, plain = document["hconcat"]
    assert left["data"] == {"name": "ds_0"}
    assert "data" not in left["spec"]
    assert right["data"] == {"name": "ds_1"}
    assert "data" not in right["spec"]
    assert plain["data"] == {"name": "ds_0"}


def test_nested_facet_is_rejected() -> None:
    """A facet inside a facet raises UnsupportedNesting."""

    with pytest.raises(UnsupportedNestingError):
        facet(facet(unit())).compile()


def test_repeat_synthesizes_missing_channels() -> None:
    """Repeated axes create quantitative channels bound to the repeat field."""

    chart = repeat(unit()).down("y", ["a", "b"]).across("x", ["c", "d"])
    document = chart.compile()
    assert document["repeat"] == {"row": ["a", "b"], "column": ["c", "d"]}
    encoding = document["spec"]["encoding"]
    assert encoding["x"] == {"field": {"repeat": "column"}, "type": "quantitative"}
    assert encoding["y"] == {"field": {"repeat": "row"}, "type": "quantitative"}


def test_repeat_overrides_field_of_existing_channel() -> None:
    """An existing channel keeps its type and gets the repeat field."""

    chart = repeat(unit().x("ignored", "o", title="Metric")).across("x", ["c", "d"])
    encoding = chart.compile()["spec"]["encoding"]
    assert encoding["x"] == {"field": {"repeat": "column"}, "type": "ordinal", "title": "Metric"}


def test_repeat_over_facet_binds_row_and_column_channels() -> None:
    """Repeating a facet injects bindings into the facet channel map."""

    chart = repeat(facet(unit()).row("region", "n")).across("column", ["a", "b"])
    document = chart.compile()
    assert document["spec"]["facet"] == {
        "row": {"field": "region", "type": "nominal"},
        "column": {"field": {"repeat": "column"}, "type": "quantitative"},
    }


def test_repeat_over_facet_rejects_other_channels() -> None:
    """Only row/column channels can be repeated over a facet."""

    chart = repeat(facet(unit())).across("x", ["a"])
    with pytest.raises(InvalidFacetChannelError):
        chart.compile()


def test_repeat_with_invalid_child_is_rejected() -> None:
    """A repeat whose child is neither a unit nor a facet fails to compile."""

    chart = repeat()
    chart.child = hconcat(unit())
    with pytest.raises(InvalidRepeatChildError):
        chart.compile()


def test_repeat_without_child_has_no_spec() -> None:
    """An empty repeat compiles to its properties alone."""

    document = repeat().across("x", ["a"]).compile()
    assert document == {"$schema": DEFAULT_SCHEMA_URL, "repeat": {"column": ["a"]}}


def test_non_root_nodes_drop_top_level_properties() -> None:
    """Only the root keeps name, schema, background, padding, autosize and config."""

    child = unit().name("inner").background("#fff").padding(5).autosize("fit").config({"view": {}}).title("Kept")
    root = hconcat(child).name("outer").background("#000").config({"axis": {}})
    document = root.compile()

    assert document["name"] == "outer"
    assert document["$schema"] == DEFAULT_SCHEMA_URL
    assert document["background"] == "#000"
    assert document["config"] == {"axis": {}}
    inner = document["hconcat"][0]
    for key in ("name", "$schema", "background", "padding", "autosize", "config"):
        assert key not in inner
    assert inner["title"] == "Kept"


def test_copy_then_compile_matches_original(
    sales_rows: list[dict[str, object]],
    cost_rows: list[dict[str, object]],
) -> None:
    """Compiling a recursive copy yields the same document as the original."""

    chart = _dashboard(sales_rows, cost_rows)
    original = compile_spec(chart)
    copied = compile_spec(chart.copy(True))
    assert copied == original
    assert copied["datasets"]["ds_0"] is original["datasets"]["ds_0"]


def test_composite_children_keep_order() -> None:
    """Composite children are emitted in their original order under the kind key."""

    chart = layer(unit().bar(), unit().line(), layer(unit().rule()))
    document = chart.compile()
    marks = [child.get("mark", {}).get("type") for child in document["layer"]]
    assert marks == ["bar", "line", None]
    assert document["layer"][2]["layer"][0]["mark"] == {"type": "rule"}
