"""Template helpers for embedding compiled charts in pages."""

from __future__ import annotations

from typing import Any

from django import template
from django.core.serializers.json import DjangoJSONEncoder
from django.utils.html import json_script
from django.utils.safestring import SafeString

from chartspec.compiler import compile_spec
from chartspec.nodes import ChartSpec

register = template.Library()


@register.filter(name="chart_spec")
def chart_spec(value: ChartSpec | dict[str, Any], element_id: str | None = None) -> SafeString:
    """Render a chart as a `<script type="application/json">` element.

    Usage: `{{ chart|chart_spec:"sales-chart" }}`

    Args:
        value: A ChartSpec (compiled here) or an already compiled document.
        element_id: Optional id attribute for the script element.

    Returns:
        Safe HTML containing the escaped JSON document.
    """

    document = compile_spec(value) if isinstance(value, ChartSpec) else value
    return json_script(document, element_id, encoder=DjangoJSONEncoder)
