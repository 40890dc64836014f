"""JSON serialization for compiled chart documents."""

from __future__ import annotations

import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder


def to_json(document: dict[str, Any], *, indent: int | None = None) -> str:
    """Serialize a compiled document to a JSON string.

    Inline datasets may contain dates, datetimes, decimals or UUIDs; these are
    encoded the same way Django encodes them in JSON responses.

    Args:
        document: Output of `compile_spec`.
        indent: Optional indentation for human-readable output.

    Returns:
        JSON text.
    """

    return json.dumps(document, cls=DjangoJSONEncoder, indent=indent)
