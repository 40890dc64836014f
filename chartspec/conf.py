"""Configuration for chart specification defaults.

Values are read from Django settings when a settings module is configured,
then from environment variables, then fall back to built-in defaults. The
builder itself stays usable without any Django project.
"""

from __future__ import annotations

import os
from typing import Final

from django.conf import settings

DEFAULT_SCHEMA_URL: Final = "https://vega.github.io/schema/vega-lite/v3.json"
SCHEMA_URL_SETTING: Final = "CHARTSPEC_SCHEMA_URL"


def _env_str(name: str, *, default: str) -> str:
    """Parse a string environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set or blank.

    Returns:
        Trimmed environment value or the default.
    """

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def get_schema_url() -> str:
    """Return the `$schema` URL stamped on newly constructed nodes."""

    if settings.configured or os.getenv("DJANGO_SETTINGS_MODULE"):
        configured = getattr(settings, SCHEMA_URL_SETTING, None)
        if configured:
            return str(configured)
    return _env_str(SCHEMA_URL_SETTING, default=DEFAULT_SCHEMA_URL)
