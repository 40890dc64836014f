"""App configuration for the `chartspec` Django app."""

from __future__ import annotations

from django.apps import AppConfig


class ChartSpecConfig(AppConfig):
    """Configuration for the `chartspec` app (template tags only, no models)."""

    name = "chartspec"
    verbose_name = "Chart specifications"
