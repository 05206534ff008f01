"""Rendering helpers for timeline preview images."""

from .layout import DEFAULT_LAYOUT, TimelineLayout
from .renderer import DEFAULT_STATUS_COLORS, RendererConfig, TimelineRenderer

__all__ = [
    "DEFAULT_LAYOUT",
    "DEFAULT_STATUS_COLORS",
    "RendererConfig",
    "TimelineLayout",
    "TimelineRenderer",
]
