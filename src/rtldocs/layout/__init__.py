"""Layout and pagination of content blocks."""

from .engine import LayoutEngine, layout, page_count
from .geometry import PageGeometry
from .metrics import FontMeasurer, MonospaceMeasurer, TextMeasurer, wrap_text

__all__ = [
    "FontMeasurer",
    "LayoutEngine",
    "MonospaceMeasurer",
    "PageGeometry",
    "TextMeasurer",
    "layout",
    "page_count",
    "wrap_text",
]
