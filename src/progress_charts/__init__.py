"""
Progress Charts.

PURPOSE: Render small interactive SVG charts from profile data.
AI CONTEXT: Aggregation + geometry engine; the web and CLI layers are thin.

PACKAGE STRUCTURE:
- models.py: Typed data (PointEvent, DaySeries, ChartSpec, RenderedChart)
- aggregation.py: Payload extraction, per-day sums, pass/fail, ratio
- formatting.py: Counts, kB/MB amounts, dd/mm/yyyy labels
- svg.py: Escaping SVG element builder
- themes.py: Colour themes
- renderer.py: Line chart, bar chart, donut gauge geometry
- tooltip.py: Single hover tooltip controller
- storage.py: Fail-safe payload loading
- presenters.py: View models and PNG export
- web/: FastAPI + htmx dashboard
- config.py: Configuration constants

QUICK START:
    # Render one chart to a file
    progress-charts render progress --payload profile.json --output xp.svg

    # Launch dashboard
    progress-charts dashboard
"""

from progress_charts.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
