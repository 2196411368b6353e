"""Version information for progress-charts."""

__version__ = "0.3.0"
__version_date__ = "2026-10-17"

__title__ = "progress_charts"
__description__ = "SVG progress charts (daily totals, pass/fail, ratio gauge) from profile data"
__url__ = "https://github.com/mgrandau/progress-charts"

__author__ = "Mark Grandau"

__license__ = "MIT"
__copyright__ = "Copyright 2025 Mark Grandau"

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
