"""
Configuration for Progress Charts.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All tunable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: Payload file location
- Chart Geometry: Gridlines, label density, donut proportions
- Ratio Thresholds: Status boundaries for the ratio gauge
- Tooltip Metrics: Box padding, line height, marker emphasis
- Messages: Placeholder, loading and error texts

ENVIRONMENT VARIABLES:
- PROGRESS_CHARTS_PAYLOAD: Path to the profile payload JSON (default: profile.json)
- PROGRESS_CHARTS_THEME: Theme name, "dark" or "light" (default: dark)
- PROGRESS_CHARTS_CHRONOLOGICAL: "true" to sort day buckets by date

USAGE:
    from progress_charts.config import Config
    gridlines = Config.GRIDLINE_INTERVALS
    theme = Config.get_theme_name()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Progress Charts.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    GEOMETRY DEFAULTS:
    Default chart dimensions are derived from the profile page layout
    (850px wide cards). They live in renderer.DEFAULT_DIMENSIONS so that
    each ChartSpec can override them explicitly.
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    DEFAULT_PAYLOAD_FILE: ClassVar[str] = "profile.json"

    # =========================================================================
    # AGGREGATION
    # =========================================================================
    PROJECT_KIND: ClassVar[str] = "project"
    """Only graded items of this kind count toward pass/fail."""

    # =========================================================================
    # CHART GEOMETRY
    # =========================================================================
    GRIDLINE_INTERVALS: ClassVar[int] = 5
    """Line chart: intervals between 0 and max (lines drawn = intervals + 1)."""

    TARGET_X_LABELS: ClassVar[int] = 10
    """Line chart: upper bound on x-axis labels regardless of series length."""

    BAR_GRID_DIVISIONS: ClassVar[int] = 5
    BAR_GAP: ClassVar[float] = 20.0
    DONUT_HOLE_RATIO: ClassVar[float] = 2 / 3
    """Inner radius as a fraction of the outer radius (80 / 120)."""

    MARKER_RADIUS: ClassVar[float] = 4.0
    MARKER_STROKE_WIDTH: ClassVar[float] = 2.0

    # =========================================================================
    # RATIO THRESHOLDS
    # =========================================================================
    RATIO_GOOD: ClassVar[float] = 1.0
    RATIO_EXCELLENT: ClassVar[float] = 1.5

    # =========================================================================
    # TOOLTIP METRICS
    # =========================================================================
    TOOLTIP_PADDING_X: ClassVar[float] = 10.0
    TOOLTIP_PADDING_Y: ClassVar[float] = 5.0
    TOOLTIP_LINE_HEIGHT: ClassVar[float] = 17.5
    TOOLTIP_OFFSET: ClassVar[float] = 15.0
    """Vertical gap between the box bottom and the anchored marker."""

    TOOLTIP_FONT_SIZES: ClassVar[tuple[int, ...]] = (12, 14)
    """Font size per tooltip line; the last size repeats for extra lines."""

    EMPHASIS_RADIUS: ClassVar[float] = 6.0
    EMPHASIS_STROKE_WIDTH: ClassVar[float] = 3.0

    # =========================================================================
    # MESSAGES
    # =========================================================================
    CHART_TITLES: ClassVar[dict[str, str]] = {
        "line": "XP Progress Over Time",
        "bar": "Project Results",
        "donut": "Audit Ratio",
    }
    DONUT_SUBTITLE: ClassVar[str] = "Reviews Given vs Received"
    DONUT_HINT: ClassVar[str] = "Audit ratio should be ≥ 1.0 to maintain good standing"

    PLACEHOLDER_MESSAGES: ClassVar[dict[str, str]] = {
        "line": "No XP data available",
        "bar": "No project data available",
        "donut": "No audit data available",
    }
    DEFAULT_ERROR_MESSAGE: ClassVar[str] = "Unable to load chart data"
    DEFAULT_LOADING_MESSAGE: ClassVar[str] = "Loading..."

    # =========================================================================
    # DASHBOARD
    # =========================================================================
    DEFAULT_HOST: ClassVar[str] = "127.0.0.1"
    DEFAULT_PORT: ClassVar[int] = 8000
    DEFAULT_THEME: ClassVar[str] = "dark"

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _payload_path_override: ClassVar[str | None] = None
    _theme_override: ClassVar[str | None] = None
    _chronological_override: ClassVar[bool | None] = None

    @classmethod
    def get_payload_path(cls) -> str:
        """
        Get the path of the profile payload JSON file.

        Uses a priority system: test overrides first, then the
        PROGRESS_CHARTS_PAYLOAD environment variable, then the default
        file name in the current directory.

        Business context: The payload is the already-fetched API response
        the charts are drawn from. Pointing the dashboard at a different
        snapshot only requires an environment variable.

        Returns:
            Path string of the payload file.

        Example:
            >>> # With env var: PROGRESS_CHARTS_PAYLOAD=/tmp/alice.json
            >>> Config.get_payload_path()
            '/tmp/alice.json'
        """
        if cls._payload_path_override is not None:
            return cls._payload_path_override
        return os.environ.get("PROGRESS_CHARTS_PAYLOAD", cls.DEFAULT_PAYLOAD_FILE)

    @classmethod
    def get_theme_name(cls) -> str:
        """
        Get the configured chart theme name.

        Returns:
            Theme name from override, PROGRESS_CHARTS_THEME, or DEFAULT_THEME.
        """
        if cls._theme_override is not None:
            return cls._theme_override
        return os.environ.get("PROGRESS_CHARTS_THEME", cls.DEFAULT_THEME)

    @classmethod
    def is_chronological(cls) -> bool:
        """
        Check whether day buckets should be sorted by calendar date.

        The default keeps first-seen order of the input events. Setting
        PROGRESS_CHARTS_CHRONOLOGICAL=true sorts buckets by date instead.

        Returns:
            True if chronological ordering is enabled, False otherwise.

        Example:
            >>> Config.set_test_overrides(chronological=True)
            >>> Config.is_chronological()
            True
        """
        if cls._chronological_override is not None:
            return cls._chronological_override
        return os.environ.get("PROGRESS_CHARTS_CHRONOLOGICAL", "").lower() == "true"

    @classmethod
    def set_test_overrides(
        cls,
        payload_path: str | None = None,
        theme: str | None = None,
        chronological: bool | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Allows tests to control payload location, theme and ordering
        without modifying environment variables. Must call
        reset_test_overrides() in test teardown.

        Args:
            payload_path: Override for the payload file path. None to clear.
            theme: Override for the theme name. None to clear.
            chronological: Override for day ordering. None to clear.

        Returns:
            None. Modifies class-level state.
        """
        cls._payload_path_override = payload_path
        cls._theme_override = theme
        cls._chronological_override = chronological

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides so settings come from the environment."""
        cls._payload_path_override = None
        cls._theme_override = None
        cls._chronological_override = None
