"""
Colour themes for Progress Charts.

PURPOSE: One renderer, several looks - the profile page's dark card style
and a light variant for exports and embedding.
AI CONTEXT: Pure data; add a Theme to THEMES to register a new one.

USAGE:
    theme = get_theme("dark")
    theme.success  # '#4CAF50'
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import RatioStatus

__all__ = ["Theme", "DARK_THEME", "LIGHT_THEME", "THEMES", "get_theme"]


@dataclass(frozen=True)
class Theme:
    """
    Colours and typography for all three chart kinds.

    GROUPS:
    - Canvas: background, text, muted_text, axis, grid
    - Series: primary, secondary, primary_dark (line gradient, bars, markers)
    - Status: warning / success / accent (ratio BELOW / GOOD / EXCELLENT)
    - Donut: given, received, hole
    - Tooltip: tooltip_bg, tooltip_border, tooltip_title, tooltip_value
    """

    name: str
    background: str
    text: str
    muted_text: str
    axis: str
    grid: str
    primary: str
    secondary: str
    primary_dark: str
    marker_stroke: str
    warning: str
    success: str
    accent: str
    given: str
    received: str
    hole: str
    tooltip_bg: str
    tooltip_border: str
    tooltip_title: str
    tooltip_value: str
    font_family: str = "sans-serif"

    def status_color(self, status: RatioStatus) -> str:
        """Map a ratio status to its display colour."""
        if status is RatioStatus.EXCELLENT:
            return self.accent
        if status is RatioStatus.GOOD:
            return self.success
        return self.warning


DARK_THEME = Theme(
    name="dark",
    background="rgba(255,255,255,0.05)",
    text="#fff",
    muted_text="#ccc",
    axis="#aaa",
    grid="#555",
    primary="#6a0dad",
    secondary="#D4AF37",
    primary_dark="#4b0082",
    marker_stroke="white",
    warning="#FF5252",
    success="#4CAF50",
    accent="#2196F3",
    given="#4CAF50",
    received="#2196F3",
    hole="#2d3348",
    tooltip_bg="#2d3348",
    tooltip_border="rgba(106, 13, 173, 0.5)",
    tooltip_title="#D4AF37",
    tooltip_value="#fff",
)

LIGHT_THEME = Theme(
    name="light",
    background="#ffffff",
    text="#0f172a",
    muted_text="#64748b",
    axis="#94a3b8",
    grid="#cbd5e1",
    primary="#3b82f6",
    secondary="#f59e0b",
    primary_dark="#1e3a8a",
    marker_stroke="#ffffff",
    warning="#ef4444",
    success="#22c55e",
    accent="#3b82f6",
    given="#22c55e",
    received="#3b82f6",
    hole="#ffffff",
    tooltip_bg="#f1f5f9",
    tooltip_border="#94a3b8",
    tooltip_title="#475569",
    tooltip_value="#0f172a",
    font_family="system-ui, -apple-system, sans-serif",
)

THEMES: dict[str, Theme] = {theme.name: theme for theme in (DARK_THEME, LIGHT_THEME)}


def get_theme(name: str) -> Theme:
    """
    Look up a theme by name.

    Raises:
        KeyError: If no theme is registered under that name.

    Example:
        >>> get_theme("light").background
        '#ffffff'
    """
    try:
        return THEMES[name]
    except KeyError:
        raise KeyError(f"Unknown theme {name!r}; expected one of {sorted(THEMES)}") from None
