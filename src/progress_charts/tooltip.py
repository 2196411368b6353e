"""
Tooltip controller for Progress Charts.

PURPOSE: Show one tooltip box for the hovered line-chart marker.
AI CONTEXT: The only stateful object in the rendering path. The web layer
keeps one instance per process and drives it from hover requests.

BEHAVIOUR:
- attach(rendered): load the chart's TooltipRecords (replaces previous)
- enter(id): size the box to its text, centre it above the marker, show it,
  emphasise the marker (r 4 -> 6, stroke 2 -> 3)
- leave(id): revert the marker, hide the box if that marker owns it
- Last enter wins; unknown ids are ignored

USAGE:
    controller = TooltipController()
    controller.attach(render_chart(spec))
    state = controller.enter("progress-chart-marker-3")
    fragment = controller.render()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import Config
from .models import Point, RenderedChart, TooltipRecord
from .svg import SvgElement
from .themes import Theme, get_theme

__all__ = [
    "TooltipState",
    "MarkerState",
    "TooltipController",
    "measure_text",
    "tooltip_slot_id",
]

logger = logging.getLogger(__name__)

# Advance widths as a fraction of the font size, close to common sans fonts.
_GLYPH_WIDTHS: dict[str, float] = {
    **dict.fromkeys(" il.,:;'|!", 0.28),
    **dict.fromkeys("ftjrI/()[]-", 0.33),
    **dict.fromkeys("0123456789", 0.556),
    **dict.fromkeys("mwMW%@", 0.85),
    **dict.fromkeys("ABCDEFGHJKLNOPQRSTUVXYZ", 0.667),
}
_DEFAULT_GLYPH_WIDTH = 0.556
_BOLD_FACTOR = 1.06


def measure_text(text: str, font_size: float, *, bold: bool = False) -> float:
    """
    Estimate the rendered width of a single line of text.

    The server never sees the browser's font metrics, so widths come
    from a per-glyph table. Longer or wider text always measures wider,
    which is what box sizing needs.

    Args:
        text: Line to measure.
        font_size: Font size in pixels.
        bold: Apply the bold widening factor.

    Returns:
        Estimated width in pixels (0.0 for empty text).

    Example:
        >>> measure_text("", 12)
        0.0
        >>> measure_text("1.20 MB", 14) > measure_text("120 B", 14)
        True
    """
    width = sum(_GLYPH_WIDTHS.get(char, _DEFAULT_GLYPH_WIDTH) for char in text) * font_size
    return width * _BOLD_FACTOR if bold else float(width)


def tooltip_slot_id(mount_id: str) -> str:
    """Id of the (initially hidden) tooltip slot inside a chart."""
    return f"{mount_id}-tooltip"


def _font_size(line_index: int) -> int:
    sizes = Config.TOOLTIP_FONT_SIZES
    return sizes[min(line_index, len(sizes) - 1)]


@dataclass(frozen=True)
class TooltipState:
    """
    Snapshot of the single tooltip box.

    x/y is the top-left corner of the box in chart coordinates. A
    hidden tooltip has visible=False and marker_id=None.
    """

    visible: bool = False
    marker_id: str | None = None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class MarkerState:
    """Visual state of one marker."""

    marker_id: str
    radius: float
    stroke_width: float

    @property
    def emphasised(self) -> bool:
        return self.radius == Config.EMPHASIS_RADIUS


class TooltipController:
    """
    Owns the one tooltip box shown over a rendered line chart.

    Hover events from the host arrive as enter/leave calls. Handlers run
    to completion and simply overwrite state, so two quick enters with
    no leave in between leave the second marker active and the first
    reverted.
    """

    def __init__(self, theme: str = Config.DEFAULT_THEME) -> None:
        self._records: dict[str, TooltipRecord] = {}
        self._mount_id = ""
        self._theme: Theme = get_theme(theme)
        self._state = TooltipState()

    def attach(self, rendered: RenderedChart) -> None:
        """
        Load the tooltip records of a freshly rendered chart.

        Replaces the previous registry and hides any visible tooltip,
        since the old markers no longer exist.

        Args:
            rendered: Output of render_chart(); charts without markers
                leave the registry empty.
        """
        self._records = {record.element_id: record for record in rendered.tooltips}
        self._mount_id = rendered.mount_id
        if rendered.spec is not None:
            self._theme = get_theme(rendered.spec.theme)
        self._state = TooltipState()
        logger.debug("Attached %d markers from %s", len(self._records), self._mount_id)

    @property
    def state(self) -> TooltipState:
        return self._state

    @property
    def mount_id(self) -> str:
        return self._mount_id

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._records

    def enter(self, marker_id: str) -> TooltipState:
        """
        Show the tooltip for a marker.

        The box is as wide as the widest line plus horizontal padding
        and as tall as the lines plus vertical padding. It is centred
        horizontally on the marker with its bottom edge TOOLTIP_OFFSET
        above the marker centre.

        Args:
            marker_id: Element id of the hovered marker.

        Returns:
            The new state, or the unchanged state for an unknown id.

        Example:
            >>> controller.enter("progress-chart-marker-0").visible
            True
        """
        record = self._records.get(marker_id)
        if record is None:
            logger.debug("Ignoring enter for unknown marker %s", marker_id)
            return self._state

        widest = max(
            (measure_text(line, _font_size(i), bold=True) for i, line in enumerate(record.lines)),
            default=0.0,
        )
        width = widest + 2 * Config.TOOLTIP_PADDING_X
        height = len(record.lines) * Config.TOOLTIP_LINE_HEIGHT + 2 * Config.TOOLTIP_PADDING_Y
        self._state = TooltipState(
            visible=True,
            marker_id=marker_id,
            x=record.anchor.x - width / 2,
            y=record.anchor.y - height - Config.TOOLTIP_OFFSET,
            width=width,
            height=height,
            lines=record.lines,
        )
        return self._state

    def leave(self, marker_id: str) -> TooltipState:
        """
        Revert a marker and hide the tooltip if the marker owns it.

        A late leave for a marker that already lost the tooltip to a
        newer enter does not hide the newer tooltip.
        """
        if marker_id not in self._records:
            logger.debug("Ignoring leave for unknown marker %s", marker_id)
            return self._state
        if self._state.marker_id == marker_id:
            self._state = TooltipState()
        return self._state

    def marker_state(self, marker_id: str) -> MarkerState | None:
        """Radius and stroke of a marker, None for unknown ids."""
        if marker_id not in self._records:
            return None
        if self._state.marker_id == marker_id:
            return MarkerState(marker_id, Config.EMPHASIS_RADIUS, Config.EMPHASIS_STROKE_WIDTH)
        return MarkerState(marker_id, Config.MARKER_RADIUS, Config.MARKER_STROKE_WIDTH)

    def render(self) -> str:
        """
        Render the tooltip slot for the current state.

        The fragment replaces the chart's tooltip slot in place. The slot
        is a nested <svg> so that an HTML-context swap keeps the SVG
        namespace. When visible it holds an emphasised copy of the
        marker, the box and one text element per line.

        Returns:
            Nested <svg> markup; hidden and empty when nothing is shown.
        """
        theme = self._theme
        slot = SvgElement("svg")
        slot.set("id", tooltip_slot_id(self._mount_id))
        slot.set("class", "chart-tooltip")
        slot.set("overflow", "visible")
        state = self._state
        if not state.visible or state.marker_id is None:
            slot.set("display", "none")
            slot.set("pointer-events", "none")
            return slot.to_string()

        slot.set("pointer-events", "none")
        anchor: Point = self._records[state.marker_id].anchor
        slot.add(
            "circle",
            id=f"{state.marker_id}-emphasis",
            cx=anchor.x,
            cy=anchor.y,
            r=Config.EMPHASIS_RADIUS,
            fill=theme.primary,
            stroke=theme.marker_stroke,
            stroke_width=Config.EMPHASIS_STROKE_WIDTH,
        )
        slot.add(
            "rect",
            x=state.x,
            y=state.y,
            width=state.width,
            height=state.height,
            rx=8,
            fill=theme.tooltip_bg,
            stroke=theme.tooltip_border,
            stroke_width=1,
        )
        baseline = state.y + Config.TOOLTIP_PADDING_Y
        for i, line in enumerate(state.lines):
            first = i == 0
            size = _font_size(i)
            slot.add(
                "text",
                line,
                x=anchor.x,
                y=baseline + size,
                text_anchor="middle",
                fill=theme.tooltip_title if first else theme.tooltip_value,
                font_size=size,
                font_weight=600 if first else 700,
            )
            baseline += Config.TOOLTIP_LINE_HEIGHT
        return slot.to_string()
