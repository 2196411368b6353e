"""
Chart renderer for Progress Charts.

PURPOSE: Map a ChartSpec to a RenderedChart (SVG markup + tooltip records).
AI CONTEXT: Pure geometry - the only side effect is MountTable.write().

CHART KINDS:
1. LINE  (DaySeries)     - daily totals as a polyline with markers
2. BAR   (PassFailCount) - passed vs failed horizontal bars
3. DONUT (RatioPair)     - given/received ring with the ratio in the hole

GEOMETRY CONTRACT:
- Dimensions and margins come from the ChartSpec (or DEFAULT_DIMENSIONS)
- Degenerate data renders a "no data" placeholder, never NaN geometry
- Same ChartSpec in, byte-identical markup out

USAGE:
    spec = ChartSpec(ChartKind.LINE, series, mount_id="progress-chart")
    rendered = render_chart(spec)
    mounts.write(rendered)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from .aggregation import compute_ratio
from .config import Config
from .formatting import (
    format_count,
    format_percentage,
    format_ratio,
    format_scaled_amount,
    round_half_up,
)
from .models import (
    ChartDimensions,
    ChartKind,
    ChartSpec,
    DaySeries,
    InvalidInputError,
    Margins,
    PassFailCount,
    Point,
    RatioPair,
    RenderedChart,
    TooltipRecord,
)
from .svg import SvgElement, fmt_number, svg_document
from .themes import Theme, get_theme
from .tooltip import tooltip_slot_id

__all__ = [
    "DEFAULT_DIMENSIONS",
    "MountTable",
    "render_chart",
    "render_line_chart",
    "render_bar_chart",
    "render_donut_gauge",
    "render_placeholder",
    "render_error_state",
    "render_loading_state",
    "line_x",
    "line_y",
    "line_points",
    "x_label_stride",
    "bar_length",
    "donut_split_angle",
]

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS: dict[ChartKind, ChartDimensions] = {
    ChartKind.LINE: ChartDimensions(850, 500, Margins(top=80, right=80, bottom=120, left=80)),
    ChartKind.BAR: ChartDimensions(850, 280, Margins(top=80, right=150, bottom=80, left=50)),
    ChartKind.DONUT: ChartDimensions(850, 460, Margins(top=80, right=80, bottom=140, left=80)),
}

_DATA_TYPES: dict[ChartKind, type] = {
    ChartKind.LINE: DaySeries,
    ChartKind.BAR: PassFailCount,
    ChartKind.DONUT: RatioPair,
}


# =============================================================================
# Geometry helpers
# =============================================================================


def _lerp(start: float, end: float, t: float) -> float:
    # Exact at t == 0 and t == 1, unlike start + (end - start) * t.
    return (1 - t) * start + t * end


def line_x(index: int, count: int, dims: ChartDimensions) -> float:
    """
    Map a series index onto the horizontal plot range.

    Index 0 lands exactly on the left margin and index count-1 exactly
    on width - right margin. A single-point series sits at the left
    margin since there is no range to spread over.

    Args:
        index: Position in the series, 0-based.
        count: Series length.
        dims: Chart geometry.

    Returns:
        x coordinate in pixels.

    Example:
        >>> dims = DEFAULT_DIMENSIONS[ChartKind.LINE]
        >>> line_x(0, 5, dims), line_x(4, 5, dims)
        (80.0, 770.0)
        >>> line_x(0, 1, dims)
        80
    """
    left = dims.margins.left
    if count <= 1:
        return left
    return _lerp(left, dims.width - dims.margins.right, index / (count - 1))


def line_y(value: float, max_value: float, dims: ChartDimensions) -> float:
    """
    Map a value onto the vertical plot range (baseline at the bottom).

    Returns:
        y coordinate; the baseline for every value when max_value is 0.
    """
    baseline = dims.height - dims.margins.bottom
    if max_value <= 0:
        return baseline
    return _lerp(baseline, dims.margins.top, value / max_value)


def line_points(series: DaySeries, dims: ChartDimensions) -> list[Point]:
    """Pixel positions of every day in the series, in series order."""
    count = len(series)
    max_total = series.max_total
    return [
        Point(line_x(i, count, dims), line_y(day.total, max_total, dims))
        for i, day in enumerate(series)
    ]


def x_label_stride(count: int) -> int:
    """
    Step between labelled x positions so at most ~10 labels are drawn.

    Example:
        >>> x_label_stride(7), x_label_stride(25)
        (1, 3)
    """
    return max(1, math.ceil(count / Config.TARGET_X_LABELS))


def bar_length(value: float, scale_max: float, track_width: float) -> float:
    """Length of a bar for value on a track where scale_max fills the width."""
    if scale_max <= 0:
        return 0.0
    return value / scale_max * track_width


def donut_split_angle(pair: RatioPair) -> float:
    """
    Angle (radians, clockwise from 12 o'clock) where 'given' ends.

    Returns:
        2π * given / (given + received); 0.0 for an all-zero pair.
    """
    if pair.total == 0:
        return 0.0
    return 2 * math.pi * pair.given / pair.total


def _arc_point(cx: float, cy: float, radius: float, angle: float) -> Point:
    return Point(cx + radius * math.sin(angle), cy - radius * math.cos(angle))


def _path(points: list[Point]) -> str:
    head, *rest = points
    commands = [f"M {fmt_number(head.x)} {fmt_number(head.y)}"]
    commands.extend(f"L {fmt_number(p.x)} {fmt_number(p.y)}" for p in rest)
    return " ".join(commands)


# =============================================================================
# Shared scaffolding
# =============================================================================


def _resolve(spec: ChartSpec) -> tuple[ChartDimensions, Theme]:
    dims = spec.dimensions or DEFAULT_DIMENSIONS[spec.kind]
    return dims, get_theme(spec.theme)


def _chart_root(spec: ChartSpec, dims: ChartDimensions, theme: Theme) -> SvgElement:
    title = Config.CHART_TITLES[spec.kind.value]
    root = svg_document(
        dims.width,
        dims.height,
        id=f"{spec.mount_id}-svg",
        class_=f"chart chart-{spec.kind.value}",
        role="img",
        aria_label=title,
        style=(
            f"font-family: {theme.font_family}; background: {theme.background}; "
            "border-radius: 12px;"
        ),
    )
    return root


def _title(root: SvgElement, spec: ChartSpec, dims: ChartDimensions, theme: Theme) -> None:
    root.add(
        "text",
        Config.CHART_TITLES[spec.kind.value],
        x=dims.width / 2,
        y=30,
        text_anchor="middle",
        font_size=18,
        font_weight="bold",
        fill=theme.text,
    )


# =============================================================================
# Chart kinds
# =============================================================================


def render_line_chart(spec: ChartSpec) -> RenderedChart:
    """
    Render a DaySeries as a line chart with hoverable markers.

    LAYOUT:
    - Axes along the left and bottom plot edges
    - GRIDLINE_INTERVALS + 1 dashed gridlines from 0 to the max total,
      each labelled with the scaled amount
    - Gradient polyline through all points in series order
    - One circle marker per day with a TooltipRecord (date, amount)
    - Rotated date labels every x_label_stride(n) points

    Args:
        spec: ChartSpec whose data is a DaySeries.

    Returns:
        RenderedChart; a placeholder when the series is empty.
    """
    series: DaySeries = spec.data  # type: ignore[assignment]
    if len(series) == 0:
        return render_placeholder(spec)

    dims, theme = _resolve(spec)
    m = dims.margins
    baseline = dims.height - m.bottom
    right = dims.width - m.right
    max_total = series.max_total
    points = line_points(series, dims)
    gradient_id = f"{spec.mount_id}-line-gradient"

    root = _chart_root(spec, dims, theme)
    gradient = root.add("defs").add(
        "linearGradient", id=gradient_id, x1="0%", y1="0%", x2="100%", y2="0%"
    )
    gradient.add("stop", offset="0%", stop_color=theme.primary)
    gradient.add("stop", offset="100%", stop_color=theme.secondary)

    root.add("line", x1=m.left, y1=baseline, x2=right, y2=baseline, stroke=theme.axis, stroke_width=2)
    root.add("line", x1=m.left, y1=m.top, x2=m.left, y2=baseline, stroke=theme.axis, stroke_width=2)

    intervals = Config.GRIDLINE_INTERVALS
    for i in range(intervals + 1):
        fraction = i / intervals
        y = _lerp(baseline, m.top, fraction)
        root.add(
            "line",
            class_="gridline",
            x1=m.left,
            y1=y,
            x2=right,
            y2=y,
            stroke=theme.grid,
            stroke_dasharray=4,
            opacity=0.5,
        )
        root.add(
            "text",
            format_scaled_amount(int(round_half_up(fraction * max_total))),
            class_="y-label",
            x=m.left - 15,
            y=y + 4,
            text_anchor="end",
            fill=theme.muted_text,
            font_size=12,
        )

    root.add(
        "path",
        class_="series",
        d=_path(points),
        fill="none",
        stroke=f"url(#{gradient_id})",
        stroke_width=3,
    )

    slot_id = tooltip_slot_id(spec.mount_id)
    records: list[TooltipRecord] = []
    for i, (day, point) in enumerate(zip(series, points, strict=True)):
        marker_id = f"{spec.mount_id}-marker-{i}"
        marker = root.add(
            "circle",
            id=marker_id,
            class_="marker",
            cx=point.x,
            cy=point.y,
            r=Config.MARKER_RADIUS,
            fill=theme.primary,
            stroke=theme.marker_stroke,
            stroke_width=Config.MARKER_STROKE_WIDTH,
        )
        if spec.hover_endpoint:
            marker.set("hx-get", f"{spec.hover_endpoint}/{marker_id}")
            marker.set("hx-trigger", "mouseenter, mouseleave")
            marker.set("hx-vals", "js:{phase: event.type}")
            marker.set("hx-target", f"#{slot_id}")
            marker.set("hx-swap", "outerHTML")
        records.append(
            TooltipRecord(marker_id, point, (day.date_label, format_scaled_amount(day.total)))
        )

    label_y = baseline + 40
    for i in range(0, len(series), x_label_stride(len(series))):
        x = points[i].x
        root.add(
            "text",
            series[i].date_label,
            class_="x-label",
            x=x,
            y=label_y,
            font_size=11,
            text_anchor="middle",
            fill=theme.axis,
            transform=f"rotate(-45 {fmt_number(x)} {fmt_number(label_y)})",
        )

    _title(root, spec, dims, theme)
    root.add(
        "svg",
        id=slot_id,
        class_="chart-tooltip",
        overflow="visible",
        display="none",
        pointer_events="none",
    )

    return RenderedChart(spec=spec, markup=root.to_string(), tooltips=tuple(records))


def render_bar_chart(spec: ChartSpec) -> RenderedChart:
    """
    Render a PassFailCount as two horizontal bars.

    LAYOUT:
    - Title and success rate (one decimal) above the bars
    - Pass bar then fail bar, each labelled "{n} Passed" / "{n} Failed"
      at its end
    - Bars scale so max(pass, fail, 1) fills the track
      (width - left - right margin)
    - Dashed gridlines every ceil(scale_max / 5) with tick labels
    - Total count at the bottom

    Args:
        spec: ChartSpec whose data is a PassFailCount.

    Returns:
        RenderedChart; a placeholder when pass + fail == 0.
    """
    counts: PassFailCount = spec.data  # type: ignore[assignment]
    if counts.total == 0:
        return render_placeholder(spec)

    dims, theme = _resolve(spec)
    m = dims.margins
    track = dims.plot_width
    scale_max = max(counts.passed, counts.failed, 1)
    bar_height = (dims.plot_height - Config.BAR_GAP) / 2
    axis_top = m.top - 10
    axis_bottom = dims.height - m.bottom + 10

    root = _chart_root(spec, dims, theme)
    _title(root, spec, dims, theme)
    root.add(
        "text",
        f"Success Rate: {format_percentage(counts.success_rate)}",
        class_="success-rate",
        x=dims.width / 2,
        y=50,
        text_anchor="middle",
        font_size=13,
        fill=theme.muted_text,
    )

    bars = (
        ("pass", counts.passed, "Passed", m.top, theme.secondary, 0.9),
        ("fail", counts.failed, "Failed", m.top + bar_height + Config.BAR_GAP, theme.primary_dark, 0.8),
    )
    for name, value, caption, y, color, opacity in bars:
        length = bar_length(value, scale_max, track)
        root.add(
            "rect",
            id=f"{spec.mount_id}-bar-{name}",
            class_=f"bar bar-{name}",
            x=m.left,
            y=y,
            width=length,
            height=bar_height,
            fill=color,
            opacity=opacity,
            rx=4,
        )
        root.add(
            "text",
            f"{format_count(value)} {caption}",
            class_="bar-label",
            x=m.left + length + 10,
            y=y + bar_height / 2 + 5,
            font_size=14,
            font_weight=600,
            fill=theme.text,
        )

    root.add("line", x1=m.left, y1=axis_top, x2=m.left, y2=axis_bottom, stroke=theme.axis, stroke_width=2)

    step = math.ceil(scale_max / Config.BAR_GRID_DIVISIONS)
    for tick in range(0, scale_max + 1, step):
        x = m.left + bar_length(tick, scale_max, track)
        root.add(
            "line",
            class_="gridline",
            x1=x,
            y1=axis_top,
            x2=x,
            y2=axis_bottom,
            stroke=theme.grid,
            stroke_dasharray="2,2",
            opacity=0.5,
        )
        root.add(
            "text",
            format_count(tick),
            class_="x-label",
            x=x,
            y=axis_bottom + 20,
            text_anchor="middle",
            font_size=11,
            fill=theme.axis,
        )

    root.add(
        "text",
        f"Total Projects: {format_count(counts.total)}",
        x=dims.width / 2,
        y=dims.height - 20,
        text_anchor="middle",
        font_size=13,
        fill=theme.muted_text,
    )
    return RenderedChart(spec=spec, markup=root.to_string())


def _segment(
    root: SvgElement,
    element_id: str,
    center: Point,
    radius: float,
    start: float,
    end: float,
    color: str,
) -> None:
    sweep = end - start
    if sweep <= 0:
        return
    if sweep >= 2 * math.pi:
        # An arc from a point back to itself draws nothing.
        root.add("circle", id=element_id, cx=center.x, cy=center.y, r=radius, fill=color, opacity=0.8)
        return
    first = _arc_point(center.x, center.y, radius, start)
    last = _arc_point(center.x, center.y, radius, end)
    large_arc = 1 if sweep > math.pi else 0
    d = (
        f"M {fmt_number(center.x)} {fmt_number(center.y)} "
        f"L {fmt_number(first.x)} {fmt_number(first.y)} "
        f"A {fmt_number(radius)} {fmt_number(radius)} 0 {large_arc} 1 "
        f"{fmt_number(last.x)} {fmt_number(last.y)} Z"
    )
    root.add("path", id=element_id, class_="segment", d=d, fill=color, opacity=0.8)


def render_donut_gauge(spec: ChartSpec) -> RenderedChart:
    """
    Render a RatioPair as a donut gauge.

    The ring is split at donut_split_angle(pair), with 'given' drawn
    clockwise from 12 o'clock and 'received' completing the circle. The
    hole shows the ratio (or ∞) coloured by status, the legend shows
    both scaled amounts with their share of the total.

    Args:
        spec: ChartSpec whose data is a RatioPair.

    Returns:
        RenderedChart; a placeholder when both totals are 0.
    """
    pair: RatioPair = spec.data  # type: ignore[assignment]
    if pair.total == 0:
        return render_placeholder(spec)

    dims, theme = _resolve(spec)
    m = dims.margins
    result = compute_ratio(pair)
    status_color = theme.status_color(result.status)
    center = Point(m.left + dims.plot_width / 2, m.top + dims.plot_height / 2)
    outer = min(dims.plot_width, dims.plot_height) / 2
    inner = outer * Config.DONUT_HOLE_RATIO
    split = donut_split_angle(pair)

    root = _chart_root(spec, dims, theme)
    root.add(
        "text",
        Config.CHART_TITLES[spec.kind.value],
        x=center.x,
        y=35,
        text_anchor="middle",
        font_size=20,
        fill=theme.text,
        font_weight="bold",
    )
    root.add(
        "text",
        Config.DONUT_SUBTITLE,
        x=center.x,
        y=60,
        text_anchor="middle",
        font_size=14,
        fill=theme.muted_text,
    )

    _segment(root, f"{spec.mount_id}-segment-given", center, outer, 0.0, split, theme.given)
    _segment(root, f"{spec.mount_id}-segment-received", center, outer, split, 2 * math.pi, theme.received)
    root.add("circle", class_="donut-hole", cx=center.x, cy=center.y, r=inner, fill=theme.hole)

    root.add(
        "text",
        format_ratio(result.ratio),
        class_="ratio-value",
        x=center.x,
        y=center.y - 10,
        text_anchor="middle",
        font_size=36,
        fill=status_color,
        font_weight="bold",
    )
    root.add(
        "text", "Ratio", x=center.x, y=center.y + 20, text_anchor="middle", font_size=14, fill=theme.muted_text
    )
    root.add(
        "text",
        result.status.caption,
        class_="ratio-status",
        x=center.x,
        y=center.y + 40,
        text_anchor="middle",
        font_size=13,
        fill=status_color,
        font_weight=500,
    )

    legend_y = dims.height - m.bottom + 40
    entries = (
        ("Done (Up)", pair.given, theme.given),
        ("Received (Down)", pair.received, theme.received),
    )
    for row, (caption, amount, color) in enumerate(entries):
        y = legend_y + row * 35
        share = format_percentage(amount / pair.total * 100)
        root.add("rect", x=m.left, y=y, width=20, height=20, fill=color, opacity=0.8)
        root.add(
            "text",
            f"{caption}: {format_scaled_amount(amount)} ({share})",
            class_="legend",
            x=m.left + 30,
            y=y + 15,
            fill=theme.text,
            font_size=14,
        )

    root.add(
        "text",
        Config.DONUT_HINT,
        x=center.x,
        y=dims.height - 20,
        text_anchor="middle",
        fill=theme.axis,
        font_size=12,
    )
    return RenderedChart(spec=spec, markup=root.to_string())


_RENDERERS: dict[ChartKind, Callable[[ChartSpec], RenderedChart]] = {
    ChartKind.LINE: render_line_chart,
    ChartKind.BAR: render_bar_chart,
    ChartKind.DONUT: render_donut_gauge,
}


def render_chart(spec: ChartSpec) -> RenderedChart:
    """
    Render any supported chart kind.

    Business context: Single entry point used by the presenters, the
    CLI and the web routes. Output depends only on the spec, so the
    same spec always produces byte-identical markup.

    Args:
        spec: ChartSpec describing kind, data, mount point and geometry.

    Returns:
        RenderedChart for the spec (placeholder for degenerate data).

    Raises:
        InvalidInputError: If the data type does not match the kind.
        KeyError: If the spec names an unknown theme.

    Example:
        >>> spec = ChartSpec(ChartKind.BAR, PassFailCount(3, 1), mount_id="projects")
        >>> render_chart(spec).markup.startswith('<svg')
        True
    """
    expected = _DATA_TYPES[spec.kind]
    if not isinstance(spec.data, expected):
        raise InvalidInputError(
            f"{spec.kind.value} chart needs {expected.__name__}, got {type(spec.data).__name__}"
        )
    return _RENDERERS[spec.kind](spec)


# =============================================================================
# Non-chart states
# =============================================================================


def render_placeholder(spec: ChartSpec) -> RenderedChart:
    """Render the kind's "no data" message for degenerate input."""
    message = Config.PLACEHOLDER_MESSAGES[spec.kind.value]
    logger.debug("Rendering placeholder for %s: %s", spec.mount_id, message)
    node = SvgElement("p", {"class": "chart-placeholder"}, text=message)
    return RenderedChart(spec=spec, markup=node.to_string(), placeholder=True)


def _state_block(css_class: str, icon: str, message: str) -> str:
    block = SvgElement("div", {"class": css_class})
    block.add("div", icon, class_="chart-state-icon")
    block.add("div", message, class_="chart-state-message")
    return block.to_string()


def render_error_state(mount_id: str, message: str = Config.DEFAULT_ERROR_MESSAGE) -> RenderedChart:
    """
    Render an error block for a mount whose data could not be loaded.

    Callers invoke this directly when the upstream fetch failed; it is
    never produced from chart data, so it cannot be confused with the
    "no data" placeholder.

    Args:
        mount_id: Mount point to associate the block with.
        message: Text to show (escaped).

    Returns:
        RenderedChart without a spec, tagged with the mount id.
    """
    markup = _state_block("chart-error", "⚠️", message)
    return RenderedChart(spec=None, markup=markup, mount=mount_id)


def render_loading_state(mount_id: str, message: str = Config.DEFAULT_LOADING_MESSAGE) -> RenderedChart:
    """Render a loading indicator for a mount."""
    markup = _state_block("chart-loading", "📊", message)
    return RenderedChart(spec=None, markup=markup, mount=mount_id)


# =============================================================================
# Mount points
# =============================================================================


class MountTable:
    """
    Named mount points holding the latest RenderedChart for each id.

    Writes replace the previous content wholesale; there is no diffing
    or partial patching.
    """

    def __init__(self) -> None:
        self._mounts: dict[str, RenderedChart] = {}

    def write(self, rendered: RenderedChart) -> None:
        """Replace whatever the mount held with this chart."""
        self._mounts[rendered.mount_id] = rendered
        logger.debug("Mounted %s (placeholder=%s)", rendered.mount_id, rendered.placeholder)

    def get(self, mount_id: str) -> RenderedChart | None:
        return self._mounts.get(mount_id)

    def markup(self, mount_id: str) -> str:
        """Markup currently mounted at mount_id, '' when empty."""
        rendered = self._mounts.get(mount_id)
        return rendered.markup if rendered is not None else ""

    def clear(self, mount_id: str) -> None:
        self._mounts.pop(mount_id, None)

    def __contains__(self, mount_id: object) -> bool:
        return mount_id in self._mounts
