"""
FastAPI routes for the Progress Charts dashboard.

PURPOSE: HTTP surface of the dashboard; handlers hand off to presenters.
AI CONTEXT: Routes should be simple - chart logic lives in the renderer.

ROUTE STRUCTURE:
- / : Profile page (full HTML, charts load into mount points via htmx)
- /partials/charts/{name} : Chart markup for one mount point
- /partials/tooltip/{marker_id} : Tooltip slot after a hover event
- /charts/{name}.svg, /charts/{name}.png : Standalone chart images
- /api/summary : JSON profile summary

HOVER FLOW:
Line-chart markers carry hx-get="/partials/tooltip/{marker_id}" with the
event type as the 'phase' parameter. The route feeds enter/leave into the
process-wide TooltipController and swaps its rendered slot back into the
chart.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from html import escape
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response

from ..config import Config
from ..models import ChartKind, InvalidInputError
from ..presenters import (
    CHART_KINDS,
    MOUNT_IDS,
    ChartExporter,
    ProfilePresenter,
    ProfileSummaryViewModel,
)
from ..renderer import MountTable, render_error_state, render_loading_state
from ..storage import PayloadStore
from ..svg import svg_document
from ..tooltip import TooltipController

__all__ = [
    "router",
    "TOOLTIP_ENDPOINT",
    "get_store",
    "get_presenter",
    "get_exporter",
    "get_tooltip_controller",
]

logger = logging.getLogger(__name__)

router = APIRouter()

TOOLTIP_ENDPOINT = "/partials/tooltip"

# =============================================================================
# CSS Styles
# =============================================================================

_DASHBOARD_CSS = """
:root {
    --bg: #1a1f2e;
    --surface: rgba(255, 255, 255, 0.05);
    --border: rgba(255, 255, 255, 0.1);
    --text: #ffffff;
    --text-muted: #aaaaaa;
    --primary: #6a0dad;
    --secondary: #D4AF37;
    --warning: #FF5252;
    --success: #4CAF50;
    --accent: #2196F3;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: system-ui, -apple-system, sans-serif;
    background: var(--bg);
    color: var(--text);
    line-height: 1.6;
    padding: 1rem;
}
.container { max-width: 900px; margin: 0 auto; }
header {
    margin-bottom: 1.5rem;
    padding-bottom: 1rem;
    border-bottom: 1px solid var(--border);
}
h1 { font-size: 1.5rem; font-weight: 600; }
.subtitle { color: var(--text-muted); font-size: 0.875rem; }
.stats {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(180px, 1fr));
    gap: 1rem;
    margin-bottom: 1.5rem;
}
.stat {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 0.75rem;
    padding: 1rem;
}
.stat-value { font-size: 1.75rem; font-weight: 700; color: var(--secondary); }
.stat-label { font-size: 0.875rem; color: var(--text-muted); }
.ratio-below { color: var(--warning); }
.ratio-good { color: var(--success); }
.ratio-excellent { color: var(--accent); }
.panel { margin-bottom: 1.5rem; }
.chart-mount { display: flex; justify-content: center; overflow-x: auto; }
.chart-mount svg { max-width: 100%; height: auto; }
.chart-mount .marker { cursor: pointer; }
.chart-placeholder, .chart-loading, .chart-error {
    padding: 3rem 1rem;
    text-align: center;
    color: var(--text-muted);
}
.chart-error { color: var(--warning); }
.chart-state-icon { font-size: 2rem; }
footer {
    margin-top: 2rem;
    padding-top: 1rem;
    border-top: 1px solid var(--border);
    color: var(--text-muted);
    font-size: 0.875rem;
    text-align: center;
}
"""

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_store() -> PayloadStore:
    """
    Create a PayloadStore for the configured payload file.

    A new store per request means every request re-reads the snapshot,
    so replacing profile.json shows up on the next refresh.

    Returns:
        PayloadStore reading Config.get_payload_path().
    """
    return PayloadStore()


def get_presenter(
    store: Annotated[PayloadStore, Depends(get_store)],
) -> ProfilePresenter:
    """
    Create the ProfilePresenter used by page, partial and API routes.

    Line-chart markers get htmx hover hooks pointing at TOOLTIP_ENDPOINT.

    Args:
        store: PayloadStore injected via Depends (overridable in tests).

    Returns:
        ProfilePresenter with the configured theme and ordering.
    """
    return ProfilePresenter(store, hover_endpoint=TOOLTIP_ENDPOINT)


def get_exporter(
    store: Annotated[PayloadStore, Depends(get_store)],
) -> ChartExporter:
    """Create the matplotlib PNG exporter (markers need no hover hooks)."""
    return ChartExporter(ProfilePresenter(store))


@lru_cache(maxsize=1)
def get_tooltip_controller() -> TooltipController:
    """
    Return the process-wide TooltipController.

    Business context: The page shows at most one tooltip at a time, so
    one controller instance serves every hover request. Cached so all
    requests share it; tests call get_tooltip_controller.cache_clear().
    Colours come from each attached chart's theme.

    Returns:
        The shared TooltipController.
    """
    return TooltipController()


def _html(content: str) -> HTMLResponse:
    return HTMLResponse(content=content, media_type="text/html; charset=utf-8")


def _require_chart(name: str) -> str:
    if name not in CHART_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown chart: {name}")
    return name


# ============================================================================
# Full Page Routes
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[ProfilePresenter, Depends(get_presenter)],
) -> HTMLResponse:
    """
    Render the profile page.

    The header is rendered server-side from the summary view model. The
    three chart mount points start in their loading state and fetch
    their partials with htmx on load.

    Args:
        presenter: ProfilePresenter injected via FastAPI Depends.

    Returns:
        HTMLResponse with the complete page.

    Example:
        >>> # GET http://localhost:8000/
        >>> # Returns full HTML profile page
    """
    summary = presenter.get_summary()
    mounts = MountTable()
    for mount_id in MOUNT_IDS.values():
        mounts.write(render_loading_state(mount_id))
    return _html(_render_dashboard_html(summary, mounts))


# ============================================================================
# Partial Routes (htmx)
# ============================================================================


@router.get("/partials/charts/{name}", response_class=HTMLResponse)
async def chart_partial(
    name: str,
    presenter: Annotated[ProfilePresenter, Depends(get_presenter)],
    controller: Annotated[TooltipController, Depends(get_tooltip_controller)],
) -> HTMLResponse:
    """
    Render one chart for swapping into its mount point.

    Rendering the progress chart re-attaches the tooltip controller, since
    the previous markers are replaced along with the markup.

    Args:
        name: "progress", "projects" or "audit".
        presenter: ProfilePresenter injected via FastAPI Depends.
        controller: Shared TooltipController.

    Returns:
        HTMLResponse with the chart SVG, its "no data" placeholder, or an
        error block when the chart could not be built.

    Raises:
        HTTPException: 404 for an unknown chart name.
    """
    _require_chart(name)
    try:
        rendered = presenter.render(name)
    except (InvalidInputError, KeyError) as e:
        logger.error(f"Failed to render {name} chart: {e}")
        return _html(render_error_state(MOUNT_IDS[name]).markup)
    if rendered.kind is ChartKind.LINE:
        controller.attach(rendered)
    return _html(rendered.markup)


@router.get(TOOLTIP_ENDPOINT + "/{marker_id}", response_class=HTMLResponse)
async def tooltip_partial(
    marker_id: str,
    presenter: Annotated[ProfilePresenter, Depends(get_presenter)],
    controller: Annotated[TooltipController, Depends(get_tooltip_controller)],
    phase: Literal["mouseenter", "mouseleave"] = "mouseenter",
) -> HTMLResponse:
    """
    Apply a hover event and return the updated tooltip slot.

    When the controller does not know the marker (fresh process, or a
    page rendered before a restart) the progress chart is rendered and
    attached first. Ids still unknown after that are ignored.

    Args:
        marker_id: Id of the hovered marker.
        presenter: ProfilePresenter injected via FastAPI Depends.
        controller: Shared TooltipController.
        phase: "mouseenter" shows the tooltip, "mouseleave" hides it.

    Returns:
        HTMLResponse with the nested <svg> tooltip slot.
    """
    if marker_id not in controller:
        try:
            controller.attach(presenter.render("progress"))
        except (InvalidInputError, KeyError) as e:
            logger.error(f"Failed to render progress chart for tooltip: {e}")
    if phase == "mouseleave":
        controller.leave(marker_id)
    else:
        controller.enter(marker_id)
    return _html(controller.render())


# ============================================================================
# Chart Routes (images)
# ============================================================================


@router.get("/charts/{name}.svg")
async def chart_svg(
    name: str,
    presenter: Annotated[ProfilePresenter, Depends(get_presenter)],
) -> Response:
    """
    Serve one chart as a standalone SVG document.

    Returns:
        Response with image/svg+xml content. Degenerate data gives an
        SVG carrying the chart's "no data" message.

    Raises:
        HTTPException: 404 for an unknown chart name, 500 when the chart
            cannot be rendered (e.g. unknown theme).
    """
    _require_chart(name)
    try:
        rendered = presenter.render(name)
    except (InvalidInputError, KeyError) as e:
        logger.error(f"Failed to render {name} chart: {e}")
        raise HTTPException(status_code=500, detail=f"Could not render {name} chart") from e
    if rendered.placeholder:
        content = _placeholder_chart_svg(Config.PLACEHOLDER_MESSAGES[CHART_KINDS[name].value])
    else:
        content = rendered.markup.encode("utf-8")
    return Response(content=content, media_type="image/svg+xml")


@router.get("/charts/{name}.png")
async def chart_png(
    name: str,
    exporter: Annotated[ChartExporter, Depends(get_exporter)],
) -> Response:
    """
    Generate and serve one chart as a PNG image.

    Falls back to an SVG placeholder if matplotlib is not installed.

    Returns:
        One of two payloads:
        - image/png bytes rendered by matplotlib
        - an image/svg+xml stand-in when matplotlib cannot be imported

    Raises:
        HTTPException: 404 for an unknown chart name, 500 when the chart
            cannot be rendered (e.g. unknown theme).
    """
    _require_chart(name)
    try:
        png_bytes = exporter.render_png(name)
        return Response(content=png_bytes, media_type="image/png")
    except ImportError:
        # no matplotlib; serve the stand-in
        title = Config.CHART_TITLES[CHART_KINDS[name].value]
        return Response(
            content=_placeholder_chart_svg(f"{title} (install matplotlib)"),
            media_type="image/svg+xml",
        )
    except (InvalidInputError, KeyError) as e:
        logger.error(f"Failed to export {name} chart: {e}")
        raise HTTPException(status_code=500, detail=f"Could not render {name} chart") from e


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/summary")
async def api_summary(
    presenter: Annotated[ProfilePresenter, Depends(get_presenter)],
) -> dict[str, object]:
    """
    Get the profile summary as JSON.

    Returns:
        Dict with login, totals, pass/fail counts, success rate and the
        audit ratio ("infinite" when nothing was received).

    Example:
        >>> # GET /api/summary
        >>> {"login": "alice", "passed": 12, "audit_ratio": {"ratio": 1.5, ...}, ...}
    """
    return presenter.get_summary().to_dict()


# ============================================================================
# HTML helpers
# ============================================================================


def _placeholder_chart_svg(message: str) -> bytes:
    """
    Generate a small SVG carrying a message.

    Args:
        message: Text to display (escaped).

    Returns:
        UTF-8 encoded SVG bytes.

    Example:
        >>> b'No audit data' in _placeholder_chart_svg('No audit data available')
        True
    """
    root = svg_document(400, 200)
    root.add("rect", width="100%", height="100%", fill="#f1f5f9")
    root.add("text", message, x="50%", y="50%", text_anchor="middle", fill="#64748b", font_size=16)
    return root.to_string().encode("utf-8")


def _render_mount(name: str, mounts: MountTable) -> str:
    mount_id = MOUNT_IDS[name]
    return f"""<section class="panel">
            <div id="{mount_id}" class="chart-mount"
                 hx-get="/partials/charts/{name}"
                 hx-trigger="load, every 60s"
                 hx-swap="innerHTML">
                {mounts.markup(mount_id)}
            </div>
            <a class="subtitle" href="/charts/{name}.png">Download PNG</a>
        </section>"""


def _render_dashboard_html(sm: ProfileSummaryViewModel, mounts: MountTable) -> str:
    """
    Render the complete profile page.

    Args:
        sm: Summary view model for the header.
        mounts: MountTable holding the initial content of each mount.

    Returns:
        Complete HTML document with the htmx script, the stats header
        and the three chart mount points. User-supplied text is escaped.
    """
    login = escape(sm.login) or "Unknown user"
    joined = f"Member since {escape(sm.created_at)}" if sm.created_at else ""
    charts = "\n        ".join(_render_mount(name, mounts) for name in MOUNT_IDS)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{login} - Progress</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
    <style>
        {_DASHBOARD_CSS}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>{login}</h1>
            <span class="subtitle">{joined}</span>
        </header>

        <div class="stats" id="profile-stats">
            <div class="stat">
                <div class="stat-value">{escape(sm.total_amount_display)}</div>
                <div class="stat-label">Total XP</div>
            </div>
            <div class="stat">
                <div class="stat-value">{sm.passed} / {sm.total_projects}</div>
                <div class="stat-label">Projects passed ({escape(sm.success_rate_display)})</div>
            </div>
            <div class="stat">
                <div class="stat-value {sm.ratio_class}">{escape(sm.ratio_display)}</div>
                <div class="stat-label">Audit ratio - {escape(sm.ratio.status.caption)}</div>
            </div>
        </div>

        {charts}

        <footer>Progress Charts</footer>
    </div>
</body>
</html>"""
