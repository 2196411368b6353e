"""
Presenters for Progress Charts.

PURPOSE: Testable layer between the payload store and the UI surfaces.
AI CONTEXT: Builds ChartSpecs and view models; the renderer does the drawing.

DESIGN PRINCIPLES:
1. Presenters receive a store, return view models and RenderedCharts
2. No dependencies on a specific UI framework (web and CLI share them)
3. Unit-testable with an in-memory filesystem
4. Chart names ("progress", "projects", "audit") map to fixed mount ids

USAGE:
    presenter = ProfilePresenter(PayloadStore())
    summary = presenter.get_summary()
    mounts = presenter.render_all(MountTable())
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .aggregation import (
    compute_ratio,
    count_pass_fail,
    extract_ratio_pair,
    extract_user,
    group_by_day,
    parse_created_at,
    summarize_profile,
)
from .config import Config
from .formatting import format_count, format_percentage, format_ratio, format_scaled_amount
from .models import (
    ChartKind,
    ChartSpec,
    DaySeries,
    PassFailCount,
    RatioPair,
    RatioResult,
    RenderedChart,
)
from .renderer import MountTable, render_chart, x_label_stride
from .themes import get_theme

if TYPE_CHECKING:
    from .storage import PayloadStore

__all__ = [
    "CHART_KINDS",
    "MOUNT_IDS",
    "ProfileSummaryViewModel",
    "ProfilePresenter",
    "ChartExporter",
]

CHART_KINDS: dict[str, ChartKind] = {
    "progress": ChartKind.LINE,
    "projects": ChartKind.BAR,
    "audit": ChartKind.DONUT,
}

MOUNT_IDS: dict[str, str] = {
    "progress": "progress-chart",
    "projects": "projects-chart",
    "audit": "audit-chart",
}


@dataclass
class ProfileSummaryViewModel:
    """View model for the profile header and the /api/summary endpoint."""

    login: str
    user_id: str
    created_at: str
    total_amount: int
    passed: int
    failed: int
    ratio: RatioResult

    @property
    def total_projects(self) -> int:
        return self.passed + self.failed

    @property
    def total_amount_display(self) -> str:
        """
        Scaled total, e.g. "1.25 MB".

        Business context: Raw XP totals run into the millions; the
        scaled form matches the chart's axis labels.
        """
        return format_scaled_amount(self.total_amount)

    @property
    def success_rate_display(self) -> str:
        return format_percentage(PassFailCount(self.passed, self.failed).success_rate)

    @property
    def ratio_display(self) -> str:
        return format_ratio(self.ratio.ratio)

    @property
    def ratio_class(self) -> str:
        """
        CSS class for the ratio badge.

        Returns:
            "ratio-below", "ratio-good" or "ratio-excellent".
        """
        return f"ratio-{self.ratio.status.value}"

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize for JSON responses.

        Returns:
            Dict with raw numbers and their display strings. An infinite
            ratio is serialized as "infinite".
        """
        return {
            "login": self.login,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "total_amount": self.total_amount,
            "total_amount_display": self.total_amount_display,
            "passed": self.passed,
            "failed": self.failed,
            "total_projects": self.total_projects,
            "success_rate": self.success_rate_display,
            "audit_ratio": self.ratio.to_dict(),
            "audit_ratio_display": self.ratio_display,
        }


class ProfilePresenter:
    """
    Presenter for the three profile charts and the summary header.

    Every call re-reads the payload through the store, so the dashboard
    always reflects the current snapshot.
    """

    def __init__(
        self,
        store: PayloadStore,
        theme: str | None = None,
        chronological: bool | None = None,
        hover_endpoint: str | None = None,
    ) -> None:
        """
        Initialize presenter with its data source.

        Business context: Dependency injection lets tests use a store on
        an in-memory filesystem and lets the CLI and the web layer pick
        different themes and hover behaviour.

        Args:
            store: PayloadStore supplying the payload snapshot.
            theme: Theme name. Default: Config.get_theme_name()
            chronological: Sort day buckets by date.
                Default: Config.is_chronological()
            hover_endpoint: URL prefix for htmx tooltip requests on line
                chart markers. None renders markers without hooks.

        The theme is resolved when a chart is rendered, so the summary
        still works under a misconfigured PROGRESS_CHARTS_THEME.

        Example:
            >>> presenter = ProfilePresenter(PayloadStore(), theme="light")
            >>> presenter.render("projects").placeholder
            False
        """
        self.store = store
        self.theme = theme or Config.get_theme_name()
        self.chronological = (
            Config.is_chronological() if chronological is None else chronological
        )
        self.hover_endpoint = hover_endpoint

    def get_summary(self) -> ProfileSummaryViewModel:
        """
        Build the profile summary view model.

        Returns:
            ProfileSummaryViewModel with user identity, totals, pass/fail
            counts and the audit ratio. Missing sections give zeros and
            empty strings.
        """
        payload = self.store.load_payload()
        user = extract_user(payload)
        stats = summarize_profile(payload)
        return ProfileSummaryViewModel(
            login=str(user.get("login", "")),
            user_id=str(user.get("id", "")),
            created_at=parse_created_at(user),
            total_amount=stats.total_amount,
            passed=stats.passed,
            failed=stats.failed,
            ratio=compute_ratio(extract_ratio_pair(payload)),
        )

    def build_series(self) -> DaySeries:
        return group_by_day(self.store.load_events(), chronological=self.chronological)

    def build_counts(self) -> PassFailCount:
        return count_pass_fail(self.store.load_graded_items())

    def build_pair(self) -> RatioPair:
        return self.store.load_ratio_pair()

    def build_spec(self, name: str) -> ChartSpec:
        """
        Build the ChartSpec for one named chart.

        Args:
            name: "progress", "projects" or "audit".

        Returns:
            ChartSpec with default dimensions for the kind, the configured
            theme and (for the line chart) the hover endpoint.

        Raises:
            KeyError: If the chart name is unknown.
        """
        kind = CHART_KINDS[name]
        data: DaySeries | PassFailCount | RatioPair
        if kind is ChartKind.LINE:
            data = self.build_series()
        elif kind is ChartKind.BAR:
            data = self.build_counts()
        else:
            data = self.build_pair()
        return ChartSpec(
            kind=kind,
            data=data,
            mount_id=MOUNT_IDS[name],
            theme=self.theme,
            hover_endpoint=self.hover_endpoint if kind is ChartKind.LINE else None,
        )

    def render(self, name: str) -> RenderedChart:
        """
        Render one named chart.

        Raises:
            KeyError: If the chart name or the theme name is unknown.
        """
        return render_chart(self.build_spec(name))

    def render_all(self, mounts: MountTable) -> MountTable:
        """
        Render all three charts into their mount points.

        Args:
            mounts: Table to write into; previous content is replaced.

        Returns:
            The same MountTable, for chaining.
        """
        for name in CHART_KINDS:
            mounts.write(self.render(name))
        return mounts


class ChartExporter:
    """
    Raster export of the profile charts.

    Uses matplotlib for server-side PNG rendering, drawing the same data
    the SVG renderer gets. PNGs are for downloads and embedding where
    SVG is not accepted.
    """

    def __init__(self, presenter: ProfilePresenter) -> None:
        """
        Initialize exporter with the presenter that supplies chart data.

        Args:
            presenter: ProfilePresenter whose store, theme and ordering
                are reused.
        """
        self.presenter = presenter

    def _empty_figure(self, plt: Any, message: str) -> Any:
        """
        Render placeholder figure when there is nothing to plot.

        Returns:
            Matplotlib figure.
        """
        fig, ax = plt.subplots(figsize=(8.5, 3))
        ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=14)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.axis("off")
        return fig

    def _to_png(self, plt: Any, fig: Any) -> bytes:
        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()

    def render_png(self, name: str) -> bytes:
        """
        Render a named chart as a PNG image.

        Business context: Lets users download a chart for reports or
        chat messages that do not display SVG.

        Args:
            name: "progress", "projects" or "audit".

        Returns:
            PNG image as bytes at 100 DPI. Degenerate data gives a
            figure with the chart's "no data" message.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and provide fallback (e.g., placeholder SVG).
            KeyError: If the chart name is unknown.

        Example:
            >>> exporter = ChartExporter(presenter)
            >>> try:
            ...     png = exporter.render_png("audit")
            ... except ImportError:
            ...     png = None
        """
        kind = CHART_KINDS[name]

        # Lazy import matplotlib to keep it optional
        import matplotlib

        matplotlib.use("Agg")  # Non-interactive backend
        import matplotlib.pyplot as plt

        theme = get_theme(self.presenter.theme)
        message = Config.PLACEHOLDER_MESSAGES[kind.value]
        title = Config.CHART_TITLES[kind.value]

        if kind is ChartKind.LINE:
            series = self.presenter.build_series()
            if len(series) == 0:
                return self._to_png(plt, self._empty_figure(plt, message))
            fig, ax = plt.subplots(figsize=(8.5, 5))
            positions = list(range(len(series)))
            ax.plot(positions, series.totals, color=theme.primary, linewidth=2)
            ax.scatter(positions, series.totals, color=theme.primary, edgecolors="white", zorder=3)
            ticks = positions[:: x_label_stride(len(series))]
            ax.set_xticks(ticks)
            ax.set_xticklabels([series[i].date_label for i in ticks], rotation=45, ha="right")
            ax.set_ylim(bottom=0)
            ax.set_ylabel("Amount")

        elif kind is ChartKind.BAR:
            counts = self.presenter.build_counts()
            if counts.total == 0:
                return self._to_png(plt, self._empty_figure(plt, message))
            fig, ax = plt.subplots(figsize=(8.5, 2.8))
            labels = [f"{format_count(counts.passed)} Passed", f"{format_count(counts.failed)} Failed"]
            ax.barh(labels, [counts.passed, counts.failed], color=[theme.secondary, theme.primary_dark])
            ax.invert_yaxis()
            title = f"{title} (Success Rate: {format_percentage(counts.success_rate)})"

        else:
            pair = self.presenter.build_pair()
            if pair.total == 0:
                return self._to_png(plt, self._empty_figure(plt, message))
            result = compute_ratio(pair)
            fig, ax = plt.subplots(figsize=(5, 5))
            ax.pie(
                [pair.given, pair.received],
                colors=[theme.given, theme.received],
                startangle=90,
                counterclock=False,
                wedgeprops={"width": 1 - Config.DONUT_HOLE_RATIO},
            )
            ax.text(
                0,
                0,
                format_ratio(result.ratio),
                ha="center",
                va="center",
                fontsize=28,
                fontweight="bold",
                color=theme.status_color(result.status),
            )
            ax.set_xlabel(result.status.caption)
            ax.set_aspect("equal")

        ax.set_title(title)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        return self._to_png(plt, fig)
