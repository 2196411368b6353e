"""
CLI entry point for Progress Charts.

PURPOSE: Command-line interface for rendering charts and running the dashboard.
AI CONTEXT: Main entry points for package execution.

USAGE:
    # Via module
    python -m progress_charts render progress --payload profile.json

    # Or via CLI command (after install)
    progress-charts render audit --payload profile.json --output audit.svg
    progress-charts render projects --output projects.png  # matplotlib export
    progress-charts summary --payload profile.json
    progress-charts dashboard --port 8080
"""

from __future__ import annotations

import argparse
import logging
import sys
from functools import lru_cache
from typing import TYPE_CHECKING

from .config import Config
from .presenters import CHART_KINDS

if TYPE_CHECKING:
    from .filesystem import FileSystem

PROG_NAME = "progress-charts"


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def run_render(
    name: str,
    payload: str | None = None,
    output: str | None = None,
    theme: str | None = None,
    chronological: bool = False,
    *,
    filesystem: FileSystem | None = None,
) -> int:
    """
    Render one chart from a payload file.

    Writes SVG markup to stdout, or to a file when output is given. An
    output path ending in .png is exported through matplotlib instead.

    Business context: Lets users drop a chart into a README or a report
    without running the dashboard.

    Args:
        name: "progress", "projects" or "audit".
        payload: Payload JSON path. Default: Config.get_payload_path()
        output: Destination file. None prints SVG to stdout.
        theme: Theme name. Default: Config.get_theme_name()
        chronological: Sort day buckets by date (progress chart).
        filesystem: Optional FileSystem for testability.

    Returns:
        0 on success, 1 if the file could not be written or PNG export
        is unavailable.

    Example:
        >>> # progress-charts render audit --output audit.svg
        >>> run_render("audit", output="audit.svg")
        ✅ Wrote audit chart to audit.svg
        0
    """
    from .presenters import ChartExporter, ProfilePresenter
    from .storage import PayloadStore

    store = PayloadStore(payload_path=payload, filesystem=filesystem)
    presenter = ProfilePresenter(store, theme=theme, chronological=chronological or None)

    content: str | bytes
    if output is not None and output.lower().endswith(".png"):
        try:
            content = ChartExporter(presenter).render_png(name)
        except ImportError:
            _log("PNG export requires matplotlib (pip install matplotlib)", emoji="❌")
            return 1
    else:
        rendered = presenter.render(name)
        if rendered.placeholder:
            _log(f"No data for {name} chart; rendering placeholder", emoji="⚠️")
        content = rendered.markup

    if output is None:
        # Note: Using print() intentionally for stdout piping support
        print(content)
        return 0

    if not store.save_artifact(output, content):
        _log(f"Could not write {output}", emoji="❌")
        return 1
    _log(f"Wrote {name} chart to {output}", emoji="✅")
    return 0


def run_summary(
    payload: str | None = None,
    *,
    filesystem: FileSystem | None = None,
) -> int:
    """
    Print the profile summary to stdout.

    Args:
        payload: Payload JSON path. Default: Config.get_payload_path()
        filesystem: Optional FileSystem for testability.

    Returns:
        0 always; a missing payload prints an all-zero summary.

    Example:
        >>> run_summary("profile.json")
        User:            alice (#42)
        Total XP:        1.25 MB
        ...
    """
    from .presenters import ProfilePresenter
    from .storage import PayloadStore

    summary = ProfilePresenter(PayloadStore(payload_path=payload, filesystem=filesystem)).get_summary()
    user = f"{summary.login} (#{summary.user_id})" if summary.login else "unknown"
    lines = [
        f"User:            {user}",
        f"Member since:    {summary.created_at or '-'}",
        f"Total XP:        {summary.total_amount_display}",
        f"Projects:        {summary.passed} passed, {summary.failed} failed",
        f"Success rate:    {summary.success_rate_display}",
        f"Audit ratio:     {summary.ratio_display} ({summary.ratio.status.caption})",
    ]
    # Note: Using print() intentionally for stdout piping support
    print("\n".join(lines))
    return 0


def run_dashboard(host: str = Config.DEFAULT_HOST, port: int = Config.DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Returns:
        None. Blocks until server shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.
        ImportError: If FastAPI/uvicorn are not installed.

    Example:
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log(f"Serving payload {Config.get_payload_path()}")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def main() -> int:
    """
    Main CLI entry point for Progress Charts.

    Parses command-line arguments and dispatches to the appropriate
    subcommand handler.

    Subcommands:
    - render CHART [--payload] [--output] [--theme] [--chronological]
    - summary [--payload]
    - dashboard [--host HOST] [--port PORT]

    Returns:
        Exit code of the subcommand; 1 when no subcommand is given.

    Raises:
        SystemExit: On --help, --version or argument parsing errors.

    Example:
        >>> # progress-charts dashboard --port 8080
        >>> sys.exit(main())
    """
    from .__version__ import __version__
    from .themes import THEMES

    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Progress Charts - SVG charts for XP, projects and audits",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Render command
    render_parser = subparsers.add_parser(
        "render",
        help="Render one chart as SVG (or PNG with a .png output)",
    )
    render_parser.add_argument("chart", choices=list(CHART_KINDS), help="Chart to render")
    render_parser.add_argument(
        "--payload",
        default=None,
        help="Payload JSON file (default: $PROGRESS_CHARTS_PAYLOAD or profile.json)",
    )
    render_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Output file; .png exports through matplotlib (default: stdout)",
    )
    render_parser.add_argument(
        "--theme",
        choices=sorted(THEMES),
        default=None,
        help="Colour theme (default: $PROGRESS_CHARTS_THEME or dark)",
    )
    render_parser.add_argument(
        "--chronological",
        action="store_true",
        help="Sort days by date instead of first appearance",
    )

    # Summary command
    summary_parser = subparsers.add_parser(
        "summary",
        help="Print profile summary to stdout",
    )
    summary_parser.add_argument("--payload", default=None, help="Payload JSON file")

    # Dashboard command
    dashboard_parser = subparsers.add_parser(
        "dashboard",
        help="Launch web dashboard",
    )
    dashboard_parser.add_argument(
        "--host",
        default=Config.DEFAULT_HOST,
        help=f"Bind address (default: {Config.DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=Config.DEFAULT_PORT,
        help=f"Port number (default: {Config.DEFAULT_PORT})",
    )

    args = parser.parse_args()

    try:
        if args.command == "render":
            return run_render(
                args.chart,
                payload=args.payload,
                output=args.output,
                theme=args.theme,
                chronological=args.chronological,
            )
        if args.command == "summary":
            return run_summary(args.payload)
    except KeyError as e:
        # unknown PROGRESS_CHARTS_THEME
        _log(f"Cannot render: {e.args[0]}", emoji="❌")
        return 1
    if args.command == "dashboard":
        run_dashboard(host=args.host, port=args.port)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
