"""
Web dashboard module for Progress Charts.

PURPOSE: FastAPI-based profile page with htmx for chart refresh and hover.
AI CONTEXT: Thin layer over the presenters; no chart logic lives here.

FEATURES:
- Server-rendered SVG charts in three mount points
- htmx hover requests drive the single TooltipController
- PNG export via matplotlib with an SVG placeholder fallback
- JSON summary endpoint

USAGE:
    # Via CLI
    progress-charts dashboard

    # Programmatically
    from progress_charts.web import create_app
    app = create_app()
    # Run with uvicorn
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
