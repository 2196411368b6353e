"""
Package entry point for python -m execution.

USAGE:
    python -m progress_charts render progress --payload profile.json
    python -m progress_charts summary --payload profile.json
    python -m progress_charts dashboard    # Launch web dashboard
"""

from progress_charts.cli import main

if __name__ == "__main__":
    main()
