"""Routes for the log viewer and the instrumented login page."""
from __future__ import annotations

from flask import render_template

from . import bp

TIME_RANGES: tuple[tuple[str, str], ...] = (
    ("all", "All time"),
    ("1h", "Last hour"),
    ("6h", "Last 6 hours"),
    ("24h", "Last 24 hours"),
    ("7d", "Last 7 days"),
)


@bp.route("/")
def viewer():
    """Render the log viewer."""
    return render_template(
        "pages/viewer.html",
        title="Request Logs",
        time_ranges=TIME_RANGES,
        fetch_limit=10000,
    )


@bp.route("/login")
def login():
    """Render the login form instrumented for bot detection."""
    return render_template("pages/login.html", title="Login")
