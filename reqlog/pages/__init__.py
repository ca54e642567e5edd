"""Blueprint serving the log viewer and the instrumented login page."""
from flask import Blueprint

bp = Blueprint(
    "pages",
    __name__,
    template_folder="templates",
)

from . import routes  # noqa: E402,F401
