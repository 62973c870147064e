from flask import Blueprint

bp = Blueprint("core", __name__)
# import for side effects: registers routes and app-wide hooks
from . import routes  # noqa: E402,F401
