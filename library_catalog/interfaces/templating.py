"""Jinja2 view rendering for the server-side pages."""

import os

from fastapi.templating import Jinja2Templates

templates_dir = os.path.join(os.path.dirname(__file__), "templates")
static_dir = os.path.join(os.path.dirname(__file__), "static")

templates = Jinja2Templates(directory=templates_dir)
