"""ASGI entrypoint for the recipe finder API.

Serve with `uvicorn recipe_finder.api.asgi:app`; settings come from the
environment and a missing value stops the process with a logged message.
"""

from recipe_finder.api.app import create_app
from recipe_finder.app_logging import configure_logging
from recipe_finder.containers import build_container
from recipe_finder.main import load_settings

configure_logging()
app = create_app(build_container(load_settings()))
