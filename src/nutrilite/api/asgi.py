"""ASGI entrypoint for the NutriLite API."""

from nutrilite.api.app import create_app
from nutrilite.containers import build_container

app = create_app(build_container())
