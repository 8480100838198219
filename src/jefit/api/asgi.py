"""ASGI entrypoint for the JEFIT sync API."""

from jefit.api.app import create_app
from jefit.containers import build_container

app = create_app(build_container())
