"""ASGI entrypoint for the Visifind data service."""

from visifind.api.app import create_app
from visifind.containers import build_container

app = create_app(build_container())
