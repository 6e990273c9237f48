"""ASGI entrypoint for the Pylon emulator API."""

from pylon_emulator.api.app import create_app
from pylon_emulator.containers import build_container

app = create_app(build_container())
