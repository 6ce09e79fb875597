"""ASGI entrypoint for the frame compositor API."""

from frame_compositor.api.app import create_app
from frame_compositor.containers import build_container

app = create_app(build_container())
