"""ASGI entrypoint for the culinary lens API."""

from culinary_lens.api.app import create_app
from culinary_lens.containers import build_container

app = create_app(build_container())
