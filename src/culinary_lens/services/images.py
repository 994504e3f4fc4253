"""Helpers for image data URLs exchanged with the image service."""

import base64
import re

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def strip_data_url_prefix(image: str) -> str:
    """Return the raw base64 payload of an image data URL."""
    return _DATA_URL_PREFIX.sub("", image, count=1)


def to_png_data_url(encoded: str) -> str:
    """Wrap a base64 payload as a PNG data URL."""
    return f"data:image/png;base64,{strip_data_url_prefix(encoded)}"


def decode_data_url(image: str) -> bytes:
    """Decode an image data URL (or bare base64) into bytes."""
    return base64.b64decode(strip_data_url_prefix(image))
