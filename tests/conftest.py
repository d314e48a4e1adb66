"""
Shared image helpers for the test suite.
"""
import base64
import io

import pytest
from PIL import Image


def make_image_bytes(size, color, mode="RGBA", fmt="PNG") -> bytes:
  """Encode a solid-color image of `size` (width, height)."""
  buffer = io.BytesIO()
  Image.new(mode, size, color).save(buffer, format=fmt)
  return buffer.getvalue()


def to_data_uri(data: bytes, subtype: str = "png") -> str:
  return f"data:image/{subtype};base64," + base64.b64encode(data).decode("ascii")


def open_rgba(data: bytes) -> Image.Image:
  return Image.open(io.BytesIO(data)).convert("RGBA")


@pytest.fixture
def solid_png():
  return make_image_bytes


@pytest.fixture
def data_uri():
  return to_data_uri


@pytest.fixture
def decode_png():
  return open_rgba
