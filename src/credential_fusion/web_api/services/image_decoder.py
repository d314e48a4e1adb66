"""
Image decoding into RGBA pixel buffers, and PNG encoding back out.
"""
from dataclasses import dataclass
import base64
import binascii
import io
import logging
import re
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError, EncodeError

log = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:image/\w+;base64,")
CHANNELS = 4


@dataclass(frozen=True)
class Dimensions:
  width: int
  height: int

  def as_tuple(self) -> tuple[int, int]:
    return (self.width, self.height)


@dataclass
class PixelBuffer:
  """
  Decoded RGBA pixels, row-major with no padding.

  `pixels` has shape (height, width, 4) and dtype uint8; `data` is the flat
  byte sequence of length width * height * channels.
  """
  pixels: np.ndarray

  def __post_init__(self):
    if self.pixels.dtype != np.uint8:
      raise ValueError(f"PixelBuffer requires uint8 pixels, got {self.pixels.dtype}")
    if self.pixels.ndim != 3 or self.pixels.shape[2] != CHANNELS:
      raise ValueError(f"PixelBuffer requires shape (h, w, 4), got {self.pixels.shape}")

  @property
  def width(self) -> int:
    return int(self.pixels.shape[1])

  @property
  def height(self) -> int:
    return int(self.pixels.shape[0])

  @property
  def channels(self) -> int:
    return CHANNELS

  @property
  def dimensions(self) -> Dimensions:
    return Dimensions(self.width, self.height)

  @property
  def data(self) -> bytes:
    return self.pixels.tobytes()

  @classmethod
  def from_image(cls, image: Image.Image) -> "PixelBuffer":
    if image.mode != "RGBA":
      image = image.convert("RGBA")
    return cls(np.array(image, dtype=np.uint8))

  def to_image(self) -> Image.Image:
    return Image.fromarray(self.pixels)


ImageSource = Union[bytes, bytearray, memoryview, str]


class ImageDecoder:
  """Stateless decoder for base64/data-URI/raw image input."""

  def to_bytes(self, source: ImageSource) -> bytes:
    """
    Normalize caller input to encoded image bytes.

    Text input is treated as base64, with an optional
    `data:image/<subtype>;base64,` prefix. Byte input is used as-is unless it
    starts with that prefix, in which case the remainder is base64-decoded.
    """
    if isinstance(source, str):
      return self._b64decode(DATA_URI_PATTERN.sub("", source.strip(), count=1))

    raw = bytes(source)
    if raw[:5] == b"data:":
      text = raw.decode("ascii", errors="replace")
      if DATA_URI_PATTERN.match(text):
        return self._b64decode(DATA_URI_PATTERN.sub("", text, count=1))
    return raw

  def _b64decode(self, text: str) -> bytes:
    try:
      return base64.b64decode(text)
    except (binascii.Error, ValueError) as exc:
      raise DecodeError(f"Invalid base64 image data: {exc}") from exc

  def open_image(self, source: ImageSource) -> Image.Image:
    """Decode to a fully loaded RGBA PIL image."""
    raw = self.to_bytes(source)
    if not raw:
      raise DecodeError("Image data is empty")

    try:
      image = Image.open(io.BytesIO(raw))
      image.load()
    except Image.DecompressionBombError as exc:
      raise DecodeError(f"Image is too large to decode: {exc}") from exc
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
      raise DecodeError(f"Unsupported or corrupt image data: {exc}") from exc

    width, height = image.size
    if not width or not height or width <= 0 or height <= 0:
      raise DecodeError(f"Could not determine image dimensions ({width}x{height})")

    log.debug("Decoded %s image %dx%d mode=%s", image.format, width, height, image.mode)
    if image.mode != "RGBA":
      image = image.convert("RGBA")
    return image

  def decode(self, source: ImageSource) -> PixelBuffer:
    return PixelBuffer.from_image(self.open_image(source))

  def read_dimensions(self, source: ImageSource) -> Dimensions:
    """Read width/height from the image header without decoding pixels."""
    raw = self.to_bytes(source)
    if not raw:
      raise DecodeError("Image data is empty")
    try:
      with Image.open(io.BytesIO(raw)) as image:
        width, height = image.size
    except Image.DecompressionBombError as exc:
      raise DecodeError(f"Image is too large to decode: {exc}") from exc
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
      raise DecodeError(f"Unsupported or corrupt image data: {exc}") from exc
    return Dimensions(width, height)

  def encode_png(self, image: Union[PixelBuffer, Image.Image]) -> bytes:
    if isinstance(image, PixelBuffer):
      image = image.to_image()
    buffer = io.BytesIO()
    try:
      image.save(buffer, format="PNG")
    except (OSError, ValueError, KeyError) as exc:
      raise EncodeError(f"Failed to encode PNG: {exc}") from exc
    encoded = buffer.getvalue()
    if not encoded:
      raise EncodeError("PNG encoder produced no output")
    return encoded
