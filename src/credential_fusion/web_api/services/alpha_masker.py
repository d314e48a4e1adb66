"""
Near-white background removal by per-channel brightness threshold.
"""
import logging

import numpy as np

from ..errors import InvalidArgument
from .image_decoder import PixelBuffer

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 250


def validate_tolerance(tolerance) -> int:
  """Return tolerance as an int, rejecting anything outside 0-255."""
  if isinstance(tolerance, bool) or not isinstance(tolerance, (int, np.integer)):
    raise InvalidArgument(f"tolerance must be an integer, got {tolerance!r}")
  if not 0 <= tolerance <= 255:
    raise InvalidArgument(f"tolerance must be between 0 and 255, got {tolerance}")
  return int(tolerance)


class AlphaMasker:
  """Makes pixels transparent where R, G and B are all >= tolerance."""

  def apply(self, buffer: PixelBuffer, tolerance: int = DEFAULT_TOLERANCE) -> PixelBuffer:
    """
    Mask `buffer` in place and return it.

    Pixels below the threshold keep their existing alpha.
    """
    tolerance = validate_tolerance(tolerance)
    pixels = buffer.pixels
    near_white = np.all(pixels[..., :3] >= tolerance, axis=-1)
    pixels[..., 3][near_white] = 0
    log.debug(
      "Masked %d of %d pixels at tolerance %d",
      int(np.count_nonzero(near_white)), near_white.size, tolerance
    )
    return buffer
