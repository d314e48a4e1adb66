"""
Tests for near-white alpha masking.
"""
import numpy as np
import pytest

from credential_fusion.web_api.errors import InvalidArgument
from credential_fusion.web_api.services.alpha_masker import AlphaMasker, validate_tolerance
from credential_fusion.web_api.services.image_decoder import PixelBuffer


def _buffer(*pixels):
  """Single-row buffer from RGBA tuples."""
  return PixelBuffer(np.array([pixels], dtype=np.uint8))


def test_threshold_boundary_at_default_tolerance():
  buffer = _buffer((250, 250, 250, 255), (249, 250, 250, 128), (250, 249, 250, 255),
                   (250, 250, 249, 200))

  AlphaMasker().apply(buffer)

  assert buffer.pixels[0, 0].tolist() == [250, 250, 250, 0]
  assert buffer.pixels[0, 1].tolist() == [249, 250, 250, 128]
  assert buffer.pixels[0, 2].tolist() == [250, 249, 250, 255]
  assert buffer.pixels[0, 3].tolist() == [250, 250, 249, 200]


def test_masking_only_touches_alpha():
  buffer = _buffer((255, 255, 255, 255), (0, 0, 0, 255))
  AlphaMasker().apply(buffer)
  assert buffer.pixels[0, 0, :3].tolist() == [255, 255, 255]
  assert buffer.pixels[0, 1].tolist() == [0, 0, 0, 255]


def test_masking_is_idempotent():
  rng = np.random.default_rng(1234)
  pixels = rng.integers(230, 256, size=(16, 16, 4), dtype=np.uint8)
  masker = AlphaMasker()

  once = masker.apply(PixelBuffer(pixels.copy()), 240)
  twice = masker.apply(masker.apply(PixelBuffer(pixels.copy()), 240), 240)

  assert np.array_equal(once.pixels, twice.pixels)


def test_masking_preserves_shape_and_mutates_in_place():
  buffer = PixelBuffer(np.full((3, 5, 4), 255, dtype=np.uint8))
  result = AlphaMasker().apply(buffer)

  assert result is buffer
  assert (buffer.width, buffer.height, buffer.channels) == (5, 3, 4)
  assert np.all(buffer.pixels[..., 3] == 0)


def test_zero_tolerance_masks_everything():
  buffer = _buffer((0, 0, 0, 255), (17, 200, 3, 90))
  AlphaMasker().apply(buffer, 0)
  assert buffer.pixels[0, :, 3].tolist() == [0, 0]


def test_max_tolerance_masks_only_pure_white():
  buffer = _buffer((255, 255, 255, 255), (254, 255, 255, 255))
  AlphaMasker().apply(buffer, 255)
  assert buffer.pixels[0, :, 3].tolist() == [0, 255]


@pytest.mark.parametrize("tolerance", [-1, 256, 250.0, "250", None, True])
def test_invalid_tolerance_is_rejected(tolerance):
  with pytest.raises(InvalidArgument):
    validate_tolerance(tolerance)
  with pytest.raises(InvalidArgument):
    AlphaMasker().apply(_buffer((255, 255, 255, 255)), tolerance)


def test_numpy_integer_tolerance_is_accepted():
  assert validate_tolerance(np.uint8(250)) == 250
