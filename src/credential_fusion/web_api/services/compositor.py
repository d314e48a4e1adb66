"""
Compositor service - fuses an overlay onto a credential base image.
"""
import logging

import numpy as np
from PIL import Image, ImageOps

from ..errors import DecodeError, InvalidBaseImage
from .alpha_masker import AlphaMasker, DEFAULT_TOLERANCE, validate_tolerance
from .image_decoder import Dimensions, ImageDecoder, ImageSource, PixelBuffer

log = logging.getLogger(__name__)

# Crop anchor for cover-fit resizing: centered on both axes.
COVER_CENTERING = (0.5, 0.5)


class Compositor:
  """Resizes, masks and layers an overlay over a base image on the base's canvas."""

  def __init__(self,
               decoder: ImageDecoder | None = None,
               masker: AlphaMasker | None = None):
    self.decoder = decoder or ImageDecoder()
    self.masker = masker or AlphaMasker()

  def fuse(self,
           base_image: ImageSource,
           overlay_image: ImageSource,
           tolerance: int = DEFAULT_TOLERANCE) -> bytes:
    """
    Fuse `overlay_image` onto `base_image` and return PNG bytes.

    The output always has the base image's dimensions. The overlay is
    cover-fit to that canvas, its near-white pixels are made transparent,
    and it is blended source-over on top of the base.

    Raises:
      InvalidBaseImage: base dimensions are missing or non-positive
      DecodeError: either input is not a decodable image
      InvalidArgument: tolerance outside 0-255
      EncodeError: the result could not be written as PNG
    """
    tolerance = validate_tolerance(tolerance)

    canvas = self._base_dimensions(base_image)
    base = self.decoder.open_image(base_image)
    overlay = self.decoder.open_image(overlay_image)

    overlay_buffer = self.masker.apply(
      PixelBuffer.from_image(self.cover_fit(overlay, canvas)),
      tolerance
    )

    if base.size != canvas.as_tuple():
      log.warning("Decoded base size %s differs from header %s; resizing",
                  base.size, canvas.as_tuple())
      base = base.resize(canvas.as_tuple(), Image.Resampling.LANCZOS)

    fused = self.blend_over(PixelBuffer.from_image(base), overlay_buffer)
    encoded = self.decoder.encode_png(fused)
    log.info("Fused overlay %dx%d onto base %dx%d (tolerance=%d, %d bytes)",
             overlay.width, overlay.height, canvas.width, canvas.height,
             tolerance, len(encoded))
    return encoded

  def _base_dimensions(self, base_image: ImageSource) -> Dimensions:
    try:
      dimensions = self.decoder.read_dimensions(base_image)
    except DecodeError as exc:
      raise DecodeError(f"Could not read the base image: {exc.message}") from exc
    if not dimensions.width or not dimensions.height \
        or dimensions.width <= 0 or dimensions.height <= 0:
      raise InvalidBaseImage(
        f"Could not read base image dimensions ({dimensions.width}x{dimensions.height})"
      )
    return dimensions

  @staticmethod
  def cover_fit(image: Image.Image, canvas: Dimensions) -> Image.Image:
    """
    Scale `image` to fully cover `canvas`, keeping aspect ratio and
    cropping whatever overflows.
    """
    if image.size == canvas.as_tuple():
      return image
    return ImageOps.fit(image,
                        canvas.as_tuple(),
                        method=Image.Resampling.LANCZOS,
                        centering=COVER_CENTERING)

  @staticmethod
  def blend_over(base: PixelBuffer, overlay: PixelBuffer) -> PixelBuffer:
    """
    Source-over blend of `overlay` on `base`, both RGBA and the same size.

      out.rgb = overlay.rgb * overlay.a + base.rgb * (1 - overlay.a)
      out.a   = overlay.a + base.a * (1 - overlay.a)

    Computed in the normalized [0, 1] domain and rounded back to 8 bits.
    """
    if base.pixels.shape != overlay.pixels.shape:
      raise ValueError(
        f"Cannot blend {overlay.width}x{overlay.height} over {base.width}x{base.height}"
      )

    base_arr = base.pixels.astype(np.float32) / 255.0
    over_arr = overlay.pixels.astype(np.float32) / 255.0

    over_alpha = over_arr[..., 3:4]
    inverse = 1.0 - over_alpha

    out = np.empty_like(base_arr)
    out[..., :3] = over_arr[..., :3] * over_alpha + base_arr[..., :3] * inverse
    out[..., 3:4] = over_alpha + base_arr[..., 3:4] * inverse

    out = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    return PixelBuffer(out)
