"""
Print layout - places a credential image at fixed physical size on an A4 page.
"""
from dataclasses import dataclass
import logging
import math

import fitz

from .image_decoder import ImageDecoder, ImageSource

log = logging.getLogger(__name__)

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72

PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297
CONTENT_WIDTH_MM = 86
CONTENT_HEIGHT_MM = 120

PDF_FILENAME = "Cedula_A4.pdf"
WHITE = (1, 1, 1)


def mm_to_pt(mm: float) -> int:
  """Convert millimeters to whole PDF points (72 pt/inch), rounding half up."""
  return int(math.floor(mm / MM_PER_INCH * POINTS_PER_INCH + 0.5))


@dataclass(frozen=True)
class PageSpec:
  page_width: int
  page_height: int
  content_width: int
  content_height: int

  @classmethod
  def from_mm(cls, page_width_mm: float, page_height_mm: float,
              content_width_mm: float, content_height_mm: float) -> "PageSpec":
    return cls(
      page_width=mm_to_pt(page_width_mm),
      page_height=mm_to_pt(page_height_mm),
      content_width=mm_to_pt(content_width_mm),
      content_height=mm_to_pt(content_height_mm),
    )


@dataclass(frozen=True)
class Placement:
  left: int
  top: int

  @classmethod
  def centered(cls, spec: PageSpec) -> "Placement":
    # Odd remainders leave the extra point on the right/bottom edge
    return cls(
      left=(spec.page_width - spec.content_width) // 2,
      top=(spec.page_height - spec.content_height) // 2,
    )

  def rect(self, spec: PageSpec) -> fitz.Rect:
    return fitz.Rect(self.left, self.top,
                     self.left + spec.content_width,
                     self.top + spec.content_height)


A4_CREDENTIAL_PAGE = PageSpec.from_mm(PAGE_WIDTH_MM, PAGE_HEIGHT_MM,
                                      CONTENT_WIDTH_MM, CONTENT_HEIGHT_MM)


class PageLayoutEngine:
  """Renders a single white page with the content image stretched into a centered slot."""

  def __init__(self,
               decoder: ImageDecoder | None = None,
               page_spec: PageSpec = A4_CREDENTIAL_PAGE):
    self.decoder = decoder or ImageDecoder()
    self.page_spec = page_spec
    self.placement = Placement.centered(page_spec)

  def layout(self, content_image: ImageSource) -> bytes:
    """
    Build the PDF and return its bytes.

    The content image is decoded (raising DecodeError when it is not an
    image) and re-encoded as PNG before being placed, so any format the
    decoder accepts can be laid out.
    """
    png_bytes = self.decoder.encode_png(self.decoder.open_image(content_image))

    spec = self.page_spec
    target = self.placement.rect(spec)

    pdf_doc = fitz.open()
    try:
      page = pdf_doc.new_page(width=spec.page_width, height=spec.page_height)
      page.draw_rect(page.rect, color=None, fill=WHITE, overlay=True)
      page.insert_image(target, stream=png_bytes, keep_proportion=False)
      pdf_bytes = pdf_doc.tobytes(garbage=4, deflate=True, clean=True)
    finally:
      pdf_doc.close()

    log.info("Laid out %dx%d pt image at (%d, %d) on %dx%d pt page (%d bytes)",
             spec.content_width, spec.content_height,
             self.placement.left, self.placement.top,
             spec.page_width, spec.page_height, len(pdf_bytes))
    return pdf_bytes
