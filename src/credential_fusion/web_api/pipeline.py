"""
Per-process pipeline object wiring the imaging services together.
"""
import asyncio
import logging
from typing import Any, Optional

from fastapi import Request

from .errors import MissingInput
from .services.alpha_masker import AlphaMasker, validate_tolerance
from .services.compositor import Compositor
from .services.image_decoder import ImageDecoder
from .services.page_layout import PageLayoutEngine
from .services.remote_fetch import RemoteImageFetcher
from .settings import ServiceSettings

log = logging.getLogger(__name__)


class CredentialPipeline:
  """
  Stateless bundle of the fusion and layout services.

  Built once in the application lifespan and handed to routes through
  `get_pipeline`. Holds no request data; CPU-bound steps run in worker
  threads so the event loop keeps serving other requests.
  """

  def __init__(self,
               settings: ServiceSettings,
               fetcher: Optional[RemoteImageFetcher] = None):
    self.settings = settings
    self.decoder = ImageDecoder()
    self.masker = AlphaMasker()
    self.compositor = Compositor(self.decoder, self.masker)
    self.layout_engine = PageLayoutEngine(self.decoder)
    self.fetcher = fetcher or RemoteImageFetcher(
      timeout_seconds=settings.fetch_timeout_seconds,
      max_bytes=settings.max_remote_bytes,
    )

  def resolve_tolerance(self, tolerance: Any) -> int:
    if tolerance is None:
      return self.settings.white_tolerance
    return validate_tolerance(tolerance)

  async def fuse_from_url(self,
                          overlay: str,
                          base_url: str,
                          tolerance: Any = None) -> bytes:
    """Fetch the base image and fuse the base64 overlay onto it."""
    tolerance = self.resolve_tolerance(tolerance)
    base_bytes = await self.fetcher.fetch(base_url)
    return await asyncio.to_thread(self.compositor.fuse, base_bytes, overlay, tolerance)

  async def resolve_content(self,
                            fused_base64: Optional[str] = None,
                            fused_url: Optional[str] = None,
                            overlay: Optional[str] = None,
                            base_url: Optional[str] = None,
                            tolerance: Any = None) -> bytes:
    """
    Pick the image to lay out: an already-fused image (inline, then by URL),
    falling back to fusing `overlay` onto `base_url` server-side.
    """
    tolerance = self.resolve_tolerance(tolerance)
    if fused_base64:
      return self.decoder.to_bytes(fused_base64)
    if fused_url:
      return await self.fetcher.fetch(fused_url)
    if overlay and base_url:
      log.debug("No fused image supplied; fusing server-side")
      return await self.fuse_from_url(overlay, base_url, tolerance)
    raise MissingInput("No image supplied for layout")

  async def layout(self, content: bytes) -> bytes:
    return await asyncio.to_thread(self.layout_engine.layout, content)


def get_pipeline(request: Request) -> CredentialPipeline:
  """FastAPI dependency returning the pipeline built at startup."""
  return request.app.state.pipeline
