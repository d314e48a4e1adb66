"""
Print layout endpoint - returns the fused credential on an A4 PDF page.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..errors import MissingInput
from ..models import LayoutRequest
from ..pipeline import CredentialPipeline, get_pipeline
from ..services.page_layout import PDF_FILENAME

router = APIRouter()
log = logging.getLogger(__name__)

MISSING_LAYOUT_INPUT = (
  "Missing data: fusedBase64 or fusedUrl (or base64Overlay with urlBaseImage) is required."
)


def _clean(value):
  value = (value or "").strip()
  return value or None


@router.post(
  "/png-to-a4-pdf",
  response_class=Response,
  responses={200: {"content": {"application/pdf": {}}, "description": "A4 PDF"}},
)
async def credential_to_a4_pdf(payload: LayoutRequest,
                               pipeline: CredentialPipeline = Depends(get_pipeline)):
  """
  Lay out a fused credential on an A4 page.

  Input precedence: fusedBase64, then fusedUrl, then server-side fusion of
  base64Overlay onto urlBaseImage.
  """
  fused_base64 = _clean(payload.fused_base64)
  fused_url = _clean(payload.fused_url)
  overlay = _clean(payload.base64_overlay)
  base_url = _clean(payload.url_base_image)

  if not (fused_base64 or fused_url or (overlay and base_url)):
    raise MissingInput(MISSING_LAYOUT_INPUT)

  log.debug("Layout requested: fused_base64=%s fused_url=%s fallback=%s",
            bool(fused_base64), fused_url, bool(overlay and base_url))
  content = await pipeline.resolve_content(
    fused_base64=fused_base64,
    fused_url=fused_url,
    overlay=overlay,
    base_url=base_url,
    tolerance=payload.tolerance,
  )
  pdf_bytes = await pipeline.layout(content)
  return Response(
    content=pdf_bytes,
    media_type="application/pdf",
    headers={"Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'},
  )
