"""
Credential fusion endpoint.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..errors import MissingInput
from ..models import FusionRequest
from ..pipeline import CredentialPipeline, get_pipeline

router = APIRouter()
log = logging.getLogger(__name__)

MISSING_FUSION_INPUT = "Missing data: base64Overlay and urlBaseImage are required."


@router.post(
  "/fusionar-cedula",
  response_class=Response,
  responses={200: {"content": {"image/png": {}}, "description": "Fused PNG"}},
)
async def fuse_credential(payload: FusionRequest,
                          pipeline: CredentialPipeline = Depends(get_pipeline)):
  """Fuse a base64 overlay onto the base image at `urlBaseImage` and return PNG."""
  overlay = (payload.base64_overlay or "").strip()
  base_url = (payload.url_base_image or "").strip()
  if not overlay or not base_url:
    raise MissingInput(MISSING_FUSION_INPUT)

  log.debug("Fusion requested: base=%s overlay_chars=%d", base_url, len(overlay))
  png_bytes = await pipeline.fuse_from_url(overlay, base_url, payload.tolerance)
  return Response(content=png_bytes, media_type="image/png")
