"""
Request bodies for the fusion and layout endpoints.

Field aliases keep the camelCase JSON names existing clients send.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FusionRequest(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  base64_overlay: Optional[str] = Field(default=None, alias="base64Overlay")
  url_base_image: Optional[str] = Field(default=None, alias="urlBaseImage")
  # Checked by validate_tolerance, not by the model
  tolerance: Optional[Any] = None


class LayoutRequest(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  fused_base64: Optional[str] = Field(default=None, alias="fusedBase64")
  fused_url: Optional[str] = Field(default=None, alias="fusedUrl")
  # Server-side fusion fallback when no fused image is supplied
  base64_overlay: Optional[str] = Field(default=None, alias="base64Overlay")
  url_base_image: Optional[str] = Field(default=None, alias="urlBaseImage")
  # Checked by validate_tolerance, not by the model
  tolerance: Optional[Any] = None
