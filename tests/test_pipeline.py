"""
Tests for the per-process pipeline wiring.
"""
import asyncio

import httpx
import numpy as np
import pytest

from credential_fusion.web_api.errors import InvalidArgument
from credential_fusion.web_api.pipeline import CredentialPipeline
from credential_fusion.web_api.services.remote_fetch import RemoteImageFetcher
from credential_fusion.web_api.settings import ServiceSettings


def _pipeline(assets: dict, **settings) -> CredentialPipeline:
  def handler(request: httpx.Request) -> httpx.Response:
    body = assets.get(str(request.url))
    return httpx.Response(200, content=body) if body is not None else httpx.Response(404)

  return CredentialPipeline(
    ServiceSettings(**settings),
    fetcher=RemoteImageFetcher(transport=httpx.MockTransport(handler)),
  )


def test_settings_tolerance_is_the_default(solid_png, data_uri, decode_png):
  base_url = "https://assets.example.test/base.png"
  overlay = data_uri(solid_png((4, 4), (230, 230, 230, 255)))
  pipeline = _pipeline({base_url: solid_png((4, 4), (10, 10, 200, 255))}, white_tolerance=220)

  fused = np.array(decode_png(asyncio.run(pipeline.fuse_from_url(overlay, base_url))))
  assert fused[0, 0].tolist() == [10, 10, 200, 255]

  fused = np.array(decode_png(asyncio.run(pipeline.fuse_from_url(overlay, base_url, 250))))
  assert fused[0, 0].tolist() == [230, 230, 230, 255]


def test_resolve_content_precedence(solid_png, data_uri):
  inline = solid_png((2, 2), (1, 1, 1, 255))
  remote = solid_png((3, 3), (2, 2, 2, 255))
  fused_url = "https://assets.example.test/fused.png"
  pipeline = _pipeline({fused_url: remote})

  assert asyncio.run(pipeline.resolve_content(fused_base64=data_uri(inline),
                                              fused_url=fused_url)) == inline
  assert asyncio.run(pipeline.resolve_content(fused_url=fused_url)) == remote


def test_resolve_content_without_input_is_invalid():
  with pytest.raises(InvalidArgument):
    asyncio.run(_pipeline({}).resolve_content(overlay="abc"))


def test_layout_returns_pdf(solid_png):
  pdf_bytes = asyncio.run(_pipeline({}).layout(solid_png((5, 5), (0, 0, 0, 255))))
  assert pdf_bytes.startswith(b"%PDF")
