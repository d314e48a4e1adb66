"""
Time-bounded retrieval of remotely hosted images.
"""
import logging
from urllib.parse import urlparse

import httpx

from ..errors import InvalidArgument, RetrievalError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_BYTES = 20 * 1024 * 1024
ALLOWED_SCHEMES = ("http", "https")


class RemoteImageFetcher:
  """
  Downloads image bytes over HTTP(S).

  A fresh client is opened per fetch, so nothing is shared between requests.
  `transport` lets tests substitute an httpx.MockTransport.
  """

  def __init__(self,
               timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
               max_bytes: int = DEFAULT_MAX_BYTES,
               transport: httpx.AsyncBaseTransport | None = None):
    self.timeout_seconds = timeout_seconds
    self.max_bytes = max_bytes
    self.transport = transport

  def _client(self) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=self.timeout_seconds,
                             follow_redirects=True,
                             transport=self.transport)

  @staticmethod
  def validate_url(url: str) -> str:
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
      raise InvalidArgument(f"Image URL must be an absolute http(s) URL, got {url!r}")
    return url

  async def fetch(self, url: str) -> bytes:
    """Return the response body, or raise RetrievalError."""
    url = self.validate_url(url)
    log.debug("Fetching remote image %s", url)

    try:
      async with self._client() as client:
        async with client.stream("GET", url) as response:
          if not response.is_success:
            raise RetrievalError(
              f"Could not download image from {url}: HTTP {response.status_code}",
              upstream_status=response.status_code,
            )

          declared = response.headers.get("content-length")
          if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise RetrievalError(
              f"Remote image at {url} is too large ({declared} bytes, limit {self.max_bytes})"
            )

          chunks = []
          received = 0
          async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self.max_bytes:
              raise RetrievalError(
                f"Remote image at {url} exceeds {self.max_bytes} bytes"
              )
            chunks.append(chunk)
    except httpx.TimeoutException as exc:
      raise RetrievalError(
        f"Timed out after {self.timeout_seconds}s downloading image from {url}"
      ) from exc
    except httpx.HTTPError as exc:
      raise RetrievalError(f"Could not download image from {url}: {exc}") from exc

    body = b"".join(chunks)
    log.debug("Fetched %d bytes from %s", len(body), url)
    return body
