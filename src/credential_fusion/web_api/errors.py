"""
Error taxonomy for the compositing and layout pipeline.

Every stage raises a PipelineError subclass and aborts the request; the
application renders these as JSON with the status code carried by the class.
"""


class PipelineError(Exception):
  """Base class for failures surfaced to API callers."""
  kind = "pipeline_error"
  status_code = 500

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message

  def to_dict(self) -> dict:
    return {"detail": self.message, "error": self.kind}


class DecodeError(PipelineError):
  """Image bytes could not be parsed into pixels."""
  kind = "decode_error"
  status_code = 422


class InvalidBaseImage(PipelineError):
  """The base image has missing or non-positive dimensions."""
  kind = "invalid_base_image"
  status_code = 422


class RetrievalError(PipelineError):
  """A remote image could not be fetched."""
  kind = "retrieval_error"
  status_code = 502

  def __init__(self, message: str, upstream_status: int | None = None):
    super().__init__(message)
    self.upstream_status = upstream_status


class EncodeError(PipelineError):
  """Output serialization failed."""
  kind = "encode_error"
  status_code = 500


class InvalidArgument(PipelineError):
  """A request parameter is missing, malformed or out of range."""
  kind = "invalid_argument"
  status_code = 400


class MissingInput(InvalidArgument):
  """A required request field was not supplied."""
  kind = "missing_input"
