"""
Startup configuration validation helpers.
"""
import os
from typing import List

from .settings import read_settings


def _is_truthy(value: str) -> bool:
  return value.strip().lower() in ("1", "true", "yes", "on")


def validate_startup_configuration() -> List[str]:
  """
  Validate service settings from the environment.

  Returns warnings that should be logged.
  Raises RuntimeError when strict validation is enabled and a setting is invalid.
  """
  strict = _is_truthy(os.getenv("FUSION_STRICT_STARTUP_CONFIG", "true"))
  settings, errors = read_settings()
  warnings: List[str] = []

  if "*" in settings.cors_origins:
    warnings.append(
      "FUSION_CORS_ORIGINS allows any origin. Restrict it when the API is not meant to be public."
    )
  if settings.fetch_timeout_seconds > 60:
    warnings.append(
      f"FUSION_FETCH_TIMEOUT_SECONDS is {settings.fetch_timeout_seconds:g}s; "
      "slow base image hosts will hold requests open that long."
    )

  if strict and errors:
    raise RuntimeError("Startup configuration validation failed: " + " ".join(errors))

  warnings.extend(errors)
  return warnings
