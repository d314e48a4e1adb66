"""
Process-wide service settings, read from the environment once at startup.
"""
from dataclasses import dataclass
import os
from typing import Callable, List, Mapping, Optional, Tuple

from .services.alpha_masker import DEFAULT_TOLERANCE
from .services.remote_fetch import DEFAULT_MAX_BYTES, DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ServiceSettings:
  white_tolerance: int = DEFAULT_TOLERANCE
  fetch_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
  max_remote_bytes: int = DEFAULT_MAX_BYTES
  max_body_bytes: int = DEFAULT_MAX_BYTES
  cors_origins: Tuple[str, ...] = ("*", )


def _parse_tolerance(raw: str) -> int:
  value = int(raw)
  if not 0 <= value <= 255:
    raise ValueError("must be between 0 and 255")
  return value


def _parse_positive_float(raw: str) -> float:
  value = float(raw)
  if value <= 0:
    raise ValueError("must be greater than 0")
  return value


def _parse_positive_int(raw: str) -> int:
  value = int(raw)
  if value <= 0:
    raise ValueError("must be greater than 0")
  return value


def _parse_origins(raw: str) -> Tuple[str, ...]:
  origins = tuple(part.strip() for part in raw.split(",") if part.strip())
  if not origins:
    raise ValueError("must list at least one origin")
  return origins


# env var -> (settings field, parser)
SETTING_SOURCES: dict[str, tuple[str, Callable[[str], object]]] = {
  "FUSION_WHITE_TOLERANCE": ("white_tolerance", _parse_tolerance),
  "FUSION_FETCH_TIMEOUT_SECONDS": ("fetch_timeout_seconds", _parse_positive_float),
  "FUSION_MAX_REMOTE_BYTES": ("max_remote_bytes", _parse_positive_int),
  "FUSION_MAX_BODY_BYTES": ("max_body_bytes", _parse_positive_int),
  "FUSION_CORS_ORIGINS": ("cors_origins", _parse_origins),
}


def read_settings(environ: Optional[Mapping[str, str]] = None
                  ) -> tuple[ServiceSettings, List[str]]:
  """
  Build settings from `environ` (default: os.environ).

  Returns the settings plus one error message per invalid variable; invalid
  variables keep their default value.
  """
  environ = os.environ if environ is None else environ
  values = {}
  errors: List[str] = []

  for env_name, (field, parser) in SETTING_SOURCES.items():
    raw = (environ.get(env_name) or "").strip()
    if not raw:
      continue
    try:
      values[field] = parser(raw)
    except ValueError as exc:
      errors.append(f"{env_name}={raw!r} is invalid: {exc}")

  return ServiceSettings(**values), errors


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ServiceSettings:
  settings, _ = read_settings(environ)
  return settings
