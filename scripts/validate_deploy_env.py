#!/usr/bin/env python3
"""
Validate deployment env files before the service is deployed.
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

from credential_fusion.web_api.settings import read_settings


def _parse_env_file(env_path: Path) -> dict[str, str]:
  values: dict[str, str] = {}
  for raw_line in env_path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue
    if line.startswith("export "):
      line = line[7:].strip()
    if "=" not in line:
      continue
    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
      continue
    if len(value) >= 2 and ((value[0] == value[-1] == '"')
                            or (value[0] == value[-1] == "'")):
      value = value[1:-1]
    values[key] = value
  return values


def _is_truthy(value: str) -> bool:
  return value.strip().lower() in {"1", "true", "yes", "on"}


def _validate(values: dict[str, str], *, require_restricted_cors: bool) -> tuple[list[str], list[str]]:
  settings, errors = read_settings(values)
  warnings: list[str] = []

  if "*" in settings.cors_origins:
    message = "FUSION_CORS_ORIGINS allows any origin."
    if require_restricted_cors:
      errors.append(message + " Set explicit origins for this deploy.")
    else:
      warnings.append(message)

  if settings.max_remote_bytes > settings.max_body_bytes * 4:
    warnings.append(
      "FUSION_MAX_REMOTE_BYTES is much larger than FUSION_MAX_BODY_BYTES; "
      "remote base images may use far more memory than uploads."
    )

  port = values.get("PORT", "").strip()
  if port and not (port.isdigit() and 0 < int(port) < 65536):
    errors.append(f"PORT={port!r} is not a valid TCP port.")

  if not _is_truthy(values.get("FUSION_STRICT_STARTUP_CONFIG", "true")):
    warnings.append(
      "FUSION_STRICT_STARTUP_CONFIG is not true; startup config errors may not fail fast."
    )

  return errors, warnings


def main() -> int:
  parser = argparse.ArgumentParser(description="Validate deploy env file")
  parser.add_argument("env_file", help="Path to .env-style file")
  parser.add_argument("--require-restricted-cors",
                      action="store_true",
                      help="Fail when FUSION_CORS_ORIGINS allows any origin")
  args = parser.parse_args()

  env_path = Path(args.env_file)
  if not env_path.exists():
    print(f"[ERROR] Env file not found: {env_path}")
    return 1

  values = _parse_env_file(env_path)
  errors, warnings = _validate(values,
                               require_restricted_cors=args.require_restricted_cors)

  for warning in warnings:
    print(f"[WARN] {warning}")

  if errors:
    for error in errors:
      print(f"[ERROR] {error}")
    return 1

  print(f"[OK] Env validation passed: {env_path}")
  return 0


if __name__ == "__main__":
  sys.exit(main())
