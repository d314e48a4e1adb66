import logging.config
import os
import re
from pathlib import Path
from typing import Optional
import yaml

LOGGER_NAME = "credential_fusion"
ENV_PLACEHOLDER = re.compile(r'\$\{([^}:]+):-([^}]+)\}')


def _find_logging_config() -> Optional[Path]:
  env_path = os.environ.get("LOGGING_CONFIG")
  package_dir = Path(__file__).resolve().parent
  candidates = [
    Path(env_path) if env_path else None,
    package_dir.parent.parent / "logging.yaml",
    package_dir / "logging.yaml",
  ]
  return next((path for path in candidates if path and path.is_file()), None)


def expand_env_placeholders(text: str) -> str:
  """Replace ${VAR:-default} with the environment value or the default."""
  return ENV_PLACEHOLDER.sub(
    lambda match: os.environ.get(match.group(1), match.group(2)), text)


def setup_logging() -> Optional[Path]:
  """
  Configure logging from YAML, falling back to basicConfig at LOG_LEVEL.

  Returns the config file used, or None for the fallback.
  """
  config_path = _find_logging_config()
  if config_path is None:
    logging.basicConfig(level=logging.INFO)
    logging.getLogger(LOGGER_NAME).setLevel(
      os.environ.get("LOG_LEVEL", "INFO").upper())
    return None

  config = yaml.safe_load(expand_env_placeholders(config_path.read_text()))
  logging.config.dictConfig(config)
  logging.getLogger(LOGGER_NAME).debug("Logging configured from %s", config_path)
  return config_path


setup_logging()
