"""Configuration loader for minireq."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Optional

from ruamel.yaml import YAML, YAMLError

from .environment import PRODUCT
from .errors import ConfigError
from .transport import DEFAULT_TIMEOUT, parse_header_line


@dataclass
class MinireqConfig:
    """minireq configuration."""

    # Transport settings
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    proxy: Optional[str] = None

    # Product tag at the start of the User-Agent
    product: str = PRODUCT

    # Headers sent with every request ("Name: value")
    extra_headers: list[str] = field(default_factory=list)

    log_level: str = "WARNING"


CONFIG_SEARCH_PATHS = [
    "minireq.yaml",
    "minireq.yml",
    ".minireq.yaml",
    ".minireq.yml",
]

# Accepted keys and how each raw YAML value becomes a MinireqConfig field
_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "timeout": float,
    "verify_ssl": bool,
    "proxy": lambda value: str(value) if value else None,
    "product": str,
    "extra_headers": lambda value: [str(line) for line in value],
    "log_level": lambda value: str(value).upper(),
}

KNOWN_KEYS = frozenset(_CONVERTERS)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

logger = logging.getLogger(__name__)


def find_config_path() -> Path | None:
    """Return the first search path present in the working directory."""
    cwd = Path.cwd()
    return next(
        (cwd / name for name in CONFIG_SEARCH_PATHS if (cwd / name).exists()),
        None,
    )


def _load_settings(config_path: Path) -> dict:
    """Read ``config_path`` and return its settings mapping.

    Settings may sit under a top-level ``minireq:`` key or at the top level.
    An empty file yields an empty mapping.

    Raises:
        ConfigError: The file cannot be read, is not YAML, or is not a mapping
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            document = YAML(typ="safe").load(f)
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if isinstance(document, dict):
        document = document.get("minireq", document)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(
            f"Config must be a YAML mapping, got {type(document).__name__}"
        )
    return document


def _check(data: dict) -> list[str]:
    """Return one message per problem in a settings mapping."""
    errors = [f"Unknown key: '{key}'" for key in data if key not in KNOWN_KEYS]

    if "timeout" in data:
        try:
            if float(data["timeout"]) <= 0:
                errors.append(f"'timeout' must be positive, got: {data['timeout']}")
        except (ValueError, TypeError):
            errors.append(f"'timeout' must be a number, got: {data['timeout']}")

    if "verify_ssl" in data and not isinstance(data["verify_ssl"], bool):
        errors.append(f"'verify_ssl' must be true or false, got: {data['verify_ssl']}")

    headers = data.get("extra_headers", [])
    if not isinstance(headers, list):
        errors.append("'extra_headers' must be a list")
    else:
        # Same check the engine applies before sending
        for i, line in enumerate(headers):
            try:
                parse_header_line(str(line))
            except ValueError as e:
                errors.append(f"Invalid header in extra_headers[{i}]: {e}")

    if "log_level" in data and str(data["log_level"]).upper() not in LOG_LEVELS:
        errors.append(
            f"'log_level' must be one of {', '.join(sorted(LOG_LEVELS))}, "
            f"got: {data['log_level']}"
        )

    return errors


def validate_config(config_path: Path) -> list[str]:
    """Return every problem in a config file (empty = valid)."""
    try:
        return _check(_load_settings(config_path))
    except ConfigError as e:
        return [str(e)]


def load_config(config_path: str | Path | None = None) -> MinireqConfig:
    """Build the effective config from defaults and a config file.

    With no ``config_path`` the search paths are tried and a missing file
    means defaults.

    Raises:
        ConfigError: An explicit path does not exist, or the file is invalid
    """
    if config_path is None:
        config_path = find_config_path()
        if config_path is None:
            return MinireqConfig()
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    data = _load_settings(config_path)
    errors = _check(data)
    if errors:
        raise ConfigError(f"Invalid config {config_path}: " + "; ".join(errors))

    logger.debug("Loaded config from %s", config_path)
    return replace(
        MinireqConfig(),
        **{key: _CONVERTERS[key](value) for key, value in data.items()},
    )


def get_default_config_yaml() -> str:
    """Return default YAML config template."""
    return f'''# minireq configuration
# Place this file as minireq.yaml in your working directory

minireq:
  # Overall time budget per request, in seconds
  timeout: {DEFAULT_TIMEOUT}

  # Verify TLS certificates
  verify_ssl: true

  # HTTP proxy for requests (e.g. http://127.0.0.1:8080)
  proxy: null

  # Product tag at the start of the User-Agent
  # (the OS name and release are appended)
  product: {PRODUCT}

  # Headers sent with every request
  extra_headers: []
    # - "Accept: application/json"
    # - "X-Api-Key: secret"

  # Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
  log_level: WARNING
'''
