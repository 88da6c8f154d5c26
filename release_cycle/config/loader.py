"""Configuration file loading utilities.

Supports loading configuration from YAML and TOML files with:
- Automatic format detection
- Error reporting with file location
- Default value merging
"""

import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from release_cycle.config.models import ReleaseConfig
from release_cycle.exceptions import ConfigurationError

# Import tomli for Python < 3.11, tomllib for 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

SEARCH_PATHS = (
    ".release-cycle.yml",
    ".release-cycle.yaml",
    ".release-cycle.toml",
    "release-cycle.toml",
)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file.

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or omit --config to use defaults",
        ) from None
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}",
            details=str(e),
            fix_hint="Check YAML syntax at the indicated line",
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details=f"Expected a mapping at the top level, got {type(data).__name__}",
        )
    return data


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML configuration file.

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
            return data
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or omit --config to use defaults",
        ) from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML in {path}",
            details=str(e),
            fix_hint="Check TOML syntax at the indicated line",
        ) from e


def find_config(project_root: Path) -> Path | None:
    """Return the first configuration file found in the project root."""
    for search_path in SEARCH_PATHS:
        candidate = project_root / search_path
        if candidate.exists():
            return candidate
    return None


def load_config(
    path: Path | None = None,
    project_root: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReleaseConfig:
    """Load release configuration.

    Without an explicit path, the project root is searched for
    SEARCH_PATHS in order. No file at all means defaults only.

    Args:
        path: Explicit path to config file
        project_root: Project root directory (defaults to cwd)
        overrides: Top-level values that win over the file (CLI flags)

    Returns:
        Validated ReleaseConfig instance

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path: Path | None = None
    if path:
        config_path = Path(path)
        if not config_path.is_absolute():
            config_path = project_root / config_path
    else:
        config_path = find_config(project_root)

    data: dict[str, Any] = {}
    if config_path is not None:
        if config_path.suffix in (".yml", ".yaml"):
            data = load_yaml(config_path)
        elif config_path.suffix == ".toml":
            data = load_toml(config_path)
        else:
            raise ConfigurationError(
                f"Unsupported config format: {config_path.suffix}",
                fix_hint="Use .yml, .yaml, or .toml extension",
            )

    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})

    source = str(config_path) if config_path else "defaults"
    try:
        return ReleaseConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {source}",
            details=str(e),
            fix_hint="Check the configuration values match expected types",
        ) from e
