"""
Per-project configuration loader.

Reads .hush/config.yaml:
```yaml
ledgerLocation: config/hush-suppressions.json
applySuppressions: true
```

Values here override environment settings; CLI flags and constructor
arguments override both.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hush.shared.domain.base_model import to_snake_case
from hush.shared.domain.exceptions import ConfigurationError
from hush.shared.infrastructure.config import settings
from hush.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = "config.yaml"


@dataclass
class ProjectConfig:
    """Project-level options; None means "not set here"."""

    ledger_location: str | None = None
    apply_suppressions: bool | None = None

    def resolve_apply_suppressions(self, override: bool | None = None) -> bool:
        if override is not None:
            return override
        if self.apply_suppressions is not None:
            return self.apply_suppressions
        return settings.apply_suppressions


def load_project_config(project_root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load project configuration.

    Args:
        project_root: Project root directory
        config_path: Explicit config file (default: <root>/.hush/config.yaml)

    Returns:
        ProjectConfig; all fields unset when the file does not exist

    Raises:
        ConfigurationError: If the YAML is invalid or has wrong types
    """
    if config_path is None:
        config_path = project_root / settings.config_dir / CONFIG_FILENAME

    if not config_path.exists():
        return ProjectConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", {"path": str(config_path)}) from e

    if data is None:
        return ProjectConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping", {"path": str(config_path)})

    if any(key is None or str(key) == "" for key in data):
        raise ConfigurationError(f"{config_path} contains an empty key", {"path": str(config_path)})

    data = {to_snake_case(str(key)): value for key, value in data.items()}

    ledger_location = _typed(data, "ledger_location", str, config_path)
    apply_flag = _typed(data, "apply_suppressions", bool, config_path)

    config = ProjectConfig(ledger_location=ledger_location, apply_suppressions=apply_flag)
    logger.debug("project_config_loaded", path=str(config_path), config=str(config))
    return config


def _typed(data: dict[str, Any], key: str, expected: type, source: Path) -> Any:
    value = data.get(key)
    if value is not None and not isinstance(value, expected):
        raise ConfigurationError(
            f"'{key}' in {source} must be {expected.__name__}, got {type(value).__name__}",
            {"path": str(source), "key": key},
        )
    return value
