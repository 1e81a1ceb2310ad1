"""Configuration loading with fail-fast behavior and layered merging.

Layers, later overriding earlier:
1. Shipped defaults (only when no global config exists)
2. Global user config (~/.ngc/config.json)
3. Project local config (cwd/.ngc/config.json)

Every error names the layer it came from so a broken project file is not
mistaken for a broken global one.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ngc.config.schema import Config
from ngc.core.constants import NGC_DIR_NAME, get_defaults_dir, get_ngc_dir
from ngc.core.errors import ConfigError
from ngc.core.utils import deep_merge

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
DEFAULTS_DIR = get_defaults_dir()
DEFAULT_CONFIG = DEFAULTS_DIR / CONFIG_FILE_NAME


def _read_layer(path: Path, layer: str) -> dict[str, Any] | None:
    """Read one config layer.

    Returns:
        The parsed object, {} for an empty file, or None if the file is absent.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or holds
            something other than a JSON object.
    """
    if not path.is_file():
        logger.debug("No %s at %s", layer, path)
        return None

    try:
        # Tolerate a UTF-8 BOM
        content = path.read_text(encoding="utf-8-sig").strip()
    except OSError as e:
        raise ConfigError(f"Failed to read {layer} {path}: {e}") from e
    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {layer} {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected object in {layer} {path}, got {type(data).__name__}"
        )
    logger.debug("Loaded %s: %s", layer, path)
    return data


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for the local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or the merged
            config fails validation.
    """
    if path is not None:
        return _load_from_path(path)

    effective_cwd = cwd or Path.cwd()
    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []

    global_config = get_ngc_dir() / CONFIG_FILE_NAME
    global_data = _read_layer(global_config, f"global config (~/{NGC_DIR_NAME})")
    if global_data:
        merged = deep_merge(merged, global_data)
        loaded_from.append(global_config)
    else:
        default_data = _read_layer(DEFAULT_CONFIG, "shipped defaults")
        if default_data:
            merged = deep_merge(merged, default_data)
            loaded_from.append(DEFAULT_CONFIG)

    local_config = effective_cwd / NGC_DIR_NAME / CONFIG_FILE_NAME
    # Skip when cwd is home and local == global
    if local_config.resolve() != global_config.resolve():
        local_data = _read_layer(
            local_config, f"project config ({NGC_DIR_NAME}/{CONFIG_FILE_NAME})"
        )
        if local_data:
            merged = deep_merge(merged, local_data)
            loaded_from.append(local_config)

    if loaded_from:
        logger.info("Config loaded from: %s", [str(p) for p in loaded_from])
    else:
        logger.debug("No config files found, using Pydantic defaults")

    if not merged:
        return Config()

    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        sources = ", ".join(str(p) for p in loaded_from)
        raise ConfigError(f"Config validation failed (merged from {sources}): {e}") from e


def _load_from_path(path: Path) -> Config:
    """Load and validate config from a specific path.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    data = _read_layer(path, "config")
    if data is None:
        raise ConfigError(f"Config file not found: {path}")

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
