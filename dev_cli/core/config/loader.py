"""
Configuration loader — project root discovery and layered config.

Two marker files define a project root:

    .dev-cli.yml        local, developer-specific (not committed)
    .dev-cli.dist.yml   distributed, checked into version control

Both are also configuration documents.  Together with the global
config in the user's config directory they are merged, key by key,
into one EffectiveConfig:  global < distributed < local.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dev_cli.core.errors import ConfigError, ResolutionError
from dev_cli.core.models.config import ConfigLayer, EffectiveConfig, LayerName, ProjectRoot

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME_LOCAL = ".dev-cli.yml"
CONFIG_FILE_NAME_DIST = ".dev-cli.dist.yml"


def find_project_root(start_dir: Path | None = None) -> ProjectRoot:
    """Walk up from ``start_dir`` to the first directory holding a marker.

    The local marker wins when both markers sit in the same directory.
    Because the search stops at the first level with either marker, a
    local marker always beats a distributed one further up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        The resolved ProjectRoot.

    Raises:
        ResolutionError: If no level up to the filesystem root has a marker.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for name in (CONFIG_FILE_NAME_LOCAL, CONFIG_FILE_NAME_DIST):
            candidate = current / name
            if candidate.is_file():
                logger.debug("Project root %s (marker %s)", current, name)
                return ProjectRoot(path=current, marker=candidate)
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    raise ResolutionError(
        "Could not find a project root. "
        f"Please add a {CONFIG_FILE_NAME_LOCAL} or {CONFIG_FILE_NAME_DIST} "
        "to your project root"
    )


def config_layer_paths(
    project_root: ProjectRoot,
    global_config_path: Path,
) -> list[tuple[LayerName, Path]]:
    """Candidate config files in merge order (lowest precedence first)."""
    return [
        ("global", global_config_path),
        ("distributed", project_root / CONFIG_FILE_NAME_DIST),
        ("local", project_root / CONFIG_FILE_NAME_LOCAL),
    ]


def load_layer(name: LayerName, path: Path) -> ConfigLayer:
    """Read one config document.  A missing file is an empty layer.

    Raises:
        ConfigError: If the file exists but is unreadable, is not valid
            YAML, or is not a mapping with string keys at the top level.
    """
    if not path.is_file():
        logger.debug("No %s config at %s", name, path)
        return ConfigLayer(name=name, path=path)

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(name, f"cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(name, f"invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}  # empty document
    if not isinstance(data, dict):
        raise ConfigError(
            name,
            f"expected a YAML mapping in {path}, got {type(data).__name__}",
        )

    # YAML 1.1 reads `on:` as True and `8080:` as an int
    bad_keys = [key for key in data if not isinstance(key, str)]
    if bad_keys:
        raise ConfigError(
            name,
            f"top-level keys in {path} must be strings, got "
            + ", ".join(f"{key!r} ({type(key).__name__})" for key in bad_keys)
            + " (quote them)",
        )

    try:
        layer = ConfigLayer(name=name, path=path, loaded=True, values=data)
    except ValidationError as e:
        raise ConfigError(name, f"unusable document in {path}: {e}") from e

    logger.debug("Loaded %s config from %s (%d keys)", name, path, len(data))
    return layer


def merge_layers(layers: list[ConfigLayer]) -> dict[str, Any]:
    """Shallow merge: a key in a later layer replaces the earlier value."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer.values)
    return merged


def load_effective_config(
    project_root: ProjectRoot,
    global_config_path: Path,
) -> EffectiveConfig:
    """Load global, distributed and local config and merge them.

    Args:
        project_root: Resolved project root.
        global_config_path: Path of the user-wide config file.

    Returns:
        The EffectiveConfig, with the layers it was built from.

    Raises:
        ConfigError: If any present layer is invalid.
    """
    layers = [
        load_layer(name, path)
        for name, path in config_layer_paths(project_root, global_config_path)
    ]
    config = EffectiveConfig(values=merge_layers(layers), layers=layers)

    logger.info(
        "Effective config from %s (%d keys)",
        ", ".join(layer.name for layer in config.loaded_layers) or "defaults",
        len(config.values),
    )
    return config
