"""Layered configuration loading.

Options are resolved from an ordered list of layers, each one a plain
mapping applied as an override pass over the previous result:

1. ``defaults``: the field defaults of :class:`ChangelogOptions`
2. ``dotfile``: the JSON file named by ``config`` (``.auto-changelog``)
3. ``manifest``: ``[tool.auto-changelog]`` in pyproject.toml, then the
   ``auto-changelog`` key of package.json
4. ``cli``: explicit command-line values

A later layer wins for every key it sets. ``None`` values never override.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from auto_changelog.config.models import (
    DEFAULT_CONFIG_FILE,
    ChangelogOptions,
    field_name_for,
)
from auto_changelog.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_LAYERS = ("defaults", "dotfile", "manifest", "cli")

PYPROJECT_FILE = "pyproject.toml"
PACKAGE_FILE = "package.json"
TOOL_KEY = "auto-changelog"


def load_json_file(path: Path) -> Any:
    """Load a JSON document, returning ``None`` if the file does not exist.

    Raises:
        ConfigValidationError: If the file is not valid JSON
    """
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Invalid JSON in {path}: {e}") from e


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Load and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"pyproject.toml not found at {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Extract the ``[tool.auto-changelog]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def read_dotfile_layer(cwd: Path, config_file: str | Path | None) -> dict[str, Any]:
    """Options from the JSON dotfile; missing file means no options."""
    path = cwd / (config_file or DEFAULT_CONFIG_FILE)
    data = load_json_file(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"{path} must contain a JSON object")
    logger.debug("Loaded dotfile config from %s", path)
    return data


def read_manifest_layer(cwd: Path) -> dict[str, Any]:
    """Options embedded in the project manifests.

    pyproject.toml is applied first and package.json over it, so a
    JavaScript project keeps its existing ``auto-changelog`` key.
    """
    layer: dict[str, Any] = {}

    pyproject_path = cwd / PYPROJECT_FILE
    if pyproject_path.is_file():
        layer.update(extract_tool_config(load_pyproject_toml(pyproject_path)))

    package = load_json_file(cwd / PACKAGE_FILE)
    if isinstance(package, dict) and isinstance(package.get(TOOL_KEY), dict):
        layer.update(package[TOOL_KEY])

    return layer


def normalize_layer(layer: dict[str, Any]) -> dict[str, Any]:
    """Rename keys to field names and drop unset (``None``) values."""
    return {field_name_for(key): value for key, value in layer.items() if value is not None}


def merge_layers(layers: list[tuple[str, dict[str, Any]]]) -> dict[str, Any]:
    """Apply each layer over the previous one in order."""
    merged: dict[str, Any] = {}
    for name, layer in layers:
        normalized = normalize_layer(layer)
        if normalized:
            logger.debug("Config layer %s sets %s", name, sorted(normalized))
        merged.update(normalized)
    return merged


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    cwd: Path | None = None,
) -> ChangelogOptions:
    """Resolve options from every configuration layer.

    Args:
        cli_overrides: Values given on the command line (``None`` = unset)
        cwd: Directory holding the config files, defaults to the current one

    Returns:
        Validated options

    Raises:
        ConfigValidationError: If a layer is unreadable or a value is invalid
    """
    cwd = cwd or Path.cwd()
    cli = normalize_layer(cli_overrides or {})

    sources: dict[str, dict[str, Any]] = {
        "defaults": {},
        "dotfile": read_dotfile_layer(cwd, cli.get("config")),
        "manifest": read_manifest_layer(cwd),
        "cli": cli,
    }
    layers = [(name, sources[name]) for name in CONFIG_LAYERS]

    try:
        return ChangelogOptions.model_validate(merge_layers(layers))
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e
