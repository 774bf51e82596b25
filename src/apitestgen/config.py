"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for apitestgen:

* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apitestgen/`` on macOS and Windows. Holds crash logs. See
  :func:`get_data_dir`.
* **Project config** -- ``./apitestgen.json`` pins the template, output
  directory, source root and base name of a project. Managed via
  :func:`load_project_config` and :func:`save_project_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config and defaults into the
  effective :class:`~apitestgen.models.GeneratorConfig`.

Project config writes go through the same temp-file-then-rename helper the
emitter uses for generated files.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from apitestgen.exceptions import ConfigError
from apitestgen.generator.emitter import write_atomic
from apitestgen.models import GeneratorConfig

_APP_NAME = "apitestgen"
_PROJECT_CONFIG_FILENAME = "apitestgen.json"

_ENV_PREFIX = "APITESTGEN_"
_CONFIG_FIELDS = ("template", "output_dir", "root", "name")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apitestgen/`` (default
    ``~/.local/share/apitestgen/``).
    On macOS/Windows: ``~/.apitestgen/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def project_config_path() -> Path:
    """Path of the project-local config file in the working directory."""
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./apitestgen.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def save_project_config(config: GeneratorConfig) -> Path:
    """Persist *config* atomically to ``./apitestgen.json``.

    Unset fields are left out so that later runs still fall back to their
    defaults.

    Returns:
        The path written.
    """
    path = project_config_path()
    data = config.model_dump(mode="json", exclude_none=True)
    write_atomic(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def resolve_config(
    cli_template: Optional[str] = None,
    cli_output_dir: Optional[str] = None,
    cli_root: Optional[str] = None,
    cli_name: Optional[str] = None,
) -> GeneratorConfig:
    """Resolve the effective generator settings.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``APITESTGEN_TEMPLATE``,
           ``APITESTGEN_OUTPUT_DIR``, ``APITESTGEN_ROOT``, ``APITESTGEN_NAME``)
        3. Project config (``./apitestgen.json``)
        4. Defaults (``output_dir="."``, ``root`` = working directory)

    Raises:
        ConfigError: If the project config is invalid.
    """
    merged: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        unknown = sorted(set(project) - set(_CONFIG_FIELDS))
        if unknown:
            raise ConfigError(
                f"Unknown key(s) in {_PROJECT_CONFIG_FILENAME}: {', '.join(unknown)}"
            )
        merged.update({key: value for key, value in project.items() if value is not None})

    # 2. Environment variables
    for field in _CONFIG_FIELDS:
        env_value = os.environ.get(_ENV_PREFIX + field.upper())
        if env_value:
            merged[field] = env_value

    # 1. CLI flags (highest precedence)
    cli = {
        "template": cli_template,
        "output_dir": cli_output_dir,
        "root": cli_root,
        "name": cli_name,
    }
    merged.update({key: value for key, value in cli.items() if value is not None})

    try:
        config = GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    if config.root is None:
        config = config.model_copy(update={"root": str(Path.cwd())})
    return config
