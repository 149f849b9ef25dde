"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specport:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specport/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specport.models.GlobalConfig`
  JSON file storing import settings and output defaults.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project-local config, and global config into the
  effective :class:`~specport.models.ImportSettings`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specport.exceptions import ConfigError
from specport.models import GlobalConfig, ImportSettings

_APP_NAME = "specport"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specport.json"

# Environment variable -> ImportSettings field. List-valued fields are
# comma-separated.
_ENV_SETTINGS = {
    "SPECPORT_DEFAULT_MEDIA_TYPE": "default_media_type",
    "SPECPORT_EXCLUDE_KEYS": "raml_excluded_keys",
    "SPECPORT_EXTENSIONS": "allowed_extensions",
    "SPECPORT_MAX_REF_DEPTH": "max_ref_depth",
    "SPECPORT_ON_REF_CYCLE": "on_ref_cycle",
    "SPECPORT_TIMEOUT": "request_timeout",
}
_LIST_SETTINGS = frozenset({"raml_excluded_keys", "allowed_extensions"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specport/`` (default ``~/.config/specport/``).
    On macOS/Windows: ``~/.specport/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specport/`` (default ``~/.local/share/specport/``).
    On macOS/Windows: ``~/.specport/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On any failure the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_output_file(path: Path, data: str) -> None:
    """Atomically write a produced collection (or any text) to *path*."""
    _atomic_write(path, data if data.endswith("\n") else data + "\n")


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specport.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def set_config_value(key: str, raw_value: str) -> GlobalConfig:
    """Set one dotted key (e.g. ``importer.on_ref_cycle``) in the global config.

    *raw_value* is parsed as JSON when possible (numbers, booleans, lists),
    otherwise stored as a string. The updated config is validated before it
    is saved.

    Raises:
        ConfigError: For unknown keys or values that fail validation.
    """
    section, _, field_name = key.partition(".")
    config = load_global_config()
    data = config.model_dump(mode="json")
    if section not in data or not isinstance(data[section], dict) or field_name not in data[section]:
        raise ConfigError(f"Unknown config key: {key}")

    try:
        value: Any = json.loads(raw_value)
    except json.JSONDecodeError:
        value = raw_value
    data[section][field_name] = value

    try:
        updated = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc
    save_global_config(updated)
    return updated


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specport.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. Its ``importer`` object overrides individual
    import settings.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_var, field_name in _ENV_SETTINGS.items():
        value = os.environ.get(env_var)
        if not value:
            continue
        if field_name in _LIST_SETTINGS:
            overrides[field_name] = [part.strip() for part in value.split(",") if part.strip()]
        else:
            overrides[field_name] = value
    return overrides


def resolve_settings(cli_overrides: Optional[dict[str, Any]] = None) -> ImportSettings:
    """Resolve import settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_overrides``; ``None`` values are ignored)
        2. Environment variables (``SPECPORT_ON_REF_CYCLE``, ...)
        3. Project config (``./specport.json``, ``importer`` object)
        4. User config (``~/.config/specport/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is unreadable or the merged settings do
            not validate.
    """
    data = load_global_config().importer.model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data.update(project.get("importer") or {})

    data.update(_env_overrides())

    for field_name, value in (cli_overrides or {}).items():
        if value is not None:
            data[field_name] = value

    try:
        return ImportSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid import settings: {exc}") from exc
