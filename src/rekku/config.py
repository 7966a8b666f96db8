"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for rekku:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.rekku/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~rekku.models.GlobalConfig` JSON
  file storing request and generation defaults.
* **Project config** -- An optional ``./rekku.json`` with the same shape,
  overriding the global file key by key.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes, generated code included, go through :func:`atomic_write`
(temp file then rename) so that an interrupted run never leaves a
half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from rekku.exceptions import ConfigError
from rekku.models import GlobalConfig

_APP_NAME = "rekku"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "rekku.json"

ENV_WORKSPACE = "REKKU_WORKSPACE"
ENV_TIMEOUT = "REKKU_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/rekku/`` (default ``~/.config/rekku/``).
    On macOS/Windows: ``~/.rekku/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/rekku/`` (default ``~/.local/share/rekku/``).
    On macOS/Windows: ``~/.rekku/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    Parent directories are created as needed. The temporary file lives in
    the same directory as *path* so that ``os.replace`` is an atomic rename
    on POSIX systems; it is removed again if anything fails.
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
        fd = None
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


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~rekku.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./rekku.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_workspace: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_format_code: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_workspace``, ``cli_timeout``, ``cli_format_code``)
        2. Environment variables (``REKKU_WORKSPACE``, ``REKKU_TIMEOUT``)
        3. Project config (``./rekku.json``)
        4. User config (``~/.config/rekku/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~rekku.models.GlobalConfig`.

    Raises:
        ConfigError: If a config file is invalid, a project section that
            rekku knows is not an object, or ``REKKU_TIMEOUT`` is not a
            positive number.
    """
    # 5 + 4. Defaults, then the user file
    data = load_global_config().model_dump()

    # 3. Project file, merged section by section
    project = load_project_config()
    if project is not None:
        for section, values in project.items():
            if section not in data:
                data[section] = values
            elif not isinstance(values, dict):
                raise ConfigError(
                    f"Invalid project config: '{section}' must be an object, "
                    f"got {type(values).__name__}"
                )
            else:
                data[section].update(values)

    # 2. Environment
    env_workspace = os.environ.get(ENV_WORKSPACE)
    if env_workspace:
        data["generate"]["workspace"] = env_workspace
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        data["request"]["timeout"] = _parse_timeout(env_timeout)

    # 1. CLI flags
    if cli_workspace is not None:
        data["generate"]["workspace"] = cli_workspace
    if cli_timeout is not None:
        data["request"]["timeout"] = cli_timeout
    if cli_format_code is not None:
        data["generate"]["format_code"] = cli_format_code

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_TIMEOUT} must be a number, got '{value}'") from exc
    if timeout <= 0:
        raise ConfigError(f"{ENV_TIMEOUT} must be positive, got '{value}'")
    return timeout
