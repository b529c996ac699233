"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for cliweb:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.cliweb/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~cliweb.models.GlobalConfig` JSON
  file storing the default command tree source and server settings.
* **Project config** -- an optional ``./cliweb.json`` with the same shape,
  overriding the global file key by key.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

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

from cliweb.exceptions import ConfigError
from cliweb.models import GlobalConfig

_APP_NAME = "cliweb"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "cliweb.json"

ENV_DEFINITION = "CLIWEB_DEFINITION"
ENV_HOST = "CLIWEB_HOST"
ENV_PORT = "CLIWEB_PORT"
ENV_ALLOW_CORS = "CLIWEB_ALLOW_CORS"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/cliweb/`` (default ``~/.config/cliweb/``).
    On macOS/Windows: ``~/.cliweb/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/cliweb/`` (default ``~/.local/share/cliweb/``).
    On macOS/Windows: ``~/.cliweb/logs/``.
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
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
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
        fd = None  # prevent double-close in finally
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


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, what: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~cliweb.models.GlobalConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def project_config_path() -> Path:
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./cliweb.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigError(f"Environment variable {name}={raw!r} is not a boolean")


# --- Config keys ---


def set_config_value(config: GlobalConfig, key: str, raw: str) -> GlobalConfig:
    """Return a copy of *config* with dotted *key* set to *raw*.

    *raw* is parsed as JSON when possible (``8081``, ``true``,
    ``["file"]``) and used as a plain string otherwise.

    Example::

        set_config_value(cfg, "server.port", "9000")

    Raises:
        ConfigError: For an unknown key or a value that fails validation.
    """
    try:
        value: Any = json.loads(raw)
    except json.JSONDecodeError:
        value = raw

    data = config.model_dump(mode="json")
    target = data
    parts = key.split(".")
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            raise ConfigError(f"Unknown config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise ConfigError(f"Unknown config key: {key}")
    target[parts[-1]] = value

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {raw!r}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_definition: Optional[str] = None,
    cli_server: Optional[dict[str, Any]] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_definition`` and the non-``None`` entries of
           ``cli_server``)
        2. Environment variables (``CLIWEB_DEFINITION``, ``CLIWEB_HOST``,
           ``CLIWEB_PORT``, ``CLIWEB_ALLOW_CORS``)
        3. Project config (``./cliweb.json``)
        4. User config (``~/.config/cliweb/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file or environment variable is invalid.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    data = load_global_config().model_dump(mode="json")

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    # 2. Environment variables
    server = data.setdefault("server", {})
    env_definition = os.environ.get(ENV_DEFINITION)
    if env_definition:
        data["definition"] = env_definition
    env_host = os.environ.get(ENV_HOST)
    if env_host:
        server["host"] = env_host
    env_port = os.environ.get(ENV_PORT)
    if env_port:
        try:
            server["port"] = int(env_port)
        except ValueError as exc:
            raise ConfigError(f"Environment variable {ENV_PORT}={env_port!r} is not a port") from exc
    env_cors = os.environ.get(ENV_ALLOW_CORS)
    if env_cors is not None:
        server["allow_cors"] = _env_bool(ENV_ALLOW_CORS, env_cors)

    # 1. CLI flags
    if cli_definition is not None:
        data["definition"] = cli_definition
    for key, value in (cli_server or {}).items():
        if value is not None:
            server[key] = value

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
