"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.sdkwrap/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~sdkwrap.models.GlobalConfig` JSON
  file storing generator and output defaults.
* **Project config** -- an optional ``./sdkwrap.json`` next to the
  checked-in manifest, overlaying generator settings for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config, and global config into the
  effective :class:`~sdkwrap.models.GeneratorConfig`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from sdkwrap.exceptions import ConfigError
from sdkwrap.models import GeneratorConfig, GlobalConfig

_APP_NAME = "sdkwrap"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "sdkwrap.json"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/sdkwrap/`` (default ``~/.config/sdkwrap/``).
    On macOS/Windows: ``~/.sdkwrap/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/sdkwrap/`` (default ``~/.local/share/sdkwrap/``).
    On macOS/Windows: ``~/.sdkwrap/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file in the same directory."""
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


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when no file exists.

    Raises:
        ConfigError: If the file exists but is invalid JSON or fails
            validation.
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
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def set_config_value(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    The string *value* is coerced to the type of the current field:
    booleans accept ``true/false/yes/no/1/0/on/off``; lists are
    comma-separated; ``none`` or an empty string clears optional fields.

    Example::

        >>> cfg = set_config_value(GlobalConfig(), "generator.target", "python")
        >>> cfg.generator.target
        'python'

    Raises:
        ConfigError: If the key does not exist or the value is invalid.
    """
    data = config.model_dump(mode="json")
    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if not isinstance(target.get(k), dict):
            raise ConfigError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        raise ConfigError(f"Unknown config key: {key}")

    target[final_key] = _coerce(key, target[final_key], value)
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc


def _coerce(key: str, current: Any, value: str) -> Any:
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError(f"Expected a boolean for {key}, got: {value}")
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    if value.lower() in ("none", ""):
        return None
    return value


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local generator settings from ``./sdkwrap.json``.

    The file holds :class:`~sdkwrap.models.GeneratorConfig` keys, either at
    the top level or under a ``generator`` key.

    Returns:
        The generator settings as a dict, or ``None`` if the file does not
        exist.

    Raises:
        ConfigError: If the file is invalid JSON or not an object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data.get("generator", data)


# --- Precedence resolution ---


def resolve_config(
    cli_target: Optional[str] = None,
    cli_output: Optional[str] = None,
    cli_group: Optional[bool] = None,
    cli_class_pattern: Optional[str] = None,
    cli_append: Optional[bool] = None,
) -> GeneratorConfig:
    """Resolve the effective generator settings.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``SDKWRAP_TARGET``, ``SDKWRAP_OUTPUT``,
           ``SDKWRAP_CLASS_PATTERN``)
        3. Project config (``./sdkwrap.json``)
        4. User config (``~/.config/sdkwrap/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is invalid or the resolved target is
            not a known emitter.
    """
    from sdkwrap.emitters import available_targets

    data = load_global_config().generator.model_dump()

    project = load_project_config()
    if project is not None:
        unknown = sorted(set(project) - set(GeneratorConfig.model_fields))
        if unknown:
            raise ConfigError(f"Unknown key(s) in project config: {', '.join(unknown)}")
        data.update(project)

    for env_var, field in (
        ("SDKWRAP_TARGET", "target"),
        ("SDKWRAP_OUTPUT", "output"),
        ("SDKWRAP_CLASS_PATTERN", "class_pattern"),
    ):
        env_value = os.environ.get(env_var)
        if env_value:
            data[field] = env_value

    overrides = {
        "target": cli_target,
        "output": cli_output,
        "group_by_declaring_type": cli_group,
        "class_pattern": cli_class_pattern,
        "append": cli_append,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        resolved = GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generator settings: {exc}") from exc

    if resolved.target.lower() not in available_targets():
        raise ConfigError(
            f"Unknown target '{resolved.target}'. Available: {', '.join(available_targets())}"
        )
    return resolved
