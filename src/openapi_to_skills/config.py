"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for openapi-to-skills:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-to-skills/`` on macOS and Windows. See
  :func:`get_config_dir` and :func:`get_data_dir`.
* **User config** -- A single :class:`~openapi_to_skills.models.ConvertConfig`
  JSON file with the user's ``convert`` defaults.
* **Project config** -- ``./openapi-to-skills.json`` in the working
  directory, with the same keys.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config, and user config into the final
  effective configuration.

Writes go through :func:`~openapi_to_skills.writer.atomic_write`
(temp-file-then-rename).
"""

from __future__ import annotations

import json
import os
import platform
import re
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from openapi_to_skills.exceptions import ConfigError
from openapi_to_skills.models import (
    ConvertConfig,
    ConvertOptions,
    ParserFilter,
    ParserOptions,
)
from openapi_to_skills.writer import atomic_write

_APP_NAME = "openapi-to-skills"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "openapi-to-skills.json"

ENV_PREFIX = "OPENAPI_TO_SKILLS_"
ENV_OUTPUT = f"{ENV_PREFIX}OUTPUT"
ENV_TEMPLATES = f"{ENV_PREFIX}TEMPLATES"
ENV_GROUP_BY = f"{ENV_PREFIX}GROUP_BY"

REGEX_PREFIX = "re:"
"""Marks an ``exclude_paths`` entry as a regular expression."""


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
    """Return the configuration directory. It is not created.

    On Linux/BSD: ``$XDG_CONFIG_HOME/openapi-to-skills/`` (default
    ``~/.config/openapi-to-skills/``).
    On macOS/Windows: ``~/.openapi-to-skills/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-to-skills/`` (default
    ``~/.local/share/openapi-to-skills/``).
    On macOS/Windows: ``~/.openapi-to-skills/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def user_config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def project_config_path() -> Path:
    """Path to the project config file in the current working directory."""
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


# --- Loading and saving ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    """Read a JSON object from *path*, or ``None`` when the file is absent.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or not an object.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} config at {path}: expected a JSON object")
    return data


def load_user_config() -> ConvertConfig:
    """Load the user configuration from the config directory.

    Returns:
        The deserialised :class:`~openapi_to_skills.models.ConvertConfig`.
        If the file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = user_config_path()
    data = _read_json_object(path, "user")
    if data is None:
        return ConvertConfig()
    try:
        return ConvertConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid user config at {path}: {exc}") from exc


def save_user_config(config: ConvertConfig) -> Path:
    """Persist the user configuration atomically to disk.

    Args:
        config: The configuration to save.

    Returns:
        The path written.

    Raises:
        ConfigError: If the file cannot be written.
    """
    path = user_config_path()
    data = config.model_dump(mode="json")
    try:
        atomic_write(path, json.dumps(data, indent=2) + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write user config at {path}: {exc}") from exc
    return path


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./openapi-to-skills.json``.

    Project config sits between user config and environment variables in
    the precedence chain, so a repository can pin its own output directory,
    filters, or templates.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    return _read_json_object(project_config_path(), "project")


def _env_overrides() -> dict[str, Any]:
    """Collect the config keys set through environment variables."""
    overrides: dict[str, Any] = {}
    for key, env_var in (
        ("output", ENV_OUTPUT),
        ("templates", ENV_TEMPLATES),
        ("group_by", ENV_GROUP_BY),
    ):
        value = os.environ.get(env_var)
        if value:
            overrides[key] = value
    return overrides


# --- Precedence resolution ---


def resolve_config(cli_overrides: Optional[dict[str, Any]] = None) -> ConvertConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_overrides``; ``None`` values are ignored)
        2. Environment variables (``OPENAPI_TO_SKILLS_OUTPUT``,
           ``OPENAPI_TO_SKILLS_TEMPLATES``, ``OPENAPI_TO_SKILLS_GROUP_BY``)
        3. Project config (``./openapi-to-skills.json``)
        4. User config (``~/.config/openapi-to-skills/config.json``)
        5. Defaults

    Each layer replaces whole keys; lists are not merged.

    Returns:
        The effective :class:`~openapi_to_skills.models.ConvertConfig`.

    Raises:
        ConfigError: If any layer is unreadable or the merged values fail
            validation.
    """
    # 5 + 4. User config, filled in with defaults
    merged: dict[str, Any] = load_user_config().model_dump(mode="json", exclude_unset=True)

    # 3. Project config
    project = load_project_config()
    if project is not None:
        merged.update(project)

    # 2. Environment variables
    merged.update(_env_overrides())

    # 1. CLI flags
    if cli_overrides:
        merged.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        return ConvertConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def build_convert_options(
    config: ConvertConfig,
    force: bool = False,
    dry_run: bool = False,
) -> ConvertOptions:
    """Turn an effective :class:`ConvertConfig` into :class:`ConvertOptions`.

    Raises:
        ConfigError: If an ``exclude_paths`` regular expression is invalid.
    """
    return ConvertOptions(
        output_dir=Path(config.output),
        parser=ParserOptions(
            skill_name=config.name,
            group_by=config.group_by,
            filter=ParserFilter(
                include_tags=config.include_tags,
                exclude_tags=config.exclude_tags,
                exclude_deprecated=config.exclude_deprecated,
                exclude_paths=parse_exclude_patterns(config.exclude_paths),
            ),
        ),
        template_dir=Path(config.templates) if config.templates else None,
        force=force,
        dry_run=dry_run,
    )


# --- Value helpers ---


def parse_exclude_patterns(values: list[str]) -> list[Union[str, re.Pattern]]:
    """Compile ``re:``-prefixed entries; keep the others as literal prefixes.

    Examples::

        >>> parse_exclude_patterns(["/internal", "re:^/admin/"])
        ['/internal', re.compile('^/admin/')]

    Raises:
        ConfigError: If a regular expression does not compile.
    """
    patterns: list[Union[str, re.Pattern]] = []
    for value in values:
        if value.startswith(REGEX_PREFIX):
            expression = value[len(REGEX_PREFIX):]
            try:
                patterns.append(re.compile(expression))
            except re.error as exc:
                raise ConfigError(
                    f"Invalid exclude_paths pattern {expression!r}: {exc}"
                ) from exc
        else:
            patterns.append(value)
    return patterns


def split_csv(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated option value, trimming blanks.

    Returns ``None`` for ``None`` so an unset flag does not override lower
    precedence layers.
    """
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def set_config_value(config: ConvertConfig, key: str, value: str) -> ConvertConfig:
    """Return a copy of *config* with *key* set from a string value.

    The value is coerced to the field's type: comma-separated lists for list
    fields, ``true``/``1``/``yes`` for booleans, and ``""`` or ``none``
    clears an optional field.

    Raises:
        ConfigError: If *key* is unknown or the value fails validation.
    """
    if key not in ConvertConfig.model_fields:
        raise ConfigError(
            f"Unknown config key: {key}. "
            f"Valid keys: {', '.join(ConvertConfig.model_fields)}"
        )

    data = config.model_dump(mode="json")
    current = data[key]
    field = ConvertConfig.model_fields[key]

    coerced: Any
    if isinstance(current, list):
        coerced = split_csv(value) or []
    elif isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif value.lower() in ("", "none") and not field.is_required() and field.default is None:
        coerced = None
    else:
        coerced = value

    data[key] = coerced
    try:
        return ConvertConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from exc
