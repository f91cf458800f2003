# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and the per-directory configuration store."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .severity import Severity

CONFIG_FILENAME: Final[str] = ".pycop.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pycop"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class AllCopsConfig(BaseModel):
    """Settings applying to every cop."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    run_framework_cops: bool = False
    exclude: list[str] = Field(default_factory=list)


class CopConfig(BaseModel):
    """Settings for a single cop; unknown keys are kept as cop options."""

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    enabled: bool = True
    severity: Severity | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        """Accept severity names as well as single-letter codes."""
        if value is None or isinstance(value, Severity):
            return value
        try:
            return Severity.parse(str(value))
        except ValueError as exc:
            raise ValueError(str(exc)) from exc

    def option(self, key: str, default: Any = None) -> Any:
        """Return the cop-specific option ``key`` or ``default``.

        Args:
            key: Option name as written in the configuration file.
            default: Value returned when the option is absent.

        Returns:
            Any: Configured value or ``default``.
        """

        extra = self.model_extra or {}
        return extra.get(key, default)


class Config(BaseModel):
    """Effective configuration for a group of files."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    all_cops: AllCopsConfig = Field(default_factory=AllCopsConfig)
    cops: dict[str, CopConfig] = Field(default_factory=dict)
    source: Path | None = Field(default=None, exclude=True)

    def for_cop(self, cop_name: str) -> CopConfig:
        """Return the settings for ``cop_name`` (defaults when unset).

        Args:
            cop_name: Fully qualified cop name.

        Returns:
            CopConfig: Configured or default settings.
        """

        return self.cops.get(cop_name) or _DEFAULT_COP_CONFIG


_DEFAULT_COP_CONFIG: Final[CopConfig] = CopConfig()


def load_config(path: Path) -> Config:
    """Load a :class:`Config` from ``path``.

    ``pyproject.toml`` files are read from their ``[tool.pycop]`` table, any
    other file is read as a whole.

    Args:
        path: TOML file to load.

    Returns:
        Config: Validated configuration remembering its source file.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or does not
            match the configuration schema.
    """

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    payload: Mapping[str, Any] = document
    if path.name == PYPROJECT_FILENAME:
        payload = document.get(PYPROJECT_TOOL_KEY, {}).get(PYPROJECT_SECTION_KEY, {})
    try:
        config = Config.model_validate(dict(payload))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
    config.source = path
    return config


def _has_pycop_section(path: Path) -> bool:
    """Return ``True`` when ``path`` is a pyproject file with a pycop table."""

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return PYPROJECT_SECTION_KEY in document.get(PYPROJECT_TOOL_KEY, {})


class ConfigStore:
    """Resolve the configuration governing each inspected file.

    The nearest ancestor directory holding ``.pycop.toml`` (or a
    ``pyproject.toml`` with a ``[tool.pycop]`` table) supplies the
    configuration. Each configuration file is loaded once, so every file it
    governs receives the very same :class:`Config` object.
    """

    def __init__(self, *, override: Path | None = None) -> None:
        """Create a store, optionally forcing a single configuration file.

        Args:
            override: Configuration file used for every file when provided.
        """

        self._override = override
        self._by_file: dict[Path, Config] = {}
        self._by_directory: dict[Path, Config] = {}
        self._default = Config()

    def for_file(self, path: Path) -> Config:
        """Return the configuration for ``path``.

        Args:
            path: File being inspected.

        Returns:
            Config: Configuration object shared by files governed by the same
            configuration file.

        Raises:
            ConfigError: If the applicable configuration file is invalid.
        """

        if self._override is not None:
            return self._load(self._override)
        directory = path.resolve().parent
        cached = self._by_directory.get(directory)
        if cached is not None:
            return cached
        config_path = self._locate(directory)
        config = self._default if config_path is None else self._load(config_path)
        self._by_directory[directory] = config
        return config

    def _load(self, path: Path) -> Config:
        resolved = path.resolve()
        if resolved not in self._by_file:
            self._by_file[resolved] = load_config(resolved)
        return self._by_file[resolved]

    @staticmethod
    def _locate(directory: Path) -> Path | None:
        for candidate_dir in (directory, *directory.parents):
            dotfile = candidate_dir / CONFIG_FILENAME
            if dotfile.is_file():
                return dotfile
            pyproject = candidate_dir / PYPROJECT_FILENAME
            if pyproject.is_file() and _has_pycop_section(pyproject):
                return pyproject
        return None


__all__ = [
    "AllCopsConfig",
    "Config",
    "ConfigError",
    "ConfigStore",
    "CopConfig",
    "load_config",
]
