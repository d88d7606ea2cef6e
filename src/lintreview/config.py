# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for review runs."""

from __future__ import annotations

import math
import os
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError
from .severity import FailLevel, Severity

DEFAULT_CONFIG_NAMES: Final[tuple[str, ...]] = (".lintreview.toml", "lintreview.toml")
PYPROJECT_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "lintreview"


class FilterMode(str, Enum):
    """Review scopes deciding which diagnostics are in scope for a diff."""

    ADDED = "added"
    DIFF_CONTEXT = "diff_context"
    FILE = "file"
    NOFILTER = "nofilter"


class PostFailurePolicy(str, Enum):
    """Whether a failed comment post fails the whole run."""

    FAIL = "fail"
    WARN = "warn"


def default_parallel_jobs() -> int:
    """Return a CPU count scaled down for concurrent linting.

    Returns:
        int: Rounded-down count representing roughly 75% of available CPU
        cores while guaranteeing a minimum of one worker.
    """

    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


class Runner(BaseModel):
    """One linter invocation: command plus the rules that parse its output."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    cmd: str = ""
    errorformat: tuple[str, ...] = Field(default_factory=tuple)
    format: str | None = None
    level: Severity | None = None
    min_level: Severity | None = None
    path_prefix: str | None = None
    filter_mode: FilterMode | None = None
    include_stderr: bool = True
    shell: bool = True
    workdir: Path | None = None

    @field_validator("errorformat", mode="before")
    @classmethod
    def _coerce_errorformat(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value


class ExecutionConfig(BaseModel):
    """Run-level execution, filtering and failure policies."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    timeout: float | None = Field(default=None, ge=0)
    filter_mode: FilterMode = FilterMode.ADDED
    post_failure_policy: PostFailurePolicy = PostFailurePolicy.FAIL
    fail_level: FailLevel = FailLevel.NONE


class OutputConfig(BaseModel):
    """Console presentation preferences."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    emoji: bool = True
    color: bool | None = None


class Config(BaseModel):
    """Top-level configuration; read-only once constructed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    runner: dict[str, Runner] = Field(default_factory=dict)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def _default_runner_names(self) -> Config:
        """Name every runner after its key unless a name was given."""

        for key, runner in list(self.runner.items()):
            if not runner.name:
                self.runner[key] = runner.model_copy(update={"name": key})
        return self

    def ordered_runners(self) -> list[Runner]:
        """Return runners in deterministic execution order (by key)."""

        return [self.runner[key] for key in sorted(self.runner)]

    def with_execution(self, **updates: Any) -> Config:
        """Return a copy whose execution section has ``updates`` applied.

        ``None`` values are ignored so CLI options that were not supplied keep
        the file-provided setting.
        """

        return self._with_section("execution", ExecutionConfig, updates)

    def with_output(self, **updates: Any) -> Config:
        """Return a copy whose output section has ``updates`` applied."""

        return self._with_section("output", OutputConfig, updates)

    def _with_section(self, name: str, model: type[BaseModel], updates: Mapping[str, Any]) -> Config:
        effective = {key: value for key, value in updates.items() if value is not None}
        if not effective:
            return self
        merged = getattr(self, name).model_dump()
        merged.update(effective)
        try:
            section = model.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
        return self.model_copy(update={name: section})


def config_from_mapping(data: Mapping[str, Any], *, source: str = "<mapping>") -> Config:
    """Validate a raw configuration mapping.

    Args:
        data: Parsed document content.
        source: Description of where ``data`` came from, used in errors.

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: If ``data`` does not describe a valid configuration.
    """

    try:
        return Config.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {source}:\n{exc}") from exc


def load_config(path: Path) -> Config:
    """Load configuration from a TOML file.

    ``pyproject.toml`` files are read from their ``[tool.lintreview]`` table;
    any other file is read as a standalone document.

    Args:
        path: Configuration file to read.

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"configuration at {path} is not valid TOML: {exc}") from exc
    if path.name == PYPROJECT_NAME:
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        section = tool_section.get(PYPROJECT_SECTION_KEY) if isinstance(tool_section, Mapping) else None
        if not isinstance(section, Mapping):
            raise ConfigError(f"{path} has no [tool.{PYPROJECT_SECTION_KEY}] table")
        data = dict(section)
    return config_from_mapping(data, source=str(path))


def discover_config(root: Path) -> Path | None:
    """Return the first configuration file found in ``root``, if any."""

    for name in DEFAULT_CONFIG_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    pyproject = root / PYPROJECT_NAME
    if pyproject.is_file():
        with pyproject.open("rb") as handle:
            try:
                data = tomllib.load(handle)
            except tomllib.TOMLDecodeError:
                return None
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if isinstance(tool_section, Mapping) and PYPROJECT_SECTION_KEY in tool_section:
            return pyproject
    return None


__all__ = [
    "Config",
    "ConfigError",
    "ExecutionConfig",
    "FilterMode",
    "OutputConfig",
    "PostFailurePolicy",
    "Runner",
    "config_from_mapping",
    "default_parallel_jobs",
    "discover_config",
    "load_config",
]
