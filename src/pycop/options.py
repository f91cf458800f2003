# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run options controlling cop selection, correction and reporting."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import DEFAULT_FAIL_LEVEL, Severity

DEFAULT_FORMATTER: Final[str] = "progress"


class FormatterSpec(BaseModel):
    """Formatter key paired with an optional output file."""

    model_config = ConfigDict(frozen=True)

    key: str = DEFAULT_FORMATTER
    output_path: Path | None = None


class RunOptions(BaseModel):
    """Options for a single run session."""

    model_config = ConfigDict(validate_assignment=True)

    only: list[str] = Field(default_factory=list)
    lint: bool = False
    framework: bool = False
    fail_level: Severity = DEFAULT_FAIL_LEVEL
    fail_fast: bool = False
    debug: bool = False
    autocorrect: bool = False
    formatters: list[FormatterSpec] = Field(default_factory=lambda: [FormatterSpec()])
    color: bool = True
    max_iterations: int | None = Field(default=None, ge=1)
    config_path: Path | None = None

    @field_validator("fail_level", mode="before")
    @classmethod
    def _coerce_fail_level(cls, value: object) -> object:
        """Accept severity names and single-letter codes."""
        if isinstance(value, str):
            return Severity.parse(value)
        return value


__all__ = ["DEFAULT_FORMATTER", "FormatterSpec", "RunOptions"]
