# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reporting: formatters and the formatter set driven by the runner."""

from __future__ import annotations

from .formatter_set import FormatterSet, ReportingSetupError, build_formatter_set
from .formatters import FORMATTERS, BaseFormatter

__all__ = ["BaseFormatter", "FORMATTERS", "FormatterSet", "ReportingSetupError", "build_formatter_set"]
