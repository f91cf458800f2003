# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in cop catalog."""

from __future__ import annotations

from .base import Cop, CopContext, CopRegistry, Correction, Finding
from .framework import FRAMEWORK_COPS
from .layout import LAYOUT_COPS
from .lint import LINT_COPS
from .style import STYLE_COPS


def default_registry() -> CopRegistry:
    """Return a registry populated with every built-in cop.

    Returns:
        CopRegistry: Catalog ordered layout, lint, style, framework.
    """

    return CopRegistry((*LAYOUT_COPS, *LINT_COPS, *STYLE_COPS, *FRAMEWORK_COPS))


__all__ = ["Cop", "CopContext", "CopRegistry", "Correction", "Finding", "default_registry"]
