# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Style cops."""

from __future__ import annotations

import ast
import io
import tokenize
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Final

from ..config import CopConfig
from .base import Cop, CopContext, Correction, Finding, Position

_EQUALITY_OPERATORS: Final[frozenset[str]] = frozenset({"==", "!="})


@dataclass(frozen=True, slots=True)
class _NoneComparison:
    node: ast.Compare
    negated: bool

    @property
    def keyword(self) -> str:
        return "is not" if self.negated else "is"

    @property
    def message(self) -> str:
        if self.negated:
            return "Use `is not None` instead of `!= None`."
        return "Use `is None` instead of `== None`."


def _none_comparisons(tree: ast.AST) -> Iterator[_NoneComparison]:
    for node in ast.walk(tree):
        if not isinstance(node, ast.Compare) or len(node.ops) != 1:
            continue
        operator = node.ops[0]
        right = node.comparators[0]
        if not isinstance(operator, (ast.Eq, ast.NotEq)):
            continue
        if isinstance(right, ast.Constant) and right.value is None:
            yield _NoneComparison(node=node, negated=isinstance(operator, ast.NotEq))


def check_comparison_to_none(context: CopContext) -> Iterator[Finding]:
    tree = context.source.tree
    if tree is None:
        return
    for comparison in _none_comparisons(tree):
        node = comparison.node
        yield Finding(line=node.lineno, column=node.col_offset, message=comparison.message)


def _char_column(line: str, byte_offset: int) -> int:
    """Convert an ``ast`` UTF-8 byte offset into a character column."""

    return len(line.encode("utf-8")[:byte_offset].decode("utf-8"))


def _operator_token(
    comparison: _NoneComparison,
    lines: Sequence[str],
    operators: Sequence[tokenize.TokenInfo],
) -> tokenize.TokenInfo | None:
    """Return the ``==``/``!=`` token between the operands of ``comparison``.

    Brackets around either operand sit between the operand nodes as well, so
    only the operator token itself is located and later replaced.
    """

    left = comparison.node.left
    right = comparison.node.comparators[0]
    if left.end_lineno is None or left.end_col_offset is None:
        return None
    after = (left.end_lineno, _char_column(lines[left.end_lineno - 1], left.end_col_offset))
    before = (right.lineno, _char_column(lines[right.lineno - 1], right.col_offset))
    for token in operators:
        if after <= token.start and token.end <= before:
            return token
    return None


def _replace_operator(line: str, token: tokenize.TokenInfo, keyword: str) -> str:
    start, end = token.start[1], token.end[1]
    prefix = "" if start == 0 or line[start - 1].isspace() else " "
    suffix = "" if end >= len(line) or line[end].isspace() else " "
    return f"{line[:start]}{prefix}{keyword}{suffix}{line[end:]}"


def correct_comparison_to_none(text: str, _config: CopConfig) -> Correction:
    try:
        tree = ast.parse(text)
        tokens = list(tokenize.generate_tokens(io.StringIO(text).readline))
    except (SyntaxError, ValueError, tokenize.TokenError):
        return Correction(text=text)
    operators = [token for token in tokens if token.type == tokenize.OP and token.string in _EQUALITY_OPERATORS]
    lines = io.StringIO(text).readlines()
    edits: list[tuple[tokenize.TokenInfo, str]] = []
    fixed: set[Position] = set()
    for comparison in _none_comparisons(tree):
        token = _operator_token(comparison, lines, operators)
        if token is None:
            continue
        edits.append((token, comparison.keyword))
        fixed.add((comparison.node.lineno, comparison.node.col_offset))
    # Right-to-left keeps earlier columns on the same line valid.
    for token, keyword in sorted(edits, key=lambda edit: edit[0].start, reverse=True):
        row = token.start[0] - 1
        lines[row] = _replace_operator(lines[row], token, keyword)
    return Correction(text="".join(lines), fixed=frozenset(fixed))


def check_lambda_assignment(context: CopContext) -> Iterator[Finding]:
    tree = context.source.tree
    if tree is None:
        return
    for node in ast.walk(tree):
        if isinstance(node, ast.Assign) and isinstance(node.value, ast.Lambda):
            yield Finding(
                line=node.lineno,
                column=node.col_offset,
                message="Do not assign a lambda expression, use a def.",
            )


STYLE_COPS: Final[tuple[Cop, ...]] = (
    Cop(
        name="Style/ComparisonToNone",
        description="Compare with None using `is` / `is not`.",
        check=check_comparison_to_none,
        correct=correct_comparison_to_none,
        requires_ast=True,
    ),
    Cop(
        name="Style/LambdaAssignment",
        description="Use def statements instead of assigning lambdas.",
        check=check_lambda_assignment,
        requires_ast=True,
    ),
)

__all__ = ["STYLE_COPS"]
