# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration loading and the per-directory store."""

from __future__ import annotations

from pathlib import Path

import pytest

from pycop.config import Config, ConfigError, ConfigStore, load_config
from pycop.options import RunOptions
from pycop.severity import Severity


def test_load_config_reads_cop_sections(tmp_path: Path) -> None:
    path = tmp_path / ".pycop.toml"
    path.write_text(
        """
[all_cops]
run_framework_cops = true
exclude = ["generated/*"]

["cops"."Layout/LineLength"]
max = 120
severity = "W"

["cops"."Lint/Debugger"]
enabled = false
""".strip(),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.source == path
    assert config.all_cops.run_framework_cops
    assert config.all_cops.exclude == ["generated/*"]
    line_length = config.for_cop("Layout/LineLength")
    assert line_length.option("max") == 120
    assert line_length.severity is Severity.WARNING
    assert not config.for_cop("Lint/Debugger").enabled
    assert config.for_cop("Style/LambdaAssignment").enabled


def test_load_config_reads_pyproject_section(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text(
        """
[project]
name = "demo"

[tool.pycop.all_cops]
exclude = ["build_helpers.py"]
""".strip(),
        encoding="utf-8",
    )

    assert load_config(path).all_cops.exclude == ["build_helpers.py"]


@pytest.mark.parametrize(
    "content",
    [
        "all_cops = [",
        "[all_cops]\nunknown_key = 1\n",
        '["cops"."Layout/LineLength"]\nseverity = "loud"\n',
    ],
)
def test_load_config_wraps_errors(tmp_path: Path, content: str) -> None:
    path = tmp_path / ".pycop.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_store_shares_config_objects_per_file(tmp_path: Path) -> None:
    (tmp_path / ".pycop.toml").write_text("[all_cops]\nrun_framework_cops = true\n", encoding="utf-8")
    nested = tmp_path / "pkg" / "sub"
    nested.mkdir(parents=True)

    store = ConfigStore()
    top = store.for_file(tmp_path / "a.py")
    deep = store.for_file(nested / "b.py")

    assert top is deep
    assert top.all_cops.run_framework_cops


def test_store_prefers_nearest_config(tmp_path: Path) -> None:
    (tmp_path / ".pycop.toml").write_text("[all_cops]\nrun_framework_cops = true\n", encoding="utf-8")
    child = tmp_path / "child"
    child.mkdir()
    (child / "pyproject.toml").write_text("[tool.pycop.all_cops]\nrun_framework_cops = false\n", encoding="utf-8")

    store = ConfigStore()

    assert store.for_file(tmp_path / "a.py").all_cops.run_framework_cops
    assert not store.for_file(child / "b.py").all_cops.run_framework_cops


def test_store_skips_pyproject_without_section(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "pyproject.toml").write_text("[project]\nname = 'demo'\n", encoding="utf-8")
    (tmp_path / ".pycop.toml").write_text("[all_cops]\nrun_framework_cops = true\n", encoding="utf-8")

    assert ConfigStore().for_file(project / "a.py").all_cops.run_framework_cops


def test_store_override_applies_everywhere(tmp_path: Path) -> None:
    override = tmp_path / "custom.toml"
    override.write_text('["cops"."Lint/Debugger"]\nenabled = false\n', encoding="utf-8")
    (tmp_path / "other").mkdir()

    store = ConfigStore(override=override)

    first = store.for_file(tmp_path / "a.py")
    assert first is store.for_file(tmp_path / "other" / "b.py")
    assert not first.for_cop("Lint/Debugger").enabled


def test_store_without_config_file_uses_default(tmp_path: Path) -> None:
    (tmp_path / "pkg").mkdir()
    store = ConfigStore()

    config = store.for_file(tmp_path / "a.py")

    assert config is store.for_file(tmp_path / "pkg" / "b.py")
    assert config == Config()


def test_run_options_parse_fail_level_strings() -> None:
    assert RunOptions(fail_level="E").fail_level is Severity.ERROR
    assert RunOptions().formatters[0].key == "progress"
