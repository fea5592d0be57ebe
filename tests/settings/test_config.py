# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the matching configuration module."""

from pathlib import Path

import pytest

from typeshape.settings import (
    CONFIG_FILE_NAME,
    MatchConfig,
    MatchConfigError,
    load_match_config,
    parse_match_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a match config file and return its path."""
    config_file = tmp_path / CONFIG_FILE_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_empty_document_yields_defaults(tmp_path: Path) -> None:
    """An empty config file parses to the default MatchConfig."""
    config = load_match_config(_write_config(tmp_path, ""))

    assert config == MatchConfig()
    assert not config.exact_objects
    assert not config.trace
    assert config.default_type is None


def test_all_fields(tmp_path: Path) -> None:
    """Every known key is mapped onto its field."""
    content = """\
exact-objects: true
trace: true
default-type: Person
"""
    config = load_match_config(_write_config(tmp_path, content))

    assert config.exact_objects
    assert config.trace
    assert config.default_type == "Person"


def test_partial_config() -> None:
    """Missing keys keep their defaults."""
    config = parse_match_config("exact-objects: true\n")

    assert config.exact_objects
    assert not config.trace
    assert config.default_type is None


def test_comment_only_document() -> None:
    """A document holding only comments is empty."""
    assert parse_match_config("# nothing here\n") == MatchConfig()


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    """A missing config file raises MatchConfigError."""
    with pytest.raises(MatchConfigError, match="not found"):
        load_match_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    """Malformed YAML raises MatchConfigError naming the source."""
    config_file = _write_config(tmp_path, "exact-objects: [unclosed\n")

    with pytest.raises(MatchConfigError, match="Invalid YAML"):
        load_match_config(config_file)


def test_document_must_be_a_mapping() -> None:
    """A top-level list is rejected."""
    with pytest.raises(MatchConfigError, match="must be a YAML mapping"):
        parse_match_config("- exact-objects\n")


def test_unknown_key() -> None:
    """Unknown keys are reported by name."""
    with pytest.raises(MatchConfigError, match="unknown field\\(s\\) 'strict'"):
        parse_match_config("strict: true\n")


def test_non_boolean_flag() -> None:
    """Boolean keys reject other value types."""
    with pytest.raises(MatchConfigError, match="'trace' must be a boolean"):
        parse_match_config("trace: sometimes\n")


def test_non_string_default_type() -> None:
    """default-type must be a string."""
    with pytest.raises(MatchConfigError, match="'default-type' must be a string"):
        parse_match_config("default-type: 3\n")


def test_source_label_in_messages() -> None:
    """Errors name the source they were parsed from."""
    with pytest.raises(MatchConfigError, match="^custom.yaml: "):
        parse_match_config("trace: 1\n", source_label="custom.yaml")
