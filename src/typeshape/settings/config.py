# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the typeshape matching configuration file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".typeshape.yaml"


class MatchConfigError(Exception):
    """Raised when a matching configuration file is invalid or cannot be loaded."""


@dataclass
class MatchConfig:
    """Settings applied when checking values from the command line.

    Attributes:
        exact_objects: Reject object members that the type does not declare.
        trace: Emit a debug log of every structural check.
        default_type: Artifact type checked when none is named explicitly.
    """

    exact_objects: bool = False
    trace: bool = False
    default_type: str | None = None


def load_match_config(path: Path) -> MatchConfig:
    """Load and parse a matching configuration file.

    Args:
        path: Path to the `.typeshape.yaml` file.

    Returns:
        A MatchConfig instance populated from the file.

    Raises:
        MatchConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MatchConfigError(f"Match config file not found: {path}") from None
    except OSError as exc:
        raise MatchConfigError(f"Cannot read match config file: {exc}") from exc

    return parse_match_config(text, source_label=str(path))


def parse_match_config(text: str, source_label: str = "<string>") -> MatchConfig:
    """Parse matching configuration YAML text.

    An empty document yields the defaults.

    Raises:
        MatchConfigError: If the YAML is invalid, a key is unknown or a value has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MatchConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return MatchConfig()
    if not isinstance(data, dict):
        raise MatchConfigError(f"{source_label}: match config must be a YAML mapping")

    unknown = sorted(str(key) for key in data if key not in _KNOWN_KEYS)
    if unknown:
        raise MatchConfigError(f"{source_label}: unknown field(s) {', '.join(repr(key) for key in unknown)}")

    default_type = data.get("default-type")
    if default_type is not None and not isinstance(default_type, str):
        raise MatchConfigError(f"{source_label}: 'default-type' must be a string")

    return MatchConfig(
        exact_objects=_optional_bool(data, "exact-objects", source_label),
        trace=_optional_bool(data, "trace", source_label),
        default_type=default_type,
    )


# ################
# Implementation
# ################

_KNOWN_KEYS = frozenset({"exact-objects", "trace", "default-type"})


def _optional_bool(mapping: dict[str, object], key: str, source_label: str) -> bool:
    """Extract an optional boolean field, defaulting to False."""
    value = mapping.get(key, False)
    if not isinstance(value, bool):
        raise MatchConfigError(f"{source_label}: '{key}' must be a boolean")
    return value
