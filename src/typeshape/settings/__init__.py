# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Matching configuration loaded from YAML."""

from typeshape.settings.config import CONFIG_FILE_NAME, MatchConfig, MatchConfigError, load_match_config, parse_match_config

__all__ = ["CONFIG_FILE_NAME", "MatchConfig", "MatchConfigError", "load_match_config", "parse_match_config"]
