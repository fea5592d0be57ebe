# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural matching of runtime values against types."""

from typeshape.matching.matcher import MatchOptions, matches_value

__all__ = ["MatchOptions", "matches_value"]
