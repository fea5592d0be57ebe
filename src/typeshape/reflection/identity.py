# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Process-wide table giving nominal tokens a stable backreference identity.

The table is append only. The first token registered for an identity value
stays canonical for the lifetime of the process; later tokens carrying the
same identity resolve to it.
"""

from __future__ import annotations

import logging
import threading

from typeshape.model.format import InterfaceToken

# ###############
# Public Interface
# ###############


def register_token(token: InterfaceToken) -> InterfaceToken:
    """Register *token* if its identity is new and return the canonical token."""
    existing = _TOKENS.get(token.identity)
    if existing is not None:
        return existing
    with _LOCK:
        existing = _TOKENS.setdefault(token.identity, token)
    if existing is token and _log.isEnabledFor(logging.DEBUG):
        _log.debug("registered nominal token %r (%s)", token.name, token.identity)
    return existing


def lookup_token(identity: str) -> InterfaceToken | None:
    """Return the canonical token registered for *identity*, if any."""
    return _TOKENS.get(identity)


# ################
# Implementation
# ################

_log = logging.getLogger(__name__)

_LOCK = threading.Lock()
_TOKENS: dict[str, InterfaceToken] = {}
