# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""JSON artifacts holding named descriptor graphs."""

from typeshape.wire.artifact import (
    ARTIFACT_FORMAT_VERSION,
    ArtifactError,
    deserialize,
    read_artifact,
    serialize,
    write_artifact,
)

__all__ = [
    "ARTIFACT_FORMAT_VERSION",
    "ArtifactError",
    "serialize",
    "deserialize",
    "write_artifact",
    "read_artifact",
]
