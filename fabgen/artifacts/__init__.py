"""Network artifact generation subpackage."""

from __future__ import annotations

from .assembly import (
    CONSENSUS_FILE,
    IDENTITY_FILE,
    ORCHESTRATION_FILE,
    NetworkArtifacts,
    compile_artifacts,
)

__all__ = [
    "CONSENSUS_FILE",
    "IDENTITY_FILE",
    "ORCHESTRATION_FILE",
    "NetworkArtifacts",
    "compile_artifacts",
]
