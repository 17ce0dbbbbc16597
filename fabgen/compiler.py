"""Network artifact compiler facade.

Public entry points for compiling topologies live in ``fabgen.artifacts``.
This module re-exports them to keep the stable import path
``fabgen.compiler``.
"""

from __future__ import annotations

from fabgen.artifacts.assembly import (
    CONSENSUS_FILE,
    IDENTITY_FILE,
    ORCHESTRATION_FILE,
    NetworkArtifacts,
    compile_artifacts,
)
from fabgen.model import MalformedTopology

__all__ = [
    "compile_artifacts",
    "NetworkArtifacts",
    "MalformedTopology",
    "CONSENSUS_FILE",
    "IDENTITY_FILE",
    "ORCHESTRATION_FILE",
]
