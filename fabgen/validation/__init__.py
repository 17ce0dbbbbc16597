"""Topology validation package.

This package checks a topology for structural and referential problems
before any artifact is generated:

- Missing organizations or orderers, organizations without peers
- Duplicate MSP identifiers and port collisions in the global port namespace
- Consensus mode versus orderer count
- Batch size limits and batch timeout syntax
- Channel and consortium naming
- Duplicate peer names, orderer hosts and organization domains

Public API:
    - validate_topology
    - ValidationResult
    - has_errors, has_warnings, overall_status
"""

from __future__ import annotations

from .results import (
    ERROR,
    INFO,
    WARNING,
    ValidationResult,
    has_errors,
    has_warnings,
    overall_status,
)
from .topology import validate_topology

__all__ = [
    "ERROR",
    "INFO",
    "WARNING",
    "ValidationResult",
    "has_errors",
    "has_warnings",
    "overall_status",
    "validate_topology",
]
