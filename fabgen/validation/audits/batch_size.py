"""Block cutting checks: batch size limits and batch timeout syntax."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..results import ERROR, WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig

# Go time.ParseDuration grammar, which the ordering service uses for BatchTimeout
_DURATION_RE = re.compile(r"^[-+]?(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+$")


def check_batch_sizes(config: "NetworkConfig") -> list[ValidationResult]:
    """Check each orderer's batch size limits."""
    results: list[ValidationResult] = []
    for orderer in config.orderers:
        bs = orderer.batch_size
        if bs.preferred_max_bytes > bs.absolute_max_bytes:
            results.append(
                ValidationResult(
                    ERROR,
                    "batch.preferred_exceeds_absolute",
                    f"orderer '{orderer.name}': preferredMaxBytes "
                    f"({bs.preferred_max_bytes}) exceeds absoluteMaxBytes "
                    f"({bs.absolute_max_bytes})",
                    "preferred max must not exceed absolute max",
                    (orderer.id,),
                )
            )
        if bs.max_message_count <= 0:
            results.append(
                ValidationResult(
                    ERROR,
                    "batch.max_message_count",
                    f"orderer '{orderer.name}': maxMessageCount must be positive, "
                    f"got {bs.max_message_count}",
                    "set maxMessageCount to a positive value such as 500",
                    (orderer.id,),
                )
            )
    return results


def check_batch_timeouts(config: "NetworkConfig") -> list[ValidationResult]:
    """Warn about batch timeouts the ordering service cannot parse."""
    results: list[ValidationResult] = []
    for orderer in config.orderers:
        timeout = orderer.batch_timeout
        if timeout == "0" or _DURATION_RE.match(timeout or ""):
            continue
        results.append(
            ValidationResult(
                WARNING,
                "batch.timeout_syntax",
                f"orderer '{orderer.name}': batch timeout '{timeout}' is not a "
                "valid duration",
                "use a duration such as '2s' or '500ms'",
                (orderer.id,),
            )
        )
    return results
