"""Top-level topology validation entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fabgen.log_config import get_logger, severity_level

from .audits import run_audits as _run_audits
from .results import ERROR, INFO, WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig

logger = get_logger(__name__)


def validate_topology(config: "NetworkConfig") -> list[ValidationResult]:
    """Validate a topology snapshot and return its findings.

    The call never raises and never modifies ``config``. Findings are
    returned in rule evaluation order, not severity order.

    Args:
        config: Topology snapshot.

    Returns:
        Ordered list of findings. Empty when the topology is clean.
    """
    results = _run_audits(config)

    for r in results:
        logger.log(severity_level(r.severity), "%s", r)
    logger.info(
        "Validation finished: %d error(s), %d warning(s), %d info",
        sum(r.severity == ERROR for r in results),
        sum(r.severity == WARNING for r in results),
        sum(r.severity == INFO for r in results),
    )
    return results
