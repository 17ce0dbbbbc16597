"""Audit pipeline orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from fabgen.log_config import get_logger

from ..results import ERROR, ValidationResult
from .batch_size import check_batch_sizes, check_batch_timeouts
from .consensus import check_consensus
from .emptiness import check_emptiness
from .identity import (
    check_domains,
    check_orderer_hosts,
    check_orderer_ownership,
    check_peer_names,
)
from .naming_checks import check_names
from .uniqueness import check_msp_ids, check_port_collisions, check_port_range

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig

logger = get_logger(__name__)

Audit = Callable[["NetworkConfig"], list[ValidationResult]]

# Evaluation order is part of the contract: results are reported in this order.
AUDITS: tuple[tuple[str, Audit], ...] = (
    ("emptiness", check_emptiness),
    ("msp id uniqueness", check_msp_ids),
    ("port uniqueness", check_port_collisions),
    ("consensus", check_consensus),
    ("batch size", check_batch_sizes),
    ("naming", check_names),
    ("peer names", check_peer_names),
    ("orderer hosts", check_orderer_hosts),
    ("domains", check_domains),
    ("port range", check_port_range),
    ("batch timeout", check_batch_timeouts),
    ("orderer ownership", check_orderer_ownership),
)


def run_audits(config: "NetworkConfig") -> list[ValidationResult]:
    """Run every audit in order and concatenate their findings.

    Stages:
      1) Emptiness (organizations, orderers, peers)
      2) MSP id uniqueness
      3) Port uniqueness across peers, CouchDB, chaincode and orderers
      4) Consensus sanity
      5) Batch size sanity
      6) Channel/consortium naming
      7) Peer name, orderer host and domain collisions
      8) Port range, batch timeout syntax, orderer ownership

    No stage short-circuits another. A stage that raises contributes a single
    ``internal`` error instead of aborting the run.
    """
    results: list[ValidationResult] = []
    for stage, audit in AUDITS:
        try:
            results.extend(audit(config))
        except Exception as e:
            logger.exception("%s audit failed", stage)
            results.append(
                ValidationResult(ERROR, "internal", f"{stage} audit failed: {e}")
            )
    return results
