"""Emptiness checks: organizations, orderers, peers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..results import ERROR, WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig


def check_emptiness(config: "NetworkConfig") -> list[ValidationResult]:
    """Flag a topology without organizations or orderers, and peerless orgs.

    Orderer-classified organizations are expected to have no peers and are
    not flagged.
    """
    results: list[ValidationResult] = []
    if not config.organizations:
        results.append(
            ValidationResult(
                ERROR,
                "orgs.empty",
                "at least one organization required",
                "add an organization",
            )
        )
    if not config.orderers:
        results.append(
            ValidationResult(
                ERROR,
                "orderers.empty",
                "at least one orderer required",
                "add an orderer",
            )
        )
    for org in config.organizations:
        if org.type == "orderer" or org.peers:
            continue
        results.append(
            ValidationResult(
                WARNING,
                "org.no_peers",
                f"organization '{org.name}' has no peers and cannot endorse or "
                "query the ledger",
                f"add at least one peer to '{org.name}'",
                (org.id,),
            )
        )
    return results
