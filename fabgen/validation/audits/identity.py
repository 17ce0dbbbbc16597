"""Identity collision checks: peer names, orderer hosts, domains, ownership.

Collisions here are warnings. The compiler keeps every colliding entity by
giving its service a suffixed name, so none of them blocks generation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fabgen.membership import resolve_orderer_membership
from fabgen.naming import orderer_host

from ..results import INFO, WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig


def check_peer_names(config: "NetworkConfig") -> list[ValidationResult]:
    """Peer names should be unique within their organization."""
    results: list[ValidationResult] = []
    for org in config.organizations:
        seen: dict[str, list] = {}
        for peer in org.peers:
            seen.setdefault(peer.name, []).append(peer)
        for name, peers in seen.items():
            if len(peers) < 2:
                continue
            results.append(
                ValidationResult(
                    WARNING,
                    "peer.duplicate_name",
                    f"organization '{org.name}' has {len(peers)} peers named '{name}'",
                    "rename the duplicate peers",
                    tuple(p.id for p in peers),
                )
            )
    return results


def check_orderer_hosts(config: "NetworkConfig") -> list[ValidationResult]:
    """Orderer host names (name + domain) should be unique."""
    seen: dict[str, list] = {}
    for orderer in config.orderers:
        host = orderer_host(orderer.name, orderer.domain).lower()
        seen.setdefault(host, []).append(orderer)
    results: list[ValidationResult] = []
    for host, orderers in seen.items():
        if len(orderers) < 2:
            continue
        results.append(
            ValidationResult(
                WARNING,
                "orderer.duplicate_host",
                f"{len(orderers)} orderers resolve to host '{host}'",
                "rename the duplicate orderers",
                tuple(o.id for o in orderers),
            )
        )
    return results


def check_domains(config: "NetworkConfig") -> list[ValidationResult]:
    """Organization domains should be unique.

    A group of organizations that also share one MSP ID is left to the
    ``msp_id.duplicate`` error.
    """
    seen: dict[str, list] = {}
    for org in config.organizations:
        seen.setdefault(org.domain.lower(), []).append(org)
    results: list[ValidationResult] = []
    for domain, orgs in seen.items():
        if len(orgs) < 2 or len({o.msp_id for o in orgs}) == 1:
            continue
        names = " and ".join(f"'{o.name}' ({o.id})" for o in orgs)
        results.append(
            ValidationResult(
                WARNING,
                "domain.duplicate",
                f"domain '{domain}' is shared by organizations {names}",
                "give each organization its own domain",
                tuple(o.id for o in orgs),
            )
        )
    return results


def check_orderer_ownership(config: "NetworkConfig") -> list[ValidationResult]:
    """Report orderers that will be placed under an implicit organization."""
    results: list[ValidationResult] = []
    for group in resolve_orderer_membership(config):
        if not group.implicit:
            continue
        org = group.organization
        names = ", ".join(f"'{o.name}'" for o in group.orderers)
        results.append(
            ValidationResult(
                INFO,
                "orderer.implicit_org",
                f"no orderer organization declared for domain '{org.domain}'; "
                f"orderers {names} are generated under implicit organization "
                f"'{org.name}' ({org.msp_id})",
                f"add an orderer organization with domain '{org.domain}'",
                tuple(o.id for o in group.orderers),
            )
        )
    return results
