"""Uniqueness checks over MSP identifiers and the global port namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..results import ERROR, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig, PortAssignment

MIN_PORT = 1
MAX_PORT = 65535


def check_msp_ids(config: "NetworkConfig") -> list[ValidationResult]:
    """Emit one error per MSP identifier shared by several organizations."""
    by_msp: dict[str, list] = {}
    for org in config.organizations:
        by_msp.setdefault(org.msp_id, []).append(org)

    results: list[ValidationResult] = []
    for msp_id, orgs in by_msp.items():
        if len(orgs) < 2:
            continue
        names = " and ".join(f"'{o.name}' ({o.id})" for o in orgs)
        results.append(
            ValidationResult(
                ERROR,
                "msp_id.duplicate",
                f"MSP ID '{msp_id}' is shared by organizations {names}",
                "rename one organization or set an explicit mspID",
                tuple(o.id for o in orgs),
            )
        )
    return results


def check_port_collisions(config: "NetworkConfig") -> list[ValidationResult]:
    """Emit one error per port bound more than once.

    Peer, CouchDB, chaincode and orderer ports share a single namespace, so a
    peer whose own ports coincide is flagged as well. CouchDB ports count
    even under LevelDB.
    """
    by_port: dict[int, list["PortAssignment"]] = {}
    for assignment in config.port_assignments(include_couchdb=True):
        by_port.setdefault(assignment.port, []).append(assignment)

    results: list[ValidationResult] = []
    for port, users in by_port.items():
        if len(users) < 2:
            continue
        subjects = tuple(dict.fromkeys(u.entity_id for u in users))
        results.append(
            ValidationResult(
                ERROR,
                "port.duplicate",
                f"port {port} is used by " + ", ".join(u.label for u in users),
                f"give each of the {len(users)} bindings of port {port} a distinct port",
                subjects,
            )
        )
    return results


def check_port_range(config: "NetworkConfig") -> list[ValidationResult]:
    """Flag ports outside the TCP range."""
    results: list[ValidationResult] = []
    for assignment in config.port_assignments(include_couchdb=True):
        if MIN_PORT <= assignment.port <= MAX_PORT:
            continue
        results.append(
            ValidationResult(
                ERROR,
                "port.out_of_range",
                f"{assignment.label} uses port {assignment.port}, outside "
                f"{MIN_PORT}-{MAX_PORT}",
                f"choose a port between {MIN_PORT} and {MAX_PORT}",
                (assignment.entity_id,),
            )
        )
    return results
