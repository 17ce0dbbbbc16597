"""Orderer ownership resolution.

Orderers are not nested under an organization in the topology model, yet the
identity and consensus documents need an owning organization for each of
them. Ownership is resolved here, once, so every consumer agrees:

1. the first orderer-classified organization whose domain equals the
   orderer's domain;
2. otherwise the first orderer-classified organization;
3. otherwise an implicit organization synthesized per distinct orderer
   domain, named ``Orderer`` (then ``Orderer2``, ``Orderer3``, ...), skipping
   names whose MSP identifier is already taken.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fabgen.model import Orderer, Organization
from fabgen.naming import derive_msp_id

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig


@dataclass
class OrdererGroup:
    """An orderer organization together with the orderers it owns."""

    organization: Organization
    orderers: list[Orderer] = field(default_factory=list)
    implicit: bool = False


def resolve_orderer_membership(config: "NetworkConfig") -> list[OrdererGroup]:
    """Group orderers under their owning organizations.

    Declared orderer organizations come first, in topology order, even when
    they own no orderer; implicit organizations follow in order of first use.

    Args:
        config: Topology snapshot.

    Returns:
        Ordered list of groups. Orderers keep their topology order inside
        each group.
    """
    groups: list[OrdererGroup] = [
        OrdererGroup(organization=org) for org in config.orderer_organizations
    ]
    implicit_by_domain: dict[str, OrdererGroup] = {}
    taken = {org.msp_id for org in config.organizations}

    for orderer in config.orderers:
        owner = _declared_owner(groups, orderer)
        if owner is None:
            key = orderer.domain.lower()
            owner = implicit_by_domain.get(key)
            if owner is None:
                name = _implicit_name(taken)
                taken.add(derive_msp_id(name))
                owner = OrdererGroup(
                    organization=Organization(
                        id=f"implicit:{key}",
                        name=name,
                        domain=orderer.domain,
                        type="orderer",
                    ),
                    implicit=True,
                )
                implicit_by_domain[key] = owner
                groups.append(owner)
        owner.orderers.append(orderer)
    return groups


def _declared_owner(groups: list[OrdererGroup], orderer: Orderer) -> OrdererGroup | None:
    declared = [g for g in groups if not g.implicit]
    for group in declared:
        if group.organization.domain.lower() == orderer.domain.lower():
            return group
    return declared[0] if declared else None


def _implicit_name(taken: set[str]) -> str:
    n = 1
    while True:
        name = "Orderer" if n == 1 else f"Orderer{n}"
        if derive_msp_id(name) not in taken:
            return name
        n += 1
