"""Resolved network layout shared by all document builders.

The layout resolves what more than one document must agree on: orderer
ownership, crypto material paths and the service graph. Host names come from
``fabgen.naming``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import networkx as nx

from fabgen.log_config import get_logger
from fabgen.membership import OrdererGroup, resolve_orderer_membership
from fabgen.model import MalformedTopology
from fabgen.naming import couchdb_host, orderer_host, peer_host

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.config import CryptoSettings
    from fabgen.model import NetworkConfig, Orderer, Organization, Peer

logger = get_logger(__name__)


@dataclass
class NetworkLayout:
    """Topology snapshot plus the resolved orderer membership and graph."""

    config: "NetworkConfig"
    orderer_groups: list[OrdererGroup]
    graph: nx.DiGraph
    crypto_root: str

    @property
    def member_organizations(self) -> list["Organization"]:
        """Declared organizations in topology order, then implicit ones."""
        implicit = [g.organization for g in self.orderer_groups if g.implicit]
        return list(self.config.organizations) + implicit

    def group_of(self, org: "Organization") -> OrdererGroup | None:
        for group in self.orderer_groups:
            if group.organization is org:
                return group
        return None

    def owner_of(self, orderer: "Orderer") -> "Organization":
        for group in self.orderer_groups:
            if any(o is orderer for o in group.orderers):
                return group.organization
        raise KeyError(f"orderer '{orderer.name}' has no owning organization")

    # Crypto material paths, relative to the output directory

    def org_msp_dir(self, org: "Organization") -> str:
        return f"{self.crypto_root}/{_org_kind_dir(org)}/{org.domain}/msp"

    def peer_dir(self, org: "Organization", peer: "Peer") -> str:
        """Material directory of a peer.

        Peers of an orderer organization are issued by that organization's
        CA and land next to its orderers.
        """
        host = peer_host(peer.name, org.domain)
        nodes = "orderers" if org.type == "orderer" else "peers"
        return f"{self.crypto_root}/{_org_kind_dir(org)}/{org.domain}/{nodes}/{host}"

    def orderer_dir(self, orderer: "Orderer") -> str:
        owner = self.owner_of(orderer)
        host = orderer_host(orderer.name, orderer.domain)
        return f"{self.crypto_root}/ordererOrganizations/{owner.domain}/orderers/{host}"


def _org_kind_dir(org: "Organization") -> str:
    return "ordererOrganizations" if org.type == "orderer" else "peerOrganizations"


def _position(items: list, item: object) -> int | None:
    for i, candidate in enumerate(items):
        if candidate is item:
            return i
    return None


def check_compilable(config: "NetworkConfig") -> None:
    """Raise ``MalformedTopology`` when no document can be generated.

    Raises:
        MalformedTopology: If the topology has no organization or no orderer.
    """
    missing = []
    if not config.organizations:
        missing.append("at least one organization")
    if not config.orderers:
        missing.append("at least one orderer")
    if missing:
        logger.error("Cannot compile topology: %s required", " and ".join(missing))
        raise MalformedTopology(
            f"Cannot compile topology: {' and '.join(missing)} required"
        )


def build_service_graph(
    config: "NetworkConfig", orderer_groups: list[OrdererGroup]
) -> nx.DiGraph:
    """Construct the directed service graph.

    Nodes are keyed by position in the topology, not by entity identity:
    - ``("org", i)``: an organization's identity material (never a service);
      implicit orderer organizations use ``("org", id)``
    - ``("orderer", i)``, ``("peer", i, j)``, ``("couchdb", i, j)``: services,
      carrying ``host``, ``msp_id`` and ``order`` attributes

    Edges run from an organization to every service it owns and from a
    CouchDB service to the peer that uses it. ``order`` is the insertion
    index and breaks ties in the topological sort.
    """
    G = nx.DiGraph()
    counter = 0

    def add(node: tuple, **attrs: object) -> None:
        nonlocal counter
        G.add_node(node, order=counter, **attrs)
        counter += 1

    def org_node(org: "Organization") -> tuple:
        i = _position(config.organizations, org)
        node = ("org", org.id) if i is None else ("org", i)
        if node not in G:
            add(node, kind="org", msp_id=org.msp_id, domain=org.domain)
        return node

    for group in orderer_groups:
        org = group.organization
        owner = org_node(org)
        for orderer in group.orderers:
            node = ("orderer", _position(config.orderers, orderer))
            add(
                node,
                kind="orderer",
                host=orderer_host(orderer.name, orderer.domain),
                msp_id=org.msp_id,
                entity=orderer,
                org=org,
            )
            G.add_edge(owner, node)

    use_couchdb = config.state_database == "CouchDB"
    for i, org in enumerate(config.organizations):
        owner = org_node(org)
        for j, peer in enumerate(org.peers):
            peer_node = ("peer", i, j)
            if use_couchdb:
                db_node = ("couchdb", i, j)
                add(
                    db_node,
                    kind="couchdb",
                    host=couchdb_host(peer.name, org.domain),
                    msp_id=org.msp_id,
                    entity=peer,
                    org=org,
                )
                G.add_edge(owner, db_node)
            add(
                peer_node,
                kind="peer",
                host=peer_host(peer.name, org.domain),
                msp_id=org.msp_id,
                entity=peer,
                org=org,
            )
            G.add_edge(owner, peer_node)
            if use_couchdb:
                G.add_edge(db_node, peer_node)

    logger.info(
        "Service graph built: %d nodes, %d edges",
        G.number_of_nodes(),
        G.number_of_edges(),
    )
    return G


def service_order(G: nx.DiGraph) -> list[tuple]:
    """Return service nodes with every dependency before its dependents.

    Organization identity nodes precede the services they own and are
    dropped from the result.
    """
    ordered = nx.lexicographical_topological_sort(G, key=lambda n: G.nodes[n]["order"])
    return [n for n in ordered if G.nodes[n]["kind"] != "org"]


def build_layout(config: "NetworkConfig", crypto: "CryptoSettings") -> NetworkLayout:
    """Resolve ownership and build the service graph for ``config``.

    Raises:
        MalformedTopology: If the topology has no organization or no orderer.
    """
    check_compilable(config)
    groups = resolve_orderer_membership(config)
    graph = build_service_graph(config, groups)
    return NetworkLayout(
        config=config,
        orderer_groups=groups,
        graph=graph,
        crypto_root=crypto.root,
    )
