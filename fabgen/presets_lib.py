"""Built-in network preset library.

Presets seed a new topology: organization names, peer counts, orderer count
and channel defaults. The catalog is a fixed tuple of frozen dataclasses;
nothing in it can be changed at runtime. ``instantiate_preset`` mints a fresh
``NetworkConfig`` (new identities every call) with deterministic ports.
"""

from __future__ import annotations

from dataclasses import dataclass

from fabgen.log_config import get_logger
from fabgen.model import (
    DEFAULT_ORDERER_DOMAIN,
    BatchSize,
    NetworkConfig,
    Orderer,
    Organization,
    Peer,
)

logger = get_logger(__name__)

# Ports are base + PORT_STRIDE * running index, one running index per entity
# kind. The bases differ modulo the stride, so ports can never collide.
PORT_STRIDE = 100
ORDERER_PORT_BASE = 7050
PEER_PORT_BASE = 7051
CHAINCODE_PORT_BASE = 7052
COUCHDB_PORT_BASE = 5984


@dataclass(frozen=True)
class TemplateOrganization:
    """Organization entry of a preset."""

    name: str
    peer_count: int
    type: str = "peer"


@dataclass(frozen=True)
class NetworkTemplate:
    """Named topology preset."""

    id: str
    name: str
    description: str
    organizations: tuple[TemplateOrganization, ...]
    orderer_count: int
    consensus_type: str = "etcdraft"
    channel_name: str = "mychannel"
    consortium: str = "SampleConsortium"
    state_database: str = "CouchDB"
    network_version: str = "2.0"

    @property
    def peer_count(self) -> int:
        return sum(o.peer_count for o in self.organizations)


_BUILTIN_PRESETS: tuple[NetworkTemplate, ...] = (
    NetworkTemplate(
        id="single-org-solo",
        name="Single Organization Solo",
        description=(
            "One organization with a single peer and a solo orderer. "
            "Development only: the ordering service is not fault tolerant."
        ),
        organizations=(
            TemplateOrganization("Org1", 1),
            TemplateOrganization("Orderer", 0, "orderer"),
        ),
        orderer_count=1,
        consensus_type="solo",
        state_database="LevelDB",
    ),
    NetworkTemplate(
        id="two-org-raft",
        name="Two-Organization Raft",
        description=(
            "Two organizations with two peers each and a three-node Raft "
            "ordering service tolerating one failed orderer."
        ),
        organizations=(
            TemplateOrganization("Org1", 2),
            TemplateOrganization("Org2", 2),
            TemplateOrganization("Orderer", 0, "orderer"),
        ),
        orderer_count=3,
    ),
    NetworkTemplate(
        id="three-org-raft",
        name="Three-Organization Raft",
        description=(
            "Three organizations with two peers each and a five-node Raft "
            "ordering service tolerating two failed orderers."
        ),
        organizations=(
            TemplateOrganization("Org1", 2),
            TemplateOrganization("Org2", 2),
            TemplateOrganization("Org3", 2),
            TemplateOrganization("Orderer", 0, "orderer"),
        ),
        orderer_count=5,
    ),
    NetworkTemplate(
        id="supply-chain",
        name="Supply Chain Consortium",
        description=(
            "Manufacturer, distributor and retailer sharing one channel, "
            "ordered by a three-node Raft cluster."
        ),
        organizations=(
            TemplateOrganization("Manufacturer", 2),
            TemplateOrganization("Distributor", 1),
            TemplateOrganization("Retailer", 1),
            TemplateOrganization("Orderer", 0, "orderer"),
        ),
        orderer_count=3,
        channel_name="supplychain",
        consortium="SupplyChainConsortium",
    ),
)


def list_presets() -> tuple[NetworkTemplate, ...]:
    """Return the preset catalog in display order."""
    return _BUILTIN_PRESETS


def get_preset(name: str) -> NetworkTemplate:
    """Look up a preset by display name or id.

    Raises:
        KeyError: If no preset matches. The catalog is fixed, so this is a
            caller bug rather than a recoverable condition.
    """
    for preset in _BUILTIN_PRESETS:
        if name in (preset.name, preset.id):
            return preset
    available = ", ".join(p.id for p in _BUILTIN_PRESETS)
    raise KeyError(f"Unknown preset '{name}'. Available: {available}")


def instantiate_preset(preset: NetworkTemplate) -> NetworkConfig:
    """Create a fresh topology from a preset.

    Every organization, peer and orderer gets a new identity. Ports follow
    the stride scheme above, indexed by a running counter per entity kind
    across the whole topology, so the result always passes the port
    uniqueness rule.

    Args:
        preset: Catalog entry from ``list_presets``.

    Returns:
        New topology replacing whatever the caller held before.

    Raises:
        TypeError: If ``preset`` is not a ``NetworkTemplate``.
    """
    if not isinstance(preset, NetworkTemplate):
        raise TypeError(
            f"instantiate_preset expects a NetworkTemplate, got {type(preset).__name__}"
        )

    organizations: list[Organization] = []
    peer_index = 0
    for entry in preset.organizations:
        peers: list[Peer] = []
        for i in range(entry.peer_count):
            offset = PORT_STRIDE * peer_index
            peers.append(
                Peer(
                    name=f"peer{i}",
                    port=PEER_PORT_BASE + offset,
                    couchdb_port=COUCHDB_PORT_BASE + offset,
                    chaincode_port=CHAINCODE_PORT_BASE + offset,
                )
            )
            peer_index += 1
        organizations.append(Organization(name=entry.name, type=entry.type, peers=peers))

    orderer_domain = next(
        (o.domain for o in organizations if o.type == "orderer"),
        DEFAULT_ORDERER_DOMAIN,
    )
    orderers = [
        Orderer(
            name=f"orderer{j}",
            domain=orderer_domain,
            port=ORDERER_PORT_BASE + PORT_STRIDE * j,
            type=preset.consensus_type,
            batch_size=BatchSize(),
        )
        for j in range(preset.orderer_count)
    ]

    logger.info(
        "Instantiated preset '%s': %d organizations, %d peers, %d orderers",
        preset.name,
        len(organizations),
        peer_index,
        len(orderers),
    )
    return NetworkConfig(
        organizations=organizations,
        orderers=orderers,
        channel_name=preset.channel_name,
        consortium=preset.consortium,
        network_version=preset.network_version,
        state_database=preset.state_database,
        template=preset.name,
    )
