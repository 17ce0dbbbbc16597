"""Topology model for permissioned ledger networks.

Organizations own peers; orderers form the ordering service. ``NetworkConfig``
is the root object handed (as a snapshot) to the validator and the artifact
compiler. The camelCase dictionary form produced by ``to_dict`` is the
interchange format used by editing surfaces and topology files.
"""

from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

import yaml

from fabgen.log_config import get_logger
from fabgen.naming import derive_domain, derive_msp_id

logger = get_logger(__name__)

ORG_TYPES = ("peer", "orderer")
NODE_STATUSES = ("pending", "running", "stopped", "error")
CONSENSUS_TYPES = ("solo", "etcdraft")
STATE_DATABASES = ("CouchDB", "LevelDB")

DEFAULT_ORDERER_DOMAIN = "orderer.example.com"
DEFAULT_BATCH_TIMEOUT = "2s"
DEFAULT_MAX_MESSAGE_COUNT = 500
DEFAULT_ABSOLUTE_MAX_BYTES = 10_485_760
DEFAULT_PREFERRED_MAX_BYTES = 2_097_152


class MalformedTopology(ValueError):
    """Raised when a topology cannot be compiled at all.

    Only missing organizations or missing orderers block generation; every
    other problem is reported by the validator as a finding.
    """


class PortAssignment(NamedTuple):
    """One network port bound by an entity of the topology."""

    port: int
    kind: str  # "peer", "chaincode", "couchdb" or "orderer"
    entity_id: str
    label: str


def new_id() -> str:
    """Mint a fresh opaque entity identity."""
    return str(uuid.uuid4())


@dataclass
class Peer:
    """Peer node of an organization.

    ``status`` is informational only; the validator and compiler ignore it.
    """

    name: str
    port: int
    couchdb_port: int
    chaincode_port: int
    status: str = "pending"
    id: str = field(default_factory=new_id)


@dataclass
class BatchSize:
    """Block cutting limits of the ordering service."""

    max_message_count: int = DEFAULT_MAX_MESSAGE_COUNT
    absolute_max_bytes: int = DEFAULT_ABSOLUTE_MAX_BYTES
    preferred_max_bytes: int = DEFAULT_PREFERRED_MAX_BYTES


@dataclass
class Orderer:
    """Ordering node.

    Attributes:
        type: Consensus mode, ``solo`` or ``etcdraft``.
        batch_timeout: Duration string kept verbatim (e.g. ``"2s"``).
    """

    name: str
    port: int
    domain: str = DEFAULT_ORDERER_DOMAIN
    type: str = "etcdraft"
    batch_timeout: str = DEFAULT_BATCH_TIMEOUT
    batch_size: BatchSize = field(default_factory=BatchSize)
    status: str = "pending"
    id: str = field(default_factory=new_id)


@dataclass
class Organization:
    """Member organization.

    The MSP identifier is derived from ``name`` unless ``msp_id_override`` is
    set. ``domain`` is derived from ``name`` once, at construction, when not
    given explicitly.
    """

    name: str
    domain: str = ""
    type: str = "peer"
    peers: list[Peer] = field(default_factory=list)
    msp_id_override: str | None = None
    country: str = "US"
    state: str = "California"
    locality: str = "San Francisco"
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Fill in the derived domain."""
        if not self.domain:
            self.domain = derive_domain(self.name)

    @property
    def msp_id(self) -> str:
        """Effective MSP identifier."""
        if self.msp_id_override:
            return self.msp_id_override
        return derive_msp_id(self.name)


@dataclass
class NetworkConfig:
    """Root of the topology model."""

    organizations: list[Organization] = field(default_factory=list)
    orderers: list[Orderer] = field(default_factory=list)
    channel_name: str = "mychannel"
    consortium: str = "SampleConsortium"
    network_version: str = "2.0"
    state_database: str = "CouchDB"
    template: str | None = None

    def snapshot(self) -> NetworkConfig:
        """Return an independent deep copy of this topology."""
        return copy.deepcopy(self)

    @property
    def peer_organizations(self) -> list[Organization]:
        return [o for o in self.organizations if o.type != "orderer"]

    @property
    def orderer_organizations(self) -> list[Organization]:
        return [o for o in self.organizations if o.type == "orderer"]

    def port_assignments(self, *, include_couchdb: bool = True) -> list[PortAssignment]:
        """List every port bound by peers and orderers, in topology order.

        Args:
            include_couchdb: Whether CouchDB ports are included. The validator
                checks them regardless of the state database; the
                orchestration document only publishes them under CouchDB.
        """
        result: list[PortAssignment] = []
        for org in self.organizations:
            for peer in org.peers:
                where = f"peer '{peer.name}' of '{org.name}'"
                result.append(
                    PortAssignment(peer.port, "peer", peer.id, f"{where} (peer port)")
                )
                if include_couchdb:
                    result.append(
                        PortAssignment(
                            peer.couchdb_port,
                            "couchdb",
                            peer.id,
                            f"{where} (CouchDB port)",
                        )
                    )
                result.append(
                    PortAssignment(
                        peer.chaincode_port,
                        "chaincode",
                        peer.id,
                        f"{where} (chaincode port)",
                    )
                )
        for orderer in self.orderers:
            result.append(
                PortAssignment(
                    orderer.port,
                    "orderer",
                    orderer.id,
                    f"orderer '{orderer.name}' (orderer port)",
                )
            )
        return result

    def published_ports(self) -> set[int]:
        """Ports published by the orchestration document for this topology.

        Every configured port, except CouchDB ports under LevelDB, where no
        state database service exists.
        """
        return {
            a.port
            for a in self.port_assignments(
                include_couchdb=self.state_database == "CouchDB"
            )
        }

    # ------------------------------------------------------------------
    # Interchange format
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkConfig:
        """Create a topology from its camelCase dictionary form.

        Args:
            data: Parsed topology mapping.

        Returns:
            Topology object.

        Raises:
            ValueError: If required keys are missing or values have the wrong
                type or an unknown enumeration value.
        """
        if not isinstance(data, dict):
            raise ValueError("Topology must be a mapping")

        organizations = [
            _org_from_dict(o, f"organizations[{i}]")
            for i, o in enumerate(_list(data, "organizations", ""))
        ]
        orderers = [
            _orderer_from_dict(o, f"orderers[{i}]")
            for i, o in enumerate(_list(data, "orderers", ""))
        ]
        _check_unique_ids(organizations, orderers)

        state_db = str(data.get("stateDatabase", "CouchDB"))
        if state_db not in STATE_DATABASES:
            raise ValueError(
                f"stateDatabase: expected one of {list(STATE_DATABASES)}, got '{state_db}'"
            )

        template = data.get("template")
        if isinstance(template, dict):
            # Editing surfaces embed the whole template object
            template = template.get("name")

        return cls(
            organizations=organizations,
            orderers=orderers,
            channel_name=str(data.get("channelName", "") or ""),
            consortium=str(data.get("consortium", "") or ""),
            network_version=str(data.get("networkVersion", "2.0")),
            state_database=state_db,
            template=str(template) if template else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase dictionary form of this topology."""
        result: dict[str, Any] = {
            "organizations": [
                {
                    "id": org.id,
                    "name": org.name,
                    "domain": org.domain,
                    "mspID": org.msp_id,
                    "type": org.type,
                    "country": org.country,
                    "state": org.state,
                    "locality": org.locality,
                    "peers": [
                        {
                            "id": p.id,
                            "name": p.name,
                            "port": p.port,
                            "couchDBPort": p.couchdb_port,
                            "chaincodePort": p.chaincode_port,
                            "status": p.status,
                        }
                        for p in org.peers
                    ],
                }
                for org in self.organizations
            ],
            "orderers": [
                {
                    "id": o.id,
                    "name": o.name,
                    "domain": o.domain,
                    "port": o.port,
                    "status": o.status,
                    "type": o.type,
                    "batchTimeout": o.batch_timeout,
                    "batchSize": {
                        "maxMessageCount": o.batch_size.max_message_count,
                        "absoluteMaxBytes": o.batch_size.absolute_max_bytes,
                        "preferredMaxBytes": o.batch_size.preferred_max_bytes,
                    },
                }
                for o in self.orderers
            ],
            "channelName": self.channel_name,
            "consortium": self.consortium,
            "networkVersion": self.network_version,
            "stateDatabase": self.state_database,
        }
        if self.template:
            result["template"] = self.template
        return result


def _list(data: dict[str, Any], key: str, path: str) -> list[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{path}{key}: expected a list")
    return value


def _check_unique_ids(
    organizations: list[Organization], orderers: list[Orderer]
) -> None:
    """Raise ``ValueError`` when two entities share an identity."""
    seen: dict[str, str] = {}
    entries = []
    for i, org in enumerate(organizations):
        entries.append((org.id, f"organizations[{i}]"))
        for j, peer in enumerate(org.peers):
            entries.append((peer.id, f"organizations[{i}].peers[{j}]"))
    for i, orderer in enumerate(orderers):
        entries.append((orderer.id, f"orderers[{i}]"))
    for entity_id, path in entries:
        if entity_id in seen:
            raise ValueError(
                f"{path}.id: '{entity_id}' is already used by {seen[entity_id]}"
            )
        seen[entity_id] = path


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise ValueError(f"{path}: missing required '{key}'")
    return data[key]


def _as_int(value: Any, path: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValueError(f"{path}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{path}: expected an integer, got {value!r}") from exc


def _choice(value: Any, allowed: tuple[str, ...], path: str) -> str:
    text = str(value)
    if text not in allowed:
        raise ValueError(f"{path}: expected one of {list(allowed)}, got '{text}'")
    return text


def _peer_from_dict(data: Any, path: str) -> Peer:
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    port = _as_int(_require(data, "port", path), f"{path}.port")
    return Peer(
        id=str(data.get("id") or new_id()),
        name=str(_require(data, "name", path)),
        port=port,
        couchdb_port=_as_int(data.get("couchDBPort", 5984), f"{path}.couchDBPort"),
        chaincode_port=_as_int(
            data.get("chaincodePort", port + 1), f"{path}.chaincodePort"
        ),
        status=_choice(data.get("status", "pending"), NODE_STATUSES, f"{path}.status"),
    )


def _org_from_dict(data: Any, path: str) -> Organization:
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    name = str(_require(data, "name", path))
    msp_id = data.get("mspID")
    # A stored mspID equal to the derived one is not an override
    override = str(msp_id) if msp_id and str(msp_id) != derive_msp_id(name) else None
    peers = [
        _peer_from_dict(p, f"{path}.peers[{i}]")
        for i, p in enumerate(_list(data, "peers", f"{path}."))
    ]
    return Organization(
        id=str(data.get("id") or new_id()),
        name=name,
        domain=str(data.get("domain") or ""),
        type=_choice(data.get("type", "peer"), ORG_TYPES, f"{path}.type"),
        peers=peers,
        msp_id_override=override,
        country=str(data.get("country", "US")),
        state=str(data.get("state", "California")),
        locality=str(data.get("locality", "San Francisco")),
    )


def _orderer_from_dict(data: Any, path: str) -> Orderer:
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    batch = data.get("batchSize") or {}
    if not isinstance(batch, dict):
        raise ValueError(f"{path}.batchSize: expected a mapping")
    batch_size = BatchSize(
        max_message_count=_as_int(
            batch.get("maxMessageCount", DEFAULT_MAX_MESSAGE_COUNT),
            f"{path}.batchSize.maxMessageCount",
        ),
        absolute_max_bytes=_as_int(
            batch.get("absoluteMaxBytes", DEFAULT_ABSOLUTE_MAX_BYTES),
            f"{path}.batchSize.absoluteMaxBytes",
        ),
        preferred_max_bytes=_as_int(
            batch.get("preferredMaxBytes", DEFAULT_PREFERRED_MAX_BYTES),
            f"{path}.batchSize.preferredMaxBytes",
        ),
    )
    return Orderer(
        id=str(data.get("id") or new_id()),
        name=str(_require(data, "name", path)),
        domain=str(data.get("domain") or DEFAULT_ORDERER_DOMAIN),
        port=_as_int(_require(data, "port", path), f"{path}.port"),
        status=_choice(data.get("status", "pending"), NODE_STATUSES, f"{path}.status"),
        type=_choice(data.get("type", "etcdraft"), CONSENSUS_TYPES, f"{path}.type"),
        batch_timeout=str(data.get("batchTimeout", DEFAULT_BATCH_TIMEOUT)),
        batch_size=batch_size,
    )


def load_topology(path: Path) -> NetworkConfig:
    """Load a topology from a YAML or JSON file.

    Args:
        path: Topology file path.

    Returns:
        Parsed topology.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file content is not a valid topology.
    """
    path = Path(path)
    logger.info(f"Loading topology from: {path}")
    if not path.exists():
        raise FileNotFoundError(f"Topology file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in topology file {path}: {e}") from e

    return NetworkConfig.from_dict(raw or {})


def dump_topology(config: NetworkConfig, path: Path) -> None:
    """Write a topology to ``path`` (JSON for ``.json``, YAML otherwise)."""
    path = Path(path)
    data = config.to_dict()
    if path.suffix.lower() == ".json":
        text = json.dumps(data, indent=2) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    path.write_text(text, encoding="utf-8")
    logger.info(f"Wrote topology to: {path}")
