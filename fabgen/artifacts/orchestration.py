"""Container orchestration document.

One service per orderer, per peer and, under CouchDB, per peer state
database. Services are emitted in a topological order of the service graph,
so every state database precedes the peer that depends on it. Published
ports are exactly the topology's ports, CouchDB ports only under CouchDB; no
auxiliary services are added.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fabgen.log_config import get_logger

from .layout import service_order

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.config import GeneratorConfig
    from fabgen.model import Orderer, Organization, Peer

    from .layout import NetworkLayout

logger = get_logger(__name__)

COUCHDB_CONTAINER_PORT = 5984
COUCHDB_USER = "admin"
COUCHDB_PASSWORD = "adminpw"

_ORDERER_HOME = "/var/hyperledger/orderer"
_PEER_HOME = "/etc/hyperledger/fabric"


def _image(settings: "GeneratorConfig", component: str, version: str) -> str:
    return f"{settings.images.registry}/fabric-{component}:{version}"


def _orderer_service(
    layout: "NetworkLayout",
    settings: "GeneratorConfig",
    orderer: "Orderer",
    org: "Organization",
    host: str,
) -> dict[str, Any]:
    env = [
        f"FABRIC_LOGGING_SPEC={settings.orchestration.log_level}",
        "ORDERER_GENERAL_LISTENADDRESS=0.0.0.0",
        f"ORDERER_GENERAL_LISTENPORT={orderer.port}",
        f"ORDERER_GENERAL_LOCALMSPID={org.msp_id}",
        f"ORDERER_GENERAL_LOCALMSPDIR={_ORDERER_HOME}/msp",
        "ORDERER_GENERAL_TLS_ENABLED=true",
        f"ORDERER_GENERAL_TLS_PRIVATEKEY={_ORDERER_HOME}/tls/server.key",
        f"ORDERER_GENERAL_TLS_CERTIFICATE={_ORDERER_HOME}/tls/server.crt",
        f"ORDERER_GENERAL_TLS_ROOTCAS=[{_ORDERER_HOME}/tls/ca.crt]",
        "ORDERER_GENERAL_BOOTSTRAPMETHOD=file",
        f"ORDERER_GENERAL_BOOTSTRAPFILE={_ORDERER_HOME}/orderer.genesis.block",
    ]
    if orderer.type == "etcdraft":
        env += [
            f"ORDERER_GENERAL_CLUSTER_CLIENTCERTIFICATE={_ORDERER_HOME}/tls/server.crt",
            f"ORDERER_GENERAL_CLUSTER_CLIENTPRIVATEKEY={_ORDERER_HOME}/tls/server.key",
            f"ORDERER_GENERAL_CLUSTER_ROOTCAS=[{_ORDERER_HOME}/tls/ca.crt]",
        ]
    material = f"./{layout.orderer_dir(orderer)}"
    genesis = f"./{settings.crypto.channel_artifacts}/genesis.block"
    return {
        "container_name": host,
        "image": _image(settings, "orderer", layout.config.network_version),
        "environment": env,
        "working_dir": "/opt/gopath/src/github.com/hyperledger/fabric",
        "command": "orderer",
        "volumes": [
            f"{genesis}:{_ORDERER_HOME}/orderer.genesis.block",
            f"{material}/msp:{_ORDERER_HOME}/msp",
            f"{material}/tls:{_ORDERER_HOME}/tls",
            f"{host}:/var/hyperledger/production/orderer",
        ],
        "ports": [f"{orderer.port}:{orderer.port}"],
        "networks": [settings.orchestration.network_name],
    }


def _couchdb_service(
    settings: "GeneratorConfig", peer: "Peer", host: str
) -> dict[str, Any]:
    return {
        "container_name": host,
        "image": settings.images.couchdb_image,
        "environment": [
            f"COUCHDB_USER={COUCHDB_USER}",
            f"COUCHDB_PASSWORD={COUCHDB_PASSWORD}",
        ],
        "ports": [f"{peer.couchdb_port}:{COUCHDB_CONTAINER_PORT}"],
        "networks": [settings.orchestration.network_name],
    }


def _peer_service(
    layout: "NetworkLayout",
    settings: "GeneratorConfig",
    peer: "Peer",
    org: "Organization",
    host: str,
    couchdb: str | None,
) -> dict[str, Any]:
    network = settings.orchestration.network_name
    env = [
        f"FABRIC_LOGGING_SPEC={settings.orchestration.log_level}",
        "CORE_VM_ENDPOINT=unix:///host/var/run/docker.sock",
        f"CORE_VM_DOCKER_HOSTCONFIG_NETWORKMODE={network}",
        f"CORE_PEER_ID={host}",
        f"CORE_PEER_ADDRESS={host}:{peer.port}",
        f"CORE_PEER_LISTENADDRESS=0.0.0.0:{peer.port}",
        f"CORE_PEER_CHAINCODEADDRESS={host}:{peer.chaincode_port}",
        f"CORE_PEER_CHAINCODELISTENADDRESS=0.0.0.0:{peer.chaincode_port}",
        f"CORE_PEER_GOSSIP_BOOTSTRAP={host}:{peer.port}",
        f"CORE_PEER_GOSSIP_EXTERNALENDPOINT={host}:{peer.port}",
        f"CORE_PEER_LOCALMSPID={org.msp_id}",
        f"CORE_PEER_MSPCONFIGPATH={_PEER_HOME}/msp",
        "CORE_PEER_TLS_ENABLED=true",
        f"CORE_PEER_TLS_CERT_FILE={_PEER_HOME}/tls/server.crt",
        f"CORE_PEER_TLS_KEY_FILE={_PEER_HOME}/tls/server.key",
        f"CORE_PEER_TLS_ROOTCERT_FILE={_PEER_HOME}/tls/ca.crt",
    ]
    if couchdb:
        env += [
            "CORE_LEDGER_STATE_STATEDATABASE=CouchDB",
            f"CORE_LEDGER_STATE_COUCHDBCONFIG_COUCHDBADDRESS={couchdb}:{COUCHDB_CONTAINER_PORT}",
            f"CORE_LEDGER_STATE_COUCHDBCONFIG_USERNAME={COUCHDB_USER}",
            f"CORE_LEDGER_STATE_COUCHDBCONFIG_PASSWORD={COUCHDB_PASSWORD}",
        ]
    else:
        env.append("CORE_LEDGER_STATE_STATEDATABASE=goleveldb")

    material = f"./{layout.peer_dir(org, peer)}"
    service: dict[str, Any] = {
        "container_name": host,
        "image": _image(settings, "peer", layout.config.network_version),
        "environment": env,
        "working_dir": "/opt/gopath/src/github.com/hyperledger/fabric/peer",
        "command": "peer node start",
        "volumes": [
            "/var/run/docker.sock:/host/var/run/docker.sock",
            f"{material}/msp:{_PEER_HOME}/msp",
            f"{material}/tls:{_PEER_HOME}/tls",
            f"{host}:/var/hyperledger/production",
        ],
        "ports": [
            f"{peer.port}:{peer.port}",
            f"{peer.chaincode_port}:{peer.chaincode_port}",
        ],
    }
    if couchdb:
        service["depends_on"] = [couchdb]
    service["networks"] = [network]
    return service


def _service_name(host: str, taken: dict[str, Any]) -> str:
    """Return ``host``, or ``host-2``, ``host-3``... when already taken."""
    name = host
    n = 2
    while name in taken:
        name = f"{host}-{n}"
        n += 1
    return name


def build_orchestration_document(
    layout: "NetworkLayout", settings: "GeneratorConfig"
) -> dict[str, Any]:
    """Build the container orchestration document.

    Services are named after their host. Entities that resolve to the same
    host keep their own service under a numbered name, so every peer and
    orderer publishes its ports.

    Args:
        layout: Resolved network layout.
        settings: Generator configuration (images, network name, paths).

    Returns:
        Ordered mapping ready for YAML emission.
    """
    G = layout.graph
    services: dict[str, Any] = {}
    volumes: dict[str, Any] = {}
    names: dict[tuple, str] = {}

    for node in service_order(G):
        attrs = G.nodes[node]
        kind = attrs["kind"]
        name = _service_name(attrs["host"], services)
        names[node] = name
        if kind == "orderer":
            services[name] = _orderer_service(
                layout, settings, attrs["entity"], attrs["org"], name
            )
            volumes[name] = {}
        elif kind == "couchdb":
            services[name] = _couchdb_service(settings, attrs["entity"], name)
        elif kind == "peer":
            couchdb = names.get(("couchdb", *node[1:]))
            services[name] = _peer_service(
                layout, settings, attrs["entity"], attrs["org"], name, couchdb
            )
            volumes[name] = {}
        else:
            raise ValueError(f"Unknown service kind '{kind}' for node {node!r}")

    network = settings.orchestration.network_name
    logger.info("Orchestration document: %d services", len(services))
    return {
        "version": settings.orchestration.compose_version,
        "volumes": volumes,
        "networks": {network: {"name": network}},
        "services": services,
    }
