"""Pytest configuration and shared fixtures for fabgen tests."""

from __future__ import annotations

import pytest

from fabgen.model import BatchSize, NetworkConfig, Orderer, Organization, Peer


def make_peer(name: str, port: int, *, id: str | None = None) -> Peer:
    """Peer with the conventional CouchDB and chaincode ports for ``port``."""
    kwargs = {"id": id} if id else {}
    return Peer(
        name=name,
        port=port,
        couchdb_port=5984 + (port - 7051),
        chaincode_port=port + 1,
        **kwargs,
    )


@pytest.fixture
def peer_factory():
    """Factory for peers with conventional derived ports."""
    return make_peer


@pytest.fixture
def reference_topology() -> NetworkConfig:
    """Small fixed-identity topology pinned by the golden documents.

    One peer organization with one peer, one declared orderer organization
    and a single Raft orderer, CouchDB state database.
    """
    return NetworkConfig(
        organizations=[
            Organization(
                id="org-1",
                name="Org1",
                peers=[
                    Peer(
                        id="peer-1",
                        name="peer0",
                        port=7051,
                        couchdb_port=5984,
                        chaincode_port=7052,
                    )
                ],
            ),
            Organization(id="org-orderer", name="Orderer", type="orderer"),
        ],
        orderers=[
            Orderer(
                id="orderer-1",
                name="orderer0",
                port=7050,
                domain="orderer.example.com",
                type="etcdraft",
                batch_timeout="2s",
                batch_size=BatchSize(),
            )
        ],
        channel_name="mychannel",
        consortium="SampleConsortium",
        network_version="2.0",
        state_database="CouchDB",
    )


@pytest.fixture
def two_org_topology() -> NetworkConfig:
    """Two peer organizations, an orderer organization and three orderers."""
    return NetworkConfig(
        organizations=[
            Organization(
                name="Org1",
                peers=[make_peer("peer0", 7051), make_peer("peer1", 8051)],
            ),
            Organization(name="Org2", peers=[make_peer("peer0", 9051)]),
            Organization(name="Orderer", type="orderer"),
        ],
        orderers=[
            Orderer(name=f"orderer{i}", port=7050 + 1000 * i) for i in range(3)
        ],
    )


@pytest.fixture
def topology_dict() -> dict:
    """camelCase interchange form of a one-organization topology."""
    return {
        "organizations": [
            {
                "id": "o1",
                "name": "Example Org",
                "type": "peer",
                "peers": [
                    {
                        "id": "p1",
                        "name": "peer0",
                        "port": 7051,
                        "couchDBPort": 5984,
                        "chaincodePort": 7052,
                        "status": "running",
                    }
                ],
            }
        ],
        "orderers": [
            {
                "id": "ord1",
                "name": "orderer0",
                "domain": "orderer.example.com",
                "port": 7050,
                "type": "solo",
                "batchTimeout": "2s",
                "batchSize": {
                    "maxMessageCount": 10,
                    "absoluteMaxBytes": 99 * 1024 * 1024,
                    "preferredMaxBytes": 512 * 1024,
                },
            }
        ],
        "channelName": "mychannel",
        "consortium": "SampleConsortium",
        "networkVersion": "2.0",
        "stateDatabase": "LevelDB",
    }


@pytest.fixture
def generator_config_file(tmp_path):
    """Create a temporary generator configuration file for testing."""
    import yaml

    config_file = tmp_path / "fabgen.yml"
    with open(config_file, "w") as f:
        yaml.dump(
            {
                "output": {"yaml_anchors": False},
                "orchestration": {"network_name": "testnet"},
                "crypto": {"users_per_org": 2},
            },
            f,
            default_flow_style=False,
            indent=2,
        )
    return config_file


@pytest.fixture
def invalid_config_file(tmp_path):
    """Create an invalid YAML configuration file for testing."""
    config_file = tmp_path / "invalid_config.yml"
    config_file.write_text("invalid: yaml: content: [unclosed")
    return config_file
