"""Tests for the topology model and its interchange format."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fabgen.model import (
    NetworkConfig,
    Orderer,
    Organization,
    dump_topology,
    load_topology,
)


class TestOrganization:
    def test_domain_and_msp_id_are_derived(self) -> None:
        org = Organization(name="Example Org")
        assert org.domain == "exampleorg.example.com"
        assert org.msp_id == "ExampleOrgMSP"

    def test_explicit_domain_is_kept(self) -> None:
        org = Organization(name="Org1", domain="org1.acme.io")
        assert org.domain == "org1.acme.io"

    def test_msp_id_override_wins(self) -> None:
        org = Organization(name="Org1", msp_id_override="CustomMSP")
        assert org.msp_id == "CustomMSP"

    def test_domain_is_not_rederived_on_rename(self) -> None:
        org = Organization(name="Org1")
        org.name = "Renamed"
        assert org.domain == "org1.example.com"
        assert org.msp_id == "RenamedMSP"

    def test_identities_are_unique(self) -> None:
        assert Organization(name="A").id != Organization(name="A").id


class TestNetworkConfig:
    def test_defaults(self) -> None:
        config = NetworkConfig()
        assert config.channel_name == "mychannel"
        assert config.consortium == "SampleConsortium"
        assert config.network_version == "2.0"
        assert config.state_database == "CouchDB"
        assert config.organizations == []
        assert config.orderers == []

    def test_snapshot_is_independent(self, reference_topology) -> None:
        snap = reference_topology.snapshot()
        snap.organizations[0].peers[0].port = 9999
        snap.orderers.append(Orderer(name="orderer1", port=8050))
        assert reference_topology.organizations[0].peers[0].port == 7051
        assert len(reference_topology.orderers) == 1

    def test_organization_partitions(self, reference_topology) -> None:
        assert [o.name for o in reference_topology.peer_organizations] == ["Org1"]
        assert [o.name for o in reference_topology.orderer_organizations] == [
            "Orderer"
        ]

    def test_port_assignments_cover_every_port(self, reference_topology) -> None:
        assignments = reference_topology.port_assignments()
        assert [(a.port, a.kind) for a in assignments] == [
            (7051, "peer"),
            (5984, "couchdb"),
            (7052, "chaincode"),
            (7050, "orderer"),
        ]
        assert "peer 'peer0' of 'Org1'" in assignments[0].label

    def test_published_ports_skip_couchdb_under_leveldb(
        self, reference_topology
    ) -> None:
        assert reference_topology.published_ports() == {7050, 7051, 7052, 5984}
        reference_topology.state_database = "LevelDB"
        assert reference_topology.published_ports() == {7050, 7051, 7052}

    def test_published_ports_include_orderer_organization_peers(
        self, reference_topology, peer_factory
    ) -> None:
        reference_topology.organizations[1].peers.append(peer_factory("peer9", 9051))
        assert reference_topology.published_ports() == {
            7050, 7051, 7052, 5984, 9051, 9052, 7984,
        }


class TestInterchange:
    def test_from_dict(self, topology_dict) -> None:
        config = NetworkConfig.from_dict(topology_dict)
        org = config.organizations[0]
        assert org.id == "o1"
        assert org.msp_id == "ExampleOrgMSP"
        assert org.msp_id_override is None
        assert org.domain == "exampleorg.example.com"
        peer = org.peers[0]
        assert (peer.port, peer.couchdb_port, peer.chaincode_port) == (
            7051,
            5984,
            7052,
        )
        assert peer.status == "running"
        orderer = config.orderers[0]
        assert orderer.type == "solo"
        assert orderer.batch_size.max_message_count == 10
        assert config.state_database == "LevelDB"

    def test_round_trip_preserves_identity(self, topology_dict) -> None:
        config = NetworkConfig.from_dict(topology_dict)
        again = NetworkConfig.from_dict(config.to_dict())
        assert again == config

    def test_explicit_msp_id_becomes_override(self, topology_dict) -> None:
        topology_dict["organizations"][0]["mspID"] = "AcmeMSP"
        config = NetworkConfig.from_dict(topology_dict)
        assert config.organizations[0].msp_id == "AcmeMSP"

    def test_template_object_is_reduced_to_name(self, topology_dict) -> None:
        topology_dict["template"] = {"id": "x", "name": "Two-Organization Raft"}
        config = NetworkConfig.from_dict(topology_dict)
        assert config.template == "Two-Organization Raft"

    def test_missing_required_key_names_path(self, topology_dict) -> None:
        del topology_dict["organizations"][0]["peers"][0]["port"]
        with pytest.raises(ValueError, match=r"organizations\[0\]\.peers\[0\]"):
            NetworkConfig.from_dict(topology_dict)

    def test_unknown_enum_value_rejected(self, topology_dict) -> None:
        topology_dict["orderers"][0]["type"] = "kafka"
        with pytest.raises(ValueError, match="orderers\\[0\\].type"):
            NetworkConfig.from_dict(topology_dict)

    def test_non_integer_port_rejected(self, topology_dict) -> None:
        topology_dict["orderers"][0]["port"] = "seventy"
        with pytest.raises(ValueError, match="expected an integer"):
            NetworkConfig.from_dict(topology_dict)

    def test_duplicate_identity_rejected(self, topology_dict) -> None:
        topology_dict["orderers"][0]["id"] = "p1"
        with pytest.raises(
            ValueError,
            match=r"orderers\[0\]\.id: 'p1' is already used by organizations\[0\]\.peers\[0\]",
        ):
            NetworkConfig.from_dict(topology_dict)

    def test_duplicate_peer_identity_rejected(self, topology_dict) -> None:
        peers = topology_dict["organizations"][0]["peers"]
        peers.append(dict(peers[0], name="peer1", port=8051))
        with pytest.raises(ValueError, match=r"organizations\[0\]\.peers\[1\]\.id"):
            NetworkConfig.from_dict(topology_dict)

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            NetworkConfig.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]


class TestTopologyFiles:
    def test_yaml_dump_and_load(self, tmp_path: Path, reference_topology) -> None:
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        assert load_topology(path) == reference_topology

    def test_json_dump_and_load(self, tmp_path: Path, reference_topology) -> None:
        path = tmp_path / "topology.json"
        dump_topology(reference_topology, path)
        data = json.loads(path.read_text())
        assert data["channelName"] == "mychannel"
        assert load_topology(path) == reference_topology

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_topology(tmp_path / "nope.yml")

    def test_invalid_yaml(self, invalid_config_file: Path) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_topology(invalid_config_file)
