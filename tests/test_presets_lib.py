"""Tests for the built-in network preset library."""

from __future__ import annotations

import dataclasses

import pytest

from fabgen.presets_lib import (
    NetworkTemplate,
    get_preset,
    instantiate_preset,
    list_presets,
)
from fabgen.validation import has_errors, validate_topology


class TestPresetCatalog:
    def test_list_presets_returns_fixed_catalog(self):
        presets = list_presets()
        assert [p.name for p in presets] == [
            "Single Organization Solo",
            "Two-Organization Raft",
            "Three-Organization Raft",
            "Supply Chain Consortium",
        ]
        assert list_presets() is presets

    def test_presets_are_immutable(self):
        preset = list_presets()[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            preset.name = "Changed"  # type: ignore[misc]

    def test_every_preset_declares_an_orderer_organization(self):
        for preset in list_presets():
            assert any(o.type == "orderer" for o in preset.organizations), preset.id

    def test_get_preset_by_name_and_id(self):
        assert get_preset("two-org-raft") is get_preset("Two-Organization Raft")

    def test_get_preset_unknown_raises_key_error(self):
        with pytest.raises(KeyError, match="Available"):
            get_preset("four-org-pbft")


class TestInstantiatePreset:
    def test_two_org_raft_shape(self):
        config = instantiate_preset(get_preset("Two-Organization Raft"))
        assert [o.name for o in config.organizations] == ["Org1", "Org2", "Orderer"]
        assert [len(o.peers) for o in config.organizations] == [2, 2, 0]
        assert len(config.orderers) == 3
        assert {o.type for o in config.orderers} == {"etcdraft"}
        assert config.template == "Two-Organization Raft"

    def test_two_org_raft_validates_clean(self):
        config = instantiate_preset(get_preset("Two-Organization Raft"))
        results = validate_topology(config)
        assert [r for r in results if r.severity in ("error", "warning")] == []

    @pytest.mark.parametrize("preset", list_presets(), ids=lambda p: p.id)
    def test_every_preset_has_no_errors(self, preset: NetworkTemplate):
        config = instantiate_preset(preset)
        assert not has_errors(validate_topology(config))

    @pytest.mark.parametrize("preset", list_presets(), ids=lambda p: p.id)
    def test_ports_are_unique(self, preset: NetworkTemplate):
        config = instantiate_preset(preset)
        ports = [a.port for a in config.port_assignments()]
        assert len(ports) == len(set(ports))

    def test_port_scheme(self):
        config = instantiate_preset(get_preset("two-org-raft"))
        peers = [p for o in config.organizations for p in o.peers]
        assert [p.port for p in peers] == [7051, 7151, 7251, 7351]
        assert [p.chaincode_port for p in peers] == [7052, 7152, 7252, 7352]
        assert [p.couchdb_port for p in peers] == [5984, 6084, 6184, 6284]
        assert [o.port for o in config.orderers] == [7050, 7150, 7250]

    def test_orderers_share_orderer_org_domain(self):
        config = instantiate_preset(get_preset("supply-chain"))
        orderer_org = config.orderer_organizations[0]
        assert {o.domain for o in config.orderers} == {orderer_org.domain}
        assert config.channel_name == "supplychain"

    def test_fresh_identities_every_call(self):
        preset = get_preset("two-org-raft")
        first = instantiate_preset(preset)
        second = instantiate_preset(preset)
        assert first.organizations[0].id != second.organizations[0].id
        assert first.orderers[0].id != second.orderers[0].id
        assert first.organizations[0].peers[0].port == second.organizations[0].peers[0].port

    def test_solo_preset_uses_leveldb(self):
        config = instantiate_preset(get_preset("single-org-solo"))
        assert config.state_database == "LevelDB"
        assert [o.type for o in config.orderers] == ["solo"]

    def test_rejects_non_template(self):
        with pytest.raises(TypeError):
            instantiate_preset("two-org-raft")  # type: ignore[arg-type]
