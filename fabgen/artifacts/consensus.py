"""Consensus configuration document (channel and genesis profiles).

The document carries the member organization blocks, the ordering service
definition and two profiles: the orderer genesis profile and a channel
profile keyed by the topology's channel name. Organization blocks are built
once and referenced from every profile, so they serialize as YAML anchors
and aliases.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fabgen.log_config import get_logger
from fabgen.naming import orderer_host, peer_host

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import Orderer, Organization

    from .layout import NetworkLayout

logger = get_logger(__name__)

GENESIS_PROFILE = "OrdererGenesis"


def capability_key(network_version: str) -> str:
    """Return the capability flag for a network version (``"2.0"`` -> ``V2_0``)."""
    return "V" + str(network_version).replace(".", "_")


def _signature(rule: str) -> dict[str, str]:
    return {"Type": "Signature", "Rule": rule}


def _implicit_meta(rule: str) -> dict[str, str]:
    return {"Type": "ImplicitMeta", "Rule": rule}


def _member_policies(msp_id: str, *, orderer: bool) -> dict[str, Any]:
    if orderer:
        return {
            "Readers": _signature(f"OR('{msp_id}.member')"),
            "Writers": _signature(f"OR('{msp_id}.member')"),
            "Admins": _signature(f"OR('{msp_id}.admin')"),
        }
    return {
        "Readers": _signature(
            f"OR('{msp_id}.admin', '{msp_id}.peer', '{msp_id}.client')"
        ),
        "Writers": _signature(f"OR('{msp_id}.admin', '{msp_id}.client')"),
        "Admins": _signature(f"OR('{msp_id}.admin')"),
        "Endorsement": _signature(f"OR('{msp_id}.peer')"),
    }


def _organization_block(org: "Organization", layout: "NetworkLayout") -> dict[str, Any]:
    is_orderer = org.type == "orderer"
    block: dict[str, Any] = {
        "Name": org.msp_id,
        "ID": org.msp_id,
        "MSPDir": layout.org_msp_dir(org),
        "Policies": _member_policies(org.msp_id, orderer=is_orderer),
    }
    if is_orderer:
        group = layout.group_of(org)
        endpoints = [
            f"{orderer_host(o.name, o.domain)}:{o.port}"
            for o in (group.orderers if group else [])
        ]
        if endpoints:
            block["OrdererEndpoints"] = endpoints
    elif org.peers:
        anchor = org.peers[0]
        block["AnchorPeers"] = [
            {"Host": peer_host(anchor.name, org.domain), "Port": anchor.port}
        ]
    return block


def _channel_policies() -> dict[str, Any]:
    return {
        "Readers": _implicit_meta("ANY Readers"),
        "Writers": _implicit_meta("ANY Writers"),
        "Admins": _implicit_meta("MAJORITY Admins"),
    }


def _orderer_section(
    layout: "NetworkLayout", orderer_blocks: list[dict[str, Any]]
) -> dict[str, Any]:
    """Ordering service definition.

    Consensus mode and batch settings come from the first orderer; addresses
    and consenters list every orderer in topology order.
    """
    orderers: list["Orderer"] = layout.config.orderers
    lead = orderers[0]
    section: dict[str, Any] = {
        "OrdererType": lead.type,
        "Addresses": [f"{orderer_host(o.name, o.domain)}:{o.port}" for o in orderers],
    }
    if lead.type == "etcdraft":
        consenters = []
        for o in orderers:
            tls_cert = f"{layout.orderer_dir(o)}/tls/server.crt"
            consenters.append(
                {
                    "Host": orderer_host(o.name, o.domain),
                    "Port": o.port,
                    "ClientTLSCert": tls_cert,
                    "ServerTLSCert": tls_cert,
                }
            )
        section["EtcdRaft"] = {"Consenters": consenters}
    section["BatchTimeout"] = lead.batch_timeout
    section["BatchSize"] = {
        "MaxMessageCount": lead.batch_size.max_message_count,
        "AbsoluteMaxBytes": lead.batch_size.absolute_max_bytes,
        "PreferredMaxBytes": lead.batch_size.preferred_max_bytes,
    }
    section["Organizations"] = list(orderer_blocks)
    section["Policies"] = {
        **_channel_policies(),
        "BlockValidation": _implicit_meta("ANY Writers"),
    }
    section["Capabilities"] = {capability_key(layout.config.network_version): True}
    return section


def build_consensus_document(layout: "NetworkLayout") -> dict[str, Any]:
    """Build the consensus configuration document.

    Args:
        layout: Resolved network layout.

    Returns:
        Ordered mapping ready for YAML emission. Organization blocks are
        shared objects between ``Organizations`` and the profiles.
    """
    config = layout.config
    capability = capability_key(config.network_version)

    # Keyed by object identity: entity ids are not guaranteed unique
    blocks: dict[int, dict[str, Any]] = {}
    for org in layout.member_organizations:
        blocks[id(org)] = _organization_block(org, layout)

    orderer_blocks = [blocks[id(g.organization)] for g in layout.orderer_groups]
    peer_blocks = [blocks[id(org)] for org in config.peer_organizations]

    genesis = {
        "Policies": _channel_policies(),
        "Capabilities": {capability: True},
        "Orderer": _orderer_section(layout, orderer_blocks),
        "Consortiums": {
            config.consortium: {"Organizations": list(peer_blocks)},
        },
    }
    channel = {
        "Consortium": config.consortium,
        "Policies": _channel_policies(),
        "Capabilities": {capability: True},
        "Application": {
            "Organizations": list(peer_blocks),
            "Policies": {
                **_channel_policies(),
                "LifecycleEndorsement": _implicit_meta("MAJORITY Endorsement"),
                "Endorsement": _implicit_meta("MAJORITY Endorsement"),
            },
            "Capabilities": {capability: True},
        },
    }

    logger.info(
        "Consensus document: %d organizations, %d orderers (%s)",
        len(blocks),
        len(config.orderers),
        config.orderers[0].type,
    )
    return {
        "Organizations": list(blocks.values()),
        "Profiles": {
            GENESIS_PROFILE: genesis,
            config.channel_name: channel,
        },
    }
