"""Identity material specification document.

Describes, per organization, the certificate authority subject and the
hosts that need signed identities. Orderer organizations (declared or
implicit) go under ``OrdererOrgs``, together with any peers they list; every
other organization goes under ``PeerOrgs``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fabgen.log_config import get_logger
from fabgen.naming import orderer_host, peer_host

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.config import CryptoSettings
    from fabgen.model import Organization

    from .layout import NetworkLayout

logger = get_logger(__name__)


def _ca_block(org: "Organization") -> dict[str, Any]:
    return {
        "Hostname": "ca",
        "CommonName": f"ca.{org.domain}",
        "Country": org.country,
        "Province": org.state,
        "Locality": org.locality,
        "OrganizationalUnit": org.msp_id,
    }


def build_identity_document(
    layout: "NetworkLayout", crypto: "CryptoSettings"
) -> dict[str, Any]:
    """Build the identity material specification.

    Args:
        layout: Resolved network layout.
        crypto: Identity material settings.

    Returns:
        Mapping with ``OrdererOrgs`` and ``PeerOrgs`` lists.
    """
    orderer_orgs = []
    for group in layout.orderer_groups:
        org = group.organization
        orderer_orgs.append(
            {
                "Name": org.name,
                "Domain": org.domain,
                "EnableNodeOUs": crypto.enable_node_ous,
                "CA": _ca_block(org),
                "Specs": [
                    {
                        "Hostname": o.name,
                        "CommonName": orderer_host(o.name, o.domain),
                    }
                    for o in group.orderers
                ]
                + [
                    {"Hostname": p.name, "CommonName": peer_host(p.name, org.domain)}
                    for p in org.peers
                ],
            }
        )

    peer_orgs = []
    for org in layout.config.peer_organizations:
        peer_orgs.append(
            {
                "Name": org.name,
                "Domain": org.domain,
                "EnableNodeOUs": crypto.enable_node_ous,
                "CA": _ca_block(org),
                "Specs": [
                    {"Hostname": p.name, "CommonName": peer_host(p.name, org.domain)}
                    for p in org.peers
                ],
                "Users": {"Count": crypto.users_per_org},
            }
        )

    logger.info(
        "Identity document: %d orderer organizations, %d peer organizations",
        len(orderer_orgs),
        len(peer_orgs),
    )
    return {"OrdererOrgs": orderer_orgs, "PeerOrgs": peer_orgs}
