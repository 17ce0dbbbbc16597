"""Naming utilities for stable identifiers.

Provides a single source of truth for the names derived from an
organization's display name (MSP identifier, DNS domain) and for the fully
qualified host names shared by every generated document.
"""

from __future__ import annotations

import re

DEFAULT_PARENT_DOMAIN = "example.com"

_DNS_LABEL_RE = re.compile(r"^[a-z0-9-]+$")


def derive_msp_id(name: str) -> str:
    """Return the membership service provider id for an organization name.

    Keeps only ASCII letters and digits (whitespace and punctuation are
    dropped, case is preserved) and appends ``MSP``.

    Args:
        name: Organization display name.

    Returns:
        MSP identifier (e.g., "Example Org" -> "ExampleOrgMSP").
    """
    if not isinstance(name, str):
        name = str(name)
    return re.sub(r"[^A-Za-z0-9]", "", name) + "MSP"


def derive_domain(name: str, parent: str = DEFAULT_PARENT_DOMAIN) -> str:
    """Return the default DNS domain for an organization name.

    Args:
        name: Organization display name.
        parent: Parent domain appended to the derived label.

    Returns:
        Domain string (e.g., "Org 1" -> "org1.example.com").
    """
    if not isinstance(name, str):
        name = str(name)
    label = re.sub(r"\s+", "", name.lower())
    label = re.sub(r"[^a-z0-9-]", "", label).strip("-")
    return f"{label}.{parent}" if label else parent


def dns_label(text: str) -> str:
    """Return a normalized DNS-label-safe form of ``text``.

    Rules:
    - Case-fold the string.
    - Replace whitespace, underscore and hyphen sequences with a single hyphen.
    - Remove any remaining characters except ``a-z``, ``0-9``, and ``-``.
    - Collapse duplicate hyphens and strip leading/trailing hyphens.
    - Truncate to 63 characters (DNS label limit).

    Args:
        text: Arbitrary human-entered name.

    Returns:
        Normalized label, possibly empty when nothing usable remains.
    """
    if not isinstance(text, str):
        text = str(text)
    lowered = text.casefold().strip()
    sep_norm = re.sub(r"[\s_\-]+", "-", lowered)
    cleaned = re.sub(r"[^a-z0-9-]", "", sep_norm)
    collapsed = re.sub(r"-+", "-", cleaned).strip("-")
    return collapsed[:63]


def is_dns_label(text: str) -> bool:
    """Return True when ``text`` is non-empty and only uses ``[a-z0-9-]``.

    The check is case-insensitive.
    """
    return bool(text) and bool(_DNS_LABEL_RE.match(text.casefold()))


def peer_host(peer_name: str, org_domain: str) -> str:
    """Fully qualified host name of a peer (``peer0.org1.example.com``)."""
    return f"{peer_name}.{org_domain}"


def orderer_host(orderer_name: str, orderer_domain: str) -> str:
    """Fully qualified host name of an orderer."""
    return f"{orderer_name}.{orderer_domain}"


def couchdb_host(peer_name: str, org_domain: str) -> str:
    """Host name of the CouchDB state database serving a peer."""
    return f"couchdb.{peer_host(peer_name, org_domain)}"
