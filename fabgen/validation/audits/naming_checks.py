"""Channel and consortium naming checks (warnings only)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fabgen.naming import dns_label, is_dns_label

from ..results import WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig


def _check_label(rule: str, what: str, value: str | None, example: str) -> list[ValidationResult]:
    if is_dns_label(value):
        return []
    suggestion = dns_label(value or "") or example
    if not value:
        message = f"{what} is empty"
    else:
        message = f"{what} '{value}' contains characters outside [a-z0-9-]"
    return [ValidationResult(WARNING, rule, message, f"use '{suggestion}'")]


def check_names(config: "NetworkConfig") -> list[ValidationResult]:
    """Check channel and consortium names are DNS-label safe."""
    return _check_label(
        "naming.channel", "channel name", config.channel_name, "mychannel"
    ) + _check_label(
        "naming.consortium", "consortium name", config.consortium, "sampleconsortium"
    )
