"""Consensus sanity checks for the ordering service.

The ordering service runs in the mode of the first orderer; the remaining
orderers are expected to agree with it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fabgen.model import CONSENSUS_TYPES

from ..results import ERROR, WARNING, ValidationResult

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig


def check_consensus(config: "NetworkConfig") -> list[ValidationResult]:
    """Check orderer count against the consensus mode."""
    results: list[ValidationResult] = []
    orderers = config.orderers

    for orderer in orderers:
        if orderer.type not in CONSENSUS_TYPES:
            results.append(
                ValidationResult(
                    ERROR,
                    "consensus.unknown_type",
                    f"orderer '{orderer.name}' uses unknown consensus type "
                    f"'{orderer.type}'",
                    "use 'solo' or 'etcdraft'",
                    (orderer.id,),
                )
            )

    if not orderers:
        return results

    mode = orderers[0].type
    count = len(orderers)
    ids = tuple(o.id for o in orderers)

    if mode == "etcdraft" and count % 2 == 0:
        results.append(
            ValidationResult(
                WARNING,
                "raft.even_count",
                f"{count} etcdraft orderers: even orderer count cannot tolerate "
                "an equal split; prefer an odd count",
                f"add an orderer to reach {count + 1}",
                ids,
            )
        )
    if mode == "solo" and count > 1:
        results.append(
            ValidationResult(
                WARNING,
                "solo.multiple_orderers",
                f"{count} orderers configured: solo mode ignores all but the "
                "first orderer",
                "remove the extra orderers or switch to etcdraft",
                ids,
            )
        )

    divergent = [o for o in orderers[1:] if o.type != mode]
    if divergent:
        names = ", ".join(f"'{o.name}' ({o.type})" for o in divergent)
        results.append(
            ValidationResult(
                WARNING,
                "consensus.mixed",
                f"orderers disagree on consensus mode: {names} differ from "
                f"'{orderers[0].name}' ({mode}); '{mode}' is used",
                f"set every orderer to '{mode}'",
                tuple(o.id for o in divergent),
            )
        )
    return results
