"""Validation finding value type and status helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

ERROR = "error"
WARNING = "warning"
INFO = "info"

SEVERITIES = (ERROR, WARNING, INFO)


@dataclass(frozen=True)
class ValidationResult:
    """One validator finding.

    Attributes:
        severity: ``error``, ``warning`` or ``info``.
        rule: Stable rule identifier (e.g. ``msp_id.duplicate``).
        message: Human-readable cause.
        fix: Optional remediation hint.
        subjects: Identities of the entities the finding cites.
    """

    severity: str
    rule: str
    message: str
    fix: str | None = None
    subjects: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(
                f"severity must be one of {list(SEVERITIES)}, got '{self.severity}'"
            )

    def __str__(self) -> str:
        text = f"[{self.severity}] {self.rule}: {self.message}"
        if self.fix:
            text += f" (suggestion: {self.fix})"
        return text


def has_errors(results: Iterable[ValidationResult]) -> bool:
    return any(r.severity == ERROR for r in results)


def has_warnings(results: Iterable[ValidationResult]) -> bool:
    return any(r.severity == WARNING for r in results)


def overall_status(results: Iterable[ValidationResult]) -> str:
    """Return ``"errors"``, ``"warnings"`` or ``"clean"`` for a result list.

    Info findings do not affect the status.
    """
    items = list(results)
    if has_errors(items):
        return "errors"
    if has_warnings(items):
        return "warnings"
    return "clean"
