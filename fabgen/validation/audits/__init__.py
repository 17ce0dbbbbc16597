"""Topology audits run by the validation pipeline."""

from __future__ import annotations

from .pipeline import AUDITS, run_audits

__all__ = ["AUDITS", "run_audits"]
