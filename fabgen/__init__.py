"""Permissioned ledger network generator.

Validates network topologies (organizations, peers, orderers, channel
settings) and compiles them into the channel configuration, identity
material specification and container orchestration documents.
"""

from .compiler import MalformedTopology, NetworkArtifacts, compile_artifacts
from .config import GeneratorConfig
from .model import NetworkConfig, load_topology
from .presets_lib import instantiate_preset, list_presets
from .validation import ValidationResult, validate_topology

__version__ = "0.1.0"

__all__ = [
    "GeneratorConfig",
    "MalformedTopology",
    "NetworkArtifacts",
    "NetworkConfig",
    "ValidationResult",
    "compile_artifacts",
    "instantiate_preset",
    "list_presets",
    "load_topology",
    "validate_topology",
]
