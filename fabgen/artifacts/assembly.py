"""Artifact assembly orchestrator and YAML emission."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import yaml

from fabgen.config import GeneratorConfig
from fabgen.log_config import get_logger

from .consensus import build_consensus_document
from .identity import build_identity_document
from .layout import build_layout
from .orchestration import build_orchestration_document

if TYPE_CHECKING:  # pragma: no cover - import-time types only
    from fabgen.model import NetworkConfig

logger = get_logger(__name__)

CONSENSUS_FILE = "configtx.yaml"
IDENTITY_FILE = "crypto-config.yaml"
ORCHESTRATION_FILE = "docker-compose.yaml"

_HEADERS = {
    CONSENSUS_FILE: "Channel and orderer genesis configuration",
    IDENTITY_FILE: "Identity material specification",
    ORCHESTRATION_FILE: "Container orchestration for the network services",
}

_ANCHOR_SAFE_RE = re.compile(r"[^A-Za-z0-9_-]")


class _ArtifactDumper(yaml.SafeDumper):
    """Safe dumper naming anchors after the ``ID`` of the anchored mapping.

    Organization blocks are the only shared objects in generated documents,
    so their anchors read ``&Org1MSP`` instead of ``&id001``. Mappings
    without a usable ``ID`` keep the default numbering.
    """

    def generate_anchor(self, node):  # type: ignore[override]
        if isinstance(node, yaml.MappingNode):
            for key, value in node.value:
                if (
                    isinstance(key, yaml.ScalarNode)
                    and key.value == "ID"
                    and isinstance(value, yaml.ScalarNode)
                ):
                    name = _ANCHOR_SAFE_RE.sub("", value.value)
                    if name and name not in self.anchors.values():
                        return name
        return super().generate_anchor(node)


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):  # type: ignore[override]
        return True


def _emit_yaml(
    document: dict[str, Any],
    *,
    header: str | None = None,
    yaml_anchors: bool = True,
) -> str:
    dumper = _ArtifactDumper if yaml_anchors else _NoAliasDumper
    text = yaml.dump(
        document,
        Dumper=dumper,
        sort_keys=False,
        default_flow_style=False,
    )
    if header:
        text = f"# {header}\n# Generated by fabgen. Do not edit by hand.\n" + text
    return text


@dataclass(frozen=True)
class NetworkArtifacts:
    """Text of the three generated documents."""

    consensus_config: str
    identity_config: str
    orchestration_config: str

    def as_files(self) -> dict[str, str]:
        """Map conventional file names to document text."""
        return {
            CONSENSUS_FILE: self.consensus_config,
            IDENTITY_FILE: self.identity_config,
            ORCHESTRATION_FILE: self.orchestration_config,
        }


def compile_artifacts(
    config: "NetworkConfig", settings: GeneratorConfig | None = None
) -> NetworkArtifacts:
    """Compile a topology snapshot into the three network documents.

    Validation is not a precondition: a topology with findings still
    compiles, values verbatim. Output is a pure function of ``config`` and
    ``settings``: no timestamps, no random identifiers.

    Args:
        config: Topology snapshot. It is not modified.
        settings: Rendering options; defaults when omitted.

    Returns:
        The consensus, identity and orchestration documents.

    Raises:
        MalformedTopology: If the topology has no organization or no orderer.
    """
    settings = settings or GeneratorConfig()
    logger.info("Compiling network artifacts")

    layout = build_layout(config, settings.crypto)
    anchors = settings.output.yaml_anchors
    headers = settings.output.header_comments

    def emit(filename: str, document: dict[str, Any]) -> str:
        return _emit_yaml(
            document,
            header=_HEADERS[filename] if headers else None,
            yaml_anchors=anchors,
        )

    artifacts = NetworkArtifacts(
        consensus_config=emit(CONSENSUS_FILE, build_consensus_document(layout)),
        identity_config=emit(
            IDENTITY_FILE, build_identity_document(layout, settings.crypto)
        ),
        orchestration_config=emit(
            ORCHESTRATION_FILE, build_orchestration_document(layout, settings)
        ),
    )
    logger.info("Generated %d network documents", len(artifacts.as_files()))
    return artifacts
