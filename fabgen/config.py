"""Configuration management for the artifact generator.

These settings shape how documents are rendered (image names, network name,
crypto material layout, YAML anchors). They never change which entities a
topology contains.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from fabgen.log_config import get_logger

logger = get_logger(__name__)


@dataclass
class OutputSettings:
    """Rendering options shared by all generated documents."""

    yaml_anchors: bool = True  # Reference shared organization blocks via anchors
    header_comments: bool = True  # Prefix each document with a generated-file comment


@dataclass
class ImageSettings:
    """Container images used by the orchestration document.

    Fabric images are ``<registry>/fabric-<component>:<network_version>``.
    """

    registry: str = "hyperledger"
    couchdb_image: str = "couchdb:3.1.1"


@dataclass
class OrchestrationSettings:
    """Container orchestration options."""

    network_name: str = "fabric"
    compose_version: str = "3.7"
    log_level: str = "INFO"  # FABRIC_LOGGING_SPEC for every node


@dataclass
class CryptoSettings:
    """Identity material layout.

    Paths are relative to the directory holding the generated documents.
    """

    root: str = "crypto-config"
    channel_artifacts: str = "channel-artifacts"
    users_per_org: int = 1
    enable_node_ous: bool = True


@dataclass
class GeneratorConfig:
    """Complete generator configuration.

    Every section is optional in the YAML file; missing sections fall back to
    their defaults.
    """

    output: OutputSettings = field(default_factory=OutputSettings)
    images: ImageSettings = field(default_factory=ImageSettings)
    orchestration: OrchestrationSettings = field(
        default_factory=OrchestrationSettings
    )
    crypto: CryptoSettings = field(default_factory=CryptoSettings)
    _source_path: Path | None = None

    @classmethod
    def from_yaml(cls, config_path: Path) -> GeneratorConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file.

        Returns:
            Parsed configuration object.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            ValueError: If configuration is invalid.
        """
        logger.info(f"Loading configuration from: {config_path}")

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in configuration: {e}")
            raise

        cfg = cls._from_dict(raw_config or {})
        cfg._source_path = Path(config_path)
        return cfg

    @classmethod
    def _from_dict(cls, config_dict: dict[str, Any]) -> GeneratorConfig:
        """Create configuration from dictionary.

        Args:
            config_dict: Raw configuration dictionary.

        Returns:
            Parsed configuration object.

        Raises:
            ValueError: On unknown sections or keys, or wrong value types.
        """
        if not isinstance(config_dict, dict):
            raise ValueError("Configuration must be a mapping")

        sections: dict[str, type] = {
            "output": OutputSettings,
            "images": ImageSettings,
            "orchestration": OrchestrationSettings,
            "crypto": CryptoSettings,
        }
        unknown = sorted(set(config_dict) - set(sections))
        if unknown:
            raise ValueError(f"Unknown configuration section(s): {', '.join(unknown)}")

        parsed: dict[str, Any] = {}
        for name, section_cls in sections.items():
            section_dict = config_dict.get(name) or {}
            if not isinstance(section_dict, dict):
                raise ValueError(f"'{name}' configuration section must be a mapping")
            parsed[name] = _build_section(name, section_cls, section_dict)

        cfg = cls(**parsed)
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.crypto.users_per_org < 0:
            raise ValueError("crypto.users_per_org must be non-negative")
        if not self.orchestration.network_name:
            raise ValueError("orchestration.network_name must not be empty")
        if not self.crypto.root:
            raise ValueError("crypto.root must not be empty")

    def summary(self) -> str:
        """Generate configuration summary string.

        Returns:
            Human-readable configuration summary.
        """
        lines = [
            "FABGEN CONFIGURATION",
            "=" * 60,
            "",
            "OUTPUT",
            "-" * 30,
            f"   YAML Anchors: {self.output.yaml_anchors}",
            f"   Header Comments: {self.output.header_comments}",
            "",
            "IMAGES",
            "-" * 30,
            f"   Registry: {self.images.registry}",
            f"   CouchDB Image: {self.images.couchdb_image}",
            "",
            "ORCHESTRATION",
            "-" * 30,
            f"   Network Name: {self.orchestration.network_name}",
            f"   Compose Version: {self.orchestration.compose_version}",
            f"   Log Level: {self.orchestration.log_level}",
            "",
            "CRYPTO MATERIAL",
            "-" * 30,
            f"   Root: {self.crypto.root}",
            f"   Channel Artifacts: {self.crypto.channel_artifacts}",
            f"   Users per Org: {self.crypto.users_per_org}",
            f"   Node OUs: {self.crypto.enable_node_ous}",
            "",
            "=" * 60,
        ]
        return "\n".join(lines)


def _build_section(name: str, section_cls: type, values: dict[str, Any]) -> Any:
    allowed = {f.name: f for f in fields(section_cls)}
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}' section: {', '.join(unknown)}")
    for key, value in values.items():
        default = allowed[key].default
        # Reject type mismatches against the default's type (bool is strict)
        if isinstance(default, bool) and not isinstance(value, bool):
            raise ValueError(f"'{name}.{key}' must be a boolean")
        if isinstance(default, int) and not isinstance(default, bool):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"'{name}.{key}' must be an integer")
        if isinstance(default, str) and not isinstance(value, str):
            raise ValueError(f"'{name}.{key}' must be a string")
    return section_cls(**values)
