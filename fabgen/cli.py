"""Command line interface for network topology validation and generation."""

from __future__ import annotations

import argparse
import io
import sys
import time
from contextlib import contextmanager, redirect_stdout
from pathlib import Path

from fabgen.config import GeneratorConfig
from fabgen.log_config import get_logger
from fabgen.model import MalformedTopology, NetworkConfig

logger = get_logger(__name__)

_SEVERITY_ICONS = {"error": "❌", "warning": "⚠️ ", "info": "ℹ️ "}


@contextmanager
def Timer(description: str):
    """Context manager for timing operations with both print and log output.

    Args:
        description: Operation description for timing messages.

    Yields:
        None: Context manager yields nothing.
    """
    print(f"🔄 {description}...")
    logger.info(f"Starting {description}")
    start = time.time()
    try:
        yield
        elapsed = time.time() - start
        print(f"✅ {description} (completed in {elapsed:.1f}s)")
        logger.info(f"Completed {description} in {elapsed:.1f}s")
    except Exception as e:
        elapsed = time.time() - start
        print(f"❌ {description} (failed after {elapsed:.1f}s)")
        logger.error(f"Failed {description} after {elapsed:.1f}s: {e}")
        raise


def _load_config(config_path: Path | None) -> GeneratorConfig:
    """Load and validate generator configuration.

    Args:
        config_path: Path to YAML configuration file, or None for defaults.

    Returns:
        Loaded and validated configuration object.

    Raises:
        SystemExit: If configuration loading or validation fails.
    """
    if config_path is None:
        return GeneratorConfig()
    try:
        config = GeneratorConfig.from_yaml(config_path)
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except FileNotFoundError:
        print(f"❌ Configuration file not found: {config_path}")
        logger.error(f"Configuration file not found: {config_path}")
        sys.exit(2)  # Config problem
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"❌ Configuration error: {e}")
        print(f"💡 Check YAML syntax in: {config_path}")
        sys.exit(2)  # Config problem


def _load_topology(topology_path: Path) -> NetworkConfig:
    """Load a topology file or exit with code 2."""
    from fabgen.model import load_topology

    try:
        return load_topology(topology_path)
    except FileNotFoundError:
        print(f"❌ Topology file not found: {topology_path}")
        print("💡 Create one with: fabgen init two-org-raft -o topology.yml")
        logger.error(f"Topology file not found: {topology_path}")
        sys.exit(2)
    except ValueError as e:
        logger.error(f"Invalid topology: {e}")
        print(f"❌ Topology error: {e}")
        sys.exit(2)


def _print_findings(results) -> None:
    for r in results:
        print(f"{_SEVERITY_ICONS.get(r.severity, '-')} {r}")


def presets_command(args: argparse.Namespace) -> None:
    """List the built-in network presets.

    Args:
        args: Parsed command line arguments (unused).
    """
    from fabgen.presets_lib import list_presets

    print("Network Presets")
    print("=" * 50)
    for preset in list_presets():
        print(f"{preset.id}: {preset.name}")
        print(f"   {preset.description}")
        print(
            f"   Organizations: {len(preset.organizations)}, "
            f"Peers: {preset.peer_count}, "
            f"Orderers: {preset.orderer_count} ({preset.consensus_type})"
        )


def init_command(args: argparse.Namespace) -> None:
    """Write a new topology file instantiated from a preset.

    Args:
        args: Parsed command line arguments with preset name and output path.
    """
    from fabgen.model import dump_topology
    from fabgen.presets_lib import get_preset, instantiate_preset

    try:
        preset = get_preset(args.preset)
    except KeyError as e:
        print(f"❌ {e.args[0]}")
        sys.exit(2)

    output_path = Path(args.output)
    if output_path.exists() and not args.force:
        print(f"❌ Refusing to overwrite existing file: {output_path}")
        print("💡 Use --force to replace it")
        sys.exit(2)

    try:
        config = instantiate_preset(preset)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        dump_topology(config, output_path)
    except Exception as e:
        logger.error(f"Failed to write topology: {e}")
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    print(f"🎉 Created topology '{preset.name}': {output_path}")
    print(f"🔗 Next: fabgen check {output_path}")


def check_command(args: argparse.Namespace) -> None:
    """Validate a topology file and print findings.

    Args:
        args: Parsed command line arguments containing the topology path.
    """
    from fabgen.validation import has_errors, overall_status, validate_topology

    config = _load_topology(Path(args.topology))
    results = validate_topology(config)
    _print_findings(results)

    status = overall_status(results)
    if has_errors(results):
        print(f"❌ Topology has errors ({len(results)} findings)")
        sys.exit(3)  # Validation failure
    if status == "warnings":
        print(f"⚠️  Topology is valid with warnings ({len(results)} findings)")
    else:
        print("✅ Topology is valid")


def build_command(args: argparse.Namespace) -> None:
    """Validate a topology and write the generated network documents.

    Args:
        args: Parsed command line arguments with topology, output directory,
            config path and flags.
    """
    from fabgen.compiler import compile_artifacts
    from fabgen.validation import has_errors, validate_topology

    settings = _load_config(Path(args.config) if args.config else None)
    config = _load_topology(Path(args.topology))

    results = validate_topology(config)
    _print_findings(results)
    if has_errors(results):
        if not args.force:
            print("❌ Topology has validation errors; nothing generated")
            print("💡 Fix the errors above or use --force to generate anyway")
            sys.exit(3)  # Validation failure
        print("⚠️  Generating despite validation errors (--force)")

    try:
        with Timer("Compile network documents"):
            artifacts = compile_artifacts(config, settings)
    except MalformedTopology as e:
        print(f"❌ {e}")
        sys.exit(3)
    except Exception as e:
        logger.error(f"Compilation failed: {e}")
        print("💡 Use -v for detailed error information")
        sys.exit(1)  # Runtime error

    if args.print:
        for filename, text in artifacts.as_files().items():
            print("\n" + "=" * 60)
            print(f"{filename}:")
            print("=" * 60)
            print(text)
        return

    output_dir = Path(args.output) if args.output else Path.cwd()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with Timer(f"Write documents to {output_dir}"):
            for filename, text in artifacts.as_files().items():
                (output_dir / filename).write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write documents: {e}")
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    print(f"🎉 SUCCESS! Generated network documents in: {output_dir}")
    for filename in artifacts.as_files():
        print(f"   📄 {filename}")


def main() -> None:
    """Parse command line arguments and execute the appropriate subcommand.

    Configures logging, parses CLI arguments, and dispatches to the correct
    command function (presets, init, check, or build).
    """
    parser = argparse.ArgumentParser(
        prog="fabgen",
        description="Validate permissioned ledger network topologies and generate their deployment documents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress console output (logs only)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Presets command
    presets_parser = subparsers.add_parser("presets", help="List network presets")
    presets_parser.set_defaults(func=presets_command)

    # Init command
    init_parser = subparsers.add_parser(
        "init", help="Create a topology file from a preset"
    )
    init_parser.add_argument("preset", help="Preset id or display name")
    init_parser.add_argument(
        "-o",
        "--output",
        default="topology.yml",
        help="Topology file to write (default: topology.yml)",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing topology file",
    )
    init_parser.set_defaults(func=init_command)

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate a topology file")
    check_parser.add_argument(
        "topology",
        nargs="?",
        default="topology.yml",
        help="Topology file path (default: topology.yml)",
    )
    check_parser.set_defaults(func=check_command)

    # Build command
    build_parser = subparsers.add_parser(
        "build", help="Generate network documents from a topology file"
    )
    build_parser.add_argument(
        "topology",
        nargs="?",
        default="topology.yml",
        help="Topology file path (default: topology.yml)",
    )
    build_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory for the generated documents. Defaults to CWD.",
    )
    build_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Generator configuration file (YAML). Defaults apply when omitted.",
    )
    build_parser.add_argument(
        "--force",
        action="store_true",
        help="Generate documents even when validation reports errors",
    )
    build_parser.add_argument(
        "--print",
        action="store_true",
        help="Print generated documents to stdout instead of writing files",
    )
    build_parser.set_defaults(func=build_command)

    # Parse arguments and dispatch
    args = parser.parse_args()

    # Configure logging based on arguments
    import logging

    from fabgen.log_config import set_global_log_level

    # Determine log level from flags
    if args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    set_global_log_level(log_level)

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        sys.exit(1)

    # Suppress print output if --quiet is set
    if args.quiet:
        with redirect_stdout(io.StringIO()):
            args.func(args)
    else:
        args.func(args)


if __name__ == "__main__":
    main()
