"""CLI tests covering argument parsing, dispatch and the subcommands."""

from __future__ import annotations

import importlib
import logging
from argparse import Namespace
from io import StringIO
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import yaml

from fabgen.model import dump_topology


def _invoke_main(argv: list[str], *, stub_subcommand: bool = False):
    """Invoke fabgen.cli.main with patches applied.

    Args:
        argv: Arguments excluding program name.
        stub_subcommand: If True, replaces subcommands with recorders.

    Returns:
        Namespace with: code (int), stdout (str), called (str|None), level (int|None).
    """
    import fabgen.cli as cli

    importlib.reload(cli)

    commands = ("presets", "init", "check", "build")
    called: dict[str, bool] = {name: False for name in commands}
    level_holder: dict[str, int | None] = {"level": None}

    patchers = [
        patch(
            "fabgen.log_config.set_global_log_level",
            side_effect=lambda lvl: level_holder.__setitem__("level", lvl),
        )
    ]
    if stub_subcommand:

        def _recorder(name):
            def _record(_args):
                called[name] = True

            return _record

        for name in commands:
            patchers.append(
                patch.object(cli, f"{name}_command", side_effect=_recorder(name))
            )

    for p in patchers:
        p.start()

    out = SimpleNamespace(code=0, stdout="", called=None, level=None)
    try:
        with (
            patch("sys.stdout", new_callable=StringIO) as buf,
            patch("sys.argv", ["fabgen"] + argv),
        ):
            try:
                cli.main()
            except SystemExit as e:
                out.code = int(getattr(e, "code", 0) or 0)
            out.stdout = buf.getvalue()
            out.level = level_holder["level"]
            for name, was_called in called.items():
                if was_called:
                    out.called = name
                    break
    finally:
        for p in reversed(patchers):
            p.stop()

    return out


def test_no_args_shows_help_and_exits_nonzero():
    res = _invoke_main([])
    assert res.code == 1
    assert "Available commands" in res.stdout


def test_verbose_flag_sets_debug_level():
    res = _invoke_main(["-v", "presets"], stub_subcommand=True)
    assert res.called == "presets"
    assert res.level == logging.DEBUG


def test_default_log_level_is_info():
    res = _invoke_main(["presets"], stub_subcommand=True)
    assert res.level == logging.INFO


def test_subcommand_dispatch():
    for cmd in ("presets", "check", "build"):
        res = _invoke_main([cmd], stub_subcommand=True)
        assert res.called == cmd
    res = _invoke_main(["init", "two-org-raft"], stub_subcommand=True)
    assert res.called == "init"


def test_quiet_suppresses_print_output():
    res = _invoke_main(["--quiet", "presets"])
    assert res.code == 0
    assert res.stdout == ""


def test_presets_lists_catalog():
    res = _invoke_main(["presets"])
    assert res.code == 0
    assert "two-org-raft: Two-Organization Raft" in res.stdout
    assert "supply-chain" in res.stdout


def test_timer_context_manager_success_and_error():
    from fabgen.cli import Timer

    with patch("sys.stdout", new_callable=StringIO) as buf:
        with Timer("Unit test op"):
            pass
        assert "Unit test op" in buf.getvalue()

    with patch("sys.stdout", new_callable=StringIO) as buf:
        try:
            with Timer("Failing op"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert "failed after" in buf.getvalue()


def test_load_config_missing_file_exits_with_code_2(tmp_path):
    res = _invoke_main(
        ["build", str(tmp_path / "t.yml"), "-c", str(tmp_path / "missing.yml")]
    )
    assert res.code == 2
    assert "Configuration file not found" in res.stdout


def test_load_config_generic_error_exits_with_code_2(invalid_config_file, tmp_path):
    res = _invoke_main(["build", str(tmp_path / "t.yml"), "-c", str(invalid_config_file)])
    assert res.code == 2
    assert "Configuration error" in res.stdout


class TestInit:
    def test_writes_topology(self, tmp_path: Path):
        target = tmp_path / "net" / "topology.yml"
        res = _invoke_main(["init", "two-org-raft", "-o", str(target)])
        assert res.code == 0
        data = yaml.safe_load(target.read_text())
        assert [o["name"] for o in data["organizations"]] == ["Org1", "Org2", "Orderer"]
        assert data["template"] == "Two-Organization Raft"

    def test_unknown_preset_exits_2(self, tmp_path: Path):
        res = _invoke_main(["init", "nope", "-o", str(tmp_path / "t.yml")])
        assert res.code == 2
        assert "Unknown preset" in res.stdout

    def test_refuses_overwrite_without_force(self, tmp_path: Path):
        target = tmp_path / "topology.yml"
        target.write_text("keep me")
        res = _invoke_main(["init", "two-org-raft", "-o", str(target)])
        assert res.code == 2
        assert target.read_text() == "keep me"

        res = _invoke_main(["init", "two-org-raft", "-o", str(target), "--force"])
        assert res.code == 0
        assert "organizations" in target.read_text()


class TestCheck:
    def test_clean_topology(self, tmp_path: Path, reference_topology):
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        res = _invoke_main(["check", str(path)])
        assert res.code == 0
        assert "Topology is valid" in res.stdout

    def test_warnings_exit_zero(self, tmp_path: Path, reference_topology):
        reference_topology.channel_name = "My Channel"
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        res = _invoke_main(["check", str(path)])
        assert res.code == 0
        assert "naming.channel" in res.stdout
        assert "with warnings" in res.stdout

    def test_errors_exit_3(self, tmp_path: Path, reference_topology):
        reference_topology.orderers[0].port = 7051
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        res = _invoke_main(["check", str(path)])
        assert res.code == 3
        assert "port.duplicate" in res.stdout

    def test_missing_topology_exits_2(self, tmp_path: Path):
        res = _invoke_main(["check", str(tmp_path / "missing.yml")])
        assert res.code == 2
        assert "Topology file not found" in res.stdout

    def test_malformed_topology_file_exits_2(self, tmp_path: Path):
        path = tmp_path / "topology.yml"
        path.write_text("organizations:\n- type: peer\n")
        res = _invoke_main(["check", str(path)])
        assert res.code == 2
        assert "missing required 'name'" in res.stdout


class TestBuild:
    def test_writes_three_documents(self, tmp_path: Path, reference_topology):
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        out_dir = tmp_path / "out"
        res = _invoke_main(["build", str(path), "-o", str(out_dir)])
        assert res.code == 0
        golden = Path(__file__).parent / "golden"
        for name in ("configtx.yaml", "crypto-config.yaml", "docker-compose.yaml"):
            assert (out_dir / name).read_text() == (golden / name).read_text()

    def test_print_writes_nothing(self, tmp_path: Path, reference_topology):
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        out_dir = tmp_path / "out"
        res = _invoke_main(["build", str(path), "-o", str(out_dir), "--print"])
        assert res.code == 0
        assert "docker-compose.yaml:" in res.stdout
        assert "OrdererGenesis" in res.stdout
        assert not out_dir.exists()

    def test_errors_block_without_force(self, tmp_path: Path, reference_topology):
        reference_topology.orderers[0].batch_size.preferred_max_bytes = 99_000_000
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        out_dir = tmp_path / "out"

        res = _invoke_main(["build", str(path), "-o", str(out_dir)])
        assert res.code == 3
        assert not (out_dir / "configtx.yaml").exists()

        res = _invoke_main(["build", str(path), "-o", str(out_dir), "--force"])
        assert res.code == 0
        assert "99000000" in (out_dir / "configtx.yaml").read_text()

    def test_malformed_topology_exits_3_even_with_force(self, tmp_path: Path):
        path = tmp_path / "topology.yml"
        path.write_text("organizations: []\norderers: []\n")
        res = _invoke_main(["build", str(path), "-o", str(tmp_path), "--force"])
        assert res.code == 3
        assert "Cannot compile topology" in res.stdout

    def test_config_file_applies(self, tmp_path: Path, reference_topology, generator_config_file):
        path = tmp_path / "topology.yml"
        dump_topology(reference_topology, path)
        out_dir = tmp_path / "out"
        res = _invoke_main(
            ["build", str(path), "-o", str(out_dir), "-c", str(generator_config_file)]
        )
        assert res.code == 0
        compose = yaml.safe_load((out_dir / "docker-compose.yaml").read_text())
        assert "testnet" in compose["networks"]


def test_build_command_stubbed_compile_runtime_error(tmp_path: Path, reference_topology):
    import fabgen.cli as cli

    importlib.reload(cli)
    path = tmp_path / "topology.yml"
    dump_topology(reference_topology, path)
    args = Namespace(
        topology=str(path), output=str(tmp_path), config=None, force=False, print=False
    )
    with (
        patch("fabgen.compiler.compile_artifacts", side_effect=RuntimeError("boom")),
        patch("sys.stdout", new_callable=StringIO),
    ):
        try:
            cli.build_command(args)
        except SystemExit as e:
            assert e.code == 1
        else:
            raise AssertionError("expected SystemExit")
