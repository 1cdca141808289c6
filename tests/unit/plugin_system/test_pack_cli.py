"""Tests for the pack command entry point."""

from __future__ import annotations

import zipfile

import pytest
import yaml

from vnite_sdk.plugin_system import cli


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        assert args.path == "."
        assert args.config is None
        assert args.verbose is False

    def test_path_and_options(self):
        args = cli.build_parser().parse_args(["./my-plugin", "--config", "sdk.yaml", "-v"])

        assert args.path == "./my-plugin"
        assert args.config == "sdk.yaml"
        assert args.verbose is True


class TestPackCommand:
    """Tests for running the pack command in-process."""

    def test_success(self, plugin_project, capsys):
        exit_code = cli.main([str(plugin_project)])

        out, err = capsys.readouterr()
        assert exit_code == 0
        assert (plugin_project / "dist" / "demo-1.2.0.vnpkg").is_file()
        assert "Packaging Vnite Plugin" in out
        assert "Plugin name: Demo Plugin" in out
        assert "Packaging complete!" in out
        assert "Packaging failed" not in err

    def test_missing_manifest(self, tmp_path, capsys):
        exit_code = cli.main([str(tmp_path)])

        out, err = capsys.readouterr()
        assert exit_code == 1
        assert "Packaging failed: package.json not found in" in err
        assert "Packaging complete!" not in out

    def test_invalid_manifest_names_every_missing_field(self, tmp_path, write_manifest, capsys):
        write_manifest(tmp_path, {"name": "Nameless"})

        exit_code = cli.main([str(tmp_path)])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert "missing required fields (id, version, main)" in err

    def test_missing_entry_file(self, plugin_project, capsys):
        (plugin_project / "dist" / "index.js").unlink()

        exit_code = cli.main([str(plugin_project)])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert "Packaging failed: Main file not found: dist/index.js" in err

    def test_project_config_file(self, plugin_project, capsys):
        """Test that vnite-sdk.yaml in the project root is picked up."""
        config = {"packaging": {"output_dir": "release", "extension": "zip"}}
        (plugin_project / "vnite-sdk.yaml").write_text(yaml.safe_dump(config), encoding="utf-8")

        exit_code = cli.main([str(plugin_project)])

        assert exit_code == 0
        output = plugin_project / "release" / "demo-1.2.0.zip"
        with zipfile.ZipFile(output) as zf:
            assert "manifest.json" in zf.namelist()
        assert not list((plugin_project / "dist").glob("*.vnpkg"))

    def test_explicit_config_file(self, plugin_project, tmp_path, capsys):
        config_path = tmp_path / "custom.json"
        config_path.write_text('{"packaging": {"extension": ".plugin"}}', encoding="utf-8")

        exit_code = cli.main([str(plugin_project), "--config", str(config_path)])

        assert exit_code == 0
        assert (plugin_project / "dist" / "demo-1.2.0.plugin").is_file()

    def test_missing_explicit_config_fails(self, plugin_project, tmp_path, capsys):
        exit_code = cli.main([str(plugin_project), "--config", str(tmp_path / "nope.yaml")])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert "Config file not found" in err
        assert not list((plugin_project / "dist").glob("*.vnpkg"))

    def test_unsafe_staging_dir_config_fails(self, plugin_project, capsys):
        previous = plugin_project / "dist" / "other-0.9.0.vnpkg"
        previous.write_bytes(b"older artifact")
        (plugin_project / "vnite-sdk.yaml").write_text("packaging:\n  staging_dir: '.'\n", encoding="utf-8")

        exit_code = cli.main([str(plugin_project)])

        assert exit_code == 1
        assert previous.read_bytes() == b"older artifact"
        assert (plugin_project / "dist" / "index.js").is_file()

    def test_invalid_config_fails(self, plugin_project, capsys):
        (plugin_project / "vnite-sdk.yaml").write_text(
            "packaging:\n  compression_level: 42\n", encoding="utf-8"
        )

        exit_code = cli.main([str(plugin_project)])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert "Packaging failed: Failed to initialize ConfigManager" in err
        assert not list((plugin_project / "dist").glob("*.vnpkg"))

    def test_env_override(self, plugin_project, monkeypatch, capsys):
        monkeypatch.setenv("VNITE_SDK_PACKAGING__OUTPUT_DIR", "out")

        exit_code = cli.main([str(plugin_project)])

        assert exit_code == 0
        assert (plugin_project / "out" / "demo-1.2.0.vnpkg").is_file()

    @pytest.mark.parametrize("flag", ["--verbose", "-v"])
    def test_verbose_logs_to_stderr(self, plugin_project, capsys, flag):
        exit_code = cli.main([str(plugin_project), flag])

        out, err = capsys.readouterr()
        assert exit_code == 0
        assert "Plugin packaged" in err
        assert "Plugin packaged" not in out
