"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from vitessg.config import Config, PreviewConfig, WorkspaceConfig


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "vitessg.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 8000
cors = false

[workspace]
repos_dir = "work/repos"
out_dir = "public"

[source]
git_command = "/usr/local/bin/git"
clone_timeout = 60

[build]
install_command = ["pnpm", "install"]
build_command = ["pnpm", "build"]
dist_dir = "build"
timeout = 0

[preview]
command = ["pnpm", "exec", "vite", "preview"]
port_range = [6000, 6010]
ready_timeout = 5
poll_interval = 0.5

[renderer]
navigation_timeout = 45.5
headless = false
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8000
        assert config.server.cors is False
        assert config.workspace.repos_dir == tmp_path / "work/repos"
        assert config.workspace.out_dir == tmp_path / "public"
        assert config.source.git_command == "/usr/local/bin/git"
        assert config.source.clone_timeout == 60.0
        assert config.build.install_command == ["pnpm", "install"]
        assert config.build.build_command == ["pnpm", "build"]
        assert config.build.dist_dir == "build"
        assert config.build.timeout is None
        assert config.preview.command == ["pnpm", "exec", "vite", "preview"]
        assert config.preview.port_range == (6000, 6010)
        assert config.preview.ready_timeout == 5.0
        assert config.preview.poll_interval == 0.5
        assert config.renderer.navigation_timeout == 45.5
        assert config.renderer.headless is False
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "vitessg.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 3000
        assert config.server.cors is True
        assert config.workspace.repos_dir == tmp_path / "repos"
        assert config.workspace.out_dir == tmp_path / "out"
        assert config.build.install_command == ["npm", "install"]
        assert config.build.build_command == ["npm", "run", "build"]
        assert config.build.dist_dir == "dist"
        assert config.preview.command == ["npx", "vite", "preview"]
        assert config.preview.port_range == (5173, 5400)
        assert config.renderer.headless is True

    def test__missing_explicit_path__raises_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "nonexistent.toml")

    def test__no_config_found__returns_defaults(self, tmp_path: Path) -> None:
        """Fall back to defaults when no config file is discovered."""
        with patch("vitessg.config.Path.cwd", return_value=tmp_path):
            config = Config.load()

        assert config.config_path is None
        assert config.workspace == WorkspaceConfig()
        assert config.preview == PreviewConfig()

    def test__config_in_parent__is_discovered(self, tmp_path: Path) -> None:
        """Search parent directories for vitessg.toml."""
        config_file = tmp_path / "vitessg.toml"
        config_file.write_text("[server]\nport = 4000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        with patch("vitessg.config.Path.cwd", return_value=nested):
            config = Config.load()

        assert config.config_path == config_file
        assert config.server.port == 4000


class TestConfigValidation:
    """Tests for invalid configuration values."""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('server = "x"', "server section must be a dictionary"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ("[server]\nport = true", "server.port must be an integer"),
            ('[server]\ncors = "yes"', "server.cors must be a boolean"),
            ("[workspace]\nout_dir = 1", "workspace.out_dir must be a string"),
            ("[source]\nclone_timeout = -1", "source.clone_timeout must be a non-negative number"),
            ('[build]\ninstall_command = "npm install"', "build.install_command must be a non-empty list"),
            ("[build]\nbuild_command = []", "build.build_command must be a non-empty list"),
            ('[build]\ndist_dir = ""', "build.dist_dir must be a non-empty string"),
            ("[preview]\nport_range = [5173]", "preview.port_range must be a list of two integers"),
            ("[preview]\nport_range = [6000, 5000]", "preview.port_range must be an ascending range"),
            ("[preview]\nready_timeout = 0", "preview.ready_timeout must be a positive number"),
            ('[renderer]\nheadless = "no"', "renderer.headless must be a boolean"),
        ],
    )
    def test__invalid_value__raises_value_error(
        self, tmp_path: Path, content: str, message: str
    ) -> None:
        config_file = tmp_path / "vitessg.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestWithOverrides:
    """Tests for Config.with_overrides()."""

    def test__overrides__replace_only_given_values(self, test_config: Config) -> None:
        config = test_config.with_overrides(port=9000, out_dir=Path("/srv/out"))

        assert config.server.port == 9000
        assert config.server.host == test_config.server.host
        assert config.workspace.out_dir == Path("/srv/out")
        assert config.workspace.repos_dir == test_config.workspace.repos_dir

    def test__overrides__do_not_mutate_original(self, test_config: Config) -> None:
        test_config.with_overrides(host="0.0.0.0", repos_dir=Path("/tmp/r"))

        assert test_config.server.host == "127.0.0.1"
        assert test_config.workspace.repos_dir != Path("/tmp/r")

    def test__no_overrides__returns_equal_config(self, test_config: Config) -> None:
        assert test_config.with_overrides() == test_config
