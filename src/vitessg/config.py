"""Configuration management for vitessg.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "vitessg.toml"


@dataclass
class ServerConfig:
    """HTTP API server configuration."""

    host: str = "127.0.0.1"
    port: int = 3000
    cors: bool = True


@dataclass
class WorkspaceConfig:
    """Working directory configuration."""

    repos_dir: Path = field(default_factory=lambda: Path("repos"))
    out_dir: Path = field(default_factory=lambda: Path("out"))


@dataclass
class SourceConfig:
    """Repository checkout configuration."""

    git_command: str = "git"
    clone_timeout: float | None = 300.0


@dataclass
class BuildConfig:
    """Install and build configuration."""

    install_command: list[str] = field(default_factory=lambda: ["npm", "install"])
    build_command: list[str] = field(default_factory=lambda: ["npm", "run", "build"])
    dist_dir: str = "dist"
    timeout: float | None = 900.0


@dataclass
class PreviewConfig:
    """Preview server configuration."""

    command: list[str] = field(default_factory=lambda: ["npx", "vite", "preview"])
    port_range: tuple[int, int] = (5173, 5400)
    ready_timeout: float = 30.0
    poll_interval: float = 0.25


@dataclass
class RendererConfig:
    """Headless browser configuration."""

    navigation_timeout: float = 30.0
    headless: bool = True


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    workspace: WorkspaceConfig
    source: SourceConfig
    build: BuildConfig
    preview: PreviewConfig
    renderer: RendererConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for vitessg.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        return cls(
            server=ServerConfig(),
            workspace=WorkspaceConfig(),
            source=SourceConfig(),
            build=BuildConfig(),
            preview=PreviewConfig(),
            renderer=RendererConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            workspace=cls._parse_workspace(data.get("workspace"), config_dir),
            source=cls._parse_source(data.get("source")),
            build=cls._parse_build(data.get("build")),
            preview=cls._parse_preview(data.get("preview")),
            renderer=cls._parse_renderer(data.get("renderer")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 3000)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        cors = data.get("cors", True)
        if not isinstance(cors, bool):
            raise ValueError("server.cors must be a boolean")

        return ServerConfig(host=host, port=port, cors=cors)

    @classmethod
    def _parse_workspace(cls, data: object, config_dir: Path) -> WorkspaceConfig:
        """Parse workspace configuration section.

        Args:
            data: Raw workspace section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            WorkspaceConfig instance
        """
        if data is None:
            return WorkspaceConfig(
                repos_dir=config_dir / "repos",
                out_dir=config_dir / "out",
            )

        if not isinstance(data, dict):
            raise ValueError("workspace section must be a dictionary")

        repos_dir = data.get("repos_dir", "repos")
        if not isinstance(repos_dir, str):
            raise ValueError("workspace.repos_dir must be a string")

        out_dir = data.get("out_dir", "out")
        if not isinstance(out_dir, str):
            raise ValueError("workspace.out_dir must be a string")

        return WorkspaceConfig(
            repos_dir=config_dir / repos_dir,
            out_dir=config_dir / out_dir,
        )

    @classmethod
    def _parse_source(cls, data: object) -> SourceConfig:
        if data is None:
            return SourceConfig()

        if not isinstance(data, dict):
            raise ValueError("source section must be a dictionary")

        git_command = data.get("git_command", "git")
        if not isinstance(git_command, str):
            raise ValueError("source.git_command must be a string")

        clone_timeout = _parse_timeout(data, "source.clone_timeout", 300.0)

        return SourceConfig(git_command=git_command, clone_timeout=clone_timeout)

    @classmethod
    def _parse_build(cls, data: object) -> BuildConfig:
        if data is None:
            return BuildConfig()

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        defaults = BuildConfig()
        install_command = _parse_command(
            data.get("install_command", defaults.install_command), "build.install_command"
        )
        build_command = _parse_command(
            data.get("build_command", defaults.build_command), "build.build_command"
        )

        dist_dir = data.get("dist_dir", "dist")
        if not isinstance(dist_dir, str) or not dist_dir:
            raise ValueError("build.dist_dir must be a non-empty string")

        timeout = _parse_timeout(data, "build.timeout", 900.0)

        return BuildConfig(
            install_command=install_command,
            build_command=build_command,
            dist_dir=dist_dir,
            timeout=timeout,
        )

    @classmethod
    def _parse_preview(cls, data: object) -> PreviewConfig:
        """Parse preview configuration section.

        Args:
            data: Raw preview section data

        Returns:
            PreviewConfig instance
        """
        if data is None:
            return PreviewConfig()

        if not isinstance(data, dict):
            raise ValueError("preview section must be a dictionary")

        command = _parse_command(
            data.get("command", PreviewConfig().command), "preview.command"
        )

        port_range = data.get("port_range", [5173, 5400])
        if (
            not isinstance(port_range, list)
            or len(port_range) != 2
            or not all(isinstance(p, int) and not isinstance(p, bool) for p in port_range)
        ):
            raise ValueError("preview.port_range must be a list of two integers")
        start, end = port_range
        if not 0 < start <= end <= 65535:
            raise ValueError("preview.port_range must be an ascending range within 1-65535")

        ready_timeout = _parse_number(data, "preview.ready_timeout", 30.0)
        poll_interval = _parse_number(data, "preview.poll_interval", 0.25)

        return PreviewConfig(
            command=command,
            port_range=(start, end),
            ready_timeout=ready_timeout,
            poll_interval=poll_interval,
        )

    @classmethod
    def _parse_renderer(cls, data: object) -> RendererConfig:
        if data is None:
            return RendererConfig()

        if not isinstance(data, dict):
            raise ValueError("renderer section must be a dictionary")

        navigation_timeout = _parse_number(data, "renderer.navigation_timeout", 30.0)

        headless = data.get("headless", True)
        if not isinstance(headless, bool):
            raise ValueError("renderer.headless must be a boolean")

        return RendererConfig(navigation_timeout=navigation_timeout, headless=headless)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        repos_dir: Path | None = None,
        out_dir: Path | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            repos_dir: Override workspace.repos_dir
            out_dir: Override workspace.out_dir

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        workspace = self.workspace
        if repos_dir is not None or out_dir is not None:
            workspace = replace(
                self.workspace,
                repos_dir=repos_dir if repos_dir is not None else self.workspace.repos_dir,
                out_dir=out_dir if out_dir is not None else self.workspace.out_dir,
            )

        return replace(self, server=server, workspace=workspace)


def _parse_command(value: object, name: str) -> list[str]:
    if (
        not isinstance(value, list)
        or not value
        or not all(isinstance(item, str) for item in value)
    ):
        raise ValueError(f"{name} must be a non-empty list of strings")
    return list(value)


def _parse_number(data: dict, name: str, default: float) -> float:
    value = data.get(name.rsplit(".", 1)[-1], default)
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ValueError(f"{name} must be a positive number")
    return float(value)


def _parse_timeout(data: dict, name: str, default: float) -> float | None:
    """Parse a timeout in seconds; 0 disables the timeout."""
    value = data.get(name.rsplit(".", 1)[-1], default)
    if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
        raise ValueError(f"{name} must be a non-negative number")
    return float(value) or None
