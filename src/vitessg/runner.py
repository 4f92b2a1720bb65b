"""Wires configured tool collaborators into a pipeline orchestrator."""

from pathlib import Path

from vitessg.config import Config
from vitessg.core.pipeline import PipelineOrchestrator
from vitessg.tools.browser import PlaywrightEngine
from vitessg.tools.build import NpmBuildRunner
from vitessg.tools.checkout import GitCheckout
from vitessg.tools.preview import PortAllocator, PreviewServer


def create_port_allocator(config: Config) -> PortAllocator:
    start, end = config.preview.port_range
    return PortAllocator(start, end)


def create_orchestrator(config: Config, allocator: PortAllocator) -> PipelineOrchestrator:
    """Create an orchestrator for a single run.

    Args:
        config: Application configuration
        allocator: Port allocator shared by every run in this process

    Returns:
        PipelineOrchestrator backed by git, npm, vite preview and Playwright
    """

    def preview(project_dir: Path) -> PreviewServer:
        return PreviewServer(
            project_dir,
            allocator,
            command=config.preview.command,
            ready_timeout=config.preview.ready_timeout,
            poll_interval=config.preview.poll_interval,
        )

    def engine() -> PlaywrightEngine:
        return PlaywrightEngine(
            navigation_timeout=config.renderer.navigation_timeout,
            headless=config.renderer.headless,
        )

    return PipelineOrchestrator(
        checkout=GitCheckout(config.source.git_command, timeout=config.source.clone_timeout),
        builder=NpmBuildRunner(
            config.build.install_command,
            config.build.build_command,
            timeout=config.build.timeout,
        ),
        preview=preview,
        engine=engine,
        repos_dir=config.workspace.repos_dir,
        out_root=config.workspace.out_dir,
        dist_dir_name=config.build.dist_dir,
    )
