"""Dependency install and build via the package manager."""

from pathlib import Path

from vitessg.core.errors import BuildError
from vitessg.tools.process import run_command


class NpmBuildRunner:
    """Runs the install and build commands inside a checkout."""

    def __init__(
        self,
        install_command: list[str],
        build_command: list[str],
        *,
        timeout: float | None = None,
    ) -> None:
        self.install_command = install_command
        self.build_command = build_command
        self.timeout = timeout

    async def install(self, cwd: Path) -> None:
        """Install dependencies.

        Raises:
            BuildError: On non-zero exit or timeout
        """
        await run_command(
            self.install_command, cwd=cwd, timeout=self.timeout, error_cls=BuildError
        )

    async def build(self, cwd: Path) -> None:
        """Build the application.

        Raises:
            BuildError: On non-zero exit or timeout
        """
        await run_command(
            self.build_command, cwd=cwd, timeout=self.timeout, error_cls=BuildError
        )
