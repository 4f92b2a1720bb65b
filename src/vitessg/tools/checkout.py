"""Repository checkout via the git command line."""

from pathlib import Path

from vitessg.core.errors import CheckoutError
from vitessg.tools.process import run_command


class GitCheckout:
    """Clones repositories with `git clone --depth 1`."""

    def __init__(self, git_command: str = "git", *, timeout: float | None = None) -> None:
        self.git_command = git_command
        self.timeout = timeout

    async def clone(self, url: str, destination: Path) -> None:
        """Clone url into destination.

        Raises:
            CheckoutError: If the repository is unreachable or invalid
        """
        await run_command(
            [self.git_command, "clone", "--depth", "1", url, str(destination)],
            cwd=None,
            timeout=self.timeout,
            error_cls=CheckoutError,
        )
