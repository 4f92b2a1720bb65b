"""Async subprocess helper shared by the git and npm collaborators."""

import asyncio
import logging
from pathlib import Path

from vitessg.core.errors import SsgError

logger = logging.getLogger(__name__)

# Keep error messages readable when a build prints thousands of lines
_OUTPUT_TAIL_CHARS = 4000


async def run_command(
    cmd: list[str],
    *,
    cwd: Path | None,
    timeout: float | None,
    error_cls: type[SsgError],
) -> str:
    """Run a command to completion, raising error_cls on failure.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Seconds before the process is killed (None waits forever)
        error_cls: SsgError subclass raised on failure

    Returns:
        Combined stdout and stderr

    Raises:
        error_cls: If the command cannot start, exits non-zero or times out
    """
    printable = " ".join(cmd)
    logger.info(f"Running {printable}" + (f" in {cwd}" if cwd else ""))
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        raise error_cls(f"Command failed to start: {printable}: {e}") from e

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as e:
        process.kill()
        await process.wait()
        raise error_cls(f"Command timed out after {timeout}s: {printable}") from e
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    output = stdout.decode("utf-8", errors="replace")
    if process.returncode != 0:
        raise error_cls(
            f"Command failed with exit code {process.returncode}: {printable}\n\n"
            f"{output[-_OUTPUT_TAIL_CHARS:]}"
        )
    logger.debug(f"{printable} output:\n{output}")
    return output
