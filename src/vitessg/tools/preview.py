"""Vite preview server lifecycle.

The preview server serves the build output so the headless browser can load
each route. It is a scoped resource: entering `PreviewServer` allocates a
port, spawns the process and waits until it answers; leaving it stops the
process and releases the port, whether the run succeeded or not.
"""

import asyncio
import logging
import os
import signal
import socket
import sys
from pathlib import Path
from types import TracebackType

import httpx

from vitessg.core.errors import ServerStartError

logger = logging.getLogger(__name__)


class PortAllocator:
    """Hands out free ports from a bounded range.

    Ports held by an active run are never handed out again until released,
    even if nothing is bound to them yet.
    """

    def __init__(self, start: int, end: int, *, host: str = "127.0.0.1") -> None:
        if start > end:
            raise ValueError(f"Invalid port range: {start}-{end}")
        self.start = start
        self.end = end
        self.host = host
        self._reserved: set[int] = set()
        self._lock = asyncio.Lock()

    async def acquire(self) -> int:
        """Reserve the first port in range that is unreserved and bindable.

        Raises:
            ServerStartError: If every port in range is taken
        """
        async with self._lock:
            for port in range(self.start, self.end + 1):
                if port in self._reserved or not self._is_free(port):
                    continue
                self._reserved.add(port)
                return port
        raise ServerStartError(f"No free port in range {self.start}-{self.end}")

    def release(self, port: int) -> None:
        self._reserved.discard(port)

    @property
    def reserved(self) -> frozenset[int]:
        return frozenset(self._reserved)

    def _is_free(self, port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((self.host, port))
            except OSError:
                return False
        return True


async def wait_until_ready(
    origin: str,
    *,
    timeout: float,
    poll_interval: float,
    process: asyncio.subprocess.Process | None = None,
) -> None:
    """Poll origin until it answers an HTTP request.

    Args:
        origin: Server origin to probe
        timeout: Seconds before giving up
        poll_interval: Seconds between probes
        process: Server process; an early exit fails immediately

    Raises:
        ServerStartError: If the deadline passes or the process exits
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    async with httpx.AsyncClient(timeout=poll_interval * 4) as client:
        while True:
            if process is not None and process.returncode is not None:
                raise ServerStartError(
                    f"Preview server exited with code {process.returncode} before becoming ready"
                )
            try:
                await client.get(origin)
            except httpx.TransportError:
                pass
            else:
                logger.info(f"Preview server ready at {origin}")
                return
            if loop.time() >= deadline:
                raise ServerStartError(
                    f"Preview server at {origin} not ready after {timeout}s"
                )
            await asyncio.sleep(poll_interval)


class PreviewServer:
    """Async context manager running `vite preview` on an allocated port.

    Yields the origin URL of the running server.
    """

    def __init__(
        self,
        project_dir: Path,
        allocator: PortAllocator,
        *,
        command: list[str],
        ready_timeout: float = 30.0,
        poll_interval: float = 0.25,
    ) -> None:
        self.project_dir = project_dir
        self.allocator = allocator
        self.command = command
        self.ready_timeout = ready_timeout
        self.poll_interval = poll_interval
        self.port: int | None = None
        self._process: asyncio.subprocess.Process | None = None

    @property
    def origin(self) -> str:
        return f"http://{self.allocator.host}:{self.port}"

    async def __aenter__(self) -> str:
        self.port = await self.allocator.acquire()
        try:
            await self._spawn()
            await wait_until_ready(
                self.origin,
                timeout=self.ready_timeout,
                poll_interval=self.poll_interval,
                process=self._process,
            )
        except BaseException:
            await self.stop()
            raise
        return self.origin

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    async def _spawn(self) -> None:
        cmd = [
            *self.command,
            "--host",
            self.allocator.host,
            "--port",
            str(self.port),
            "--strictPort",
        ]
        logger.info(f"Starting preview server: {' '.join(cmd)}")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self.project_dir,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                # Own process group so npx and its vite child die together
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            raise ServerStartError(f"Failed to start preview server: {e}") from e

    async def stop(self) -> None:
        """Stop the server process and release the port. Safe to call twice."""
        process, self._process = self._process, None
        if process is not None and process.returncode is None:
            logger.info(f"Stopping preview server on port {self.port}")
            _terminate(process)
            try:
                await asyncio.wait_for(process.wait(), timeout=10)
            except TimeoutError:
                _terminate(process, force=True)
                await process.wait()
        if self.port is not None:
            self.allocator.release(self.port)
            self.port = None


def _terminate(process: asyncio.subprocess.Process, *, force: bool = False) -> None:
    try:
        if sys.platform == "win32":
            if force:
                process.kill()
            else:
                process.terminate()
        else:
            os.killpg(process.pid, signal.SIGKILL if force else signal.SIGTERM)
    except ProcessLookupError:
        pass
