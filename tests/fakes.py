"""Fake pipeline collaborators for tests."""

from contextlib import asynccontextmanager
from pathlib import Path

SAMPLE_HTML = (
    "<!DOCTYPE html><html><head>"
    '<script type="module" src="/assets/index-abc123.js"></script>'
    '<link rel="stylesheet" href="/assets/index-def456.css">'
    "<style>@font-face{src:url('/assets/inter.woff2')}</style>"
    "</head><body>"
    '<div id="root"><img src="/assets/logo.svg" alt="logo"><p>Hello</p></div>'
    "</body></html>"
)


class FakeCheckout:
    """Clone that writes a small Vite-like build tree instead of running git."""

    def __init__(self, files: dict[str, bytes] | None = None, *, error: Exception | None = None):
        self.files = files if files is not None else {
            "dist/index.html": b"<html></html>",
            "dist/assets/index-abc123.js": b"console.log('app')",
            "dist/assets/index-def456.css": b"body{color:red}",
            "dist/assets/img/logo.svg": b"<svg></svg>",
        }
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    async def clone(self, url: str, destination: Path) -> None:
        self.calls.append((url, destination))
        if self.error is not None:
            raise self.error
        for relative, content in self.files.items():
            path = destination / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)


class FakeBuilder:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    async def install(self, cwd: Path) -> None:
        self.calls.append(("install", cwd))

    async def build(self, cwd: Path) -> None:
        self.calls.append(("build", cwd))
        if self.error is not None:
            raise self.error


class FakePreview:
    """Preview server factory counting starts and stops."""

    origin = "http://127.0.0.1:5173"

    def __init__(self) -> None:
        self.started: list[Path] = []
        self.stopped = 0

    def __call__(self, project_dir: Path):
        return self._serve(project_dir)

    @asynccontextmanager
    async def _serve(self, project_dir: Path):
        self.started.append(project_dir)
        try:
            yield self.origin
        finally:
            self.stopped += 1


class FakeEngine:
    """Rendering engine returning fixed markup."""

    def __init__(self, html: str = SAMPLE_HTML, *, fail_on: str | None = None) -> None:
        self.html = html
        self.fail_on = fail_on
        self.urls: list[str] = []
        self.closed = False

    def __call__(self):
        return self._session()

    @asynccontextmanager
    async def _session(self):
        try:
            yield self
        finally:
            self.closed = True

    async def render(self, url: str) -> str:
        self.urls.append(url)
        if self.fail_on is not None and url.endswith(self.fail_on):
            raise TimeoutError("Navigation timeout of 30000 ms exceeded")
        return self.html


