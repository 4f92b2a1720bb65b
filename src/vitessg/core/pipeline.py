"""Pipeline orchestration.

A run moves through a fixed sequence of states:

    IDLE -> ACQUIRING -> BUILDING -> SERVING -> RENDERING -> MATERIALIZING -> FINALIZED

and lands in FAILED if any step raises. There are no retries. The preview
server is stopped and the checkout removed on every exit path; a failed run
may leave a partial bundle behind.

Filesystem work runs in worker threads so concurrent runs sharing the event
loop keep making progress.
"""

import asyncio
import logging
import shutil
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from vitessg.core.assets import ensure_category_dirs, materialize_assets
from vitessg.core.context import RunContext
from vitessg.core.errors import InputValidationError, MaterializationError, SsgError
from vitessg.core.renderer import RenderedRoute, RenderingEngine, RouteRenderer
from vitessg.core.routes import normalize_routes

logger = logging.getLogger(__name__)


class SourceCheckout(Protocol):
    async def clone(self, url: str, destination: Path) -> None: ...


class BuildRunner(Protocol):
    async def install(self, cwd: Path) -> None: ...

    async def build(self, cwd: Path) -> None: ...


# Given the checkout directory, returns a context manager yielding the origin
PreviewFactory = Callable[[Path], AbstractAsyncContextManager[str]]
EngineFactory = Callable[[], AbstractAsyncContextManager[RenderingEngine]]


class PipelineState(Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    BUILDING = "building"
    SERVING = "serving"
    RENDERING = "rendering"
    MATERIALIZING = "materializing"
    FINALIZED = "finalized"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Outcome of a successful run."""

    run_id: str
    out_path: Path
    documents: list[Path] = field(default_factory=list)
    assets: int = 0


class PipelineOrchestrator:
    """Runs one static-site generation from repository URL to bundle.

    An orchestrator instance drives a single run; create a new one per run.
    """

    def __init__(
        self,
        *,
        checkout: SourceCheckout,
        builder: BuildRunner,
        preview: PreviewFactory,
        engine: EngineFactory,
        repos_dir: Path,
        out_root: Path,
        dist_dir_name: str = "dist",
    ) -> None:
        self._checkout = checkout
        self._builder = builder
        self._preview = preview
        self._engine = engine
        self._repos_dir = repos_dir
        self._out_root = out_root
        self._dist_dir_name = dist_dir_name
        self.state = PipelineState.IDLE
        self.context: RunContext | None = None

    async def run(self, repo_url: object, routes: object = None) -> PipelineResult:
        """Run the pipeline.

        Args:
            repo_url: Repository clone URL
            routes: Routes to render (default: ["/"])

        Returns:
            PipelineResult with the bundle path

        Raises:
            SsgError: On any failure; the state is FAILED afterwards
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Orchestrator already used (state: {self.state.value})")

        try:
            return await self._run(repo_url, routes)
        except SsgError as e:
            self._transition(PipelineState.FAILED)
            logger.error(f"Pipeline failed: {e}")
            raise
        except BaseException:
            self._transition(PipelineState.FAILED)
            logger.exception("Pipeline failed unexpectedly")
            raise

    async def _run(self, repo_url: object, routes: object) -> PipelineResult:
        context = await self._prepare(repo_url, routes)
        try:
            return await self._generate(context)
        finally:
            await asyncio.to_thread(self._remove_checkout, context)

    async def _generate(self, context: RunContext) -> PipelineResult:
        self._transition(PipelineState.ACQUIRING)
        await self._checkout.clone(context.repo_url, context.repo_dir)

        self._transition(PipelineState.BUILDING)
        await self._builder.install(context.repo_dir)
        await self._builder.build(context.repo_dir)

        result = PipelineResult(run_id=context.run_id, out_path=context.out_dir)

        self._transition(PipelineState.SERVING)
        async with self._preview(context.repo_dir) as origin:
            self._transition(PipelineState.RENDERING)
            async with self._engine() as engine:
                renderer = RouteRenderer(engine)
                for route in context.routes:
                    rendered = await renderer.render(origin, route)
                    path = await asyncio.to_thread(self._write_document, context, rendered)
                    result.documents.append(path)

            self._transition(PipelineState.MATERIALIZING)
            report = await asyncio.to_thread(
                materialize_assets, context.dist_dir, context.out_dir
            )
            result.assets = len(report.copied)

        self._transition(PipelineState.FINALIZED)
        logger.info(f"Run {context.run_id} finished: {context.out_dir}")
        return result

    async def _prepare(self, repo_url: object, routes: object) -> RunContext:
        """Validate input and set up clean working directories."""
        if not isinstance(repo_url, str) or not repo_url.strip():
            raise InputValidationError("repoUrl is required")

        context = RunContext.create(
            repo_url.strip(),
            normalize_routes(routes),
            repos_dir=self._repos_dir,
            out_root=self._out_root,
            dist_dir_name=self._dist_dir_name,
        )
        self.context = context

        try:
            await asyncio.to_thread(self._reset_directories, context)
        except OSError as e:
            raise MaterializationError(f"Failed to prepare working directories: {e}") from e

        logger.info(
            f"Run {context.run_id}: {context.repo_url} routes={list(context.routes)}"
        )
        return context

    def _reset_directories(self, context: RunContext) -> None:
        for stale in (context.repo_dir, context.out_dir):
            if stale.exists():
                logger.info(f"Removing stale directory {stale}")
                shutil.rmtree(stale)
        self._repos_dir.mkdir(parents=True, exist_ok=True)
        context.out_dir.mkdir(parents=True)
        ensure_category_dirs(context.out_dir)

    def _remove_checkout(self, context: RunContext) -> None:
        """Delete the run's checkout; the bundle in out_dir is kept."""
        if not context.repo_dir.exists():
            return
        try:
            shutil.rmtree(context.repo_dir)
        except OSError as e:
            logger.warning(f"Failed to remove checkout {context.repo_dir}: {e}")
        else:
            logger.debug(f"Removed checkout {context.repo_dir}")

    def _write_document(self, context: RunContext, rendered: RenderedRoute) -> Path:
        path = context.out_dir / rendered.document_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(rendered.html, encoding="utf-8")
        except OSError as e:
            raise MaterializationError(f"Failed to write {path}: {e}") from e
        logger.info(f"Wrote {rendered.route} -> {path}")
        return path

    def _transition(self, state: PipelineState) -> None:
        logger.info(f"State {self.state.value} -> {state.value}")
        self.state = state
