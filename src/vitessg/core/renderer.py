"""Route rendering.

Fetches settled markup for a route from the rendering engine, rewrites its
asset references and formats it for writing into the bundle.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from vitessg.core.errors import RenderFailure
from vitessg.core.rewriter import format_document, rewrite_references
from vitessg.core.routes import document_name_for_route

logger = logging.getLogger(__name__)


class RenderingEngine(Protocol):
    """Headless browser capable of returning fully rendered markup."""

    async def render(self, url: str) -> str:
        """Return markup for url once network activity and rendering settle."""
        ...


@dataclass
class RenderedRoute:
    """A rewritten document ready to be written into the bundle."""

    route: str
    document_name: str
    html: str


class RouteRenderer:
    """Renders routes against a running preview origin."""

    def __init__(self, engine: RenderingEngine) -> None:
        self._engine = engine

    async def render(self, origin: str, route: str) -> RenderedRoute:
        """Render a single route.

        Args:
            origin: Preview server origin (e.g., "http://127.0.0.1:5173")
            route: Application route (e.g., "/about")

        Returns:
            RenderedRoute with rewritten, formatted markup

        Raises:
            RenderFailure: If the engine cannot load the route
        """
        url = f"{origin.rstrip('/')}{route}"
        logger.info(f"Rendering {url}")
        try:
            markup = await self._engine.render(url)
        except RenderFailure as e:
            raise RenderFailure(route, e.cause) from e
        except Exception as e:
            raise RenderFailure(route, e) from e

        html = await asyncio.to_thread(format_document, rewrite_references(markup))
        return RenderedRoute(
            route=route,
            document_name=document_name_for_route(route),
            html=html,
        )
