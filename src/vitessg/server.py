"""aiohttp server for vitessg.

Application factory and route registration for the pipeline API.
"""

from aiohttp import web

from vitessg.api.ssg import create_ssg_routes
from vitessg.app_keys import OrchestratorFactory, config_key, orchestrator_factory_key
from vitessg.config import Config
from vitessg.runner import create_orchestrator, create_port_allocator

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Allow cross-origin calls from browser front-ends."""
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=CORS_HEADERS)

    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


def create_app(
    config: Config,
    *,
    orchestrator_factory: OrchestratorFactory | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        orchestrator_factory: Creates one orchestrator per request
            (default: git/npm/vite/Playwright tools from config)

    Returns:
        Configured aiohttp application
    """
    middlewares = [cors_middleware] if config.server.cors else []
    app = web.Application(middlewares=middlewares)

    if orchestrator_factory is None:
        # One allocator per app so concurrent requests never share a port
        allocator = create_port_allocator(config)

        def orchestrator_factory():
            return create_orchestrator(config, allocator)

    app[config_key] = config
    app[orchestrator_factory_key] = orchestrator_factory

    app.router.add_routes(create_ssg_routes())

    return app


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
