"""Static-site generation API endpoint.

Runs the full pipeline for a repository and returns the bundle path.
"""

import json

from aiohttp import web

from vitessg.app_keys import orchestrator_factory_key
from vitessg.core.errors import InputValidationError


def create_ssg_routes() -> list[web.RouteDef]:
    return [
        web.post("/api/ssg", generate_site),
    ]

async def generate_site(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return web.json_response({"error": "Request body must be valid JSON"}, status=400)

    if not isinstance(body, dict):
        return web.json_response({"error": "Request body must be a JSON object"}, status=400)

    repo_url = body.get("repoUrl")
    if not repo_url:
        return web.json_response({"error": "repoUrl is required"}, status=400)

    orchestrator = request.app[orchestrator_factory_key]()
    try:
        result = await orchestrator.run(repo_url, body.get("routes"))
    except InputValidationError as e:
        return web.json_response({"error": str(e)}, status=400)
    except Exception as e:
        return web.json_response({"error": str(e)}, status=500)

    return web.json_response({"success": True, "outPath": str(result.out_path)})
