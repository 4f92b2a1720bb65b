"""Application keys for type-safe app configuration access."""

from collections.abc import Callable

from aiohttp import web

from vitessg.config import Config
from vitessg.core.pipeline import PipelineOrchestrator

OrchestratorFactory = Callable[[], PipelineOrchestrator]

config_key = web.AppKey("config", Config)
orchestrator_factory_key = web.AppKey("orchestrator_factory", OrchestratorFactory)
