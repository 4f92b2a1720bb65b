"""Shared test fixtures."""

from pathlib import Path

import pytest
from vitessg.config import (
    BuildConfig,
    Config,
    PreviewConfig,
    RendererConfig,
    ServerConfig,
    SourceConfig,
    WorkspaceConfig,
)
from vitessg.core.pipeline import PipelineOrchestrator

from tests.fakes import FakeBuilder, FakeCheckout, FakeEngine, FakePreview


@pytest.fixture
def fake_checkout() -> FakeCheckout:
    return FakeCheckout()


@pytest.fixture
def fake_builder() -> FakeBuilder:
    return FakeBuilder()


@pytest.fixture
def fake_preview() -> FakePreview:
    return FakePreview()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_orchestrator(tmp_path: Path, fake_checkout, fake_builder, fake_preview, fake_engine):
    """Return a factory building orchestrators wired to the fake collaborators."""

    def factory(**overrides) -> PipelineOrchestrator:
        kwargs = {
            "checkout": fake_checkout,
            "builder": fake_builder,
            "preview": fake_preview,
            "engine": fake_engine,
            "repos_dir": tmp_path / "repos",
            "out_root": tmp_path / "out",
        }
        kwargs.update(overrides)
        return PipelineOrchestrator(**kwargs)

    return factory


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories."""
    return Config(
        server=ServerConfig(),
        workspace=WorkspaceConfig(repos_dir=tmp_path / "repos", out_dir=tmp_path / "out"),
        source=SourceConfig(),
        build=BuildConfig(),
        preview=PreviewConfig(),
        renderer=RendererConfig(),
    )
