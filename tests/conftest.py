"""
Shared test fixtures for pytest.

Provides small synthetic routing inputs so tests do not depend on the
built-in catalog:
- synthetic_catalog: Six models across three providers
- synthetic_tables: Quality/trust/category tables matching the catalog
- model_router: ModelRouter over the synthetic catalog and tables
- default_router: ModelRouter over the built-in catalog and tables
- test_settings: Settings for the test environment
"""

from __future__ import annotations

import pytest

from src.agent.model_router import (
    ModelCatalog,
    ModelDescriptor,
    ModelRouter,
    RoutingTables,
)
from src.config import Environment, Settings, get_settings


# ------------------------------------------------------------------ #
# Settings cache
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Clear the lru_cache on get_settings so test overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment=Environment.TEST)


# ------------------------------------------------------------------ #
# Synthetic catalog and tables
# ------------------------------------------------------------------ #


def make_model(
    model_id: str,
    provider: str = "acme",
    context_window: int = 128_000,
    input_cost: float = 1.0,
    output_cost: float = 2.0,
    capabilities: tuple[str, ...] = ("text",),
) -> ModelDescriptor:
    """Build a descriptor with sensible defaults for tests."""
    return ModelDescriptor(
        id=model_id,
        name=model_id.replace("-", " ").title(),
        provider=provider,
        context_window=context_window,
        max_output=4096,
        input_cost_per_1m=input_cost,
        output_cost_per_1m=output_cost,
        capabilities=frozenset(capabilities),
        supports_voice="voice" in capabilities,
    )


@pytest.fixture
def synthetic_catalog() -> ModelCatalog:
    return ModelCatalog(
        [
            make_model(
                "alpha-pro", "acme", 200_000, 10.0, 30.0,
                ("text", "reasoning", "code", "vision"),
            ),
            make_model("alpha-fast", "acme", 32_000, 0.1, 0.2, ("text", "fast")),
            make_model(
                "beta-vision", "globex", 128_000, 1.0, 3.0,
                ("text", "vision", "multimodal"),
            ),
            make_model("beta-code", "globex", 64_000, 0.5, 1.5, ("code", "reasoning")),
            make_model("desi-m", "sarvam", 32_000, 0.0, 0.0, ("text", "indian-languages")),
            make_model(
                "desi-voice", "sarvam", 4096, 0.0, 0.0,
                ("tts", "voice", "indian-languages"),
            ),
        ]
    )


@pytest.fixture
def synthetic_tables() -> RoutingTables:
    return RoutingTables(
        quality_scores={
            "alpha-pro": 0.95,
            "alpha-fast": 0.70,
            "beta-vision": 0.85,
            "beta-code": 0.88,
            "desi-m": 0.75,
        },
        provider_trust={"acme": 0.9, "globex": 0.8, "sarvam": 0.8},
        categories={
            "premium": "alpha-pro",
            "ultra-fast": "alpha-fast",
            "ghost": "missing-model",
        },
        regional_provider="sarvam",
    )


@pytest.fixture
def model_router(synthetic_catalog, synthetic_tables) -> ModelRouter:
    return ModelRouter(catalog=synthetic_catalog, tables=synthetic_tables)


@pytest.fixture
def default_router() -> ModelRouter:
    return ModelRouter()


@pytest.fixture
def model_factory():
    """Factory for ad-hoc descriptors in tests that need odd catalogs."""
    return make_model
