"""Tests for CandidateFilter hard constraints and staged relaxation."""

from __future__ import annotations

import pytest

from src.agent.model_router import (
    CandidateFilter,
    ModelCatalog,
    RelaxationStage,
    RoutingRequest,
    RoutingTables,
)


@pytest.fixture
def candidate_filter(synthetic_catalog, synthetic_tables) -> CandidateFilter:
    return CandidateFilter(synthetic_catalog, synthetic_tables)


def _ids(models) -> list[str]:
    return [model.id for model in models]


class TestHardConstraints:
    def test_no_constraints_keeps_catalog_order(self, candidate_filter, synthetic_catalog):
        assert _ids(candidate_filter.filter(RoutingRequest())) == _ids(synthetic_catalog)

    def test_excluded_providers(self, candidate_filter):
        request = RoutingRequest(excluded_providers=frozenset({"acme", "sarvam"}))
        assert _ids(candidate_filter.filter(request)) == ["beta-vision", "beta-code"]

    def test_preferred_providers(self, candidate_filter):
        request = RoutingRequest(preferred_providers=frozenset({"sarvam"}))
        assert _ids(candidate_filter.filter(request)) == ["desi-m", "desi-voice"]

    def test_cost_cap_uses_input_cost_inclusively(self, candidate_filter):
        request = RoutingRequest(max_cost_per_1m=0.5)
        assert _ids(candidate_filter.filter(request)) == [
            "alpha-fast", "beta-code", "desi-m", "desi-voice",
        ]

    def test_min_context_window(self, candidate_filter):
        request = RoutingRequest(min_context_window=100_000)
        assert _ids(candidate_filter.filter(request)) == ["alpha-pro", "beta-vision"]

    def test_vision_accepts_multimodal_tag(self, model_factory, synthetic_tables):
        catalog = ModelCatalog(
            [
                model_factory("mm-only", capabilities=("multimodal",)),
                model_factory("text-only", capabilities=("text",)),
            ]
        )
        candidate_filter = CandidateFilter(catalog, synthetic_tables)

        assert _ids(candidate_filter.filter(RoutingRequest(requires_vision=True))) == ["mm-only"]

    def test_voice_requires_voice_support(self, candidate_filter):
        request = RoutingRequest(requires_voice=True)
        assert _ids(candidate_filter.filter(request)) == ["desi-voice"]

    def test_regional_provider_counts_for_indian_languages(self, model_factory):
        catalog = ModelCatalog(
            [
                model_factory("regional-untagged", provider="sarvam", capabilities=("text",)),
                model_factory("tagged", provider="acme", capabilities=("indian-languages",)),
                model_factory("neither", provider="acme", capabilities=("text",)),
            ]
        )
        candidate_filter = CandidateFilter(catalog, RoutingTables(regional_provider="sarvam"))

        result = candidate_filter.filter(RoutingRequest(requires_indian_languages=True))

        assert _ids(result) == ["regional-untagged", "tagged"]

    def test_reasoning_and_code_flags_do_not_filter(self, candidate_filter, synthetic_catalog):
        request = RoutingRequest(requires_code=True, requires_reasoning=True)
        assert len(candidate_filter.filter(request)) == len(synthetic_catalog)


class TestRelaxation:
    def test_no_relaxation_when_constraints_met(self, candidate_filter):
        result = candidate_filter.select(RoutingRequest(requires_vision=True))

        assert result.stage == RelaxationStage.NONE
        assert not result.relaxed
        assert _ids(result.models) == ["alpha-pro", "beta-vision"]

    def test_drops_provider_and_cost_first(self, candidate_filter):
        request = RoutingRequest(
            requires_vision=True,
            preferred_providers=frozenset({"sarvam"}),
            max_cost_per_1m=0.0,
        )

        result = candidate_filter.select(request)

        assert result.stage == RelaxationStage.PROVIDER_AND_COST_DROPPED
        assert result.relaxed
        assert _ids(result.models) == ["alpha-pro", "beta-vision"]

    def test_excluding_everything_relaxes(self, candidate_filter, synthetic_catalog):
        request = RoutingRequest(excluded_providers=frozenset(synthetic_catalog.providers()))

        result = candidate_filter.select(request)

        assert result.stage == RelaxationStage.PROVIDER_AND_COST_DROPPED
        assert len(result.models) == len(synthetic_catalog)

    def test_falls_back_to_catalog_prefix(self, synthetic_catalog, synthetic_tables):
        candidate_filter = CandidateFilter(
            synthetic_catalog, synthetic_tables, fallback_prefix_size=2
        )
        request = RoutingRequest(requires_voice=True, min_context_window=1_000_000)

        result = candidate_filter.select(request)

        assert result.stage == RelaxationStage.CATALOG_PREFIX
        assert _ids(result.models) == ["alpha-pro", "alpha-fast"]

    def test_empty_catalog_yields_empty_set(self, synthetic_tables):
        candidate_filter = CandidateFilter(ModelCatalog([]), synthetic_tables)

        result = candidate_filter.select(RoutingRequest())

        assert result.models == ()

    def test_prefix_size_must_be_positive(self, synthetic_catalog, synthetic_tables):
        with pytest.raises(ValueError):
            CandidateFilter(synthetic_catalog, synthetic_tables, fallback_prefix_size=0)
