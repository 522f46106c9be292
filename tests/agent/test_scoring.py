"""Tests for ScoringEngine sub-scores and weighted combination."""

from __future__ import annotations

import pytest

from src.agent.model_router import (
    AutonomyTier,
    Complexity,
    LatencyPriority,
    QualityPriority,
    RoutingRequest,
    RoutingTables,
    ScoreBreakdown,
    ScoringEngine,
    TaskType,
)


@pytest.fixture
def engine(synthetic_tables) -> ScoringEngine:
    return ScoringEngine(synthetic_tables)


class TestCapabilityMatch:
    def test_partial_match(self, engine, synthetic_catalog):
        # CHAT wants ("text", "chat"); alpha-fast only has "text"
        score = engine.capability_match(synthetic_catalog.get("alpha-fast"), RoutingRequest())
        assert score == pytest.approx(0.5)

    def test_full_match(self, engine, synthetic_catalog):
        request = RoutingRequest(task_type=TaskType.CODE)
        assert engine.capability_match(synthetic_catalog.get("beta-code"), request) == 1.0

    def test_tier_keywords_are_added(self, engine, synthetic_catalog):
        # CODE + L0 wants ("code", "reasoning", "fast")
        request = RoutingRequest(task_type=TaskType.CODE, autonomy_tier=AutonomyTier.L0)
        score = engine.capability_match(synthetic_catalog.get("beta-code"), request)
        assert score == pytest.approx(2 / 3)

    def test_substring_match_counts(self, engine, model_factory):
        model = model_factory("reviewer", capabilities=("code-review",))
        request = RoutingRequest(task_type=TaskType.CODE)
        assert engine.capability_match(model, request) == pytest.approx(0.5)

    def test_no_wanted_keywords_is_neutral(self, synthetic_catalog):
        engine = ScoringEngine(RoutingTables(task_keywords={}))
        score = engine.capability_match(synthetic_catalog.get("alpha-pro"), RoutingRequest())
        assert score == 0.5

    def test_wanted_capabilities_deduplicated_in_order(self, engine):
        request = RoutingRequest(task_type=TaskType.CODE, autonomy_tier=AutonomyTier.L3)
        assert engine.wanted_capabilities(request) == ["code", "reasoning"]


class TestCostEfficiency:
    def test_free_model_scores_one(self, engine, synthetic_catalog):
        assert engine.cost_efficiency(synthetic_catalog.get("desi-m"), RoutingRequest()) == 1.0

    def test_linear_against_default_ceiling(self, engine, synthetic_catalog):
        # alpha-pro averages 20 per 1M against a ceiling of 100
        score = engine.cost_efficiency(synthetic_catalog.get("alpha-pro"), RoutingRequest())
        assert score == pytest.approx(0.8)

    def test_at_or_above_cap_floors(self, engine, synthetic_catalog):
        request = RoutingRequest(max_cost_per_1m=10.0)
        assert engine.cost_efficiency(synthetic_catalog.get("alpha-pro"), request) == 0.1

    def test_custom_default_ceiling(self, synthetic_tables, synthetic_catalog):
        engine = ScoringEngine(synthetic_tables, default_cost_ceiling=40.0)
        score = engine.cost_efficiency(synthetic_catalog.get("alpha-pro"), RoutingRequest())
        assert score == pytest.approx(0.5)

    def test_non_positive_ceiling_rejected(self, synthetic_tables):
        with pytest.raises(ValueError):
            ScoringEngine(synthetic_tables, default_cost_ceiling=0)


class TestQuality:
    def test_table_value(self, engine, synthetic_catalog):
        assert engine.quality(synthetic_catalog.get("beta-code"), RoutingRequest()) == 0.88

    def test_unknown_model_gets_default(self, engine, synthetic_catalog):
        assert engine.quality(synthetic_catalog.get("desi-voice"), RoutingRequest()) == 0.6

    def test_premium_penalises_weaker_models(self, engine, synthetic_catalog):
        request = RoutingRequest(quality_priority=QualityPriority.PREMIUM)
        assert engine.quality(synthetic_catalog.get("alpha-fast"), request) == pytest.approx(0.49)

    def test_premium_leaves_strong_models_alone(self, engine, synthetic_catalog):
        request = RoutingRequest(quality_priority=QualityPriority.PREMIUM)
        assert engine.quality(synthetic_catalog.get("alpha-pro"), request) == 0.95
        # Exactly at the threshold is not penalised
        assert engine.quality(synthetic_catalog.get("beta-vision"), request) == 0.85


class TestContextFit:
    def test_neutral_without_minimum(self, engine, synthetic_catalog):
        assert engine.context_fit(synthetic_catalog.get("beta-code"), RoutingRequest()) == 0.5

    @pytest.mark.parametrize(
        ("model_id", "expected"),
        [("alpha-pro", 1.0), ("beta-code", 0.6), ("alpha-fast", 0.3)],
    )
    def test_headroom_against_minimum(self, engine, synthetic_catalog, model_id, expected):
        request = RoutingRequest(min_context_window=100_000)
        assert engine.context_fit(synthetic_catalog.get(model_id), request) == expected

    def test_fast_bonus_under_high_latency(self, engine, synthetic_catalog):
        request = RoutingRequest(latency_priority=LatencyPriority.HIGH)
        score = engine.context_fit(synthetic_catalog.get("alpha-fast"), request)
        assert score == pytest.approx(0.7)

    def test_tier_keyword_bonus(self, engine, synthetic_catalog):
        request = RoutingRequest(
            latency_priority=LatencyPriority.HIGH,
            autonomy_tier=AutonomyTier.L0,
        )
        score = engine.context_fit(synthetic_catalog.get("alpha-fast"), request)
        assert score == pytest.approx(0.85)

    def test_capped_at_one(self, engine, synthetic_catalog):
        request = RoutingRequest(
            min_context_window=1000,
            latency_priority=LatencyPriority.HIGH,
            autonomy_tier=AutonomyTier.L0,
        )
        assert engine.context_fit(synthetic_catalog.get("alpha-fast"), request) == 1.0


class TestProviderTrust:
    def test_table_value(self, engine, synthetic_catalog):
        assert engine.provider_trust(synthetic_catalog.get("alpha-pro")) == 0.9

    def test_unknown_provider_gets_default(self, engine, model_factory):
        assert engine.provider_trust(model_factory("x", provider="nobody")) == 0.7


class TestCombination:
    def test_weights_shift_with_complexity(self):
        breakdown = ScoreBreakdown(1.0, 1.0, 0.0, 0.0, 0.0)

        assert ScoringEngine.combine(breakdown, Complexity.SIMPLE) == pytest.approx(0.525)
        assert ScoringEngine.combine(breakdown, Complexity.CRITICAL) == pytest.approx(0.375)

    def test_all_ones(self):
        breakdown = ScoreBreakdown(1.0, 1.0, 1.0, 1.0, 1.0)
        for complexity in Complexity:
            assert ScoringEngine.combine(breakdown, complexity) == pytest.approx(0.75)

    def test_all_zeros(self):
        breakdown = ScoreBreakdown(0.0, 0.0, 0.0, 0.0, 0.0)
        assert ScoringEngine.combine(breakdown, Complexity.MODERATE) == 0.0

    def test_score_total_matches_combine(self, engine, synthetic_catalog):
        request = RoutingRequest(task_type=TaskType.VISION, complexity=Complexity.COMPLEX)
        scored = engine.score(synthetic_catalog.get("beta-vision"), request)

        assert scored.total == pytest.approx(
            ScoringEngine.combine(scored.breakdown, Complexity.COMPLEX)
        )
        assert 0.0 <= scored.total <= 1.0


class TestReasoning:
    def test_fast_model_mentions_inference(self, engine, synthetic_catalog):
        scored = engine.score(synthetic_catalog.get("alpha-fast"), RoutingRequest())
        assert "Fast inference" in scored.reasoning
        assert "Cost-efficient" in scored.reasoning

    def test_standard_selection_when_nothing_stands_out(self, engine, synthetic_catalog):
        request = RoutingRequest(task_type=TaskType.VOICE, max_cost_per_1m=1.0)
        scored = engine.score(synthetic_catalog.get("beta-vision"), request)
        assert scored.reasoning == "Standard selection"
