"""Multi-factor scoring of candidate models.

Each candidate gets five independent sub-scores in [0.0, 1.0]:

- capability_match: share of the request's wanted capability keywords the
  model's tags fuzzy-match
- cost_efficiency: linear in average price against a cost ceiling
- quality: static quality table, penalised under premium requests
- context_fit: context window headroom plus latency/autonomy bonuses
- provider_trust: static provider trust table

Combination:
    total = capability * 0.35
          + cost * cost_weight * 0.25
          + quality * quality_weight * 0.25
          + context * 0.10
          + trust * 0.05

where (cost_weight, quality_weight) depends on the complexity tier and
always sums to 1.0.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from src.agent.model_router.decision import ModelScore, RoutingRequest, ScoreBreakdown
from src.agent.model_router.tables import (
    Complexity,
    LatencyPriority,
    QualityPriority,
    RoutingTables,
)

if TYPE_CHECKING:
    from src.agent.model_router.catalog import ModelDescriptor

log = structlog.get_logger(__name__)

# (cost_weight, quality_weight) per complexity tier
COMPLEXITY_WEIGHTS: dict[Complexity, tuple[float, float]] = {
    Complexity.SIMPLE: (0.7, 0.3),
    Complexity.MODERATE: (0.5, 0.5),
    Complexity.COMPLEX: (0.3, 0.7),
    Complexity.CRITICAL: (0.1, 0.9),
}

CAPABILITY_WEIGHT = 0.35
COST_WEIGHT = 0.25
QUALITY_WEIGHT = 0.25
CONTEXT_WEIGHT = 0.10
TRUST_WEIGHT = 0.05

DEFAULT_COST_CEILING = 100.0
EXPENSIVE_FLOOR = 0.1
EMPTY_CAPABILITY_SCORE = 0.5
PREMIUM_QUALITY_THRESHOLD = 0.85
PREMIUM_PENALTY = 0.7

# Reasoning thresholds
STRONG_CAPABILITY = 0.8
STRONG_COST = 0.7
STRONG_QUALITY = 0.85


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _fuzzy_match(tag: str, keyword: str) -> bool:
    return keyword in tag or tag in keyword


class ScoringEngine:
    """Scores candidate models against a routing request.

    Stateless apart from its injected tables, so one instance can serve
    any number of concurrent callers.
    """

    def __init__(
        self,
        tables: RoutingTables,
        default_cost_ceiling: float = DEFAULT_COST_CEILING,
    ) -> None:
        """Initialize scoring engine.

        Args:
            tables: Quality, trust and keyword tables
            default_cost_ceiling: Ceiling used when a request has no cost cap
        """
        if default_cost_ceiling <= 0:
            raise ValueError("default_cost_ceiling must be positive")
        for complexity, (cost_w, quality_w) in COMPLEXITY_WEIGHTS.items():
            if abs(cost_w + quality_w - 1.0) > 1e-9:
                raise ValueError(f"Weights for {complexity.value} must sum to 1.0")

        self._tables = tables
        self._default_cost_ceiling = default_cost_ceiling

    # ------------------------------------------------------------------ #
    # Sub-scores
    # ------------------------------------------------------------------ #

    def wanted_capabilities(self, request: RoutingRequest) -> list[str]:
        """Union of task-type keywords and autonomy-tier keywords, in order."""
        keywords = list(self._tables.keywords_for_task(request.task_type))
        keywords.extend(self._tables.keywords_for_tier(request.autonomy_tier))
        return list(dict.fromkeys(keywords))

    def capability_match(self, model: ModelDescriptor, request: RoutingRequest) -> float:
        wanted = self.wanted_capabilities(request)
        if not wanted:
            return EMPTY_CAPABILITY_SCORE

        matched = sum(
            1
            for keyword in wanted
            if any(_fuzzy_match(tag, keyword) for tag in model.capabilities)
        )
        return _clamp(matched / len(wanted))

    def cost_efficiency(self, model: ModelDescriptor, request: RoutingRequest) -> float:
        """Linear cost score: free = 1.0, at or above the ceiling = 0.1."""
        ceiling = (
            request.max_cost_per_1m
            if request.max_cost_per_1m is not None
            else self._default_cost_ceiling
        )
        average = model.average_cost_per_1m
        if average == 0:
            return 1.0
        if average >= ceiling:
            return EXPENSIVE_FLOOR
        return _clamp(1.0 - average / ceiling)

    def quality(self, model: ModelDescriptor, request: RoutingRequest) -> float:
        """Static quality, multiplied by 0.7 under a premium request when < 0.85."""
        score = self._tables.quality_for(model.id)
        if (
            request.quality_priority is QualityPriority.PREMIUM
            and score < PREMIUM_QUALITY_THRESHOLD
        ):
            score *= PREMIUM_PENALTY
        return _clamp(score)

    def context_fit(self, model: ModelDescriptor, request: RoutingRequest) -> float:
        score = 0.5
        if request.min_context_window is not None:
            if model.context_window >= request.min_context_window:
                score = 1.0
            elif model.context_window >= request.min_context_window / 2:
                score = 0.6
            else:
                score = 0.3

        if request.latency_priority is LatencyPriority.HIGH and "fast" in model.capabilities:
            score += 0.2

        tier_keywords = self._tables.keywords_for_tier(request.autonomy_tier)
        if tier_keywords and any(keyword in model.capabilities for keyword in tier_keywords):
            score += 0.15

        return min(score, 1.0)

    def provider_trust(self, model: ModelDescriptor) -> float:
        return _clamp(self._tables.trust_for(model.provider))

    # ------------------------------------------------------------------ #
    # Combination
    # ------------------------------------------------------------------ #

    def breakdown(self, model: ModelDescriptor, request: RoutingRequest) -> ScoreBreakdown:
        return ScoreBreakdown(
            capability_match=self.capability_match(model, request),
            cost_efficiency=self.cost_efficiency(model, request),
            quality=self.quality(model, request),
            context_fit=self.context_fit(model, request),
            provider_trust=self.provider_trust(model),
        )

    @staticmethod
    def combine(breakdown: ScoreBreakdown, complexity: Complexity) -> float:
        cost_weight, quality_weight = COMPLEXITY_WEIGHTS[complexity]
        total = (
            breakdown.capability_match * CAPABILITY_WEIGHT
            + breakdown.cost_efficiency * cost_weight * COST_WEIGHT
            + breakdown.quality * quality_weight * QUALITY_WEIGHT
            + breakdown.context_fit * CONTEXT_WEIGHT
            + breakdown.provider_trust * TRUST_WEIGHT
        )
        return _clamp(total)

    def score(self, model: ModelDescriptor, request: RoutingRequest) -> ModelScore:
        """Score one model against a request."""
        breakdown = self.breakdown(model, request)
        total = self.combine(breakdown, request.complexity)
        reasoning = self._reasoning(model, breakdown)

        log.debug(
            "scoring_engine.scored",
            model_id=model.id,
            total=round(total, 4),
            **breakdown.as_dict(),
        )

        return ModelScore(model=model, total=total, breakdown=breakdown, reasoning=reasoning)

    def score_all(
        self,
        models: Iterable[ModelDescriptor],
        request: RoutingRequest,
    ) -> list[ModelScore]:
        return [self.score(model, request) for model in models]

    @staticmethod
    def _reasoning(model: ModelDescriptor, breakdown: ScoreBreakdown) -> str:
        """Human-readable clauses for sub-scores that cross their thresholds."""
        clauses: list[str] = []
        if breakdown.capability_match > STRONG_CAPABILITY:
            clauses.append("Strong capability match")
        if breakdown.cost_efficiency > STRONG_COST:
            clauses.append("Cost-efficient")
        if breakdown.quality > STRONG_QUALITY:
            clauses.append("High quality model")
        if "fast" in model.capabilities:
            clauses.append("Fast inference")

        return ", ".join(clauses) if clauses else "Standard selection"
