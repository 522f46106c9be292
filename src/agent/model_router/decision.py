"""Request and decision value types for model routing.

RoutingRequest is what a caller asks for; RoutingDecision is what the
router answers with. Both are frozen: a decision is recomputed per request
and never persisted by the router.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from src.agent.model_router.catalog import ModelDescriptor
from src.agent.model_router.tables import (
    AutonomyTier,
    Complexity,
    LatencyPriority,
    QualityPriority,
    TaskType,
)


@dataclass(frozen=True)
class RoutingRequest:
    """Constraints and priorities for one routing decision.

    Attributes:
        task_type: Kind of work to route
        complexity: Complexity tier (selects the cost/quality weights)
        requires_vision: Model must accept images
        requires_voice: Model must handle speech
        requires_reasoning: Caller wants a reasoning-capable model
        requires_code: Caller wants a code-capable model
        requires_multimodal: Caller wants a multimodal model
        requires_indian_languages: Model must handle Indian languages
        max_cost_per_1m: Ceiling on input cost per million tokens
        min_context_window: Minimum context window in tokens
        preferred_providers: If non-empty, only these providers qualify
        excluded_providers: Providers that never qualify
        autonomy_tier: Agent autonomy tier, if routing for an agent
        vertical: Agent domain vertical, if routing for an agent
        latency_priority: How much speed matters
        quality_priority: How much output quality matters
    """

    task_type: TaskType = TaskType.CHAT
    complexity: Complexity = Complexity.MODERATE
    requires_vision: bool = False
    requires_voice: bool = False
    requires_reasoning: bool = False
    requires_code: bool = False
    requires_multimodal: bool = False
    requires_indian_languages: bool = False
    max_cost_per_1m: float | None = None
    min_context_window: int | None = None
    preferred_providers: frozenset[str] = field(default_factory=frozenset)
    excluded_providers: frozenset[str] = field(default_factory=frozenset)
    autonomy_tier: AutonomyTier | None = None
    vertical: str | None = None
    latency_priority: LatencyPriority = LatencyPriority.MEDIUM
    quality_priority: QualityPriority = QualityPriority.STANDARD

    def __post_init__(self) -> None:
        if not isinstance(self.preferred_providers, frozenset):
            object.__setattr__(self, "preferred_providers", frozenset(self.preferred_providers))
        if not isinstance(self.excluded_providers, frozenset):
            object.__setattr__(self, "excluded_providers", frozenset(self.excluded_providers))

    def without_provider_and_cost_constraints(self) -> RoutingRequest:
        """Copy with provider preferences/exclusions and the cost cap dropped.

        Capability and context constraints are kept.
        """
        return replace(
            self,
            preferred_providers=frozenset(),
            excluded_providers=frozenset(),
            max_cost_per_1m=None,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """The five sub-scores behind a model's total score, each 0.0-1.0."""

    capability_match: float
    cost_efficiency: float
    quality: float
    context_fit: float
    provider_trust: float

    def as_dict(self) -> dict[str, float]:
        return {
            "capabilityMatch": self.capability_match,
            "costEfficiency": self.cost_efficiency,
            "quality": self.quality,
            "contextFit": self.context_fit,
            "providerTrust": self.provider_trust,
        }


@dataclass(frozen=True)
class ModelScore:
    """A candidate model with its total score and reasoning."""

    model: ModelDescriptor
    total: float
    breakdown: ScoreBreakdown
    reasoning: str


@dataclass(frozen=True)
class EstimatedCost:
    """Estimated USD cost of one call, split into input and output."""

    input: float
    output: float

    @property
    def total(self) -> float:
        return self.input + self.output


@dataclass(frozen=True)
class RoutingDecision:
    """Primary model, ordered fallbacks and the metadata behind the choice.

    Attributes:
        primary: Highest-scoring candidate
        fallbacks: Up to three next-best candidates, best first
        estimated_cost: Token cost estimate for the primary model
        confidence: Confidence in the primary choice (0.0-1.0)
        strategy: Label of the heuristic that dominated the decision
    """

    primary: ModelScore
    fallbacks: tuple[ModelScore, ...]
    estimated_cost: EstimatedCost
    confidence: float
    strategy: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape served by the routing API."""
        return {
            "primary": {
                "modelId": self.primary.model.id,
                "modelName": self.primary.model.name,
                "provider": self.primary.model.provider,
                "score": self.primary.total,
                "reasoning": self.primary.reasoning,
                "breakdown": self.primary.breakdown.as_dict(),
            },
            "fallbacks": [
                {
                    "modelId": fallback.model.id,
                    "modelName": fallback.model.name,
                    "provider": fallback.model.provider,
                    "score": fallback.total,
                }
                for fallback in self.fallbacks
            ],
            "estimatedCost": {
                "input": self.estimated_cost.input,
                "output": self.estimated_cost.output,
            },
            "confidence": self.confidence,
            "strategy": self.strategy,
        }
