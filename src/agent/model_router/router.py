"""Model router - selects the best model for a task from a heterogeneous catalog.

Pipeline for select_optimal_model:
1. CandidateFilter narrows the catalog (relaxing constraints if nothing fits)
2. ScoringEngine computes five sub-scores per candidate and a weighted total
3. Decision assembly: primary + up to three fallbacks, token cost estimate,
   confidence and a strategy label

Alternate entry points skip scoring entirely:
- get_model_by_category: flagship shortcut by category name
- get_cost_optimized_model: cheapest-acceptable lookup sorted by quality
- get_recommendation_for_agent: maps autonomy tier/vertical onto a request,
  then runs the main pipeline

Selection never raises and never returns None. An empty catalog yields a
hardcoded default-model decision.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.agent.model_router.catalog import (
    ModelCatalog,
    ModelDescriptor,
    default_catalog,
    load_catalog,
)
from src.agent.model_router.decision import (
    EstimatedCost,
    ModelScore,
    RoutingDecision,
    RoutingRequest,
    ScoreBreakdown,
)
from src.agent.model_router.filters import CandidateFilter
from src.agent.model_router.metrics import UsageLedger, UsageRecord
from src.agent.model_router.scoring import DEFAULT_COST_CEILING, ScoringEngine
from src.agent.model_router.tables import (
    AutonomyTier,
    Complexity,
    LatencyPriority,
    QualityPriority,
    RoutingTables,
    TaskType,
    Vertical,
    load_routing_tables,
)

if TYPE_CHECKING:
    from src.config import Settings

log = structlog.get_logger(__name__)

MAX_FALLBACKS = 3

# (input tokens, output tokens) assumed per call at each complexity tier
TOKEN_ESTIMATES: dict[Complexity, tuple[int, int]] = {
    Complexity.SIMPLE: (500, 300),
    Complexity.MODERATE: (2000, 1000),
    Complexity.COMPLEX: (8000, 4000),
    Complexity.CRITICAL: (20000, 10000),
}

STRATEGY_PREMIUM = "Premium-first with quality validation"
STRATEGY_SPEED = "Speed-optimized with fast fallback"
STRATEGY_COST = "Cost-constrained with tier-2 preference"
STRATEGY_MULTIMODAL = "Multimodal-capable with vision-model consideration"
STRATEGY_BALANCED = "Balanced cost-quality optimization"
STRATEGY_DEFAULT = "Fallback to default model"

# Last-resort model used only when there is nothing to score
DEFAULT_MODEL = ModelDescriptor(
    id="gpt-4o-mini",
    name="GPT-4o Mini",
    provider="openai",
    context_window=128_000,
    max_output=16_384,
    input_cost_per_1m=0.15,
    output_cost_per_1m=0.6,
    capabilities=frozenset({"text", "vision", "fast"}),
)
DEFAULT_MODEL_SCORE = 0.5
DEFAULT_MODEL_COST = EstimatedCost(input=0.0003, output=0.0006)

# Autonomy tiers whose agents get elevated quality priority
_TIER_QUALITY: dict[AutonomyTier, QualityPriority] = {
    AutonomyTier.L4: QualityPriority.PREMIUM,
    AutonomyTier.L3: QualityPriority.HIGH,
}

# Vertical capability preferences that translate into request flags
_CAPABILITY_FLAGS: dict[str, str] = {
    "vision": "requires_vision",
    "voice": "requires_voice",
    "reasoning": "requires_reasoning",
    "code": "requires_code",
    "multimodal": "requires_multimodal",
    "indian-languages": "requires_indian_languages",
}


class ModelRouter:
    """Multi-objective model selection over an injected catalog.

    The catalog and tables are immutable values; the only mutable state is
    the usage ledger, which selection never reads. select_optimal_model is
    therefore safe to call concurrently and is deterministic for a given
    request.
    """

    def __init__(
        self,
        catalog: ModelCatalog | None = None,
        tables: RoutingTables | None = None,
        ledger: UsageLedger | None = None,
        default_cost_ceiling: float = DEFAULT_COST_CEILING,
        fallback_prefix_size: int = 10,
        max_fallbacks: int = MAX_FALLBACKS,
    ) -> None:
        """Initialize model router.

        Args:
            catalog: Models to choose from. If None, uses the built-in catalog.
            tables: Routing tables. If None, uses the built-in tables.
            ledger: Usage ledger. If None, a fresh in-memory ledger is created.
            default_cost_ceiling: Cost ceiling assumed when a request has none
            fallback_prefix_size: Size of the last-resort catalog prefix
            max_fallbacks: Number of fallbacks to return (0-3)
        """
        if not 0 <= max_fallbacks <= MAX_FALLBACKS:
            raise ValueError(f"max_fallbacks must be 0-{MAX_FALLBACKS}")

        self._catalog = catalog if catalog is not None else default_catalog()
        self._tables = tables if tables is not None else RoutingTables()
        self._ledger = ledger if ledger is not None else UsageLedger()
        self._filter = CandidateFilter(self._catalog, self._tables, fallback_prefix_size)
        self._scorer = ScoringEngine(self._tables, default_cost_ceiling)
        self._max_fallbacks = max_fallbacks

        log.info(
            "model_router.initialized",
            model_count=len(self._catalog),
            providers=self._catalog.providers(),
            categories=len(self._tables.categories),
            max_fallbacks=max_fallbacks,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ModelRouter:
        """Build a router from application settings."""
        return cls(
            catalog=load_catalog(settings.routing_catalog_path),
            tables=load_routing_tables(settings.routing_tables_path),
            default_cost_ceiling=settings.routing_default_cost_ceiling,
            fallback_prefix_size=settings.routing_relaxation_prefix_size,
            max_fallbacks=settings.routing_max_fallbacks,
        )

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    @property
    def tables(self) -> RoutingTables:
        return self._tables

    @property
    def scorer(self) -> ScoringEngine:
        return self._scorer

    # ------------------------------------------------------------------ #
    # Main pipeline
    # ------------------------------------------------------------------ #

    def select_optimal_model(self, request: RoutingRequest) -> RoutingDecision:
        """Select a primary model and fallbacks for a request.

        Args:
            request: Routing constraints and priorities

        Returns:
            RoutingDecision with exactly one primary and 0-3 fallbacks
        """
        candidates = self._filter.select(request)
        scored = self._scorer.score_all(candidates.models, request)

        if not scored:
            return self._default_decision(request)

        # Stable sort: equal totals keep catalog order
        ranked = sorted(scored, key=lambda s: s.total, reverse=True)
        primary = ranked[0]
        fallbacks = tuple(ranked[1 : 1 + self._max_fallbacks])

        decision = RoutingDecision(
            primary=primary,
            fallbacks=fallbacks,
            estimated_cost=self.estimate_cost(primary.model, request.complexity),
            confidence=self._confidence(primary, fallbacks),
            strategy=self._strategy(request),
        )

        log.info(
            "model_router.decision_made",
            task_type=request.task_type.value,
            complexity=request.complexity.value,
            model_id=primary.model.id,
            provider=primary.model.provider,
            score=round(primary.total, 4),
            fallbacks=[f.model.id for f in fallbacks],
            candidate_count=len(candidates.models),
            relaxation=candidates.stage.value,
            confidence=round(decision.confidence, 4),
            strategy=decision.strategy,
        )

        return decision

    @staticmethod
    def estimate_cost(model: ModelDescriptor, complexity: Complexity) -> EstimatedCost:
        """Token cost estimate for one call at the given complexity tier."""
        input_tokens, output_tokens = TOKEN_ESTIMATES[complexity]
        return EstimatedCost(
            input=input_tokens / 1_000_000 * model.input_cost_per_1m,
            output=output_tokens / 1_000_000 * model.output_cost_per_1m,
        )

    @staticmethod
    def _confidence(primary: ModelScore, fallbacks: tuple[ModelScore, ...]) -> float:
        confidence = primary.total
        if fallbacks and primary.total - fallbacks[0].total > 0.2:
            confidence += 0.1
        if primary.breakdown.capability_match > 0.8:
            confidence += 0.05
        return max(0.0, min(confidence, 1.0))

    @staticmethod
    def _strategy(request: RoutingRequest) -> str:
        """Label the heuristic that dominates this request. First match wins."""
        if request.complexity is Complexity.CRITICAL:
            return STRATEGY_PREMIUM
        if request.latency_priority is LatencyPriority.HIGH:
            return STRATEGY_SPEED
        if request.max_cost_per_1m is not None and request.max_cost_per_1m < 1:
            return STRATEGY_COST
        if request.requires_multimodal or request.requires_vision:
            return STRATEGY_MULTIMODAL
        return STRATEGY_BALANCED

    def _default_decision(self, request: RoutingRequest) -> RoutingDecision:
        log.error(
            "model_router.default_model_used",
            task_type=request.task_type.value,
            model_id=DEFAULT_MODEL.id,
            reason="no_candidates",
        )
        neutral = ScoreBreakdown(
            capability_match=DEFAULT_MODEL_SCORE,
            cost_efficiency=DEFAULT_MODEL_SCORE,
            quality=DEFAULT_MODEL_SCORE,
            context_fit=DEFAULT_MODEL_SCORE,
            provider_trust=DEFAULT_MODEL_SCORE,
        )
        return RoutingDecision(
            primary=ModelScore(
                model=DEFAULT_MODEL,
                total=DEFAULT_MODEL_SCORE,
                breakdown=neutral,
                reasoning="Default model (no candidates available)",
            ),
            fallbacks=(),
            estimated_cost=DEFAULT_MODEL_COST,
            confidence=DEFAULT_MODEL_SCORE,
            strategy=STRATEGY_DEFAULT,
        )

    # ------------------------------------------------------------------ #
    # Shortcut lookups
    # ------------------------------------------------------------------ #

    def list_categories(self) -> dict[str, str]:
        """Flagship category name -> model id."""
        return dict(self._tables.categories)

    def get_model_by_category(self, category: str) -> ModelDescriptor | None:
        """Return the flagship model for a category, or None if unknown."""
        model_id = self._tables.categories.get(category)
        if model_id is None:
            log.debug("model_router.category_unknown", category=category)
            return None

        model = self._catalog.get(model_id)
        if model is None:
            log.warning(
                "model_router.category_model_missing",
                category=category,
                model_id=model_id,
            )
        return model

    def get_cost_optimized_model(
        self,
        max_cost_per_1m: float,
        required_capabilities: list[str] | tuple[str, ...] = (),
    ) -> ModelDescriptor | None:
        """Best-quality model at or under a cost ceiling with every required tag.

        Args:
            max_cost_per_1m: Ceiling on input cost per million tokens
            required_capabilities: Capability tags the model must all carry

        Returns:
            The highest-quality qualifying model, or None if none qualify
        """
        required = set(required_capabilities)
        qualifying = [
            model
            for model in self._catalog
            if model.input_cost_per_1m <= max_cost_per_1m and required <= model.capabilities
        ]
        if not qualifying:
            log.debug(
                "model_router.cost_optimized_none",
                max_cost_per_1m=max_cost_per_1m,
                required=sorted(required),
            )
            return None

        neutral = RoutingRequest(task_type=TaskType.CHAT, complexity=Complexity.MODERATE)
        ranked = sorted(
            qualifying,
            key=lambda model: self._scorer.quality(model, neutral),
            reverse=True,
        )
        return ranked[0]

    # ------------------------------------------------------------------ #
    # Agent adapter
    # ------------------------------------------------------------------ #

    def build_agent_request(
        self,
        autonomy_tier: AutonomyTier,
        vertical: Vertical | str | None,
        task_type: TaskType,
    ) -> RoutingRequest:
        """Translate an agent's autonomy tier and vertical into a RoutingRequest."""
        complexity = self._tables.tier_complexity.get(autonomy_tier, Complexity.MODERATE)
        quality = _TIER_QUALITY.get(autonomy_tier, QualityPriority.STANDARD)

        preferred: tuple[str, ...] = ()
        flags: dict[str, bool] = {}
        vertical_value: str | None = None
        if vertical is not None:
            try:
                vertical_key = Vertical(vertical)
            except ValueError:
                log.warning("model_router.vertical_unknown", vertical=str(vertical))
                vertical_value = str(vertical)
            else:
                vertical_value = vertical_key.value
                preference = self._tables.vertical_preferences.get(vertical_key)
                if preference is not None:
                    preferred = preference.providers
                    for capability in preference.capabilities:
                        flag = _CAPABILITY_FLAGS.get(capability)
                        if flag:
                            flags[flag] = True

        return RoutingRequest(
            task_type=task_type,
            complexity=complexity,
            preferred_providers=frozenset(preferred),
            autonomy_tier=autonomy_tier,
            vertical=vertical_value,
            quality_priority=quality,
            **flags,
        )

    def get_recommendation_for_agent(
        self,
        autonomy_tier: AutonomyTier,
        vertical: Vertical | str | None,
        task_type: TaskType = TaskType.AGENTS,
    ) -> RoutingDecision:
        """Route for an agent by autonomy tier and domain vertical."""
        request = self.build_agent_request(autonomy_tier, vertical, task_type)
        log.debug(
            "model_router.agent_request_built",
            autonomy_tier=autonomy_tier.value,
            vertical=request.vertical,
            complexity=request.complexity.value,
            quality_priority=request.quality_priority.value,
            preferred_providers=sorted(request.preferred_providers),
        )
        return self.select_optimal_model(request)

    # ------------------------------------------------------------------ #
    # Usage ledger
    # ------------------------------------------------------------------ #

    def record_usage(self, model_id: str, latency_ms: float, success: bool) -> None:
        """Record a call outcome for observability. Does not affect routing."""
        self._ledger.record_usage(model_id, latency_ms, success)

    def get_usage_stats(self) -> dict[str, UsageRecord]:
        return self._ledger.get_usage_stats()
