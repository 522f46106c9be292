"""Model routing API endpoints.

POST /api/v1/routing/select                  - Select primary + fallback models
POST /api/v1/routing/analyze                 - Infer a request from a prompt, then select
GET  /api/v1/routing/categories              - Flagship category -> model id
GET  /api/v1/routing/categories/{category}   - Flagship model for a category
GET  /api/v1/routing/cost-optimized          - Best-quality model under a cost ceiling
POST /api/v1/routing/agents/recommendation   - Route for an agent by tier/vertical
POST /api/v1/routing/usage                   - Record a call outcome
GET  /api/v1/routing/usage                   - Usage ledger snapshot

The ModelRouter is a module-level singleton wired at startup via
configure_model_router(); tests can call it directly or override
get_model_router with app.dependency_overrides.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.agent.model_router import (
    AutonomyTier,
    Complexity,
    ComplexityEstimator,
    LatencyPriority,
    ModelDescriptor,
    ModelRouter,
    QualityPriority,
    RoutingDecision,
    RoutingRequest,
    TaskType,
    build_request,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/routing", tags=["model-routing"])

_model_router: ModelRouter | None = None
_estimator = ComplexityEstimator()


def configure_model_router(model_router: ModelRouter) -> None:
    """Wire up the module-level router at application startup."""
    global _model_router
    _model_router = model_router


def get_model_router() -> ModelRouter:
    if _model_router is None:
        raise RuntimeError("ModelRouter not configured. Call configure_model_router() at startup.")
    return _model_router


# ------------------------------------------------------------------ #
# Schemas
# ------------------------------------------------------------------ #


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class SelectModelRequest(BaseModel):
    task_type: TaskType = TaskType.CHAT
    complexity: Complexity = Complexity.MODERATE
    requires_vision: bool = False
    requires_voice: bool = False
    requires_reasoning: bool = False
    requires_code: bool = False
    requires_multimodal: bool = False
    requires_indian_languages: bool = False
    max_cost_per_1m: float | None = Field(default=None, ge=0)
    min_context_window: int | None = Field(default=None, ge=0)
    preferred_providers: list[str] = Field(default_factory=list)
    excluded_providers: list[str] = Field(default_factory=list)
    autonomy_tier: AutonomyTier | None = None
    vertical: str | None = None
    latency_priority: LatencyPriority = LatencyPriority.MEDIUM
    quality_priority: QualityPriority = QualityPriority.STANDARD

    def to_routing_request(self) -> RoutingRequest:
        data = self.model_dump()
        data["preferred_providers"] = frozenset(self.preferred_providers)
        data["excluded_providers"] = frozenset(self.excluded_providers)
        return RoutingRequest(**data)


class AnalyzeRequest(BaseModel):
    message: str = Field(min_length=1, max_length=100_000)
    context_length: int = Field(default=0, ge=0)
    history_length: int = Field(default=0, ge=0)
    max_cost_per_1m: float | None = Field(default=None, ge=0)
    preferred_providers: list[str] = Field(default_factory=list)
    excluded_providers: list[str] = Field(default_factory=list)


class AgentRecommendationRequest(BaseModel):
    autonomy_tier: AutonomyTier
    vertical: str | None = None
    task_type: TaskType = TaskType.AGENTS


class RecordUsageRequest(BaseModel):
    model_id: str = Field(min_length=1)
    latency_ms: float = Field(ge=0)
    success: bool

    model_config = ConfigDict(protected_namespaces=())


class ScoreBreakdownResponse(_CamelModel):
    capability_match: float
    cost_efficiency: float
    quality: float
    context_fit: float
    provider_trust: float


class PrimaryModelResponse(_CamelModel):
    model_id: str
    model_name: str
    provider: str
    score: float
    reasoning: str
    breakdown: ScoreBreakdownResponse


class FallbackModelResponse(_CamelModel):
    model_id: str
    model_name: str
    provider: str
    score: float


class EstimatedCostResponse(_CamelModel):
    input: float
    output: float


class RoutingDecisionResponse(_CamelModel):
    primary: PrimaryModelResponse
    fallbacks: list[FallbackModelResponse]
    estimated_cost: EstimatedCostResponse
    confidence: float
    strategy: str

    @classmethod
    def from_decision(cls, decision: RoutingDecision) -> RoutingDecisionResponse:
        return cls.model_validate(decision.to_dict())


class AnalyzeResponse(_CamelModel):
    task_type: TaskType
    complexity: Complexity
    complexity_score: float
    requires_indian_languages: bool
    latency_priority: LatencyPriority
    decision: RoutingDecisionResponse


class ModelResponse(_CamelModel):
    id: str
    name: str
    provider: str
    context_window: int
    max_output: int
    input_cost_per_1m: float
    output_cost_per_1m: float
    capabilities: list[str]
    supported_languages: list[str]

    @classmethod
    def from_descriptor(cls, model: ModelDescriptor) -> ModelResponse:
        return cls(
            id=model.id,
            name=model.name,
            provider=model.provider,
            context_window=model.context_window,
            max_output=model.max_output,
            input_cost_per_1m=model.input_cost_per_1m,
            output_cost_per_1m=model.output_cost_per_1m,
            capabilities=sorted(model.capabilities),
            supported_languages=list(model.supported_languages),
        )


class UsageRecordResponse(_CamelModel):
    model_id: str
    call_count: int
    avg_latency_ms: float
    error_rate: float


# ------------------------------------------------------------------ #
# Endpoints
# ------------------------------------------------------------------ #


@router.post("/select", response_model=RoutingDecisionResponse)
async def select_model(
    body: SelectModelRequest,
    model_router: ModelRouter = Depends(get_model_router),
) -> RoutingDecisionResponse:
    """Select the optimal model plus ranked fallbacks for a request."""
    decision = model_router.select_optimal_model(body.to_routing_request())
    log.info(
        "api.routing.selected",
        task_type=body.task_type.value,
        model_id=decision.primary.model.id,
    )
    return RoutingDecisionResponse.from_decision(decision)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_and_select(
    body: AnalyzeRequest,
    model_router: ModelRouter = Depends(get_model_router),
) -> AnalyzeResponse:
    """Infer task type, complexity and flags from a prompt, then select."""
    estimate = _estimator.estimate(body.message, body.context_length, body.history_length)
    request = build_request(
        body.message,
        body.context_length,
        body.history_length,
        estimate=estimate,
        max_cost_per_1m=body.max_cost_per_1m,
        preferred_providers=frozenset(body.preferred_providers),
        excluded_providers=frozenset(body.excluded_providers),
    )
    decision = model_router.select_optimal_model(request)

    log.info(
        "api.routing.analyzed",
        task_type=request.task_type.value,
        complexity=request.complexity.value,
        model_id=decision.primary.model.id,
    )

    return AnalyzeResponse(
        task_type=request.task_type,
        complexity=request.complexity,
        complexity_score=estimate.score,
        requires_indian_languages=request.requires_indian_languages,
        latency_priority=request.latency_priority,
        decision=RoutingDecisionResponse.from_decision(decision),
    )


@router.get("/categories", response_model=dict[str, str])
async def list_categories(
    model_router: ModelRouter = Depends(get_model_router),
) -> dict[str, str]:
    return model_router.list_categories()


@router.get("/categories/{category}", response_model=ModelResponse)
async def get_model_by_category(
    category: str,
    model_router: ModelRouter = Depends(get_model_router),
) -> ModelResponse:
    model = model_router.get_model_by_category(category)
    if model is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No model for category '{category}'",
        )
    return ModelResponse.from_descriptor(model)


@router.get("/cost-optimized", response_model=ModelResponse)
async def get_cost_optimized_model(
    max_cost: float = Query(..., ge=0, description="Ceiling on input cost per 1M tokens"),
    capabilities: list[str] | None = Query(default=None, description="Required capability tags"),
    model_router: ModelRouter = Depends(get_model_router),
) -> ModelResponse:
    """Highest-quality model under max_cost that has every listed capability."""
    model = model_router.get_cost_optimized_model(max_cost, capabilities or [])
    if model is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No model satisfies the cost ceiling and capabilities",
        )
    return ModelResponse.from_descriptor(model)


@router.post("/agents/recommendation", response_model=RoutingDecisionResponse)
async def get_agent_recommendation(
    body: AgentRecommendationRequest,
    model_router: ModelRouter = Depends(get_model_router),
) -> RoutingDecisionResponse:
    decision = model_router.get_recommendation_for_agent(
        body.autonomy_tier,
        body.vertical,
        body.task_type,
    )
    log.info(
        "api.routing.agent_recommended",
        autonomy_tier=body.autonomy_tier.value,
        vertical=body.vertical,
        model_id=decision.primary.model.id,
    )
    return RoutingDecisionResponse.from_decision(decision)


@router.post("/usage", status_code=status.HTTP_204_NO_CONTENT)
async def record_usage(
    body: RecordUsageRequest,
    model_router: ModelRouter = Depends(get_model_router),
) -> Response:
    """Record the outcome of a call made with a routed model."""
    model_router.record_usage(body.model_id, body.latency_ms, body.success)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/usage", response_model=dict[str, UsageRecordResponse])
async def get_usage_stats(
    model_router: ModelRouter = Depends(get_model_router),
) -> dict[str, UsageRecordResponse]:
    stats = model_router.get_usage_stats()
    return {
        model_id: UsageRecordResponse.model_validate(record.to_dict())
        for model_id, record in stats.items()
    }
