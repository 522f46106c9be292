"""Multi-provider model routing engine.

Selects the best LLM for a task from a heterogeneous catalog by filtering
on hard constraints, scoring candidates on capability, cost, quality,
context fit and provider trust, and returning a primary model with ranked
fallbacks. Also provides category shortcuts, cost-optimized lookup, an
autonomy-tier/vertical adapter for agents and an in-memory usage ledger.

The engine is framework-free; src.api.model_routing exposes it over HTTP.
"""

from __future__ import annotations

from src.agent.model_router.catalog import ModelCatalog, ModelDescriptor, default_catalog, load_catalog
from src.agent.model_router.complexity import (
    ComplexityEstimator,
    TaskComplexity,
    build_request,
    infer_task_type,
)
from src.agent.model_router.decision import (
    EstimatedCost,
    ModelScore,
    RoutingDecision,
    RoutingRequest,
    ScoreBreakdown,
)
from src.agent.model_router.filters import CandidateFilter, CandidateSet, RelaxationStage
from src.agent.model_router.metrics import UsageLedger, UsageRecord
from src.agent.model_router.router import ModelRouter
from src.agent.model_router.scoring import ScoringEngine
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

__all__ = [
    "AutonomyTier",
    "CandidateFilter",
    "CandidateSet",
    "Complexity",
    "ComplexityEstimator",
    "EstimatedCost",
    "LatencyPriority",
    "ModelCatalog",
    "ModelDescriptor",
    "ModelRouter",
    "ModelScore",
    "QualityPriority",
    "RelaxationStage",
    "RoutingDecision",
    "RoutingRequest",
    "RoutingTables",
    "ScoreBreakdown",
    "ScoringEngine",
    "TaskComplexity",
    "TaskType",
    "UsageLedger",
    "UsageRecord",
    "Vertical",
    "build_request",
    "default_catalog",
    "infer_task_type",
    "load_catalog",
    "load_routing_tables",
]
