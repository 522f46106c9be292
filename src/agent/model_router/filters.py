"""Candidate filtering with staged constraint relaxation.

The filter narrows the catalog to models that satisfy every hard constraint
of a RoutingRequest. It never returns an empty list for a non-empty catalog:

1. Full constraints
2. Provider preferences/exclusions and cost ceiling dropped
   (capability and context constraints kept)
3. Unfiltered catalog prefix (first N models) as a last resort
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from src.agent.model_router.catalog import ModelCatalog, ModelDescriptor
    from src.agent.model_router.decision import RoutingRequest
    from src.agent.model_router.tables import RoutingTables

log = structlog.get_logger(__name__)


class RelaxationStage(str, Enum):
    """Which pass of the filter produced the candidate set."""

    NONE = "none"
    PROVIDER_AND_COST_DROPPED = "provider_and_cost_dropped"
    CATALOG_PREFIX = "catalog_prefix"


@dataclass(frozen=True)
class CandidateSet:
    """Filter output: candidates plus the relaxation stage that produced them."""

    models: tuple[ModelDescriptor, ...]
    stage: RelaxationStage

    @property
    def relaxed(self) -> bool:
        return self.stage is not RelaxationStage.NONE


class CandidateFilter:
    """Applies a request's hard constraints to the catalog."""

    def __init__(
        self,
        catalog: ModelCatalog,
        tables: RoutingTables,
        fallback_prefix_size: int = 10,
    ) -> None:
        """Initialize candidate filter.

        Args:
            catalog: Catalog to filter
            tables: Routing tables (supplies the regional provider)
            fallback_prefix_size: Size of the last-resort catalog prefix
        """
        if fallback_prefix_size < 1:
            raise ValueError("fallback_prefix_size must be at least 1")

        self._catalog = catalog
        self._tables = tables
        self._fallback_prefix_size = fallback_prefix_size

    def matches(self, model: ModelDescriptor, request: RoutingRequest) -> bool:
        """Return True if the model passes every hard constraint."""
        if model.provider in request.excluded_providers:
            return False
        if request.preferred_providers and model.provider not in request.preferred_providers:
            return False
        if request.max_cost_per_1m is not None and model.input_cost_per_1m > request.max_cost_per_1m:
            return False
        if (
            request.min_context_window is not None
            and model.context_window < request.min_context_window
        ):
            return False
        if request.requires_vision and not (
            "vision" in model.capabilities or "multimodal" in model.capabilities
        ):
            return False
        if request.requires_voice and not model.supports_voice:
            return False
        if request.requires_indian_languages and not (
            "indian-languages" in model.capabilities
            or model.provider == self._tables.regional_provider
        ):
            return False
        return True

    def filter(self, request: RoutingRequest) -> list[ModelDescriptor]:
        """Apply the request's constraints without any relaxation."""
        return [model for model in self._catalog if self.matches(model, request)]

    def select(self, request: RoutingRequest) -> CandidateSet:
        """Filter the catalog, relaxing constraints until something qualifies.

        Args:
            request: Routing request

        Returns:
            CandidateSet; empty only when the catalog itself is empty
        """
        candidates = self.filter(request)
        if candidates:
            return CandidateSet(tuple(candidates), RelaxationStage.NONE)

        relaxed_request = request.without_provider_and_cost_constraints()
        candidates = self.filter(relaxed_request)
        if candidates:
            log.warning(
                "candidate_filter.relaxed",
                stage=RelaxationStage.PROVIDER_AND_COST_DROPPED.value,
                task_type=request.task_type.value,
                excluded_providers=sorted(request.excluded_providers),
                preferred_providers=sorted(request.preferred_providers),
                max_cost_per_1m=request.max_cost_per_1m,
                candidate_count=len(candidates),
            )
            return CandidateSet(tuple(candidates), RelaxationStage.PROVIDER_AND_COST_DROPPED)

        candidates = self._catalog.prefix(self._fallback_prefix_size)
        log.warning(
            "candidate_filter.relaxed",
            stage=RelaxationStage.CATALOG_PREFIX.value,
            task_type=request.task_type.value,
            candidate_count=len(candidates),
        )
        return CandidateSet(tuple(candidates), RelaxationStage.CATALOG_PREFIX)
