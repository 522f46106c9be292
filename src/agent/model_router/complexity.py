"""Prompt analysis: turns a raw message into a RoutingRequest.

The ComplexityEstimator combines heuristic factors into a score (0.0-1.0)
that maps onto a complexity tier:

- message length and vocabulary richness
- analytical keyword signals
- RAG context size
- conversation depth

Score → tier mapping:
- 0.00-0.25: SIMPLE
- 0.25-0.50: MODERATE
- 0.50-0.75: COMPLEX
- 0.75-1.00: CRITICAL

infer_task_type and build_request add keyword-based task inference,
Indic-script detection and urgency detection on top.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from src.agent.model_router.decision import RoutingRequest
from src.agent.model_router.tables import Complexity, LatencyPriority, TaskType

log = structlog.get_logger(__name__)

# Devanagari through Malayalam blocks
INDIC_SCRIPT = re.compile(r"[\u0900-\u0D7F]")

URGENCY_KEYWORDS = ("urgent", "asap", "quickly", "immediate", "deadline")

# Checked in order; first rule with a matching keyword wins
TASK_KEYWORDS: tuple[tuple[TaskType, tuple[str, ...]], ...] = (
    (TaskType.CODE, ("code", "function", "class", "algorithm", "debug", "programming")),
    (TaskType.REASONING, ("analyze", "analyse", "compare", "evaluate", "assess", "solve", "reasoning")),
    (TaskType.VISION, ("image", "photo", "visual")),
    (TaskType.TRANSLATION, ("translate", "translation")),
    (TaskType.SEARCH, ("search", "latest", "news")),
    (TaskType.CONTENT, ("write", "story", "poem", "blog")),
)


@dataclass
class TaskComplexity:
    """Result of task complexity estimation.

    Attributes:
        score: Overall complexity score (0.0-1.0)
        factors: Dict of individual factor scores for observability
        complexity: Complexity tier derived from the score
    """

    score: float
    factors: dict[str, float]
    complexity: Complexity

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Complexity score must be 0.0-1.0, got {self.score}")


class ComplexityEstimator:
    """Estimates task complexity using heuristic factors."""

    SIMPLE_THRESHOLD = 0.25
    MODERATE_THRESHOLD = 0.5
    COMPLEX_THRESHOLD = 0.75

    COMPLEX_KEYWORDS = {
        "analyze",
        "architecture",
        "design",
        "security",
        "reasoning",
        "explain",
        "why",
        "compare",
        "evaluate",
        "assess",
        "review",
        "audit",
        "strategy",
        "optimize",
    }

    WEIGHTS = {
        "message_complexity": 0.4,
        "keyword_signals": 0.3,
        "context_requirement": 0.2,
        "conversation_depth": 0.1,
    }

    def estimate(
        self,
        message: str,
        context_length: int = 0,
        history_length: int = 0,
    ) -> TaskComplexity:
        """Estimate complexity of a task.

        Args:
            message: User message to analyze
            context_length: Number of tokens in RAG context
            history_length: Number of prior conversation turns

        Returns:
            TaskComplexity with score, factor breakdown and tier
        """
        factors = {
            "message_complexity": self._analyze_message(message),
            "keyword_signals": self._analyze_keywords(message),
            "context_requirement": self._ratio(context_length, 8000),
            "conversation_depth": self._ratio(history_length, 20),
        }

        score = sum(factors[key] * weight for key, weight in self.WEIGHTS.items())
        score = max(0.0, min(1.0, score))
        complexity = self.tier_for(score)

        log.debug(
            "complexity_estimator.estimated",
            score=round(score, 4),
            complexity=complexity.value,
            factors=factors,
        )

        return TaskComplexity(score=score, factors=factors, complexity=complexity)

    @classmethod
    def tier_for(cls, score: float) -> Complexity:
        if score < cls.SIMPLE_THRESHOLD:
            return Complexity.SIMPLE
        if score < cls.MODERATE_THRESHOLD:
            return Complexity.MODERATE
        if score < cls.COMPLEX_THRESHOLD:
            return Complexity.COMPLEX
        return Complexity.CRITICAL

    @staticmethod
    def _ratio(value: int, saturation: int) -> float:
        if value <= 0:
            return 0.0
        return min(value / saturation, 1.0)

    def _analyze_message(self, message: str) -> float:
        """Length, vocabulary richness and sentence count, 0.0-1.0."""
        words = message.split()
        if not words:
            return 0.0

        word_count = len(words)
        word_score = min(word_count / 200.0, 1.0)
        uniqueness_score = len({word.lower() for word in words}) / word_count
        sentences = [s for s in re.split(r"[.!?]+", message) if s.strip()]
        sentence_score = min(len(sentences) / 10.0, 1.0)

        # Short messages are mostly unique words, so damp uniqueness by length
        complexity = word_score * 0.5 + uniqueness_score * word_score * 0.3 + sentence_score * 0.2
        return max(0.0, min(complexity, 1.0))

    def _analyze_keywords(self, message: str) -> float:
        words = set(re.findall(r"\b\w+\b", message.lower()))
        count = len(words & self.COMPLEX_KEYWORDS)
        if count == 0:
            return 0.0
        # 1 keyword = 0.5, 3+ keywords = 1.0
        return min(0.25 + count * 0.25, 1.0)


def infer_task_type(message: str) -> TaskType:
    """Map a message to a TaskType by keyword. Defaults to CHAT."""
    lowered = message.lower()
    for task_type, keywords in TASK_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return task_type
    return TaskType.CHAT


def has_indic_script(message: str) -> bool:
    return INDIC_SCRIPT.search(message) is not None


def is_urgent(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in URGENCY_KEYWORDS)


def build_request(
    message: str,
    context_length: int = 0,
    history_length: int = 0,
    estimator: ComplexityEstimator | None = None,
    estimate: TaskComplexity | None = None,
    **overrides: object,
) -> RoutingRequest:
    """Derive a RoutingRequest from a raw prompt.

    Args:
        message: User message to analyze
        context_length: Number of tokens in RAG context
        history_length: Number of prior conversation turns
        estimator: Complexity estimator to use (a fresh one if None)
        estimate: Precomputed estimate for this message; skips the estimator
        **overrides: RoutingRequest fields that win over inferred values

    Returns:
        RoutingRequest reflecting the inferred task, complexity and flags
    """
    task_type = infer_task_type(message)
    if estimate is None:
        estimator = estimator or ComplexityEstimator()
        estimate = estimator.estimate(message, context_length, history_length)

    fields: dict[str, object] = {
        "task_type": task_type,
        "complexity": estimate.complexity,
        "requires_vision": task_type is TaskType.VISION,
        "requires_code": task_type is TaskType.CODE,
        "requires_reasoning": task_type is TaskType.REASONING,
        "requires_indian_languages": has_indic_script(message),
        "latency_priority": LatencyPriority.HIGH if is_urgent(message) else LatencyPriority.MEDIUM,
    }
    fields.update(overrides)

    log.debug(
        "complexity_estimator.request_built",
        task_type=task_type.value,
        complexity=estimate.complexity.value,
        indian_languages=fields["requires_indian_languages"],
        urgent=fields["latency_priority"] is LatencyPriority.HIGH,
    )

    return RoutingRequest(**fields)  # type: ignore[arg-type]
