"""Static routing tables and the closed vocabularies they are keyed by.

Everything the scoring engine treats as configuration rather than derived
data lives here:
- Task type -> capability keywords
- Autonomy tier -> capability keywords and complexity tier
- Domain vertical -> preferred providers and capabilities
- Model id -> static quality score
- Provider -> trust score
- Flagship category -> model id

RoutingTables is immutable once built. The defaults are loaded once at
process start; a JSON file can override any subset of them (see
load_routing_tables), and tests construct their own tables directly.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import structlog

log = structlog.get_logger(__name__)


class TaskType(str, Enum):
    """Kinds of work a routing request can describe."""

    CHAT = "chat"
    CODE = "code"
    REASONING = "reasoning"
    VISION = "vision"
    CONTENT = "content"
    TRANSLATION = "translation"
    SEARCH = "search"
    VOICE = "voice"
    MULTIMODAL = "multimodal"
    AGENTS = "agents"


class Complexity(str, Enum):
    """Complexity tier of a task. Drives the cost/quality weight split."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    CRITICAL = "critical"


class LatencyPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QualityPriority(str, Enum):
    STANDARD = "standard"
    HIGH = "high"
    PREMIUM = "premium"


class AutonomyTier(str, Enum):
    """ROMA autonomy levels, lowest (L0) to highest (L4)."""

    L0 = "L0"
    L1 = "L1"
    L2 = "L2"
    L3 = "L3"
    L4 = "L4"


class Vertical(str, Enum):
    """Business verticals agents are deployed into."""

    SOCIAL = "social"
    SEO = "seo"
    WEB = "web"
    SALES = "sales"
    WHATSAPP = "whatsapp"
    LINKEDIN = "linkedin"
    PERFORMANCE = "performance"
    PLATFORM = "platform"


@dataclass(frozen=True)
class VerticalPreference:
    """Provider and capability preferences for one vertical."""

    providers: tuple[str, ...]
    capabilities: tuple[str, ...] = ()


# ------------------------------------------------------------------ #
# Built-in defaults
# ------------------------------------------------------------------ #

DEFAULT_TASK_KEYWORDS: dict[TaskType, tuple[str, ...]] = {
    TaskType.CHAT: ("text", "chat"),
    TaskType.CODE: ("code", "reasoning"),
    TaskType.REASONING: ("reasoning", "analysis"),
    TaskType.VISION: ("vision", "multimodal"),
    TaskType.CONTENT: ("text", "creative"),
    TaskType.TRANSLATION: ("translation", "multilingual", "indian-languages"),
    TaskType.SEARCH: ("search", "rag"),
    TaskType.VOICE: ("voice", "tts", "stt"),
    TaskType.MULTIMODAL: ("multimodal", "vision"),
    TaskType.AGENTS: ("code", "reasoning", "tools"),
}

DEFAULT_TIER_KEYWORDS: dict[AutonomyTier, tuple[str, ...]] = {
    AutonomyTier.L0: ("fast",),
    AutonomyTier.L1: ("fast", "text"),
    AutonomyTier.L2: ("text", "code"),
    AutonomyTier.L3: ("reasoning", "code"),
    AutonomyTier.L4: ("reasoning", "vision", "code"),
}

DEFAULT_TIER_COMPLEXITY: dict[AutonomyTier, Complexity] = {
    AutonomyTier.L0: Complexity.SIMPLE,
    AutonomyTier.L1: Complexity.SIMPLE,
    AutonomyTier.L2: Complexity.MODERATE,
    AutonomyTier.L3: Complexity.COMPLEX,
    AutonomyTier.L4: Complexity.CRITICAL,
}

DEFAULT_VERTICAL_PREFERENCES: dict[Vertical, VerticalPreference] = {
    Vertical.SOCIAL: VerticalPreference(("openai", "anthropic", "gemini"), ("text",)),
    Vertical.SEO: VerticalPreference(("openai", "perplexity", "anthropic"), ("search",)),
    Vertical.WEB: VerticalPreference(("anthropic", "openai", "deepseek"), ("code", "reasoning")),
    Vertical.SALES: VerticalPreference(("openai", "anthropic", "cohere"), ("text",)),
    Vertical.WHATSAPP: VerticalPreference(("sarvam", "groq", "openai"), ("indian-languages",)),
    Vertical.LINKEDIN: VerticalPreference(("anthropic", "openai"), ("text",)),
    Vertical.PERFORMANCE: VerticalPreference(("openai", "gemini", "anthropic"), ("reasoning",)),
    Vertical.PLATFORM: VerticalPreference(("anthropic", "openai"), ("code", "reasoning")),
}

DEFAULT_QUALITY_SCORES: dict[str, float] = {
    "claude-opus-4-20250514": 0.97,
    "o3": 0.96,
    "gpt-5": 0.95,
    "o1": 0.94,
    "claude-sonnet-4-20250514": 0.93,
    "gemini-2.5-pro": 0.92,
    "gpt-4o": 0.90,
    "claude-3-5-sonnet-20241022": 0.90,
    "deepseek-r1": 0.88,
    "o3-mini": 0.87,
    "deepseek-v3": 0.85,
    "grok-2": 0.85,
    "mistral-large-latest": 0.84,
    "sonar-pro": 0.83,
    "gemini-2.5-flash": 0.82,
    "command-r-plus": 0.82,
    "llama-3.3-70b-versatile": 0.80,
    "codestral-latest": 0.80,
    "gpt-4o-mini": 0.78,
    "sarvam-m": 0.78,
    "llama3.1-70b": 0.78,
    "claude-3-haiku-20240307": 0.75,
    "sonar": 0.74,
    "mistral-small-latest": 0.70,
    "llama-3.1-8b-instant": 0.65,
}

DEFAULT_PROVIDER_TRUST: dict[str, float] = {
    "openai": 0.95,
    "anthropic": 0.95,
    "azure_openai": 0.93,
    "gemini": 0.92,
    "aws_bedrock": 0.90,
    "vertexai": 0.90,
    "mistral": 0.85,
    "cohere": 0.85,
    "groq": 0.85,
    "perplexity": 0.82,
    "deepseek": 0.80,
    "xai": 0.80,
    "sarvam": 0.80,
    "together": 0.78,
    "fireworks": 0.78,
    "openrouter": 0.75,
    "cerebras": 0.75,
    "ai21": 0.75,
    "sambanova": 0.72,
    "anyscale": 0.72,
    "huggingface": 0.70,
    "replicate": 0.70,
    "ollama": 0.65,
}

DEFAULT_CATEGORIES: dict[str, str] = {
    "premium-reasoning": "claude-opus-4-20250514",
    "advanced-reasoning": "o3",
    "code": "claude-sonnet-4-20250514",
    "general": "gpt-4o",
    "ultra-fast": "llama-3.1-8b-instant",
    "cost-effective": "deepseek-v3",
    "multimodal": "gemini-2.5-flash",
    "long-context": "gemini-2.5-pro",
    "search": "sonar-pro",
    "indian-languages": "sarvam-m",
    "voice": "sarvam-bulbul-v1",
}

DEFAULT_REGIONAL_PROVIDER = "sarvam"
DEFAULT_QUALITY = 0.6
DEFAULT_TRUST = 0.7


def _frozen(mapping: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RoutingTables:
    """Immutable lookup tables consumed by the filter, scorer and router.

    Attributes:
        quality_scores: Model id -> static quality (0.0-1.0)
        provider_trust: Provider tag -> trust weighting (0.0-1.0)
        categories: Flagship category name -> model id
        task_keywords: Task type -> capability keywords implied by the task
        tier_keywords: Autonomy tier -> capability keywords the tier prefers
        tier_complexity: Autonomy tier -> complexity tier
        vertical_preferences: Vertical -> preferred providers and capabilities
        regional_provider: Provider dedicated to Indian-language models
        default_quality: Quality for model ids missing from quality_scores
        default_trust: Trust for providers missing from provider_trust
    """

    quality_scores: Mapping[str, float] = field(
        default_factory=lambda: _frozen(DEFAULT_QUALITY_SCORES)
    )
    provider_trust: Mapping[str, float] = field(
        default_factory=lambda: _frozen(DEFAULT_PROVIDER_TRUST)
    )
    categories: Mapping[str, str] = field(default_factory=lambda: _frozen(DEFAULT_CATEGORIES))
    task_keywords: Mapping[TaskType, tuple[str, ...]] = field(
        default_factory=lambda: _frozen(DEFAULT_TASK_KEYWORDS)
    )
    tier_keywords: Mapping[AutonomyTier, tuple[str, ...]] = field(
        default_factory=lambda: _frozen(DEFAULT_TIER_KEYWORDS)
    )
    tier_complexity: Mapping[AutonomyTier, Complexity] = field(
        default_factory=lambda: _frozen(DEFAULT_TIER_COMPLEXITY)
    )
    vertical_preferences: Mapping[Vertical, VerticalPreference] = field(
        default_factory=lambda: _frozen(DEFAULT_VERTICAL_PREFERENCES)
    )
    regional_provider: str = DEFAULT_REGIONAL_PROVIDER
    default_quality: float = DEFAULT_QUALITY
    default_trust: float = DEFAULT_TRUST

    def __post_init__(self) -> None:
        """Freeze mappings and validate score ranges."""
        for name in (
            "quality_scores",
            "provider_trust",
            "categories",
            "task_keywords",
            "tier_keywords",
            "tier_complexity",
            "vertical_preferences",
        ):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _frozen(value))

        for table_name, table in (
            ("quality_scores", self.quality_scores),
            ("provider_trust", self.provider_trust),
        ):
            for key, score in table.items():
                if not 0.0 <= score <= 1.0:
                    raise ValueError(f"{table_name}[{key!r}] must be 0.0-1.0, got {score}")

        if not 0.0 <= self.default_quality <= 1.0:
            raise ValueError("default_quality must be 0.0-1.0")
        if not 0.0 <= self.default_trust <= 1.0:
            raise ValueError("default_trust must be 0.0-1.0")

    def quality_for(self, model_id: str) -> float:
        return self.quality_scores.get(model_id, self.default_quality)

    def trust_for(self, provider: str) -> float:
        return self.provider_trust.get(provider, self.default_trust)

    def keywords_for_task(self, task_type: TaskType) -> tuple[str, ...]:
        return self.task_keywords.get(task_type, ())

    def keywords_for_tier(self, tier: AutonomyTier | None) -> tuple[str, ...]:
        if tier is None:
            return ()
        return self.tier_keywords.get(tier, ())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoutingTables:
        """Build tables from plain JSON-style data layered over the defaults.

        Top-level keys that are absent keep their built-in value. Keys that
        are present replace the whole table. Enum-keyed tables accept the
        enum string values ("code", "L3", "whatsapp", ...).

        Raises:
            ValueError: On unknown enum values or out-of-range scores
        """
        kwargs: dict[str, Any] = {}

        if "quality_scores" in data:
            kwargs["quality_scores"] = {k: float(v) for k, v in data["quality_scores"].items()}
        if "provider_trust" in data:
            kwargs["provider_trust"] = {k: float(v) for k, v in data["provider_trust"].items()}
        if "categories" in data:
            kwargs["categories"] = {k: str(v) for k, v in data["categories"].items()}
        if "task_keywords" in data:
            kwargs["task_keywords"] = {
                TaskType(k): tuple(v) for k, v in data["task_keywords"].items()
            }
        if "tier_keywords" in data:
            kwargs["tier_keywords"] = {
                AutonomyTier(k): tuple(v) for k, v in data["tier_keywords"].items()
            }
        if "tier_complexity" in data:
            kwargs["tier_complexity"] = {
                AutonomyTier(k): Complexity(v) for k, v in data["tier_complexity"].items()
            }
        if "vertical_preferences" in data:
            kwargs["vertical_preferences"] = {
                Vertical(k): VerticalPreference(
                    providers=tuple(v.get("providers", ())),
                    capabilities=tuple(v.get("capabilities", ())),
                )
                for k, v in data["vertical_preferences"].items()
            }
        for scalar in ("regional_provider", "default_quality", "default_trust"):
            if scalar in data:
                kwargs[scalar] = data[scalar]

        return cls(**kwargs)


def load_routing_tables(path: str | Path | None = None) -> RoutingTables:
    """Load routing tables, optionally overriding defaults from a JSON file.

    Args:
        path: Optional path to a JSON file. None returns the built-in tables.

    Returns:
        Immutable RoutingTables
    """
    if path is None:
        return RoutingTables()

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    tables = RoutingTables.from_dict(raw)
    log.info(
        "routing_tables.loaded",
        path=str(path),
        overridden=sorted(raw.keys()),
        quality_entries=len(tables.quality_scores),
        trust_entries=len(tables.provider_trust),
        categories=len(tables.categories),
    )
    return tables
