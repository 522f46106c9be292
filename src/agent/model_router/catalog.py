"""Model catalog - the immutable list of models the router can choose from.

The catalog is input data: the router never mutates it. A ModelCatalog is
injected into the router at construction so tests can use small synthetic
catalogs. The built-in catalog mirrors the platform's provider manifest
(per-million-token pricing in USD).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ModelDescriptor:
    """Metadata for one model offered by one provider.

    Attributes:
        id: Unique model identifier within the catalog
        name: Human-readable display name
        provider: Provider tag (e.g. "openai", "sarvam")
        context_window: Maximum context size in tokens
        max_output: Maximum output tokens
        input_cost_per_1m: USD per million input tokens
        output_cost_per_1m: USD per million output tokens
        capabilities: Capability tags ("vision", "code", "fast", ...)
        supported_languages: ISO language codes the model handles well
        multilingual: Whether the model is broadly multilingual
        supports_voice: Whether the model accepts or produces speech
    """

    id: str
    name: str
    provider: str
    context_window: int
    max_output: int
    input_cost_per_1m: float
    output_cost_per_1m: float
    capabilities: frozenset[str] = field(default_factory=frozenset)
    supported_languages: tuple[str, ...] = ("en",)
    multilingual: bool = False
    supports_voice: bool = False

    def __post_init__(self) -> None:
        """Validate descriptor after initialization."""
        if not self.id:
            raise ValueError("model id must be non-empty")
        if self.context_window < 0:
            raise ValueError(f"{self.id}: context_window cannot be negative")
        if self.max_output < 0:
            raise ValueError(f"{self.id}: max_output cannot be negative")
        if self.input_cost_per_1m < 0 or self.output_cost_per_1m < 0:
            raise ValueError(f"{self.id}: costs cannot be negative")
        if not isinstance(self.capabilities, frozenset):
            object.__setattr__(self, "capabilities", frozenset(self.capabilities))
        if not isinstance(self.supported_languages, tuple):
            object.__setattr__(self, "supported_languages", tuple(self.supported_languages))

    @property
    def average_cost_per_1m(self) -> float:
        """Mean of input and output cost per million tokens."""
        return (self.input_cost_per_1m + self.output_cost_per_1m) / 2

    def has_capability(self, tag: str) -> bool:
        return tag in self.capabilities

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModelDescriptor:
        """Build a descriptor from a JSON record (camelCase or snake_case keys)."""

        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return default

        capabilities = frozenset(pick("capabilities", default=()))
        return cls(
            id=pick("id"),
            name=pick("name", default=pick("id")),
            provider=pick("provider"),
            context_window=int(pick("context_window", "contextWindow", default=0)),
            max_output=int(pick("max_output", "maxOutput", default=0)),
            input_cost_per_1m=float(pick("input_cost_per_1m", "inputCostPer1M", default=0.0)),
            output_cost_per_1m=float(pick("output_cost_per_1m", "outputCostPer1M", default=0.0)),
            capabilities=capabilities,
            supported_languages=tuple(
                pick("supported_languages", "supportedLanguages", default=("en",))
            ),
            multilingual=bool(pick("multilingual", "isMultilingual", default=False)),
            supports_voice=bool(
                pick("supports_voice", "supportsVoice", default="voice" in capabilities)
            ),
        )


class ModelCatalog:
    """Immutable, ordered collection of ModelDescriptor with unique ids.

    Order matters: it is the tie-break order for equal scores and the
    order of the last-resort catalog prefix.
    """

    def __init__(self, models: Iterable[ModelDescriptor]) -> None:
        """Initialize catalog.

        Args:
            models: Descriptors in catalog order

        Raises:
            ValueError: If two descriptors share an id
        """
        self._models: tuple[ModelDescriptor, ...] = tuple(models)
        self._by_id: dict[str, ModelDescriptor] = {}
        for model in self._models:
            if model.id in self._by_id:
                raise ValueError(f"Duplicate model id in catalog: {model.id}")
            self._by_id[model.id] = model

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    @property
    def models(self) -> tuple[ModelDescriptor, ...]:
        return self._models

    def get(self, model_id: str) -> ModelDescriptor | None:
        return self._by_id.get(model_id)

    def providers(self) -> list[str]:
        """Distinct provider tags in first-seen order."""
        return list(dict.fromkeys(model.provider for model in self._models))

    def by_provider(self, provider: str) -> list[ModelDescriptor]:
        return [model for model in self._models if model.provider == provider]

    def by_capability(self, capability: str) -> list[ModelDescriptor]:
        return [model for model in self._models if capability in model.capabilities]

    def prefix(self, size: int) -> list[ModelDescriptor]:
        return list(self._models[:size])

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> ModelCatalog:
        return cls(ModelDescriptor.from_dict(record) for record in records)


_INDIC = ("en", "hi", "ta", "te", "bn", "mr", "gu", "kn", "ml", "pa", "ur", "or")
_GLOBAL = ("en", "es", "fr", "de", "ja", "zh", "hi")


def _m(
    model_id: str,
    name: str,
    provider: str,
    context_window: int,
    max_output: int,
    input_cost: float,
    output_cost: float,
    capabilities: Iterable[str],
    languages: tuple[str, ...] = ("en",),
) -> ModelDescriptor:
    caps = frozenset(capabilities)
    return ModelDescriptor(
        id=model_id,
        name=name,
        provider=provider,
        context_window=context_window,
        max_output=max_output,
        input_cost_per_1m=input_cost,
        output_cost_per_1m=output_cost,
        capabilities=caps,
        supported_languages=languages,
        multilingual=len(languages) > 1,
        supports_voice="voice" in caps,
    )


DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    # OpenAI
    _m("gpt-5", "GPT-5", "openai", 128_000, 32_768, 5, 15,
       ("text", "vision", "reasoning", "code"), _GLOBAL),
    _m("gpt-4o", "GPT-4o", "openai", 128_000, 16_384, 2.5, 10,
       ("text", "vision", "multimodal"), _GLOBAL),
    _m("gpt-4o-mini", "GPT-4o Mini", "openai", 128_000, 16_384, 0.15, 0.6,
       ("text", "vision", "fast"), _GLOBAL),
    _m("o3", "o3 Reasoning", "openai", 200_000, 100_000, 15, 60, ("reasoning", "code")),
    _m("o3-mini", "o3 Mini", "openai", 200_000, 100_000, 1.1, 4.4, ("reasoning", "code")),
    _m("o1", "o1 Reasoning", "openai", 200_000, 100_000, 15, 60, ("reasoning",)),
    _m("tts-1", "TTS-1", "openai", 4096, 0, 15, 0, ("tts", "voice")),
    # Anthropic
    _m("claude-opus-4-20250514", "Claude 4 Opus", "anthropic", 200_000, 8192, 15, 75,
       ("text", "vision", "reasoning", "code"), _GLOBAL),
    _m("claude-sonnet-4-20250514", "Claude 4 Sonnet", "anthropic", 200_000, 8192, 3, 15,
       ("text", "vision", "code", "reasoning"), _GLOBAL),
    _m("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", "anthropic", 200_000, 8192, 3, 15,
       ("text", "vision", "code")),
    _m("claude-3-haiku-20240307", "Claude 3 Haiku", "anthropic", 200_000, 4096, 0.25, 1.25,
       ("text", "fast")),
    # Google
    _m("gemini-2.5-flash", "Gemini 2.5 Flash", "gemini", 1_000_000, 8192, 0.075, 0.3,
       ("text", "vision", "multimodal", "fast"), _GLOBAL),
    _m("gemini-2.5-pro", "Gemini 2.5 Pro", "gemini", 2_000_000, 8192, 1.25, 5,
       ("text", "vision", "reasoning"), _GLOBAL),
    _m("gemini-2.0-flash", "Gemini 2.0 Flash", "gemini", 1_000_000, 8192, 0.075, 0.3,
       ("text", "vision", "multimodal")),
    # Groq
    _m("llama-3.3-70b-versatile", "Llama 3.3 70B", "groq", 128_000, 8192, 0.59, 0.79,
       ("text", "code", "fast")),
    _m("llama-3.1-8b-instant", "Llama 3.1 8B Instant", "groq", 128_000, 8192, 0.05, 0.08,
       ("text", "fast")),
    # Sarvam (regional, Indian languages)
    _m("sarvam-m", "Sarvam M (24B)", "sarvam", 128_000, 8192, 0, 0,
       ("text", "indian-languages", "reasoning"), _INDIC),
    _m("sarvam-translate", "Sarvam Translate", "sarvam", 8192, 8192, 0, 0,
       ("translation", "indian-languages"), _INDIC),
    _m("sarvam-bulbul-v1", "Sarvam Bulbul v1 (TTS)", "sarvam", 4096, 0, 0, 0,
       ("tts", "voice", "indian-languages"), _INDIC),
    # DeepSeek
    _m("deepseek-v3", "DeepSeek V3", "deepseek", 64_000, 8192, 0.27, 1.1,
       ("text", "code", "reasoning")),
    _m("deepseek-r1", "DeepSeek R1", "deepseek", 64_000, 8192, 0.55, 2.19,
       ("text", "code", "reasoning")),
    # Mistral
    _m("mistral-large-latest", "Mistral Large", "mistral", 128_000, 8192, 2, 6,
       ("text", "code"), ("en", "fr", "de", "es", "it")),
    _m("mistral-small-latest", "Mistral Small", "mistral", 32_000, 8192, 0.2, 0.6,
       ("text", "fast")),
    _m("codestral-latest", "Codestral", "mistral", 32_000, 8192, 1, 3, ("code",)),
    # Cohere
    _m("command-r-plus", "Command R+", "cohere", 128_000, 4096, 3, 15, ("text", "rag"), _GLOBAL),
    # Perplexity
    _m("sonar-pro", "Sonar Pro", "perplexity", 200_000, 8192, 3, 15, ("text", "search")),
    _m("sonar", "Sonar", "perplexity", 128_000, 8192, 1, 1, ("text", "search")),
    # xAI
    _m("grok-2", "Grok-2", "xai", 128_000, 8192, 2, 10, ("text",)),
    # Together
    _m("meta-llama/Llama-3.2-11B-Vision-Instruct-Turbo", "Llama 3.2 11B Vision", "together",
       131_072, 8192, 0.35, 0.35, ("text", "vision", "multimodal")),
    # Cerebras
    _m("llama3.1-70b", "Llama 3.1 70B Cerebras", "cerebras", 128_000, 8192, 0.6, 0.6,
       ("text", "fast")),
    # Local
    _m("llama3.2", "Llama 3.2", "ollama", 128_000, 4096, 0, 0, ("text",)),
)


def default_catalog() -> ModelCatalog:
    """Return the built-in catalog."""
    return ModelCatalog(DEFAULT_MODELS)


def load_catalog(path: str | Path | None = None) -> ModelCatalog:
    """Load a catalog from a JSON file, or the built-in one when path is None.

    The file holds either a list of model records or an object with a
    "models" list. Records use the field names of ModelDescriptor (camelCase
    aliases such as "contextWindow" and "inputCostPer1M" are accepted).

    Raises:
        ValueError: On duplicate ids or invalid records
    """
    if path is None:
        return default_catalog()

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    records = raw["models"] if isinstance(raw, dict) else raw
    catalog = ModelCatalog.from_records(records)
    log.info(
        "model_catalog.loaded",
        path=str(path),
        model_count=len(catalog),
        providers=catalog.providers(),
    )
    return catalog
