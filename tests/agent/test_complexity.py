"""Tests for prompt analysis: complexity estimation and request inference."""

from __future__ import annotations

import pytest

from src.agent.model_router import (
    Complexity,
    ComplexityEstimator,
    LatencyPriority,
    TaskComplexity,
    TaskType,
    build_request,
    infer_task_type,
)


class TestComplexityEstimator:
    def test_greeting_is_simple(self):
        result = ComplexityEstimator().estimate("Hello, how are you?")

        assert isinstance(result, TaskComplexity)
        assert result.complexity == Complexity.SIMPLE
        assert set(result.factors) == {
            "message_complexity",
            "keyword_signals",
            "context_requirement",
            "conversation_depth",
        }

    def test_analytical_request_with_context_is_complex(self):
        message = (
            "Please analyze the security architecture of our payment service. "
            "Evaluate the threat model, compare the token and session designs, "
            "and review whether the audit trail meets our compliance needs."
        )

        result = ComplexityEstimator().estimate(message, context_length=8000, history_length=20)

        assert result.complexity in (Complexity.COMPLEX, Complexity.CRITICAL)
        assert result.score > ComplexityEstimator().estimate("Hello").score

    def test_empty_message(self):
        result = ComplexityEstimator().estimate("")

        assert result.score == 0.0
        assert result.complexity == Complexity.SIMPLE

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0.0, Complexity.SIMPLE),
            (0.249, Complexity.SIMPLE),
            (0.25, Complexity.MODERATE),
            (0.49, Complexity.MODERATE),
            (0.5, Complexity.COMPLEX),
            (0.75, Complexity.CRITICAL),
            (1.0, Complexity.CRITICAL),
        ],
    )
    def test_tier_thresholds(self, score, expected):
        assert ComplexityEstimator.tier_for(score) == expected

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            TaskComplexity(score=1.5, factors={}, complexity=Complexity.CRITICAL)


class TestInferTaskType:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Write a Python function to parse CSV files", TaskType.CODE),
            ("Please analyze and compare these two plans", TaskType.REASONING),
            ("Describe what is in this photo", TaskType.VISION),
            ("Translate this paragraph to Hindi", TaskType.TRANSLATION),
            ("What is the latest news on AI chips?", TaskType.SEARCH),
            ("Write a poem about monsoon rain", TaskType.CONTENT),
            ("Hello there", TaskType.CHAT),
        ],
    )
    def test_keyword_rules(self, message, expected):
        assert infer_task_type(message) == expected


class TestBuildRequest:
    def test_indic_script_requires_indian_languages(self):
        request = build_request("नमस्ते, मुझे मदद चाहिए")
        assert request.requires_indian_languages is True

    def test_latin_script_does_not(self):
        assert build_request("Hello there").requires_indian_languages is False

    def test_urgency_raises_latency_priority(self):
        request = build_request("Urgent: fix the deploy ASAP")
        assert request.latency_priority == LatencyPriority.HIGH

    def test_default_latency_priority(self):
        assert build_request("Hello there").latency_priority == LatencyPriority.MEDIUM

    def test_task_flags(self):
        assert build_request("Describe this image").requires_vision is True
        assert build_request("Debug this function").requires_code is True
        assert build_request("Evaluate both options").requires_reasoning is True

    def test_complexity_comes_from_estimator(self):
        request = build_request("Hello")
        assert request.complexity == Complexity.SIMPLE

    def test_precomputed_estimate_skips_estimator(self):
        class CountingEstimator(ComplexityEstimator):
            calls = 0

            def estimate(self, *args, **kwargs):
                CountingEstimator.calls += 1
                return super().estimate(*args, **kwargs)

        estimate = TaskComplexity(score=0.9, factors={}, complexity=Complexity.CRITICAL)

        request = build_request("Hello", estimator=CountingEstimator(), estimate=estimate)

        assert request.complexity == Complexity.CRITICAL
        assert CountingEstimator.calls == 0

    def test_overrides_win(self):
        request = build_request(
            "Describe this image",
            max_cost_per_1m=1.0,
            requires_vision=False,
        )

        assert request.max_cost_per_1m == 1.0
        assert request.requires_vision is False
        assert request.task_type == TaskType.VISION
