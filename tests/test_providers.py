"""Tests for the provider catalogue, model routing and cost estimation."""

import logging

import pytest

from llm.pricing import estimate_cost
from llm.providers import (
    KEY_RULES,
    ProviderTag,
    get_model_info,
    provider_models,
    recommended_minimum_pairs,
)
from llm.router import resolve_provider


class TestResolveProvider:
    @pytest.mark.parametrize("model_id,expected", [
        ("gpt-4-turbo", ProviderTag.OPENAI),
        ("gpt-3.5-turbo", ProviderTag.OPENAI),
        ("claude-3-opus", ProviderTag.ANTHROPIC),
        ("gemini-pro", ProviderTag.GOOGLE),
        ("palm-2", ProviderTag.GOOGLE),
        ("deepseek-coder", ProviderTag.DEEPSEEK),
        ("my-azure-deployment", ProviderTag.AZURE),
        ("azure-gpt-4", ProviderTag.AZURE),
    ])
    def test_known_models(self, model_id, expected):
        assert resolve_provider(model_id) == expected

    def test_prefix_wins_over_substring(self):
        assert resolve_provider("gpt-4-azure") == ProviderTag.OPENAI

    def test_unknown_model_defaults_to_openai_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="llm.router"):
            assert resolve_provider("llama-3-70b") == ProviderTag.OPENAI
        assert "llama-3-70b" in caplog.text

    def test_every_catalogued_model_routes_to_its_provider(self):
        for tag in ProviderTag:
            for model in provider_models(tag):
                assert resolve_provider(model) == tag


class TestProviderTag:
    def test_parse_accepts_names_and_members(self):
        assert ProviderTag.parse("anthropic") is ProviderTag.ANTHROPIC
        assert ProviderTag.parse(ProviderTag.AZURE) is ProviderTag.AZURE

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown provider: mistral"):
            ProviderTag.parse("mistral")


class TestKeyRules:
    @pytest.mark.parametrize("provider,good,bad", [
        (ProviderTag.OPENAI, "sk-abc123", "abc123"),
        (ProviderTag.ANTHROPIC, "sk-ant-xyz", "sk-xyz"),
        (ProviderTag.GOOGLE, "AIzaSy123", "aiza123"),
        (ProviderTag.DEEPSEEK, "ds-123", "sk-123"),
        (ProviderTag.AZURE, "0123456789", "012345678"),
    ])
    def test_rule(self, provider, good, bad):
        rule = KEY_RULES[provider]
        assert rule.check(good)
        assert not rule.check(bad)


class TestEstimateCost:
    def test_rates_per_thousand_tokens(self):
        assert estimate_cost(ProviderTag.OPENAI, 1000) == pytest.approx(0.03)
        assert estimate_cost(ProviderTag.ANTHROPIC, 2000) == pytest.approx(0.03)
        assert estimate_cost(ProviderTag.GOOGLE, 1000) == pytest.approx(0.01)
        assert estimate_cost(ProviderTag.DEEPSEEK, 1000) == pytest.approx(0.001)
        assert estimate_cost(ProviderTag.AZURE, 500) == pytest.approx(0.015)

    def test_zero_tokens_cost_nothing(self):
        assert estimate_cost("openai", 0) == 0.0

    def test_unknown_provider_uses_default_rate(self):
        assert estimate_cost("mistral", 1000) == pytest.approx(0.01)

    def test_negative_tokens_rejected(self):
        with pytest.raises(ValueError):
            estimate_cost(ProviderTag.OPENAI, -1)

    def test_cost_is_linear(self):
        assert estimate_cost("openai", 3000) == pytest.approx(3 * estimate_cost("openai", 1000))


class TestCatalogue:
    def test_recommended_minimum_pairs(self):
        assert recommended_minimum_pairs(ProviderTag.ANTHROPIC) == 20
        assert recommended_minimum_pairs("google") == 15
        assert recommended_minimum_pairs("unknown") == 10

    def test_model_info_fallback(self):
        info = get_model_info("gpt-4-turbo")
        assert info.context_window == 128000

        fallback = get_model_info("some-new-model")
        assert fallback.name == "some-new-model"
        assert fallback.context_window == 8000
        assert fallback.max_output_tokens == 2048
