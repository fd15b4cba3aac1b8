"""
Tests for relevance_engine.relevance.semantic_fallback module.
"""

import pytest
from unittest.mock import patch

from relevance_engine.relevance.exceptions import SemanticClassifierError
from relevance_engine.relevance.semantic_fallback import (
    SemanticClassifier,
    build_semantic_fallback,
    extract_json,
    get_system_api_key,
)

DOMAINS = ['Healthcare', 'Housing', 'Technology']


class TestExtractJson:

    def test_plain_array(self):
        assert extract_json('["Housing"]') == ['Housing']

    def test_markdown_fence(self):
        assert extract_json('```json\n["Housing", "Technology"]\n```') == ['Housing', 'Technology']

    def test_prose_around_array(self):
        assert extract_json('Sure! The domains are ["Healthcare"].') == ['Healthcare']

    def test_garbage_raises(self):
        with pytest.raises(SemanticClassifierError):
            extract_json('no idea')

    def test_empty_raises(self):
        with pytest.raises(SemanticClassifierError):
            extract_json('')


class TestApiKeySelection:

    def test_openai_preferred(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-openai')
        monkeypatch.setenv('ANTHROPIC_API_KEY', 'sk-anthropic')
        assert get_system_api_key() == ('sk-openai', 'openai')

    def test_anthropic_fallback(self, monkeypatch):
        monkeypatch.delenv('OPENAI_API_KEY', raising=False)
        monkeypatch.setenv('ANTHROPIC_API_KEY', 'sk-anthropic')
        assert get_system_api_key() == ('sk-anthropic', 'anthropic')

    def test_no_key(self, monkeypatch):
        monkeypatch.delenv('OPENAI_API_KEY', raising=False)
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        assert get_system_api_key() == (None, '')


class TestSemanticClassifier:

    def test_unavailable_without_key(self, monkeypatch):
        monkeypatch.delenv('OPENAI_API_KEY', raising=False)
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        fallback = SemanticClassifier(DOMAINS)
        assert not fallback.is_available
        assert fallback('Lawmakers spar over new proposal') == []

    def test_answer_filtered_to_allowed_domains(self):
        fallback = SemanticClassifier(DOMAINS, api_key='sk-test', provider='openai')
        with patch.object(SemanticClassifier, '_call_openai', return_value='["Housing", "Astrology"]'):
            assert fallback('Tenants organize') == ['Housing']

    def test_anthropic_provider(self):
        fallback = SemanticClassifier(DOMAINS, api_key='sk-test', provider='anthropic')
        with patch.object(SemanticClassifier, '_call_anthropic', return_value='["Technology"]'):
            assert fallback('Chip export rules') == ['Technology']

    def test_failure_returns_empty_list(self):
        fallback = SemanticClassifier(DOMAINS, api_key='sk-test', provider='openai')
        with patch.object(SemanticClassifier, '_call_openai', side_effect=TimeoutError('timed out')):
            assert fallback('Tenants organize') == []

    def test_non_list_answer_returns_empty_list(self):
        fallback = SemanticClassifier(DOMAINS, api_key='sk-test', provider='openai')
        with patch.object(SemanticClassifier, '_call_openai', return_value='{"domain": "Housing"}'):
            assert fallback('Tenants organize') == []


class TestBuildSemanticFallback:

    def test_disabled_by_config(self):
        assert build_semantic_fallback({'SEMANTIC_CLASSIFIER_ENABLED': False}, DOMAINS) is None

    def test_no_key(self, monkeypatch):
        monkeypatch.delenv('OPENAI_API_KEY', raising=False)
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        assert build_semantic_fallback({'SEMANTIC_CLASSIFIER_ENABLED': True}, DOMAINS) is None

    def test_enabled_with_key(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-openai')
        fallback = build_semantic_fallback(
            {'SEMANTIC_CLASSIFIER_ENABLED': True, 'SEMANTIC_CLASSIFIER_TIMEOUT': 3}, DOMAINS
        )
        assert fallback.provider == 'openai'
        assert fallback.timeout == 3
