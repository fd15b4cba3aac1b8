"""
Semantic classification fallback.

Thin adapter over an external LLM (OpenAI or Anthropic, whichever key is
configured) used only when keyword matching finds no policy domain. Calls
are bounded by SEMANTIC_CLASSIFIER_TIMEOUT and never raise: any failure
yields an empty domain list and the trend proceeds untagged.
"""

import os
import re
import json
import logging
from functools import wraps
from typing import Any, List, Optional, Tuple

from relevance_engine.relevance.exceptions import SemanticClassifierError

logger = logging.getLogger(__name__)

OPENAI_MODEL = "gpt-4o-mini"
ANTHROPIC_MODEL = "claude-3-haiku-20240307"
MAX_TEXT_CHARS = 2000


def safe_api_call(default_return=None):
    """
    Decorator ensuring API calls never raise exceptions.
    Returns default_return on any failure.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Semantic classifier call failed ({func.__name__}): {e}")
                return default_return
        return wrapper
    return decorator


def get_system_api_key() -> Tuple[Optional[str], str]:
    """System-level LLM key, OpenAI preferred."""
    openai_key = os.environ.get('OPENAI_API_KEY')
    if openai_key:
        return openai_key, 'openai'

    anthropic_key = os.environ.get('ANTHROPIC_API_KEY')
    if anthropic_key:
        return anthropic_key, 'anthropic'

    return None, ''


def extract_json(text: str) -> Any:
    """Extract JSON from an LLM response, tolerating markdown fences."""
    if not text:
        raise SemanticClassifierError("Empty response from LLM")

    text = text.strip()
    code_block_match = re.search(r'```(?:json)?\s*([\s\S]*?)```', text)
    if code_block_match:
        text = code_block_match.group(1).strip()

    bracket_match = re.search(r'(\[[\s\S]*\])', text)
    if bracket_match:
        text = bracket_match.group(1)

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SemanticClassifierError(f"Could not parse LLM response: {e}") from e


def _build_prompt(text: str, domains: List[str]) -> str:
    return f"""Classify this political news trend into zero or more policy domains.

Allowed domains:
{chr(10).join(f'- {d}' for d in domains)}

Trend:
{text[:MAX_TEXT_CHARS]}

Return ONLY a JSON array of domain names from the allowed list, e.g. ["Housing", "Economic Justice"]. Return [] if none apply."""


class SemanticClassifier:
    """
    Callable adapter: SemanticClassifier(domains)(text) -> list of domains.

    Usage:
        fallback = SemanticClassifier(reference.policy_domains, timeout=10)
        classifier = DomainClassifier(reference, semantic_fallback=fallback)
    """

    def __init__(self, domains: List[str], timeout: float = 10.0,
                 api_key: Optional[str] = None, provider: Optional[str] = None):
        self.domains = list(domains)
        self.timeout = timeout
        if api_key and provider:
            self.api_key, self.provider = api_key, provider
        else:
            self.api_key, self.provider = get_system_api_key()

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def __call__(self, text: str) -> List[str]:
        if not self.is_available or not text:
            return []
        return self.classify(text)

    @safe_api_call(default_return=[])
    def classify(self, text: str) -> List[str]:
        prompt = _build_prompt(text, self.domains)
        if self.provider == 'openai':
            content = self._call_openai(prompt)
        elif self.provider == 'anthropic':
            content = self._call_anthropic(prompt)
        else:
            raise SemanticClassifierError(f"Unknown provider {self.provider!r}")

        data = extract_json(content)
        if not isinstance(data, list):
            raise SemanticClassifierError("Expected a JSON array of domains")

        allowed = set(self.domains)
        result = [d for d in data if isinstance(d, str) and d in allowed]
        logger.info(f"Semantic fallback suggested {result}")
        return result

    def _call_openai(self, prompt: str) -> str:
        import openai
        client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        response = client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": "You are a policy analyst. Respond only in valid JSON."},
                {"role": "user", "content": prompt}
            ],
            max_tokens=100,
            temperature=0
        )
        content = response.choices[0].message.content
        if not content:
            raise SemanticClassifierError("Empty response from OpenAI")
        return content

    def _call_anthropic(self, prompt: str) -> str:
        import anthropic
        client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        message = client.messages.create(
            model=ANTHROPIC_MODEL,
            max_tokens=100,
            messages=[{"role": "user", "content": prompt}]
        )
        content_block = message.content[0]
        content = getattr(content_block, 'text', None) or str(content_block)
        if not content:
            raise SemanticClassifierError("Empty response from Anthropic")
        return content


def build_semantic_fallback(app_config, domains: List[str]) -> Optional[SemanticClassifier]:
    """Fallback from app config, or None when disabled or no key is set."""
    if not app_config.get('SEMANTIC_CLASSIFIER_ENABLED', True):
        return None
    fallback = SemanticClassifier(domains, timeout=app_config.get('SEMANTIC_CLASSIFIER_TIMEOUT', 10.0))
    if not fallback.is_available:
        logger.info("No LLM API key configured, semantic fallback disabled")
        return None
    return fallback
