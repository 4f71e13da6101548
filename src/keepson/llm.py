"""Thin LLM completion wrapper over the Anthropic and OpenAI SDKs."""

from __future__ import annotations

import os

from .config import LLMConfig


def complete(system: str, content: str, llm: LLMConfig, max_tokens: int = 256) -> str:
    """Run a single-turn completion against the configured backend.

    The client makes exactly one attempt, bounded by ``llm.timeout``.

    Args:
        system: System prompt.
        content: User message.
        llm: Backend configuration.
        max_tokens: Completion budget.

    Returns:
        The model's text response, stripped.

    Raises:
        ValueError: If the backend is not configured or has no API key.
        ImportError: If the backend SDK is not installed.
        Exception: Whatever the SDK raises for network, timeout or API errors.
    """
    if not llm.enabled:
        raise ValueError("LLM backend not configured: set 'backend' and 'model'.")

    if llm.backend == "anthropic":
        return _complete_anthropic(system, content, llm, max_tokens)
    elif llm.backend == "openai":
        return _complete_openai(system, content, llm, max_tokens)
    else:
        raise ValueError(f"Unknown LLM backend: {llm.backend}")


def _complete_anthropic(system: str, content: str, llm: LLMConfig, max_tokens: int) -> str:
    """Complete using Anthropic API."""
    try:
        import anthropic
    except ImportError:
        raise ImportError(
            "anthropic package not installed. Run: pip install anthropic"
        ) from None

    api_key = llm.api_key or os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError(
            "Anthropic API key not found. Set 'api_key' in config or "
            "ANTHROPIC_API_KEY environment variable."
        )

    client = anthropic.Anthropic(api_key=api_key, timeout=llm.timeout, max_retries=0)

    response = client.messages.create(
        model=llm.model,
        max_tokens=max_tokens,
        system=system,
        messages=[
            {"role": "user", "content": content}
        ],
    )

    return response.content[0].text.strip()


def _complete_openai(system: str, content: str, llm: LLMConfig, max_tokens: int) -> str:
    """Complete using OpenAI API."""
    try:
        import openai
    except ImportError:
        raise ImportError(
            "openai package not installed. Run: pip install openai"
        ) from None

    api_key = llm.api_key or os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise ValueError(
            "OpenAI API key not found. Set 'api_key' in config or "
            "OPENAI_API_KEY environment variable."
        )

    client = openai.OpenAI(api_key=api_key, timeout=llm.timeout, max_retries=0)

    response = client.chat.completions.create(
        model=llm.model,
        max_tokens=max_tokens,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": content},
        ],
    )

    return (response.choices[0].message.content or "").strip()
