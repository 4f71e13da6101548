"""LLM-based summary generation for records.

Summaries are the secondary search field for records, so every record gets
one: from the configured LLM when possible, otherwise from a deterministic
fallback.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import Config, get_config
from .llm import complete

logger = logging.getLogger(__name__)


SUMMARY_SYSTEM_PROMPT = """You are a personal archive assistant that creates searchable summaries.

Write a concise summary of the content, then list its key points and keywords:

SUMMARY: [2-3 sentence summary]
KEY POINTS:
- [Point 1]
- [Point 2]
- [Point 3]
KEYWORDS: [comma-separated keywords]

Be specific. Avoid vague phrases like "this note covers".
Focus on the terms someone would later type to find this content."""

# Types whose content is text we can summarize
TEXT_TYPES = ("note", "link")

MAX_SUMMARY_INPUT = 4000
FALLBACK_PARAGRAPH_LENGTH = 200


def generate_summary(content: str, record_type: str = "note", config: Optional[Config] = None) -> str:
    """Generate a summary for record content using an LLM.

    Args:
        content: The content to summarize.
        record_type: Record type, for context.
        config: Configuration to use.

    Returns:
        Generated summary string.

    Raises:
        ValueError: If summary generation is not configured.
        RuntimeError: If the LLM call fails.
    """
    if config is None:
        config = get_config()

    if not config.summaries.enabled:
        raise ValueError(
            "Summary generation not configured. Add 'summaries' section to config.yaml with "
            "'backend' (anthropic/openai) and 'model' settings."
        )

    user_content = f"Record type: {record_type}\n\nContent:\n{content}"

    # Truncate if too long (keep to ~4000 chars for small model efficiency)
    if len(user_content) > MAX_SUMMARY_INPUT:
        user_content = user_content[:MAX_SUMMARY_INPUT] + "\n\n[Content truncated...]"

    try:
        return complete(SUMMARY_SYSTEM_PROMPT, user_content, config.summaries, max_tokens=512)
    except (ValueError, ImportError):
        raise
    except Exception as e:
        raise RuntimeError(f"Summary generation failed: {e}") from e


def fallback_summary(content: str, record_type: str) -> str:
    """Deterministic summary used when no LLM summary is available."""
    if record_type in TEXT_TYPES and content.strip():
        first_paragraph = content.strip().split("\n\n")[0]
        if len(first_paragraph) > FALLBACK_PARAGRAPH_LENGTH:
            first_paragraph = first_paragraph[:FALLBACK_PARAGRAPH_LENGTH] + "..."
        return f"SUMMARY: {first_paragraph}"

    if record_type == "link":
        return "Link saved"
    if record_type == "note":
        return "Note content saved"
    return f"{record_type.capitalize()} file uploaded"


def summarize_record(content: str, record_type: str, config: Optional[Config] = None) -> str:
    """Summarize a record, falling back to ``fallback_summary`` on any failure.

    Only text record types with content are sent to the LLM.
    """
    if config is None:
        config = get_config()

    if record_type in TEXT_TYPES and content.strip() and config.summaries.enabled:
        try:
            summary = generate_summary(content, record_type, config)
        except (RuntimeError, ValueError, ImportError) as e:
            logger.warning("Failed to generate %s summary: %s", record_type, e)
        else:
            if summary:
                return summary

    return fallback_summary(content, record_type)
