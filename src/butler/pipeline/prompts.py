"""Prompt templates for answering questions over personal data.

Templates use ``{query}``, ``{context}`` and ``{calculation_summary}``
placeholders. Substitution is literal string replacement, so braces in user
queries are safe.
"""

from __future__ import annotations

import re

PROMPT_TEMPLATE_KEY = "rag_prompt_template"

# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are a helpful personal AI assistant with access to the user's own \
records (finances, meals, health metrics, journals, events and more). \
Answer from the records provided. If they do not contain the answer, say so. \
Reply in the same language as the question.
"""

# ---------------------------------------------------------------------------
# Answer templates
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE = """\
You are a helpful personal AI assistant. A user has asked you a question about their personal data.

User Question: {query}
{calculation_summary}
{context}

Please provide a helpful, accurate, and natural response based on the user's personal data above.
Be conversational and focus on insights that would be useful to the user.
"""

ANALYTICAL_TEMPLATE = """\
You are a personal data analyst AI. The user asked: "{query}"
{calculation_summary}
{context}

Please provide an analytical response that:
1. Identifies patterns and trends in the data
2. Provides statistical insights and correlations
3. Explains the significance of the findings
4. Uses data-driven reasoning

Keep the response detailed but accessible, focusing on meaningful insights from their personal data.
"""

SUMMARY_TEMPLATE = """\
You are a personal assistant AI. The user asked: "{query}"
{calculation_summary}
{context}

Please provide a concise summary that:
1. Highlights the most important findings
2. Presents key information clearly and briefly
3. Focuses on what's most relevant to their query

Keep the response brief but comprehensive.
"""

NARRATIVE_TEMPLATE = """\
You are a personal life coach AI. The user asked: "{query}"
{calculation_summary}
{context}

Please provide a narrative response that:
1. Tells the story behind their data
2. Explains patterns and relationships in their life
3. Offers insights about their habits and behaviors
4. Uses an encouraging and supportive tone
"""

FACTUAL_TEMPLATE = """\
You are a personal information assistant AI. The user asked: "{query}"
{calculation_summary}
{context}

Please provide a factual response that:
1. Presents the relevant information clearly
2. Sticks to the facts from their data
3. Provides specific details and examples
4. Avoids speculation or advice
"""

ADVISORY_TEMPLATE = """\
You are a thoughtful personal advisor AI. The user asked: "{query}"
{calculation_summary}
{context}

Please give practical advice that:
1. Is grounded in the records above
2. Names concrete, achievable next steps
3. Explains briefly why each step would help
"""

TEMPLATES_BY_GENERATION: dict[str, str] = {
    "analytical": ANALYTICAL_TEMPLATE,
    "summary": SUMMARY_TEMPLATE,
    "narrative": NARRATIVE_TEMPLATE,
    "factual": FACTUAL_TEMPLATE,
    "advisory": ADVISORY_TEMPLATE,
}

_EXTRA_NEWLINES = re.compile(r"\n{3,}")
_PLACEHOLDER = re.compile(r"\{(query|context|calculation_summary)\}")


def select_template(
    prompt_templates: dict[str, str] | None = None,
    generation_type: str | None = None,
) -> str:
    """Pick a caller template, then a generation-type template, then the default."""
    if prompt_templates and prompt_templates.get(PROMPT_TEMPLATE_KEY):
        return prompt_templates[PROMPT_TEMPLATE_KEY]
    if generation_type and generation_type in TEMPLATES_BY_GENERATION:
        return TEMPLATES_BY_GENERATION[generation_type]
    return DEFAULT_TEMPLATE


def fill_template(
    template: str,
    query: str,
    context: str,
    calculation_summary: str | None = None,
) -> str:
    """Substitute placeholders and collapse the blank lines left behind.

    Args:
        template: Template text with placeholders.
        query: The user's question.
        context: Assembled context block.
        calculation_summary: Optional numeric summary; the placeholder is
            removed entirely when absent.

    Returns:
        The prompt ready for the model.
    """
    summary = (
        f"\n**Calculation Summary:**\n{calculation_summary}\n"
        if calculation_summary
        else ""
    )
    values = {"query": query, "context": context, "calculation_summary": summary}
    prompt = _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
    return _EXTRA_NEWLINES.sub("\n\n", prompt).strip()


def format_context(
    entries: list[tuple[str, str, float]],
    max_chars: int = 4000,
) -> str:
    """Build the numbered context block from ``(text, object_type, similarity)``.

    Entries are added in order until the next one would push the block past
    ``max_chars``.
    """
    header = "## Relevant Information\n\n"
    parts = [header]
    length = len(header)
    for i, (text, object_type, similarity) in enumerate(entries, 1):
        entry = f"{i}. {text}\n   (Type: {object_type}, Relevance: {similarity * 100:.1f}%)\n\n"
        if length + len(entry) > max_chars:
            break
        parts.append(entry)
        length += len(entry)
    return "".join(parts).rstrip()
