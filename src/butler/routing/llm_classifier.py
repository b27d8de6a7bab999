"""Stage 3 — ask the LLM for an intent when keywords and prototypes disagree.

Only consulted when the cheaper stages are both unsure. The provider is
optional; without one (or when its reply cannot be used) a deterministic
keyword heuristic stands in, so this stage always produces a result.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from butler.llm.base import LLMProvider
from butler.query.schemas import QueryContext
from butler.routing.schemas import ClassificationResult, IntentType

logger = logging.getLogger(__name__)

HEURISTIC_CONFIDENCE = 0.7

CLASSIFY_SYSTEM_PROMPT = (
    "You classify questions a user asks about their own personal records "
    "(spending, meals, health, journals, events). Reply with JSON only."
)

CLASSIFY_PROMPT = """Classify the question into exactly one intent:
- "aggregate": wants a number computed over records (total, average, count, max, min, trend)
- "retrieval": wants records found, explained, summarized or advice given
- "reminder": wants something scheduled or repeated

Question: {query}
Target domains: {domains}
Time range: {timeframe}

Respond with a JSON object:
{{"intent": "...", "confidence": 0.0-1.0, "slots": {{"operation": "...", "domain": "...", "timeframe": "..."}}, "reason": "..."}}"""

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def _timeframe(context: QueryContext | None) -> str:
    if context is None or context.time_range is None:
        return "unspecified"
    return context.time_range.describe()


def _domains(context: QueryContext | None) -> list[str]:
    if context is None:
        return []
    return sorted(str(d) for d in context.target_domains)


class LLMClassifier:
    """Function-calling style classifier with a keyword fallback."""

    def __init__(self, llm_provider: LLMProvider | None = None):
        self.llm_provider = llm_provider

    def classify(self, query: str, context: QueryContext | None = None) -> ClassificationResult:
        if self.llm_provider is not None:
            try:
                reply = self.llm_provider.chat(
                    [
                        {"role": "system", "content": CLASSIFY_SYSTEM_PROMPT},
                        {
                            "role": "user",
                            "content": CLASSIFY_PROMPT.format(
                                query=query,
                                domains=", ".join(_domains(context)) or "any",
                                timeframe=_timeframe(context),
                            ),
                        },
                    ],
                    temperature=0.0,
                )
                parsed = self.parse_reply(reply)
                if parsed is not None:
                    logger.info("LLM stage: %s", parsed.top())
                    return parsed
                logger.warning("LLM classification reply unusable, using heuristic: %r", reply[:200])
            except Exception as exc:
                logger.warning("LLM classification failed, using heuristic: %s", exc)

        return self.heuristic(query, context)

    @staticmethod
    def parse_reply(reply: str) -> ClassificationResult | None:
        """Parse ``{"intent", "confidence", "slots", "reason"}`` from a reply.

        Returns ``None`` for anything that is not a JSON object naming a
        known intent.
        """
        match = _JSON_OBJECT_RE.search(reply or "")
        if not match:
            return None
        try:
            payload: dict[str, Any] = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None

        try:
            intent = IntentType(str(payload.get("intent", "")).lower())
        except ValueError:
            return None
        try:
            confidence = float(payload.get("confidence", HEURISTIC_CONFIDENCE))
        except (TypeError, ValueError):
            confidence = HEURISTIC_CONFIDENCE
        confidence = max(0.0, min(1.0, confidence))

        slots = payload.get("slots")
        return ClassificationResult(
            stage="llm",
            scores={intent: confidence},
            slots=slots if isinstance(slots, dict) else {},
            reason=str(payload.get("reason", "")),
        )

    @staticmethod
    def heuristic(query: str, context: QueryContext | None = None) -> ClassificationResult:
        lowered = query.lower()
        if any(word in lowered for word in ("much", "total", "spend")):
            intent = IntentType.AGGREGATE
            reason = "Query asks for quantitative information about spending/amounts"
            slots: dict[str, Any] = {
                "operation": "sum",
                "domain": "finance",
                "timeframe": _timeframe(context),
            }
        elif any(word in lowered for word in ("tell", "explain", "show")):
            intent = IntentType.RETRIEVAL
            reason = "Query requests information retrieval or explanation"
            slots = {"domains": _domains(context), "search_type": "descriptive"}
        else:
            intent = IntentType.RETRIEVAL
            reason = "Default to retrieval for unclear queries"
            slots = {}

        return ClassificationResult(
            stage="llm",
            scores={intent: HEURISTIC_CONFIDENCE},
            slots=slots,
            reason=reason,
        )
