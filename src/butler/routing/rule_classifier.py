"""Stage 1 — weighted keyword matching over the query and its translation."""

from __future__ import annotations

import logging

from butler.chunking.keywords import detect_language
from butler.config import RoutingSettings
from butler.routing.keywords import (
    AGGREGATE_KEYWORDS,
    EN_TO_ZH,
    GENERAL,
    MIXED_PATTERNS,
    REMINDER_KEYWORDS,
    RETRIEVAL_KEYWORDS,
    ZH_TO_EN,
    WeightedKeyword,
)
from butler.routing.schemas import ClassificationResult, IntentType

logger = logging.getLogger(__name__)

AGGREGATE_NORMALIZER = 5.0
RETRIEVAL_NORMALIZER = 5.0
REMINDER_NORMALIZER = 3.0


def translate(query: str, language: str) -> str:
    """Swap known phrases into the other language (lowercased)."""
    phrases = ZH_TO_EN if language == "zh" else EN_TO_ZH
    translated = query.lower()
    for source, target in phrases.items():
        translated = translated.replace(source, target)
    return translated


def query_variants(query: str, language: str) -> list[str]:
    return [query.lower(), translate(query, language)]


class RuleBasedClassifier:
    """Scores aggregate / retrieval / reminder intents from keyword tables.

    Every keyword is matched as a substring against each query variant and
    contributes its weight once per variant it appears in, so a cue that
    survives translation counts twice.
    """

    def __init__(self, settings: RoutingSettings | None = None):
        self.settings = settings or RoutingSettings()

    def classify(self, query: str) -> ClassificationResult:
        language = detect_language(query)
        variants = query_variants(query, language)

        agg_raw, agg_cues, agg_hits = self._score_weighted(AGGREGATE_KEYWORDS, variants)
        ret_raw, ret_cues, ret_hits = self._score_weighted(RETRIEVAL_KEYWORDS, variants)
        rem_raw, rem_hits = self._score_reminder(variants)

        raw = {
            IntentType.AGGREGATE: agg_raw,
            IntentType.RETRIEVAL: ret_raw,
            IntentType.REMINDER: rem_raw,
        }
        normalizers = {
            IntentType.AGGREGATE: AGGREGATE_NORMALIZER,
            IntentType.RETRIEVAL: RETRIEVAL_NORMALIZER,
            IntentType.REMINDER: REMINDER_NORMALIZER,
        }
        scores = {
            intent: min(1.0, value / normalizers[intent])
            for intent, value in raw.items()
            if value > 0
        }
        matched = {
            intent: hits
            for intent, hits in (
                (IntentType.AGGREGATE, agg_hits),
                (IntentType.RETRIEVAL, ret_hits),
                (IntentType.REMINDER, rem_hits),
            )
            if hits
        }

        mixed = self.is_mixed_query(query, agg_cues, ret_cues)
        top = max(scores.values(), default=0.0)

        result = ClassificationResult(
            stage="rule",
            scores=scores,
            language=language,
            variants=variants,
            raw_scores=raw,
            matched_keywords=matched,
            high_confidence=top > self.settings.high_confidence_threshold,
            mixed_query=mixed,
        )
        logger.info(
            "Rule stage: lang=%s scores=%s mixed=%s high_confidence=%s",
            language,
            {str(k): round(v, 3) for k, v in scores.items()},
            mixed,
            result.high_confidence,
        )
        return result

    def is_mixed_query(self, query: str, aggregate_cues: float, retrieval_cues: float) -> bool:
        """True when the query asks for a number and an explanation together.

        Either a mixed pattern matches, or both intents carry enough
        ``general`` cue weight on their own. Topic words ("food", "sleep")
        do not count as cues.
        """
        if any(pattern.search(query) for pattern in MIXED_PATTERNS):
            return True
        threshold = self.settings.mixed_raw_threshold
        return aggregate_cues > threshold and retrieval_cues > threshold

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _score_weighted(
        tables: dict[str, list[WeightedKeyword]],
        variants: list[str],
    ) -> tuple[float, float, list[str]]:
        total = 0.0
        cues = 0.0
        hits: list[str] = []
        for entries in tables.values():
            for keyword, weight, domains in entries:
                needle = keyword.lower()
                for variant in variants:
                    if needle in variant:
                        total += weight
                        if GENERAL in domains:
                            cues += weight
                        hits.append(keyword)
        return total, cues, hits

    @staticmethod
    def _score_reminder(variants: list[str]) -> tuple[float, list[str]]:
        total = 0.0
        hits: list[str] = []
        for words in REMINDER_KEYWORDS.values():
            for word in words:
                for variant in variants:
                    if word in variant:
                        total += 1.0
                        hits.append(word)
        return total, hits
