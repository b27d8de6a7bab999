"""Stage 2 — token overlap against labeled prototype utterances."""

from __future__ import annotations

import logging

from butler.config import RoutingSettings
from butler.routing.keywords import PROTOTYPES
from butler.routing.schemas import ClassificationResult, IntentType

logger = logging.getLogger(__name__)


def _tokens(text: str) -> set[str]:
    return {t for t in text.lower().split(" ") if t}


def jaccard(a: str, b: str) -> float:
    """Jaccard overlap of lowercase space-separated tokens."""
    left, right = _tokens(a), _tokens(b)
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


class SemanticClassifier:
    """Best-prototype similarity per intent with a length-aware threshold.

    Short queries share few tokens with any prototype, so the acceptance
    threshold moves with the word count and is clamped to a fixed band.
    """

    def __init__(
        self,
        settings: RoutingSettings | None = None,
        prototypes: dict[IntentType, list[str]] | None = None,
    ):
        self.settings = settings or RoutingSettings()
        self.prototypes = prototypes or PROTOTYPES

    def threshold_for(self, query: str) -> float:
        s = self.settings
        word_count = len(query.split(" "))
        raw = s.semantic_base_threshold + (word_count - 5) * s.semantic_length_step
        return max(s.semantic_min_threshold, min(s.semantic_max_threshold, raw))

    def classify(self, query: str) -> ClassificationResult:
        best: dict[IntentType, float] = {}
        best_examples: dict[IntentType, str] = {}

        for intent, examples in self.prototypes.items():
            best_score, best_example = 0.0, ""
            for example in examples:
                score = jaccard(query, example)
                if score > best_score:
                    best_score, best_example = score, example
            best[intent] = best_score
            if best_example:
                best_examples[intent] = best_example

        scores = {intent: score for intent, score in best.items() if score > 0}
        ranked = sorted(best.values(), reverse=True)
        top = ranked[0] if ranked else 0.0
        second = ranked[1] if len(ranked) > 1 else 0.0
        threshold = self.threshold_for(query)

        result = ClassificationResult(
            stage="semantic",
            scores=scores,
            threshold=threshold,
            meets_threshold=top >= threshold,
            margin=top - second,
            best_examples=best_examples,
        )
        logger.info(
            "Semantic stage: top=%.3f threshold=%.3f margin=%.3f",
            top, threshold, result.margin,
        )
        return result
