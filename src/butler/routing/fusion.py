"""Weighted fusion of the three classifier stages into one routing decision."""

from __future__ import annotations

import logging

from butler.config import RoutingSettings
from butler.domain.schemas import Domain
from butler.query.schemas import QueryContext
from butler.routing.schemas import ClassificationResult, IntentType, RoutingDecision

logger = logging.getLogger(__name__)

DATA_INTENTS = frozenset({IntentType.AGGREGATE, IntentType.RETRIEVAL})


def data_missing_penalty(context: QueryContext | None, settings: RoutingSettings) -> float:
    """Penalty in [0, 1] for intents whose data source may be thin."""
    if context is None:
        return 0.0
    penalty = 0.0
    if Domain.FINANCE in context.target_domains:
        penalty += settings.data_missing_penalty
    return max(0.0, min(1.0, penalty))


def fuse(
    rule: ClassificationResult,
    semantic: ClassificationResult,
    llm: ClassificationResult | None = None,
    context: QueryContext | None = None,
    settings: RoutingSettings | None = None,
) -> RoutingDecision:
    """Combine stage scores additively and pick the winning intent.

    Args:
        rule: Keyword stage result.
        semantic: Prototype-similarity stage result.
        llm: LLM stage result, when that stage ran.
        context: Planned query; its target domains drive the data penalty.
        settings: Weights and thresholds.

    Returns:
        Decision whose confidence is the winning fused score. A query with
        no evidence at all still routes, to retrieval at a low confidence.
    """
    s = settings or RoutingSettings()
    scores: dict[IntentType, float] = {}

    for intent, value in rule.scores.items():
        scores[intent] = scores.get(intent, 0.0) + s.rule_weight * value
    for intent, value in semantic.scores.items():
        scores[intent] = scores.get(intent, 0.0) + s.semantic_weight * value
    if llm is not None:
        top = llm.top()
        if top is not None:
            intent, confidence = top
            scores[intent] = scores.get(intent, 0.0) + s.llm_weight * confidence

    penalty = data_missing_penalty(context, s)
    if penalty > 0:
        for intent in scores:
            if intent in DATA_INTENTS:
                scores[intent] -= s.data_missing_weight * penalty

    scores = {intent: max(0.0, min(1.0, value)) for intent, value in scores.items()}

    if scores:
        primary = max(scores, key=lambda k: scores[k])
        confidence = scores[primary]
    else:
        semantic_top = semantic.top()
        if semantic.meets_threshold and semantic_top is not None:
            primary, confidence = semantic_top
            logger.info("Applied semantic fallback: %s (%.3f)", primary, confidence)
        else:
            primary, confidence = IntentType.RETRIEVAL, s.fallback_confidence
            logger.info("Applied default fallback: %s", primary)

    aggregate = scores.get(IntentType.AGGREGATE, 0.0)
    retrieval = scores.get(IntentType.RETRIEVAL, 0.0)
    mixed = rule.mixed_query
    hybrid = mixed or (aggregate > s.hybrid_threshold and retrieval > s.hybrid_threshold)

    logger.info(
        "Fused decision: %s (%.3f) hybrid=%s mixed=%s agg=%.3f ret=%.3f",
        primary, confidence, hybrid, mixed, aggregate, retrieval,
    )
    return RoutingDecision(
        primary_intent=primary,
        confidence=confidence,
        hybrid=hybrid,
        is_mixed_query=mixed,
        fused_scores=scores,
        rule_result=rule,
        semantic_result=semantic,
        llm_result=llm,
    )
