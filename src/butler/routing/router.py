"""Request router: classifier cascade plus fusion, emitting execution specs.

Stages run cheapest first. The LLM stage only runs when the keyword stage
has no high-confidence match and the prototype stage misses its threshold.
"""

from __future__ import annotations

import logging

from butler.config import RoutingSettings
from butler.query.planner import KeywordQueryPlanner, QueryPlanner
from butler.query.schemas import QueryContext
from butler.routing.fusion import fuse
from butler.routing.llm_classifier import LLMClassifier
from butler.routing.rule_classifier import RuleBasedClassifier
from butler.routing.schemas import (
    IntentType,
    ProcessingPath,
    Routing,
    RoutingDecision,
)
from butler.routing.semantic_classifier import SemanticClassifier
from butler.routing.specs import build_calculation_specs, build_retrieval_specs

logger = logging.getLogger(__name__)


class RequestRouter:
    """Classifies a query and emits the ``Routing`` the processor executes."""

    def __init__(
        self,
        planner: QueryPlanner | None = None,
        rule_classifier: RuleBasedClassifier | None = None,
        semantic_classifier: SemanticClassifier | None = None,
        llm_classifier: LLMClassifier | None = None,
        settings: RoutingSettings | None = None,
    ):
        self.settings = settings or RoutingSettings()
        self.planner = planner or KeywordQueryPlanner()
        self.rule_classifier = rule_classifier or RuleBasedClassifier(self.settings)
        self.semantic_classifier = semantic_classifier or SemanticClassifier(self.settings)
        self.llm_classifier = llm_classifier or LLMClassifier()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify(self, query: str, context: QueryContext | None = None) -> RoutingDecision:
        """Run the classifier cascade and fuse the stage scores."""
        context = context or self.planner.plan(query)

        rule = self.rule_classifier.classify(query)
        semantic = self.semantic_classifier.classify(query)

        llm = None
        if not rule.high_confidence and not semantic.meets_threshold:
            logger.debug("Falling back to LLM classification")
            llm = self.llm_classifier.classify(query, context)

        return fuse(rule, semantic, llm, context, self.settings)

    def route_request(self, query: str) -> Routing:
        """Decide the processing path and build the specs it needs."""
        context = self.planner.plan(query)
        decision = self.classify(query, context)

        if decision.hybrid:
            path = ProcessingPath.HYBRID
        elif decision.primary_intent == IntentType.AGGREGATE:
            path = ProcessingPath.CALCULATION
        else:
            path = ProcessingPath.RETRIEVAL

        needs_calc = path in (ProcessingPath.CALCULATION, ProcessingPath.HYBRID)
        needs_retrieval = path in (ProcessingPath.RETRIEVAL, ProcessingPath.HYBRID)

        routing = Routing(
            query=query,
            processing_path=path,
            confidence=decision.confidence,
            calculation_specs=build_calculation_specs(query, context) if needs_calc else None,
            retrieval_specs=build_retrieval_specs(query, context) if needs_retrieval else None,
            decision=decision,
            context=context,
        )
        logger.info("Routed %r → %s (%.2f)", query, path, decision.confidence)
        return routing
