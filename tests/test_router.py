"""Tests for score fusion, spec building and the request router."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from butler.config import RoutingSettings
from butler.domain.schemas import ALL_DOMAINS
from butler.query.planner import KeywordQueryPlanner
from butler.query.schemas import QueryContext, QueryIntent, TimePeriod, TimeRange
from butler.routing.fusion import data_missing_penalty, fuse
from butler.routing.llm_classifier import LLMClassifier
from butler.routing.router import RequestRouter
from butler.routing.schemas import (
    AggregationType,
    CalculationOperation,
    CalculationSpecs,
    ClassificationResult,
    ContextNeeds,
    GenerationType,
    IntentType,
    ProcessingPath,
    RetrievalSpecs,
    Routing,
)
from butler.routing.specs import (
    build_calculation_specs,
    build_retrieval_specs,
    context_needs_for,
    generation_type_for,
)
from tests.mocks import NOW, MockLLM

AGG = IntentType.AGGREGATE
RET = IntentType.RETRIEVAL
REM = IntentType.REMINDER


def _rule(scores: dict, mixed: bool = False) -> ClassificationResult:
    return ClassificationResult(stage="rule", scores=scores, mixed_query=mixed)


def _semantic(scores: dict, meets: bool = False) -> ClassificationResult:
    return ClassificationResult(stage="semantic", scores=scores, meets_threshold=meets)


FINANCE_CONTEXT = QueryContext(query="q", target_domains=frozenset({"finance_records"}))

# ---------------------------------------------------------------------------
# Fusion
# ---------------------------------------------------------------------------


class TestFuse:
    def test_both_intents_strong_is_hybrid(self):
        decision = fuse(_rule({AGG: 1.0, RET: 1.0}), _semantic({AGG: 2 / 3, RET: 2 / 3}))
        assert decision.fused_scores[AGG] == pytest.approx(0.6)
        assert decision.fused_scores[RET] == pytest.approx(0.6)
        assert decision.hybrid
        assert not decision.is_mixed_query
        assert decision.confidence == pytest.approx(0.6)

    def test_one_strong_intent_is_not_hybrid(self):
        decision = fuse(_rule({AGG: 1.0, RET: 0.5}), _semantic({AGG: 2 / 3}))
        assert decision.fused_scores[AGG] == pytest.approx(0.6)
        assert decision.fused_scores[RET] == pytest.approx(0.2)
        assert decision.primary_intent == AGG
        assert not decision.hybrid

    def test_mixed_query_is_always_hybrid(self):
        decision = fuse(_rule({AGG: 0.2}, mixed=True), _semantic({}))
        assert decision.hybrid
        assert decision.is_mixed_query

    def test_llm_adds_its_top_intent(self):
        llm = ClassificationResult(stage="llm", scores={REM: 0.9})
        decision = fuse(_rule({}), _semantic({}), llm)
        assert decision.primary_intent == REM
        assert decision.confidence == pytest.approx(0.27)
        assert decision.llm_result is llm

    def test_scores_never_exceed_one(self):
        llm = ClassificationResult(stage="llm", scores={AGG: 1.0})
        decision = fuse(_rule({AGG: 1.0}), _semantic({AGG: 1.0}), llm)
        assert decision.fused_scores[AGG] == pytest.approx(1.0)

    def test_finance_penalty_hits_data_intents_only(self):
        decision = fuse(
            _rule({AGG: 1.0, REM: 1.0}),
            _semantic({}),
            context=FINANCE_CONTEXT,
        )
        assert decision.fused_scores[AGG] == pytest.approx(0.38)
        assert decision.fused_scores[REM] == pytest.approx(0.4)

    def test_penalty_never_goes_negative(self):
        decision = fuse(
            _rule({AGG: 0.01}),
            _semantic({}),
            context=FINANCE_CONTEXT,
        )
        assert decision.fused_scores[AGG] == 0.0

    def test_no_evidence_defaults_to_retrieval(self):
        decision = fuse(_rule({}), _semantic({}))
        assert decision.primary_intent == RET
        assert decision.confidence == pytest.approx(0.3)
        assert decision.fused_scores == {}
        assert not decision.hybrid

    def test_custom_weights(self):
        settings = RoutingSettings(rule_weight=1.0, semantic_weight=0.0)
        decision = fuse(_rule({RET: 0.7}), _semantic({AGG: 1.0}), settings=settings)
        assert decision.primary_intent == RET
        assert decision.confidence == pytest.approx(0.7)


class TestDataMissingPenalty:
    def test_no_context(self):
        assert data_missing_penalty(None, RoutingSettings()) == 0.0

    def test_finance_targeted(self):
        assert data_missing_penalty(FINANCE_CONTEXT, RoutingSettings()) == pytest.approx(0.1)

    def test_other_domains(self):
        context = QueryContext(query="q", target_domains=frozenset({"meals"}))
        assert data_missing_penalty(context, RoutingSettings()) == 0.0


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------


class TestCalculationSpecs:
    def test_multiple_operations(self):
        specs = build_calculation_specs("What's my average and highest expense by category?")
        assert specs.operations == [
            CalculationOperation.SUM,
            CalculationOperation.AVERAGE,
            CalculationOperation.MAX,
            CalculationOperation.GROUPING,
        ]
        assert specs.aggregations == [
            AggregationType.SUM,
            AggregationType.AVERAGE,
            AggregationType.MAX,
            AggregationType.GROUP_BY,
        ]
        assert specs.group_by == ["category"]

    def test_defaults_to_sum(self):
        specs = build_calculation_specs("groceries")
        assert specs.operations == [CalculationOperation.SUM]
        assert specs.aggregations == [AggregationType.SUM]
        assert specs.filters == {}
        assert specs.time_range is None

    def test_trend_by_month(self):
        specs = build_calculation_specs("trend of my grocery spend by month")
        assert CalculationOperation.TREND in specs.operations
        assert AggregationType.TIME_SERIES_SUM in specs.aggregations
        assert specs.group_by == ["month"]

    def test_context_carries_filters_and_range(self):
        march = TimeRange.for_period(TimePeriod.THIS_MONTH, NOW)
        context = QueryContext(query="q", filters={"category": "takeout"}, time_range=march)
        specs = build_calculation_specs("takeout total", context)
        assert specs.filters == {"category": "takeout"}
        assert specs.time_range == march

        specs.filters["type"] = "income"
        assert context.filters == {"category": "takeout"}


class TestRetrievalSpecs:
    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("Why am I always tired?", GenerationType.NARRATIVE),
            ("Analyze my sleep", GenerationType.ANALYTICAL),
            ("Give me an overview", GenerationType.SUMMARY),
            ("Where did I eat on Friday", GenerationType.FACTUAL),
        ],
    )
    def test_generation_type(self, query: str, expected: GenerationType):
        assert generation_type_for(query) == expected

    def test_advice_intent_wins(self):
        context = QueryContext(query="q", intent=QueryIntent.ADVICE)
        assert generation_type_for("Why am I always tired?", context) == GenerationType.ADVISORY

    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("I want detailed advice", ContextNeeds.EXTENSIVE),
            ("coffee vs tea", ContextNeeds.COMPARATIVE),
            ("my vsco photos", ContextNeeds.MODERATE),
            ("sleep history", ContextNeeds.HISTORICAL),
            ("a brief recap", ContextNeeds.MINIMAL),
            ("what did I eat", ContextNeeds.MODERATE),
        ],
    )
    def test_context_needs(self, query: str, expected: ContextNeeds):
        assert context_needs_for(query) == expected

    def test_result_budgets(self):
        assert ContextNeeds.MINIMAL.result_budget == 3
        assert ContextNeeds.MODERATE.result_budget == 5
        assert ContextNeeds.EXTENSIVE.result_budget == 10
        assert ContextNeeds.HISTORICAL.result_budget == 15
        assert ContextNeeds.COMPARATIVE.result_budget == 8

    def test_from_context(self):
        context = QueryContext(
            query="q",
            keywords=("tired", "sleep"),
            target_domains=frozenset({"journals", "health_metrics"}),
        )
        specs = build_retrieval_specs("q", context)
        assert specs.search_terms == ["tired", "sleep"]
        assert specs.domain_focus == ["health_metrics", "journals"]
        assert specs.semantic_weight == 0.7
        assert specs.keyword_weight == 0.3

    def test_without_context(self):
        specs = build_retrieval_specs("anything")
        assert specs.search_terms == ["anything"]
        assert specs.domain_focus == []
        assert specs.time_range is None

    def test_context_carries_range(self):
        march = TimeRange.for_period(TimePeriod.THIS_MONTH, NOW)
        specs = build_retrieval_specs("q", QueryContext(query="q", time_range=march))
        assert specs.time_range == march


class TestRoutingInvariants:
    def test_calculation_needs_specs(self):
        with pytest.raises(ValueError, match="calculation specs"):
            Routing(query="q", processing_path=ProcessingPath.CALCULATION, confidence=0.5)

    def test_hybrid_needs_both(self):
        with pytest.raises(ValueError, match="retrieval specs"):
            Routing(
                query="q",
                processing_path=ProcessingPath.HYBRID,
                confidence=0.5,
                calculation_specs=CalculationSpecs(),
            )

    def test_hybrid_property(self):
        routing = Routing(
            query="q",
            processing_path=ProcessingPath.HYBRID,
            confidence=0.5,
            calculation_specs=CalculationSpecs(),
            retrieval_specs=RetrievalSpecs(),
        )
        assert routing.hybrid


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class TestRequestRouter:
    @pytest.fixture
    def router(self, planner: KeywordQueryPlanner) -> RequestRouter:
        return RequestRouter(planner=planner)

    def test_spending_question_is_calculation(self, router: RequestRouter):
        routing = router.route_request("How much did I spend on food this month?")

        assert routing.processing_path == ProcessingPath.CALCULATION
        assert routing.retrieval_specs is None
        assert routing.calculation_specs.operations == [CalculationOperation.SUM]
        assert routing.calculation_specs.time_range == TimeRange.for_period(
            TimePeriod.THIS_MONTH, NOW,
        )
        decision = routing.decision
        assert decision.primary_intent == AGG
        assert decision.llm_result is None
        assert decision.fused_scores[AGG] == pytest.approx(0.4 + 0.3 * 8 / 11 - 0.02)
        assert decision.fused_scores[RET] == pytest.approx(0.32)
        assert routing.confidence == decision.confidence

    def test_why_question_is_retrieval(self, router: RequestRouter):
        routing = router.route_request("Why am I always tired?")

        assert routing.processing_path == ProcessingPath.RETRIEVAL
        assert routing.calculation_specs is None
        specs = routing.retrieval_specs
        assert specs.generation_type == GenerationType.NARRATIVE
        assert specs.context_needs == ContextNeeds.MODERATE
        assert specs.domain_focus == sorted(ALL_DOMAINS)
        assert specs.search_terms == ["always", "tired"]
        assert routing.context.intent == QueryIntent.SEARCH

    def test_mixed_question_is_hybrid(self, router: RequestRouter):
        routing = router.route_request("How much did I spend and why, and what should I improve?")

        assert routing.processing_path == ProcessingPath.HYBRID
        assert routing.decision.is_mixed_query
        assert routing.calculation_specs.operations == [CalculationOperation.SUM]
        assert routing.retrieval_specs.generation_type == GenerationType.ADVISORY
        assert routing.retrieval_specs.domain_focus == ["finance_records"]

    def test_reminder_routes_to_retrieval(self, router: RequestRouter):
        routing = router.route_request("Remind me to exercise every morning")
        assert routing.decision.primary_intent == REM
        assert routing.decision.confidence == pytest.approx(0.4 * 2 / 3 + 0.3)
        assert routing.processing_path == ProcessingPath.RETRIEVAL

    def test_unclear_query_consults_llm_stage(self, router: RequestRouter):
        decision = router.classify("hello there")
        assert decision.llm_result is not None
        assert decision.llm_result.reason == "Default to retrieval for unclear queries"
        assert decision.primary_intent == RET

    def test_llm_stage_can_pick_calculation(self, planner: KeywordQueryPlanner):
        llm = MockLLM(reply='{"intent": "aggregate", "confidence": 0.9}')
        router = RequestRouter(planner=planner, llm_classifier=LLMClassifier(llm))
        routing = router.route_request("hello there")
        assert routing.processing_path == ProcessingPath.CALCULATION
        assert routing.confidence == pytest.approx(0.27 - 0.02)

    def test_confident_rule_stage_skips_llm(self, planner: KeywordQueryPlanner):
        llm_classifier = MagicMock(spec=LLMClassifier)
        router = RequestRouter(planner=planner, llm_classifier=llm_classifier)
        router.classify("Why am I always tired?")
        llm_classifier.classify.assert_not_called()

    def test_classify_plans_when_no_context(self, planner: KeywordQueryPlanner):
        spy = MagicMock(wraps=planner)
        RequestRouter(planner=spy).classify("Why am I always tired?")
        spy.plan.assert_called_once_with("Why am I always tired?")
