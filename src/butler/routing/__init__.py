"""Intent classification and request routing."""

from butler.routing.fusion import fuse
from butler.routing.llm_classifier import LLMClassifier
from butler.routing.router import RequestRouter
from butler.routing.rule_classifier import RuleBasedClassifier
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
    RoutingDecision,
)
from butler.routing.semantic_classifier import SemanticClassifier
from butler.routing.specs import build_calculation_specs, build_retrieval_specs

__all__ = [
    "AggregationType",
    "CalculationOperation",
    "CalculationSpecs",
    "ClassificationResult",
    "ContextNeeds",
    "GenerationType",
    "IntentType",
    "LLMClassifier",
    "ProcessingPath",
    "RequestRouter",
    "RetrievalSpecs",
    "Routing",
    "RoutingDecision",
    "RuleBasedClassifier",
    "SemanticClassifier",
    "build_calculation_specs",
    "build_retrieval_specs",
    "fuse",
]
