"""Request processing — execute routed queries and format the replies."""

from butler.processing.formatting import to_response_text
from butler.processing.processor import RequestProcessor
from butler.processing.results import (
    CalculationResult,
    HybridResult,
    ProcessingResult,
    RetrievalResult,
    SourceCitation,
)
from butler.processing.service import ButlerService, build_service

__all__ = [
    "ButlerService",
    "CalculationResult",
    "HybridResult",
    "ProcessingResult",
    "RequestProcessor",
    "RetrievalResult",
    "SourceCitation",
    "build_service",
    "to_response_text",
]
