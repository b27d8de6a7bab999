"""Lambda handler for butler questions — triggered by API Gateway.

Thin wrapper around ButlerService. All business logic lives in src/butler/.
Records are loaded from the YAML/JSON file named by ``BUTLER_DATA_FILE``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from butler.config import load_settings
from butler.domain.access import InMemoryDomainData
from butler.processing.formatting import to_response_text
from butler.processing.results import CalculationResult, HybridResult, RetrievalResult
from butler.processing.service import ButlerService, build_service

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

# Initialize outside handler for Lambda warm-start reuse
_service: ButlerService | None = None


def _get_service() -> ButlerService:
    global _service
    if _service is not None:
        return _service

    settings = load_settings()
    data_file = os.getenv("BUTLER_DATA_FILE", "data/records.yaml")
    domain_data = InMemoryDomainData.from_file(data_file)
    _service = build_service(settings, domain_data)
    return _service


def _processing_path(result: Any) -> str:
    match result:
        case HybridResult():
            return "hybrid"
        case CalculationResult():
            return "calculation"
        case RetrievalResult():
            return "retrieval"
        case _:
            return "unknown"


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — parse question, route, process, return JSON."""
    try:
        body = json.loads(event.get("body", "{}"))
    except (json.JSONDecodeError, TypeError):
        body = {}

    question = body.get("question", "") if isinstance(body, dict) else ""

    if not question:
        return {
            "statusCode": 400,
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps({"error": "Missing 'question' field"}),
        }

    service = _get_service()
    result = service.route_and_process(question)

    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({
            "question": question,
            "answer": to_response_text(result),
            "processing_path": _processing_path(result),
            "confidence": result.confidence,
        }, ensure_ascii=False),
    }
