"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - docchat_chat_outcomes_total{outcome}
    - docchat_inference_latency_ms{outcome}
    - docchat_inference_failures_total{reason}
    - docchat_uploads_total{result}
    - docchat_document_deletions_total{result}
    """
    metrics_output = generate_latest()
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)
