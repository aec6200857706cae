"""Structured logging for chat requests."""

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backend.docchat.orchestration.state import QueryState

logger = logging.getLogger(__name__)


class StructuredQueryLogger:
    """Structured logger for query pipeline runs."""

    def log_run(self, state: "QueryState", latency_ms: float) -> None:
        """Log one finished pipeline run with structured data."""
        log_data: dict[str, Any] = {
            "request_id": str(state.request_id),
            "user_id": str(state.user_id) if state.user_id else None,
            "outcome": state.outcome,
            "states": list(state.trace),
            "structured": state.structured,
            "latency_ms": round(latency_ms, 2),
        }

        if state.document is not None:
            log_data["document_id"] = str(state.document.document_id)
        if state.context is not None:
            log_data["context_chars"] = len(state.context.text)
            log_data["context_truncated"] = state.context.truncated
        if state.failure_reason:
            log_data["failure_reason"] = state.failure_reason

        log_msg = f"Chat request: {state.outcome}"

        if state.outcome == "inference_fallback":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})
