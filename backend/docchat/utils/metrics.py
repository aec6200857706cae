"""Prometheus metrics for uploads, chat and inference."""

from prometheus_client import Counter, Histogram

chat_outcomes_total = Counter(
    "docchat_chat_outcomes_total",
    "Chat requests by terminal pipeline state",
    ["outcome"],
)

inference_latency_ms = Histogram(
    "docchat_inference_latency_ms",
    "Completion service latency in milliseconds",
    ["outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000],
)

inference_failures_total = Counter(
    "docchat_inference_failures_total",
    "Completion calls absorbed into the fallback reply",
    ["reason"],
)

uploads_total = Counter(
    "docchat_uploads_total",
    "Document uploads by result",
    ["result"],
)

document_deletions_total = Counter(
    "docchat_document_deletions_total",
    "Per-document deletions by result",
    ["result"],
)


class PrometheusChatMetrics:
    """Prometheus-based metrics for the document chat service."""

    def record_outcome(self, outcome: str) -> None:
        chat_outcomes_total.labels(outcome=outcome).inc()

    def record_inference(self, outcome: str, latency_ms: float) -> None:
        inference_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_inference_failure(self, reason: str) -> None:
        inference_failures_total.labels(reason=reason).inc()

    def inc_upload(self, result: str) -> None:
        uploads_total.labels(result=result).inc()

    def inc_deletion(self, result: str) -> None:
        document_deletions_total.labels(result=result).inc()


metrics = PrometheusChatMetrics()
