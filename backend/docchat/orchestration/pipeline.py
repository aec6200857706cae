"""Query pipeline - one grounded answer per chat request.

    authenticating -> resolving_document -> assembling_context -> invoking -> replying

Early exits: an invalid session raises Unauthenticated; a missing document,
missing bytes or unreadable text end the request with a guidance reply; an
inference failure is absorbed into the fallback reply and still reaches
``replying``.
"""

import logging
import time
from uuid import UUID

from backend.docchat.api.session import SessionGuard
from backend.docchat.docs.context import ContextAssembler
from backend.docchat.docs.store import DocumentStore
from backend.docchat.errors import NoDocument, NoReadableText, SourceMissing, Unauthenticated
from backend.docchat.llm.client import InferenceClient
from backend.docchat.models.documents import DeleteReport
from backend.docchat.orchestration.state import QueryState
from backend.docchat.prompts.builder import PromptBuilder
from backend.docchat.utils.logging import StructuredQueryLogger
from backend.docchat.utils.metrics import metrics

logger = logging.getLogger(__name__)

NO_DOCUMENT_REPLY = "❌ Please upload a PDF first."
SOURCE_MISSING_REPLY = "❌ Uploaded file missing. The document was not found on the server."
EMPTY_TEXT_REPLY = "❌ No readable text found in the uploaded PDF."


class QueryPipeline:
    """Orchestrates session check, document lookup, context, prompt and inference."""

    def __init__(
        self,
        *,
        guard: SessionGuard,
        store: DocumentStore,
        assembler: ContextAssembler,
        prompts: PromptBuilder,
        inference: InferenceClient,
        query_logger: StructuredQueryLogger | None = None,
    ) -> None:
        self._guard = guard
        self._store = store
        self._assembler = assembler
        self._prompts = prompts
        self._inference = inference
        self._query_logger = query_logger or StructuredQueryLogger()

    async def answer(
        self, token: str | None, question: str, structured: bool = False
    ) -> QueryState:
        """Run one chat request to a terminal state.

        Args:
            token: Session token from the request (None if absent)
            question: The user's question
            structured: Use the sectioned Markdown template

        Returns:
            Final QueryState; ``reply`` is always set

        Raises:
            Unauthenticated: The session token is missing or invalid
        """
        state = QueryState(question=question, structured=structured)
        start = time.perf_counter()

        try:
            await self._run(state, token)
        finally:
            if state.outcome != "pending":
                metrics.record_outcome(state.outcome)
                self._query_logger.log_run(state, (time.perf_counter() - start) * 1000)

        return state

    async def _run(self, state: QueryState, token: str | None) -> None:
        state.enter("authenticating")
        try:
            state.user_id = self._guard.authenticate(token)
        except Unauthenticated:
            state.finish("unauthenticated")
            raise

        state.enter("resolving_document")
        try:
            state.document = await self._store.most_recent_for(state.user_id)
        except NoDocument:
            state.finish("no_document", NO_DOCUMENT_REPLY)
            return

        state.enter("assembling_context")
        try:
            state.context = await self._assembler.assemble(state.document)
        except SourceMissing:
            state.finish("source_missing", SOURCE_MISSING_REPLY)
            return
        except NoReadableText:
            state.finish("empty_text", EMPTY_TEXT_REPLY)
            return

        state.enter("invoking")
        state.model_request = self._prompts.build(state.context, state.question, state.structured)
        state.completion = await self._inference.complete(state.model_request)
        state.failure_reason = state.completion.failure_reason

        state.enter("replying")
        outcome = "inference_fallback" if state.completion.source == "fallback" else "replied"
        state.finish(outcome, state.completion.text)

    async def delete_all(self, token: str | None) -> DeleteReport:
        """Purge every document the caller owns.

        Raises:
            Unauthenticated: The session token is missing or invalid
        """
        user_id: UUID = self._guard.authenticate(token)
        report = await self._store.delete_all_for(user_id)
        if report.partial:
            logger.warning(f"[delete_all] user_id={user_id} partial cleanup: {report}")
        return report
