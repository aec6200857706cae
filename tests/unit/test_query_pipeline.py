"""Unit tests for the query pipeline state machine."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from backend.docchat.api.session import SessionGuard
from backend.docchat.auth.tokens import SessionTokens
from backend.docchat.errors import NoDocument, NoReadableText, SourceMissing, Unauthenticated
from backend.docchat.llm.client import Completion
from backend.docchat.models.documents import ContextWindow, DeleteReport, StoredDocument
from backend.docchat.orchestration.pipeline import (
    EMPTY_TEXT_REPLY,
    NO_DOCUMENT_REPLY,
    SOURCE_MISSING_REPLY,
    QueryPipeline,
)
from backend.docchat.prompts.builder import ModelRequest, PromptBuilder
from backend.docchat.prompts.templates import FALLBACK_REPLY, PROMPTS_V1

TOKENS = SessionTokens("unit-test-secret-0123456789abcdef", ttl=timedelta(days=7))


def make_document(owner_id: uuid.UUID) -> StoredDocument:
    return StoredDocument(
        document_id=uuid.uuid4(),
        owner_id=owner_id,
        storage_key="1-abc-invoice.pdf",
        original_name="invoice.pdf",
        size_bytes=100,
        uploaded_at=datetime.now(UTC),
    )


class FakeStore:
    def __init__(self, documents: dict[uuid.UUID, StoredDocument] | None = None) -> None:
        self.documents = documents or {}
        self.deleted_for: list[uuid.UUID] = []

    async def most_recent_for(self, owner_id: uuid.UUID) -> StoredDocument:
        if owner_id not in self.documents:
            raise NoDocument()
        return self.documents[owner_id]

    async def delete_all_for(self, owner_id: uuid.UUID) -> DeleteReport:
        self.deleted_for.append(owner_id)
        return DeleteReport(deleted=1 if self.documents.pop(owner_id, None) else 0)


class FakeAssembler:
    def __init__(self, text: str = "Invoice total: $42", error: Exception | None = None) -> None:
        self.text = text
        self.error = error

    async def assemble(self, document: StoredDocument) -> ContextWindow:
        if self.error:
            raise self.error
        return ContextWindow(text=self.text, source_chars=len(self.text), max_chars=6000)


class FakeInference:
    def __init__(self, completion: Completion) -> None:
        self.completion = completion
        self.requests: list[ModelRequest] = []

    async def complete(self, request: ModelRequest) -> Completion:
        self.requests.append(request)
        return self.completion

    async def aclose(self) -> None:
        return None


def make_pipeline(
    store: FakeStore,
    assembler: FakeAssembler | None = None,
    inference: FakeInference | None = None,
) -> QueryPipeline:
    return QueryPipeline(
        guard=SessionGuard(TOKENS),
        store=store,  # type: ignore[arg-type]
        assembler=assembler or FakeAssembler(),  # type: ignore[arg-type]
        prompts=PromptBuilder(PROMPTS_V1, model="test-model"),
        inference=inference or FakeInference(Completion(text="The total is $42.", source="model")),
    )


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.mark.asyncio
async def test_happy_path_visits_every_step(user_id: uuid.UUID) -> None:
    inference = FakeInference(Completion(text="The total is $42.", source="model"))
    pipeline = make_pipeline(FakeStore({user_id: make_document(user_id)}), inference=inference)

    state = await pipeline.answer(TOKENS.mint(user_id), "What is the total?")

    assert state.outcome == "replied"
    assert state.reply == "The total is $42."
    assert state.trace == [
        "authenticating",
        "resolving_document",
        "assembling_context",
        "invoking",
        "replying",
    ]
    assert state.user_id == user_id
    assert inference.requests[0].system_prompt == PROMPTS_V1.plain
    assert "Invoice total: $42" in inference.requests[0].user_prompt


@pytest.mark.asyncio
async def test_structured_flag_selects_structured_template(user_id: uuid.UUID) -> None:
    inference = FakeInference(Completion(text="# Invoice", source="model"))
    pipeline = make_pipeline(FakeStore({user_id: make_document(user_id)}), inference=inference)

    await pipeline.answer(TOKENS.mint(user_id), "Summarize", structured=True)

    assert inference.requests[0].system_prompt == PROMPTS_V1.structured
    assert inference.requests[0].structured is True


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "garbage"])
async def test_bad_session_stops_before_document_lookup(token: str | None) -> None:
    store = FakeStore()
    pipeline = make_pipeline(store)

    with pytest.raises(Unauthenticated):
        await pipeline.answer(token, "anything?")


@pytest.mark.asyncio
async def test_no_document_is_a_normal_reply(user_id: uuid.UUID) -> None:
    inference = FakeInference(Completion(text="unused", source="model"))
    pipeline = make_pipeline(FakeStore(), inference=inference)

    state = await pipeline.answer(TOKENS.mint(user_id), "anything?")

    assert state.outcome == "no_document"
    assert state.reply == NO_DOCUMENT_REPLY
    assert state.trace == ["authenticating", "resolving_document"]
    assert inference.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "outcome", "reply"),
    [
        (SourceMissing(), "source_missing", SOURCE_MISSING_REPLY),
        (NoReadableText(), "empty_text", EMPTY_TEXT_REPLY),
    ],
)
async def test_context_failures_end_with_guidance(
    user_id: uuid.UUID, error: Exception, outcome: str, reply: str
) -> None:
    inference = FakeInference(Completion(text="unused", source="model"))
    pipeline = make_pipeline(
        FakeStore({user_id: make_document(user_id)}),
        assembler=FakeAssembler(error=error),
        inference=inference,
    )

    state = await pipeline.answer(TOKENS.mint(user_id), "What is the total?")

    assert state.outcome == outcome
    assert state.reply == reply
    assert state.trace[-1] == "assembling_context"
    assert inference.requests == []


@pytest.mark.asyncio
async def test_inference_failure_still_replies_with_fallback(user_id: uuid.UUID) -> None:
    inference = FakeInference(
        Completion(text=FALLBACK_REPLY, source="fallback", failure_reason="transport")
    )
    pipeline = make_pipeline(FakeStore({user_id: make_document(user_id)}), inference=inference)

    state = await pipeline.answer(TOKENS.mint(user_id), "What is the total?")

    assert state.outcome == "inference_fallback"
    assert state.reply == FALLBACK_REPLY
    assert state.failure_reason == "transport"
    assert state.trace[-1] == "replying"


@pytest.mark.asyncio
async def test_delete_all_uses_the_authenticated_user(user_id: uuid.UUID) -> None:
    store = FakeStore({user_id: make_document(user_id)})
    pipeline = make_pipeline(store)

    report = await pipeline.delete_all(TOKENS.mint(user_id))

    assert store.deleted_for == [user_id]
    assert report.deleted == 1
    assert not report.partial


@pytest.mark.asyncio
async def test_delete_all_requires_session() -> None:
    store = FakeStore()
    pipeline = make_pipeline(store)

    with pytest.raises(Unauthenticated):
        await pipeline.delete_all(None)

    assert store.deleted_for == []
