"""Service container - every component is built once at startup and injected."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from backend.docchat.api.session import SessionGuard
from backend.docchat.auth.accounts import Authenticator
from backend.docchat.auth.tokens import SessionTokens
from backend.docchat.config import Settings
from backend.docchat.db.engine import (
    create_async_engine_from_settings,
    create_schema,
    create_session_factory,
)
from backend.docchat.docs.context import ContextAssembler
from backend.docchat.docs.extract import PdfTextExtractor, TextExtractor
from backend.docchat.docs.store import DocumentStore
from backend.docchat.llm.client import InferenceClient, get_inference_client
from backend.docchat.orchestration.pipeline import QueryPipeline
from backend.docchat.prompts.builder import PromptBuilder
from backend.docchat.prompts.templates import get_prompt_set

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Components shared by all requests."""

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    tokens: SessionTokens
    guard: SessionGuard
    accounts: Authenticator
    store: DocumentStore
    assembler: ContextAssembler
    prompts: PromptBuilder
    inference: InferenceClient
    pipeline: QueryPipeline

    async def startup(self) -> None:
        self.store.prepare()
        if self.settings.create_schema_on_startup:
            await create_schema(self.engine)
        logger.info(f"Document chat ready (uploads at {self.store.root})")

    async def shutdown(self) -> None:
        await self.inference.aclose()
        await self.engine.dispose()


def build_services(
    settings: Settings,
    *,
    inference: InferenceClient | None = None,
    extractor: TextExtractor | None = None,
) -> Services:
    """Construct all components from one settings object.

    Args:
        settings: Application settings
        inference: Override the inference client (tests)
        extractor: Override the text extractor (tests)
    """
    engine = create_async_engine_from_settings(settings)
    session_factory = create_session_factory(engine)

    tokens = SessionTokens(
        settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.session_ttl_days),
    )
    guard = SessionGuard(tokens)
    accounts = Authenticator(session_factory, rounds=settings.password_hash_rounds)

    store = DocumentStore(
        session_factory, settings.upload_dir, max_bytes=settings.max_upload_bytes
    )
    assembler = ContextAssembler(
        store, extractor or PdfTextExtractor(), max_chars=settings.context_max_chars
    )
    prompts = PromptBuilder(
        get_prompt_set(settings.prompt_version),
        model=settings.inference_model,
        temperature=settings.inference_temperature,
        max_tokens=settings.inference_max_tokens,
    )
    inference = inference or get_inference_client(settings)

    pipeline = QueryPipeline(
        guard=guard,
        store=store,
        assembler=assembler,
        prompts=prompts,
        inference=inference,
    )

    return Services(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        tokens=tokens,
        guard=guard,
        accounts=accounts,
        store=store,
        assembler=assembler,
        prompts=prompts,
        inference=inference,
        pipeline=pipeline,
    )
