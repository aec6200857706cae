"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator, Callable, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from backend.docchat.config import Settings
from backend.docchat.db.engine import (
    create_async_engine_from_settings,
    create_schema,
    create_session_factory,
)
from backend.docchat.docs.store import DocumentStore
from backend.docchat.llm.client import Completion
from backend.docchat.main import create_app
from backend.docchat.prompts.builder import ModelRequest


def build_pdf(*lines: str) -> bytes:
    """Build a minimal one-page PDF showing ``lines`` in Helvetica.

    Offsets in the xref table are computed from the actual bytes so the file
    parses without repair.
    """
    ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"({escaped}) Tj")
        ops.append("T*")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
            b"/Resources << /Font << /F1 5 0 R >> >> >>"
        ),
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_at,
    )
    return bytes(out)


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory for small valid PDFs."""
    return build_pdf


class RecordingInference:
    """Inference client double that records requests and answers from a callable."""

    def __init__(self, answer: Callable[[ModelRequest], str] | None = None) -> None:
        self.requests: list[ModelRequest] = []
        self.answer = answer or (lambda request: "stub answer")
        self.closed = False

    async def complete(self, request: ModelRequest) -> Completion:
        self.requests.append(request)
        return Completion(text=self.answer(request), source="model")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file and upload directory."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        upload_dir=tmp_path / "uploads",
        jwt_secret="integration-test-secret-0123456789",  # type: ignore[arg-type]
        password_hash_rounds=4,
        inference_api_key=None,
        inference_max_retries=0,
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Async engine with the schema created."""
    engine = create_async_engine_from_settings(settings)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession], settings: Settings) -> DocumentStore:
    store = DocumentStore(
        session_factory, settings.upload_dir, max_bytes=settings.max_upload_bytes
    )
    store.prepare()
    return store


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def inference() -> RecordingInference:
    return RecordingInference()


@pytest.fixture
def client(settings: Settings, inference: RecordingInference) -> Iterator[TestClient]:
    """Test client running the full app lifespan against tmp storage."""
    app = create_app(settings, inference=inference)
    with TestClient(app) as client:
        yield client


def _signup(client: TestClient, email: str, password: str = "pw-123456") -> str:
    response = client.post("/signup", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.cookies["token"]


@pytest.fixture
def signup() -> Callable[..., str]:
    """Sign up and return the session token; the client keeps the cookie."""
    return _signup
