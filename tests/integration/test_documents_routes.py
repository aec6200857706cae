"""Integration tests for POST /documents and GET /documents."""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from backend.docchat.config import Settings
from backend.docchat.main import create_app


def test_upload_pdf(
    client: TestClient,
    settings: Settings,
    signup: Callable[..., str],
    make_pdf: Callable[..., bytes],
) -> None:
    signup(client, "up@example.com")
    data = make_pdf("hello")

    response = client.post("/documents", files={"file": ("notes.pdf", data, "application/pdf")})

    assert response.status_code == 200
    stored = response.json()["file"]
    assert stored["originalName"] == "notes.pdf"
    assert (settings.upload_dir / stored["filename"]).read_bytes() == data


def test_upload_requires_session(client: TestClient, make_pdf: Callable[..., bytes]) -> None:
    response = client.post(
        "/documents", files={"file": ("notes.pdf", make_pdf("x"), "application/pdf")}
    )

    assert response.status_code == 401


def test_upload_without_file_returns_400(client: TestClient, signup: Callable[..., str]) -> None:
    signup(client, "nofile@example.com")

    response = client.post("/documents")

    assert response.status_code == 400
    assert response.json() == {"message": "No file uploaded"}


def test_upload_rejects_non_pdf_content_type(
    client: TestClient, settings: Settings, signup: Callable[..., str]
) -> None:
    signup(client, "png@example.com")

    response = client.post(
        "/documents", files={"file": ("image.png", b"\x89PNG\r\n\x1a\n", "image/png")}
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Only PDF files allowed"}
    assert list(settings.upload_dir.iterdir()) == []


def test_upload_rejects_mislabelled_bytes(client: TestClient, signup: Callable[..., str]) -> None:
    signup(client, "fake@example.com")

    response = client.post(
        "/documents", files={"file": ("fake.pdf", b"just some text", "application/pdf")}
    )

    assert response.status_code == 400
    assert client.get("/documents").json() == []


@pytest.fixture
def small_client(settings: Settings, inference) -> Iterator[TestClient]:
    """App that only accepts uploads up to 1 KiB."""
    small = settings.model_copy(update={"max_upload_bytes": 1024})
    with TestClient(create_app(small, inference=inference)) as client:
        yield client


def test_upload_too_large_returns_413(
    small_client: TestClient, signup: Callable[..., str]
) -> None:
    signup(small_client, "big@example.com")
    data = b"%PDF-1.4\n" + b"0" * 2048

    response = small_client.post("/documents", files={"file": ("big.pdf", data, "application/pdf")})

    assert response.status_code == 413
    assert small_client.get("/documents").json() == []


def test_list_documents_newest_first_and_scoped(
    client: TestClient, signup: Callable[..., str], make_pdf: Callable[..., bytes]
) -> None:
    other = signup(client, "other@example.com")
    client.post("/documents", files={"file": ("theirs.pdf", make_pdf("x"), "application/pdf")})
    client.cookies.clear()

    signup(client, "lister@example.com")
    for name in ("first.pdf", "second.pdf"):
        client.post("/documents", files={"file": (name, make_pdf(name), "application/pdf")})

    response = client.get("/documents")

    assert response.status_code == 200
    assert [f["originalName"] for f in response.json()] == ["second.pdf", "first.pdf"]

    theirs = client.get("/documents", headers={"Authorization": f"Bearer {other}"})
    assert [f["originalName"] for f in theirs.json()] == ["theirs.pdf"]


def test_uploaded_at_matches_between_upload_and_listing(
    client: TestClient, signup: Callable[..., str], make_pdf: Callable[..., bytes]
) -> None:
    signup(client, "stamps@example.com")

    uploaded = client.post(
        "/documents", files={"file": ("a.pdf", make_pdf("a"), "application/pdf")}
    ).json()["file"]
    [listed] = client.get("/documents").json()

    assert listed["uploadedAt"] == uploaded["uploadedAt"]
    assert uploaded["uploadedAt"].endswith("Z")
