"""Health check endpoints.

- /health: liveness, always 200
- /healthz: database and upload storage readiness, 503 when degraded
"""

import asyncio
import json
import tempfile
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from backend.docchat.api.auth import get_services
from backend.docchat.services import Services

router = APIRouter()


async def check_db(services: Services) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with services.session_factory() as session:
            await session.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


def _probe_storage(root: str) -> None:
    with tempfile.TemporaryFile(dir=root):
        pass


async def check_storage(services: Services) -> tuple[bool, str]:
    """Check that the upload directory exists and is writable."""
    try:
        await asyncio.to_thread(_probe_storage, str(services.store.root))
        return (True, "ok")
    except OSError as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    services: Annotated[Services, Depends(get_services)],
) -> dict[str, Any] | Response:
    """Readiness check.

    Returns:
        200 with component status if database and storage are ok
        503 otherwise
    """
    db_ok, db_status = await check_db(services)
    storage_ok, storage_status = await check_storage(services)

    core_ok = db_ok and storage_ok

    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {
            "db": db_status,
            "storage": storage_status,
        },
    }

    if not core_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
