"""FastAPI dependencies for the acting user and the import orchestrator."""

from typing import Optional

from fastapi import Header, HTTPException, Request

from eos_import.core.config import settings
from eos_import.core.import_engine import ImportOrchestrator


async def get_acting_user(
    x_user_id: Optional[str] = Header(None, description="ID of the user performing the import"),
) -> str:
    """Resolve the acting user from the X-User-Id header.

    Falls back to the configured default user when the header is absent.
    Raises 400 if the header is present but blank.
    """
    if x_user_id is None:
        return settings.default_user_id
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="X-User-Id header must not be empty")
    return user_id


def get_orchestrator(request: Request) -> ImportOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Import service is not initialized")
    return orchestrator
