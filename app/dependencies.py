"""Shared FastAPI dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_session

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_session)]


@dataclass(frozen=True)
class OrgContext:
    """Organization (and optional user) a request acts for."""

    org_id: str
    user_id: str | None = None


async def require_api_key(
    api_key: Annotated[str | None, Security(api_key_header)],
) -> None:
    """Validate the API key when integration keys are configured."""
    allowed_keys = settings.get_integration_api_keys()
    if not allowed_keys:
        return

    candidate = (api_key or "").strip()
    if candidate and candidate in allowed_keys:
        return

    logger.warning("API key check failed: invalid key")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
    )


async def get_org_context(
    _api_key: Annotated[None, Depends(require_api_key)],
    x_org_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> OrgContext:
    """Resolve the calling organization from request headers."""
    org_id = (x_org_id or "").strip()
    if not org_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Org-Id header is required",
        )
    user_id = (x_user_id or "").strip() or None
    return OrgContext(org_id=org_id, user_id=user_id)


CurrentOrg = Annotated[OrgContext, Depends(get_org_context)]
