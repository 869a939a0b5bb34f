"""Shared route dependencies"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Response

from ..core.config import settings
from ..core.session import UserSession, session_manager
from ..services.api_client import StorefrontAPIClient, StorefrontAPIError

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-ID"

# Created lazily, closed from the app lifespan
api_client: Optional[StorefrontAPIClient] = None


def get_api_client() -> StorefrontAPIClient:
    """Get or create the API client"""
    global api_client
    if api_client is None:
        api_client = StorefrontAPIClient(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
        )
        logger.info(f"API client created for {settings.api_base_url}")
    return api_client


async def close_api_client() -> None:
    global api_client
    if api_client is not None:
        await api_client.close()
        api_client = None


def get_session(
    response: Response,
    x_session_id: Optional[str] = Header(None),
) -> UserSession:
    """Resolve the caller's session from the header, starting one if needed"""
    session = session_manager.get_or_create_session(x_session_id)
    response.headers[SESSION_HEADER] = session.session_id
    return session


def api_error(e: StorefrontAPIError) -> HTTPException:
    """Convert a remote API failure into an HTTP error for our caller"""
    return HTTPException(
        status_code=503 if e.can_retry else 502,
        detail=str(e),
    )
