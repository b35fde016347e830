"""API key authentication for cache maintenance endpoints."""

import logging
import secrets

from fastapi import Header, HTTPException

from newslocal.core.config import get_settings

logger = logging.getLogger(__name__)


async def verify_admin_api_key(x_admin_api_key: str = Header(...)) -> None:
    """
    Verify the admin API key from the X-Admin-Api-Key header.

    Uses constant-time comparison. Missing configuration and a wrong key
    both produce the same 401.
    """
    settings = get_settings()

    if not settings.admin_api_key:
        logger.error("Admin API key not configured - rejecting request")
        raise HTTPException(status_code=401, detail="Authentication failed")

    if not secrets.compare_digest(x_admin_api_key, settings.admin_api_key):
        logger.warning("Rejected cache maintenance request with invalid admin key")
        raise HTTPException(status_code=401, detail="Authentication failed")
