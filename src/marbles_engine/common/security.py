"""API key authentication dependency for the HTTP transport."""

from fastapi import Header, HTTPException


async def require_api_key(
    x_marbles_api_key: str = Header(..., alias="X-Marbles-Api-Key"),
) -> str:
    """FastAPI dependency that validates the admin API key from header."""
    from marbles_engine.common.config import get_settings

    settings = get_settings()
    if x_marbles_api_key != settings.api_key:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return x_marbles_api_key
