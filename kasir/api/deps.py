from typing import Optional

from fastapi import Header, HTTPException, status

from kasir.config import get_settings


def require_api_key(x_api_key: Optional[str] = Header(None, alias="X-Api-Key")) -> None:
    """
    Reject requests without the configured `X-Api-Key` header.

    The check is disabled when no API key is configured.
    """
    expected = get_settings().API_KEY
    if not expected:
        return

    if not x_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Api key Required")

    if x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API Key")
