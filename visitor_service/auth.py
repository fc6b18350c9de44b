"""
Authentication Module

Extracts the shared secret token from a trigger request. Cron services
differ in what they can send, so both ?token= and a Bearer header are
accepted. Validation against the configured secret happens in the runner.
"""

from typing import Optional

from fastapi import Query, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


security = HTTPBearer(auto_error=False)


async def get_token(
    token: Optional[str] = Query(None, description="Shared secret"),
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[str]:
    """
    Return the token from the query string, falling back to the Bearer header.

    Returns None when neither is present.
    """
    if token:
        return token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None
