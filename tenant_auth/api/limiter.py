"""
Shared slowapi rate limiter.

Login is limited per client address through the @limiter.limit decorator.
Refresh is limited per presented token, which only exists once the body is
parsed, so the route calls enforce_refresh_limit itself.
"""

from fastapi import status
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import ApplicationConfig
from tenant_auth.api.error import ClientError
from tenant_auth.app.services.token_issuer import hash_refresh_token
from tenant_auth.domain.errors import RATE_LIMITED
from tenant_auth.libs.result import Error

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=ApplicationConfig.RATE_LIMIT_STORAGE_URI,
    enabled=ApplicationConfig.RATE_LIMIT_ENABLED,
)


def login_limit() -> str:
    return ApplicationConfig.LOGIN_RATE_LIMIT


def enforce_refresh_limit(refresh_token: str) -> None:
    """
    Count one refresh attempt against the presented token.

    Raises:
        ClientError: 429 RATE_LIMITED once the token's budget is spent
    """
    if not limiter.enabled:
        return
    item = parse(ApplicationConfig.REFRESH_RATE_LIMIT)
    if not limiter.limiter.hit(item, "refresh", hash_refresh_token(refresh_token)):
        raise ClientError(
            Error(RATE_LIMITED, "Too many refresh attempts, retry later"),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )
