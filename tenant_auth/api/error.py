from typing import Optional

from fastapi import status

from tenant_auth.domain.errors import (
    EXPIRED_TOKEN,
    TOKEN_EXPIRED,
    TOKEN_REVOKED,
)
from tenant_auth.libs.result import Error

INVALID_TOKEN = "INVALID_TOKEN"


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def public_access_token_error(error: Optional[Error]) -> Error:
    """Only expiry is reported as such; every other failure is a generic INVALID_TOKEN."""
    if error is not None and error.code == EXPIRED_TOKEN:
        return error
    return Error(INVALID_TOKEN, "Invalid token")


def public_refresh_token_error(error: Error) -> Error:
    """Unknown and replayed tokens look the same to the caller."""
    if error.code in (TOKEN_EXPIRED, TOKEN_REVOKED):
        return error
    return Error(INVALID_TOKEN, "Invalid refresh token")
