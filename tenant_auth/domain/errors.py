"""
Error codes returned by use cases and services.

Codes are carried in ``Error.code``; the API layer maps them to HTTP
statuses and decides which ones are safe to expose verbatim.
"""

# Credentials
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
ACCOUNT_DISABLED = "ACCOUNT_DISABLED"

# Tenant resolution
INVALID_TENANT_IDENTIFIER = "INVALID_TENANT_IDENTIFIER"
TENANT_MISMATCH = "TENANT_MISMATCH"

# Access tokens
EXPIRED_TOKEN = "EXPIRED_TOKEN"
INVALID_SIGNATURE = "INVALID_SIGNATURE"
MALFORMED_TOKEN = "MALFORMED_TOKEN"

# Refresh tokens
TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
TOKEN_EXPIRED = "TOKEN_EXPIRED"
TOKEN_REVOKED = "TOKEN_REVOKED"
TOKEN_REPLAY_DETECTED = "TOKEN_REPLAY_DETECTED"

# Authorization
INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
FORBIDDEN = "FORBIDDEN"

USER_NOT_FOUND = "USER_NOT_FOUND"
INVALID_PASSWORD = "INVALID_PASSWORD"

# Throttling
RATE_LIMITED = "RATE_LIMITED"

REFRESH_TOKEN_ERRORS = (
    TOKEN_NOT_FOUND,
    TOKEN_EXPIRED,
    TOKEN_REVOKED,
    TOKEN_REPLAY_DETECTED,
)


class InvalidTenantIdentifier(ValueError):
    """Raised when a tenant identifier is neither numeric nor a valid slug."""

    code = INVALID_TENANT_IDENTIFIER

    def __init__(self, value: str):
        self.value = value
        super().__init__(
            "Tenant identifier must be a positive number or 3-50 letters, "
            "digits, hyphens or underscores"
        )
