"""
Tenant Context

Per-request tenant scope. One TenantContext is created for each request and
passed explicitly to whatever needs it; nothing is stored in globals.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from tenant_auth.domain.errors import InvalidTenantIdentifier

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NUMERIC_TENANT = re.compile(r"^[1-9][0-9]*$")
_SLUG_TENANT = re.compile(r"^[A-Za-z0-9_-]{3,50}$")


def validate_tenant_id(value: Optional[str]) -> str:
    """
    Return the identifier unchanged if it is a positive integer or a slug.

    Raises:
        InvalidTenantIdentifier: for anything else (including empty)
    """
    if value is None:
        raise InvalidTenantIdentifier("")
    value = str(value)
    if _NUMERIC_TENANT.fullmatch(value) or _SLUG_TENANT.fullmatch(value):
        return value
    raise InvalidTenantIdentifier(value)


class TenantContext:
    """
    Holds the tenant of the current unit of work.

    Business Rules:
    - current() never fails: with nothing set it falls back to the default
      tenant and logs the fallback
    - scoped() / run_scoped() restore the exact previous value on exit,
      including "unset", whether the body returns or raises
    """

    def __init__(self, default_tenant_id: str = "1", log_changes: bool = False):
        self.default_tenant_id = default_tenant_id
        self.log_changes = log_changes
        self._tenant_id: Optional[str] = None

    def current(self) -> str:
        if self._tenant_id is None:
            logger.warning(
                f"No tenant in context, falling back to default tenant "
                f"{self.default_tenant_id}"
            )
            return self.default_tenant_id
        return self._tenant_id

    def has_tenant(self) -> bool:
        return self._tenant_id is not None

    def set(self, tenant_id: str) -> None:
        self._tenant_id = validate_tenant_id(tenant_id)
        if self.log_changes:
            logger.debug(f"Tenant context set to {self._tenant_id}")

    def clear(self) -> None:
        if self.log_changes and self._tenant_id is not None:
            logger.debug(f"Tenant context cleared (was {self._tenant_id})")
        self._tenant_id = None

    @contextmanager
    def scoped(self, tenant_id: str) -> Iterator["TenantContext"]:
        """Temporarily switch tenant. Nesting composes."""
        previous = self._tenant_id
        self.set(tenant_id)
        try:
            yield self
        finally:
            self._tenant_id = previous
            if self.log_changes:
                logger.debug(f"Tenant context restored to {previous}")

    def run_scoped(self, tenant_id: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self.scoped(tenant_id):
            return fn(*args, **kwargs)


class TenantResolver:
    """
    Decides the tenant of an incoming request.

    Priority: explicit header, then the tenant claim of the presented access
    token, then the configured default.
    """

    def __init__(
        self,
        default_tenant_id: str,
        token_hint: Optional[Callable[[Optional[str]], Optional[str]]] = None,
    ):
        self.default_tenant_id = default_tenant_id
        self.token_hint = token_hint

    def resolve(self, header_value: Optional[str], bearer_token: Optional[str] = None) -> str:
        """
        Raises:
            InvalidTenantIdentifier: if the header is present but malformed.
                The value is checked as sent; surrounding whitespace is not trimmed.
        """
        if header_value is not None and header_value != "":
            return validate_tenant_id(header_value)

        if bearer_token and self.token_hint is not None:
            hinted = self.token_hint(bearer_token)
            if hinted is not None:
                try:
                    return validate_tenant_id(hinted)
                except InvalidTenantIdentifier:
                    logger.warning("Ignoring malformed tenant claim in bearer token")

        return self.default_tenant_id
