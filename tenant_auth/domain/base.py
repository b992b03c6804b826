from datetime import UTC, datetime
from typing import Protocol, Tuple
from uuid import UUID

# Reserved actor for audit entries with no authenticated user
SYSTEM_USER_ID = UUID(int=0)
SYSTEM_USER_EMAIL = "system"


def utc_now() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(UTC).replace(tzinfo=None)


class Identifiable(Protocol):
    """Entities that can be referenced from an audit log entry."""

    def audit_ref(self) -> Tuple[str, str]:
        """Return (entity_type, entity_id)"""
        ...
