"""Request context for tenancy enforcement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing org and advisor identity.

    Used to enforce tenancy boundaries in all advisor-side operations.
    """

    org_id: str
    user_id: str
