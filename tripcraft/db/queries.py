"""Tenancy-safe query helpers."""

from sqlalchemy.orm import Query, Session

from tripcraft.db.context import RequestContext
from tripcraft.db.models import Trip


def query_trips(session: Session, ctx: RequestContext) -> Query:
    """Query trip table with org scoping enforced.

    Args:
        session: SQLAlchemy session
        ctx: Request context with org_id

    Returns:
        Query filtered by org_id
    """
    return session.query(Trip).filter(Trip.org_id == ctx.org_id)
