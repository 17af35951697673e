"""SQLAlchemy ORM models for trips, versions, segments and selections."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Trip(Base):
    """Trip table - org-scoped client engagement."""

    __tablename__ = "trip"
    __table_args__ = (Index("idx_trip_org", "org_id"),)

    trip_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False, default="")
    destinations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    client_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    advisor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_version_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    share_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    share_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    versions: Mapped[list["TripVersion"]] = relationship(
        "TripVersion", back_populates="trip", cascade="all, delete-orphan"
    )


class TripVersion(Base):
    """Trip version table - one itinerary proposal."""

    __tablename__ = "trip_version"
    __table_args__ = (
        UniqueConstraint("trip_id", "version_number", name="uq_version_trip_number"),
    )

    version_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    trip_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trip.trip_id", ondelete="CASCADE"), nullable=False
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_pricing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    discount: Mapped[float | None] = mapped_column(Float, nullable=True)
    discount_type: Mapped[str] = mapped_column(String(10), nullable=False, default="fixed")
    discount_label: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    trip: Mapped["Trip"] = relationship("Trip", back_populates="versions")
    segments: Mapped[list["TripSegment"]] = relationship(
        "TripSegment", back_populates="version", cascade="all, delete-orphan"
    )
    selection: Mapped["ClientSelection | None"] = relationship(
        "ClientSelection", cascade="all, delete-orphan", uselist=False
    )


class TripSegment(Base):
    """Trip segment table - one bookable unit."""

    __tablename__ = "trip_segment"
    __table_args__ = (Index("idx_segment_version_order", "version_id", "day_number", "sort_order"),)

    segment_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(36), nullable=False)
    version_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trip_version.version_id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    confirmation_number: Mapped[str | None] = mapped_column(Text, nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_unit: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    refundability: Mapped[str] = mapped_column(String(30), nullable=False, default="unknown")
    refund_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    # "metadata" is reserved on declarative classes
    segment_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    has_variants: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    journey_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    property_group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    version: Mapped["TripVersion"] = relationship("TripVersion", back_populates="segments")
    variants: Mapped[list["SegmentVariant"]] = relationship(
        "SegmentVariant", back_populates="segment", cascade="all, delete-orphan"
    )
    flight_status: Mapped["FlightStatus | None"] = relationship(
        "FlightStatus", cascade="all, delete-orphan", uselist=False
    )


class SegmentVariant(Base):
    """Segment variant table - alternative priced options."""

    __tablename__ = "segment_variant"
    __table_args__ = (Index("idx_variant_segment", "segment_id"),)

    variant_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    segment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trip_segment.segment_id", ondelete="CASCADE"), nullable=False
    )
    label: Mapped[str] = mapped_column(Text, nullable=False)
    variant_type: Mapped[str] = mapped_column(String(20), nullable=False, default="upgrade")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_unit: Mapped[float | None] = mapped_column(Float, nullable=True)
    refundability: Mapped[str] = mapped_column(String(30), nullable=False, default="unknown")
    refund_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    segment: Mapped["TripSegment"] = relationship("TripSegment", back_populates="variants")


class ClientSelection(Base):
    """Client selection ledger - one row per version, entries as JSON."""

    __tablename__ = "client_selection"

    version_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trip_version.version_id", ondelete="CASCADE"), primary_key=True
    )
    trip_id: Mapped[str] = mapped_column(String(36), nullable=False)
    selections: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    last_submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class FlightStatus(Base):
    """Latest flight status snapshot per flight segment."""

    __tablename__ = "flight_status"

    segment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trip_segment.segment_id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    departure_delay_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    arrival_delay_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    departure_gate: Mapped[str | None] = mapped_column(String(16), nullable=True)
    departure_terminal: Mapped[str | None] = mapped_column(String(16), nullable=True)
    arrival_gate: Mapped[str | None] = mapped_column(String(16), nullable=True)
    arrival_terminal: Mapped[str | None] = mapped_column(String(16), nullable=True)
    checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
