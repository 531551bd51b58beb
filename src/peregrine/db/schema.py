"""Database schema for Peregrine.

Tables for schemas, events, matches and scouting reports. Alliances and
score breakdowns are stored as JSON text since breakdown shapes change
every season.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StatSchema(Base):
    """Administrator-defined set of derived statistics."""

    __tablename__ = "schemas"

    schema_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fields_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )


class Event(Base):
    """A competition event, optionally bound to a schema."""

    __tablename__ = "events"

    key: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    schema_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("schemas.schema_id"), nullable=True
    )


class MatchRecord(Base):
    """A match at an event.

    Keys are globally unique: the event key is prefixed to the
    per-event match key (e.g. ``2019orwil_qm12``).
    """

    __tablename__ = "matches"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_key: Mapped[str] = mapped_column(
        String(32), ForeignKey("events.key"), nullable=False
    )
    red_alliance_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    blue_alliance_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    red_score_breakdown_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    blue_score_breakdown_json: Mapped[str | None] = mapped_column(Text, nullable=True)


class ReportRecord(Base):
    """A scout's report for one team in one match.

    Invariant: UNIQUE(match_key, team_key, reporter_id)
    A scout has at most one report per team per match; resubmitting
    replaces it.
    """

    __tablename__ = "reports"

    report_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_key: Mapped[str] = mapped_column(
        String(32), ForeignKey("events.key"), nullable=False
    )
    match_key: Mapped[str] = mapped_column(
        String(64), ForeignKey("matches.key"), nullable=False
    )
    team_key: Mapped[str] = mapped_column(String(16), nullable=False)
    reporter_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    data_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("match_key", "team_key", "reporter_id", name="uq_report_identity"),
    )
