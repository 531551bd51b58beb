"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping the analysis engine pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from peregrine.core.errors import NotFound
from peregrine.db.schema import Event, MatchRecord, ReportRecord, StatSchema
from peregrine.models.domain import (
    EventEntity,
    Match,
    Report,
    ReportField,
    SchemaEntity,
)
from peregrine.summary.schema import Schema, parse_schema
from peregrine.summary.values import breakdown_from_raw, from_raw

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _event_to_entity(event: Event) -> EventEntity:
    """Convert SQLAlchemy Event to domain entity."""
    return EventEntity(key=event.key, name=event.name, schema_id=event.schema_id)


def _schema_to_entity(schema: StatSchema) -> SchemaEntity:
    """Convert SQLAlchemy StatSchema to domain entity."""
    return SchemaEntity(
        schema_id=schema.schema_id,
        year=schema.year,
        fields=json.loads(schema.fields_json),
    )


def _match_to_domain(match: MatchRecord) -> Match:
    """Convert SQLAlchemy MatchRecord to domain match with tagged breakdowns."""
    red_raw = json.loads(match.red_score_breakdown_json) if match.red_score_breakdown_json else None
    blue_raw = (
        json.loads(match.blue_score_breakdown_json) if match.blue_score_breakdown_json else None
    )
    return Match(
        key=match.key,
        red_alliance=tuple(json.loads(match.red_alliance_json)),
        blue_alliance=tuple(json.loads(match.blue_alliance_json)),
        red_breakdown=breakdown_from_raw(red_raw),
        blue_breakdown=breakdown_from_raw(blue_raw),
    )


def _report_to_domain(report: ReportRecord) -> Report:
    """Convert SQLAlchemy ReportRecord to domain report.

    Entries whose value is not a scalar are skipped.
    """
    fields = []
    for item in json.loads(report.data_json):
        value = from_raw(item.get("value"))
        if value is not None:
            fields.append(ReportField(name=item["name"], value=value))
    return Report(
        team_key=report.team_key,
        match_key=report.match_key,
        fields=tuple(fields),
        reporter_id=report.reporter_id,
    )


# ============================================================================
# Schema Repository
# ============================================================================


def get_schema_entity(session: DbSession, schema_id: int) -> SchemaEntity | None:
    """Get stored schema definition by ID."""
    schema = session.query(StatSchema).filter(StatSchema.schema_id == schema_id).first()
    return _schema_to_entity(schema) if schema else None


def get_schema(session: DbSession, schema_id: int) -> Schema:
    """Load and parse a schema.

    Raises:
        NotFound: If no schema has this ID.
        SchemaIntegrityError: If the stored schema is malformed.
    """
    entity = get_schema_entity(session, schema_id)
    if entity is None:
        raise NotFound(f"Schema not found: {schema_id}")
    return parse_schema(entity.fields)


def create_schema(session: DbSession, fields: list[dict[str, Any]], year: int | None = None) -> SchemaEntity:
    """Create a new schema. Fields must already be validated."""
    schema = StatSchema(year=year, fields_json=json.dumps(fields))
    session.add(schema)
    session.flush()
    return _schema_to_entity(schema)


# ============================================================================
# Event Repository
# ============================================================================


def get_event(session: DbSession, event_key: str) -> EventEntity | None:
    """Get event by key."""
    event = session.query(Event).filter(Event.key == event_key).first()
    return _event_to_entity(event) if event else None


def create_event(session: DbSession, entity: EventEntity) -> EventEntity:
    """Create a new event."""
    session.add(Event(key=entity.key, name=entity.name, schema_id=entity.schema_id))
    return entity


# ============================================================================
# Match Repository
# ============================================================================


def get_event_matches(session: DbSession, event_key: str) -> list[Match]:
    """Get all matches for an event, ordered by key."""
    matches = (
        session.query(MatchRecord)
        .filter(MatchRecord.event_key == event_key)
        .order_by(MatchRecord.key)
        .all()
    )
    return [_match_to_domain(m) for m in matches]


def get_match(session: DbSession, event_key: str, match_key: str) -> Match | None:
    """Get a single match at an event by its full key."""
    match = (
        session.query(MatchRecord)
        .filter(MatchRecord.event_key == event_key, MatchRecord.key == match_key)
        .first()
    )
    return _match_to_domain(match) if match else None


def upsert_match(
    session: DbSession,
    event_key: str,
    match_key: str,
    red_alliance: list[str],
    blue_alliance: list[str],
    *,
    red_score_breakdown: dict[str, Any] | None = None,
    blue_score_breakdown: dict[str, Any] | None = None,
) -> None:
    """Insert a match or replace its alliances and breakdowns."""
    match = session.query(MatchRecord).filter(MatchRecord.key == match_key).first()
    if match is None:
        match = MatchRecord(key=match_key, event_key=event_key)
        session.add(match)
    match.event_key = event_key
    match.red_alliance_json = json.dumps(red_alliance)
    match.blue_alliance_json = json.dumps(blue_alliance)
    match.red_score_breakdown_json = (
        json.dumps(red_score_breakdown) if red_score_breakdown is not None else None
    )
    match.blue_score_breakdown_json = (
        json.dumps(blue_score_breakdown) if blue_score_breakdown is not None else None
    )


# ============================================================================
# Report Repository
# ============================================================================


def get_event_reports(session: DbSession, event_key: str) -> list[Report]:
    """Get all reports for an event in submission order."""
    reports = (
        session.query(ReportRecord)
        .filter(ReportRecord.event_key == event_key)
        .order_by(ReportRecord.report_id)
        .all()
    )
    return [_report_to_domain(r) for r in reports]


def get_match_team_reports(session: DbSession, match_key: str, team_key: str) -> list[Report]:
    """Get reports for one team in one match in submission order."""
    reports = (
        session.query(ReportRecord)
        .filter(ReportRecord.match_key == match_key, ReportRecord.team_key == team_key)
        .order_by(ReportRecord.report_id)
        .all()
    )
    return [_report_to_domain(r) for r in reports]


def upsert_report(
    session: DbSession,
    event_key: str,
    match_key: str,
    team_key: str,
    reporter_id: str | None,
    data: list[dict[str, Any]],
) -> bool:
    """Store a scout's report, replacing their earlier one.

    Returns:
        True if a new report was created, False if one was replaced.
    """
    report = (
        session.query(ReportRecord)
        .filter(
            ReportRecord.match_key == match_key,
            ReportRecord.team_key == team_key,
            ReportRecord.reporter_id == reporter_id,
        )
        .first()
    )
    created = report is None
    if created:
        report = ReportRecord(
            event_key=event_key,
            match_key=match_key,
            team_key=team_key,
            reporter_id=reporter_id,
        )
        session.add(report)
    report.data_json = json.dumps(data)
    return created


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()
