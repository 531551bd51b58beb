"""Event-wide and single-match team statistics.

Loads the schema bound to an event plus the relevant matches and
reports, then runs the summary engine over them. Both query shapes go
through the same aggregate/summarize path with different input slices.
"""

from __future__ import annotations

import logging

from peregrine.core.errors import NoSchemaBound, NotFound
from peregrine.db import repo
from peregrine.db.repo import DbSession
from peregrine.models.domain import EventEntity, EventSummary, TeamSummary
from peregrine.models.types import SummaryStat, TeamAnalysis
from peregrine.summary.aggregate import aggregate
from peregrine.summary.schema import Schema
from peregrine.summary.team import summarize_event, summarize_team

logger = logging.getLogger(__name__)


def full_match_key(event_key: str, match_key: str) -> str:
    """Prefix a per-event match key with its event key (``2019orwil_qm1``)."""
    return f"{event_key}_{match_key}"


def team_analysis(summary: TeamSummary) -> TeamAnalysis:
    """Convert a team summary to its API shape."""
    return TeamAnalysis(
        team=summary.team,
        summary=[
            SummaryStat(name=stat.name, max=stat.max, avg=stat.average) for stat in summary.stats
        ],
    )


def _load_event_schema(session: DbSession, event_key: str) -> tuple[EventEntity, Schema]:
    """Get an event and its bound schema.

    Raises:
        NotFound: If the event or its schema does not exist.
        NoSchemaBound: If the event has no schema assigned.
    """
    event = repo.get_event(session, event_key)
    if event is None:
        raise NotFound(f"Event not found: {event_key}")
    if event.schema_id is None:
        raise NoSchemaBound(event_key)
    return event, repo.get_schema(session, event.schema_id)


def event_stats(session: DbSession, event_key: str, max_workers: int = 1) -> EventSummary:
    """Summarize every team with matches at an event.

    Args:
        session: Database session.
        event_key: Event to summarize.
        max_workers: Threads used to summarize teams in parallel.

    Returns:
        EventSummary with team summaries sorted by team key, plus any
        per-team schema failures.
    """
    _, schema = _load_event_schema(session, event_key)
    matches = repo.get_event_matches(session, event_key)
    reports = repo.get_event_reports(session, event_key)
    logger.info(
        f"Computing stats for event {event_key}: {len(matches)} matches, {len(reports)} reports"
    )
    return summarize_event(schema, matches, reports, max_workers=max_workers)


def match_team_stats(
    session: DbSession,
    event_key: str,
    match_key: str,
    team_key: str,
) -> TeamSummary:
    """Summarize one team in one match.

    A team that did not play in the match gets an all-zero summary.

    Args:
        session: Database session.
        event_key: Event the match belongs to.
        match_key: Per-event match key (without the event prefix).
        team_key: Team to summarize.

    Raises:
        NotFound: If the event, schema or match does not exist.
        NoSchemaBound: If the event has no schema assigned.
        SchemaIntegrityError: If the schema references undefined fields.
    """
    _, schema = _load_event_schema(session, event_key)
    key = full_match_key(event_key, match_key)
    match = repo.get_match(session, event_key, key)
    if match is None:
        raise NotFound(f"Match not found: {key}")

    reports = repo.get_match_team_reports(session, key, team_key)
    observations = aggregate([match], reports).get(team_key, [])
    return summarize_team(schema, team_key, observations)
