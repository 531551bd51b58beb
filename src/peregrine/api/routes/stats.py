"""Stats API endpoints.

GET /api/events/{event_key}/stats - Stats for every team at an event
GET /api/events/{event_key}/matches/{match_key}/teams/{team_key}/stats - One team in one match
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from peregrine.analysis.stats import event_stats, match_team_stats, team_analysis
from peregrine.api.app import get_db_session, get_summary_workers
from peregrine.core.errors import NoSchemaBound, NotFound, SchemaIntegrityError
from peregrine.db.repo import DbSession
from peregrine.models.types import TeamAnalysis

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/events/{event_key}/stats", response_model=list[TeamAnalysis])
def get_event_stats(
    event_key: str,
    session: DbSession = Depends(get_db_session),
) -> list[TeamAnalysis]:
    """Get stats for every team that played at an event.

    Raises:
        HTTPException: 404 if the event or schema is missing, 400 if the
            event has no schema, 500 if any team's summary fails.
    """
    try:
        result = event_stats(session, event_key, max_workers=get_summary_workers())
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except NoSchemaBound as e:
        raise HTTPException(status_code=400, detail="no schema found") from e
    except SchemaIntegrityError as e:
        logger.error(f"Invalid schema for event {event_key}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e

    if result.failures:
        for failure in result.failures:
            logger.error(f"Summarizing team {failure.team} at {event_key} failed: {failure.error}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return [team_analysis(summary) for summary in result.summaries]


@router.get(
    "/events/{event_key}/matches/{match_key}/teams/{team_key}/stats",
    response_model=TeamAnalysis,
)
def get_match_team_stats(
    event_key: str,
    match_key: str,
    team_key: str,
    session: DbSession = Depends(get_db_session),
) -> TeamAnalysis:
    """Get stats for one team in one match.

    Args:
        event_key: Event key.
        match_key: Match key without the event prefix (e.g. ``qm1``).
        team_key: Team key.
        session: Database session (injected).
    """
    try:
        summary = match_team_stats(session, event_key, match_key, team_key)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except NoSchemaBound as e:
        raise HTTPException(status_code=400, detail="no schema found") from e
    except SchemaIntegrityError as e:
        logger.error(f"Summarizing team {team_key} in {event_key}_{match_key} failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e

    return team_analysis(summary)
