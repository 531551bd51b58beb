"""Reports API endpoints.

GET /api/events/{event_key}/matches/{match_key}/reports/{team_key} - Reports for a team in a match
PUT /api/events/{event_key}/matches/{match_key}/reports/{team_key} - Submit or replace a report
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from peregrine.analysis.stats import full_match_key
from peregrine.api.app import get_db_session
from peregrine.db import repo
from peregrine.db.repo import DbSession
from peregrine.models.types import ReportDetail, ReportFieldPayload, ReportSubmission
from peregrine.summary.values import to_raw

router = APIRouter()

REPORTS_PATH = "/events/{event_key}/matches/{match_key}/reports/{team_key}"


@router.get(REPORTS_PATH, response_model=list[ReportDetail])
def get_reports(
    event_key: str,
    match_key: str,
    team_key: str,
    session: DbSession = Depends(get_db_session),
) -> list[ReportDetail]:
    """Get every report for a team in a match, in submission order."""
    key = full_match_key(event_key, match_key)
    if repo.get_match(session, event_key, key) is None:
        raise HTTPException(status_code=404, detail="Match not found")

    return [
        ReportDetail(
            team_key=report.team_key,
            match_key=report.match_key,
            reporter_id=report.reporter_id,
            data=[
                ReportFieldPayload(name=field.name, value=to_raw(field.value))
                for field in report.fields
            ],
        )
        for report in repo.get_match_team_reports(session, key, team_key)
    ]


@router.put(REPORTS_PATH, status_code=204)
def put_report(
    event_key: str,
    match_key: str,
    team_key: str,
    submission: ReportSubmission,
    session: DbSession = Depends(get_db_session),
) -> None:
    """Submit a report, replacing the reporter's earlier one."""
    key = full_match_key(event_key, match_key)
    match = repo.get_match(session, event_key, key)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found")
    if team_key not in match.red_alliance and team_key not in match.blue_alliance:
        raise HTTPException(status_code=422, detail=f"Team {team_key} did not play in {key}")

    repo.upsert_report(
        session,
        event_key=event_key,
        match_key=key,
        team_key=team_key,
        reporter_id=submission.reporter_id,
        data=[field.model_dump() for field in submission.data],
    )
    repo.commit(session)
