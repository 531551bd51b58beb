"""Reshape matches and reports into per-team observations.

Position policy: teams are enumerated red alliance first, then blue, and a
team's position is (index mod red alliance size) + 1. The red alliance size
is used as the divisor for both colors.
"""

from __future__ import annotations

from collections.abc import Iterable

from peregrine.models.domain import Match, Observation, Report


def index_reports(reports: Iterable[Report]) -> dict[tuple[str, str], list[Report]]:
    """Group reports by (team_key, match_key), keeping submission order."""
    by_team_match: dict[tuple[str, str], list[Report]] = {}
    for report in reports:
        key = (report.team_key, report.match_key)
        if key not in by_team_match:
            by_team_match[key] = []
        by_team_match[key].append(report)
    return by_team_match


def aggregate(
    matches: Iterable[Match],
    reports: Iterable[Report],
) -> dict[str, list[Observation]]:
    """Build each team's list of observations.

    Args:
        matches: Matches to include, in the order observations should appear.
        reports: Reports for those matches, in submission order.

    Returns:
        Mapping of team key to one observation per match the team played.
        Teams with no matches are absent.
    """
    reports_by_key = index_reports(reports)
    team_observations: dict[str, list[Observation]] = {}

    for match in matches:
        red_size = len(match.red_alliance)
        # A match without a red alliance has no divisor; fall back to blue
        divisor = red_size or len(match.blue_alliance)
        teams = list(match.red_alliance) + list(match.blue_alliance)

        for index, team in enumerate(teams):
            breakdown = match.red_breakdown if index < red_size else match.blue_breakdown
            observation = Observation(
                match_key=match.key,
                position=(index % divisor) + 1,
                breakdown=breakdown,
                reports=tuple(reports_by_key.get((team, match.key), [])),
            )
            if team not in team_observations:
                team_observations[team] = []
            team_observations[team].append(observation)

    return team_observations
