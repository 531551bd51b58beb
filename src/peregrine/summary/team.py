"""Per-team summary statistics.

Each schema field is evaluated over every observation of a team, absent
values are dropped, and the rest reduce to a max and an average. A field
with no values still appears, with max and average of 0, so consumers
always see the full field set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from peregrine.core.errors import SchemaIntegrityError
from peregrine.models.domain import (
    EventSummary,
    Match,
    Observation,
    Report,
    Stat,
    TeamFailure,
    TeamSummary,
)
from peregrine.summary.aggregate import aggregate
from peregrine.summary.evaluate import evaluate
from peregrine.summary.schema import Schema

logger = logging.getLogger(__name__)


def summarize(schema: Schema, observations: Sequence[Observation]) -> list[Stat]:
    """Compute max and average of every schema field.

    Args:
        schema: Fields to compute, in output order.
        observations: One team's observations.

    Returns:
        One Stat per schema field, in schema order.

    Raises:
        SchemaIntegrityError: If any field cannot be resolved. No partial
            list is returned.
    """
    stats: list[Stat] = []
    for field in schema:
        values: list[float] = []
        for observation in observations:
            value = evaluate(field, observation, schema)
            if value is not None:
                values.append(value)

        if values:
            stats.append(Stat(name=field.name, max=max(values), average=sum(values) / len(values)))
        else:
            stats.append(Stat(name=field.name, max=0.0, average=0.0))

    return stats


def summarize_team(schema: Schema, team: str, observations: Sequence[Observation]) -> TeamSummary:
    """Summarize a single team."""
    return TeamSummary(team=team, stats=summarize(schema, observations))


def summarize_event(
    schema: Schema,
    matches: Iterable[Match],
    reports: Iterable[Report],
    max_workers: int = 1,
) -> EventSummary:
    """Summarize every team that played in the given matches.

    Teams are independent, so they may be summarized in parallel. Output
    is ordered by team key regardless of completion order. A schema
    failure for one team is recorded and does not affect the others.

    Args:
        schema: Schema to evaluate.
        matches: Matches to aggregate.
        reports: Reports for those matches.
        max_workers: Thread count; 1 summarizes sequentially.

    Returns:
        EventSummary with successful summaries and per-team failures.
    """
    team_observations = aggregate(matches, reports)
    teams = sorted(team_observations)
    logger.info(f"Summarizing {len(teams)} teams over {len(schema)} schema fields")

    def run(team: str) -> TeamSummary | TeamFailure:
        try:
            return summarize_team(schema, team, team_observations[team])
        except SchemaIntegrityError as e:
            logger.error(f"Schema error summarizing team {team}: {e}")
            return TeamFailure(team=team, error=e)

    if max_workers > 1 and len(teams) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, teams))
    else:
        results = [run(team) for team in teams]

    event_summary = EventSummary()
    for result in results:
        if isinstance(result, TeamFailure):
            event_summary.failures.append(result)
        else:
            event_summary.summaries.append(result)
    return event_summary
