"""Domain models for Peregrine.

Pure Python dataclasses representing scouting entities.
These models are independent of SQLAlchemy and are what the
analysis engine consumes and produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from peregrine.summary.values import ScoreBreakdown, Value


# ============================================================================
# Scouting Input Domain
# ============================================================================


@dataclass(frozen=True)
class ReportField:
    """A single named value recorded by a scout."""

    name: str
    value: Value


@dataclass(frozen=True)
class Report:
    """One scout's observation of one team during one match.

    Field order is the order the scout submitted them in.
    """

    team_key: str
    match_key: str
    fields: tuple[ReportField, ...] = ()
    reporter_id: str | None = None

    def get(self, name: str) -> Value | None:
        """Return the first value recorded under ``name``, if any."""
        for report_field in self.fields:
            if report_field.name == name:
                return report_field.value
        return None


@dataclass(frozen=True)
class Match:
    """A match with its alliances and per-alliance score breakdowns."""

    key: str
    red_alliance: tuple[str, ...]
    blue_alliance: tuple[str, ...]
    red_breakdown: ScoreBreakdown = field(default_factory=dict)
    blue_breakdown: ScoreBreakdown = field(default_factory=dict)


@dataclass(frozen=True)
class Observation:
    """Everything known about one team in one match.

    Attributes:
        match_key: Match the observation belongs to.
        position: 1-based position of the team within its alliance.
        breakdown: Score breakdown of the team's alliance.
        reports: Reports for the team in this match, in submission order.
    """

    match_key: str
    position: int
    breakdown: ScoreBreakdown
    reports: tuple[Report, ...] = ()


# ============================================================================
# Summary Domain
# ============================================================================


@dataclass(frozen=True)
class Stat:
    """Aggregate of one schema field over a team's matches."""

    name: str
    max: float
    average: float


@dataclass
class TeamSummary:
    """Per-field stats for one team, in schema order."""

    team: str
    stats: list[Stat]


@dataclass
class TeamFailure:
    """A team whose summary could not be computed."""

    team: str
    error: Exception


@dataclass
class EventSummary:
    """Result of summarizing every team at an event."""

    summaries: list[TeamSummary] = field(default_factory=list)
    failures: list[TeamFailure] = field(default_factory=list)


# ============================================================================
# Store Domain
# ============================================================================


@dataclass
class EventEntity:
    """Domain model for an event."""

    key: str
    name: str
    schema_id: int | None = None


@dataclass
class SchemaEntity:
    """Domain model for a stored schema (unparsed field definitions)."""

    schema_id: int
    year: int | None
    fields: list[dict[str, Any]]
