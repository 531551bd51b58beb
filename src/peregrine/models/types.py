"""Pydantic models for Peregrine API.

Wire shapes for schemas, reports, and team analyses. The analysis
output shape ({"team", "summary": [{"name", "max", "avg"}]}) is consumed
by existing clients and must not change.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, model_validator

# Scalar accepted in reports and AnyOf literals (bool first so JSON true
# is not coerced to 1)
Scalar = Union[bool, int, float, str]


class SumTerm(BaseModel):
    """Reference to another schema field inside a sum."""

    name: str


class EqualsExpression(BaseModel):
    """Condition inside an any_of: field ``name`` equals ``equals``."""

    name: str
    equals: Scalar


class SchemaFieldPayload(BaseModel):
    """One derived statistic definition.

    Exactly one of report_reference, tba_reference, sum, or any_of
    must be set.
    """

    name: str
    report_reference: str | None = None
    tba_reference: str | None = None
    sum: list[SumTerm] | None = None
    any_of: list[EqualsExpression] | None = None

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> "SchemaFieldPayload":
        populated = [
            key
            for key, value in (
                ("report_reference", self.report_reference),
                ("tba_reference", self.tba_reference),
                ("sum", self.sum),
                ("any_of", self.any_of),
            )
            if value
        ]
        if len(populated) != 1:
            raise ValueError(
                f"field {self.name!r} must define exactly one of "
                f"report_reference, tba_reference, sum, any_of (got {populated or 'none'})"
            )
        return self


class SchemaCreate(BaseModel):
    """Schema creation request."""

    year: int | None = None
    fields: list[SchemaFieldPayload]


class SchemaDetail(BaseModel):
    """Stored schema for API response."""

    schema_id: int
    year: int | None
    fields: list[SchemaFieldPayload]


class ReportFieldPayload(BaseModel):
    """Single recorded value in a report."""

    name: str
    value: Scalar


class ReportSubmission(BaseModel):
    """Scout report submission for one team in one match."""

    reporter_id: str
    data: list[ReportFieldPayload]


class ReportDetail(BaseModel):
    """Stored report for API response."""

    team_key: str
    match_key: str
    reporter_id: str | None
    data: list[ReportFieldPayload]


class SummaryStat(BaseModel):
    """Aggregate of one schema field."""

    name: str
    max: float
    avg: float


class TeamAnalysis(BaseModel):
    """Summary of one team for API response."""

    team: str
    summary: list[SummaryStat]
