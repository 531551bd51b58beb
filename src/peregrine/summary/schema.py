"""Schema fields as a closed set of tagged expressions.

A schema is an ordered list of named fields. Each field is exactly one of:
- ReportRef: value recorded by scouts under a name
- TBARef: value from the alliance score breakdown
- Sum: sum of other schema fields
- AnyOf: 1 if any other schema field equals a literal, else 0

ReportRef and TBARef point at raw data and always resolve. Sum and AnyOf
point at other fields of the same schema and are checked when the schema
is parsed.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

from peregrine.core.errors import SchemaIntegrityError
from peregrine.models.types import SchemaFieldPayload
from peregrine.summary.values import Value, from_raw

# Placeholder in TBA references replaced by the team's alliance position
POSITION_TOKEN = "{position}"


@dataclass(frozen=True)
class ReportRef:
    """Value recorded by scouts under ``name``."""

    name: str


@dataclass(frozen=True)
class TBARef:
    """Value read from the alliance score breakdown.

    ``name`` may contain POSITION_TOKEN, e.g. ``endgameRobot{position}``.
    """

    name: str


@dataclass(frozen=True)
class Sum:
    """Sum of the named schema fields."""

    fields: tuple[str, ...]


@dataclass(frozen=True)
class Equals:
    """Condition: schema field ``field`` evaluates to ``literal``."""

    field: str
    literal: Value


@dataclass(frozen=True)
class AnyOf:
    """Indicator that any condition holds."""

    conditions: tuple[Equals, ...]


Expression = Union[ReportRef, TBARef, Sum, AnyOf]


@dataclass(frozen=True)
class SchemaField:
    """A named derived statistic."""

    name: str
    expression: Expression


def references(expression: Expression) -> tuple[str, ...]:
    """Names of other schema fields an expression depends on."""
    if isinstance(expression, Sum):
        return expression.fields
    if isinstance(expression, AnyOf):
        return tuple(condition.field for condition in expression.conditions)
    if isinstance(expression, (ReportRef, TBARef)):
        return ()
    raise TypeError(f"unsupported expression: {type(expression).__name__}")


class Schema:
    """Immutable, ordered collection of schema fields.

    Constructing a Schema directly does not validate it; use
    parse_schema() or validate_schema() for that.
    """

    def __init__(self, fields: Iterable[SchemaField]):
        self._fields = tuple(fields)
        self._by_name: dict[str, SchemaField] = {}
        for schema_field in self._fields:
            self._by_name.setdefault(schema_field.name, schema_field)

    @property
    def fields(self) -> tuple[SchemaField, ...]:
        return self._fields

    def get(self, name: str) -> SchemaField | None:
        """Look up a field by name."""
        return self._by_name.get(name)

    def __iter__(self) -> Iterator[SchemaField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({[f.name for f in self._fields]!r})"


def validate_schema(schema: Schema) -> Schema:
    """Check a schema for duplicate names, undefined references and cycles.

    Args:
        schema: Schema to check.

    Returns:
        The same schema, for chaining.

    Raises:
        SchemaIntegrityError: On the first problem found.
    """
    seen: set[str] = set()
    for schema_field in schema:
        if schema_field.name in seen:
            raise SchemaIntegrityError(
                schema_field.name,
                schema_field.name,
                f"duplicate field name {schema_field.name!r}",
            )
        seen.add(schema_field.name)

    for schema_field in schema:
        for reference in references(schema_field.expression):
            if schema.get(reference) is None:
                raise SchemaIntegrityError(schema_field.name, reference)

    # Depth-first search; "visiting" marks fields on the current path
    done: set[str] = set()
    visiting: list[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in visiting:
            cycle = " -> ".join(visiting[visiting.index(name):] + [name])
            raise SchemaIntegrityError(visiting[-1], name, f"cyclic field reference: {cycle}")
        visiting.append(name)
        for reference in references(schema.get(name).expression):
            visit(reference)
        visiting.pop()
        done.add(name)

    for schema_field in schema:
        visit(schema_field.name)

    return schema


def field_from_payload(payload: SchemaFieldPayload) -> SchemaField:
    """Convert a validated API payload into a schema field."""
    if payload.report_reference:
        expression: Expression = ReportRef(payload.report_reference)
    elif payload.tba_reference:
        expression = TBARef(payload.tba_reference)
    elif payload.sum:
        expression = Sum(tuple(term.name for term in payload.sum))
    else:
        conditions = []
        for condition in payload.any_of or []:
            literal = from_raw(condition.equals)
            if literal is None:
                raise ValueError(f"field {payload.name!r} has an unsupported any_of literal")
            conditions.append(Equals(condition.name, literal))
        expression = AnyOf(tuple(conditions))
    return SchemaField(name=payload.name, expression=expression)


def parse_schema(raw_fields: Iterable[SchemaFieldPayload | Mapping[str, Any]]) -> Schema:
    """Parse and validate schema field definitions.

    Args:
        raw_fields: Field payloads or their JSON-decoded dicts, in order.

    Returns:
        Validated Schema.

    Raises:
        pydantic.ValidationError: If a field does not define exactly one variant.
        SchemaIntegrityError: If a field references an undefined field.
    """
    fields = []
    for raw in raw_fields:
        payload = raw if isinstance(raw, SchemaFieldPayload) else SchemaFieldPayload.model_validate(raw)
        fields.append(field_from_payload(payload))
    return validate_schema(Schema(fields))
