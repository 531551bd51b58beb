"""Field evaluation against a single match observation.

Evaluation never fails because data is missing: a field whose inputs are
absent evaluates to None. It only fails when the schema itself is broken.
"""

from __future__ import annotations

from peregrine.core.errors import SchemaIntegrityError
from peregrine.models.domain import Observation
from peregrine.summary.schema import (
    POSITION_TOKEN,
    AnyOf,
    ReportRef,
    Schema,
    SchemaField,
    Sum,
    TBARef,
)
from peregrine.summary.values import Number, Value, as_number, values_equal

_ONE = Number(1.0)
_ZERO = Number(0.0)


def evaluate(field: SchemaField, observation: Observation, schema: Schema) -> float | None:
    """Evaluate a schema field to a number for one match.

    Args:
        field: Field to evaluate.
        observation: The team's data for one match.
        schema: Schema used to resolve Sum and AnyOf references.

    Returns:
        Numeric value, or None if it cannot be determined for this match.

    Raises:
        SchemaIntegrityError: If the field references an undefined or
            cyclic field, directly or transitively.
    """
    return as_number(evaluate_value(field, observation, schema))


def evaluate_value(
    field: SchemaField,
    observation: Observation,
    schema: Schema,
    _path: tuple[str, ...] = (),
) -> Value | None:
    """Evaluate a schema field to a tagged value for one match.

    Same as evaluate() but keeps categorical values, which AnyOf needs to
    compare against string literals.
    """
    if field.name in _path:
        cycle = " -> ".join(_path + (field.name,))
        raise SchemaIntegrityError(_path[-1], field.name, f"cyclic field reference: {cycle}")
    path = _path + (field.name,)
    expression = field.expression

    if isinstance(expression, ReportRef):
        return _report_mode(expression.name, observation)

    if isinstance(expression, TBARef):
        key = expression.name.replace(POSITION_TOKEN, str(observation.position))
        return observation.breakdown.get(key)

    if isinstance(expression, Sum):
        total = 0.0
        for name in expression.fields:
            sub_value = evaluate_value(_resolve(schema, field, name), observation, schema, path)
            total += as_number(sub_value) or 0.0
        return Number(total)

    if isinstance(expression, AnyOf):
        # Every condition is evaluated so broken references fail regardless of data
        matches = []
        for condition in expression.conditions:
            sub_field = _resolve(schema, field, condition.field)
            sub_value = evaluate_value(sub_field, observation, schema, path)
            matches.append(sub_value is not None and values_equal(sub_value, condition.literal))
        return _ONE if any(matches) else _ZERO

    raise TypeError(f"unsupported expression: {type(expression).__name__}")


def _resolve(schema: Schema, field: SchemaField, name: str) -> SchemaField:
    """Look up a referenced field, failing hard if it is not defined."""
    sub_field = schema.get(name)
    if sub_field is None:
        raise SchemaIntegrityError(field.name, name)
    return sub_field


def _report_mode(name: str, observation: Observation) -> Value | None:
    """Most common value scouts recorded for ``name``.

    Values are grouped with values_equal(), so ``true`` and ``1`` count as
    the same vote; the group is represented by its first-seen value. Ties
    go to the group seen first, in report submission order.
    """
    # [representative, count] in first-seen order
    tallies: list[list] = []
    for report in observation.reports:
        value = report.get(name)
        if value is None:
            continue
        for tally in tallies:
            if values_equal(tally[0], value):
                tally[1] += 1
                break
        else:
            tallies.append([value, 1])

    if not tallies:
        return None

    # max() returns the first of equal counts
    return max(tallies, key=lambda tally: tally[1])[0]
