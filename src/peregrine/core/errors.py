"""Error taxonomy for the analysis engine and its collaborators.

Missing match data is deliberately absent from this module: an absent
report or breakdown value is a normal outcome, not an error.
"""

from __future__ import annotations


class SchemaIntegrityError(ValueError):
    """A schema field references a name that is not defined.

    Attributes:
        field_name: Field whose definition is broken.
        reference: The name that could not be resolved.
    """

    def __init__(self, field_name: str, reference: str, message: str | None = None):
        self.field_name = field_name
        self.reference = reference
        super().__init__(
            message or f"field {field_name!r} references undefined field {reference!r}"
        )


class NoSchemaBound(Exception):
    """The event has no schema assigned, so nothing can be summarized."""

    def __init__(self, event_key: str):
        self.event_key = event_key
        super().__init__(f"no schema found for event {event_key!r}")


class NotFound(LookupError):
    """A requested record does not exist in the store."""
