"""Tests for field evaluation."""

import pytest
from builders import make_observation, make_report

from peregrine.core.errors import SchemaIntegrityError
from peregrine.summary.evaluate import evaluate, evaluate_value
from peregrine.summary.schema import (
    AnyOf,
    Equals,
    Schema,
    SchemaField,
    Sum,
    TBARef,
    parse_schema,
)
from peregrine.summary.values import Bool, Number, String


@pytest.fixture
def schema() -> Schema:
    """Schema covering every field variant."""
    return parse_schema(
        [
            {"name": "cargo", "report_reference": "cargo"},
            {"name": "hatches", "report_reference": "hatches"},
            {"name": "score", "tba_reference": "totalPoints"},
            {"name": "moved", "tba_reference": "moved"},
            {"name": "endgame", "tba_reference": "endgameRobot{position}"},
            {"name": "pieces", "sum": [{"name": "cargo"}, {"name": "hatches"}]},
            {
                "name": "climbed",
                "any_of": [
                    {"name": "endgame", "equals": "HabLevel2"},
                    {"name": "endgame", "equals": "HabLevel3"},
                ],
            },
            {"name": "cargo_three", "any_of": [{"name": "cargo", "equals": 3}]},
        ]
    )


class TestReportReference:
    """Test values taken from scouting reports."""

    def test_single_report(self, schema):
        """One report's value is returned as-is."""
        obs = make_observation(reports=[make_report("A", "m1", cargo=4)])
        assert evaluate(schema.get("cargo"), obs, schema) == 4.0

    def test_no_reports_is_absent(self, schema):
        """Zero reports means the value is not determinable."""
        assert evaluate(schema.get("cargo"), make_observation(), schema) is None

    def test_field_missing_from_reports_is_absent(self, schema):
        """Reports without the field do not contribute."""
        obs = make_observation(reports=[make_report("A", "m1", hatches=2)])
        assert evaluate(schema.get("cargo"), obs, schema) is None

    def test_mode_of_disagreeing_reports(self, schema):
        """The most common value wins."""
        obs = make_observation(
            reports=[
                make_report("A", "m1", "s1", cargo=5),
                make_report("A", "m1", "s2", cargo=3),
                make_report("A", "m1", "s3", cargo=3),
            ]
        )
        assert evaluate(schema.get("cargo"), obs, schema) == 3.0

    def test_mode_tie_goes_to_first_seen(self, schema):
        """Equal counts resolve to the value submitted first."""
        obs = make_observation(
            reports=[
                make_report("A", "m1", "s1", cargo=5),
                make_report("A", "m1", "s2", cargo=3),
            ]
        )
        assert evaluate(schema.get("cargo"), obs, schema) == 5.0

    def test_true_and_one_vote_together(self, schema):
        """Boolean and numeric entries of the same value share a vote."""
        obs = make_observation(
            reports=[
                make_report("A", "m1", "s1", cargo=0),
                make_report("A", "m1", "s2", cargo=True),
                make_report("A", "m1", "s3", cargo=1),
            ]
        )
        assert evaluate(schema.get("cargo"), obs, schema) == 1.0
        assert evaluate_value(schema.get("cargo"), obs, schema) == Bool(True)


class TestTBAReference:
    """Test values taken from the score breakdown."""

    def test_number_passes_through(self, schema):
        """Numeric breakdown values are returned unchanged."""
        obs = make_observation(breakdown={"totalPoints": 42})
        assert evaluate(schema.get("score"), obs, schema) == 42.0

    def test_boolean_coerces(self, schema):
        """true/false become 1/0."""
        assert evaluate(schema.get("moved"), make_observation({"moved": True}), schema) == 1.0
        assert evaluate(schema.get("moved"), make_observation({"moved": False}), schema) == 0.0

    def test_missing_key_is_absent(self, schema):
        """A key not in the breakdown is absent."""
        assert evaluate(schema.get("score"), make_observation({}), schema) is None

    def test_string_is_absent_as_number(self, schema):
        """Categorical values cannot be aggregated directly."""
        obs = make_observation({"endgameRobot1": "HabLevel3"})
        assert evaluate(schema.get("endgame"), obs, schema) is None
        assert evaluate_value(schema.get("endgame"), obs, schema) == String("HabLevel3")

    def test_position_token_is_substituted(self, schema):
        """The team's alliance position selects the per-robot key."""
        breakdown = {"endgameRobot1": "None", "endgameRobot2": "HabLevel3"}
        obs = make_observation(breakdown, position=2)
        assert evaluate_value(schema.get("endgame"), obs, schema) == String("HabLevel3")


class TestSum:
    """Test sums of other fields."""

    def test_sum_of_present_fields(self, schema):
        """Sub-field values are added."""
        obs = make_observation(reports=[make_report("A", "m1", cargo=3, hatches=2)])
        assert evaluate(schema.get("pieces"), obs, schema) == 5.0

    def test_absent_sub_fields_count_as_zero(self, schema):
        """A sum is never absent."""
        assert evaluate(schema.get("pieces"), make_observation(), schema) == 0.0

    @pytest.mark.parametrize(
        "values",
        [{}, {"cargo": 1}, {"hatches": 7}, {"cargo": 2, "hatches": 9}],
    )
    def test_sum_is_additive(self, schema, values):
        """Sum equals the sum of its parts with absent as zero."""
        obs = make_observation(reports=[make_report("A", "m1", **values)] if values else [])
        cargo = evaluate(schema.get("cargo"), obs, schema) or 0.0
        hatches = evaluate(schema.get("hatches"), obs, schema) or 0.0
        assert evaluate(schema.get("pieces"), obs, schema) == cargo + hatches


class TestAnyOf:
    """Test indicator fields."""

    def test_matching_literal_gives_one(self, schema):
        """Any matching condition yields 1."""
        obs = make_observation({"endgameRobot1": "HabLevel3"})
        assert evaluate(schema.get("climbed"), obs, schema) == 1.0

    def test_no_match_gives_zero(self, schema):
        """No matching condition yields 0."""
        obs = make_observation({"endgameRobot1": "HabLevel1"})
        assert evaluate(schema.get("climbed"), obs, schema) == 0.0

    def test_absent_sub_field_gives_zero(self, schema):
        """AnyOf is never absent."""
        assert evaluate(schema.get("climbed"), make_observation(), schema) == 0.0

    @pytest.mark.parametrize("cargo", [None, 2, 3, 4])
    def test_indicator_matches_equality(self, schema, cargo):
        """AnyOf is 1 exactly when the sub-field equals the literal."""
        reports = [make_report("A", "m1", cargo=cargo)] if cargo is not None else []
        obs = make_observation(reports=reports)
        expected = 1.0 if evaluate(schema.get("cargo"), obs, schema) == 3.0 else 0.0
        assert evaluate(schema.get("cargo_three"), obs, schema) == expected


class TestSchemaIntegrityAtEvaluation:
    """Test that broken schemas fail hard instead of evaluating to zero."""

    def test_undefined_reference_raises(self):
        """An unvalidated schema with a dangling reference fails at evaluation."""
        field = SchemaField("total", Sum(("missing",)))
        schema = Schema([field])
        with pytest.raises(SchemaIntegrityError):
            evaluate(field, make_observation(), schema)

    def test_transitive_undefined_reference_raises(self):
        """A dangling reference two levels down also fails."""
        outer = SchemaField("outer", Sum(("inner",)))
        inner = SchemaField("inner", Sum(("missing",)))
        schema = Schema([outer, inner])
        with pytest.raises(SchemaIntegrityError) as exc_info:
            evaluate(outer, make_observation(), schema)
        assert exc_info.value.field_name == "inner"

    def test_cycle_raises(self):
        """A cyclic schema fails instead of recursing forever."""
        a = SchemaField("a", Sum(("b",)))
        b = SchemaField("b", Sum(("a",)))
        with pytest.raises(SchemaIntegrityError, match="cyclic"):
            evaluate(a, make_observation(), Schema([a, b]))

    @pytest.mark.parametrize("score", [None, 1, 2])
    def test_any_of_dangling_reference_raises_for_any_data(self, score):
        """A later undefined condition fails even when an earlier one matches."""
        field = SchemaField(
            "flag",
            AnyOf((Equals("score", Number(1.0)), Equals("missing", Number(1.0)))),
        )
        schema = Schema([SchemaField("score", TBARef("score")), field])
        breakdown = {"score": score} if score is not None else {}
        with pytest.raises(SchemaIntegrityError) as exc_info:
            evaluate(field, make_observation(breakdown), schema)
        assert exc_info.value.reference == "missing"

    def test_any_of_transitive_dangling_reference_raises(self):
        """A broken field behind a later condition is still reached."""
        field = SchemaField(
            "flag",
            AnyOf((Equals("score", Number(1.0)), Equals("inner", Number(0.0)))),
        )
        inner = SchemaField("inner", Sum(("missing",)))
        schema = Schema([SchemaField("score", TBARef("score")), field, inner])
        with pytest.raises(SchemaIntegrityError):
            evaluate(field, make_observation({"score": 1}), schema)
