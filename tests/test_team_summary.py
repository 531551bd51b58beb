"""Tests for team summaries."""

import pytest
from builders import make_match, make_observation, make_report

from peregrine.core.errors import SchemaIntegrityError
from peregrine.models.domain import Stat
from peregrine.summary.aggregate import aggregate
from peregrine.summary.schema import (
    AnyOf,
    Equals,
    Schema,
    SchemaField,
    Sum,
    TBARef,
    parse_schema,
)
from peregrine.summary import team as team_module
from peregrine.summary.team import summarize, summarize_event, summarize_team
from peregrine.summary.values import Number

SCORE_SCHEMA = [{"name": "score", "tba_reference": "score"}]


class TestSummarize:
    """Test max/average computation."""

    def test_single_match_per_team(self):
        """Each team sees its own alliance's score."""
        schema = parse_schema(SCORE_SCHEMA)
        matches = [make_match("m1", ["A"], ["B"], {"score": 10}, {"score": 20})]
        observations = aggregate(matches, [])

        assert summarize(schema, observations["A"]) == [Stat("score", 10.0, 10.0)]
        assert summarize(schema, observations["B"]) == [Stat("score", 20.0, 20.0)]

    def test_max_and_average_over_matches(self):
        """Max and mean are taken across matches."""
        schema = parse_schema(SCORE_SCHEMA)
        matches = [
            make_match("m1", ["A"], ["B"], {"score": 10}, {"score": 0}),
            make_match("m2", ["B"], ["A"], {"score": 0}, {"score": 20}),
        ]
        observations = aggregate(matches, [])

        assert summarize(schema, observations["A"]) == [Stat("score", 20.0, 15.0)]

    def test_absent_values_are_not_averaged(self):
        """Matches without the value do not pull the average down."""
        schema = parse_schema(SCORE_SCHEMA)
        observations = [make_observation({"score": 12}), make_observation({})]
        assert summarize(schema, observations) == [Stat("score", 12.0, 12.0)]

    def test_no_values_defaults_to_zero(self):
        """A field with nothing to aggregate still appears, as zeros."""
        schema = parse_schema(SCORE_SCHEMA + [{"name": "cargo", "report_reference": "cargo"}])
        observations = [make_observation({"score": 5})]

        stats = summarize(schema, observations)

        assert stats == [Stat("score", 5.0, 5.0), Stat("cargo", 0.0, 0.0)]

    def test_no_observations_gives_all_zero(self):
        """Every field is present even without matches."""
        schema = parse_schema(SCORE_SCHEMA)
        assert summarize(schema, []) == [Stat("score", 0.0, 0.0)]

    def test_stats_follow_schema_order(self):
        """Output order is schema order."""
        schema = parse_schema(
            [
                {"name": "z", "tba_reference": "z"},
                {"name": "a", "tba_reference": "a"},
                {"name": "m", "sum": [{"name": "z"}, {"name": "a"}]},
            ]
        )
        assert [s.name for s in summarize(schema, [make_observation()])] == ["z", "a", "m"]

    def test_negative_values_keep_true_max(self):
        """Max is the largest present value, even if negative."""
        schema = parse_schema(SCORE_SCHEMA)
        observations = [make_observation({"score": -4}), make_observation({"score": -2})]
        assert summarize(schema, observations) == [Stat("score", -2.0, -3.0)]

    def test_report_mode_feeds_summary(self):
        """Disagreeing scouts resolve per match before aggregating."""
        schema = parse_schema([{"name": "cargo", "report_reference": "cargo"}])
        observations = [
            make_observation(
                reports=[
                    make_report("A", "m1", "s1", cargo=3),
                    make_report("A", "m1", "s2", cargo=3),
                    make_report("A", "m1", "s3", cargo=5),
                ]
            )
        ]
        assert summarize(schema, observations) == [Stat("cargo", 3.0, 3.0)]

    def test_schema_error_aborts_whole_summary(self):
        """A broken field fails the team with no partial stats."""
        schema = Schema(
            [SchemaField("score", TBARef("score")), SchemaField("bad", Sum(("missing",)))]
        )
        with pytest.raises(SchemaIntegrityError):
            summarize(schema, [make_observation({"score": 1})])

    def test_summarize_team_wraps_stats(self):
        """summarize_team labels the stats with the team."""
        schema = parse_schema(SCORE_SCHEMA)
        summary = summarize_team(schema, "A", [make_observation({"score": 2})])
        assert summary.team == "A"
        assert summary.stats == [Stat("score", 2.0, 2.0)]


class TestSummarizeEvent:
    """Test event-wide summaries."""

    @pytest.fixture
    def matches(self):
        return [
            make_match("m1", ["C", "A"], ["B", "D"], {"score": 10}, {"score": 20}),
            make_match("m2", ["B", "C"], ["D", "A"], {"score": 30}, {"score": 40}),
        ]

    def test_teams_sorted_by_key(self, matches):
        """Summaries come back in team key order."""
        result = summarize_event(parse_schema(SCORE_SCHEMA), matches, [])
        assert [s.team for s in result.summaries] == ["A", "B", "C", "D"]
        assert result.failures == []

    def test_parallel_matches_sequential(self, matches):
        """Fan-out across threads gives identical output."""
        schema = parse_schema(SCORE_SCHEMA)
        sequential = summarize_event(schema, matches, [], max_workers=1)
        parallel = summarize_event(schema, matches, [], max_workers=4)
        assert parallel == sequential

    def test_repeated_runs_are_identical(self, matches):
        """Summarizing the same input twice gives the same result."""
        schema = parse_schema(SCORE_SCHEMA)
        reports = [make_report("A", "m1", "s1", cargo=2)]
        assert summarize_event(schema, matches, reports) == summarize_event(schema, matches, reports)

    def test_broken_schema_fails_every_team(self):
        """A dangling reference fails all teams, whatever their data."""
        schema = Schema(
            [
                SchemaField("score", TBARef("score")),
                SchemaField(
                    "flag",
                    AnyOf((Equals("score", Number(1.0)), Equals("missing", Number(1.0)))),
                ),
            ]
        )
        matches = [make_match("m1", ["A"], ["B"], {"score": 1}, {"score": 2})]

        result = summarize_event(schema, matches, [], max_workers=2)

        assert result.summaries == []
        assert [f.team for f in result.failures] == ["A", "B"]
        assert all(isinstance(f.error, SchemaIntegrityError) for f in result.failures)

    def test_failure_is_isolated_per_team(self, matches, monkeypatch):
        """One team's schema failure leaves the other teams' summaries intact."""
        real_summarize_team = team_module.summarize_team

        def failing_for_b(schema, team, observations):
            if team == "B":
                raise SchemaIntegrityError("score", "missing")
            return real_summarize_team(schema, team, observations)

        monkeypatch.setattr(team_module, "summarize_team", failing_for_b)

        result = summarize_event(parse_schema(SCORE_SCHEMA), matches, [], max_workers=4)

        assert [s.team for s in result.summaries] == ["A", "C", "D"]
        assert [f.team for f in result.failures] == ["B"]
        assert result.summaries[0].stats == [Stat("score", 40.0, 25.0)]
