#!/usr/bin/env python3
"""Seed a demo event with a schema, matches and scout reports.

Usage:
    python scripts/seed_demo.py

This script:
1. Initializes the demo database
2. Creates a 2019-style schema with every field variant
3. Creates an event bound to that schema
4. Seeds qualification matches with score breakdowns
5. Seeds scout reports, including disagreeing scouts
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from peregrine.db import repo  # noqa: E402
from peregrine.db.session import init_db, session_scope  # noqa: E402
from peregrine.models.domain import EventEntity  # noqa: E402
from peregrine.summary.schema import parse_schema  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"
DEMO_EVENT_KEY = "2019demo"
DEMO_TEAMS = [f"frc{n}" for n in (254, 1114, 1678, 2056, 2471, 2733, 2910, 3476, 4488, 5803)]
DEMO_MATCH_COUNT = 8
DEMO_REPORTERS = ["scout-a", "scout-b", "scout-c"]

DEMO_SCHEMA = [
    {"name": "Cargo", "report_reference": "cargo"},
    {"name": "Hatch Panels", "report_reference": "hatchPanels"},
    {"name": "Game Pieces", "sum": [{"name": "Cargo"}, {"name": "Hatch Panels"}]},
    {"name": "Endgame", "tba_reference": "endgameRobot{position}"},
    {
        "name": "Climbed",
        "any_of": [
            {"name": "Endgame", "equals": "HabLevel2"},
            {"name": "Endgame", "equals": "HabLevel3"},
        ],
    },
    {"name": "Alliance Score", "tba_reference": "totalPoints"},
    {"name": "Rocket Complete", "tba_reference": "completeRocketRankingPoint"},
]

ENDGAME_STATES = ["None", "HabLevel1", "HabLevel2", "HabLevel3"]


def make_breakdown(rng: random.Random) -> dict:
    """Build a plausible per-alliance score breakdown."""
    breakdown = {
        "totalPoints": rng.randint(20, 90),
        "completeRocketRankingPoint": rng.random() < 0.2,
    }
    for position in (1, 2, 3):
        breakdown[f"endgameRobot{position}"] = rng.choice(ENDGAME_STATES)
    return breakdown


def main() -> None:
    """Seed the demo database."""
    rng = random.Random(2019)

    # Validate before storing, as the API does
    parse_schema(DEMO_SCHEMA)

    print(f"Initializing database at {DEMO_DB_PATH}")
    init_db(DEMO_DB_PATH)

    with session_scope(DEMO_DB_PATH) as session:
        if repo.get_event(session, DEMO_EVENT_KEY) is not None:
            print(f"Event {DEMO_EVENT_KEY} already seeded")
            return

        schema = repo.create_schema(session, DEMO_SCHEMA, year=2019)
        repo.create_event(
            session,
            EventEntity(key=DEMO_EVENT_KEY, name="Demo Regional", schema_id=schema.schema_id),
        )
        session.flush()

        for number in range(1, DEMO_MATCH_COUNT + 1):
            teams = rng.sample(DEMO_TEAMS, 6)
            match_key = f"{DEMO_EVENT_KEY}_qm{number}"
            repo.upsert_match(
                session,
                DEMO_EVENT_KEY,
                match_key,
                teams[:3],
                teams[3:],
                red_score_breakdown=make_breakdown(rng),
                blue_score_breakdown=make_breakdown(rng),
            )

            for team in teams:
                for reporter in rng.sample(DEMO_REPORTERS, rng.randint(0, 3)):
                    repo.upsert_report(
                        session,
                        DEMO_EVENT_KEY,
                        match_key,
                        team,
                        reporter,
                        [
                            {"name": "cargo", "value": rng.randint(0, 6)},
                            {"name": "hatchPanels", "value": rng.randint(0, 4)},
                        ],
                    )

    print(f"Seeded {DEMO_MATCH_COUNT} matches for event {DEMO_EVENT_KEY}")
    print(f"Run: PEREGRINE_DB_PATH={DEMO_DB_PATH} python -m peregrine.api.app")
    print(f"Then: GET /api/events/{DEMO_EVENT_KEY}/stats")


if __name__ == "__main__":
    main()
