"""Analysis engine for team summaries.

Turns raw matches, scouting reports and a schema into per-team
max/average statistics.
- Pure: no database access, no I/O, no global state
- Forbidden: persistence, HTTP concerns, access control
"""
