"""API module for Peregrine.

- Validates inputs, reads/writes DB
- Returns stats payloads for clients
- Forbidden: summary computation beyond calling the engine
"""
