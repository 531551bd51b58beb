"""Stats queries over stored event data.

- Reads the store and feeds the pure summary engine
- Forbidden: HTTP concerns, writes
"""
