"""
Event recommendation engine.

Responsibilities:
- Load the per-country event catalog into memory.
- Derive a user's preference profile from their likes and reviews.
- Score and rank catalog events with additive heuristic boosts.
- Return structured recommendations ready for API serialisation.
"""
