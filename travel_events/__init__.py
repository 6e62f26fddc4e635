"""
Travel event discovery backend.

Responsibilities:
- Serve the per-country event catalog.
- Record likes and star-rating reviews for pseudo-anonymous users.
- Recommend events from a user's like and review history.
"""
