"""
Usage analytics.

Responsibilities:
- Keep an in-memory log of recommendation requests and like/review actions.
- Summarise the log for the analytics endpoint.
"""
