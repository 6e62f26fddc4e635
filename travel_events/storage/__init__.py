"""
Likes and reviews storage.

Responsibilities:
- Keep one like per (user, event) pair with idempotent creation.
- Keep an append-only log of star ratings and review text.
- Return records newest first, the order the API and analyzer expect.
"""
