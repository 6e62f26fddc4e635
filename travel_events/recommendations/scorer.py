"""
Recommendation scoring.

Each candidate starts from its own rating and collects independent additive
boosts: the flagship category, a match on the requested country, and
matches on the categories, countries and cities the user already liked.
A small random jitter keeps repeated requests from returning an identical
list; pass ``NoJitter()`` (or weights with ``jitter=0``) for a fully
deterministic ranking.
"""
from __future__ import annotations

from typing import Iterable, Protocol

import numpy as np

from ..config import DEFAULT_WEIGHTS, ScoringWeights
from .models import Event, IndoorOutdoor, PreferenceProfile


class JitterSource(Protocol):
    def random(self) -> float:
        """Return the next float in ``[0, 1)``."""
        ...


class NoJitter:
    """Random source that always returns 0.0."""

    def random(self) -> float:
        return 0.0


def _same_country(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def score_event(
    event: Event,
    profile: PreferenceProfile,
    target_country: str | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Compute the deterministic part of an event's score (no jitter)."""
    w = weights
    score = event.rating or 0.0

    if event.category == w.flagship_category:
        score += w.flagship
    if target_country and _same_country(event.country, target_country):
        score += w.target_country
    if profile.categories.get(event.category):
        score += w.liked_category
    if profile.countries.get(event.country):
        score += w.liked_country
    if profile.cities.get(event.city):
        score += w.liked_city
    if event.indoor_outdoor == IndoorOutdoor.indoor:
        score += w.indoor

    return score


def score_events(
    candidates: Iterable[Event],
    profile: PreferenceProfile,
    liked_event_ids: Iterable[str],
    target_country: str | None = None,
    limit: int = 10,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rng: JitterSource | None = None,
) -> list[Event]:
    """Rank candidates for a user and return the top ``limit`` events."""
    if limit <= 0:
        return []

    liked = {str(event_id) for event_id in liked_event_ids}
    available = [event for event in candidates if event.id not in liked]

    # Narrow to the requested country, unless that leaves nothing at all
    pool = available
    if target_country and target_country.strip():
        in_country = [e for e in available if _same_country(e.country, target_country)]
        if in_country:
            pool = in_country
    else:
        target_country = None

    if rng is None:
        rng = np.random.default_rng()

    scored: list[tuple[Event, float]] = []
    for event in pool:
        score = score_event(event, profile, target_country, weights)
        score += weights.jitter * float(rng.random())
        scored.append((event, score))

    # sorted() is stable, so equal scores keep candidate order
    ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)
    return [event for event, _ in ranked[:limit]]
