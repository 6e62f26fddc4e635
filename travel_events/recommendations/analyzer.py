from __future__ import annotations

from collections import Counter
from typing import Iterable, Protocol

from .models import Event, Like, PreferenceProfile, Review


class EventLookup(Protocol):
    def find_by_id(self, event_id: str) -> Event | None: ...


def analyze_preferences(
    likes: Iterable[Like],
    reviews: list[Review],
    catalog: EventLookup,
) -> PreferenceProfile:
    """
    Derive a preference profile from a user's likes and reviews.

    Each like is resolved through the catalog; likes pointing at events the
    catalog does not know are ignored. ``avg_rating`` is the mean review
    rating, 0 when the user has not reviewed anything.
    """
    categories: Counter[str] = Counter()
    countries: Counter[str] = Counter()
    cities: Counter[str] = Counter()
    indoor_outdoor = {"indoor": 0, "outdoor": 0}

    for like in likes:
        event = catalog.find_by_id(like.event_id)
        if event is None:
            continue
        if event.category:
            categories[event.category] += 1
        if event.country:
            countries[event.country] += 1
        if event.city:
            cities[event.city] += 1
        if event.indoor_outdoor is not None:
            indoor_outdoor[event.indoor_outdoor.value] += 1

    avg_rating = sum(r.rating for r in reviews) / len(reviews) if reviews else 0.0

    return PreferenceProfile(
        categories=dict(categories),
        countries=dict(countries),
        cities=dict(cities),
        indoor_outdoor=indoor_outdoor,
        avg_rating=avg_rating,
        total_reviews=len(reviews),
    )
