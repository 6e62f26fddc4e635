from __future__ import annotations

import logging
from typing import Callable, Protocol, TypeVar

from ..config import DEFAULT_APP_CONFIG, DEFAULT_WEIGHTS, ScoringWeights
from ..errors import InvalidInput, TravelEventsError, UpstreamUnavailable
from .analyzer import analyze_preferences
from .models import Event, Like, RecommendationResult, Review
from .scorer import JitterSource, score_events

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_LIKES_MESSAGE = "No likes found. Start liking events to get personalized recommendations!"


class LikesSource(Protocol):
    def find_by_user(self, user_id: str) -> list[Like]: ...


class ReviewsSource(Protocol):
    def find_by_user(self, user_name: str) -> list[Review]: ...


class CatalogSource(Protocol):
    def find_all(self, country: str | None = None) -> list[Event]: ...

    def find_by_id(self, event_id: str) -> Event | None: ...


def _read(what: str, fn: Callable[[], T]) -> T:
    """Call a collaborator, turning unexpected failures into ``UpstreamUnavailable``."""
    try:
        return fn()
    except TravelEventsError:
        raise
    except Exception as exc:
        logger.warning("Reading %s failed", what, exc_info=True)
        raise UpstreamUnavailable(f"Could not load {what}") from exc


def get_recommendations(
    user_id: str | None,
    country: str | None = None,
    limit: int = DEFAULT_APP_CONFIG.default_limit,
    *,
    likes_store: LikesSource,
    reviews_store: ReviewsSource,
    catalog: CatalogSource,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rng: JitterSource | None = None,
) -> RecommendationResult:
    """
    Recommend catalog events for a user based on what they liked and reviewed.

    A user without likes gets an empty list and a hint instead of a ranking.
    Reviews are matched on the review's user name being equal to ``user_id``.
    """
    if not user_id or not user_id.strip():
        raise InvalidInput("Missing required field: userId")

    likes = _read("likes", lambda: likes_store.find_by_user(user_id))
    if not likes:
        return RecommendationResult(recommendations=[], total_likes=0, message=NO_LIKES_MESSAGE)

    reviews = _read("reviews", lambda: reviews_store.find_by_user(user_id))
    preferences = _read("event catalog", lambda: analyze_preferences(likes, reviews, catalog))

    liked_ids = {like.event_id for like in likes}
    candidates = _read("event catalog", lambda: catalog.find_all(country or None))
    if country and all(event.id in liked_ids for event in candidates):
        # Nothing left to suggest in that country; rank the whole catalog
        candidates = _read("event catalog", lambda: catalog.find_all(None))

    recommendations = score_events(
        candidates,
        preferences,
        liked_ids,
        target_country=country,
        limit=limit,
        weights=weights,
        rng=rng,
    )

    return RecommendationResult(
        recommendations=recommendations,
        preferences=preferences,
        total_likes=len(likes),
    )
