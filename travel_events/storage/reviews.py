from __future__ import annotations

import threading
from datetime import datetime, timezone

from ..errors import InvalidInput
from ..recommendations.models import Review


class ReviewsStore:
    """Append-only review log; a user may review the same event many times."""

    def __init__(self) -> None:
        self._reviews: list[Review] = []
        self._lock = threading.Lock()

    def find_by_event(self, event_id: str) -> list[Review]:
        with self._lock:
            reviews = [r for r in self._reviews if r.event_id == event_id]
        return reviews[::-1]

    def find_by_user(self, user_name: str) -> list[Review]:
        with self._lock:
            reviews = [r for r in self._reviews if r.user_name == user_name]
        return reviews[::-1]

    def find_all(self) -> list[Review]:
        with self._lock:
            reviews = list(self._reviews)
        return reviews[::-1]

    def create(self, event_id: str, rating: int, text: str | None, user_name: str) -> Review:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidInput("Rating must be an integer between 1 and 5")
        now = datetime.now(timezone.utc)
        review = Review(
            event_id=event_id,
            user_name=user_name,
            rating=rating,
            review=text or "",
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._reviews.append(review)
        return review

    def clear(self) -> None:
        with self._lock:
            self._reviews.clear()


_reviews_store = ReviewsStore()


def get_reviews_store() -> ReviewsStore:
    return _reviews_store
