from __future__ import annotations

import threading
from datetime import datetime, timezone

from ..recommendations.models import Like


class LikesStore:
    """In-memory likes keyed by ``(user_id, event_id)``; at most one per pair.

    Dict insertion order is creation order, so reads reverse it for newest first.
    """

    def __init__(self) -> None:
        self._likes: dict[tuple[str, str], Like] = {}
        self._lock = threading.Lock()

    def find_by_user(self, user_id: str) -> list[Like]:
        with self._lock:
            likes = [like for like in self._likes.values() if like.user_id == user_id]
        return likes[::-1]

    def find_all(self) -> list[Like]:
        with self._lock:
            likes = list(self._likes.values())
        return likes[::-1]

    def exists(self, user_id: str, event_id: str) -> bool:
        with self._lock:
            return (user_id, event_id) in self._likes

    def get_or_create(self, user_id: str, event_id: str) -> tuple[Like, bool]:
        """Insert the like if absent. Returns ``(like, created)``."""
        key = (user_id, event_id)
        with self._lock:
            existing = self._likes.get(key)
            if existing is not None:
                return existing, False
            like = Like(user_id=user_id, event_id=event_id, created_at=datetime.now(timezone.utc))
            self._likes[key] = like
            return like, True

    def create(self, user_id: str, event_id: str) -> Like:
        like, _ = self.get_or_create(user_id, event_id)
        return like

    def delete(self, user_id: str, event_id: str) -> bool:
        with self._lock:
            return self._likes.pop((user_id, event_id), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._likes.clear()


_likes_store = LikesStore()


def get_likes_store() -> LikesStore:
    return _likes_store
