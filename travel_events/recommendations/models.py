from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IndoorOutdoor(str, Enum):
    indoor = "indoor"
    outdoor = "outdoor"


def id_to_str(v: object) -> object:
    # Ids arrive as JSON numbers or strings
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    category: str = ""
    city: str = ""
    country: str = ""
    indoor_outdoor: IndoorOutdoor | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0, alias="ratingCount")
    start_time: datetime | None = None
    end_time: datetime | None = None
    lat: float | None = None
    lon: float | None = None
    source: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        return id_to_str(v)


class Like(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    event_id: str = Field(..., alias="eventId")
    created_at: datetime = Field(..., alias="createdAt")


class Review(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(..., alias="eventId")
    user_name: str = Field(..., alias="userName")
    rating: int = Field(..., ge=1, le=5)
    review: str = ""
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class PreferenceProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    categories: dict[str, int] = Field(default_factory=dict)
    countries: dict[str, int] = Field(default_factory=dict)
    cities: dict[str, int] = Field(default_factory=dict)
    indoor_outdoor: dict[str, int] = Field(
        default_factory=lambda: {"indoor": 0, "outdoor": 0},
        alias="indoorOutdoor",
    )
    avg_rating: float = Field(default=0.0, alias="avgRating")
    total_reviews: int = Field(default=0, alias="totalReviews")


class RecommendationResult(BaseModel):
    """Outcome of one recommendation request.

    ``message`` is only set when the user has nothing to compute from yet
    (no likes); ``preferences`` is ``None`` in that case.
    """

    recommendations: list[Event] = Field(default_factory=list)
    preferences: PreferenceProfile | None = None
    total_likes: int = 0
    message: str | None = None


# ── API request bodies ───────────────────────────────────────────────────


class LikeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    event_id: str = Field(..., min_length=1, alias="eventId")

    @field_validator("user_id", "event_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: object) -> object:
        return id_to_str(v)


class ReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(..., min_length=1, alias="eventId")
    rating: int = Field(..., ge=1, le=5)
    review: str | None = ""
    user_name: str = Field(..., min_length=1, alias="userName")

    @field_validator("event_id", mode="before")
    @classmethod
    def coerce_event_id(cls, v: object) -> object:
        return id_to_str(v)
