from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .config import DEFAULT_APP_CONFIG
from .errors import InvalidInput, NotFound, TravelEventsError, UpstreamUnavailable
from .recommendations.catalog import EventCatalog, get_catalog
from .recommendations.models import LikeRequest, ReviewRequest
from .recommendations.scorer import JitterSource
from .recommendations.service import get_recommendations
from .storage.likes import LikesStore, get_likes_store
from .storage.reviews import ReviewsStore, get_reviews_store

logger = logging.getLogger(__name__)

app = FastAPI(title="Travel Events API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(DEFAULT_APP_CONFIG.cors_origins),
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_jitter_source() -> JitterSource | None:
    """Random source for score jitter; ``None`` means a fresh generator per request."""
    return None


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(TravelEventsError)
async def travel_events_error_handler(request: Request, exc: TravelEventsError) -> JSONResponse:
    if isinstance(exc, UpstreamUnavailable):
        logger.warning("Upstream failure on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Invalid or missing fields: {', '.join(fields)}"},
    )


@app.exception_handler(Exception)
async def catch_all_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/status")
def status(catalog: EventCatalog = Depends(get_catalog)) -> dict:
    try:
        catalog_info: dict = {"events": len(catalog), "countries": len(catalog.countries())}
    except UpstreamUnavailable as exc:
        catalog_info = {"error": exc.message}
    return {
        "success": True,
        "message": "API is working",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": DEFAULT_APP_CONFIG.environment,
        "catalog": catalog_info,
    }


@app.get("/api/metadata")
def metadata(catalog: EventCatalog = Depends(get_catalog)) -> dict:
    return {"countries": catalog.countries(), "categories": catalog.categories()}


@app.get("/api/events")
def events(
    country: str | None = Query(None),
    catalog: EventCatalog = Depends(get_catalog),
):
    return {"success": True, "events": catalog.find_all(country)}


# ── Likes ────────────────────────────────────────────────────────────────


@app.get("/api/likes")
def list_likes(
    user_id: str | None = Query(None, alias="userId"),
    event_id: str | None = Query(None, alias="eventId"),
    store: LikesStore = Depends(get_likes_store),
):
    if user_id and event_id:
        return {"success": True, "liked": store.exists(user_id, event_id)}
    if user_id:
        return {"success": True, "likes": store.find_by_user(user_id)}
    return {"success": True, "likes": store.find_all()}


@app.post("/api/likes")
def add_like(
    body: LikeRequest,
    response: Response,
    store: LikesStore = Depends(get_likes_store),
):
    like, created = store.get_or_create(body.user_id, body.event_id)
    record_event("like", {"user_id": body.user_id, "event_id": body.event_id, "created": created})
    if not created:
        return {"success": True, "message": "Event already liked", "liked": True}
    response.status_code = 201
    return {"success": True, "like": like, "liked": True}


@app.delete("/api/likes")
def remove_like(
    user_id: str | None = Query(None, alias="userId"),
    event_id: str | None = Query(None, alias="eventId"),
    store: LikesStore = Depends(get_likes_store),
) -> dict:
    if not user_id or not event_id:
        raise InvalidInput("Missing required fields: userId, eventId")
    if not store.delete(user_id, event_id):
        raise NotFound("Like not found")
    record_event("unlike", {"user_id": user_id, "event_id": event_id})
    return {"success": True, "message": "Like removed", "liked": False}


# ── Reviews ──────────────────────────────────────────────────────────────


@app.get("/api/reviews")
def list_reviews(
    event_id: str | None = Query(None, alias="eventId"),
    store: ReviewsStore = Depends(get_reviews_store),
):
    reviews = store.find_by_event(event_id) if event_id else store.find_all()
    return {"success": True, "reviews": reviews}


@app.post("/api/reviews", status_code=201)
def add_review(
    body: ReviewRequest,
    store: ReviewsStore = Depends(get_reviews_store),
):
    review = store.create(body.event_id, body.rating, body.review, body.user_name)
    record_event("review", {"event_id": body.event_id, "rating": body.rating})
    return {"success": True, "review": review}


# ── Recommendations ──────────────────────────────────────────────────────


@app.get("/api/recommendations")
def recommendations(
    user_id: str | None = Query(None, alias="userId"),
    country: str | None = Query(None),
    limit: int = Query(DEFAULT_APP_CONFIG.default_limit, le=DEFAULT_APP_CONFIG.max_limit),
    likes_store: LikesStore = Depends(get_likes_store),
    reviews_store: ReviewsStore = Depends(get_reviews_store),
    catalog: EventCatalog = Depends(get_catalog),
    rng: JitterSource | None = Depends(get_jitter_source),
):
    start_time = time.time()

    result = get_recommendations(
        user_id,
        country,
        limit,
        likes_store=likes_store,
        reviews_store=reviews_store,
        catalog=catalog,
        rng=rng,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("recommendations", {
        "country": country,
        "limit": limit,
        "results_returned": len(result.recommendations),
        "total_likes": result.total_likes,
        "no_likes": result.message is not None,
        "response_time_ms": elapsed_ms,
    })

    if result.message is not None:
        return {"success": True, "recommendations": [], "message": result.message}

    return {
        "success": True,
        "recommendations": result.recommendations,
        "userPreferences": result.preferences,
        "totalLikes": result.total_likes,
    }


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/api/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
