from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "recommendations"]
    total = len(requests)

    # Average response time
    times = [r["response_time_ms"] for r in requests if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Requests answered with the "no likes yet" hint
    short_circuited = sum(1 for r in requests if r.get("no_likes"))

    # Top requested countries
    country_counter: Counter[str] = Counter()
    for r in requests:
        if r.get("country"):
            country_counter[r["country"]] += 1
    top_countries = [{"name": n, "count": c} for n, c in country_counter.most_common(10)]

    # User actions
    action_counts = Counter(e["type"] for e in events if e["type"] in ("like", "unlike", "review"))

    # Most liked events
    liked_counter: Counter[str] = Counter()
    for e in events:
        if e["type"] == "like" and e.get("created"):
            liked_counter[e["event_id"]] += 1
    top_liked = [{"event_id": n, "count": c} for n, c in liked_counter.most_common(10)]

    return {
        "total_recommendation_requests": total,
        "avg_response_time_ms": avg_time,
        "no_likes_rate": round(short_circuited / total * 100, 1) if total else 0.0,
        "top_countries": top_countries,
        "actions": {
            "likes": action_counts["like"],
            "unlikes": action_counts["unlike"],
            "reviews": action_counts["review"],
        },
        "top_liked_events": top_liked,
    }
