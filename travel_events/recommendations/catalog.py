from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import ValidationError

from ..config import DEFAULT_APP_CONFIG
from ..errors import UpstreamUnavailable
from .models import Event, id_to_str

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: list[str] = [
    "id",
    "title",
    "description",
    "category",
    "city",
    "country",
    "indoor_outdoor",
    "rating",
    "ratingCount",
    "start_time",
    "end_time",
    "lat",
    "lon",
    "source",
]

_TEXT_COLUMNS = ["title", "description", "category", "city", "country"]


def _read_records(events_dir: Path) -> list[dict[str, Any]]:
    """Flatten every ``events-*.json`` file into one record per event."""
    if not events_dir.is_dir():
        raise UpstreamUnavailable(f"Event catalog directory not found: {events_dir}")

    records: list[dict[str, Any]] = []
    for path in sorted(events_dir.glob("events-*.json")):
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise UpstreamUnavailable(f"Could not read event file {path.name}") from exc

        country = payload.get("country", "")
        for city, city_events in (payload.get("cities") or {}).items():
            for raw in city_events or []:
                # City and country of the file fill in what the record omits
                record = {"city": city, "country": country}
                record.update({k: v for k, v in raw.items() if v is not None})
                if "id" in record:
                    record["id"] = id_to_str(record["id"])
                records.append(record)
    return records


def _normalize(records: list[dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(records)
    for col in CANONICAL_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df = df[CANONICAL_COLUMNS].copy()

    df = df.dropna(subset=["id"])
    df["id"] = df["id"].astype(str).str.strip()
    df = df[df["id"] != ""]
    df = df.drop_duplicates(subset="id", keep="first").copy()

    df[_TEXT_COLUMNS] = df[_TEXT_COLUMNS].fillna("").astype(str)

    # Clamp to [0, 5]; anything non-numeric becomes missing
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce").clip(0.0, 5.0)
    df["ratingCount"] = (
        pd.to_numeric(df["ratingCount"], errors="coerce").fillna(0).clip(lower=0).astype(int)
    )
    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lon"] = pd.to_numeric(df["lon"], errors="coerce")
    df["start_time"] = pd.to_datetime(df["start_time"], errors="coerce", utc=True)
    df["end_time"] = pd.to_datetime(df["end_time"], errors="coerce", utc=True)

    flag = df["indoor_outdoor"].astype("string").str.strip().str.lower()
    df["indoor_outdoor"] = flag.where(flag.isin(["indoor", "outdoor"]))

    return df.reset_index(drop=True)


def _to_events(df: pd.DataFrame) -> dict[str, Event]:
    events: dict[str, Event] = {}
    plain = df.astype(object).where(df.notna(), None)
    for record in plain.to_dict("records"):
        try:
            event = Event.model_validate(record)
        except ValidationError:
            logger.warning("Skipping malformed catalog record %r", record.get("id"), exc_info=True)
            continue
        events[event.id] = event
    return events


class EventCatalog:
    """Read-only event pool backed by per-country JSON files.

    Files are loaded on first access and kept in memory; ``reload()`` drops
    the snapshot so the next read picks up changes on disk.
    """

    def __init__(self, events_dir: Path | str = DEFAULT_APP_CONFIG.events_dir) -> None:
        self.events_dir = Path(events_dir)
        self._df: pd.DataFrame | None = None
        self._events: dict[str, Event] = {}
        self._lock = threading.Lock()

    def _snapshot(self) -> tuple[pd.DataFrame, dict[str, Event]]:
        with self._lock:
            if self._df is None:
                records = _read_records(self.events_dir)
                if records:
                    df = _normalize(records)
                    events = _to_events(df)
                    df = df[df["id"].isin(list(events))].reset_index(drop=True)
                else:
                    df = pd.DataFrame(columns=CANONICAL_COLUMNS)
                    events = {}
                df["country_lower"] = df["country"].astype(str).str.strip().str.lower()
                self._df, self._events = df, events
                logger.info("Loaded %d catalog events from %s", len(events), self.events_dir)
            return self._df, self._events

    def reload(self) -> None:
        with self._lock:
            self._df = None
            self._events = {}

    def find_all(self, country: str | None = None) -> list[Event]:
        df, events = self._snapshot()
        if country and country.strip():
            df = df[df["country_lower"] == country.strip().lower()]
        return [events[event_id] for event_id in df["id"]]

    def find_by_id(self, event_id: str) -> Event | None:
        _, events = self._snapshot()
        return events.get(str(event_id))

    def countries(self) -> list[str]:
        df, _ = self._snapshot()
        return sorted(c for c in df["country"].unique().tolist() if c)

    def categories(self) -> list[str]:
        df, _ = self._snapshot()
        return sorted(c for c in df["category"].unique().tolist() if c)

    def __len__(self) -> int:
        return len(self._snapshot()[0])


_catalog: EventCatalog | None = None


def get_catalog() -> EventCatalog:
    """Return the process-wide catalog, creating it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = EventCatalog(DEFAULT_APP_CONFIG.events_dir)
    return _catalog
