from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_PACKAGED_EVENTS_DIR = Path(__file__).resolve().parent / "data" / "events"


@dataclass(frozen=True)
class AppConfig:
    events_dir: Path = Path(os.getenv("TRAVEL_EVENTS_DATA_DIR", str(_PACKAGED_EVENTS_DIR)))
    environment: str = os.getenv("TRAVEL_EVENTS_ENV", "development")
    default_limit: int = 10
    max_limit: int = 50
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class ScoringWeights:
    """
    Additive boosts applied by the recommendation scorer.

    Every boost is independent of the others; ``jitter`` is the upper bound
    of the random term added to each score (0 disables it).
    """

    flagship_category: str = "Food & Drink"
    flagship: float = 2.0
    target_country: float = 1.5
    liked_category: float = 0.8
    liked_country: float = 0.5
    liked_city: float = 0.3
    indoor: float = 0.2
    jitter: float = 0.1


DEFAULT_APP_CONFIG = AppConfig()
DEFAULT_WEIGHTS = ScoringWeights()
