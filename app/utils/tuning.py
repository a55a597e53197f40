# =============================================
# File: app/utils/tuning.py
# Purpose: Tunable weights and windows for the recommendation engine
# =============================================
from __future__ import annotations

import os
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Relative weights per signal. Interest overlap and category balance lead:
# personalized but not repetitive.
DEFAULT_WEIGHTS: Dict[str, float] = {
    "interest_overlap": 0.30,
    "category_balance": 0.30,
    "favorite": 0.15,
    "age_fit": 0.10,
    "novelty": 0.10,
    "challenge_match": 0.10,
    "reflection": 0.05,
    "duration_engagement": 0.05,
}


class RecommenderConfig(BaseModel):
    """
    Everything the engine treats as a constant. Tests build their own instances;
    the API builds one per request via load_config() so env overrides apply.
    """
    model_config = ConfigDict(frozen=True)

    weights: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    interest_match_cap: int = Field(3, ge=1)
    cooldown_days: int = Field(2, ge=0)
    recency_penalty: float = Field(0.5, gt=0.0, le=1.0)
    default_limit: int = Field(5, ge=1)
    max_limit: int = Field(20, ge=1)
    history_window_days: int = Field(30, ge=1)
    history_max_records: int = Field(100, ge=1)
    max_per_category: Optional[int] = Field(None, ge=1)
    max_per_tag: Optional[int] = Field(None, ge=1)
    # categories untouched this many days get a balance boost; None turns it off
    neglect_days: Optional[int] = Field(14, ge=1)
    neglect_boost: float = Field(1.3, ge=1.0)
    reflection_share_min: float = Field(0.5, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check(self) -> "RecommenderConfig":
        if any(w < 0 for w in self.weights.values()):
            raise ValueError("signal weights must be non-negative")
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self

    def weight(self, signal: str) -> float:
        return float(self.weights.get(signal, 0.0))


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else None


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else None


def load_config() -> RecommenderConfig:
    """Read overrides at call time so tests/env overrides take effect.

    REC_WEIGHT_<SIGNAL> overrides a single weight (e.g. REC_WEIGHT_NOVELTY=0.2).
    """
    weights = dict(DEFAULT_WEIGHTS)
    for signal in DEFAULT_WEIGHTS:
        w = _env_float(f"REC_WEIGHT_{signal.upper()}")
        if w is not None:
            weights[signal] = w

    overrides = {
        "interest_match_cap": _env_int("REC_INTEREST_CAP"),
        "cooldown_days": _env_int("REC_COOLDOWN_DAYS"),
        "recency_penalty": _env_float("REC_RECENCY_PENALTY"),
        "default_limit": _env_int("REC_DEFAULT_LIMIT"),
        "max_limit": _env_int("REC_MAX_LIMIT"),
        "history_window_days": _env_int("REC_HISTORY_DAYS"),
        "history_max_records": _env_int("REC_HISTORY_MAX"),
        "max_per_category": _env_int("REC_MAX_PER_CATEGORY"),
        "max_per_tag": _env_int("REC_MAX_PER_TAG"),
        "neglect_days": _env_int("REC_NEGLECT_DAYS"),
        "neglect_boost": _env_float("REC_NEGLECT_BOOST"),
    }
    return RecommenderConfig(weights=weights, **{k: v for k, v in overrides.items() if v is not None})
