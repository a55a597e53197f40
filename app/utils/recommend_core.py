# =============================================
# File: app/utils/recommend_core.py
# Purpose: Core recommendation types (inputs, scored prompts, result envelope)
# =============================================
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PromptCategory(str, Enum):
    CONNECTION = "connection"
    BEHAVIOR = "behavior"
    LEARNING = "learning"
    MEALTIME = "mealtime"
    BEDTIME = "bedtime"
    CREATIVE_EXPRESSION = "creative_expression"
    EMOTIONAL_CONNECTION = "emotional_connection"
    SPIRITUAL_GROWTH = "spiritual_growth"
    SERVICE = "service"
    GRATITUDE = "gratitude"


# Legacy age buckets -> inclusive (min_age, max_age)
AGE_CATEGORY_BANDS: Dict[str, tuple[int, int]] = {
    "infant": (0, 1),
    "toddler": (2, 4),
    "elementary": (5, 11),
    "teen": (12, 17),
    "young_adult": (18, 25),
    "all": (0, 99),
}


class ActivityPrompt(_CamelModel):
    """A catalog entry. Read-only to the engine."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str = ""
    activity: str = ""
    category: PromptCategory
    min_age: int = Field(0, ge=0)
    max_age: int = Field(99, ge=0)
    estimated_minutes: int = Field(5, ge=0)
    tags: List[str] = Field(default_factory=list)
    # Legacy buckets, kept so the filter can check each one; the band spans them all.
    age_categories: Tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _age_band_from_categories(cls, data: Any) -> Any:
        """
        Accept catalog rows that carry `age_categories` (e.g. ["toddler", "elementary"])
        instead of an explicit band. Unknown buckets are rejected.
        """
        if not isinstance(data, dict):
            return data
        key = next((k for k in ("age_categories", "ageCategories") if k in data), None)
        if key is None:
            return data
        data = dict(data)
        raw = data.pop(key) or []
        if isinstance(raw, str):
            raw = [raw]
        buckets = tuple(dict.fromkeys(str(b).strip().lower() for b in raw))
        unknown = [b for b in buckets if b not in AGE_CATEGORY_BANDS]
        if unknown:
            raise ValueError(f"unknown age categories {unknown} for prompt {data.get('id')}")
        data["age_categories"] = buckets
        explicit = any(k in data for k in ("min_age", "minAge", "max_age", "maxAge"))
        if buckets and not explicit:
            bands = [AGE_CATEGORY_BANDS[b] for b in buckets]
            data["min_age"] = min(lo for lo, _ in bands)
            data["max_age"] = max(hi for _, hi in bands)
        return data

    def fits_age(self, age: int) -> bool:
        """Inside the band and, when buckets are listed, inside one of them."""
        if not self.min_age <= age <= self.max_age:
            return False
        if not self.age_categories or "all" in self.age_categories:
            return True
        return any(lo <= age <= hi for lo, hi in (AGE_CATEGORY_BANDS[b] for b in self.age_categories))

    @model_validator(mode="after")
    def _check_band(self) -> "ActivityPrompt":
        if self.min_age > self.max_age:
            raise ValueError(f"min_age {self.min_age} > max_age {self.max_age} for prompt {self.id}")
        return self


class ChildContext(BaseModel):
    """Normalized, immutable view of the child used as scoring input."""
    model_config = ConfigDict(frozen=True)

    child_id: str
    name: Optional[str] = None
    age: int = Field(..., ge=0)
    interests: List[str] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)
    current_challenges: List[str] = Field(default_factory=list)
    faith_mode: bool = False


class CompletionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    child_id: str
    category: PromptCategory
    completed_on: date
    reflection: Optional[str] = None
    prompt_id: Optional[str] = None
    duration_seconds: Optional[int] = Field(None, ge=0)

    @property
    def has_reflection(self) -> bool:
        return bool(self.reflection and self.reflection.strip())


class Reason(BaseModel):
    model_config = ConfigDict(frozen=True)

    signal: str
    message: str
    weight: float = 0.0


class ScoredPrompt(_CamelModel):
    prompt: ActivityPrompt
    score: float
    reasons: List[Reason] = Field(default_factory=list)
    breakdown: Dict[str, float] = Field(default_factory=dict)


class FiltersApplied(_CamelModel):
    faith_mode: bool
    child_age: int


class RecommendationMetadata(_CamelModel):
    total_completions_considered: int
    candidate_count: int = 0
    catalog_size: int = 0
    filters_applied: FiltersApplied
    category_distribution: Dict[str, int] = Field(default_factory=dict)
    cache_key: str = ""


class RecommendationResult(_CamelModel):
    child_id: str
    recommendations: List[ScoredPrompt] = Field(default_factory=list)
    metadata: RecommendationMetadata


class RecommendationRequest(_CamelModel):
    """Per-call parameters. `as_of` pins "today" so results are reproducible."""
    child_id: str = Field(..., min_length=1, max_length=128)
    faith_mode: bool = False
    limit: Optional[StrictInt] = None
    as_of: Optional[date] = None


class RecommendationInputs(BaseModel):
    """Already-resolved collections handed to the engine by the caller."""

    child_profile: Optional[Dict[str, Any]] = None
    catalog: List[ActivityPrompt] = Field(default_factory=list)
    history: List[CompletionRecord] = Field(default_factory=list)
    favorites: FrozenSet[str] = Field(default_factory=frozenset)
