# =============================================
# File: app/utils/signals.py
# Purpose: Independent scoring signals (subscore in [0, 1] + optional reason)
# =============================================
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from app.utils.category_stats import HistorySnapshot
from app.utils.recommend_core import ActivityPrompt, ChildContext
from app.utils.tuning import RecommenderConfig


@dataclass(frozen=True)
class SignalOutput:
    subscore: float
    reason: Optional[str] = None


NEUTRAL = SignalOutput(0.0)

Extractor = Callable[[ActivityPrompt, ChildContext, HistorySnapshot, RecommenderConfig], SignalOutput]


@dataclass(frozen=True)
class Signal:
    name: str
    fn: Extractor


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def _norm(s: str) -> str:
    s = (s or "").lower().strip()
    s = re.sub(r"[^\w\s]", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def _tag_hit(keyword: str, tags: List[str]) -> bool:
    """Either side contains the other, case-insensitive ("art" ~ "art-projects")."""
    kw = _norm(keyword)
    if not kw:
        return False
    for tag in tags:
        t = _norm(tag)
        if t and (kw in t or t in kw):
            return True
    return False


def _text_hit(keyword: str, text: str) -> bool:
    kw = _norm(keyword)
    if not kw:
        return False
    return re.search(rf"\b{re.escape(kw)}\b", _norm(text)) is not None


def _matches(keyword: str, prompt: ActivityPrompt) -> bool:
    return _tag_hit(keyword, prompt.tags) or _text_hit(keyword, prompt.description)


# ---------------------------------------------------------------------
# Profile-driven signals (work on cold start)
# ---------------------------------------------------------------------

def age_fit(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
            config: RecommenderConfig) -> SignalOutput:
    """1.0 at the band midpoint, linear down to 0.0 at the edges. Tiebreaker only, never a reason."""
    half = (prompt.max_age - prompt.min_age) / 2.0
    if half <= 0:
        return SignalOutput(1.0)
    mid = (prompt.min_age + prompt.max_age) / 2.0
    return SignalOutput(_clamp01(1.0 - abs(child.age - mid) / half))


def interest_overlap(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
                     config: RecommenderConfig) -> SignalOutput:
    matched_interests = [i for i in child.interests if _matches(i, prompt)]
    matched_traits = [t for t in child.personality_traits if _matches(t, prompt)]
    hits = len(matched_interests) + len(matched_traits)
    if hits == 0:
        return NEUTRAL

    score = _clamp01(hits / config.interest_match_cap)
    if matched_interests:
        who = f"{child.name}'s" if child.name else "their"
        return SignalOutput(score, f"Connects with {who} interest in {matched_interests[0]}")
    return SignalOutput(score, f"A good fit for a {matched_traits[0]} personality")


def challenge_match(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
                    config: RecommenderConfig) -> SignalOutput:
    matched = [c for c in child.current_challenges if _tag_hit(c, prompt.tags)]
    if not matched:
        return NEUTRAL
    score = 1.0 if len(matched) > 1 else 0.75
    return SignalOutput(score, f"Helpful for: {matched[0]}")


# ---------------------------------------------------------------------
# History-driven signals (neutral when history is empty)
# ---------------------------------------------------------------------

def category_balance(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
                     config: RecommenderConfig) -> SignalOutput:
    if history.is_empty:
        return SignalOutput(0.5)
    count = history.count(prompt.category)
    score = _clamp01(1.0 - count / history.total)
    days = history.days_since(prompt.category)
    if config.neglect_days is not None and days is not None and days >= config.neglect_days:
        label = prompt.category.value.replace("_", " ")
        return SignalOutput(_clamp01(score * config.neglect_boost),
                            f"Time to revisit {label} - it's been {days} days")
    # bottom third of the recent frequency range
    if count * 3 <= history.max_count:
        return SignalOutput(score, "Helps balance activity types")
    return SignalOutput(score)


def favorite(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
             config: RecommenderConfig) -> SignalOutput:
    if prompt.id in history.favorites:
        return SignalOutput(1.0, "Previously marked as a favorite")
    return NEUTRAL


def novelty(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
            config: RecommenderConfig) -> SignalOutput:
    if history.is_empty:
        return NEUTRAL
    if prompt.id not in history.prompt_ids:
        return SignalOutput(1.0, "Something new to try")
    return NEUTRAL


def reflection(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
               config: RecommenderConfig) -> SignalOutput:
    count = history.count(prompt.category)
    if count == 0:
        return NEUTRAL
    share = history.reflection_counts.get(prompt.category, 0) / count
    if share >= config.reflection_share_min and share > 0:
        return SignalOutput(_clamp01(share), "Similar activities sparked meaningful reflections")
    return SignalOutput(_clamp01(share))


def duration_engagement(prompt: ActivityPrompt, child: ChildContext, history: HistorySnapshot,
                        config: RecommenderConfig) -> SignalOutput:
    """
    Time spent on earlier runs of this prompt against its estimate. Lingering
    scores high, rushing low; no timed runs is a neutral 0.5.
    """
    durations = [r.duration_seconds for r in history.records
                 if r.prompt_id == prompt.id and r.duration_seconds is not None]
    if not durations or prompt.estimated_minutes <= 0:
        return SignalOutput(0.5)
    ratio = sum(durations) / len(durations) / (prompt.estimated_minutes * 60)
    if ratio >= 1.5:
        return SignalOutput(1.0, "You spent quality time on this activity before")
    if ratio >= 1.0:
        return SignalOutput(0.75, "You spent quality time on this activity before")
    if ratio >= 0.75:
        return SignalOutput(0.5)
    return SignalOutput(0.25)


def recency_multiplier(prompt: ActivityPrompt, history: HistorySnapshot, config: RecommenderConfig) -> float:
    """
    Penalty applied to the aggregate score (not a subscore) when the prompt's
    category was completed inside the cool-down window.
    """
    days = history.days_since(prompt.category)
    if days is not None and 0 <= days < config.cooldown_days:
        return config.recency_penalty
    return 1.0


# Order is stable; new signals go at the end.
DEFAULT_SIGNALS: Tuple[Signal, ...] = (
    Signal("age_fit", age_fit),
    Signal("interest_overlap", interest_overlap),
    Signal("category_balance", category_balance),
    Signal("favorite", favorite),
    Signal("novelty", novelty),
    Signal("challenge_match", challenge_match),
    Signal("reflection", reflection),
    Signal("duration_engagement", duration_engagement),
)
