# =============================================
# File: app/utils/category_stats.py
# Purpose: One-pass analysis of the recent completion window
# =============================================
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from app.utils.recommend_core import CompletionRecord, PromptCategory


@dataclass(frozen=True)
class HistorySnapshot:
    """
    Aggregates every signal needs from history. Built once per request and
    shared read-only across candidates.
    """
    as_of: date
    records: Tuple[CompletionRecord, ...] = ()
    counts: Dict[PromptCategory, int] = field(default_factory=dict)
    last_completed: Dict[PromptCategory, date] = field(default_factory=dict)
    reflection_counts: Dict[PromptCategory, int] = field(default_factory=dict)
    prompt_ids: FrozenSet[str] = frozenset()
    favorites: FrozenSet[str] = frozenset()

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def max_count(self) -> int:
        return max(self.counts.values(), default=0)

    def count(self, category: PromptCategory) -> int:
        return self.counts.get(category, 0)

    def share(self, category: PromptCategory) -> float:
        return self.count(category) / self.total if self.total else 0.0

    def days_since(self, category: PromptCategory) -> Optional[int]:
        last = self.last_completed.get(category)
        return None if last is None else (self.as_of - last).days

    def distribution(self) -> Dict[str, int]:
        """Category -> count, most frequent first (ties by name)."""
        items = sorted(self.counts.items(), key=lambda kv: (-kv[1], kv[0].value))
        return {cat.value: n for cat, n in items}


def trim_window(
    history: Iterable[CompletionRecord],
    as_of: date,
    window_days: int,
    max_records: int,
) -> List[CompletionRecord]:
    """Keep completions in (as_of - window_days, as_of], newest first, capped at max_records."""
    cutoff = as_of - timedelta(days=window_days)
    recent = [r for r in history if cutoff < r.completed_on <= as_of]
    recent.sort(key=lambda r: (r.completed_on, r.prompt_id or "", r.category.value), reverse=True)
    return recent[:max_records]


def build_history_snapshot(
    records: Iterable[CompletionRecord],
    as_of: date,
    favorites: Iterable[str] = (),
) -> HistorySnapshot:
    records = tuple(records)
    counts: Counter = Counter()
    reflections: Counter = Counter()
    last: Dict[PromptCategory, date] = {}
    for r in records:
        counts[r.category] += 1
        if r.has_reflection:
            reflections[r.category] += 1
        if r.category not in last or r.completed_on > last[r.category]:
            last[r.category] = r.completed_on
    return HistorySnapshot(
        as_of=as_of,
        records=records,
        counts=dict(counts),
        last_completed=last,
        reflection_counts=dict(reflections),
        prompt_ids=frozenset(r.prompt_id for r in records if r.prompt_id),
        favorites=frozenset(favorites),
    )
