# =============================================
# File: app/utils/filters.py
# Purpose: Candidate filter (age band + faith mode)
# =============================================
from __future__ import annotations

from typing import Iterable, List

from app.utils.recommend_core import ActivityPrompt, PromptCategory

FAITH_TAGS = frozenset({"faith-based", "christian"})


def is_age_appropriate(prompt: ActivityPrompt, age: int) -> bool:
    return prompt.fits_age(age)


def is_faith_content(prompt: ActivityPrompt) -> bool:
    if prompt.category == PromptCategory.SPIRITUAL_GROWTH:
        return True
    return any((t or "").strip().lower() in FAITH_TAGS for t in prompt.tags)


def filter_candidates(catalog: Iterable[ActivityPrompt], age: int, faith_mode: bool) -> List[ActivityPrompt]:
    """
    Prompts valid for the child's age; spiritual content only when faith mode is on.
    An empty catalog yields an empty list.
    """
    out: List[ActivityPrompt] = []
    for p in catalog:
        if not is_age_appropriate(p, age):
            continue
        if not faith_mode and is_faith_content(p):
            continue
        out.append(p)
    return out
