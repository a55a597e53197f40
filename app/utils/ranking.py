# =============================================
# File: app/utils/ranking.py
# Purpose: Sort, bound and explain the scored candidates
# =============================================
from __future__ import annotations

from typing import Dict, List, Optional

from app.utils.recommend_core import Reason, ScoredPrompt
from app.utils.scoring import sort_key


def order_reasons(reasons: List[Reason]) -> List[Reason]:
    """Primary reason first: highest-weighted firing signal, ties by signal name."""
    return sorted(reasons, key=lambda r: (-r.weight, r.signal))


def primary_tag(sp: ScoredPrompt) -> Optional[str]:
    tags = [t.strip().lower() for t in sp.prompt.tags if t and t.strip()]
    return tags[0] if tags else None


def _diverse_pick(
    ordered: List[ScoredPrompt],
    limit: int,
    max_per_category: Optional[int] = None,
    max_per_tag: Optional[int] = None,
) -> List[ScoredPrompt]:
    """
    Cap picks per category and per primary tag (first tag; untagged prompts
    are never capped), then backfill the free slots by score so diversity
    never shrinks the result.
    """
    picked: List[ScoredPrompt] = []
    by_cat: Dict[str, int] = {}
    by_tag: Dict[str, int] = {}
    for sp in ordered:
        if len(picked) >= limit:
            break
        cat = sp.prompt.category.value
        tag = primary_tag(sp)
        if max_per_category and by_cat.get(cat, 0) >= max_per_category:
            continue
        if max_per_tag and tag is not None and by_tag.get(tag, 0) >= max_per_tag:
            continue
        picked.append(sp)
        by_cat[cat] = by_cat.get(cat, 0) + 1
        if tag is not None:
            by_tag[tag] = by_tag.get(tag, 0) + 1

    if len(picked) < limit:
        chosen = {sp.prompt.id for sp in picked}
        for sp in ordered:
            if len(picked) >= limit:
                break
            if sp.prompt.id not in chosen:
                picked.append(sp)
                chosen.add(sp.prompt.id)
    return sorted(picked, key=sort_key)


def rank(
    scored: List[ScoredPrompt],
    limit: int,
    max_per_category: Optional[int] = None,
    max_per_tag: Optional[int] = None,
) -> List[ScoredPrompt]:
    """
    Top `limit` by (score desc, id asc). Never pads: fewer candidates means a
    shorter list, none means an empty one.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    ordered = sorted(scored, key=sort_key)
    if max_per_category or max_per_tag:
        top = _diverse_pick(ordered, limit, max_per_category, max_per_tag)
    else:
        top = ordered[:limit]
    return [sp.model_copy(update={"reasons": order_reasons(sp.reasons)}) for sp in top]
