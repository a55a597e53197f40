# =============================================
# File: app/services/records.py
# Purpose: Read-only record store interface + in-memory implementation
# =============================================
from __future__ import annotations

import asyncio
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Protocol

from app.utils.recommend_core import ActivityPrompt, CompletionRecord, RecommendationInputs


class RecordStore(Protocol):
    """The four reads the engine's caller needs. Nothing else."""

    def fetch_catalog(self) -> List[ActivityPrompt]: ...

    def fetch_recent_history(self, child_id: str, limit: int) -> List[CompletionRecord]: ...

    def fetch_favorites(self, child_id: str) -> FrozenSet[str]: ...

    def fetch_profile(self, child_id: str) -> Optional[Dict[str, Any]]: ...


class InMemoryRecordStore:
    """Fixture store for tests and demos."""

    def __init__(
        self,
        profiles: Optional[Mapping[str, Mapping[str, Any]]] = None,
        catalog: Optional[Iterable[ActivityPrompt]] = None,
        history: Optional[Iterable[CompletionRecord]] = None,
        favorites: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> None:
        self._profiles = {k: dict(v) for k, v in (profiles or {}).items()}
        self._catalog = list(catalog or [])
        self._history = list(history or [])
        self._favorites = {k: frozenset(v) for k, v in (favorites or {}).items()}

    def fetch_catalog(self) -> List[ActivityPrompt]:
        return list(self._catalog)

    def fetch_recent_history(self, child_id: str, limit: int) -> List[CompletionRecord]:
        rows = [r for r in self._history if r.child_id == child_id]
        rows.sort(key=lambda r: r.completed_on, reverse=True)
        return rows[:limit]

    def fetch_favorites(self, child_id: str) -> FrozenSet[str]:
        return self._favorites.get(child_id, frozenset())

    def fetch_profile(self, child_id: str) -> Optional[Dict[str, Any]]:
        p = self._profiles.get(child_id)
        return dict(p) if p is not None else None


async def load_inputs(store: RecordStore, child_id: str, history_limit: int) -> RecommendationInputs:
    """Fetch profile, history, catalog and favorites in parallel; no ordering between them."""
    profile, history, catalog, favorites = await asyncio.gather(
        asyncio.to_thread(store.fetch_profile, child_id),
        asyncio.to_thread(store.fetch_recent_history, child_id, history_limit),
        asyncio.to_thread(store.fetch_catalog),
        asyncio.to_thread(store.fetch_favorites, child_id),
    )
    return RecommendationInputs(
        child_profile=profile,
        catalog=catalog,
        history=history,
        favorites=frozenset(favorites),
    )
