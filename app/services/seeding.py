# =============================================
# File: app/services/seeding.py
# Purpose: Load a JSON fixture (catalog, children, completions, favorites) into the SQL store.
# =============================================
from __future__ import annotations
import json
import os
from typing import Any, Dict, List, Tuple

from loguru import logger
from sqlmodel import Session, SQLModel, delete

from app.db.models import ActivityPromptRow, ChildProfileRow, CompletionRow, FavoriteRow
from app.utils.recommend_core import ActivityPrompt, CompletionRecord

DEFAULT_SEED_FILE = os.getenv(
    "SEED_FILE",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "sample_catalog.json"),
)


def read_seed_file(path: str) -> Dict[str, List[Dict[str, Any]]]:
    """Accept either a bare list of prompts or an object with prompts/children/completions/favorites."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, list):
        raw = {"prompts": raw}
    return {k: list(raw.get(k) or []) for k in ("prompts", "children", "completions", "favorites")}


def seed_database(data: Dict[str, List[Dict[str, Any]]], db_engine, clear: bool = False) -> Tuple[int, int]:
    """
    Upsert the fixture. Prompts and completions are validated through the
    engine's models first, so bad rows are rejected here rather than at
    recommendation time. Returns (prompts_loaded, prompts_skipped).
    """
    SQLModel.metadata.create_all(db_engine)
    loaded, skipped = 0, 0
    with Session(db_engine) as s:
        if clear:
            for table in (FavoriteRow, CompletionRow, ActivityPromptRow, ChildProfileRow):
                s.execute(delete(table))

        for raw in data.get("prompts", []):
            try:
                p = ActivityPrompt.model_validate(raw)
            except ValueError as e:
                logger.warning(f"[seed] skipping prompt {raw.get('id')!r}: {e}")
                skipped += 1
                continue
            s.merge(ActivityPromptRow(**p.model_dump(mode="json")))
            loaded += 1

        for raw in data.get("children", []):
            s.merge(ChildProfileRow.model_validate(raw))

        for raw in data.get("completions", []):
            c = CompletionRecord.model_validate(raw)
            row = c.model_dump()
            row["category"] = c.category.value
            s.add(CompletionRow(**row))

        for raw in data.get("favorites", []):
            s.add(FavoriteRow(child_id=raw["child_id"], prompt_id=raw["prompt_id"]))

        s.commit()
    logger.info(f"[seed] prompts loaded={loaded} skipped={skipped}")
    return loaded, skipped
