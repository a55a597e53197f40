# =============================================
# File: app/db/repo.py
# Purpose: DB repository: configure engine from DB_URL (default SQLite), create tables, and serve the read-only record store.
# =============================================
from __future__ import annotations

import os
from typing import Any, Dict, FrozenSet, List, Optional

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.db.models import ActivityPromptRow, ChildProfileRow, CompletionRow, FavoriteRow
from app.utils.recommend_core import ActivityPrompt, CompletionRecord

DB_URL = os.getenv("DB_URL", "sqlite:///./app.db")


def make_engine(url: str = DB_URL):
    if url.startswith("sqlite"):
        # worker threads share the connection; in-memory DBs need a single one
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False)


engine = make_engine()


def init_db(db_engine=None) -> None:
    SQLModel.metadata.create_all(db_engine or engine)


class SqlRecordStore:
    """RecordStore over the SQLModel tables. Read-only."""

    def __init__(self, db_engine=None) -> None:
        self._engine = db_engine or engine

    def fetch_catalog(self) -> List[ActivityPrompt]:
        with Session(self._engine) as s:
            rows = s.exec(select(ActivityPromptRow).order_by(ActivityPromptRow.id)).all()
        out: List[ActivityPrompt] = []
        for r in rows:
            try:
                out.append(ActivityPrompt.model_validate(r.model_dump()))
            except ValidationError as e:
                logger.warning(f"[store] skipping malformed prompt {r.id}: {e.errors()[0].get('msg')}")
        return out

    def fetch_recent_history(self, child_id: str, limit: int) -> List[CompletionRecord]:
        stmt = (
            select(CompletionRow)
            .where(CompletionRow.child_id == child_id)
            .order_by(CompletionRow.completed_on.desc(), CompletionRow.id.desc())
            .limit(limit)
        )
        with Session(self._engine) as s:
            rows = s.exec(stmt).all()
        out: List[CompletionRecord] = []
        for r in rows:
            try:
                out.append(CompletionRecord.model_validate(r.model_dump(exclude={"id"})))
            except ValidationError as e:
                logger.warning(f"[store] skipping malformed completion {r.id}: {e.errors()[0].get('msg')}")
        return out

    def fetch_favorites(self, child_id: str) -> FrozenSet[str]:
        with Session(self._engine) as s:
            rows = s.exec(select(FavoriteRow.prompt_id).where(FavoriteRow.child_id == child_id)).all()
        return frozenset(rows)

    def fetch_profile(self, child_id: str) -> Optional[Dict[str, Any]]:
        with Session(self._engine) as s:
            row = s.get(ChildProfileRow, child_id)
        return row.model_dump() if row is not None else None
