# =============================================
# File: app/db/models.py
# Purpose: SQLModel tables for the record store: child profiles, prompt catalog, completions, favorites.
# =============================================

from datetime import date
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class ChildProfileRow(SQLModel, table=True):
    __tablename__ = "child_profiles"

    id: str = Field(primary_key=True)
    name: Optional[str] = None
    age: Optional[int] = None
    birth_date: Optional[date] = None
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    personality_traits: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    current_challenges: List[str] = Field(default_factory=list, sa_column=Column(JSON))


class ActivityPromptRow(SQLModel, table=True):
    __tablename__ = "daily_prompts"

    id: str = Field(primary_key=True)
    title: str
    description: str = ""
    activity: str = ""
    category: str = Field(index=True)
    min_age: int = 0
    max_age: int = 99
    estimated_minutes: int = 5
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    age_categories: List[str] = Field(default_factory=list, sa_column=Column(JSON))


class CompletionRow(SQLModel, table=True):
    __tablename__ = "prompt_completions"

    id: Optional[int] = Field(default=None, primary_key=True)
    child_id: str = Field(index=True)
    prompt_id: Optional[str] = None
    category: str
    completed_on: date = Field(index=True)
    reflection: Optional[str] = None
    duration_seconds: Optional[int] = None


class FavoriteRow(SQLModel, table=True):
    __tablename__ = "prompt_favorites"

    id: Optional[int] = Field(default=None, primary_key=True)
    child_id: str = Field(index=True)
    prompt_id: str
