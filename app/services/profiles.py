# =============================================
# File: app/services/profiles.py
# Purpose: Build the normalized child context from a raw profile record
# =============================================

# app/services/profiles.py
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional

from app.utils.recommend_core import ChildContext


class InvalidRequestError(ValueError):
    """Caller bug or unusable input. Never coerced to a default."""


def _clean_list(values: Optional[Iterable[Any]]) -> List[str]:
    """Strip, drop blanks, de-duplicate case-insensitively keeping first spelling and order."""
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(",")
    out: List[str] = []
    seen = set()
    for v in values:
        s = str(v or "").strip()
        if not s or s.lower() in seen:
            continue
        seen.add(s.lower())
        out.append(s)
    return out


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidRequestError(f"Unparseable birth_date: {value!r}")


def age_on(birth: date, as_of: date) -> int:
    """Whole years; one less if the birthday hasn't come round yet this year."""
    years = as_of.year - birth.year
    if (as_of.month, as_of.day) < (birth.month, birth.day):
        years -= 1
    return years


def build_child_context(
    profile: Optional[Mapping[str, Any]],
    faith_mode: bool,
    as_of: date,
    child_id: Optional[str] = None,
) -> ChildContext:
    """
    Assemble the immutable scoring view of a child.

    Age comes from `age` when present, otherwise from `birth_date` on `as_of`.
    Raises InvalidRequestError when the profile is missing or no valid age can be derived.
    """
    if not profile:
        raise InvalidRequestError(f"Child profile not found: {child_id or '?'}")

    cid = str(profile.get("id") or profile.get("child_id") or child_id or "").strip()
    if not cid:
        raise InvalidRequestError("Child profile has no identifier")

    age = profile.get("age")
    if age is None:
        birth = _parse_date(profile.get("birth_date"))
        if birth is None:
            raise InvalidRequestError(f"Child {cid} has neither age nor birth_date")
        age = age_on(birth, as_of)
    if isinstance(age, bool) or not isinstance(age, int):
        raise InvalidRequestError(f"Child {cid} has a non-integer age: {age!r}")
    if age < 0:
        raise InvalidRequestError(f"Child {cid} has a negative age: {age}")

    return ChildContext(
        child_id=cid,
        name=(str(profile["name"]).strip() or None) if profile.get("name") else None,
        age=age,
        interests=_clean_list(profile.get("interests")),
        personality_traits=_clean_list(profile.get("personality_traits")),
        current_challenges=_clean_list(profile.get("current_challenges")),
        faith_mode=bool(faith_mode),
    )
