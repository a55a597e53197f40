# =============================================
# File: tests/test_profiles.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from datetime import date

import pytest

from app.services.profiles import InvalidRequestError, age_on, build_child_context


def test_age_from_birth_date_respects_birthday():
    assert age_on(date(2020, 3, 14), date(2026, 3, 13)) == 5
    assert age_on(date(2020, 3, 14), date(2026, 3, 14)) == 6


def test_builds_normalized_context():
    ctx = build_child_context(
        {"id": "c9", "name": " Leo ", "birth_date": "2019-06-01",
         "interests": ["Drawing", "drawing ", "", "art"], "personality_traits": "shy, curious",
         "current_challenges": None},
        faith_mode=True,
        as_of=date(2026, 10, 19),
    )
    assert ctx.child_id == "c9"
    assert ctx.name == "Leo"
    assert ctx.age == 7
    assert ctx.interests == ["Drawing", "art"]
    assert ctx.personality_traits == ["shy", "curious"]
    assert ctx.current_challenges == []
    assert ctx.faith_mode is True


def test_explicit_age_wins_over_birth_date():
    ctx = build_child_context({"id": "c1", "age": 4, "birth_date": "2010-01-01"}, False, date(2026, 1, 1))
    assert ctx.age == 4


@pytest.mark.parametrize("profile", [
    None,
    {},
    {"id": "c1"},
    {"id": "c1", "age": -2},
    {"id": "c1", "age": "five"},
    {"id": "c1", "age": "5"},
    {"id": "c1", "age": True},
    {"id": "c1", "age": 5.7},
    {"id": "c1", "birth_date": "not-a-date"},
])
def test_unusable_profiles_are_rejected(profile):
    with pytest.raises(InvalidRequestError):
        build_child_context(profile, False, date(2026, 1, 1), child_id="c1")
