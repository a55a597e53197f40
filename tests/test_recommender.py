# =============================================
# File: tests/test_recommender.py
# Purpose: End-to-end engine properties over in-memory inputs
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from app.services.profiles import InvalidRequestError
from app.services.recommender import generate_recommendations, resolve_limit
from app.utils.recommend_core import (
    ActivityPrompt,
    CompletionRecord,
    PromptCategory,
    RecommendationInputs,
    RecommendationRequest,
)
from app.utils.tuning import RecommenderConfig

TODAY = date(2026, 10, 19)
PROFILE = {"id": "c1", "name": "Maya", "age": 5, "interests": ["drawing"], "personality_traits": [],
           "current_challenges": []}


def _p(pid, category, lo=3, hi=8, tags=()):
    return ActivityPrompt(id=pid, title=pid, category=category, min_age=lo, max_age=hi, tags=list(tags))


def _catalog():
    cats = [c for c in PromptCategory]
    out = [_p(f"p{i:02d}", cats[i % len(cats)], lo=i % 4, hi=6 + i % 5, tags=["drawing"] if i % 3 == 0 else ["talk"])
           for i in range(30)]
    out.append(_p("too-old", PromptCategory.LEARNING, lo=10, hi=14))
    return out


def _history():
    return [
        CompletionRecord(child_id="c1", category="bedtime", completed_on=TODAY - timedelta(days=1), prompt_id="p04"),
        CompletionRecord(child_id="c1", category="bedtime", completed_on=TODAY - timedelta(days=4), prompt_id="p04",
                         reflection="Calm night"),
        CompletionRecord(child_id="c1", category="mealtime", completed_on=TODAY - timedelta(days=6), prompt_id="p03"),
    ]


def _run(limit=5, faith=False, profile=PROFILE, catalog=None, history=None, favorites=(), config=None):
    req = RecommendationRequest(child_id="c1", faith_mode=faith, limit=limit, as_of=TODAY)
    inputs = RecommendationInputs(
        child_profile=profile,
        catalog=_catalog() if catalog is None else catalog,
        history=_history() if history is None else history,
        favorites=frozenset(favorites),
    )
    return generate_recommendations(req, inputs, config=config)


def test_drawing_scenario():
    catalog = [
        _p("draw", PromptCategory.CREATIVE_EXPRESSION, 3, 8, tags=["drawing"]),
        _p("pray", PromptCategory.SPIRITUAL_GROWTH, 3, 8),
    ]
    result = _run(catalog=catalog, history=[], profile={"id": "c1", "age": 5, "interests": ["drawing"]})
    assert [sp.prompt.id for sp in result.recommendations] == ["draw"]
    assert any("drawing" in r.message for r in result.recommendations[0].reasons)
    assert result.metadata.total_completions_considered == 0


def test_deterministic():
    a = _run(favorites={"p05"})
    b = _run(favorites={"p05"})
    assert a.model_dump() == b.model_dump()


@pytest.mark.parametrize("limit", [1, 3, 5, 20])
def test_bounded_and_age_valid(limit):
    result = _run(limit=limit)
    assert len(result.recommendations) <= limit
    for sp in result.recommendations:
        assert sp.prompt.min_age <= 5 <= sp.prompt.max_age


@pytest.mark.parametrize("limit", [0, -1, 21])
def test_rejects_bad_limit(limit):
    with pytest.raises(InvalidRequestError):
        _run(limit=limit)


@pytest.mark.parametrize("limit", [True, 2.0, "3"])
def test_non_integer_limit_is_not_coerced(limit):
    with pytest.raises(ValidationError):
        RecommendationRequest(child_id="c1", limit=limit)


def test_resolve_limit_rejects_bool_from_direct_callers():
    with pytest.raises(InvalidRequestError):
        resolve_limit(True, RecommenderConfig())
    assert resolve_limit(None, RecommenderConfig()) == 5


def test_default_limit_applies_when_missing():
    assert len(_run(limit=None).recommendations) == RecommenderConfig().default_limit


def test_faith_mode_filter():
    off = _run(limit=20)
    assert all(sp.prompt.category != PromptCategory.SPIRITUAL_GROWTH for sp in off.recommendations)
    assert off.metadata.filters_applied.faith_mode is False
    on = _run(limit=20, faith=True)
    assert on.metadata.candidate_count > off.metadata.candidate_count


def test_cold_start_still_returns_prompts():
    result = _run(history=[], favorites=())
    assert len(result.recommendations) == 5
    for sp in result.recommendations:
        assert {r.signal for r in sp.reasons} <= {"interest_overlap", "challenge_match"}


def test_missing_profile_is_rejected():
    with pytest.raises(InvalidRequestError):
        _run(profile=None)


def test_no_candidates_is_an_empty_result():
    result = _run(catalog=[_p("too-old", PromptCategory.LEARNING, lo=10, hi=14)])
    assert result.recommendations == []
    assert result.metadata.candidate_count == 0
    assert result.metadata.catalog_size == 1
    assert result.metadata.total_completions_considered == 3


def test_empty_catalog():
    result = _run(catalog=[], history=[])
    assert result.recommendations == []
    assert result.metadata.total_completions_considered == 0


def test_history_window_is_trimmed():
    history = _history() + [
        CompletionRecord(child_id="c1", category="service", completed_on=TODAY - timedelta(days=90)),
        CompletionRecord(child_id="c1", category="service", completed_on=TODAY + timedelta(days=1)),
    ]
    result = _run(history=history)
    assert result.metadata.total_completions_considered == 3
    assert result.metadata.category_distribution == {"bedtime": 2, "mealtime": 1}

    capped = _run(history=history, config=RecommenderConfig(history_max_records=1))
    assert capped.metadata.total_completions_considered == 1


def test_favorite_surfaces_with_reason():
    result = _run(limit=20, favorites={"p05"})
    fav = [sp for sp in result.recommendations if sp.prompt.id == "p05"]
    assert fav and "favorite" in [r.signal for r in fav[0].reasons]


def test_metadata_serializes_camel_case():
    body = _run().model_dump(by_alias=True)
    assert body["metadata"]["totalCompletionsConsidered"] == 3
    assert body["metadata"]["filtersApplied"] == {"faithMode": False, "childAge": 5}
    assert body["metadata"]["cacheKey"] == "recommendations:c1:false:v1"
    assert "minAge" in body["recommendations"][0]["prompt"]
