# =============================================
# File: tests/test_scoring.py
# Purpose: Weighted aggregation, recency penalty, failure isolation
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from datetime import date, timedelta

import pytest

from app.utils import metrics
from app.utils.category_stats import build_history_snapshot
from app.utils.recommend_core import ActivityPrompt, ChildContext, CompletionRecord
from app.utils.scoring import score_candidates, score_prompt
from app.utils.signals import DEFAULT_SIGNALS, Signal, SignalOutput
from app.utils.tuning import DEFAULT_WEIGHTS, RecommenderConfig

TODAY = date(2026, 10, 19)
CFG = RecommenderConfig()
CHILD = ChildContext(child_id="c1", age=5, interests=["drawing"])


def _p(pid="p1", category="creative_expression", tags=("drawing",)):
    return ActivityPrompt(id=pid, title=pid, category=category, min_age=3, max_age=8, tags=list(tags))


def _hist(*records, favorites=()):
    return build_history_snapshot(list(records), TODAY, favorites)


def _done(category, days_ago, prompt_id="other"):
    return CompletionRecord(child_id="c1", category=category, completed_on=TODAY - timedelta(days=days_ago),
                            prompt_id=prompt_id)


def test_cold_start_score_is_weighted_mean():
    sp = score_prompt(_p(), CHILD, _hist(), CFG)
    # age_fit 0.8*0.10 + interest (1/3)*0.30 + balance 0.5*0.30 + duration 0.5*0.05, over total weight 1.15
    assert sp.score == pytest.approx(30.869565, abs=1e-4)
    assert sp.breakdown["age_fit"] == pytest.approx(0.8)
    assert sp.breakdown["recency_multiplier"] == 1.0
    assert [r.signal for r in sp.reasons] == ["interest_overlap"]


def test_score_is_bounded():
    sp = score_prompt(_p(), CHILD, _hist(favorites={"p1"}), CFG)
    assert 0.0 <= sp.score <= 100.0


def test_recent_category_is_penalized_against_older_completion():
    recent = score_prompt(_p(category="bedtime"), CHILD, _hist(_done("bedtime", 1)), CFG)
    older = score_prompt(_p(category="bedtime"), CHILD, _hist(_done("bedtime", 10)), CFG)
    assert recent.score < older.score
    assert recent.score == pytest.approx(older.score * CFG.recency_penalty, abs=1e-4)


def test_recent_category_scores_below_unused_category():
    hist = _hist(_done("bedtime", 1))
    repeat = score_prompt(_p("a", category="bedtime"), CHILD, hist, CFG)
    fresh = score_prompt(_p("b", category="mealtime"), CHILD, hist, CFG)
    assert repeat.score < fresh.score


def test_penalty_does_not_erase_strong_interest_match():
    child = ChildContext(child_id="c1", age=5, interests=["drawing", "art", "colors"])
    strong = _p("strong", category="bedtime", tags=("drawing", "art", "colors"))
    weak = _p("weak", category="bedtime", tags=("cleaning",))
    hist = _hist(_done("bedtime", 0))
    s = score_prompt(strong, child, hist, CFG)
    w = score_prompt(weak, child, hist, CFG)
    assert s.score > 0
    assert s.score > w.score


def test_favorite_never_lowers_score():
    for hist in (_hist(), _hist(_done("bedtime", 3)), _hist(_done("creative_expression", 0, prompt_id="p1"))):
        plain = score_prompt(_p(), CHILD, hist, CFG)
        fav_hist = build_history_snapshot(hist.records, TODAY, {"p1"})
        fav = score_prompt(_p(), CHILD, fav_hist, CFG)
        assert fav.score >= plain.score
        assert "favorite" in [r.signal for r in fav.reasons]


def test_failing_signal_is_isolated_to_one_candidate():
    metrics.reset()

    def _boom(prompt, child, history, config):
        if prompt.id == "bad":
            raise KeyError("malformed tags")
        return SignalOutput(1.0, "ok")

    cfg = RecommenderConfig(weights={**DEFAULT_WEIGHTS, "boom": 0.2})
    signals = DEFAULT_SIGNALS + (Signal("boom", _boom),)
    scored = score_candidates([_p("good"), _p("bad")], CHILD, _hist(), cfg, signals)

    by_id = {sp.prompt.id: sp for sp in scored}
    assert set(by_id) == {"good", "bad"}
    assert by_id["bad"].breakdown["boom"] == 0.0
    assert by_id["good"].breakdown["boom"] == 1.0
    assert by_id["good"].score > by_id["bad"].score
    snap = metrics.snapshot()
    assert snap["signal_failures"] == {"boom": 1}
    assert snap["counters"]["signal_failures_total"] == 1


def test_out_of_range_subscore_is_clamped_and_nan_is_neutral():
    cfg = RecommenderConfig(weights={"wild": 1.0})
    big = score_prompt(_p(), CHILD, _hist(), cfg, (Signal("wild", lambda *a: SignalOutput(7.0)),))
    nan = score_prompt(_p(), CHILD, _hist(), cfg, (Signal("wild", lambda *a: SignalOutput(float("nan"))),))
    assert big.score == 100.0
    assert nan.score == 0.0
