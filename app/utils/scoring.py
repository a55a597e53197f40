# =============================================
# File: app/utils/scoring.py
# Purpose: Combine signal outputs into one bounded, comparable score
# =============================================
from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from loguru import logger

from app.utils.category_stats import HistorySnapshot
from app.utils.metrics import record_signal_failure
from app.utils.recommend_core import ActivityPrompt, ChildContext, Reason, ScoredPrompt
from app.utils.signals import DEFAULT_SIGNALS, NEUTRAL, Signal, SignalOutput, recency_multiplier
from app.utils.tuning import RecommenderConfig

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def _run_signal(signal: Signal, prompt: ActivityPrompt, child: ChildContext,
                history: HistorySnapshot, config: RecommenderConfig) -> SignalOutput:
    """One bad catalog row must not abort the run: a failing signal counts as neutral for that prompt."""
    try:
        out = signal.fn(prompt, child, history, config)
        sub = float(out.subscore)
        if math.isnan(sub) or math.isinf(sub):
            raise ValueError(f"non-finite subscore {out.subscore!r}")
        return SignalOutput(max(0.0, min(1.0, sub)), out.reason)
    except Exception as e:
        logger.warning(f"[score] signal={signal.name} prompt={prompt.id} failed: {e!r}")
        record_signal_failure(signal.name)
        return NEUTRAL


def score_prompt(
    prompt: ActivityPrompt,
    child: ChildContext,
    history: HistorySnapshot,
    config: RecommenderConfig,
    signals: Sequence[Signal] = DEFAULT_SIGNALS,
) -> ScoredPrompt:
    total_weight = 0.0
    weighted = 0.0
    reasons: List[Reason] = []
    breakdown = {}

    for sig in signals:
        w = config.weight(sig.name)
        out = _run_signal(sig, prompt, child, history, config)
        breakdown[sig.name] = round(out.subscore, 6)
        total_weight += w
        weighted += w * out.subscore
        if out.reason and w > 0:
            reasons.append(Reason(signal=sig.name, message=out.reason, weight=w))

    base = 100.0 * weighted / total_weight if total_weight > 0 else 0.0
    # rounding keeps float noise from breaking ties differently across runs
    base = round(base, 6)

    multiplier = recency_multiplier(prompt, history, config)
    breakdown["recency_multiplier"] = multiplier

    score = round(max(SCORE_MIN, min(SCORE_MAX, base * multiplier)), 6)
    return ScoredPrompt(prompt=prompt, score=score, reasons=reasons, breakdown=breakdown)


def score_candidates(
    candidates: Iterable[ActivityPrompt],
    child: ChildContext,
    history: HistorySnapshot,
    config: RecommenderConfig,
    signals: Sequence[Signal] = DEFAULT_SIGNALS,
) -> List[ScoredPrompt]:
    return [score_prompt(p, child, history, config, signals) for p in candidates]


def sort_key(sp: ScoredPrompt) -> Tuple[float, str]:
    """Total order: score descending, then prompt id ascending."""
    return (-sp.score, sp.prompt.id)
