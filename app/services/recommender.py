# =============================================
# File: app/services/recommender.py
# Purpose: Recommendation engine entry point (filter -> score -> rank -> assemble)
# =============================================

# app/services/recommender.py
from __future__ import annotations
from datetime import date
from typing import List, Optional, Sequence

from loguru import logger

from app.services.profiles import InvalidRequestError, build_child_context
from app.utils.category_stats import HistorySnapshot, build_history_snapshot, trim_window
from app.utils.filters import filter_candidates
from app.utils.ranking import rank
from app.utils.recommend_core import (
    ChildContext,
    FiltersApplied,
    RecommendationInputs,
    RecommendationMetadata,
    RecommendationRequest,
    RecommendationResult,
    ScoredPrompt,
)
from app.utils.scoring import score_candidates
from app.utils.signals import DEFAULT_SIGNALS, Signal
from app.utils.tuning import RecommenderConfig


def cache_key(child_id: str, faith_mode: bool) -> str:
    return f"recommendations:{child_id}:{str(bool(faith_mode)).lower()}:v1"


def resolve_limit(limit: Optional[int], config: RecommenderConfig) -> int:
    """Missing -> default. Out of range -> error, never clamped."""
    if limit is None:
        return config.default_limit
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidRequestError(f"limit must be an integer, got {limit!r}")
    if limit <= 0:
        raise InvalidRequestError(f"limit must be positive, got {limit}")
    if limit > config.max_limit:
        raise InvalidRequestError(f"limit {limit} exceeds the maximum of {config.max_limit}")
    return limit


def assemble_result(
    child: ChildContext,
    ranked: List[ScoredPrompt],
    history: HistorySnapshot,
    candidate_count: int,
    catalog_size: int,
) -> RecommendationResult:
    """Package the ranked list for the caller. Structural only."""
    return RecommendationResult(
        child_id=child.child_id,
        recommendations=ranked,
        metadata=RecommendationMetadata(
            total_completions_considered=history.total,
            candidate_count=candidate_count,
            catalog_size=catalog_size,
            filters_applied=FiltersApplied(faith_mode=child.faith_mode, child_age=child.age),
            category_distribution=history.distribution(),
            cache_key=cache_key(child.child_id, child.faith_mode),
        ),
    )


def generate_recommendations(
    request: RecommendationRequest,
    inputs: RecommendationInputs,
    config: Optional[RecommenderConfig] = None,
    signals: Sequence[Signal] = DEFAULT_SIGNALS,
) -> RecommendationResult:
    """
    Rank the catalog for one child.

    Pure over its arguments: same request, inputs, config and `as_of` give the
    same ordering and reasons. Raises InvalidRequestError for a bad limit or a
    missing/unusable profile. An empty candidate set is a valid empty result.
    """
    config = config or RecommenderConfig()
    limit = resolve_limit(request.limit, config)
    as_of = request.as_of or date.today()

    child = build_child_context(inputs.child_profile, request.faith_mode, as_of, child_id=request.child_id)

    window = trim_window(inputs.history, as_of, config.history_window_days, config.history_max_records)
    history = build_history_snapshot(window, as_of, inputs.favorites)

    candidates = filter_candidates(inputs.catalog, child.age, child.faith_mode)
    if not candidates:
        logger.info(
            f"[recommend] child={child.child_id} no candidates "
            f"(catalog={len(inputs.catalog)} age={child.age} faith={child.faith_mode})"
        )
        return assemble_result(child, [], history, 0, len(inputs.catalog))

    scored = score_candidates(candidates, child, history, config, signals)
    ranked = rank(scored, limit, config.max_per_category, config.max_per_tag)

    logger.info(
        f"[recommend] child={child.child_id} completions={history.total} "
        f"candidates={len(candidates)} limit={limit} picks={len(ranked)}"
    )
    return assemble_result(child, ranked, history, len(candidates), len(inputs.catalog))
