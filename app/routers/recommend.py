# app/routers/recommend.py
from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request

from app.services.profiles import InvalidRequestError
from app.services.recommender import generate_recommendations
from app.services.records import RecordStore, load_inputs
from app.utils import slog
from app.utils.metrics import record_recommendation, record_request, record_request_error
from app.utils.recommend_core import RecommendationRequest, RecommendationResult
from app.utils.tuning import load_config

router = APIRouter(tags=["recommend"])


@lru_cache(maxsize=1)
def get_store() -> RecordStore:
    """Default store: SQL tables behind DB_URL. Tests override this dependency."""
    from app.db.repo import SqlRecordStore, init_db
    init_db()
    return SqlRecordStore()


# ---------- Endpoint ----------
@router.post("/recommend", response_model=RecommendationResult)
async def post_recommend(
    req: RecommendationRequest,
    request: Request,
    store: RecordStore = Depends(get_store),
) -> RecommendationResult:
    """
    Connection-activity recommendations for one child.

    Input: {childId, faithMode, limit?, asOf?}.
    Output: ranked prompts with score and reasons, plus run metadata.
    """
    request.state.log_context = {"child": slog.child_hash(req.child_id), "faith_mode": req.faith_mode}
    record_request()
    try:
        config = load_config()
        inputs = await load_inputs(store, req.child_id, config.history_max_records)
        if inputs.child_profile is None:
            raise HTTPException(status_code=404, detail="Child not found.")
        result = generate_recommendations(req, inputs, config=config)
    except HTTPException:
        record_request_error()
        raise
    except InvalidRequestError as e:
        record_request_error()
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        record_request_error()
        # Keep details for debugging; middleware will log request context.
        raise HTTPException(status_code=500, detail=str(e))

    served = len(result.recommendations)
    record_recommendation(served)
    request.state.log_context.update({
        "picks": served,
        "completions": result.metadata.total_completions_considered,
    })
    return result
