# =============================================
# File: app/routers/metrics.py
# Purpose: Expose recommender counters and endpoint latency as JSON
# =============================================
from __future__ import annotations
from fastapi import APIRouter
from app.utils.metrics import snapshot

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def get_metrics():
    """Return in-process recommender metrics (JSON)."""
    return snapshot()
