"""
Observability endpoints for the keycolors palette pipeline.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Query

from ..services.observability import get_metrics_collector


router = APIRouter(prefix="/metrics", tags=["observability"])


@router.get("/summary")
async def get_metrics_summary() -> Dict[str, Any]:
    """Aggregated statistics for every pipeline stage."""
    return get_metrics_collector().get_all_stats()


@router.get("/operations/{operation_name}")
async def get_operation_metrics(operation_name: str) -> Dict[str, Any]:
    """Statistics for one pipeline stage."""
    stats = get_metrics_collector().get_operation_stats(operation_name)
    if not stats:
        raise HTTPException(status_code=404, detail=f"No metrics for operation '{operation_name}'")
    return stats


@router.get("/recent")
async def get_recent_metrics(limit: int = Query(10, ge=1, le=100)) -> List[Dict[str, Any]]:
    """Most recent stage measurements."""
    return get_metrics_collector().get_recent_metrics(limit)
