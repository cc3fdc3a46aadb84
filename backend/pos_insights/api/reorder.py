"""
Reorder API Endpoints

Reorder alerts for variants at or below their reorder point, filtered
views of them, and an Excel purchasing worksheet.
"""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from pos_insights.api.analytics import get_engine, run_engine_call
from pos_insights.domain.inventory import (
    ReorderAlert,
    ReorderAnalysis,
    ReorderPriority,
    ReorderSummary,
)

router = APIRouter(prefix="/api/v1/reorder", tags=["reorder"])


@router.get("/alerts", response_model=ReorderAnalysis)
async def get_reorder_alerts(request: Request):
    """
    Full reorder analysis: alerts (most urgent first) and per-priority counts.
    """
    engine = get_engine(request)
    return run_engine_call(engine.analyze_reorder_needs)


@router.get("/alerts/urgent", response_model=List[ReorderAlert])
async def get_urgent_alerts(request: Request):
    """CRITICAL and HIGH alerts only"""
    engine = get_engine(request)
    return run_engine_call(engine.get_urgent_alerts)


@router.get("/alerts/priority/{priority}", response_model=List[ReorderAlert])
async def get_alerts_by_priority(request: Request, priority: ReorderPriority):
    """
    Alerts of a single priority.

    Args:
        priority: CRITICAL, HIGH, MEDIUM or LOW
    """
    engine = get_engine(request)
    return run_engine_call(engine.get_alerts_by_priority, priority)


@router.get("/alerts/product/{product_id}", response_model=List[ReorderAlert])
async def get_product_alerts(request: Request, product_id: str):
    """Alerts for every variant of one product"""
    engine = get_engine(request)
    return run_engine_call(engine.get_product_reorder_alerts, product_id)


@router.get("/summary", response_model=ReorderSummary)
async def get_reorder_summary(request: Request):
    engine = get_engine(request)
    analysis = run_engine_call(engine.analyze_reorder_needs)
    return analysis.summary


@router.get("/worksheet")
async def download_reorder_worksheet(request: Request):
    """
    Download the reorder worksheet (.xlsx) for the current analysis.

    Sheets: "Reorder Alerts" (one row per alert) and "Summary".
    """
    engine = get_engine(request)
    excel_file = run_engine_call(engine.generate_reorder_worksheet)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"Reorder_Worksheet_{timestamp}.xlsx"

    return StreamingResponse(
        excel_file,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )
