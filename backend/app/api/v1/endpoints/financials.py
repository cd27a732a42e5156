"""
Financial Reporting API Endpoints.

Period KPIs and P&L over trips starting in [start, end].
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.financials import KPIReport, PnLReport
from backend.app.services.analytics import AnalyticsService

router = APIRouter(prefix="/financials", tags=["Financials"])


@router.get("/kpis", response_model=KPIReport)
async def get_kpis(
    start: date = Query(..., description="Period start (inclusive)"),
    end: date = Query(..., description="Period end (inclusive)"),
    db: AsyncSession = Depends(get_db)
):
    """Period KPIs. Metrics with a zero denominator are null."""
    return await AnalyticsService.get_kpi_report(db, start, end)


@router.get("/pnl", response_model=PnLReport)
async def get_pnl(
    start: date = Query(..., description="Period start (inclusive)"),
    end: date = Query(..., description="Period end (inclusive)"),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_pnl_report(db, start, end)
