import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional, Dict, Any
from datetime import date
from supabase import Client

from config import settings
from database.supabase_client import get_supabase
from models.payroll import PayrollCalculateRequest, PayrollResultResponse
from modules.payroll.calculator import compute_payroll, payroll_result_to_dict
from modules.payroll.dates import PayPeriod, month_period, shift_month
from services.auth_service import require_manager
from services.payroll_data_service import PayrollDataService, PayrollDataError
from services.payroll_service import PayrollReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payroll", tags=["payroll"])


def get_payroll_data(client: Client = Depends(get_supabase)) -> PayrollDataService:
    return PayrollDataService(client)


def get_report_service(data: PayrollDataService = Depends(get_payroll_data)) -> PayrollReportService:
    return PayrollReportService(
        data,
        default_hourly_rate=settings.DEFAULT_HOURLY_RATE,
        days_per_year=settings.DAYS_PER_YEAR
    )


def resolve_period(
    start_date: Optional[date],
    end_date: Optional[date],
    offset_months: int = 0
) -> PayPeriod:
    """
    Fill in missing bounds from a calendar month and validate the order.

    With no bounds at all, the month is the current one moved by offset_months.
    """
    if start_date is None and end_date is None:
        default = shift_month(date.today(), offset_months)
    else:
        default = month_period(start_date or end_date)
    period = PayPeriod(start_date or default.start_date, end_date or default.end_date)

    if period.end_date < period.start_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_date must not be before start_date"
        )
    return period


@router.get("/report")
async def get_payroll_report(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    offset_months: int = Query(default=0),
    current_user: Dict[str, Any] = Depends(require_manager),
    service: PayrollReportService = Depends(get_report_service)
):
    """
    Payroll for every active store.
    Defaults to the current calendar month, or the month
    offset_months away from it.

    Stores whose data can't be loaded are still listed, with an `error`.
    """
    period = resolve_period(start_date, end_date, offset_months)

    try:
        report = service.build_payroll_report(period)
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load stores: {str(e)}"
        )

    return {
        "success": True,
        "report": report
    }


@router.get("/stores/{store_id}")
async def get_store_payroll(
    store_id: int,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    current_user: Dict[str, Any] = Depends(require_manager),
    service: PayrollReportService = Depends(get_report_service)
):
    """Payroll for one store"""
    period = resolve_period(start_date, end_date)

    try:
        store = service.data.get_store(store_id)
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load store: {str(e)}"
        )

    if not store:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Store not found"
        )

    return {
        "success": True,
        "period": {
            "start_date": period.start_date.isoformat(),
            "end_date": period.end_date.isoformat()
        },
        "payroll": service.build_store_payroll(store, period)
    }


@router.post("/calculate", response_model=PayrollResultResponse)
async def calculate_payroll(
    request: PayrollCalculateRequest,
    current_user: Dict[str, Any] = Depends(require_manager)
):
    """
    Stateless calculation over the posted staff, shifts, sales and tiers.
    Nothing is read from or written to the database.
    """
    period = PayPeriod(request.period.start_date, request.period.end_date)

    result = compute_payroll(
        request.staff.model_dump(),
        [shift.model_dump(exclude_none=True) for shift in request.shifts],
        [sale.model_dump() for sale in request.sales],
        [tier.model_dump() for tier in request.tiers],
        period,
        default_hourly_rate=settings.DEFAULT_HOURLY_RATE,
        days_per_year=settings.DAYS_PER_YEAR,
    )
    return payroll_result_to_dict(result)


@router.post("/stores/{store_id}/save", status_code=status.HTTP_201_CREATED)
async def save_store_payroll(
    store_id: int,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    current_user: Dict[str, Any] = Depends(require_manager),
    service: PayrollReportService = Depends(get_report_service)
):
    """
    Compute a store's payroll and store one payroll record per staff member.
    Managers only.
    """
    period = resolve_period(start_date, end_date)

    try:
        store = service.data.get_store(store_id)
        if not store:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Store not found"
            )

        store_payroll = service.build_store_payroll(store, period)
        records = service.save_store_payroll(store_payroll, period)

        logger.info(
            "Payroll for store %s saved by %s",
            store_id,
            current_user.get("user_id")
        )

        return {
            "success": True,
            "records": records,
            "count": len(records),
            "message": "Payroll saved"
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save payroll: {str(e)}"
        )


@router.get("/history")
async def get_payroll_history(
    store_id: int,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    current_user: Dict[str, Any] = Depends(require_manager),
    data: PayrollDataService = Depends(get_payroll_data)
):
    """Saved payroll records for a store"""
    period = resolve_period(start_date, end_date)

    try:
        records = data.get_payroll_history(store_id, period.start_date, period.end_date)
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch payroll history: {str(e)}"
        )

    return {
        "success": True,
        "records": records,
        "count": len(records)
    }
