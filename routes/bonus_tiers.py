from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, Any

from models.payroll import BonusTiersUpdate
from routes.payroll import get_payroll_data
from services.auth_service import require_manager
from services.payroll_data_service import PayrollDataService, PayrollDataError

router = APIRouter(prefix="/api/bonus-tiers", tags=["bonus-tiers"])


@router.get("/staff/{staff_id}")
async def get_staff_bonus_tiers(
    staff_id: int,
    current_user: Dict[str, Any] = Depends(require_manager),
    data: PayrollDataService = Depends(get_payroll_data)
):
    """Bonus tiers of one staff member, lowest target first"""
    try:
        tiers = data.get_staff_bonus_tiers(staff_id)
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch bonus tiers: {str(e)}"
        )

    return {
        "success": True,
        "tiers": tiers
    }


@router.put("/staff/{staff_id}")
async def update_staff_bonus_tiers(
    staff_id: int,
    update: BonusTiersUpdate,
    current_user: Dict[str, Any] = Depends(require_manager),
    data: PayrollDataService = Depends(get_payroll_data)
):
    """
    Replace a staff member's bonus tiers.
    An empty list removes them all.
    """
    try:
        tiers = data.save_staff_bonus_tiers(
            staff_id,
            [tier.model_dump() for tier in update.tiers]
        )
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save bonus tiers: {str(e)}"
        )

    return {
        "success": True,
        "tiers": tiers,
        "message": "Bonus tiers updated"
    }


@router.get("/stores/{store_id}")
async def get_store_commission_tiers(
    store_id: int,
    current_user: Dict[str, Any] = Depends(require_manager),
    data: PayrollDataService = Depends(get_payroll_data)
):
    """Store-wide commission tiers"""
    try:
        tiers = data.get_commission_tiers(store_id)
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch commission tiers: {str(e)}"
        )

    return {
        "success": True,
        "tiers": tiers
    }


@router.put("/stores/{store_id}")
async def update_store_commission_tiers(
    store_id: int,
    update: BonusTiersUpdate,
    current_user: Dict[str, Any] = Depends(require_manager),
    data: PayrollDataService = Depends(get_payroll_data)
):
    """
    Replace a store's commission tiers.
    Entries without a positive target and bonus are dropped.
    """
    try:
        tiers = data.save_commission_tiers(
            store_id,
            [tier.model_dump() for tier in update.tiers]
        )
    except PayrollDataError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save commission tiers: {str(e)}"
        )

    return {
        "success": True,
        "tiers": tiers,
        "message": "Commission tiers updated"
    }
