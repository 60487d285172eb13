import logging
from datetime import date
from typing import Optional, Dict, Any, List, Union

from supabase import Client

from config.settings import STORE_NUMBER_MAP
from modules.payroll.calculator import safe_float

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


class PayrollDataError(Exception):
    """A Supabase query backing the payroll pages failed."""

    def __init__(self, operation: str, original: Exception):
        super().__init__(f"{operation} failed: {original}")
        self.operation = operation
        self.original = original


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def store_name_for(store_value: Any) -> str:
    """Resolve a ledger "Store" value (usually a store number) to a store name."""
    key = str(store_value) if store_value is not None else ""
    return STORE_NUMBER_MAP.get(key, key)


def flatten_assignment(assignment: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Turn an assignment row with a nested slot into a flat shift row.

    Rows without a slot or without a staff member give None.
    """
    slot = assignment.get("slot")
    if not isinstance(slot, dict) or assignment.get("staff_id") is None:
        return None
    return {
        "id": assignment.get("id"),
        "staff_id": assignment.get("staff_id"),
        "store_id": slot.get("store_id"),
        "date": slot.get("slot_date"),
        "start_time": slot.get("start_time"),
        "end_time": slot.get("end_time"),
    }


class PayrollDataService:
    """Read/write access to the tables the payroll pages use."""

    def __init__(self, client: Client):
        self.supabase = client

    def get_stores(self) -> List[Dict[str, Any]]:
        """Active stores ordered by store number"""
        try:
            result = self.supabase.table("stores") \
                .select("*") \
                .eq("is_active", True) \
                .order("number") \
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Get stores error: {e}")
            raise PayrollDataError("get_stores", e) from e

    def get_store(self, store_id: Any) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("stores") \
                .select("*") \
                .eq("id", store_id) \
                .execute()
        except Exception as e:
            logger.error(f"Get store {store_id} error: {e}")
            raise PayrollDataError("get_store", e) from e

        if result.data and len(result.data) > 0:
            return result.data[0]
        return None

    def get_staff_for_store(self, store_id: Any) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("staff") \
                .select("*") \
                .eq("store_id", store_id) \
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Get staff for store {store_id} error: {e}")
            raise PayrollDataError("get_staff_for_store", e) from e

    def get_schedule_assignments_for_date_range(
        self,
        store_id: Any,
        start_date: DateLike,
        end_date: DateLike
    ) -> List[Dict[str, Any]]:
        """Assignments whose slot belongs to the store and falls in the range, flattened"""
        try:
            result = self.supabase.table("schedule_assignments") \
                .select("*, slot:schedule_slots!inner(*)") \
                .eq("slot.store_id", store_id) \
                .gte("slot.slot_date", _iso(start_date)) \
                .lte("slot.slot_date", _iso(end_date)) \
                .execute()
        except Exception as e:
            logger.error(f"Get schedule assignments error: {e}")
            raise PayrollDataError("get_schedule_assignments_for_date_range", e) from e

        shifts = [s for s in (flatten_assignment(a) for a in result.data or []) if s is not None]
        logger.debug("Fetched %s assignments for store %s", len(shifts), store_id)
        return shifts

    def get_sales_for_date_range(
        self,
        store_name: str,
        start_date: DateLike,
        end_date: DateLike
    ) -> List[Dict[str, Any]]:
        """Sales ledger rows in the range whose Store maps to store_name"""
        try:
            result = self.supabase.table("trailer_history") \
                .select("*") \
                .gte("date", _iso(start_date)) \
                .lte("date", _iso(end_date)) \
                .execute()
        except Exception as e:
            logger.error(f"Get sales for {store_name} error: {e}")
            raise PayrollDataError("get_sales_for_date_range", e) from e

        sales = [
            sale for sale in result.data or []
            if store_name_for(sale.get("Store")) == store_name
        ]
        logger.debug("Fetched %s sales rows for %s", len(sales), store_name)
        return sales

    def get_staff_bonus_tiers(self, staff_id: Any) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("staff_bonus_tiers") \
                .select("*") \
                .eq("staff_id", staff_id) \
                .order("sales_target") \
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Get staff bonus tiers error: {e}")
            raise PayrollDataError("get_staff_bonus_tiers", e) from e

    def get_commission_tiers(self, store_id: Any) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("commission_tiers") \
                .select("*") \
                .eq("store_id", store_id) \
                .order("sales_target") \
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Get commission tiers error: {e}")
            raise PayrollDataError("get_commission_tiers", e) from e

    def save_staff_bonus_tiers(self, staff_id: Any, tiers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace a staff member's tiers"""
        payload = [
            {
                "staff_id": staff_id,
                "tier_name": tier.get("tier_name"),
                "sales_target": safe_float(tier.get("sales_target")),
                "bonus_amount": safe_float(tier.get("bonus_amount")),
                "is_active": tier.get("is_active", True),
            }
            for tier in tiers
        ]

        try:
            self.supabase.table("staff_bonus_tiers").delete().eq("staff_id", staff_id).execute()
            if not payload:
                return []
            result = self.supabase.table("staff_bonus_tiers").insert(payload).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Save staff bonus tiers error: {e}")
            raise PayrollDataError("save_staff_bonus_tiers", e) from e

    def save_commission_tiers(self, store_id: Any, tiers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace a store's tiers, keeping only entries with a positive target and bonus"""
        payload = []
        for tier in tiers:
            sales_target = safe_float(tier.get("sales_target"))
            bonus_amount = safe_float(tier.get("bonus_amount"))
            if sales_target <= 0 or bonus_amount <= 0:
                continue
            tier_name = (tier.get("tier_name") or "").strip() or f"Bonus for ${sales_target:,.0f}+ sales"
            payload.append({
                "store_id": store_id,
                "tier_name": tier_name,
                "sales_target": sales_target,
                "commission_rate": safe_float(tier.get("commission_rate")),
                "bonus_amount": bonus_amount,
            })

        try:
            self.supabase.table("commission_tiers").delete().eq("store_id", store_id).execute()
            if not payload:
                return []
            result = self.supabase.table("commission_tiers").insert(payload).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Save commission tiers error: {e}")
            raise PayrollDataError("save_commission_tiers", e) from e

    def save_payroll_records(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert all records in one request, so either every row is saved or none is"""
        if not records:
            return []

        try:
            result = self.supabase.table("payroll_records").insert(records).execute()
        except Exception as e:
            logger.error(f"Save payroll records error: {e}")
            raise PayrollDataError("save_payroll_records", e) from e

        if result.data and len(result.data) > 0:
            return result.data
        raise PayrollDataError("save_payroll_records", Exception("Insert returned no data"))

    def get_payroll_history(
        self,
        store_id: Any,
        start_date: DateLike,
        end_date: DateLike
    ) -> List[Dict[str, Any]]:
        """Saved payroll records for periods inside the range, newest first"""
        try:
            result = self.supabase.table("payroll_records") \
                .select("*") \
                .eq("store_id", store_id) \
                .gte("pay_period_start", _iso(start_date)) \
                .lte("pay_period_end", _iso(end_date)) \
                .order("pay_period_start", desc=True) \
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Get payroll history error: {e}")
            raise PayrollDataError("get_payroll_history", e) from e
