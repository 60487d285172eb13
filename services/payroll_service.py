import logging
from typing import Dict, Any, List

from config.settings import DEFAULT_HOURLY_RATE, DAYS_PER_YEAR
from modules.payroll.calculator import (
    PAY_TYPE_SALARY,
    PAY_TYPE_SALARY_BONUS,
    PayrollResult,
    compute_payroll,
    compute_total_sales,
    normalize_pay_type,
    payroll_result_to_dict,
    summarize_payroll,
)
from modules.payroll.dates import PayPeriod
from services.payroll_data_service import PayrollDataService, PayrollDataError

logger = logging.getLogger(__name__)


class PayrollReportService:
    """Runs the payroll calculation per store and staff member."""

    def __init__(
        self,
        data: PayrollDataService,
        default_hourly_rate: float = DEFAULT_HOURLY_RATE,
        days_per_year: int = DAYS_PER_YEAR
    ):
        self.data = data
        self.default_hourly_rate = default_hourly_rate
        self.days_per_year = days_per_year

    def tiers_for_staff(self, staff: Dict[str, Any], store_id: Any) -> List[Dict[str, Any]]:
        """
        Pick the bonus tiers that apply to a staff member.

        salary staff get none, salary+bonus staff get their own tiers, and
        hourly staff get their own tiers or the store's commission tiers when
        they have none. A failed lookup yields no tiers.
        """
        pay_type = normalize_pay_type(staff.get("pay_type") or staff.get("payType"))
        if pay_type == PAY_TYPE_SALARY:
            return []

        try:
            tiers = self.data.get_staff_bonus_tiers(staff.get("id"))
            if tiers or pay_type == PAY_TYPE_SALARY_BONUS:
                return tiers
            return self.data.get_commission_tiers(store_id)
        except PayrollDataError as e:
            logger.warning(
                "Using no bonus tiers for staff %s: %s",
                staff.get("id"),
                e,
            )
            return []

    def compute_staff_payroll(
        self,
        staff: Dict[str, Any],
        shifts: List[Dict[str, Any]],
        sales: List[Dict[str, Any]],
        tiers: List[Dict[str, Any]],
        period: PayPeriod
    ) -> PayrollResult:
        return compute_payroll(
            staff,
            shifts,
            sales,
            tiers,
            period,
            default_hourly_rate=self.default_hourly_rate,
            days_per_year=self.days_per_year,
        )

    def build_store_payroll(self, store: Dict[str, Any], period: PayPeriod) -> Dict[str, Any]:
        """
        Payroll for every staff member of one store.

        Fetch failures don't propagate: the store comes back with zeroed
        totals and an `error` message so the rest of the report still renders.
        """
        store_id = store.get("id")

        try:
            staff_list = self.data.get_staff_for_store(store_id)
            shifts = self.data.get_schedule_assignments_for_date_range(
                store_id, period.start_date, period.end_date
            )
            sales = self.data.get_sales_for_date_range(
                store.get("name"), period.start_date, period.end_date
            )
        except PayrollDataError as e:
            logger.error(
                "Error calculating payroll for store %s: %s",
                store.get("name"),
                str(e),
                exc_info=True,
            )
            return {
                "store": store,
                "staff_payroll": [],
                "total_hours": 0.0,
                "total_sales": 0.0,
                "total_payroll": 0.0,
                "error": str(e),
            }

        staff_payroll = []
        results = []

        for staff in staff_list:
            tiers = self.tiers_for_staff(staff, store_id)
            result = self.compute_staff_payroll(staff, shifts, sales, tiers, period)
            results.append(result)
            staff_payroll.append({
                "staff": staff,
                "hours": round(result.hours, 2),
                "payroll": payroll_result_to_dict(result),
            })

        totals = summarize_payroll(results)

        return {
            "store": store,
            "staff_payroll": staff_payroll,
            "total_hours": round(totals["total_hours"], 2),
            "total_sales": round(compute_total_sales(sales), 2),
            "total_payroll": round(totals["total_payroll"], 2),
            "error": None,
        }

    def build_payroll_report(self, period: PayPeriod) -> Dict[str, Any]:
        """Payroll for all active stores plus grand totals."""
        stores = self.data.get_stores()
        logger.info(
            "Building payroll report for %s stores, %s to %s",
            len(stores),
            period.start_date,
            period.end_date,
        )

        store_reports = [self.build_store_payroll(store, period) for store in stores]
        failed = [r["store"].get("id") for r in store_reports if r["error"]]

        if failed:
            logger.warning("Payroll report incomplete, failed stores: %s", failed)

        return {
            "period": {
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
                "days": period.days,
            },
            "stores": store_reports,
            "total_hours": round(sum(r["total_hours"] for r in store_reports), 2),
            "total_sales": round(sum(r["total_sales"] for r in store_reports), 2),
            "total_payroll": round(sum(r["total_payroll"] for r in store_reports), 2),
            "store_count": len(store_reports),
            "failed_stores": failed,
        }

    def save_store_payroll(
        self,
        store_payroll: Dict[str, Any],
        period: PayPeriod
    ) -> List[Dict[str, Any]]:
        """Persist one payroll_records row per staff member of a computed store payroll."""
        if store_payroll.get("error"):
            raise ValueError(f"Cannot save payroll with errors: {store_payroll['error']}")

        store_id = store_payroll["store"].get("id")
        records = []

        for entry in store_payroll["staff_payroll"]:
            payroll = entry["payroll"]
            records.append({
                "staff_id": entry["staff"].get("id"),
                "store_id": store_id,
                "pay_period_start": period.start_date.isoformat(),
                "pay_period_end": period.end_date.isoformat(),
                "pay_type": payroll["pay_type"],
                "hours": payroll["hours"],
                "base_pay": payroll["base_pay"],
                "bonus": payroll["bonus"],
                "total_pay": payroll["total"],
                "total_sales": payroll["total_sales"],
            })

        saved = self.data.save_payroll_records(records)

        logger.info("Saved %s payroll records for store %s", len(saved), store_id)
        return saved
