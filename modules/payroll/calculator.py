"""
Payroll and bonus computation.

Everything here is a pure function over rows that have already been fetched
from Supabase: no I/O, no state kept between calls, and inputs are never
mutated. Malformed numbers and times are coerced to 0 rather than raised.
"""

import math
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from config.settings import DEFAULT_HOURLY_RATE, DAYS_PER_YEAR
from modules.payroll.dates import PayPeriod, parse_calendar_date, parse_wall_clock

PAY_TYPE_HOURLY = "hourly"
PAY_TYPE_SALARY = "salary"
PAY_TYPE_SALARY_BONUS = "salary+bonus"

PAY_TYPES = (PAY_TYPE_HOURLY, PAY_TYPE_SALARY, PAY_TYPE_SALARY_BONUS)
SALARIED_PAY_TYPES = (PAY_TYPE_SALARY, PAY_TYPE_SALARY_BONUS)


@dataclass(frozen=True)
class PayrollResult:
    """Pay breakdown for one staff member over one pay period."""
    base_pay: float
    bonus: float
    total: float
    hourly_rate: float        # configured rate, or effective rate for salaried staff
    total_sales: float
    pay_type: str
    hours: float
    days_in_period: int


def safe_float(value: Any) -> float:
    """Coerce a monetary or numeric field to float, 0.0 when it can't be read."""
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "").replace(" ", "")
        if not cleaned:
            return 0.0
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def normalize_pay_type(pay_type: Any) -> str:
    """Map a raw pay_type value onto one of PAY_TYPES (unknown -> hourly)."""
    if not isinstance(pay_type, str):
        return PAY_TYPE_HOURLY
    normalized = pay_type.strip().lower()
    return normalized if normalized in PAY_TYPES else PAY_TYPE_HOURLY


def _field(row: Dict[str, Any], *names: str) -> Any:
    for name in names:
        value = row.get(name)
        if value is not None:
            return value
    return None


def _shift_times(shift: Dict[str, Any]):
    # Assignments may carry their times on a nested schedule slot
    slot = shift.get("slot") if isinstance(shift.get("slot"), dict) else {}
    start = _field(shift, "start_time") or slot.get("start_time")
    end = _field(shift, "end_time") or slot.get("end_time")
    return start, end


def _shift_date(shift: Dict[str, Any]) -> Optional[date]:
    slot = shift.get("slot") if isinstance(shift.get("slot"), dict) else {}
    return parse_calendar_date(_field(shift, "date", "slot_date") or slot.get("slot_date"))


def compute_shift_hours(shift: Dict[str, Any]) -> float:
    """Hours between start_time and end_time of a same-day shift."""
    start_raw, end_raw = _shift_times(shift)
    start = parse_wall_clock(start_raw)
    end = parse_wall_clock(end_raw)

    if start is None or end is None:
        return 0.0

    anchor = date(2000, 1, 1)
    hours = (datetime.combine(anchor, end) - datetime.combine(anchor, start)).total_seconds() / 3600
    return max(0.0, hours)


def compute_total_hours(
    shifts: Optional[Iterable[Dict[str, Any]]],
    staff_id: Any = None,
    period: Optional[PayPeriod] = None,
) -> float:
    """
    Sum shift hours, optionally narrowed to one staff member and one period.

    Shifts with no staff_id key, or without a date, are not filtered out by
    the respective criterion. An explicit staff_id of None is an unassigned
    slot and never matches a staff member.
    """
    total = 0.0
    for shift in shifts or []:
        if staff_id is not None and "staff_id" in shift and shift["staff_id"] != staff_id:
            continue
        if period is not None:
            shift_day = _shift_date(shift)
            if shift_day is not None and not period.contains(shift_day):
                continue
        total += compute_shift_hours(shift)
    return total


def prorate_salary(salary_amount: Any, period: PayPeriod, days_per_year: int = DAYS_PER_YEAR) -> float:
    """Share of a yearly salary earned over the inclusive period."""
    daily_rate = safe_float(salary_amount) / days_per_year
    return daily_rate * period.days


def compute_total_sales(sales: Optional[Iterable[Dict[str, Any]]]) -> float:
    return sum(safe_float(sale.get("gross_sales")) for sale in sales or [])


def select_bonus_tier(
    tiers: Optional[Iterable[Dict[str, Any]]],
    total_sales: float,
) -> Optional[Dict[str, Any]]:
    """
    Highest tier whose sales_target is met.

    sorted() is stable, so among tiers sharing a target the one listed first
    wins. Tiers flagged is_active=False never apply.
    """
    active = [tier for tier in tiers or [] if tier.get("is_active", True) is not False]
    ranked = sorted(active, key=lambda tier: safe_float(tier.get("sales_target")), reverse=True)

    for tier in ranked:
        if total_sales >= safe_float(tier.get("sales_target")):
            return tier
    return None


def compute_bonus(tiers: Optional[Iterable[Dict[str, Any]]], total_sales: float) -> float:
    tier = select_bonus_tier(tiers, total_sales)
    return safe_float(tier.get("bonus_amount")) if tier else 0.0


def compute_payroll(
    staff: Dict[str, Any],
    shifts: Optional[Iterable[Dict[str, Any]]],
    sales: Optional[Iterable[Dict[str, Any]]],
    tiers: Optional[Iterable[Dict[str, Any]]],
    period: PayPeriod,
    *,
    default_hourly_rate: float = DEFAULT_HOURLY_RATE,
    days_per_year: int = DAYS_PER_YEAR,
) -> PayrollResult:
    """
    Compute the pay breakdown for one staff member.

    Args:
        staff: Staff row (pay_type, hourly_rate, salary_amount, id). The
            camelCase keys payType / hourlyRate / salaryAmount are accepted too.
        shifts: Schedule assignments. Rows for other staff or outside the
            period are skipped when they say so.
        sales: Sales ledger rows attributed to this staff member's store/period.
        tiers: Bonus tiers to evaluate. Pass an empty list to suppress bonus.
        period: Inclusive pay period, used for filtering and salary proration.

    Returns:
        PayrollResult. hourly_rate is the configured rate for hourly staff and
        the effective base_pay / hours (0 with no hours) for salaried staff.
    """
    pay_type = normalize_pay_type(_field(staff, "pay_type", "payType"))
    hours = compute_total_hours(shifts, staff_id=staff.get("id"), period=period)

    if pay_type in SALARIED_PAY_TYPES:
        base_pay = prorate_salary(_field(staff, "salary_amount", "salaryAmount"), period, days_per_year)
        hourly_rate = base_pay / hours if hours > 0 else 0.0
    else:
        hourly_rate = safe_float(_field(staff, "hourly_rate", "hourlyRate")) or default_hourly_rate
        base_pay = hours * hourly_rate

    total_sales = compute_total_sales(sales)
    bonus = compute_bonus(tiers, total_sales)

    return PayrollResult(
        base_pay=base_pay,
        bonus=bonus,
        total=base_pay + bonus,
        hourly_rate=hourly_rate,
        total_sales=total_sales,
        pay_type=pay_type,
        hours=hours,
        days_in_period=period.days,
    )


def payroll_result_to_dict(result: PayrollResult, ndigits: Optional[int] = 2) -> Dict[str, Any]:
    """Serialize a PayrollResult, rounding money and hours for display."""
    data = asdict(result)
    if ndigits is None:
        return data
    for key in ("base_pay", "bonus", "total", "hourly_rate", "total_sales", "hours"):
        data[key] = round(data[key], ndigits)
    return data


def summarize_payroll(results: List[PayrollResult]) -> Dict[str, float]:
    """Totals across several staff members' results."""
    return {
        "total_hours": sum(r.hours for r in results),
        "total_base_pay": sum(r.base_pay for r in results),
        "total_bonus": sum(r.bonus for r in results),
        "total_payroll": sum(r.total for r in results),
    }
