from datetime import date

import pytest

from modules.payroll.calculator import (
    PayrollResult,
    compute_bonus,
    compute_payroll,
    compute_shift_hours,
    compute_total_hours,
    compute_total_sales,
    normalize_pay_type,
    payroll_result_to_dict,
    prorate_salary,
    safe_float,
    select_bonus_tier,
)
from modules.payroll.dates import PayPeriod, parse_calendar_date

TIERS = [
    {"sales_target": 500, "bonus_amount": 20},
    {"sales_target": 1000, "bonus_amount": 50},
    {"sales_target": 2500, "bonus_amount": 150},
]


def _shift(start, end, **extra):
    return {"start_time": start, "end_time": end, **extra}


class TestSafeFloat:
    @pytest.mark.parametrize("value,expected", [
        (12, 12.0),
        ("110.50", 110.5),
        ("$1,200.25", 1200.25),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ({"a": 1}, 0.0),
        (True, 0.0),
        (10 ** 400, 0.0),
    ])
    def test_coercion(self, value, expected):
        assert safe_float(value) == expected


class TestShiftHours:
    def test_fractional_hours(self):
        assert compute_shift_hours(_shift("10:00", "14:30")) == 4.5

    def test_seconds_format(self):
        assert compute_shift_hours(_shift("09:00:00", "17:00:00")) == 8.0

    def test_nested_slot(self):
        shift = {"staff_id": 1, "slot": {"start_time": "08:00", "end_time": "12:15"}}
        assert compute_shift_hours(shift) == 4.25

    @pytest.mark.parametrize("start,end", [
        (None, "17:00"),
        ("09:00", None),
        ("", ""),
        ("nine", "17:00"),
    ])
    def test_missing_or_garbled_times_count_zero(self, start, end):
        assert compute_shift_hours(_shift(start, end)) == 0.0

    def test_end_before_start_never_negative(self):
        assert compute_shift_hours(_shift("17:00", "09:00")) == 0.0

    def test_utc_offset_ignored(self):
        assert compute_shift_hours(_shift("09:00:00+00:00", "17:00:00")) == 8.0
        assert compute_shift_hours(_shift("09:00", "17:00:00-05:00")) == 8.0

    def test_total_filters_staff_and_period(self):
        period = PayPeriod(date(2025, 1, 1), date(2025, 1, 31))
        shifts = [
            _shift("09:00", "17:00", staff_id=1, date="2025-01-02"),
            _shift("09:00", "13:00", staff_id=2, date="2025-01-02"),
            _shift("09:00", "17:00", staff_id=1, date="2025-02-01"),
            _shift("09:00", "10:00", staff_id=1),
        ]
        assert compute_total_hours(shifts, staff_id=1, period=period) == 9.0
        assert compute_total_hours(shifts) == 21.0
        assert compute_total_hours(None) == 0.0


class TestPeriod:
    def test_inclusive_days(self):
        assert PayPeriod(date(2025, 1, 1), date(2025, 1, 31)).days == 31
        assert PayPeriod(date(2025, 1, 5), date(2025, 1, 5)).days == 1

    def test_across_daylight_saving_change(self):
        # US clocks move forward on 2025-03-09
        march = PayPeriod(parse_calendar_date("2025-03-01"), parse_calendar_date("2025-03-31"))
        november = PayPeriod(parse_calendar_date("2025-11-01 0:00:00"), parse_calendar_date("2025-11-30"))
        assert march.days == 31
        assert november.days == 30

    def test_reversed_period_has_no_days(self):
        assert PayPeriod(date(2025, 1, 10), date(2025, 1, 1)).days == 0

    def test_salary_proration_is_proportional(self):
        fifteen = prorate_salary(50000, PayPeriod(date(2025, 1, 1), date(2025, 1, 15)))
        thirty = prorate_salary(50000, PayPeriod(date(2025, 1, 1), date(2025, 1, 30)))
        assert thirty == pytest.approx(2 * fifteen)


class TestBonusTiers:
    def test_highest_met_target_wins(self):
        assert compute_bonus(TIERS, 1200) == 50
        assert compute_bonus(TIERS, 2500) == 150
        assert compute_bonus(TIERS, 500) == 20

    def test_no_qualifying_tier(self):
        assert compute_bonus(TIERS, 499.99) == 0
        assert compute_bonus([], 10000) == 0
        assert compute_bonus(None, 10000) == 0

    def test_zero_target_applies_without_sales(self):
        assert compute_bonus([{"sales_target": 0, "bonus_amount": 10}], 0) == 10

    def test_monotonic_in_sales(self):
        bonuses = [compute_bonus(TIERS, sales) for sales in range(0, 4000, 50)]
        assert bonuses == sorted(bonuses)

    def test_equal_targets_keep_input_order(self):
        tiers = [
            {"id": "first", "sales_target": 1000, "bonus_amount": 40},
            {"id": "second", "sales_target": 1000, "bonus_amount": 60},
        ]
        assert select_bonus_tier(tiers, 1500)["id"] == "first"

    def test_inactive_tiers_ignored(self):
        tiers = TIERS + [{"sales_target": 1100, "bonus_amount": 500, "is_active": False}]
        assert compute_bonus(tiers, 1200) == 50

    def test_string_values_coerced(self):
        assert compute_bonus([{"sales_target": "1,000", "bonus_amount": "75"}], 1000) == 75

    def test_input_order_untouched(self):
        tiers = [dict(t) for t in TIERS]
        select_bonus_tier(tiers, 3000)
        assert [t["sales_target"] for t in tiers] == [500, 1000, 2500]


class TestComputePayroll:
    january = PayPeriod(date(2025, 1, 1), date(2025, 1, 31))

    def test_hourly_example(self):
        result = compute_payroll(
            {"pay_type": "hourly", "hourly_rate": 15},
            [_shift("09:00", "17:00")],
            [{"gross_sales": 700}, {"gross_sales": "500"}],
            [{"sales_target": 1000, "bonus_amount": 50}, {"sales_target": 500, "bonus_amount": 20}],
            self.january,
        )
        assert result.hours == 8
        assert result.base_pay == 120
        assert result.bonus == 50
        assert result.total == 170
        assert result.total_sales == 1200
        assert result.hourly_rate == 15
        assert result.pay_type == "hourly"

    def test_salary_example(self):
        result = compute_payroll(
            {"pay_type": "salary", "salary_amount": 36500}, [], [], [], self.january
        )
        assert result.base_pay == pytest.approx(3100)
        assert result.days_in_period == 31
        assert result.hourly_rate == 0
        assert result.bonus == 0

    def test_salary_effective_rate(self):
        result = compute_payroll(
            {"payType": "salary+bonus", "salaryAmount": 36500},
            [_shift("09:00", "17:00")] * 10,
            [{"gross_sales": 3000}],
            TIERS,
            self.january,
        )
        assert result.hourly_rate == pytest.approx(3100 / 80)
        assert result.bonus == 150
        assert result.total == pytest.approx(3250)

    def test_hourly_linear_in_hours(self):
        staff = {"pay_type": "hourly", "hourly_rate": 18}
        one = compute_payroll(staff, [_shift("09:00", "13:00")], [], [], self.january)
        two = compute_payroll(staff, [_shift("09:00", "13:00")] * 2, [], [], self.january)
        assert two.base_pay == pytest.approx(2 * one.base_pay)

    def test_no_shifts_no_hourly_pay(self):
        result = compute_payroll({"pay_type": "hourly", "hourly_rate": 20}, [], [], [], self.january)
        assert result.base_pay == 0
        assert result.total == 0

    def test_fallback_rate_and_pay_type(self):
        result = compute_payroll({}, [_shift("09:00", "11:00")], [], [], self.january)
        assert result.pay_type == "hourly"
        assert result.hourly_rate == 15
        assert result.base_pay == 30

        custom = compute_payroll({"hourly_rate": "abc"}, [_shift("09:00", "11:00")], [], [], self.january,
                                 default_hourly_rate=12)
        assert custom.base_pay == 24

    def test_pay_type_normalized(self):
        assert normalize_pay_type(" Salary ") == "salary"
        assert normalize_pay_type("commission") == "hourly"
        assert normalize_pay_type(None) == "hourly"

    def test_only_staff_own_shifts_count(self):
        shifts = [
            _shift("09:00", "17:00", staff_id=1, date="2025-01-02"),
            _shift("09:00", "17:00", staff_id=2, date="2025-01-02"),
        ]
        result = compute_payroll({"id": 1, "hourly_rate": 10}, shifts, [], [], self.january)
        assert result.hours == 8

    def test_unassigned_shift_not_counted(self):
        shifts = [
            _shift("09:00", "17:00", staff_id=None, date="2025-01-06"),
            _shift("10:00", "12:00", staff_id=10, date="2025-01-06"),
        ]
        result = compute_payroll({"id": 10, "hourly_rate": 15}, shifts, [], [], self.january)
        assert result.hours == 2
        assert result.base_pay == 30

    def test_huge_salary_coerced_to_zero(self):
        result = compute_payroll({"pay_type": "salary", "salary_amount": 10 ** 400}, [], [], [], self.january)
        assert result.base_pay == 0

    def test_idempotent_and_inputs_unchanged(self):
        staff = {"pay_type": "hourly", "hourly_rate": 15}
        shifts = [_shift("09:00", "17:00")]
        sales = [{"gross_sales": "1200"}]
        tiers = [{"sales_target": 500, "bonus_amount": 20}, {"sales_target": 1000, "bonus_amount": 50}]
        snapshot = (dict(staff), [dict(s) for s in shifts], [dict(s) for s in sales], [dict(t) for t in tiers])

        first = compute_payroll(staff, shifts, sales, tiers, self.january)
        second = compute_payroll(staff, shifts, sales, tiers, self.january)

        assert first == second
        assert (staff, shifts, sales, tiers) == snapshot

    def test_total_sales_skips_garbage(self):
        assert compute_total_sales([{"gross_sales": "x"}, {"gross_sales": 10}, {}]) == 10

    def test_result_to_dict_rounds(self):
        result = PayrollResult(
            base_pay=100.005, bonus=0, total=100.005, hourly_rate=12.3456,
            total_sales=0, pay_type="hourly", hours=8.333333, days_in_period=7,
        )
        data = payroll_result_to_dict(result)
        assert data["hourly_rate"] == 12.35
        assert data["hours"] == 8.33
        assert data["days_in_period"] == 7
        assert payroll_result_to_dict(result, ndigits=None)["hours"] == 8.333333
