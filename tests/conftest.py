from datetime import date

import pytest
from fastapi.testclient import TestClient

from fakes import FakeSupabase
from app import app
from database.supabase_client import get_supabase
from modules.payroll.dates import PayPeriod
from services.auth_service import create_jwt_token
from services.payroll_data_service import PayrollDataService
from services.payroll_service import PayrollReportService


def _slot(store_id, slot_date, start, end):
    return {"store_id": store_id, "slot_date": slot_date, "start_time": start, "end_time": end}


SEED = {
    "stores": [
        {"id": 1, "name": "Spartanburg", "number": "1", "is_active": True},
        {"id": 2, "name": "Greenville", "number": "3", "is_active": True},
        {"id": 3, "name": "Columbia", "number": "4", "is_active": False},
    ],
    "staff": [
        {"id": 10, "name": "Alice", "role": "Worker", "pay_type": "hourly", "hourly_rate": 15, "store_id": 1},
        {"id": 11, "name": "Bob", "role": "Manager", "pay_type": "salary", "salary_amount": 36500, "store_id": 1},
        {"id": 12, "name": "Cara", "role": "Manager", "pay_type": "salary+bonus", "salary_amount": "73000", "store_id": 2},
        {"id": 13, "name": "Dan", "role": "Worker", "pay_type": "hourly", "hourly_rate": None, "store_id": 2},
    ],
    "schedule_assignments": [
        {"id": 1, "staff_id": 10, "slot": _slot(1, "2025-01-06", "09:00", "17:00")},
        {"id": 2, "staff_id": 10, "slot": _slot(1, "2025-01-07", "10:00", "14:30")},
        {"id": 3, "staff_id": 11, "slot": _slot(1, "2025-01-06", "09:00:00", "17:00:00")},
        {"id": 4, "staff_id": 10, "slot": _slot(1, "2025-02-03", "09:00", "17:00")},
        {"id": 5, "staff_id": 12, "slot": _slot(2, "2025-01-10", "08:00", "18:00")},
        {"id": 6, "staff_id": 13, "slot": _slot(2, "2025-01-10", "12:00", "18:00")},
        {"id": 7, "staff_id": 13, "slot": None},
        {"id": 8, "staff_id": None, "slot": _slot(1, "2025-01-08", "09:00", "17:00")},
    ],
    "trailer_history": [
        {"id": 1, "date": "2025-01-06", "Store": "1", "gross_sales": "700.00"},
        {"id": 2, "date": "2025-01-07", "Store": "1", "gross_sales": 500},
        {"id": 3, "date": "2025-01-08", "Store": "3", "gross_sales": "2,500"},
        {"id": 4, "date": "2025-01-09", "Store": "3", "gross_sales": "n/a"},
        {"id": 5, "date": "2025-02-01", "Store": "1", "gross_sales": 999},
    ],
    "staff_bonus_tiers": [
        {"id": 1, "staff_id": 10, "sales_target": 1000, "bonus_amount": 50},
        {"id": 2, "staff_id": 10, "sales_target": 500, "bonus_amount": 20},
        {"id": 3, "staff_id": 11, "sales_target": 100, "bonus_amount": 999},
        {"id": 4, "staff_id": 12, "sales_target": 2000, "bonus_amount": 300},
        {"id": 5, "staff_id": 12, "sales_target": 5000, "bonus_amount": 800},
    ],
    "commission_tiers": [
        {"id": 1, "store_id": 2, "tier_name": "Gold", "sales_target": 2000, "bonus_amount": 75},
    ],
    "payroll_records": [],
}


@pytest.fixture
def january():
    return PayPeriod(date(2025, 1, 1), date(2025, 1, 31))


@pytest.fixture
def seed_tables():
    return SEED


@pytest.fixture
def fake_supabase(seed_tables):
    return FakeSupabase(seed_tables)


@pytest.fixture
def data_service(fake_supabase):
    return PayrollDataService(fake_supabase)


@pytest.fixture
def report_service(data_service):
    return PayrollReportService(data_service, default_hourly_rate=15.0)


@pytest.fixture
def api_client(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(role):
    token = create_jwt_token({
        "user_id": "user-1",
        "email": "someone@scrubshop.test",
        "name": "Someone",
        "role": role,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers():
    return _headers("Manager")


@pytest.fixture
def worker_headers():
    return _headers("Worker")
