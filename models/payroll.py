from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Union
from datetime import date

Number = Union[float, str, None]


class PayPeriodQuery(BaseModel):
    """Inclusive pay period"""
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class StaffPayConfig(BaseModel):
    """Pay configuration of a staff member"""
    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    role: Optional[str] = None
    pay_type: Optional[str] = "hourly"  # 'hourly', 'salary', 'salary+bonus'
    hourly_rate: Number = None
    salary_amount: Number = None  # yearly
    store_id: Optional[int] = None


class ShiftInput(BaseModel):
    staff_id: Optional[Union[int, str]] = None
    date: Optional[str] = None
    start_time: Optional[str] = None  # 'HH:MM' or 'HH:MM:SS'
    end_time: Optional[str] = None


class SalesInput(BaseModel):
    date: Optional[str] = None
    gross_sales: Number = None


class BonusTierInput(BaseModel):
    tier_name: Optional[str] = None
    sales_target: Number = 0
    bonus_amount: Number = 0
    commission_rate: Number = None
    is_active: bool = True


class PayrollCalculateRequest(BaseModel):
    """Request model for a stateless payroll calculation"""
    staff: StaffPayConfig
    period: PayPeriodQuery
    shifts: List[ShiftInput] = Field(default_factory=list)
    sales: List[SalesInput] = Field(default_factory=list)
    tiers: List[BonusTierInput] = Field(default_factory=list)


class PayrollResultResponse(BaseModel):
    """Pay breakdown for one staff member"""
    base_pay: float
    bonus: float
    total: float
    hourly_rate: float
    total_sales: float
    pay_type: str
    hours: float
    days_in_period: int


class BonusTiersUpdate(BaseModel):
    """Replacement tier set for a staff member or store"""
    tiers: List[BonusTierInput] = Field(default_factory=list)
