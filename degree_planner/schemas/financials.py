from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PaymentMethod = Literal["card", "ach", "wire", "paypal", "crypto"]


class FinancialRules(BaseModel):
    program_fee: float
    session_cost: float
    baseline_sessions: int = 2
    budget_ceiling: float = 15000.0
    card_fee_pct: float = 0.0
    ach_fee_pct: float = 0.0
    wire_fee_flat: float = 0.0
    duration_multipliers: dict[int, float] = {}


class ExamOption(BaseModel):
    use: bool = False
    exam_code: Optional[str] = None
    credits: int = 0
    exam_cost: float = 0.0


class ReplacedProvider(BaseModel):
    provider: str
    per_credit_est: float


class FinancialInputs(BaseModel):
    pace_months: int = Field(..., gt=0)
    sessions_actual: int = Field(..., ge=0)
    phase1_cost: float = Field(..., ge=0)
    exam: Optional[ExamOption] = None
    replaced_provider: Optional[ReplacedProvider] = None
    payment_method: PaymentMethod = "card"


class PaymentMethodFees(BaseModel):
    per_installment: float
    total: float


class MonthlyInstallment(BaseModel):
    month: int
    payment_amount: float
    payment_method: str
    total_paid: float
    remaining_balance: float


class FinancialResult(BaseModel):
    projected_total: float
    over_budget: bool
    overage_reasons: list[str]
    upfront_due: float
    remaining: float
    monthly_payment: float
    payment_months: int
    includes_premium_exam: bool
    premium_exam_cost: float
    duration_multiplier: float
    payment_method_fees: PaymentMethodFees
    warnings: list[str]
    start_date: date
    completion_target: date
    monthly_schedule: list[MonthlyInstallment]


class PlanFinancialsRead(BaseModel):
    pace_months: int
    sessions_actual: int
    phase1_cost: float
    session_cost: float
    program_fee: float
    projected_total: float
    over_budget: bool
    overage_reasons: list[str] = []
    payment_method: str
    upfront_due: float
    monthly_payment: float
    start_date: Optional[date] = None
    completion_target: Optional[date] = None
    monthly_schedule: list[MonthlyInstallment] = []

    model_config = ConfigDict(from_attributes=True)
