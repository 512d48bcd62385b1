from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AlertLevel = Literal["red", "yellow", "green"]
CostState = Literal["On Track", "Caution", "Over Budget"]
TrendDirection = Literal["up", "flat", "down"]
InsightSeverity = Literal["info", "warning", "success"]
InsightIcon = Literal["alert", "check", "trend-up", "dollar", "clock", "lightbulb"]

DEFAULT_TARGET_HOURS_PER_WEEK = 12
DEFAULT_HOURS_PER_CREDIT = 15


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase, serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Input ----------

class StudentProfile(CamelModel):
    name: str
    avatar_url: Optional[str] = None
    target_hours: float = Field(DEFAULT_TARGET_HOURS_PER_WEEK, ge=0)


class ProgressInput(CamelModel):
    completed_credits: int = Field(..., ge=0)
    in_progress_credits: int = Field(..., ge=0)


class PaceInput(CamelModel):
    weekly_hours_avg: float = Field(..., ge=0)
    hours_per_credit: float = Field(DEFAULT_HOURS_PER_CREDIT, gt=0)


class CostBreakdown(CamelModel):
    program_fee: float = Field(..., ge=0)
    provider_cost: float = Field(..., ge=0)
    residency_cost: float = Field(..., ge=0)
    sessions_count: int = Field(..., ge=0)
    session_unit_cost: float = Field(..., ge=0)


class LedgerEntry(CamelModel):
    date: str
    amount: float


class FinancialsInput(CamelModel):
    projected_total: float = Field(..., ge=0)
    upfront_due: float = 0
    monthly_payment: float = 0
    payment_months: int = 0
    over_budget: bool = False
    overage_reasons: list[str] = []
    breakdown: CostBreakdown
    payment_ledger: list[LedgerEntry] = []


class PlanHints(CamelModel):
    baseline_sessions: int = Field(2, ge=0)
    budget_ceiling: float = Field(15000, gt=0)


class PriorSnapshots(CamelModel):
    last_week_projected_total: Optional[float] = None


class FlightDeckInput(CamelModel):
    student_profile: StudentProfile
    progress: ProgressInput
    pace: PaceInput
    financials: FinancialsInput
    plan_hints: PlanHints = PlanHints()
    prior_snapshots: Optional[PriorSnapshots] = None


# ---------- Output ----------

class CreditsResult(CamelModel):
    completed: int
    in_progress: int
    total: int
    target: int
    remaining: int
    is_over_target: bool
    overage_amount: int


class PaceResult(CamelModel):
    current_hours: float
    target_hours: float
    state: AlertLevel
    percent_of_target: float


class ETAResult(CamelModel):
    months: int
    exceeds_one_year: bool
    credits_per_week: float
    effective_monthly_throughput: float


class CostShares(CamelModel):
    program: float
    provider: float
    residency: float


class CostResult(CamelModel):
    program_fee: float
    provider_cost: float
    residency_cost: float
    projected_sessions: int
    projected_total: float
    state: CostState
    breakdown: CostShares


class TrendResult(CamelModel):
    delta_total: float
    direction: TrendDirection
    percent_change: float


class PaymentResult(CamelModel):
    paid_to_date: float
    remaining_balance: float
    ledger: list[LedgerEntry]


class AlertResult(CamelModel):
    level: AlertLevel
    messages: list[str]
    one_year_warning: Optional[str] = None


class InsightItem(CamelModel):
    message: str
    severity: InsightSeverity
    priority: Literal[1, 2, 3]
    icon: Optional[InsightIcon] = None


class BudgetInsights(CamelModel):
    warnings: list[InsightItem]


class MilestoneInsights(CamelModel):
    celebrations: list[InsightItem]


class Recommendations(CamelModel):
    pace: list[InsightItem]
    credits: list[InsightItem]
    budget: list[InsightItem]


class Insights(CamelModel):
    summary: str
    smart_tip: Optional[str] = None
    budget: BudgetInsights
    milestones: MilestoneInsights
    recommendations: Recommendations


class FlightDeckResult(CamelModel):
    credits: CreditsResult
    pace: PaceResult
    eta: ETAResult
    cost: CostResult
    trend: TrendResult
    payments: PaymentResult
    alerts: AlertResult
    insights: Insights


# ---------- Persisted-plan request ----------

class PlanFlightDeckRequest(CamelModel):
    """Progress and pace for a plan whose financials are already stored."""

    student_profile: StudentProfile
    progress: ProgressInput
    pace: PaceInput
    payment_ledger: list[LedgerEntry] = []
    prior_snapshots: Optional[PriorSnapshots] = None
