"""Flight Deck calculation engine.

Turns a student's progress, pace and cost inputs into the dashboard
payload. Every step is a pure function of its own arguments; ``calculate``
chains them in a fixed order:

    credits -> pace -> eta -> cost -> trend -> payments -> alerts -> insights
"""
import math
from typing import Any, Optional, Union

from pydantic import ValidationError

from degree_planner.core.exceptions import FlightDeckValidationError
from degree_planner.schemas.flight_deck import (
    AlertLevel,
    AlertResult,
    BudgetInsights,
    CostResult,
    CostShares,
    CostState,
    CreditsResult,
    ETAResult,
    FinancialsInput,
    FlightDeckInput,
    FlightDeckResult,
    InsightItem,
    Insights,
    MilestoneInsights,
    PaceInput,
    PaceResult,
    PaymentResult,
    PlanHints,
    ProgressInput,
    Recommendations,
    TrendResult,
)

TARGET_CREDITS = 120
WEEKS_PER_MONTH = 4.3
ONE_YEAR_MONTHS = 12
ETA_NEVER_MONTHS = 999

BUDGET_CAUTION_MARGIN = 1000
UNDER_BUDGET_MARGIN = 2000
FAST_TRACK_MONTHS = 8
TREND_DEADBAND = 1
TREND_WARNING_PCT = 5

MAX_BUDGET_WARNINGS = 3
MAX_CELEBRATIONS = 3
MAX_RECOMMENDATIONS = 2

_LEVEL_RANK = {"green": 0, "yellow": 1, "red": 2}


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _worst(current: AlertLevel, candidate: AlertLevel) -> AlertLevel:
    return candidate if _LEVEL_RANK[candidate] > _LEVEL_RANK[current] else current


def _top(items: list[InsightItem], limit: int) -> list[InsightItem]:
    return sorted(items, key=lambda item: item.priority)[:limit]


# ---------- Metrics ----------

def calculate_credits(progress: ProgressInput) -> CreditsResult:
    total = progress.completed_credits + progress.in_progress_credits
    is_over = total > TARGET_CREDITS
    return CreditsResult(
        completed=progress.completed_credits,
        in_progress=progress.in_progress_credits,
        total=total,
        target=TARGET_CREDITS,
        remaining=max(0, TARGET_CREDITS - total),
        is_over_target=is_over,
        overage_amount=total - TARGET_CREDITS if is_over else 0,
    )


def calculate_pace(pace: PaceInput, target_hours: float) -> PaceResult:
    hours = pace.weekly_hours_avg
    percent = (hours / target_hours) * 100 if target_hours > 0 else 0.0

    # 80% of target, compared without a float multiplier
    if hours >= target_hours:
        state = "green"
    elif hours * 5 >= target_hours * 4:
        state = "yellow"
    else:
        state = "red"

    return PaceResult(current_hours=hours, target_hours=target_hours, state=state, percent_of_target=percent)


def calculate_eta(remaining_credits: int, pace: PaceInput) -> ETAResult:
    if remaining_credits == 0:
        return ETAResult(months=0, exceeds_one_year=False, credits_per_week=0, effective_monthly_throughput=0)

    if pace.weekly_hours_avg == 0:
        return ETAResult(
            months=ETA_NEVER_MONTHS,
            exceeds_one_year=True,
            credits_per_week=0,
            effective_monthly_throughput=0,
        )

    credits_per_week = pace.weekly_hours_avg / pace.hours_per_credit
    throughput = credits_per_week * WEEKS_PER_MONTH
    months = math.ceil(remaining_credits / throughput)
    return ETAResult(
        months=months,
        exceeds_one_year=months > ONE_YEAR_MONTHS,
        credits_per_week=credits_per_week,
        effective_monthly_throughput=throughput,
    )


def calculate_cost(financials: FinancialsInput, plan_hints: PlanHints) -> CostResult:
    """Label the precomputed cost; nothing is recalculated here."""
    breakdown = financials.breakdown

    state: CostState
    if financials.over_budget or financials.projected_total > plan_hints.budget_ceiling:
        state = "Over Budget"
    elif breakdown.sessions_count > plan_hints.baseline_sessions:
        state = "Caution"
    else:
        state = "On Track"

    return CostResult(
        program_fee=breakdown.program_fee,
        provider_cost=breakdown.provider_cost,
        residency_cost=breakdown.residency_cost,
        projected_sessions=breakdown.sessions_count,
        projected_total=financials.projected_total,
        state=state,
        breakdown=CostShares(
            program=breakdown.program_fee,
            provider=breakdown.provider_cost,
            residency=breakdown.residency_cost,
        ),
    )


def calculate_trend(current_total: float, prior_total: Optional[float]) -> TrendResult:
    if prior_total is None:
        return TrendResult(delta_total=0, direction="flat", percent_change=0)

    delta = current_total - prior_total
    percent = (delta / prior_total) * 100 if prior_total > 0 else 0.0

    if abs(delta) < TREND_DEADBAND:
        direction = "flat"
    elif delta > 0:
        direction = "up"
    else:
        direction = "down"

    return TrendResult(delta_total=delta, direction=direction, percent_change=percent)


def calculate_payments(financials: FinancialsInput, projected_total: float) -> PaymentResult:
    paid = sum(entry.amount for entry in financials.payment_ledger)
    return PaymentResult(
        paid_to_date=paid,
        remaining_balance=max(0.0, projected_total - paid),
        ledger=list(financials.payment_ledger),
    )


def calculate_alerts(
    pace: PaceResult,
    eta: ETAResult,
    cost: CostResult,
    session_unit_cost: float,
) -> AlertResult:
    level: AlertLevel = "green"
    messages: list[str] = []
    one_year_warning = None

    if eta.exceeds_one_year:
        level = "red"
        messages.append(f"Timeline exceeds 12 months ({eta.months} months)")
        one_year_warning = (
            f"Exceeds 12 months - additional in-residence session (~{_money(session_unit_cost)}) likely."
        )

    if pace.state == "red":
        level = _worst(level, "red")
        messages.append("Study pace significantly below target")
    elif pace.state == "yellow":
        level = _worst(level, "yellow")
        messages.append("Study pace slightly below target")

    if cost.state == "Over Budget":
        level = _worst(level, "red")
        messages.append("Projected cost over budget")
    elif cost.state == "Caution":
        level = _worst(level, "yellow")
        messages.append("Projected cost trending higher")

    if not messages:
        messages.append("On track for timely completion")

    return AlertResult(level=level, messages=messages, one_year_warning=one_year_warning)


# ---------- Insights ----------

def budget_warnings(
    cost: CostResult,
    trend: TrendResult,
    session_unit_cost: float,
    plan_hints: PlanHints,
) -> list[InsightItem]:
    warnings = []
    ceiling = plan_hints.budget_ceiling

    if cost.state == "Over Budget":
        overage = max(0.0, cost.projected_total - ceiling)
        warnings.append(
            InsightItem(
                message=(
                    f"Budget exceeded by {_money(overage)}. "
                    "Consider accelerating pace to reduce in-residence sessions."
                ),
                severity="warning",
                priority=1,
                icon="dollar",
            )
        )

    if ceiling - BUDGET_CAUTION_MARGIN < cost.projected_total <= ceiling:
        warnings.append(
            InsightItem(
                message=f"Within {_money(ceiling - cost.projected_total)} of budget limit. Monitor closely.",
                severity="warning",
                priority=2,
                icon="alert",
            )
        )

    if trend.direction == "up" and trend.percent_change > TREND_WARNING_PCT:
        warnings.append(
            InsightItem(
                message=(
                    f"Costs increased {trend.percent_change:.1f}% from last week. "
                    "Review pace and session planning."
                ),
                severity="warning",
                priority=2,
                icon="trend-up",
            )
        )

    extra = cost.projected_sessions - plan_hints.baseline_sessions
    if extra > 0:
        plural = "s" if extra > 1 else ""
        warnings.append(
            InsightItem(
                message=(
                    f"Projected {extra} extra in-residence session{plural} "
                    f"(~{_money(extra * session_unit_cost)}). Increase pace to avoid."
                ),
                severity="warning",
                priority=1,
                icon="clock",
            )
        )

    return _top(warnings, MAX_BUDGET_WARNINGS)


def milestone_celebrations(
    credits: CreditsResult,
    pace: PaceResult,
    cost: CostResult,
    eta: ETAResult,
    plan_hints: PlanHints,
) -> list[InsightItem]:
    celebrations = []
    earned = credits.completed + credits.in_progress
    progress = (earned / credits.target) * 100

    if progress >= 90:
        celebrations.append(InsightItem(
            message=f"90% complete! You're in the home stretch with just {credits.remaining} credits to go!",
            severity="success", priority=1, icon="check",
        ))
    elif progress >= 75:
        celebrations.append(InsightItem(
            message="75% complete! Three-quarters of the way to your degree!",
            severity="success", priority=1, icon="check",
        ))
    elif progress >= 50:
        celebrations.append(InsightItem(
            message=f"Halfway there! {earned} credits down, {credits.remaining} to go!",
            severity="success", priority=1, icon="check",
        ))
    elif progress >= 25:
        celebrations.append(InsightItem(
            message="25% complete! Great start on your degree journey!",
            severity="success", priority=2, icon="check",
        ))

    if pace.percent_of_target >= 100:
        celebrations.append(InsightItem(
            message=(
                f"Excellent pace! You're studying {pace.current_hours:g} hrs/week "
                f"({round(pace.percent_of_target)}% of target)."
            ),
            severity="success", priority=2, icon="check",
        ))

    if cost.projected_total < plan_hints.budget_ceiling - UNDER_BUDGET_MARGIN:
        celebrations.append(InsightItem(
            message=f"Under budget! Projected total of {_money(cost.projected_total)} is excellent.",
            severity="success", priority=2, icon="dollar",
        ))

    if eta.months < FAST_TRACK_MONTHS and not eta.exceeds_one_year:
        celebrations.append(InsightItem(
            message=f"Fast track! On pace to finish in just {eta.months} months.",
            severity="success", priority=2, icon="clock",
        ))

    return _top(celebrations, MAX_CELEBRATIONS)


def recommendations(
    credits: CreditsResult,
    pace: PaceResult,
    eta: ETAResult,
    cost: CostResult,
    session_unit_cost: float,
    plan_hints: PlanHints,
) -> Recommendations:
    pace_recs = []
    credit_recs = []
    budget_recs = []

    hours_needed = math.ceil(pace.target_hours - pace.current_hours)
    if eta.exceeds_one_year and pace.current_hours < pace.target_hours:
        pace_recs.append(InsightItem(
            message=(
                f"Add {hours_needed} hrs/week to finish within 12 months and avoid "
                f"extra session (~{_money(session_unit_cost)})."
            ),
            severity="warning", priority=1, icon="clock",
        ))
    elif pace.state == "yellow":
        pace_recs.append(InsightItem(
            message=f"Increase study time by {hours_needed} hrs/week to meet your target pace.",
            severity="info", priority=2, icon="clock",
        ))
    elif pace.state == "green":
        pace_recs.append(InsightItem(
            message=f"Maintain your current {pace.current_hours:g} hrs/week pace to stay on track.",
            severity="success", priority=3, icon="check",
        ))

    if credits.remaining > 0 and eta.months > 0:
        per_month = math.ceil(credits.remaining / eta.months)
        credit_recs.append(InsightItem(
            message=f"Complete ~{per_month} credits per month to finish in {eta.months} months.",
            severity="info", priority=1, icon="lightbulb",
        ))

    if credits.in_progress > 0:
        credit_recs.append(InsightItem(
            message=f"Focus on completing your {credits.in_progress} in-progress credits first.",
            severity="info", priority=1, icon="lightbulb",
        ))

    if cost.state == "Over Budget":
        budget_recs.append(InsightItem(
            message=(
                f"Finishing one month faster could save ~{_money(session_unit_cost)}. "
                "Consider increasing study hours."
            ),
            severity="info", priority=1, icon="dollar",
        ))

    if cost.projected_sessions > plan_hints.baseline_sessions:
        budget_recs.append(InsightItem(
            message=(
                f"Projected {cost.projected_sessions} in-residence sessions. "
                f"Aim for {plan_hints.baseline_sessions} sessions to optimize costs."
            ),
            severity="info", priority=1, icon="dollar",
        ))

    return Recommendations(
        pace=_top(pace_recs, MAX_RECOMMENDATIONS),
        credits=_top(credit_recs, MAX_RECOMMENDATIONS),
        budget=_top(budget_recs, MAX_RECOMMENDATIONS),
    )


def generate_insights(
    credits: CreditsResult,
    eta: ETAResult,
    cost: CostResult,
    pace: PaceResult,
    trend: TrendResult,
    session_unit_cost: float,
    plan_hints: PlanHints,
) -> Insights:
    summary = f"At this pace, you'll finish in {eta.months} months and pay {_money(cost.projected_total)}."

    smart_tip = None
    hours_needed = math.ceil(pace.target_hours - pace.current_hours)
    if eta.exceeds_one_year and pace.current_hours < pace.target_hours:
        smart_tip = (
            f"Add {hours_needed} hrs/week to avoid one extra in-residence session "
            f"(~{_money(session_unit_cost)})."
        )
    elif pace.state == "yellow":
        smart_tip = f"Increase pace by {hours_needed} hrs/week to stay on track."

    return Insights(
        summary=summary,
        smart_tip=smart_tip,
        budget=BudgetInsights(warnings=budget_warnings(cost, trend, session_unit_cost, plan_hints)),
        milestones=MilestoneInsights(celebrations=milestone_celebrations(credits, pace, cost, eta, plan_hints)),
        recommendations=recommendations(credits, pace, eta, cost, session_unit_cost, plan_hints),
    )


# ---------- Entry point ----------

def validate_input(payload: Union[FlightDeckInput, dict[str, Any]]) -> FlightDeckInput:
    if isinstance(payload, FlightDeckInput):
        return payload
    try:
        return FlightDeckInput.model_validate(payload)
    except ValidationError as exc:
        raise FlightDeckValidationError(
            [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ]
        ) from exc


def calculate(payload: Union[FlightDeckInput, dict[str, Any]]) -> FlightDeckResult:
    """Single entry point for all Flight Deck metrics."""
    data = validate_input(payload)

    credits = calculate_credits(data.progress)
    pace = calculate_pace(data.pace, data.student_profile.target_hours)
    eta = calculate_eta(credits.remaining, data.pace)
    cost = calculate_cost(data.financials, data.plan_hints)
    prior = data.prior_snapshots.last_week_projected_total if data.prior_snapshots else None
    trend = calculate_trend(cost.projected_total, prior)
    payments = calculate_payments(data.financials, cost.projected_total)

    session_unit_cost = data.financials.breakdown.session_unit_cost
    alerts = calculate_alerts(pace, eta, cost, session_unit_cost)
    insights = generate_insights(credits, eta, cost, pace, trend, session_unit_cost, data.plan_hints)

    return FlightDeckResult(
        credits=credits,
        pace=pace,
        eta=eta,
        cost=cost,
        trend=trend,
        payments=payments,
        alerts=alerts,
        insights=insights,
    )
