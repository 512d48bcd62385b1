"""Cost projection for a roadmap plan.

base = (program fee + phase-one provider cost + sessions * session cost)
       * duration multiplier
total = base + max(0, premium exam cost - provider cost it replaces)

The program fee is due upfront; the rest is split into ``pace_months``
installments with the payment method's fee added to each.
"""
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from degree_planner.core.config import Settings
from degree_planner.schemas.financials import (
    FinancialInputs,
    FinancialResult,
    FinancialRules,
    MonthlyInstallment,
    PaymentMethodFees,
)

ROADMAP_BASELINE_SESSIONS = 2
COURSES_PER_SESSION = 5


def rules_from_settings(settings: Settings) -> FinancialRules:
    return FinancialRules(
        program_fee=settings.PROGRAM_FEE,
        session_cost=settings.SESSION_COST,
        baseline_sessions=settings.BASELINE_SESSIONS,
        budget_ceiling=settings.BUDGET_CEILING,
        card_fee_pct=settings.CARD_FEE_PCT,
        ach_fee_pct=settings.ACH_FEE_PCT,
        wire_fee_flat=settings.WIRE_FEE_FLAT,
        duration_multipliers=settings.DURATION_MULTIPLIERS,
    )


def sessions_for_courses(in_residence_courses: int) -> int:
    """Roughly five in-residence courses per session, never fewer than two."""
    return max(ROADMAP_BASELINE_SESSIONS, -(-in_residence_courses // COURSES_PER_SESSION))


def _installment_fee(base_payment: float, method: str, rules: FinancialRules) -> float:
    if method == "card":
        return base_payment * (rules.card_fee_pct / 100)
    if method == "ach":
        return base_payment * (rules.ach_fee_pct / 100)
    if method == "wire":
        return rules.wire_fee_flat
    return 0.0


def calculate_financials(
    inputs: FinancialInputs,
    rules: FinancialRules,
    start_date: Optional[date] = None,
) -> FinancialResult:
    start_date = start_date or date.today()
    multiplier = rules.duration_multipliers.get(inputs.pace_months, 1.0)

    sessions_cost = inputs.sessions_actual * rules.session_cost
    base_total = (rules.program_fee + inputs.phase1_cost + sessions_cost) * multiplier

    exam = inputs.exam
    exam_delta = 0.0
    if exam is not None and exam.use and exam.exam_code:
        replaced_cost = 0.0
        if inputs.replaced_provider is not None and exam.credits:
            replaced_cost = exam.credits * inputs.replaced_provider.per_credit_est
        exam_delta = max(0.0, exam.exam_cost - replaced_cost)

    projected_total = base_total + exam_delta
    over_budget = projected_total > rules.budget_ceiling

    overage_reasons: list[str] = []
    if inputs.sessions_actual > rules.baseline_sessions:
        overage_reasons.append("Extra in-residence session(s)")
    if exam_delta > 0:
        overage_reasons.append("Premium language exam")

    upfront_due = rules.program_fee
    remaining = projected_total - upfront_due
    base_monthly = remaining / inputs.pace_months
    fee = _installment_fee(base_monthly, inputs.payment_method, rules)
    monthly_payment = base_monthly + fee

    warnings: list[str] = []
    if over_budget:
        warnings.append(
            f"Total exceeds the standard ${rules.budget_ceiling:,.0f} projection "
            f"due to {' and '.join(overage_reasons) or 'higher course costs'}."
        )

    schedule = []
    total_paid = upfront_due
    for month in range(1, inputs.pace_months + 1):
        total_paid += monthly_payment
        schedule.append(
            MonthlyInstallment(
                month=month,
                payment_amount=round(monthly_payment, 2),
                payment_method=inputs.payment_method,
                total_paid=round(total_paid, 2),
                remaining_balance=round(max(0.0, projected_total - total_paid), 2),
            )
        )

    return FinancialResult(
        projected_total=round(projected_total, 2),
        over_budget=over_budget,
        overage_reasons=overage_reasons,
        upfront_due=round(upfront_due, 2),
        remaining=round(remaining, 2),
        monthly_payment=round(monthly_payment, 2),
        payment_months=inputs.pace_months,
        includes_premium_exam=bool(exam and exam.use),
        premium_exam_cost=exam.exam_cost if exam else 0.0,
        duration_multiplier=multiplier,
        payment_method_fees=PaymentMethodFees(
            per_installment=round(fee, 2),
            total=round(fee * inputs.pace_months, 2),
        ),
        warnings=warnings,
        start_date=start_date,
        completion_target=start_date + relativedelta(months=inputs.pace_months),
        monthly_schedule=schedule,
    )
