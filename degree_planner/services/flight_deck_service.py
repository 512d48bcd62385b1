import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from degree_planner.core.config import Settings, get_settings
from degree_planner.core.exceptions import NotFoundError
from degree_planner.schemas.flight_deck import (
    CostBreakdown,
    FinancialsInput,
    FlightDeckInput,
    FlightDeckResult,
    PlanFlightDeckRequest,
    PlanHints,
)
from degree_planner.services import flight_deck
from degree_planner.services.plan_persister import get_plan_for_user

logger = logging.getLogger(__name__)


async def get_flight_deck_for_plan(
    db: AsyncSession,
    user_id: UUID,
    plan_id: UUID,
    request: PlanFlightDeckRequest,
    settings: Optional[Settings] = None,
) -> FlightDeckResult:
    """Run the Flight Deck engine against a plan's stored financials."""
    settings = settings or get_settings()
    logger.info("Fetching Flight Deck data user_id=%s plan_id=%s", user_id, plan_id)
    plan = await get_plan_for_user(db, user_id, plan_id)
    stored = plan.financials
    if stored is None:
        raise NotFoundError(f"No financials stored for plan {plan_id}")

    payload = FlightDeckInput(
        student_profile=request.student_profile,
        progress=request.progress,
        pace=request.pace,
        financials=FinancialsInput(
            projected_total=stored.projected_total,
            upfront_due=stored.upfront_due,
            monthly_payment=stored.monthly_payment,
            payment_months=stored.pace_months,
            over_budget=stored.over_budget,
            overage_reasons=stored.overage_reasons or [],
            breakdown=CostBreakdown(
                program_fee=stored.program_fee,
                provider_cost=stored.phase1_cost,
                residency_cost=stored.sessions_actual * stored.session_cost,
                sessions_count=stored.sessions_actual,
                session_unit_cost=stored.session_cost,
            ),
            payment_ledger=request.payment_ledger,
        ),
        plan_hints=PlanHints(
            baseline_sessions=settings.BASELINE_SESSIONS,
            budget_ceiling=settings.BUDGET_CEILING,
        ),
        prior_snapshots=request.prior_snapshots,
    )
    result = flight_deck.calculate(payload)
    logger.info("Flight Deck data calculated user_id=%s level=%s", user_id, result.alerts.level)
    return result
