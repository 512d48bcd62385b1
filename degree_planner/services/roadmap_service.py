import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from degree_planner.core.config import Settings, get_settings
from degree_planner.core.exceptions import RoadmapError
from degree_planner.schemas.financials import FinancialInputs
from degree_planner.schemas.roadmap import GeneratePlanResponse, PlanSummary
from degree_planner.services import plan_persister
from degree_planner.services.allocation import AllocationPolicy, allocate
from degree_planner.services.catalog_reader import load_catalog
from degree_planner.services.financial_calculator import (
    calculate_financials,
    rules_from_settings,
    sessions_for_courses,
)

logger = logging.getLogger(__name__)


async def generate(
    db: AsyncSession,
    user_id: UUID,
    template_id: UUID,
    pace_hours_per_week: Optional[int] = None,
    pace_months: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> GeneratePlanResponse:
    """Build (or rebuild) the roadmap for one user and degree template.

    Allocation runs entirely in memory; nothing is written unless it
    succeeds. Plan, steps and financials are committed together.
    """
    settings = settings or get_settings()
    pace_hours_per_week = pace_hours_per_week or settings.DEFAULT_PACE_HOURS_PER_WEEK
    pace_months = pace_months or settings.DEFAULT_PACE_MONTHS
    logger.info(
        "Generating roadmap plan user_id=%s template_id=%s pace_hours_per_week=%s pace_months=%s",
        user_id,
        template_id,
        pace_hours_per_week,
        pace_months,
    )

    try:
        catalog = await load_catalog(db, template_id)
        state = allocate(catalog, AllocationPolicy.from_settings(settings))
    except RoadmapError as exc:
        logger.warning("Roadmap generation failed for template %s: %s", template_id, exc.message)
        await db.rollback()
        raise

    template = catalog.template
    total_credits = state.total_credits
    remaining_credits = max(0, template.total_credits - total_credits)
    est_months = plan_persister.estimate_months(state.total_hours, pace_hours_per_week)
    steps = plan_persister.build_steps(state, pace_hours_per_week)

    in_residence = [s for s in state.selections if s.in_residence]
    financial_inputs = FinancialInputs(
        pace_months=pace_months,
        sessions_actual=sessions_for_courses(len(in_residence)),
        phase1_cost=sum(s.course.price_est for s in state.selections if not s.in_residence),
        payment_method="card",
    )
    rules = rules_from_settings(settings)
    financials = calculate_financials(financial_inputs, rules)

    try:
        plan = await plan_persister.save_plan(
            db,
            user_id=user_id,
            template_id=template_id,
            remaining_credits=remaining_credits,
            est_cost=state.total_cost,
            est_months=est_months,
            steps=steps,
        )
        await plan_persister.save_financials(
            db,
            plan.id,
            financial_inputs,
            financials,
            program_fee=rules.program_fee,
            session_cost=rules.session_cost,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Roadmap plan generated plan_id=%s version=%d steps=%d credits=%d projected_total=%.2f",
        plan.id,
        plan.version,
        len(steps),
        total_credits,
        financials.projected_total,
    )

    return GeneratePlanResponse(
        plan_id=plan.id,
        version=plan.version,
        summary=PlanSummary(
            total_credits=total_credits,
            total_cost=round(state.total_cost, 2),
            est_months=est_months,
            upper_level_credits=state.upper_credits,
            residency_credits=state.residency_credits,
            remaining_credits=remaining_credits,
        ),
        steps=steps,
        financials=financials,
    )
