import logging
import math
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from degree_planner.core.exceptions import NotFoundError
from degree_planner.models.degree_template import DegreeTemplate
from degree_planner.models.plan_financials import PlanFinancials
from degree_planner.models.roadmap import RoadmapPlan, RoadmapStep
from degree_planner.schemas.financials import FinancialInputs, FinancialResult, PlanFinancialsRead
from degree_planner.schemas.roadmap import PlanDetail, RoadmapPlanRead, RoadmapStepRead, TemplateInfo
from degree_planner.services.allocation import AllocationState

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def build_steps(state: AllocationState, pace_hours_per_week: int) -> list[RoadmapStepRead]:
    """Turn selections into a contiguous 1-based step list."""
    return [
        RoadmapStepRead(
            step_index=index,
            item_type="in_residence_session" if s.in_residence else "provider_course",
            ref_code=s.course.course_code,
            title=s.course.title,
            credits=s.course.credits,
            est_cost=round(s.course.price_est, 2),
            est_weeks=math.ceil(s.course.est_hours / pace_hours_per_week),
        )
        for index, s in enumerate(state.selections, start=1)
    ]


def estimate_months(total_hours: int, pace_hours_per_week: int) -> int:
    return math.ceil(total_hours / (pace_hours_per_week * 4))


async def ensure_plan_row(db: AsyncSession, user_id: UUID, template_id: UUID) -> None:
    """Insert an empty version-0 plan for (user, template) unless one exists."""
    insert = _INSERT_BY_DIALECT[db.get_bind().dialect.name]
    await db.execute(
        insert(RoadmapPlan)
        .values(id=uuid4(), user_id=user_id, template_id=template_id, status="draft", version=0)
        .on_conflict_do_nothing(index_elements=["user_id", "template_id"])
    )


async def _get_plan_for_update(db: AsyncSession, user_id: UUID, template_id: UUID) -> RoadmapPlan:
    # Row lock serializes concurrent generations of the same (user, template)
    result = await db.execute(
        select(RoadmapPlan)
        .where(RoadmapPlan.user_id == user_id, RoadmapPlan.template_id == template_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def save_plan(
    db: AsyncSession,
    user_id: UUID,
    template_id: UUID,
    remaining_credits: int,
    est_cost: float,
    est_months: int,
    steps: list[RoadmapStepRead],
) -> RoadmapPlan:
    """Upsert the (user, template) plan and replace all of its steps.

    Flushes but does not commit; the caller owns the transaction.
    """
    await ensure_plan_row(db, user_id, template_id)
    plan = await _get_plan_for_update(db, user_id, template_id)
    plan.total_remaining_credits = remaining_credits
    plan.est_cost = round(est_cost, 2)
    plan.est_months = est_months
    plan.version = plan.version + 1
    await db.execute(delete(RoadmapStep).where(RoadmapStep.plan_id == plan.id))
    if plan.version == 1:
        logger.info("Created plan %s for user %s", plan.id, user_id)
    else:
        logger.info("Regenerating plan %s at version %d", plan.id, plan.version)

    db.add_all(RoadmapStep(plan_id=plan.id, **step.model_dump()) for step in steps)
    await db.flush()
    return plan


async def save_financials(
    db: AsyncSession,
    plan_id: UUID,
    inputs: FinancialInputs,
    result: FinancialResult,
    program_fee: float,
    session_cost: float,
) -> PlanFinancials:
    """Insert or overwrite the single financials row for a plan."""
    row = await db.scalar(select(PlanFinancials).where(PlanFinancials.plan_id == plan_id))
    if row is None:
        row = PlanFinancials(plan_id=plan_id)
        db.add(row)

    row.pace_months = inputs.pace_months
    row.sessions_actual = inputs.sessions_actual
    row.phase1_cost = round(inputs.phase1_cost, 2)
    row.session_cost = session_cost
    row.program_fee = program_fee
    row.projected_total = result.projected_total
    row.over_budget = result.over_budget
    row.overage_reasons = list(result.overage_reasons)
    row.payment_method = inputs.payment_method
    row.upfront_due = result.upfront_due
    row.monthly_payment = result.monthly_payment
    row.start_date = result.start_date
    row.completion_target = result.completion_target
    row.monthly_schedule = [m.model_dump() for m in result.monthly_schedule]
    await db.flush()
    return row


async def get_plan_for_user(db: AsyncSession, user_id: UUID, plan_id: UUID) -> RoadmapPlan:
    plan = await db.scalar(
        select(RoadmapPlan)
        .options(selectinload(RoadmapPlan.steps), selectinload(RoadmapPlan.financials))
        .where(RoadmapPlan.id == plan_id)
        .execution_options(populate_existing=True)
    )
    if plan is None or plan.user_id != user_id:
        raise NotFoundError("Plan not found")
    return plan


async def get_plan_detail(db: AsyncSession, user_id: UUID, plan_id: UUID) -> PlanDetail:
    plan = await get_plan_for_user(db, user_id, plan_id)
    steps = (
        await db.scalars(
            select(RoadmapStep).where(RoadmapStep.plan_id == plan.id).order_by(RoadmapStep.step_index)
        )
    ).all()
    template = await db.get(DegreeTemplate, plan.template_id)
    return PlanDetail(
        plan=RoadmapPlanRead.model_validate(plan),
        steps=[RoadmapStepRead.model_validate(s) for s in steps],
        template=TemplateInfo.model_validate(template) if template else None,
        financials=PlanFinancialsRead.model_validate(plan.financials) if plan.financials else None,
    )
