from uuid import UUID

from fastapi import APIRouter

from degree_planner.api.deps import CurrentUserDep, DBSessionDep, SettingsDep
from degree_planner.schemas.roadmap import GeneratePlanRequest, GeneratePlanResponse, PlanDetail
from degree_planner.services import plan_persister, roadmap_service

router = APIRouter(prefix="/roadmap", tags=["roadmap"])


# Deterministic, no AI
@router.post("/generate", response_model=GeneratePlanResponse)
async def generate_plan(
    data: GeneratePlanRequest,
    db: DBSessionDep,
    current_user: CurrentUserDep,
    settings: SettingsDep,
):
    return await roadmap_service.generate(
        db,
        current_user.id,
        data.template_id,
        pace_hours_per_week=data.pace_hours_per_week,
        pace_months=data.pace_months,
        settings=settings,
    )


@router.get("/plans/{plan_id}", response_model=PlanDetail)
async def get_plan(
    plan_id: UUID,
    db: DBSessionDep,
    current_user: CurrentUserDep,
):
    return await plan_persister.get_plan_detail(db, current_user.id, plan_id)
