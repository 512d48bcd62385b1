from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from degree_planner.schemas.financials import FinancialResult, PlanFinancialsRead

StepItemType = Literal["provider_course", "in_residence_session"]


class GeneratePlanRequest(BaseModel):
    template_id: UUID
    pace_hours_per_week: Optional[int] = Field(None, gt=0, le=168)
    pace_months: Optional[int] = Field(None, gt=0, le=120)


class RoadmapStepRead(BaseModel):
    step_index: int
    item_type: StepItemType
    ref_code: str
    title: str
    credits: int
    est_cost: float
    est_weeks: int

    model_config = ConfigDict(from_attributes=True)


class PlanSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_credits: int
    total_cost: float
    est_months: int
    upper_level_credits: int
    residency_credits: int
    remaining_credits: int


class GeneratePlanResponse(BaseModel):
    plan_id: UUID
    version: int
    summary: PlanSummary
    steps: list[RoadmapStepRead]
    financials: Optional[FinancialResult] = None


class RoadmapPlanRead(BaseModel):
    id: UUID
    user_id: UUID
    template_id: UUID
    status: str
    total_remaining_credits: int
    est_cost: float
    est_months: int
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateInfo(BaseModel):
    university: str
    degree_name: str
    total_credits: int

    model_config = ConfigDict(from_attributes=True)


class PlanDetail(BaseModel):
    plan: RoadmapPlanRead
    steps: list[RoadmapStepRead]
    template: Optional[TemplateInfo] = None
    financials: Optional[PlanFinancialsRead] = None
