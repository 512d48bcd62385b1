from degree_planner.db.base import Base
from degree_planner.models.degree_template import DegreeTemplate, RequirementArea, RequirementMapping
from degree_planner.models.plan_financials import PlanFinancials
from degree_planner.models.provider_course import ProviderCourse
from degree_planner.models.roadmap import RoadmapPlan, RoadmapStep

__all__ = [
    "Base",
    "DegreeTemplate",
    "RequirementArea",
    "RequirementMapping",
    "ProviderCourse",
    "RoadmapPlan",
    "RoadmapStep",
    "PlanFinancials",
]
