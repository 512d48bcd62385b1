"""Read-only catalog snapshots handed to the allocator.

ORM rows are converted here, once, so JSON list columns become typed,
immutable fields (area tags as a frozenset, provider filter as a tuple)
and bad rows are rejected at the data-store boundary.
"""
import re
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

CourseLevel = Literal["lower", "upper"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


class DegreeTemplateSnapshot(_Frozen):
    id: UUID
    university: str
    degree_name: str
    total_credits: int = Field(..., gt=0)
    min_upper_credits: int = Field(0, ge=0)
    residency_credits: int = Field(0, ge=0)
    capstone_code: Optional[str] = None


class RequirementMappingSnapshot(_Frozen):
    id: UUID
    requirement_id: UUID
    course_code_pattern: Optional[str] = None
    title_keywords: tuple[str, ...] = ()
    provider_filter: tuple[str, ...] = ()
    fulfills_credits: int = 0
    level: Optional[CourseLevel] = None

    @field_validator("title_keywords", "provider_filter", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return () if value is None else tuple(value)

    @field_validator("course_code_pattern", mode="before")
    @classmethod
    def _blank_pattern(cls, value):
        return value or None

    @field_validator("course_code_pattern")
    @classmethod
    def _compilable(cls, value):
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"invalid course_code_pattern: {exc}") from exc
        return value


class RequirementAreaSnapshot(_Frozen):
    id: UUID
    template_id: UUID
    area_code: str
    area_name: str
    required_credits: int = Field(..., ge=0)
    mappings: tuple[RequirementMappingSnapshot, ...] = ()


class CourseSnapshot(_Frozen):
    id: UUID
    provider: str
    course_code: str
    title: str
    credits: int = Field(..., gt=0)
    level: Optional[CourseLevel] = None
    est_hours: int = Field(0, ge=0)
    price_est: float = Field(0, ge=0)
    url: Optional[str] = None
    area_tags: frozenset[str] = frozenset()

    @field_validator("area_tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return frozenset() if value is None else frozenset(t for t in value if t)

    @property
    def is_upper(self) -> bool:
        return self.level == "upper"


class CatalogSnapshot(_Frozen):
    """Everything one generation run reads from the store."""

    template: DegreeTemplateSnapshot
    areas: tuple[RequirementAreaSnapshot, ...]
    courses: tuple[CourseSnapshot, ...]

    def area(self, area_code: str) -> Optional[RequirementAreaSnapshot]:
        return next((a for a in self.areas if a.area_code == area_code), None)

    def course_by_code(self, course_code: str) -> Optional[CourseSnapshot]:
        return next((c for c in self.courses if c.course_code == course_code), None)
