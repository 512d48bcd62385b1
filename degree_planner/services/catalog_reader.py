import logging
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from degree_planner.core.exceptions import NotFoundError
from degree_planner.models.degree_template import DegreeTemplate, RequirementArea
from degree_planner.models.provider_course import ProviderCourse
from degree_planner.schemas.catalog import (
    CatalogSnapshot,
    CourseSnapshot,
    DegreeTemplateSnapshot,
    RequirementAreaSnapshot,
)

logger = logging.getLogger(__name__)


async def load_catalog(db: AsyncSession, template_id: UUID) -> CatalogSnapshot:
    """Read the template, its requirement areas with mappings, and the catalog."""
    template = await db.get(DegreeTemplate, template_id)
    if template is None:
        raise NotFoundError("Degree template not found")

    areas = (
        await db.scalars(
            select(RequirementArea)
            .options(selectinload(RequirementArea.mappings))
            .where(RequirementArea.template_id == template_id)
        )
    ).all()
    if not areas:
        raise NotFoundError(f"No requirement areas for template {template_id}")

    courses = (
        await db.scalars(select(ProviderCourse).order_by(ProviderCourse.course_code, ProviderCourse.id))
    ).all()
    if not courses:
        raise NotFoundError("Provider catalog is empty")

    try:
        snapshot = CatalogSnapshot(
            template=DegreeTemplateSnapshot.model_validate(template),
            areas=tuple(RequirementAreaSnapshot.model_validate(a) for a in areas),
            courses=tuple(CourseSnapshot.model_validate(c) for c in courses),
        )
    except ValidationError:
        logger.exception("Catalog rows for template %s failed validation", template_id)
        raise

    logger.info(
        "Loaded catalog for template %s: %d areas, %d courses",
        template_id,
        len(snapshot.areas),
        len(snapshot.courses),
    )
    return snapshot
