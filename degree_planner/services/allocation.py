"""Course allocation for degree roadmaps.

The pipeline is a chain of folds over immutable ``AllocationState``
snapshots:

    compute_gaps -> fill_requirement_gaps -> enforce_policies -> backfill_credits

Every stage takes a state and returns a new one; nothing is mutated in
place. All stages are synchronous and free of I/O so they can be exercised
directly from unit tests with hand-built catalogs.
"""
import logging
import re
from functools import reduce
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from degree_planner.core.config import Settings
from degree_planner.core.exceptions import (
    CreditBoundsViolationError,
    NotFoundError,
    PolicyUnsatisfiableError,
)
from degree_planner.schemas.catalog import (
    CatalogSnapshot,
    CourseSnapshot,
    RequirementAreaSnapshot,
    RequirementMappingSnapshot,
)

logger = logging.getLogger(__name__)


class AllocationPolicy(BaseModel):
    """Tunables for one allocation run."""

    model_config = ConfigDict(frozen=True)

    area_priority: tuple[str, ...]
    residency_provider: str = "University"
    elective_area_code: str = "ELECTIVES"
    capstone_area_code: str = "MAJOR-CAP"
    ceiling_slack: int = 4

    @classmethod
    def from_settings(cls, settings: Settings) -> "AllocationPolicy":
        return cls(
            area_priority=tuple(settings.AREA_PRIORITY),
            residency_provider=settings.RESIDENCY_PROVIDER,
            elective_area_code=settings.ELECTIVE_AREA_CODE,
            capstone_area_code=settings.CAPSTONE_AREA_CODE,
            ceiling_slack=settings.CREDIT_CEILING_SLACK,
        )


class AreaGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    area_code: str
    area_name: str
    remaining: int


class Selection(BaseModel):
    """A catalog course chosen for the plan and the area it was chosen for."""

    model_config = ConfigDict(frozen=True)

    course: CourseSnapshot
    area_code: str
    in_residence: bool


class AllocationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    gaps: tuple[AreaGap, ...] = ()
    selections: tuple[Selection, ...] = ()

    @property
    def total_credits(self) -> int:
        return sum(s.course.credits for s in self.selections)

    @property
    def upper_credits(self) -> int:
        return sum(s.course.credits for s in self.selections if s.course.is_upper)

    @property
    def residency_credits(self) -> int:
        return sum(s.course.credits for s in self.selections if s.in_residence)

    @property
    def total_cost(self) -> float:
        return sum(s.course.price_est for s in self.selections)

    @property
    def total_hours(self) -> int:
        return sum(s.course.est_hours for s in self.selections)

    def is_selected(self, course: CourseSnapshot) -> bool:
        return any(s.course.id == course.id for s in self.selections)

    def gap(self, area_code: str) -> Optional[AreaGap]:
        return next((g for g in self.gaps if g.area_code == area_code), None)

    def with_selection(self, selection: Selection) -> "AllocationState":
        gaps = tuple(
            g.model_copy(update={"remaining": g.remaining - selection.course.credits})
            if g.area_code == selection.area_code
            else g
            for g in self.gaps
        )
        return self.model_copy(update={"gaps": gaps, "selections": self.selections + (selection,)})

    def without_indices(self, indices: Iterable[int]) -> "AllocationState":
        dropped = set(indices)
        kept = tuple(s for i, s in enumerate(self.selections) if i not in dropped)
        return self.model_copy(update={"selections": kept})


# ---------- Gap calculation ----------

def compute_gaps(areas: Sequence[RequirementAreaSnapshot]) -> tuple[AreaGap, ...]:
    """One gap per area, starting from zero prior credit."""
    return tuple(
        AreaGap(area_code=a.area_code, area_name=a.area_name, remaining=a.required_credits)
        for a in areas
    )


# ---------- Matching ----------

def _has_area_tag(course: CourseSnapshot, area_code: str) -> bool:
    return any(tag == area_code or tag in area_code for tag in course.area_tags)


def _passes_provider_filters(course: CourseSnapshot, mappings: Sequence[RequirementMappingSnapshot]) -> bool:
    return all(not m.provider_filter or course.provider in m.provider_filter for m in mappings)


def _matches_pattern(course: CourseSnapshot, mapping: RequirementMappingSnapshot, has_tag: bool) -> bool:
    if not mapping.course_code_pattern:
        return has_tag
    return re.search(mapping.course_code_pattern, course.course_code, re.IGNORECASE) is not None


def _matches_keywords(course: CourseSnapshot, mapping: RequirementMappingSnapshot, has_tag: bool) -> bool:
    if not mapping.title_keywords:
        return has_tag
    title = course.title.lower()
    return any(keyword.lower() in title for keyword in mapping.title_keywords)


def course_matches_area(
    course: CourseSnapshot,
    area_code: str,
    mappings: Sequence[RequirementMappingSnapshot],
) -> bool:
    """Tag, pattern or keyword match, gated by every mapping's provider list."""
    if not _passes_provider_filters(course, mappings):
        return False
    has_tag = _has_area_tag(course, area_code)
    if has_tag:
        return True
    return any(
        _matches_pattern(course, m, has_tag) or _matches_keywords(course, m, has_tag)
        for m in mappings
    )


def rank_candidates(courses: Iterable[CourseSnapshot]) -> list[CourseSnapshot]:
    """Fastest first, then cheapest."""
    return sorted(courses, key=lambda c: (c.est_hours, c.price_est))


def _fill_area(
    state: AllocationState,
    catalog: CatalogSnapshot,
    area_code: str,
    policy: AllocationPolicy,
) -> AllocationState:
    gap = state.gap(area_code)
    area = catalog.area(area_code)
    if gap is None or area is None or gap.remaining <= 0:
        return state

    candidates = rank_candidates(
        c for c in catalog.courses
        if not state.is_selected(c) and course_matches_area(c, area_code, area.mappings)
    )
    for course in candidates:
        state = state.with_selection(
            Selection(
                course=course,
                area_code=area_code,
                in_residence=course.provider == policy.residency_provider,
            )
        )
        if state.gap(area_code).remaining <= 0:
            break

    remaining = state.gap(area_code).remaining
    if remaining > 0:
        logger.warning("Area %s left %d credits short after matching", area_code, remaining)
    return state


def fill_requirement_gaps(
    state: AllocationState,
    catalog: CatalogSnapshot,
    policy: AllocationPolicy,
) -> AllocationState:
    """Greedily fill each area's gap in priority order."""
    return reduce(
        lambda current, code: _fill_area(current, catalog, code, policy),
        policy.area_priority,
        state,
    )


# ---------- Policy enforcement ----------

def _shortfalls(state: AllocationState, catalog: CatalogSnapshot) -> tuple[int, int]:
    template = catalog.template
    return (
        template.min_upper_credits - state.upper_credits,
        template.residency_credits - state.residency_credits,
    )


def ensure_capstone(
    state: AllocationState,
    catalog: CatalogSnapshot,
    policy: AllocationPolicy,
) -> AllocationState:
    code = catalog.template.capstone_code
    if not code or any(s.course.course_code == code for s in state.selections):
        return state
    capstone = catalog.course_by_code(code)
    if capstone is None:
        raise NotFoundError(f"Capstone course {code} not found in catalog")
    return state.with_selection(
        Selection(
            course=capstone,
            area_code=policy.capstone_area_code,
            in_residence=capstone.provider == policy.residency_provider,
        )
    )


def enforce_policies(
    state: AllocationState,
    catalog: CatalogSnapshot,
    policy: AllocationPolicy,
) -> AllocationState:
    """Guarantee the capstone and the upper-level/residency minimums.

    Each pass swaps the cheapest unused in-residence upper-level course in for
    lower-level provider electives. The loop consumes one course from a finite
    pool per pass and raises as soon as the pool is empty.
    """
    state = ensure_capstone(state, catalog, policy)
    ceiling = catalog.template.total_credits + policy.ceiling_slack

    ul_shortfall, residency_shortfall = _shortfalls(state, catalog)
    while ul_shortfall > 0 or residency_shortfall > 0:
        pool = [
            c for c in catalog.courses
            if c.provider == policy.residency_provider and c.is_upper and not state.is_selected(c)
        ]
        if not pool:
            raise PolicyUnsatisfiableError(
                "Insufficient in-residence upper-level courses to satisfy policies",
                ul_shortfall,
                residency_shortfall,
            )
        course = min(pool, key=lambda c: c.price_est)
        incoming = Selection(course=course, area_code=policy.elective_area_code, in_residence=True)

        replaceable = [
            (i, s) for i, s in enumerate(state.selections)
            if s.area_code == policy.elective_area_code
            and not s.course.is_upper
            and not s.in_residence
            and s.course.course_code != catalog.template.capstone_code
        ]
        if replaceable:
            freed = 0
            to_remove = []
            for index, selection in replaceable:
                if freed >= course.credits:
                    break
                to_remove.append(index)
                freed += selection.course.credits
            if freed < course.credits:
                raise PolicyUnsatisfiableError(
                    f"Cannot free enough credits for {course.course_code}: "
                    f"need {course.credits}, freed {freed}",
                    ul_shortfall,
                    residency_shortfall,
                )
            state = state.without_indices(to_remove).with_selection(incoming)
        elif state.total_credits + course.credits <= ceiling:
            state = state.with_selection(incoming)
        else:
            raise PolicyUnsatisfiableError(
                "No electives to replace and no room to add",
                ul_shortfall,
                residency_shortfall,
            )

        ul_shortfall, residency_shortfall = _shortfalls(state, catalog)

    return state


# ---------- Backfill ----------

def backfill_credits(
    state: AllocationState,
    catalog: CatalogSnapshot,
    policy: AllocationPolicy,
) -> AllocationState:
    """Top up to the credit target with the cheapest provider courses."""
    target = catalog.template.total_credits
    ceiling = target + policy.ceiling_slack

    if state.total_credits < target:
        pool = sorted(
            (
                c for c in catalog.courses
                if c.provider != policy.residency_provider and not state.is_selected(c)
            ),
            key=lambda c: c.price_est,
        )
        for course in pool:
            if state.total_credits >= target:
                break
            if state.total_credits + course.credits > ceiling:
                continue
            state = state.with_selection(
                Selection(course=course, area_code=policy.elective_area_code, in_residence=False)
            )

    total = state.total_credits
    if total < target or total > ceiling:
        raise CreditBoundsViolationError(total, target, ceiling)
    if total > target:
        logger.info("Plan has %d credits (minimum: %d) - acceptable overage", total, target)
    return state


# ---------- Pipeline ----------

def check_invariants(state: AllocationState, catalog: CatalogSnapshot, policy: AllocationPolicy) -> None:
    template = catalog.template
    ul_shortfall, residency_shortfall = _shortfalls(state, catalog)
    if ul_shortfall > 0 or residency_shortfall > 0:
        raise PolicyUnsatisfiableError(
            "Policy minimums not met after rebalancing", ul_shortfall, residency_shortfall
        )
    if template.capstone_code:
        hits = sum(1 for s in state.selections if s.course.course_code == template.capstone_code)
        if hits != 1:
            raise PolicyUnsatisfiableError(
                f"Capstone {template.capstone_code} appears {hits} times", 0, 0
            )
    total = state.total_credits
    ceiling = template.total_credits + policy.ceiling_slack
    if total < template.total_credits or total > ceiling:
        raise CreditBoundsViolationError(total, template.total_credits, ceiling)


def allocate(catalog: CatalogSnapshot, policy: AllocationPolicy) -> AllocationState:
    """Run the full allocation pipeline for one template."""
    state = AllocationState(gaps=compute_gaps(catalog.areas))
    state = fill_requirement_gaps(state, catalog, policy)
    logger.debug(
        "Matched %d courses (%d credits) for template %s",
        len(state.selections),
        state.total_credits,
        catalog.template.id,
    )
    state = enforce_policies(state, catalog, policy)
    state = backfill_credits(state, catalog, policy)
    check_invariants(state, catalog, policy)
    return state
