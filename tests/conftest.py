import pytest
import os
import sys
from uuid import UUID, uuid4

import jwt
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from degree_planner.core.config import get_settings
from degree_planner.db.base import SCHEMA
from degree_planner.models import (
    Base,
    DegreeTemplate,
    ProviderCourse,
    RequirementArea,
    RequirementMapping,
)
from degree_planner.schemas.catalog import (
    CatalogSnapshot,
    CourseSnapshot,
    DegreeTemplateSnapshot,
    RequirementAreaSnapshot,
    RequirementMappingSnapshot,
)
from degree_planner.services.allocation import AllocationPolicy


# --- Sample catalog ---
# 24-credit degree: 6 upper-level, 6 in-residence, capstone UNIV-490.
# The greedy fill lands on 18 credits, the capstone and one swap bring
# residency and upper-level to 6, and one backfill reaches 24.
SAMPLE_COURSES = [
    # provider, code, title, credits, level, hours, price, tags
    ("Sophia", "ENG101", "English Composition I", 3, "lower", 40, 100.0, ["GEN-ENG"]),
    ("Sophia", "ENG102", "English Composition II", 3, "lower", 45, 100.0, ["GEN-ENG"]),
    ("Sophia", "CS201", "Data Structures", 3, "lower", 50, 150.0, []),
    ("Sophia", "CS202", "Algorithms", 3, "lower", 55, 150.0, []),
    ("Sophia", "ART101", "Art Appreciation", 3, "lower", 30, 80.0, ["ELECTIVES"]),
    ("Sophia", "MUS101", "Music Theory", 3, "lower", 35, 90.0, ["ELECTIVES"]),
    ("Sophia", "HIS101", "World History", 3, "lower", 40, 70.0, []),
    ("University", "UNIV-490", "Capstone Project", 3, "upper", 100, 1500.0, []),
    ("University", "UNIV-310", "Professional Ethics", 3, "upper", 60, 1200.0, []),
    ("University", "UNIV-320", "Research Methods", 3, "upper", 60, 1300.0, []),
]

EXPECTED_CODES = ["ENG101", "ENG102", "CS201", "CS202", "MUS101", "UNIV-490", "UNIV-310", "HIS101"]


@pytest.fixture
def policy():
    return AllocationPolicy(area_priority=("GEN-ENG", "MAJOR-CORE", "ELECTIVES"))


@pytest.fixture
def make_course():
    def _make(provider="Sophia", code="X100", title="Course", credits=3, level="lower",
              hours=40, price=100.0, tags=()):
        return CourseSnapshot(
            id=uuid4(),
            provider=provider,
            course_code=code,
            title=title,
            credits=credits,
            level=level,
            est_hours=hours,
            price_est=price,
            area_tags=list(tags),
        )
    return _make


@pytest.fixture
def make_catalog(make_course):
    """Build a CatalogSnapshot from SAMPLE_COURSES-style tuples."""
    def _make(courses=None, total_credits=24, min_upper=6, residency=6, capstone="UNIV-490"):
        template_id = uuid4()
        template = DegreeTemplateSnapshot(
            id=template_id,
            university="Test University",
            degree_name="BS Computer Science",
            total_credits=total_credits,
            min_upper_credits=min_upper,
            residency_credits=residency,
            capstone_code=capstone,
        )
        eng_id, core_id, elec_id = uuid4(), uuid4(), uuid4()
        areas = (
            RequirementAreaSnapshot(
                id=eng_id, template_id=template_id, area_code="GEN-ENG",
                area_name="English", required_credits=6,
            ),
            RequirementAreaSnapshot(
                id=core_id, template_id=template_id, area_code="MAJOR-CORE",
                area_name="Major Core", required_credits=6,
                mappings=(
                    RequirementMappingSnapshot(
                        id=uuid4(), requirement_id=core_id, course_code_pattern=r"^CS2\d\d$",
                    ),
                ),
            ),
            RequirementAreaSnapshot(
                id=elec_id, template_id=template_id, area_code="ELECTIVES",
                area_name="Electives", required_credits=6,
            ),
        )
        rows = SAMPLE_COURSES if courses is None else courses
        return CatalogSnapshot(
            template=template,
            areas=areas,
            courses=tuple(
                make_course(provider=p, code=c, title=t, credits=cr, level=lv, hours=h, price=pr, tags=tg)
                for p, c, t, cr, lv, h, pr, tg in rows
            ),
        )
    return _make


@pytest.fixture
def sample_catalog(make_catalog):
    return make_catalog()


@pytest.fixture
def flight_deck_payload():
    """A valid Flight Deck input in camelCase wire form."""
    return {
        "studentProfile": {"name": "Jordan", "targetHours": 12},
        "progress": {"completedCredits": 60, "inProgressCredits": 30},
        "pace": {"weeklyHoursAvg": 12, "hoursPerCredit": 15},
        "financials": {
            "projectedTotal": 12600,
            "upfrontDue": 7000,
            "monthlyPayment": 480.67,
            "paymentMonths": 12,
            "overBudget": False,
            "overageReasons": [],
            "breakdown": {
                "programFee": 7000,
                "providerCost": 2000,
                "residencyCost": 3600,
                "sessionsCount": 2,
                "sessionUnitCost": 1800,
            },
            "paymentLedger": [
                {"date": "2026-01-15", "amount": 7000},
                {"date": "2026-02-15", "amount": 480.67},
            ],
        },
        "planHints": {"baselineSessions": 2},
        "priorSnapshots": {"lastWeekProjectedTotal": 12600},
    }


# --- In-memory test database ---
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create test database engine with in-memory SQLite"""
    base_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    # SQLite has no schemas; render stud_hub_schema tables unqualified
    engine = base_engine.execution_options(schema_translate_map={SCHEMA: None})

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await base_engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Create test database session"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


async def _seed_template(session: AsyncSession, capstone="UNIV-490", courses=None) -> DegreeTemplate:
    template = DegreeTemplate(
        university="Test University",
        degree_name="BS Computer Science",
        total_credits=24,
        min_upper_credits=6,
        residency_credits=6,
        capstone_code=capstone,
    )
    template.requirements = [
        RequirementArea(
            area_code="GEN-ENG",
            area_name="English",
            required_credits=6,
            mappings=[RequirementMapping(title_keywords=["English"], provider_filter=["Sophia"])],
        ),
        RequirementArea(
            area_code="MAJOR-CORE",
            area_name="Major Core",
            required_credits=6,
            mappings=[RequirementMapping(course_code_pattern=r"^CS2\d\d$")],
        ),
        RequirementArea(area_code="ELECTIVES", area_name="Electives", required_credits=6),
    ]
    session.add(template)
    session.add_all(
        ProviderCourse(
            provider=p, course_code=c, title=t, credits=cr, level=lv,
            est_hours=h, price_est=pr, area_tags=list(tg),
        )
        for p, c, t, cr, lv, h, pr, tg in (SAMPLE_COURSES if courses is None else courses)
    )
    await session.commit()
    return template


@pytest.fixture
async def seeded_template(test_session) -> DegreeTemplate:
    """Template, requirement areas, mappings and catalog rows in the test DB."""
    return await _seed_template(test_session)


@pytest.fixture
async def unsatisfiable_template(test_session) -> DegreeTemplate:
    """Same template, but the catalog has no spare in-residence upper-level courses."""
    courses = [row for row in SAMPLE_COURSES if row[1] not in ("UNIV-310", "UNIV-320")]
    return await _seed_template(test_session, courses=courses)


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def auth_headers(user_id):
    """Bearer header for a signed token carrying user_id"""
    settings = get_settings()
    token = jwt.encode({"sub": str(user_id)}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_rows():
    return list(SAMPLE_COURSES)


@pytest.fixture
def expected_codes():
    return list(EXPECTED_CODES)
