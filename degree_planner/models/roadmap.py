from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from degree_planner.db.base import SCHEMA, Base

PLAN_STATUS_ENUM = ("draft", "active", "archived")
STEP_ITEM_TYPES = ("provider_course", "in_residence_session")


class RoadmapPlan(Base):
    __tablename__ = "roadmap_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "template_id", name="uq_roadmap_plans_user_template"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in PLAN_STATUS_ENUM) + ")",
            name="ck_roadmap_plans_status",
        ),
        {"schema": SCHEMA},
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    template_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{SCHEMA}.degree_templates.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    total_remaining_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    est_cost: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    est_months: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    steps: Mapped[List["RoadmapStep"]] = relationship(
        back_populates="plan",
        cascade="all,delete-orphan",
        passive_deletes=True,
        order_by="RoadmapStep.step_index",
    )
    financials: Mapped[Optional["PlanFinancials"]] = relationship(
        back_populates="plan", cascade="all,delete-orphan", passive_deletes=True
    )


class RoadmapStep(Base):
    __tablename__ = "roadmap_steps"
    __table_args__ = (
        UniqueConstraint("plan_id", "step_index", name="uq_roadmap_steps_plan_index"),
        CheckConstraint("step_index > 0", name="ck_roadmap_steps_index_positive"),
        CheckConstraint(
            "item_type IN (" + ", ".join(f"'{t}'" for t in STEP_ITEM_TYPES) + ")",
            name="ck_roadmap_steps_item_type",
        ),
        {"schema": SCHEMA},
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    plan_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{SCHEMA}.roadmap_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    step_index: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)
    ref_code: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    est_cost: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    est_weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    plan: Mapped["RoadmapPlan"] = relationship(back_populates="steps")
