from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from degree_planner.db.base import SCHEMA, Base


class PlanFinancials(Base):
    __tablename__ = "plan_financials"
    __table_args__ = {"schema": SCHEMA}

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    plan_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{SCHEMA}.roadmap_plans.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    pace_months: Mapped[int] = mapped_column(Integer, nullable=False)
    sessions_actual: Mapped[int] = mapped_column(Integer, nullable=False)
    phase1_cost: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    session_cost: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    program_fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    projected_total: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    over_budget: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    overage_reasons: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, default="card")
    upfront_due: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    monthly_payment: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    completion_target: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    monthly_schedule: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    plan: Mapped["RoadmapPlan"] = relationship(back_populates="financials")
