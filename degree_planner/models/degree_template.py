from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from degree_planner.db.base import SCHEMA, Base


# ---------------- Degree Templates ----------------
class DegreeTemplate(Base):
    __tablename__ = "degree_templates"
    __table_args__ = {"schema": SCHEMA}

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    university: Mapped[str] = mapped_column(String(255), nullable=False)
    degree_name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=120)
    min_upper_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    residency_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    capstone_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    requirements: Mapped[List["RequirementArea"]] = relationship(
        back_populates="template", cascade="all,delete-orphan"
    )


# ---------------- Requirement Areas ----------------
class RequirementArea(Base):
    __tablename__ = "degree_requirements"
    __table_args__ = {"schema": SCHEMA}

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    template_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{SCHEMA}.degree_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    area_code: Mapped[str] = mapped_column(String(64), nullable=False)
    area_name: Mapped[str] = mapped_column(String(255), nullable=False)
    required_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    template: Mapped["DegreeTemplate"] = relationship(back_populates="requirements")
    mappings: Mapped[List["RequirementMapping"]] = relationship(
        back_populates="requirement", cascade="all,delete-orphan"
    )


# ---------------- Requirement Mappings (articulation rules) ----------------
class RequirementMapping(Base):
    __tablename__ = "requirement_mappings"
    __table_args__ = {"schema": SCHEMA}

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    requirement_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{SCHEMA}.degree_requirements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_code_pattern: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title_keywords: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    provider_filter: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    fulfills_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    level: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # lower / upper
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    requirement: Mapped["RequirementArea"] = relationship(back_populates="mappings")
