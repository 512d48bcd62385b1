from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from degree_planner.db.base import SCHEMA, Base


class ProviderCourse(Base):
    __tablename__ = "provider_catalog"
    __table_args__ = {"schema": SCHEMA}

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    provider: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    course_code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # lower / upper
    est_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_est: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    area_tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
