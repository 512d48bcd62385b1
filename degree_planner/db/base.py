from sqlalchemy.orm import DeclarativeBase

SCHEMA = "stud_hub_schema"


class Base(DeclarativeBase):
    pass
