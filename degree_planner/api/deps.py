from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from degree_planner.core.config import Settings, get_settings
from degree_planner.core.security import CurrentUser, get_current_user
from degree_planner.db.session import get_db

DBSessionDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
