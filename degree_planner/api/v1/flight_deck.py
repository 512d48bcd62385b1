from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body

from degree_planner.api.deps import CurrentUserDep, DBSessionDep, SettingsDep
from degree_planner.schemas.flight_deck import FlightDeckResult, PlanFlightDeckRequest
from degree_planner.services import flight_deck
from degree_planner.services.flight_deck_service import get_flight_deck_for_plan

router = APIRouter(prefix="/flight-deck", tags=["flight-deck"])


@router.post("/calculate", response_model=FlightDeckResult)
async def calculate_flight_deck(payload: dict[str, Any] = Body(...)):
    # Validated by the engine so errors carry per-field detail
    return flight_deck.calculate(payload)


@router.post("/plans/{plan_id}", response_model=FlightDeckResult)
async def plan_flight_deck(
    plan_id: UUID,
    data: PlanFlightDeckRequest,
    db: DBSessionDep,
    current_user: CurrentUserDep,
    settings: SettingsDep,
):
    return await get_flight_deck_for_plan(db, current_user.id, plan_id, data, settings=settings)
