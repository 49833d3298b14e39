"""REST endpoints for the durable player roster."""

from typing import Annotated

from fastapi import APIRouter, Request
from pydantic import BaseModel, StringConstraints

from faceoff.models.participant import Position

router = APIRouter(prefix="/api", tags=["roster"])

PlayerName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class AddRosterEntryRequest(BaseModel):
    name: PlayerName
    position: Position


class RosterEntryResponse(BaseModel):
    id: int
    name: str
    position: Position


@router.get("/players", response_model=list[RosterEntryResponse])
async def list_roster(request: Request):
    """List known players, alphabetical by name."""
    registry = request.app.state.registry
    return [entry.to_dict() for entry in registry.list_roster()]


@router.post("/players", response_model=RosterEntryResponse, status_code=201)
async def add_roster_entry(request: Request, body: AddRosterEntryRequest):
    """Add a player to the roster."""
    registry = request.app.state.registry
    return registry.add_roster_entry(body.name, body.position).to_dict()
