"""REST endpoints for the current session.

Every mutation goes through the SignupRegistry, which serializes it and
broadcasts the resulting event. Registry errors become HTTP errors here and
are never broadcast.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from faceoff.api.routes.roster import PlayerName
from faceoff.models.participant import Position, Team
from faceoff.services.errors import FaceoffError
from faceoff.services.signup_registry import SignupRegistry
from faceoff.services.team_sheet import format_team_sheet

router = APIRouter(prefix="/api/current-game", tags=["session"])


class SignupRequest(BaseModel):
    name: PlayerName
    position: Position


class RemoveSignupRequest(BaseModel):
    id: int


class OverrideRequest(BaseModel):
    """Single-participant override. Omit ``team`` to advance one step."""

    id: int
    team: Optional[Team] = None


class ParticipantResponse(BaseModel):
    id: int
    name: str
    position: Position
    team: Team


class SplitResponse(BaseModel):
    participants: list[ParticipantResponse]


def _registry(request: Request) -> SignupRegistry:
    return request.app.state.registry


def _http_error(e: FaceoffError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=list[ParticipantResponse])
async def list_session(request: Request):
    """Current participants in signup order."""
    return [p.to_dict() for p in _registry(request).list_session()]


@router.post("/signup", response_model=ParticipantResponse, status_code=201)
async def signup(request: Request, body: SignupRequest):
    """Sign a player up. Emits SIGNUP_ADDED."""
    try:
        participant = await _registry(request).signup(body.name, body.position)
    except FaceoffError as e:
        raise _http_error(e)
    return participant.to_dict()


@router.post("/remove")
async def remove_signup(request: Request, body: RemoveSignupRequest):
    """Remove a signup if present. Emits SIGNUP_REMOVED."""
    removed = await _registry(request).remove(body.id)
    return {"success": True, "removed": removed}


@router.post("/split", response_model=SplitResponse)
async def split_teams(request: Request):
    """Draw balanced teams from the whole session. Emits TEAMS_CHANGED."""
    try:
        participants = await _registry(request).split()
    except FaceoffError as e:
        raise _http_error(e)
    return {"participants": [p.to_dict() for p in participants]}


@router.post("/override", response_model=ParticipantResponse)
async def override_team(request: Request, body: OverrideRequest):
    """Move one participant to another team. Emits TEAMS_CHANGED."""
    try:
        participant = await _registry(request).override(body.id, body.team)
    except FaceoffError as e:
        raise _http_error(e)
    return participant.to_dict()


@router.post("/reset")
async def reset_session(request: Request):
    """Clear the session. Emits SESSION_RESET."""
    removed = await _registry(request).reset()
    return {"success": True, "removed": removed}


@router.get("/summary", response_class=PlainTextResponse)
async def team_sheet(request: Request):
    """Shareable text line-up of both teams."""
    return format_team_sheet(_registry(request).list_session())
