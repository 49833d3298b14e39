"""Data models for Faceoff."""

from faceoff.models.participant import Participant, Position, RosterEntry, Team
from faceoff.models.events import (
    Event,
    SessionReset,
    SignupAdded,
    SignupRemoved,
    TeamsChanged,
    decode_event,
    encode_event,
)

__all__ = [
    "Participant",
    "Position",
    "RosterEntry",
    "Team",
    "Event",
    "SessionReset",
    "SignupAdded",
    "SignupRemoved",
    "TeamsChanged",
    "decode_event",
    "encode_event",
]
