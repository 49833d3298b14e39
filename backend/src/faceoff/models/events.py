"""Session change events and their JSON wire format.

Events are transient: they exist only on the push channel and are never
stored. ``SignupAdded`` and ``SignupRemoved`` carry enough data for a viewer
to patch its projection; ``TeamsChanged`` and ``SessionReset`` carry nothing
and force a full re-fetch.
"""

import json
from dataclasses import dataclass
from typing import Union

from faceoff.models.participant import Participant


@dataclass(frozen=True)
class SignupAdded:
    participant: Participant

    type = "SIGNUP_ADDED"

    def to_dict(self) -> dict:
        return {"type": self.type, "data": self.participant.to_dict()}


@dataclass(frozen=True)
class SignupRemoved:
    participant_id: int

    type = "SIGNUP_REMOVED"

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.participant_id}


@dataclass(frozen=True)
class TeamsChanged:
    type = "TEAMS_CHANGED"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class SessionReset:
    type = "SESSION_RESET"

    def to_dict(self) -> dict:
        return {"type": self.type}


Event = Union[SignupAdded, SignupRemoved, TeamsChanged, SessionReset]


def encode_event(event: Event) -> str:
    """Serialize an event to a JSON text frame."""
    return json.dumps(event.to_dict())


def event_from_dict(data: dict) -> Event:
    """Parse a decoded wire message into an event.

    Raises:
        ValueError: If the message type is unknown or its payload is malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object, got {type(data).__name__}")

    msg_type = data.get("type")
    if msg_type == SignupAdded.type:
        payload = data.get("data")
        if not isinstance(payload, dict):
            raise ValueError("SIGNUP_ADDED without participant data")
        return SignupAdded(Participant.from_dict(payload))
    if msg_type == SignupRemoved.type:
        try:
            return SignupRemoved(int(data["id"]))
        except (KeyError, TypeError) as e:
            raise ValueError("SIGNUP_REMOVED without a valid id") from e
    if msg_type == TeamsChanged.type:
        return TeamsChanged()
    if msg_type == SessionReset.type:
        return SessionReset()
    raise ValueError(f"Unknown event type: {msg_type!r}")


def decode_event(raw: str) -> Event:
    """Parse a JSON text frame into an event.

    Raises:
        ValueError: If the frame is not valid JSON or not a known event
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON frame: {raw!r}") from e
    return event_from_dict(data)
