"""Viewer-side projection of the session.

``reduce_event`` is pure and tells the caller whether an event could be
applied in place (``Patch``) or whether the projection is now stale and must
be re-fetched (``Invalidate``). ``ViewerStateReducer`` wraps it with the
re-fetch so a viewer only needs a snapshot source and a stream of frames.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

import httpx

from faceoff.models.events import (
    Event,
    SessionReset,
    SignupAdded,
    SignupRemoved,
    TeamsChanged,
    decode_event,
)
from faceoff.models.participant import Participant, Position, RosterEntry, Team
from faceoff.services.errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewerProjection:
    """Read-only copy of the roster and session as one viewer sees them."""

    participants: tuple[Participant, ...] = ()
    roster: tuple[RosterEntry, ...] = ()

    def find(self, participant_id: int) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None


@dataclass(frozen=True)
class Patch:
    """Event applied in place; ``projection`` is current."""

    projection: ViewerProjection


@dataclass(frozen=True)
class Invalidate:
    """Event could not be applied; ``projection`` is stale and needs a fetch."""

    projection: ViewerProjection


ReduceResult = Union[Patch, Invalidate]

SnapshotFetcher = Callable[[], Awaitable[ViewerProjection]]


def reduce_event(projection: ViewerProjection, event: Event) -> ReduceResult:
    """Fold one event into a projection.

    Duplicate adds and removals of unknown ids are no-ops, since a viewer's
    own optimistic updates can race the broadcast.
    """
    if isinstance(event, SignupAdded):
        if projection.find(event.participant.id) is not None:
            return Patch(projection)
        return Patch(replace(projection, participants=projection.participants + (event.participant,)))

    if isinstance(event, SignupRemoved):
        remaining = tuple(p for p in projection.participants if p.id != event.participant_id)
        return Patch(replace(projection, participants=remaining))

    if isinstance(event, TeamsChanged):
        cleared = tuple(replace(p, team=Team.UNASSIGNED) for p in projection.participants)
        return Invalidate(replace(projection, participants=cleared))

    if isinstance(event, SessionReset):
        return Invalidate(replace(projection, participants=()))

    raise TypeError(f"Unsupported event: {event!r}")


class ViewerStateReducer:
    """Keeps one viewer's projection in step with the broadcast stream."""

    def __init__(self, fetch_snapshot: SnapshotFetcher, projection: Optional[ViewerProjection] = None):
        self._fetch_snapshot = fetch_snapshot
        self.projection = projection or ViewerProjection()
        self.stale = False

    async def refresh(self) -> bool:
        """Replace the projection with a full snapshot.

        Returns:
            False if the fetch failed; the old projection is kept and
            marked stale
        """
        try:
            self.projection = await self._fetch_snapshot()
        except TransportFailure as e:
            logger.error(f"Snapshot fetch failed, projection is stale: {e}")
            self.stale = True
            return False
        self.stale = False
        return True

    async def initialize(self) -> bool:
        """Initial full fetch. Connecting to the push channel sends no state."""
        return await self.refresh()

    async def apply(self, event: Event) -> ViewerProjection:
        result = reduce_event(self.projection, event)
        self.projection = result.projection
        if isinstance(result, Invalidate):
            await self.refresh()
        return self.projection

    async def apply_message(self, raw: str) -> ViewerProjection:
        """Decode and apply one wire frame. Malformed frames are logged and skipped."""
        try:
            event = decode_event(raw)
        except ValueError as e:
            logger.warning(f"Ignoring malformed frame: {e}")
            return self.projection
        return await self.apply(event)

    async def consume(self, messages: AsyncIterator[str]) -> ViewerProjection:
        """Apply every frame from ``messages`` until the stream ends."""
        async for raw in messages:
            await self.apply_message(raw)
        return self.projection


@dataclass
class HttpSnapshotFetcher:
    """Fetches roster and session snapshots from the REST API."""

    base_url: str
    timeout: float = 10.0
    _client: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __call__(self) -> ViewerProjection:
        """Fetch both lists.

        Raises:
            TransportFailure: On any connection or HTTP status error, or an
                unparseable body
        """
        client = self._get_client()
        try:
            roster_response = await client.get("/api/players")
            roster_response.raise_for_status()
            session_response = await client.get("/api/current-game")
            session_response.raise_for_status()
            roster = tuple(
                RosterEntry(id=int(r["id"]), name=r["name"], position=Position(r["position"]))
                for r in roster_response.json()
            )
            participants = tuple(Participant.from_dict(p) for p in session_response.json())
        except httpx.HTTPError as e:
            raise TransportFailure(f"Snapshot request failed: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise TransportFailure(f"Invalid snapshot payload: {e}") from e
        return ViewerProjection(participants=participants, roster=roster)
