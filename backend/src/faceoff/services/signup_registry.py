"""Authoritative registry of the current session.

Single writer: every mutation runs under one ``asyncio.Lock``, validates
before touching storage, and announces itself through the broadcaster only
after it has been applied. A rejected mutation changes nothing and emits
nothing.
"""

import asyncio
import logging
import random
from typing import Optional

from faceoff.models.events import SessionReset, SignupAdded, SignupRemoved, TeamsChanged
from faceoff.models.participant import Participant, Position, RosterEntry, Team
from faceoff.repositories.session_repository import SessionRepository
from faceoff.services import balancing_engine
from faceoff.services.change_broadcaster import ChangeBroadcaster
from faceoff.services.errors import (
    CapacityExceeded,
    DuplicateSignup,
    InsufficientPlayers,
    ParticipantNotFound,
)

logger = logging.getLogger(__name__)

MAX_CAPACITY = 22
DEFAULT_CAPACITY = MAX_CAPACITY
MIN_PLAYERS_FOR_SPLIT = 2


class SignupRegistry:
    """Current-session participants plus the roster they sign up from."""

    def __init__(
        self,
        repository: SessionRepository,
        broadcaster: ChangeBroadcaster,
        capacity: int = DEFAULT_CAPACITY,
        split_delay_seconds: float = 0.0,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the registry.

        Args:
            repository: Storage for roster and session rows
            broadcaster: Receives one event per applied mutation
            capacity: Maximum participants per session
            split_delay_seconds: Cosmetic pause before a split is computed
            rng: Random source for splits (seed it for reproducible tests)
        """
        if not MIN_PLAYERS_FOR_SPLIT <= capacity <= MAX_CAPACITY:
            raise ValueError(
                f"capacity must be between {MIN_PLAYERS_FOR_SPLIT} and {MAX_CAPACITY}, got {capacity}"
            )
        self.repository = repository
        self.broadcaster = broadcaster
        self.capacity = capacity
        self.split_delay_seconds = split_delay_seconds
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()

    # Reads

    def list_session(self) -> list[Participant]:
        return self.repository.list_participants()

    def list_roster(self) -> list[RosterEntry]:
        return self.repository.list_roster()

    def add_roster_entry(self, name: str, position: Position) -> RosterEntry:
        """Add a known player. The roster is not part of the session, so no event."""
        entry = self.repository.add_roster_entry(name, position)
        logger.info(f"Roster entry added: {entry.name} ({entry.position.value})")
        return entry

    # Mutations

    async def signup(self, name: str, position: Position) -> Participant:
        """Sign a player up for the current session.

        The duplicate check and the insert happen under the registry lock, so
        two concurrent signups for one name cannot both succeed.

        Raises:
            DuplicateSignup: If the name is already in the session
            CapacityExceeded: If the session is full
        """
        async with self._lock:
            if self.repository.find_participant_by_name(name) is not None:
                logger.warning(f"Rejected signup for {name}: already signed up")
                raise DuplicateSignup(name)
            if self.repository.count_participants() >= self.capacity:
                logger.warning(f"Rejected signup for {name}: session full")
                raise CapacityExceeded(self.capacity)

            participant = self.repository.insert_participant(name, position)
            logger.info(f"Signed up {participant.name} as {participant.position.value} (id={participant.id})")
            self.broadcaster.broadcast(SignupAdded(participant))
            return participant

    async def remove(self, participant_id: int) -> bool:
        """Remove a signup if present.

        The removal is announced either way; viewers ignore unknown ids.

        Returns:
            True if a participant was removed
        """
        async with self._lock:
            removed = self.repository.delete_participant(participant_id)
            if removed:
                logger.info(f"Removed participant {participant_id}")
            self.broadcaster.broadcast(SignupRemoved(participant_id))
            return removed

    async def split(self) -> list[Participant]:
        """Balance the whole session into red and blue.

        The optional delay runs before the lock is taken, so it never holds
        up other mutations and the split always uses the pool as it is when
        the lock is acquired.

        Raises:
            InsufficientPlayers: If fewer than two players are signed up

        Returns:
            Participants with their new teams, in signup order
        """
        # Fail fast so an undersized split does not sit through the delay;
        # the authoritative check runs again under the lock.
        count = self.repository.count_participants()
        if count < MIN_PLAYERS_FOR_SPLIT:
            raise InsufficientPlayers(count, MIN_PLAYERS_FOR_SPLIT)

        if self.split_delay_seconds > 0:
            await asyncio.sleep(self.split_delay_seconds)

        async with self._lock:
            participants = self.repository.list_participants()
            if len(participants) < MIN_PLAYERS_FOR_SPLIT:
                logger.warning(f"Rejected split: only {len(participants)} players")
                raise InsufficientPlayers(len(participants), MIN_PLAYERS_FOR_SPLIT)

            assignment = balancing_engine.split(participants, self._rng)
            self.repository.apply_assignment(assignment)

            result = [
                Participant(id=p.id, name=p.name, position=p.position, team=assignment[p.id])
                for p in participants
            ]
            red = sum(1 for p in result if p.team == Team.RED)
            blue = sum(1 for p in result if p.team == Team.BLUE)
            logger.info(f"Split {len(result)} players: red={red} blue={blue} unassigned={len(result) - red - blue}")
            self.broadcaster.broadcast(TeamsChanged())
            return result

    async def override(self, participant_id: int, team: Optional[Team] = None) -> Participant:
        """Manually move one participant.

        Without ``team`` the participant advances one step through
        unassigned -> red -> blue -> unassigned. No other participant changes.

        Raises:
            ParticipantNotFound: If the id is not in the session
        """
        async with self._lock:
            current = self.repository.get_participant(participant_id)
            if current is None:
                raise ParticipantNotFound(participant_id)

            new_team = team if team is not None else balancing_engine.next_team(current.team)
            self.repository.set_team(participant_id, new_team)
            logger.info(f"Override: {current.name} {current.team.value} -> {new_team.value}")
            self.broadcaster.broadcast(TeamsChanged())
            return Participant(
                id=current.id, name=current.name, position=current.position, team=new_team
            )

    async def reset(self) -> int:
        """Clear the session. Always emits ``SessionReset``, even when empty.

        Returns:
            Number of participants removed
        """
        async with self._lock:
            removed = self.repository.clear_session()
            logger.info(f"Session reset ({removed} participants cleared)")
            self.broadcaster.broadcast(SessionReset())
            return removed
