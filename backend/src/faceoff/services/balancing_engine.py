"""Team balancing for a signed-up session.

Splits the pool by position, shuffles each position pool uniformly and deals
quota-sized slices to red and then blue. Players beyond ``2 * quota`` for
their position stay unassigned.
"""

import random
from types import MappingProxyType
from typing import Mapping, MutableSequence, Optional, Sequence, TypeVar

from faceoff.models.participant import Participant, Position, Team

T = TypeVar("T")

# Maximum players of each position dealt to one team
TEAM_QUOTAS: Mapping[Position, int] = MappingProxyType({
    Position.GOALIE: 1,
    Position.DEFENSE: 4,
    Position.FORWARD: 6,
})

# Order in which pools are dealt; only affects readability of the result
DEAL_ORDER = (Position.GOALIE, Position.DEFENSE, Position.FORWARD)


def shuffle(items: MutableSequence[T], rng: Optional[random.Random] = None) -> MutableSequence[T]:
    """Shuffle ``items`` in place with a Fisher-Yates pass.

    Every permutation is equally likely as long as ``rng.randrange`` is
    uniform.

    Returns:
        The same sequence, for chaining
    """
    rng = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


def partition_by_position(participants: Sequence[Participant]) -> dict[Position, list[Participant]]:
    """Group participants by position, keeping input order within each pool."""
    pools: dict[Position, list[Participant]] = {position: [] for position in Position}
    for participant in participants:
        pools[participant.position].append(participant)
    return pools


def split(
    participants: Sequence[Participant],
    rng: Optional[random.Random] = None,
) -> Mapping[int, Team]:
    """Produce a fresh red/blue assignment for the given pool.

    Any previous team (including manual overrides) is ignored. The input is
    not modified. The caller is responsible for rejecting pools of fewer
    than two players, storing the result and announcing it.

    Args:
        participants: Current session participants
        rng: Random source; a new ``random.Random`` when omitted

    Returns:
        Read-only mapping of every participant id to its team
    """
    rng = rng or random.Random()
    assignment: dict[int, Team] = {p.id: Team.UNASSIGNED for p in participants}

    pools = partition_by_position(participants)
    for position in DEAL_ORDER:
        quota = TEAM_QUOTAS[position]
        pool = shuffle(list(pools[position]), rng)
        for p in pool[:quota]:
            assignment[p.id] = Team.RED
        for p in pool[quota:2 * quota]:
            assignment[p.id] = Team.BLUE

    return MappingProxyType(assignment)


def expected_assigned(participants: Sequence[Participant]) -> int:
    """Number of players a split of this pool puts on a team."""
    pools = partition_by_position(participants)
    return sum(min(len(pools[pos]), 2 * quota) for pos, quota in TEAM_QUOTAS.items())


def next_team(team: Team) -> Team:
    """Manual override cycle: unassigned -> red -> blue -> unassigned."""
    if team == Team.UNASSIGNED:
        return Team.RED
    if team == Team.RED:
        return Team.BLUE
    return Team.UNASSIGNED
