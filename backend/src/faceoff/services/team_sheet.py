"""Plain-text team sheet for sharing in group chats."""

from typing import Sequence

from faceoff.models.participant import Participant, Position, Team

SECTION_LABELS = (
    (Position.GOALIE, "Goalie"),
    (Position.DEFENSE, "Defense"),
    (Position.FORWARD, "Forwards"),
)


def _format_team(title: str, players: Sequence[Participant]) -> str:
    lines = [f"*{title} TEAM*"]
    for position, label in SECTION_LABELS:
        names = ", ".join(p.name for p in players if p.position == position)
        lines.append(f"{label}: {names or '-'}")
    return "\n".join(lines)


def format_team_sheet(participants: Sequence[Participant]) -> str:
    """Render red and blue line-ups as shareable text.

    Unassigned players are not listed.
    """
    red = [p for p in participants if p.team == Team.RED]
    blue = [p for p in participants if p.team == Team.BLUE]
    return "\n\n".join([
        "*HOCKEY TEAMS*",
        _format_team("RED", red),
        _format_team("BLUE", blue),
    ])
