"""
Participant construction for callers that start from plain names.

Accepts a name (singles), a pair of names (doubles), or a config dict
like {"name": ..., "id": ...} / {"players": {"a": {...}, "b": {...}}}.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, Sequence, Tuple, Union

from tennis_scoring.exceptions import MatchValidationError, ParticipantMismatchError
from tennis_scoring.models import Participant, TeamPlayer, TeamPlayers


ParticipantInput = Union[str, Sequence[str], Dict[str, Any], Participant]


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


def create_singles_player(name: str, player_id: str = None) -> Participant:
    if not name:
        raise MatchValidationError("Player must have a name")
    return Participant(id=player_id or generate_id("player"), name=name, type="single")


def create_doubles_team(
    player_a: Dict[str, Any],
    player_b: Dict[str, Any],
    name: str = None,
    team_id: str = None,
) -> Participant:
    for p in (player_a, player_b):
        if not p or not p.get("name"):
            raise MatchValidationError("All players must have names")

    players = TeamPlayers(
        a=TeamPlayer(id=player_a.get("id") or generate_id("teamplayer"), name=player_a["name"]),
        b=TeamPlayer(id=player_b.get("id") or generate_id("teamplayer"), name=player_b["name"]),
    )

    return Participant(
        id=team_id or generate_id("team"),
        name=name or f"{players.a.name}/{players.b.name}",
        type="team",
        players=players,
    )


def create_participant(value: ParticipantInput) -> Participant:
    if isinstance(value, Participant):
        return value

    if isinstance(value, str):
        return create_singles_player(value)

    if isinstance(value, dict):
        if "players" in value:
            return create_doubles_team(
                value["players"].get("a"),
                value["players"].get("b"),
                name=value.get("name"),
                team_id=value.get("id"),
            )
        return create_singles_player(value.get("name"), value.get("id"))

    names = list(value)
    if len(names) != 2:
        raise MatchValidationError("A doubles team needs exactly two player names")
    return create_doubles_team({"name": names[0]}, {"name": names[1]})


def create_match_participants(
    participant1: ParticipantInput,
    participant2: ParticipantInput,
) -> Tuple[Participant, Participant]:
    p1 = create_participant(participant1)
    p2 = create_participant(participant2)

    validate_participants(p1, p2)
    return p1, p2


def validate_participants(p1: Participant, p2: Participant):
    if p1.type != p2.type:
        raise ParticipantMismatchError(
            "Both participants must be of the same type (singles or doubles)"
        )

    for p in (p1, p2):
        if p.is_team and p.players is None:
            raise MatchValidationError(f"Team {p.id} has no players")

    ids = [p1.id, p2.id]
    if p1.is_team:
        ids += list(p1.player_ids()) + list(p2.player_ids())
    if len(set(ids)) != len(ids):
        raise MatchValidationError("Participant and player ids must be unique")


def abbreviated_name(participant: Participant) -> str:
    if participant.players is None:
        parts = participant.name.split(" ")
        if len(parts) > 1:
            return parts[-1]
        return participant.name[:3].upper()

    initials = [
        "".join(part[0] for part in p.name.split(" ") if part)
        for p in (participant.players.a, participant.players.b)
    ]
    return "/".join(initials)
