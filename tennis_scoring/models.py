from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional, Tuple


Slot = Literal[1, 2]
ParticipantType = Literal["single", "team"]

PointOutcome = Literal[
    "ace",
    "double_fault",
    "service_winner",
    "return_winner",
    "winner",
    "unforced_error",
    "forced_error",
    "regular",
]

ACE = "ace"
DOUBLE_FAULT = "double_fault"
SERVICE_WINNER = "service_winner"
RETURN_WINNER = "return_winner"
WINNER = "winner"
UNFORCED_ERROR = "unforced_error"
FORCED_ERROR = "forced_error"
REGULAR = "regular"

POINT_OUTCOMES: Tuple[str, ...] = (
    ACE,
    DOUBLE_FAULT,
    SERVICE_WINNER,
    RETURN_WINNER,
    WINNER,
    UNFORCED_ERROR,
    FORCED_ERROR,
    REGULAR,
)

SLOTS: Tuple[int, int] = (1, 2)

# Display symbols for a standard game
DEUCE = "DEUCE"
AD_IN = "AD-IN"
AD_OUT = "AD-OUT"
NO_SCORE = "-"


def other_slot(slot: int) -> int:
    return 2 if slot == 1 else 1


# =============================================================================
# Participants
# =============================================================================

@dataclass(frozen=True)
class TeamPlayer:
    id: str
    name: str


@dataclass(frozen=True)
class TeamPlayers:
    a: TeamPlayer
    b: TeamPlayer

    def ids(self) -> Tuple[str, str]:
        return self.a.id, self.b.id


@dataclass(frozen=True)
class Participant:
    """
    One side of a match: a single player or a doubles pair.

    The scoring core only reads `id`, `type` and `players`.
    """
    id: str
    name: str
    type: ParticipantType
    players: Optional[TeamPlayers] = None

    @property
    def is_team(self) -> bool:
        return self.type == "team"

    def player_ids(self) -> Tuple[str, ...]:
        if self.players is None:
            return (self.id,)
        return self.players.ids()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.players is None:
            d.pop("players")
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Participant":
        players = None
        if d.get("players"):
            players = TeamPlayers(
                a=TeamPlayer(id=str(d["players"]["a"]["id"]), name=str(d["players"]["a"]["name"])),
                b=TeamPlayer(id=str(d["players"]["b"]["id"]), name=str(d["players"]["b"]["name"])),
            )
        return Participant(
            id=str(d["id"]),
            name=str(d["name"]),
            type=str(d["type"]),  # type: ignore
            players=players,
        )


@dataclass(frozen=True)
class Server:
    """
    Who serves: the side (slot) and the individual player.

    For singles `player_id` is the participant id.
    """
    slot: Slot
    player_id: str


# =============================================================================
# Point
# =============================================================================

@dataclass(frozen=True)
class Point:
    winner: Slot
    outcome: PointOutcome
    fault: int
    server: Server
    scoring_player: Optional[str] = None

    def __post_init__(self):
        # A double fault always follows a fault
        if self.outcome == DOUBLE_FAULT and self.fault != 1:
            object.__setattr__(self, "fault", 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "outcome": self.outcome,
            "fault": self.fault,
            "server": self.server.player_id,
            "server_slot": self.server.slot,
            "scoring_player": self.scoring_player,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Point":
        return Point(
            winner=int(d["winner"]),
            outcome=str(d["outcome"]),
            fault=int(d.get("fault", 0)),
            server=Server(slot=int(d["server_slot"]), player_id=str(d["server"])),
            scoring_player=d.get("scoring_player"),
        )


@dataclass(frozen=True)
class PointEvent:
    """Caller-side description of a point, as fed to a replay session."""
    winner: Slot
    outcome: PointOutcome = REGULAR
    scorer_id: Optional[str] = None
    is_first_serve: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PointEvent":
        if "winner" not in d:
            raise ValueError("invalid event format")
        first = d.get("is_first_serve")
        return PointEvent(
            winner=int(d["winner"]),
            outcome=str(d.get("outcome", REGULAR)),
            scorer_id=d.get("scorer_id"),
            is_first_serve=(bool(first) if first is not None else None),
        )
