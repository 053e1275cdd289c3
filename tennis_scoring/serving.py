from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from tennis_scoring.exceptions import MatchValidationError
from tennis_scoring.models import Participant, Server


class ServingRotation:
    """
    Fixed serving order for a match.

    Singles: [side 1, side 2], so advancing by one alternates the server.
    Doubles: four players, default order
        first side a -> other side a -> first side b -> other side b
    The order never changes after construction; units keep an index into it.
    """

    def __init__(self, order: Sequence[Server]):
        if len(order) not in (2, 4):
            raise MatchValidationError("Serving rotation must have 2 or 4 entries")
        self._order: Tuple[Server, ...] = tuple(order)

    # ---------------------------------------------------------
    # Construction
    # ---------------------------------------------------------

    @classmethod
    def for_participants(
        cls,
        p1: Participant,
        p2: Participant,
        first_server: int = 1,
        player_order: Optional[Sequence[str]] = None,
    ) -> "ServingRotation":
        if first_server not in (1, 2):
            raise MatchValidationError("first_server must be 1 or 2")

        sides = {1: p1, 2: p2}
        first = sides[first_server]
        second = sides[2 if first_server == 1 else 1]
        first_slot = first_server
        second_slot = 2 if first_server == 1 else 1

        if not p1.is_team:
            return cls([Server(first_slot, first.id), Server(second_slot, second.id)])

        if player_order is not None:
            return cls._from_player_ids(p1, p2, player_order)

        return cls([
            Server(first_slot, first.players.a.id),
            Server(second_slot, second.players.a.id),
            Server(first_slot, first.players.b.id),
            Server(second_slot, second.players.b.id),
        ])

    @classmethod
    def _from_player_ids(
        cls, p1: Participant, p2: Participant, player_ids: Sequence[str]
    ) -> "ServingRotation":
        slot_of = {pid: 1 for pid in p1.player_ids()}
        slot_of.update({pid: 2 for pid in p2.player_ids()})

        if sorted(player_ids) != sorted(slot_of):
            raise MatchValidationError("Rotation must list each of the four players once")

        order = [Server(slot_of[pid], pid) for pid in player_ids]
        for current, following in zip(order, order[1:]):
            if current.slot == following.slot:
                raise MatchValidationError("Rotation must alternate between teams")

        return cls(order)

    # ---------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._order)

    def server_at(self, index: int) -> Server:
        return self._order[index % len(self._order)]

    def next_index(self, index: int, steps: int = 1) -> int:
        return (index + steps) % len(self._order)

    def index_of(self, player_id: str) -> int:
        for i, server in enumerate(self._order):
            if server.player_id == player_id:
                return i
        raise MatchValidationError(f"Server {player_id} not found in rotation")

    def player_ids(self) -> List[str]:
        return [s.player_id for s in self._order]

    @property
    def is_doubles(self) -> bool:
        return len(self._order) == 4
