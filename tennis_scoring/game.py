from __future__ import annotations

from typing import List, Optional, Union

from tennis_scoring.config import GAME_POINTS_TO_WIN, TIEBREAK_POINTS_TO_WIN, WIN_MARGIN
from tennis_scoring.models import (
    AD_IN,
    AD_OUT,
    DEUCE,
    NO_SCORE,
    REGULAR,
    Point,
    Server,
)
from tennis_scoring.serving import ServingRotation


SCORE_NAMES = {0: 0, 1: 15, 2: 30, 3: 40}

DisplayValue = Union[int, str]


def _leader_and_loser(score: List[int]):
    if score[1] > score[0]:
        return 2, 1
    return 1, 2


class Game:
    """
    A standard (non-tiebreak) game.

    The server is fixed for the lifetime of the game.
    """

    def __init__(self, server: Server, rotation_index: int):
        self.server = server
        self.rotation_index = rotation_index
        self.raw_score: List[int] = [0, 0]
        self.display_score: List[DisplayValue] = [0, 0]
        self.winner: Optional[int] = None
        self.points: List[Point] = []

    def score_point(
        self,
        winner: int,
        outcome: str = REGULAR,
        fault: int = 0,
        scoring_player: Optional[str] = None,
    ) -> int:
        if self.winner:
            return 0

        self.points.append(Point(winner, outcome, fault, self.server, scoring_player))
        self.raw_score[winner - 1] += 1
        self._update_game()
        return 1

    def remove_point(self) -> Optional[Point]:
        if not self.points:
            return None

        point = self.points.pop()
        self.raw_score[point.winner - 1] -= 1
        self._update_game()
        return point

    def _update_game(self):
        self.winner = None
        leader, loser = _leader_and_loser(self.raw_score)
        lead = self.raw_score[leader - 1]
        trail = self.raw_score[loser - 1]

        if lead == GAME_POINTS_TO_WIN - 1 and trail == lead:
            self.display_score = [DEUCE, DEUCE]
            return

        if lead < GAME_POINTS_TO_WIN:
            self.display_score[leader - 1] = SCORE_NAMES[lead]
            self.display_score[loser - 1] = SCORE_NAMES[trail]
            return

        self.display_score = [NO_SCORE, NO_SCORE]
        if lead - trail >= WIN_MARGIN:
            self.winner = leader
        elif lead == trail:
            self.display_score = [DEUCE, DEUCE]
        else:
            # Advantage is named from the server's point of view
            self.display_score[leader - 1] = AD_IN if leader == self.server.slot else AD_OUT

    @property
    def is_break_point(self) -> bool:
        """Receiver is one point from winning the game against serve."""
        receiver = 2 if self.server.slot == 1 else 1
        rec = self.raw_score[receiver - 1]
        srv = self.raw_score[self.server.slot - 1]
        return self.winner is None and rec >= GAME_POINTS_TO_WIN - 1 and rec > srv


class Tiebreak:
    """
    First to 7 points, win by 2.

    The serve changes after the first point and then after every two
    points. The current server is always derived from the number of points
    played, so removing points never needs to unwind rotation steps.
    """

    def __init__(self, rotation: ServingRotation, start_index: int):
        self.rotation = rotation
        self.start_index = start_index
        self.score: List[int] = [0, 0]
        self.winner: Optional[int] = None
        self.points: List[Point] = []

    @property
    def rotation_index(self) -> int:
        played = len(self.points)
        switches = (played + 1) // 2
        return self.rotation.next_index(self.start_index, switches)

    @property
    def server(self) -> Server:
        return self.rotation.server_at(self.rotation_index)

    @property
    def display_score(self) -> List[DisplayValue]:
        return list(self.score)

    def score_point(
        self,
        winner: int,
        outcome: str = REGULAR,
        fault: int = 0,
        scoring_player: Optional[str] = None,
    ) -> int:
        if self.winner:
            return 0

        self.points.append(Point(winner, outcome, fault, self.server, scoring_player))
        self.score[winner - 1] += 1
        self._update_tiebreak()
        return 1

    def remove_point(self) -> Optional[Point]:
        if not self.points:
            return None

        point = self.points.pop()
        self.score[point.winner - 1] -= 1
        self._update_tiebreak()
        return point

    def _update_tiebreak(self):
        self.winner = None
        leader, loser = _leader_and_loser(self.score)

        if (
            self.score[leader - 1] >= TIEBREAK_POINTS_TO_WIN
            and self.score[leader - 1] - self.score[loser - 1] >= WIN_MARGIN
        ):
            self.winner = leader
