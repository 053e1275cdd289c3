from __future__ import annotations

import logging
from typing import List, Optional, Union

from tennis_scoring.config import SET_GAMES_TO_WIN, WIN_MARGIN
from tennis_scoring.game import Game, Tiebreak
from tennis_scoring.models import REGULAR, Point, Server
from tennis_scoring.serving import ServingRotation


LOGGER = logging.getLogger(__name__)


class TennisSet:
    """
    One set: the active game (or tiebreak), completed games and the games score.

    Responsibilities:
    - Forward points to the active unit
    - Archive won games and open the next one with the next server
    - Open a tiebreak at 6-6
    - Step back across game and tiebreak boundaries on undo
    """

    def __init__(self, rotation: ServingRotation, first_server_index: int):
        self.rotation = rotation
        self.score: List[int] = [0, 0]
        self.game: Optional[Game] = self._new_game(first_server_index)
        self.games: List[Game] = []
        self.tiebreak: Optional[Tiebreak] = None
        self.winner: Optional[int] = None

    # =========================================================
    # PUBLIC API
    # =========================================================

    @property
    def active_unit(self) -> Union[Game, Tiebreak]:
        if self.tiebreak is not None:
            return self.tiebreak
        assert self.game is not None, "set has neither a game nor a tiebreak"
        return self.game

    @property
    def server(self) -> Server:
        return self.active_unit.server

    @property
    def next_set_server_index(self) -> int:
        """Rotation index that opens the following set."""
        if self.tiebreak is not None:
            return self.rotation.next_index(self.tiebreak.rotation_index)
        # The pending game already carries the next server
        return self.game.rotation_index

    @property
    def is_empty(self) -> bool:
        return not self.games and self.tiebreak is None and not self.active_unit.points

    def score_point(
        self,
        winner: int,
        outcome: str = REGULAR,
        fault: int = 0,
        scoring_player: Optional[str] = None,
    ) -> int:
        if self.winner:
            return 0

        scored = self.active_unit.score_point(winner, outcome, fault, scoring_player)
        self.update_set()
        return scored

    def remove_point(self) -> Optional[Point]:
        """
        Undo the last point of the set.

        Crossing a boundary (empty tiebreak, empty game) restores the
        previous game first, then removes its last point.
        """
        removed = None

        while removed is None:
            if self.tiebreak is not None:
                if self.tiebreak.points:
                    had_winner = self.tiebreak.winner
                    removed = self.tiebreak.remove_point()
                    if had_winner and not self.tiebreak.winner:
                        self.score[had_winner - 1] -= 1
                    continue

                LOGGER.debug("Undo crosses tiebreak start")
                self.tiebreak = None
                self._restore_last_game()
                continue

            if not self.game.points and self.games:
                LOGGER.debug("Undo crosses game boundary")
                self._restore_last_game()
                continue

            removed = self.game.remove_point()
            break

        self.update_set()
        return removed

    def update_set(self):
        if self.tiebreak is not None:
            if self.tiebreak.winner:
                # Count the tiebreak game once, however often this runs
                if not self.winner:
                    self.score[self.tiebreak.winner - 1] += 1
                self.winner = self.tiebreak.winner
            else:
                self.winner = None
            return

        if self.game.winner:
            finished = self.game
            self.score[finished.winner - 1] += 1
            self.games.append(finished)
            next_index = self.rotation.next_index(finished.rotation_index)
            self.game = self._new_game(next_index)
            LOGGER.debug("Game won by %s, games %s", finished.winner, self.score)

            if self._is_tiebreak_score():
                self.tiebreak = Tiebreak(self.rotation, next_index)
                self.game = None
                LOGGER.debug("Tiebreak started")

        self.winner = self._standard_winner()

    # =========================================================
    # INTERNALS
    # =========================================================

    def _new_game(self, rotation_index: int) -> Game:
        return Game(self.rotation.server_at(rotation_index), rotation_index)

    def _restore_last_game(self):
        assert self.games, "no completed game to restore"
        self.game = self.games.pop()
        assert self.game.winner, "archived game has no winner"
        self.score[self.game.winner - 1] -= 1

    def _is_tiebreak_score(self) -> bool:
        return self.score[0] == SET_GAMES_TO_WIN and self.score[1] == SET_GAMES_TO_WIN

    def _standard_winner(self) -> Optional[int]:
        a, b = self.score
        if a >= SET_GAMES_TO_WIN and a - b >= WIN_MARGIN:
            return 1
        if b >= SET_GAMES_TO_WIN and b - a >= WIN_MARGIN:
            return 2
        return None

    def all_points(self) -> List[Point]:
        points: List[Point] = []
        for g in self.games:
            points.extend(g.points)
        if self.tiebreak is not None:
            points.extend(self.tiebreak.points)
        elif self.game is not None:
            points.extend(self.game.points)
        return points
