from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from tennis_scoring.config import DEFAULT_NUM_SETS, SCHEMA_VERSION
from tennis_scoring.exceptions import (
    InvalidOutcomeError,
    InvalidSetCountError,
    InvalidWinnerCodeError,
    MatchValidationError,
    SnapshotError,
)
from tennis_scoring.game import Game, Tiebreak
from tennis_scoring.models import (
    DOUBLE_FAULT,
    POINT_OUTCOMES,
    REGULAR,
    SLOTS,
    Participant,
    Point,
    Server,
    other_slot,
)
from tennis_scoring.participants import ParticipantInput, create_match_participants
from tennis_scoring.serving import ServingRotation
from tennis_scoring.stats import StatisticsAggregator
from tennis_scoring.storage import MatchStore
from tennis_scoring.summary import build_match_summary, match_score
from tennis_scoring.tennis_set import TennisSet


LOGGER = logging.getLogger(__name__)


class TennisMatch:
    """
    Point-by-point scoring for a singles or doubles match.

    Responsibilities:
    - Validate configuration (odd set count, same participant type)
    - Drive sets, games and tiebreaks through score_point / remove_point
    - Keep the serving rotation consistent across every boundary
    - Feed the statistics aggregator once per scored point
    - Hand a JSON-compatible snapshot to the store after each mutation
    """

    def __init__(
        self,
        participant1: ParticipantInput,
        participant2: ParticipantInput,
        num_sets: int = DEFAULT_NUM_SETS,
        store: Optional[MatchStore] = None,
        first_server: int = 1,
        serving_rotation: Optional[Sequence[str]] = None,
    ):
        if num_sets <= 0:
            raise InvalidSetCountError("num_sets must be positive")

        if num_sets % 2 == 0:
            raise InvalidSetCountError("Number of sets must be odd")

        p1, p2 = create_match_participants(participant1, participant2)
        if serving_rotation is not None and not p1.is_team:
            raise MatchValidationError("A serving rotation can only be given for doubles")

        self.participants: Dict[int, Participant] = {1: p1, 2: p2}
        self.num_sets = num_sets
        self.store = store

        self.rotation = ServingRotation.for_participants(
            p1, p2, first_server=first_server, player_order=serving_rotation
        )
        self.score: List[int] = [0, 0]
        self.sets: List[TennisSet] = []
        self.set = TennisSet(self.rotation, 0)
        self.winner: Optional[int] = None

        self.stats = StatisticsAggregator([p1, p2])

    # =========================================================
    # PUBLIC API
    # =========================================================

    @property
    def match_type(self) -> str:
        return "doubles" if self.rotation.is_doubles else "singles"

    @property
    def is_finished(self) -> bool:
        return self.winner is not None

    @property
    def current_unit(self):
        return self.set.active_unit

    @property
    def current_server(self) -> Server:
        return self.set.server

    @property
    def current_server_id(self) -> str:
        return self.current_server.player_id

    @property
    def serving_rotation(self) -> Optional[List[str]]:
        if not self.rotation.is_doubles:
            return None
        return self.rotation.player_ids()

    def score_point(
        self,
        winner: int,
        outcome: str = REGULAR,
        scorer_id: Optional[str] = None,
        is_first_serve: Optional[bool] = None,
    ) -> bool:
        """
        Record a point won by side `winner` (1 or 2).

        Returns False without touching state when the match is over.
        """
        self._validate_point(winner, outcome, scorer_id)

        if self.winner:
            LOGGER.warning(
                "Point for side %s ignored: match already won by side %s", winner, self.winner
            )
            return False

        fault = 1 if outcome == DOUBLE_FAULT or is_first_serve is False else 0

        # Captured before the point changes the game
        server = self.current_server
        unit = self.current_unit
        break_point = isinstance(unit, Game) and unit.is_break_point

        self._apply_point(winner, outcome, fault, scorer_id)

        winner_id = self.participants[winner].id
        loser_id = self.participants[other_slot(winner)].id
        receiver_id = self.participants[other_slot(server.slot)].id

        self.stats.record_point(
            winner_id, loser_id, outcome, server.player_id, scorer_id, is_first_serve
        )
        if break_point:
            self.stats.record_break_point(server.player_id, receiver_id, outcome, winner_id)
        if isinstance(unit, Game) and unit.winner:
            self.stats.record_service_game(server.player_id, unit.winner == server.slot)

        self.save()
        return True

    def remove_point(self) -> bool:
        """
        Undo the last point anywhere in the match.

        Never re-declares a match winner; only forward scoring does that.
        """
        if self.set.is_empty and not self.sets:
            return False

        while self.set.is_empty and self.sets:
            previous = self.sets.pop()
            assert previous.winner, "archived set has no winner"
            self.score[previous.winner - 1] -= 1
            self.set = previous
            LOGGER.debug("Undo crosses set boundary, sets %s", self.score)

        self.winner = None
        removed = self.set.remove_point()
        self.save()
        return removed is not None

    def save(self):
        if self.store is None:
            return
        try:
            self.store.save(self.to_dict())
        except Exception:
            LOGGER.exception("Saving match state failed")

    def summary(self) -> Dict[str, Any]:
        return build_match_summary(self)

    def match_score(self, perspective: Optional[int] = None) -> str:
        return match_score(self, perspective)

    # =========================================================
    # VALIDATION
    # =========================================================

    def _validate_point(self, winner: int, outcome: str, scorer_id: Optional[str]):
        if winner not in SLOTS:
            raise InvalidWinnerCodeError(f"Invalid winner: {winner}")

        if outcome not in POINT_OUTCOMES:
            raise InvalidOutcomeError(f"Invalid outcome: {outcome}")

        if scorer_id is not None and self.stats.participant_id_for(scorer_id) is None:
            raise MatchValidationError(f"Unknown scorer: {scorer_id}")

    # =========================================================
    # MATCH LOGIC
    # =========================================================

    def _apply_point(self, winner: int, outcome: str, fault: int, scorer_id: Optional[str]):
        self.set.score_point(winner, outcome, fault, scorer_id)
        self._update_match()

    def _update_match(self):
        if not self.set.winner:
            return

        finished = self.set
        self.score[finished.winner - 1] += 1
        self.sets.append(finished)
        self.set = TennisSet(self.rotation, finished.next_set_server_index)
        LOGGER.debug("Set won by %s, sets %s", finished.winner, self.score)

        leader = 1 if self.score[0] > self.score[1] else 2
        if self.score[leader - 1] > self.num_sets // 2:
            self.winner = leader
            LOGGER.info("Match won by side %s", leader)

    def all_points(self) -> List[Point]:
        points: List[Point] = []
        for s in self.sets:
            points.extend(s.all_points())
        points.extend(self.set.all_points())
        return points

    # =========================================================
    # SNAPSHOT
    # =========================================================

    def to_dict(self) -> Dict[str, Any]:
        unit = self.current_unit
        return {
            "schema_version": SCHEMA_VERSION,
            "config": {
                "match_type": self.match_type,
                "participants": {
                    "1": self.participants[1].to_dict(),
                    "2": self.participants[2].to_dict(),
                },
                "num_sets": self.num_sets,
            },
            "current_set": len(self.sets) + 1,
            "current_game": len(self.set.games) + 1,
            "set_history": [_set_to_dict(s) for s in self.sets],
            "current_set_games": [_game_to_dict(g) for g in self.set.games],
            "current_game_points": [p.to_dict() for p in unit.points],
            "tiebreak": isinstance(unit, Tiebreak),
            "match_winner": self.winner,
            "serving_rotation": self.rotation.player_ids(),
            "current_server_id": self.current_server_id,
            "set_scores": list(self.score),
            "game_scores": list(self.set.score),
            "point_scores": list(unit.display_score),
            "stats": self.stats.to_list(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], store: Optional[MatchStore] = None) -> "TennisMatch":
        """
        Rebuild a match from a snapshot by replaying its points.

        Statistics come from the snapshot, not from the replay.
        """
        try:
            config = data["config"]
            p1 = Participant.from_dict(config["participants"]["1"])
            p2 = Participant.from_dict(config["participants"]["2"])
            num_sets = int(config["num_sets"])
            rotation = data.get("serving_rotation") or []
        except (KeyError, TypeError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e

        first_server = 1
        player_order = None
        if p1.is_team:
            player_order = rotation or None
        elif rotation:
            first_server = 1 if rotation[0] == p1.id else 2

        match = cls(
            p1,
            p2,
            num_sets=num_sets,
            first_server=first_server,
            serving_rotation=player_order,
        )

        points = []
        for s in data.get("set_history", []):
            for g in s.get("games", []):
                points.extend(g["points"])
            if s.get("tiebreak"):
                points.extend(s["tiebreak"]["points"])
        for g in data.get("current_set_games", []):
            points.extend(g["points"])
        points.extend(data.get("current_game_points", []))

        for raw in points:
            try:
                point = Point.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                raise SnapshotError(f"Malformed point: {e}") from e
            if point.winner not in SLOTS:
                raise SnapshotError(f"Invalid winner in snapshot: {point.winner}")
            if match.winner:
                raise SnapshotError("Snapshot has points after the match was won")
            match._apply_point(point.winner, point.outcome, point.fault, point.scoring_player)

        if match.score != list(data.get("set_scores", match.score)) or match.set.score != list(
            data.get("game_scores", match.set.score)
        ):
            raise SnapshotError("Replayed score does not match the snapshot")

        if data.get("stats"):
            try:
                match.stats.restore(data["stats"])
            except (KeyError, TypeError, ValueError) as e:
                raise SnapshotError(f"Malformed stats: {e}") from e

        match.store = store
        return match

    @classmethod
    def load(cls, store: MatchStore) -> Optional["TennisMatch"]:
        data = store.load()
        if not data:
            return None
        return cls.from_dict(data, store=store)


def _game_to_dict(game: Game) -> Dict[str, Any]:
    return {
        "winner": game.winner,
        "server": game.server.player_id,
        "score": list(game.display_score),
        "points": [p.to_dict() for p in game.points],
    }


def _set_to_dict(tennis_set: TennisSet) -> Dict[str, Any]:
    d = {
        "winner": tennis_set.winner,
        "score": list(tennis_set.score),
        "games": [_game_to_dict(g) for g in tennis_set.games],
    }
    if tennis_set.tiebreak is not None:
        d["tiebreak"] = {
            "winner": tennis_set.tiebreak.winner,
            "score": list(tennis_set.tiebreak.score),
            "points": [p.to_dict() for p in tennis_set.tiebreak.points],
        }
    return d
