from typing import Any, Dict, List
from copy import deepcopy

from tennis_scoring.config import DEFAULT_NUM_SETS
from tennis_scoring.engine import TennisMatch
from tennis_scoring.models import PointEvent
from tennis_scoring.participants import ParticipantInput, create_match_participants


class MatchSession:
    """
    Single local match session.

    Responsibilities:
    - Manage one TennisMatch instance
    - Bulk replay point events (atomic)
    - Keep a summary timeline, one entry per accepted point
    - Export the accepted point events
    """

    def __init__(
        self,
        participant1: ParticipantInput,
        participant2: ParticipantInput,
        num_sets: int = DEFAULT_NUM_SETS,
    ):
        # Participants are fixed so scorer ids stay valid across replays
        self._participants = create_match_participants(participant1, participant2)
        self._num_sets = num_sets
        self._match = self._new_match()
        self._timeline: List[Dict[str, Any]] = []
        self._events: List[PointEvent] = []

    @property
    def match(self) -> TennisMatch:
        return self._match

    # ---------------------------------------------------------
    # Core API
    # ---------------------------------------------------------

    def load_events(self, events: List[Dict]) -> List[Dict[str, Any]]:
        """
        Bulk load point events from list of dicts.
        Atomic: if any event fails -> no state mutation.
        """
        if not isinstance(events, list):
            raise ValueError("events must be a list")

        # Convert first (validation stage)
        point_events = [PointEvent.from_dict(e) for e in events]

        temp_match = self._new_match()
        temp_timeline: List[Dict[str, Any]] = []
        temp_events: List[PointEvent] = []

        for event in point_events:
            if self._play(temp_match, event):
                temp_timeline.append(temp_match.summary())
                temp_events.append(event)

        # Commit only after the whole replay succeeded
        self._match = temp_match
        self._timeline = temp_timeline
        self._events = temp_events

        return deepcopy(self._timeline)

    def score_point(self, event: Dict) -> Dict[str, Any]:
        point = PointEvent.from_dict(event)
        if self._play(self._match, point):
            self._timeline.append(self._match.summary())
            self._events.append(point)
        return self._match.summary()

    def undo(self) -> Dict[str, Any]:
        if self._match.remove_point():
            self._timeline.pop()
            self._events.pop()
        return self._match.summary()

    def get_snapshot(self) -> Dict[str, Any]:
        if not self._timeline:
            raise RuntimeError("No events loaded")

        return deepcopy(self._timeline[-1])

    def get_timeline(self) -> List[Dict[str, Any]]:
        return deepcopy(self._timeline)

    def export_events(self) -> List[Dict]:
        return [e.to_dict() for e in self._events]

    def reset(self):
        self._match = self._new_match()
        self._timeline = []
        self._events = []

    # ---------------------------------------------------------
    # Internals
    # ---------------------------------------------------------

    def _new_match(self) -> TennisMatch:
        p1, p2 = self._participants
        return TennisMatch(p1, p2, num_sets=self._num_sets)

    @staticmethod
    def _play(match: TennisMatch, event: PointEvent) -> bool:
        return match.score_point(
            event.winner,
            event.outcome,
            scorer_id=event.scorer_id,
            is_first_serve=event.is_first_serve,
        )
