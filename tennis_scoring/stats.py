"""
Per-participant statistics, updated once per scored point.

Doubles teams keep a team aggregate plus one nested record per player.
A player record only receives points attributed to that player, so the
team record equals the sum of its players plus unattributed events.
"""
from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from tennis_scoring.models import (
    ACE,
    DOUBLE_FAULT,
    FORCED_ERROR,
    RETURN_WINNER,
    SERVICE_WINNER,
    UNFORCED_ERROR,
    WINNER,
    Participant,
)


@dataclass
class ServingStats:
    aces: int = 0
    double_faults: int = 0
    service_winners: int = 0
    first_serve_in: int = 0
    first_serve_total: int = 0
    second_serve_in: int = 0
    second_serve_total: int = 0
    points_won_on_first_serve: int = 0
    points_won_on_second_serve: int = 0
    service_games_played: int = 0
    service_games_won: int = 0
    break_points_saved: int = 0
    break_points_faced: int = 0


@dataclass
class ReturningStats:
    return_winners: int = 0
    return_errors: int = 0
    break_points_won: int = 0
    break_points_played: int = 0
    points_won_on_return: int = 0
    return_games_played: int = 0
    first_serve_return_points_won: int = 0
    first_serve_return_points_played: int = 0
    second_serve_return_points_won: int = 0
    second_serve_return_points_played: int = 0


@dataclass
class RallyStats:
    winners: int = 0
    unforced_errors: int = 0
    forced_errors: int = 0
    net_points_won: int = 0
    net_points_played: int = 0
    baseline_points_won: int = 0
    baseline_points_played: int = 0


@dataclass
class ParticipantStats:
    points_won: int = 0
    points_played: int = 0
    serving: ServingStats = field(default_factory=ServingStats)
    returning: ReturningStats = field(default_factory=ReturningStats)
    rally: RallyStats = field(default_factory=RallyStats)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ParticipantStats":
        return ParticipantStats(
            points_won=int(d.get("points_won", 0)),
            points_played=int(d.get("points_played", 0)),
            serving=ServingStats(**d.get("serving", {})),
            returning=ReturningStats(**d.get("returning", {})),
            rally=RallyStats(**d.get("rally", {})),
        )


@dataclass
class TeamStats(ParticipantStats):
    player_stats: Dict[str, ParticipantStats] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TeamStats":
        base = ParticipantStats.from_dict(d)
        return TeamStats(
            points_won=base.points_won,
            points_played=base.points_played,
            serving=base.serving,
            returning=base.returning,
            rally=base.rally,
            player_stats={
                pid: ParticipantStats.from_dict(s)
                for pid, s in (d.get("player_stats") or {}).items()
            },
        )


AnyStats = Union[ParticipantStats, TeamStats]

BUCKETS = ("serving", "returning", "rally")


# =============================================================================
# Pure update rules
# =============================================================================

def update_stats(
    stats: ParticipantStats,
    outcome: str,
    won: bool,
    is_serving: bool,
    is_first_serve: Optional[bool] = None,
):
    """Apply one point to a record in place."""
    stats.points_played += 1
    if won:
        stats.points_won += 1

    if is_serving:
        _update_serving(stats.serving, outcome, won, is_first_serve)
    else:
        _update_returning(stats.returning, outcome, won, is_first_serve)

    rally = stats.rally
    if outcome == WINNER and won:
        rally.winners += 1
    elif outcome == UNFORCED_ERROR and not won:
        rally.unforced_errors += 1
    elif outcome == FORCED_ERROR and won:
        rally.forced_errors += 1


def _update_serving(serving: ServingStats, outcome: str, won: bool, is_first_serve: Optional[bool]):
    if outcome == ACE:
        serving.aces += 1
        serving.first_serve_in += 1
        serving.first_serve_total += 1
        serving.points_won_on_first_serve += 1
    elif outcome == DOUBLE_FAULT:
        serving.double_faults += 1
        serving.second_serve_total += 1
    elif outcome == SERVICE_WINNER:
        serving.service_winners += 1
        if is_first_serve:
            serving.first_serve_in += 1
            serving.first_serve_total += 1
            serving.points_won_on_first_serve += 1
        else:
            serving.second_serve_in += 1
            serving.second_serve_total += 1
            serving.points_won_on_second_serve += 1
    elif is_first_serve is not None:
        if is_first_serve:
            serving.first_serve_total += 1
            if won:
                serving.first_serve_in += 1
                serving.points_won_on_first_serve += 1
        else:
            serving.second_serve_total += 1
            if won:
                serving.second_serve_in += 1
                serving.points_won_on_second_serve += 1


def _update_returning(returning: ReturningStats, outcome: str, won: bool, is_first_serve: Optional[bool]):
    if outcome == RETURN_WINNER:
        returning.return_winners += 1
        returning.points_won_on_return += 1
    elif outcome == UNFORCED_ERROR:
        if not won:
            returning.return_errors += 1
    elif won:
        returning.points_won_on_return += 1

    if is_first_serve is None:
        return

    if is_first_serve:
        returning.first_serve_return_points_played += 1
        if won:
            returning.first_serve_return_points_won += 1
    else:
        returning.second_serve_return_points_played += 1
        if won:
            returning.second_serve_return_points_won += 1


def _counter_items(stats: ParticipantStats) -> Iterable[Tuple[Optional[str], str]]:
    yield None, "points_won"
    yield None, "points_played"
    for bucket in BUCKETS:
        for f in fields(getattr(stats, bucket)):
            yield bucket, f.name


def _get(stats: ParticipantStats, bucket: Optional[str], name: str) -> int:
    target = stats if bucket is None else getattr(stats, bucket)
    return getattr(target, name)


def _set(stats: ParticipantStats, bucket: Optional[str], name: str, value: int):
    target = stats if bucket is None else getattr(stats, bucket)
    setattr(target, name, value)


def aggregate_stats(records: List[ParticipantStats]) -> ParticipantStats:
    result = ParticipantStats()
    for record in records:
        for bucket, name in _counter_items(result):
            _set(result, bucket, name, _get(result, bucket, name) + _get(record, bucket, name))
    return result


def compare_stats(current: ParticipantStats, baseline: ParticipantStats) -> ParticipantStats:
    """Counters of `current` minus `baseline`, e.g. stats for a single set."""
    diff = ParticipantStats()
    for bucket, name in _counter_items(diff):
        _set(diff, bucket, name, _get(current, bucket, name) - _get(baseline, bucket, name))
    return diff


def _pct(num: int, den: int) -> float:
    return (num / den) * 100 if den > 0 else 0.0


def calculate_percentages(stats: ParticipantStats) -> Dict[str, float]:
    s, r = stats.serving, stats.returning
    return {
        "win_percentage": _pct(stats.points_won, stats.points_played),
        "first_serve_percentage": _pct(s.first_serve_in, s.first_serve_total),
        "first_serve_win_percentage": _pct(s.points_won_on_first_serve, s.first_serve_in),
        "second_serve_win_percentage": _pct(s.points_won_on_second_serve, s.second_serve_in),
        "break_point_save_percentage": _pct(s.break_points_saved, s.break_points_faced),
        "break_point_conversion_percentage": _pct(r.break_points_won, r.break_points_played),
        "return_points_won_percentage": _pct(
            r.points_won_on_return,
            r.first_serve_return_points_played + r.second_serve_return_points_played,
        ),
    }


# =============================================================================
# Aggregator
# =============================================================================

class StatisticsAggregator:
    """
    Statistics keyed by participant id.

    Serving is resolved from `server_id`, which is the participant id in
    singles and an individual player id in doubles.
    """

    def __init__(self, participants: Iterable[Participant] = ()):
        self._stats: Dict[str, AnyStats] = {}
        self._team_of: Dict[str, str] = {}
        for p in participants:
            self.add_participant(p)

    def add_participant(self, participant: Participant):
        if participant.players is None:
            self._stats[participant.id] = ParticipantStats()
            return

        team = TeamStats()
        for pid in participant.player_ids():
            team.player_stats[pid] = ParticipantStats()
            self._team_of[pid] = participant.id
        self._stats[participant.id] = team

    # ---------------------------------------------------------
    # Recording
    # ---------------------------------------------------------

    def record_point(
        self,
        winner_id: str,
        loser_id: str,
        outcome: str,
        server_id: str,
        scorer_id: Optional[str] = None,
        is_first_serve: Optional[bool] = None,
    ):
        winner_attribution = self._winner_attribution(winner_id, outcome, server_id, scorer_id)
        loser_attribution = self._loser_attribution(loser_id, outcome, server_id, scorer_id)

        self._apply(winner_id, winner_attribution, outcome, True, server_id, is_first_serve)
        self._apply(loser_id, loser_attribution, outcome, False, server_id, is_first_serve)

    def record_service_game(self, server_id: str, won: bool):
        serving_id = self.participant_id_for(server_id)
        if serving_id is None:
            return

        for pid, stats in self._stats.items():
            if pid == serving_id:
                records = [stats]
                if isinstance(stats, TeamStats) and server_id in stats.player_stats:
                    records.append(stats.player_stats[server_id])
                for record in records:
                    record.serving.service_games_played += 1
                    if won:
                        record.serving.service_games_won += 1
            else:
                stats.returning.return_games_played += 1

    def record_break_point(self, server_id: str, receiver_id: str, outcome: str, winner_id: str):
        server_participant = self.participant_id_for(server_id)
        receiver_participant = self.participant_id_for(receiver_id)
        server_won = server_participant is not None and self.participant_id_for(winner_id) == server_participant

        if server_participant is not None:
            serving = self._stats[server_participant].serving
            serving.break_points_faced += 1
            if server_won:
                serving.break_points_saved += 1

        if receiver_participant is not None:
            returning = self._stats[receiver_participant].returning
            returning.break_points_played += 1
            if not server_won:
                returning.break_points_won += 1

    # ---------------------------------------------------------
    # Access
    # ---------------------------------------------------------

    def get_stats(self, participant_id: str) -> Optional[AnyStats]:
        return self._stats.get(participant_id)

    def all_stats(self) -> Dict[str, AnyStats]:
        return copy.deepcopy(self._stats)

    def participant_id_for(self, some_id: str) -> Optional[str]:
        if some_id in self._stats:
            return some_id
        return self._team_of.get(some_id)

    def reset(self):
        for pid, stats in list(self._stats.items()):
            if isinstance(stats, TeamStats):
                team = TeamStats()
                team.player_stats = {p: ParticipantStats() for p in stats.player_stats}
                self._stats[pid] = team
            else:
                self._stats[pid] = ParticipantStats()

    def to_list(self) -> List[List[Any]]:
        return [[pid, stats.to_dict()] for pid, stats in self._stats.items()]

    def restore(self, items: List[List[Any]]):
        for pid, record in items:
            if pid not in self._stats:
                continue
            if isinstance(self._stats[pid], TeamStats):
                self._stats[pid] = TeamStats.from_dict(record)
            else:
                self._stats[pid] = ParticipantStats.from_dict(record)

    # ---------------------------------------------------------
    # Internals
    # ---------------------------------------------------------

    def _is_serving(self, participant_id: str, server_id: str) -> bool:
        return self.participant_id_for(server_id) == participant_id

    def _member(self, participant_id: str, player_id: Optional[str]) -> Optional[str]:
        if player_id is None:
            return None
        if self._team_of.get(player_id) == participant_id:
            return player_id
        return None

    def _winner_attribution(self, winner_id, outcome, server_id, scorer_id) -> Optional[str]:
        scorer = self._member(winner_id, scorer_id)
        if scorer is None and scorer_id is None and outcome in (ACE, SERVICE_WINNER):
            scorer = self._member(winner_id, server_id)
        return scorer

    def _loser_attribution(self, loser_id, outcome, server_id, scorer_id) -> Optional[str]:
        # A double fault is always the server's
        if outcome == DOUBLE_FAULT:
            return self._member(loser_id, server_id)
        # A scorer on the losing side is the player who erred
        return self._member(loser_id, scorer_id)

    def _apply(self, participant_id, player_id, outcome, won, server_id, is_first_serve):
        stats = self._stats.get(participant_id)
        if stats is None:
            return

        is_serving = self._is_serving(participant_id, server_id)
        update_stats(stats, outcome, won, is_serving, is_first_serve)

        if player_id is not None and isinstance(stats, TeamStats):
            record = stats.player_stats.setdefault(player_id, ParticipantStats())
            update_stats(record, outcome, won, is_serving, is_first_serve)
