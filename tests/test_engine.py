import pytest

from tennis_scoring.engine import TennisMatch
from tennis_scoring.exceptions import (
    InvalidOutcomeError,
    InvalidSetCountError,
    InvalidWinnerCodeError,
    MatchValidationError,
    ParticipantMismatchError,
)
from tennis_scoring.game import Game, Tiebreak
from tennis_scoring.models import AD_IN, AD_OUT, DEUCE, NO_SCORE


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def create_singles(num_sets=3):
    return TennisMatch("Alice", "Bob", num_sets=num_sets)


def create_doubles(num_sets=3):
    return TennisMatch(["Alice", "Bob"], ["Charlie", "Diana"], num_sets=num_sets)


def play(match, sequence):
    for winner in sequence:
        match.score_point(winner)


def win_game(match, winner):
    play(match, [winner] * 4)


def win_set(match, winner):
    for _ in range(6):
        win_game(match, winner)


def reach_six_all(match):
    for _ in range(6):
        win_game(match, 1)
        win_game(match, 2)


# ---------- CONFIGURATION ----------

@pytest.mark.parametrize("num_sets", [0, -1, 2, 4])
def test_invalid_set_count_rejected(num_sets):
    with pytest.raises(InvalidSetCountError):
        create_singles(num_sets)


def test_set_count_error_is_value_error():
    with pytest.raises(ValueError):
        create_singles(2)


def test_mixed_participant_types_rejected():
    with pytest.raises(ParticipantMismatchError):
        TennisMatch("Alice", ["Charlie", "Diana"])


def test_serving_rotation_only_for_doubles():
    with pytest.raises(MatchValidationError):
        TennisMatch("Alice", "Bob", serving_rotation=["a", "b"])


def test_match_type():
    assert create_singles().match_type == "singles"
    assert create_doubles().match_type == "doubles"
    assert create_singles().serving_rotation is None


# ---------- POINT VALIDATION ----------

@pytest.mark.parametrize("winner", [0, 3, -1])
def test_invalid_winner_code(winner):
    match = create_singles()

    with pytest.raises(InvalidWinnerCodeError):
        match.score_point(winner)


def test_invalid_outcome():
    match = create_singles()

    with pytest.raises(InvalidOutcomeError):
        match.score_point(1, "let")


def test_unknown_scorer():
    match = create_doubles()

    with pytest.raises(MatchValidationError):
        match.score_point(1, "winner", scorer_id="nobody")


def test_rejected_point_leaves_state_untouched():
    match = create_singles()
    play(match, [1, 2])
    before = match.summary()

    with pytest.raises(InvalidWinnerCodeError):
        match.score_point(5)

    assert match.summary() == before


# ---------- GAME SCORING ----------

def test_first_game_won_to_love():
    match = create_singles()
    win_game(match, 1)

    assert match.set.score == [1, 0]
    assert match.set.games[0].winner == 1
    assert match.current_unit.raw_score == [0, 0]
    assert match.current_server.slot == 2


def test_deuce_and_advantage():
    match = create_singles()
    play(match, [1, 1, 1, 2, 2, 2])
    assert match.current_unit.display_score == [DEUCE, DEUCE]

    play(match, [1])
    assert match.current_unit.display_score == [AD_IN, NO_SCORE]

    play(match, [2, 2])
    assert match.current_unit.display_score == [NO_SCORE, AD_OUT]

    play(match, [2])
    assert match.set.score == [0, 1]


# ---------- TIEBREAK ----------

def test_tiebreak_at_six_all():
    match = create_singles()
    reach_six_all(match)

    assert match.set.score == [6, 6]
    assert isinstance(match.current_unit, Tiebreak)
    assert match.summary()["score"]["points"]["type"] == "tiebreak"


def test_tiebreak_wins_set_seven_six():
    match = create_singles()
    reach_six_all(match)
    play(match, [1] * 7)

    assert match.score == [1, 0]
    assert match.sets[0].score == [7, 6]
    assert match.sets[0].tiebreak.score == [7, 0]
    assert match.match_score(1) == "7-6(0), 0-0"
    assert isinstance(match.current_unit, Game)


def test_tiebreak_serve_sequence():
    match = create_singles()
    reach_six_all(match)

    servers = []
    for _ in range(5):
        servers.append(match.current_server.slot)
        match.score_point(2)

    assert servers == [1, 2, 2, 1, 1]


def test_server_after_tiebreak_set():
    match = create_singles()
    reach_six_all(match)
    play(match, [1] * 7)

    # Side 1 served the last tiebreak point
    assert match.current_server.slot == 2


# ---------- MATCH RESULTS ----------

@pytest.mark.parametrize("sequence, expected_winner", [
    ([1, 1], 1),
    ([1, 2, 1], 1),
    ([2, 2], 2),
    ([2, 1, 2], 2),
])
def test_match_outcomes(sequence, expected_winner):
    match = create_singles()

    for winner in sequence:
        win_set(match, winner)

    assert match.winner == expected_winner
    assert match.is_finished
    assert len(match.sets) == len(sequence)


def test_best_of_five_needs_three_sets():
    match = create_singles(num_sets=5)
    win_set(match, 1)
    win_set(match, 1)
    assert match.winner is None

    win_set(match, 1)
    assert match.winner == 1
    assert match.score == [3, 0]


def test_single_set_match():
    match = create_singles(num_sets=1)
    win_set(match, 2)

    assert match.winner == 2


def test_points_after_match_are_ignored(caplog):
    match = create_singles()
    win_set(match, 1)
    win_set(match, 1)
    before = match.summary()

    assert match.score_point(2) is False
    assert match.summary() == before
    assert "already won" in caplog.text


def test_match_score_from_winner_perspective():
    match = create_singles()
    win_set(match, 2)
    win_set(match, 1)
    win_set(match, 1)

    assert match.match_score() == "0-6, 6-0, 6-0"
    assert match.match_score(2) == "6-0, 0-6, 0-6"


# ---------- UNDO ----------

def test_remove_point_on_new_match():
    match = create_singles()
    before = match.summary()

    assert match.remove_point() is False
    assert match.summary() == before


def test_remove_point_inside_game():
    match = create_singles()
    play(match, [1, 2])

    assert match.remove_point() is True
    assert match.current_unit.display_score == [15, 0]


def test_undo_match_winning_point():
    match = create_singles()
    win_set(match, 1)
    for _ in range(5):
        win_game(match, 1)
    play(match, [1, 1, 1])

    before = match.summary()["score"]
    match.score_point(1)
    assert match.winner == 1

    assert match.remove_point() is True
    assert match.winner is None
    assert match.summary()["score"] == before
    assert match.score == [1, 0]
    assert match.set.score == [5, 0]
    assert match.current_unit.display_score == [40, 0]

    match.remove_point()
    assert match.current_unit.display_score == [30, 0]


def test_undo_across_set_boundary():
    match = create_singles()
    win_set(match, 2)
    assert match.score == [0, 1]

    match.remove_point()

    assert match.score == [0, 0]
    assert match.sets == []
    assert match.set.score == [0, 5]
    assert match.current_unit.display_score == [0, 40]


def test_undo_tiebreak_set_win():
    match = create_singles()
    reach_six_all(match)
    play(match, [2] * 7)
    assert match.score == [0, 1]

    match.remove_point()

    assert match.score == [0, 0]
    assert isinstance(match.current_unit, Tiebreak)
    assert match.current_unit.score == [0, 6]


def test_undo_everything():
    match = create_singles()
    reach_six_all(match)
    play(match, [1] * 7)
    win_game(match, 2)

    total = len(match.all_points())
    for _ in range(total):
        assert match.remove_point() is True

    assert match.remove_point() is False
    assert match.score == [0, 0]
    assert match.set.score == [0, 0]
    assert match.current_server.slot == 1


# ---------- DOUBLES ----------

def test_doubles_default_rotation():
    match = create_doubles()
    t1 = match.participants[1].players
    t2 = match.participants[2].players

    assert match.serving_rotation == [t1.a.id, t2.a.id, t1.b.id, t2.b.id]


def test_doubles_rotation_period_four():
    match = create_doubles()
    rotation = match.serving_rotation

    servers = []
    for i in range(8):
        servers.append(match.current_server_id)
        win_game(match, 1 if i % 2 == 0 else 2)

    assert servers == rotation + rotation


def test_doubles_rotation_continues_into_next_set():
    match = create_doubles()
    rotation = match.serving_rotation
    win_set(match, 1)

    # Six games served, seventh server opens set two
    assert match.current_server_id == rotation[2]


def test_doubles_custom_rotation():
    p1 = {"id": "t1", "players": {"a": {"id": "a1", "name": "Alice"}, "b": {"id": "b1", "name": "Bob"}}}
    p2 = {"id": "t2", "players": {"a": {"id": "a2", "name": "Charlie"}, "b": {"id": "b2", "name": "Diana"}}}
    match = TennisMatch(p1, p2, serving_rotation=["b1", "a2", "a1", "b2"])

    assert match.current_server_id == "b1"
    win_game(match, 1)
    assert match.current_server_id == "a2"


def test_doubles_custom_rotation_must_alternate():
    p1 = {"id": "t1", "players": {"a": {"id": "a1", "name": "Alice"}, "b": {"id": "b1", "name": "Bob"}}}
    p2 = {"id": "t2", "players": {"a": {"id": "a2", "name": "Charlie"}, "b": {"id": "b2", "name": "Diana"}}}

    with pytest.raises(MatchValidationError):
        TennisMatch(p1, p2, serving_rotation=["a1", "b1", "a2", "b2"])


def test_doubles_tiebreak_rotation():
    match = create_doubles()
    rotation = match.serving_rotation
    reach_six_all(match)

    servers = []
    for _ in range(6):
        servers.append(match.current_server_id)
        match.score_point(1)

    assert servers == [rotation[0], rotation[1], rotation[1], rotation[2], rotation[2], rotation[3]]


def test_doubles_advantage_display():
    match = create_doubles()
    play(match, [1, 1, 1, 2, 2, 2, 1])

    assert match.summary()["score"]["points"]["values"] == [AD_IN, NO_SCORE]


def test_doubles_summary_server_info():
    match = create_doubles()
    server = match.summary()["score"]["server"]

    assert server["current"] == match.serving_rotation[0]
    assert server["next"] == match.serving_rotation[1]
    assert server["rotation"] == match.serving_rotation
    assert server["index"] == 0
