from tennis_scoring.engine import TennisMatch


def play(match, sequence):
    for winner in sequence:
        match.score_point(winner)


def win_games(match, winner, count):
    play(match, [winner] * (4 * count))


# -------------------------------------------------
# Match score string
# -------------------------------------------------

def test_match_score_in_progress_uses_server_perspective():
    match = TennisMatch("Alice", "Bob")
    win_games(match, 1, 6)
    win_games(match, 2, 1)

    # Side 2 serves the second game of set two
    assert match.current_server.slot == 2
    assert match.match_score() == "0-6, 1-0"
    assert match.match_score(1) == "6-0, 0-1"


def test_match_score_tiebreak_loser_points():
    match = TennisMatch("Alice", "Bob")
    for _ in range(6):
        win_games(match, 1, 1)
        win_games(match, 2, 1)
    play(match, [1, 2] * 5 + [2, 2])

    assert match.match_score(2) == "7-6(5), 0-0"


def test_match_score_fresh_match():
    match = TennisMatch("Alice", "Bob")

    assert match.match_score() == "0-0"


# -------------------------------------------------
# Summary projection
# -------------------------------------------------

def test_summary_structure():
    match = TennisMatch("Alice", "Bob", num_sets=5)
    play(match, [1, 2, 2])
    summary = match.summary()

    assert summary["meta"] == {
        "match_type": "singles",
        "format": {"sets": 5},
        "status": "in-progress",
    }
    assert summary["score"]["points"] == {"values": [15, 30], "type": "game"}
    assert summary["score"]["sets"] == [0, 0]
    assert summary["score"]["winner"] is None
    assert summary["current_set"] == 1
    assert summary["current_game"] == 1
    assert summary["participants"][1]["info"]["name"] == "Alice"
    assert summary["participants"][2]["stats"]["points_won"] == 2


def test_summary_singles_server_has_no_rotation():
    match = TennisMatch("Alice", "Bob")
    server = match.summary()["score"]["server"]

    assert server["current"] == match.participants[1].id
    assert server["next"] == match.participants[2].id
    assert "rotation" not in server


def test_summary_tiebreak_has_no_next_server():
    match = TennisMatch("Alice", "Bob")
    for _ in range(6):
        win_games(match, 1, 1)
        win_games(match, 2, 1)

    server = match.summary()["score"]["server"]
    assert "next" not in server


def test_summary_history():
    match = TennisMatch("Alice", "Bob")
    win_games(match, 1, 6)
    win_games(match, 2, 2)
    summary = match.summary()

    assert summary["set_history"][0]["score"] == [6, 0]
    assert len(summary["set_history"][0]["games"]) == 6
    assert [g["winner"] for g in summary["current_set_games"]] == [2, 2]
    assert summary["current_game"] == 3


def test_summary_is_a_fresh_copy():
    match = TennisMatch("Alice", "Bob")
    play(match, [1])
    summary = match.summary()
    summary["score"]["points"]["values"][0] = 99

    assert match.summary()["score"]["points"]["values"] == [15, 0]
