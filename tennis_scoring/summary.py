"""
Read-only projections of a match for scoreboards.

Nothing here is stored; every call recomputes from the live match.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from tennis_scoring.game import Game, Tiebreak
from tennis_scoring.tennis_set import TennisSet


def match_score(match, perspective: Optional[int] = None) -> str:
    """
    Set-by-set score, e.g. "6-3, 4-6, 7-6(5), 2-0".

    Defaults to the winner's perspective once the match is over, otherwise
    the current server's.
    """
    if perspective is None:
        perspective = match.winner or match.current_server.slot
    first = perspective - 1
    second = 1 - first

    parts: List[str] = []
    for s in match.sets:
        text = f"{s.score[first]}-{s.score[second]}"
        if s.tiebreak is not None and s.winner:
            text += f"({min(s.tiebreak.score)})"
        parts.append(text)

    if not match.winner:
        parts.append(f"{match.set.score[first]}-{match.set.score[second]}")

    return ", ".join(parts)


def _game_summary(game: Game) -> Dict[str, Any]:
    return {
        "winner": game.winner,
        "server": game.server.player_id,
        "score": list(game.display_score),
        "points": len(game.points),
    }


def _set_summary(s: TennisSet) -> Dict[str, Any]:
    summary = {
        "winner": s.winner,
        "score": list(s.score),
        "games": [_game_summary(g) for g in s.games],
    }
    if s.tiebreak is not None:
        summary["tiebreak"] = {
            "winner": s.tiebreak.winner,
            "score": list(s.tiebreak.score),
            "points": len(s.tiebreak.points),
        }
    return summary


def build_match_summary(match) -> Dict[str, Any]:
    unit = match.current_unit
    server = match.current_server

    server_info: Dict[str, Any] = {"current": server.player_id}
    if isinstance(unit, Game):
        server_info["next"] = match.rotation.server_at(
            match.rotation.next_index(unit.rotation_index)
        ).player_id
    if match.rotation.is_doubles:
        server_info["rotation"] = match.rotation.player_ids()
        server_info["index"] = unit.rotation_index

    participants = {}
    for slot, participant in match.participants.items():
        stats = match.stats.get_stats(participant.id)
        participants[slot] = {
            "info": participant.to_dict(),
            "stats": stats.to_dict() if stats is not None else None,
        }

    return {
        "meta": {
            "match_type": match.match_type,
            "format": {"sets": match.num_sets},
            "status": "completed" if match.winner else "in-progress",
        },
        "score": {
            "sets": list(match.score),
            "games": list(match.set.score),
            "points": {
                "values": list(unit.display_score),
                "type": "tiebreak" if isinstance(unit, Tiebreak) else "game",
            },
            "server": server_info,
            "winner": match.winner,
        },
        "participants": participants,
        "match_score": match_score(match),
        "current_set": len(match.sets) + 1,
        "current_game": len(match.set.games) + 1,
        "set_history": [_set_summary(s) for s in match.sets],
        "current_set_games": [_game_summary(g) for g in match.set.games],
    }
