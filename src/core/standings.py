"""
Standings derived from completed matches.
"""
from typing import Dict, List

from core.models import Standing


def _apply_result(entry: Standing, scored: int, conceded: int):
    entry.total_points += scored
    entry.point_differential += scored - conceded
    entry.matches_played += 1
    if scored > conceded:
        entry.wins += 1
    elif scored < conceded:
        entry.losses += 1
    else:
        entry.ties += 1


def calculate_standings(participants, rounds, prize_only: bool = False) -> List[Standing]:
    """
    Fold every completed match into per-participant totals.

    Ordered by total points, then wins, then point differential; remaining
    ties keep roster order. Slots naming unknown participants are ignored.
    With prize_only, participants exempt from prizes are left out.
    """
    stats: Dict[str, Standing] = {}
    for p in participants:
        stats[p.id] = Standing(p.id, p.name, nickname=p.nickname, prize_exempt=p.prize_exempt)

    for rnd in rounds:
        for match in rnd.matches:
            if not match.is_completed:
                continue
            for pid in match.team_a:
                if pid in stats:
                    _apply_result(stats[pid], match.score_a, match.score_b)
            for pid in match.team_b:
                if pid in stats:
                    _apply_result(stats[pid], match.score_b, match.score_a)

    standings = sorted(
        stats.values(),
        key=lambda s: (-s.total_points, -s.wins, -s.point_differential),
    )
    if prize_only:
        standings = [s for s in standings if not s.prize_exempt]
    return standings
