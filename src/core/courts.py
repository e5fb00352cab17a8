"""
Court assignment: rotate which match plays on which court so participants
do not stay on the court they just played on.
"""
from itertools import permutations
from typing import Dict, Iterable, List, Optional, Tuple

from core.models import Match, Round, make_match_id


class CourtHistory:
    """Courts each participant has played on, most recent last."""

    def __init__(self, courts: Optional[Dict[str, List[int]]] = None):
        self.courts = courts if courts else {}

    @classmethod
    def from_rounds(cls, rounds: Iterable[Round]) -> 'CourtHistory':
        history = cls()
        for rnd in sorted(rounds, key=lambda r: r.index):
            history.record(rnd.matches)
        return history

    def last(self, participant_id: str) -> Optional[int]:
        courts = self.courts.get(participant_id)
        return courts[-1] if courts else None

    def record(self, matches: Iterable[Match]):
        for match in matches:
            for pid in match.participants:
                self.courts.setdefault(pid, []).append(match.court_index)

    def __repr__(self):
        return f"CourtHistory(participants={len(self.courts)})"


def count_repeats(matches: List[Match], assignment: Tuple[int, ...], history: CourtHistory) -> int:
    """Participants whose new court equals the court they played last."""
    repeats = 0
    for match, court in zip(matches, assignment):
        for pid in match.participants:
            if history.last(pid) == court:
                repeats += 1
    return repeats


def best_assignments(matches: List[Match], history: CourtHistory) -> List[Tuple[int, ...]]:
    """All court permutations tied for the fewest repeats, in lexicographic order."""
    courts = sorted(m.court_index for m in matches)
    best = []
    best_repeats = None
    for assignment in permutations(courts):
        repeats = count_repeats(matches, assignment, history)
        if best_repeats is None or repeats < best_repeats:
            best_repeats = repeats
            best = [assignment]
        elif repeats == best_repeats:
            best.append(assignment)
    return best


def optimize_courts(matches: List[Match], history: CourtHistory, round_index: int) -> List[Match]:
    """
    Reassign court indices to minimize immediate court repeats.

    Ties are broken by round_index modulo the number of tied permutations,
    so identical inputs always give identical output. The history is
    updated with the final assignment. Returns the matches ordered by court.
    """
    if len(matches) <= 1:
        history.record(matches)
        return list(matches)

    tied = best_assignments(matches, history)
    chosen = tied[round_index % len(tied)]

    reassigned = []
    for match, court in zip(matches, chosen):
        reassigned.append(Match(
            id=make_match_id(match.round_index, court),
            round_index=match.round_index,
            court_index=court,
            team_a=match.team_a,
            team_b=match.team_b,
            score_a=match.score_a,
            score_b=match.score_b,
        ))
    reassigned.sort(key=lambda m: m.court_index)
    history.record(reassigned)
    return reassigned


def optimize_round(rnd: Round, history: CourtHistory) -> Round:
    return Round(index=rnd.index, matches=optimize_courts(rnd.matches, history, rnd.index), byes=rnd.byes)
