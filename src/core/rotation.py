"""
Circle-method (Berger table) fallback for roster sizes without a whist design.
"""
from typing import List, Optional, Sequence, Tuple

from core.models import Match, Round, make_match_id


def padded_size(num_participants: int) -> int:
    """Roster size rounded up to even; odd rosters get one ghost slot."""
    return num_participants + 1 if num_participants % 2 else num_participants


def berger_pairings(n: int) -> List[List[Tuple[int, int]]]:
    """
    Generate the n-1 rounds of index pairings for an even n.

    Each round pairs position i with position n-1-i; the index array is then
    rotated with position 0 fixed and the last element moved to position 1.
    """
    indices = list(range(n))
    rounds = []
    for _ in range(n - 1):
        rounds.append([(indices[i], indices[n - 1 - i]) for i in range(n // 2)])
        indices = [indices[0], indices[-1]] + indices[1:-1]
    return rounds


def build_rotation_round(participant_ids: Sequence[str], round_index: int,
                         pairings: List[Tuple[int, int]]) -> Round:
    num_participants = len(participant_ids)
    valid_pairs = []
    byes = []
    for idx1, idx2 in pairings:
        p1: Optional[str] = participant_ids[idx1] if idx1 < num_participants else None
        p2: Optional[str] = participant_ids[idx2] if idx2 < num_participants else None
        if p1 is not None and p2 is not None:
            valid_pairs.append((p1, p2))
        else:
            # Paired with the ghost: sits out
            if p1 is not None:
                byes.append(p1)
            if p2 is not None:
                byes.append(p2)

    matches = []
    for court_index in range(len(valid_pairs) // 2):
        matches.append(Match(
            id=make_match_id(round_index, court_index),
            round_index=round_index,
            court_index=court_index,
            team_a=valid_pairs[court_index * 2],
            team_b=valid_pairs[court_index * 2 + 1],
        ))

    if len(valid_pairs) % 2:
        byes.extend(valid_pairs[-1])

    return Round(index=round_index, matches=matches, byes=byes)


def generate_rotation_schedule(participant_ids: Sequence[str]) -> List[Round]:
    """Partner-once schedule for any roster of 4 or more; opponents are not balanced."""
    if len(participant_ids) < 4:
        return []
    n = padded_size(len(participant_ids))
    return [
        build_rotation_round(participant_ids, round_index, pairings)
        for round_index, pairings in enumerate(berger_pairings(n))
    ]
