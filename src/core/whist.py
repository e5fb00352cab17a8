"""
Whist-balanced Americano schedules.

For 8, 12 and 16 participants every pair partners exactly once and opposes
exactly twice. The 8 and 16 layouts are stored as verified tables; the 12
layout is expanded from three cyclic seeds.
"""
from typing import List, Sequence

from core.models import Match, Round, make_match_id


# Each round lists its courts as [a, b, c, d] meaning (a, b) vs (c, d),
# where the numbers index into the roster.
SCHEDULE_8 = [
    [[0, 1, 2, 5], [3, 6, 4, 7]],
    [[0, 2, 3, 7], [1, 5, 4, 6]],
    [[0, 3, 1, 6], [2, 7, 4, 5]],
    [[0, 4, 2, 6], [1, 7, 3, 5]],
    [[0, 5, 3, 4], [1, 2, 6, 7]],
    [[0, 6, 5, 7], [1, 3, 2, 4]],
    [[0, 7, 1, 4], [2, 3, 5, 6]],
]

SCHEDULE_16 = [
    [[3, 8, 5, 1], [11, 0, 2, 6], [10, 14, 12, 7], [13, 9, 4, 15]],
    [[0, 9, 13, 11], [3, 10, 14, 8], [15, 6, 2, 4], [12, 5, 1, 7]],
    [[4, 7, 1, 2], [5, 6, 15, 12], [13, 14, 8, 11], [3, 0, 9, 10]],
    [[15, 9, 10, 12], [2, 11, 8, 1], [3, 5, 6, 0], [14, 7, 4, 13]],
    [[3, 14, 7, 5], [4, 6, 0, 13], [9, 11, 2, 15], [1, 12, 10, 8]],
    [[6, 12, 1, 4], [3, 9, 11, 14], [8, 13, 0, 10], [2, 7, 5, 15]],
    [[10, 15, 5, 0], [7, 13, 8, 2], [1, 11, 14, 4], [3, 6, 12, 9]],
    [[8, 12, 9, 2], [0, 4, 14, 5], [3, 7, 13, 6], [11, 15, 10, 1]],
    [[3, 11, 15, 7], [10, 13, 6, 1], [12, 4, 0, 8], [5, 2, 9, 14]],
    [[13, 2, 5, 10], [3, 12, 4, 11], [14, 1, 6, 9], [0, 15, 7, 8]],
    [[9, 8, 7, 6], [15, 1, 14, 0], [5, 4, 11, 10], [3, 13, 2, 12]],
    [[14, 2, 12, 0], [6, 10, 11, 7], [3, 15, 1, 13], [4, 8, 9, 5]],
    [[3, 4, 8, 15], [9, 1, 13, 5], [2, 10, 6, 14], [7, 0, 12, 11]],
    [[1, 0, 7, 9], [3, 2, 10, 4], [11, 5, 13, 12], [6, 8, 15, 14]],
    [[12, 14, 15, 13], [8, 5, 11, 6], [7, 10, 4, 9], [3, 1, 0, 2]],
]

SCHEDULE_TABLES = {
    8: SCHEDULE_8,
    16: SCHEDULE_16,
}

# Z-cyclic seeds: [a, b, c, d] is (a, b) vs (c, d). The value n-1 is the
# fixed slot; every other index rotates modulo n-1.
WHIST_SEEDS = {
    12: [
        [11, 0, 8, 9],
        [1, 7, 2, 5],
        [3, 10, 4, 6],
    ],
}


def _match_from_indices(ids: Sequence[str], round_index: int, court_index: int, quad: Sequence[int]) -> Match:
    return Match(
        id=make_match_id(round_index, court_index),
        round_index=round_index,
        court_index=court_index,
        team_a=(ids[quad[0]], ids[quad[1]]),
        team_b=(ids[quad[2]], ids[quad[3]]),
    )


def has_table_schedule(num_participants: int) -> bool:
    return num_participants in SCHEDULE_TABLES


def has_cyclic_schedule(num_participants: int) -> bool:
    return num_participants in WHIST_SEEDS


def generate_table_schedule(participant_ids: Sequence[str]) -> List[Round]:
    """Substitute roster ids into the stored table for this roster size."""
    table = SCHEDULE_TABLES[len(participant_ids)]
    rounds = []
    for round_index, courts in enumerate(table):
        matches = [
            _match_from_indices(participant_ids, round_index, court_index, quad)
            for court_index, quad in enumerate(courts)
        ]
        rounds.append(Round(index=round_index, matches=matches, byes=[]))
    return rounds


def cyclic_round_indices(seeds: List[List[int]], num_participants: int, round_index: int) -> List[List[int]]:
    """
    Rotate the seed quadruples for one round.

    Every index except the fixed slot (num_participants - 1) maps to
    (index + round_index) mod (num_participants - 1).
    """
    fixed = num_participants - 1
    modulus = num_participants - 1
    rotated = []
    for quad in seeds:
        rotated.append([idx if idx == fixed else (idx + round_index) % modulus for idx in quad])
    return rotated


def generate_cyclic_schedule(participant_ids: Sequence[str]) -> List[Round]:
    num_participants = len(participant_ids)
    seeds = WHIST_SEEDS[num_participants]
    rounds = []
    for round_index in range(num_participants - 1):
        quads = cyclic_round_indices(seeds, num_participants, round_index)
        matches = [
            _match_from_indices(participant_ids, round_index, court_index, quad)
            for court_index, quad in enumerate(quads)
        ]
        rounds.append(Round(index=round_index, matches=matches, byes=[]))
    return rounds
