"""
Americano schedule generation.

Entry points take Participant objects and return Round objects:

- generate_schedule: the full schedule, picking a whist table (8, 16), the
  cyclic whist construction (12) or the circle rotation (anything else).
- generate_additional_round, generate_championship_round and
  generate_event_round: single rounds appended after the fact.
"""
from typing import List, Optional

from core.courts import CourtHistory, optimize_round
from core.extension import build_additional_round, build_championship_round, build_event_round
from core.models import Participant, Round, Standing
from core.rotation import generate_rotation_schedule
from core.whist import generate_cyclic_schedule, generate_table_schedule, has_cyclic_schedule, has_table_schedule

MIN_PARTICIPANTS = 4


def is_balanced_roster_size(num_participants: int) -> bool:
    """True when partners and opponents are both perfectly balanced."""
    return has_table_schedule(num_participants) or has_cyclic_schedule(num_participants)


def expected_round_count(num_participants: int) -> int:
    if num_participants < MIN_PARTICIPANTS:
        return 0
    return num_participants - 1 if num_participants % 2 == 0 else num_participants


def generate_schedule(roster: List[Participant], court_history: Optional[CourtHistory] = None) -> List[Round]:
    """
    Generate every round of a classic Americano for the roster.

    Returns [] for fewer than 4 participants. Courts in each round are
    reassigned to avoid participants staying on the same court; the court
    history is created fresh unless one is passed in.
    """
    participant_ids = [p.id for p in roster]
    if len(participant_ids) < MIN_PARTICIPANTS:
        return []

    if has_table_schedule(len(participant_ids)):
        rounds = generate_table_schedule(participant_ids)
    elif has_cyclic_schedule(len(participant_ids)):
        rounds = generate_cyclic_schedule(participant_ids)
    else:
        rounds = generate_rotation_schedule(participant_ids)

    if court_history is None:
        court_history = CourtHistory()
    return [optimize_round(rnd, court_history) for rnd in rounds]


def generate_additional_round(roster: List[Participant], existing_rounds: List[Round], new_round_index: int,
                              court_history: Optional[CourtHistory] = None) -> Round:
    return build_additional_round([p.id for p in roster], existing_rounds, new_round_index, court_history)


def generate_championship_round(roster: List[Participant], standings: List[Standing],
                                existing_rounds: List[Round], new_round_index: int) -> Round:
    # Finals are a fixed pairing of the top four; prior rounds do not affect it.
    ranked_ids = [s.participant_id for s in standings]
    return build_championship_round([p.id for p in roster], ranked_ids, new_round_index)


def generate_event_round(active_roster: List[Participant], full_roster: List[Participant],
                         existing_rounds: List[Round], new_round_index: int, court_count: int,
                         court_history: Optional[CourtHistory] = None) -> Round:
    """
    Build one event-mode round from the active participants.

    full_roster supplies skill tiers for anyone referenced by earlier
    rounds; only active participants are scheduled or listed as byes.
    """
    skill_levels = {p.id: p.skill_level for p in full_roster}
    skill_levels.update({p.id: p.skill_level for p in active_roster})
    return build_event_round([p.id for p in active_roster], skill_levels, existing_rounds,
                             new_round_index, court_count, court_history)
