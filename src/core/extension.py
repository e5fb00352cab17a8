"""
On-demand round builders used once the initial schedule is exhausted,
or in event mode where rounds are produced one at a time.

Players are laid out into matches greedily and then improved by pairwise
swaps against a repetition cost (repeat partners weigh more than repeat
opponents). Event rounds add a skill term to the same cost.
"""
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence

from core.courts import CourtHistory, optimize_courts
from core.models import Match, Round, make_match_id, skill_value

PARTNER_REPEAT_PENALTY = 5.0
OPPONENT_REPEAT_PENALTY = 3.0
SKILL_BALANCE_PENALTY = 4.0
SKILL_SPREAD_PENALTY = 1.0
MAX_IMPROVEMENT_PASSES = 20

CHAMPIONSHIP_SUFFIX = 'championship'


def _pair(a, b):
    return (a, b) if a <= b else (b, a)


class PairingHistory:
    """Partner, opponent, bye and play counts folded from prior rounds."""

    def __init__(self):
        self.partners = Counter()
        self.opponents = Counter()
        self.byes = Counter()
        self.played = Counter()
        self.last_bye = {}
        self.last_played = {}

    @classmethod
    def from_rounds(cls, rounds) -> 'PairingHistory':
        history = cls()
        for rnd in rounds:
            history.add_round(rnd)
        return history

    def add_round(self, rnd: Round):
        for match in rnd.matches:
            a1, a2 = match.team_a
            b1, b2 = match.team_b
            self.partners[_pair(a1, a2)] += 1
            self.partners[_pair(b1, b2)] += 1
            for a in match.team_a:
                for b in match.team_b:
                    self.opponents[_pair(a, b)] += 1
            for pid in match.participants:
                self.played[pid] += 1
                self.last_played[pid] = max(self.last_played.get(pid, -1), rnd.index)
        for pid in rnd.byes:
            self.byes[pid] += 1
            self.last_bye[pid] = max(self.last_bye.get(pid, -1), rnd.index)

    def partner_count(self, a, b) -> int:
        return self.partners[_pair(a, b)]

    def opponent_count(self, a, b) -> int:
        return self.opponents[_pair(a, b)]


def select_byes(candidates: Sequence[str], num_byes: int, history: PairingHistory, round_index: int) -> List[str]:
    """
    Pick who sits out: those who have played most, then those with fewest
    byes, then those whose last bye is oldest. Remaining ties rotate through
    the candidate order with the round index.
    """
    if num_byes <= 0:
        return []
    n = len(candidates)

    def sit_out_key(item):
        position, pid = item
        return (
            -history.played[pid],
            history.byes[pid],
            history.last_bye.get(pid, -1),
            (position - round_index) % n,
        )

    ranked = sorted(enumerate(candidates), key=sit_out_key)
    chosen = {pid for _, pid in ranked[:num_byes]}
    # Keep roster order in the bye list
    return [pid for pid in candidates if pid in chosen]


def repetition_cost(quad: Sequence[str], history: PairingHistory) -> float:
    a1, a2, b1, b2 = quad
    cost = PARTNER_REPEAT_PENALTY * (history.partner_count(a1, a2) + history.partner_count(b1, b2))
    for a in (a1, a2):
        for b in (b1, b2):
            cost += OPPONENT_REPEAT_PENALTY * history.opponent_count(a, b)
    return cost


def skill_cost(quad: Sequence[str], skills: Dict[str, int]) -> float:
    """Penalize uneven teams within a match, and mildly, mixed levels on one court."""
    values = [skills[pid] for pid in quad]
    imbalance = abs((values[0] + values[1]) - (values[2] + values[3]))
    spread = max(values) - min(values)
    return SKILL_BALANCE_PENALTY * imbalance + SKILL_SPREAD_PENALTY * spread


def _greedy_layout(players: List[str], history: PairingHistory) -> List[str]:
    """Pair fresh partners first, then match teams against fresh opponents."""
    remaining = list(players)
    teams = []
    while remaining:
        first = remaining.pop(0)
        partner = min(remaining, key=lambda pid: (history.partner_count(first, pid), remaining.index(pid)))
        remaining.remove(partner)
        teams.append((first, partner))

    slots = []
    while teams:
        team = teams.pop(0)

        def opponent_load(other):
            return sum(history.opponent_count(a, b) for a in team for b in other)

        rival = min(teams, key=lambda other: (opponent_load(other), teams.index(other)))
        teams.remove(rival)
        slots.extend(team + rival)
    return slots


def improve_layout(slots: List[str], match_cost: Callable[[Sequence[str]], float]) -> List[str]:
    """
    Swap players between slots while the total cost drops.

    slots is read four at a time as (team A, team A, team B, team B).
    Only strictly improving swaps are taken so the result is deterministic.
    """
    slots = list(slots)
    for _ in range(MAX_IMPROVEMENT_PASSES):
        improved = False
        for i in range(len(slots)):
            for j in range(i + 1, len(slots)):
                mi, mj = i // 4, j // 4
                if mi == mj and (i % 4) // 2 == (j % 4) // 2:
                    continue  # same team, swap changes nothing
                touched = {mi, mj}
                before = sum(match_cost(slots[m * 4:m * 4 + 4]) for m in touched)
                slots[i], slots[j] = slots[j], slots[i]
                after = sum(match_cost(slots[m * 4:m * 4 + 4]) for m in touched)
                if after < before:
                    improved = True
                else:
                    slots[i], slots[j] = slots[j], slots[i]
        if not improved:
            break
    return slots


def _matches_from_slots(slots: List[str], round_index: int) -> List[Match]:
    matches = []
    for court_index in range(len(slots) // 4):
        quad = slots[court_index * 4:court_index * 4 + 4]
        matches.append(Match(
            id=make_match_id(round_index, court_index),
            round_index=round_index,
            court_index=court_index,
            team_a=(quad[0], quad[1]),
            team_b=(quad[2], quad[3]),
        ))
    return matches


def _build_round(candidates: Sequence[str], num_matches: int, existing_rounds: List[Round],
                 round_index: int, court_history: Optional[CourtHistory],
                 extra_cost: Optional[Callable[[Sequence[str]], float]] = None) -> Round:
    history = PairingHistory.from_rounds(existing_rounds)
    byes = select_byes(candidates, len(candidates) - num_matches * 4, history, round_index)
    bye_set = set(byes)
    players = [pid for pid in candidates if pid not in bye_set]

    def match_cost(quad):
        cost = repetition_cost(quad, history)
        if extra_cost is not None:
            cost += extra_cost(quad)
        return cost

    slots = improve_layout(_greedy_layout(players, history), match_cost)
    if court_history is None:
        court_history = CourtHistory.from_rounds(existing_rounds)
    matches = optimize_courts(_matches_from_slots(slots, round_index), court_history, round_index)
    return Round(index=round_index, matches=matches, byes=byes)


def build_additional_round(participant_ids: Sequence[str], existing_rounds: List[Round], round_index: int,
                           court_history: Optional[CourtHistory] = None) -> Round:
    """One more round over the whole roster, avoiding repeat partners and opponents."""
    participant_ids = list(participant_ids)
    if len(participant_ids) < 4:
        return Round(index=round_index, matches=[], byes=participant_ids)
    return _build_round(participant_ids, len(participant_ids) // 4, existing_rounds, round_index, court_history)


def build_championship_round(participant_ids: Sequence[str], ranked_ids: Sequence[str], round_index: int) -> Round:
    """Finals: rank 1 and 3 against rank 2 and 4; everyone else sits out."""
    participant_ids = list(participant_ids)
    if len(ranked_ids) < 4:
        return Round(index=round_index, matches=[], byes=participant_ids)
    first, second, third, fourth = ranked_ids[:4]
    match = Match(
        id=f"r{round_index}-{CHAMPIONSHIP_SUFFIX}",
        round_index=round_index,
        court_index=0,
        team_a=(first, third),
        team_b=(second, fourth),
    )
    finalists = set(match.participants)
    return Round(index=round_index, matches=[match], byes=[pid for pid in participant_ids if pid not in finalists])


def build_event_round(active_ids: Sequence[str], skill_levels: Dict[str, Optional[str]],
                      existing_rounds: List[Round], round_index: int, court_count: int,
                      court_history: Optional[CourtHistory] = None) -> Round:
    """
    One round over the active participants only, on at most court_count courts.

    Teams within a match are balanced by skill tier (unset tiers count as
    medium); repeat partners and opponents are still avoided.
    """
    if court_count < 1:
        raise ValueError(f"Court count must be at least 1, got {court_count}")
    active_ids = list(active_ids)
    num_matches = min(court_count, len(active_ids) // 4)
    if num_matches == 0:
        return Round(index=round_index, matches=[], byes=active_ids)

    skills = {pid: skill_value(skill_levels.get(pid)) for pid in active_ids}
    return _build_round(active_ids, num_matches, existing_rounds, round_index, court_history,
                        extra_cost=lambda quad: skill_cost(quad, skills))
