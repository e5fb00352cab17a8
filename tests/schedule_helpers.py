"""
Helpers for checking schedule properties in tests.
"""
import sys
import os
from itertools import combinations

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Participant


def make_roster(size, skills=None):
    """Create participants p1..pN named Player 1..Player N."""
    roster = []
    for i in range(size):
        skill = skills[i % len(skills)] if skills else None
        roster.append(Participant(id=f"p{i + 1}", name=f"Player {i + 1}", skill_level=skill))
    return roster


def partner_counts(rounds):
    """Count how often each unordered pair shared a team."""
    counts = {}
    for rnd in rounds:
        for match in rnd.matches:
            for team in (match.team_a, match.team_b):
                key = frozenset(team)
                counts[key] = counts.get(key, 0) + 1
    return counts


def opponent_counts(rounds):
    """Count how often each unordered pair faced each other."""
    counts = {}
    for rnd in rounds:
        for match in rnd.matches:
            for a in match.team_a:
                for b in match.team_b:
                    key = frozenset((a, b))
                    counts[key] = counts.get(key, 0) + 1
    return counts


def all_pairs(roster):
    return [frozenset((a.id, b.id)) for a, b in combinations(roster, 2)]


def assert_round_valid(rnd):
    """No participant appears twice in a round, whether playing or sitting out."""
    ids = rnd.participants
    assert len(ids) == len(set(ids)), f"Duplicate participant in round {rnd.index}: {ids}"
