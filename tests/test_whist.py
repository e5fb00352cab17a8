"""
Tests for the whist-balanced schedules (8 and 16 from tables, 12 from cyclic seeds).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.whist import (
    SCHEDULE_8,
    SCHEDULE_16,
    WHIST_SEEDS,
    cyclic_round_indices,
    generate_cyclic_schedule,
    generate_table_schedule,
    has_cyclic_schedule,
    has_table_schedule,
)
from schedule_helpers import make_roster, partner_counts, opponent_counts, all_pairs, assert_round_valid


def _ids(size):
    return [p.id for p in make_roster(size)]


class TestTables:
    """The stored tables themselves."""

    @pytest.mark.parametrize("table,size", [(SCHEDULE_8, 8), (SCHEDULE_16, 16)])
    def test_each_round_uses_every_index_once(self, table, size):
        for courts in table:
            flat = [idx for quad in courts for idx in quad]
            assert sorted(flat) == list(range(size))

    def test_table_lookup(self):
        assert has_table_schedule(8)
        assert has_table_schedule(16)
        assert not has_table_schedule(12)
        assert has_cyclic_schedule(12)


class TestEightPlayers:
    def test_shape(self):
        rounds = generate_table_schedule(_ids(8))
        assert len(rounds) == 7
        for rnd in rounds:
            assert len(rnd.matches) == 2
            assert rnd.byes == []
            assert_round_valid(rnd)

    def test_every_pair_partners_once(self):
        roster = make_roster(8)
        counts = partner_counts(generate_table_schedule([p.id for p in roster]))
        for pair in all_pairs(roster):
            assert counts.get(pair) == 1

    def test_every_pair_opposes_twice(self):
        roster = make_roster(8)
        counts = opponent_counts(generate_table_schedule([p.id for p in roster]))
        for pair in all_pairs(roster):
            assert counts.get(pair) == 2

    def test_first_round_substitutes_ids(self):
        rnd = generate_table_schedule(_ids(8))[0]
        assert rnd.matches[0].team_a == ("p1", "p2")
        assert rnd.matches[0].team_b == ("p3", "p6")
        assert rnd.matches[1].team_a == ("p4", "p7")
        assert rnd.matches[1].team_b == ("p5", "p8")


class TestSixteenPlayers:
    def test_shape(self):
        rounds = generate_table_schedule(_ids(16))
        assert len(rounds) == 15
        for rnd in rounds:
            assert len(rnd.matches) == 4
            assert rnd.byes == []
            assert sorted(rnd.participants) == sorted(_ids(16))

    def test_every_pair_partners_once(self):
        roster = make_roster(16)
        counts = partner_counts(generate_table_schedule([p.id for p in roster]))
        assert len(counts) == 120
        assert set(counts.values()) == {1}

    def test_every_pair_opposes_twice(self):
        roster = make_roster(16)
        counts = opponent_counts(generate_table_schedule([p.id for p in roster]))
        for pair in all_pairs(roster):
            assert counts.get(pair) == 2


class TestTwelvePlayers:
    """The cyclic construction for 12."""

    def test_round_zero_is_the_seed(self):
        assert cyclic_round_indices(WHIST_SEEDS[12], 12, 0) == WHIST_SEEDS[12]

    def test_rotation_keeps_fixed_slot(self):
        rotated = cyclic_round_indices(WHIST_SEEDS[12], 12, 1)
        assert rotated[0] == [11, 1, 9, 10]
        assert rotated[2] == [4, 0, 5, 7]

    def test_shape(self):
        rounds = generate_cyclic_schedule(_ids(12))
        assert len(rounds) == 11
        for rnd in rounds:
            assert len(rnd.matches) == 3
            assert rnd.byes == []
            assert sorted(rnd.participants) == sorted(_ids(12))

    def test_all_66_pairs_partner_once(self):
        roster = make_roster(12)
        counts = partner_counts(generate_cyclic_schedule([p.id for p in roster]))
        pairs = all_pairs(roster)
        assert len(pairs) == 66
        for pair in pairs:
            assert counts.get(pair) == 1

    def test_every_pair_opposes_twice(self):
        roster = make_roster(12)
        counts = opponent_counts(generate_cyclic_schedule([p.id for p in roster]))
        for pair in all_pairs(roster):
            assert counts.get(pair) == 2

    def test_last_participant_plays_every_round(self):
        for rnd in generate_cyclic_schedule(_ids(12)):
            assert "p12" in rnd.matches[0].team_a
