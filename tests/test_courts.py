"""
Tests for court history and the court assignment optimizer.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.courts import CourtHistory, best_assignments, count_repeats, optimize_courts, optimize_round
from core.models import Match, Round


def _match(round_index, court_index, ids):
    return Match(f"r{round_index}-c{court_index}", round_index, court_index, ids[:2], ids[2:])


@pytest.fixture
def two_matches():
    return [
        _match(1, 0, ("p1", "p2", "p3", "p4")),
        _match(1, 1, ("p5", "p6", "p7", "p8")),
    ]


class TestCourtHistory:
    def test_empty_history(self):
        assert CourtHistory().last("p1") is None

    def test_record_appends_most_recent_last(self):
        history = CourtHistory()
        history.record([_match(0, 1, ("p1", "p2", "p3", "p4"))])
        history.record([_match(1, 0, ("p1", "p2", "p3", "p4"))])
        assert history.courts["p1"] == [1, 0]
        assert history.last("p1") == 0

    def test_from_rounds_orders_by_index(self):
        rounds = [
            Round(1, [_match(1, 0, ("p1", "p2", "p3", "p4"))]),
            Round(0, [_match(0, 1, ("p1", "p2", "p3", "p4"))]),
        ]
        assert CourtHistory.from_rounds(rounds).courts["p1"] == [1, 0]


class TestOptimizer:
    """Court permutation search."""

    def test_swaps_when_everyone_would_repeat(self, two_matches):
        history = CourtHistory({pid: [0] for pid in ("p1", "p2", "p3", "p4")})
        history.courts.update({pid: [1] for pid in ("p5", "p6", "p7", "p8")})

        result = optimize_courts(two_matches, history, round_index=1)

        by_court = {m.court_index: m for m in result}
        assert set(by_court[1].participants) == {"p1", "p2", "p3", "p4"}
        assert set(by_court[0].participants) == {"p5", "p6", "p7", "p8"}
        assert by_court[1].id == "r1-c1"
        assert [m.court_index for m in result] == [0, 1]

    def test_swap_chosen_for_any_round_number(self, two_matches):
        previous = {pid: [0] for pid in ("p1", "p2", "p3", "p4")}
        previous.update({pid: [1] for pid in ("p5", "p6", "p7", "p8")})
        for round_index in range(4):
            history = CourtHistory({pid: list(courts) for pid, courts in previous.items()})
            result = optimize_courts(two_matches, history, round_index)
            assignment = tuple(m.court_index for m in result)
            assert count_repeats(result, assignment, CourtHistory(previous)) == 0

    def test_all_on_court_zero_ties_alternate_by_round(self, two_matches):
        """Every permutation repeats four players, so the round number picks."""
        last_court = {f"p{i}": [0] for i in range(1, 9)}
        assert len(best_assignments(two_matches, CourtHistory(dict(last_court)))) == 2

        even = optimize_courts(two_matches, CourtHistory({k: list(v) for k, v in last_court.items()}), 2)
        odd = optimize_courts(two_matches, CourtHistory({k: list(v) for k, v in last_court.items()}), 3)

        even_first = next(m for m in even if "p1" in m.participants)
        odd_first = next(m for m in odd if "p1" in m.participants)
        assert even_first.court_index == 0
        assert odd_first.court_index == 1

    def test_deterministic(self, two_matches):
        results = []
        for _ in range(2):
            history = CourtHistory({"p1": [1], "p5": [0]})
            results.append([(m.id, m.team_a, m.team_b) for m in optimize_courts(two_matches, history, 5)])
        assert results[0] == results[1]

    def test_history_updated_with_new_courts(self, two_matches):
        history = CourtHistory({pid: [0] for pid in ("p1", "p2", "p3", "p4")})
        result = optimize_courts(two_matches, history, 1)
        for match in result:
            for pid in match.participants:
                assert history.last(pid) == match.court_index
        assert len(history.courts["p1"]) == 2
        assert len(history.courts["p5"]) == 1

    def test_single_match_unchanged(self):
        match = _match(0, 0, ("p1", "p2", "p3", "p4"))
        history = CourtHistory({"p1": [0]})
        result = optimize_courts([match], history, 0)
        assert result == [match]
        assert history.courts["p1"] == [0, 0]

    def test_empty_round(self):
        assert optimize_courts([], CourtHistory(), 0) == []

    def test_three_courts_finds_zero_repeats(self):
        matches = [
            _match(2, 0, ("a1", "a2", "a3", "a4")),
            _match(2, 1, ("b1", "b2", "b3", "b4")),
            _match(2, 2, ("c1", "c2", "c3", "c4")),
        ]
        history = CourtHistory()
        for prefix, court in (("a", 0), ("b", 1), ("c", 2)):
            for i in range(1, 5):
                history.courts[f"{prefix}{i}"] = [court]
        tied = best_assignments(matches, history)
        # Derangements of three courts
        assert tied == [(1, 2, 0), (2, 0, 1)]
        result = optimize_courts(matches, history, 2)
        assert count_repeats(result, tuple(m.court_index for m in result), CourtHistory(
            {pid: courts[:1] for pid, courts in history.courts.items()}
        )) == 0

    def test_scores_preserved(self, two_matches):
        two_matches[0].score_a = 10
        two_matches[0].score_b = 6
        result = optimize_courts(two_matches, CourtHistory({"p1": [0]}), 0)
        scored = next(m for m in result if "p1" in m.participants)
        assert scored.is_completed

    def test_optimize_round_keeps_byes(self, two_matches):
        rnd = Round(1, two_matches, byes=["p9"])
        result = optimize_round(rnd, CourtHistory())
        assert result.byes == ["p9"]
        assert result.index == 1
