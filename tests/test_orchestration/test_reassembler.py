"""
Tests for Reassembler: arrival view, index-order release, termination check.
"""
import itertools

import pytest

from core.orchestration.reassembler import Reassembler, ReassemblyError
from core.shared.types import Outcome, WorkItem


def _outcomes(n, failures=()):
    out = []
    for i in range(n):
        item = WorkItem(i, f"req-{i}")
        if i in failures:
            out.append(Outcome.failed(item, f"failed [req-{i}]", 0.1 * i))
        else:
            out.append(Outcome.success(item, f"value-{i}", 0.1 * i))
    return out


class TestReleaseOrder:
    """Tests for contiguous-prefix release."""

    def test_scenario_two_zero_one(self):
        """Arrivals 2, 0, 1 release nothing, then 0, then 1 and 2."""
        o = _outcomes(3)
        arrivals, releases = [], []
        r = Reassembler(3, on_arrival=lambda x: arrivals.append(x.index),
                        on_release=lambda x: releases.append(x.index))

        assert r.feed(o[2]) == []
        assert r.pending == 1
        assert r.next_index == 0

        assert r.feed(o[0]) == [o[0]]
        assert r.next_index == 1
        assert r.pending == 1

        assert r.feed(o[1]) == [o[1], o[2]]
        assert r.next_index == 3
        assert r.pending == 0

        assert arrivals == [2, 0, 1]
        assert releases == [0, 1, 2]
        assert r.finish() == (o[0], o[1], o[2])

    def test_in_order_arrival_releases_immediately(self):
        o = _outcomes(4)
        r = Reassembler(4)
        for outcome in o:
            assert r.feed(outcome) == [outcome]
        assert r.pending == 0

    def test_reverse_arrival_releases_all_at_end(self):
        o = _outcomes(4)
        r = Reassembler(4)
        for outcome in reversed(o[1:]):
            assert r.feed(outcome) == []
        assert r.pending == 3
        assert r.feed(o[0]) == o
        assert r.finish() == tuple(o)

    def test_every_permutation_gives_same_collection(self):
        o = _outcomes(5, failures={3})
        expected = tuple(o)
        for perm in itertools.permutations(o):
            assert Reassembler(5).consume(perm) == expected

    def test_collection_slot_matches_index(self):
        o = _outcomes(6)
        ordered = Reassembler(6).consume([o[4], o[1], o[5], o[0], o[3], o[2]])
        assert all(outcome.index == i for i, outcome in enumerate(ordered))

    def test_failure_occupies_its_index(self):
        o = _outcomes(3, failures={1})
        ordered = Reassembler(3).consume([o[1], o[2], o[0]])

        assert len(ordered) == 3
        assert not ordered[1].ok
        assert ordered[1].failure.reason == "failed [req-1]"
        assert sum(1 for x in ordered if x.ok) == 2

    def test_single_outcome(self):
        o = _outcomes(1)
        arrivals, releases = [], []
        r = Reassembler(1, on_arrival=arrivals.append, on_release=releases.append)
        r.feed(o[0])
        assert arrivals == releases == [o[0]]


class TestTermination:
    """Tests for finish() invariant checks."""

    def test_empty_stream(self):
        assert Reassembler(0).consume([]) == ()

    def test_missing_outcome_raises(self):
        o = _outcomes(3)
        r = Reassembler(3)
        r.feed(o[0])
        r.feed(o[2])
        with pytest.raises(ReassemblyError, match=r"missing indices \[1\]"):
            r.finish()

    def test_nothing_received_raises(self):
        with pytest.raises(ReassemblyError):
            Reassembler(2).finish()


class TestValidation:
    """Tests for rejected input."""

    def test_negative_expected_raises(self):
        with pytest.raises(ValueError):
            Reassembler(-1)

    def test_duplicate_index_raises(self):
        o = _outcomes(2)
        r = Reassembler(2)
        r.feed(o[1])
        with pytest.raises(ValueError, match="Duplicate"):
            r.feed(o[1])

    def test_out_of_range_index_raises(self):
        r = Reassembler(2)
        with pytest.raises(ValueError, match="outside"):
            r.feed(Outcome.success(WorkItem(2, "x"), None, 0.0))
