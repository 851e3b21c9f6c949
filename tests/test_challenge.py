"""Tests for target generation, tolerance checks and one-shot completion."""

import random

import pytest

from engilab.challenge import Challenge, ChallengeSession, Outcome, evaluate, evaluate_ceiling, new_target
from engilab.errors import InvalidInput
from engilab.progress import MemoryProgressStore, Progress


class CountingStore(MemoryProgressStore):
    def __init__(self):
        super().__init__()
        self.writes = 0

    def write(self, level_key, stars, xp):
        self.writes += 1
        return super().write(level_key, stars, xp)


class TestEvaluate:
    def test_within_relative_tolerance(self):
        assert evaluate(9.6, 10.0, 0.05) is Outcome.SUCCESS
        assert evaluate(10.4, 10.0, 0.05) is Outcome.SUCCESS

    def test_outside_relative_tolerance(self):
        assert evaluate(8.0, 10.0, 0.05) is Outcome.RETRY
        assert not evaluate(8.0, 10.0, 0.05)

    def test_negative_target_uses_magnitude(self):
        assert evaluate(-9.6, -10.0, 0.05)

    @pytest.mark.parametrize("current", [float("nan"), float("inf"), "abc", None])
    def test_non_finite_current_rejected(self, current):
        with pytest.raises(InvalidInput):
            evaluate(current, 10.0, 0.05)

    def test_ceiling(self):
        assert evaluate_ceiling(10.1, 10.0, 0.02)
        assert evaluate_ceiling(0.0, 10.0, 0.02)
        assert not evaluate_ceiling(10.3, 10.0, 0.02)


class TestTargets:
    def test_new_target_in_range_and_rounded(self, rng):
        for _ in range(50):
            value = new_target(0.05, 0.25, digits=3, rng=rng)
            assert 0.05 <= value <= 0.25
            assert value == round(value, 3)

    def test_new_target_rejects_inverted_range(self):
        with pytest.raises(InvalidInput):
            new_target(2.0, 1.0)

    def test_challenge_regenerates(self):
        challenge = Challenge(20.0, 80.0, tolerance=0.1, digits=1, rng=random.Random(7))
        first = challenge.target
        assert 20.0 <= first <= 80.0
        assert 5.0 <= challenge.new_target(5.0, 85.0) <= 85.0
        assert challenge.evaluate(challenge.target)


class TestChallengeSession:
    def test_completes_once(self):
        store = CountingStore()
        session = ChallengeSession("ece_dc", store)
        assert session.complete_once()
        assert not session.complete_once()
        assert session.record(Outcome.SUCCESS) is Outcome.SUCCESS
        assert store.writes == 1
        assert store.read("ece_dc") == Progress(3, 50)

    def test_retry_does_not_complete(self):
        store = CountingStore()
        session = ChallengeSession("ece_dc", store)
        session.record(Outcome.RETRY)
        assert not session.completed
        assert store.writes == 0

    def test_new_session_keeps_best_record(self):
        store = MemoryProgressStore()
        store.write("mech_shm", 3, 80)
        session = ChallengeSession("mech_shm", store)
        assert session.progress == Progress(3, 80)
        session.complete_once()
        assert store.read("mech_shm") == Progress(3, 80)
