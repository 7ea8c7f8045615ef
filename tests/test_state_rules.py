# tests/test_state_rules.py
"""Unit tests for the alert lifecycle rules."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.services.state_rules import (
    next_state, accepts_votes, PENDING, CONFIRMED, FAKE, RESOLVED,
    POLICY_OPEN, POLICY_FREEZE, POLICY_CLOSED,
)


class TestNextState:
    def test_below_thresholds_stays_pending(self):
        assert next_state(PENDING, 1, 0) == PENDING
        assert next_state(PENDING, 2, 1) == PENDING

    def test_three_confirms_confirms(self):
        assert next_state(PENDING, 3, 0) == CONFIRMED

    def test_two_rejects_marks_fake(self):
        assert next_state(PENDING, 0, 2) == FAKE

    def test_confirm_checked_before_fake(self):
        assert next_state(PENDING, 3, 2) == CONFIRMED
        assert next_state(FAKE, 3, 5) == CONFIRMED

    def test_resolved_is_never_left(self):
        assert next_state(RESOLVED, 10, 0) == RESOLVED
        assert next_state(RESOLVED, 0, 10) == RESOLVED

    def test_never_produces_resolved(self):
        for confirmed in range(6):
            for rejected in range(6):
                assert next_state(PENDING, confirmed, rejected) != RESOLVED

    def test_is_deterministic(self):
        results = {next_state(PENDING, 2, 2) for _ in range(50)}
        assert results == {FAKE}

    def test_custom_thresholds(self):
        assert next_state(PENDING, 4, 0, confirm_threshold=5) == PENDING
        assert next_state(PENDING, 0, 1, fake_threshold=1) == FAKE

    def test_freeze_policy_only_moves_pending(self):
        assert next_state(PENDING, 3, 0, policy=POLICY_FREEZE) == CONFIRMED
        assert next_state(FAKE, 3, 2, policy=POLICY_FREEZE) == FAKE

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            next_state("archived", 3, 0)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            next_state(PENDING, 3, 0, policy="sometimes")


class TestAcceptsVotes:
    def test_open_policy_always_accepts(self):
        for status in (PENDING, CONFIRMED, FAKE, RESOLVED):
            assert accepts_votes(status, POLICY_OPEN)

    def test_closed_policy_only_accepts_pending(self):
        assert accepts_votes(PENDING, POLICY_CLOSED)
        assert not accepts_votes(CONFIRMED, POLICY_CLOSED)
        assert not accepts_votes(RESOLVED, POLICY_CLOSED)
