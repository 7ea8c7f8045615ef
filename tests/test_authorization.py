# tests/test_authorization.py
"""Unit tests for the authorization gate."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from app.services.authorization import (
    authorize, disallowed_fields, ActorRef, RESOLVE, UPDATE, DELETE, VOTE,
)

AUTHOR = ActorRef(id="U1")
STRANGER = ActorRef(id="U5")
ADMIN = ActorRef(id="ADMIN", is_admin=True)


def make_alert(author_id="U1"):
    alert = MagicMock()
    alert.author_id = author_id
    return alert


class TestAuthorize:
    def test_only_author_resolves(self):
        alert = make_alert()
        assert authorize(AUTHOR, alert, RESOLVE)
        assert not authorize(STRANGER, alert, RESOLVE)
        assert not authorize(ADMIN, alert, RESOLVE)

    @pytest.mark.parametrize("operation", [UPDATE, DELETE])
    def test_author_or_admin_edits_and_deletes(self, operation):
        alert = make_alert()
        assert authorize(AUTHOR, alert, operation)
        assert authorize(ADMIN, alert, operation)
        assert not authorize(STRANGER, alert, operation)

    def test_anyone_known_may_vote_including_author(self):
        alert = make_alert()
        assert authorize(STRANGER, alert, VOTE)
        assert authorize(AUTHOR, alert, VOTE)

    def test_unknown_actor_or_missing_alert_denied(self):
        assert not authorize(None, make_alert(), DELETE)
        assert not authorize(AUTHOR, None, DELETE)

    def test_unknown_operation_raises(self):
        with pytest.raises(ValueError):
            authorize(AUTHOR, make_alert(), "publish")

    def test_actor_ref_is_immutable(self):
        with pytest.raises(AttributeError):
            STRANGER.is_admin = True


class TestUpdatableFields:
    def test_content_fields_allowed(self):
        assert disallowed_fields({"reason": "x", "latitude": 1.0, "urgency": "low"}) == set()

    def test_status_counts_and_timestamps_refused(self):
        bad = disallowed_fields({"status": "confirmed", "confirmed_count": 9, "view": 3,
                                 "resolved_at": None, "description": "ok"})
        assert bad == {"status", "confirmed_count", "view", "resolved_at"}
