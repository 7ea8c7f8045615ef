# tests/test_concurrency.py
"""
Concurrent request handlers hitting the same alert, or many alerts at once.
Each thread gets its own session, like one request per thread under uvicorn.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
from app.models.alert import Alert
from app.models.alert_vote import AlertVote
from app.models.alert_view import AlertView
from app.services import alert_service
from app.services.errors import DuplicateVoteError
from app.services.identity_service import create_actor
from app.utils.keyed_lock import KeyedLock


def run_concurrently(session_factory, calls):
    """Run each fn(session) in its own thread, released together. Returns results/exceptions in order."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(i, fn):
        session = session_factory()
        try:
            barrier.wait()
            results[i] = fn(session)
        except Exception as e:
            results[i] = e
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


class TestConcurrentVotes:
    def test_same_voter_only_one_vote_lands(self, db, session_factory, alert, people):
        alert_id, voter = alert.id, people["U2"]
        db.commit()

        n = 8
        results = run_concurrently(session_factory, [
            lambda s: alert_service.vote(s, alert_id, voter, True) for _ in range(n)
        ])

        duplicates = [r for r in results if isinstance(r, DuplicateVoteError)]
        successes = [r for r in results if isinstance(r, Alert)]
        assert len(successes) == 1
        assert len(duplicates) == n - 1

        check = session_factory()
        assert check.query(AlertVote).filter(AlertVote.alert_id == alert_id).count() == 1
        assert check.query(Alert).filter(Alert.id == alert_id).one().confirmed_count == 1
        check.close()

    def test_different_voters_no_lost_update(self, db, session_factory, alert):
        alert_id = alert.id
        voters = [create_actor(db, name=f"Neighbour {i}").id for i in range(10)]
        db.commit()

        verdicts = [i % 2 == 0 for i in range(10)]   # 5 confirms, 5 rejects
        results = run_concurrently(session_factory, [
            (lambda v, c: lambda s: alert_service.vote(s, alert_id, v, c))(v, c)
            for v, c in zip(voters, verdicts)
        ])
        assert all(isinstance(r, Alert) for r in results), results

        check = session_factory()
        stored = check.query(Alert).filter(Alert.id == alert_id).one()
        assert (stored.confirmed_count, stored.rejected_count) == (5, 5)
        assert stored.confirmed_count + stored.rejected_count == \
            check.query(AlertVote).filter(AlertVote.alert_id == alert_id).count()
        assert stored.status == "confirmed"
        check.close()

    def test_votes_on_different_alerts_all_land(self, db, session_factory, new_alert, people):
        alert_ids = [new_alert().id for _ in range(8)]
        voter = people["U2"]
        db.commit()

        results = run_concurrently(session_factory, [
            (lambda a: lambda s: alert_service.vote(s, a, voter, True))(a) for a in alert_ids
        ])
        assert all(isinstance(r, Alert) for r in results), results

        check = session_factory()
        counts = [c for (c,) in check.query(Alert.confirmed_count).filter(Alert.id.in_(alert_ids))]
        assert counts == [1] * len(alert_ids)
        assert check.query(AlertVote).filter(AlertVote.voter_id == voter).count() == len(alert_ids)
        check.close()


class TestConcurrentViews:
    def test_same_viewer_counts_once(self, db, session_factory, alert, people):
        alert_id, viewer = alert.id, people["U3"]
        db.commit()

        results = run_concurrently(session_factory, [
            lambda s: alert_service.record_view(s, alert_id, viewer) for _ in range(8)
        ])
        assert results.count(True) == 1
        assert results.count(False) == 7

        check = session_factory()
        assert check.query(Alert.view).filter(Alert.id == alert_id).scalar() == 1
        assert check.query(AlertView).filter(AlertView.alert_id == alert_id).count() == 1
        check.close()

    def test_views_on_different_alerts_all_count(self, db, session_factory, new_alert, people):
        alert_ids = [new_alert().id for _ in range(8)]
        viewer = people["U3"]
        db.commit()

        results = run_concurrently(session_factory, [
            (lambda a: lambda s: alert_service.record_view(s, a, viewer))(a) for a in alert_ids
        ])
        assert results == [True] * len(alert_ids)

        check = session_factory()
        views = [v for (v,) in check.query(Alert.view).filter(Alert.id.in_(alert_ids))]
        assert views == [1] * len(alert_ids)
        check.close()


class TestKeyedLock:
    def test_same_key_is_exclusive(self):
        locks = KeyedLock()
        inside = []
        overlap = []

        def worker():
            with locks.hold("A1"):
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(True)
                threading.Event().wait(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlap == []

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        with locks.hold("A1"):
            acquired = threading.Event()

            def other():
                with locks.hold("A2"):
                    acquired.set()

            t = threading.Thread(target=other)
            t.start()
            assert acquired.wait(timeout=2)
            t.join()

    def test_entries_are_released(self):
        locks = KeyedLock()
        with locks.hold("A1"):
            assert len(locks) == 1
        assert len(locks) == 0
