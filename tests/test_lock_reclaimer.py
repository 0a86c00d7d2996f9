"""Lock reclaimer tests: sweep semantics and the polling loop."""

import asyncio
import os
import signal
import sys
import time
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from models import UnitStatus
from services import unit_lifecycle, unit_store
from services.lock_reclaimer import LockReclaimer, reclaim_expired_locks

NOW = datetime(2026, 1, 31, 10, 0, 0)


@pytest.fixture
def locked_units(db, make_unit):
    """Two locks already expired at NOW, one still active."""
    expired_early = make_unit()
    expired_late = make_unit()
    active = make_unit()

    unit_lifecycle.lock(db, expired_early.id, "agent-a", 10, now=NOW - timedelta(hours=1))
    unit_lifecycle.lock(db, expired_late.id, "agent-b", 10, now=NOW - timedelta(minutes=30))
    unit_lifecycle.lock(db, active.id, "agent-c", 60, now=NOW)
    db.commit()
    return expired_early, expired_late, active


class TestReclaimExpiredLocks:
    def test_releases_only_expired(self, db, locked_units):
        expired_early, expired_late, active = locked_units

        result = reclaim_expired_locks(db, now=NOW)

        assert result.released_count == 2
        assert unit_store.get_unit(db, expired_early.id).status == UnitStatus.AVAILABLE
        assert unit_store.get_unit(db, expired_late.id).locked_by is None
        assert unit_store.get_unit(db, active.id).locked_by == "agent-c"

    def test_idempotent(self, db, locked_units):
        reclaim_expired_locks(db, now=NOW)

        assert reclaim_expired_locks(db, now=NOW).released_count == 0

    def test_no_locks(self, db, unit):
        assert reclaim_expired_locks(db, now=NOW).released_count == 0

    def test_booking_is_not_overwritten(self, db, monkeypatch, locked_units):
        expired_early, _, active = locked_units
        unit_lifecycle.book(db, active.id, "BK-1", now=NOW)
        db.commit()

        # Selection raced with the booking
        monkeypatch.setattr(unit_store, "find_expired_locks", lambda session, now: [active.id, expired_early.id])

        result = reclaim_expired_locks(db, now=NOW)

        assert result.released_count == 1
        booked = unit_store.get_unit(db, active.id)
        assert booked.status == UnitStatus.BOOKED
        assert booked.booking_id == "BK-1"

    def test_storage_error_skips_one_unit(self, db, monkeypatch, locked_units):
        expired_early, expired_late, _ = locked_units
        release_expired = unit_lifecycle.release_expired

        def flaky_release(session, unit_id, now):
            if unit_id == expired_early.id:
                raise OperationalError("UPDATE units", {}, Exception("database is locked"))
            return release_expired(session, unit_id, now)

        monkeypatch.setattr(unit_lifecycle, "release_expired", flaky_release)

        result = reclaim_expired_locks(db, now=NOW)

        assert result.released_count == 1
        assert unit_store.get_unit(db, expired_early.id).status == UnitStatus.LOCKED
        assert unit_store.get_unit(db, expired_late.id).status == UnitStatus.AVAILABLE


class TestLockReclaimer:
    def test_single_sweep(self, db, session_factory, unit):
        unit_lifecycle.lock(db, unit.id, "agent-a", 5, now=unit_lifecycle.utcnow() - timedelta(hours=1))
        db.commit()

        reclaimer = LockReclaimer(session_factory=session_factory, interval=60)
        asyncio.run(reclaimer.run(max_sweeps=1, install_signal_handlers=False))

        status = reclaimer.get_status()
        assert status["running"] is False
        assert status["stats"] == {"sweeps": 1, "units_released": 1, "errors": 0}
        assert status["last_sweep"] is not None
        assert unit_store.get_unit(db, unit.id).status == UnitStatus.AVAILABLE

    def test_failed_sweep_is_counted(self):
        def broken_factory():
            raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

        reclaimer = LockReclaimer(session_factory=broken_factory, interval=0)
        asyncio.run(reclaimer.run(max_sweeps=2, install_signal_handlers=False))

        assert reclaimer.get_status()["stats"] == {"sweeps": 2, "units_released": 0, "errors": 2}

    def test_stop(self, session_factory):
        reclaimer = LockReclaimer(session_factory=session_factory, interval=3600)

        async def run_and_stop():
            task = asyncio.ensure_future(reclaimer.run(install_signal_handlers=False))
            await asyncio.sleep(0.1)
            reclaimer.stop()
            await asyncio.wait_for(task, timeout=5)

        asyncio.run(run_and_stop())

        assert reclaimer.running is False
        assert reclaimer.get_status()["stats"]["sweeps"] >= 1

    @pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers are POSIX only")
    def test_sigterm_stops_promptly(self, session_factory):
        reclaimer = LockReclaimer(session_factory=session_factory, interval=3600)

        async def run_until_sigterm():
            loop = asyncio.get_running_loop()
            loop.call_later(0.2, os.kill, os.getpid(), signal.SIGTERM)
            started = time.monotonic()
            await asyncio.wait_for(reclaimer.run(), timeout=5)
            return time.monotonic() - started

        elapsed = asyncio.run(run_until_sigterm())

        assert elapsed < 2
        assert reclaimer.running is False

    def test_default_interval(self, session_factory):
        from config import config

        assert LockReclaimer(session_factory=session_factory).interval == config.LOCK_RECLAIM_INTERVAL
