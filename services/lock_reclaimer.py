"""
Lock Reclaimer - returns units with expired reservation locks to the pool.

reclaim_expired_locks() is one sweep; LockReclaimer runs it on a fixed
interval (5 minutes by default) alongside request traffic. A lock can
therefore stay nominally locked for up to one interval past its TTL.
"""
import asyncio
import logging
import signal
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import config
from errors import InventoryError
from schemas.inventory import ReclaimResult
from . import unit_lifecycle, unit_store

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


def reclaim_expired_locks(db: Session, now: Optional[datetime] = None) -> ReclaimResult:
     """
     Release every unit whose lock expired before ``now``.

     Units are processed independently and each release is committed on
     its own. A unit that was booked or released concurrently fails its
     conditional update and is skipped; a storage error on one unit is
     logged and the sweep continues. Running with no expired locks is a
     no-op.

     Args:
          db: SQLAlchemy database session
          now: Sweep time (defaults to current UTC time)

     Returns:
          ReclaimResult with the number of units released
     """
     now = now or unit_lifecycle.utcnow()
     expired = unit_store.find_expired_locks(db, now)

     if not expired:
          logger.info("No expired unit locks found")
          return ReclaimResult(released_count=0)

     released_count = 0
     for unit_id in expired:
          try:
               unit = unit_lifecycle.release_expired(db, unit_id, now)
               db.commit()
          except InventoryError as e:
               logger.warning(f"Skipped expired lock for unit {unit_id}: {e}")
               continue
          except SQLAlchemyError:
               db.rollback()
               logger.exception(f"Failed to release expired lock for unit {unit_id}")
               continue

          released_count += 1
          logger.info(
               f"Released expired lock for unit {unit.number} "
               f"(unit_id={unit.id}, tower_id={unit.tower_id}, project_id={unit.project_id})"
          )

     logger.info(f"Released {released_count} of {len(expired)} expired unit locks")
     return ReclaimResult(released_count=released_count)


class LockReclaimer:
     """Async polling service that sweeps expired locks on a fixed interval."""

     def __init__(
          self,
          session_factory: Optional[Callable[[], Session]] = None,
          interval: Optional[float] = None
     ):
          if session_factory is None:
               from database import SessionLocal
               session_factory = SessionLocal
          self.session_factory = session_factory
          self.interval = interval if interval is not None else config.LOCK_RECLAIM_INTERVAL
          self.running = False
          self._stop_event: Optional[asyncio.Event] = None
          self._loop: Optional[asyncio.AbstractEventLoop] = None

          # Stats
          self._sweeps = 0
          self._units_released = 0
          self._errors = 0
          self._last_sweep: Optional[datetime] = None

     def sweep_once(self) -> ReclaimResult:
          """Run one sweep in its own session."""
          session = self.session_factory()
          try:
               result = reclaim_expired_locks(session)
               session.commit()
               return result
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     def stop(self):
          self.running = False
          if self._stop_event is None:
               return
          if self._loop is not None and self._loop.is_running():
               self._loop.call_soon_threadsafe(self._stop_event.set)
          else:
               self._stop_event.set()

     def _setup_signal_handlers(self, loop: asyncio.AbstractEventLoop):
          """Setup graceful shutdown handlers on the running loop."""
          def shutdown_handler(signum):
               logger.info(f"Received signal {signum}, shutting down...")
               self.stop()

          for sig in SHUTDOWN_SIGNALS:
               loop.add_signal_handler(sig, shutdown_handler, sig)

     async def run(self, max_sweeps: Optional[int] = None, install_signal_handlers: bool = True):
          """
          Sweep until stopped.

          Args:
               max_sweeps: Stop after this many sweeps (None = run until stopped)
               install_signal_handlers: Stop cleanly on SIGTERM/SIGINT
          """
          self.running = True
          self._stop_event = asyncio.Event()
          self._loop = asyncio.get_running_loop()
          if install_signal_handlers:
               self._setup_signal_handlers(self._loop)

          logger.info(f"Lock reclaimer starting (interval: {self.interval}s)")

          try:
               while self.running:
                    try:
                         result = await self._loop.run_in_executor(None, self.sweep_once)
                         self._units_released += result.released_count
                    except Exception as e:
                         self._errors += 1
                         logger.error(f"Lock reclaim sweep failed: {e}")

                    self._sweeps += 1
                    self._last_sweep = datetime.now()

                    if max_sweeps is not None and self._sweeps >= max_sweeps:
                         break

                    try:
                         await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                    except asyncio.TimeoutError:
                         pass
          finally:
               if install_signal_handlers:
                    for sig in SHUTDOWN_SIGNALS:
                         self._loop.remove_signal_handler(sig)
               self.running = False
               self._loop = None

          logger.info("Lock reclaimer stopped")

     def get_status(self) -> dict:
          """Get current reclaimer status."""
          return {
               "running": self.running,
               "interval": self.interval,
               "stats": {
                    "sweeps": self._sweeps,
                    "units_released": self._units_released,
                    "errors": self._errors,
               },
               "last_sweep": self._last_sweep.isoformat() if self._last_sweep else None,
          }
