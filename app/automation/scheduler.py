# Daily due-date sweep. Runs once per UTC day after run_at, catching up on the
# first tick after a missed window. Last-run date and lock live in redis.
import threading
import uuid
from collections.abc import Callable
from datetime import date, datetime, time, timezone

import structlog
from sqlalchemy.orm import Session

from app.automation import engine
from app.config import settings

log = structlog.get_logger(__name__)

LAST_RUN_KEY = "automation:sweep:last_run"
LOCK_KEY = "automation:sweep:lock"

# compare-and-act on the lock token, atomic on the redis side
RELEASE_LOCK = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""
RENEW_LOCK = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("pexpire", KEYS[1], ARGV[2])
end
return 0
"""

def parse_run_at(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as e:
        raise ValueError(f"scheduler_run_at must be HH:MM, got {value!r}") from e

class DueDateScheduler:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        redis,
        run_at: str = settings.scheduler_run_at,
        poll_seconds: int = settings.scheduler_poll_seconds,
        lock_seconds: int = settings.scheduler_lock_seconds,
        sweep: Callable = engine.sweep_due_passed,
    ):
        self._session_factory = session_factory
        self._redis = redis
        self._run_at = parse_run_at(run_at)
        self._poll_seconds = poll_seconds
        self._lock_seconds = lock_seconds
        self._sweep = sweep
        self._release_lock = redis.register_script(RELEASE_LOCK)
        self._renew_lock = redis.register_script(RENEW_LOCK)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def last_run(self) -> date | None:
        raw = self._redis.get(LAST_RUN_KEY)
        return date.fromisoformat(raw) if raw else None

    def is_due(self, now: datetime) -> bool:
        target = datetime.combine(now.date(), self._run_at, tzinfo=now.tzinfo)
        if now < target:
            return False
        last = self.last_run()
        return last is None or last < now.date()

    def run_once(self, now: datetime | None = None) -> bool:
        # one tick, True when a sweep ran
        now = now or datetime.now(timezone.utc)
        try:
            if not self.is_due(now):
                return False

            token = uuid.uuid4().hex
            if not self._redis.set(LOCK_KEY, token, nx=True, ex=self._lock_seconds):
                log.info("automation_sweep_locked")
                return False

            held = threading.Event()
            heartbeat = threading.Thread(
                target=self._keep_lock, args=(token, held), name="due-date-sweep-lock", daemon=True
            )
            heartbeat.start()
            try:
                # another holder may have finished between the check and the lock
                if not self.is_due(now):
                    return False
                self._run_sweep(now)
                return True
            finally:
                held.set()
                heartbeat.join()
                self._release_lock(keys=[LOCK_KEY], args=[token])
        except Exception:
            log.exception("automation_sweep_tick_failed")
            return False

    def _keep_lock(self, token: str, held: threading.Event) -> None:
        # a sweep may outlive lock_seconds; keep extending while it runs
        ttl_ms = int(self._lock_seconds * 1000)
        while not held.wait(self._lock_seconds / 3):
            try:
                if not self._renew_lock(keys=[LOCK_KEY], args=[token, ttl_ms]):
                    log.warning("automation_sweep_lock_lost")
                    return
            except Exception:
                log.exception("automation_sweep_lock_renew_failed")
                return

    def _run_sweep(self, now: datetime) -> None:
        log.info("automation_sweep_scheduled_run", run_at=self._run_at.isoformat(timespec="minutes"))
        db = self._session_factory()
        try:
            self._sweep(db, now=now)
        finally:
            db.close()
            self._redis.set(LAST_RUN_KEY, now.date().isoformat())

    def start(self) -> None:
        if self.running:
            log.warning("automation_scheduler_already_running")
            return

        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="due-date-sweep", daemon=True)
        self._thread.start()
        log.info("automation_scheduler_started", poll_seconds=self._poll_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        log.info("automation_scheduler_stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self._poll_seconds)
