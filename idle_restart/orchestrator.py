"""One pass of the nightly restart state machine.

Every pass ends in a single terminal action: sleep for a bounded time and
exit, or restart and exit. The external scheduler that re-invokes the
process is the outer loop, so nothing here needs to survive a crash except
the stamp file.
"""
import math, shlex, subprocess, time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import partial
from typing import Optional

from .ledger import RestartLedger
from .log import log
from .query import QueryError, QueryResult
from .window import ScheduleError, TimeWindow, WindowScheduler


class Decision(Enum):
    WAIT_FOR_WINDOW = "wait_for_window"
    ALREADY_RESTARTED = "already_restarted"
    NOT_IDLE = "not_idle"
    INSUFFICIENT_TIME = "insufficient_time"
    RESTARTED = "restarted"
    QUERY_FAILED = "query_failed"


@dataclass(frozen=True)
class Outcome:
    decision: Decision
    wake_at: Optional[datetime] = None
    sleep_for: int = 0
    exit_code: int = 0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def service_restart(command, syslog: bool = True):
    log(f"Running: {shlex.join(command)}", syslog)
    try:
        proc = subprocess.run(list(command), check=False)
    except OSError as exc:
        log(f"Restart command could not be started: {exc}", syslog)
        return
    log(f"Restart command exited with status {proc.returncode}", syslog)


class MaintenanceOrchestrator:
    def __init__(self, settings, client, ledger=None, scheduler=None,
                 restart=None, clock=utcnow, sleep=time.sleep):
        self.settings = settings
        self.client = client
        self.ledger = ledger or RestartLedger(settings.stamp_file)
        self.scheduler = scheduler or WindowScheduler.from_settings(settings)
        self.restart = restart or partial(service_restart, settings.restart_command, settings.use_syslog)
        self.clock = clock
        self.sleep = sleep

    def log(self, msg: str):
        log(msg, self.settings.use_syslog)

    def run(self) -> Outcome:
        now = self.clock()
        window = self.scheduler.current_or_next_window(now)
        if window is None:
            raise ScheduleError(f"no maintenance window around {now.isoformat()}")

        if now not in window:
            wait = math.ceil((window.start - now).total_seconds())
            self.log(f"Maintenance window is at {self._local(window.start)}, in {wait} seconds.")
            return self._sleep_and_exit(Decision.WAIT_FOR_WINDOW, window.start, now)

        self.log("Inside maintenance window, proceeding.")

        last_restart = self.ledger.last_restart()
        if last_restart is None:
            self.log("Server has never been restarted.")
        else:
            ago = math.floor((now - last_restart).total_seconds())
            self.log(f"Last restart was at {self._local(last_restart)}, {ago} seconds ago.")
            if last_restart in window:
                self.log("Server has already been restarted during the current window.")
                return self._sleep_and_exit(Decision.ALREADY_RESTARTED, window.stop, now)

        result = self._probe()
        if not result.ok:
            return self._fail(result.error)
        if not result.status.is_empty:
            self.log("Server is not empty.")
            return self._not_idle()

        return self._confirm_idle(window)

    def _confirm_idle(self, window: TimeWindow) -> Outcome:
        now = self.clock()
        deadline = now + timedelta(seconds=self.settings.empty_time)
        if deadline > window.stop:
            left = max(0, math.floor((window.stop - now).total_seconds()))
            self.log(f"Only {left} seconds left in the window, "
                     f"need {self.settings.empty_time} seconds of idle time.")
            upcoming = self.scheduler.strictly_next_window(now)
            if upcoming is None:
                raise ScheduleError(f"no maintenance window after {now.isoformat()}")
            self.log(f"Next maintenance window is at {self._local(upcoming.start)}.")
            return self._sleep_and_exit(Decision.INSUFFICIENT_TIME, upcoming.start, now)

        self.log(f"Waiting for server to be empty for {self.settings.empty_time} seconds.")
        while self.clock() < deadline:
            self.sleep(self.settings.query_interval)
            result = self._probe()
            if not result.ok:
                return self._fail(result.error)
            if not result.status.is_empty:
                self.log("Server is no longer empty.")
                return self._not_idle()

        self.log("Proceeding with restart.")
        # stamp before the side effect; a crash in between skips this window
        self.ledger.record_restart(self.clock())
        self.restart()
        return Outcome(Decision.RESTARTED)

    def _probe(self) -> QueryResult:
        result = self.client.query()
        if result.ok:
            status = result.status
            self.log(f"Number of players: {status.player_count} / {status.max_players}")
        return result

    def _not_idle(self) -> Outcome:
        now = self.clock()
        wake_at = now + timedelta(seconds=self.settings.query_interval)
        return self._sleep_and_exit(Decision.NOT_IDLE, wake_at, now)

    def _fail(self, error: QueryError) -> Outcome:
        self.log(f"Server query failed ({type(error).__name__}): {error}")
        return Outcome(Decision.QUERY_FAILED, exit_code=1)

    def _sleep_and_exit(self, decision: Decision, wake_at: datetime, now: datetime) -> Outcome:
        sleep_for = max(0, math.ceil((wake_at - now).total_seconds()))
        sleep_for = min(sleep_for, self.settings.max_sleep)
        self.log(f"Sleeping for {sleep_for} seconds.")
        self.sleep(sleep_for)
        return Outcome(decision, wake_at=wake_at, sleep_for=sleep_for)

    def _local(self, instant: datetime) -> str:
        return f"{instant.astimezone(self.scheduler.tz):%Y-%m-%d %H:%M:%S %Z}"
