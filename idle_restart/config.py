import os, shlex
from dataclasses import dataclass, field
from datetime import time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_PORT = 27015


def env(name, default=None, cast=str):
    v = os.environ.get(name, default)
    if v is None: return None
    return cast(v)

def parse_clock(value: str) -> time:
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except ValueError as exc:
        raise ValueError(f"expected HH:MM, got {value!r}") from exc

def flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    window_start: time = time(1, 0)
    window_duration: timedelta = timedelta(hours=4)
    window_timezone: str = "America/New_York"
    max_sleep: int = 3600
    empty_time: int = 600
    query_interval: int = 10
    query_timeout: float = 3.0
    stamp_file: str = "restart-stamp"
    restart_command: tuple = field(default=("sudo", "sv", "restart", "kf2"))
    use_syslog: bool = True

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=env("SERVER_HOST", "127.0.0.1"),
            port=env("SERVER_PORT", str(DEFAULT_PORT), int),
            window_start=env("WINDOW_START", "01:00", parse_clock),
            window_duration=timedelta(minutes=env("WINDOW_DURATION_MINUTES", "240", int)),
            window_timezone=env("WINDOW_TIMEZONE", "America/New_York"),
            max_sleep=env("MAX_SLEEP_SEC", "3600", int),
            empty_time=env("EMPTY_TIME_SEC", "600", int),
            query_interval=env("QUERY_INTERVAL_SEC", "10", int),
            query_timeout=env("A2S_TIMEOUT_SEC", "3", float),
            stamp_file=env("STAMP_FILE", "restart-stamp"),
            restart_command=tuple(env("RESTART_COMMAND", "sudo sv restart kf2", shlex.split)),
            use_syslog=env("USE_SYSLOG", "1", flag),
        )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.window_timezone)

    def validate(self):
        if not timedelta(0) < self.window_duration < timedelta(hours=24):
            raise ValueError("window duration must be between 0 and 24 hours")
        for name in ("max_sleep", "empty_time", "query_interval", "query_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if not self.restart_command:
            raise ValueError("restart command is empty")
        try:
            self.tz
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {self.window_timezone!r}") from exc
