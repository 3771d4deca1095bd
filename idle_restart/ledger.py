import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class LedgerError(Exception):
    pass

class LedgerUnreadable(LedgerError):
    pass

class LedgerUnwritable(LedgerError):
    pass


class RestartLedger:
    """Last restart time, kept as the modification time of a stamp file."""

    def __init__(self, path):
        self.path = Path(path)

    def last_restart(self) -> Optional[datetime]:
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None  # never restarted
        except OSError as exc:
            raise LedgerUnreadable(f"cannot stat {self.path}: {exc}") from exc
        return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)

    def record_restart(self, now: datetime):
        ts = now.timestamp()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
            os.utime(self.path, (ts, ts))
        except OSError as exc:
            raise LedgerUnwritable(f"cannot write {self.path}: {exc}") from exc
