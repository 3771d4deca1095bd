import subprocess
from datetime import datetime

SYSLOG_TAG = "server-idle-restart"


def log(msg: str, syslog: bool = True):
    ts = datetime.now().isoformat(timespec="seconds")
    print(f"[{ts}] {msg}", flush=True)
    if not syslog:
        return
    try:
        subprocess.run(["logger", "-t", SYSLOG_TAG, msg], check=False)
    except OSError:
        pass  # no logger(1) on this host; console line is enough
