import socket
import struct
import threading
from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest

from idle_restart.config import Settings

EASTERN = ZoneInfo("America/New_York")
PROBE = b"\xff\xff\xff\xffTSource Engine Query\x00"


def info_reply(
    name="Nightly KF2",
    map_name="KF-BioticsLab",
    folder="kfgame",
    game="Killing Floor 2",
    app_id=0x1F2E,
    players=0,
    max_players=6,
    bots=0,
    server_type=b"d",
    platform=b"l",
    password=0,
    vac=1,
    version="1.0.0.0",
):
    """Build an A2S_INFO reply datagram, header included."""
    return (
        b"\xff\xff\xff\xff" + b"I" + bytes([17])
        + name.encode() + b"\x00"
        + map_name.encode() + b"\x00"
        + folder.encode() + b"\x00"
        + game.encode() + b"\x00"
        + struct.pack("<H", app_id)
        + bytes([players, max_players, bots])
        + server_type + platform
        + bytes([password, vac])
        + version.encode() + b"\x00"
    )


class FakeClock:
    """Clock whose sleep() advances time instead of blocking."""

    def __init__(self, start):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def settings(tmp_path):
    return Settings(use_syslog=False, stamp_file=str(tmp_path / "restart-stamp"))


@pytest.fixture
def udp_server():
    """Start a one-shot UDP responder; reply=None never answers."""
    started = []

    def start(reply):
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind(("127.0.0.1", 0))
        sock.settimeout(5)
        received = []

        def serve():
            try:
                data, addr = sock.recvfrom(4096)
            except OSError:
                return
            received.append(data)
            if reply is not None:
                sock.sendto(reply, addr)

        thread = threading.Thread(target=serve, daemon=True)
        thread.start()
        started.append((sock, thread))
        return sock.getsockname()[1], received

    yield start
    for sock, thread in started:
        thread.join(timeout=1)
        sock.close()
