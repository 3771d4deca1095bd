"""A2S_INFO status probe.

One request datagram, one reply or a timeout. The exchange and the
fixed-layout reply are handled by ``a2s``; this module turns the library's
outcome into a ``QueryResult`` the caller matches on instead of catching.
"""
import socket
from dataclasses import dataclass
from typing import Optional

import a2s

from .config import DEFAULT_PORT

DEFAULT_TIMEOUT = 3.0


class QueryError(Exception):
    pass

class QueryTimeout(QueryError):
    """No reply within the timeout."""

class MalformedResponse(QueryError):
    """Reply too short, missing a terminator, or not an info reply."""

class ServerUnreachable(QueryError):
    """The socket failed before a reply could arrive."""


@dataclass(frozen=True)
class ServerStatus:
    server_name: str
    map_name: str
    folder: str
    game: str
    app_id: int
    player_count: int
    max_players: int
    bot_count: int
    server_type: str
    platform: str
    password_protected: bool
    vac_enabled: bool
    version: str

    @classmethod
    def from_info(cls, info) -> "ServerStatus":
        # GoldSrc replies carry no app id or version
        return cls(
            server_name=info.server_name,
            map_name=info.map_name,
            folder=info.folder,
            game=info.game,
            app_id=int(getattr(info, "app_id", 0)),
            player_count=int(info.player_count),
            max_players=int(info.max_players),
            bot_count=int(info.bot_count),
            server_type=info.server_type,
            platform=info.platform,
            password_protected=bool(info.password_protected),
            vac_enabled=bool(info.vac_enabled),
            version=getattr(info, "version", ""),
        )

    @property
    def is_empty(self) -> bool:
        return self.player_count == 0


@dataclass(frozen=True)
class QueryResult:
    status: Optional[ServerStatus] = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ServerStatus:
        if self.error is not None:
            raise self.error
        return self.status


class ServerQueryClient:
    def __init__(self, host: str, port: int = DEFAULT_PORT, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = int(port)
        self.timeout = timeout

    @property
    def address(self):
        return (self.host, self.port)

    def query(self) -> QueryResult:
        try:
            info = a2s.info(self.address, timeout=self.timeout)
        except socket.timeout:
            return QueryResult(error=QueryTimeout(
                f"no reply from {self.host}:{self.port} within {self.timeout}s"))
        except a2s.BrokenMessageError as exc:
            return QueryResult(error=MalformedResponse(f"{self.host}:{self.port}: {exc}"))
        except OSError as exc:
            return QueryResult(error=ServerUnreachable(f"{self.host}:{self.port}: {exc}"))
        return QueryResult(status=ServerStatus.from_info(info))
