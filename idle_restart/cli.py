import argparse, sys

from .config import Settings
from .orchestrator import MaintenanceOrchestrator
from .query import ServerQueryClient


def main(argv=None) -> int:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(
        prog="server-idle-restart",
        description="Restart an idle game server once per nightly maintenance window.",
    )
    parser.add_argument("host", nargs="?", default=settings.host,
                        help="server address (default: env SERVER_HOST)")
    parser.add_argument("port", nargs="?", type=int, default=settings.port,
                        help="query port (default: env SERVER_PORT or 27015)")
    args = parser.parse_args(argv)

    client = ServerQueryClient(args.host, args.port, timeout=settings.query_timeout)
    outcome = MaintenanceOrchestrator(settings, client).run()
    return outcome.exit_code

if __name__ == "__main__":
    sys.exit(main())
