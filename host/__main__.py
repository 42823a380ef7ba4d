import argparse
import asyncio
import logging

from holdem.models import TableConfig

from .server import HostServer

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Texas Hold'em table host")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--players", type=int, default=6, help="Maximum seats at the table")
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=5)
    parser.add_argument("--bb", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None, help="Seed the deck for reproducible deals")
    args = parser.parse_args()

    config = TableConfig(
        max_players=args.players,
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        seed=args.seed,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
