import argparse
import logging

from holdem.models import TableConfig
from strategies import STRATEGIES

from .runner import LOGGER, build_table, run_simulation, winner


def main() -> None:
    parser = argparse.ArgumentParser(description="Texas Hold'em table simulation")
    parser.add_argument("--players", type=int, default=6)
    parser.add_argument("--hands", type=int, default=10_000, help="Stop after this many hands")
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=5)
    parser.add_argument("--bb", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument(
        "--strategy",
        action="append",
        choices=sorted(STRATEGIES),
        help="Strategy for the next seat; repeat to mix (seats cycle through the list)",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(message)s")

    config = TableConfig(
        max_players=max(args.players, 2),
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        seed=args.seed,
    )
    engine = build_table(config, args.strategy or ["baseline", "random"], args.players)
    run_simulation(engine, args.hands)
    champion = winner(engine)
    if champion:
        LOGGER.info("Champion: %s", champion.name)


if __name__ == "__main__":
    main()
