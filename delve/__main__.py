"""Command line preview: generate one level and print it as ASCII."""

from __future__ import annotations

import argparse
import logging
import sys

from delve import config
from delve.environment.generators import GenerationError, generate
from delve.environment.generators.factory import builder_names
from delve.util import rng

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="delve", description="Generate a dungeon level and print it"
    )
    parser.add_argument("--depth", type=int, default=1, help="Dungeon depth")
    parser.add_argument(
        "--builder",
        choices=builder_names(),
        metavar="NAME",
        help="Use this builder instead of a weighted random pick",
    )
    parser.add_argument(
        "--wfc",
        action="store_true",
        help="Always resynthesize the level with wave function collapse",
    )
    parser.add_argument(
        "--seed", type=str, default=config.RANDOM_SEED, help="Master random seed"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    rng.init(args.seed)

    try:
        grid = generate(
            args.depth,
            rng=rng.get("cli.preview"),
            builder_name=args.builder,
            use_wfc=True if args.wfc else None,
        )
    except GenerationError as exc:
        logger.error(f"Level generation failed: {exc}")
        return 1

    print(grid.render_ascii())
    print(
        f"depth={grid.depth} entry={grid.entry_point()} exit={grid.exit_point()} "
        f"regions={len(grid.regions)}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
