import asyncio
import importlib
import sys
from typing import Awaitable, Callable, Iterable, Tuple

from loguru import logger

# module and coroutine function of every seeder, in dependency order
SEEDERS = [
    ("campus_market.seeders.1_users", "seed_users"),
    ("campus_market.seeders.2_listings", "seed_listings"),
    ("campus_market.seeders.3_wishlists", "seed_wishlists"),
]

SeedStep = Tuple[str, Callable[[], Awaitable[None]]]


def load_seeders() -> list[SeedStep]:
    # module names start with a digit, so they can only be imported by name
    return [
        (module_name, getattr(importlib.import_module(module_name), function_name))
        for module_name, function_name in SEEDERS
    ]


async def run_seeders(steps: Iterable[SeedStep]) -> list[str]:
    """
    Run the seeders one after another in this process.

    Stops at the first failure since later seeders build on earlier data.
    Returns the names of the seeders that completed.
    """
    completed = []
    for name, seed in steps:
        logger.info("Running seeder: {}", name)
        try:
            await seed()
        except Exception:
            logger.exception("Seeder failed: {}", name)
            break
        completed.append(name)
        logger.info("Seeder finished: {}", name)
    return completed


def main() -> int:
    steps = load_seeders()
    completed = asyncio.run(run_seeders(steps))
    return 0 if len(completed) == len(steps) else 1


if __name__ == "__main__":
    sys.exit(main())
