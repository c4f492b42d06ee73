import pytest

from campus_market.seeders.run_all_seeders import SEEDERS, load_seeders, run_seeders


@pytest.mark.asyncio
async def test_seeders_stop_at_the_first_failure(log_messages):
    calls = []

    async def seed_users():
        calls.append("users")

    async def seed_listings():
        calls.append("listings")
        raise RuntimeError("no users to own the listings")

    async def seed_wishlists():
        calls.append("wishlists")

    completed = await run_seeders(
        [("users", seed_users), ("listings", seed_listings), ("wishlists", seed_wishlists)]
    )

    assert completed == ["users"]
    assert calls == ["users", "listings"]
    assert any("Seeder failed: listings" in line for line in log_messages)


@pytest.mark.asyncio
async def test_all_seeders_complete():
    calls = []

    async def seed():
        calls.append("ran")

    completed = await run_seeders([("first", seed), ("second", seed)])

    assert completed == ["first", "second"]
    assert calls == ["ran", "ran"]


def test_seeders_resolve_to_coroutine_functions():
    steps = load_seeders()

    assert [name for name, _ in steps] == [module for module, _ in SEEDERS]
    assert [seed.__name__ for _, seed in steps] == ["seed_users", "seed_listings", "seed_wishlists"]
