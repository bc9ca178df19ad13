import asyncio

import pytest

from dnarunner.nonce import NonceTracker

ADDRESS = '5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY'


def test_reserve_many_at_once_is_consecutive(chain):
    chain.nonces[ADDRESS] = 7
    tracker = NonceTracker(chain)
    assert asyncio.run(tracker.reserve(ADDRESS, 4)) == [7, 8, 9, 10]


def test_sequential_reservations_while_in_flight_continue_locally(chain):
    chain.nonces[ADDRESS] = 3
    tracker = NonceTracker(chain)

    async def reserve_five():
        return [(await tracker.reserve(ADDRESS))[0] for _ in range(5)]

    assert asyncio.run(reserve_five()) == [3, 4, 5, 6, 7]
    assert chain.nonce_queries == 1
    assert tracker.in_flight(ADDRESS) == 5


def test_concurrent_reservations_never_collide(chain):
    chain.nonces[ADDRESS] = 12
    tracker = NonceTracker(chain)

    async def reserve_concurrently():
        return await asyncio.gather(*(tracker.reserve(ADDRESS) for _ in range(10)))

    nonces = sorted(n for (n,) in asyncio.run(reserve_concurrently()))
    assert nonces == list(range(12, 22))


def test_released_counter_is_requeried(chain):
    chain.nonces[ADDRESS] = 0
    tracker = NonceTracker(chain)

    async def two_steps():
        async with tracker.reserved(ADDRESS, 2) as first:
            chain.nonces[ADDRESS] += 2
        async with tracker.reserved(ADDRESS) as second:
            pass
        return first, second

    first, second = asyncio.run(two_steps())
    assert first == [0, 1]
    assert second == [2]
    assert chain.nonce_queries == 2
    assert tracker.in_flight(ADDRESS) == 0


def test_release_happens_when_the_step_raises(chain):
    tracker = NonceTracker(chain)

    async def failing_step():
        async with tracker.reserved(ADDRESS, 3):
            raise RuntimeError('boom')

    with pytest.raises(RuntimeError):
        asyncio.run(failing_step())
    assert tracker.in_flight(ADDRESS) == 0


def test_addresses_are_independent(chain):
    other = '5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty'
    chain.nonces[ADDRESS] = 5
    chain.nonces[other] = 40
    tracker = NonceTracker(chain)

    async def both():
        return await tracker.reserve(ADDRESS, 2), await tracker.reserve(other, 2)

    assert asyncio.run(both()) == ([5, 6], [40, 41])


def test_reserve_rejects_non_positive_count(chain):
    with pytest.raises(ValueError):
        asyncio.run(NonceTracker(chain).reserve(ADDRESS, 0))
