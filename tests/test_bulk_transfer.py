import asyncio
import itertools

from dnarunner.scenarios.bulk_transfer import THRESHOLD_AMOUNT, TRANSFER_AMOUNT, run_bulk_transfer, summary


class Picks:
    """Deterministic stand-in for `random.Random` that returns the accounts at the given indexes in turn."""

    def __init__(self, *indexes):
        self.indexes = itertools.cycle(indexes)

    def choice(self, seq):
        return seq[next(self.indexes)]


def test_accounts_below_threshold_funded_once(ctx, chain, keypairs):
    master = keypairs['alice']
    accounts = [keypairs['bob'], keypairs['charlie'], keypairs['dave']]
    chain.balances[master.ss58_address] = 10 ** 7
    chain.balances[keypairs['charlie'].ss58_address] = 50000

    records = asyncio.run(run_bulk_transfer(ctx, master, accounts, rng=Picks(0)))

    assert [r.funded for r in records] == [True, False, True]
    funding = [e for e in chain.signed if e.signer == master.ss58_address]
    assert len(funding) == 2
    assert all(r.amount == TRANSFER_AMOUNT for r in records)
    assert [r.sender for r in records] == [a.ss58_address for a in accounts]
    assert {r.dest for r in records} == {keypairs['bob'].ss58_address}
    assert sum(chain.balances[a.ss58_address] for a in accounts) == 50000 + 2 * THRESHOLD_AMOUNT


def test_rerun_skips_funding(ctx, chain, keypairs):
    master = keypairs['alice']
    accounts = [keypairs['bob'], keypairs['charlie']]
    chain.balances[master.ss58_address] = 10 ** 7

    async def twice():
        first = await run_bulk_transfer(ctx, master, accounts, threshold=10000, amount=1000, rng=Picks(1, 0))
        second = await run_bulk_transfer(ctx, master, accounts, threshold=10000, amount=1000, rng=Picks(1, 0))
        return first, second

    first, second = asyncio.run(twice())
    assert all(r.funded for r in first)
    assert not any(r.funded for r in second)
    assert len([e for e in chain.signed if e.signer == master.ss58_address]) == 2


def test_summary(ctx, chain, keypairs):
    master = keypairs['alice']
    chain.balances[master.ss58_address] = 10 ** 7
    records = asyncio.run(run_bulk_transfer(ctx, master, [keypairs['bob']], rng=Picks(0)))

    table = summary(records).splitlines()
    assert table[0].startswith('|') and 'From' in table[0] and 'Block' in table[0]
    assert len(table) == 3
    assert '1.0 DNA' in table[2]
    assert 'yes' in table[2]
