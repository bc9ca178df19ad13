import asyncio
import collections
import hashlib
from contextlib import asynccontextmanager

import pytest
from substrateinterface import Keypair

from dnarunner.calls import (AddRegistrar, CreateExchangePair, CreateOrder, DepositAsset, IssueAsset,
                             ProvideJudgement, RequestJudgement, SetIdentity, Sudo, Transfer)
from dnarunner.chain import ExtrinsicResult, SignedExtrinsic
from dnarunner.context import Orchestration
from dnarunner.events import ChainEvent
from dnarunner.watcher import TransactionStatus


def h256(*parts):
    return '0x' + hashlib.sha256(':'.join(str(p) for p in parts).encode()).hexdigest()


class FakeChain:
    """In-memory stand-in for `dnarunner.chain.Chain` that executes the DNA calls when they finalize."""

    def __init__(self):
        self.balances = collections.Counter()
        self.asset_balances = collections.Counter()
        self.nonces = collections.Counter()
        self.nonce_queries = 0
        self.signed = []
        self.calls = {}
        self.executed = []
        self.order_book = []
        self.registrars = []
        self.overrides = {}
        self.closed = False

    def describe(self):
        return 'DNA Testnet', 'dna-node', '0.1.0'

    def close(self):
        self.closed = True

    def free_balance(self, address):
        return self.balances[address]

    def asset_balance(self, address, asset_hash):
        return self.asset_balances[(address, asset_hash)]

    def account_nonce(self, address):
        self.nonce_queries += 1
        return self.nonces[address]

    def sign(self, call, keypair, nonce):
        extrinsic = SignedExtrinsic(data=f"0x{len(self.signed):08x}",
                                    extrinsic_hash=h256('extrinsic', len(self.signed), keypair.ss58_address, nonce),
                                    call_name=call.name,
                                    signer=keypair.ss58_address,
                                    nonce=nonce)
        self.signed.append(extrinsic)
        self.calls[extrinsic.extrinsic_hash] = (call, keypair.ss58_address)
        return extrinsic

    def extrinsic_result(self, extrinsic_hash, block_hash):
        call, signer = self.calls[extrinsic_hash]
        self.nonces[signer] += 1
        override = self.overrides.get(call.name)
        if override is not None:
            return override(call, signer)
        self.executed.append(call)
        return ExtrinsicResult(is_success=True, error_message=None, events=tuple(self.execute(call, signer)))

    def execute(self, call, signer):
        if isinstance(call, Transfer):
            self.balances[signer] -= call.value
            self.balances[call.dest] += call.value
            return [ChainEvent('Balances', 'Transfer', (signer, call.dest, call.value))]
        if isinstance(call, IssueAsset):
            asset_hash = h256('asset', signer, call.symbol)
            self.asset_balances[(signer, asset_hash)] += call.total_supply
            return [ChainEvent('Assets', 'Issued', (signer, asset_hash, call.total_supply))]
        if isinstance(call, DepositAsset):
            self.asset_balances[(signer, call.asset_hash)] -= call.amount
            self.asset_balances[(call.to, call.asset_hash)] += call.amount
            return [ChainEvent('Assets', 'Transfered', (signer, call.to, call.asset_hash, call.amount))]
        if isinstance(call, CreateExchangePair):
            pair_hash = h256('pair', call.base, call.quote)
            return [ChainEvent('Dex', 'ExchangePairCreated', (signer, pair_hash, {}))]
        if isinstance(call, CreateOrder):
            order_hash = h256('order', signer, len(self.order_book))
            events = [ChainEvent('Dex', 'OrderCreated', (signer, call.base, call.quote, order_hash, {}))]
            if any(o.otype != call.otype and o.price == call.price for o in self.order_book):
                events.append(ChainEvent('Dex', 'ExchangeCreated',
                                         (signer, call.base, call.quote, h256('dex', order_hash), {})))
            self.order_book.append(call)
            return events
        if isinstance(call, SetIdentity):
            return [ChainEvent('Identity', 'IdentitySet', (signer,))]
        if isinstance(call, Sudo):
            return [ChainEvent('Sudo', 'Sudid', ({'Ok': None},))] + self.execute(call.call, signer)
        if isinstance(call, AddRegistrar):
            self.registrars.append(call.account)
            return [ChainEvent('Identity', 'RegistrarAdded', (len(self.registrars) - 1,))]
        if isinstance(call, RequestJudgement):
            return [ChainEvent('Identity', 'JudgementRequested', (signer, call.reg_index))]
        if isinstance(call, ProvideJudgement):
            return [ChainEvent('Identity', 'JudgementGiven', (call.target, call.reg_index))]
        raise AssertionError(f"unexpected call {call}")


def finalized_script(extrinsic):
    block = h256('block', extrinsic.extrinsic_hash)
    return [TransactionStatus('ready'), TransactionStatus('inblock', block), TransactionStatus('finalized', block)]


class FakeStream:
    def __init__(self, statuses, hang):
        self.statuses = statuses
        self.hang = hang

    def __aiter__(self):
        return self._updates()

    async def _updates(self):
        for status in self.statuses:
            await asyncio.sleep(0)
            yield status
        if self.hang:
            await asyncio.Event().wait()


class FakeWatcher:
    """Stand-in for `ExtrinsicWatcher`. `scripts` maps a call name to a function returning the statuses
    (or an exception to raise on submission); `hang` keeps a stream open after its last status."""

    def __init__(self, scripts=None, hang=False):
        self.scripts = scripts or {}
        self.hang = hang
        self.submitted = []
        self.released = collections.Counter()
        self.open = 0
        self.max_open = 0

    @asynccontextmanager
    async def watch(self, extrinsic):
        self.submitted.append(extrinsic)
        script = self.scripts.get(extrinsic.call_name, finalized_script)
        statuses = script(extrinsic)
        self.open += 1
        self.max_open = max(self.max_open, self.open)
        try:
            if isinstance(statuses, Exception):
                raise statuses
            yield FakeStream(statuses, self.hang)
        finally:
            self.open -= 1
            self.released[extrinsic.extrinsic_hash] += 1


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def watcher():
    return FakeWatcher()


@pytest.fixture
def ctx(chain, watcher):
    return Orchestration(chain, watcher, finalization_timeout=5)


@pytest.fixture(scope='session')
def keypairs():
    names = ['Alice', 'Bob', 'Charlie', 'Dave', 'Eve', 'Ferdie']
    return {name.lower(): Keypair.create_from_uri(f'//{name}', ss58_format=42) for name in names}
