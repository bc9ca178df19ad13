import asyncio
import logging

from .calls import Sudo, Transfer
from .errors import EventNotFound, SubmissionFailure
from .events import missing_events
from .nonce import NonceTracker
from .submitter import DEFAULT_FINALIZATION_TIMEOUT, FailureReason, Outcome, Submitter
from .utils import format_balance

log = logging.getLogger()


def sudo_dispatch_error(sudid):
    """Return the error carried by a `Sudo.Sudid` event, None if the root call succeeded."""
    result = sudid[0] if sudid.args else None
    if result is False:
        return 'sudo call returned false'
    if isinstance(result, dict) and 'Err' in result:
        return str(result['Err'])
    return None


class Orchestration:
    """Everything one scenario run needs: the chain connection, the submitter, per-address nonce
    counters and the resolved signers. Steps raise on the first failure; nothing is retried."""

    def __init__(self, chain, watcher, finalization_timeout=DEFAULT_FINALIZATION_TIMEOUT):
        self.chain = chain
        self.nonces = NonceTracker(chain)
        self.submitter = Submitter(chain, watcher, finalization_timeout)
        self.signers = {}

    def add_signer(self, name, keypair):
        self.signers[name] = keypair
        log.info(f"Using {name} account {keypair.ss58_address}")
        return keypair

    def signer(self, name):
        return self.signers[name]

    async def free_balance(self, address):
        return await asyncio.to_thread(self.chain.free_balance, address)

    async def asset_balance(self, address, asset_hash):
        return await asyncio.to_thread(self.chain.asset_balance, address, asset_hash)

    @staticmethod
    def check(step, call, outcome):
        """Raise SubmissionFailure for a failed outcome, EventNotFound when an expected event is missing.
        A sudo call whose `Sudid` carries an error is a failed dispatch; its inner events are only
        required once the root call succeeded."""
        if not outcome.is_success:
            raise SubmissionFailure(step, outcome)
        missing = missing_events(outcome.events, call.expected_events)
        if not missing and isinstance(call, Sudo):
            error = sudo_dispatch_error(outcome.event('Sudo', 'Sudid'))
            if error is not None:
                raise SubmissionFailure(step, Outcome.failure(outcome.extrinsic_hash, FailureReason.EXTRINSIC_FAILED,
                                                              error, block_hash=outcome.block_hash))
            missing = missing_events(outcome.events, call.inner_events)
        if missing:
            module, event = missing[0]
            raise EventNotFound(step, module, event, outcome.block_hash)
        return outcome

    async def step(self, step, call, signer):
        """Submit a single call and wait for it. Returns the successful Outcome."""
        log.info(f"[{step}] {call.name} from {signer.ss58_address}")
        async with self.nonces.reserved(signer.ss58_address) as (nonce,):
            outcome = await self.submitter.submit(call, signer, nonce)
        return self.check(step, call, outcome)

    async def step_all(self, step, calls, signer):
        """Submit independent calls of one signer concurrently, with nonces N, N+1, ... in call order,
        and wait for all of them. The first failure in call order is raised once all have finished."""
        log.info(f"[{step}] {len(calls)} calls from {signer.ss58_address}: {', '.join(c.name for c in calls)}")
        async with self.nonces.reserved(signer.ss58_address, len(calls)) as nonces:
            outcomes = await asyncio.gather(*(self.submitter.submit(call, signer, nonce)
                                              for call, nonce in zip(calls, nonces)),
                                            return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return [self.check(step, call, outcome) for call, outcome in zip(calls, outcomes)]

    async def transfer(self, step, signer, dest, amount):
        log.info(f"[{step}] Transferring {format_balance(amount)} from {signer.ss58_address} to {dest}")
        return await self.step(step, Transfer(dest=dest, value=amount), signer)
