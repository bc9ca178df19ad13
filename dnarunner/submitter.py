import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import websockets
import websockets.exceptions

from .events import ChainEvent, find_event
from .watcher import DROPPED, FINALITY_TIMEOUT, FINALIZED, INVALID, USURPED, SubmissionRejected

log = logging.getLogger()

DEFAULT_FINALIZATION_TIMEOUT = 120.0


class FailureReason(str, enum.Enum):
    DROPPED = 'dropped'
    INVALID = 'invalid'
    USURPED = 'usurped'
    FINALITY_TIMEOUT = 'finality-timeout'
    TIMED_OUT = 'timed-out'
    REJECTED = 'rejected'
    STREAM_CLOSED = 'stream-closed'
    EXTRINSIC_FAILED = 'extrinsic-failed'

    def __str__(self):
        return self.value


TERMINAL_FAILURES = {
    DROPPED: FailureReason.DROPPED,
    INVALID: FailureReason.INVALID,
    USURPED: FailureReason.USURPED,
    FINALITY_TIMEOUT: FailureReason.FINALITY_TIMEOUT,
}


@dataclass(frozen=True)
class Outcome:
    """Terminal result of one submission: success carries the finalized block and the extrinsic's events,
    failure carries a reason tag."""
    extrinsic_hash: str
    block_hash: Optional[str] = None
    events: Tuple[ChainEvent, ...] = ()
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None

    @property
    def is_success(self):
        return self.reason is None

    @classmethod
    def success(cls, extrinsic_hash, block_hash, events=()):
        return cls(extrinsic_hash=extrinsic_hash, block_hash=block_hash, events=tuple(events))

    @classmethod
    def failure(cls, extrinsic_hash, reason, detail=None, block_hash=None):
        return cls(extrinsic_hash=extrinsic_hash, block_hash=block_hash, reason=reason, detail=detail)

    def event(self, module, name):
        return find_event(self.events, module, name)

    def __str__(self):
        if self.is_success:
            return f"SUCCESS in block {self.block_hash}"
        return f"FAIL: {self.reason}" + (f" ({self.detail})" if self.detail else "")


class Submitter:
    """Signs calls, submits them and collapses their status streams into exactly one Outcome.
    `chain` is a `dnarunner.chain.Chain`, `watcher` an `ExtrinsicWatcher` (or anything with an
    async context manager `watch(extrinsic)` yielding status updates)."""

    def __init__(self, chain, watcher, finalization_timeout=DEFAULT_FINALIZATION_TIMEOUT):
        self.chain = chain
        self.watcher = watcher
        self.finalization_timeout = finalization_timeout

    async def submit(self, call, signer, nonce):
        """
        Submit `call` signed by `signer` with the explicit `nonce` and wait for a terminal status.
        :return: Outcome. A stream that does not reach a terminal status within `finalization_timeout`
                 seconds gives a `timed-out` failure.
        """
        call.validate()
        extrinsic = await asyncio.to_thread(self.chain.sign, call, signer, nonce)
        log.info(f"Submitting {call.name} from {signer.ss58_address} with nonce {nonce}: {extrinsic.extrinsic_hash}")
        try:
            outcome = await asyncio.wait_for(self._follow(extrinsic), timeout=self.finalization_timeout)
        except asyncio.TimeoutError:
            outcome = Outcome.failure(extrinsic.extrinsic_hash, FailureReason.TIMED_OUT,
                                      f"no terminal status within {self.finalization_timeout}s")
        if outcome.is_success:
            log.info(f"{call.name} {extrinsic.extrinsic_hash} finalized in block {outcome.block_hash}")
        else:
            log.warning(f"{call.name} {extrinsic.extrinsic_hash} failed: {outcome}")
        return outcome

    async def _follow(self, extrinsic):
        terminal = None
        try:
            async with self.watcher.watch(extrinsic) as stream:
                async for status in stream:
                    if status.is_terminal:
                        terminal = status
                        break
                    log.debug(f"Status of {extrinsic.call_name} {extrinsic.extrinsic_hash}: {status}")
        except SubmissionRejected as e:
            return Outcome.failure(extrinsic.extrinsic_hash, FailureReason.REJECTED, str(e))
        except websockets.exceptions.ConnectionClosed as e:
            return Outcome.failure(extrinsic.extrinsic_hash, FailureReason.STREAM_CLOSED, str(e))

        # the subscription is released at this point
        if terminal is None:
            return Outcome.failure(extrinsic.extrinsic_hash, FailureReason.STREAM_CLOSED,
                                   "status stream ended without a terminal status")
        if terminal.kind == FINALIZED:
            return await self._finalized(extrinsic, terminal.block_hash)
        return Outcome.failure(extrinsic.extrinsic_hash, TERMINAL_FAILURES[terminal.kind],
                               block_hash=terminal.block_hash)

    async def _finalized(self, extrinsic, block_hash):
        result = await asyncio.to_thread(self.chain.extrinsic_result, extrinsic.extrinsic_hash, block_hash)
        if not result.is_success:
            return Outcome.failure(extrinsic.extrinsic_hash, FailureReason.EXTRINSIC_FAILED,
                                   result.error_message, block_hash=block_hash)
        return Outcome.success(extrinsic.extrinsic_hash, block_hash, result.events)
