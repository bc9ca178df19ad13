"""
Status streams of submitted extrinsics.

Each submission gets its own websocket connection to the node on which
`author_submitAndWatchExtrinsic` is sent. The returned subscription yields
`TransactionStatus` updates until a terminal one arrives; leaving the
`watch()` context always unwatches the subscription and closes the socket.
"""
import asyncio
import collections
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import jsonrpcclient
import websockets
import websockets.exceptions

from .errors import NodeConnectionError

log = logging.getLogger()

SUBMIT_AND_WATCH = 'author_submitAndWatchExtrinsic'
UNWATCH = 'author_unwatchExtrinsic'
UPDATE_METHOD = 'author_extrinsicUpdate'

FINALIZED = 'finalized'
DROPPED = 'dropped'
INVALID = 'invalid'
USURPED = 'usurped'
FINALITY_TIMEOUT = 'finalitytimeout'

TERMINAL_STATUSES = {FINALIZED, DROPPED, INVALID, USURPED, FINALITY_TIMEOUT}


class SubmissionRejected(Exception):
    """The node answered the submit request with a JSON-RPC error (e.g. 1010: Invalid Transaction)."""

    def __init__(self, code, message, data=None):
        super().__init__(f"{code}: {message}" + (f" ({data})" if data else ""))
        self.code = code
        self.message = message
        self.data = data


@dataclass(frozen=True)
class TransactionStatus:
    """One update of an extrinsic's lifecycle. `kind` is lower-cased (`ready`, `inblock`, `finalized`...),
    `block_hash` is set for the block carrying variants."""
    kind: str
    block_hash: Optional[str] = None

    @property
    def is_terminal(self):
        return self.kind in TERMINAL_STATUSES

    def __str__(self):
        return f"{self.kind}({self.block_hash})" if self.block_hash else self.kind


def parse_status(result):
    """Parse the `result` of an extrinsic update notification.
    Accepts both `"ready"` / `{"finalized": "0x.."}` and the legacy `"Ready"` / `{"Finalized": "0x.."}` shapes."""
    match result:
        case str():
            return TransactionStatus(result.lower())
        case dict() if len(result) == 1:
            (kind, value), = result.items()
            return TransactionStatus(kind.lower(), value if isinstance(value, str) else None)
        case _:
            raise ValueError(f'Invalid extrinsic status: {result}')


class StatusSubscription:
    """Asynchronous iterator over the status updates of one submitted extrinsic."""

    def __init__(self, ws, extrinsic):
        self.extrinsic = extrinsic
        self.subscription_id = None
        self.released = False
        self._ws = ws
        self._buffered = collections.deque()
        self._ended = False

    async def _request(self, method, params):
        """Send a JSON-RPC request and wait for its response. Notifications received meanwhile are buffered."""
        req = jsonrpcclient.request(method, params)
        await self._ws.send(json.dumps(req))
        while True:
            message = json.loads(await self._ws.recv())
            if message.get('id') == req['id']:
                return jsonrpcclient.parse(message)
            self._buffered.append(message)

    async def start(self):
        response = await self._request(SUBMIT_AND_WATCH, [self.extrinsic.data])
        if isinstance(response, jsonrpcclient.Error):
            raise SubmissionRejected(response.code, response.message, response.data)
        self.subscription_id = response.result
        log.debug(f"Watching {self.extrinsic.extrinsic_hash} with subscription {self.subscription_id}")

    def __aiter__(self):
        return self

    async def __anext__(self):
        while not self._ended:
            if self._buffered:
                message = self._buffered.popleft()
            else:
                try:
                    message = json.loads(await self._ws.recv())
                except websockets.exceptions.ConnectionClosed:
                    log.warning(f"Connection closed while watching {self.extrinsic.extrinsic_hash}")
                    self._ended = True
                    break
            params = message.get('params') or {}
            if message.get('method') != UPDATE_METHOD or params.get('subscription') != self.subscription_id:
                log.debug(f"Ignoring message {message}")
                continue
            status = parse_status(params['result'])
            self._ended = status.is_terminal
            return status
        raise StopAsyncIteration

    async def release(self):
        """Unwatch and close the connection. Safe to call more than once; only the first call acts."""
        if self.released:
            return
        self.released = True
        try:
            if self.subscription_id is not None:
                await self._ws.send(json.dumps(jsonrpcclient.request(UNWATCH, [self.subscription_id])))
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            await self._ws.close()
        log.debug(f"Released subscription {self.subscription_id} of {self.extrinsic.extrinsic_hash}")


class ExtrinsicWatcher:
    def __init__(self, url, open_timeout=10.0):
        self.url = url
        self.open_timeout = open_timeout

    async def _connect(self):
        try:
            return await websockets.connect(self.url,
                                            open_timeout=self.open_timeout,
                                            max_size=None,
                                            ping_interval=20,
                                            ping_timeout=20,
                                            close_timeout=1)
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            raise NodeConnectionError(f"Error connecting to {self.url}: {e}") from e

    @asynccontextmanager
    async def watch(self, extrinsic):
        """Submit `extrinsic` (a SignedExtrinsic) and yield its StatusSubscription."""
        subscription = StatusSubscription(await self._connect(), extrinsic)
        try:
            await subscription.start()
            yield subscription
        finally:
            await subscription.release()
