import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

import substrateinterface
from substrateinterface import ExtrinsicReceipt, SubstrateInterface
from websocket import WebSocketException

from .calls import Call
from .errors import NodeConnectionError
from .events import ChainEvent
from .type_registry import DNA_TYPE_REGISTRY
from .utils import format_balance

log = logging.getLogger()


@dataclass(frozen=True)
class SignedExtrinsic:
    data: str
    extrinsic_hash: str
    call_name: str
    signer: str
    nonce: int


@dataclass(frozen=True)
class ExtrinsicResult:
    is_success: bool
    error_message: Optional[str]
    events: Tuple[ChainEvent, ...]


class Chain:
    """Chain wraps a single SubstrateInterface connection to a DNA node.
    Blocking calls are serialized by an internal lock, so methods may be called from worker threads
    (`asyncio.to_thread`). Status streams of submitted extrinsics are followed on separate
    connections, see `dnarunner.watcher`."""

    def __init__(self, substrate, url=None):
        self.substrate = substrate
        self.url = url or substrate.url
        self._lock = threading.Lock()

    @classmethod
    def connect(cls, url, ss58_format=42, type_registry=DNA_TYPE_REGISTRY):
        """Open a connection to the node at `url`. Raises NodeConnectionError if the node is unreachable."""
        try:
            substrate = SubstrateInterface(url=url, ss58_format=ss58_format, type_registry=type_registry)
            substrate.init_runtime()
        except (OSError, WebSocketException, substrateinterface.exceptions.SubstrateRequestException) as e:
            raise NodeConnectionError(f"Error connecting to {url}: {e}") from e
        chain = cls(substrate, url)
        log.info(f"Connected to {substrate.name}: {substrate.chain} {substrate.version}")
        return chain

    def close(self):
        with self._lock:
            self.substrate.close()

    def describe(self):
        """Return (chain, node name, node version)."""
        with self._lock:
            return self.substrate.chain, self.substrate.name, self.substrate.version

    def free_balance(self, address):
        with self._lock:
            account_info = self.substrate.query(module='System', storage_function='Account', params=[address])
        balance = account_info.value['data']['free']
        log.debug(f"Free balance of {address} is {format_balance(balance)}")
        return balance

    def asset_balance(self, address, asset_hash):
        """Free balance of `address` in the asset identified by `asset_hash`."""
        with self._lock:
            result = self.substrate.query(module='Assets', storage_function='FreeBalanceOf',
                                          params=[(address, asset_hash)])
        return result.value or 0

    def account_nonce(self, address):
        """Next valid nonce of `address`, transaction pool included (`system_accountNextIndex`)."""
        with self._lock:
            response = self.substrate.rpc_request('system_accountNextIndex', [address])
        return response['result']

    def _compose(self, call):
        params = {}
        for name, value in call.params().items():
            params[name] = self._compose(value) if isinstance(value, Call) else value
        return self.substrate.compose_call(call_module=call.module,
                                           call_function=call.function,
                                           call_params=params)

    def sign(self, call, keypair, nonce):
        """Compose `call` and sign it with `keypair` using the explicit `nonce`."""
        with self._lock:
            extrinsic = self.substrate.create_signed_extrinsic(call=self._compose(call), keypair=keypair, nonce=nonce)
        signed = SignedExtrinsic(data=str(extrinsic.data),
                                 extrinsic_hash=f"0x{extrinsic.extrinsic_hash.hex()}",
                                 call_name=call.name,
                                 signer=keypair.ss58_address,
                                 nonce=nonce)
        log.debug(f"Extrinsic to be sent: {call.name} from {signed.signer} nonce {nonce}: {extrinsic}")
        return signed

    def extrinsic_result(self, extrinsic_hash, block_hash):
        """
        Read the dispatch result and the events of an extrinsic from the block it was finalized in.
        :param extrinsic_hash: hash of the extrinsic
        :param block_hash: hash of the finalized block
        :return: ExtrinsicResult. Can raise SubstrateRequestException.
        """
        try:
            with self._lock:
                receipt = ExtrinsicReceipt(substrate=self.substrate,
                                           extrinsic_hash=extrinsic_hash,
                                           block_hash=block_hash,
                                           finalized=True)
                events = tuple(ChainEvent.from_record(record) for record in receipt.triggered_events)
                is_success = receipt.is_success
                error_message = receipt.error_message
        except substrateinterface.exceptions.SubstrateRequestException as e:
            log.warning(f"Failed to read events of extrinsic {extrinsic_hash}: {e}")
            raise
        log.debug("Emitted events:")
        for event in events:
            log.debug(f'* {event}')
        if error_message is not None and not isinstance(error_message, str):
            error_message = f"{error_message.get('name')}: {error_message.get('docs')}"
        return ExtrinsicResult(is_success=is_success, error_message=error_message, events=events)
