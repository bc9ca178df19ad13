from types import SimpleNamespace

import pytest
from substrateinterface.exceptions import SubstrateRequestException

from dnarunner import chain as chain_module
from dnarunner.calls import AddRegistrar, Sudo, Transfer
from dnarunner.chain import Chain
from dnarunner.events import ChainEvent

from conftest import h256

ALICE = '5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY'


class FakeSubstrate:
    url = 'ws://127.0.0.1:9944'
    chain = 'DNA Testnet'
    name = 'dna-node'
    version = '0.1.0'

    def __init__(self):
        self.composed = []
        self.rpc_calls = []

    def compose_call(self, call_module, call_function, call_params):
        composed = {'call_module': call_module, 'call_function': call_function, 'call_args': call_params}
        self.composed.append(composed)
        return composed

    def create_signed_extrinsic(self, call, keypair, nonce):
        return SimpleNamespace(data='0x2d02', extrinsic_hash=bytes.fromhex(h256('x')[2:]), call=call)

    def query(self, module, storage_function, params):
        if storage_function == 'Account':
            return SimpleNamespace(value={'nonce': 3, 'data': {'free': 12345, 'reserved': 0}})
        return SimpleNamespace(value=None)

    def rpc_request(self, method, params):
        self.rpc_calls.append((method, params))
        return {'jsonrpc': '2.0', 'result': 3, 'id': len(self.rpc_calls)}


def receipt(is_success=True, error_message=None, events=()):
    def make(substrate, extrinsic_hash, block_hash, finalized):
        assert finalized
        return SimpleNamespace(is_success=is_success, error_message=error_message,
                               triggered_events=[SimpleNamespace(value=e) for e in events])
    return make


def test_queries():
    substrate = FakeSubstrate()
    chain = Chain(substrate)
    assert chain.url == 'ws://127.0.0.1:9944'
    assert chain.describe() == ('DNA Testnet', 'dna-node', '0.1.0')
    assert chain.free_balance(ALICE) == 12345
    assert chain.asset_balance(ALICE, h256('BTC')) == 0
    assert chain.account_nonce(ALICE) == 3
    assert substrate.rpc_calls == [('system_accountNextIndex', [ALICE])]


def test_sign(keypairs):
    substrate = FakeSubstrate()
    signed = Chain(substrate).sign(Transfer(ALICE, 10), keypairs['bob'], 7)
    assert signed.extrinsic_hash == h256('x')
    assert signed.call_name == 'Balances.transfer'
    assert signed.nonce == 7
    assert signed.signer == keypairs['bob'].ss58_address
    assert substrate.composed == [{'call_module': 'Balances', 'call_function': 'transfer',
                                   'call_args': {'dest': ALICE, 'value': 10}}]


def test_sign_composes_nested_call(keypairs):
    substrate = FakeSubstrate()
    Chain(substrate).sign(Sudo(AddRegistrar(ALICE)), keypairs['alice'], 0)
    inner, outer = substrate.composed
    assert inner['call_function'] == 'add_registrar'
    assert outer['call_module'] == 'Sudo'
    assert outer['call_args'] == {'call': inner}


def test_extrinsic_result(monkeypatch):
    monkeypatch.setattr(chain_module, 'ExtrinsicReceipt', receipt(events=[
        {'module_id': 'Balances', 'event_id': 'Transfer', 'attributes': (ALICE, ALICE, 10)},
        {'module_id': 'System', 'event_id': 'ExtrinsicSuccess', 'attributes': None},
    ]))
    result = Chain(FakeSubstrate()).extrinsic_result(h256('x'), h256('block'))
    assert result.is_success
    assert result.events[0] == ChainEvent('Balances', 'Transfer', (ALICE, ALICE, 10))


def test_extrinsic_failed(monkeypatch):
    monkeypatch.setattr(chain_module, 'ExtrinsicReceipt', receipt(
        is_success=False, error_message={'type': 'Module', 'name': 'InsufficientBalance',
                                         'docs': ['Balance too low to send value']}))
    result = Chain(FakeSubstrate()).extrinsic_result(h256('x'), h256('block'))
    assert not result.is_success
    assert result.error_message.startswith('InsufficientBalance: ')


def test_extrinsic_result_request_error(monkeypatch):
    def failing(**kwargs):
        raise SubstrateRequestException('Block not found')

    monkeypatch.setattr(chain_module, 'ExtrinsicReceipt', failing)
    with pytest.raises(SubstrateRequestException):
        Chain(FakeSubstrate()).extrinsic_result(h256('x'), h256('block'))
