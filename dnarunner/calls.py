"""
Typed catalogue of the extrinsics the scenarios submit.

Every call is a frozen dataclass naming its pallet (`module`), dispatchable
(`function`) and the events a successful dispatch emits. `params()` gives the
arguments in the shape `SubstrateInterface.compose_call` expects; nested calls
(sudo) are left as `Call` instances and composed by the chain connection.
"""
import enum
import re
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple

from .errors import InvalidCall

HASH_RE = re.compile(r'^0x[0-9a-fA-F]{64}$')


class OrderType(enum.IntEnum):
    BUY = 0
    SELL = 1


class Judgement(enum.Enum):
    UNKNOWN = 'Unknown'
    FEE_PAID = 'FeePaid'
    REASONABLE = 'Reasonable'
    KNOWN_GOOD = 'KnownGood'
    OUT_OF_DATE = 'OutOfDate'
    LOW_QUALITY = 'LowQuality'
    ERRONEOUS = 'Erroneous'


def _check_hash(name, value):
    if not isinstance(value, str) or not HASH_RE.match(value):
        raise InvalidCall(f"{name} must be a 0x-prefixed 32 byte hex hash, got {value!r}")


def _check_amount(name, value, allow_zero=False):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCall(f"{name} must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidCall(f"{name} must be {'non-negative' if allow_zero else 'positive'}, got {value}")


def _check_address(name, value):
    if not isinstance(value, str) or not value:
        raise InvalidCall(f"{name} must be an SS58 address, got {value!r}")


class Call:
    module: ClassVar[str]
    function: ClassVar[str]
    expected_events: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    def params(self):
        raise NotImplementedError

    def validate(self):
        pass

    @property
    def name(self):
        return f"{self.module}.{self.function}"


@dataclass(frozen=True)
class Transfer(Call):
    module: ClassVar[str] = 'Balances'
    function: ClassVar[str] = 'transfer'
    expected_events: ClassVar = (('Balances', 'Transfer'),)

    dest: str
    value: int

    def validate(self):
        _check_address('dest', self.dest)
        _check_amount('value', self.value)

    def params(self):
        return {'dest': self.dest, 'value': self.value}


@dataclass(frozen=True)
class IssueAsset(Call):
    module: ClassVar[str] = 'Assets'
    function: ClassVar[str] = 'issue'
    expected_events: ClassVar = (('Assets', 'Issued'),)

    symbol: str
    total_supply: int

    def validate(self):
        if not self.symbol or not self.symbol.isascii():
            raise InvalidCall(f"symbol must be a non-empty ASCII string, got {self.symbol!r}")
        _check_amount('total_supply', self.total_supply)

    def params(self):
        return {'symbol': self.symbol, 'total_supply': self.total_supply}


@dataclass(frozen=True)
class DepositAsset(Call):
    """Move `amount` of the asset identified by `asset_hash` from the signer to `to`."""
    module: ClassVar[str] = 'Assets'
    function: ClassVar[str] = 'deposit'
    expected_events: ClassVar = (('Assets', 'Transfered'),)

    asset_hash: str
    to: str
    amount: int

    def validate(self):
        _check_hash('asset_hash', self.asset_hash)
        _check_address('to', self.to)
        _check_amount('amount', self.amount)

    def params(self):
        return {'hash': self.asset_hash, 'to': self.to, 'amount': self.amount}


@dataclass(frozen=True)
class CreateExchangePair(Call):
    module: ClassVar[str] = 'Dex'
    function: ClassVar[str] = 'create_exchange_pair'
    expected_events: ClassVar = (('Dex', 'ExchangePairCreated'),)

    base: str
    quote: str

    def validate(self):
        _check_hash('base', self.base)
        _check_hash('quote', self.quote)
        if self.base == self.quote:
            raise InvalidCall("base and quote of an exchange pair must differ")

    def params(self):
        return {'base': self.base, 'quote': self.quote}


@dataclass(frozen=True)
class CreateOrder(Call):
    module: ClassVar[str] = 'Dex'
    function: ClassVar[str] = 'create_order'
    expected_events: ClassVar = (('Dex', 'OrderCreated'),)

    base: str
    quote: str
    otype: OrderType
    price: int
    sell_amount: int

    def validate(self):
        _check_hash('base', self.base)
        _check_hash('quote', self.quote)
        if not isinstance(self.otype, OrderType):
            raise InvalidCall(f"otype must be an OrderType, got {self.otype!r}")
        _check_amount('price', self.price)
        _check_amount('sell_amount', self.sell_amount)

    def params(self):
        return {
            'base': self.base,
            'quote': self.quote,
            'otype': self.otype.name.capitalize(),
            'price': self.price,
            'sell_amount': self.sell_amount,
        }


@dataclass(frozen=True)
class MatchingOrder(CreateOrder):
    """An order expected to cross the book: the dex emits `ExchangeCreated` alongside `OrderCreated`."""
    expected_events: ClassVar = (('Dex', 'OrderCreated'), ('Dex', 'ExchangeCreated'))


@dataclass(frozen=True)
class IdentityInfo:
    display: str
    legal: Optional[str] = None
    web: Optional[str] = None
    riot: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    twitter: Optional[str] = None
    additional: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def _data(value):
        return {'None': None} if value is None else {'Raw': value}

    def encode(self):
        return {
            'additional': [[self._data(k), self._data(v)] for k, v in self.additional],
            'display': self._data(self.display),
            'legal': self._data(self.legal),
            'web': self._data(self.web),
            'riot': self._data(self.riot),
            'email': self._data(self.email),
            'pgp_fingerprint': None,
            'image': self._data(self.image),
            'twitter': self._data(self.twitter),
        }


@dataclass(frozen=True)
class SetIdentity(Call):
    module: ClassVar[str] = 'Identity'
    function: ClassVar[str] = 'set_identity'
    expected_events: ClassVar = (('Identity', 'IdentitySet'),)

    info: IdentityInfo

    def validate(self):
        if not self.info.display:
            raise InvalidCall("identity display name must not be empty")
        # Data::Raw holds at most 32 bytes
        for name in ('display', 'legal', 'web', 'riot', 'email', 'image', 'twitter'):
            value = getattr(self.info, name)
            if value is not None and len(value.encode()) > 32:
                raise InvalidCall(f"identity field {name} exceeds 32 bytes")

    def params(self):
        return {'info': self.info.encode()}


@dataclass(frozen=True)
class RequestJudgement(Call):
    module: ClassVar[str] = 'Identity'
    function: ClassVar[str] = 'request_judgement'
    expected_events: ClassVar = (('Identity', 'JudgementRequested'),)

    reg_index: int
    max_fee: int

    def validate(self):
        _check_amount('reg_index', self.reg_index, allow_zero=True)
        _check_amount('max_fee', self.max_fee, allow_zero=True)

    def params(self):
        return {'reg_index': self.reg_index, 'max_fee': self.max_fee}


@dataclass(frozen=True)
class ProvideJudgement(Call):
    module: ClassVar[str] = 'Identity'
    function: ClassVar[str] = 'provide_judgement'
    expected_events: ClassVar = (('Identity', 'JudgementGiven'),)

    reg_index: int
    target: str
    judgement: Judgement
    fee: int = 0

    def validate(self):
        _check_amount('reg_index', self.reg_index, allow_zero=True)
        _check_address('target', self.target)
        if not isinstance(self.judgement, Judgement):
            raise InvalidCall(f"judgement must be a Judgement, got {self.judgement!r}")
        _check_amount('fee', self.fee, allow_zero=True)

    def params(self):
        if self.judgement is Judgement.FEE_PAID:
            judgement = {'FeePaid': self.fee}
        else:
            judgement = self.judgement.value
        return {'reg_index': self.reg_index, 'target': self.target, 'judgement': judgement}


@dataclass(frozen=True)
class AddRegistrar(Call):
    module: ClassVar[str] = 'Identity'
    function: ClassVar[str] = 'add_registrar'
    expected_events: ClassVar = (('Identity', 'RegistrarAdded'),)

    account: str

    def validate(self):
        _check_address('account', self.account)

    def params(self):
        return {'account': self.account}


@dataclass(frozen=True)
class Sudo(Call):
    """Dispatch `call` with root origin. `Sudo.Sudid` carries the inner dispatch result; the inner call's
    events are only emitted when that result is Ok, see `inner_events`."""
    module: ClassVar[str] = 'Sudo'
    function: ClassVar[str] = 'sudo'
    expected_events: ClassVar = (('Sudo', 'Sudid'),)

    call: Call

    @property
    def inner_events(self):
        return tuple(self.call.expected_events)

    def validate(self):
        if isinstance(self.call, Sudo):
            raise InvalidCall("nested sudo calls are not supported")
        self.call.validate()

    def params(self):
        return {'call': self.call}
