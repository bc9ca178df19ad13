"""
DEX smoke test: fund an issuer and a trader from a master account, issue two assets, move part of
the base asset to the trader, create an exchange pair and two crossing limit orders.
"""
import argparse
import enum
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from ..accounts import resolve_descriptor
from ..calls import CreateExchangePair, CreateOrder, DepositAsset, IssueAsset, MatchingOrder, OrderType
from ..cli import ACCOUNT_HELP, account_descriptor, add_common_arguments, positive_int, run_scenario
from ..errors import CheckFailed
from ..funding import MASTER_ACCOUNT_THRESHOLD, OTHER_ACCOUNT_THRESHOLD, ensure_funded, require_balance

log = logging.getLogger()

BASE_SYMBOL = 'BTC'
QUOTE_SYMBOL = 'ETH'
TOTAL_SUPPLY = 2000000
DEPOSIT_AMOUNT = 600000
ORDER_PRICE = 1
ORDER_AMOUNT = 300000


class DexState(enum.Enum):
    INIT = 'Init'
    MASTER_FUNDED = 'MasterFunded'
    ISSUER_FUNDED = 'IssuerFunded'
    ASSETS_ISSUED = 'AssetsIssued'
    TRADER_FUNDED = 'TraderFunded'
    ASSETS_TRANSFERRED = 'AssetsTransferred'
    PAIR_CREATED = 'PairCreated'
    ISSUER_ORDER_CREATED = 'IssuerOrderCreated'
    TRADER_ORDER_CREATED = 'TraderOrderCreated'
    DONE = 'Done'


@dataclass
class DexRun:
    """Progress of one run and the identifiers each step hands to the next."""
    state: DexState = DexState.INIT
    base_asset: Optional[str] = None
    quote_asset: Optional[str] = None
    pair_hash: Optional[str] = None
    issuer_order: Optional[str] = None
    trader_order: Optional[str] = None
    exchange: Optional[str] = None

    def advance(self, state):
        log.info(f"{self.state.value} -> {state.value}")
        self.state = state


async def run_dex(ctx, master, issuer, trader,
                  master_threshold=MASTER_ACCOUNT_THRESHOLD,
                  account_threshold=OTHER_ACCOUNT_THRESHOLD,
                  total_supply=TOTAL_SUPPLY,
                  deposit_amount=DEPOSIT_AMOUNT,
                  order_price=ORDER_PRICE,
                  order_amount=ORDER_AMOUNT):
    run = DexRun()

    log.info(f"Fetching the balance of master account => {master.ss58_address}")
    await require_balance(ctx, master.ss58_address, master_threshold)
    run.advance(DexState.MASTER_FUNDED)

    await ensure_funded(ctx, master, issuer.ss58_address, account_threshold, step='fund issuer')
    run.advance(DexState.ISSUER_FUNDED)

    base_issued, quote_issued = await ctx.step_all('issue assets',
                                                   [IssueAsset(BASE_SYMBOL, total_supply),
                                                    IssueAsset(QUOTE_SYMBOL, total_supply)],
                                                   issuer)
    # Issued(AccountId, Hash, Balance)
    run.base_asset = base_issued.event('Assets', 'Issued')[1]
    run.quote_asset = quote_issued.event('Assets', 'Issued')[1]
    log.info(f"Issuer issued {BASE_SYMBOL} as {run.base_asset} and {QUOTE_SYMBOL} as {run.quote_asset}")
    if run.base_asset == run.quote_asset:
        raise CheckFailed('issue assets', f"both assets got the same identifier {run.base_asset}")
    run.advance(DexState.ASSETS_ISSUED)

    await ensure_funded(ctx, master, trader.ss58_address, account_threshold, step='fund trader')
    run.advance(DexState.TRADER_FUNDED)

    before = await ctx.asset_balance(trader.ss58_address, run.base_asset)
    deposited = await ctx.step('transfer base asset',
                               DepositAsset(run.base_asset, trader.ss58_address, deposit_amount),
                               issuer)
    # Transfered(AccountId, AccountId, Hash, Balance)
    log.info(f"Issuer transfer to trader event: {deposited.event('Assets', 'Transfered')}")
    after = await ctx.asset_balance(trader.ss58_address, run.base_asset)
    if after - before != deposit_amount:
        raise CheckFailed('transfer base asset',
                          f"trader {BASE_SYMBOL} balance went from {before} to {after}, expected +{deposit_amount}")
    run.advance(DexState.ASSETS_TRANSFERRED)

    pair = await ctx.step('create exchange pair', CreateExchangePair(run.base_asset, run.quote_asset), issuer)
    # ExchangePairCreated(AccountId, Hash, ExchangePair)
    run.pair_hash = pair.event('Dex', 'ExchangePairCreated')[1]
    log.info(f"Issuer created exchange pair {run.pair_hash}")
    run.advance(DexState.PAIR_CREATED)

    issuer_order = await ctx.step('issuer limit order',
                                  CreateOrder(run.base_asset, run.quote_asset, OrderType.SELL,
                                              order_price, order_amount),
                                  issuer)
    # OrderCreated(AccountId, Hash, Hash, Hash, LimitOrder)
    run.issuer_order = issuer_order.event('Dex', 'OrderCreated')[3]
    log.info(f"Issuer created limit order {run.issuer_order}")
    run.advance(DexState.ISSUER_ORDER_CREATED)

    trader_order = await ctx.step('trader limit order',
                                  MatchingOrder(run.base_asset, run.quote_asset, OrderType.BUY,
                                                order_price, order_amount),
                                  trader)
    run.trader_order = trader_order.event('Dex', 'OrderCreated')[3]
    # ExchangeCreated(AccountId, Hash, Hash, Hash, Dex)
    run.exchange = trader_order.event('Dex', 'ExchangeCreated')[3]
    log.info(f"Trader created limit order {run.trader_order}, DEX created exchange {run.exchange}")
    run.advance(DexState.TRADER_ORDER_CREATED)

    run.advance(DexState.DONE)
    return run


async def scenario(ctx, args):
    master = ctx.add_signer('master', resolve_descriptor(args.master_account))
    issuer = ctx.add_signer('issuer', resolve_descriptor(args.issuer))
    trader = ctx.add_signer('trader', resolve_descriptor(args.trader))
    return await run_dex(ctx, master, issuer, trader,
                         total_supply=args.total_supply,
                         deposit_amount=args.deposit_amount,
                         order_amount=args.order_amount)


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="""
DEX testing suite for a DNA node.

Funds the issuer and trader accounts from the master account when they hold less than
10000 units, issues BTC and ETH, deposits BTC to the trader, creates the BTC/ETH exchange pair
and a sell and a matching buy limit order.
""",
        formatter_class=argparse.RawTextHelpFormatter)
    add_common_arguments(parser)
    parser.add_argument('--master-account', type=account_descriptor, required=True, help=f'master {ACCOUNT_HELP}')
    parser.add_argument('--issuer', type=account_descriptor, required=True, help=f'issuer {ACCOUNT_HELP}')
    parser.add_argument('--trader', type=account_descriptor, required=True, help=f'trader {ACCOUNT_HELP}')
    parser.add_argument('--total-supply', type=positive_int, default=TOTAL_SUPPLY,
                        help=f'Total supply of each issued asset. Default: {TOTAL_SUPPLY}')
    parser.add_argument('--deposit-amount', type=positive_int, default=DEPOSIT_AMOUNT,
                        help=f'Base asset amount deposited to the trader. Default: {DEPOSIT_AMOUNT}')
    parser.add_argument('--order-amount', type=positive_int, default=ORDER_AMOUNT,
                        help=f'Sell amount of both limit orders. Default: {ORDER_AMOUNT}')
    return parser.parse_args(argv)


def main(argv=None):
    return run_scenario('dex', scenario, get_args(argv))


if __name__ == "__main__":
    sys.exit(main())
