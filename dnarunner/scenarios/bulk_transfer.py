"""
Bulk transfer smoke test: top up every test account from the master account, then have each
account send a fixed amount to a randomly chosen account of the set.
"""
import argparse
import logging
import random
import sys
from dataclasses import dataclass

from tabulate import tabulate
from tqdm import tqdm

from ..accounts import resolve_descriptor
from ..cli import ACCOUNT_HELP, account_descriptor, account_descriptor_list, add_common_arguments, positive_int, \
    run_scenario
from ..funding import ensure_funded
from ..utils import format_balance, short

log = logging.getLogger()

THRESHOLD_AMOUNT = 20000
TRANSFER_AMOUNT = 10000


@dataclass(frozen=True)
class TransferRecord:
    index: int
    sender: str
    dest: str
    amount: int
    funded: bool
    block_hash: str


async def run_bulk_transfer(ctx, master, accounts, threshold=THRESHOLD_AMOUNT, amount=TRANSFER_AMOUNT, rng=None):
    """
    Fund each of `accounts` below `threshold` from `master`, then transfer `amount` from it to a random peer.
    Accounts are processed one after another.
    :return: list of TransferRecord, one per account
    """
    rng = rng or random.Random()
    records = []
    for i, account in enumerate(tqdm(iterable=accounts, desc="Accounts", unit="", file=sys.stdout), start=1):
        log.info(f"Fetching the balance of {account.ss58_address}")
        funded = await ensure_funded(ctx, master, account.ss58_address, threshold, step=f'fund account {i}')

        dest = rng.choice(accounts)
        log.info(f"Should transfer {format_balance(amount)} from {account.ss58_address} to {dest.ss58_address}.")
        outcome = await ctx.transfer(f'transfer {i}', account, dest.ss58_address, amount)
        log.info(f"from:{account.ss58_address}, to:{dest.ss58_address}, ID : {i} STATUS : {outcome}")
        records.append(TransferRecord(index=i,
                                      sender=account.ss58_address,
                                      dest=dest.ss58_address,
                                      amount=amount,
                                      funded=funded is not None,
                                      block_hash=outcome.block_hash))
    return records


def summary(records):
    headers = ['ID', 'From', 'To', 'Amount', 'Funded', 'Block']
    rows = [[r.index, short(r.sender), short(r.dest), format_balance(r.amount), 'yes' if r.funded else 'no',
             short(r.block_hash)] for r in records]
    return tabulate(rows, headers=headers, tablefmt="github")


async def scenario(ctx, args):
    master = ctx.add_signer('master', resolve_descriptor(args.master_account))
    accounts = [ctx.add_signer(f'account {i}', resolve_descriptor(d)) for i, d in enumerate(args.accounts, start=1)]
    if args.env:
        log.info(f"Environment: {args.env}")
    records = await run_bulk_transfer(ctx, master, accounts,
                                      threshold=args.threshold,
                                      amount=args.amount,
                                      rng=random.Random(args.seed))
    print(summary(records))
    return records


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Bulk transfer testing suite for a DNA node.')
    add_common_arguments(parser)
    parser.add_argument('--master-account', type=account_descriptor, required=True, help=f'master {ACCOUNT_HELP}')
    parser.add_argument('--accounts',
                        type=account_descriptor_list,
                        required=True,
                        help='account object array [{"<json-file-path1>": "<password1>"}, '
                             '{"<json-file-path2>": "<password2>"}]')
    parser.add_argument('--env', type=str, default=None, help='name of environment, e.g. jenkins')
    parser.add_argument('--threshold', type=positive_int, default=THRESHOLD_AMOUNT,
                        help=f'Accounts below this balance are funded from the master account. '
                             f'Default: {THRESHOLD_AMOUNT}')
    parser.add_argument('--amount', type=positive_int, default=TRANSFER_AMOUNT,
                        help=f'Amount each account transfers to a random peer. Default: {TRANSFER_AMOUNT}')
    parser.add_argument('--seed', type=int, default=None, help='Seed for choosing transfer recipients')
    return parser.parse_args(argv)


def main(argv=None):
    return run_scenario('bulk-transfer', scenario, get_args(argv))


if __name__ == "__main__":
    sys.exit(main())
