"""Single balance transfer signed by an account derived from a mnemonic phrase."""
import argparse
import asyncio
import logging
import os
import sys

from ..accounts import KEY_ALGORITHMS, resolve_from_mnemonic
from ..cli import add_common_arguments, positive_int, run_scenario
from ..utils import format_balance

log = logging.getLogger()

TRANSFER_AMOUNT = 2000


async def run_transfer(ctx, sender, dest, amount=TRANSFER_AMOUNT):
    chain, name, version = await asyncio.to_thread(ctx.chain.describe)
    log.info(f"You are connected to chain {chain} using {name} v{version}")
    outcome = await ctx.transfer('transfer', sender, dest, amount)
    log.info(f"Successful transfer of {format_balance(amount)} from {sender.ss58_address} to {dest} "
             f"with hash {outcome.block_hash}")
    return outcome


async def scenario(ctx, args):
    sender = ctx.add_signer('sender', resolve_from_mnemonic(args.mnemonic, args.key_type))
    return await run_transfer(ctx, sender, args.to, args.amount)


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Transfer balance from an account given by a mnemonic phrase.')
    add_common_arguments(parser)
    parser.add_argument('--mnemonic',
                        type=str,
                        default=os.getenv('DNA_MNEMONIC'),
                        help='mnemonic phrase or secret URI of the sender. Default: env DNA_MNEMONIC')
    parser.add_argument('--key-type', default='sr25519', choices=sorted(KEY_ALGORITHMS),
                        help='Key algorithm of the sender. Default: sr25519')
    parser.add_argument('--to', type=str, required=True, help='SS58 address of the recipient')
    parser.add_argument('--amount', type=positive_int, default=TRANSFER_AMOUNT,
                        help=f'Amount to transfer. Default: {TRANSFER_AMOUNT}')
    args = parser.parse_args(argv)
    if not (args.mnemonic or '').strip():
        parser.error('--mnemonic is required when env DNA_MNEMONIC is not set')
    return args


def main(argv=None):
    return run_scenario('transfer', scenario, get_args(argv))


if __name__ == "__main__":
    sys.exit(main())
