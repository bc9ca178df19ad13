"""
Identity smoke test: registrar and user set on-chain identities, the sudo account registers the
registrar, the user requests judgement and the registrar provides it.
"""
import argparse
import logging
import sys

from ..accounts import resolve_descriptor
from ..calls import AddRegistrar, IdentityInfo, Judgement, ProvideJudgement, RequestJudgement, SetIdentity, Sudo
from ..cli import ACCOUNT_HELP, account_descriptor, add_common_arguments, positive_int, run_scenario
from ..funding import ensure_funded

log = logging.getLogger()

FUNDING_AMOUNT = 1000000
REGISTRAR_DISPLAY = 'KUSH'
USER_DISPLAY = 'DHRUV'
MAX_FEE = 10


async def run_identity(ctx, sudo, master, registrar, user,
                       funding_amount=FUNDING_AMOUNT,
                       registrar_display=REGISTRAR_DISPLAY,
                       user_display=USER_DISPLAY,
                       max_fee=MAX_FEE,
                       judgement=Judgement.REASONABLE):
    """
    Run the registrar judgement workflow.
    :return: index of the registrar as assigned by the chain
    """
    log.info("Funding registrar account.")
    await ensure_funded(ctx, master, registrar.ss58_address, funding_amount, step='fund registrar')
    log.info("Funding user account.")
    await ensure_funded(ctx, master, user.ss58_address, funding_amount, step='fund user')

    log.info("Set on-chain identity for registrar")
    await ctx.step('registrar identity', SetIdentity(IdentityInfo(display=registrar_display)), registrar)
    log.info("Set on-chain identity for user")
    await ctx.step('user identity', SetIdentity(IdentityInfo(display=user_display)), user)

    log.info("Make a sudo call to add registrar")
    added = await ctx.step('add registrar', Sudo(AddRegistrar(registrar.ss58_address)), sudo)
    # RegistrarAdded(RegistrarIndex)
    reg_index = added.event('Identity', 'RegistrarAdded')[0]
    log.info(f"Registrar {registrar.ss58_address} added with index {reg_index}")

    log.info("User is requesting judgement to the registrar")
    await ctx.step('request judgement', RequestJudgement(reg_index, max_fee), user)

    log.info("Registrar is providing judgement to the user")
    await ctx.step('provide judgement', ProvideJudgement(reg_index, user.ss58_address, judgement), registrar)
    return reg_index


async def scenario(ctx, args):
    sudo = ctx.add_signer('sudo', resolve_descriptor(args.sudo_account))
    master = ctx.add_signer('master', resolve_descriptor(args.master_account))
    registrar = ctx.add_signer('registrar', resolve_descriptor(args.registrar))
    user = ctx.add_signer('user', resolve_descriptor(args.user))
    return await run_identity(ctx, sudo, master, registrar, user,
                              funding_amount=args.funding_amount,
                              max_fee=args.max_fee,
                              judgement=Judgement[args.judgement.upper()])


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Identity and registrar judgement testing suite for a DNA node.')
    add_common_arguments(parser)
    parser.add_argument('--sudo-account', type=account_descriptor, required=True, help=f'sudo {ACCOUNT_HELP}')
    parser.add_argument('--master-account', type=account_descriptor, required=True, help=f'master {ACCOUNT_HELP}')
    parser.add_argument('--registrar', type=account_descriptor, required=True, help=f'registrar {ACCOUNT_HELP}')
    parser.add_argument('--user', type=account_descriptor, required=True, help=f'user {ACCOUNT_HELP}')
    parser.add_argument('--funding-amount', type=positive_int, default=FUNDING_AMOUNT,
                        help=f'Balance registrar and user are topped up to. Default: {FUNDING_AMOUNT}')
    parser.add_argument('--max-fee', type=int, default=MAX_FEE,
                        help=f'Maximum fee the user pays for judgement. Default: {MAX_FEE}')
    parser.add_argument('--judgement',
                        default='reasonable',
                        choices=[j.name.lower() for j in Judgement],
                        help='Judgement the registrar gives. fee_paid is rejected by pallet-identity '
                             '(InvalidJudgement), use it to check the failure path. Default: reasonable')
    return parser.parse_args(argv)


def main(argv=None):
    return run_scenario('identity', scenario, get_args(argv))


if __name__ == "__main__":
    sys.exit(main())
