import logging

from .errors import InsufficientBalance
from .utils import format_balance

log = logging.getLogger()

MASTER_ACCOUNT_THRESHOLD = 100000
OTHER_ACCOUNT_THRESHOLD = 10000


async def require_balance(ctx, address, threshold):
    """
    Check that the free balance of `address` is at least `threshold`.
    :return: the free balance. Raises InsufficientBalance otherwise.
    """
    balance = await ctx.free_balance(address)
    log.info(f"Balance of {address} is {format_balance(balance)}")
    if balance < threshold:
        raise InsufficientBalance(address, balance, threshold)
    return balance


async def ensure_funded(ctx, faucet, address, threshold=OTHER_ACCOUNT_THRESHOLD, amount=None, step=None):
    """
    Fund `address` from the `faucet` keypair with `amount` (default: `threshold`) if its free balance
    is below `threshold`. Accounts that already hold enough are left alone, so reruns do not pay twice.
    :return: Outcome of the funding transfer, or None when no funding was needed.
             Raises InsufficientBalance if the balance is still below `threshold` after funding.
    """
    amount = threshold if amount is None else amount
    step = step or f"fund {address}"
    try:
        await require_balance(ctx, address, threshold)
        log.info(f"{address} holds at least {format_balance(threshold)}, skipping funding")
        return None
    except InsufficientBalance as e:
        log.info(f"Funding {address} from {faucet.ss58_address} with amount: {format_balance(amount)} "
                 f"(balance {format_balance(e.balance)} < {format_balance(threshold)})")

    outcome = await ctx.transfer(step, faucet, address, amount)
    log.info(f"Result : {outcome}")
    await require_balance(ctx, address, threshold)
    return outcome
