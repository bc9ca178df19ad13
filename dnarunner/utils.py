import os.path as op

DECIMALS = 4
TOKEN_SYMBOL = 'DNA'


def check_file(path):
    """Ensure the provided path points to an existing file."""
    path = op.expanduser(op.expandvars(path))
    if not op.isfile(path):
        raise FileNotFoundError(f'file not found: {path}')
    return path


def format_balance(amount, decimals=DECIMALS, token=TOKEN_SYMBOL):
    """
    Helper method to display underlying Balance type in human-readable form
    :param amount: amount to be formatted, in base units
    :param decimals: number of decimals of the chain token
    :param token: token symbol
    :return: balance in human-readable form
    """
    return f"{format(amount / 10 ** decimals)} {token}"


def short(address, width=8):
    """Shorten an SS58 address or a hash for tables and log lines."""
    if address is None or len(address) <= 2 * width:
        return address
    return f"{address[:width]}..{address[-width:]}"
