import argparse
import asyncio
import json
import logging
import os

import substrateinterface

from .chain import Chain
from .context import Orchestration
from .errors import DnaRunnerError
from .logger import setup_global_logger
from .submitter import DEFAULT_FINALIZATION_TIMEOUT
from .watcher import ExtrinsicWatcher

log = logging.getLogger()

ACCOUNT_HELP = 'account object {"<json-file-path>": "<password>"}'


def account_descriptor(value):
    """argparse type for `{"<json-file-path>": "<password>"}`."""
    try:
        descriptor = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"not valid JSON: {e}")
    if not isinstance(descriptor, dict) or len(descriptor) != 1:
        raise argparse.ArgumentTypeError(f"expected {ACCOUNT_HELP}, got {value}")
    return descriptor


def account_descriptor_list(value):
    """argparse type for `[{"<file1>": "<password1>"}, {"<file2>": "<password2>"}]`."""
    try:
        descriptors = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"not valid JSON: {e}")
    if not isinstance(descriptors, list) or not descriptors:
        raise argparse.ArgumentTypeError(f"expected a non-empty array of account objects, got {value}")
    return [account_descriptor(json.dumps(d)) for d in descriptors]


def positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def add_common_arguments(parser):
    url = os.getenv('DNA_WS_URL')
    parser.add_argument('--url',
                        type=str,
                        default=url,
                        required=url is None,
                        help='websocket provider url, e.g. ws://127.0.0.1:9944. Default: env DNA_WS_URL')
    parser.add_argument('--finalization-timeout',
                        type=float,
                        default=float(os.getenv('DNA_FINALIZATION_TIMEOUT', DEFAULT_FINALIZATION_TIMEOUT)),
                        help='Seconds to wait for a submitted transaction to reach a terminal status before '
                             'treating it as failed. Default: env DNA_FINALIZATION_TIMEOUT or '
                             f'{DEFAULT_FINALIZATION_TIMEOUT}')
    parser.add_argument('--log-level',
                        default='info',
                        choices=['debug', 'info', 'warning', 'error'],
                        help='Console logging level. The log file always gets debug. Default: info')
    parser.add_argument('--log-dir',
                        type=str,
                        default='.',
                        help='Directory to write the log file to. Default: current directory')
    return parser


def run_scenario(name, scenario, args):
    """
    Connect to the node, run `scenario(ctx, args)` to completion and translate errors to an exit code.
    :param name: scenario name, used for the log file
    :param scenario: coroutine function taking (Orchestration, argparse.Namespace)
    :param args: parsed arguments, see `add_common_arguments`
    :return: process exit code, 0 on success
    """
    setup_global_logger(name, args.log_level, args.log_dir)
    log.info(f"Starting {name} testing suite")
    try:
        chain = Chain.connect(args.url)
    except DnaRunnerError as e:
        log.error(f"{e}. Exiting.")
        return e.exit_code

    ctx = Orchestration(chain, ExtrinsicWatcher(args.url), args.finalization_timeout)
    try:
        asyncio.run(scenario(ctx, args))
    except DnaRunnerError as e:
        log.error(f"{e}. Exiting.")
        return e.exit_code
    except substrateinterface.exceptions.SubstrateRequestException as e:
        log.error(f"Node request failed: {e}. Exiting.")
        return 1
    finally:
        chain.close()
    log.info("DONE")
    return 0
