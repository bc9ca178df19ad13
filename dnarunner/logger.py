import datetime
import logging
import os


def setup_global_logger(name, level='info', log_dir='.'):
    """
    Configure the root logger for a scenario run: DEBUG into a timestamped file, `level` on the console.
    :param name: scenario name, used as the log file prefix
    :param level: console logging level (debug, info, warning, error)
    :param log_dir: directory for the log file, None disables the file handler
    :return: path of the log file or None
    """
    log_formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    root_logger = logging.getLogger()
    root_logger.setLevel('DEBUG')

    log_file = None
    if log_dir is not None:
        time_now = datetime.datetime.now().strftime("%d-%m-%Y_%H:%M:%S")
        log_file = os.path.join(log_dir, f"{name}-{time_now}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(log_formatter)
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(level.upper())
    root_logger.addHandler(console_handler)

    # substrate-interface and websockets are chatty at DEBUG
    logging.getLogger('substrateinterface').setLevel(logging.INFO)
    logging.getLogger('websockets').setLevel(logging.INFO)
    return log_file
