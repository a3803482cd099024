"""
Logging for the timesheet dashboard.

`streamlit run app.py` reruns the script on every interaction, so
setup_logging replaces the root handlers instead of stacking new ones.
Messages go to stdout (short format) and to logs/dashboard.log (timestamped),
which also receives Streamlit's own loggers.
"""

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "dashboard.log"
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'


def _handler(handler, log_level, fmt):
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logging(log_level=logging.INFO, log_dir="logs"):
    """
    Configure the root logger once per script run.

    Args:
        log_level: Level for both handlers; the engine logs counts at DEBUG,
                   imports and admin changes at INFO
        log_dir: Directory of the log file, created when missing

    Returns:
        logging.Logger: The root logger
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    root.addHandler(_handler(logging.StreamHandler(sys.stdout), log_level, CONSOLE_FORMAT))
    # Truncated each time logging is set up
    root.addHandler(_handler(logging.FileHandler(log_file, mode='w', encoding='utf-8'), log_level, FILE_FORMAT))

    # Streamlit creates its loggers with propagate off; route them to the root handlers
    import streamlit.logger  # noqa: F401

    for name in list(logging.root.manager.loggerDict):
        if name.startswith('streamlit'):
            logging.getLogger(name).propagate = True

    root.info(f"Logging to {log_file} at {logging.getLevelName(log_level)}")
    return root


def get_logger(name):
    """Module logger, e.g. get_logger(__name__) -> 'analytics.database'"""
    return logging.getLogger(name)
