"""
The log sink that records status, communication and readings.
"""
import logging
import sys

DEFAULT_LOG_FILE = 'SerialReadings.log'
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

root_logger = logging.getLogger('triprelay')


def open_log_sink(filename=DEFAULT_LOG_FILE, level=logging.INFO, logger=root_logger) -> logging.Handler:
    """
    Attaches a handler writing one line per log record to the given file. If the
    file cannot be opened, records go to standard output.
    :return: the handler, to pass to close_log_sink()
    """
    try:
        handler = logging.FileHandler(filename) if filename else logging.StreamHandler(sys.stdout)
    except OSError as e:
        handler = logging.StreamHandler(sys.stdout)
        print("Unable to open log file %s, logging to stdout: %s" % (filename, e))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def close_log_sink(handler: logging.Handler, logger=root_logger):
    if handler is None:
        return
    logger.removeHandler(handler)
    handler.close()
