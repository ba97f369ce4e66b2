"""
Runs the relay until interrupted.

    triprelay --config relay --log-file SerialReadings.log
"""
import argparse
import logging
import signal
import threading

from configobj import ConfigObjError

from triprelay.config.config import ConfigError, default_config_name, relay_config
from triprelay.controller import RelayController
from triprelay.log import DEFAULT_LOG_FILE, close_log_sink, open_log_sink

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Relays telemetry and commands between a serial device "
                                                 "and a WebSocket server.")
    parser.add_argument('--config', default=default_config_name,
                        help="name of the configuration, read from <name>.cfg (default: %(default)s)")
    parser.add_argument('--config-dir', default=None,
                        help="directory containing the configuration files (default: current directory)")
    parser.add_argument('--log-file', default=DEFAULT_LOG_FILE,
                        help="file to log to (default: %(default)s)")
    parser.add_argument('-v', '--verbose', action='store_true', help="log debug messages")
    return parser.parse_args(argv)


def wait_for_shutdown(stop_event: threading.Event):
    def request_stop(signum, frame):
        logger.info("received signal %d" % signum)
        stop_event.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)
    while not stop_event.wait(1):
        pass


def main(argv=None, stop_event=None):
    args = parse_args(argv)
    # ALWAYS start the logging first
    sink = open_log_sink(args.log_file, logging.DEBUG if args.verbose else logging.INFO)
    try:
        try:
            config = relay_config(args.config, args.config_dir)
            controller = RelayController(config)
            controller.start()
        except (ConfigError, ConfigObjError) as e:
            logger.error(str(e))
            print("ERROR connecting: %s" % e)
            return 1

        try:
            wait_for_shutdown(stop_event or threading.Event())
        finally:
            logger.info("Disconnecting")
            controller.stop()
            logger.info("Disconnecting, closing log. Goodbye for now!")
    finally:
        close_log_sink(sink)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
