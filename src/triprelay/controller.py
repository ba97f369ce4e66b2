"""
Wires the relay together and owns its lifecycle.
"""
import logging

from triprelay.command_relay import CommandRelay, CommandWriter
from triprelay.conduit.serial_conduit import SerialConduit, SerialReadLoop, detect_port, log_ports
from triprelay.config.config import ConfigError, RelayConfig
from triprelay.connector.websocket_channel import WebSocketChannel
from triprelay.protocol.framing import FrameAssembler
from triprelay.publishers import ControlSubscriber, DataPublisher
from triprelay.relay import TelemetryRelay
from triprelay.subscribers import ReadingLogSubscriber, SubscriberRegistry
from triprelay.supervisor import ConnectionSupervisor
from triprelay.support.retry_strategy import reconnect_strategy
from triprelay.throttle import PublishThrottle

logger = logging.getLogger(__name__)

DATA_PATH = 'data'
CONTROL_PATH = 'control'


class RelayController:
    """
    Starts and stops the relay.

    On start, the serial reader and command writer threads are started. When a WebSocket
    URI is configured, a data publisher and a control subscriber are registered, otherwise
    the relay runs with the serial port only.

    :param config           the relay settings
    :param serial_factory   creates the serial conduit from a port name
    :param channel_factory  creates an outbound channel from a base URI and path
    """

    def __init__(self, config: RelayConfig, serial_factory=SerialConduit, channel_factory=WebSocketChannel):
        self.config = config
        self.serial_factory = serial_factory
        self.channel_factory = channel_factory
        self.registry = SubscriberRegistry()
        self.conduit = None
        self.commands = None
        self.telemetry = None
        self.reader = None
        self.writer = None
        self.publishers = []

    @property
    def running(self) -> bool:
        return self.reader is not None

    def start(self):
        """
        :raises ConfigError: if the serial port is not configured or cannot be detected
        """
        if self.running:
            return
        config = self.config
        log_ports()
        port = self._resolve_port(config.require_serial_port())
        logger.info("Connecting to serial port %s" % port)
        self.conduit = self.serial_factory(port)
        self.commands = CommandRelay(self.conduit.write)
        self.telemetry = TelemetryRelay(self.registry, PublishThrottle(config.pub_freq),
                                        FrameAssembler(config.max_frame_length))
        self.reader = SerialReadLoop(self.conduit, self.telemetry.on_data)
        self.writer = CommandWriter(self.commands, config.command_retry_interval)
        self.reader.start()
        self.writer.start()

        if config.log_readings:
            self.registry.subscribe(ReadingLogSubscriber())
        if config.networked:
            self._start_network(config.uri_websocket)
        else:
            logger.info("No uriWebSocket configured, relaying serial data only")

    def _resolve_port(self, port):
        try:
            return detect_port(port)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def _start_network(self, uri):
        data = DataPublisher(self._supervise(self.channel_factory(uri, DATA_PATH)))
        control = ControlSubscriber(self._supervise(self.channel_factory(uri, CONTROL_PATH)), self.commands)
        for publisher in (data, control):
            publisher.supervisor.check()
            self.publishers.append(publisher)
            self.registry.subscribe(publisher)

    def _supervise(self, channel):
        return ConnectionSupervisor(channel, reconnect_strategy(self.config.reconnect_period))

    def stop(self):
        if len(self.registry):
            logger.info("Disconnecting subscribers")
            self.registry.clear()

        publishers, self.publishers = self.publishers, []
        if publishers:
            logger.info("Stopping websockets")
        for publisher in publishers:
            try:
                publisher.disconnect()
            except Exception as e:
                logger.exception("error disconnecting %s: %s" % (publisher, e))

        if self.running:
            logger.info("Closing serial port")
            self.reader.stop()
            self.writer.stop()
            self.conduit.close()
            self.reader = self.writer = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
