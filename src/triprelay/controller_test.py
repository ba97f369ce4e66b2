import queue
import threading
import unittest
from unittest.mock import Mock, patch

import timeout_decorator
from hamcrest import assert_that, calling, is_, raises, empty, instance_of

from triprelay.config.config import ConfigError, RelayConfig
from triprelay.connector.base import Channel
from triprelay.controller import RelayController
from triprelay.model import Reading
from triprelay.publishers import ControlSubscriber, DataPublisher
from triprelay.subscribers import ReadingLogSubscriber
from triprelay.support.retry_strategy import PeriodRetryStrategy


class FakeConduit:
    """ a serial port fed by the test. """
    def __init__(self, port):
        self.port = port
        self.open = True
        self.data = queue.Queue()
        self.written = []
        self.wrote = threading.Event()

    def connect(self):
        self.open = True

    def read_available(self):
        try:
            return self.data.get(timeout=0.05)
        except queue.Empty:
            return b""

    def write(self, data):
        self.written.append(data)
        self.wrote.set()
        return True

    def close(self):
        self.open = False


class FakeChannel(Channel):
    def __init__(self, base, suffix):
        super().__init__()
        self.uri = base + '/' + suffix
        self.connected = False
        self.sent = []
        self.received = threading.Event()

    @property
    def endpoint(self):
        return self.uri

    def connect(self):
        self.connected = True

    def disconnect(self):
        self.connected = False

    def probe(self):
        return None if self.connected else "session NULL"

    def send(self, payload):
        self.sent.append(payload)
        self.received.set()


@patch('triprelay.controller.log_ports')
class RelayControllerTest(unittest.TestCase):

    def setUp(self):
        self.conduits = []
        self.channels = []

    def serial_factory(self, port):
        conduit = FakeConduit(port)
        self.conduits.append(conduit)
        return conduit

    def channel_factory(self, base, suffix):
        channel = FakeChannel(base, suffix)
        self.channels.append(channel)
        return channel

    def controller(self, **kwargs):
        return RelayController(RelayConfig(**kwargs), self.serial_factory, self.channel_factory)

    def test_missing_serial_port_is_fatal(self, log_ports):
        sut = self.controller()
        assert_that(calling(sut.start), raises(ConfigError))
        assert_that(sut.running, is_(False))
        assert_that(self.conduits, is_(empty()))

    def test_undetected_port_is_fatal(self, log_ports):
        sut = self.controller(serial_port='auto')
        with patch('triprelay.controller.detect_port', side_effect=ValueError("no device")):
            assert_that(calling(sut.start), raises(ConfigError))

    @timeout_decorator.timeout(5)
    def test_serial_only(self, log_ports):
        sut = self.controller(serial_port='COM3')
        sut.start()
        try:
            log_ports.assert_called_once_with()
            assert_that(sut.running, is_(True))
            assert_that(self.conduits[0].port, is_('COM3'))
            assert_that(self.channels, is_(empty()))
            assert_that(sut.registry.subscribers(), is_(empty()))
        finally:
            sut.stop()
        assert_that(sut.running, is_(False))
        assert_that(self.conduits[0].open, is_(False))

    @timeout_decorator.timeout(5)
    def test_networked_registers_publisher_and_control(self, log_ports):
        sut = self.controller(serial_port='COM3', uri_websocket='ws://host')
        sut.start()
        try:
            assert_that([c.uri for c in self.channels], is_(['ws://host/data', 'ws://host/control']))
            subscribers = sut.registry.subscribers()
            assert_that(len(subscribers), is_(2))
            assert_that(subscribers[0], is_(instance_of(DataPublisher)))
            assert_that(subscribers[1], is_(instance_of(ControlSubscriber)))
            # connected eagerly
            assert_that(all(c.connected for c in self.channels), is_(True))
        finally:
            sut.stop()
        assert_that(sut.registry.subscribers(), is_(empty()))
        assert_that(any(c.connected for c in self.channels), is_(False))

    @timeout_decorator.timeout(5)
    def test_log_readings_subscriber(self, log_ports):
        sut = self.controller(serial_port='COM3', log_readings=True)
        sut.start()
        try:
            assert_that(sut.registry.subscribers()[0], is_(instance_of(ReadingLogSubscriber)))
        finally:
            sut.stop()

    @timeout_decorator.timeout(5)
    def test_readings_published_and_commands_relayed(self, log_ports):
        sut = self.controller(serial_port='COM3', uri_websocket='ws://host', pub_freq=2)
        with sut:
            conduit = self.conduits[0]
            data, control = self.channels
            conduit.data.put(b"<10,20,5,90>\r\n<11,")
            conduit.data.put(b"21,6,91>\r\n")
            assert_that(data.received.wait(3), is_(True))
            assert_that(len(data.sent), is_(1))
            assert_that('"heading": 91' in data.sent[0], is_(True))

            control.messages.fire("F")
            control.messages.fire("too long")
            assert_that(conduit.wrote.wait(3), is_(True))
        assert_that(conduit.written, is_([b"F"]))

    def test_stop_when_not_started(self, log_ports):
        self.controller(serial_port='COM3').stop()

    @timeout_decorator.timeout(5)
    def test_start_twice(self, log_ports):
        sut = self.controller(serial_port='COM3')
        sut.start()
        try:
            sut.start()
            assert_that(len(self.conduits), is_(1))
        finally:
            sut.stop()

    @timeout_decorator.timeout(5)
    def test_disconnect_error_does_not_stop_shutdown(self, log_ports):
        sut = self.controller(serial_port='COM3', uri_websocket='ws://host')
        sut.start()
        self.channels[0].disconnect = Mock(side_effect=RuntimeError("stuck"))
        sut.stop()
        assert_that(self.conduits[0].open, is_(False))
        assert_that(self.channels[1].connected, is_(False))

    @timeout_decorator.timeout(5)
    def test_publish_during_stop_does_not_reconnect(self, log_ports):
        sut = self.controller(serial_port='COM3', uri_websocket='ws://host')
        sut.start()
        publishers = sut.registry.subscribers()
        sut.stop()
        # a publish already holding the subscribers when stop ran
        for publisher in publishers:
            publisher.receive(Reading(humidity=0.5))
        assert_that(any(c.connected for c in self.channels), is_(False))
        assert_that(self.channels[0].sent, is_(empty()))

    @timeout_decorator.timeout(5)
    def test_reconnect_period_paces_supervisors(self, log_ports):
        sut = self.controller(serial_port='COM3', uri_websocket='ws://host', reconnect_period=5)
        sut.start()
        try:
            for publisher in sut.publishers:
                assert_that(publisher.supervisor.retry_strategy, is_(instance_of(PeriodRetryStrategy)))
                assert_that(publisher.supervisor.retry_strategy.retry_period, is_(5))
        finally:
            sut.stop()
