import json
import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_

from triprelay.command_relay import CommandRelay
from triprelay.connector.base import ChannelError
from triprelay.model import Reading
from triprelay.publishers import ControlSubscriber, DataPublisher
from triprelay.supervisor import ConnectionSupervisor
from triprelay.support.events import EventSource


def mock_channel():
    channel = Mock()
    channel.messages = EventSource()
    channel.probe.return_value = None
    return channel


class DataPublisherTest(unittest.TestCase):

    def setUp(self):
        self.channel = mock_channel()
        self.supervisor = ConnectionSupervisor(self.channel)
        self.sut = DataPublisher(self.supervisor)

    def test_connects_and_sends_json(self):
        reading = Reading(humidity=0.5, heading=90)
        self.sut.receive(reading)
        self.channel.connect.assert_called_once_with()
        sent = self.channel.send.call_args[0][0]
        assert_that(json.loads(sent)['heading'], is_(90))
        assert_that(json.loads(sent)['humidity'], is_(0.5))

    def test_not_sent_while_disconnected(self):
        self.channel.connect.side_effect = ChannelError("refused")
        self.sut.receive(Reading())
        self.channel.send.assert_not_called()

    def test_send_error_not_propagated(self):
        self.channel.send.side_effect = ChannelError("closed")
        self.sut.receive(Reading())
        self.channel.send.assert_called_once()

    def test_sends_after_reconnect(self):
        self.sut.receive(Reading())
        self.channel.probe.return_value = "session CLOSED"
        self.sut.receive(Reading())      # probe fails, not sent
        assert_that(self.channel.send.call_count, is_(1))
        self.channel.probe.return_value = None
        self.sut.receive(Reading())      # reconnects and sends
        assert_that(self.channel.send.call_count, is_(2))
        assert_that(self.channel.connect.call_count, is_(2))

    def test_disconnect(self):
        self.sut.receive(Reading())
        self.sut.disconnect()
        self.channel.disconnect.assert_called_once_with()
        assert_that(self.supervisor.connected, is_(False))


class ControlSubscriberTest(unittest.TestCase):

    def setUp(self):
        self.channel = mock_channel()
        self.relay = CommandRelay(Mock(return_value=True))
        self.sut = ControlSubscriber(ConnectionSupervisor(self.channel), self.relay)

    def test_listens_to_channel_messages(self):
        assert_that(self.channel.messages.handlers(), is_((self.sut.on_message,)))

    def test_single_character_enqueued(self):
        self.channel.messages.fire("F")
        self.channel.messages.fire("S")
        assert_that(self.relay.pending, is_("FS"))

    def test_long_message_rejected(self):
        self.channel.messages.fire("FS")
        assert_that(self.relay.pending, is_(""))

    def test_empty_message_rejected(self):
        self.channel.messages.fire("")
        assert_that(self.relay.pending, is_(""))

    def test_reading_is_heartbeat_only(self):
        self.sut.receive(Reading())
        self.channel.connect.assert_called_once_with()
        self.channel.send.assert_not_called()
