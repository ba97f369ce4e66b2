"""
Subscribers that connect the relay to the network.

DataPublisher sends each published reading to the data endpoint.
ControlSubscriber relays commands from the control endpoint to the device.
Both use the publish heartbeat to keep their channel connected.
"""
import logging
from abc import abstractmethod

from triprelay.command_relay import CommandRelay
from triprelay.connector.base import ChannelError
from triprelay.model import Reading
from triprelay.protocol.commands import CommandError, describe, validate_command
from triprelay.subscribers import Subscriber
from triprelay.supervisor import ConnectionSupervisor

logger = logging.getLogger(__name__)


class SupervisedSubscriber(Subscriber):
    """ A subscriber that checks its channel's connection each time it receives a reading. """

    def __init__(self, supervisor: ConnectionSupervisor):
        self.supervisor = supervisor

    @property
    def channel(self):
        return self.supervisor.channel

    def receive(self, reading: Reading):
        self.supervisor.check()
        if self.supervisor.connected:
            self._deliver(reading)

    @abstractmethod
    def _deliver(self, reading: Reading):
        raise NotImplementedError

    def disconnect(self):
        self.supervisor.disconnect()

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.channel)


class DataPublisher(SupervisedSubscriber):
    """ Sends readings to the channel as JSON. """

    def _deliver(self, reading: Reading):
        try:
            self.channel.send(reading.to_json())
        except ChannelError as e:
            # the next probe finds the channel closed and reconnects
            logger.error("Error publishing reading to %s: %s" % (self.channel, e))


class ControlSubscriber(SupervisedSubscriber):
    """
    Listens for commands on the channel and passes them to the command relay.
    Messages that are not a single character are logged and ignored.
    """

    def __init__(self, supervisor: ConnectionSupervisor, relay: CommandRelay):
        super().__init__(supervisor)
        self.relay = relay
        self.channel.messages.add(self.on_message)

    def _deliver(self, reading: Reading):
        """ the reading only serves as a connection heartbeat """

    def on_message(self, message):
        logger.info("Control message received: '%s'" % message)
        try:
            command = validate_command(message)
        except CommandError as e:
            logger.warning("CONTROL FAIL: %s" % e)
            return
        logger.info("Writing to serial: %s (%s)" % (command, describe(command)))
        self.relay.enqueue(command)
