"""
Keeps an outbound channel connected.

The supervisor is ticked each time a reading is published. A connected channel
is probed to verify it is still live; a disconnected channel is reconnected.
Reconnection attempts are therefore paced by the telemetry, and a slow connection
attempt delays the publishing thread.
"""
import logging
import threading
import time
from enum import Enum

from triprelay.connector.base import Channel, ChannelError
from triprelay.support.events import EventSource
from triprelay.support.mixins import CommonEqualityMixin, StringerMixin
from triprelay.support.retry_strategy import RetryStrategy

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTED = 'connected'


class ConnectionStateChanged(CommonEqualityMixin, StringerMixin):
    """ Fired by a supervisor when the state of its channel changes. """
    def __init__(self, channel, previous, state):
        self.channel = channel
        self.previous = previous
        self.state = state


class ConnectionSupervisor:
    """
    Tracks the connection state of a channel and reconnects it when it is lost.

    :param channel          the channel to supervise
    :param retry_strategy   decides if a reconnection is attempted on a tick. The default attempts on every tick.
    :param log              the logger for connection messages
    """

    def __init__(self, channel: Channel, retry_strategy: RetryStrategy=None, log=logger):
        self.channel = channel
        self.retry_strategy = retry_strategy or RetryStrategy()
        self.events = EventSource()
        self.logger = log
        self._state = ConnectionState.DISCONNECTED
        self._closed = False
        self._lock = threading.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def closed(self) -> bool:
        return self._closed

    def check(self, current_time=time.time) -> ConnectionState:
        """
        Verifies a connected channel or tries to reconnect a disconnected one.
        If another thread is already checking the channel, this call returns immediately.
        Once the supervisor is closed, the channel is left disconnected.
        :param current_time: a callable returning the current time, passed to the retry strategy
        :return: the state after the check
        """
        if not self._lock.acquire(blocking=False):
            return self._state
        try:
            if self._state is ConnectionState.CONNECTED:
                self._verify()
            elif not self._closed:
                self._reconnect(current_time)
        finally:
            self._lock.release()
        return self._state

    def _verify(self):
        try:
            cause = self.channel.probe()
        except Exception as e:
            cause = "exception %s" % e
        if cause is not None:
            self.logger.warning("%s has %s" % (self.channel, cause))
            self._transition(ConnectionState.DISCONNECTED)

    def _reconnect(self, current_time):
        if self.retry_strategy(current_time()) > 0:
            return
        self.logger.info("Trying to reconnect to %s..." % self.channel)
        try:
            self.channel.connect()
        except ChannelError as e:
            self.logger.error("Error connecting to %s: %s" % (self.channel, e))
            return
        self._transition(ConnectionState.CONNECTED)

    def _transition(self, state):
        previous, self._state = self._state, state
        if previous is not state:
            self.logger.info("%s is %s" % (self.channel, state.value))
            self.events.fire(ConnectionStateChanged(self.channel, previous, state))

    def disconnect(self):
        """ Closes the channel. Later checks do not reconnect it. """
        with self._lock:
            self._closed = True
            try:
                self.channel.disconnect()
            finally:
                self._transition(ConnectionState.DISCONNECTED)
