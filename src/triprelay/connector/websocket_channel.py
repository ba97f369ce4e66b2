"""
Implements a channel over a WebSocket connection.
"""
import logging

from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.protocol import State
from websockets.sync.client import connect as ws_connect

from triprelay.connector.base import Channel, ChannelError, ChannelNotConnectedError, endpoint_uri
from triprelay.support.async_loop import AsyncLoop

logger = logging.getLogger(__name__)

# causes reported by probe()
SESSION_NULL = "session NULL"
SESSION_CLOSED = "session CLOSED"
ENDPOINT_UNWRITABLE = "endpoint unwritable"


class WebSocketChannel(Channel):
    """
    A channel to the WebSocket endpoint at base_uri/suffix.

    :param base_uri     the WebSocket server, e.g. ws://example.com:8080
    :param suffix       the path of the endpoint on the server
    :param open_timeout seconds allowed for the opening handshake
    :param connector    opens a connection, for testing
    """

    def __init__(self, base_uri, suffix, open_timeout=10, connector=ws_connect):
        super().__init__()
        self.uri = endpoint_uri(base_uri, suffix)
        self.open_timeout = open_timeout
        self._connector = connector
        self._connection = None
        self._receiver = None

    @property
    def endpoint(self):
        return self.uri

    @property
    def connection(self):
        return self._connection

    def connect(self):
        logger.info("Connecting to %s" % self.uri)
        try:
            connection = self._connector(self.uri, open_timeout=self.open_timeout)
        except (OSError, InvalidURI, InvalidHandshake, TimeoutError) as e:
            raise ChannelError("Error connecting, %s: %s" % (self.uri, e)) from e
        previous, self._connection = self._connection, connection
        if previous is not None:
            previous.close()
        logger.info("WebSocket connected: %s" % self.uri)
        self._start_receiving()

    def _start_receiving(self):
        if self._receiver is None:
            self._receiver = MessageLoop(self)
            self._receiver.start()

    def disconnect(self):
        receiver, self._receiver = self._receiver, None
        if receiver is not None:
            receiver.stop_event.set()
        connection, self._connection = self._connection, None
        if connection is not None:
            self._close(connection)
        if receiver is not None:
            receiver.stop()

    def _close(self, connection):
        if connection.protocol.state is State.OPEN:
            connection.close()
            logger.info("Disconnecting: WebSocket session %s now closed" % self.uri)
        else:
            logger.info("Disconnecting: WebSocket session %s was already closed" % self.uri)

    def probe(self):
        connection = self._connection
        if connection is None:
            return SESSION_NULL
        if connection.protocol.state is not State.OPEN:
            return SESSION_CLOSED
        if connection.socket.fileno() < 0:
            return ENDPOINT_UNWRITABLE
        return None

    def send(self, payload):
        connection = self._connection
        if connection is None:
            raise ChannelNotConnectedError("%s is not connected" % self.uri)
        try:
            connection.send(payload)
        except (ConnectionClosed, OSError) as e:
            raise ChannelError("Error sending to %s: %s" % (self.uri, e)) from e

    def receive(self, timeout=None):
        """
        Waits for the next inbound message and fires it on `messages`.
        :return: the message, or None if none arrived within the timeout or the channel is disconnected.
        """
        connection = self._connection
        if connection is None:
            return None
        try:
            message = connection.recv(timeout)
        except TimeoutError:
            return None
        except ConnectionClosed as e:
            logger.info("WebSocket %s closed: %s" % (self.uri, e))
            return None
        if isinstance(message, bytes):
            message = message.decode('utf-8', errors='replace')
        self._message_received(message)
        return message


class MessageLoop(AsyncLoop):
    """
    Receives messages from a channel on a background thread.
    While the channel has no open connection, the loop idles.
    """

    def __init__(self, channel: WebSocketChannel, poll_interval=0.5):
        super().__init__(name="receive %s" % channel.uri)
        self.channel = channel
        self.poll_interval = poll_interval

    def loop(self):
        if self.channel.probe() is not None:
            self.stop_event.wait(self.poll_interval)
            return
        self.channel.receive(self.poll_interval)
