import logging
from abc import abstractmethod

from triprelay.support.events import EventSource

logger = logging.getLogger(__name__)


class ChannelError(Exception):
    """ Indicates an error condition with a channel. """


class ChannelNotConnectedError(ChannelError):
    """ Indicates a channel is disconnected when a connection is required. """


def endpoint_uri(base, suffix):
    """
    Appends a path to a base URI.
    >>> endpoint_uri("ws://host:8080", "data")
    'ws://host:8080/data'
    >>> endpoint_uri("ws://host:8080/", "control")
    'ws://host:8080/control'
    """
    return base.rstrip('/') + '/' + suffix.lstrip('/')


class Channel:
    """
    A persistent connection to a remote endpoint.

    The channel does not report changes to its connection state. Callers
    use probe() to find out if the channel is still usable.
    Inbound text messages are fired on the `messages` event source.
    """

    def __init__(self):
        self.messages = EventSource()

    @property
    @abstractmethod
    def endpoint(self):
        """ the endpoint this channel connects to """
        raise NotImplementedError

    @abstractmethod
    def connect(self):
        """
        Opens the connection to the endpoint.
        Raises ChannelError if the connection cannot be established.
        """
        raise NotImplementedError

    @abstractmethod
    def disconnect(self):
        """ Closes the connection. Does nothing if not connected. """
        raise NotImplementedError

    @abstractmethod
    def probe(self):
        """
        Checks that the connection is usable.
        :return: None if the connection is live, otherwise a description of why it is not.
        """
        raise NotImplementedError

    @abstractmethod
    def send(self, payload):
        """
        Sends a payload to the endpoint.
        Raises ChannelError if the payload could not be sent.
        """
        raise NotImplementedError

    def _message_received(self, message):
        self.messages.fire(message)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.endpoint)
