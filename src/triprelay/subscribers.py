"""
Delivers published readings to the subscribers interested in them.
"""
import logging
from abc import abstractmethod

from triprelay.model import Reading
from triprelay.support.events import EventSource

logger = logging.getLogger(__name__)


class Subscriber:
    """ Receives each reading that is published. """

    @abstractmethod
    def receive(self, reading: Reading):
        raise NotImplementedError


class SubscriberRegistry:
    """
    The set of subscribers that published readings are delivered to.

    Subscribers may be added and removed from any thread, including while a reading is
    being published. Each publish delivers to the subscribers registered when it began.
    A subscriber that raises an exception is logged and skipped.
    """

    def __init__(self):
        self._subscribers = EventSource()

    def subscribe(self, subscriber: Subscriber):
        self._subscribers.add(subscriber)
        return self

    def unsubscribe(self, subscriber: Subscriber):
        self._subscribers.remove(subscriber)
        return self

    def clear(self):
        self._subscribers.clear()

    def subscribers(self):
        return self._subscribers.handlers()

    def __len__(self):
        return len(self._subscribers)

    def __contains__(self, subscriber):
        return subscriber in self._subscribers.handlers()

    def publish(self, reading: Reading):
        for subscriber in self.subscribers():
            try:
                subscriber.receive(reading)
            except Exception as e:
                logger.exception("error delivering reading to %s: %s" % (subscriber, e))


class ReadingLogSubscriber(Subscriber):
    """ Logs each reading. """

    def __init__(self, log=logger):
        self.logger = log

    def receive(self, reading: Reading):
        self.logger.info("reading: %s" % reading)
