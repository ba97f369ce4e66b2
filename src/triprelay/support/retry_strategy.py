"""
Decides when a lost channel may be reconnected.

A supervisor consults its strategy on each publish tick. The strategy returns the seconds
left until the next attempt. Zero or less means attempt now, and the attempt is recorded,
whether or not it then succeeds.
"""
import time

from triprelay.support.mixins import CommonEqualityMixin


class RetryStrategy:
    """ attempts on every tick. """
    def __call__(self, current_time=None):
        return 0


class PeriodRetryStrategy(RetryStrategy, CommonEqualityMixin):
    """
    Attempts at most once per period. The first attempt is immediate.
    :param retry_period: seconds between attempts
    """

    def __init__(self, retry_period, last_tried=None):
        self.retry_period = retry_period
        self.last_tried = last_tried

    def __call__(self, current_time=None):
        now = time.time() if current_time is None else current_time
        remaining = self.remaining(now)
        if remaining <= 0:
            self.last_tried = now
        return remaining

    def remaining(self, now):
        """ seconds until the next attempt, without recording one """
        if self.last_tried is None:
            return 0
        return self.retry_period - (now - self.last_tried)


def reconnect_strategy(period):
    """
    The strategy for a reconnect period, in seconds. A period of 0 attempts on every tick.
    """
    return PeriodRetryStrategy(period) if period else RetryStrategy()
