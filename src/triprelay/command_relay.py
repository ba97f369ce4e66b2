"""
Relays commands received from the network to the serial device.

Commands are buffered by the CommandRelay and written by a dedicated
CommandWriter thread. All pending commands are written in a single
write, and are only removed from the buffer once the device accepts the whole write.
"""
import logging
import threading
from collections import deque

from triprelay.support.async_loop import AsyncLoop

logger = logging.getLogger(__name__)


class CommandRelay:
    """
    The buffer of commands waiting to be written to the device.

    :param write    a callable that writes bytes to the device, returning True if all bytes were written.
    """

    def __init__(self, write, encoding='ascii'):
        self._write = write
        self.encoding = encoding
        self._pending = deque()
        self.condition = threading.Condition()

    @property
    def pending(self) -> str:
        with self.condition:
            return ''.join(self._pending)

    def __len__(self):
        return len(self._pending)

    def enqueue(self, command):
        with self.condition:
            self._pending.append(command)
            self.condition.notify_all()

    def wait_for_commands(self, timeout=None) -> bool:
        """
        Blocks until there are commands pending or the timeout expires.
        :return: True if commands are pending.
        """
        with self.condition:
            return self.condition.wait_for(lambda: len(self._pending) > 0, timeout)

    def wake(self):
        with self.condition:
            self.condition.notify_all()

    def flush(self) -> bool:
        """
        Writes all pending commands to the device.
        :return: True if the buffer was written or there was nothing to write. On False, the
            commands remain in the buffer.
        """
        with self.condition:
            count = len(self._pending)
            commands = ''.join(self._pending)
        if not count:
            return True
        logger.info("writing commands '%s'" % commands)
        try:
            written = self._write(commands.encode(self.encoding, errors='replace'))
        except Exception as e:
            logger.error("Exception writing to serial port: %s" % e)
            written = False
        if written:
            with self.condition:
                for _ in range(count):
                    self._pending.popleft()
        else:
            logger.debug("commands '%s' not written, will retry" % commands)
        return bool(written)


class CommandWriter(AsyncLoop):
    """
    Writes pending commands to the device on a background thread.

    The thread sleeps until a command arrives. A failed write is retried after
    retry_interval seconds until it succeeds.

    :param relay    the command buffer to drain
    :param retry_interval   seconds to wait before retrying a failed write. 0 retries immediately.
    :param idle_timeout     the longest the thread waits for a command before checking for shutdown.
    """

    def __init__(self, relay: CommandRelay, retry_interval=0.05, idle_timeout=0.5):
        super().__init__(name="command-writer")
        self.relay = relay
        self.retry_interval = retry_interval
        self.idle_timeout = idle_timeout

    def loop(self):
        if not self.relay.wait_for_commands(self.idle_timeout):
            return
        if not self.relay.flush() and self.retry_interval:
            self.stop_event.wait(self.retry_interval)

    def stop(self, timeout=None):
        self.stop_event.set()
        self.relay.wake()
        super().stop(timeout)
