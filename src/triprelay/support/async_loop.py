"""
Worker threads for the relay. Each worker repeats one unit of work, such as reading the
serial port or writing commands, until it is stopped.
"""
import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

# seconds a worker waits after its work raises, so a persistent fault doesn't spin the thread
ERROR_PAUSE = 0.1


class AsyncLoop:
    """ Repeatedly runs a unit of work on a daemon thread.
        Subclasses override loop(), or pass the function to run.
        An exception raised by the work is logged and the loop carries on.
    """

    def __init__(self, fn: Callable=None, args=(), name=None, log=logger, error_pause=ERROR_PAUSE):
        """
        :param fn the function to run on each pass
        :param args arguments to pass to fn
        :param name the name of the worker thread
        """
        self.fn = fn
        self.args = args
        self.name = name
        self.error_pause = error_pause
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log

    def start(self):
        """
        Starts the worker thread. Does nothing if the worker is already started.
        """
        if self.background_thread is None:
            self.stop_event.clear()
            t = threading.Thread(target=self._run, name=self.name, daemon=True)
            self.background_thread = t
            t.start()

    def _run(self):
        self._do(self.startup)
        while self.running():
            if not self._do(self.loop):
                self.stop_event.wait(self.error_pause)
        self._do(self.shutdown)
        self.logger.info("worker %s stopped" % (self.name or ''))

    def _do(self, work) -> bool:
        """ runs the work, logging any exception.
            :return: False if the work raised an exception
        """
        try:
            work()
            return True
        except Exception as e:
            self.logger.exception("worker %s failed: %s" % (self.name or '', e))
            return False

    def startup(self):
        """ called on the worker thread before the first pass """

    def loop(self):
        self.fn(*self.args)

    def shutdown(self):
        """ called on the worker thread after the last pass """

    def running(self):
        return not self.stop_event.is_set()

    @property
    def alive(self):
        thread = self.background_thread
        return thread is not None and thread.is_alive()

    def stop(self, timeout=None):
        """
        Asks the worker to stop and waits for the thread to finish.
        Safe to call from the worker thread itself, which then does not wait.
        """
        self.stop_event.set()
        thread, self.background_thread = self.background_thread, None
        if thread and thread is not threading.current_thread():
            thread.join(timeout)
