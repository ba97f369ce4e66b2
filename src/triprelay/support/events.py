import logging
import threading

logger = logging.getLogger(__name__)


class EventSource(object):
    """
    Holds a list of handlers and calls each of them when an event is fired.

    Handlers may be added and removed from any thread. Firing iterates over a
    snapshot of the handlers, so a handler removed while an event is being
    fired still sees that one event and no later ones.
    """

    def __init__(self):
        self._handlers = []
        self._lock = threading.Lock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler):
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def clear(self):
        with self._lock:
            self._handlers = []

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        for handler in self.handlers():
            self._notify(handler, *args, **kwargs)

    def _notify(self, handler, *args, **kwargs):
        """ calls one handler. A failing handler is logged and does not stop the others. """
        try:
            handler(*args, **kwargs)
        except Exception as e:
            logger.exception("event handler %r failed: %s" % (handler, e))
