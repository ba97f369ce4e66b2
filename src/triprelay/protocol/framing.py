import logging

logger = logging.getLogger(__name__)

DELIMITER = b'\n'
DEFAULT_MAX_LENGTH = 4096


class FrameAssembler:
    """
    Accumulates bytes from the serial port into newline delimited frames.

    :param max_length   the most bytes buffered without seeing a delimiter. When exceeded,
        the partial frame is discarded. None disables the limit.
    :param encoding     the text encoding of the frames. Latin-1 maps each byte to one character, so
        joining the frames and delimiters gives back the bytes received.
    """

    def __init__(self, max_length=DEFAULT_MAX_LENGTH, encoding='latin-1'):
        self.max_length = max_length
        self.encoding = encoding
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """ the number of bytes received that are not yet part of a complete frame. """
        return len(self._buffer)

    def feed(self, data: bytes) -> list:
        """
        Adds data to the buffer.
        :return: the frames completed by this data, in the order received. Each frame excludes the delimiter.
        """
        buffer = self._buffer
        buffer += data
        frames = []
        index = buffer.find(DELIMITER)
        while index >= 0:
            frames.append(buffer[:index].decode(self.encoding))
            del buffer[:index + len(DELIMITER)]
            index = buffer.find(DELIMITER)
        if self.max_length is not None and len(buffer) > self.max_length:
            logger.warning("discarding %d bytes received without a line delimiter" % len(buffer))
            buffer.clear()
        return frames

    def reset(self):
        self._buffer.clear()
