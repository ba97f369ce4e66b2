"""
The telemetry pipeline run for each chunk of data read from the device.
"""
import logging

from triprelay.model import Reading
from triprelay.protocol.decoding import DecodeError, parse_fields
from triprelay.protocol.framing import FrameAssembler
from triprelay.subscribers import SubscriberRegistry
from triprelay.throttle import PublishThrottle

logger = logging.getLogger(__name__)

# every frame is written to this log, annotated when published
archive_logger = logging.getLogger('triprelay.readings')


class TelemetryRelay:
    """
    Assembles frames from device data, and publishes or archives each one.

    :param registry     the subscribers that published readings are delivered to
    :param throttle     decides which frames are published
    :param assembler    splits the device data into frames
    """

    def __init__(self, registry: SubscriberRegistry, throttle: PublishThrottle=None,
                 assembler: FrameAssembler=None, archive=archive_logger):
        self.registry = registry
        self.throttle = throttle or PublishThrottle()
        self.assembler = assembler or FrameAssembler()
        self.archive = archive

    def on_data(self, data: bytes):
        """ called with each chunk of data read from the device. """
        for frame in self.assembler.feed(data):
            self.process_frame(frame)

    def process_frame(self, frame) -> bool:
        """
        Publishes or archives a complete frame.
        :return: True if the frame was published
        """
        frame = frame.rstrip('\r')
        if not self.throttle.advance():
            self.archive.info(frame)
            return False
        reading = self.decode(frame)
        if reading is None:
            return False
        self.archive.info("--> %s" % frame)
        self.registry.publish(reading)
        return True

    def decode(self, frame):
        """
        :return: the reading decoded from the frame, or None if the frame cannot be decoded.
        """
        try:
            fields = parse_fields(frame)
        except DecodeError as e:
            self.archive.info(frame)
            logger.warning("Cannot decode reading: %s" % e)
            return None
        if not fields:
            logger.info("Non-data reading: %s" % frame)
        return Reading(**fields)
