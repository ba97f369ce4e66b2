"""
Decodes the text of a frame into a Reading.

Decoding is lenient: a value that isn't a number is skipped and the reading keeps
the default for that value. A frame that is shifted or corrupted therefore still
decodes, mostly to defaults, rather than being rejected.
"""
import logging
import re

from triprelay.model import Reading, HUMIDITY, TEMPERATURE, RADIATION_CPM, HEADING, \
    DISTANCE_LEFT, DISTANCE_RIGHT, DISTANCE_FORWARD

logger = logging.getLogger(__name__)

SEPARATOR = ','


class DecodeError(ValueError):
    """ The frame is too short to contain a payload. """


# plain decimal numbers only: no underscores, nan or infinity
integer_pattern = re.compile(r"[+-]?[0-9]+")
decimal_pattern = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def integer(value):
    """
    >>> integer("-12")
    -12
    >>> integer("1_000")
    Traceback (most recent call last):
    ...
    ValueError: not an integer: '1_000'
    """
    if not integer_pattern.fullmatch(value):
        raise ValueError("not an integer: %r" % value)
    return int(value)


def hundredths(value):
    if not decimal_pattern.fullmatch(value):
        raise ValueError("not a number: %r" % value)
    return float(value) / 100


# frame position -> (reading attribute, conversion from text)
schema = {
    HUMIDITY: ('humidity', hundredths),
    TEMPERATURE: ('temperature', hundredths),
    RADIATION_CPM: ('radiation_cpm', integer),
    HEADING: ('heading', integer),
    DISTANCE_LEFT: ('distance_left', integer),
    DISTANCE_RIGHT: ('distance_right', integer),
    DISTANCE_FORWARD: ('distance_forward', integer),
}


def payload(text):
    """
    Removes the enclosing brackets from a frame.
    >>> payload("<1,2>")
    '1,2'
    >>> payload("<1,2>\\r")
    '1,2'
    """
    text = text.strip()
    if len(text) < 2:
        raise DecodeError("frame too short to decode: %r" % text)
    return text[1:-1]


def parse_fields(text) -> dict:
    """
    Parses the values in a frame.
    :return: a dictionary of Reading attribute name to value, for those values that could be parsed.
    """
    fields = {}
    for index, value in enumerate(payload(text).split(SEPARATOR)):
        if index not in schema:
            continue
        name, convert = schema[index]
        try:
            fields[name] = convert(value)
        except ValueError:
            logger.debug("skipping %s, not a number: %r" % (name, value))
    return fields


def decode_reading(text) -> Reading:
    return Reading(**parse_fields(text))
