"""
Commands sent to the device. Each is a single character:

    F: forward
    B: backward
    L: turn left
    R: turn right
    f: ping forward (range finder)
    l: ping left    (range finder)
    r: ping right   (range finder)
    S: stop

The device stops on any other character. Commands are relayed as given, the relay
only checks that a command is a single character.
"""

FORWARD = 'F'
BACKWARD = 'B'
LEFT = 'L'
RIGHT = 'R'
PING_FORWARD = 'f'
PING_LEFT = 'l'
PING_RIGHT = 'r'
STOP = 'S'

known_commands = {
    FORWARD: 'forward',
    BACKWARD: 'backward',
    LEFT: 'left',
    RIGHT: 'right',
    PING_FORWARD: 'ping forward',
    PING_LEFT: 'ping left',
    PING_RIGHT: 'ping right',
    STOP: 'stop',
}


class CommandError(ValueError):
    """ A message that is not a valid command. """


def validate_command(message):
    """
    Checks that the message is a command.
    :return: the message
    :raises CommandError: if the message is not exactly one character.
    """
    if not isinstance(message, str):
        raise CommandError("command must be text, not %s" % type(message).__name__)
    if len(message) != 1:
        raise CommandError("command length == %d" % len(message))
    return message


def describe(command):
    """
    >>> describe('F')
    'forward'
    >>> describe('x')
    'stop'
    """
    return known_commands.get(command, known_commands[STOP])
