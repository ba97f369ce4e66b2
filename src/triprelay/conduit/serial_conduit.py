"""
Implements the link to the device over a serial port.
"""

import logging
import re
import time

import serial
from serial.tools import list_ports

from triprelay.support.async_loop import AsyncLoop

logger = logging.getLogger(__name__)

BAUD_RATE = 9600
# the device needs this long after the port opens before it sends and receives reliably
SETTLE_DELAY = 2.5
READ_TIMEOUT = 0.5
WRITE_TIMEOUT = 2


class SerialConduit:
    """
    The serial port to the device, fixed at 9600 baud, 8 data bits, 1 stop bit, no parity.

    The port is created closed, and opened by connect().
    :param port     the port name, or a pyserial URL such as loop://
    :param settle_delay seconds to wait after opening before the port is used.
    """

    def __init__(self, port, settle_delay=SETTLE_DELAY, serial_factory=serial.serial_for_url):
        self.port = port
        self.settle_delay = settle_delay
        self.ser = serial_factory(port, do_not_open=True, baudrate=BAUD_RATE,
                                  bytesize=serial.EIGHTBITS, parity=serial.PARITY_NONE,
                                  stopbits=serial.STOPBITS_ONE, timeout=READ_TIMEOUT,
                                  write_timeout=WRITE_TIMEOUT)

    @property
    def target(self):
        return self.ser

    @property
    def open(self) -> bool:
        return self.ser.is_open

    def connect(self):
        """
        Opens the port and waits for the device to settle.
        :raises SerialException: if the port cannot be opened
        """
        if self.open:
            return
        self.ser.open()
        logger.info("Port '%s' open." % self.port)
        if self.settle_delay:
            time.sleep(self.settle_delay)

    def read_available(self) -> bytes:
        """
        Reads the bytes waiting at the port. Waits up to the read timeout when none are waiting.
        """
        ser = self.ser
        return ser.read(ser.in_waiting or 1)

    def write(self, data: bytes) -> bool:
        """
        Writes data to the port.
        :return: True if all of the data was written.
        """
        if not self.open:
            return False
        try:
            written = self.ser.write(data)
        except serial.SerialException as e:
            logger.error("Exception writing to serial port %s: %s" % (self.port, e))
            return False
        return written == len(data)

    def close(self):
        if self.open:
            self.ser.close()
            logger.info("Disconnecting: serial port %s closed." % self.port)


class SerialReadLoop(AsyncLoop):
    """
    Reads from the serial port on a background thread, passing the data to on_data.

    The port is opened when the loop starts, and reopened after retry_period if it fails.
    :param conduit  the serial port
    :param on_data  called with each chunk of bytes read
    """

    def __init__(self, conduit: SerialConduit, on_data, retry_period=5):
        super().__init__(name="serial-reader %s" % conduit.port)
        self.conduit = conduit
        self.on_data = on_data
        self.retry_period = retry_period

    def loop(self):
        conduit = self.conduit
        try:
            if not conduit.open:
                conduit.connect()
            data = conduit.read_available()
        except serial.SerialException as e:
            logger.error("Exception reading serial port %s: %s" % (conduit.port, e))
            conduit.close()
            self.stop_event.wait(self.retry_period)
            return
        if data:
            self.on_data(data)


def serial_port_info():
    """
    :return: a tuple of serial port info tuples,
    :rtype:
    """
    return tuple(list_ports.comports())


def serial_ports():
    """
    Returns a generator for all available serial port device names.
    """
    for port in serial_port_info():
        yield port[0]


def log_ports():
    logger.info("Ports detected:")
    for port in serial_ports():
        logger.info(port)


arduino_devices = {
    (r"%mega2560\.name%.*", r"USB VID\:PID=2341\:0010.*"): "Arduino Mega2560",
    (r"Arduino.*Leonardo.*", r"USB VID\:PID=2341\:8036.*"): "Arduino Leonardo",
    (r'Arduino Uno.*', r'USB VID:PID=2341:0043.*'): "Arduino Uno"
}

particle_devices = {
    (r"Spark Core.*Arduino.*", r"USB VID\:PID=1D50\:607D.*"): "Spark Core",
    (r".*Photon.*", r"USB VID\:PID=2b04\:c006.*"): "Particle Photon",
    (r".*P1.*", r"USB VID\:PID=2b04\:c008.*"): "Particle P1",
    (r".*Electron.*", r"USB VID\:PID=2b04\:c00a.*"): "Particle Electron"
}

known_devices = dict((k, v) for d in [arduino_devices, particle_devices] for k, v in d.items())


def matches(text, regex):
    """
    >>> bool(matches("A", "a"))
    True
    >>> bool(matches("A", "b"))
    False
    >>> bool(matches("USB VID:PID=2B04:C006 SER=00000000050C LOCATION=20-5", r"USB VID\\:PID=2b04\\:c006.*"))
    True
    """
    return re.match(regex, text, flags=re.IGNORECASE)


def is_recognised_device(p):
    """
    >>> is_recognised_device(("abc", "Blah", "USB VID:PID=2B04:C006 SER=00000000050C"))
    True
    """
    port, name, desc = p[0], p[1], p[2]
    for d in known_devices.keys():
        # under linux only the description identifies the device
        if matches(desc, d[1]):
            return True
    return False


def find_recognised_device_ports(ports):
    for p in ports:
        if is_recognised_device(p):
            yield p


def detect_port(port):
    """
    attempts to detect the given serial port. If the port is not auto, it is returned as is.
    otherwise, the device name of the first recognised device is returned.
    """
    if port == "auto":
        all_ports = serial_port_info()
        ports = tuple(find_recognised_device_ports(all_ports))
        if not ports:
            raise ValueError("Could not find a compatible device in available ports. %s" % repr(all_ports))
        return ports[0][0]
    return port
