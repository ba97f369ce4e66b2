import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

# The default configuration name, giving relay.cfg
default_config_name = 'relay'

# the recognised keys, their types and defaults
config_spec = [
    "serialPort = string(default='')",
    "uriWebSocket = string(default='')",
    "pubFreq = integer(default=1)",
    "reconnectPeriod = float(min=0, default=0)",
    "commandRetryInterval = float(min=0, default=0.05)",
    "maxFrameLength = integer(min=1, default=4096)",
    "logReadings = boolean(default=False)",
]


class ConfigError(Exception):
    """ The configuration is missing a required value. """


class RelayConfig:
    """
    The settings for a relay. Attributes are set from the configuration
    keys listed in `keys`.
    """
    keys = {
        'serialPort': 'serial_port',
        'uriWebSocket': 'uri_websocket',
        'pubFreq': 'pub_freq',
        'reconnectPeriod': 'reconnect_period',
        'commandRetryInterval': 'command_retry_interval',
        'maxFrameLength': 'max_frame_length',
        'logReadings': 'log_readings',
    }

    def __init__(self, serial_port='', uri_websocket='', pub_freq=1, reconnect_period=0,
                 command_retry_interval=0.05, max_frame_length=4096, log_readings=False):
        self.serial_port = serial_port
        self.uri_websocket = uri_websocket
        self.pub_freq = pub_freq
        self.reconnect_period = reconnect_period
        self.command_retry_interval = command_retry_interval
        self.max_frame_length = max_frame_length
        self.log_readings = log_readings

    def normalize(self):
        if self.pub_freq <= 0:
            logger.warning("pubFreq %d is not positive, publishing every reading" % self.pub_freq)
            self.pub_freq = 1
        return self

    def require_serial_port(self):
        if not self.serial_port:
            raise ConfigError("ERROR: Property 'serialPort' missing from configuration.")
        return self.serial_port

    @property
    def networked(self) -> bool:
        return bool(self.uri_websocket)


def config_flavor(name, flavor=None):
    configname = name if not flavor else name + '.' + flavor
    return configname


def config_filename(name, directory=None):
    """
    Determines the location of a config file in the given directory.
    """
    config_file = os.path.join(directory or os.curdir, name + config_extension)
    return config_file


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, subpart=None) -> ConfigObj:
    """
    Loads a specialization of a config file. The configuration file is expected to be named
    after the base, followed by a period and then the specialization, if the specialization is given,
    otherwise just the base name.
    :param name:    The name of the base configuration
    :param subpart: The name of the specialization.
    :return: The ConfigObj for the configuration file.
    """
    configname = config_flavor(name, subpart)
    file = config_filename(configname, directory)
    config = load_config_file_base(file, False)
    return config


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def load_config(name=default_config_name, directory=None, home=None) -> ConfigObj:
    """
        Loads all the configuration files that relate to the given name.
        Configurations are loaded in this order, later values replacing earlier ones:
        - the default specialization
        - the platform specialization
        - the user override in the home directory
        - the base configuration
        The configurations are flattened into a single configuration, and then validated
        against the configuration spec, which also fills in defaults.
    :directory: the location of the configuration files
    :return:
    """
    local_config = config_flavor_file(name, directory)
    default_config = config_flavor_file(name, directory, 'default')
    platform_config = config_flavor_file(name, directory, os_name())
    user_config = load_config_file_base(os.path.join(home or os.path.expanduser('~'),
                                                     name + config_extension), must_exist=False)
    config = ConfigObj(configspec=config_spec)
    config.merge(default_config)
    config.merge(platform_config)
    config.merge(user_config)
    config.merge(local_config)

    validator = Validator()
    result = config.validate(validator, preserve_errors=True)
    if result is not True:
        errors = ["%s: %s" % (key, error) for sections, key, error in flatten_errors(config, result)]
        raise ConfigObjError("the config file %s failed validation: %s" % (name, ", ".join(errors)))
    return config


def apply_conf(conf: Section, target, names=None):
    """
    Applies the attributes contained in a configuration object to a target object.
    It does this by iterating over the items in the configuration and setting any attributes with the same name,
    or the name given by the names mapping.
    :param conf:
    :param target:
    :param names:   a mapping from configuration key to attribute name
    :return: the target
    """
    names = names or {}
    for k, v in conf.items():
        attr = names.get(k, k)
        if hasattr(target, attr):
            setattr(target, attr, v)
    return target


def relay_config(name=default_config_name, directory=None, home=None) -> RelayConfig:
    """
    Loads the relay configuration.
    """
    conf = load_config(name, directory, home)
    for key in ('serialPort', 'uriWebSocket'):
        if not conf[key]:
            logger.info("Property not found: '%s'." % key)
    return apply_conf(conf, RelayConfig(), RelayConfig.keys).normalize()
