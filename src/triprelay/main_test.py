import os
import shutil
import tempfile
import threading
import unittest
from unittest.mock import patch

from hamcrest import assert_that, is_

from triprelay.config.config import ConfigError
from triprelay.main import main, parse_args


class ParseArgsTest(unittest.TestCase):

    def test_defaults(self):
        args = parse_args([])
        assert_that(args.config, is_('relay'))
        assert_that(args.config_dir, is_(None))
        assert_that(args.log_file, is_('SerialReadings.log'))
        assert_that(args.verbose, is_(False))

    def test_options(self):
        args = parse_args(['--config', 'trip', '--config-dir', '/etc/trip', '--log-file', 'x.log', '-v'])
        assert_that(args.config, is_('trip'))
        assert_that(args.config_dir, is_('/etc/trip'))
        assert_that(args.log_file, is_('x.log'))
        assert_that(args.verbose, is_(True))


@patch('triprelay.main.RelayController')
@patch('triprelay.main.relay_config')
class MainTest(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.log_file = os.path.join(self.directory, 'relay.log')

    def tearDown(self):
        shutil.rmtree(self.directory)

    def test_runs_until_stopped(self, relay_config, controller_class):
        stop = threading.Event()
        stop.set()
        assert_that(main(['--log-file', self.log_file, '--config-dir', self.directory], stop), is_(0))
        relay_config.assert_called_once_with('relay', self.directory)
        controller = controller_class.return_value
        controller_class.assert_called_once_with(relay_config.return_value)
        controller.start.assert_called_once_with()
        controller.stop.assert_called_once_with()
        with open(self.log_file) as f:
            assert_that("Goodbye for now!" in f.read(), is_(True))

    def test_config_error_exits(self, relay_config, controller_class):
        controller_class.return_value.start.side_effect = ConfigError("ERROR: Property 'serialPort' missing")
        with patch('builtins.print') as printed:
            assert_that(main(['--log-file', self.log_file]), is_(1))
        printed.assert_called_once_with("ERROR connecting: ERROR: Property 'serialPort' missing")
        controller_class.return_value.stop.assert_not_called()
