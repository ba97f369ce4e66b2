import logging
import os
import shutil
import tempfile
import unittest

from hamcrest import assert_that, is_, instance_of, is_not

from triprelay.log import close_log_sink, open_log_sink


class LogSinkTest(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.logger = logging.getLogger('triprelay.test_sink')
        self.logger.propagate = False

    def tearDown(self):
        shutil.rmtree(self.directory)

    def test_lines_written_to_file(self):
        filename = os.path.join(self.directory, 'readings.log')
        handler = open_log_sink(filename, logger=self.logger)
        self.logger.info("first")
        self.logger.info("--> <10,20,5,90>")
        close_log_sink(handler, self.logger)
        with open(filename) as f:
            lines = f.read().splitlines()
        assert_that(len(lines), is_(2))
        assert_that(lines[1].endswith("--> <10,20,5,90>"), is_(True))
        assert_that(handler in self.logger.handlers, is_(False))

    def test_falls_back_to_stdout(self):
        filename = os.path.join(self.directory, 'missing', 'readings.log')
        handler = open_log_sink(filename, logger=self.logger)
        try:
            assert_that(handler, is_(instance_of(logging.StreamHandler)))
            assert_that(handler, is_not(instance_of(logging.FileHandler)))
        finally:
            close_log_sink(handler, self.logger)

    def test_close_none(self):
        close_log_sink(None, self.logger)
