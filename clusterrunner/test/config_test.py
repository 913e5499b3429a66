from __future__ import absolute_import, division, print_function

import os
import tempfile
import unittest

from mock import MagicMock, patch
import six

from clusterrunner import config

from .helpers import HOME, resetEnv

EXAMPLE_RCFILE = """\
[submit]
backend = sge
attempts = 3
delay = 2.5
name length = 200
script dir = ~/scripts
[status]
log wait = 60
tail lines = 20
poll interval = 5
[scheduler]
project = genomics
queue = long
"""

BAD_SECTION = """\
[unknown]
"""


def setUpModule():
    resetEnv()


class TestMixin(object):
    @staticmethod
    def config(tempFp=None):
        options = MagicMock()
        options.rcFile = tempFp.name if tempFp else '/a-file-does-not-exist.cfg'
        options.stateDir = '~/x'
        return config.Config(options)


class TestRcParser(unittest.TestCase, TestMixin):
    @patch('os.makedirs')
    def testStateDir(self, _makedirs):
        cfgObj = self.config()
        self.assertEqual(os.path.join(HOME, 'x/log/'), cfgObj.logDir)

    def testNoFile(self):
        cfgObj = self.config()
        self.assertEqual('lsf', cfgObj.backend)
        self.assertIsNone(cfgObj.project)
        self.assertIsNone(cfgObj.queue)
        self.assertEqual(config.DispatchSettings(), cfgObj.dispatchSettings())

    def testEmptyFile(self):
        with tempfile.NamedTemporaryFile(mode='w') as tempFp:
            tempFp.flush()
            cfgObj = self.config(tempFp)
            self.assertEqual(config.DispatchSettings(), cfgObj.dispatchSettings())

    def testConfigured(self):
        with tempfile.NamedTemporaryFile(mode='w') as tempFp:
            tempFp.write(EXAMPLE_RCFILE)
            tempFp.flush()
            cfgObj = self.config(tempFp)
        self.assertEqual('sge', cfgObj.backend)
        self.assertEqual('genomics', cfgObj.project)
        self.assertEqual('long', cfgObj.queue)
        self.assertEqual(
            config.DispatchSettings(
                attempts=3, delay=2.5, name_length=200,
                script_dir=os.path.join(HOME, 'scripts'),
                log_wait=60.0, tail_lines=20, poll_interval=5.0),
            cfgObj.dispatchSettings())

    def testSettingsAreCopies(self):
        cfgObj = self.config()
        cfgObj.dispatchSettings().attempts = 99
        self.assertEqual(5, cfgObj.dispatchSettings().attempts)


class TestMalformedRcFile(unittest.TestCase, TestMixin):
    def assertRcError(self, text, pattern):
        with tempfile.NamedTemporaryFile(mode='w') as tempFp:
            tempFp.write(text)
            tempFp.flush()
            with six.assertRaisesRegex(self, config.ConfigError, pattern):
                self.config(tempFp)

    def testBadSection(self):
        self.assertRcError(EXAMPLE_RCFILE + BAD_SECTION,
                           r'unknown configuration sections: unknown')

    def testBadOption(self):
        self.assertRcError(
            EXAMPLE_RCFILE + "\n" + "xyz = foo\n",
            r'unknown configuration options in section "scheduler": xyz')

    def testBadBackend(self):
        self.assertRcError(
            "[submit]\nbackend=pbs\n",
            r'RC file has invalid "submit.backend" setting pbs.\s*'
            r'Valid options: (lsf|sge|local)')

    def testBadNumber(self):
        self.assertRcError(
            "[submit]\nattempts=many\n",
            r'invalid "submit.attempts" setting many')

    def testZeroAttempts(self):
        self.assertRcError(
            "[submit]\nattempts=0\n",
            r'invalid "submit.attempts" setting 0.\s*Expected a number >= 1')
