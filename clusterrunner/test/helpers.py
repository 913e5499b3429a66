from __future__ import absolute_import, division, print_function

from contextlib import contextmanager
import os
import subprocess
import sys

from six.moves import StringIO

from clusterrunner.config import DispatchSettings
from clusterrunner.domain import SubmissionError

HOSTNAME = 'host.example.com'
HOME = '/home/me'
USER = 'me'
JOB_ID = '42'


def resetEnv():
    os.environ['HOME'] = HOME
    os.environ['HOSTNAME'] = HOSTNAME
    os.environ['CLUSTERRUNNER_STATE_DIR'] = '/tmp/BADDIR'
    os.environ['USER'] = USER
    for var in ('LSB_JOBID', 'LSB_JOBPEND', 'LSB_JOBEXIT_STAT',
                'CLUSTERRUNNER_JOBID', 'CLUSTERRUNNER_JOBPEND',
                'CLUSTERRUNNER_JOBEXIT_STAT'):
        os.environ.pop(var, None)


@contextmanager
def capturedOutput():
    ''' Used to capture stdout or stderr.
    eg.
    with capturedOutput() as (out, err):
        print("foo")

    self.assertEqual(out.getvalue(), "foo")
    '''
    newOut, newErr = StringIO(), StringIO()
    oldOut, oldErr = sys.stdout, sys.stderr
    try:
        sys.stdout, sys.stderr = newOut, newErr
        yield sys.stdout, sys.stderr
    finally:
        sys.stdout, sys.stderr = oldOut, oldErr


def makeSettings(scriptDir, **kwargs):
    values = dict(attempts=3, delay=10, log_wait=0, tail_lines=5,
                  script_dir=scriptDir)
    values.update(kwargs)
    return DispatchSettings(**values)


class SleepRecorder(object):
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)

    @property
    def total(self):
        return sum(self.calls)


class FakeBsub(object):
    """Stands in for running bsub; fails the first `failures` calls."""

    def __init__(self, jobId=JOB_ID, failures=0, output=None):
        self.jobId = jobId
        self.failures = failures
        self.output = output
        self.calls = []

    def __call__(self, argv):
        self.calls.append(list(argv))
        if len(self.calls) <= self.failures:
            raise SubmissionError("bsub exited 255: LSF is down")
        if self.output is not None:
            return self.output
        return "Job <{}> is submitted to default queue <normal>.\n".format(
            self.jobId)


def runScript(path, env=None, **kwargs):
    """Run a generated script the way the scheduler would."""
    fullEnv = dict(os.environ)
    fullEnv.update(env or {})
    return subprocess.run(["sh", path], env=fullEnv, check=False, **kwargs)


def lsfEnv(exitStat=None, pending=None, jobId=JOB_ID):
    env = {'LSB_JOBID': jobId}
    if exitStat is not None:
        env['LSB_JOBEXIT_STAT'] = str(exitStat)
    if pending is not None:
        env['LSB_JOBPEND'] = pending
    return env
