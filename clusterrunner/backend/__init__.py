"""
Scheduler bindings.

A backend turns a JobSpec plus its generated scripts into one submission and
returns the scheduler's job id. Everything after submission goes through the
sentinel files, so a backend never needs to query the scheduler again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import namedtuple
import logging
import os
from shlex import quote
from subprocess import PIPE, run
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import ConfigError
from ..domain import GeneratedScripts, JobSpec, SubmissionError
from ..service import service
from ..utils import autoDecode

LOG = logging.getLogger(__name__)

# Names of the variables the scheduler sets for the wrapper scripts.
SchedulerEnv = namedtuple("SchedulerEnv", "jobId, pending, exitStat, needsDriver")

FlagRule = Tuple[str, Callable[[object], List[str]]]


def formatMemory(limit) -> str:
    return "%g" % limit


def runSubmitCommand(argv: Sequence[str]) -> str:
    """Run a submission command, returning its stdout."""
    try:
        proc = run(list(argv), stdout=PIPE, stderr=PIPE, check=False)
    except OSError as err:
        raise SubmissionError("unable to run {}: {}".format(argv[0], err)) from err
    stdout = autoDecode(proc.stdout)
    if proc.returncode != 0:
        raise SubmissionError("{} exited {}: {}".format(
            argv[0], proc.returncode,
            autoDecode(proc.stderr).strip() or stdout.strip()))
    return stdout


class Backend(ABC):
    name = None
    env: SchedulerEnv = None
    # (JobSpec field, flag builder) pairs; unset fields add no flags
    flagTable: Tuple[FlagRule, ...] = ()

    def __init__(self, runCommand: Optional[Callable[[Sequence[str]], str]] = None):
        self._run = runCommand or runSubmitCommand

    @staticmethod
    def fieldValue(spec: JobSpec, fieldName: str):
        value = getattr(spec, fieldName)
        if fieldName == "working_dir" and value == os.getcwd():
            return None
        return value

    def schedulerFlags(self, spec: JobSpec) -> List[str]:
        args = []
        for fieldName, toFlags in self.flagTable:
            value = self.fieldValue(spec, fieldName)
            if value:
                args.extend(toFlags(value))
        args.extend(spec.extra_args)
        return args

    @abstractmethod
    def submitCommand(
        self, spec: JobSpec, scripts: GeneratedScripts, name: str
    ) -> List[str]:
        """Return the argv that submits the job."""

    @abstractmethod
    def parseJobId(self, output: str) -> str:
        """
        Extract the job id from the submission output.

        Raises:
            SubmissionError: if the output has no job id
        """

    def submit(self, spec: JobSpec, scripts: GeneratedScripts, name: str) -> str:
        argv = self.submitCommand(spec, scripts, name)
        return self.parseJobId(self._run(argv))

    def reap(self) -> None:
        """Release bookkeeping for jobs that have finished. Called on each poll."""

    def describe(self, spec: JobSpec, scripts: GeneratedScripts, name: str) -> str:
        return " ".join(quote(arg) for arg in self.submitCommand(spec, scripts, name))


def getBackend(name: str, **kwargs) -> Backend:
    # pylint: disable=import-outside-toplevel
    from ..service.registry import registerServices

    registerServices()
    try:
        backendClass = getattr(service().backend, name)
    except AttributeError:
        raise ConfigError("Unknown backend {!r}".format(name)) from None
    return backendClass(**kwargs)
