"""Runs jobs as detached shell sessions on this host."""

from __future__ import annotations

import logging
import os
from subprocess import DEVNULL, STDOUT, Popen
from typing import Dict, List

from ..domain import GeneratedScripts, JobSpec, SubmissionError
from . import Backend, SchedulerEnv

LOG = logging.getLogger(__name__)


class LocalBackend(Backend):
    """
    The "scheduler" is a ``sh`` process per job; its pid is the job id.
    Scheduler flags have no meaning here and are ignored.
    """

    name = "local"
    env = SchedulerEnv(
        jobId="CLUSTERRUNNER_JOBID",
        pending="CLUSTERRUNNER_JOBPEND",
        exitStat="CLUSTERRUNNER_JOBEXIT_STAT",
        needsDriver=True,
    )

    def __init__(self, runCommand=None):
        super().__init__(runCommand)
        self._procs: Dict[str, Popen] = {}

    def submitCommand(
        self, spec: JobSpec, scripts: GeneratedScripts, name: str
    ) -> List[str]:
        return ["sh", scripts.driver]

    def parseJobId(self, output: str) -> str:
        return output.strip()

    def _openLog(self, spec: JobSpec, path):
        return open(os.path.join(spec.working_dir, path), "ab")

    def reap(self) -> None:
        for jobId, proc in list(self._procs.items()):
            if proc.poll() is not None:
                del self._procs[jobId]

    def submit(self, spec: JobSpec, scripts: GeneratedScripts, name: str) -> str:
        self.reap()
        env = dict(os.environ)
        for var in (self.env.jobId, self.env.pending, self.env.exitStat):
            env.pop(var, None)
        argv = self.submitCommand(spec, scripts, name)
        outFp = errFp = None
        try:
            outFp = self._openLog(spec, spec.output_log) if spec.output_log else None
            errFp = self._openLog(spec, spec.error_log) if spec.error_log else None
            proc = Popen(  # pylint: disable=consider-using-with
                argv,
                cwd=spec.working_dir,
                env=env,
                stdin=DEVNULL,
                stdout=outFp or DEVNULL,
                stderr=errFp or (STDOUT if outFp else DEVNULL),
                start_new_session=True,
            )
        except OSError as err:
            raise SubmissionError("unable to start {}: {}".format(argv, err)) from err
        finally:
            for fp in (outFp, errFp):
                if fp:
                    fp.close()
        jobId = self.parseJobId(str(proc.pid))
        self._procs[jobId] = proc
        LOG.debug("local job %s: %r", jobId, name)
        return jobId
