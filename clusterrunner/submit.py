"""
Submission of one job to its scheduler.

Nothing here raises to the caller: a submission that cannot be completed
leaves the job FAILED, its fail outputs created and the error recorded on the
job state.
"""

from __future__ import annotations

import logging
import time
import traceback

from .backend import Backend
from .config import DispatchSettings
from .domain import DispatchError, ErrorKind, JobSpec, JobState, RunStatus
from .retry import attempt
from .scripts import ScriptGenerator
from .utils import createNewFile, makeDirs, tryDelete, utcNow

LOG = logging.getLogger(__name__)


class SubmissionClient:
    def __init__(
        self,
        backend: Backend,
        generator: ScriptGenerator,
        settings: DispatchSettings,
        log=LOG,
        sleep=time.sleep,
    ):
        self.backend = backend
        self.generator = generator
        self.settings = settings
        self.log = log
        self.sleep = sleep

    def submit(self, spec: JobSpec, state: JobState) -> None:
        """Write the scripts, clean up after earlier runs and submit."""
        name = spec.display_name(self.settings.name_length)
        try:
            makeDirs(spec.output_directories())
            self.generator.write(spec, state.scripts)

            command = self.backend.describe(spec, state.scripts, name)
            if self.log.isEnabledFor(logging.DEBUG):
                self.log.debug("Starting: %s > %s", spec.working_dir, command)
            else:
                self.log.info("Starting: %s", command)

            self.deleteLogs(spec)
            self.deleteOutputs(spec)

            state.status = RunStatus.RUNNING
            jobId = attempt(
                lambda: self._submitOnce(spec, state, name),
                self.settings.attempts,
                self.settings.delay,
                sleep=self.sleep,
                log=self.log)
            state.assign_job_id(jobId, spec.working_dir)
            state.submit_time = utcNow()
            self.log.info("Submitted %s job id: %s", self.backend.name, jobId)
        except Exception as err:  # pylint: disable=broad-except
            self.fail(spec, state, err)

    def _submitOnce(self, spec: JobSpec, state: JobState, name: str) -> str:
        state.attempts += 1
        return self.backend.submit(spec, state.scripts, name)

    def deleteLogs(self, spec: JobSpec) -> None:
        for path in spec.logs:
            tryDelete(spec.resolve(path), self.log)

    def deleteOutputs(self, spec: JobSpec) -> None:
        for path in spec.all_outputs():
            tryDelete(spec.resolve(path), self.log)

    def fail(self, spec: JobSpec, state: JobState, err: Exception) -> None:
        state.status = RunStatus.FAILED
        state.finish_time = utcNow()
        state.error = DispatchError(
            ErrorKind.SUBMISSION, "unable to submit job", err)
        for path in state.scripts:
            tryDelete(path, self.log)
        for path in spec.fail_outputs:
            try:
                createNewFile(spec.resolve(path))
            except OSError:
                self.log.debug("unable to create %s", path, exc_info=True)
        self.writeStackTrace(spec, err)
        self.log.error("Error: %s", spec.command_line, exc_info=err)

    def writeStackTrace(self, spec: JobSpec, err: Exception) -> None:
        """Put the submission error where the job's own output would have gone."""
        logPath = spec.diagnostic_log
        if not logPath:
            return
        try:
            with open(spec.resolve(logPath), "a", encoding="utf-8") as fp:
                fp.write("".join(
                    traceback.format_exception(type(err), err, err.__traceback__)))
        except OSError:
            self.log.debug("unable to write %s", logPath, exc_info=True)
