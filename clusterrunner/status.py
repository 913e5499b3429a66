"""
Completion polling through sentinel files.

The post-exec script leaves ``<working dir>/.<job id>.done`` or ``.fail``
behind. A poll reads those, never the scheduler. A fail sentinel wins over a
done sentinel. Once a terminal status is cached the filesystem is not touched
again.
"""

from __future__ import annotations

import errno
import logging
import os
import time

from .config import DispatchSettings
from .domain import DispatchError, ErrorKind, JobSpec, JobState, RunStatus
from .utils import tail, tryDelete, utcNow, waitForFile

LOG = logging.getLogger(__name__)


def _exists(path: str) -> bool:
    """Like os.path.exists, but errors other than "not found" propagate."""
    try:
        os.stat(path)
    except OSError as err:
        if err.errno in (errno.ENOENT, errno.ENOTDIR):
            return False
        raise
    return True


class StatusTracker:
    def __init__(self, settings: DispatchSettings, log=LOG, sleep=time.sleep):
        self.settings = settings
        self.log = log
        self.sleep = sleep

    def poll(self, spec: JobSpec, state: JobState) -> RunStatus:
        if state.is_terminal() or state.sentinels is None:
            return state.status

        sentinels = state.sentinels
        try:
            if self.log.isEnabledFor(logging.DEBUG):
                self.log.debug("Done %s exists = %s",
                               sentinels.done, _exists(sentinels.done))
                self.log.debug("Fail %s exists = %s",
                               sentinels.fail, _exists(sentinels.fail))

            if _exists(sentinels.fail):
                self.removeTemporaryFiles(state)
                self._finish(state, RunStatus.FAILED)
                state.error = DispatchError(
                    ErrorKind.EXECUTION,
                    "job {} reported failure".format(state.job_id))
                self.log.info("Error: %s", spec.command_line)
                self.tailError(spec)
            elif _exists(sentinels.done):
                self.removeTemporaryFiles(state)
                self._finish(state, RunStatus.DONE)
                self.log.info("Done: %s", spec.command_line)
        except OSError as err:
            state.error = DispatchError(
                ErrorKind.POLLING,
                "unable to check status of job {}".format(state.job_id), err)
            self.log.warning("Status check failed for job %s: %s",
                             state.job_id, err, exc_info=True)

        return state.status

    @staticmethod
    def _finish(state: JobState, status: RunStatus) -> None:
        state.status = status
        state.finish_time = utcNow()

    def removeTemporaryFiles(self, state: JobState) -> None:
        """Removes the generated scripts and both sentinels."""
        for path in state.scripts:
            tryDelete(path, self.log)
        if state.sentinels is not None:
            for path in state.sentinels:
                tryDelete(path, self.log)

    def tailError(self, spec: JobSpec) -> None:
        """Logs the last lines of the error log, or the output log without one."""
        logPath = spec.diagnostic_log
        if not logPath:
            self.log.error("No log file configured for: %s", spec.command_line)
            return
        logPath = spec.resolve(logPath)
        try:
            if waitForFile(logPath, self.settings.log_wait, sleep=self.sleep):
                tailLines = tail(logPath, self.settings.tail_lines)
                self.log.error("Last %d lines of %s:\n%s",
                               len(tailLines), logPath, "\n".join(tailLines))
                return
        except OSError:
            self.log.debug("reading %s", logPath, exc_info=True)
        self.log.error("Unable to access log file: %s", logPath)
