"""
Job runner facade: one instance per dispatched job.

Usage::

    runner = JobRunner(spec, backend=getBackend("lsf"))
    runner.start()
    while not runner.status().terminal:
        time.sleep(30)

start() blocks through all submission retries. status() may be called as often
as needed; once DONE or FAILED is seen the answer is cached and no file is
touched again. Neither method raises; problems are logged and kept on
``runner.state.error``.

There is no way to cancel a submitted job. Dropping the runner only stops
polling; the job keeps running on the cluster and still writes its sentinel,
which its pre-exec script removes again if the same job id ever comes back.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from .backend import Backend, getBackend
from .config import DispatchSettings
from .domain import DispatchError, JobSpec, JobState, RunStatus
from .plugins import Plugins
from .scripts import ScriptGenerator
from .status import StatusTracker
from .submit import SubmissionClient

LOG = logging.getLogger(__name__)


class JobRunner:
    # pylint: disable=too-many-arguments
    def __init__(
        self,
        spec: JobSpec,
        backend: Optional[Backend] = None,
        settings: Optional[DispatchSettings] = None,
        log=None,
        plugins: Optional[Plugins] = None,
        sleep=time.sleep,
    ):
        """
        Args:
            spec: The job to run
            backend: Scheduler binding (default LSF)
            settings: Retry and polling tunables
            log: Logger for all diagnostics of this job
            plugins: Source of environment-setup commands for pre-exec
            sleep: Used for retry delays and log waits
        """
        self.spec = spec
        self.backend = backend or getBackend("lsf")
        self.settings = settings or DispatchSettings()
        self.log = log or LOG
        self.state = JobState()
        mountCommands = plugins.mountCommands if plugins else None
        generator = ScriptGenerator(
            self.backend.env, mountCommands, self.settings.script_dir)
        self._submitter = SubmissionClient(
            self.backend, generator, self.settings, log=self.log, sleep=sleep)
        self._tracker = StatusTracker(self.settings, log=self.log, sleep=sleep)

    @property
    def jobId(self) -> Optional[str]:
        return self.state.job_id

    @property
    def error(self) -> Optional[DispatchError]:
        return self.state.error

    def start(self) -> RunStatus:
        """Submit the job. Leaves the status RUNNING or FAILED."""
        if self.state.status is not None:
            self.log.warning("start() called again for %r", self)
            return self.state.status
        self._submitter.submit(self.spec, self.state)
        return self.state.status

    def status(self) -> Optional[RunStatus]:
        """Poll the sentinels and return the current status."""
        if self.state.status is None:
            self.log.warning("status() called before start() for %r", self)
            return None
        self.backend.reap()
        return self._tracker.poll(self.spec, self.state)

    def __repr__(self):
        return "JobRunner({!r}, jobId={}, status={})".format(
            self.spec.command_line, self.state.job_id,
            self.state.status.value if self.state.status else "unstarted")
