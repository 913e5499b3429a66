"""
Pure domain model for dispatched jobs.

JobSpec describes one unit of work and never changes once built. JobState is
the single mutable record a JobRunner keeps for its job; nothing else holds
job state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import os
import posixpath
from typing import Iterable, List, Optional, Tuple

from .errors import DispatchError


class RunStatus(Enum):
    """Externally visible job states."""

    RUNNING = "running"  # Submitted, no sentinel seen yet
    DONE = "done"  # Done sentinel observed
    FAILED = "failed"  # Fail sentinel observed or submission failed

    @property
    def terminal(self) -> bool:
        return self is not RunStatus.RUNNING


def _asTuple(values) -> Tuple:
    # a lone string is one value, not a sequence of characters
    if isinstance(values, str):
        return (values,)
    return tuple(values or ())


def _unique(paths: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for path in _asTuple(paths):
        path = str(path)
        if path not in seen:
            seen.append(path)
    return tuple(seen)


@dataclass(frozen=True)
class JobSpec:  # pylint: disable=too-many-instance-attributes
    """
    Immutable description of one unit of work.

    The command line is opaque to the dispatcher; it is written into the exec
    script as-is and run under ``sh``.
    """

    command_line: str
    working_dir: str = field(default_factory=os.getcwd)

    # Scheduler hints
    output_log: Optional[str] = None
    error_log: Optional[str] = None
    project: Optional[str] = None
    queue: Optional[str] = None
    memory_limit: Optional[float] = None  # gigabytes
    extra_args: Tuple[str, ...] = ()
    restartable: bool = False

    # Declared files
    outputs: Tuple[str, ...] = ()
    done_outputs: Tuple[str, ...] = ()
    fail_outputs: Tuple[str, ...] = ()

    def __post_init__(self):
        """Normalize paths and collections so equal specs script identically."""
        setattr_ = object.__setattr__
        setattr_(self, "working_dir", os.path.abspath(self.working_dir))
        setattr_(self, "extra_args",
                 tuple(str(arg) for arg in _asTuple(self.extra_args)))
        setattr_(self, "outputs", _unique(self.outputs))
        setattr_(self, "done_outputs", _unique(self.done_outputs))
        setattr_(self, "fail_outputs", _unique(self.fail_outputs))

    @property
    def logs(self) -> List[str]:
        return [log for log in (self.output_log, self.error_log) if log]

    @property
    def diagnostic_log(self) -> Optional[str]:
        """The log holding failure output: the error log, else the output log."""
        return self.error_log or self.output_log

    def resolve(self, path: str) -> str:
        return os.path.join(self.working_dir, path)

    def all_outputs(self) -> List[str]:
        return list(_unique(self.outputs + self.done_outputs + self.fail_outputs))

    def output_directories(self) -> List[str]:
        dirs = []
        for path in self.logs + self.all_outputs():
            parent = os.path.dirname(self.resolve(path))
            if parent and parent not in dirs:
                dirs.append(parent)
        return dirs

    def display_name(self, limit: int) -> str:
        return self.command_line[:limit]


@dataclass(frozen=True)
class SentinelPaths:
    """Completion markers written by the post-exec script."""

    root: str

    @classmethod
    def for_job(cls, working_dir: str, job_id: str) -> SentinelPaths:
        return cls(posixpath.join(os.path.abspath(working_dir), "." + str(job_id)))

    @property
    def done(self) -> str:
        return self.root + ".done"

    @property
    def fail(self) -> str:
        return self.root + ".fail"

    def __iter__(self):
        return iter((self.done, self.fail))


@dataclass
class GeneratedScripts:
    """Temporary wrapper scripts bound to the lifetime of one job."""

    exec_script: Optional[str] = None
    pre_exec: Optional[str] = None
    post_exec: Optional[str] = None
    driver: Optional[str] = None  # only for schedulers without pre/post hooks

    def __iter__(self):
        paths = (self.exec_script, self.pre_exec, self.post_exec, self.driver)
        return iter(path for path in paths if path)


@dataclass
class JobState:  # pylint: disable=too-many-instance-attributes
    """Everything the dispatcher knows about its one job."""

    job_id: Optional[str] = None
    sentinels: Optional[SentinelPaths] = None
    scripts: GeneratedScripts = field(default_factory=GeneratedScripts)
    status: Optional[RunStatus] = None  # None until start() runs
    error: Optional[DispatchError] = None
    attempts: int = 0
    submit_time: Optional[datetime] = None
    finish_time: Optional[datetime] = None

    def is_terminal(self) -> bool:
        return self.status is not None and self.status.terminal

    def assign_job_id(self, job_id: str, working_dir: str) -> None:
        """Record the scheduler's id and derive the sentinels from it."""
        self.job_id = str(job_id)
        self.sentinels = SentinelPaths.for_job(working_dir, self.job_id)

    def to_json(self) -> dict:
        return {
            "jobId": self.job_id,
            "status": self.status.value if self.status else None,
            "attempts": self.attempts,
            "submitTime": self.submit_time.isoformat() if self.submit_time else None,
            "finishTime": self.finish_time.isoformat() if self.finish_time else None,
            "error": self.error.to_json() if self.error else None,
        }
