"""
Domain models for clusterrunner.

This package contains the per-job data: what to run, where its completion
sentinels live, and what the dispatcher currently knows about it.
"""

from .errors import DispatchError, ErrorKind, SubmissionError
from .job import GeneratedScripts, JobSpec, JobState, RunStatus, SentinelPaths

__all__ = [
    "DispatchError",
    "ErrorKind",
    "GeneratedScripts",
    "JobSpec",
    "JobState",
    "RunStatus",
    "SentinelPaths",
    "SubmissionError",
]
