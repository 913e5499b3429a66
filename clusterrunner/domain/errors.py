"""Error types shared by the submission and status paths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    SUBMISSION = "submission"  # scheduler unreachable or rejected the job
    EXECUTION = "execution"  # the job's command exited nonzero
    POLLING = "polling"  # filesystem trouble while checking sentinels


class SubmissionError(Exception):
    """The scheduler refused the job or its reply could not be understood."""


@dataclass(frozen=True)
class DispatchError:
    """A recorded failure, kept on the job state instead of being raised."""

    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None

    @property
    def retryable(self) -> bool:
        """Polling errors clear up on their own; the others are final."""
        return self.kind is ErrorKind.POLLING

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.kind.value}: {self.message} ({self.cause})"
        return f"{self.kind.value}: {self.message}"

    def to_json(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }
