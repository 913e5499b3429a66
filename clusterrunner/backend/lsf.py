"""Platform LSF binding (bsub)."""

from __future__ import annotations

import re
from typing import List

from ..domain import GeneratedScripts, JobSpec, SubmissionError
from . import Backend, SchedulerEnv, formatMemory

_JOB_ID_RE = re.compile(r"Job <(\d+)> is submitted")


class LsfBackend(Backend):
    name = "lsf"
    env = SchedulerEnv(
        jobId="LSB_JOBID",
        pending="LSB_JOBPEND",
        exitStat="LSB_JOBEXIT_STAT",
        needsDriver=False,
    )
    flagTable = (
        ("output_log", lambda path: ["-o", path]),
        ("error_log", lambda path: ["-e", path]),
        ("project", lambda project: ["-P", project]),
        ("queue", lambda queue: ["-q", queue]),
        ("working_dir", lambda path: ["-cwd", path]),
        ("restartable", lambda _: ["-r"]),
        ("memory_limit",
         lambda limit: ["-R", "rusage[mem={}]".format(formatMemory(limit))]),
    )

    def submitCommand(
        self, spec: JobSpec, scripts: GeneratedScripts, name: str
    ) -> List[str]:
        return (["bsub"] + self.schedulerFlags(spec) + [
            "-J", name,
            "-E", "sh " + scripts.pre_exec,
            "-Ep", "sh " + scripts.post_exec,
            "sh", scripts.exec_script,
        ])

    def parseJobId(self, output: str) -> str:
        match = _JOB_ID_RE.search(output)
        if not match:
            raise SubmissionError("no job id in bsub output: {!r}".format(output))
        return match.group(1)
