"""Grid engine binding (qsub -terse)."""

from __future__ import annotations

import re
from typing import List

from ..domain import GeneratedScripts, JobSpec, SubmissionError
from . import Backend, SchedulerEnv, formatMemory

# qsub refuses these in -N
_BAD_NAME_CHARS = re.compile(r"[\s/:@\\*?]+")


def jobName(name: str) -> str:
    name = _BAD_NAME_CHARS.sub("_", name).strip("_")
    if not name or name[0].isdigit():
        name = "job_" + name
    return name


class GridEngineBackend(Backend):
    """
    Grid engine has no per-job pre/post hooks, so the job itself is a driver
    script that runs the three wrapper scripts in order.
    """

    name = "sge"
    env = SchedulerEnv(
        jobId="JOB_ID",
        pending="CLUSTERRUNNER_JOBPEND",
        exitStat="CLUSTERRUNNER_JOBEXIT_STAT",
        needsDriver=True,
    )
    flagTable = (
        ("output_log", lambda path: ["-o", path]),
        ("error_log", lambda path: ["-e", path]),
        ("project", lambda project: ["-P", project]),
        ("queue", lambda queue: ["-q", queue]),
        ("working_dir", lambda path: ["-wd", path]),
        ("restartable", lambda _: ["-r", "y"]),
        ("memory_limit",
         lambda limit: ["-l", "h_vmem={}G".format(formatMemory(limit))]),
    )

    @staticmethod
    def fieldValue(spec: JobSpec, fieldName: str):
        # qsub starts jobs in $HOME unless told otherwise
        return getattr(spec, fieldName)

    def submitCommand(
        self, spec: JobSpec, scripts: GeneratedScripts, name: str
    ) -> List[str]:
        flags = self.schedulerFlags(spec)
        if spec.output_log and not spec.error_log:
            flags += ["-j", "y"]
        return (["qsub", "-terse", "-b", "y"] + flags + [
            "-N", jobName(name),
            "sh", scripts.driver,
        ])

    def parseJobId(self, output: str) -> str:
        # array jobs print "<id>.<first>-<last>:<step>"
        token = output.strip().split()[0] if output.strip() else ""
        jobId = token.split(".")[0]
        if not jobId.isdigit():
            raise SubmissionError("no job id in qsub output: {!r}".format(output))
        return jobId
