"""
Wrapper scripts that make a job report its own outcome.

The scheduler runs pre-exec, exec and post-exec in order on the execution
host. Post-exec turns the scheduler's exit status into a sentinel file next to
the job's working directory, which is the only signal the dispatcher reads.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .backend import SchedulerEnv
from .domain import GeneratedScripts, JobSpec
from .utils import shellQuote, writeTempFile

LOG = logging.getLogger(__name__)


class ScriptGenerator:
    def __init__(
        self,
        env: SchedulerEnv,
        mountCommands: Optional[Callable[[JobSpec], List[str]]] = None,
        scriptDir: Optional[str] = None,
    ):
        self.env = env
        self.mountCommands = mountCommands or self.noMounts
        self.scriptDir = scriptDir

    @staticmethod
    def noMounts(_spec: JobSpec) -> List[str]:
        return []

    def sentinelRoot(self, spec: JobSpec) -> str:
        """Shell expression for <working dir>/.<job id>, expanded on the host."""
        return "%s.${%s}" % (shellQuote(spec.working_dir + "/"), self.env.jobId)

    @staticmethod
    def _perPath(template, spec, paths):
        return [template % shellQuote(spec.resolve(path)) for path in paths]

    def execText(self, spec: JobSpec) -> str:
        return spec.command_line + "\n"

    def preExecText(self, spec: JobSpec) -> str:
        root = self.sentinelRoot(spec)
        lines = ["rm -f %s.done" % root]
        lines += self._perPath("rm -f %s", spec, spec.done_outputs)
        lines.append("rm -f %s.fail" % root)
        lines += self._perPath("rm -f %s", spec, spec.fail_outputs)
        lines += list(self.mountCommands(spec))
        return "\n".join(lines) + "\n"

    def postExecText(self, spec: JobSpec) -> str:
        touchDone = "".join(self._perPath("touch %s\n", spec, spec.done_outputs))
        touchFail = "".join(self._perPath("touch %s\n", spec, spec.fail_outputs))
        return (
            '\n'
            'if [ "${%(pending)s:-unset}" != "unset" ]; then\n'
            '  exit 0\n'
            'fi\n'
            '\n'
            'JOB_STAT_ROOT=%(root)s\n'
            'if [ "${%(exitStat)s}" = "0" ]; then\n'
            '%(touchDone)s'
            'touch "$JOB_STAT_ROOT".done\n'
            'else\n'
            '%(touchFail)s'
            'touch "$JOB_STAT_ROOT".fail\n'
            'fi\n'
        ) % {
            "pending": self.env.pending,
            "exitStat": self.env.exitStat,
            "root": self.sentinelRoot(spec),
            "touchDone": touchDone,
            "touchFail": touchFail,
        }

    def driverText(self, scripts: GeneratedScripts) -> str:
        """
        Runs pre-exec, exec and post-exec in one shell for schedulers that
        have no per-job hooks. A scheduler that sets the job id variable wins;
        otherwise the driver's own pid is the job id.
        """
        return (
            ': "${%(jobId)s:=$$}"\n'
            'export %(jobId)s\n'
            'if sh %(pre)s; then\n'
            '  sh %(exec)s\n'
            '  %(exitStat)s=$?\n'
            'else\n'
            '  %(exitStat)s=$?\n'
            'fi\n'
            'export %(exitStat)s\n'
            'sh %(post)s\n'
            'exit "${%(exitStat)s}"\n'
        ) % {
            "jobId": self.env.jobId,
            "exitStat": self.env.exitStat,
            "pre": shellQuote(scripts.pre_exec),
            "exec": shellQuote(scripts.exec_script),
            "post": shellQuote(scripts.post_exec),
        }

    def write(self, spec: JobSpec, scripts: GeneratedScripts) -> GeneratedScripts:
        """
        Write all three scripts, recording each path on scripts as soon as it
        exists so a failure part way through still leaves them removable.
        """
        scripts.exec_script = writeTempFile(
            self.execText(spec), ".exec", self.scriptDir)
        scripts.pre_exec = writeTempFile(
            self.preExecText(spec), ".preExec", self.scriptDir)
        scripts.post_exec = writeTempFile(
            self.postExecText(spec), ".postExec", self.scriptDir)
        if self.env.needsDriver:
            scripts.driver = writeTempFile(
                self.driverText(scripts), ".driver", self.scriptDir)
        LOG.debug("scripts for %r: %s", spec.command_line, list(scripts))
        return scripts
