#!/usr/bin/env python
import argparse
import os
from shlex import quote
import sys
import time
from typing import List

import simplejson

import clusterrunner.logging

from .argparse import addArgumentParserBaseFlags
from .backend import getBackend
from .binutils import binDescriptionWithStandardFooter
from .config import BACKEND, Config, ConfigError
from .domain import JobSpec, RunStatus
from .plugins import Plugins
from .runner import JobRunner
from .utils import SPACER_EACH, sprint

_DEBUG_LOG_FILE_NAME = "clusterjob-debug"
LOG = clusterrunner.logging.getLogger(__name__)
RC_INTERRUPTED = 130

DESC = binDescriptionWithStandardFooter("""
clusterjob - Submit a command to a batch scheduler and wait for it to finish

The job reports its own outcome through marker files in its working
directory, so no scheduler query is needed while waiting.  Interrupting
clusterjob only stops the waiting; the job itself keeps running.


Examples:
    # Run `make test` on LSF, logs next to the sources
    $ clusterjob -o make.out -e make.err make test

    # Run a shell pipeline locally, touch ok.marker on success
    $ clusterjob --backend local --done-output ok.marker -c 'sort in | uniq > out'
""")


def parseArgs(args=None):
    if args is None:
        prog = sys.argv[0]
        args = sys.argv[1:]
    else:
        prog = None

    op = argparse.ArgumentParser(
        prog=os.path.basename(prog) if prog else "clusterjob",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=DESC)
    op.add_argument("program", nargs="?")
    op.add_argument("args", nargs=argparse.REMAINDER)

    addArgumentParserBaseFlags(op, _DEBUG_LOG_FILE_NAME)

    op.add_argument("-c", "--command", metavar="CMD",
                    help="Specify complete shell command line to execute")
    op.add_argument("--backend", choices=sorted(BACKEND.values()),
                    help="Scheduler to submit to (default from rc-file, else lsf)")
    op.add_argument("--dir", dest="workingDir", metavar="DIR",
                    default=os.getcwd(),
                    help="Working directory of the job (default=current)")
    op.add_argument("-o", "--output-log", metavar="FILE",
                    help="Job standard output log")
    op.add_argument("-e", "--error-log", metavar="FILE",
                    help="Job standard error log")
    op.add_argument("--project", help="Scheduler project to charge")
    op.add_argument("--queue", help="Scheduler queue")
    op.add_argument("--memory", type=float, metavar="GB",
                    help="Memory to reserve, in gigabytes")
    op.add_argument("--restartable", action="store_true",
                    help="Let the scheduler rerun the job if its host fails")
    op.add_argument("--output", metavar="FILE", action="append", default=[],
                    help="Declared output, removed before the job is submitted")
    op.add_argument("--done-output", metavar="FILE", action="append", default=[],
                    help="File to touch when the job succeeds")
    op.add_argument("--fail-output", metavar="FILE", action="append", default=[],
                    help="File to touch when the job fails")
    op.add_argument("--backend-arg", dest="backendArgs", metavar="ARG",
                    action="append", default=[],
                    help="Extra argument passed to the scheduler verbatim")
    op.add_argument("--poll-interval", type=float, metavar="SECONDS",
                    help="Seconds between status checks (default from rc-file)")
    op.add_argument("--json", action="store_true",
                    help="Print the final job record as JSON")

    options = op.parse_args(args)
    if not options.command and not options.program:
        op.error("a program or --command is required")
    return options


def commandLine(options) -> str:
    if options.command:
        return options.command
    cmd: List[str] = [options.program] + list(options.args)
    return " ".join(quote(part) for part in cmd)


def specFromOptions(options, config: Config) -> JobSpec:
    return JobSpec(
        command_line=commandLine(options),
        working_dir=options.workingDir,
        output_log=options.output_log,
        error_log=options.error_log,
        project=options.project or config.project,
        queue=options.queue or config.queue,
        memory_limit=options.memory,
        extra_args=tuple(options.backendArgs),
        restartable=options.restartable,
        outputs=tuple(options.output),
        done_outputs=tuple(options.done_output),
        fail_outputs=tuple(options.fail_output),
    )


def waitForJob(runner: JobRunner, interval: float, sleep=time.sleep) -> RunStatus:
    status = runner.status()
    while not status.terminal:
        LOG.debug("job %s still running, sleep %g", runner.jobId, interval)
        sleep(interval)
        status = runner.status()
    return status


def report(runner: JobRunner, asJson: bool) -> None:
    if asJson:
        record = runner.state.to_json()
        record["command"] = runner.spec.command_line
        sprint(simplejson.dumps(record, indent=2, sort_keys=True))
        return
    sprint(SPACER_EACH)
    sprint("job id:", runner.jobId)
    sprint("status:", runner.state.status.value)
    if runner.error:
        sprint("error:", runner.error)


def impl_main(args=None) -> int:
    options = parseArgs(args)
    config = Config(options)

    clusterrunner.logging.setup(
        config.logDir,
        _DEBUG_LOG_FILE_NAME,
        debug=options.debug)
    LOG.debug("starting with args %s", options)
    LOG.debug("python: %s", sys.version)

    settings = config.dispatchSettings()
    if options.poll_interval is not None:
        settings.poll_interval = options.poll_interval

    backend = getBackend(options.backend or config.backend)
    runner = JobRunner(
        specFromOptions(options, config),
        backend=backend,
        settings=settings,
        plugins=Plugins())
    runner.start()
    if options.verbose:
        sprint("submitted:", runner.jobId)
    try:
        status = waitForJob(runner, settings.poll_interval)
    except KeyboardInterrupt:
        LOG.info("stop waiting for job %s", runner.jobId, exc_info=True)
        sprint("\n(Stop waiting): job {} keeps running".format(runner.jobId))
        return RC_INTERRUPTED

    report(runner, options.json)
    return 0 if status is RunStatus.DONE else 1


def main(args=None):
    try:
        sys.exit(impl_main(args=args))
    except ConfigError as error:
        print("Error:", error, file=sys.stderr)
        sys.exit(1)
