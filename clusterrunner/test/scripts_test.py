from __future__ import absolute_import, division, print_function

import os
import shutil
import tempfile
import unittest

from clusterrunner.backend.gridengine import GridEngineBackend
from clusterrunner.backend.lsf import LsfBackend
from clusterrunner.domain import GeneratedScripts, JobSpec
from clusterrunner.scripts import ScriptGenerator

from .helpers import JOB_ID, lsfEnv, resetEnv, runScript


def setUpModule():
    resetEnv()


class TestScriptText(unittest.TestCase):
    def setUp(self):
        self.generator = ScriptGenerator(LsfBackend.env)
        self.spec = JobSpec(
            "echo ok", "/work dir",
            done_outputs=["/tmp/x.done.marker"],
            fail_outputs=["rel/x.fail"])

    def testExecIsCommandLine(self):
        self.assertEqual("echo ok\n", self.generator.execText(self.spec))

    def testPreExec(self):
        self.assertEqual(
            "rm -f '/work dir/'.${LSB_JOBID}.done\n"
            "rm -f '/tmp/x.done.marker'\n"
            "rm -f '/work dir/'.${LSB_JOBID}.fail\n"
            "rm -f '/work dir/rel/x.fail'\n",
            self.generator.preExecText(self.spec))

    def testPreExecMountCommands(self):
        generator = ScriptGenerator(
            LsfBackend.env, mountCommands=lambda spec: ["ls /net/home > /dev/null"])
        text = generator.preExecText(self.spec)
        self.assertTrue(text.endswith("ls /net/home > /dev/null\n"))

    def testPostExec(self):
        text = self.generator.postExecText(self.spec)
        self.assertIn('if [ "${LSB_JOBPEND:-unset}" != "unset" ]; then\n  exit 0\n', text)
        self.assertIn("JOB_STAT_ROOT='/work dir/'.${LSB_JOBID}\n", text)
        self.assertIn(
            'if [ "${LSB_JOBEXIT_STAT}" = "0" ]; then\n'
            "touch '/tmp/x.done.marker'\n"
            'touch "$JOB_STAT_ROOT".done\n'
            'else\n'
            "touch '/work dir/rel/x.fail'\n"
            'touch "$JOB_STAT_ROOT".fail\n'
            'fi\n', text)

    def testQuotesSingleQuotes(self):
        spec = JobSpec("true", "/w", done_outputs=["/tmp/it's"])
        self.assertIn("rm -f '/tmp/it'\"'\"'s'\n",
                      self.generator.preExecText(spec))


class TestScriptsRun(unittest.TestCase):
    """Runs the generated scripts with sh, standing in for the scheduler."""

    def setUp(self):
        self.tmpDir = tempfile.mkdtemp()
        self.workDir = os.path.join(self.tmpDir, "it's a dir")
        os.makedirs(self.workDir)
        self.done = os.path.join(self.tmpDir, "x.done.marker")
        self.fail = os.path.join(self.tmpDir, "x.fail.marker")
        self.spec = JobSpec("echo ok", self.workDir,
                            done_outputs=[self.done], fail_outputs=[self.fail])
        self.scripts = ScriptGenerator(LsfBackend.env, scriptDir=self.tmpDir).write(
            self.spec, GeneratedScripts())
        self.sentinelRoot = os.path.join(self.workDir, "." + JOB_ID)

    def tearDown(self):
        shutil.rmtree(self.tmpDir)

    def testWritesThreeScripts(self):
        self.assertEqual(3, len(list(self.scripts)))
        self.assertIsNone(self.scripts.driver)
        for path in self.scripts:
            self.assertTrue(path.startswith(self.tmpDir))
        self.assertTrue(self.scripts.pre_exec.endswith(".preExec"))

    def testPostExecSuccess(self):
        runScript(self.scripts.post_exec, lsfEnv(exitStat=0))
        self.assertTrue(os.path.exists(self.sentinelRoot + ".done"))
        self.assertTrue(os.path.exists(self.done))
        self.assertFalse(os.path.exists(self.sentinelRoot + ".fail"))
        self.assertFalse(os.path.exists(self.fail))

    def testPostExecFailure(self):
        runScript(self.scripts.post_exec, lsfEnv(exitStat=256))
        self.assertTrue(os.path.exists(self.sentinelRoot + ".fail"))
        self.assertTrue(os.path.exists(self.fail))
        self.assertFalse(os.path.exists(self.sentinelRoot + ".done"))
        self.assertFalse(os.path.exists(self.done))

    def testPostExecPendingWritesNothing(self):
        proc = runScript(self.scripts.post_exec, lsfEnv(exitStat=0, pending="1"))
        self.assertEqual(0, proc.returncode)
        self.assertEqual([], os.listdir(self.workDir))
        self.assertFalse(os.path.exists(self.done))

    def testPreExecRemovesStaleMarkers(self):
        stale = [self.sentinelRoot + ".done", self.sentinelRoot + ".fail",
                 self.done, self.fail]
        for path in stale:
            open(path, "w").close()
        proc = runScript(self.scripts.pre_exec, lsfEnv())
        self.assertEqual(0, proc.returncode)
        for path in stale:
            self.assertFalse(os.path.exists(path), path)

    def testPreExecLeavesOtherJobsAlone(self):
        other = os.path.join(self.workDir, ".43.done")
        open(other, "w").close()
        runScript(self.scripts.pre_exec, lsfEnv())
        self.assertTrue(os.path.exists(other))


class TestDriver(unittest.TestCase):
    def setUp(self):
        self.tmpDir = tempfile.mkdtemp()
        self.env = {"JOB_ID": "7"}

    def tearDown(self):
        shutil.rmtree(self.tmpDir)

    def writeScripts(self, command):
        spec = JobSpec(command, self.tmpDir)
        return ScriptGenerator(GridEngineBackend.env, scriptDir=self.tmpDir).write(
            spec, GeneratedScripts())

    def testDriverReportsSuccess(self):
        scripts = self.writeScripts("true")
        self.assertIsNotNone(scripts.driver)
        proc = runScript(scripts.driver, self.env)
        self.assertEqual(0, proc.returncode)
        self.assertTrue(os.path.exists(os.path.join(self.tmpDir, ".7.done")))

    def testDriverReportsFailure(self):
        scripts = self.writeScripts("exit 3")
        proc = runScript(scripts.driver, self.env)
        self.assertEqual(3, proc.returncode)
        self.assertTrue(os.path.exists(os.path.join(self.tmpDir, ".7.fail")))
        self.assertFalse(os.path.exists(os.path.join(self.tmpDir, ".7.done")))

    def testDriverUsesOwnPidWithoutScheduler(self):
        scripts = self.writeScripts("true")
        proc = runScript(scripts.driver)
        self.assertEqual(0, proc.returncode)
        sentinels = [name for name in os.listdir(self.tmpDir)
                     if name.endswith(".done")]
        self.assertEqual(1, len(sentinels))
        self.assertTrue(sentinels[0][1:-len(".done")].isdigit())
