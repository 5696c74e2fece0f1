"""
Root dispatcher behavioral tests (routing, help, version, faults, exit status).

Scope
- Exit status and stream contents for the documented invocations:
  no arguments, unknown command, --version, --help at any depth.
- Flag parsing: persistent vs local flags, inline and spaced values, "--".
- Handler dispatch: success, HandlerError, silenced usage.
- parse() results without executing anything.

Conventions
- Test method names follow CamelCase per project convention.
- Streams are captured with io.StringIO and passed to execute().
"""
import io
import unittest
from unittest import TestCase

from curvecli.commands import Command
from curvecli.dispatcher import EXIT_FAILURE, EXIT_SUCCESS, execute, new_curve_command, parse
from curvecli.faults import HandlerError, MissingFlagValueError, UnknownFlagError
from curvecli.flags import Flag
from curvecli.presentation import Presentation
from curvecli.registrar import SUBSYSTEMS, Subsystem
from curvecli.version import get_version


def run(argv, **options):
    stdout, stderr = io.StringIO(), io.StringIO()
    status = execute(argv, stdout=stdout, stderr=stderr, **options)
    return status, stdout.getvalue(), stderr.getvalue()


def help_text_of(path):
    command = new_curve_command()
    for name in path:
        command = command.children[name]
    return Presentation().help(command)


class Recorder:
    """
    Runnable handler remembering every invocation it receives.
    """

    def __init__(self):
        self.invocations = []

    def execute(self, invocation, /):
        self.invocations.append(invocation)


def demo(recorder):
    def build():
        command = Command("demo", descr="Demo subsystem")
        command.add_child(Command("ok", descr="Always succeeds", handler=recorder))
        command.add_child(Command("fail", handler=fail))
        local = command.add_child(Command("local", handler=recorder))
        local.add_flag(Flag("debug", "d"))
        shadow = command.add_child(Command("shadow", handler=recorder))
        shadow.add_flag(Flag("format"))
        return command

    def fail(invocation):
        raise HandlerError("demo: cluster is unreachable")

    return Subsystem("demo", build)


class TestRootCommand(TestCase):

    def testNoArgumentsShowsHelpAndFails(self):
        status, stdout, stderr = run([])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stdout, "")
        self.assertEqual(stderr, help_text_of([]))
        self.assertIn("Usage:  curve fs|bs [OPTIONS] COMMAND [ARGS...]", stderr)

    def testUnknownCommand(self):
        status, stdout, stderr = run(["bogus"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stdout, "")
        self.assertEqual(stderr, "curve: 'bogus' is not a curve command.\nSee 'curve --help'\n")

    def testUnknownCommandDoesNotPrintUsage(self):
        _, _, stderr = run(["bogus", "more", "tokens"])
        self.assertNotIn("Usage:", stderr)
        self.assertTrue(stderr.startswith("curve: 'bogus' is not a curve command."))

    def testVersion(self):
        for flag in ("--version", "-v"):
            with self.subTest(flag=flag):
                status, stdout, stderr = run([flag], version="2.5.0")
                self.assertEqual(status, EXIT_SUCCESS)
                self.assertEqual(stdout, "curve 2.5.0\n")
                self.assertEqual(stderr, "")

    def testVersionUsesVersionProvider(self):
        _, stdout, _ = run(["--version"])
        self.assertEqual(stdout, "curve %s\n" % get_version())

    def testVersionIsLocalToRoot(self):
        status, stdout, stderr = run(["fs", "--version"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stdout, "")
        self.assertTrue(stderr.startswith("unknown flag: --version\n"))
        self.assertIn("Usage:  curve fs", stderr)

    def testVersionBeforeSubcommandIsRejected(self):
        status, _, stderr = run(["-v", "fs"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertTrue(stderr.startswith("unknown flag: -v\n"))

    def testHelp(self):
        for flag in ("--help", "-h"):
            with self.subTest(flag=flag):
                status, stdout, stderr = run([flag])
                self.assertEqual(status, EXIT_SUCCESS)
                self.assertEqual(stdout, "")
                self.assertIn("Commands:\n  fs", stderr)

    def testHelpWinsOverVersion(self):
        status, stdout, stderr = run(["--help", "--version"])
        self.assertEqual(status, EXIT_SUCCESS)
        self.assertEqual(stdout, "")
        self.assertIn("Usage:", stderr)

    def testUnknownFlagShowsUsage(self):
        status, _, stderr = run(["--bogus"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stderr, "unknown flag: --bogus\nUsage:  curve fs|bs [OPTIONS] COMMAND [ARGS...]\n")

    def testFormatWithoutValue(self):
        status, _, stderr = run(["--format"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertTrue(stderr.startswith("flag needs an argument: '--format'\n"))


class TestSubsystems(TestCase):

    def testEverySubsystemHelp(self):
        root = new_curve_command()
        for name in root.children:
            with self.subTest(subsystem=name):
                status, stdout, stderr = run([name, "--help"])
                self.assertEqual(status, EXIT_SUCCESS)
                self.assertEqual(stdout, "")
                self.assertTrue(stderr)
                self.assertIn(name, stderr)

    def testSubsystemHelpShowsGlobalFlags(self):
        _, _, stderr = run(["fs", "-h"])
        self.assertEqual(stderr, help_text_of(["fs"]))
        self.assertIn("Global Flags:", stderr)
        self.assertIn("--format string", stderr)

    def testSubsystemWithoutArgumentsShowsHelpAndFails(self):
        status, _, stderr = run(["fs"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stderr, help_text_of(["fs"]))

    def testUnknownSubcommand(self):
        status, _, stderr = run(["fs", "bogus"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stderr, "curve fs: 'bogus' is not a curve fs command.\nSee 'curve fs --help'\n")

    def testDefaultRegistry(self):
        self.assertEqual([subsystem.name for subsystem in SUBSYSTEMS], ["fs"])
        self.assertEqual(list(new_curve_command().children), ["fs"])


class TestDispatch(TestCase):

    def setUp(self):
        self.recorder = Recorder()
        self.root = new_curve_command((*SUBSYSTEMS, demo(self.recorder)))

    def dispatch(self, argv):
        return run(argv, root=self.root)

    def testHandlerReceivesRemainingArguments(self):
        status, stdout, stderr = self.dispatch(["demo", "ok", "a", "b"])
        self.assertEqual((status, stdout, stderr), (EXIT_SUCCESS, "", ""))
        invocation, = self.recorder.invocations
        self.assertEqual(invocation.path, ("curve", "demo", "ok"))
        self.assertEqual(invocation.args, ("a", "b"))
        self.assertEqual(invocation.flags["format"], "")
        self.assertFalse(invocation.flags["help"])

    def testPersistentFormatFlagReachesHandler(self):
        cases = (
            (["--format", "json", "demo", "ok"], "json"),
            (["-f", "plain", "demo", "ok"], "plain"),
            (["demo", "ok", "--format=json"], "json"),
            (["demo", "-f=plain", "ok", "x"], "plain"),
            (["demo", "ok", "x", "-f", "yaml"], "yaml"),
        )
        for argv, expected in cases:
            with self.subTest(argv=argv):
                status, _, _ = self.dispatch(argv)
                self.assertEqual(status, EXIT_SUCCESS)
                self.assertEqual(self.recorder.invocations[-1].flags["format"], expected)

    def testWordsAfterPositionalAreNotSubcommands(self):
        self.dispatch(["demo", "ok", "x", "fail"])
        self.assertEqual(self.recorder.invocations[-1].args, ("x", "fail"))

    def testDoubleDashEndsFlags(self):
        status, _, _ = self.dispatch(["demo", "ok", "--", "--help", "-f"])
        self.assertEqual(status, EXIT_SUCCESS)
        self.assertEqual(self.recorder.invocations[-1].args, ("--help", "-f"))

    def testHelpShortCircuitsHandler(self):
        status, _, stderr = self.dispatch(["demo", "ok", "x", "--help", "--bogus"])
        self.assertEqual(status, EXIT_SUCCESS)
        self.assertEqual(self.recorder.invocations, [])
        self.assertIn("Usage:  curve demo ok [OPTIONS] [ARGS...]", stderr)
        self.assertIn("Always succeeds", stderr)

    def testHandlerErrorFailsWithoutUsage(self):
        status, stdout, stderr = self.dispatch(["demo", "fail"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertEqual(stdout, "")
        self.assertEqual(stderr, "demo: cluster is unreachable\n")

    def testLocalFlagOfLeaf(self):
        status, _, _ = self.dispatch(["demo", "local", "-d"])
        self.assertEqual(status, EXIT_SUCCESS)
        self.assertIs(self.recorder.invocations[-1].flags["debug"], True)

    def testLocalFlagOfLeafDefaults(self):
        self.dispatch(["demo", "local"])
        self.assertIs(self.recorder.invocations[-1].flags["debug"], False)

    def testLocalFlagIsNotVisibleElsewhere(self):
        status, _, stderr = self.dispatch(["demo", "ok", "--debug"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertTrue(stderr.startswith("unknown flag: --debug\n"))
        self.assertEqual(self.recorder.invocations, [])

    def testRedeclaredFlagRejectsAncestorValue(self):
        status, _, stderr = self.dispatch(["--format", "json", "demo", "shadow"])
        self.assertEqual(status, EXIT_FAILURE)
        self.assertTrue(stderr.startswith("unknown flag: --format\n"))
        self.assertIn("Usage:  curve demo shadow", stderr)
        self.assertEqual(self.recorder.invocations, [])

    def testRedeclaredFlagParsedBelowKeepsItsKind(self):
        status, _, _ = self.dispatch(["demo", "shadow", "--format"])
        self.assertEqual(status, EXIT_SUCCESS)
        self.assertIs(self.recorder.invocations[-1].flags["format"], True)

    def testRedeclaredFlagDefaultsBelow(self):
        self.dispatch(["demo", "shadow"])
        self.assertIs(self.recorder.invocations[-1].flags["format"], False)

    def testParseDropsShadowedValues(self):
        invocation = parse(self.root, ["-f", "json", "demo", "shadow"])
        self.assertIsInstance(invocation.error, UnknownFlagError)
        self.assertEqual(invocation.error.options["input"], "-f")
        self.assertEqual(invocation.path, ("curve", "demo", "shadow"))
        self.assertIs(invocation.flags["format"], False)

    def testUsageTemplateReachesHelpAndFlagErrors(self):
        policy = Presentation()
        policy.set_usage_template(lambda context: "usage of %s\n" % context.route)
        _, _, stderr = run(["demo", "ok", "--help"], root=self.root, presentation=policy)
        self.assertTrue(stderr.startswith("usage of curve demo ok\n\n"))
        self.assertNotIn("Usage:", stderr)
        _, _, stderr = run(["demo", "ok", "--bogus"], root=self.root, presentation=policy)
        self.assertEqual(stderr, "unknown flag: --bogus\nusage of curve demo ok\n")

    def testIntermediateCommandListsChildrenInOrder(self):
        _, _, stderr = self.dispatch(["demo", "--help"])
        self.assertLess(stderr.index("  ok"), stderr.index("  fail"))
        self.assertLess(stderr.index("  fail"), stderr.index("  local"))

    def testUnexpectedExceptionsPropagate(self):
        def broken(invocation):
            raise RuntimeError("bug")

        root = Command("curve")
        root.add_child(Command("broken", handler=broken))
        with self.assertRaises(RuntimeError):
            run(["broken"], root=root.seal())


class TestParse(TestCase):

    def setUp(self):
        self.root = new_curve_command()

    def testEmpty(self):
        invocation = parse(self.root, [])
        self.assertIs(invocation.command, self.root)
        self.assertEqual(invocation.path, ("curve",))
        self.assertEqual(invocation.args, ())
        self.assertIsNone(invocation.error)
        self.assertFalse(invocation.help)

    def testSubsystemMatch(self):
        invocation = parse(self.root, ["-f", "json", "fs", "list", "x"])
        self.assertEqual(invocation.path, ("curve", "fs"))
        self.assertEqual(invocation.args, ("list", "x"))
        self.assertEqual(dict(invocation.flags), {"help": False, "format": "json"})

    def testUnknownFirstToken(self):
        invocation = parse(self.root, ["bogus", "fs"])
        self.assertEqual(invocation.path, ("curve",))
        self.assertEqual(invocation.args, ("bogus", "fs"))

    def testHelpStopsParsing(self):
        invocation = parse(self.root, ["--help", "fs", "--bogus"])
        self.assertTrue(invocation.help)
        self.assertEqual(invocation.path, ("curve",))
        self.assertIsNone(invocation.error)

    def testFlagErrorsAreReturned(self):
        self.assertIsInstance(parse(self.root, ["--bogus"]).error, UnknownFlagError)
        self.assertIsInstance(parse(self.root, ["fs", "-f"]).error, MissingFlagValueError)

    def testFlagsAreReadOnly(self):
        with self.assertRaises(TypeError):
            parse(self.root, []).flags["format"] = "json"  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
