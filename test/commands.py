"""
Commands module behavioral tests (configs, executors, registry, dispatch).

Scope
- Validate CommandConfig construction rules and extras.
- Validate executor() resolution for functions and execute()-objects.
- Validate alias mapping, deregistration, defaults and last-write-wins.
- Validate dispatch outcomes, completion hook semantics and delegated faults.

Conventions
- Test method names follow CamelCase per project convention.
- Dispatch is asynchronous: tests wait on Commander.last before asserting on
  what the worker did.
"""
import asyncio
import unittest
from unittest import TestCase, mock

from commandant import (
    Commander,
    CommandConfig,
    CommandDescriptor,
    ExecutionResult,
    FunctionExecutor,
    ObjectExecutor,
    executor,
    always,
    Converter,
    Unset,
)
from commandant.faults import (
    FaultCode,
    UnknownCommandWarning,
    NoPermissionWarning,
    DelegatedCommandWarning,
)

TIMEOUT = 5


def noop(sender, arguments, alias):
    pass


class Kick:
    """Object-style command."""

    def __init__(self):
        self.calls = []

    def execute(self, sender, arguments, alias):
        self.calls.append((sender, arguments.tokens, alias))


class TestCommandConfig(TestCase):

    def testFields(self):
        config = CommandConfig("hurt", aliases=["dmg", "harm"], description="hurt a player")
        self.assertEqual(config.identifier, "hurt")
        self.assertEqual(config.aliases, ("dmg", "harm"))
        self.assertEqual(config.names, ("hurt", "dmg", "harm"))
        self.assertEqual(config.description, "hurt a player")
        self.assertEqual(config.extras, {"description": "hurt a player"})

    def testMissingExtraRaisesAttributeError(self):
        with self.assertRaises(AttributeError):
            CommandConfig("hurt").permission

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            CommandConfig("hurt").identifier = "heal"

    def testIdentifierValidation(self):
        with self.assertRaises(TypeError):
            CommandConfig(1)
        with self.assertRaises(ValueError):
            CommandConfig("")
        with self.assertRaises(ValueError):
            CommandConfig("two words")

    def testAliasValidation(self):
        with self.assertRaises(TypeError):
            CommandConfig("hurt", aliases="dmg")
        with self.assertRaises(ValueError):
            CommandConfig("hurt", aliases=["dmg", "dmg"])
        with self.assertRaises(ValueError):
            CommandConfig("hurt", aliases=["hurt"])

    def testOf(self):
        config = CommandConfig("hurt")
        self.assertIs(CommandConfig.of(config), config)
        self.assertEqual(CommandConfig.of({"identifier": "hurt"}), config)
        self.assertEqual(CommandConfig.of("hurt"), config)
        with self.assertRaises(TypeError):
            CommandConfig.of(42)

    def testEquality(self):
        self.assertEqual(CommandConfig("a", ["b"], x=1), CommandConfig("a", ["b"], x=1))
        self.assertNotEqual(CommandConfig("a", ["b"]), CommandConfig("a", ["c"]))


class TestExecutor(TestCase):

    def testFunction(self):
        resolved = executor(noop)
        self.assertIsInstance(resolved, FunctionExecutor)
        self.assertIs(resolved.target, noop)

    def testObject(self):
        kick = Kick()
        resolved = executor(kick)
        self.assertIsInstance(resolved, ObjectExecutor)
        resolved("admin", mock.Mock(tokens=("bob",)), "kick")
        self.assertEqual(kick.calls, [("admin", ("bob",), "kick")])

    def testPassThrough(self):
        resolved = executor(noop)
        self.assertIs(executor(resolved), resolved)

    def testRejectsNonExecutors(self):
        with self.assertRaises(TypeError):
            executor(42)


class TestRegistry(TestCase):

    def setUp(self):
        self.commander = Commander()

    def tearDown(self):
        self.commander.shutdown()

    def testAliasResolvesToSameDescriptor(self):
        self.commander.register(CommandConfig("hurt", aliases=["dmg", "harm"]), noop)
        descriptor = self.commander.descriptor("hurt")
        self.assertIsInstance(descriptor, CommandDescriptor)
        self.assertIs(self.commander.descriptor("dmg"), descriptor)
        self.assertIs(self.commander.descriptor("harm"), descriptor)
        self.assertEqual(len(self.commander), 1)
        self.assertEqual(set(self.commander.names), {"hurt", "dmg", "harm"})

    def testRegisterChains(self):
        result = self.commander.register("a", noop).register({"identifier": "b"}, noop)
        self.assertIs(result, self.commander)
        self.assertIn("a", self.commander)
        self.assertIn("b", self.commander)
        self.assertEqual(len(self.commander), 2)

    def testDeregisterRemovesAllNames(self):
        config = CommandConfig("hurt", aliases=["dmg", "harm"])
        self.commander.register(config, noop)
        self.assertTrue(self.commander.deregister(config))
        for name in ("hurt", "dmg", "harm"):
            with self.subTest(name=name):
                self.assertNotIn(name, self.commander)
                self.assertIsNone(self.commander.descriptor(name))
        self.assertEqual(len(self.commander), 0)

    def testDeregisterBadAliasesLeavesRegistryIntact(self):
        self.commander.register(CommandConfig("hurt", aliases=["dmg"]), noop)
        with self.assertRaises(TypeError):
            self.commander.deregister({"identifier": "hurt", "aliases": 5})
        self.assertIn("hurt", self.commander)
        self.assertIn("dmg", self.commander)

    def testDeregisterUnknown(self):
        self.commander.register("hurt", noop)
        self.assertFalse(self.commander.deregister("heal"))
        self.assertIn("hurt", self.commander)

    def testLastWriteWins(self):
        self.commander.register(CommandConfig("hurt", aliases=["h"]), noop)
        self.commander.register(CommandConfig("heal", aliases=["h"]), noop)
        self.assertEqual(self.commander.descriptor("h").config.identifier, "heal")
        self.assertEqual(self.commander.descriptor("hurt").config.identifier, "hurt")

    def testDecorator(self):
        @self.commander.command("hurt", aliases=["dmg"], description="hurt a player")
        def hurt(sender, arguments, alias):
            pass

        self.assertTrue(callable(hurt))
        self.assertEqual(hurt.__name__, "hurt")
        descriptor = self.commander.descriptor("dmg")
        self.assertIs(descriptor.executor.target, hurt)
        self.assertEqual(descriptor.config.description, "hurt a player")

    def testDecoratorWithObject(self):
        kick = self.commander.command(CommandConfig("kick"))(Kick())
        self.assertIsInstance(self.commander.descriptor("kick").executor, ObjectExecutor)
        self.assertIsInstance(kick, Kick)

    def testDefaultsFillMissingFields(self):
        self.commander.defaults(description="no description", permission="user")
        self.commander.register({"identifier": "hurt", "permission": "admin"}, noop)
        config = self.commander.descriptor("hurt").config
        self.assertEqual(config.description, "no description")
        self.assertEqual(config.permission, "admin")

    def testDefaultsChainAndReplace(self):
        self.assertIs(self.commander.defaults(a=1), self.commander)
        self.commander.defaults(b=2)
        self.commander.register("x", noop)
        self.assertEqual(self.commander.descriptor("x").config.extras, {"b": 2})

    def testConstructorValidation(self):
        with self.assertRaises(TypeError):
            Commander(eligibility=42)
        with self.assertRaises(TypeError):
            Commander(hook=42)
        with self.assertRaises(ValueError):
            Commander(workers=0)

    def testAlways(self):
        self.assertIs(always("anyone", None), True)


class TestDispatch(TestCase):

    def setUp(self):
        self.completions = []
        self.commander = Commander(hook=self.hook)

    def tearDown(self):
        self.commander.shutdown()

    def hook(self, descriptor, success, arguments):
        self.completions.append((descriptor, success, arguments))

    def wait(self):
        return self.commander.last.result(timeout=TIMEOUT)

    def testNotFound(self):
        self.assertEqual(self.commander.execute_name("admin", "nope", []), ExecutionResult.NOT_FOUND)
        self.assertIsNone(self.commander.last)

    def testExecutedWithAliasAndArguments(self):
        received = []

        @self.commander.command("hurt", aliases=["dmg"])
        def hurt(sender, arguments, alias):
            received.append((sender, alias, arguments.shift(Converter(int))))

        self.assertEqual(self.commander.execute_name("admin", "dmg", ["5"]), ExecutionResult.EXECUTED)
        self.assertTrue(self.wait())
        self.assertEqual(received, [("admin", "dmg", 5)])

        descriptor, success, (sender, arguments, alias) = self.completions[0]
        self.assertIs(descriptor, self.commander.descriptor("hurt"))
        self.assertTrue(success)
        self.assertEqual((sender, alias), ("admin", "dmg"))
        self.assertEqual(arguments.tokens, ())

    def testNonePasses(self):
        self.commander.register("quiet", lambda sender, arguments, alias: None)
        self.commander.execute_name("admin", "quiet")
        self.assertTrue(self.wait())

    def testFalseFails(self):
        self.commander.register("deny", lambda sender, arguments, alias: False)
        self.commander.execute_name("admin", "deny")
        self.assertFalse(self.wait())
        self.assertFalse(self.completions[0][1])

    def testFalsyNonFalsePasses(self):
        self.commander.register("zero", lambda sender, arguments, alias: 0)
        self.commander.execute_name("admin", "zero")
        self.assertTrue(self.wait())

    def testCoroutineHandler(self):
        async def later(sender, arguments, alias):
            await asyncio.sleep(0)
            return False

        self.commander.register("later", later)
        self.commander.execute_name("admin", "later")
        self.assertFalse(self.wait())

    @mock.patch("commandant.commands.trigger")
    def testHandlerExceptionIsDelegated(self, trigger):
        def broken(sender, arguments, alias):
            raise RuntimeError("boom")

        self.commander.register("broken", broken)
        self.assertEqual(self.commander.execute_name("admin", "broken"), ExecutionResult.EXECUTED)
        self.assertFalse(self.wait())
        self.assertFalse(self.completions[0][1])

        fault = trigger.call_args.args[0]
        self.assertIsInstance(fault, DelegatedCommandWarning)
        self.assertEqual(fault.options["code"], FaultCode.DELEGATED_ERROR)
        self.assertIsInstance(fault.options["exception"], RuntimeError)
        self.assertFalse(trigger.call_args.kwargs["shell"])

    @mock.patch("commandant.commands.trigger")
    def testParserExceptionIsDelegated(self, trigger):
        def strict(token):
            raise LookupError(token)

        self.commander.register("strict", lambda sender, arguments, alias: arguments.shift(strict))
        self.commander.execute_name("admin", "strict", ["x"])
        self.assertFalse(self.wait())
        self.assertIsInstance(trigger.call_args.args[0], DelegatedCommandWarning)

    @mock.patch("commandant.commands.trigger")
    def testSystemExitIsAFailedRun(self, trigger):
        def leave(sender, arguments, alias):
            raise SystemExit(3)

        self.commander.register("leave", leave)
        self.commander.execute_name("admin", "leave")
        self.assertFalse(self.wait())
        self.assertEqual(len(self.completions), 1)
        self.assertFalse(self.completions[0][1])
        self.assertIsInstance(trigger.call_args.args[0].options["exception"], SystemExit)

    @mock.patch("commandant.commands.trigger")
    def testHookExceptionIsDelegated(self, trigger):
        def hook(descriptor, success, arguments):
            raise ValueError("hook")

        with Commander(hook=hook) as commander:
            commander.register("ok", noop)
            commander.execute_name("admin", "ok")
            self.assertTrue(commander.last.result(timeout=TIMEOUT))

        fault = trigger.call_args.args[0]
        self.assertIsInstance(fault, DelegatedCommandWarning)
        self.assertIsInstance(fault.options["exception"], ValueError)

    def testExecuteConfig(self):
        aliases = []
        self.commander.register(CommandConfig("hurt", aliases=["dmg"]), lambda s, a, alias: aliases.append(alias))
        result = self.commander.execute_config("admin", CommandConfig("hurt", aliases=["other"]), [])
        self.assertEqual(result, ExecutionResult.EXECUTED)
        self.wait()
        self.assertEqual(aliases, ["hurt"])
        self.assertEqual(self.commander.execute_config("admin", "heal"), ExecutionResult.NOT_FOUND)

    def testExecuteDescriptorUnregistered(self):
        kick = Kick()
        descriptor = CommandDescriptor(CommandConfig("kick"), executor(kick))
        self.assertEqual(self.commander.execute_descriptor("admin", descriptor, ["bob"]), ExecutionResult.EXECUTED)
        self.assertTrue(self.wait())
        self.assertEqual(kick.calls, [("admin", ("bob",), "kick")])
        with self.assertRaises(TypeError):
            self.commander.execute_descriptor("admin", "kick")

    def testFreshArgumentsPerRun(self):
        seen = []
        self.commander.register("eat", lambda sender, arguments, alias: seen.append(arguments.shift()))
        tokens = ["apple"]
        self.commander.execute_name("admin", "eat", tokens)
        self.wait()
        self.commander.execute_name("admin", "eat", tokens)
        self.wait()
        self.assertEqual(tokens, ["apple"])
        self.assertEqual(len(seen), 2)

    def testNonStringTokensRejected(self):
        self.commander.register("hurt", noop)
        with self.assertRaises(TypeError):
            self.commander.execute_name("admin", "hurt", [5])


class TestEligibility(TestCase):

    def setUp(self):
        def eligibility(sender, descriptor):
            return sender == "admin" or descriptor.config.extras.get("permission") != "admin"

        self.eligibility = eligibility

    @mock.patch("commandant.commands.trigger")
    def testNoPermissionSilentOutsideShell(self, trigger):
        with Commander(eligibility=self.eligibility) as commander:
            commander.register({"identifier": "ban", "permission": "admin"}, noop)
            self.assertEqual(commander.execute_name("guest", "ban"), ExecutionResult.NO_PERMISSION)
            self.assertIsNone(commander.last)
            self.assertEqual(commander.execute_name("admin", "ban"), ExecutionResult.EXECUTED)
            self.assertTrue(commander.last.result(timeout=TIMEOUT))
        trigger.assert_not_called()

    @mock.patch("commandant.commands.trigger")
    def testNoPermissionRenderedInShell(self, trigger):
        with Commander(eligibility=self.eligibility, shell=True) as commander:
            commander.register({"identifier": "ban", "permission": "admin"}, noop)
            commander.execute_name("guest", "ban")
        fault = trigger.call_args.args[0]
        self.assertIsInstance(fault, NoPermissionWarning)
        self.assertEqual(fault.options["code"], FaultCode.NO_PERMISSION)
        self.assertTrue(trigger.call_args.kwargs["shell"])


class TestShell(TestCase):

    @mock.patch("commandant.commands.trigger")
    def testUnknownSilentOutsideShell(self, trigger):
        with Commander() as commander:
            commander.execute_name("admin", "hrut")
        trigger.assert_not_called()

    @mock.patch("commandant.commands.trigger")
    def testUnknownSuggestsCloseName(self, trigger):
        with Commander(shell=True) as commander:
            commander.register("hurt", noop)
            self.assertEqual(commander.execute_name("admin", "hrut"), ExecutionResult.NOT_FOUND)
        fault = trigger.call_args.args[0]
        self.assertIsInstance(fault, UnknownCommandWarning)
        self.assertEqual(fault.options["suggestions"], ["hurt"])
        self.assertEqual(fault.options["hint"], "did you mean 'hurt'?")

    def testFlags(self):
        with Commander(shell=True, fancy=True) as commander:
            self.assertTrue(commander.shell)
            self.assertTrue(commander.fancy)
            self.assertFalse(commander.colorful)
            self.assertIs(commander.last, None)
            self.assertIsNot(commander.last, Unset)


if __name__ == '__main__':
    unittest.main()
