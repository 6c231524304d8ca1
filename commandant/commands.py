"""
Commandant command layer: register, look up, and dispatch named commands.

What this module provides
- CommandConfig: identity of a command (identifier + aliases) plus any extra
  fields the host wants to attach (description, permission level, ...).
- Executors: FunctionExecutor / ObjectExecutor, one uniform call shape
  `(sender, arguments, alias)` resolved once at registration time by executor().
- Commander: the registry. Maps the identifier and every alias to the same
  CommandDescriptor, checks eligibility, builds the Arguments buffer, and runs
  the executor on a worker pool.
- ExecutionResult: immediate dispatch classification (executed / not found /
  no permission).

Dispatch flow
1. look the name up (identifier or alias); miss → NOT_FOUND.
2. eligibility(sender, descriptor) is false → NO_PERMISSION.
3. build a fresh Arguments(tokens), submit the executor, return EXECUTED right
   away. The executor finishes on a worker thread; when it is done the hook
   receives (descriptor, success, (sender, arguments, alias)).

Completion semantics
- success is False when the executor returned False (literally) or raised;
  any other return value, None included, is a success.
- coroutine results are driven to completion on the worker with asyncio.run.
- exceptions raised by the executor or the hook never reach the caller of
  execute_*(): they are surfaced as DelegatedCommandWarning faults.

Quick start
    from commandant import Commander, Converter

    commander = Commander()

    @commander.command("hurt", aliases=["dmg"])
    def hurt(sender, arguments, alias):
        amount = arguments.shift(Converter(int))
        ...

    commander.execute_name(player, "dmg", ["5"])   # ExecutionResult.EXECUTED
"""
import asyncio
import difflib
import inspect
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple, final

from .arguments import Arguments
from .faults import *
from .utils import *


class ExecutionResult(IntEnum):
    """
    Outcome of a dispatch call, not of the command itself.
    """
    EXECUTED = 0
    NOT_FOUND = 1
    NO_PERMISSION = 2


def _sanitize_name(name, field, /):
    if not isinstance(name, str):
        raise TypeError(f"command-config {field!r} must be a string")
    elif not name:
        raise ValueError(f"command-config {field!r} cannot be empty")
    elif any(char.isspace() for char in name):
        raise ValueError(f"command-config {field!r} cannot contain whitespace")
    return name


@final
class CommandConfig:
    """
    Immutable command identity plus arbitrary extra fields.

    Fields
    - identifier: str (non-empty, no whitespace)
    - aliases: tuple[str, ...] (same rules; duplicates, including the identifier, rejected)
    - extras: read-only mapping of any other keyword given at construction;
      each extra is also reachable as an attribute (config.description, ...).
    """
    __slots__ = ("_identifier", "_aliases", "_extras")

    identifier = mirror("identifier")
    aliases = mirror("aliases")
    extras = mirror("extras")

    def __init__(self, identifier, aliases=(), **extras):
        self._identifier = _sanitize_name(identifier, "identifier")

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError("command-config 'aliases' must be an iterable of strings")
        seen = {self._identifier}
        sanitized = []
        for alias in aliases:
            if _sanitize_name(alias, "aliases") in seen:
                raise ValueError("command-config 'aliases' cannot contain duplicates")
            seen.add(alias)
            sanitized.append(alias)
        self._aliases = tuple(sanitized)
        self._extras = dict(extras)

    @classmethod
    def of(cls, object, /):
        """
        Build a config from a config (returned as-is), a mapping, or a bare identifier.
        """
        if isinstance(object, CommandConfig):
            return object
        return cls(**_fields(object))

    @property
    def names(self):
        """
        Identifier followed by every alias.
        """
        return (self._identifier, *self._aliases)

    def asdict(self):
        return {"identifier": self._identifier, "aliases": self._aliases, **self._extras}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._extras[name]
        except KeyError:
            raise AttributeError(f"command-config has no field {name!r}") from None

    def __eq__(self, other, /):
        if not isinstance(other, CommandConfig):
            return NotImplemented
        return self.asdict() == other.asdict()

    __hash__ = None

    def __repr__(self):
        return "command-config(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())

    def __rich_repr__(self):
        yield "identifier", self._identifier
        yield "aliases", self._aliases
        yield from self._extras.items()


def _fields(object, /):
    """
    Internal: plain field dict from a config, a mapping, or a bare identifier.
    """
    if isinstance(object, CommandConfig):
        return object.asdict()
    if isinstance(object, str):
        return {"identifier": object}
    if isinstance(object, Mapping):
        return dict(object)
    raise TypeError("command config must be a command-config, a mapping, or an identifier string")


class FunctionExecutor:
    """
    Executor backed by a plain callable: callback(sender, arguments, alias).
    """
    __slots__ = ("_callback",)

    def __init__(self, callback, /):
        if not callable(callback):
            raise TypeError("function-executor 'callback' must be callable")
        self._callback = callback

    @property
    def target(self):
        return self._callback

    def __call__(self, sender, arguments, alias, /):
        return self._callback(sender, arguments, alias)

    def __repr__(self):
        return f"function-executor(callback={self._callback!r})"


class ObjectExecutor:
    """
    Executor backed by an object exposing execute(sender, arguments, alias).
    """
    __slots__ = ("_object",)

    def __init__(self, object, /):
        if not callable(getattr(object, "execute", None)):
            raise TypeError("object-executor 'object' must implement an execute method")
        self._object = object

    @property
    def target(self):
        return self._object

    def __call__(self, sender, arguments, alias, /):
        return self._object.execute(sender, arguments, alias)

    def __repr__(self):
        return f"object-executor(object={self._object!r})"


def executor(x, /):
    """
    Resolve an executor-like object once, at registration time.

    Resolution
    - FunctionExecutor / ObjectExecutor → returned as-is
    - object with a callable `execute` attribute → ObjectExecutor
    - any other callable → FunctionExecutor
    - anything else → TypeError
    """
    if isinstance(x, FunctionExecutor | ObjectExecutor):
        return x
    if not isinstance(x, type) and callable(getattr(x, "execute", None)):
        return ObjectExecutor(x)
    if callable(x):
        return FunctionExecutor(x)
    raise TypeError("executor() argument must be callable or implement an execute method")


class CommandDescriptor(NamedTuple):
    config: CommandConfig
    executor: FunctionExecutor | ObjectExecutor


def always(sender, descriptor, /):
    """
    Default eligibility policy: every sender may run every command.
    """
    return True


class Commander:
    """
    Registry and dispatcher for named commands.

    Parameters (keyword-only)
    - eligibility: Callable[[sender, CommandDescriptor], bool]
      permission policy consulted before every run (default: always).
    - hook: Callable[[CommandDescriptor, bool, tuple], Any] | Unset
      completion callback, called on the worker with (descriptor, success,
      (sender, arguments, alias)).
    - workers: int | Unset
      maximum worker threads (ThreadPoolExecutor default when Unset).
    - shell, fancy, colorful: bool
      rendering flags for faults. In shell mode, unknown names and denied
      invocations are reported on stderr; otherwise only handler failures are
      surfaced (through warnings.warn).

    Concurrency
    - the name → descriptor mapping is the only shared state; it changes only
      through register()/deregister() (last write wins on a key) and is guarded
      by a lock. Each run gets its own Arguments buffer.
    """

    def __init__(
            self,
            *,
            eligibility=always,
            hook=Unset,
            workers=Unset,
            shell=False,
            fancy=False,
            colorful=False
    ):
        if not callable(eligibility):
            raise TypeError("commander 'eligibility' must be callable")
        if hook is not Unset and not callable(hook):
            raise TypeError("commander 'hook' must be callable")
        if workers is not Unset and (not isinstance(workers, int) or isinstance(workers, bool)):
            raise TypeError("commander 'workers' must be an integer")
        elif workers is not Unset and workers < 1:
            raise ValueError("commander 'workers' must be a positive integer")

        self._eligibility = eligibility
        self._hook = hook
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._commands = {}
        self._defaults = Unset
        self._lock = threading.Lock()
        self._pool = ThreadPoolExecutor(max_workers=coalesce(workers), thread_name_prefix="commandant")
        self._last = None

    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def last(self):
        """
        Future[bool] of the most recent EXECUTED dispatch (None before the first one).
        """
        return self._last

    @property
    def names(self):
        """
        Read-only snapshot of the name → descriptor mapping (identifiers and aliases).
        """
        with self._lock:
            return MappingProxyType(dict(self._commands))

    def defaults(self, **fields):
        """
        Install registration defaults.

        Every later register() fills the fields missing from its config with
        these values; explicitly given fields always win. Calling defaults()
        again replaces the previous set.
        """
        self._defaults = MappingProxyType(dict(fields))
        return self

    def register(self, config, executor_, /):
        """
        Register an executor under the config's identifier and every alias.

        Parameters
        - config: CommandConfig | Mapping | str
          partial mappings are completed with the defaults() fields first.
        - executor_: callable | object with execute()

        Returns
        - self, so registrations can be chained.

        Notes
        - existing entries at the same names are overwritten.
        """
        fields = _fields(config)
        if self._defaults:
            fields = {**self._defaults, **fields}
        descriptor = CommandDescriptor(CommandConfig.of(fields), executor(executor_))

        with self._lock:
            self._commands.update(dict.fromkeys(descriptor.config.names, descriptor))
        return self

    def command(self, config=Unset, /, **fields):
        """
        Decorator form of register().

            @commander.command("hurt", aliases=["dmg"])
            def hurt(sender, arguments, alias): ...

        The decorated object is returned unchanged.
        """
        fields = {**_fields(config), **fields} if config is not Unset else fields

        @rename("command")
        def wrapper(source, /):
            self.register(fields, source)
            return source

        return wrapper

    def deregister(self, config, /):
        """
        Remove the config's identifier and every alias listed in it.

        Returns
        - False when the identifier is not registered (nothing is removed), True otherwise.
        """
        fields = _fields(config)
        identifier = fields.get("identifier")
        aliases = fields.get("aliases", ())
        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError("command-config 'aliases' must be an iterable of strings")
        aliases = tuple(aliases)

        with self._lock:
            if identifier not in self._commands:
                return False
            del self._commands[identifier]
            for alias in aliases:
                self._commands.pop(alias, None)
        return True

    def descriptor(self, name, /):
        """
        Return the descriptor mapped at name (identifier or alias), or None.
        """
        with self._lock:
            return self._commands.get(name)

    def execute_name(self, sender, name, tokens=(), /):
        """
        Dispatch by identifier or alias; the matched name is passed to the executor.
        """
        if (descriptor := self.descriptor(name)) is None:
            return self._missing(sender, name)
        return self._execute(sender, descriptor, tokens, name)

    def execute_config(self, sender, config, tokens=(), /):
        """
        Dispatch by the identifier of the given config (aliases are not consulted).
        """
        identifier = CommandConfig.of(config).identifier
        if (descriptor := self.descriptor(identifier)) is None:
            return self._missing(sender, identifier)
        return self._execute(sender, descriptor, tokens, identifier)

    def execute_descriptor(self, sender, descriptor, tokens=(), /):
        """
        Run a descriptor directly, whether or not this commander knows it.
        """
        if not isinstance(descriptor, CommandDescriptor):
            raise TypeError("execute_descriptor() argument must be a command descriptor")
        return self._execute(sender, descriptor, tokens, descriptor.config.identifier)

    def _missing(self, sender, name):
        if self._shell:
            with self._lock:
                candidates = list(self._commands.keys())
            suggestions = difflib.get_close_matches(str(name), candidates, 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "check the command name and try again"
            self._trigger(UnknownCommandWarning(
                "unknown command %r" % (name,),
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                name=name,
                sender=sender,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            ))
        return ExecutionResult.NOT_FOUND

    def _execute(self, sender, descriptor, tokens, alias):
        if not self._eligibility(sender, descriptor):
            if self._shell:
                self._trigger(NoPermissionWarning(
                    "not allowed to run command %r" % alias,
                    title="no permission",
                    code=FaultCode.NO_PERMISSION,
                    name=alias,
                    sender=sender,
                    hint="ask for access to %r" % descriptor.config.identifier,
                    docs=getdoc(FaultCode.NO_PERMISSION),
                ))
            return ExecutionResult.NO_PERMISSION

        arguments = (sender, Arguments(tokens), alias)
        self._last = self._pool.submit(self._run, descriptor, arguments)
        return ExecutionResult.EXECUTED

    def _run(self, descriptor, arguments):
        """
        Worker body: run the executor, judge success, notify the hook.

        Executor and hook failures are surfaced as delegated faults; only
        KeyboardInterrupt propagates, after the hook ran.
        """
        success = False
        try:
            result = descriptor.executor(*arguments)
            if inspect.iscoroutine(result):
                result = asyncio.run(result)
            success = result is not False
        except KeyboardInterrupt:
            raise
        except BaseException as exception:
            # SystemExit and friends count as a failed run too
            self._delegated(descriptor, arguments, exception, "command %r failed" % arguments[2])
        finally:
            self._notify(descriptor, success, arguments)
        return success

    def _notify(self, descriptor, success, arguments):
        if self._hook is Unset:
            return
        try:
            self._hook(descriptor, success, arguments)
        except Exception as exception:
            self._delegated(descriptor, arguments, exception, "completion hook for %r failed" % arguments[2])

    def _delegated(self, descriptor, arguments, exception, message):
        self._trigger(DelegatedCommandWarning(
            message,
            title="delegated error",
            code=FaultCode.DELEGATED_ERROR,
            name=arguments[2],
            sender=arguments[0],
            descriptor=descriptor,
            exception=exception,
            hint="%s: %s" % (type(exception).__name__, exception),
            docs=getdoc(FaultCode.DELEGATED_ERROR),
        ))

    def _trigger(self, fault):
        trigger(
            fault,
            tool=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )

    def shutdown(self, wait=True):
        """
        Stop the worker pool; with wait=True, block until pending runs finished.
        """
        self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.shutdown(wait=True)

    def __contains__(self, name):
        with self._lock:
            return name in self._commands

    def __len__(self):
        with self._lock:
            return len({id(descriptor) for descriptor in self._commands.values()})

    def __repr__(self):
        return "commander(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())

    def __rich_repr__(self):
        with self._lock:
            names = tuple(self._commands)
        yield "names", names
        yield "shell", self._shell
        yield "fancy", self._fancy
        yield "colorful", self._colorful


__all__ = (
    "ExecutionResult",
    "CommandConfig",
    "FunctionExecutor",
    "ObjectExecutor",
    "executor",
    "CommandDescriptor",
    "always",
    "Commander",
)
