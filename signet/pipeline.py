"""
Signet invocation pipeline.

Flow (one direction, nothing shared but read-only descriptors)
    raw tail -> Command.parse -> (Options, tokens)
             -> Command.resolve -> (Signature, arguments)
             -> Signature.invoke(context, arguments, options) -> result

Entry points
- prepare(command, tail, context, config) -> Invocation
  Resolution only. Raises the ResolutionError family (unknown/duplicated
  option, no signature matched); the handler is not called.
- resolve(command, tail, context, config) -> Outcome
  prepare() then run the handler. A failure raised by the handler is
  re-raised as CommandExecutionError (its cause attached), never as a
  resolution error: the command was found and matched, it failed to run.
  An awaitable result is returned untouched.
- aresolve(...) -> Outcome
  Same as resolve(), awaiting an awaitable result; failures of the awaited
  coroutine are wrapped the same way.

No timeout nor cancellation is imposed on handlers; that is the caller's call.
"""
import inspect
import logging

from .commands import Command
from .config import DEFAULT, Config
from .faults import CommandExecutionError
from .internals import SpecType

logger = logging.getLogger(__name__)


class Invocation(metaclass=SpecType, sealed=True):
    """
    One resolution attempt: what was asked and what it resolved to.
    """
    __introspectable__ = (
        "command",
        "tail",
        "context",
        "options",
        "tokens",
        "signature",
        "arguments",
    )
    __displayable__ = (
        "command",
        "tail",
        "options",
        "tokens",
        "arguments",
    )

    def __init__(self, command, tail, context, options, tokens, signature, arguments, /):
        self._command = command
        self._tail = tail
        self._context = context
        self._options = options
        self._tokens = tokens
        self._signature = signature
        self._arguments = arguments

    @property
    def context(self):
        return self._context

    @property
    def options(self):
        return self._options


class Outcome(metaclass=SpecType, sealed=True):
    """
    A successful execution: the invocation and the handler's result.
    """
    __introspectable__ = (
        "invocation",
        "result",
    )

    def __init__(self, invocation, result, /):
        self._invocation = invocation
        self._result = result

    @property
    def result(self):
        return self._result

    @property
    def command(self):
        return self._invocation.command

    @property
    def signature(self):
        return self._invocation.signature

    @property
    def arguments(self):
        return self._invocation.arguments

    @property
    def options(self):
        return self._invocation.options


def prepare(command, tail="", context=None, /, config=DEFAULT):
    """
    parse and resolve `tail` for `command` without running any handler.
    """
    if not isinstance(command, Command):
        raise TypeError("prepare() first argument must be a command")
    if not isinstance(tail, str):
        raise TypeError("prepare() second argument must be a string")
    if not isinstance(config, Config):
        raise TypeError("prepare() config must be a config")

    options, tokens = command.parse(tail, config)
    signature, arguments = command.resolve(tokens)
    return Invocation(command, tail, context, options, tokens, signature, arguments)


def _failed(invocation, error):
    logger.warning(
        "command %r failed in [%s]: %s: %s",
        invocation.command.name, invocation.signature, type(error).__name__, error,
    )
    return CommandExecutionError(
        "command %r failed: %s" % (invocation.command.name, str(error) or type(error).__name__),
        command=invocation.command,
        invocation=invocation,
        cause=error,
        hint="the command was resolved; the failure comes from its handler",
    )


def execute(invocation, /):
    """
    run the handler of a prepared invocation.
    """
    try:
        result = invocation.signature.invoke(invocation.context, invocation.arguments, invocation.options)
    except Exception as error:
        raise _failed(invocation, error) from error
    return Outcome(invocation, result)


async def aexecute(invocation, /):
    try:
        result = invocation.signature.invoke(invocation.context, invocation.arguments, invocation.options)
        if inspect.isawaitable(result):
            result = await result
    except Exception as error:
        raise _failed(invocation, error) from error
    return Outcome(invocation, result)


def resolve(command, tail="", context=None, /, config=DEFAULT):
    return execute(prepare(command, tail, context, config))


async def aresolve(command, tail="", context=None, /, config=DEFAULT):
    return await aexecute(prepare(command, tail, context, config))


__all__ = (
    "Invocation",
    "Outcome",
    "prepare",
    "execute",
    "aexecute",
    "resolve",
    "aresolve",
)
