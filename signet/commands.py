"""
Signet command descriptors.

What this module provides
- Command: a command's identity (aliases, descriptions), its closed set of
  allowed options and its ordered signatures. Built once, at load time, from
  a table of (type names, handler) rows; immutable afterwards.
- command(...): a builder collecting rows through a decorator, for modules
  declaring their commands next to the handlers.

Resolution
- Command.resolve(tokens) tries signatures in registration order and returns
  the first that maps the tokens (first match wins, no scoring). Register the
  more specific signatures first.
- When none matches, NoSignatureMatchedError carries the attempted tokens and
  one ArgumentConversionError per signature as diagnostics.

Validation (InvalidCommandError unless stated)
- aliases: at least one; lower-cased, no whitespace, no duplicates. The first
  alias is the command name.
- options: Option instances, long and short names unique within the command.
- signatures: built through signatures.signature(); structurally equal
  signatures are a DuplicateSignatureError.

Quick example:
    >>> from signet import command, FORCE
    >>> tag = command("tag", "t", options=(FORCE,), description="manage tags")
    >>> @tag.pattern("'add'", "WORD...")
    ... def add(context, _, *names): ...
    >>> @tag.pattern()
    ... def show(context): ...
    >>> tag = tag.build()
"""
import logging
import re
from collections.abc import Iterable

from .config import DEFAULT
from .faults import (
    ArgumentConversionError,
    DuplicateSignatureError,
    InvalidCommandError,
    NoSignatureMatchedError,
)
from .internals import SpecType
from .options import Option
from .parser import parse
from .signatures import Signature, signature
from .utils import Unset, UnsetType, coalesce, rename

logger = logging.getLogger(__name__)


def _sanitize_aliases(cls, aliases, /):
    if isinstance(aliases, str):
        aliases = (aliases,)
    elif not isinstance(aliases, Iterable):
        raise InvalidCommandError(f"{cls.__typename__} aliases must be a string or an iterable of strings")
    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise InvalidCommandError(f"{cls.__typename__} aliases must be strings (got {alias!r})")
        elif not re.fullmatch(r"\S+", alias := alias.strip().lower()):
            raise InvalidCommandError(f"{cls.__typename__} aliases must be non-empty words (got {alias!r})")
        elif alias in sanitized:
            raise InvalidCommandError(f"{cls.__typename__} aliases cannot contain duplicates ({alias!r})")
        sanitized.append(alias)
    if not sanitized:
        raise InvalidCommandError(f"{cls.__typename__} must have at least one alias")
    return tuple(sanitized)


def _sanitize_options(cls, options, name, /):
    if not isinstance(options, Iterable):
        raise InvalidCommandError(f"{cls.__typename__} {name!r} options must be an iterable of options")
    longs, shorts, sanitized = set(), set(), []
    for option in options:
        if not isinstance(option, Option):
            raise InvalidCommandError(f"{cls.__typename__} {name!r} options must be options (got {option!r})")
        if option.long.casefold() in longs:
            raise InvalidCommandError(f"{cls.__typename__} {name!r} declares the long option {option.long!r} twice")
        if option.short is not None and option.short in shorts:
            raise InvalidCommandError(f"{cls.__typename__} {name!r} declares the short option {option.short!r} twice")
        longs.add(option.long.casefold())
        shorts.add(option.short)
        sanitized.append(option)
    return tuple(sanitized)


def _sanitize_text(cls, text, field, /):
    if not isinstance(text, str | UnsetType):
        raise InvalidCommandError(f"{cls.__typename__} {field!r} must be a string")
    elif isinstance(text, str) and not (text := text.strip()):
        raise InvalidCommandError(f"{cls.__typename__} {field!r} cannot be empty")
    return coalesce(text)


class Command(metaclass=SpecType, sealed=True):
    """
    Immutable command descriptor (see module docs).
    """
    __introspectable__ = (
        "name",
        "aliases",
        "description",
        "help",
        "options",
        "signatures",
    )
    __displayable__ = (
        "name",
        "aliases",
        "options",
        "signatures",
    )

    def __init__(self, aliases, patterns=(), /, *, options=(), description=Unset, help=Unset, registry=Unset):
        self._aliases = _sanitize_aliases(type(self), aliases)
        self._name = self._aliases[0]
        self._options = _sanitize_options(type(self), options, self._name)
        self._description = _sanitize_text(type(self), description, "description")
        self._help = _sanitize_text(type(self), help, "help")

        if isinstance(patterns, str) or not isinstance(patterns, Iterable):
            raise InvalidCommandError(
                f"{type(self).__typename__} {self._name!r} patterns must be an iterable of rows (got {patterns!r})"
            )
        signatures = []
        for row in patterns:
            if isinstance(row, Signature):
                built = row
            else:
                try:
                    types, handler = row
                except (TypeError, ValueError):
                    raise InvalidCommandError(
                        f"{type(self).__typename__} {self._name!r} patterns must be (types, handler) pairs"
                    ) from None
                built = signature(types, handler, registry)
            if built in signatures:
                raise DuplicateSignatureError(
                    "command %r declares the pattern [%s] twice" % (self._name, built),
                    command=self,
                    hint="each pattern of a command needs a distinct type sequence",
                )
            signatures.append(built)
        self._signatures = tuple(signatures)
        logger.debug("built command %r with %d pattern(s)", self._name, len(self._signatures))

    def parse(self, tail, /, config=DEFAULT):
        """
        parse `tail` against this command's allowed options.
        """
        return parse(tail, self._options, config)

    def resolve(self, tokens, /):
        """
        return (signature, arguments) for the first signature mapping `tokens`.

        raises NoSignatureMatchedError with the per-signature reasons otherwise.
        """
        tokens = tuple(tokens)
        reasons = []
        for signature in self._signatures:
            try:
                arguments = signature.map(tokens)
            except ArgumentConversionError as reason:
                logger.debug("command %r: pattern [%s] rejected: %s", self._name, signature, reason)
                reasons.append(reason)
                continue
            logger.debug("command %r: pattern [%s] matched", self._name, signature)
            return signature, arguments

        raise NoSignatureMatchedError(
            "no pattern of %r matches %d argument%s" % (self._name, len(tokens), "" if len(tokens) == 1 else "s"),
            command=self,
            tokens=tokens,
            reasons=reasons,
            hint="expected one of: %s" % " | ".join(map(str, self._signatures)) if self._signatures else None,
        )

    def __contains__(self, alias):
        return isinstance(alias, str) and alias.strip().lower() in self._aliases


class CommandBuilder:
    """
    Collect (types, handler) rows, then build the Command in one step.

    build() performs every validation; nothing is checked while collecting.
    """

    def __init__(self, aliases, /, **metadata):
        self._aliases = aliases
        self._metadata = metadata
        self._rows = []

    def add(self, types, handler, /):
        self._rows.append((types, handler))
        return self

    def pattern(self, *types):
        """
        decorator recording the decorated handler with the given type names;
        the handler itself is returned unchanged.
        """
        @rename("pattern")
        def wrapper(handler):
            if not callable(handler):
                raise TypeError("@pattern() must be applied to a callable")
            self._rows.append((types, handler))
            return handler
        return wrapper

    def build(self):
        return Command(self._aliases, self._rows, **self._metadata)

    def __repr__(self):
        return f"command-builder({self._aliases!r}, rows={len(self._rows)})"


def command(*aliases, **metadata):
    """
    start declaring a command; see CommandBuilder.
    """
    return CommandBuilder(aliases, **metadata)


__all__ = (
    "Command",
    "CommandBuilder",
    "command",
)
