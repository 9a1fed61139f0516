"""
Signet catalog: the alias index a dispatch layer resolves commands with.

Scope
- Catalog: commands indexed by every alias (lower-cased). Adding a command
  whose alias is taken is a DuplicateCommandError.
- declare(): build and add a command from a (types, handler) table; a rejected
  declaration is logged and yields None, the catalog and the other commands
  are left untouched.
- include(pattern): mount the module-level Commands (and CommandBuilders) of
  every module matching a dotted glob, each one isolated like declare().
- split_invocation(text, prefix): "!cmd the tail" -> ("cmd", "the tail").
- dispatch()/adispatch(): split, look up, then run the pipeline. Text that is
  not an invocation, or names no known command, yields None.

Like the registry, the catalog is written during a load phase and read
concurrently afterwards: writers publish a new read-only index under a lock.
"""
import importlib
import logging
import re
import threading
from types import MappingProxyType

from .commands import Command, CommandBuilder
from .config import DEFAULT, Config
from .faults import DeclarationError, DuplicateCommandError
from .pipeline import aresolve, resolve
from .utils import Unset, coalesce, mglob

logger = logging.getLogger(__name__)


def split_invocation(text, /, prefix="!"):
    """
    split a message into (alias, tail), or return None when `text` does not
    start with `prefix` followed by a word. the alias is lower-cased.
    """
    if not isinstance(text, str):
        raise TypeError("split_invocation() argument must be a string")
    if not isinstance(prefix, str) or not prefix:
        raise ValueError("split_invocation() prefix must be a non-empty string")
    if not (text := text.lstrip()).startswith(prefix):
        return None
    if (match := re.fullmatch(r"(\S+)\s*(.*)", text[len(prefix):], re.DOTALL)) is None:
        return None
    return match.group(1).lower(), match.group(2)


class Catalog:
    """
    Alias index of commands.
    """
    __typename__ = "catalog"

    def __init__(self, commands=(), /, *, prefix="!", config=DEFAULT, registry=Unset):
        if not isinstance(prefix, str) or not prefix.strip():
            raise ValueError(f"{self.__typename__} 'prefix' must be a non-empty string")
        if not isinstance(config, Config):
            raise TypeError(f"{self.__typename__} 'config' must be a config")
        self._prefix = prefix
        self._config = config
        self._registry = registry
        self._lock = threading.Lock()
        self._index = MappingProxyType({})
        for command in commands:
            self.add(command)

    @property
    def prefix(self):
        return self._prefix

    @property
    def config(self):
        return self._config

    def add(self, command, /):
        if not isinstance(command, Command):
            raise TypeError(f"{self.__typename__} can only hold commands")
        with self._lock:
            if taken := [alias for alias in command.aliases if alias in self._index]:
                raise DuplicateCommandError(
                    "alias %r of command %r is already used by %r" % (
                        taken[0], command.name, self._index[taken[0]].name
                    ),
                    command=command,
                    hint="rename or drop the alias",
                )
            self._index = MappingProxyType(dict(self._index) | dict.fromkeys(command.aliases, command))
        logger.debug("added command %r (aliases: %s)", command.name, ", ".join(command.aliases))
        return command

    def declare(self, aliases, patterns=(), /, **metadata):
        """
        build a Command and add it; return it, or None when it is rejected.
        """
        metadata.setdefault("registry", self._registry)
        try:
            return self.add(Command(aliases, patterns, **metadata))
        except DeclarationError as fault:
            logger.warning("rejected command %r: %s", aliases, fault)
            return None

    def include(self, pattern, /):
        """
        add the module-level commands of every module matching `pattern`.

        builders are built first; rejected ones are logged and skipped.
        returns the tuple of commands added by this call.
        """
        added = []
        for module in map(importlib.import_module, mglob(pattern)):
            for attribute, value in vars(module).items():
                if not isinstance(value, Command | CommandBuilder):
                    continue
                try:
                    added.append(self.add(value.build() if isinstance(value, CommandBuilder) else value))
                except DeclarationError as fault:
                    logger.warning("rejected command %s.%s: %s", module.__name__, attribute, fault)
        return tuple(added)

    def get(self, alias, default=None, /):
        if not isinstance(alias, str):
            raise TypeError(f"{self.__typename__} aliases must be strings")
        return self._index.get(alias.strip().lower(), default)

    def __getitem__(self, alias):
        if (command := self.get(alias)) is None:
            raise KeyError(alias)
        return command

    def __contains__(self, alias):
        return isinstance(alias, str) and self.get(alias) is not None

    def __iter__(self):
        return iter(dict.fromkeys(self._index.values()))

    def __len__(self):
        return len(dict.fromkeys(self._index.values()))

    def lookup(self, text, /, prefix=Unset):
        """
        return (command, tail) for a message, or None.
        """
        if (split := split_invocation(text, coalesce(prefix, self._prefix))) is None:
            return None
        alias, tail = split
        if (command := self.get(alias)) is None:
            logger.debug("no command for alias %r", alias)
            return None
        return command, tail

    def dispatch(self, text, context=None, /, prefix=Unset):
        """
        run the command named by `text`; None when no command is named.

        resolution and execution faults propagate to the caller.
        """
        if (found := self.lookup(text, prefix)) is None:
            return None
        command, tail = found
        return resolve(command, tail, context, self._config)

    async def adispatch(self, text, context=None, /, prefix=Unset):
        if (found := self.lookup(text, prefix)) is None:
            return None
        command, tail = found
        return await aresolve(command, tail, context, self._config)

    def __repr__(self):
        return f"{self.__typename__}({', '.join(command.name for command in self)})"


__all__ = (
    "Catalog",
    "split_invocation",
)
