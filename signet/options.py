"""
Signet options: declared flags/value options and parsed option sets.

Overview
- Option
  • A fixed symbolic identity (e.g. "FORCE"), a long name ("force"), an optional
    one-character short name ("f") and, for value-bearing options, the
    Converter applied to the value.
- Built-ins
  • HELP (help, h), FORCE (force, f), NAME (name, n, STRING value),
    RECURSIVE (recursive, R).
- Options
  • Read-only mapping Option -> typed value, produced by the parser.
  • has(), raw() and typed get()/[] access; values are converted lazily, on
    first access, and cached.
  • Keys can be given as the Option itself or as any of its names.
"""
import re
from collections.abc import Mapping

from .converters import STRING, Converter
from .internals import SpecType
from .utils import Unset, UnsetType, coalesce


def _sanitize_option(cls, metadata, /):
    """
    Internal: validate and normalize option metadata in place.

    - name: symbolic identity, identifier-like, upper-cased.
    - long: defaults to the lower-cased name; shell-style word ("dry-run").
    - short: Unset/None or exactly one letter or digit.
    - converter: Unset/None for flags, a Converter for value options.
    - descr: Unset or a non-empty string (trimmed).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d]\w*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be an identifier-like word")
    metadata["name"] = name.upper()

    if not isinstance(long := coalesce(metadata["long"], name.lower().replace("_", "-")), str):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", long := long.strip()):
        raise ValueError(f"{cls.__typename__} 'long' must be a valid shell-style name (got {long!r})")
    metadata["long"] = long

    if not isinstance(short := coalesce(metadata["short"]), str | None):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif short is not None and not re.fullmatch(r"[^\W_]", short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single letter or digit (got {short!r})")
    metadata["short"] = short

    if not isinstance(converter := coalesce(metadata["converter"]), Converter | None):
        raise TypeError(f"{cls.__typename__} 'converter' must be a converter")
    metadata["converter"] = converter

    if not isinstance(descr := metadata["descr"], str | UnsetType):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Option(metaclass=SpecType):
    """
    A named flag, or value option when it carries a converter.

    Options compare by identity triple (name, long, short) so that rebuilt
    equivalents address the same parsed entry.
    """
    __introspectable__ = (
        "name",
        "long",
        "short",
        "converter",
        "descr",
    )
    __displayable__ = (
        "name",
        "long",
        "short",
        "converter",
    )

    def __init__(self, name, long=Unset, short=Unset, /, converter=Unset, descr=Unset):
        _sanitize_option(type(self), metadata := {
            "name": name,
            "long": long,
            "short": short,
            "converter": converter,
            "descr": descr,
        })
        for field, value in metadata.items():
            setattr(self, "_" + field, value)

    @property
    def valued(self):
        return self._converter is not None

    @property
    def names(self):
        return (self._long,) if self._short is None else (self._long, self._short)

    def __eq__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return (self._name, self._long, self._short) == (other._name, other._long, other._short)

    def __hash__(self):
        return hash((self._name, self._long, self._short))


HELP = Option("HELP", "help", "h", descr="show the command help")
FORCE = Option("FORCE", "force", "f", descr="skip confirmations")
NAME = Option("NAME", "name", "n", converter=STRING, descr="name to use")
RECURSIVE = Option("RECURSIVE", "recursive", "R", descr="apply recursively")

BUILTINS = (HELP, FORCE, NAME, RECURSIVE)


class Options(Mapping):
    """
    Parsed options of one invocation.

    - keys: Option instances, in the order they were first given.
    - raw(option): the value text (None for flags and for valued options given
      without a value).
    - get(option)/options[option]: True for flags; for valued options the
      converted value (None when absent or rejected by the converter).
    """
    __typename__ = "options"

    def __init__(self, values=(), /):
        self._values = dict(values)
        self._cache = {}
        for option in self._values:
            if not isinstance(option, Option):
                raise TypeError(f"{self.__typename__} keys must be options")

    def _key(self, option):
        if isinstance(option, Option):
            return option
        if isinstance(option, str):
            for candidate in self._values:
                if option in (candidate.name, candidate.long, candidate.short):
                    return candidate
            return option
        raise TypeError(f"{self.__typename__} keys must be options or option names")

    def has(self, option, /):
        return self._key(option) in self._values

    def raw(self, option, default=None, /):
        return self._values.get(self._key(option), default)

    def __getitem__(self, option):
        if (key := self._key(option)) not in self._values:
            raise KeyError(option)
        if not key.valued:
            return True
        if key not in self._cache:
            raw = self._values[key]
            self._cache[key] = None if raw is None else key.converter(raw)
        return self._cache[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __contains__(self, option):
        return self.has(option)

    def __repr__(self):
        return f"{self.__typename__}({', '.join(option.long if raw is None else f'{option.long}={raw!r}' for option, raw in self._values.items())})"


EMPTY = Options()


__all__ = (
    "Option",
    "Options",
    "HELP",
    "FORCE",
    "NAME",
    "RECURSIVE",
    "BUILTINS",
    "EMPTY",
)
