"""
Tokenization and option-parsing configuration.

A Config is validated once at construction and read-only afterwards; it is
shared freely between threads. Fields
- prefix: the option marker character ("-" by default; "--x" is a long option).
- quoting: single or double quotes group a run, spaces included, into one token.
- escapes: a backslash makes the next character literal.
- case_sensitive: long option names compare case-insensitively unless True.
  Short (one character) names always compare case-sensitively ("-R" is not "-r").
- duplicates: when False, repeating an option fails the parse; when True the
  last occurrence wins.
- ignore_values: option values are consumed as usual but not kept (every
  raw value reads None). For commands that only care about which options
  were given.

Configs can be built from plain mappings (e.g. a table read from a TOML file):
    >>> Config.from_mapping({"prefix": "+", "duplicates": True})
"""
from collections.abc import Mapping

from .internals import SpecType


class Config(metaclass=SpecType, sealed=True):
    __introspectable__ = (
        "prefix",
        "quoting",
        "escapes",
        "case_sensitive",
        "duplicates",
        "ignore_values",
    )

    def __init__(self, prefix="-", /, *, quoting=True, escapes=True, case_sensitive=False, duplicates=False,
                 ignore_values=False):
        if not isinstance(prefix, str):
            raise TypeError(f"{type(self).__typename__} 'prefix' must be a string")
        if len(prefix) != 1 or prefix.isspace() or prefix in "'\"\\":
            raise ValueError(f"{type(self).__typename__} 'prefix' must be a single non-space, non-quote character")

        for name, value in (
                ("quoting", quoting),
                ("escapes", escapes),
                ("case_sensitive", case_sensitive),
                ("duplicates", duplicates),
                ("ignore_values", ignore_values),
        ):
            if not isinstance(value, bool):
                raise TypeError(f"{type(self).__typename__} {name!r} must be a boolean")

        self._prefix = prefix
        self._quoting = quoting
        self._escapes = escapes
        self._case_sensitive = case_sensitive
        self._duplicates = duplicates
        self._ignore_values = ignore_values

    @classmethod
    def from_mapping(cls, mapping, /):
        """
        build a config from a plain mapping; unknown keys are rejected.
        """
        if not isinstance(mapping, Mapping):
            raise TypeError(f"{cls.__typename__} source must be a mapping")
        if unknown := set(mapping) - set(cls.__introspectable__):
            raise ValueError(f"{cls.__typename__} unknown keys: {', '.join(sorted(map(str, unknown)))}")
        options = dict(mapping)
        return cls(options.pop("prefix", "-"), **options)

    def replace(self, **overrides):
        return type(self).from_mapping({
            name: getattr(self, name) for name in type(self).__introspectable__
        } | overrides)

    def fold(self, name, /):
        """
        normalize a long option name according to case_sensitive.
        """
        return name if self._case_sensitive else name.casefold()

    def __eq__(self, other):
        if not isinstance(other, Config):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash(tuple(self.__rich_repr__()))


DEFAULT = Config()


__all__ = (
    "Config",
    "DEFAULT",
)
