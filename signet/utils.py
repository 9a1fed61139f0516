"""
Signet utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the registry, option and signature layers.
- Exposed through __all__ but designed for the package itself first.

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (a converter
    result of None already means "rejected").
- coalesce(value, default=None)
  • Replace Unset with a default, keep every other value (None included).
- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated callables.
- view(name)
  • Read-only property over a private backing field, returning immutable views
    (tuple, MappingProxyType, frozenset) for containers.
- ordinal(number)
  • "first", "second", ..., "11th": position-first wording for fault messages.
- mglob(pattern)
  • Dotted module globbing ("pkg.*", "pkg.**.converters") used by registry discovery.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3)
    'third'
"""
import builtins
import functools
import importlib
import pkgutil
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false, but never equal to None, 0 or "".
    - repr(Unset) -> "Unset".
    - Sealed and singleton per process.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return type(self), ()

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Falsey values (None, 0, "", ()) are preserved as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator that does.

    Forms
    - rename(callable, name) -> callable
    - @rename(name)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def view(name, /):
    """
    Define a read-only property over the backing attribute "_{name}".

    Containers are handed out as immutable views so the public surface of a
    descriptor (slots, aliases, options) cannot be mutated after construction:
    - Sequence (non-str) -> tuple
    - Mapping            -> MappingProxyType
    - Set                -> frozenset
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal for a 1-based position.

    1..10 are words ("first"..."tenth"); other numbers use numeric suffixes
    with the teens exception (11th, 12th, 13th).
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1] if number > 0 else f"{number}th"
    except IndexError:
        pass
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


@functools.cache
def _resolve_segment(segment):
    """
    translate one glob segment into a regex snippet (dots are never matched).
      *       → zero or more non-dot chars
      ?       → exactly one non-dot char
      [...]   → character class, [!...] negated
      \\x      → literal x
    """
    parts = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == '\\' and index + 1 < len(segment):
            parts.append(re.escape(segment[index + 1]))
            index += 2
            continue
        if char == '*':
            parts.append(r'[^.]*')
        elif char == '?':
            parts.append(r'[^.]')
        elif char == '[':
            start = index + 1
            negated = ''
            if start < len(segment) and segment[start] in ('!', '^'):
                negated, start = '^', start + 1
            close = segment.find(']', start)
            if close < 0:
                parts.append(r'\[')
            else:
                parts.append(f'[{negated}{segment[start:close]}]')
                index = close
        else:
            parts.append(re.escape(char))
        index += 1
    return ''.join(parts)


@functools.cache
def _compile_glob(pattern):
    """
    compile a dotted module glob; '**' spans zero or more whole segments.
    """
    body = ""
    for position, segment in enumerate(pattern.split('.')):
        if segment == '**':
            body += r'(?:\.[A-Za-z_]\w*)*'
        else:
            body += ('' if not position else r'\.') + _resolve_segment(segment)
    return re.compile(body)


def mglob(source, /):
    """
    expand a dotted module glob into importable module names.

    rules
    - the pattern must start with at least one concrete package segment.
    - without wildcards the pattern itself is returned.
    - matches are returned sorted; an unimportable prefix yields [].

    examples
    - "signet.converters"       → ["signet.converters"]
    - "plugins.*"               → direct children of plugins
    - "plugins.**.converters"   → any converters module under plugins
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split('.'):
        if not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    matches = set()
    if (pattern := _compile_glob(source)).fullmatch(prefix):
        matches.add(prefix)

    if hasattr(package, "__path__"):
        for metadata in pkgutil.walk_packages(package.__path__, prefix + '.'):
            if pattern.fullmatch(metadata.name):
                matches.add(metadata.name)

    return sorted(matches)


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "view",
    "ordinal",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
