"""
Signet type registry.

Scope
- Map symbolic names ("STRING", "USER", ...) to Converters.
- Registration only grows the registry; nothing is ever removed.

Concurrency
- Writers serialize on a lock and publish a fresh read-only snapshot
  (copy-on-write). Readers (lookup, infer, iteration) grab the current
  snapshot once and never observe a half-inserted entry.

Overview
- register(converter, name=Unset): insert; the identical converter again is a
  no-op, a structurally different one under a taken name is a
  DuplicateConverterError.
- lookup(name): the converter or UnknownTypeError.
- infer(token): first converter, in registration order, accepting the token.
- implicit(): a converter deferring to infer() for every token (slots without
  a declared nor inferable type).
- include(pattern): import modules matching a dotted glob and register their
  module-level converters.

The package-wide REGISTRY is filled from signet.converters at import time; an
application can build and pass its own registry instead.
"""
import importlib
import logging
import threading
from types import MappingProxyType

from .converters import Converter, Literal, _sanitize_name
from .faults import DeclarationError, DuplicateConverterError, UnknownTypeError
from .utils import Unset, coalesce, mglob

logger = logging.getLogger(__name__)


class TypeRegistry:
    """
    Process-wide (or application-wide) name -> Converter mapping.
    """
    __typename__ = "type-registry"

    def __init__(self, converters=(), /):
        self._lock = threading.Lock()
        self._snapshot = MappingProxyType({})
        self._implicit = Converter("ANY", object, self._infer_value)
        for converter in converters:
            self.register(converter)

    def register(self, converter, /, name=Unset):
        """
        register `converter` under `name` (defaults to converter.name) and return it.

        errors
        - TypeError: not a Converter, or a literal (literals are declared inline).
        - DuplicateConverterError: the name is bound to a structurally different converter.
        """
        if not isinstance(converter, Converter):
            raise TypeError(f"{self.__typename__} can only register converters")
        if isinstance(converter, Literal):
            raise TypeError(f"{self.__typename__} cannot register literal converters")
        name = _sanitize_name(type(converter), coalesce(name, converter.name))

        with self._lock:
            if (current := self._snapshot.get(name)) is not None:
                if current == converter:
                    logger.debug("converter %s already registered, skipping", name)
                    return current
                raise DuplicateConverterError(
                    "type %r is already bound to another converter" % name,
                    name=name,
                    hint="register the new converter under a different name",
                )
            self._snapshot = MappingProxyType(dict(self._snapshot) | {name: converter})

        logger.debug("registered converter %s (kind %s)", name, converter.kind.__qualname__)
        return converter

    def lookup(self, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} names must be strings")
        try:
            return self._snapshot[name.strip().upper()]
        except KeyError:
            raise UnknownTypeError(
                "unknown type %r" % name,
                name=name,
                hint="known types: %s" % (", ".join(self._snapshot) or "none"),
            ) from None

    def get(self, name, default=None, /):
        try:
            return self.lookup(name)
        except UnknownTypeError:
            return default

    def infer(self, token, /):
        """
        return the first converter (registration order) accepting `token`, or None.
        """
        for converter in self._snapshot.values():
            if converter(token) is not None:
                return converter
        return None

    def _infer_value(self, token):
        if (converter := self.infer(token)) is None:
            return None
        return converter(token)

    def implicit(self):
        """
        return the converter used by slots with no declared type: each token is
        converted by whichever registered converter accepts it first.
        """
        return self._implicit

    def include(self, pattern, /):
        """
        import every module matching the dotted glob `pattern` and register
        the Converter instances found at module level.

        a rejected converter is logged and skipped; the others proceed.
        returns the tuple of converters newly registered by this call; those
        already registered are left out.
        """
        registered = []
        for module in map(importlib.import_module, mglob(pattern)):
            for attribute, value in vars(module).items():
                if not isinstance(value, Converter) or isinstance(value, Literal):
                    continue
                if self._snapshot.get(value.name) == value:
                    continue
                try:
                    registered.append(self.register(value))
                except DeclarationError as fault:
                    logger.warning("rejected converter %s.%s: %s", module.__name__, attribute, fault)
        return tuple(registered)

    def snapshot(self):
        return self._snapshot

    def __contains__(self, name):
        return isinstance(name, str) and name.strip().upper() in self._snapshot

    def __iter__(self):
        return iter(self._snapshot.values())

    def __len__(self):
        return len(self._snapshot)

    def __repr__(self):
        return f"{self.__typename__}({', '.join(self._snapshot)})"


REGISTRY = TypeRegistry()
REGISTRY.include("signet.converters")


__all__ = (
    "TypeRegistry",
    "REGISTRY",
)
