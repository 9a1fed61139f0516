"""
Signet signatures: typed argument shapes bound to handlers.

Overview
- Slot
  • One argument position: a Converter plus a repeatable flag. Only the last
    slot of a signature may be repeatable; it then consumes every remaining
    token, each converted on its own, into a tuple.
- Signature
  • An ordered tuple of slots plus the handler. Arity rules:
      no slots                 -> matches the empty token list only
      N slots, last fixed      -> exactly N tokens
      N slots, last repeatable -> N-1 tokens or more
  • map() raises ArgumentConversionError on the first rejected token (or on an
    arity mismatch); match() turns that into None so siblings can be tried.
  • Two signatures are structurally equal when their slot converters and
    repeatable flags are equal, whatever their handlers.
- signature(types, handler, registry)
  • The load-time builder. `types` lists converter names: "NAME..." is a
    repeatable slot, a quoted word ('add') a literal slot. An empty list means
    "infer from the handler's parameters".

Handler shape
- handler(context, *slots, options=...): the first positional parameter
  receives the invocation context, then one positional parameter per fixed
  slot; a repeatable slot is received through *args. A keyword-only "options"
  parameter, when present, receives the parsed Options.
- Any other required keyword-only parameter, a count mismatch, a repeatable
  slot without *args (or *args without a last slot to bind it to) is an
  InvalidSignatureDeclarationError.

Inference (empty declaration)
- Annotated parameter: converters whose kind the annotation is a subclass of;
  the closest kind in the annotation's MRO wins, then the parameter name as a
  prefix of the converter name, then the exact name. What is left ambiguous,
  or matches nothing, is an InvalidSignatureDeclarationError.
- A Converter used as annotation is taken as is.
- Unannotated parameter: the converter named like the parameter ("user" ->
  USER), else the single converter whose name starts with it, else the
  registry's implicit converter (per-token inference).
"""
import inspect
import logging
import re
from collections.abc import Iterable
from types import GenericAlias

from .converters import Converter, literal
from .faults import (
    ArgumentConversionError,
    DeclarationError,
    InvalidSignatureDeclarationError,
    UnknownTypeError,
)
from .internals import SpecType
from .options import EMPTY
from .registry import REGISTRY
from .utils import Unset, coalesce, ordinal

logger = logging.getLogger(__name__)


class Slot(metaclass=SpecType, sealed=True):
    __introspectable__ = (
        "converter",
        "repeatable",
    )

    def __init__(self, converter, /, repeatable=False):
        if not isinstance(converter, Converter):
            raise TypeError(f"{type(self).__typename__} 'converter' must be a converter")
        if not isinstance(repeatable, bool):
            raise TypeError(f"{type(self).__typename__} 'repeatable' must be a boolean")
        self._converter = converter
        self._repeatable = repeatable

    @property
    def label(self):
        return self._converter.name + "..." * self._repeatable

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return NotImplemented
        return (self._converter, self._repeatable) == (other._converter, other._repeatable)

    def __hash__(self):
        return hash((self._converter, self._repeatable))


class Signature(metaclass=SpecType, sealed=True):
    """
    An ordered list of typed slots bound to a handler.
    """
    __introspectable__ = (
        "slots",
        "handler",
        "options",
    )
    __displayable__ = (
        "slots",
        "handler",
    )

    def __init__(self, slots, handler, /, *, options=False):
        slots = tuple(slots)
        if not all(isinstance(slot, Slot) for slot in slots):
            raise TypeError(f"{type(self).__typename__} 'slots' must contain slots")
        if not callable(handler):
            raise TypeError(f"{type(self).__typename__} 'handler' must be callable")
        if any(slot.repeatable for slot in slots[:-1]):
            raise ValueError(f"{type(self).__typename__} only the last slot can be repeatable")
        self._slots = slots
        self._handler = handler
        self._options = bool(options)

    @property
    def repeatable(self):
        return bool(self._slots) and self._slots[-1].repeatable

    @property
    def arity(self):
        """
        (minimum, maximum) token counts; maximum is None when unbounded.
        """
        if self.repeatable:
            return len(self._slots) - 1, None
        return len(self._slots), len(self._slots)

    @property
    def structure(self):
        return self._slots

    def accepts(self, count, /):
        minimum, maximum = self.arity
        return count >= minimum and (maximum is None or count <= maximum)

    def map(self, tokens, /):
        """
        convert `tokens` slot by slot and return the argument tuple.

        the repeatable slot, if any, yields a tuple of converted values as the
        last argument. raises ArgumentConversionError on any mismatch.
        """
        tokens = tuple(tokens)
        if not self.accepts(len(tokens)):
            minimum, maximum = self.arity
            raise ArgumentConversionError(
                "expected %s argument%s, got %d" % (
                    minimum if minimum == maximum else "at least %d" % minimum,
                    "" if minimum == 1 else "s",
                    len(tokens),
                ),
                tokens=tokens,
                signature=self,
            )

        def convert(slot, token, position):
            if (value := slot.converter(token)) is None:
                raise ArgumentConversionError(
                    "%s argument %r is not a valid %s" % (ordinal(position), token, slot.converter.name),
                    token=token,
                    position=position,
                    converter=slot.converter,
                    signature=self,
                )
            return value

        fixed = self._slots[:-1] if self.repeatable else self._slots
        arguments = [convert(slot, token, position) for position, (slot, token) in enumerate(zip(fixed, tokens), start=1)]
        if self.repeatable:
            arguments.append(tuple(
                convert(self._slots[-1], token, position)
                for position, token in enumerate(tokens[len(fixed):], start=len(fixed) + 1)
            ))
        return tuple(arguments)

    def match(self, tokens, /):
        """
        return the mapped arguments, or None when the tokens do not fit.
        """
        try:
            return self.map(tokens)
        except ArgumentConversionError:
            return None

    def invoke(self, context, arguments, options=EMPTY, /):
        """
        call the handler as handler(context, *arguments[, *repeated], options=...).
        """
        arguments = tuple(arguments)
        if self.repeatable:
            arguments = arguments[:-1] + tuple(arguments[-1])
        if self._options:
            return self._handler(context, *arguments, options=options)
        return self._handler(context, *arguments)

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return self._slots == other._slots

    def __hash__(self):
        return hash(self._slots)

    def __str__(self):
        return " ".join(slot.label for slot in self._slots) or "<no arguments>"


def _declared(declaration, registry):
    """
    Internal: turn one declared type name into (converter, repeatable).
    """
    if isinstance(declaration, Converter):
        return declaration, False
    if not isinstance(declaration, str):
        raise InvalidSignatureDeclarationError("declared types must be strings or converters (got %r)" % declaration)
    if not (declaration := declaration.strip()):
        raise InvalidSignatureDeclarationError("declared types cannot be empty")

    if match := re.fullmatch(r"(['\"])(.+)\1(\.\.\.)?", declaration):
        return literal(match.group(2)), bool(match.group(3))

    name, repeatable = declaration.removesuffix("..."), declaration.endswith("...")
    try:
        return registry.lookup(name), repeatable
    except UnknownTypeError as fault:
        raise InvalidSignatureDeclarationError(
            "unknown type %r in declaration" % name,
            name=name,
            hint=fault.hint,
        ) from fault


def _named(name, candidates):
    """
    Internal: narrow candidates by parameter name, prefix first then exact.
    """
    if len(candidates) <= 1:
        return candidates
    indication = name.upper()
    if len(prefixed := [c for c in candidates if c.name.startswith(indication)]) <= 1:
        return prefixed
    return [c for c in prefixed if c.name == indication]


def _inferred(parameter, registry):
    """
    Internal: infer the converter of one handler parameter.
    """
    annotation = parameter.annotation
    if isinstance(annotation, Converter):
        return annotation

    if annotation is inspect.Parameter.empty:
        if (converter := registry.get(parameter.name)) is not None:
            return converter
        if len(candidates := _named(parameter.name, list(registry))) == 1:
            return candidates[0]
        return registry.implicit()

    if not isinstance(annotation, type) or isinstance(annotation, GenericAlias):
        raise InvalidSignatureDeclarationError(
            "parameter %r annotation must be a class or a converter (got %r)" % (parameter.name, annotation),
            hint="declare the type names explicitly instead",
        )

    mro = annotation.__mro__
    candidates = [
        converter for converter in registry
        if converter.kind is not object and issubclass(annotation, converter.kind)
    ]
    if not candidates:
        raise InvalidSignatureDeclarationError(
            "no converter produces %s values (parameter %r)" % (annotation.__qualname__, parameter.name),
        )

    depth = min(mro.index(converter.kind) for converter in candidates)
    closest = [converter for converter in candidates if mro.index(converter.kind) == depth]
    if len(narrowed := _named(parameter.name, closest)) == 1:
        return narrowed[0]

    raise InvalidSignatureDeclarationError(
        "ambiguous type for parameter %r: %s" % (parameter.name, ", ".join(c.name for c in closest)),
        hint="name the parameter after one of the types, or declare the type names explicitly",
    )


def signature(types, handler, /, registry=Unset):
    """
    build a Signature from declared type names and a handler (see module docs).

    every declaration problem is raised as InvalidSignatureDeclarationError,
    at load time, never during resolution.
    """
    registry = coalesce(registry, REGISTRY)
    qualname = getattr(handler, "__qualname__", repr(handler))

    if not callable(handler):
        raise InvalidSignatureDeclarationError("pattern handler must be callable (got %r)" % handler)
    if isinstance(types, str):
        types = types.split()
    elif isinstance(types, Iterable):
        types = list(types)
    else:
        raise InvalidSignatureDeclarationError(
            "declared types of %s must be a string or an iterable of type names (got %r)" % (qualname, types)
        )

    try:
        parameters = tuple(inspect.signature(handler, eval_str=True).parameters.values())
    except (TypeError, ValueError, NameError, AttributeError, SyntaxError) as error:
        raise InvalidSignatureDeclarationError(
            "handler %s cannot be inspected: %s" % (qualname, error)
        ) from error

    positional = [
        parameter for parameter in parameters
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
    ]
    variadic = next((parameter for parameter in parameters if parameter.kind is parameter.VAR_POSITIONAL), None)
    keywords = [parameter for parameter in parameters if parameter.kind is parameter.KEYWORD_ONLY]

    if not positional:
        raise InvalidSignatureDeclarationError(
            "handler %s must accept the invocation context as first positional parameter" % qualname
        )
    if required := [p.name for p in keywords if p.name != "options" and p.default is p.empty]:
        raise InvalidSignatureDeclarationError(
            "handler %s has unsupported keyword-only parameters: %s" % (qualname, ", ".join(required))
        )
    parameters = positional[1:]

    try:
        if declared := [_declared(declaration, registry) for declaration in types]:
            if [repeatable for _, repeatable in declared[:-1] if repeatable]:
                raise InvalidSignatureDeclarationError(
                    "only the last declared type of %s can be repeatable" % qualname
                )
            if declared[-1][1] and variadic is None:
                raise InvalidSignatureDeclarationError(
                    "handler %s needs *args to receive a repeatable %s" % (qualname, declared[-1][0].name)
                )
            fixed = len(declared) - (variadic is not None)
            if len(parameters) != fixed:
                raise InvalidSignatureDeclarationError(
                    "handler %s takes %d argument%s but %d type%s declared" % (
                        qualname, len(parameters), "" if len(parameters) == 1 else "s",
                        len(declared), " is" if len(declared) == 1 else "s are",
                    )
                )
            slots = [
                Slot(converter, repeatable=variadic is not None and position == len(declared))
                for position, (converter, _) in enumerate(declared, start=1)
            ]
        else:
            slots = [Slot(_inferred(parameter, registry)) for parameter in parameters]
            if variadic is not None:
                slots.append(Slot(_inferred(variadic, registry), repeatable=True))
    except InvalidSignatureDeclarationError:
        raise
    except DeclarationError as fault:
        raise InvalidSignatureDeclarationError(str(fault), hint=fault.hint) from fault

    built = Signature(slots, handler, options=any(p.name == "options" for p in keywords))
    logger.debug("built signature %s -> %s", built, qualname)
    return built


__all__ = (
    "Slot",
    "Signature",
    "signature",
)
