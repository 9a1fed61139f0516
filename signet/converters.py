r"""
Signet converters: named, typed token converters.

Overview
- Converter
  • A symbolic name (upper-cased, e.g. "INTEGER"), a target kind (the Python
    type of the produced values) and a function token -> value | None.
  • None means "this token is not of this type". It is a rejection, never an
    error: sibling signatures may still accept the token.
  • ValueError/TypeError raised by the function are treated as rejections too,
    so plain constructors (int, float, Decimal, ...) can be used directly.
- Pattern(Converter)
  • Regex-backed converter. The whole token must match, case-insensitively;
    an optional mapper turns the re.Match into the final value.
- Literal(Pattern)
  • Matches exactly one fixed word (regex specials escaped) and yields the token.
    Literals are never registered; they are declared inline with quotes: 'add'.
- Mention and its kinds
  • Chat-platform mention payloads (<@id>, <#id>, <@&id>, <:name:id>).

Built-ins (module level, discovered by TypeRegistry.include("signet.converters"))
- INTEGER, FLOAT, BOOLEAN, URL, USER, CHANNEL, ROLE, GUILD_EMOTE, WORD, STRING
  Declaration order matters for token-based inference: the catch-all STRING
  comes last so that more specific kinds get a chance first.

Quick example:
    >>> from signet.converters import converter
    >>> @converter("PORT", int)
    ... def port(token):
    ...     return int(token) if token.isdigit() and 0 < int(token) < 65536 else None
"""
import functools
import re
from dataclasses import dataclass
from urllib.parse import SplitResult, urlsplit

from .internals import SpecType
from .utils import Unset, coalesce, rename


def _sanitize_name(cls, name, /):
    """
    Internal: validate a converter name and normalize it to upper case.

    Names are the symbolic identifiers used in declarations; they cannot be
    empty, contain whitespace, quotes or the repeatable suffix "...".
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d]\w*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be an identifier-like word (got {name!r})")
    return name.upper()


def _sanitize_kind(cls, kind, /):
    if not isinstance(kind, type):
        raise TypeError(f"{cls.__typename__} 'kind' must be a type")
    return kind


class Converter(metaclass=SpecType):
    """
    Named token converter.

    Calling a converter with a token returns the converted value or None when
    the token is rejected. Converters are immutable and compare structurally:
    two converters are equal when they share their name, kind and function.
    """
    __introspectable__ = (
        "name",
        "kind",
        "function",
    )

    def __init__(self, name, kind, function, /):
        if not callable(function):
            raise TypeError(f"{type(self).__typename__} 'function' must be callable")
        self._name = _sanitize_name(type(self), name)
        self._kind = _sanitize_kind(type(self), kind)
        self._function = function

    def __call__(self, token, /):
        if not isinstance(token, str):
            raise TypeError(f"{type(self).__typename__} tokens must be strings")
        try:
            return self._function(token)
        except (ValueError, TypeError):
            return None

    def _identity(self):
        return type(self), self._name, self._kind, self._function

    def __eq__(self, other):
        if not isinstance(other, Converter):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())


class Pattern(Converter):
    """
    Regex-backed converter: the token must fully match `pattern` (case-insensitive).

    The mapper receives the re.Match and returns the value (or None to reject
    after all); by default the matched text itself is returned.
    """
    __introspectable__ = (
        "name",
        "kind",
        "pattern",
        "mapper",
    )
    __displayable__ = (
        "name",
        "kind",
        "pattern",
    )

    def __init__(self, name, kind, pattern, mapper=Unset, /):
        if not isinstance(pattern, str | re.Pattern):
            raise TypeError(f"{type(self).__typename__} 'pattern' must be a string or a compiled regex")
        if not callable(mapper := coalesce(mapper, re.Match.group)):
            raise TypeError(f"{type(self).__typename__} 'mapper' must be callable")
        try:
            compiled = re.compile(getattr(pattern, "pattern", pattern), re.IGNORECASE)
        except re.error as error:
            raise ValueError(f"{type(self).__typename__} 'pattern' is not a valid regex: {error}") from None
        self._pattern = compiled
        self._mapper = mapper
        super().__init__(name, kind, self._convert)

    def _convert(self, token):
        if (match := self._pattern.fullmatch(token)) is None:
            return None
        return self._mapper(match)

    def _identity(self):
        return type(self), self._name, self._kind, self._pattern.pattern, self._mapper


class Literal(Pattern):
    """
    Match one fixed word, ignoring case, and yield the token as typed.
    """
    __introspectable__ = (
        "name",
        "kind",
        "text",
    )

    def __init__(self, text, /):
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} 'text' must be a string")
        elif not text:
            raise ValueError(f"{type(self).__typename__} 'text' cannot be empty")
        self._text = text
        super().__init__("LITERAL", object, re.escape(text))
        self._name = repr(text)

    def _identity(self):
        return type(self), self._text.casefold()


@functools.cache
def literal(text, /):
    """
    Build (and cache) a literal converter for `text`.
    """
    return Literal(text)


def converter(name, kind, /):
    """
    Decorator turning a plain function token -> value | None into a Converter.
    """
    @rename("converter")
    def wrapper(function):
        return Converter(name, kind, function)
    return wrapper


@dataclass(frozen=True, slots=True)
class Mention:
    """
    A chat-platform mention, kept as plain data (no platform lookups).
    """
    id: int | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class UserMention(Mention):
    discriminator: str | None = None
    nickname: bool = False


@dataclass(frozen=True, slots=True)
class ChannelMention(Mention):
    pass


@dataclass(frozen=True, slots=True)
class RoleMention(Mention):
    pass


@dataclass(frozen=True, slots=True)
class EmoteMention(Mention):
    animated: bool = False


def _url(match):
    try:
        url = urlsplit(match.group())
    except ValueError:
        return None
    if not url.scheme or not url.netloc:
        return None
    return url


def _user(match):
    if (id := match.group("id")) is not None:
        return UserMention(int(id), nickname=bool(match.group("nick")))
    return UserMention(name=match.group("name"), discriminator=match.group("discriminator"))


INTEGER = Pattern("INTEGER", int, r"[-+]?\d+", lambda match: int(match.group()))

FLOAT = Pattern(
    "FLOAT",
    float,
    r"[-+]?(?:\d+\.?\d*|\.\d+)(?:e[-+]?\d+)?",
    lambda match: float(match.group()),
)

BOOLEAN = Pattern(
    "BOOLEAN",
    bool,
    r"0|1|t(?:rue)?|f(?:alse)?|y(?:es)?|no?|o(?:n|ff)",
    lambda match: re.fullmatch(r"1|t(?:rue)?|y(?:es)?|on", match.group(), re.IGNORECASE) is not None,
)

URL = Pattern("URL", SplitResult, r"\S+", _url)

USER = Pattern(
    "USER",
    UserMention,
    r"<@(?P<nick>!)?(?P<id>\d+)>|(?P<name>[^\s#]+)#(?P<discriminator>\d{4})",
    _user,
)

CHANNEL = Pattern("CHANNEL", ChannelMention, r"<#(?P<id>\d+)>", lambda match: ChannelMention(int(match.group("id"))))

ROLE = Pattern("ROLE", RoleMention, r"<@&(?P<id>\d+)>", lambda match: RoleMention(int(match.group("id"))))

GUILD_EMOTE = Pattern(
    "GUILD_EMOTE",
    EmoteMention,
    r"<(?P<animated>a)?:(?P<name>\w+):(?P<id>\d+)>",
    lambda match: EmoteMention(int(match.group("id")), match.group("name"), bool(match.group("animated"))),
)

WORD = Pattern("WORD", str, r"\S+")

STRING = Pattern("STRING", str, r"(?s).*")


__all__ = (
    # Classes
    "Converter",
    "Pattern",
    "Literal",
    "Mention",
    "UserMention",
    "ChannelMention",
    "RoleMention",
    "EmoteMention",

    # Functions
    "literal",
    "converter",

    # Built-ins
    "INTEGER",
    "FLOAT",
    "BOOLEAN",
    "URL",
    "USER",
    "CHANNEL",
    "ROLE",
    "GUILD_EMOTE",
    "WORD",
    "STRING",
)
