r"""
Signet option parser.

Scope
- tokenize(): shell-like splitting of a raw tail into tokens.
- parse(): split tokens into recognized options and positional tokens.

Tokenization (governed by Config)
- Whitespace separates tokens.
- quoting: '...' and "..." group a run, whitespace included; quotes can be
  glued to other text ("a"b -> ab). An unclosed quote runs to the end of input.
- escapes: \x yields x literally, inside or outside quotes. A trailing lone
  backslash is kept as is.
- A token starting with a quote or an escape is "literal": it is always a
  positional token, even when it reads like an option ("\-f", "'-f'").

Options (prefix "-" shown)
- --long, --long=value
- -long, -long=value (single marker, long name)
- -x (short name), -xyz (cluster of short flags when "xyz" is no long name)
- A valued option takes the next token as its value unless that token is an
  option itself; without a value its raw value is None.
- A flag given an inline value ("--force=no") fails the parse
  (FlagAssignmentError).
- With Config.ignore_values, option values are still consumed but dropped.
- "-", "--", and tokens reading like numbers ("-1", "-.5") are positional.
- Unknown names fail the whole parse (UnknownOptionError); repeated options
  fail it as well (DuplicateOptionError) unless Config.duplicates is set.

Example:
    >>> options, tokens = parse("-force -name bob do it", (FORCE, NAME))
    >>> tokens
    ('do', 'it')
"""
import difflib
import logging
from typing import NamedTuple

from .config import DEFAULT, Config
from .faults import DuplicateOptionError, FlagAssignmentError, UnknownOptionError
from .options import Option, Options
from .utils import ordinal

logger = logging.getLogger(__name__)


class Token(NamedTuple):
    text: str
    literal: bool = False


def tokenize(text, /, config=DEFAULT):
    """
    split `text` into Tokens according to `config` (see module docs).
    """
    if not isinstance(text, str):
        raise TypeError("tokenize() argument must be a string")
    if not isinstance(config, Config):
        raise TypeError("tokenize() config must be a config")

    tokens = []
    buffer, literal, started = [], False, False
    quote = None

    characters = iter(text)
    for char in characters:
        if char == "\\" and config.escapes:
            if (following := next(characters, None)) is None:
                buffer.append(char)
            else:
                buffer.append(following)
                literal |= not started
            started = True
        elif quote is not None:
            if char == quote:
                quote = None
            else:
                buffer.append(char)
        elif char.isspace():
            if started:
                tokens.append(Token("".join(buffer), literal))
                buffer, literal, started = [], False, False
        elif char in "'\"" and config.quoting:
            quote = char
            literal |= not started
            started = True
        else:
            buffer.append(char)
            started = True

    if started:
        tokens.append(Token("".join(buffer), literal))
    return tokens


def _split(token, config):
    """
    Internal: return (double, name, inline) for an option-looking token, or
    None when the token is positional.
    """
    if token.literal or not token.text.startswith(config.prefix):
        return None

    double = token.text.startswith(config.prefix * 2)
    body = token.text[2 if double else 1:]
    if not body or body.startswith(config.prefix) or body[0].isdigit() or body[0] == ".":
        return None

    name, separator, inline = body.partition("=")
    if not name:
        return None
    return double, name, inline if separator else None


def _index(allowed, config):
    """
    Internal: build (longs, shorts) lookup tables for the allowed options.
    """
    longs, shorts = {}, {}
    for option in allowed:
        if not isinstance(option, Option):
            raise TypeError("parse() allowed options must be options")
        if longs.setdefault(config.fold(option.long), option) != option:
            raise ValueError("parse() allowed options share the long name %r" % option.long)
        if option.short is not None and shorts.setdefault(option.short, option) != option:
            raise ValueError("parse() allowed options share the short name %r" % option.short)
    return longs, shorts


def parse(tail, allowed=(), /, config=DEFAULT):
    """
    parse a raw tail into (Options, positional tokens).

    contract
    - positional tokens keep their original order.
    - an option outside `allowed` raises UnknownOptionError; no partial result
      is ever returned.
    """
    longs, shorts = _index(allowed, config)
    tokens = tokenize(tail, config)
    values = {}
    positional = []

    def store(option, raw, position, text):
        if option in values and not config.duplicates:
            raise DuplicateOptionError(
                "option %r at %s position is duplicated" % (text, ordinal(position)),
                name=option.name,
                hint="give %r only once" % option.long,
            )
        values.pop(option, None)
        values[option] = raw

    def value(index, inline):
        """return (raw value, tokens consumed) for a valued option."""
        if inline is not None:
            raw, consumed = inline, 0
        elif index + 1 < len(tokens) and _split(tokens[index + 1], config) is None:
            raw, consumed = tokens[index + 1].text, 1
        else:
            return None, 0
        return (None if config.ignore_values else raw), consumed

    index = 0
    while index < len(tokens):
        token = tokens[index]
        if (split := _split(token, config)) is None:
            positional.append(token.text)
            index += 1
            continue

        double, name, inline = split
        position = index + 1
        option = longs.get(config.fold(name))
        if option is None and not double and len(name) == 1:
            option = shorts.get(name)

        if option is not None:
            if inline is not None and not option.valued:
                raise FlagAssignmentError(
                    "flag %r at %s position cannot have an inline value" % (token.text, ordinal(position)),
                    name=option.name,
                    hint="remove everything from '=' (for example: %s)" % token.text.partition("=")[0],
                )
            raw, consumed = value(index, inline) if option.valued else (None, 0)
            store(option, raw, position, token.text)
            index += 1 + consumed
            continue

        if double or inline is not None or not all(char in shorts for char in name):
            suggestions = difflib.get_close_matches(config.fold(name), longs.keys(), 5)
            try:
                hint = "did you mean %r?" % (config.prefix * 2 + longs[suggestions[0]].long)
            except IndexError:
                hint = "allowed options: %s" % (
                    ", ".join(config.prefix * 2 + option.long for option in longs.values()) or "none"
                )
            raise UnknownOptionError(
                "unknown option %r at %s position" % (token.text, ordinal(position)),
                name=name,
                suggestions=suggestions,
                hint=hint,
            )

        consumed = 0
        for offset, char in enumerate(name, start=1):
            option = shorts[char]
            raw = None
            if option.valued and offset == len(name):
                raw, consumed = value(index, None)
            store(option, raw, position, config.prefix + char)
        index += 1 + consumed

    logger.debug("parsed %d option(s) and %d positional token(s)", len(values), len(positional))
    return Options(values), tuple(positional)


__all__ = (
    "Token",
    "tokenize",
    "parse",
)
