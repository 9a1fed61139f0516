"""
Signet faults (errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every failure, grouped by domain so
  logs and searches stay predictable.
- SignetError: base type carrying a message plus read-only options (title, code,
  hint and context such as the offending token or the handler's cause). It knows
  how to render itself with rich.
- report(): print any fault to a stderr console. It never exits the process.

Families
- ResolutionError: one invocation could not be resolved (unknown or duplicated
  option, no signature matched). Recoverable; the caller decides the user-facing
  message.
- CommandExecutionError: the command was found and matched, but its handler failed.
- DeclarationError: load-time rejection of one converter, signature or command.
  Other declarations proceed.

Host customization (looked up in __main__)
- __codes__: mapping FaultCode -> label, used by FaultCode.normalize().
- __styles__: mapping of style names used by the renderer.
- __prog__: program label shown in rendered headers.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, UnsetType, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - option parsing (211xx): UNKNOWN_OPTION, DUPLICATE_OPTION, FLAG_ASSIGNMENT
    - resolution (212xx): NO_SIGNATURE_MATCHED, ARGUMENT_CONVERSION
    - execution (213xx): COMMAND_EXECUTION
    - registry (221xx): UNKNOWN_TYPE, DUPLICATE_CONVERTER
    - declarations (222xx): INVALID_SIGNATURE, DUPLICATE_SIGNATURE
    - commands (223xx): INVALID_COMMAND, DUPLICATE_COMMAND
    """
    # --- option parsing (211xx) ---
    UNKNOWN_OPTION          = 21101
    DUPLICATE_OPTION        = 21102
    FLAG_ASSIGNMENT         = 21103

    # --- resolution (212xx) ---
    NO_SIGNATURE_MATCHED    = 21201
    ARGUMENT_CONVERSION     = 21202

    # --- execution (213xx) ---
    COMMAND_EXECUTION       = 21301

    # --- registry (221xx) ---
    UNKNOWN_TYPE            = 22101
    DUPLICATE_CONVERTER     = 22102

    # --- declarations (222xx) ---
    INVALID_SIGNATURE       = 22201
    DUPLICATE_SIGNATURE     = 22202

    # --- commands (223xx) ---
    INVALID_COMMAND         = 22301
    DUPLICATE_COMMAND       = 22302

    def normalize(self):
        """
        return a host-normalized label for this code (numeric string by default).
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SignetError(Exception):
    """
    base fault: a message plus read-only options.

    subclasses provide __code__ and __title__ defaults; explicit options win.
    """
    __code__ = Unset
    __title__ = "fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": None,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def hint(self):
        return self.options["hint"]

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        command = self.options.get("command")
        prog = getattr(main, "__prog__", getattr(command, "name", "signet"))
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " - ",
            text(code, "code"),
            " | ",
            text(str(self.options["title"]).title(), "error-title"),
            " ]"
        )
        parts = [header, text(self.message, "error-message")]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))
        return Group(*parts)


class ResolutionError(SignetError):
    __title__ = "resolution failed"


class UnknownOptionError(ResolutionError):
    __code__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"

    @property
    def name(self):
        return self.options.get("name")


class DuplicateOptionError(ResolutionError):
    __code__ = FaultCode.DUPLICATE_OPTION
    __title__ = "duplicated option"

    @property
    def name(self):
        return self.options.get("name")


class FlagAssignmentError(ResolutionError):
    __code__ = FaultCode.FLAG_ASSIGNMENT
    __title__ = "flag cannot take a value"

    @property
    def name(self):
        return self.options.get("name")


class ArgumentConversionError(ResolutionError):
    """
    internal: one converter rejected one token. never surfaced on its own; it
    is kept in NoSignatureMatchedError.reasons for diagnostics.
    """
    __code__ = FaultCode.ARGUMENT_CONVERSION
    __title__ = "argument conversion"

    @property
    def token(self):
        return self.options.get("token")


class NoSignatureMatchedError(ResolutionError):
    __code__ = FaultCode.NO_SIGNATURE_MATCHED
    __title__ = "no matching pattern"

    @property
    def tokens(self):
        return tuple(self.options.get("tokens", ()))

    @property
    def reasons(self):
        return tuple(self.options.get("reasons", ()))


class CommandExecutionError(SignetError):
    __code__ = FaultCode.COMMAND_EXECUTION
    __title__ = "command failed"

    @property
    def cause(self):
        return self.options.get("cause", self.__cause__)


class DeclarationError(SignetError):
    __title__ = "invalid declaration"


class UnknownTypeError(DeclarationError):
    __code__ = FaultCode.UNKNOWN_TYPE
    __title__ = "unknown type"

    @property
    def name(self):
        return self.options.get("name")


class DuplicateConverterError(DeclarationError):
    __code__ = FaultCode.DUPLICATE_CONVERTER
    __title__ = "duplicated converter"

    @property
    def name(self):
        return self.options.get("name")


class InvalidSignatureDeclarationError(DeclarationError):
    __code__ = FaultCode.INVALID_SIGNATURE
    __title__ = "invalid pattern"


class DuplicateSignatureError(InvalidSignatureDeclarationError):
    __code__ = FaultCode.DUPLICATE_SIGNATURE
    __title__ = "duplicated pattern"


class InvalidCommandError(DeclarationError):
    __code__ = FaultCode.INVALID_COMMAND
    __title__ = "invalid command"


class DuplicateCommandError(InvalidCommandError):
    __code__ = FaultCode.DUPLICATE_COMMAND
    __title__ = "duplicated command"


def report(fault, /, console=Unset):
    """
    print a fault with rich and return it.

    contract
    - fault must be a SignetError; anything else is a TypeError.
    - the process is never terminated; the caller keeps control.
    """
    if not isinstance(fault, SignetError):
        raise TypeError("report() argument must be a signet fault")
    coalesce(console, stderr).print(fault)
    return fault


__all__ = (
    "FaultCode",
    "SignetError",
    "ResolutionError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "FlagAssignmentError",
    "ArgumentConversionError",
    "NoSignatureMatchedError",
    "CommandExecutionError",
    "DeclarationError",
    "UnknownTypeError",
    "DuplicateConverterError",
    "InvalidSignatureDeclarationError",
    "DuplicateSignatureError",
    "InvalidCommandError",
    "DuplicateCommandError",
    "report",
)
