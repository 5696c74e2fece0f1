"""
curvecli faults (errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the dispatcher knows,
  grouped by domain so logs and searches stay predictable.
- CommandException: base type carrying a message plus read-only options,
  able to render itself through rich (__rich__).
- report(): central entry point to surface a fault on a console.

Taxonomy
- build-time (fatal, programming/configuration errors):
  DuplicateNameError, DuplicateFlagError. Both are also ValueError so
  builders can treat them like any other bad-argument error.
- routing (user input): UnknownCommandError.
- flags (user input, FlagError): UnknownFlagError, MissingFlagValueError,
  InvalidFlagValueError.
- delegated: HandlerError, raised by subcommand handlers. Its message is the
  handler's responsibility and is shown unchanged.

Nothing here is retried; every fault leads to a terminal reporting state.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - build (1100x): DUPLICATE_NAME, DUPLICATE_FLAG
    - routing (1110x): UNKNOWN_COMMAND
    - flags (1111x): UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - delegated (1113x): HANDLER_ERROR
    """
    # --- build errors ---
    DUPLICATE_NAME      = 11001
    DUPLICATE_FLAG      = 11002

    # --- routing errors ---
    UNKNOWN_COMMAND     = 11101

    # --- flag errors ---
    UNKNOWN_FLAG        = 11111
    MISSING_FLAG_VALUE  = 11112
    INVALID_FLAG_VALUE  = 11113

    # --- delegated errors ---
    HANDLER_ERROR       = 11131


class CommandException(Exception):
    """
    base fault: message + read-only options.

    options are free-form context (input token, route, ...). 'code' is
    filled from the class default when not given.
    """
    __fault__ = FaultCode.HANDLER_ERROR

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType({"code": type(self).__fault__} | options)

    def __str__(self):
        return self.message or ""

    @property
    def code(self):
        return self.options["code"]

    def __rich__(self):
        styles = defaultdict(str, {
            "error-message": "bold #FF4DA6",  # friendly pinky message
            "handler-message": "",  # handler owns its text, keep it untouched
        })
        style = "handler-message" if isinstance(self, HandlerError) else "error-message"
        return Text(str(self), styles[style])


class DuplicateNameError(CommandException, ValueError):
    __fault__ = FaultCode.DUPLICATE_NAME


class DuplicateFlagError(CommandException, ValueError):
    __fault__ = FaultCode.DUPLICATE_FLAG


class UnknownCommandError(CommandException):
    __fault__ = FaultCode.UNKNOWN_COMMAND


class FlagError(CommandException):
    """
    parse-level fault about a flag token; shown together with the usage block.
    """
    __fault__ = FaultCode.UNKNOWN_FLAG


class UnknownFlagError(FlagError):
    __fault__ = FaultCode.UNKNOWN_FLAG


class MissingFlagValueError(FlagError):
    __fault__ = FaultCode.MISSING_FLAG_VALUE


class InvalidFlagValueError(FlagError):
    __fault__ = FaultCode.INVALID_FLAG_VALUE


class HandlerError(CommandException):
    __fault__ = FaultCode.HANDLER_ERROR


def report(fault, console, /):
    """
    print a fault on the given rich console.

    contract
    - fault must be a CommandException (it renders itself via __rich__).
    - nothing is raised; the caller decides the exit status.
    """
    if not isinstance(fault, CommandException):
        raise TypeError("report() argument must be a command exception")
    console.print(fault)


__all__ = (
    "FaultCode",
    "CommandException",
    "DuplicateNameError",
    "DuplicateFlagError",
    "UnknownCommandError",
    "FlagError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "HandlerError",
    "report",
)
