r"""
curvecli flag specifications (the flag registry of a command).

Overview
- Flag: a named switch attached to a command. It carries a long name, an
  optional single-character short name, a kind (bool or string), a default
  value, a short description and a scope.
- FlagKind: BOOL (presence-only, optional inline true/t/1 or false/f/0) or STRING
  (value-bearing, inline "--name=value" or spaced "--name value").
- Scope: LOCAL flags are visible only on the declaring command; PERSISTENT
  flags are visible on the declaring command and every descendant unless a
  descendant re-declares the same name.

Global flags
- version_flag(): "--version"/"-v", local bool on the root.
- help_flag(): "--help"/"-h", persistent bool on the root.
- format_flag(): "--format"/"-f", persistent string on the root. Allowed
  values are listed in FORMATS; validating them is up to the consuming
  subcommand.

Validation highlights
- long names match r"[^\W\d_](-?[^\W_]+)*" once the leading "--" is removed.
- short names are a single letter or digit once the leading "-" is removed.
- descr is trimmed and cannot be empty when given.
"""
import re
from enum import Enum

from .faults import InvalidFlagValueError, MissingFlagValueError
from .utils import IntrospectableType, Unset, coalesce

FORMATS = ("json", "plain")


class FlagKind(Enum):
    BOOL = "bool"
    STRING = "string"


class Scope(Enum):
    LOCAL = "local"
    PERSISTENT = "persistent"


_TRUTHS = {"true": True, "1": True, "t": True, "false": False, "0": False, "f": False}


class Flag(metaclass=IntrospectableType):
    """
    Named flag specification.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata.
    - names: every spelling accepted on the command line ("--long" and, when
      present, "-s").
    """

    __introspectable__ = (
        "long",
        "short",
        "kind",
        "default",
        "descr",
        "scope",
    )

    def __init__(self, long, short=Unset, /, *, kind=FlagKind.BOOL, default=Unset, descr=Unset, scope=Scope.LOCAL):
        """
        Construct a Flag spec.

        Parameters
        - long: str
          Long name, with or without the leading "--" ("format" or "--format").
        - short: str | Unset
          Single character, with or without the leading "-".
        - kind: FlagKind
        - default: value used when the flag is absent. Defaults to False for
          bool flags and "" for string flags.
        - descr: str | Unset
          Short description for help output.
        - scope: Scope

        Raises
        - TypeError/ValueError on malformed names, kinds, scopes or defaults.
        """
        typename = type(self).__typename__

        if not isinstance(long, str):
            raise TypeError(f"{typename} 'long' must be a string")
        if not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", long := long.strip().removeprefix("--")):
            raise ValueError(f"{typename} 'long' must be a valid shell-style flag name")

        if not isinstance(short, str | Unset):
            raise TypeError(f"{typename} 'short' must be a string")
        if isinstance(short, str) and not re.fullmatch(r"[^\W_]", short := short.strip().removeprefix("-")):
            raise ValueError(f"{typename} 'short' must be a single character")

        if not isinstance(kind, FlagKind):
            raise TypeError(f"{typename} 'kind' must be a flag kind")
        if not isinstance(scope, Scope):
            raise TypeError(f"{typename} 'scope' must be a scope")

        default = coalesce(default, False if kind is FlagKind.BOOL else "")
        if kind is FlagKind.BOOL and not isinstance(default, bool):
            raise TypeError(f"{typename} bool 'default' must be a boolean")
        if kind is FlagKind.STRING and not isinstance(default, str):
            raise TypeError(f"{typename} string 'default' must be a string")

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{typename} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{typename} 'descr' cannot be empty")

        self._long = long
        self._short = coalesce(short)
        self._kind = kind
        self._default = default
        self._descr = coalesce(descr)
        self._scope = scope

    @property
    def names(self):
        if self.short is None:
            return ("--" + self.long,)
        return ("--" + self.long, "-" + self.short)

    @property
    def persistent(self):
        return self.scope is Scope.PERSISTENT

    def convert(self, input, value, tokens):
        """
        Resolve the value of this flag from a token.

        Parameters
        - input: the spelling used on the command line ("-f", "--format").
        - value: inline value after "=", or None when there was none.
        - tokens: deque of pending tokens; a string flag without an inline
          value consumes the next one.

        Raises
        - MissingFlagValueError: string flag without a value.
        - InvalidFlagValueError: bool flag with an inline value that is not a
          boolean spelling.
        """
        if self.kind is FlagKind.BOOL:
            if value is None:
                return True
            try:
                return _TRUTHS[value.lower()]
            except KeyError:
                raise InvalidFlagValueError(
                    "invalid argument %r for %r flag: expected true or false" % (value, input),
                    input=input,
                ) from None

        if value is not None:
            return value
        if not tokens:
            raise MissingFlagValueError("flag needs an argument: %r" % input, input=input)
        return tokens.popleft()


def version_flag():
    return Flag("version", "v", kind=FlagKind.BOOL, descr="Print curve version")


def help_flag():
    return Flag("help", "h", kind=FlagKind.BOOL, descr="Print usage", scope=Scope.PERSISTENT)


def format_flag():
    return Flag(
        "format", "f",
        kind=FlagKind.STRING,
        descr="Output format(%s)" % "|".join(FORMATS),
        scope=Scope.PERSISTENT,
    )


__all__ = (
    "FORMATS",
    "FlagKind",
    "Scope",
    "Flag",
    "version_flag",
    "help_flag",
    "format_flag",
)
