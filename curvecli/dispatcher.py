"""
curvecli root dispatcher: build the "curve" tree, parse, dispatch, exit.

Flow
    argv -> parse() -> Invocation -> execute() -> exit status

State machine (one pass per process)
    IDLE -> PARSING -> DISPATCHING | SHOWING_HELP | SHOWING_VERSION | REPORTING_ERROR -> TERMINATED

- PARSING matches the longest prefix of tokens against the tree, consuming
  the flags visible at each level (persistent flags stay valid below their
  declaring command). "--" ends flag parsing.
- SHOWING_HELP: "--help" anywhere (rest ignored, exit 0), or a command
  without handler reached with no arguments (exit 1: there is no default
  action, so a missing subcommand is a usage error).
- SHOWING_VERSION: "--version" on the root (exit 0).
- REPORTING_ERROR: unknown command or flag errors (exit 1). Flag errors come
  with the usage block, unknown commands do not.
- DISPATCHING: the handler runs with the Invocation; a HandlerError maps to
  exit 1 and its message is printed unchanged, without usage.

Streams
- help, usage and errors go to stderr; version text goes to stdout.
  Handlers write their own output.
"""
import re
import sys
from collections import deque
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from rich.console import Console

from .commands import Command
from .faults import CommandException, FlagError, UnknownCommandError, UnknownFlagError, report
from .flags import format_flag, help_flag, version_flag
from .log import logger, setup_logging
from .presentation import Presentation
from .registrar import register_subsystems
from .utils import Unset, coalesce
from .version import get_version

PROG = "curve"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class State(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    DISPATCHING = "dispatching"
    SHOWING_HELP = "showing-help"
    SHOWING_VERSION = "showing-version"
    REPORTING_ERROR = "reporting-error"
    TERMINATED = "terminated"


class Invocation(NamedTuple):
    """
    Result of matching argv against a command tree.

    - command: the deepest matched command.
    - path: names from the root to command.
    - args: tokens left for the handler, in order.
    - flags: long name -> value for every flag visible on command
      (defaults included).
    - help: whether help was requested.
    - error: the parse fault, if any (parsing stopped there).
    """
    command: Command
    path: tuple[str, ...]
    args: tuple[str, ...]
    flags: MappingProxyType
    help: bool = False
    error: CommandException | None = None


def new_curve_command(subsystems=Unset, /):
    """
    Build the sealed root "curve" command.

    Parameters
    - subsystems: Iterable[SubsystemCommandFactory] | Unset
      Subtrees mounted under the root, in order (see registrar.SUBSYSTEMS).

    Each call builds a fresh tree; identical input gives identical trees.
    """
    root = Command(
        PROG,
        "curve fs|bs [OPTIONS] COMMAND [ARGS...]",
        "curve is a tool for managing curvefs and curvebs",
    )
    root.add_flag(version_flag())
    root.add_flag(help_flag())
    root.add_flag(format_flag())

    register_subsystems(root, subsystems)
    return root.seal()


def _invocation(command, args, values, *, help=False, error=None):
    flags = {}
    for flag in command.visible_flags().values():
        flags[flag.long] = values.get(flag.long, flag.default)
    return Invocation(
        command,
        tuple(step.name for step in command.path),
        tuple(args),
        MappingProxyType(flags),
        help,
        error,
    )


def parse(root, argv, /):
    """
    Match argv against the tree rooted at root.

    Rules
    - "-x", "-x=value", "--long", "--long=value" are flags; string flags
      take the next token when no inline value is given.
    - a bare word naming a child of the current command descends into it,
      as long as no positional argument was collected at this level.
    - any other word is a positional argument; flags may still follow.
    - "--" makes every following token positional.
    - "--help" stops parsing immediately.
    - a flag given above a subcommand must reach it as the same flag: a
      local flag of the parent, or one the subcommand re-declares, is an
      unknown flag there.

    Faults are not raised; they are returned in Invocation.error.
    """
    tokens = deque(argv)
    command = root
    args = []
    values = {}
    spellings = {}
    owners = {}

    while tokens:
        token = tokens.popleft()

        if token == "--":
            args.extend(tokens)
            break

        if token.startswith("-") and token != "-":
            match = re.fullmatch(r"(?P<input>--?[^=]+)(=(?P<value>.*))?", token, re.DOTALL)
            input = match["input"] if match else token
            try:
                flag = command.visible_flags()[input]
            except KeyError:
                error = UnknownFlagError("unknown flag: %s" % input, input=input, route=command.route)
                return _invocation(command, args, values, error=error)
            try:
                values[flag.long] = flag.convert(input, match["value"], tokens)
            except FlagError as error:
                return _invocation(command, args, values, error=error)
            spellings[flag.long] = input
            owners[flag.long] = flag
            if flag.long == "help" and values[flag.long]:
                return _invocation(command, args, values, help=True)
            continue

        if not args and token in command.children:
            child = command.children[token]
            visible = {flag.long: flag for flag in child.visible_flags().values()}
            # values parsed so far must belong to flags the child still sees
            if stale := {long for long, flag in owners.items() if visible.get(long) is not flag}:
                long = min(stale)
                error = UnknownFlagError("unknown flag: %s" % spellings[long], input=spellings[long], route=child.route)
                values = {name: value for name, value in values.items() if name not in stale}
                return _invocation(child, args, values, error=error)
            command = child
            continue

        args.append(token)

    return _invocation(command, args, values)


def _console(stream, **options):
    if stream is Unset:
        return Console(highlight=False, soft_wrap=True, emoji=False, **options)
    return Console(file=stream, highlight=False, soft_wrap=True, emoji=False)


def execute(argv=Unset, /, *, root=Unset, version=Unset, presentation=Unset, stdout=Unset, stderr=Unset):
    """
    Run one invocation and return its exit status (0 or 1).

    Parameters
    - argv: Iterable[str] | Unset (sys.argv[1:]).
    - root: Command | Unset (new_curve_command()).
    - version: str | Unset (get_version()).
    - presentation: Presentation | Unset (default renderers).
    - stdout/stderr: text streams | Unset (process streams).

    Raises
    - build-time faults (DuplicateNameError, DuplicateFlagError) while
      building the default tree.
    - unexpected exceptions from handlers, unchanged.
    """
    state = State.IDLE
    argv = list(coalesce(argv, sys.argv[1:]))
    root = new_curve_command() if root is Unset else root
    version = get_version() if version is Unset else version
    presentation = Presentation() if presentation is Unset else presentation
    out = _console(stdout)
    err = _console(stderr, stderr=True)

    def transition(target):
        nonlocal state
        logger.debug("%s -> %s", state.value, target.value)
        state = target

    transition(State.PARSING)
    invocation = parse(root, argv)
    command = invocation.command
    logger.debug("matched %r with args %r", command.route, invocation.args)

    if invocation.error:
        transition(State.REPORTING_ERROR)
        err.out(presentation.flag_error(command, invocation.error), end="", highlight=False)
        status = EXIT_FAILURE
    elif invocation.help:
        transition(State.SHOWING_HELP)
        err.out(presentation.help(command), end="", highlight=False)
        status = EXIT_SUCCESS
    elif command is root and invocation.flags.get("version"):
        transition(State.SHOWING_VERSION)
        out.out(presentation.version(root.name, version), end="", highlight=False)
        status = EXIT_SUCCESS
    elif command.handler is None and not invocation.args:
        transition(State.SHOWING_HELP)
        err.out(presentation.help(command), end="", highlight=False)
        status = EXIT_FAILURE
    elif command.handler is None:
        transition(State.REPORTING_ERROR)
        report(UnknownCommandError(
            "%s: '%s' is not a %s command.\nSee '%s --help'" % (
                command.route, invocation.args[0], command.route, command.route,
            ),
            input=invocation.args[0],
            route=command.route,
        ), err)
        status = EXIT_FAILURE
    else:
        transition(State.DISPATCHING)
        try:
            command.run(invocation)
        except CommandException as error:
            transition(State.REPORTING_ERROR)
            report(error, err)
            status = EXIT_FAILURE
        else:
            status = EXIT_SUCCESS

    transition(State.TERMINATED)
    return status


def main():
    """
    Console entry point: run with sys.argv and exit with the status.
    """
    setup_logging()
    sys.exit(execute())


__all__ = (
    "PROG",
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "State",
    "Invocation",
    "new_curve_command",
    "parse",
    "execute",
    "main",
)
