"""
curvecli presentation policy: version, usage, help and flag-error text.

Every renderer is a pure function over an explicit, read-only HelpContext
record built by describe(command); nothing here writes to a stream. The
dispatcher decides where the text goes (help and errors go to stderr).

Presentation bundles the four renderers and lets a host swap any of them
once, the same way cobra exposes SetVersionTemplate, SetUsageTemplate,
SetHelpTemplate and SetFlagErrorFunc.
"""
from typing import NamedTuple

from .flags import FlagKind
from .utils import Unset


class FlagRow(NamedTuple):
    short: str | None
    long: str
    metavar: str | None
    descr: str | None


class HelpContext(NamedTuple):
    """
    Everything the renderers may look at, detached from the tree.
    """
    route: str
    usage: str | None
    descr: str | None
    commands: tuple[tuple[str, str | None], ...]
    flags: tuple[FlagRow, ...]
    inherited: tuple[FlagRow, ...]
    runnable: bool


def _row(flag):
    return FlagRow(
        flag.short,
        flag.long,
        "string" if flag.kind is FlagKind.STRING else None,
        flag.descr,
    )


def describe(command, /):
    """
    Build the HelpContext of a command.
    """
    return HelpContext(
        route=command.route,
        usage=command.usage,
        descr=command.descr,
        commands=tuple((name, child.descr) for name, child in command.children.items()),
        flags=tuple(map(_row, command.flags.values())),
        inherited=tuple(map(_row, command.inherited_flags().values())),
        runnable=command.handler is not None,
    )


def version_text(prog, version, /):
    return f"{prog} {version}\n"


def usage_text(context, /):
    """
    Usage block, e.g. 'Usage:  curve fs [OPTIONS] COMMAND'.

    An explicit usage string starts with the command name and is prefixed
    with the parent route; otherwise the line is synthesized from what the
    command accepts.
    """
    if context.usage:
        parent = context.route.rpartition(" ")[0]
        return "Usage:  %s\n" % " ".join(filter(None, (parent, context.usage)))

    line = [context.route]
    if context.flags or context.inherited:
        line.append("[OPTIONS]")
    if context.commands:
        line.append("COMMAND")
    if context.runnable or not context.commands:
        line.append("[ARGS...]")
    return "Usage:  %s\n" % " ".join(line)


def _section(title, rows):
    width = max(map(len, (left for left, _ in rows))) + 3
    lines = [f"{title}:"]
    for left, right in rows:
        lines.append(("  " + left.ljust(width) + (right or "")).rstrip())
    return "\n".join(lines) + "\n"


def _flag_rows(rows):
    for row in sorted(rows, key=lambda row: row.long):
        left = ("-%s, " % row.short if row.short else "    ") + "--" + row.long
        if row.metavar:
            left += " " + row.metavar
        yield left, row.descr


def help_text(context, /, usage=usage_text):
    """
    Full help: usage, description, commands, flags and a closing hint.

    usage renders the usage block from the same context. Commands keep
    registration order; flags are sorted by long name.
    """
    sections = [usage(context)]

    if context.descr:
        sections.append(context.descr + "\n")

    if context.commands:
        sections.append(_section("Commands", context.commands))

    if context.flags:
        sections.append(_section("Flags", list(_flag_rows(context.flags))))

    if context.inherited:
        sections.append(_section("Global Flags", list(_flag_rows(context.inherited))))

    if context.commands:
        sections.append("Run '%s COMMAND --help' for more information on a command.\n" % context.route)

    return "\n".join(sections)


def flag_error_text(context, error, /, usage=usage_text):
    """
    Flag-error handler output: the error message followed by the usage block.
    """
    return "%s\n%s" % (error, usage(context))


class Presentation:
    """
    Presentation policy used by the dispatcher.

    Each renderer can be replaced exactly once through its setter; setters
    return the renderer so they work as decorators:

        policy = Presentation()

        @policy.set_version_template
        def version(prog, version):
            return f"{prog} version {version}\\n"
    """

    def __init__(self):
        self._version = Unset
        self._usage = Unset
        self._help = Unset
        self._flag_error = Unset

    def _replace(self, field, renderer):
        if not callable(renderer):
            raise TypeError(f"presentation {field} renderer must be callable")
        if getattr(self, "_" + field) is not Unset:
            raise TypeError(f"presentation {field} renderer cannot be overridden")
        setattr(self, "_" + field, renderer)
        return renderer

    def set_version_template(self, renderer, /):
        return self._replace("version", renderer)

    def set_usage_template(self, renderer, /):
        return self._replace("usage", renderer)

    def set_help_template(self, renderer, /):
        return self._replace("help", renderer)

    def set_flag_error_handler(self, renderer, /):
        return self._replace("flag_error", renderer)

    def version(self, prog, version, /):
        return (self._version or version_text)(prog, version)

    def usage(self, command, /):
        return (self._usage or usage_text)(describe(command))

    def help(self, command, /):
        if self._help is Unset:
            return help_text(describe(command), self._usage or usage_text)
        return self._help(describe(command))

    def flag_error(self, command, error, /):
        if self._flag_error is Unset:
            return flag_error_text(describe(command), error, self._usage or usage_text)
        return self._flag_error(describe(command), error)


__all__ = (
    "FlagRow",
    "HelpContext",
    "describe",
    "version_text",
    "usage_text",
    "help_text",
    "flag_error_text",
    "Presentation",
)
