"""
Commandeer faults (resolution errors) and rendering.

Scope
- ExitCause: closed classification of one resolution attempt, each member
  carrying the numeric code a thin caller may hand to sys.exit().
- CommandFault: base type for run-time resolution failures. A fault carries
  its message plus options and knows how to render itself with rich.
- trigger(): central entry point that renders a fault on a console and
  returns the ExitCause the resolver must report.

Recovery contract
- Faults are raised inside the resolver and caught at the boundary of a
  single Command.execute() call; they never propagate to the caller.
- Construction mistakes (bad identifiers, name collisions, builder reuse) are
  not faults: they raise ValueError/TypeError and are meant to stop startup.

UX goals
- One header line "[ <command> | <title> ]", one sentence of message, one hint
  that reminds the user of the documentation aliases of the failing command.
- Styling is only applied when the command is colorful; palette entries can
  be overridden through a __styles__ mapping defined in __main__.
"""
from collections import defaultdict
from enum import Enum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from rich.traceback import Traceback

from .utils import Unset


class ExitCause(Enum):
    """
    result of a resolution attempt.

    SUCCESS and HELP_FLAG share exit code 0 but remain distinct members, so
    callers can tell a completed run from a documentation request.
    """
    SUCCESS                         = "success", 0
    HELP_FLAG                       = "help-flag", 0
    ERROR_EXPECTED_ARGUMENT         = "expected-argument", -1
    ERROR_EXPECTED_OPTION_PARAMETER = "expected-option-parameter", -2
    ERROR_UNEXPECTED_OPTION         = "unexpected-option", -3
    ERROR_COMMAND_NOT_IMPLEMENTED   = "command-not-implemented", -4
    ERROR_COMMAND_EXECUTOR          = "command-executor", -5

    def __new__(cls, label, code):
        self = object.__new__(cls)
        self._value_ = label
        self.code = code
        return self

    @property
    def failed(self):
        return self.code < 0


class CommandFault(Exception):
    """
    base type for resolution failures.

    class attributes
    - cause: ExitCause reported when the fault reaches the execute() boundary.
    - title: short lowercase label shown in the header.

    options (all optional, merged in by trigger())
    - command: the Command that failed (name and documentation aliases are read from it).
    - hint: overrides the default documentation reminder.
    - colorful / fancy: rendering switches taken from the command.
    """
    cause = Unset
    title = "fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        command = self.options.get("command")
        aliases = tuple(getattr(command, "documentation_aliases", ()))
        if not aliases:
            return "this command declares no documentation aliases"
        return "type %s for the documentation" % ", ".join(map(repr, aliases))

    def details(self):
        """
        Extra renderables shown below the hint (none by default).
        """
        return ()

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white command name
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        command = self.options.get("command")
        prog = text(getattr(command, "name", None) or "command", "prog-name")

        header = Text.assemble("[ ", prog, " | ", text(self.title, "error-title"), " ]")
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint(), "hint"))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint, *self.details()), title=header, title_align="left")

        return Group(header, message, hint, *self.details())

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ExpectedArgumentError(CommandFault):
    cause = ExitCause.ERROR_EXPECTED_ARGUMENT
    title = "expected argument"


class ExpectedOptionParameterError(CommandFault):
    cause = ExitCause.ERROR_EXPECTED_OPTION_PARAMETER
    title = "expected option parameter"


class UnexpectedOptionError(CommandFault):
    cause = ExitCause.ERROR_UNEXPECTED_OPTION
    title = "unexpected option"


class CommandNotImplementedError(CommandFault):
    cause = ExitCause.ERROR_COMMAND_NOT_IMPLEMENTED
    title = "command not implemented"

    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        return "no executor is attached to this command; " + super().hint()


class CommandExecutorError(CommandFault):
    """
    wraps an exception raised by an executor.

    options
    - error: the original exception; its traceback is rendered below the hint.
    """
    cause = ExitCause.ERROR_COMMAND_EXECUTOR
    title = "command executor"

    def hint(self):
        if "hint" in self.options:
            return self.options["hint"]
        return "the command failed while running, see the traceback below"

    def details(self):
        if (error := self.options.get("error")) is None:
            return ()
        return (Traceback.from_exception(type(error), error, error.__traceback__),)


def trigger(fault, console, /, **options):
    """
    render a fault on `console` and return its ExitCause.

    contract
    - fault must be a CommandFault; options are merged in via __replace__
      before rendering (typically command, colorful and fancy).
    """
    if not isinstance(fault, CommandFault):
        raise TypeError("trigger() argument must be a command fault")
    fault = fault.__replace__(**options)
    console.print(fault)
    return fault.cause


__all__ = (
    "ExitCause",
    "CommandFault",
    "ExpectedArgumentError",
    "ExpectedOptionParameterError",
    "UnexpectedOptionError",
    "CommandNotImplementedError",
    "CommandExecutorError",
    "trigger",
)
