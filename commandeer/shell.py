"""
Interactive shell on top of a registry of commands.

A Shell reads one line at a time from an input channel, splits off the
command name and hands the rest of the line, untouched, to that command's
execute(). Two literals are handled by the shell itself:
- HELP ("?") lists the registered commands.
- EXIT ("exit") ends the loop, unless a command with that name is registered.

Executors that want to end the session call Shell.stop() instead of exiting
the process; the loop returns once the current command finishes.

The registry and the prompt are guarded by a lock, so commands can be added
or removed from other threads (or from executors) while the loop runs.
"""
import sys
import threading

from rich.console import Console
from rich.text import Text

from .commands import Command
from .utils import *

HELP = "?"
EXIT = "exit"


class Shell:
    """
    Read-eval loop dispatching lines to registered commands.

    Parameters
    - title: banner printed when run() starts (omitted when None).
    - prompt: text printed before each read (omitted when None).
    """

    def __init__(self, title=None, prompt=None):
        self._title = title
        self._prompt = prompt
        self._commands = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def title(self):
        return self._title

    @property
    def prompt(self):
        with self._lock:
            return self._prompt

    @prompt.setter
    def prompt(self, prompt):
        with self._lock:
            self._prompt = prompt

    @property
    def commands(self):
        """
        Snapshot of the registry (name -> Command).
        """
        with self._lock:
            return freeze(self._commands)

    def add_command(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        with self._lock:
            if command.name in self._commands:
                raise ValueError(f"the command name {command.name!r} is already assigned")
            self._commands[command.name] = command
        return self

    def remove_command(self, name, /):
        with self._lock:
            self._commands.pop(name, None)
        return self

    def lookup(self, name, /):
        with self._lock:
            return self._commands.get(name)

    def stop(self):
        """
        Ask the loop to return after the command currently running.
        """
        self._stopped.set()

    def document(self, output=Unset):
        """
        List every registered command with its description and documentation aliases.
        """
        console = _console(coalesce(output, sys.stdout))
        document = Text("commands:")
        for name, command in sorted(self.commands.items()):
            document.append(f"\n  {name}:  {command.description}")
            if command.documentation_aliases:
                document.append(" (documentation: %s)" % ", ".join(command.documentation_aliases))
        document.append("\n\ntype '<command> <documentation alias>' for the documentation of a command")
        console.print(document)

    def run(self, output=Unset, input=Unset):
        """
        Run the loop until end of input, the exit literal, or stop().

        Returns
        - ExitCause of the last executed command, or None when none ran.
        """
        output = coalesce(output, sys.stdout)
        input = coalesce(input, sys.stdin)
        console = _console(output)
        cause = None

        self._stopped.clear()
        if self._title is not None:
            console.print(Text(self._title))
        console.print(Text(f"type {HELP!r} for the list of commands, {EXIT!r} to leave"))

        while not self._stopped.is_set():
            if (prompt := self.prompt) is not None:
                console.print(Text(prompt), end="")
            if not (line := input.readline()):
                break

            if line := line.strip():
                name, *rest = line.split(maxsplit=1)
                command = self.lookup(name)
                if command is not None:
                    cause = command.execute(rest[0] if rest else "", output, input)
                elif name == HELP:
                    self.document(output)
                elif name == EXIT:
                    break
                else:
                    console.print(Text(f"unknown command: {name}"))
            console.print()

        return cause


def _console(output):
    return Console(file=output, color_system=None, soft_wrap=True, highlight=False, markup=False, emoji=False)


__all__ = (
    "HELP",
    "EXIT",
    "Shell",
)
