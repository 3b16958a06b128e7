"""
Commandeer command layer: build, compose, resolve and run commands.

What this module provides
- Command: immutable node of a command tree holding a name, a description,
  a usage template, ordered required arguments, options (keyed by every
  spelling), sub-commands, documentation aliases, a non-owning link to its
  parent and an optional executor.
- CommandBuilder: one-shot builder returned by Command.create(...),
  Command.for_main(...) and Command.for_cli(...). build() consumes it.
- CommandContext: immutable bundle handed to an executor.
- execute(command, arguments, output, input): module-level entry point.

Resolution order (per node, on the tokens presented to that node)
1. first token is a documentation alias -> render help, HELP_FLAG.
2. first token is a sub-command name -> delegate the tail to that child.
3. left-to-right scan: option keys consume their declared parameter count,
   other tokens fill the required arguments in order, anything else fails.
4. missing required arguments fail.
5. options never seen are backfilled with their defaults (flag=False).
6. the executor runs with a CommandContext; its exceptions are reported.

Every failure of steps 3-6 is rendered on the output channel and turned into
an ExitCause; nothing escapes execute() apart from non-Exception
BaseExceptions such as SystemExit.

Quick start
    from commandeer import Command, Option

    tool = (
        Command.for_main("tool", "copy a file somewhere")
        .add_required_argument("source", "file to copy")
        .add_flag("force", "overwrite existing files")
        .add_option(
            Option.create("mode", "permission bits of the copy")
            .add_alias("m")
            .add_parameter("bits", "octal permission bits", "644")
            .build()
        )
        .build(lambda context: context.out.write(f"{context.arguments}\\n"))
    )

    if __name__ == "__main__":
        raise SystemExit(tool.execute().code)
"""
import functools
import operator
import re
import sys
import weakref
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .arguments import RequiredArgument, Option
from .faults import *
from .tokens import tokenize
from .utils import *

# Documentation aliases installed by the for_main/for_cli presets.
DEFAULT_DOCUMENTATION_ALIASES = ("?", "--help", "-h")


class CommandType(type):
    """
    Metaclass exposing command fields as read-only properties.

    Responsibilities
    - Mirror every name listed in __introspectable__ to a read-only property
      backed by the "_" + name attribute.
    - Provide stable __repr__/__rich_repr__ limited to __displayable__ so that
      printing a node never walks the whole tree.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class CommandContext(metaclass=CommandType):
    """
    Immutable per-invocation bundle handed to an executor.

    Fields
    - arguments: read-only mapping required-argument name -> token.
    - options: read-only mapping canonical option name -> OptionValues,
      holding every option declared by the command.
    - out: the output channel (text stream) the command was executed with.
    - input: the input channel (text stream) the command was executed with.
    """

    __introspectable__ = (
        "arguments",
        "options",
        "out",
        "input",
    )

    __displayable__ = (
        "arguments",
        "options",
    )

    def __init__(self, arguments, options, out, input):
        self._arguments = freeze(arguments)
        self._options = freeze(options)
        self._out = out
        self._input = input

    def get_argument(self, name, /):
        return self._arguments.get(name)

    def get_option(self, name, /):
        return self._options.get(name)


class Command(metaclass=CommandType):
    """
    Node of a command tree.

    Commands are only produced by CommandBuilder.build() and are read-only
    afterwards, so a tree can be shared by concurrent execute() calls.

    Namespace
    - Required-argument names, option keys ("--name", "-alias"), sub-command
      names and documentation aliases share one namespace per command; the
      builder rejects any collision.

    Ownership
    - A parent owns its children through sub_commands. The child's parent
      link is a weak reference used only to compose usage lines, so keep a
      reference to the root while resolving from inner nodes.
    """

    __introspectable__ = (
        "name",
        "description",
        "usage",
        "required_arguments",
        "options",
        "sub_commands",
        "documentation_aliases",
        "executor",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "name",
        "description",
        "usage",
        "required_arguments",
        "documentation_aliases",
    )

    def __new__(cls, *unused, **ignored):
        raise TypeError(f"{cls.__typename__} instances are created with Command.create(...).build()")

    @staticmethod
    def create(name, description="", usage="", *documentation_aliases, colorful=False, fancy=False):
        """
        Start building a command.

        Parameters
        - name: command name (identifier); also the key used by parents and shells.
        - description: one-line description used in help.
        - usage: usage template; ancestors' templates are prepended in help.
        - documentation_aliases: first tokens that trigger help.
        - colorful / fancy: presentation switches for help and diagnostics.
        """
        return CommandBuilder(name, description, usage, colorful=colorful, fancy=fancy).add_documentation_aliases(
            *documentation_aliases
        )

    @staticmethod
    def for_main(name, description="", **options):
        """
        Preset for a program entry point: empty usage, ?/--help/-h documentation.
        """
        return Command.create(name, description, "", *DEFAULT_DOCUMENTATION_ALIASES, **options)

    @staticmethod
    def for_cli(name, description="", **options):
        """
        Preset for a shell command or a sub-command: usage is the name itself.
        """
        return Command.create(name, description, name, *DEFAULT_DOCUMENTATION_ALIASES, **options)

    @property
    def parent(self):
        """
        The command this node is mounted under, or None for a root.
        """
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        """
        Topmost command reachable through the parent links.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Ancestry from the root to this command, both included.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def distinct_options(self):
        """
        Every declared Option once, in declaration order (aliases collapsed).
        """
        return tuple(dict.fromkeys(self._options.values()))

    def execute(self, arguments=Unset, output=Unset, input=Unset):
        """
        Resolve `arguments` against this command and dispatch.

        Parameters
        - arguments:
          • Unset: read tokens from sys.argv[1:].
          • str: raw argument line, split with tokenize().
          • Iterable[str]: pre-tokenized arguments; the command's own name
            must not be included.
        - output: text stream for help, diagnostics and the executor (default sys.stdout).
        - input: text stream handed to the executor (default sys.stdin).

        Returns
        - ExitCause of the attempt; .code gives the process exit code.

        Raises
        - TypeError: when arguments is neither a string nor an iterable of strings.
        """
        output = coalesce(output, sys.stdout)
        input = coalesce(input, sys.stdin)
        tokens = _tokens(arguments)
        console = self._console(output)

        try:
            return self._resolve(tokens, output, input, console)
        except CommandFault as fault:
            return trigger(fault, console, command=self, colorful=self.colorful, fancy=self.fancy)

    def document(self, output=Unset):
        """
        Render this command's documentation on `output` (default sys.stdout).

        Returns
        - ExitCause.HELP_FLAG, always.
        """
        return self._document(self._console(coalesce(output, sys.stdout)))

    def _console(self, output):
        return Console(
            file=output,
            color_system="auto" if self.colorful else None,
            soft_wrap=True,
            highlight=False,
            markup=False,
            emoji=False,
        )

    def _resolve(self, tokens, output, input, console):
        # Documentation first: it shadows everything, sub-commands included.
        if tokens and tokens[0] in self._documentation_aliases:
            return self._document(console)

        if tokens and (child := self._sub_commands.get(tokens[0])) is not None:
            return child.execute(tokens[1:], output, input)

        arguments = {}
        options = {}
        found = set()
        cursor = 0
        index = 0

        while index < len(tokens):
            token = tokens[index]

            if (option := self._options.get(token)) is not None:
                start = index + 1
                end = start + option.arity
                if end > len(tokens):
                    missing = option.parameters[len(tokens) - start]
                    raise ExpectedOptionParameterError(
                        "missing the %s parameter <%s> of option %s" % (
                            ordinal(len(tokens) - start + 1),
                            missing.name,
                            token,
                        ),
                        option=option,
                        parameter=missing,
                    )
                options[option.name] = option.resolve(tokens[start:end])
                found.add(option)
                index = end
            elif cursor < len(self._required_arguments):
                arguments[self._required_arguments[cursor].name] = token
                cursor += 1
                index += 1
            else:
                raise UnexpectedOptionError(
                    "unexpected token %r at index %d (%s token)" % (token, index, ordinal(index + 1)),
                    token=token,
                    index=index,
                )

        if cursor < len(self._required_arguments):
            missing = self._required_arguments[cursor]
            raise ExpectedArgumentError(
                "expected the %s required argument <%s>" % (ordinal(cursor + 1), missing.name),
                argument=missing,
            )

        for option in self.distinct_options:
            if option not in found:
                options[option.name] = option.defaults()

        if self._executor is None:
            raise CommandNotImplementedError(f"the command {self.name!r} is not implemented")

        context = CommandContext(arguments, options, output, input)
        try:
            self._executor(context)
        except Exception as error:
            raise CommandExecutorError(
                "%s raised %s: %s" % (self.name, type(error).__name__, error),
                error=error,
            ) from error

        return ExitCause.SUCCESS

    def _document(self, console):
        """
        Render help on `console`.

        Palette keys
        - command-name, description, section-label, usage, argument-name,
          option-name, parameter-name, default-value, alias, sub-command,
          note, panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        styles = defaultdict(str, {
            # === Head ===
            "command-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "description": "italic #A3A3A3",  # Neutral gray
            "section-label": "bold #FFFFFF",  # Pure white headers
            "usage": "bold #36C5F0",  # SKY-BLUE

            # === Arguments / options ===
            "argument-name": "bold #FFD600",  # AMBER for positionals
            "option-name": "bold #00E6FF",  # CYAN for options
            "alias": "bold #22C55E",  # GREEN for documentation aliases
            "parameter-name": "bold #FFD600",
            "default-value": "#9CE19C",

            # === Sub-commands ===
            "sub-command": "bold #36C5F0",

            # === Misc ===
            "note": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            # Normalize to Rich Text; drop styles in non-colorful mode.
            return Text(str(fragment), styles[style] if self.colorful else "")

        def joined(fragments, separator=", "):
            return Text(separator).join(fragments)

        def aliases(command):
            return joined(text(alias, "alias") for alias in command.documentation_aliases)

        renders = [Text.assemble(text(self.name, "command-name"), " - ", text(self.description, "description"))]

        if self._executor is None and not self._sub_commands:
            renders.append(text("this command is not implemented", "note"))
            return self._print(console, renders, text(f"[ {self.name.upper()} HELP ]", "panel-title"))

        full = " ".join(command.usage for command in self.path if command.usage)

        # Usage lines
        usage = Text.assemble(text("usage", "section-label"), ":")
        if self._executor is not None:
            line = Text("  ")
            line.append_text(text(full, "usage"))
            for argument in self._required_arguments:
                line.append(" " if len(line) > 2 else "").append_text(text(f"<{argument.name}>", "argument-name"))
            for option in self.distinct_options:
                group = Text.assemble("[", text("--" + option.name, "option-name"))
                for parameter in option.parameters:
                    group.append(" ").append_text(text(f"<{parameter.name}>", "parameter-name"))
                line.append(" " if len(line) > 2 else "").append_text(group.append("]"))
            usage.append("\n").append_text(line)
        else:
            usage.append("\n  ").append_text(text("not executable on its own, use a sub-command", "note"))
        if self._sub_commands:
            usage.append("\n  ").append_text(text(
                " ".join(filter(None, (full, "{<sub-command> <sub-command arguments ...>}"))), "usage"
            ))
        renders.append(usage)

        # Required arguments, 1-based
        if self._executor is not None and self._required_arguments:
            section = Text.assemble(text("required arguments", "section-label"), ":")
            for index, argument in enumerate(self._required_arguments, 1):
                section.append(f"\n  ({index}) ").append_text(text(f"<{argument.name}>", "argument-name"))
                section.append(":  ").append_text(text(argument.description, "description"))
            renders.append(section)

        # Documentation aliases, then every distinct option with its parameters
        entries = []
        if self._documentation_aliases:
            entries.append(Text.assemble(aliases(self), ":  ", text("show this documentation", "description")))
        if self._executor is not None:
            for option in self.distinct_options:
                entry = Text.assemble(
                    joined(text(key, "option-name") for key in option.keys),
                    ":  ",
                    text(option.description, "description"),
                )
                for index, parameter in enumerate(option.parameters, 1):
                    entry.append(f"\n      ({index}) ").append_text(text(parameter.name, "parameter-name"))
                    entry.append(":  ").append_text(text(parameter.description, "description"))
                    entry.append(" (default: ").append_text(text(f'"{parameter.default}"', "default-value"))
                    entry.append(")")
                entries.append(entry)
        if entries:
            section = Text.assemble(text("options", "section-label"), ":")
            for entry in entries:
                section.append("\n  ").append_text(entry)
            renders.append(section)

        # Sub-commands: one line each, never their own arguments or options
        if self._sub_commands:
            section = Text.assemble(text("sub-commands", "section-label"), ":")
            for name, child in self._sub_commands.items():
                section.append("\n  ").append_text(text(name, "sub-command"))
                section.append(":  ").append_text(text(child.description, "description"))
                if child.documentation_aliases:
                    section.append(" (documentation: ").append_text(aliases(child)).append(")")
            renders.append(section)

        return self._print(console, renders, text(f"[ {self.name.upper()} HELP ]", "panel-title"))

    def _print(self, console, renders, title):
        renderable = Text("\n\n").join(renders)
        if self.fancy:
            renderable = Panel(renderable, title=title, title_align="left")
        console.print(renderable)
        return ExitCause.HELP_FLAG


def _tokens(arguments):
    """
    Normalize the accepted argument forms into a list of tokens.
    """
    if arguments is Unset:
        return sys.argv[1:]
    if isinstance(arguments, str):
        return tokenize(arguments)
    if isinstance(arguments, Iterable):
        tokens = list(arguments)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("execute() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("execute() argument must be a string or an iterable of strings")


class CommandBuilder:
    """
    One-shot builder for Command.

    Rules
    - Required arguments keep their declaration order.
    - Every name enters the command namespace through _claim(), which rejects
      collisions between argument names, option keys, sub-command names and
      documentation aliases with a ValueError naming the identifier.
    - build() freezes the collections, attaches the executor and consumes the
      builder: any later call raises TypeError.
    """

    def __init__(self, name, description="", usage="", *, colorful=False, fancy=False):
        if not isinstance(description, str):
            raise TypeError("command description must be a string")
        if not isinstance(usage, str):
            raise TypeError("command usage must be a string")

        command = object.__new__(Command)
        command._name = identifier(name, "command name")
        command._description = description
        command._usage = usage
        command._required_arguments = []
        command._options = {}
        command._sub_commands = {}
        command._documentation_aliases = []
        command._parent = None
        command._executor = None
        command._colorful = bool(colorful)
        command._fancy = bool(fancy)
        self._command = command

    def _check(self):
        if self._command is None:
            raise TypeError("the command has already been built")
        return self._command

    def _claim(self, key, /):
        command = self._check()
        if (
            any(argument.name == key for argument in command._required_arguments) or
            key in command._options or
            key in command._sub_commands or
            key in command._documentation_aliases
        ):
            raise ValueError(f"the name or alias {key!r} is already assigned in command {command._name!r}")

    def add_documentation_alias(self, alias, /):
        if not isinstance(alias, str):
            raise TypeError("documentation alias must be a string")
        if not alias or any(char.isspace() for char in alias):
            raise ValueError(f"documentation alias {alias!r} must be a non-empty token without whitespace")
        self._claim(alias)
        self._command._documentation_aliases.append(alias)
        return self

    def add_documentation_aliases(self, *aliases):
        self._check()
        for alias in aliases:
            self.add_documentation_alias(alias)
        return self

    def add_required_argument(self, name, description=""):
        argument = RequiredArgument(name, description)
        self._claim(argument.name)
        self._command._required_arguments.append(argument)
        return self

    def add_flag(self, name, description=""):
        """
        Declare a parameterless option, i.e. a boolean flag.
        """
        self._check()
        return self.add_option(Option(name, description))

    def add_option(self, option, /):
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        # Check every key before inserting any, so a collision leaves no trace.
        for key in option.keys:
            self._claim(key)
        for key in option.keys:
            self._command._options[key] = option
        return self

    def add_sub_command(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("add_sub_command() argument must be a built command")
        if command.parent is not None:
            raise ValueError(f"the command {command.name!r} is already a sub-command of {command.parent.name!r}")
        self._claim(command.name)
        command._parent = weakref.ref(self._command)
        self._command._sub_commands[command.name] = command
        return self

    def build(self, executor=None, /):
        """
        Produce the Command and consume this builder.

        Parameters
        - executor: callable receiving a CommandContext, or None for a
          documentation-only / routing-only command.
        """
        command = self._check()
        if executor is not None and not callable(executor):
            raise TypeError("command executor must be callable")

        command._required_arguments = freeze(command._required_arguments)
        command._options = freeze(command._options)
        command._sub_commands = freeze(command._sub_commands)
        command._documentation_aliases = freeze(command._documentation_aliases)
        command._executor = executor

        self._command = None
        return command


def execute(command, arguments=Unset, output=Unset, input=Unset, /):
    """
    Resolve `arguments` against `command` and dispatch (see Command.execute).
    """
    if not isinstance(command, Command):
        raise TypeError("execute() first argument must be a command")
    return command.execute(arguments, output, input)


__all__ = (
    "DEFAULT_DOCUMENTATION_ALIASES",
    "Command",
    "CommandBuilder",
    "CommandContext",
    "execute",
)

# Remove the internal metaclass from the module namespace.
del CommandType
