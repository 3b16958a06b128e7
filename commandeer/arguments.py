"""
Commandeer argument specifications.

Overview
- Specs
  • RequiredArgument: positional value, consumed in declaration order.
  • Parameter: one positional value of an Option, with a textual default.
  • Option: named switch (--name, or -alias for each alias) taking a fixed,
    ordered list of parameters; a parameterless option is a boolean flag.
  • OptionValues: the resolved state of one Option for one invocation.

- Builders
  • Option.create(name, description) returns an OptionBuilder that collects
    aliases and parameters; every build() produces a new immutable Option.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields listed in __introspectable__ as read-only properties.

Naming
- Every name and alias must match utils.IDENTIFIER ([A-Za-z][A-Za-z0-9-]*).
  Prefixes ("--" / "-") are added by the owning command, never by users.

Quick example:
    >>> from commandeer.arguments import Option
    >>> verbose = Option.create("verbose", "print more").add_alias("v").build()
    >>> output = (
    ...     Option.create("output", "write results to a file")
    ...     .add_alias("o")
    ...     .add_parameter("path", "destination file", "out.txt")
    ...     .build()
    ... )
    >>> output.keys
    ('--output', '-o')
"""
import functools
import operator
import re

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only value objects.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing.
    - Seal concrete model classes against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages (e.g. "required-argument", "option-values").
    """
    __introspectable__ = ()

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
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='verbose', description='print more', aliases=('v',), parameters=())
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _text(cls, name, object, /):
    # Descriptions and defaults are free text, only their type is checked.
    if not isinstance(object, str):
        raise TypeError(f"{cls.__typename__} {name} must be a string")
    return object


class RequiredArgument(metaclass=ArgumentType):
    """
    Positional argument declared by a command.

    The declaration order inside the owning command defines which token
    is bound to which argument.
    """

    __introspectable__ = (
        "name",
        "description",
    )

    def __new__(cls, name, description=""):
        self = super().__new__(cls)
        self._name = identifier(name, f"{cls.__typename__} name")
        self._description = _text(cls, "description", description)
        return self


class Parameter(metaclass=ArgumentType):
    """
    One positional value of an Option.

    Fields
    - name: key under which the value is published in OptionValues.parameters.
    - description: help text.
    - default: textual value used when the option is not given on the command line.
    """

    __introspectable__ = (
        "name",
        "description",
        "default",
    )

    def __new__(cls, name, description="", default=""):
        self = super().__new__(cls)
        self._name = identifier(name, f"{cls.__typename__} name")
        self._description = _text(cls, "description", description)
        self._default = _text(cls, "default", default)
        return self


class Option(metaclass=ArgumentType):
    """
    Named switch owned by a command.

    An option is registered in its command under "--" + name and "-" + alias
    for every alias; all of those keys resolve to this very instance, which
    is what help de-duplication and default backfilling rely on.

    Instances are immutable: aliases and parameters are stored as tuples.
    Use Option.create(...) for the fluent builder, or construct directly.
    """

    __introspectable__ = (
        "name",
        "description",
        "aliases",
        "parameters",
    )

    def __new__(cls, name, description="", aliases=(), parameters=()):
        self = super().__new__(cls)
        self._name = identifier(name, f"{cls.__typename__} name")
        self._description = _text(cls, "description", description)

        sanitized = []
        for alias in aliases:
            if identifier(alias, f"{cls.__typename__} alias") in sanitized:
                raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates ({alias!r})")
            sanitized.append(alias)
        self._aliases = tuple(sanitized)

        names = set()
        for parameter in parameters:
            if not isinstance(parameter, Parameter):
                raise TypeError(f"{cls.__typename__} parameters must be parameter instances")
            if parameter.name in names:
                raise ValueError(f"{cls.__typename__} parameter name {parameter.name!r} is already in use")
            names.add(parameter.name)
        self._parameters = tuple(parameters)
        return self

    @staticmethod
    def create(name, description=""):
        """
        Start building an option named `name` (without leading dashes).
        """
        return OptionBuilder(name, description)

    @property
    def keys(self):
        """
        Command-line spellings of this option, canonical key first.
        """
        return ("--" + self.name, *("-" + alias for alias in self.aliases))

    @property
    def arity(self):
        """
        Number of tokens consumed after the option key.
        """
        return len(self.parameters)

    def resolve(self, values, /):
        """
        Build the OptionValues of an explicit invocation.

        `values` must hold exactly one token per declared parameter, in order.
        """
        values = tuple(values)
        if len(values) != self.arity:
            raise ValueError(f"{type(self).__typename__} {self.name!r} expects {self.arity} values, got {len(values)}")
        return OptionValues(
            self.name,
            True,
            {parameter.name: value for parameter, value in zip(self.parameters, values)},
        )

    def defaults(self):
        """
        Build the OptionValues used when the option was not given.
        """
        return OptionValues(
            self.name,
            False,
            {parameter.name: parameter.default for parameter in self.parameters},
        )


class OptionBuilder:
    """
    Fluent builder for Option.

    Unlike the command builder, an option builder is not consumed by build():
    each call returns a fresh Option snapshot of the current state, so later
    additions never leak into options already handed out.
    """

    def __init__(self, name, description=""):
        self._name = identifier(name, "option name")
        self._description = _text(Option, "description", description)
        self._aliases = []
        self._parameters = []

    def add_alias(self, alias, /):
        return self.add_aliases(alias)

    def add_aliases(self, *aliases):
        # Validate everything first so a bad alias leaves the builder untouched.
        for alias in aliases:
            identifier(alias, "option alias")
        self._aliases.extend(aliases)
        return self

    def add_parameter(self, name, description="", default=""):
        self._parameters.append(Parameter(name, description, default))
        return self

    def build(self):
        return Option(self._name, self._description, self._aliases, self._parameters)


class OptionValues(metaclass=ArgumentType):
    """
    Resolved state of one option for a single invocation.

    Fields
    - option_name: canonical name of the option (never an alias).
    - flag: True iff the option was explicitly present on the command line.
    - parameters: read-only mapping holding every declared parameter name,
      bound either to the supplied token or to the declared default.
    """

    __introspectable__ = (
        "option_name",
        "flag",
        "parameters",
    )

    def __new__(cls, option_name, flag, parameters):
        self = super().__new__(cls)
        self._option_name = option_name
        self._flag = bool(flag)
        self._parameters = freeze(parameters)
        return self

    def get(self, name, default=None, /):
        """
        Return the value bound to parameter `name`, or `default` when undeclared.
        """
        return self._parameters.get(name, default)

    def __eq__(self, other):
        if not isinstance(other, OptionValues):
            return NotImplemented
        return (
            self.option_name == other.option_name and
            self.flag == other.flag and
            dict(self.parameters) == dict(other.parameters)
        )

    def __hash__(self):
        return hash((self.option_name, self.flag, frozenset(self.parameters.items())))


__all__ = (
    "RequiredArgument",
    "Parameter",
    "Option",
    "OptionBuilder",
    "OptionValues",
)
