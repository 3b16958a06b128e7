import sys

from rich.console import Console
from rich.pretty import pprint

from commandeer import *


def report(context):
    pprint(context, console=Console(file=context.out))


example = (
    Command.for_main("example-command", "an example command")
    .add_required_argument("file-name", "in file name")
    .add_flag("myflag", "an example flag")
    .add_option(
        Option.create("optarg", "an example of optional argument")
        .add_alias("opt")
        .add_parameter("value", "value of optarg", "optarg-default")
        .build()
    )
    .add_option(
        Option.create("myoption", "an example option")
        .add_parameter("p1", "parameter 1 of myoption", "35")
        .add_parameter("p2", "parameter 2 of myoption", "myoption-p2-default")
        .build()
    )
    .add_sub_command(
        Command.for_cli("my-sub-command", "an example sub-command")
        .add_required_argument("text-file", "a required argument of my-sub-command")
        .build(report)
    )
    .build(report)
)


if __name__ == '__main__':
    sys.exit(example.execute().code)
