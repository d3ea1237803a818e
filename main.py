from rich.console import Console
from rich.pretty import pprint

from conch import *

__prog__ = "conch"


@command(name="add", min_args=2, max_args=2, help="Add two integers")
def add(context):
    left = context.parse_argument(0, "left", int)
    right = context.parse_argument(1, "right", int)
    if not context.has_errors:
        context.log(left + right)


@command(name="greet", min_args=0, max_args=1, help="Greet someone, optionally loudly")
def greet(context):
    name = context.parse_argument(0, "name") if context.arguments else "world"
    loud = context.parse_flag("loud", parser="switch")
    context.end_parsing()
    greeting = f"Hello, {name}!"
    context.log(greeting.upper() if loud else greeting)


if __name__ == '__main__':
    console = Console()
    shell = Shell(commands=[add, greet], fancy=True)
    completion = Autocomplete(shell)
    pprint(shell)

    # "?<text>" lists the completions of <text>; everything else is dispatched
    while True:
        try:
            line = console.input("[bold]> [/bold]")
        except (EOFError, KeyboardInterrupt):
            break
        if line.startswith("?"):
            completion.reset_current_input(line[1:])
            console.print(completion.listing())
            continue
        marker = shell.log.log(line, Severity.INPUT)
        shell.dispatch(line)
        start = next((index + 1 for index, message in enumerate(shell.log) if message is marker), 0)
        shell.render(console, start=start)
