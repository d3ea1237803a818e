"""
Conch builtin commands, registered on every shell unless disabled.

- clear: empty the message log.
- set: list variables, show one variable, or bind one ("set name value").
- help: list every command, or show one command's extended help.
- time: run the rest of the line as a command and log how long it took.
- noop: do nothing (useful to test scanning and substitution).
- log: log one argument after variable substitution.
- echo: log the rest of the line verbatim (intercepted, never scanned).
"""
import time

from .commands import command
from .faults import UnboundVariableError

__all__ = (
    "BUILTINS",
    "echo",
)


@command(name="clear", min_args=0, max_args=0, help="Clear the command console")
def clear(context):
    context.log_sink.clear()


@command(
    name="set",
    min_args=0,
    max_args=2,
    help="List all variables or set a variable value",
    extended_help=(
        "set: List all variables or set a variable value\n"
        "Usage: set              list every variable\n"
        "       set NAME         show the value of NAME\n"
        "       set NAME VALUE   bind NAME to VALUE (use $NAME afterwards)"
    ),
)
def assign(context):
    match len(context.arguments):
        case 0:
            context.log_variables()
        case 1:
            name = context.parse_argument(0, "name")
            try:
                context.log(f"{name} = {context.variables[name]}")
            except KeyError:
                context.trigger(UnboundVariableError(f"No variable named {name}", name=name))
        case _:
            name = context.parse_argument(0, "name")
            context.variables[name] = context.parse_argument(1, "value")


@command(name="help", min_args=0, max_args=1, help="Display help for all commands or one command")
def show_help(context):
    if not context.arguments:
        context.shell.log_commands()
    else:
        context.shell.log_help(context.parse_argument(0, "command"))


@command(
    name="time",
    min_args=1,
    max_args=-1,
    help="Time the execution of a command",
    extended_help="time: Time the execution of a command\nUsage: time COMMAND [ARGUMENTS...] [OPTIONS...]",
)
def measure(context):
    # re-read the raw line so intercepted commands see their own remainder
    context.arguments.clear()
    context.options.clear()
    context.set_input(context.remainder)
    if not context.try_parse_command_name():
        return
    name = context.command_name

    started = time.perf_counter()
    context.shell.run_current_command()
    elapsed = time.perf_counter() - started
    context.log(f"The command {name} took {elapsed * 1000:.3f} ms.")


@command(name="noop", min_args=0, max_args=0, help="Do nothing")
def noop(context):
    pass


@command(name="log", min_args=1, max_args=1, help="Log a value (after variable substitution)")
def log(context):
    context.log(context.parse_argument(0, "value"))


@command(intercepted=True, name="echo", help="Log the rest of the line verbatim")
def echo(context, remainder):
    context.log(remainder)


BUILTINS = (clear, assign, show_help, measure, noop, log)
