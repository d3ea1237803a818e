"""
Conch shell: the command registry and the dispatcher that runs one line at a time.

What this module provides
- Shell: owns the message log, the invocation context and the command table.
  dispatch(line) scans, validates and runs a command; every outcome (output,
  errors, warnings, usage text) ends up as entries in the log.

Dispatch steps
1. reset the context and load the line into a fresh scanner.
2. read the command name (an empty line is a no-op).
3. intercepted builtins (echo) receive the unscanned remainder and stop here.
4. unknown name → error "Command '<name>' could not be found."
5. scan arguments, then options; any error so far aborts.
6. a "-help" flag logs the command's extended help instead of running it.
7. arity: no arguments and no options for a command that needs some shows its
   usage; otherwise a count outside [min_args, max_args] is an error.
8. arguments beyond max_args (tolerant commands only) are warned about.
9. the handler runs; CommandException is logged as-is, anything else is
   wrapped in HandlerFaultError with its traceback.

Configuration
- capacity: log size (default 512 entries).
- warnings_as_errors: whether warnings make has_errors true (default True);
  context.error_severities can replace the set entirely.
- builtins: register clear/set/help/time/noop/log (default True). echo is
  always present because it changes how the rest of the line is read.
"""
import difflib

from rich.table import Table
from rich.text import Text

from .builtins import BUILTINS, echo
from .commands import Command, InterceptedCommand
from .context import VARIABLE, InvocationContext
from .faults import *
from .log import CommandLog, Severity, capture
from .log import console as default_console
from .utils import CaseInsensitiveDict, Unset, coalesce, normalize, pluralize

HELP = "help"
DEFAULT_CAPACITY = 512


class Shell:
    """
    A command shell bound to one log and one invocation context.

    Parameters
    - capacity: int > 0, number of log entries retained.
    - commands: iterable of Command objects or (name, min_args, max_args, help,
      extended_help, handler) rows (keyword-only).
    - warnings_as_errors: bool (keyword-only, default True).
    - colorful, fancy: bool (keyword-only) rendering flags used by render().
    - builtins: bool (keyword-only, default True).
    """

    def __init__(
        self,
        capacity=DEFAULT_CAPACITY,
        /,
        *,
        commands=(),
        warnings_as_errors=True,
        colorful=True,
        fancy=False,
        builtins=True,
    ):
        self.log = CommandLog(capacity)
        self.context = InvocationContext(self.log, warnings_as_errors=warnings_as_errors)
        self.context.shell = self
        self.commands = CaseInsensitiveDict()
        self._listing = None
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)

        self.register(echo)
        if builtins:
            self.register_all(BUILTINS)
        self.register_all(commands)

    # --- registry ----------------------------------------------------------

    def register(self, command, /):
        """
        Add a Command; a name already taken (in any casing) is a ValueError.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a Command")
        if command.name in self.commands:
            raise ValueError(f"command {command.name!r} is already registered")
        self.commands[command.name] = command
        self._listing = None
        return command

    def register_all(self, commands, /):
        for command in commands:
            self.register(command if isinstance(command, Command) else Command.from_row(command))

    def find(self, name, /):
        """
        The command registered under name, or None.
        """
        return self.commands.get(name)

    # --- dispatch ----------------------------------------------------------

    def dispatch(self, line, /):
        """
        Run one line of input; returns True when nothing counting as an error was logged.
        """
        context = self.context
        context.reset()
        context.set_input(line)
        if not context.try_parse_command_name():
            return not context.has_errors
        self.run_current_command()
        return not context.has_errors

    def run_current_command(self):
        """
        Run the command named by context.command_name against the scanner's
        current position (steps 3-9 of dispatch). `time` re-enters here.
        """
        context = self.context
        name = context.command_name
        command = self.find(name)

        if isinstance(command, InterceptedCommand):
            self._invoke(command, command.intercept, context, context.remainder)
            return

        if command is None:
            suggestions = difflib.get_close_matches(normalize(name), list(self.commands), 1)
            hint = (
                "did you mean %r? type 'help' to list every command" % suggestions[0]
                if suggestions else "type 'help' to list every command"
            )
            context.trigger(UnknownCommandError(f"Command '{name}' could not be found.", name=name, hint=hint))
            return

        context.scan_arguments()
        if context.has_errors:
            return
        context.scan_options()
        if context.has_errors:
            return

        if context.parse_flag(HELP):
            context.log(command.extended_help)
            return
        if context.has_errors:
            return

        arguments = context.arguments
        count = len(arguments)
        if command.min_args > 0 and not arguments and not context.options:
            context.log(command.extended_help)
            return

        unbounded = command.max_args == -1
        if count < command.min_args or (not unbounded and count > command.max_args and not command.tolerant):
            if command.min_args == command.max_args:
                bound, limit = "exactly", command.min_args
            elif count < command.min_args:
                bound, limit = "at least", command.min_args
            else:
                bound, limit = "at most", command.max_args
            context.trigger(ArityMismatchError(
                f"Command '{command.name}' expects {bound} {limit} {pluralize('argument', limit)}, got {count}.",
                name=command.name,
                hint="run '%s -%s' for usage" % (command.name, HELP),
            ))
            return

        if not unbounded:
            for index in range(command.max_args, count):
                context.trigger(ExtraArgumentWarning(
                    f"Extra argument '{arguments[index]}' at position {index}.",
                    index=index,
                    value=arguments[index],
                ))

        self._invoke(command, command.execute, context)

    def _invoke(self, command, call, context, /, *args):
        """
        Run a handler; whatever it raises is logged through context.
        """
        try:
            call(context, *args)
        except (CommandException, CommandWarning) as fault:
            context.trigger(fault)
        except Exception as exception:
            context.trigger(HandlerFaultError(
                str(exception) or type(exception).__name__,
                exception=exception,
                name=command.name,
            ))

    # --- help --------------------------------------------------------------

    def listing(self):
        """
        The help listing (name and one-line help of every command) as text.

        built lazily and cached until the next registration.
        """
        if self._listing is None:
            table = Table("Command", "Help", box=None, pad_edge=False)
            for command in self.commands.values():
                table.add_row(Text(command.name), Text(command.help))
            self._listing = capture(table)
        return self._listing

    def log_commands(self):
        self.log.log(self.listing(), Severity.SHELL)

    def log_help(self, name, /):
        """
        Log the extended help of one command; an unknown name is an error.
        """
        command = self.find(name)
        if command is None:
            self.context.trigger(UnknownCommandError(f"Command '{name}' could not be found.", name=name))
            return
        self.context.log(command.extended_help)

    # --- rendering ---------------------------------------------------------

    def render(self, console=Unset, /, *, start=0):
        """
        Print the log from logical index `start` with the shell's rendering flags.
        """
        self.log.render(coalesce(console, default_console), start=start, colorful=self.colorful, fancy=self.fancy)

    # --- completion --------------------------------------------------------

    def matching_words(self, partial, /):
        """
        Completion candidates for a partial word.

        - "$..." completes variable references only.
        - "" yields every variable reference, then every command name.
        - anything else completes command names by case-insensitive prefix.
        """
        yield from self.context.matching_words(partial)
        if partial.startswith(VARIABLE):
            return
        prefix = normalize(partial)
        for name in self.commands:
            if name.startswith(prefix):
                yield name

    def __repr__(self):
        return f"{type(self).__name__}(commands={list(self.commands)!r}, log={len(self.log)}/{self.log.capacity})"


__all__ = (
    "Shell",
    "DEFAULT_CAPACITY",
)
