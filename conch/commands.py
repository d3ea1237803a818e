"""
Conch command layer: the registered units a shell dispatches to.

What this module provides
- Command: wraps a handler callable `handler(context)` together with its
  arity (min_args / max_args, -1 meaning unbounded) and help texts.
- InterceptedCommand: a builtin that must see the raw, unscanned remainder of
  the line (e.g. echo). The shell routes it before any argument scanning, so
  its execute() is never called.
- command(...): create a Command or a decorator that produces one.
- describe_arity(min_args, max_args): human wording for an arity range.

Registration tables
- Hosts assemble commands ahead of time, either as Command objects or as
  plain rows (name, min_args, max_args, help, extended_help, handler) that
  Command.from_row() converts. See Shell.register_all().

Quick start
    from conch import Shell, command

    @command(name="add", min_args=2, max_args=2, help="Adds two integers")
    def add(context):
        left = context.parse_argument(0, "left", int)
        right = context.parse_argument(1, "right", int)
        if not context.has_errors:
            context.log(left + right)

    shell = Shell(commands=[add])
    shell.dispatch("add 1 2")      # logs "3"
"""
from .utils import Unset, coalesce, normalize, pluralize, rename


def describe_arity(min_args, max_args, /):
    """
    Return wording such as "exactly 2 arguments", "at least 1 argument",
    "0 to 2 arguments" or "any number of arguments".
    """
    if max_args == -1:
        if not min_args:
            return "any number of arguments"
        return "at least %d %s" % (min_args, pluralize("argument", min_args))
    if min_args == max_args:
        return "exactly %d %s" % (min_args, pluralize("argument", min_args))
    return "%d to %d %s" % (min_args, max_args, pluralize("argument", max_args))


class Command:
    """
    A registered command.

    Parameters
    - handler: Callable[[InvocationContext], Any]
      runs after scanning and arity validation; reads typed values out of the context.
    - name: str (defaults to the handler name); unique per shell, case-insensitive.
    - min_args: int >= 0.
    - max_args: int >= -1; -1 means unbounded, otherwise >= min_args.
    - help: one-line description for the help listing (defaults to the first
      line of the handler docstring).
    - extended_help: text logged for "<name> -help" and the show-usage
      shortcut (defaults to help plus a usage line).
    - tolerant: bool (keyword-only)
      when True, arguments beyond max_args are reported as warnings instead of
      an arity error and the handler still runs.
    """
    __slots__ = ("_handler", "name", "min_args", "max_args", "help", "extended_help", "tolerant")

    def __init__(self, handler, /, name=Unset, min_args=0, max_args=-1, help=Unset, extended_help=Unset, *, tolerant=False):
        if not callable(handler):
            raise TypeError(f"{type(self).__name__} handler must be callable")

        name = coalesce(name, getattr(handler, "__name__", Unset))
        if not isinstance(name, str) or not name.strip() or any(char.isspace() for char in name.strip()):
            raise ValueError(f"{type(self).__name__} name must be a non-empty word")

        for label, value in (("min_args", min_args), ("max_args", max_args)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{type(self).__name__} {label} must be an integer")
        if min_args < 0:
            raise ValueError(f"{type(self).__name__} min_args must be zero or positive")
        if max_args < -1 or (max_args != -1 and max_args < min_args):
            raise ValueError(f"{type(self).__name__} max_args must be -1 or at least min_args")

        doc = (getattr(handler, "__doc__", None) or "").strip().splitlines()
        help = coalesce(help, doc[0].strip() if doc else "")
        if not isinstance(help, str):
            raise TypeError(f"{type(self).__name__} help must be a string")

        self._handler = handler
        self.name = name.strip()
        self.min_args = min_args
        self.max_args = max_args
        self.help = help
        self.tolerant = bool(tolerant)
        self.extended_help = coalesce(extended_help, self._default_extended_help())

    def _default_extended_help(self):
        usage = f"Usage: {self.name} ({describe_arity(self.min_args, self.max_args)})"
        return f"{self.name}: {self.help}\n{usage}" if self.help else usage

    @property
    def key(self):
        return normalize(self.name)

    @property
    def handler(self):
        return self._handler

    @classmethod
    def from_row(cls, row, /):
        """
        Build a Command from a (name, min_args, max_args, help, extended_help, handler) row.

        help and extended_help may be None to use the defaults.
        """
        try:
            name, min_args, max_args, help, extended_help, handler = row
        except (TypeError, ValueError):
            raise TypeError(
                "command rows must be (name, min_args, max_args, help, extended_help, handler)"
            ) from None
        return cls(
            handler,
            name,
            min_args,
            max_args,
            Unset if help is None else help,
            Unset if extended_help is None else extended_help,
        )

    def execute(self, context, /):
        return self._handler(context)

    def __repr__(self):
        return (
            f"{type(self).__name__}(name={self.name!r}, min_args={self.min_args}, "
            f"max_args={self.max_args}, help={self.help!r})"
        )


class InterceptedCommand(Command):
    """
    A builtin that receives the unscanned remainder of the line verbatim.

    The handler signature is handler(context, remainder). Scanning would strip
    quotes and reinterpret option markers, so the shell hands these over
    before it scans anything; execute() is therefore unreachable.
    """
    __slots__ = ()

    def intercept(self, context, remainder, /):
        return self._handler(context, remainder)

    def execute(self, context, /):
        raise NotImplementedError(f"command {self.name!r} is intercepted and cannot be executed directly")


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:    add = command(handler, name="add", min_args=2, max_args=2)
    - Decorator: @command(name="add", min_args=2, max_args=2)

    Keyword `intercepted=True` builds an InterceptedCommand instead.
    """
    cls = InterceptedCommand if kwargs.pop("intercepted", False) else Command

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return cls(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "InterceptedCommand",
    "command",
    "describe_arity",
)
