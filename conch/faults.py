"""
Conch faults (errors and warnings) and how they reach the message log.

Scope
- FaultCode: canonical, stable numeric identifiers for every diagnostic the
  shell can produce. Codes are grouped by domain to keep logs searchable.
- CommandException / CommandWarning: base types that carry message + options
  and know how to write themselves into a message sink with the right severity.
- trigger(): central entry point to surface any fault.

Propagation rules
- Faults are data first: the scanner, context and shell build them and hand
  them to trigger(), which appends one Message to the log. They are not raised
  across the dispatch boundary.
- A handler may still `raise` a CommandException to abort with a clean,
  pre-worded message; the shell catches it and triggers it unchanged.
- Any other exception escaping a handler is wrapped in HandlerFaultError,
  which keeps the formatted traceback on the logged message.

Integration
- The host can remap numeric codes to friendlier labels with a __codes__
  mapping in __main__ (see FaultCode.normalize()).
"""
import traceback
from enum import IntEnum
from types import MappingProxyType

from .log import Severity
from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the shell (stable identifiers).

    grouping (by high-level domain)
    - scanning (111xx)
      • SCAN_FAILURE, UNBOUND_VARIABLE
    - typed access (112xx)
      • TYPE_MISMATCH, MISSING_ARGUMENT, MISSING_OPTION, FLAG_MISUSE
    - dispatch (113xx)
      • UNKNOWN_COMMAND, ARITY_MISMATCH, HANDLER_FAULT
    - warnings (12xxx)
      • UNKNOWN_OPTION, EXTRA_ARGUMENT
    """
    # --- scanning errors (111xx) ---
    SCAN_FAILURE                = 11101
    UNBOUND_VARIABLE            = 11102

    # --- typed access errors (112xx) ---
    TYPE_MISMATCH               = 11201
    MISSING_ARGUMENT            = 11202
    MISSING_OPTION              = 11203
    FLAG_MISUSE                 = 11204

    # --- dispatch errors (113xx) ---
    UNKNOWN_COMMAND             = 11301
    ARITY_MISMATCH              = 11302
    HANDLER_FAULT               = 11303

    # --- warnings (12xxx) ---
    UNKNOWN_OPTION              = 12101
    EXTRA_ARGUMENT              = 12102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class for error-severity faults.

    options
    - code: FaultCode of the fault (defaults to the class-level code).
    - title: short label used as the rendered header.
    - hint: optional one-line suggestion.
    - anything else is kept as payload (name, index, value, exception, ...).
    """
    severity = Severity.ERROR
    code = None
    title = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __trigger__(self, sink):
        sink.log(
            self.message,
            self.severity,
            code=self.options.get("code", type(self).code),
            title=self.options.get("title", type(self).title),
            hint=self.options.get("hint", ""),
            trace=self.options.get("trace", ""),
        )


class MalformedTokenError(CommandException):
    code = FaultCode.SCAN_FAILURE
    title = "malformed input"


class UnboundVariableError(CommandException):
    code = FaultCode.UNBOUND_VARIABLE
    title = "unbound variable"


class TypeMismatchError(CommandException):
    code = FaultCode.TYPE_MISMATCH
    title = "type mismatch"


class MissingArgumentError(CommandException):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class MissingOptionError(CommandException):
    code = FaultCode.MISSING_OPTION
    title = "missing option"


class FlagMisuseError(CommandException):
    code = FaultCode.FLAG_MISUSE
    title = "option used as flag"


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class ArityMismatchError(CommandException):
    code = FaultCode.ARITY_MISMATCH
    title = "wrong number of arguments"


class HandlerFaultError(CommandException):
    """
    wraps an exception raised inside a command handler.

    the formatted traceback of `exception` is stored as the `trace` option so
    the log keeps it next to the message.
    """
    code = FaultCode.HANDLER_FAULT
    title = "command failed"

    def __init__(self, message=Unset, /, *, exception, **options):
        options.setdefault("trace", "".join(traceback.format_exception(exception)))
        super().__init__(message, exception=exception, **options)


class CommandWarning(Warning):
    """
    base class for warning-severity faults (same shape as CommandException).
    """
    severity = Severity.WARNING
    code = None
    title = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    __trigger__ = CommandException.__trigger__


class UnknownOptionWarning(CommandWarning):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class ExtraArgumentWarning(CommandWarning):
    code = FaultCode.EXTRA_ARGUMENT
    title = "extra argument"


def trigger(fault, sink, /):
    """
    surface a fault into a message sink.

    contract
    - fault must provide a callable __trigger__(sink) (see base classes).
    - sink is anything exposing log(text, severity, **fields); both CommandLog
      and InvocationContext qualify. The context variant also records the
      severity so has_errors reflects the fault.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.__trigger__(sink)


__all__ = (
    "FaultCode",
    "CommandException",
    "MalformedTokenError",
    "UnboundVariableError",
    "TypeMismatchError",
    "MissingArgumentError",
    "MissingOptionError",
    "FlagMisuseError",
    "UnknownCommandError",
    "ArityMismatchError",
    "HandlerFaultError",
    "CommandWarning",
    "UnknownOptionWarning",
    "ExtraArgumentWarning",
    "trigger",
)
