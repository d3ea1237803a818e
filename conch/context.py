"""
Conch invocation context: scanned input, session variables and diagnostics.

What this module provides
- InvocationContext: the object every command handler receives. It owns
  • the scanner for the line being dispatched,
  • the scanned positional arguments (scan order) and options (case-insensitive),
  • the variable table (session state, survives reset()),
  • the set of severities logged since the last reset (drives has_errors),
  and exposes typed accessors (parse_argument / parse_option / parse_flag)
  built on the scanner and the parser registry.

Lifecycle
- One context per shell, reused across dispatches: reset() clears arguments,
  options and the severity set; variables persist.

Dispatch order (driven by the shell)
    set_input(line) → try_parse_command_name() → scan_arguments() → scan_options()
    → handler reads typed values → end_parsing() (optional)

Variable substitution
- A token "$name" is replaced by the value bound to name. An unbound name logs
  "No variable named <name>" and stops the current scanning phase, leaving
  what was already collected in place. A lone "$" is literal text.

Typed access conventions
- Every accessor returns a value even on failure (the parser's type default or
  the caller's default) and logs the problem; handlers check has_errors when
  they need to bail out.
- parse_option/parse_flag consume the option they read; end_parsing() warns
  about every option nobody consumed.
"""
from collections.abc import Set

from rich.table import Table
from rich.text import Text

from .faults import *
from .log import Severity, capture
from .parsers import boolean, resolve
from .scanner import Scanner
from .utils import CaseInsensitiveDict, Unset, coalesce, normalize, ordinal

VARIABLE = "$"

#: severities that make has_errors true by default
ERROR_SEVERITIES = frozenset({Severity.WARNING, Severity.ERROR})


class InvocationContext:
    """
    Per-shell invocation state shared by the dispatcher and command handlers.

    Parameters
    - log: CommandLog (or any sink with log(text, severity, **fields)).
    - warnings_as_errors: bool (keyword-only, default True)
      when False, warnings are logged but do not make has_errors true.

    Attributes
    - scanner: Scanner | None of the current line.
    - command_name: str | None, after substitution.
    - remainder: str, the raw text after the command name (intercepted
      commands and `time` re-read it).
    - arguments: list[str] in scan order.
    - options: CaseInsensitiveDict[str | None]; None marks a flag-style option.
    - variables: CaseInsensitiveDict[str].
    - shell: the owning Shell, when attached (builtins use it).
    """

    def __init__(self, log, /, *, warnings_as_errors=True):
        self.log_sink = log
        self.shell = None
        self.scanner = None
        self.command_name = None
        self.remainder = ""
        self.arguments = []
        self.options = CaseInsensitiveDict()
        self.variables = CaseInsensitiveDict()
        self._severities = set()
        self._error_severities = ERROR_SEVERITIES
        self.warnings_as_errors = warnings_as_errors

    # --- diagnostics -------------------------------------------------------

    @property
    def error_severities(self):
        return self._error_severities

    @error_severities.setter
    def error_severities(self, severities):
        if not isinstance(severities, Set) or not all(isinstance(x, Severity) for x in severities):
            raise TypeError("error_severities must be a set of Severity members")
        self._error_severities = frozenset(severities)

    @property
    def warnings_as_errors(self):
        return Severity.WARNING in self._error_severities

    @warnings_as_errors.setter
    def warnings_as_errors(self, enabled):
        if enabled:
            self._error_severities = self._error_severities | {Severity.WARNING}
        else:
            self._error_severities = self._error_severities - {Severity.WARNING}

    @property
    def severities(self):
        """
        Severities logged through this context since the last reset().
        """
        return frozenset(self._severities)

    @property
    def has_errors(self):
        return not self._severities.isdisjoint(self._error_severities)

    def log(self, text, /, severity=Severity.MESSAGE, **fields):
        self._severities.add(severity)
        return self.log_sink.log(text, severity, **fields)

    def log_error(self, text, /):
        return self.log(text, Severity.ERROR)

    def log_warning(self, text, /):
        return self.log(text, Severity.WARNING)

    def trigger(self, fault, /):
        trigger(fault, self)

    def log_variables(self):
        table = Table("Name", "Value", box=None, pad_edge=False)
        for name, value in self.variables.items():
            table.add_row(Text(name), Text(value))
        self.log(capture(table))

    # --- scanning ----------------------------------------------------------

    def reset(self):
        self._severities = set()
        self.command_name = None
        self.remainder = ""
        self.arguments.clear()
        self.options.clear()

    def set_input(self, line, /):
        self.scanner = Scanner(line)
        self.scanner.skip_whitespace()

    def substitute(self, token, /):
        """
        Return token with a "$name" reference resolved, or None when the
        variable is not bound (the failure is logged).
        """
        if len(token) < 2 or not token.startswith(VARIABLE):
            return token
        name = token[len(VARIABLE):]
        try:
            return self.variables[name]
        except KeyError:
            self.trigger(UnboundVariableError(
                f"No variable named {name}",
                name=name,
                hint="bind it first with: set %s <value>" % name,
            ))
            return None

    def try_parse_command_name(self):
        """
        Read the command name; False on an empty line (silently) or on a
        malformed or unbound name (logged).
        """
        name = self.scanner.get_command_name()
        if name is None:
            if not self.scanner.is_empty:
                self.trigger(MalformedTokenError(
                    f"Unexpected input '{self.scanner.remaining}'.",
                    index=self.scanner.cursor,
                    hint="quotes must be closed",
                ))
            return False
        self.scanner.skip_whitespace()
        self.remainder = self.scanner.remaining
        name = self.substitute(name)
        if name is None:
            return False
        self.command_name = name
        return True

    def scan_arguments(self):
        """
        Scan positional arguments until the next token is not a string.

        returns False when a substitution failed; the cursor is left before the
        offending token and the arguments collected so far are kept.
        """
        scanner = self.scanner
        scanner.skip_whitespace()
        while True:
            with scanner.checkpoint() as attempt:
                argument = scanner.get_string()
                if argument is None:
                    return True
                argument = self.substitute(argument)
                if argument is None:
                    return False
                attempt.commit()
            self.arguments.append(argument)
            scanner.skip_whitespace()

    def scan_options(self):
        """
        Scan options until none parses; a repeated name overwrites the earlier value.

        returns False when a substitution failed (the cursor is left before the
        offending option) or when unscannable input remains.
        """
        scanner = self.scanner
        scanner.skip_whitespace()
        while True:
            with scanner.checkpoint() as attempt:
                option = scanner.try_get_option()
                if option is None:
                    break
                value = option.value
                if value is not None:
                    value = self.substitute(value)
                    if value is None:
                        return False
                attempt.commit()
            self.options[option.name] = value
            scanner.skip_whitespace()

        if not scanner.is_empty:
            self.trigger(MalformedTokenError(
                f"Unexpected input '{scanner.remaining}'.",
                index=scanner.cursor,
                hint="arguments come first, then options (-name or -name=value); quotes must be closed",
            ))
            return False
        return True

    # --- typed access ------------------------------------------------------

    def parse_argument(self, index, name, parser=Unset):
        """
        Read the positional argument at index (0-based).

        parameters
        - index: int position in arguments.
        - name: label used in diagnostics.
        - parser: Parser | type | parser name (optional). Without it the raw
          string is returned.

        returns
        - the parsed value; the parser's type default (None without a parser)
          when the argument is missing; whatever the parser returned on a
          mismatch (its type default).

        raises
        - ValueError: index is negative.
        """
        if index < 0:
            raise ValueError(f"argument index must be non-negative, got {index}")
        parser = resolve(parser) if parser is not Unset else None
        if not 0 <= index < len(self.arguments):
            self.trigger(MissingArgumentError(
                f"Missing {ordinal(index + 1)} argument '{name}'",
                name=name,
                index=index,
            ))
            return parser.default if parser else None

        raw = self.arguments[index]
        if not parser:
            return raw

        value, summary = parser(raw)
        if summary.is_error:
            self.trigger(TypeMismatchError(
                f"Error while parsing {ordinal(index + 1)} argument '{name}': {summary.message}",
                name=name,
                index=index,
                value=raw,
            ))
        return value

    def parse_option(self, name, parser=Unset, *, default=Unset):
        """
        Read (and consume) the value of option `name`.

        - absent: error "Missing required option" unless a default is given,
          in which case the default is returned silently.
        - flag-style (no value): always an error, a value was requested.
        - parse failure: error; the default is returned when given.
        """
        parser = resolve(parser) if parser is not Unset else None
        fallback = coalesce(default, parser.default if parser else None)

        try:
            value = self.options.pop(name)
        except KeyError:
            if default is Unset:
                self.trigger(MissingOptionError(
                    f"Missing required option '{name}'.",
                    name=name,
                    hint="add it as -%s=<value>" % name,
                ))
            return fallback

        if value is None:
            self.trigger(FlagMisuseError(
                f"The option '{name}' cannot be used like a flag.",
                name=name,
                hint="give it a value: -%s=<value>" % name,
            ))
            return fallback

        if not parser:
            return value

        result, summary = parser(value)
        if summary.is_error:
            self.trigger(TypeMismatchError(
                f"Error while parsing option '{name}': {summary.message}",
                name=name,
                value=value,
            ))
            return coalesce(default, result)
        return result

    def parse_flag(self, name, default=False, flag_value=True, parser=Unset):
        """
        Read (and consume) a boolean flag.

        - absent → default
        - "-name" → flag_value
        - "-name=value" → value parsed as bool (or with `parser`, e.g. "switch");
          on failure the error is logged and default is returned.
        """
        parser = resolve(coalesce(parser, boolean), bool)

        try:
            value = self.options.pop(name)
        except KeyError:
            return default

        if value is None:
            return flag_value

        result, summary = parser(value)
        if summary.is_error:
            self.trigger(TypeMismatchError(
                f"Error while parsing flag '{name}': {summary.message}",
                name=name,
                value=value,
            ))
            return default
        return result

    def end_parsing(self):
        """
        Warn about every option that no typed accessor consumed.

        handlers that accept an open set of options simply do not call this.
        """
        for key in list(self.options):
            self.trigger(UnknownOptionWarning(f"Unknown argument: {key}.", name=key))

    # --- completion --------------------------------------------------------

    def matching_words(self, partial, /):
        """
        Yield "$name" for every variable whose name starts with the partial word.

        an empty partial word matches every variable; a partial word that does
        not start with "$" matches none.
        """
        if partial and not partial.startswith(VARIABLE):
            return
        prefix = normalize(partial[len(VARIABLE):])
        for name in self.variables:
            if name.startswith(prefix):
                yield VARIABLE + name

    def __repr__(self):
        return (
            f"{type(self).__name__}(command_name={self.command_name!r}, "
            f"arguments={self.arguments!r}, options={dict(self.options)!r})"
        )


__all__ = (
    "InvocationContext",
    "ERROR_SEVERITIES",
    "VARIABLE",
)
